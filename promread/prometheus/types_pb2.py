"""Protocol buffer code for the Prometheus ``types.proto`` messages.

The file descriptor is assembled from a FileDescriptorProto at import time and
registered in the default pool, then message classes are built the same way
protoc-generated modules build them.
"""

from google.protobuf import descriptor_pb2 as _descriptor_pb2
from google.protobuf import descriptor_pool as _descriptor_pool
from google.protobuf import symbol_database as _symbol_database
from google.protobuf.internal import builder as _builder

_sym_db = _symbol_database.Default()

_FIELD = _descriptor_pb2.FieldDescriptorProto


def _add_field(message, name, number, field_type, type_name=None, repeated=False):
    field = message.field.add(
        name=name,
        number=number,
        type=field_type,
        label=_FIELD.LABEL_REPEATED if repeated else _FIELD.LABEL_OPTIONAL,
    )
    if type_name:
        field.type_name = type_name
    return field


def _file_descriptor_proto() -> _descriptor_pb2.FileDescriptorProto:
    file_proto = _descriptor_pb2.FileDescriptorProto(
        name="prompb/types.proto",
        package="prometheus",
        syntax="proto3",
    )

    sample = file_proto.message_type.add(name="Sample")
    _add_field(sample, "value", 1, _FIELD.TYPE_DOUBLE)
    _add_field(sample, "timestamp", 2, _FIELD.TYPE_INT64)

    exemplar = file_proto.message_type.add(name="Exemplar")
    _add_field(exemplar, "labels", 1, _FIELD.TYPE_MESSAGE, ".prometheus.Label", repeated=True)
    _add_field(exemplar, "value", 2, _FIELD.TYPE_DOUBLE)
    _add_field(exemplar, "timestamp", 3, _FIELD.TYPE_INT64)

    time_series = file_proto.message_type.add(name="TimeSeries")
    _add_field(time_series, "labels", 1, _FIELD.TYPE_MESSAGE, ".prometheus.Label", repeated=True)
    _add_field(time_series, "samples", 2, _FIELD.TYPE_MESSAGE, ".prometheus.Sample", repeated=True)
    _add_field(
        time_series, "exemplars", 3, _FIELD.TYPE_MESSAGE, ".prometheus.Exemplar", repeated=True
    )

    label = file_proto.message_type.add(name="Label")
    _add_field(label, "name", 1, _FIELD.TYPE_STRING)
    _add_field(label, "value", 2, _FIELD.TYPE_STRING)

    labels = file_proto.message_type.add(name="Labels")
    _add_field(labels, "labels", 1, _FIELD.TYPE_MESSAGE, ".prometheus.Label", repeated=True)

    matcher = file_proto.message_type.add(name="LabelMatcher")
    matcher_type = matcher.enum_type.add(name="Type")
    for number, name in enumerate(("EQ", "NEQ", "RE", "NRE")):
        matcher_type.value.add(name=name, number=number)
    _add_field(matcher, "type", 1, _FIELD.TYPE_ENUM, ".prometheus.LabelMatcher.Type")
    _add_field(matcher, "name", 2, _FIELD.TYPE_STRING)
    _add_field(matcher, "value", 3, _FIELD.TYPE_STRING)

    hints = file_proto.message_type.add(name="ReadHints")
    _add_field(hints, "step_ms", 1, _FIELD.TYPE_INT64)
    _add_field(hints, "func", 2, _FIELD.TYPE_STRING)
    _add_field(hints, "start_ms", 3, _FIELD.TYPE_INT64)
    _add_field(hints, "end_ms", 4, _FIELD.TYPE_INT64)
    _add_field(hints, "grouping", 5, _FIELD.TYPE_STRING, repeated=True)
    _add_field(hints, "by", 6, _FIELD.TYPE_BOOL)
    _add_field(hints, "range_ms", 7, _FIELD.TYPE_INT64)

    return file_proto


DESCRIPTOR = _descriptor_pool.Default().AddSerializedFile(
    _file_descriptor_proto().SerializeToString()
)

_globals = globals()
_builder.BuildMessageAndEnumDescriptors(DESCRIPTOR, _globals)
_builder.BuildTopDescriptorsAndMessages(DESCRIPTOR, "promread.prometheus.types_pb2", _globals)

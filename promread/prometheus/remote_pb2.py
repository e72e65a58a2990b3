"""Protocol buffer code for the Prometheus ``remote.proto`` read messages."""

from google.protobuf import descriptor_pb2 as _descriptor_pb2
from google.protobuf import descriptor_pool as _descriptor_pool
from google.protobuf import symbol_database as _symbol_database
from google.protobuf.internal import builder as _builder

from promread.prometheus import types_pb2 as _types_pb2

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
        name="prompb/remote.proto",
        package="prometheus",
        syntax="proto3",
        dependency=[_types_pb2.DESCRIPTOR.name],
    )

    read_request = file_proto.message_type.add(name="ReadRequest")
    response_type = read_request.enum_type.add(name="ResponseType")
    response_type.value.add(name="SAMPLES", number=0)
    response_type.value.add(name="STREAMED_XOR_CHUNKS", number=1)
    _add_field(read_request, "queries", 1, _FIELD.TYPE_MESSAGE, ".prometheus.Query", repeated=True)
    _add_field(
        read_request,
        "accepted_response_types",
        2,
        _FIELD.TYPE_ENUM,
        ".prometheus.ReadRequest.ResponseType",
        repeated=True,
    )

    read_response = file_proto.message_type.add(name="ReadResponse")
    _add_field(
        read_response, "results", 1, _FIELD.TYPE_MESSAGE, ".prometheus.QueryResult", repeated=True
    )

    query = file_proto.message_type.add(name="Query")
    _add_field(query, "start_timestamp_ms", 1, _FIELD.TYPE_INT64)
    _add_field(query, "end_timestamp_ms", 2, _FIELD.TYPE_INT64)
    _add_field(
        query, "matchers", 3, _FIELD.TYPE_MESSAGE, ".prometheus.LabelMatcher", repeated=True
    )
    _add_field(query, "hints", 4, _FIELD.TYPE_MESSAGE, ".prometheus.ReadHints")

    query_result = file_proto.message_type.add(name="QueryResult")
    _add_field(
        query_result, "timeseries", 1, _FIELD.TYPE_MESSAGE, ".prometheus.TimeSeries", repeated=True
    )

    return file_proto


DESCRIPTOR = _descriptor_pool.Default().AddSerializedFile(
    _file_descriptor_proto().SerializeToString()
)

_globals = globals()
_builder.BuildMessageAndEnumDescriptors(DESCRIPTOR, _globals)
_builder.BuildTopDescriptorsAndMessages(DESCRIPTOR, "promread.prometheus.remote_pb2", _globals)

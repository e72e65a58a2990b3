"""Prometheus remote read protocol support for promread.

This module provides support for the Prometheus remote read protocol,
including Protobuf messages, Snappy (de)compression and HTTP header handling.
"""

from promread.prometheus.protocol import METRIC_NAME_LABEL, PrometheusRemoteRead
from promread.prometheus.parser import PrometheusParser

__all__ = [
    "METRIC_NAME_LABEL",
    "PrometheusRemoteRead",
    "PrometheusParser",
]

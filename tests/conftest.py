"""Shared pytest fixtures for promread tests."""

import pytest

from promread.config import reset_settings
from promread.prometheus import METRIC_NAME_LABEL, PrometheusRemoteRead
from promread.prometheus.types_pb2 import LabelMatcher
from promread.translator import StaticTagCatalog, TranslatorConfig


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep every test away from the user's config file and PROMREAD_* env."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def translator_config():
    """Translator config with a small registry that includes the short ``df`` key."""
    return TranslatorConfig(
        row_limit=500,
        series_limit=10,
        databases={
            "df": ["l7_flow_log"],
            "flow_log": ["l4_flow_log", "l7_flow_log"],
            "flow_metrics": ["vtap_app_port", "vtap_app_edge_port"],
            "deepflow_system": ["deepflow_system"],
        },
        edge_tables={"l7_flow_log", "vtap_app_edge_port"},
    )


@pytest.fixture
def tag_catalog():
    """Static catalog describing an edge table and a plain table."""
    return StaticTagCatalog(
        {
            "df": {
                "l7_flow_log": [
                    {"name": "ip", "client_name": "ip_0", "server_name": "ip_1"},
                    "lb_listener",
                    "request_domain",
                ],
            },
            "flow_log": {
                "l7_flow_log": [
                    {"name": "ip", "client_name": "ip_0", "server_name": "ip_1"},
                    "pod_ingress",
                    "request_domain",
                ],
            },
            "flow_metrics": {
                "vtap_app_port": [
                    {"name": "ip", "client_name": "ip_0", "server_name": "ip_1"},
                    "pod",
                ],
            },
        }
    )


@pytest.fixture
def make_request():
    """Build a single-query ReadRequest for a metric plus extra matchers."""

    def _make(metric=None, matchers=(), start_ms=1000, end_ms=2500):
        triples = list(matchers)
        if metric is not None:
            triples.insert(0, (METRIC_NAME_LABEL, LabelMatcher.EQ, metric))
        return PrometheusRemoteRead.build_read_request(start_ms, end_ms, triples)

    return _make

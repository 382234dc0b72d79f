"""
Unit tests for structured logging.
"""

import json
import logging

import pytest

from ippool_admission.errors import EmptyRangeError
from ippool_admission.observability.logging import (
    AdmissionLogger,
    CorrelationIDFilter,
    HealthProbeFilter,
    StructuredFormatter,
    get_correlation_id,
    set_correlation_id,
    setup_structured_logging,
)


def _record(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="ippool_admission.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    def test_basic_fields(self):
        data = json.loads(StructuredFormatter().format(_record("hello", correlation_id="abc")))
        assert data["message"] == "hello"
        assert data["level"] == "INFO"
        assert data["logger"] == "ippool_admission.test"
        assert data["correlation_id"] == "abc"
        assert "timestamp" in data

    def test_admission_fields(self):
        record = _record(
            "rejected",
            resource_name="A",
            operation="CREATE",
            verdict="rejected",
            duration=0.01,
        )
        data = json.loads(StructuredFormatter().format(record))
        assert data["resource_name"] == "A"
        assert data["operation"] == "CREATE"
        assert data["verdict"] == "rejected"
        assert "error_type" not in data


class TestFilters:
    def test_health_probe_filter(self):
        f = HealthProbeFilter()
        assert not f.filter(_record('"GET /healthz HTTP/1.1" 200'))
        assert not f.filter(_record('"GET /metrics HTTP/1.1" 200'))
        assert f.filter(_record("Validating IPPool A"))
        assert HealthProbeFilter(suppress_health_logs=False).filter(_record("/healthz"))

    def test_correlation_id_filter(self):
        set_correlation_id("corr-1")
        record = _record("x")
        assert CorrelationIDFilter().filter(record)
        assert record.correlation_id == "corr-1"


class TestAdmissionLogger:
    def test_start_sets_correlation_id(self, caplog):
        admission_logger = AdmissionLogger("ippool_admission.test")

        with caplog.at_level(logging.INFO, logger="ippool_admission.test"):
            corr_id = admission_logger.log_admission_start("CREATE", "A", dryrun=True)

        assert get_correlation_id() == corr_id
        assert "Validating IPPool A (operation: CREATE, dryrun: True)" in caplog.text
        assert caplog.records[-1].resource_name == "A"

    def test_explicit_correlation_id(self):
        admission_logger = AdmissionLogger("ippool_admission.test")
        assert admission_logger.log_admission_start("DELETE", "A", correlation_id="fixed") == "fixed"
        assert get_correlation_id() == "fixed"

    def test_rejected_is_warning(self, caplog):
        admission_logger = AdmissionLogger("ippool_admission.test")
        error = EmptyRangeError().with_context("CREATE", "A")

        with caplog.at_level(logging.INFO, logger="ippool_admission.test"):
            admission_logger.log_admission_rejected("CREATE", "A", error, 0.5)

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.verdict == "rejected"
        assert record.error_type == "EmptyRangeError"
        assert record.error_category == "ranges"
        assert "could not create IP pool A because range can't be empty" in record.getMessage()


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    webhooks_logger = logging.getLogger("ippool_admission.webhooks")
    webhooks_level = webhooks_logger.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    webhooks_logger.setLevel(webhooks_level)


def test_setup_structured_logging(restore_root_logger):
    setup_structured_logging(log_level="DEBUG", webhook_log_level="WARNING")

    root = restore_root_logger
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    handler = root.handlers[0]
    assert isinstance(handler.formatter, StructuredFormatter)
    assert any(isinstance(f, HealthProbeFilter) for f in handler.filters)
    assert logging.getLogger("ippool_admission.webhooks").level == logging.WARNING

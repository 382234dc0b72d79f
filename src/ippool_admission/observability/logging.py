"""
Structured logging utilities for the IP pool admission webhook.

This module provides correlation ID tracking, structured log formatting,
and admission audit logging for production troubleshooting.
"""

import json
import logging
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime

# Context variable for tracking correlation IDs across async operations
correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

# Paths that should be filtered from access logs (health probes)
HEALTH_PROBE_PATHS = frozenset({"/healthz", "/health", "/ready", "/metrics"})

# Record attributes copied into the JSON document when present
STRUCTURED_FIELDS = (
    "resource_type",
    "resource_name",
    "operation",
    "dryrun",
    "verdict",
    "duration",
    "error_type",
    "error_category",
)


class HealthProbeFilter(logging.Filter):
    """
    Logging filter that suppresses health probe and metrics endpoint logs.

    These endpoints are hit frequently by Kubernetes probes and monitoring
    systems, generating excessive noise in logs during debugging.
    """

    def __init__(self, suppress_health_logs: bool = True):
        super().__init__()
        self.suppress_health_logs = suppress_health_logs

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.suppress_health_logs:
            return True

        message = record.getMessage()
        return all(path not in message for path in HEALTH_PROBE_PATHS)


class CorrelationIDFilter(logging.Filter):
    """Logging filter that adds correlation ID to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        current_correlation_id = correlation_id.get()
        if not current_correlation_id:
            current_correlation_id = generate_correlation_id()
            correlation_id.set(current_correlation_id)

        record.correlation_id = current_correlation_id
        return True


class StructuredFormatter(logging.Formatter):
    """
    Structured JSON formatter for logs with correlation ID support.

    Formats log records as one JSON document per line for log aggregation.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": getattr(record, "correlation_id", ""),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # extra= values land on the record as attributes
        for field in STRUCTURED_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        return json.dumps(log_data, default=str)


def generate_correlation_id() -> str:
    """
    Generate a new correlation ID.

    Returns:
        Unique correlation ID string
    """
    return str(uuid.uuid4())[:8]


def set_correlation_id(corr_id: str) -> str:
    correlation_id.set(corr_id)
    return corr_id


def get_correlation_id() -> str:
    return correlation_id.get("")


def setup_structured_logging(
    log_level: str = "INFO",
    enable_json_formatting: bool = True,
    correlation_id_enabled: bool = True,
    log_health_probes: bool = False,
    webhook_log_level: str = "INFO",
) -> None:
    """
    Set up structured logging for the webhook process.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        enable_json_formatting: Whether to use JSON formatting
        correlation_id_enabled: Whether to enable correlation ID tracking
        log_health_probes: Whether to log health probe requests (default: False)
        webhook_log_level: Log level for the admission handler loggers
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()

    if enable_json_formatting:
        formatter: logging.Formatter = StructuredFormatter()
    elif correlation_id_enabled:
        formatter = logging.Formatter(
            "%(asctime)s - %(correlation_id)s - %(name)s - %(levelname)s - %(message)s"
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handler.setFormatter(formatter)

    if correlation_id_enabled:
        handler.addFilter(CorrelationIDFilter())

    if not log_health_probes:
        handler.addFilter(HealthProbeFilter(suppress_health_logs=True))

    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Set specific logger levels for third-party libraries
    logging.getLogger("kopf").setLevel(logging.WARNING)
    logging.getLogger("kubernetes").setLevel(logging.WARNING)
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
    logging.getLogger("aiohttp.server").setLevel(logging.WARNING)
    logging.getLogger("aiohttp.web").setLevel(logging.WARNING)

    webhook_level = getattr(logging, webhook_log_level.upper(), logging.INFO)
    logging.getLogger("ippool_admission.webhooks").setLevel(webhook_level)


class AdmissionLogger:
    """
    Logger for admission decisions with structured logging support.

    Every admission request logs a start line and exactly one verdict line,
    all sharing one correlation ID.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def log_admission_start(
        self,
        operation: str,
        resource_name: str,
        dryrun: bool = False,
        correlation_id: str | None = None,
    ) -> str:
        """
        Log the start of an admission review.

        Args:
            operation: Admission operation (CREATE, UPDATE, DELETE)
            resource_name: Name of the pool under admission
            dryrun: Whether this is a dry-run request
            correlation_id: Optional correlation ID (will generate if not provided)

        Returns:
            The correlation ID used for this review
        """
        if correlation_id is None:
            correlation_id = generate_correlation_id()

        set_correlation_id(correlation_id)

        self.logger.info(
            f"Validating IPPool {resource_name} (operation: {operation}, dryrun: {dryrun})",
            extra={
                "resource_type": "ippool",
                "resource_name": resource_name,
                "operation": operation,
                "dryrun": dryrun,
            },
        )

        return correlation_id

    def log_admission_allowed(
        self, operation: str, resource_name: str, duration: float
    ) -> None:
        self.logger.info(
            f"IPPool {resource_name} validation passed",
            extra={
                "resource_type": "ippool",
                "resource_name": resource_name,
                "operation": operation,
                "verdict": "allowed",
                "duration": duration,
            },
        )

    def log_admission_rejected(
        self,
        operation: str,
        resource_name: str,
        error: Exception,
        duration: float,
    ) -> None:
        """
        Log a rejected admission review.

        Args:
            operation: Admission operation
            resource_name: Name of the pool under admission
            error: The rule violation that caused the rejection
            duration: Review duration in seconds
        """
        self.logger.warning(
            f"IPPool {resource_name} rejected: {error}",
            extra={
                "resource_type": "ippool",
                "resource_name": resource_name,
                "operation": operation,
                "verdict": "rejected",
                "error_type": type(error).__name__,
                "error_category": getattr(error, "category", "unknown"),
                "duration": duration,
            },
        )

"""
Observability utilities for the IP pool admission webhook.

This module provides metrics and structured logging capabilities for
production monitoring and troubleshooting.
"""

from .logging import AdmissionLogger, setup_structured_logging
from .metrics import MetricsServer, get_metrics_registry, metrics_collector

__all__ = [
    "AdmissionLogger",
    "MetricsServer",
    "get_metrics_registry",
    "metrics_collector",
    "setup_structured_logging",
]

"""
Prometheus metrics for the IP pool admission webhook.

This module provides admission counters and latency histograms, and a small
HTTP server exposing them next to a liveness endpoint.
"""

import logging
import time
from contextlib import asynccontextmanager

# aiohttp comes in transitively through kopf, which serves admission
# requests with it as well.
from aiohttp.web import Application, AppRunner, Request, Response, TCPSite
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

from ippool_admission.errors import IPPoolAdmissionError

logger = logging.getLogger(__name__)

# Global metrics registry
_metrics_registry: CollectorRegistry | None = None

ADMISSION_REQUESTS_TOTAL = Counter(
    "ippool_admission_requests_total",
    "Total number of IPPool admission reviews",
    ["operation", "result"],
    registry=None,  # Will be set during initialization
)

ADMISSION_REJECTIONS_TOTAL = Counter(
    "ippool_admission_rejections_total",
    "Total number of rejected IPPool admission reviews by rule",
    ["operation", "error_type"],
    registry=None,
)

ADMISSION_DURATION = Histogram(
    "ippool_admission_duration_seconds",
    "Time spent validating IPPool admission reviews",
    ["operation"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
    registry=None,
)


def get_metrics_registry() -> CollectorRegistry:
    """Get or create the global metrics registry."""
    global _metrics_registry

    if _metrics_registry is None:
        _metrics_registry = CollectorRegistry()
        for metric in [
            ADMISSION_REQUESTS_TOTAL,
            ADMISSION_REJECTIONS_TOTAL,
            ADMISSION_DURATION,
        ]:
            _metrics_registry.register(metric)

    return _metrics_registry


class MetricsCollector:
    """Collects and manages metrics for the admission webhook."""

    def __init__(self):
        self.registry = get_metrics_registry()

    @asynccontextmanager
    async def track_admission(self, operation: str):
        """
        Context manager to track one admission review.

        A rule violation counts as ``rejected``; any other exception counts
        as ``error``. Exceptions are always re-raised.

        Args:
            operation: Admission operation (CREATE, UPDATE, DELETE)
        """
        start_time = time.time()
        result = "unknown"

        try:
            yield
            result = "allowed"
        except IPPoolAdmissionError as e:
            result = "rejected"
            ADMISSION_REJECTIONS_TOTAL.labels(
                operation=operation, error_type=type(e).__name__
            ).inc()
            raise
        except Exception:
            result = "error"
            raise
        finally:
            ADMISSION_REQUESTS_TOTAL.labels(operation=operation, result=result).inc()
            ADMISSION_DURATION.labels(operation=operation).observe(
                time.time() - start_time
            )


class MetricsServer:
    """HTTP server for exposing Prometheus metrics."""

    def __init__(self, port: int = 8081, host: str = "0.0.0.0"):
        """
        Initialize metrics server.

        Args:
            port: Port to serve metrics on
            host: Host interface to bind to
        """
        self.port = port
        self.host = host
        self.app = Application()
        self.runner: AppRunner | None = None
        self.site: TCPSite | None = None
        self._setup_routes()

    def _setup_routes(self) -> None:
        self.app.router.add_get("/metrics", self._metrics_handler)
        self.app.router.add_get("/healthz", self._healthz_handler)

    async def _metrics_handler(self, request: Request) -> Response:
        """Handle /metrics endpoint for Prometheus scraping."""
        try:
            metrics_data = generate_latest(get_metrics_registry())
            return Response(body=metrics_data, content_type=CONTENT_TYPE_LATEST)
        except Exception as e:
            logger.error(f"Failed to generate metrics: {e}")
            return Response(
                text=f"Error generating metrics: {type(e).__name__}. Check logs for details.",
                status=500,
            )

    async def _healthz_handler(self, request: Request) -> Response:
        return Response(text="ok")

    async def start(self) -> None:
        """Start the metrics server."""
        try:
            self.runner = AppRunner(self.app)
            await self.runner.setup()

            self.site = TCPSite(self.runner, self.host, self.port)
            await self.site.start()

            logger.info(f"Metrics available at http://{self.host}:{self.port}/metrics")
        except Exception as e:
            logger.error(f"Failed to start metrics server: {e}")
            raise

    async def stop(self) -> None:
        """Stop the metrics server."""
        try:
            if self.site:
                await self.site.stop()
                self.site = None

            if self.runner:
                await self.runner.cleanup()
                self.runner = None

            logger.info("Metrics server stopped")
        except Exception as e:
            logger.error(f"Error stopping metrics server: {e}")

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()


# Global metrics collector instance
metrics_collector = MetricsCollector()

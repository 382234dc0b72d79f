#!/usr/bin/env python3
"""
IP Pool Admission - Main entry point for the Kopf-based admission webhook.

This process serves the validating admission webhook for IPPool resources
and exposes Prometheus metrics next to it.

Usage:
    python -m ippool_admission.operator
    # Or with kopf directly:
    kopf run -m ippool_admission.operator --all-namespaces

Environment Variables:
    LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
    ENABLE_WEBHOOKS: Set to 'false' to run without the admission server
    WEBHOOK_PORT / WEBHOOK_CERT_DIR: Admission server port and TLS material
"""

import logging
import sys

import kopf
from kubernetes import config

from ippool_admission.observability.logging import setup_structured_logging
from ippool_admission.observability.metrics import MetricsServer
from ippool_admission.settings import settings as operator_settings

# Importing the webhook module registers its admission handler with kopf.
# Kopf refuses to start with admission handlers but no admission server, so
# the import is skipped when webhooks are disabled.
if operator_settings.enable_webhooks:
    from ippool_admission.webhooks import ippool as ippool_webhook  # noqa: F401

_global_metrics_server: MetricsServer | None = None


def configure_logging() -> None:
    """Configure structured logging based on operator_settings."""
    setup_structured_logging(
        log_level=operator_settings.log_level.upper(),
        enable_json_formatting=operator_settings.json_logs,
        correlation_id_enabled=operator_settings.correlation_ids,
        log_health_probes=operator_settings.log_health_probes,
        webhook_log_level=operator_settings.webhook_log_level,
    )


def build_kopf_settings() -> kopf.OperatorSettings:
    """
    Build the kopf settings carrying the admission server configuration.

    Webhook configurations are managed by the deployment (Helm/cert-manager),
    so kopf only serves requests and never registers itself.
    """
    settings_obj = kopf.OperatorSettings()
    settings_obj.admission.managed = None

    if operator_settings.enable_webhooks:
        settings_obj.admission.server = kopf.WebhookServer(
            port=operator_settings.webhook_port,
            host=operator_settings.webhook_host,
            certfile=operator_settings.webhook_certfile,
            pkeyfile=operator_settings.webhook_keyfile,
        )
        logging.info(
            f"Admission webhooks ENABLED on port {operator_settings.webhook_port} "
            f"using certificates from {operator_settings.webhook_cert_dir}"
        )
    else:
        settings_obj.admission.server = None
        logging.info("Admission webhooks DISABLED")

    return settings_obj


@kopf.on.startup()
async def startup_handler(settings: kopf.OperatorSettings, **_) -> None:
    """
    Webhook process startup.

    Loads the Kubernetes configuration used to list stored pools and starts
    the metrics server.
    """
    global _global_metrics_server

    logging.info("Starting IP pool admission webhook...")
    settings.watching.reconnect_backoff = 1.0

    try:
        config.load_incluster_config()
        logging.info("Loaded in-cluster Kubernetes configuration")
    except config.ConfigException:
        try:
            config.load_kube_config()
            logging.info("Loaded kubeconfig configuration")
        except config.ConfigException:
            logging.error("Failed to load Kubernetes configuration")
            raise

    try:
        metrics_server = MetricsServer(
            port=operator_settings.metrics_port, host=operator_settings.metrics_host
        )
        await metrics_server.start()
        _global_metrics_server = metrics_server
    except Exception as e:
        # Admission keeps working without metrics
        logging.error(f"Failed to start metrics server: {e}")
        logging.warning("Continuing without metrics server")


@kopf.on.cleanup()
async def cleanup_handler(**_) -> None:
    """Stop the metrics server on shutdown."""
    global _global_metrics_server

    logging.info("Shutting down IP pool admission webhook...")
    if _global_metrics_server:
        await _global_metrics_server.stop()
        _global_metrics_server = None


@kopf.on.probe(id="healthz")
async def health_check(**_) -> dict[str, str]:
    """Liveness probe: the process is serving."""
    return {"status": "healthy", "component": "ippool-admission"}


def main() -> None:
    """
    Main entry point.

    This function:
    1. Configures logging
    2. Configures the admission server (must be before kopf.run())
    3. Runs kopf cluster-wide, since IPPools are cluster scoped
    """
    configure_logging()
    settings_obj = build_kopf_settings()

    try:
        kopf.run(
            clusterwide=True,
            liveness_endpoint="http://0.0.0.0:8080/healthz",
            settings=settings_obj,
        )
    except KeyboardInterrupt:
        logging.info("Received shutdown signal")
        sys.exit(0)
    except Exception as e:
        logging.error(f"Webhook failed with error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

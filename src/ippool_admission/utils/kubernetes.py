"""
Kubernetes utilities for the IP pool admission webhook.

This module provides the cluster-backed pool repository and the helpers it
needs to talk to the Kubernetes API:
- Kubernetes client management and configuration
- Label selector formatting
- Listing IPPool custom resources
"""

import logging
from collections.abc import Mapping
from typing import Any

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from pydantic import ValidationError

from ippool_admission.constants import IPPOOL_GROUP, IPPOOL_PLURAL, IPPOOL_VERSION
from ippool_admission.errors import PoolRepositoryError
from ippool_admission.models.ippool import IPPool

logger = logging.getLogger(__name__)


def get_kubernetes_client() -> client.ApiClient:
    """
    Get configured Kubernetes API client.

    This function handles both in-cluster and local development configurations.

    Returns:
        Configured Kubernetes API client
    """
    try:
        # Try in-cluster config first (when running in a pod)
        config.load_incluster_config()
        logger.debug("Loaded in-cluster Kubernetes configuration")
    except config.ConfigException:
        try:
            # Fall back to local kubeconfig (for development)
            config.load_kube_config()
            logger.debug("Loaded kubeconfig from local environment")
        except config.ConfigException as e:
            logger.error(f"Failed to load Kubernetes configuration: {e}")
            raise

    return client.ApiClient()


def format_label_selector(labels: Mapping[str, str] | None) -> str | None:
    """
    Render an equality label selector for the Kubernetes API.

    Args:
        labels: Label key/value pairs, or None for no filtering

    Returns:
        Selector string such as ``a=1,b=2``, or None when there is nothing to filter
    """
    if not labels:
        return None
    return ",".join(f"{key}={value}" for key, value in sorted(labels.items()))


class KubernetesIPPoolRepository:
    """Lists IPPool resources straight from the Kubernetes API."""

    def __init__(self, api: client.CustomObjectsApi | None = None):
        """
        Initialize the repository.

        Args:
            api: CustomObjectsApi to use; created from the local configuration if omitted
        """
        self._api = api

    @property
    def api(self) -> client.CustomObjectsApi:
        if self._api is None:
            self._api = client.CustomObjectsApi(get_kubernetes_client())
        return self._api

    def list_pools(self, labels: Mapping[str, str] | None = None) -> list[IPPool]:
        """
        List IPPool resources, optionally filtered by labels.

        Raises:
            PoolRepositoryError: If the API call fails or a stored pool is malformed
        """
        kwargs: dict[str, Any] = {}
        label_selector = format_label_selector(labels)
        if label_selector:
            kwargs["label_selector"] = label_selector

        try:
            response = self.api.list_cluster_custom_object(
                group=IPPOOL_GROUP,
                version=IPPOOL_VERSION,
                plural=IPPOOL_PLURAL,
                **kwargs,
            )
        except ApiException as e:
            logger.error(f"Failed to list IP pools (selector: {label_selector}): {e}")
            raise PoolRepositoryError(f"{e.status} {e.reason}") from e

        items = response.get("items", [])
        logger.debug(f"Found {len(items)} IP pools (selector: {label_selector})")

        pools = []
        for item in items:
            try:
                pools.append(IPPool.model_validate(item))
            except ValidationError as e:
                name = item.get("metadata", {}).get("name", "<unknown>")
                logger.error(f"Stored IP pool {name} is malformed: {e}")
                raise PoolRepositoryError(f"stored IP pool {name} is malformed") from e

        return pools

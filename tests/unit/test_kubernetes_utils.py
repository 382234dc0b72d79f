"""Unit tests for Kubernetes utility functions."""

from unittest.mock import MagicMock, patch

import pytest
from kubernetes.client.rest import ApiException

from ippool_admission.constants import (
    GLOBAL_IP_POOL_LABEL,
    IPPOOL_GROUP,
    IPPOOL_PLURAL,
    IPPOOL_VERSION,
)
from ippool_admission.errors import PoolRepositoryError
from ippool_admission.services.repository import IPPoolRepository
from ippool_admission.utils.kubernetes import (
    KubernetesIPPoolRepository,
    format_label_selector,
)
from tests.fixtures.ippool_resources import ip_range, make_pool_body


def test_format_label_selector():
    assert format_label_selector(None) is None
    assert format_label_selector({}) is None
    assert format_label_selector({"b": "2", "a": "1"}) == "a=1,b=2"


def test_repository_satisfies_protocol():
    assert isinstance(KubernetesIPPoolRepository(api=MagicMock()), IPPoolRepository)


def test_list_pools_parses_items():
    """Listed custom objects are returned as IPPool models."""
    mock_api = MagicMock()
    mock_api.list_cluster_custom_object.return_value = {
        "items": [
            make_pool_body("A", ranges=[ip_range("10.0.0.1", "10.0.0.10")]),
            make_pool_body("B", ranges=[ip_range("10.0.1.1", "10.0.1.10")], priority=2),
        ]
    }

    pools = KubernetesIPPoolRepository(api=mock_api).list_pools()

    assert [p.name for p in pools] == ["A", "B"]
    assert pools[1].spec.selector.priority == 2
    mock_api.list_cluster_custom_object.assert_called_once_with(
        group=IPPOOL_GROUP, version=IPPOOL_VERSION, plural=IPPOOL_PLURAL
    )


def test_list_pools_with_label_selector():
    mock_api = MagicMock()
    mock_api.list_cluster_custom_object.return_value = {"items": []}

    pools = KubernetesIPPoolRepository(api=mock_api).list_pools(
        labels={GLOBAL_IP_POOL_LABEL: "true"}
    )

    assert pools == []
    call_kwargs = mock_api.list_cluster_custom_object.call_args[1]
    assert call_kwargs["label_selector"] == f"{GLOBAL_IP_POOL_LABEL}=true"


def test_list_pools_api_error():
    mock_api = MagicMock()
    mock_api.list_cluster_custom_object.side_effect = ApiException(
        status=403, reason="Forbidden"
    )

    with pytest.raises(PoolRepositoryError) as exc_info:
        KubernetesIPPoolRepository(api=mock_api).list_pools()

    assert str(exc_info.value) == "failed to list IP pools: 403 Forbidden"
    assert exc_info.value.retryable
    assert isinstance(exc_info.value.__cause__, ApiException)


def test_list_pools_malformed_item():
    mock_api = MagicMock()
    mock_api.list_cluster_custom_object.return_value = {
        "items": [{"metadata": {"name": "broken"}, "spec": {"ranges": "nope"}}]
    }

    with pytest.raises(PoolRepositoryError, match="stored IP pool broken is malformed"):
        KubernetesIPPoolRepository(api=mock_api).list_pools()


@patch("ippool_admission.utils.kubernetes.get_kubernetes_client")
def test_api_created_lazily(mock_get_k8s_client):
    repository = KubernetesIPPoolRepository()
    mock_get_k8s_client.assert_not_called()

    with patch("kubernetes.client.CustomObjectsApi") as mock_api_cls:
        api = repository.api
        assert repository.api is api

    mock_get_k8s_client.assert_called_once()
    mock_api_cls.assert_called_once_with(mock_get_k8s_client.return_value)

"""
Read access to stored IPPool resources.

The admission checks only need one capability from storage: list the pools
that exist right now, optionally narrowed by an equality label selector.
``IPPoolRepository`` captures that contract so the validator can be handed
a cluster-backed implementation in production and a snapshot in tests or
offline checks.
"""

from collections.abc import Iterable, Mapping
from typing import Protocol, runtime_checkable

from ippool_admission.models.ippool import IPPool


@runtime_checkable
class IPPoolRepository(Protocol):
    """Lists stored IPPool resources."""

    def list_pools(self, labels: Mapping[str, str] | None = None) -> list[IPPool]:
        """
        List stored pools.

        Args:
            labels: Equality label selector, or None to list every pool

        Returns:
            Pools whose labels contain every given key/value pair

        Raises:
            PoolRepositoryError: If the pools cannot be read
        """
        ...


def labels_match(pool: IPPool, labels: Mapping[str, str] | None) -> bool:
    """Whether the pool carries every label of an equality selector."""
    if not labels:
        return True
    return all(pool.metadata.labels.get(k) == v for k, v in labels.items())


class StaticIPPoolRepository:
    """Repository over a fixed snapshot of pools."""

    def __init__(self, pools: Iterable[IPPool] = ()):
        self._pools = list(pools)

    def list_pools(self, labels: Mapping[str, str] | None = None) -> list[IPPool]:
        return [p for p in self._pools if labels_match(p, labels)]

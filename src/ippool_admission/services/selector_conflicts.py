"""
Selector conflict resolution between IP pools.

When a workload asks for an address, the IPAM controller picks the pool
whose selector matches, highest priority first. This module rejects pools
that would make that choice ambiguous:

1. Only one pool may carry the global pool label. The global pool is the
   catch-all fallback and takes no part in the remaining checks.
2. A selector must not list a scope entry that a later entry already covers.
3. Two non-global pools may not share a non-zero priority, and two unranked
   (priority 0) pools may not have overlapping scopes.
"""

import logging
from enum import StrEnum

from ippool_admission.constants import GLOBAL_IP_POOL_LABEL, LABEL_VALUE_TRUE
from ippool_admission.errors import (
    DuplicateGlobalPoolError,
    DuplicatePriorityError,
    InvalidSelectorError,
    ScopeOverlapError,
)
from ippool_admission.ipam.selector import Matcher, Requirement
from ippool_admission.models.ippool import IPPool, Selector
from ippool_admission.services.repository import IPPoolRepository

logger = logging.getLogger(__name__)


class PriorityRelation(StrEnum):
    """How the priorities of two non-global pools relate."""

    DUPLICATE = "duplicate"  # same non-zero priority, always a conflict
    UNRANKED = "unranked"  # both zero, scopes must be disjoint
    ORDERED = "ordered"  # priority decides precedence


def classify_priorities(mine: int, theirs: int) -> PriorityRelation:
    """
    Decide how two pool priorities interact.

    | mine | theirs | relation  |
    |------|--------|-----------|
    | n>0  | n      | DUPLICATE |
    | 0    | 0      | UNRANKED  |
    | else |        | ORDERED   |
    """
    if mine != 0 and mine == theirs:
        return PriorityRelation.DUPLICATE
    if mine == 0 and theirs == 0:
        return PriorityRelation.UNRANKED
    return PriorityRelation.ORDERED


def check_selector_itself(selector: Selector) -> None:
    """
    Reject a selector whose scope entries overlap each other.

    Each entry is matched against a selector made of the entries after it,
    so every pair of entries is compared exactly once.

    Raises:
        ScopeOverlapError: If an entry is matched by a later entry
    """
    for i, entry in enumerate(selector.scope):
        later = selector.scope[i + 1 :]
        if not later:
            break

        rest = selector.model_copy(update={"scope": later})
        if Matcher(rest).matches(Requirement.from_scope(selector.network, entry)):
            logger.debug(f"Scope entry {i} of selector {selector} overlaps a later entry")
            raise ScopeOverlapError()


def check_scope_against(pool: IPPool, other: IPPool) -> None:
    """
    Reject ``pool`` if any of its scope entries is served by ``other``.

    Raises:
        ScopeOverlapError: Naming ``other`` and the offending entry
    """
    network = pool.spec.selector.network
    matcher = Matcher(other.spec.selector)
    for entry in pool.spec.selector.scope:
        if matcher.matches(Requirement.from_scope(network, entry)):
            raise ScopeOverlapError(
                pool_name=other.name,
                project=entry.project,
                namespace=entry.namespace,
                cluster=entry.guest_cluster,
            )


class SelectorConflictResolver:
    """Checks a pool's selector against itself and all stored pools."""

    def __init__(self, repository: IPPoolRepository):
        self.repository = repository

    def check(self, pool: IPPool) -> None:
        """
        Check the selector of a pool under admission.

        Args:
            pool: Pool being created or updated

        Raises:
            DuplicateGlobalPoolError: If another global pool exists
            InvalidSelectorError: If the selector's scope overlaps itself
            DuplicatePriorityError: If another pool has the same non-zero priority
            ScopeOverlapError: If an unranked pool's scope overlaps this one
            PoolRepositoryError: If stored pools cannot be listed
        """
        if pool.is_global:
            self.check_global_pool(pool)
            return

        selector = pool.spec.selector
        try:
            check_selector_itself(selector)
        except ScopeOverlapError as e:
            raise InvalidSelectorError(selector, e) from e

        self.check_selector_with_others(pool)

    def check_global_pool(self, pool: IPPool) -> None:
        """Allow a global pool only while no other global pool exists."""
        global_pools = self.repository.list_pools(
            labels={GLOBAL_IP_POOL_LABEL: LABEL_VALUE_TRUE}
        )
        for other in global_pools:
            if other.name == pool.name:
                continue
            raise DuplicateGlobalPoolError(other.name)

    def check_selector_with_others(self, pool: IPPool) -> None:
        """Compare priorities and scopes with every other non-global pool."""
        priority = pool.spec.selector.priority

        for other in self.repository.list_pools():
            if other.name == pool.name or other.is_global:
                continue

            relation = classify_priorities(priority, other.spec.selector.priority)
            if relation is PriorityRelation.DUPLICATE:
                raise DuplicatePriorityError(other.name)
            if relation is PriorityRelation.UNRANKED:
                check_scope_against(pool, other)

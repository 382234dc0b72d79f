"""
Admission validation for IPPool resources.

``IPPoolValidator`` assembles the verdict for each admission operation:

- create: ranges present and well-formed, no overlap with any other pool,
  unambiguous selector
- update: same as create, plus every allocated address must stay inside the
  new ranges; pools that are being deleted are always accepted
- delete: only pools without allocated addresses may go

Checks run in that order and the first failure is returned, tagged with the
operation and pool name. The validator only reads from its repository and
never mutates anything.
"""

import logging
from collections.abc import Mapping

from ippool_admission.constants import (
    OPERATION_CREATE,
    OPERATION_DELETE,
    OPERATION_UPDATE,
)
from ippool_admission.errors import (
    AllocatedAddressExcludedError,
    EmptyRangeError,
    InvalidAddressError,
    IPPoolAdmissionError,
    NonEmptyPoolDeletionError,
    RangeOverlapError,
)
from ippool_admission.ipam.ranges import RangeSet, parse_address, parse_ranges
from ippool_admission.models.ippool import IPPool
from ippool_admission.services.repository import IPPoolRepository
from ippool_admission.services.selector_conflicts import SelectorConflictResolver

logger = logging.getLogger(__name__)


def check_range(candidate: RangeSet, *others: RangeSet) -> None:
    """
    Reject overlapping ranges.

    Args:
        candidate: Ranges of the pool under admission
        others: Ranges of every other pool

    Raises:
        RangeOverlapError: If two ranges of ``candidate`` overlap, or a range
            of ``candidate`` overlaps a range of another pool
    """
    for i, r1 in enumerate(candidate):
        for r2 in candidate[i + 1 :]:
            if r1.overlaps(r2):
                raise RangeOverlapError(r1, r2)

    for other in others:
        if candidate.overlaps(other):
            raise RangeOverlapError(candidate, other, other_pool=other.owner)


def check_allocated(ranges: RangeSet, allocated: Mapping[str, str]) -> None:
    """
    Reject ranges that would orphan allocated addresses.

    Args:
        ranges: New ranges of the pool
        allocated: Allocated address to consumer mapping from the pool status

    Raises:
        InvalidAddressError: If an allocated address cannot be parsed
        AllocatedAddressExcludedError: If an allocated address is outside ``ranges``
    """
    for address, consumer in allocated.items():
        try:
            ip = parse_address(address)
        except ValueError as e:
            raise InvalidAddressError(address) from e

        if not ranges.contains(ip):
            raise AllocatedAddressExcludedError(address, consumer)


class IPPoolValidator:
    """Validates IPPool admission requests against the stored pools."""

    def __init__(self, repository: IPPoolRepository):
        """
        Initialize the validator.

        Args:
            repository: Source of the currently stored pools
        """
        self.repository = repository
        self.selector_resolver = SelectorConflictResolver(repository)

    def create(self, pool: IPPool) -> None:
        """
        Validate a pool about to be created.

        Raises:
            IPPoolAdmissionError: The first failed check, with admission context
        """
        try:
            ranges = self._pool_ranges(pool)
            check_range(ranges, *self.get_other_pools_ranges(pool.name))
            self.selector_resolver.check(pool)
        except IPPoolAdmissionError as e:
            e.with_context(OPERATION_CREATE, pool.name)
            raise

        logger.debug(f"IP pool {pool.name} may be created")

    def update(self, old: IPPool | None, new: IPPool) -> None:
        """
        Validate a pool about to be updated.

        Args:
            old: Stored version of the pool (unused by the checks)
            new: Version of the pool being admitted

        Raises:
            IPPoolAdmissionError: The first failed check, with admission context
        """
        if new.deletion_requested:
            logger.debug(f"IP pool {new.name} is being deleted, skipping checks")
            return

        try:
            ranges = self._pool_ranges(new)
            check_range(ranges, *self.get_other_pools_ranges(new.name))
            check_allocated(ranges, new.allocated)
            self.selector_resolver.check(new)
        except IPPoolAdmissionError as e:
            e.with_context(OPERATION_UPDATE, new.name)
            raise

        logger.debug(f"IP pool {new.name} may be updated")

    def delete(self, pool: IPPool) -> None:
        """
        Validate a pool about to be deleted.

        Raises:
            NonEmptyPoolDeletionError: If the pool still has allocated addresses
        """
        if pool.allocated:
            raise NonEmptyPoolDeletionError(len(pool.allocated)).with_context(
                OPERATION_DELETE, pool.name
            )

        logger.debug(f"IP pool {pool.name} may be deleted")

    def get_other_pools_ranges(self, my_name: str) -> list[RangeSet]:
        """
        Parse the ranges of every stored pool except ``my_name``.

        Raises:
            PoolRepositoryError: If stored pools cannot be listed
            RangeParseError: If a stored pool has malformed ranges
        """
        return [
            parse_ranges(p.spec.ranges, owner=p.name)
            for p in self.repository.list_pools()
            if p.name != my_name
        ]

    @staticmethod
    def _pool_ranges(pool: IPPool) -> RangeSet:
        if not pool.spec.ranges:
            raise EmptyRangeError()
        return parse_ranges(pool.spec.ranges, owner=pool.name)

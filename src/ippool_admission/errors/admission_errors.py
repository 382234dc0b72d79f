"""
Admission error hierarchy for IP pool validation.

Every rejection the webhook can produce has its own error type so callers and
tests can tell the failing rule apart, while kopf only needs the message.
None of these errors are retryable: resubmitting the same object yields the
same verdict.
"""

from typing import Any, Self

import kopf

from ippool_admission.constants import (
    ERROR_ADMISSION_CONTEXT,
    ERROR_ALLOCATED_EXCLUDED,
    ERROR_DUPLICATE_GLOBAL_POOL,
    ERROR_DUPLICATE_PRIORITY,
    ERROR_EMPTY_RANGES,
    ERROR_INVALID_ADDRESS,
    ERROR_INVALID_SELECTOR,
    ERROR_NON_EMPTY_POOL_DELETION,
    ERROR_POOL_LIST_FAILED,
    ERROR_RANGE_POOL_OVERLAP,
    ERROR_RANGE_SELF_OVERLAP,
    ERROR_SCOPE_POOL_OVERLAP,
    ERROR_SCOPE_SELF_OVERLAP,
    OPERATION_VERBS,
)


class IPPoolAdmissionError(Exception):
    """
    Base error class for all IP pool admission rejections.

    Carries a category and user guidance like the rest of the operator
    errors, plus the admission context (operation and pool name) that the
    validator attaches before the error leaves the core.
    """

    def __init__(
        self,
        message: str,
        category: str,
        user_action: str | None = None,
    ):
        """
        Initialize admission error.

        Args:
            message: Human-readable reason for the rejection
            category: Error category (ranges, allocation, selector, lifecycle, repository)
            user_action: What the user should do to resolve the issue
        """
        super().__init__(message)
        self.message = message
        self.category = category
        self.retryable = False
        self.user_action = user_action
        self.operation: str | None = None
        self.pool_name: str | None = None

    def with_context(self, operation: str, pool_name: str) -> Self:
        """
        Attach the admission operation and pool name to this error.

        Args:
            operation: Admission operation (CREATE, UPDATE or DELETE)
            pool_name: Name of the pool under admission

        Returns:
            The same error instance, for use in ``raise err.with_context(...)``
        """
        self.operation = operation
        self.pool_name = pool_name
        return self

    def as_kopf_error(self) -> kopf.AdmissionError:
        """Convert to the kopf exception that rejects the admission request."""
        message = str(self)
        if self.user_action:
            message = f"{message}. Action required: {self.user_action}"
        return kopf.AdmissionError(message)

    def __str__(self) -> str:
        if self.operation is None or self.pool_name is None:
            return self.message
        verb = OPERATION_VERBS.get(self.operation, self.operation.lower())
        return ERROR_ADMISSION_CONTEXT.format(verb, self.pool_name, self.message)


class EmptyRangeError(IPPoolAdmissionError):
    """The pool declares no address ranges."""

    def __init__(self):
        super().__init__(
            message=ERROR_EMPTY_RANGES,
            category="ranges",
            user_action="Declare at least one entry in spec.ranges",
        )


class RangeParseError(IPPoolAdmissionError):
    """A range descriptor cannot be turned into an address range."""

    def __init__(self, descriptor: Any, reason: str):
        self.descriptor = descriptor
        self.reason = reason
        super().__init__(
            message=f"invalid range {descriptor}: {reason}",
            category="ranges",
            user_action="Fix the subnet, rangeStart, rangeEnd or gateway of the range",
        )


class RangeOverlapError(IPPoolAdmissionError):
    """Ranges overlap, either within one pool or with another pool."""

    def __init__(self, first: Any, second: Any, other_pool: str | None = None):
        self.first = first
        self.second = second
        self.other_pool = other_pool
        if other_pool is None:
            message = ERROR_RANGE_SELF_OVERLAP.format(first, second)
        else:
            message = ERROR_RANGE_POOL_OVERLAP.format(first, other_pool)
        super().__init__(
            message=message,
            category="ranges",
            user_action="Choose address ranges that no other range already covers",
        )


class InvalidAddressError(IPPoolAdmissionError):
    """An allocated address is not a valid IP address."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(message=ERROR_INVALID_ADDRESS.format(address), category="allocation")


class AllocatedAddressExcludedError(IPPoolAdmissionError):
    """An allocated address would fall outside the updated ranges."""

    def __init__(self, address: str, consumer: str | None = None):
        self.address = address
        self.consumer = consumer
        super().__init__(
            message=ERROR_ALLOCATED_EXCLUDED.format(address),
            category="allocation",
            user_action="Release the address before shrinking the pool ranges",
        )


class ScopeOverlapError(IPPoolAdmissionError):
    """Two scope entries can match the same workload."""

    def __init__(
        self,
        pool_name: str | None = None,
        project: str = "",
        namespace: str = "",
        cluster: str = "",
    ):
        self.other_pool = pool_name
        self.project = project
        self.namespace = namespace
        self.cluster = cluster
        if pool_name is None:
            message = ERROR_SCOPE_SELF_OVERLAP
        else:
            message = ERROR_SCOPE_POOL_OVERLAP.format(
                pool_name, project, namespace, cluster
            )
        super().__init__(
            message=message,
            category="selector",
            user_action="Set a different priority or a disjoint scope",
        )


class InvalidSelectorError(IPPoolAdmissionError):
    """The selector of a pool contradicts itself."""

    def __init__(self, selector: Any, cause: IPPoolAdmissionError):
        self.selector = selector
        self.cause = cause
        super().__init__(
            message=ERROR_INVALID_SELECTOR.format(selector, cause.message),
            category="selector",
            user_action="Remove scope entries that are covered by other entries",
        )


class DuplicatePriorityError(IPPoolAdmissionError):
    """Another non-global pool already uses the same non-zero priority."""

    def __init__(self, pool_name: str):
        self.other_pool = pool_name
        super().__init__(
            message=ERROR_DUPLICATE_PRIORITY.format(pool_name),
            category="selector",
            user_action="Pick a priority no other pool uses",
        )


class DuplicateGlobalPoolError(IPPoolAdmissionError):
    """Another pool is already marked as the global pool."""

    def __init__(self, pool_name: str):
        self.other_pool = pool_name
        super().__init__(
            message=ERROR_DUPLICATE_GLOBAL_POOL.format(pool_name),
            category="selector",
            user_action="Remove the global pool label from one of the pools",
        )


class NonEmptyPoolDeletionError(IPPoolAdmissionError):
    """The pool still has allocated addresses."""

    def __init__(self, allocated_count: int = 0):
        self.allocated_count = allocated_count
        super().__init__(
            message=ERROR_NON_EMPTY_POOL_DELETION,
            category="lifecycle",
            user_action="Delete the load balancers that use this pool first",
        )


class PoolRepositoryError(IPPoolAdmissionError):
    """Existing pools could not be read, so the request cannot be judged."""

    def __init__(self, reason: str):
        super().__init__(
            message=ERROR_POOL_LIST_FAILED.format(reason),
            category="repository",
            user_action="Check API server connectivity and RBAC permissions",
        )
        self.retryable = True

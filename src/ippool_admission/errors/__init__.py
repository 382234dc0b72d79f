"""
Error handling module for the IP pool admission webhook.

This module provides the error hierarchy for admission rejections and
integrates it with kopf's admission error type.
"""

from .admission_errors import (
    AllocatedAddressExcludedError,
    DuplicateGlobalPoolError,
    DuplicatePriorityError,
    EmptyRangeError,
    InvalidAddressError,
    InvalidSelectorError,
    IPPoolAdmissionError,
    NonEmptyPoolDeletionError,
    PoolRepositoryError,
    RangeOverlapError,
    RangeParseError,
    ScopeOverlapError,
)

__all__ = [
    "IPPoolAdmissionError",
    "EmptyRangeError",
    "RangeParseError",
    "RangeOverlapError",
    "InvalidAddressError",
    "AllocatedAddressExcludedError",
    "InvalidSelectorError",
    "ScopeOverlapError",
    "DuplicatePriorityError",
    "DuplicateGlobalPoolError",
    "NonEmptyPoolDeletionError",
    "PoolRepositoryError",
]

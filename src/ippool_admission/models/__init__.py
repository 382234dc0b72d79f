"""
Models package - Pydantic models for type-safe resource handling.

Defines data models for:
- IPPool resources (metadata, spec, status)
- Address range descriptors
- Pool selectors and their scope entries
"""

from .ippool import (
    IPPool,
    IPPoolMetadata,
    IPPoolSpec,
    IPPoolStatus,
    IPRange,
    Selector,
    Tenant,
)

__all__ = [
    "IPPool",
    "IPPoolMetadata",
    "IPPoolSpec",
    "IPPoolStatus",
    "IPRange",
    "Selector",
    "Tenant",
]

"""
Validation services for IPPool admission.

This package contains the rule engine behind the admission webhook:
- ippool_validator: verdict assembly plus the range and allocation checks
- selector_conflicts: global pool, scope and priority conflict rules
- repository: the contract for listing stored pools
"""

from .ippool_validator import IPPoolValidator, check_allocated, check_range
from .repository import IPPoolRepository, StaticIPPoolRepository
from .selector_conflicts import SelectorConflictResolver

__all__ = [
    "IPPoolValidator",
    "check_allocated",
    "check_range",
    "IPPoolRepository",
    "StaticIPPoolRepository",
    "SelectorConflictResolver",
]

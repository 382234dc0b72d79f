"""
IPAM primitives used by the admission checks.

- ranges: address ranges, range sets and the descriptor parsing boundary
- selector: workload requirements and selector matching
"""

from .ranges import AddressRange, RangeSet, parse_address, parse_range, parse_ranges
from .selector import Matcher, Requirement, scope_entry_matches

__all__ = [
    "AddressRange",
    "RangeSet",
    "parse_address",
    "parse_range",
    "parse_ranges",
    "Matcher",
    "Requirement",
    "scope_entry_matches",
]

"""
Unit tests for the range overlap and allocation checks.
"""

import pytest

from ippool_admission.errors import (
    AllocatedAddressExcludedError,
    InvalidAddressError,
    RangeOverlapError,
)
from ippool_admission.ipam.ranges import RangeSet, parse_ranges
from ippool_admission.services.ippool_validator import check_allocated, check_range


def _ranges(*bounds: tuple[str, str], owner: str = "") -> RangeSet:
    return parse_ranges(
        [{"rangeStart": start, "rangeEnd": end} for start, end in bounds], owner=owner
    )


class TestCheckRange:
    """Test cases for range overlap detection."""

    def test_single_range_passes(self):
        check_range(_ranges(("10.0.0.1", "10.0.0.10")))

    def test_disjoint_ranges_pass(self):
        candidate = _ranges(("10.0.0.1", "10.0.0.10"), ("10.0.0.20", "10.0.0.30"))
        others = [
            _ranges(("10.0.1.1", "10.0.1.10"), owner="a"),
            _ranges(("10.0.0.11", "10.0.0.19"), owner="b"),
        ]
        check_range(candidate, *others)

    def test_self_overlap_fails(self):
        candidate = _ranges(
            ("10.0.0.1", "10.0.0.10"),
            ("10.0.1.1", "10.0.1.10"),
            ("10.0.0.10", "10.0.0.20"),
        )
        with pytest.raises(RangeOverlapError) as exc_info:
            check_range(candidate)

        err = exc_info.value
        assert str(err) == (
            "there are overlaps between range 10.0.0.1-10.0.0.10 and 10.0.0.10-10.0.0.20"
        )
        assert err.other_pool is None

    def test_self_overlap_reported_before_cross_pool(self):
        candidate = _ranges(("10.0.0.1", "10.0.0.10"), ("10.0.0.5", "10.0.0.6"))
        other = _ranges(("10.0.0.1", "10.0.0.255"), owner="other")
        with pytest.raises(RangeOverlapError) as exc_info:
            check_range(candidate, other)
        assert exc_info.value.other_pool is None

    def test_cross_pool_overlap_names_pool(self):
        candidate = _ranges(("10.0.0.5", "10.0.0.20"), owner="B")
        others = [
            _ranges(("10.0.1.1", "10.0.1.10"), owner="C"),
            _ranges(("10.0.0.1", "10.0.0.10"), owner="A"),
        ]
        with pytest.raises(RangeOverlapError) as exc_info:
            check_range(candidate, *others)

        err = exc_info.value
        assert err.other_pool == "A"
        assert str(err) == (
            "the ranges [10.0.0.5-10.0.0.20] overlap with the ranges of pool A"
        )

    def test_other_family_never_overlaps(self):
        candidate = _ranges(("10.0.0.1", "10.0.0.10"))
        other = _ranges(("::", "::ffff"), owner="v6")
        check_range(candidate, other)

    def test_subnet_ranges_overlap(self):
        candidate = parse_ranges([{"subnet": "10.0.0.0/24"}], owner="B")
        other = parse_ranges(
            [{"subnet": "10.0.0.0/16", "rangeStart": "10.0.0.200"}], owner="A"
        )
        with pytest.raises(RangeOverlapError):
            check_range(candidate, other)


class TestCheckAllocated:
    """Test cases for allocated address containment."""

    def test_all_allocated_inside(self):
        rs = _ranges(("10.0.0.1", "10.0.0.10"), ("10.0.1.1", "10.0.1.10"))
        allocated = {"10.0.0.1": "default/lb1", "10.0.1.10": "default/lb2"}
        check_allocated(rs, allocated)
        # same input, same verdict
        check_allocated(rs, allocated)

    def test_no_allocations(self):
        check_allocated(_ranges(("10.0.0.1", "10.0.0.10")), {})

    def test_allocated_excluded(self):
        rs = _ranges(("10.0.0.1", "10.0.0.10"))
        with pytest.raises(AllocatedAddressExcludedError) as exc_info:
            check_allocated(rs, {"10.0.0.5": "default/lb1", "10.0.0.11": "default/lb2"})

        err = exc_info.value
        assert err.address == "10.0.0.11"
        assert err.consumer == "default/lb2"
        assert str(err) == "allocated IP 10.0.0.11 is excluded"

    def test_excluded_stays_excluded(self):
        rs = _ranges(("10.0.0.1", "10.0.0.10"))
        for _ in range(2):
            with pytest.raises(AllocatedAddressExcludedError):
                check_allocated(rs, {"10.0.0.11": "default/lb"})

    def test_invalid_allocated_address(self):
        rs = _ranges(("10.0.0.1", "10.0.0.10"))
        with pytest.raises(InvalidAddressError) as exc_info:
            check_allocated(rs, {"10.0.0.300": "default/lb"})
        assert str(exc_info.value) == "invalid ip string 10.0.0.300"

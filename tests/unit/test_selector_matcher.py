"""
Unit tests for selector matching.
"""

import pytest

from ippool_admission.ipam.selector import Matcher, Requirement, scope_entry_matches
from ippool_admission.models.ippool import Selector, Tenant


def _selector(network: str = "", *scope: dict, priority: int = 0) -> Selector:
    return Selector.model_validate(
        {"priority": priority, "network": network, "scope": list(scope)}
    )


class TestRequirement:
    def test_from_scope(self):
        entry = Tenant(project="p1", namespace="ns1", guest_cluster="c1")
        assert Requirement.from_scope("vlan10", entry) == Requirement(
            network="vlan10", project="p1", namespace="ns1", cluster="c1"
        )


class TestScopeEntryMatches:
    """Test cases for matching a single scope entry."""

    def test_all_dimensions_equal(self):
        entry = Tenant(project="p1", namespace="ns1", guest_cluster="c1")
        assert scope_entry_matches(entry, Requirement("", "p1", "ns1", "c1"))

    @pytest.mark.parametrize("wildcard", ["", "*"])
    def test_wildcard_dimension(self, wildcard):
        entry = Tenant(project="p1", namespace=wildcard, guest_cluster=wildcard)
        assert scope_entry_matches(entry, Requirement("", "p1", "ns9", "c9"))
        assert scope_entry_matches(entry, Requirement("", "p1", "", ""))

    def test_dimension_mismatch(self):
        entry = Tenant(project="p1", namespace="ns1")
        assert not scope_entry_matches(entry, Requirement("", "p1", "ns2", ""))

    def test_set_dimension_does_not_match_unset_requirement(self):
        entry = Tenant(project="p1", namespace="ns1")
        assert not scope_entry_matches(entry, Requirement("", "p1", "", ""))


class TestMatcher:
    """Test cases for matching requirements against selectors."""

    def test_network_mismatch(self):
        matcher = Matcher(_selector("vlan10", {"project": "p1"}))
        assert not matcher.matches(Requirement("vlan20", "p1"))

    def test_selector_without_network_matches_any_network(self):
        matcher = Matcher(_selector("", {"project": "p1"}))
        assert matcher.matches(Requirement("vlan20", "p1"))
        assert matcher.matches(Requirement("", "p1"))

    def test_empty_scope_matches_whole_network(self):
        matcher = Matcher(_selector("vlan10"))
        assert matcher.matches(Requirement("vlan10", "anything", "at", "all"))
        assert not matcher.matches(Requirement("vlan20"))

    def test_match_is_existential_over_scope(self):
        matcher = Matcher(
            _selector("", {"project": "p1"}, {"project": "p2", "namespace": "ns2"})
        )
        assert matcher.matches(Requirement("", "p2", "ns2"))
        assert matcher.matches(Requirement("", "p1", "ns7"))
        assert not matcher.matches(Requirement("", "p2", "ns3"))
        assert not matcher.matches(Requirement("", "p3"))

    def test_guest_cluster_dimension(self):
        matcher = Matcher(_selector("", {"guestCluster": "c1"}))
        assert matcher.matches(Requirement("", "p1", "ns1", "c1"))
        assert not matcher.matches(Requirement("", "p1", "ns1", "c2"))

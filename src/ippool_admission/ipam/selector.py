"""
Selector matching.

A ``Requirement`` describes where a workload lives (network, project,
namespace, guest cluster). A ``Matcher`` answers whether a pool selector
would serve that workload.
"""

from dataclasses import dataclass

from ippool_admission.constants import SCOPE_WILDCARD
from ippool_admission.models.ippool import Selector, Tenant


@dataclass(frozen=True)
class Requirement:
    """Placement of a workload asking for an address."""

    network: str = ""
    project: str = ""
    namespace: str = ""
    cluster: str = ""

    @classmethod
    def from_scope(cls, network: str, entry: Tenant) -> "Requirement":
        """Build the requirement a single scope entry stands for."""
        return cls(
            network=network,
            project=entry.project,
            namespace=entry.namespace,
            cluster=entry.guest_cluster,
        )


def _dimension_matches(wanted: str, actual: str) -> bool:
    return wanted in ("", SCOPE_WILDCARD) or wanted == actual


def scope_entry_matches(entry: Tenant, requirement: Requirement) -> bool:
    """Whether ``entry`` matches ``requirement`` on every non-wildcard dimension."""
    return (
        _dimension_matches(entry.project, requirement.project)
        and _dimension_matches(entry.namespace, requirement.namespace)
        and _dimension_matches(entry.guest_cluster, requirement.cluster)
    )


class Matcher:
    """Tests requirements against one selector."""

    def __init__(self, selector: Selector):
        self.selector = selector

    def matches(self, requirement: Requirement) -> bool:
        """
        Check whether the selector serves the requirement.

        The network must match when the selector names one. An empty scope
        serves the whole network; otherwise any single scope entry matching
        is enough.
        """
        if self.selector.network and self.selector.network != requirement.network:
            return False

        if not self.selector.scope:
            return True

        return any(
            scope_entry_matches(entry, requirement) for entry in self.selector.scope
        )

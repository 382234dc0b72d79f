"""
Pydantic models for IPPool resources.

This module defines type-safe data models for the IPPool custom resource:
the range descriptors and selector in the spec, the allocation bookkeeping
in the status, and the metadata fields the admission checks rely on.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from ippool_admission.constants import GLOBAL_IP_POOL_LABEL, LABEL_VALUE_TRUE


class IPRange(BaseModel):
    """
    Address range descriptor as written by users.

    Either a CIDR subnet (optionally narrowed by rangeStart/rangeEnd) or an
    explicit rangeStart/rangeEnd pair.
    """

    model_config = {"populate_by_name": True}

    subnet: str | None = Field(None, description="CIDR the range belongs to")
    range_start: str | None = Field(
        None, alias="rangeStart", description="First allocatable address"
    )
    range_end: str | None = Field(
        None, alias="rangeEnd", description="Last allocatable address"
    )
    gateway: str | None = Field(None, description="Gateway address of the subnet")

    def __str__(self) -> str:
        parts = [
            f"{key}={value}"
            for key, value in (
                ("subnet", self.subnet),
                ("rangeStart", self.range_start),
                ("rangeEnd", self.range_end),
                ("gateway", self.gateway),
            )
            if value
        ]
        return "{" + " ".join(parts) + "}"


class Tenant(BaseModel):
    """Scope entry narrowing which workloads may use a pool."""

    model_config = {"populate_by_name": True}

    project: str = Field("", description="Project, empty or '*' for any")
    namespace: str = Field("", description="Namespace, empty or '*' for any")
    guest_cluster: str = Field(
        "", alias="guestCluster", description="Guest cluster, empty or '*' for any"
    )


class Selector(BaseModel):
    """Targeting rule of a pool."""

    model_config = {"populate_by_name": True}

    priority: int = Field(
        0, ge=0, description="Precedence among pools, 0 means unranked"
    )
    network: str = Field("", description="Network the pool serves")
    scope: list[Tenant] = Field(
        default_factory=list, description="Scope entries, any of which may match"
    )

    @field_validator("network", mode="before")
    @classmethod
    def _none_network(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("scope", mode="before")
    @classmethod
    def _none_scope(cls, v: Any) -> Any:
        return [] if v is None else v


class IPPoolSpec(BaseModel):
    """Specification of an IPPool."""

    model_config = {"populate_by_name": True}

    description: str | None = Field(None, description="Free text description")
    ranges: list[IPRange] = Field(
        default_factory=list, description="Address ranges owned by the pool"
    )
    selector: Selector = Field(
        default_factory=Selector, description="Workload targeting rule"
    )

    @field_validator("ranges", mode="before")
    @classmethod
    def _none_ranges(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("selector", mode="before")
    @classmethod
    def _none_selector(cls, v: Any) -> Any:
        return {} if v is None else v


class IPPoolStatus(BaseModel):
    """Allocation bookkeeping maintained by the IPAM controller."""

    model_config = {"populate_by_name": True}

    total: int | None = Field(None, description="Number of allocatable addresses")
    available: int | None = Field(None, description="Number of free addresses")
    last_allocated: str | None = Field(
        None, alias="lastAllocated", description="Most recently allocated address"
    )
    allocated: dict[str, str] = Field(
        default_factory=dict, description="Allocated address to consumer mapping"
    )
    allocated_history: dict[str, str] = Field(
        default_factory=dict,
        alias="allocatedHistory",
        description="Previously allocated address to consumer mapping",
    )

    @field_validator("allocated", "allocated_history", mode="before")
    @classmethod
    def _none_mapping(cls, v: Any) -> Any:
        return {} if v is None else v


class IPPoolMetadata(BaseModel):
    """The subset of object metadata used during admission."""

    model_config = {"populate_by_name": True}

    name: str = Field(..., description="Cluster-unique pool name")
    labels: dict[str, str] = Field(default_factory=dict)
    deletion_timestamp: datetime | None = Field(None, alias="deletionTimestamp")

    @field_validator("labels", mode="before")
    @classmethod
    def _none_labels(cls, v: Any) -> Any:
        return {} if v is None else v


class IPPool(BaseModel):
    """Complete IPPool custom resource."""

    model_config = {"populate_by_name": True}

    api_version: str = Field(
        "loadbalancer.harvesterhci.io/v1beta1", alias="apiVersion"
    )
    kind: str = Field("IPPool")
    metadata: IPPoolMetadata
    spec: IPPoolSpec = Field(default_factory=IPPoolSpec)
    status: IPPoolStatus = Field(default_factory=IPPoolStatus)

    @field_validator("spec", "status", mode="before")
    @classmethod
    def _none_section(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def is_global(self) -> bool:
        """Whether this pool is labelled as the cluster-wide fallback pool."""
        return self.metadata.labels.get(GLOBAL_IP_POOL_LABEL) == LABEL_VALUE_TRUE

    @property
    def deletion_requested(self) -> bool:
        return self.metadata.deletion_timestamp is not None

    @property
    def allocated(self) -> dict[str, str]:
        return self.status.allocated

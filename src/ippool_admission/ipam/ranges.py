"""
Address ranges and range sets.

Range descriptors from the IPPool spec (a CIDR subnet, optionally narrowed by
rangeStart/rangeEnd, or a bare rangeStart/rangeEnd pair) are normalized here
into ``AddressRange`` values. Everything downstream only ever sees the
normalized form.
"""

import ipaddress
import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import TypeAlias, overload

from ippool_admission.errors import RangeParseError
from ippool_admission.models.ippool import IPRange

logger = logging.getLogger(__name__)

IPAddress: TypeAlias = ipaddress.IPv4Address | ipaddress.IPv6Address
IPNetwork: TypeAlias = ipaddress.IPv4Network | ipaddress.IPv6Network


@dataclass(frozen=True)
class AddressRange:
    """Inclusive range of addresses of a single IP family."""

    start: IPAddress
    end: IPAddress
    subnet: IPNetwork | None = None
    gateway: IPAddress | None = None

    def __post_init__(self) -> None:
        if self.start.version != self.end.version:
            raise ValueError(
                f"rangeStart {self.start} and rangeEnd {self.end} are of different IP families"
            )
        if self.start > self.end:
            raise ValueError(
                f"rangeStart {self.start} must be less than or equal to rangeEnd {self.end}"
            )
        if self.gateway is not None and self.gateway.version != self.version:
            raise ValueError(
                f"gateway {self.gateway} is not of the same IP family as the range"
            )

    @property
    def version(self) -> int:
        return self.start.version

    def contains(self, address: IPAddress) -> bool:
        return address.version == self.version and self.start <= address <= self.end

    def overlaps(self, other: "AddressRange") -> bool:
        """Whether the two ranges share at least one address."""
        if other.version != self.version:
            return False
        return self.start <= other.end and other.start <= self.end

    def __str__(self) -> str:
        if self.subnet is None:
            return f"{self.start}-{self.end}"
        return f"{self.subnet}[{self.start}-{self.end}]"


class RangeSet:
    """Ordered address ranges owned by one pool."""

    def __init__(self, ranges: Iterable[AddressRange] = (), owner: str = ""):
        self._ranges = tuple(ranges)
        self.owner = owner

    @overload
    def __getitem__(self, index: int) -> AddressRange: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[AddressRange, ...]: ...

    def __getitem__(self, index):
        return self._ranges[index]

    def __iter__(self) -> Iterator[AddressRange]:
        return iter(self._ranges)

    def __len__(self) -> int:
        return len(self._ranges)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RangeSet):
            return NotImplemented
        return self._ranges == other._ranges

    def __hash__(self) -> int:
        return hash(self._ranges)

    def contains(self, address: IPAddress) -> bool:
        return any(r.contains(address) for r in self._ranges)

    def overlaps(self, other: "RangeSet") -> bool:
        """Whether any range of this set overlaps any range of ``other``."""
        return any(r1.overlaps(r2) for r1 in self._ranges for r2 in other)

    def __str__(self) -> str:
        return "[" + " ".join(str(r) for r in self._ranges) + "]"

    def __repr__(self) -> str:
        return f"RangeSet({list(self._ranges)!r}, owner={self.owner!r})"


def parse_address(value: str) -> IPAddress:
    """
    Parse a single IPv4 or IPv6 address.

    Args:
        value: Address in textual form

    Returns:
        Parsed address

    Raises:
        ValueError: If value is not an IP address
    """
    if not isinstance(value, str):
        raise ValueError(f"{value!r} is not an IP address string")
    return ipaddress.ip_address(value.strip())


def _address_in(subnet: IPNetwork, value: str, field: str) -> IPAddress:
    address = parse_address(value)
    # ipaddress does not compare families in __contains__
    if address.version != subnet.version or address not in subnet:
        raise ValueError(f"{field} {address} not in network {subnet}")
    return address


def _parse_subnet_range(descriptor: IPRange) -> AddressRange:
    assert descriptor.subnet is not None
    subnet = ipaddress.ip_network(descriptor.subnet.strip(), strict=True)

    # network and broadcast addresses leave nothing to allocate from /31 or /32
    if subnet.prefixlen > subnet.max_prefixlen - 2:
        raise ValueError(f"network {subnet} too small to allocate from")

    if descriptor.range_start:
        start = _address_in(subnet, descriptor.range_start, "rangeStart")
    else:
        start = subnet.network_address + 1

    if descriptor.range_end:
        end = _address_in(subnet, descriptor.range_end, "rangeEnd")
    elif subnet.version == 4:
        end = subnet.broadcast_address - 1
    else:
        end = subnet.broadcast_address

    if descriptor.gateway:
        gateway = _address_in(subnet, descriptor.gateway, "gateway")
    else:
        gateway = subnet.network_address + 1

    return AddressRange(start=start, end=end, subnet=subnet, gateway=gateway)


def _parse_bounded_range(descriptor: IPRange) -> AddressRange:
    if not descriptor.range_start or not descriptor.range_end:
        raise ValueError("range needs a subnet or both rangeStart and rangeEnd")

    gateway = parse_address(descriptor.gateway) if descriptor.gateway else None
    return AddressRange(
        start=parse_address(descriptor.range_start),
        end=parse_address(descriptor.range_end),
        gateway=gateway,
    )


def parse_range(descriptor: IPRange | Mapping) -> AddressRange:
    """
    Normalize one range descriptor into an address range.

    With a subnet, rangeStart defaults to the first address after the network
    address and rangeEnd to the last address before the broadcast address
    (IPv4) or the last address of the subnet (IPv6).

    Args:
        descriptor: Range descriptor, as model or raw mapping

    Returns:
        The normalized address range

    Raises:
        RangeParseError: If the descriptor is malformed
    """
    if not isinstance(descriptor, IPRange):
        descriptor = IPRange.model_validate(descriptor)

    try:
        if descriptor.subnet:
            return _parse_subnet_range(descriptor)
        return _parse_bounded_range(descriptor)
    except ValueError as e:
        logger.debug(f"Rejected range descriptor {descriptor}: {e}")
        raise RangeParseError(descriptor, str(e)) from e


def parse_ranges(descriptors: Iterable[IPRange | Mapping], owner: str = "") -> RangeSet:
    """
    Normalize all range descriptors of a pool.

    Args:
        descriptors: Range descriptors in declaration order
        owner: Name of the pool owning the ranges

    Returns:
        Range set preserving declaration order

    Raises:
        RangeParseError: On the first malformed descriptor
    """
    return RangeSet((parse_range(d) for d in descriptors), owner=owner)

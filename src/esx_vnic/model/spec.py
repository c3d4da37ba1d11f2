"""Wire-level vNIC specification sent to the host.

Produced by :func:`~esx_vnic.utils.spec_builder.build_vnic_spec` and
serialized by :mod:`esx_vnic.client.vnic_ops`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

AddressOperation = Literal["add", "remove"]


@dataclass(frozen=True)
class Ipv6AddressChange:
    """One manual IPv6 address to add to or remove from an interface.

    Attributes:
        address: Lower-cased address without prefix.
        prefix_length: Prefix length parsed from the ``/<prefix>`` suffix.
        operation: ``"add"`` or ``"remove"``.
    """

    address: str
    prefix_length: int
    operation: AddressOperation


@dataclass(frozen=True)
class Ipv6Spec:
    """IPv6 block of the wire spec.

    Attributes:
        dhcp: DHCPv6 flag.
        autoconfig: Autoconfiguration flag.
        address_changes: Address deltas, or ``None`` to omit the field
            entirely (an empty list would ask the host to clear all addresses).
    """

    dhcp: bool = False
    autoconfig: bool = False
    address_changes: tuple[Ipv6AddressChange, ...] | None = None


@dataclass(frozen=True)
class IpSpec:
    dhcp: bool = False
    address: str = ""
    netmask: str = ""
    ipv6: Ipv6Spec | None = None


@dataclass(frozen=True)
class RouteSpec:
    default_gateway: str = ""
    ipv6_default_gateway: str = ""


@dataclass(frozen=True)
class DistributedPortConnection:
    switch_uuid: str
    portgroup_key: str = ""


@dataclass(frozen=True)
class VnicSpec:
    """Full interface specification for add/update calls.

    Attributes:
        ip: IP configuration.
        route: Per-interface default gateways.
        mac: MAC address, empty for host-assigned.
        mtu: MTU, ``None`` for the host default.
        portgroup: Standard portgroup name (empty for distributed attachment).
        distributed_port: Distributed switch connection when no portgroup is set.
        net_stack_key: TCP/IP stack instance key.
    """

    ip: IpSpec
    route: RouteSpec
    mac: str = ""
    mtu: int | None = None
    portgroup: str = ""
    distributed_port: DistributedPortConnection | None = None
    net_stack_key: str = "defaultTcpipStack"

"""Typed models for VMkernel network interface (vNIC) data."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class NetStack(str, enum.Enum):
    """TCP/IP stack instance a vNIC is bound to.

    Values match the host's ``netStackInstanceKey``.  Keys this library does
    not know map to :attr:`OTHER` instead of failing.
    """

    DEFAULT = "defaultTcpipStack"
    VMOTION = "vmotion"
    PROVISIONING = "vSphereProvisioning"
    OTHER = "other"

    @classmethod
    def from_key(cls, key: str | None) -> NetStack:
        """Map a remote stack key to a member; empty means the default stack."""
        if not key:
            return cls.DEFAULT
        try:
            return cls(key)
        except ValueError:
            logger.warning("Unknown netstack key %r; treating as %s", key, cls.OTHER.value)
            return cls.OTHER


class AddressOrigin(str, enum.Enum):
    """How an IPv6 address came to be configured on an interface."""

    MANUAL = "manual"
    DHCP = "dhcp"
    LINKLAYER = "linklayer"
    RANDOM = "random"
    OTHER = "other"

    @classmethod
    def from_value(cls, value: str | None) -> AddressOrigin:
        try:
            return cls(value)
        except ValueError:
            logger.warning("Unknown IPv6 address origin %r", value)
            return cls.OTHER


@dataclass(frozen=True)
class Ipv4Config:
    """IPv4 settings for an interface.

    Attributes:
        dhcp: Obtain the address via DHCP.  When ``True`` the remaining
            fields are ignored.
        address: Static IPv4 address.
        netmask: Dotted-quad subnet mask.
        gateway: Default gateway for the interface's stack.
    """

    dhcp: bool = False
    address: str = ""
    netmask: str = ""
    gateway: str = ""


@dataclass(frozen=True)
class Ipv6Config:
    """IPv6 settings for an interface.

    Attributes:
        dhcp: Enable DHCPv6.
        autoconfig: Enable stateless autoconfiguration (RFC 2462).
        addresses: Manually assigned ``<address>/<prefix>`` literals.
        gateway: IPv6 default gateway.
    """

    dhcp: bool = False
    autoconfig: bool = False
    addresses: tuple[str, ...] = ()
    gateway: str = ""


@dataclass(frozen=True)
class DesiredVnicConfig:
    """Declared state for a single vNIC.

    Attributes:
        host: Managed object ID of the host the interface lives on.
        portgroup: Standard-switch portgroup name.  Mutually exclusive with
            :attr:`distributed_switch_port`.
        distributed_switch_port: UUID of the distributed switch.
        distributed_port_group: Key of the distributed portgroup.
        ipv4: IPv4 block, or ``None`` for no IPv4 configuration.
        ipv6: IPv6 block, or ``None`` to leave IPv6 unconfigured.
        mac: MAC address; empty lets the host assign one.
        mtu: MTU; ``None`` lets the host pick its default.
        net_stack: TCP/IP stack, fixed at creation.
        services: Services (e.g. ``"vmotion"``) bound to this interface.
            Only allowed on :attr:`NetStack.DEFAULT`.
    """

    host: str
    portgroup: str = ""
    distributed_switch_port: str = ""
    distributed_port_group: str = ""
    ipv4: Ipv4Config | None = None
    ipv6: Ipv6Config | None = None
    mac: str = ""
    mtu: int | None = None
    net_stack: NetStack = NetStack.DEFAULT
    services: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Remote state, as reported by the host
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RemoteIpv6Address:
    """An IPv6 address currently configured on a remote interface."""

    address: str
    prefix_length: int
    origin: AddressOrigin = AddressOrigin.MANUAL

    @property
    def cidr(self) -> str:
        return f"{self.address}/{self.prefix_length}"


@dataclass(frozen=True)
class RemoteIpv6Config:
    dhcp: bool = False
    autoconfig: bool = False
    addresses: tuple[RemoteIpv6Address, ...] = ()


@dataclass(frozen=True)
class RemoteIpConfig:
    """Interface IP configuration.  ``address`` is empty when IPv4 is off."""

    dhcp: bool = False
    address: str = ""
    netmask: str = ""
    ipv6: RemoteIpv6Config | None = None


@dataclass(frozen=True)
class RemoteRouteConfig:
    default_gateway: str = ""
    ipv6_default_gateway: str = ""


@dataclass(frozen=True)
class RemoteDistributedPort:
    switch_uuid: str
    portgroup_key: str = ""


@dataclass(frozen=True)
class RemoteVnicSpec:
    """Interface specification as reported by the host.

    ``net_stack_key`` keeps the raw ``netStackInstanceKey`` so that a stack
    mapped to :attr:`NetStack.OTHER` is written back under its real name.
    """

    ip: RemoteIpConfig = field(default_factory=RemoteIpConfig)
    mac: str = ""
    mtu: int | None = None
    distributed_port: RemoteDistributedPort | None = None
    route: RemoteRouteConfig | None = None
    net_stack: NetStack = NetStack.DEFAULT
    net_stack_key: str = ""


@dataclass(frozen=True)
class RemoteVnicState:
    """A vNIC as it exists on the host.

    Attributes:
        device: Host-assigned device name (e.g. ``"vmk1"``); the nic ID.
        key: Host-side key referenced by service bindings.
        portgroup: Standard portgroup name, empty for distributed attachments.
        spec: Current interface specification.
    """

    device: str
    key: str = ""
    portgroup: str = ""
    spec: RemoteVnicSpec = field(default_factory=RemoteVnicSpec)

    def manual_ipv6_addresses(self) -> list[str]:
        """Return ``<address>/<prefix>`` for every manually assigned IPv6 address."""
        ipv6 = self.spec.ip.ipv6
        if ipv6 is None:
            return []
        return [a.cidr for a in ipv6.addresses if a.origin is AddressOrigin.MANUAL]

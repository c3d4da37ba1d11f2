"""Translate a :class:`DesiredVnicConfig` into a wire-level :class:`VnicSpec`.

Validation happens here, before anything is sent to the host.  The IPv6
address list is expressed as deltas against *previous_addresses* (the
manual addresses the host currently has), so only real changes go over the
wire.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from esx_vnic.client.errors import (
    MutuallyExclusiveFieldsError,
    ServicesRequireDefaultStackError,
    UnsupportedNetStackError,
)
from esx_vnic.model.spec import (
    DistributedPortConnection,
    IpSpec,
    Ipv6AddressChange,
    Ipv6Spec,
    RouteSpec,
    VnicSpec,
)
from esx_vnic.model.vnic import DesiredVnicConfig, Ipv4Config, Ipv6Config, NetStack
from esx_vnic.utils.address import canonical_cidr, parse_cidr
from esx_vnic.utils.set_diff import diff_members

logger = logging.getLogger(__name__)


def validate_desired(desired: DesiredVnicConfig) -> None:
    """Check *desired* without needing any remote state.

    Raises:
        MutuallyExclusiveFieldsError: If both ``portgroup`` and
            ``distributed_switch_port`` are set.
        InvalidAddressFormatError: If an IPv6 literal is not
            ``<address>/<prefix>``.
        ServicesRequireDefaultStackError: If services are requested on a
            non-default stack.
    """
    if desired.portgroup and desired.distributed_switch_port:
        raise MutuallyExclusiveFieldsError("portgroup", "distributed_switch_port")

    if desired.ipv6 is not None:
        for literal in desired.ipv6.addresses:
            parse_cidr(literal)

    if desired.services and desired.net_stack is not NetStack.DEFAULT:
        raise ServicesRequireDefaultStackError(
            desired.net_stack.value, NetStack.DEFAULT.value
        )


def build_vnic_spec(
    desired: DesiredVnicConfig,
    previous_addresses: Iterable[str] = (),
    net_stack_key: str = "",
) -> VnicSpec:
    """Build the interface spec for an add or update call.

    Args:
        desired: Target configuration.
        previous_addresses: Manual IPv6 ``<address>/<prefix>`` literals
            currently on the interface.  Empty on create, so every desired
            address is sent as an addition.
        net_stack_key: Raw stack key the interface already has.  Empty on
            create, where the key comes from ``desired.net_stack``.

    Returns:
        The :class:`VnicSpec` to transmit.

    Raises:
        VnicValidationError: See :func:`validate_desired`.
        UnsupportedNetStackError: If no key is given and ``desired.net_stack``
            is :attr:`NetStack.OTHER`.
    """
    validate_desired(desired)
    if not net_stack_key:
        if desired.net_stack is NetStack.OTHER:
            raise UnsupportedNetStackError(desired.net_stack.value)
        net_stack_key = desired.net_stack.value

    ip, default_gateway = _build_ipv4(desired.ipv4)

    ipv6_gateway = ""
    if desired.ipv6 is not None:
        ipv6_spec = _build_ipv6(desired.ipv6, previous_addresses)
        ipv6_gateway = desired.ipv6.gateway
        ip = IpSpec(dhcp=ip.dhcp, address=ip.address, netmask=ip.netmask, ipv6=ipv6_spec)

    distributed_port: DistributedPortConnection | None = None
    if not desired.portgroup and desired.distributed_switch_port:
        distributed_port = DistributedPortConnection(
            switch_uuid=desired.distributed_switch_port,
            portgroup_key=desired.distributed_port_group,
        )

    return VnicSpec(
        ip=ip,
        route=RouteSpec(default_gateway=default_gateway, ipv6_default_gateway=ipv6_gateway),
        mac=desired.mac,
        mtu=desired.mtu,
        portgroup=desired.portgroup,
        distributed_port=distributed_port,
        net_stack_key=net_stack_key,
    )


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------

def _build_ipv4(cfg: Ipv4Config | None) -> tuple[IpSpec, str]:
    """Return the IPv4 part of the spec and the IPv4 default gateway."""
    if cfg is None:
        return IpSpec(), ""
    if cfg.dhcp:
        return IpSpec(dhcp=True), ""
    if cfg.address and cfg.netmask:
        return IpSpec(address=cfg.address, netmask=cfg.netmask), cfg.gateway
    # Neither DHCP nor a complete static address: leave IPv4 unconfigured.
    return IpSpec(), ""


def _build_ipv6(cfg: Ipv6Config, previous_addresses: Iterable[str]) -> Ipv6Spec:
    desired = [canonical_cidr(a) for a in cfg.addresses]
    previous = [canonical_cidr(a) for a in previous_addresses]

    to_remove = diff_members(desired, previous)
    to_add = diff_members(previous, desired)

    changes: tuple[Ipv6AddressChange, ...] | None = None
    if to_remove or to_add:
        items: list[Ipv6AddressChange] = []
        for literal in to_remove:
            address, prefix = parse_cidr(literal)
            items.append(Ipv6AddressChange(address, prefix, "remove"))
        for literal in to_add:
            address, prefix = parse_cidr(literal)
            items.append(Ipv6AddressChange(address, prefix, "add"))
        changes = tuple(items)
        logger.debug("IPv6 address deltas: add=%s remove=%s", to_add, to_remove)

    return Ipv6Spec(dhcp=cfg.dhcp, autoconfig=cfg.autoconfig, address_changes=changes)

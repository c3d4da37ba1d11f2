"""Normalization of remote vNIC state into the desired-configuration shape.

The result is what gets stored and compared on the next reconciliation pass,
so it must reproduce a desired configuration exactly after it has been
applied: same attachment, same IP blocks, same MAC/MTU, manual addresses
only.
"""

from __future__ import annotations

from collections.abc import Iterable

from esx_vnic.model.vnic import (
    DesiredVnicConfig,
    Ipv4Config,
    Ipv6Config,
    NetStack,
    RemoteVnicState,
)


def normalize_remote_vnic(
    host_id: str,
    remote: RemoteVnicState,
    services: Iterable[str] = (),
) -> DesiredVnicConfig:
    """Return the :class:`DesiredVnicConfig` that describes *remote*.

    Rules:

    - Attachment comes from whichever of portgroup / distributed port is
      present on the host.
    - ``ipv4`` is populated only when the host reports a non-empty IPv4
      address.  With DHCP on, only the flag is kept.
    - ``ipv6`` is populated only when the host reports an IPv6 config
      object; addresses are filtered to ``manual`` origin.
    - ``services`` is taken from *services* only on the default stack.

    Args:
        host_id: Host the interface lives on.
        remote: Interface as reported by the host.
        services: Services currently bound to this interface.
    """
    spec = remote.spec

    switch_uuid = ""
    portgroup_key = ""
    if spec.distributed_port is not None:
        switch_uuid = spec.distributed_port.switch_uuid
        portgroup_key = spec.distributed_port.portgroup_key

    ipv4: Ipv4Config | None = None
    if spec.ip.address:
        if spec.ip.dhcp:
            ipv4 = Ipv4Config(dhcp=True)
        else:
            ipv4 = Ipv4Config(
                dhcp=False,
                address=spec.ip.address,
                netmask=spec.ip.netmask,
                gateway=spec.route.default_gateway if spec.route is not None else "",
            )

    ipv6: Ipv6Config | None = None
    if spec.ip.ipv6 is not None:
        ipv6 = Ipv6Config(
            dhcp=spec.ip.ipv6.dhcp,
            autoconfig=spec.ip.ipv6.autoconfig,
            addresses=tuple(a.lower() for a in remote.manual_ipv6_addresses()),
            gateway=(
                spec.route.ipv6_default_gateway.lower() if spec.route is not None else ""
            ),
        )

    bound: tuple[str, ...] = ()
    if spec.net_stack is NetStack.DEFAULT:
        bound = tuple(sorted(set(services)))

    return DesiredVnicConfig(
        host=host_id,
        portgroup=remote.portgroup,
        distributed_switch_port=switch_uuid,
        distributed_port_group=portgroup_key,
        ipv4=ipv4,
        ipv6=ipv6,
        mac=spec.mac,
        mtu=spec.mtu,
        net_stack=spec.net_stack,
        services=bound,
    )

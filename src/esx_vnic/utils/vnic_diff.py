"""Field-level change planner for a single vNIC.

Compares the normalized *current* configuration (see
:func:`~esx_vnic.utils.normalize.normalize_remote_vnic`) against a *desired*
one and lists the reconciliation-relevant fields that differ.  An empty plan
means no update call is needed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from esx_vnic.model.vnic import DesiredVnicConfig, Ipv4Config, Ipv6Config
from esx_vnic.utils.address import canonical_cidr

ChangeKind = Literal[
    "host", "net_stack", "attachment", "ipv4", "ipv6", "mac", "mtu", "services"
]

# Fields that can never be changed in place.
IMMUTABLE_KINDS: frozenset[str] = frozenset({"host", "net_stack"})


@dataclass
class Change:
    """A single field change.

    Attributes:
        kind: Which part of the configuration differs.
        details: ``{"from": ..., "to": ...}`` plus any kind-specific extras.
    """

    kind: ChangeKind
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class VnicPlan:
    """Changes needed to move one vNIC from *current* to *desired*.

    Attributes:
        vnic_id: Composite identifier of the interface.
        changes: Changes in a fixed order (immutable fields first).
    """

    vnic_id: str
    changes: list[Change] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.changes)

    def kinds(self) -> set[str]:
        return {c.kind for c in self.changes}

    def get(self, kind: ChangeKind) -> Change | None:
        for change in self.changes:
            if change.kind == kind:
                return change
        return None


def plan_vnic_changes(
    vnic_id: str,
    current: DesiredVnicConfig,
    desired: DesiredVnicConfig,
) -> VnicPlan:
    """Compute which fields of *desired* differ from *current*.

    Server-assigned fields left unset in *desired* (empty ``mac``, ``None``
    ``mtu``) are not compared.  IPv6 addresses and gateways compare
    case-insensitively; services compare as sets.

    Args:
        vnic_id: Composite identifier, carried into the plan for rendering.
        current: Normalized live configuration.
        desired: Target configuration.

    Returns:
        A :class:`VnicPlan`.
    """
    changes: list[Change] = []

    if desired.host != current.host:
        changes.append(Change("host", {"from": current.host, "to": desired.host}))

    if desired.net_stack is not current.net_stack:
        changes.append(
            Change(
                "net_stack",
                {"from": current.net_stack.value, "to": desired.net_stack.value},
            )
        )

    cur_attach = _attachment(current)
    des_attach = _attachment(desired)
    if cur_attach != des_attach:
        changes.append(Change("attachment", {"from": cur_attach, "to": des_attach}))

    if _ipv4_key(current.ipv4) != _ipv4_key(desired.ipv4):
        changes.append(
            Change(
                "ipv4",
                {"from": _ipv4_key(current.ipv4), "to": _ipv4_key(desired.ipv4)},
            )
        )

    # No ipv6 block in desired leaves the host's IPv6 settings unmanaged.
    if desired.ipv6 is not None and _ipv6_key(current.ipv6) != _ipv6_key(desired.ipv6):
        details: dict[str, Any] = {
            "from": _ipv6_key(current.ipv6),
            "to": _ipv6_key(desired.ipv6),
        }
        if current.ipv6 is not None and desired.ipv6 is not None:
            old = {canonical_cidr(a) for a in current.ipv6.addresses}
            new = {canonical_cidr(a) for a in desired.ipv6.addresses}
            details["add"] = sorted(new - old)
            details["remove"] = sorted(old - new)
        changes.append(Change("ipv6", details))

    if desired.mac and desired.mac.lower() != current.mac.lower():
        changes.append(Change("mac", {"from": current.mac, "to": desired.mac}))

    if desired.mtu is not None and desired.mtu != current.mtu:
        changes.append(Change("mtu", {"from": current.mtu, "to": desired.mtu}))

    cur_services = set(current.services)
    des_services = set(desired.services)
    if cur_services != des_services:
        changes.append(
            Change(
                "services",
                {
                    "from": sorted(cur_services),
                    "to": sorted(des_services),
                    "add": sorted(des_services - cur_services),
                    "remove": sorted(cur_services - des_services),
                },
            )
        )

    return VnicPlan(vnic_id=vnic_id, changes=changes)


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------

def _attachment(cfg: DesiredVnicConfig) -> dict[str, str]:
    if cfg.portgroup:
        return {"portgroup": cfg.portgroup}
    return {
        "distributed_switch_port": cfg.distributed_switch_port,
        "distributed_port_group": cfg.distributed_port_group,
    }


def _ipv4_key(cfg: Ipv4Config | None) -> dict[str, Any] | None:
    """Comparable form of an IPv4 block; static fields are dropped under DHCP."""
    if cfg is None:
        return None
    if cfg.dhcp:
        return {"dhcp": True}
    if not (cfg.address and cfg.netmask):
        # Incomplete static config is sent as "no IPv4" and read back as absent.
        return None
    return {
        "dhcp": False,
        "address": cfg.address,
        "netmask": cfg.netmask,
        "gateway": cfg.gateway,
    }


def _ipv6_key(cfg: Ipv6Config | None) -> dict[str, Any] | None:
    if cfg is None:
        return None
    return {
        "dhcp": cfg.dhcp,
        "autoconfig": cfg.autoconfig,
        "addresses": sorted({canonical_cidr(a) for a in cfg.addresses}),
        "gateway": cfg.gateway.lower(),
    }

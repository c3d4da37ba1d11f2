"""Parser for virtual NIC documents returned by the host.

Remote documents use the host's camelCase names (``spec.ip.ipAddress``,
``spec.ipRouteSpec.ipRouteConfig.defaultGateway`` ...).  Optional objects
are often missing entirely; absent data maps to ``None``/empty values
rather than errors.
"""

from __future__ import annotations

import logging
from typing import Any

from esx_vnic.client.errors import HostParseError
from esx_vnic.model.vnic import (
    AddressOrigin,
    NetStack,
    RemoteDistributedPort,
    RemoteIpConfig,
    RemoteIpv6Address,
    RemoteIpv6Config,
    RemoteRouteConfig,
    RemoteVnicSpec,
    RemoteVnicState,
)

logger = logging.getLogger(__name__)


def parse_vnic_list(document: Any) -> list[RemoteVnicState]:
    """Parse the ``{"vnics": [...]}`` document from the vnics endpoint.

    Args:
        document: Decoded JSON body.

    Returns:
        Interfaces in the order the host reported them.

    Raises:
        HostParseError: If the document is not an object with a ``vnics`` list.
    """
    if not isinstance(document, dict):
        raise HostParseError(f"Expected a JSON object, got {type(document).__name__}")
    items = document.get("vnics") or []
    if not isinstance(items, list):
        raise HostParseError("'vnics' is not a list")
    return [parse_vnic(item) for item in items]


def parse_vnic(item: Any) -> RemoteVnicState:
    """Parse one virtual NIC object.

    Raises:
        HostParseError: If *item* is not an object or lacks ``device``.
    """
    if not isinstance(item, dict) or not item.get("device"):
        raise HostParseError(f"Malformed vnic entry: {item!r}")
    spec = _as_dict(item.get("spec"))
    return RemoteVnicState(
        device=str(item["device"]),
        key=str(item.get("key") or ""),
        portgroup=str(item.get("portgroup") or ""),
        spec=RemoteVnicSpec(
            ip=_parse_ip(_as_dict(spec.get("ip"))),
            mac=str(spec.get("mac") or ""),
            mtu=_parse_int(spec.get("mtu")),
            distributed_port=_parse_distributed_port(spec.get("distributedVirtualPort")),
            route=_parse_route(spec.get("ipRouteSpec")),
            net_stack=NetStack.from_key(spec.get("netStackInstanceKey")),
            net_stack_key=str(spec.get("netStackInstanceKey") or ""),
        ),
    )


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------

def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _parse_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-integer value %r", value)
        return None


def _parse_ip(ip: dict[str, Any]) -> RemoteIpConfig:
    ipv6: RemoteIpv6Config | None = None
    raw_v6 = ip.get("ipV6Config")
    if isinstance(raw_v6, dict):
        addresses: list[RemoteIpv6Address] = []
        for entry in raw_v6.get("ipV6Address") or []:
            addr = _parse_ipv6_address(entry)
            if addr is not None:
                addresses.append(addr)
        ipv6 = RemoteIpv6Config(
            dhcp=bool(raw_v6.get("dhcpV6Enabled")),
            autoconfig=bool(raw_v6.get("autoConfigurationEnabled")),
            addresses=tuple(addresses),
        )
    return RemoteIpConfig(
        dhcp=bool(ip.get("dhcp")),
        address=str(ip.get("ipAddress") or ""),
        netmask=str(ip.get("subnetMask") or ""),
        ipv6=ipv6,
    )


def _parse_ipv6_address(entry: Any) -> RemoteIpv6Address | None:
    if not isinstance(entry, dict) or not entry.get("ipAddress"):
        logger.warning("Skipping malformed IPv6 address entry %r", entry)
        return None
    prefix = _parse_int(entry.get("prefixLength"))
    if prefix is None:
        logger.warning("Skipping IPv6 address %r without prefix", entry.get("ipAddress"))
        return None
    return RemoteIpv6Address(
        address=str(entry["ipAddress"]).lower(),
        prefix_length=prefix,
        origin=AddressOrigin.from_value(entry.get("origin")),
    )


def _parse_distributed_port(value: Any) -> RemoteDistributedPort | None:
    if not isinstance(value, dict) or not value.get("switchUuid"):
        return None
    return RemoteDistributedPort(
        switch_uuid=str(value["switchUuid"]),
        portgroup_key=str(value.get("portgroupKey") or ""),
    )


def _parse_route(value: Any) -> RemoteRouteConfig | None:
    if not isinstance(value, dict):
        return None
    config = _as_dict(value.get("ipRouteConfig"))
    return RemoteRouteConfig(
        default_gateway=str(config.get("defaultGateway") or ""),
        ipv6_default_gateway=str(config.get("ipV6DefaultGateway") or ""),
    )

"""Low-level virtual NIC write operations for the host management API.

Each function translates a strongly-typed request into the JSON payload the
host expects and delegates to :class:`~esx_vnic.client.http.HostHTTP` for
dispatch.

Payloads:

    ADD: POST /api/hosts/<host>/network/vnics
        {"portgroup": "<name or empty>", "spec": {...}}
        → {"device": "vmk1"}

    UPDATE: PUT /api/hosts/<host>/network/vnics/<device>
        {"spec": {...}}

    REMOVE: DELETE /api/hosts/<host>/network/vnics/<device>

Spec fields (host naming):
    ip.dhcp / ip.ipAddress / ip.subnetMask
    ip.ipV6Config.{dhcpV6Enabled, autoConfigurationEnabled, ipV6Address[]}
    ipRouteSpec.ipRouteConfig.{defaultGateway, ipV6DefaultGateway}
    mac, mtu, portgroup, distributedVirtualPort.{switchUuid, portgroupKey}
    netStackInstanceKey
"""

from __future__ import annotations

import logging
from typing import Any

from esx_vnic.client.errors import HostParseError
from esx_vnic.client.http import HostHTTP
from esx_vnic.model.spec import VnicSpec
from esx_vnic.model.vnic import RemoteVnicState
from esx_vnic.parser.vnic import parse_vnic_list
from esx_vnic.vendor.vsphere.endpoints import VNIC, VNICS

logger = logging.getLogger(__name__)

# Origin attached to every address this library sends.
_MANUAL_ORIGIN: str = "manual"


def vnic_list(http: HostHTTP, host_id: str) -> list[RemoteVnicState]:
    """Fetch all virtual NICs of *host_id*, in host order."""
    document = http.get_json(VNICS.format(host_id=host_id))
    return parse_vnic_list(document)


def vnic_add(http: HostHTTP, host_id: str, portgroup: str, spec: VnicSpec) -> str:
    """Add a virtual NIC and return the device name the host assigned.

    Args:
        http: HTTP client.
        host_id: Target host.
        portgroup: Standard portgroup name; empty for distributed attachment.
        spec: Interface specification.

    Raises:
        HostParseError: If the host does not report the new device name.
    """
    payload = {"portgroup": portgroup, "spec": build_spec_payload(spec)}
    logger.debug("Adding vnic on %s: %s", host_id, payload)
    result = http.post_json(VNICS.format(host_id=host_id), payload)
    if not isinstance(result, dict) or not result.get("device"):
        raise HostParseError(f"Add vnic response carries no device: {result!r}")
    return str(result["device"])


def vnic_update(http: HostHTTP, host_id: str, nic_id: str, spec: VnicSpec) -> None:
    """Replace the specification of an existing virtual NIC."""
    payload = {"spec": build_spec_payload(spec)}
    logger.debug("Updating vnic %s on %s: %s", nic_id, host_id, payload)
    http.put_json(VNIC.format(host_id=host_id, nic_id=nic_id), payload)


def vnic_remove(http: HostHTTP, host_id: str, nic_id: str) -> None:
    """Remove a virtual NIC from the host."""
    logger.debug("Removing vnic %s on %s", nic_id, host_id)
    http.delete(VNIC.format(host_id=host_id, nic_id=nic_id))


def build_spec_payload(spec: VnicSpec) -> dict[str, Any]:
    """Serialize *spec* into the host's JSON field names.

    Empty ``mac`` and unset ``mtu`` are omitted so the host assigns them.
    The IPv6 address list is omitted when there are no address changes.
    """
    ip: dict[str, Any] = {"dhcp": spec.ip.dhcp}
    if spec.ip.address:
        ip["ipAddress"] = spec.ip.address
        ip["subnetMask"] = spec.ip.netmask
    if spec.ip.ipv6 is not None:
        v6: dict[str, Any] = {
            "dhcpV6Enabled": spec.ip.ipv6.dhcp,
            "autoConfigurationEnabled": spec.ip.ipv6.autoconfig,
        }
        if spec.ip.ipv6.address_changes is not None:
            v6["ipV6Address"] = [
                {
                    "ipAddress": change.address,
                    "prefixLength": change.prefix_length,
                    "origin": _MANUAL_ORIGIN,
                    "operation": change.operation,
                }
                for change in spec.ip.ipv6.address_changes
            ]
        ip["ipV6Config"] = v6

    payload: dict[str, Any] = {
        "ip": ip,
        "ipRouteSpec": {
            "ipRouteConfig": {
                "defaultGateway": spec.route.default_gateway,
                "ipV6DefaultGateway": spec.route.ipv6_default_gateway,
            }
        },
        "portgroup": spec.portgroup,
        "netStackInstanceKey": spec.net_stack_key,
    }
    if spec.mac:
        payload["mac"] = spec.mac
    if spec.mtu is not None:
        payload["mtu"] = spec.mtu
    if spec.distributed_port is not None:
        payload["distributedVirtualPort"] = {
            "switchUuid": spec.distributed_port.switch_uuid,
            "portgroupKey": spec.distributed_port.portgroup_key,
        }
    return payload

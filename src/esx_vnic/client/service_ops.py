"""Low-level service binding operations for the host's virtual NIC manager.

Payloads:

    SELECT: POST /api/hosts/<host>/network/vnic-manager/select
        {"nicType": "vmotion", "device": "vmk1"}

    DESELECT: POST /api/hosts/<host>/network/vnic-manager/deselect
        {"nicType": "vmotion", "device": "vmk1"}

    INFO: GET /api/hosts/<host>/network/vnic-manager
        → {"netConfig": [{"nicType", "candidateVnic", "selectedVnic"}, ...]}
"""

from __future__ import annotations

import logging

from esx_vnic.client.http import HostHTTP
from esx_vnic.parser.services import parse_service_bindings
from esx_vnic.vendor.vsphere.endpoints import VNIC_DESELECT, VNIC_MANAGER, VNIC_SELECT

logger = logging.getLogger(__name__)


def service_select(http: HostHTTP, host_id: str, service: str, nic_id: str) -> None:
    """Bind *service* to the interface *nic_id*."""
    logger.debug("Selecting %s for %s on %s", service, nic_id, host_id)
    http.post_json(
        VNIC_SELECT.format(host_id=host_id),
        {"nicType": service, "device": nic_id},
    )


def service_deselect(http: HostHTTP, host_id: str, service: str, nic_id: str) -> None:
    """Unbind *service* from the interface *nic_id*."""
    logger.debug("Deselecting %s for %s on %s", service, nic_id, host_id)
    http.post_json(
        VNIC_DESELECT.format(host_id=host_id),
        {"nicType": service, "device": nic_id},
    )


def service_bindings(http: HostHTTP, host_id: str) -> dict[str, set[str]]:
    """Return a mapping of service name to bound device names."""
    document = http.get_json(VNIC_MANAGER.format(host_id=host_id))
    return parse_service_bindings(document)

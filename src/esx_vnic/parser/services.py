"""Parser for the host's virtual NIC manager info (service bindings)."""

from __future__ import annotations

import logging
from typing import Any

from esx_vnic.client.errors import HostParseError
from esx_vnic.vendor.vsphere.mappings import KNOWN_SERVICES

logger = logging.getLogger(__name__)


def parse_service_bindings(document: Any) -> dict[str, set[str]]:
    """Map each service (``nicType``) to the device names bound to it.

    Selected vnics are reported by key; keys are resolved to device names via
    the service's ``candidateVnic`` list.  Selected keys with no matching
    candidate are dropped.

    Example document::

        {"netConfig": [
            {"nicType": "vmotion",
             "candidateVnic": [{"device": "vmk1", "key": "key-vim.host.VirtualNic-vmk1"}],
             "selectedVnic": ["key-vim.host.VirtualNic-vmk1"]}
        ]}

    Raises:
        HostParseError: If the document is not an object.
    """
    if not isinstance(document, dict):
        raise HostParseError(f"Expected a JSON object, got {type(document).__name__}")

    bindings: dict[str, set[str]] = {}
    for net_config in document.get("netConfig") or []:
        if not isinstance(net_config, dict) or not net_config.get("nicType"):
            logger.warning("Skipping malformed netConfig entry %r", net_config)
            continue
        service = str(net_config["nicType"])
        if service not in KNOWN_SERVICES:
            logger.debug("Unrecognised service type %r", service)

        device_by_key: dict[str, str] = {}
        for candidate in net_config.get("candidateVnic") or []:
            if isinstance(candidate, dict) and candidate.get("key"):
                device_by_key[str(candidate["key"])] = str(candidate.get("device") or "")

        devices: set[str] = set()
        for key in net_config.get("selectedVnic") or []:
            device = device_by_key.get(str(key))
            if device:
                devices.add(device)
        bindings[service] = devices
    return bindings

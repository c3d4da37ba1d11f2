"""Service-to-interface binding reconciliation."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from esx_vnic.client.errors import GatewayError, ServiceBindingError
from esx_vnic.client.gateway import HostHandle, HostNetworkGateway
from esx_vnic.utils.set_diff import diff_members

logger = logging.getLogger(__name__)


def reconcile_services(
    gateway: HostNetworkGateway,
    host: HostHandle,
    nic_id: str,
    old: Iterable[str],
    new: Iterable[str],
    *,
    vnic_id: str = "",
) -> tuple[list[str], list[str]]:
    """Select services added in *new* and deselect those dropped from *old*.

    All selections run before all deselections, each group in input order.
    The first failure aborts; bindings already changed stay changed.

    Args:
        gateway: Host network gateway.
        host: Host handle from :meth:`HostNetworkGateway.find_host`.
        nic_id: Device name of the interface (e.g. ``"vmk1"``).
        old: Services currently bound.
        new: Services that should be bound.
        vnic_id: Composite identifier used in error messages.

    Returns:
        ``(selected, deselected)`` service name lists.

    Raises:
        ServiceBindingError: If the gateway rejects a select or deselect.
    """
    old_list = list(old)
    new_list = list(new)
    to_add = diff_members(old_list, new_list)
    to_remove = diff_members(new_list, old_list)
    label = vnic_id or f"{host.host_id}/{nic_id}"

    for service in to_add:
        try:
            gateway.select_service(host, service, nic_id)
        except GatewayError as exc:
            raise ServiceBindingError(
                phase="select", vnic_id=label, cause=exc, service=service
            ) from exc
        logger.info("Selected service %s on %s", service, label)

    for service in to_remove:
        try:
            gateway.deselect_service(host, service, nic_id)
        except GatewayError as exc:
            raise ServiceBindingError(
                phase="deselect", vnic_id=label, cause=exc, service=service
            ) from exc
        logger.info("Deselected service %s on %s", service, label)

    return to_add, to_remove


def services_bound_to(bindings: dict[str, set[str]], nic_id: str) -> list[str]:
    """Return the sorted service names whose bound devices include *nic_id*."""
    return sorted(service for service, devices in bindings.items() if nic_id in devices)

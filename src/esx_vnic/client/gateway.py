"""Host network gateway: the capability the reconciler drives.

:class:`HostNetworkGateway` is the interface; :class:`HTTPHostNetworkGateway`
implements it over the host management JSON API.  Any object with the same
methods can be injected into :class:`~esx_vnic.reconciler.VnicReconciler`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from esx_vnic.client.errors import HostNotFoundError, HostResponseError
from esx_vnic.client.http import HostHTTP
from esx_vnic.client.service_ops import service_bindings, service_deselect, service_select
from esx_vnic.client.vnic_ops import vnic_add, vnic_list, vnic_remove, vnic_update
from esx_vnic.model.spec import VnicSpec
from esx_vnic.model.vnic import RemoteVnicState
from esx_vnic.settings import GatewaySettings
from esx_vnic.vendor.vsphere.endpoints import HOST

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HostHandle:
    """Reference to a host that :meth:`HostNetworkGateway.find_host` resolved.

    Attributes:
        host_id: Managed object ID of the host.
        name: Display name reported by the host, if any.
    """

    host_id: str
    name: str = ""


class HostNetworkGateway(Protocol):
    """Operations on a host's virtual NICs and service bindings.

    Implementations raise :class:`~esx_vnic.client.errors.GatewayError`
    subclasses on failure, and :class:`HostNotFoundError` from
    :meth:`find_host` when the host does not exist.
    """

    def find_host(self, host_id: str) -> HostHandle: ...

    def fetch_interfaces(self, host: HostHandle) -> list[RemoteVnicState]: ...

    def add_interface(self, host: HostHandle, portgroup: str, spec: VnicSpec) -> str: ...

    def update_interface(self, host: HostHandle, nic_id: str, spec: VnicSpec) -> None: ...

    def remove_interface(self, host: HostHandle, nic_id: str) -> None: ...

    def select_service(self, host: HostHandle, service: str, nic_id: str) -> None: ...

    def deselect_service(self, host: HostHandle, service: str, nic_id: str) -> None: ...

    def list_service_bindings(self, host: HostHandle) -> dict[str, set[str]]: ...


class HTTPHostNetworkGateway:
    """:class:`HostNetworkGateway` over the host management JSON API.

    Args:
        http: Configured HTTP client.  The gateway closes it on :meth:`close`.
    """

    def __init__(self, http: HostHTTP) -> None:
        self._http = http

    @classmethod
    def from_settings(cls, settings: GatewaySettings) -> HTTPHostNetworkGateway:
        return cls(
            HostHTTP(
                base_url=settings.base_url,
                timeout_s=settings.timeout_s,
                verify_tls=settings.verify_tls,
                session_token=settings.session_token,
            )
        )

    # ------------------------------------------------------------------
    # HostNetworkGateway
    # ------------------------------------------------------------------

    def find_host(self, host_id: str) -> HostHandle:
        """Resolve *host_id*.

        Raises:
            HostNotFoundError: If the endpoint answers 404.
        """
        try:
            document = self._http.get_json(HOST.format(host_id=host_id))
        except HostResponseError as exc:
            if exc.status_code == 404:
                raise HostNotFoundError(host_id) from exc
            raise
        name = document.get("name", "") if isinstance(document, dict) else ""
        return HostHandle(host_id=host_id, name=str(name or ""))

    def fetch_interfaces(self, host: HostHandle) -> list[RemoteVnicState]:
        return vnic_list(self._http, host.host_id)

    def add_interface(self, host: HostHandle, portgroup: str, spec: VnicSpec) -> str:
        return vnic_add(self._http, host.host_id, portgroup, spec)

    def update_interface(self, host: HostHandle, nic_id: str, spec: VnicSpec) -> None:
        vnic_update(self._http, host.host_id, nic_id, spec)

    def remove_interface(self, host: HostHandle, nic_id: str) -> None:
        vnic_remove(self._http, host.host_id, nic_id)

    def select_service(self, host: HostHandle, service: str, nic_id: str) -> None:
        service_select(self._http, host.host_id, service, nic_id)

    def deselect_service(self, host: HostHandle, service: str, nic_id: str) -> None:
        service_deselect(self._http, host.host_id, service, nic_id)

    def list_service_bindings(self, host: HostHandle) -> dict[str, set[str]]:
        return service_bindings(self._http, host.host_id)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._http.close()

    def __enter__(self) -> HTTPHostNetworkGateway:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

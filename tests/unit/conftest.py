"""Shared fixtures: an in-memory host that applies wire specs like a real one."""

from __future__ import annotations

from dataclasses import replace

import pytest

from esx_vnic.client.errors import GatewayError, HostNotFoundError, HostResponseError
from esx_vnic.client.gateway import HostHandle
from esx_vnic.model.spec import VnicSpec
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

DHCP_LEASE = ("10.0.0.77", "255.255.255.0")
DEFAULT_MTU = 1500


class FakeHostNetworkGateway:
    """In-memory :class:`HostNetworkGateway`.

    Every call is recorded in :attr:`calls` as a tuple starting with the
    operation name.  Set ``fail[<operation>]`` to an exception (or a
    ``{service: exception}`` dict for select/deselect) to make that call fail.
    """

    def __init__(self, hosts: tuple[str, ...] = ("host-42",)) -> None:
        self.vnics: dict[str, list[RemoteVnicState]] = {h: [] for h in hosts}
        self.bindings: dict[str, dict[str, set[str]]] = {h: {} for h in hosts}
        self.calls: list[tuple[object, ...]] = []
        self.fail: dict[str, object] = {}
        self._counter = 0

    # ------------------------------------------------------------------
    # HostNetworkGateway
    # ------------------------------------------------------------------

    def find_host(self, host_id: str) -> HostHandle:
        self.calls.append(("find_host", host_id))
        self._maybe_fail("find_host")
        if host_id not in self.vnics:
            raise HostNotFoundError(host_id)
        return HostHandle(host_id=host_id, name=f"{host_id}.example")

    def fetch_interfaces(self, host: HostHandle) -> list[RemoteVnicState]:
        self.calls.append(("fetch_interfaces", host.host_id))
        self._maybe_fail("fetch_interfaces")
        return list(self.vnics[host.host_id])

    def add_interface(self, host: HostHandle, portgroup: str, spec: VnicSpec) -> str:
        self.calls.append(("add_interface", host.host_id, portgroup, spec))
        self._maybe_fail("add_interface")
        self._counter += 1
        device = f"vmk{self._counter}"
        base = RemoteVnicState(
            device=device,
            key=f"key-vim.host.VirtualNic-{device}",
            spec=RemoteVnicSpec(mac=f"00:50:56:00:00:{self._counter:02x}", mtu=DEFAULT_MTU),
        )
        self.vnics[host.host_id].append(_apply(base, portgroup, spec, created=True))
        return device

    def update_interface(self, host: HostHandle, nic_id: str, spec: VnicSpec) -> None:
        self.calls.append(("update_interface", host.host_id, nic_id, spec))
        self._maybe_fail("update_interface")
        vnics = self.vnics[host.host_id]
        for idx, vnic in enumerate(vnics):
            if vnic.device == nic_id:
                vnics[idx] = _apply(vnic, spec.portgroup, spec, created=False)
                return
        raise HostResponseError(404, f"/vnics/{nic_id}", "not found")

    def remove_interface(self, host: HostHandle, nic_id: str) -> None:
        self.calls.append(("remove_interface", host.host_id, nic_id))
        self._maybe_fail("remove_interface")
        vnics = self.vnics[host.host_id]
        remaining = [v for v in vnics if v.device != nic_id]
        if len(remaining) == len(vnics):
            raise HostResponseError(404, f"/vnics/{nic_id}", "not found")
        self.vnics[host.host_id] = remaining
        for devices in self.bindings[host.host_id].values():
            devices.discard(nic_id)

    def select_service(self, host: HostHandle, service: str, nic_id: str) -> None:
        self.calls.append(("select_service", service, nic_id))
        self._maybe_fail("select_service", service)
        self.bindings[host.host_id].setdefault(service, set()).add(nic_id)

    def deselect_service(self, host: HostHandle, service: str, nic_id: str) -> None:
        self.calls.append(("deselect_service", service, nic_id))
        self._maybe_fail("deselect_service", service)
        self.bindings[host.host_id].setdefault(service, set()).discard(nic_id)

    def list_service_bindings(self, host: HostHandle) -> dict[str, set[str]]:
        self.calls.append(("list_service_bindings", host.host_id))
        self._maybe_fail("list_service_bindings")
        return {s: set(d) for s, d in self.bindings[host.host_id].items()}

    # ------------------------------------------------------------------
    # Test helpers
    # ------------------------------------------------------------------

    def calls_named(self, name: str) -> list[tuple[object, ...]]:
        return [c for c in self.calls if c[0] == name]

    def vnic(self, host_id: str, device: str) -> RemoteVnicState:
        return next(v for v in self.vnics[host_id] if v.device == device)

    def _maybe_fail(self, operation: str, service: str | None = None) -> None:
        failure = self.fail.get(operation)
        if isinstance(failure, dict):
            failure = failure.get(service)
        if isinstance(failure, Exception):
            raise failure


def _apply(
    vnic: RemoteVnicState,
    portgroup: str,
    spec: VnicSpec,
    *,
    created: bool,
) -> RemoteVnicState:
    """Apply *spec* the way a host would and return the new interface state."""
    address, netmask = spec.ip.address, spec.ip.netmask
    if spec.ip.dhcp:
        address, netmask = DHCP_LEASE

    ipv6 = vnic.spec.ip.ipv6
    if spec.ip.ipv6 is not None:
        existing = list(ipv6.addresses) if ipv6 is not None else [
            RemoteIpv6Address("fe80::250:56ff:fe63:a0ef", 64, AddressOrigin.LINKLAYER)
        ]
        for change in spec.ip.ipv6.address_changes or ():
            entry = RemoteIpv6Address(change.address, change.prefix_length, AddressOrigin.MANUAL)
            if change.operation == "add":
                existing.append(entry)
            else:
                existing = [a for a in existing if a != entry]
        ipv6 = RemoteIpv6Config(
            dhcp=spec.ip.ipv6.dhcp,
            autoconfig=spec.ip.ipv6.autoconfig,
            addresses=tuple(existing),
        )

    distributed = None
    if spec.distributed_port is not None:
        distributed = RemoteDistributedPort(
            switch_uuid=spec.distributed_port.switch_uuid,
            portgroup_key=spec.distributed_port.portgroup_key,
        )

    return replace(
        vnic,
        portgroup=portgroup,
        spec=RemoteVnicSpec(
            ip=RemoteIpConfig(dhcp=spec.ip.dhcp, address=address, netmask=netmask, ipv6=ipv6),
            mac=spec.mac or vnic.spec.mac,
            mtu=spec.mtu if spec.mtu is not None else vnic.spec.mtu,
            distributed_port=distributed,
            route=RemoteRouteConfig(
                default_gateway=spec.route.default_gateway,
                ipv6_default_gateway=spec.route.ipv6_default_gateway,
            ),
            net_stack=(
                NetStack.from_key(spec.net_stack_key) if created else vnic.spec.net_stack
            ),
            # The stack is fixed at creation; updates cannot move the interface.
            net_stack_key=spec.net_stack_key if created else vnic.spec.net_stack_key,
        ),
    )


@pytest.fixture
def gateway() -> FakeHostNetworkGateway:
    return FakeHostNetworkGateway()


@pytest.fixture
def gateway_error() -> GatewayError:
    return HostResponseError(500, "https://vc.example/api", "internal error")

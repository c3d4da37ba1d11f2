"""vNIC reconciler: create/read/update/delete/import against a host gateway."""

from __future__ import annotations

import logging

from esx_vnic.client.errors import (
    GatewayError,
    HostNotFoundError,
    ImmutableFieldError,
    VnicCreateError,
    VnicDeleteError,
    VnicNotFoundError,
    VnicReadError,
    VnicUpdateError,
)
from esx_vnic.client.gateway import HostHandle, HostNetworkGateway
from esx_vnic.model.identifier import VnicId, check_host_id
from esx_vnic.model.resource import VnicResource
from esx_vnic.model.vnic import DesiredVnicConfig, NetStack, RemoteVnicState
from esx_vnic.utils.normalize import normalize_remote_vnic
from esx_vnic.utils.services import reconcile_services, services_bound_to
from esx_vnic.utils.spec_builder import build_vnic_spec, validate_desired
from esx_vnic.utils.vnic_diff import IMMUTABLE_KINDS, VnicPlan, plan_vnic_changes

logger = logging.getLogger(__name__)


class VnicReconciler:
    """Bring a host's VMkernel interface in line with a desired configuration.

    Nothing is cached between calls: every operation re-fetches the host's
    interface list.  Multi-step operations (add then bind services, update
    then rebind) are not rolled back on a later failure; running the same
    operation again converges the remainder.

    Args:
        gateway: Host network gateway used for every remote call.
    """

    def __init__(self, gateway: HostNetworkGateway) -> None:
        self._gateway = gateway

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create(self, desired: DesiredVnicConfig) -> VnicResource:
        """Add a new interface for *desired* and return its read-back state.

        Raises:
            VnicValidationError: If *desired* is invalid (nothing is sent).
            VnicCreateError: If the host cannot be found or refuses the add.
            ServiceBindingError: If binding a service fails after the
                interface was created.  ``exc.vnic_id`` names the new
                interface; it is left in place.
        """
        spec = build_vnic_spec(desired)
        check_host_id(desired.host)

        try:
            host = self._gateway.find_host(desired.host)
            nic_id = self._gateway.add_interface(host, desired.portgroup, spec)
        except GatewayError as exc:
            raise VnicCreateError(phase="add", vnic_id=desired.host, cause=exc) from exc

        vnic_id = VnicId(host_id=desired.host, nic_id=nic_id)
        logger.info("Created vnic %s", vnic_id)

        if desired.services:
            reconcile_services(
                self._gateway, host, nic_id, [], desired.services, vnic_id=str(vnic_id)
            )

        return self.read(vnic_id)

    def read(self, vnic_id: VnicId | str) -> VnicResource:
        """Return the normalized live state of *vnic_id*.

        A missing host or interface is not an error: the empty
        :class:`VnicResource` is returned so callers can drop the record.

        Raises:
            VnicReadError: If the host cannot be queried.
        """
        vid = _as_vnic_id(vnic_id)
        try:
            found = self._fetch(vid)
        except GatewayError as exc:
            raise VnicReadError(phase="read", vnic_id=str(vid), cause=exc) from exc

        if found is None:
            logger.debug("Nic (%s) not found. Probably deleted.", vid.nic_id)
            return VnicResource()

        host, remote = found
        try:
            config = self._normalize(host, vid, remote)
        except GatewayError as exc:
            raise VnicReadError(phase="read", vnic_id=str(vid), cause=exc) from exc
        return VnicResource(id=vid, config=config)

    def plan(self, vnic_id: VnicId | str, desired: DesiredVnicConfig) -> VnicPlan:
        """Compute the changes an :meth:`update` would make, without applying them.

        Raises:
            VnicNotFoundError: If the interface does not exist.
            VnicReadError: If the host cannot be queried.
        """
        vid = _as_vnic_id(vnic_id)
        current = self.read(vid)
        if current.config is None:
            raise VnicNotFoundError(str(vid))
        return plan_vnic_changes(str(vid), current.config, desired)

    def update(self, vnic_id: VnicId | str, desired: DesiredVnicConfig) -> VnicResource:
        """Apply the differences between live state and *desired*.

        The current manual IPv6 addresses are used as the diff baseline so
        only real additions/removals are sent.  When no
        reconciliation-relevant field differs, no update call is made.

        Raises:
            VnicNotFoundError: If the interface does not exist.
            ImmutableFieldError: If ``host`` or ``net_stack`` would change.
            VnicValidationError: If *desired* is otherwise invalid.
            VnicUpdateError: If the host refuses the update.
            ServiceBindingError: If a service (de)selection fails.
        """
        vid = _as_vnic_id(vnic_id)
        validate_desired(desired)

        try:
            found = self._fetch(vid)
            if found is None:
                raise VnicNotFoundError(str(vid))
            host, remote = found
            current = self._normalize(host, vid, remote)
        except GatewayError as exc:
            raise VnicUpdateError(phase="update", vnic_id=str(vid), cause=exc) from exc

        plan = plan_vnic_changes(str(vid), current, desired)
        for change in plan.changes:
            if change.kind in IMMUTABLE_KINDS:
                raise ImmutableFieldError(
                    change.kind, change.details["from"], change.details["to"]
                )

        if not plan.changed:
            logger.debug("vnic %s already matches desired state", vid)
            return VnicResource(id=vid, config=current)

        # The IPv6 delta and the stack key both depend on the live interface.
        spec = build_vnic_spec(
            desired,
            previous_addresses=remote.manual_ipv6_addresses(),
            net_stack_key=remote.spec.net_stack_key,
        )
        try:
            self._gateway.update_interface(host, vid.nic_id, spec)
        except GatewayError as exc:
            raise VnicUpdateError(phase="update", vnic_id=str(vid), cause=exc) from exc
        logger.info("Updated vnic %s (%s)", vid, ", ".join(c.kind for c in plan.changes))

        if plan.get("services") is not None:
            reconcile_services(
                self._gateway,
                host,
                vid.nic_id,
                current.services,
                desired.services,
                vnic_id=str(vid),
            )

        return self.read(vid)

    def delete(self, vnic_id: VnicId | str) -> VnicResource:
        """Remove the interface and return the (empty) read-back state.

        A host or interface that is already gone counts as deleted, so a
        retried delete returns the tombstone instead of failing.

        Raises:
            VnicDeleteError: If the host cannot be queried or refuses the removal.
        """
        vid = _as_vnic_id(vnic_id)
        try:
            found = self._fetch(vid)
            if found is None:
                logger.debug("vnic %s not found; nothing to delete", vid)
            else:
                host, _ = found
                self._gateway.remove_interface(host, vid.nic_id)
                logger.info("Removed vnic %s", vid)
        except GatewayError as exc:
            raise VnicDeleteError(phase="remove", vnic_id=str(vid), cause=exc) from exc
        return self.read(vid)

    def import_vnic(self, vnic_id: VnicId | str) -> VnicResource:
        """Seed a record for an existing interface; call :meth:`read` next."""
        vid = _as_vnic_id(vnic_id)
        return VnicResource(id=vid, config=DesiredVnicConfig(host=vid.host_id))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _fetch(self, vid: VnicId) -> tuple[HostHandle, RemoteVnicState] | None:
        """Return the host and matching interface, or ``None`` if either is absent."""
        try:
            host = self._gateway.find_host(vid.host_id)
        except HostNotFoundError:
            logger.debug("Host %s not found", vid.host_id)
            return None
        for vnic in self._gateway.fetch_interfaces(host):
            logger.debug("Evaluating nic: %s", vnic.device)
            if vnic.device == vid.nic_id:
                return host, vnic
        return None

    def _normalize(
        self, host: HostHandle, vid: VnicId, remote: RemoteVnicState
    ) -> DesiredVnicConfig:
        services: list[str] = []
        if remote.spec.net_stack is NetStack.DEFAULT:
            bindings = self._gateway.list_service_bindings(host)
            services = services_bound_to(bindings, vid.nic_id)
        return normalize_remote_vnic(vid.host_id, remote, services)


def _as_vnic_id(value: VnicId | str) -> VnicId:
    return value if isinstance(value, VnicId) else VnicId.parse(value)

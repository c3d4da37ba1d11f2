"""Custom exceptions for esx-vnic."""

from __future__ import annotations

from dataclasses import dataclass


class VnicError(Exception):
    """Base exception for all esx-vnic errors."""


# ---------------------------------------------------------------------------
# Validation: raised before any remote call is made
# ---------------------------------------------------------------------------

class VnicValidationError(VnicError):
    """Raised when a desired configuration cannot be turned into a wire spec."""


class MutuallyExclusiveFieldsError(VnicValidationError):
    """Raised when two fields that cannot be combined are both set."""

    def __init__(self, first: str, second: str) -> None:
        self.fields = (first, second)
        super().__init__(f"{first} and {second} settings are mutually exclusive")


class ServicesRequireDefaultStackError(VnicValidationError):
    """Raised when services are requested on a non-default TCP/IP stack."""

    def __init__(self, net_stack: str, default_stack: str) -> None:
        self.net_stack = net_stack
        super().__init__(
            f"services can only be enabled when using the {default_stack!r} "
            f"netstack (got {net_stack!r})"
        )


class UnsupportedNetStackError(VnicValidationError):
    """Raised when a new interface is requested on a stack with no known key."""

    def __init__(self, net_stack: str) -> None:
        self.net_stack = net_stack
        super().__init__(f"cannot create an interface on netstack {net_stack!r}")


class InvalidAddressFormatError(VnicValidationError):
    """Raised when an address literal is not ``<address>/<prefix>``."""

    def __init__(self, literal: str) -> None:
        self.literal = literal
        super().__init__(f"error while parsing IPv6 address {literal!r}")


class InvalidIdentifierError(VnicValidationError):
    """Raised when a composite ``<host>_<nic>`` identifier cannot be formed or split."""


class ImmutableFieldError(VnicValidationError):
    """Raised when an update tries to change a field fixed at creation."""

    def __init__(self, field_name: str, current: object, desired: object) -> None:
        self.field_name = field_name
        super().__init__(
            f"{field_name} cannot be changed after creation "
            f"(current={current!r}, desired={desired!r})"
        )


# ---------------------------------------------------------------------------
# Gateway: raised by HostNetworkGateway implementations
# ---------------------------------------------------------------------------

class GatewayError(VnicError):
    """Base class for failures reported by a host network gateway."""


class HostRequestError(GatewayError):
    """Raised when a network-level error occurs (connection refused, timeout, etc.)."""

    def __init__(self, url: str, cause: Exception) -> None:
        self.url = url
        self.cause = cause
        super().__init__(f"Request to {url!r} failed: {cause}")


class HostResponseError(GatewayError):
    """Raised when the management endpoint returns a non-2xx HTTP status code."""

    def __init__(self, status_code: int, url: str, message: str = "") -> None:
        self.status_code = status_code
        self.url = url
        self.message = message
        detail = f": {message}" if message else ""
        super().__init__(f"HTTP {status_code} for {url!r}{detail}")


class HostParseError(GatewayError):
    """Raised when a response body is not the JSON document we expect."""


class HostNotFoundError(GatewayError):
    """Raised when the requested host does not exist."""

    def __init__(self, host_id: str) -> None:
        self.host_id = host_id
        super().__init__(f"host {host_id!r} not found")


# ---------------------------------------------------------------------------
# Reconciler
# ---------------------------------------------------------------------------

class VnicNotFoundError(VnicError):
    """Raised when an interface that must exist (e.g. for update) is absent."""

    def __init__(self, vnic_id: str) -> None:
        self.vnic_id = vnic_id
        super().__init__(f"vNic interface {vnic_id!r} not found")


@dataclass
class RemoteOperationError(VnicError):
    """A gateway call failed while the reconciler was in *phase*.

    Attributes:
        phase: Operation being performed (``"add"``, ``"read"``, ``"update"``,
            ``"remove"``, ``"select"``, ``"deselect"``).
        vnic_id: Composite identifier of the interface, or the host ID when no
            interface has been created yet.
        cause: The underlying gateway exception.
    """

    phase: str
    vnic_id: str
    cause: Exception

    def __post_init__(self) -> None:
        super().__init__(f"{self.phase} failed for {self.vnic_id!r}: {self.cause}")


@dataclass
class VnicCreateError(RemoteOperationError):
    """Raised when the host refuses to add the interface."""


@dataclass
class VnicReadError(RemoteOperationError):
    """Raised when live interface state cannot be fetched."""


@dataclass
class VnicUpdateError(RemoteOperationError):
    """Raised when the host refuses to update the interface."""


@dataclass
class VnicDeleteError(RemoteOperationError):
    """Raised when the host refuses to remove the interface."""


@dataclass
class ServiceBindingError(RemoteOperationError):
    """Raised when selecting or deselecting a service on an interface fails.

    Bindings applied before the failure stay in place; re-running the
    operation converges the rest.
    """

    service: str = ""

    def __post_init__(self) -> None:
        Exception.__init__(
            self,
            f"{self.phase} of service {self.service!r} failed for "
            f"{self.vnic_id!r}: {self.cause}",
        )

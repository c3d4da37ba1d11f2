"""Composite identifier for a vNIC: ``<host_id>_<nic_id>``."""

from __future__ import annotations

from dataclasses import dataclass

from esx_vnic.client.errors import InvalidIdentifierError

SEPARATOR: str = "_"


@dataclass(frozen=True)
class VnicId:
    """Externally visible identity of a vNIC.

    The host ID may not contain :data:`SEPARATOR`; this is checked when the
    identifier is formed so that :meth:`parse` stays unambiguous.

    Attributes:
        host_id: Managed object ID of the host (e.g. ``"host-42"``).
        nic_id: Host-assigned device name (e.g. ``"vmk1"``).
    """

    host_id: str
    nic_id: str

    def __post_init__(self) -> None:
        check_host_id(self.host_id)
        if not self.nic_id:
            raise InvalidIdentifierError(f"nic_id must be non-empty (host {self.host_id!r})")

    def __str__(self) -> str:
        return f"{self.host_id}{SEPARATOR}{self.nic_id}"

    @classmethod
    def parse(cls, value: str) -> VnicId:
        """Split *value* on the first separator.

        Raises:
            InvalidIdentifierError: If *value* has no separator or either
                half is empty.
        """
        host_id, sep, nic_id = value.partition(SEPARATOR)
        if not sep:
            raise InvalidIdentifierError(f"malformed vNic identifier {value!r}")
        return cls(host_id=host_id, nic_id=nic_id)


def check_host_id(host_id: str) -> None:
    """Raise :exc:`InvalidIdentifierError` if *host_id* cannot start a composite ID."""
    if not host_id:
        raise InvalidIdentifierError("host_id must be non-empty")
    if SEPARATOR in host_id:
        raise InvalidIdentifierError(f"host_id {host_id!r} must not contain {SEPARATOR!r}")

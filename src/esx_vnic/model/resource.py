"""Result type returned by every reconciler operation."""

from __future__ import annotations

from dataclasses import dataclass

from esx_vnic.model.identifier import VnicId
from esx_vnic.model.vnic import DesiredVnicConfig


@dataclass(frozen=True)
class VnicResource:
    """Identity plus normalized configuration of a managed vNIC.

    Both fields are ``None`` when the interface no longer exists on the host
    (the tombstone returned by a read after deletion).
    """

    id: VnicId | None = None
    config: DesiredVnicConfig | None = None

    @property
    def exists(self) -> bool:
        return self.id is not None

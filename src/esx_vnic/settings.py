"""Connection settings for the host management endpoint."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

_TRUE_VALUES: frozenset[str] = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class GatewaySettings:
    """Immutable connection settings for :class:`HTTPHostNetworkGateway`.

    Args:
        base_url: Management endpoint URL, e.g. ``https://vcenter.example``.
        timeout_s: Per-request timeout in seconds.
        verify_tls: Verify TLS certificates.
        session_token: Pre-issued API session token, if the endpoint needs one.
    """

    base_url: str
    timeout_s: float = 30.0
    verify_tls: bool = True
    session_token: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GatewaySettings:
        """Read settings from ``ESX_VNIC_*`` environment variables.

        Variables:
            ESX_VNIC_URL            Management endpoint URL (required).
            ESX_VNIC_TIMEOUT        Request timeout in seconds (default 30).
            ESX_VNIC_VERIFY_TLS     ``false`` to skip TLS verification.
            ESX_VNIC_SESSION_TOKEN  Pre-issued API session token.

        Raises:
            ValueError: If the URL is missing or the timeout is not a number.
        """
        env = os.environ if environ is None else environ
        base_url = env.get("ESX_VNIC_URL", "").strip()
        if not base_url:
            raise ValueError("ESX_VNIC_URL environment variable is required")

        raw_timeout = env.get("ESX_VNIC_TIMEOUT", "30")
        try:
            timeout_s = float(raw_timeout)
        except ValueError as exc:
            raise ValueError(f"ESX_VNIC_TIMEOUT must be a number, got {raw_timeout!r}") from exc

        verify_tls = env.get("ESX_VNIC_VERIFY_TLS", "true").strip().lower() in _TRUE_VALUES
        token = env.get("ESX_VNIC_SESSION_TOKEN") or None
        return cls(
            base_url=base_url,
            timeout_s=timeout_s,
            verify_tls=verify_tls,
            session_token=token,
        )

"""Low-level HTTP client wrapper for the host management JSON API."""

from __future__ import annotations

import importlib.metadata
import json
import logging
from typing import Any

import requests

from esx_vnic.client.errors import HostParseError, HostRequestError, HostResponseError
from esx_vnic.vendor.vsphere.mappings import SESSION_HEADER

logger = logging.getLogger(__name__)

try:
    _VERSION: str = importlib.metadata.version("esx-vnic")
except importlib.metadata.PackageNotFoundError:
    _VERSION = "0.0.0"

_USER_AGENT: str = f"esx-vnic/{_VERSION}"


def _normalise_base_url(url: str) -> str:
    """Ensure the URL has a scheme and no trailing slash."""
    url = url.rstrip("/")
    if not url.startswith(("http://", "https://")):
        url = "https://" + url
    return url


class HostHTTP:
    """Low-level JSON wrapper around :class:`requests.Session`.

    Handles a default ``User-Agent`` header, an optional pre-issued session
    token, timeout, TLS verification, JSON encoding/decoding, and maps
    transport/HTTP errors to :mod:`.errors` types.

    Args:
        base_url: Management endpoint base URL, e.g. ``https://vcenter.example``.
        timeout_s: Request timeout in seconds (default 30).
        verify_tls: Whether to verify TLS certificates (default True).
        session_token: Existing API session token, sent on every request.
    """

    def __init__(
        self,
        base_url: str,
        timeout_s: float = 30.0,
        verify_tls: bool = True,
        session_token: str | None = None,
    ) -> None:
        self.base_url: str = _normalise_base_url(base_url)
        self.timeout_s: float = timeout_s
        self.verify_tls: bool = verify_tls
        self._session: requests.Session = requests.Session()
        self._session.headers.update(
            {"User-Agent": _USER_AGENT, "Accept": "application/json"}
        )
        if session_token:
            self._session.headers[SESSION_HEADER] = session_token

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_json(self, path: str) -> Any:
        """GET *path* and return the decoded JSON body.

        Raises:
            HostRequestError: On any transport-level failure.
            HostResponseError: On a non-2xx HTTP status code.
            HostParseError: If the body is not valid JSON.
        """
        resp = self._request("GET", path)
        return self._decode(resp, path)

    def post_json(self, path: str, payload: dict[str, Any]) -> Any:
        """POST *payload* as JSON to *path*; return the decoded body or ``None``."""
        resp = self._request("POST", path, payload)
        return self._decode(resp, path) if resp.content else None

    def put_json(self, path: str, payload: dict[str, Any]) -> Any:
        """PUT *payload* as JSON to *path*; return the decoded body or ``None``."""
        resp = self._request("PUT", path, payload)
        return self._decode(resp, path) if resp.content else None

    def delete(self, path: str) -> None:
        """Send an HTTP DELETE to *path*."""
        self._request("DELETE", path)

    def close(self) -> None:
        """Close the underlying :class:`requests.Session`."""
        self._session.close()

    def __enter__(self) -> HostHTTP:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> requests.Response:
        url = self.base_url + path
        logger.debug("%s %s %s", method, url, payload if payload is not None else "")
        try:
            resp = self._session.request(
                method,
                url,
                json=payload,
                timeout=self.timeout_s,
                verify=self.verify_tls,
            )
        except requests.exceptions.RequestException as exc:
            raise HostRequestError(url, exc) from exc
        self._raise_for_status(resp)
        return resp

    @staticmethod
    def _raise_for_status(resp: requests.Response) -> None:
        if not resp.ok:
            raise HostResponseError(resp.status_code, resp.url, _error_message(resp))

    @staticmethod
    def _decode(resp: requests.Response, path: str) -> Any:
        try:
            return resp.json()
        except (json.JSONDecodeError, ValueError) as exc:
            raise HostParseError(
                f"Non-JSON response from {path!r}: {resp.text[:200]!r}"
            ) from exc


def _error_message(resp: requests.Response) -> str:
    """Best-effort extraction of an error message from a failed response."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200]
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or "")
    return ""

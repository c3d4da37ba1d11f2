"""Helpers for IPv6 address literals."""

from __future__ import annotations

from esx_vnic.client.errors import InvalidAddressFormatError

MAX_PREFIX_LENGTH: int = 128


def parse_cidr(literal: str) -> tuple[str, int]:
    """Split ``"<address>/<prefix>"`` into a lower-cased address and prefix.

    >>> parse_cidr("FE80::1/64")
    ('fe80::1', 64)

    Raises:
        InvalidAddressFormatError: If the slash part is missing, or the
            prefix is not an integer between 0 and 128.
    """
    address, sep, prefix = literal.strip().partition("/")
    if not sep or not address or not prefix.isascii() or not prefix.isdigit():
        raise InvalidAddressFormatError(literal)
    try:
        length = int(prefix)
    except ValueError as exc:
        raise InvalidAddressFormatError(literal) from exc
    if length > MAX_PREFIX_LENGTH:
        raise InvalidAddressFormatError(literal)
    return address.lower(), length


def canonical_cidr(literal: str) -> str:
    """Return *literal* with the address part lower-cased."""
    address, prefix = parse_cidr(literal)
    return f"{address}/{prefix}"

"""IP version selection for public IP lookups."""

from __future__ import annotations

import enum
import json


class InvalidIPVersionError(ValueError):
    """Raised when a string does not name a known IP version."""


class IPVersion(enum.IntEnum):
    """Which IP family a public IP lookup should return."""

    IP4OR6 = 0
    IP4 = 1
    IP6 = 2

    def __str__(self) -> str:
        return _NAMES[self]


_NAMES = {
    IPVersion.IP4OR6: "ipv4 or ipv6",
    IPVersion.IP4: "ipv4",
    IPVersion.IP6: "ipv6",
}

_BY_NAME = {name: version for version, name in _NAMES.items()}


def parse(s: str) -> IPVersion:
    """Parse a case-insensitive IP version name such as ``"ipv4"``."""
    try:
        return _BY_NAME[s.lower()]
    except KeyError:
        quoted = json.dumps(s, ensure_ascii=False)
        raise InvalidIPVersionError(f"invalid IP version: {quoted}") from None
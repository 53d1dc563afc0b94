"""Public IP lookup through HTTP services."""

from __future__ import annotations

import ipaddress
import json
import re
import threading
from dataclasses import dataclass, field

import httpx

from publicip.http_providers import Provider, provider_url, validate_provider
from publicip.ipversion import IPVersion

_DEFAULT_TIMEOUT = 5.0
_COUNTER_MODULUS = 2**32


class HTTPFetchError(Exception):
    """Base class for errors while fetching the public IP over HTTP."""


class NoIPFoundError(HTTPFetchError):
    """The response holds no IP address."""


class TooManyIPsError(HTTPFetchError):
    """The response holds more than one IP address."""


class IPMalformedError(HTTPFetchError):
    """The address found is not a valid IP address."""


_IPV4_RE = re.compile(
    r"(([0-9]|[1-9][0-9]|1[0-9]{2}|2[0-4][0-9]|25[0-5])\.){3}"
    r"(25[0-5]|2[0-4][0-9]|1[0-9]{2}|[1-9][0-9]|[0-9])"
)

_IPV6_ALTERNATIVES = (
    r"([0-9a-fA-F]{1,4}:){7,7}[0-9a-fA-F]{1,4}",
    r"([0-9a-fA-F]{1,4}:){1,7}:",
    r"([0-9a-fA-F]{1,4}:){1,6}:[0-9a-fA-F]{1,4}",
    r"([0-9a-fA-F]{1,4}:){1,5}(:[0-9a-fA-F]{1,4}){1,2}",
    r"([0-9a-fA-F]{1,4}:){1,4}(:[0-9a-fA-F]{1,4}){1,3}",
    r"([0-9a-fA-F]{1,4}:){1,3}(:[0-9a-fA-F]{1,4}){1,4}",
    r"([0-9a-fA-F]{1,4}:){1,2}(:[0-9a-fA-F]{1,4}){1,5}",
    r"[0-9a-fA-F]{1,4}:((:[0-9a-fA-F]{1,4}){1,6})",
    r":((:[0-9a-fA-F]{1,4}){1,7}|:)",
    r"fe80:(:[0-9a-fA-F]{0,4}){0,4}%[0-9a-zA-Z]{1,}",
    r"::(ffff(:0{1,4}){0,1}:){0,1}((25[0-5]|(2[0-4]|1{0,1}[0-9]){0,1}[0-9])\.){3,3}"
    r"(25[0-5]|(2[0-4]|1{0,1}[0-9]){0,1}[0-9])",
    r"([0-9a-fA-F]{1,4}:){1,4}:((25[0-5]|(2[0-4]|1{0,1}[0-9]){0,1}[0-9])\.){3,3}"
    r"(25[0-5]|(2[0-4]|1{0,1}[0-9]){0,1}[0-9])",
)
_IPV6_RE = re.compile("(" + "|".join(_IPV6_ALTERNATIVES) + ")")


def _find_all(pattern: re.Pattern[str], text: str) -> list[str]:
    return [match.group(0) for match in pattern.finditer(text)]


def _too_many(count: int, family: str) -> TooManyIPsError:
    return TooManyIPsError(f"too many IP addresses: found {count} {family} addresses instead of 1")


def fetch(client: httpx.Client, url: str, version: IPVersion, timeout: float | None = None):
    """GET a URL and return the single public IP address of the wanted version in its body."""
    version = IPVersion(version)
    if timeout is not None and timeout <= 0:
        raise HTTPFetchError(f'Get "{url}": deadline exceeded')
    try:
        response = client.get(
            url, timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT
        )
    except httpx.HTTPError as exc:
        raise HTTPFetchError(f'Get "{url}": {exc}') from exc

    text = response.content.decode("utf-8", errors="replace")
    ipv4s = _find_all(_IPV4_RE, text)
    ipv6s = _find_all(_IPV6_RE, text)
    quoted_url = json.dumps(url, ensure_ascii=False)

    if version is IPVersion.IP4OR6:
        if len(ipv4s) == 1:
            candidate = ipv4s[0]
        elif len(ipv6s) == 1:
            candidate = ipv6s[0]
        elif len(ipv4s) > 1:
            raise _too_many(len(ipv4s), "IPv4")
        elif len(ipv6s) > 1:
            raise _too_many(len(ipv6s), "IPv6")
        else:
            raise NoIPFoundError(f"no IP address found: from {quoted_url}")
    else:
        found, family = (ipv4s, "IPv4") if version is IPVersion.IP4 else (ipv6s, "IPv6")
        if not found:
            raise NoIPFoundError(
                f"no IP address found: from {quoted_url} for version {str(version)}"
            )
        if len(found) > 1:
            raise _too_many(len(found), family)
        candidate = found[0]

    try:
        return ipaddress.ip_address(candidate)
    except ValueError:
        raise IPMalformedError(f"IP address malformed: {candidate}") from None


def _validated(version: IPVersion, first: str, others: tuple[str, ...]) -> list[str]:
    return [validate_provider(provider, version) for provider in (*others, first)]


@dataclass
class HTTPSettings:
    """Providers per IP version and timeout for HTTP lookups."""

    providers_ip: list[str] = field(default_factory=lambda: [Provider.GOOGLE])
    providers_ip4: list[str] = field(default_factory=lambda: [Provider.NOIP])
    providers_ip6: list[str] = field(default_factory=lambda: [Provider.NOIP])
    timeout: float = _DEFAULT_TIMEOUT

    def set_providers_ip(self, first: str, *args: str) -> None:
        """Replace the IPv4-or-IPv6 providers; unchanged if any is invalid."""
        self.providers_ip = _validated(IPVersion.IP4OR6, first, args)

    def set_providers_ip4(self, first: str, *args: str) -> None:
        """Replace the IPv4 providers; unchanged if any is invalid."""
        self.providers_ip4 = _validated(IPVersion.IP4, first, args)

    def set_providers_ip6(self, first: str, *args: str) -> None:
        """Replace the IPv6 providers; unchanged if any is invalid."""
        self.providers_ip6 = _validated(IPVersion.IP6, first, args)


@dataclass
class URLRing:
    """URLs picked in turn, with a wrapping 32-bit counter."""

    urls: list[str]
    counter: int = 0
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def next_url(self) -> str:
        """Advance the counter and return the URL it points to."""
        if not self.urls:
            raise ValueError("no URL to choose from")
        with self._lock:
            self.counter = (self.counter + 1) % _COUNTER_MODULUS
            return self.urls[self.counter % len(self.urls)]


class HTTPFetcher:
    """Finds the public IP by cycling through HTTP services."""

    def __init__(self, client: httpx.Client, settings: HTTPSettings | None = None) -> None:
        settings = settings if settings is not None else HTTPSettings()
        self.client = client
        self.timeout = settings.timeout
        per_version = {
            IPVersion.IP4OR6: settings.providers_ip,
            IPVersion.IP4: settings.providers_ip4,
            IPVersion.IP6: settings.providers_ip6,
        }
        self.rings = {
            version: URLRing(
                urls=[
                    provider_url(validate_provider(provider, version), version)
                    for provider in providers
                ]
            )
            for version, providers in per_version.items()
        }

    def ip(self):
        """Return the public IPv4 or IPv6 address."""
        return self._ip(IPVersion.IP4OR6)

    def ip4(self):
        """Return the public IPv4 address."""
        return self._ip(IPVersion.IP4)

    def ip6(self):
        """Return the public IPv6 address."""
        return self._ip(IPVersion.IP6)

    def _ip(self, version: IPVersion):
        url = self.rings[version].next_url()
        return fetch(self.client, url, version, self.timeout)
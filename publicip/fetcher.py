"""Public IP lookup combining the DNS and HTTP methods."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

import httpx

from publicip.dns_fetcher import DNSFetcher, DNSSettings
from publicip.http_fetcher import HTTPFetcher, HTTPSettings
from publicip.ipversion import IPVersion

_COUNTER_MODULUS = 2**32


class NoFetchTypeSpecifiedError(ValueError):
    """Raised when neither the DNS nor the HTTP method is enabled."""


class _SubFetcher(Protocol):
    def ip(self) -> Any:
        ...

    def ip4(self) -> Any:
        ...

    def ip6(self) -> Any:
        ...


@dataclass
class DNSOptions:
    """Whether and how to look up the public IP through DNS."""

    enabled: bool = True
    settings: DNSSettings = field(default_factory=DNSSettings)
    clients: Mapping[IPVersion, Any] | None = None


@dataclass
class HTTPOptions:
    """Whether and how to look up the public IP through HTTP."""

    enabled: bool = True
    client: httpx.Client | None = None
    settings: HTTPSettings = field(default_factory=HTTPSettings)


class PublicIPFetcher:
    """Finds the public IP, alternating between DNS and HTTP when both are enabled."""

    def __init__(
        self,
        dns_options: DNSOptions | None = None,
        http_options: HTTPOptions | None = None,
    ) -> None:
        self._fetchers: list[_SubFetcher] = []
        self._owned_client: httpx.Client | None = None

        if dns_options is not None and dns_options.enabled:
            self._fetchers.append(DNSFetcher(dns_options.settings, dns_options.clients))

        if http_options is not None and http_options.enabled:
            client = http_options.client
            if client is None:
                client = httpx.Client()
                self._owned_client = client
            self._fetchers.append(HTTPFetcher(client, http_options.settings))

        if not self._fetchers:
            raise NoFetchTypeSpecifiedError("at least one fetcher type must be specified")

        self._counter = itertools.count(1)

    def _sub_fetcher(self) -> _SubFetcher:
        if len(self._fetchers) == 1:
            return self._fetchers[0]
        index = (next(self._counter) % _COUNTER_MODULUS) % len(self._fetchers)
        return self._fetchers[index]

    def ip(self):
        """Return the public IPv4 or IPv6 address."""
        return self._sub_fetcher().ip()

    def ip4(self):
        """Return the public IPv4 address."""
        return self._sub_fetcher().ip4()

    def ip6(self):
        """Return the public IPv6 address."""
        return self._sub_fetcher().ip6()

    def close(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._owned_client is not None:
            self._owned_client.close()
            self._owned_client = None

    def __enter__(self) -> PublicIPFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
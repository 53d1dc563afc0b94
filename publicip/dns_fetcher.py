"""Public IP lookup through DNS TXT queries."""

from __future__ import annotations

import ipaddress
import itertools
import json
import socket
from dataclasses import dataclass, field
from typing import Mapping, Protocol

import dns.flags
import dns.message
import dns.query
import dns.rdatatype

from publicip.dns_providers import (
    Provider,
    ProviderData,
    list_providers,
    provider_data,
    validate_provider,
)
from publicip.ipversion import IPVersion

IPAddress = "ipaddress.IPv4Address | ipaddress.IPv6Address"

_DEFAULT_TIMEOUT = 3.0
_COUNTER_MODULUS = 2**32


class DNSFetchError(Exception):
    """Base class for errors in a DNS answer."""


class NoTXTRecordFoundError(DNSFetchError):
    """The answer holds no TXT record."""


class TooManyAnswersError(DNSFetchError):
    """The answer holds more than one record."""


class InvalidAnswerTypeError(DNSFetchError):
    """The answer record is not a TXT record."""


class TooManyTXTRecordsError(DNSFetchError):
    """The TXT record holds more than one string."""


class IPMalformedError(DNSFetchError):
    """The TXT record is not an IP address."""


class _Client(Protocol):
    def exchange(self, message: dns.message.Message, nameserver: str) -> dns.message.Message:
        ...


@dataclass
class DNSSettings:
    """Providers and timeout for DNS lookups."""

    providers: list[Provider] = field(default_factory=list_providers)
    timeout: float = _DEFAULT_TIMEOUT

    def set_providers(self, first: str, *args: str) -> None:
        """Replace the providers, leaving them unchanged if any is unknown."""
        validated = [validate_provider(provider) for provider in (*args, first)]
        self.providers = validated


_FAMILIES = {
    IPVersion.IP4OR6: socket.AF_UNSPEC,
    IPVersion.IP4: socket.AF_INET,
    IPVersion.IP6: socket.AF_INET6,
}


def _split_host_port(nameserver: str) -> tuple[str, int]:
    host, sep, port = nameserver.rpartition(":")
    if not sep or "]" in port:
        return nameserver.strip("[]"), 53
    return host.strip("[]"), int(port)


class UDPClient:
    """Sends DNS queries over UDP restricted to one IP family."""

    def __init__(self, family: IPVersion, timeout: float) -> None:
        self.family = IPVersion(family)
        self.timeout = timeout

    def exchange(self, message: dns.message.Message, nameserver: str) -> dns.message.Message:
        """Send a query to ``host:port`` and return the response."""
        host, port = _split_host_port(nameserver)
        infos = socket.getaddrinfo(host, port, _FAMILIES[self.family], socket.SOCK_DGRAM)
        if not infos:
            raise OSError(f"no address found for {host}")
        address = infos[0][4][0]
        return dns.query.udp(message, address, timeout=self.timeout, port=port)


def build_query(data: ProviderData) -> dns.message.Message:
    """Build the TXT query for a provider."""
    message = dns.message.make_query(data.fqdn, dns.rdatatype.TXT, data.rdclass)
    message.flags = 0
    return message


def fetch(client: _Client, data: ProviderData):
    """Query a provider and return the public IP from its single TXT answer."""
    response = client.exchange(build_query(data), data.nameserver)

    records = [rdata for rrset in response.answer for rdata in rrset]
    if not records:
        raise NoTXTRecordFoundError("no TXT record found")
    if len(records) > 1:
        raise TooManyAnswersError(f"too many answers: {len(records)} instead of 1")

    record = records[0]
    if record.rdtype != dns.rdatatype.TXT:
        type_name = dns.rdatatype.to_text(record.rdtype)
        raise InvalidAnswerTypeError(f"invalid answer type: {type_name} instead of TXT")

    strings = list(record.strings)
    if not strings:
        raise NoTXTRecordFoundError("no TXT record found")
    if len(strings) > 1:
        raise TooManyTXTRecordsError(f"too many TXT records: {len(strings)} instead of 1")

    raw = strings[0]
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else str(raw)
    try:
        return ipaddress.ip_address(text)
    except ValueError:
        quoted = json.dumps(text, ensure_ascii=False)
        raise IPMalformedError(f"IP address malformed: {quoted}") from None


class DNSFetcher:
    """Finds the public IP by cycling through DNS providers."""

    def __init__(
        self,
        settings: DNSSettings | None = None,
        clients: Mapping[IPVersion, _Client] | None = None,
    ) -> None:
        settings = settings if settings is not None else DNSSettings()
        self.providers = tuple(settings.providers)
        if not self.providers:
            raise ValueError("at least one provider is required")
        if clients is None:
            clients = {version: UDPClient(version, settings.timeout) for version in IPVersion}
        self.clients = dict(clients)
        self._counter = itertools.count(1)

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
        index = (next(self._counter) % _COUNTER_MODULUS) % len(self.providers)
        provider = self.providers[index]
        return fetch(self.clients[version], provider_data(provider))
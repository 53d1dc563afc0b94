"""DNS providers able to report the caller's public IP address."""

from __future__ import annotations

import enum
from dataclasses import dataclass

import dns.rdataclass


class UnknownProviderError(ValueError):
    """Raised when a provider name is not known."""


class Provider(str, enum.Enum):
    """A DNS service answering with the querier's public IP."""

    CLOUDFLARE = "cloudflare"
    GOOGLE = "google"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ProviderData:
    """Where and what to query for a provider."""

    nameserver: str
    fqdn: str
    rdclass: dns.rdataclass.RdataClass


_DATA = {
    Provider.GOOGLE: ProviderData(
        nameserver="ns1.google.com:53",
        fqdn="o-o.myaddr.l.google.com.",
        rdclass=dns.rdataclass.IN,
    ),
    Provider.CLOUDFLARE: ProviderData(
        nameserver="one.one.one.one:53",
        fqdn="whoami.cloudflare.",
        rdclass=dns.rdataclass.CH,
    ),
}


def list_providers() -> list[Provider]:
    """Return every known DNS provider."""
    return [Provider.CLOUDFLARE, Provider.GOOGLE]


def _name(provider: str) -> str:
    return provider.value if isinstance(provider, Provider) else str(provider)


def validate_provider(provider: str) -> Provider:
    """Return the provider for a name, raising if it is unknown."""
    try:
        return Provider(provider)
    except ValueError:
        raise UnknownProviderError(f"unknown provider: {_name(provider)}") from None


def provider_data(provider: str) -> ProviderData:
    """Return the query data of a provider."""
    try:
        return _DATA[Provider(provider)]
    except ValueError:
        raise UnknownProviderError(f'provider unknown: "{_name(provider)}"') from None
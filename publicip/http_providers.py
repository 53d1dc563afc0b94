"""HTTP services able to report the caller's public IP address."""

from __future__ import annotations

import enum
import json
from urllib.parse import ParseResult, SplitResult

from publicip.ipversion import IPVersion

_CUSTOM_PREFIX = "url:"
_CUSTOM_HTTPS_PREFIX = "url:https://"


class UnknownProviderError(ValueError):
    """Raised when a provider name is not known."""


class ProviderIPVersionError(ValueError):
    """Raised when a provider cannot answer for the requested IP version."""


class Provider(str, enum.Enum):
    """A web service answering with the caller's public IP."""

    GOOGLE = "google"
    IFCONFIG = "ifconfig"
    IPIFY = "ipify"
    IPINFO = "ipinfo"
    NOIP = "noip"
    OPENDNS = "opendns"

    def __str__(self) -> str:
        return self.value


_URLS: dict[IPVersion, dict[Provider, str]] = {
    IPVersion.IP4: {
        Provider.IPIFY: "https://api.ipify.org",
        Provider.NOIP: "http://ip1.dynupdate.no-ip.com",
    },
    IPVersion.IP6: {
        Provider.IPIFY: "https://api6.ipify.org",
        Provider.NOIP: "http://ip1.dynupdate6.no-ip.com",
    },
    IPVersion.IP4OR6: {
        Provider.GOOGLE: "https://domains.google.com/checkip",
        Provider.IFCONFIG: "https://ifconfig.io/ip",
        Provider.IPINFO: "https://ipinfo.io/ip",
        Provider.OPENDNS: "https://diagnostic.opendns.com/myip",
    },
}


def list_providers() -> list[Provider]:
    """Return every known HTTP provider."""
    return list(Provider)


def provider_url(provider: str, version: IPVersion) -> str | None:
    """Return the URL to query for a provider and IP version, or None if unsupported."""
    name = str(provider)
    if name.startswith(_CUSTOM_PREFIX):
        return name[len(_CUSTOM_PREFIX):] or None
    try:
        known = Provider(name)
    except ValueError:
        return None
    return _URLS[IPVersion(version)].get(known)


def supports_version(provider: str, version: IPVersion) -> bool:
    """Tell whether a provider can answer for an IP version."""
    return provider_url(provider, version) is not None


def list_providers_for_version(version: IPVersion) -> list[Provider]:
    """Return the known providers supporting an IP version."""
    return [provider for provider in Provider if supports_version(provider, version)]


def validate_provider(provider: str, version: IPVersion) -> str:
    """Return the provider if it is usable for the IP version, raising otherwise."""
    name = str(provider)
    if name.startswith(_CUSTOM_HTTPS_PREFIX):
        return name
    try:
        known = Provider(name)
    except ValueError:
        raise UnknownProviderError(f"unknown provider: {name}") from None
    if not supports_version(known, version):
        quoted = json.dumps(name, ensure_ascii=False)
        raise ProviderIPVersionError(
            f"provider does not support IP version: {quoted} for version {str(IPVersion(version))}"
        )
    return known


def custom_provider(https_url: str | SplitResult | ParseResult) -> str:
    """Make a provider from a custom HTTPS URL; the URL itself is not checked."""
    if isinstance(https_url, (SplitResult, ParseResult)):
        https_url = https_url.geturl()
    return _CUSTOM_PREFIX + str(https_url)
import ipaddress

import dns.message
import dns.rdatatype
import dns.rrset
import httpx
import pytest

from publicip.dns_fetcher import DNSSettings
from publicip.fetcher import (
    DNSOptions,
    HTTPOptions,
    NoFetchTypeSpecifiedError,
    PublicIPFetcher,
)
from publicip.http_fetcher import NoIPFoundError
from publicip.ipversion import IPVersion

HTTP_IP = "198.51.100.1"
DNS_IP = "203.0.113.7"


class FakeDNSClient:
    def __init__(self, answer):
        self.answer = answer
        self.nameservers = []

    def exchange(self, message, nameserver):
        self.nameservers.append(nameserver)
        response = dns.message.make_response(message)
        question = message.question[0]
        rrset = dns.rrset.from_text(
            question.name, 60, question.rdclass, dns.rdatatype.TXT, f'"{self.answer}"'
        )
        response.answer.append(rrset)
        return response


def http_client(body, seen):
    def handler(request):
        seen.append(str(request.url))
        return httpx.Response(200, content=body.encode())

    return httpx.Client(transport=httpx.MockTransport(handler))


def dns_options(answer):
    client = FakeDNSClient(answer)
    clients = {version: client for version in IPVersion}
    return DNSOptions(enabled=True, clients=clients), client


def test_no_fetcher_enabled_raises():
    with pytest.raises(NoFetchTypeSpecifiedError) as info:
        PublicIPFetcher()
    assert str(info.value) == "at least one fetcher type must be specified"


def test_disabled_options_raise():
    with pytest.raises(NoFetchTypeSpecifiedError):
        PublicIPFetcher(DNSOptions(enabled=False), HTTPOptions(enabled=False))


def test_http_only_ip():
    seen = []
    client = http_client(HTTP_IP, seen)
    fetcher = PublicIPFetcher(http_options=HTTPOptions(client=client))
    assert fetcher.ip() == ipaddress.ip_address(HTTP_IP)
    assert fetcher.ip() == ipaddress.ip_address(HTTP_IP)
    assert seen == ["https://domains.google.com/checkip"] * 2


def test_http_only_ip4_uses_noip():
    seen = []
    client = http_client(HTTP_IP, seen)
    fetcher = PublicIPFetcher(http_options=HTTPOptions(client=client))
    assert fetcher.ip4() == ipaddress.ip_address(HTTP_IP)
    assert seen == ["http://ip1.dynupdate.no-ip.com"]


def test_http_only_ip6():
    seen = []
    client = http_client("::1", seen)
    fetcher = PublicIPFetcher(http_options=HTTPOptions(client=client))
    assert fetcher.ip6() == ipaddress.ip_address("::1")
    assert seen == ["http://ip1.dynupdate6.no-ip.com"]


def test_http_error_propagates():
    seen = []
    client = http_client("abc def", seen)
    fetcher = PublicIPFetcher(http_options=HTTPOptions(client=client))
    with pytest.raises(NoIPFoundError):
        fetcher.ip()


def test_dns_only_ip4():
    options, client = dns_options(DNS_IP)
    fetcher = PublicIPFetcher(dns_options=options)
    assert fetcher.ip4() == ipaddress.ip_address(DNS_IP)
    assert len(client.nameservers) == 1
    assert client.nameservers[0] in {"ns1.google.com:53", "one.one.one.one:53"}


def test_dns_without_providers_raises():
    settings = DNSSettings(providers=[])
    with pytest.raises(ValueError):
        PublicIPFetcher(dns_options=DNSOptions(settings=settings, clients={}))


def test_both_enabled_alternate():
    options, dns_client = dns_options(DNS_IP)
    seen = []
    client = http_client(HTTP_IP, seen)
    fetcher = PublicIPFetcher(options, HTTPOptions(client=client))
    results = [fetcher.ip() for _ in range(4)]
    assert results == [
        ipaddress.ip_address(HTTP_IP),
        ipaddress.ip_address(DNS_IP),
        ipaddress.ip_address(HTTP_IP),
        ipaddress.ip_address(DNS_IP),
    ]
    assert len(seen) == 2
    assert len(dns_client.nameservers) == 2


def test_context_manager_returns_results():
    seen = []
    client = http_client(HTTP_IP, seen)
    with PublicIPFetcher(http_options=HTTPOptions(client=client)) as fetcher:
        assert fetcher.ip4() == ipaddress.ip_address(HTTP_IP)
    assert not client.is_closed
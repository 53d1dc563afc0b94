# publicip

Find out the public IP address of the machine you are running on.

There are two kinds of lookup, and they can be combined:

- **DNS**: a TXT query is sent to a name server that answers with the
  address the query came from. The providers are `cloudflare` and `google`.
- **HTTP**: a GET request goes to an echo service whose response body holds
  the caller's address. The providers are `google`, `ifconfig`, `ipify`,
  `ipinfo`, `noip` and `opendns`, plus custom `url:https://...` providers.

Each kind of lookup can ask for any address family (`ip()`), IPv4 only
(`ip4()`) or IPv6 only (`ip6()`). The address comes back as an
`ipaddress.IPv4Address` or `ipaddress.IPv6Address`. When several providers
are configured, they take turns: each request uses the next one.

## Installation

```
pip install publicip
```

## Usage

### Combined fetcher

`publicip.fetcher.PublicIPFetcher` takes a `DNSOptions` value and an
`HTTPOptions` value. Both are dataclasses with `enabled=True` by default.
When both methods are enabled, the fetcher alternates between them on every
call. If neither is given, or neither is enabled, it raises
`NoFetchTypeSpecifiedError`.

```python
from publicip.fetcher import DNSOptions, HTTPOptions, PublicIPFetcher

with PublicIPFetcher(DNSOptions(), HTTPOptions()) as fetcher:
    print(fetcher.ip4())
```

If `HTTPOptions.client` is left as `None`, the fetcher creates its own
`httpx.Client`. That client is closed by `close()`, or when the `with` block
ends. A client you pass in yourself is never closed by the fetcher.

### DNS lookups

You can also use `publicip.dns_fetcher.DNSFetcher` on its own.

- It takes an optional `DNSSettings`, which holds the provider list and the
  timeout.
- It also takes an optional mapping from `IPVersion` to a client object that
  has an `exchange(message, nameserver)` method.
- By default it uses one `UDPClient` per IP version. Each `UDPClient` resolves
  the name server for its own address family only.

```python
from publicip.dns_fetcher import DNSFetcher, DNSSettings

settings = DNSSettings(timeout=2.0)
settings.set_providers("google")
print(DNSFetcher(settings).ip())
```

Two lower-level helpers are also available:

- `build_query(data)` builds the TXT query for a provider's `ProviderData`.
- `fetch(client, data)` sends that query and reads the address from the
  single TXT string in the answer.

`publicip.dns_providers` offers the following:

- `list_providers()`
- `validate_provider(name)`, which raises `UnknownProviderError`.
- `provider_data(provider)`, which gives a provider's name server, name and
  DNS class.

### HTTP lookups

`publicip.http_fetcher.HTTPFetcher` takes an `httpx.Client` and an optional
`HTTPSettings`.

- `HTTPSettings` holds one provider list per IP version and a timeout.
- Change the lists with `set_providers_ip`, `set_providers_ip4` and
  `set_providers_ip6`. If any provider given is invalid, the list is left
  unchanged.
- URLs are chosen in turn through a `URLRing`, whose counter wraps at 2³².

The response body is searched for IPv4 and IPv6 addresses:

- Asking for any version prefers a single IPv4 address over a single IPv6
  one.
- Finding more than one address of the relevant kind is an error.

The module-level `fetch(client, url, version, timeout)` performs a single
request.

### Providers and IP versions

`publicip.ipversion.parse` turns a name into an `IPVersion`. It accepts
`"ipv4 or ipv6"`, `"ipv4"` or `"ipv6"`, in any case.

```python
from publicip.ipversion import parse

version = parse("IPv4")
print(version)            # ipv4
parse("ipv5")             # raises InvalidIPVersionError
```

Not every HTTP provider can serve every IP version. `publicip.http_providers`
tells you which ones can:

```python
from publicip.http_providers import list_providers_for_version, validate_provider
from publicip.ipversion import parse

ipv6 = parse("ipv6")
print(list_providers_for_version(ipv6))   # ipify and noip

validate_provider("google", ipv6)          # raises ProviderIPVersionError
validate_provider("unknown", ipv6)         # raises UnknownProviderError
```

Related helpers:

- `provider_url(provider, version)` returns the URL used for a provider, or
  `None` if it cannot serve that version.
- `supports_version(provider, version)` answers the same question as a
  boolean.
- `custom_provider(url)` turns a URL, given as a string or a parsed
  `urllib.parse` result, into a `url:...` provider.

A provider starting with `url:https://` is accepted for every IP version
without further checks.

### Errors

- **DNS lookups** raise subclasses of `DNSFetchError`:
  - `NoTXTRecordFoundError`
  - `TooManyAnswersError`
  - `InvalidAnswerTypeError`
  - `TooManyTXTRecordsError`
  - `IPMalformedError`

  Network failures while resolving or querying the name server are raised by
  the socket layer or by dnspython as they are.
- **HTTP lookups** raise `HTTPFetchError`, which also wraps request failures,
  or one of its subclasses:
  - `NoIPFoundError`
  - `TooManyIPsError`
  - `IPMalformedError`

### Defaults

- **DNS**: providers `cloudflare` and `google`, with a 3 second timeout.
- **HTTP**: `google` for any version, and `noip` for IPv4 and for IPv6, with
  a 5 second timeout.

## What this package does not do

This package only finds the public address. It does not do the following:

- update DNS records at any registrar;
- watch for address changes or run as a service;
- provide a command-line tool.

## Running the tests

```
pip install -e ".[test]"
pytest
```
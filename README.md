# ssrcore

Building blocks for a ShadowsocksR-style proxy, usable on their own.

## Modules

- `ssrcore.obfs`: `new_obfs_class(name)` returns the plugin class for
  `"http_simple"` or `"http_post"`. `new_obfs(name, server)` creates a session
  that works on a copy of a `ServerInfo`. For `None`, `"origin"` and `"plain"`
  both functions return `None`, which means no obfuscation. Any other name
  raises `UnknownObfsError`.
- `ssrcore.http_simple`: the HTTP disguise.
  - `HttpSimple.client_encode` wraps the first client chunk in a `GET` request.
    The first bytes are percent-encoded into the path. The `Host` header comes
    from `ServerInfo.param` or `ServerInfo.host`.
  - `HttpPost.client_encode` sends a multipart `POST` instead.
  - `server_encode` prefixes the first server chunk with an HTTP 200 response
    header.
  - `client_decode` strips the response header.
  - `server_decode` collects the request, checks the `Host` against the
    configured hosts and returns the carried data. It raises `ObfsError` when
    the request is rejected.
  - Helpers: `parse_host_param`, `encode_head`, `get_data_from_http_header`,
    `get_host_from_http_header` and `make_boundary`.
- `ssrcore.obfsutil`: `ServerInfo`, the `XorShift128Plus` generator, the shared
  generator functions `init_shift128plus` and `xorshift128plus`, and
  `get_head_size` for SOCKS-style address headers.
- `ssrcore.rule`: `Rule` and `RuleSet` match host names against regular
  expressions. A bad pattern raises `RuleError`.
- `ssrcore.linkedlist`: `LinkedList`, an ordered container that stores copies
  of what is added. It supports matching, deletion by value or index, and
  selection sort.
- `ssrcore.netutils`: the following helpers.
  - `validate_hostname`.
  - `sockaddr_cmp` and `sockaddr_cmp_addr`, which order `SockAddr` values.
  - `get_sockaddr`, which turns a literal IP or a resolved name into a
    `SockAddr` and raises `ResolveError` on failure.
  - `get_sockaddr_len`, `bind_to_address` and `set_reuseport`.
- `ssrcore.jsonparse` / `ssrcore.jsonvalue`: `parse(data, enable_comments)`
  reads JSON, with optional `//` and `/* */` comments, into a `JsonValue` tree.
  It raises `JsonParseError` with line and column. Looking up a missing key or
  index gives a value of type `JsonType.NONE`. `as_str`, `as_int`, `as_float`
  and `to_python` convert values.
- `ssrcore.resolv`: an asyncio `Resolver` that asks for A and AAAA records
  through dnspython. It picks the IPv4-first or IPv6-first address with
  `choose_address`. Queries can be cancelled per host name or all together
  with `shutdown`.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

Obfuscate the first client packet:

```python
from ssrcore.obfs import new_obfs
from ssrcore.obfsutil import ServerInfo

server = ServerInfo(host="example.com", port=443)
plugin = new_obfs("http_simple", server)
wire = plugin.client_encode(b"\x01\x02payload")
```

Read a configuration document that contains comments:

```python
from ssrcore.jsonparse import parse

config = parse(b'{"server_port": 8388 // listening port\n}', enable_comments=True)
print(config["server_port"].as_int())  # 8388
```

Match host names:

```python
from ssrcore.rule import Rule, RuleSet

rules = RuleSet()
rules.add(Rule(r"\.example\.com$"))
print(rules.lookup("www.example.com") is not None)  # True
```

Resolve a name:

```python
import asyncio
from ssrcore.resolv import Resolver

async def main():
    resolver = Resolver(ipv6_first=False)
    print(await resolver.query("example.com", 443))

asyncio.run(main())
```

## What it does not do

This is a library only. It has no command-line program, no proxy server or
client, and no event loop that relays connections. It does not read a
configuration file into settings, and it has no ciphers or authentication
protocols. The only obfuscation plugins are `http_simple` and `http_post`.
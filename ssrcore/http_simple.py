"""The http_simple and http_post obfuscation: disguise a stream as HTTP traffic."""

from __future__ import annotations

import random
import re
from datetime import datetime
from typing import Callable, Optional

from .obfsutil import ServerInfo, xorshift128plus

USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 6.3; WOW64; rv:40.0) Gecko/20100101 Firefox/40.0",
    "Mozilla/5.0 (Windows NT 6.3; WOW64; rv:40.0) Gecko/20100101 Firefox/44.0",
    "Mozilla/5.0 (Windows NT 6.1) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/41.0.2228.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/535.11 (KHTML, like Gecko) "
    "Ubuntu/11.10 Chromium/27.0.1453.93 Chrome/27.0.1453.93 Safari/537.36",
    "Mozilla/5.0 (X11; Ubuntu; Linux x86_64; rv:35.0) Gecko/20100101 Firefox/35.0",
    "Mozilla/5.0 (compatible; WOW64; MSIE 10.0; Windows NT 6.2)",
    "Mozilla/5.0 (Windows; U; Windows NT 6.1; en-US) AppleWebKit/533.20.25 "
    "(KHTML, like Gecko) Version/5.0.4 Safari/533.20.27",
    "Mozilla/4.0 (compatible; MSIE 7.0; Windows NT 6.3; Trident/7.0; .NET4.0E; .NET4.0C)",
    "Mozilla/5.0 (Windows NT 6.3; Trident/7.0; rv:11.0) like Gecko",
    "Mozilla/5.0 (Linux; Android 4.4; Nexus 5 Build/BuildID) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Version/4.0 Chrome/30.0.0.0 Mobile Safari/537.36",
    "Mozilla/5.0 (iPad; CPU OS 5_0 like Mac OS X) AppleWebKit/534.46 "
    "(KHTML, like Gecko) Version/5.1 Mobile/9A334 Safari/7534.48.3",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 5_0 like Mac OS X) AppleWebKit/534.46 "
    "(KHTML, like Gecko) Version/5.1 Mobile/9A334 Safari/7534.48.3",
)

BOUNDARY_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"

MAX_HEADER_SIZE = 65536

_ACCEPT_HEADERS = (
    "Accept: text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8\r\n"
    "Accept-Language: en-US,en;q=0.8\r\n"
    "Accept-Encoding: gzip, deflate\r\n"
)
_TRAILING_HEADERS = "DNT: 1\r\nConnection: keep-alive\r\n\r\n"

_HEX_PREFIX = re.compile(rb"\s*([+-]?)(?:0[xX](?=[0-9a-fA-F]))?([0-9a-fA-F]*)")
_LINE_BREAK = re.compile(rb"[\r\n]")

# One user agent is chosen per process, on the first session created.
_useragent_index: Optional[int] = None

Rng = Callable[[], int]


class ObfsError(Exception):
    """Raised when obfuscated data cannot be accepted."""


def parse_host_param(param: str) -> tuple[list[str], Optional[str]]:
    """Split an obfs parameter into its host list and optional custom header body.

    Hosts are separated by commas; everything after ``#`` is a header body in
    which a backslash followed by ``n`` becomes CRLF and other backslashes are
    dropped.
    """
    hosts_part, sep, raw_body = param.partition("#")
    hosts = hosts_part.split(",")
    if not sep:
        return hosts, None
    body: list[str] = []
    escaped = False
    for ch in raw_body:
        if ch == "\\":
            escaped = True
            continue
        if ch == "\n":
            body.append("\r")
            continue
        if escaped:
            body.append("\r\n" if ch == "n" else ch)
            escaped = False
        else:
            body.append(ch)
    return hosts, "".join(body)


def encode_head(data: bytes) -> str:
    """Percent-encode every byte of ``data`` with lowercase hex digits."""
    return "".join(f"%{byte:02x}" for byte in data)


def _parse_hex_byte(token: bytes) -> int:
    match = _HEX_PREFIX.match(token)
    digits = match.group(2) if match else b""
    value = int(digits, 16) if digits else 0
    if match and match.group(1) == b"-":
        value = -value
    return value & 0xFF


def get_data_from_http_header(data: bytes) -> bytes:
    """Decode the percent-encoded bytes found in the request line of ``data``."""
    data = data.split(b"\0", 1)[0]
    lines = [line for line in _LINE_BREAK.split(data) if line]
    if not lines:
        return b""
    tokens = [token for token in lines[0].split(b"%") if token]
    return bytes(_parse_hex_byte(token[:2]) for token in tokens[1:])


def get_host_from_http_header(data: bytes) -> Optional[str]:
    """Return the host named by the ``Host:`` header, without the port, or None."""
    data = data.split(b"\0", 1)[0]
    start = data.find(b"Host: ")
    if start < 0:
        return None
    start += 6
    end = data.find(b":", start)
    if end < 0:
        end = data.find(b"\r\n", start)
        if end < 0:
            return None
    if end - start <= 0:
        return None
    return data[start:end][:1023].decode("utf-8", "replace")


def make_boundary(rng: Optional[Rng] = None) -> str:
    """Return a 32-character multipart boundary drawn from ``rng``."""
    draw = rng if rng is not None else (lambda: random.getrandbits(31))
    return "".join(BOUNDARY_ALPHABET[draw() % len(BOUNDARY_ALPHABET)] for _ in range(32))


class HttpSimple:
    """One session of the http_simple obfuscation, for either end of a connection."""

    def __init__(self, server: Optional[ServerInfo] = None, rng: Optional[Rng] = None) -> None:
        global _useragent_index
        self.server = server if server is not None else ServerInfo()
        self._rng: Rng = rng if rng is not None else xorshift128plus
        self.has_sent_header = False
        self.has_recv_header = False
        self.host_matched = False
        self._recv_buffer = bytearray()
        if _useragent_index is None:
            _useragent_index = self._rng() % len(USER_AGENTS)
        self.user_agent = USER_AGENTS[_useragent_index]

    def _encode_request(self, data: bytes, method: str, extra_headers: Callable[[], str]) -> bytes:
        if self.has_sent_header:
            return data
        head_size = min(self.server.head_len + (self._rng() & 0x3F), len(data))
        encoded = encode_head(data[:head_size])
        if self.server.param == "":
            self.server.param = None
        hosts, body = parse_host_param(self.server.param or self.server.host)
        host = hosts[self._rng() % len(hosts)]
        hostport = host if self.server.port == 80 else f"{host}:{self.server.port}"
        if body is not None:
            header = f"{method} /{encoded} HTTP/1.1\r\nHost: {hostport}\r\n{body}\r\n\r\n"
        else:
            header = (
                f"{method} /{encoded} HTTP/1.1\r\n"
                f"Host: {hostport}\r\n"
                f"User-Agent: {self.user_agent}\r\n"
                f"{_ACCEPT_HEADERS}{extra_headers()}{_TRAILING_HEADERS}"
            )
        self.has_sent_header = True
        return header.encode("utf-8") + bytes(data[head_size:])

    def client_encode(self, data: bytes) -> bytes:
        """Wrap the first chunk sent by the client in an HTTP GET request."""
        return self._encode_request(data, "GET", lambda: "")

    def client_decode(self, data: bytes) -> bytes:
        """Strip the HTTP response header from data received by the client."""
        if self.has_recv_header:
            return data
        end = data.find(b"\r\n\r\n")
        if end < 0:
            return b""
        self.has_recv_header = True
        return bytes(data[end + 4:])

    def server_encode(self, data: bytes, now: Optional[datetime] = None) -> bytes:
        """Prefix the first chunk sent by the server with an HTTP response header."""
        if self.has_sent_header:
            return data
        stamp = (now or datetime.now()).strftime("%a, %d %b %Y %H:%M:%S GMT")
        header = (
            "HTTP/1.1 200 OK\r\nConnection: keep-alive\r\nContent-Encoding: gzip\r\n"
            f"Content-Type: text/html\r\nDate: {stamp}"
            "\r\nServer: nginx\r\nVary: Accept-Encoding\r\n\r\n"
        )
        self.has_sent_header = True
        return header.encode("ascii") + bytes(data)

    def _reject(self, message: str) -> ObfsError:
        self._recv_buffer.clear()
        self.has_sent_header = True
        self.has_recv_header = True
        return ObfsError(message)

    def server_decode(self, data: bytes) -> bytes:
        """Collect the client's HTTP request and return the data it carries.

        Returns empty bytes while the request header is incomplete and raises
        :class:`ObfsError` when the request is not acceptable.
        """
        if self.has_recv_header:
            return data
        if data:
            self._recv_buffer += data
        buffer = bytes(self._recv_buffer)

        if len(buffer) <= 10:
            self.has_sent_header = True
            self.has_recv_header = True
            raise ObfsError("http_simple: too short")
        if not buffer.startswith((b"GET /", b"POST /")):
            raise self._reject("http_simple: not match begin")
        if len(buffer) > MAX_HEADER_SIZE:
            raise self._reject("http_simple: over size")

        end = buffer.find(b"\r\n\r\n")
        if end < 0:
            return b""
        payload = get_data_from_http_header(buffer)

        if self.server.param == "":
            self.server.param = None
        elif self.server.param is not None and not self.host_matched:
            host = get_host_from_http_header(buffer)
            hosts, _ = parse_host_param(self.server.param)
            if host not in hosts:
                raise self._reject(f"http_simple: not match host, host: {host}")
            self.host_matched = True

        if not payload:
            raise ObfsError("http_simple: no data in request header")

        self.has_recv_header = True
        self._recv_buffer.clear()
        return payload + buffer[end + 4:]


class HttpPost(HttpSimple):
    """The http_post variant: the client sends a multipart POST request."""

    def client_encode(self, data: bytes) -> bytes:
        """Wrap the first chunk sent by the client in an HTTP POST request."""
        return self._encode_request(
            data,
            "POST",
            lambda: f"Content-Type: multipart/form-data; boundary={make_boundary(self._rng)}\r\n",
        )
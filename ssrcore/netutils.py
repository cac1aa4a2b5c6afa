"""Network helpers: address resolution, comparison, binding and hostname checks."""

from __future__ import annotations

import ipaddress
import logging
import socket
import time
from typing import NamedTuple, Optional, Union

logger = logging.getLogger(__name__)

INET_SIZE = 4
INET6_SIZE = 16

_SOCKADDR_IN_LEN = 16
_SOCKADDR_IN6_LEN = 28

_SO_REUSEPORT = getattr(socket, "SO_REUSEPORT", 15)

_VALID_LABEL_CHARS = frozenset(
    "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"
)

_RESOLVE_ATTEMPTS = 7

Port = Union[int, str, None]


class ResolveError(OSError):
    """Raised when a host name cannot be resolved."""


class SockAddr(NamedTuple):
    """A socket address together with its address family."""

    family: int
    address: tuple


def _ip_version(host: str) -> Optional[int]:
    try:
        return ipaddress.ip_address(host).version
    except ValueError:
        return None


def _port_number(port: Port) -> int:
    if port is None:
        return 0
    if isinstance(port, int):
        return port
    digits = ""
    text = port.strip()
    sign = 1
    if text[:1] in "+-" and text:
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    for ch in text:
        if not ch.isdigit():
            break
        digits += ch
    return (sign * int(digits)) & 0xFFFF if digits else 0


def get_sockaddr_len(family: int) -> int:
    """Return the size of the C socket address structure for ``family``, or 0."""
    if family == socket.AF_INET:
        return _SOCKADDR_IN_LEN
    if family == socket.AF_INET6:
        return _SOCKADDR_IN6_LEN
    return 0


def set_reuseport(sock: socket.socket) -> None:
    """Enable SO_REUSEPORT on ``sock``."""
    sock.setsockopt(socket.SOL_SOCKET, _SO_REUSEPORT, 1)


def bind_to_address(sock: socket.socket, host: Optional[str]) -> None:
    """Bind ``sock`` to the literal IP address ``host`` on an ephemeral port."""
    version = _ip_version(host) if host is not None else None
    if version == 4:
        sock.bind((host, 0))
    elif version == 6:
        sock.bind((host, 0, 0, 0))
    else:
        raise ValueError(f"not an IP address: {host!r}")


def get_sockaddr(
    host: str,
    port: Port = None,
    block: bool = False,
    ipv6_first: bool = False,
) -> SockAddr:
    """Turn ``host`` and ``port`` into a socket address.

    Literal IP addresses are used as they are. Names are resolved; with
    ``block`` a failing lookup is retried with growing pauses. The address of
    the preferred family is chosen when one is found, else the first result.
    """
    version = _ip_version(host)
    if version == 4:
        return SockAddr(socket.AF_INET, (host, _port_number(port)))
    if version == 6:
        return SockAddr(socket.AF_INET6, (host, _port_number(port), 0, 0))

    service = port if port is None or isinstance(port, str) else str(port)
    results = None
    error: Optional[socket.gaierror] = None
    for attempt in range(1, _RESOLVE_ATTEMPTS + 1):
        try:
            results = socket.getaddrinfo(
                host, service, socket.AF_UNSPEC, socket.SOCK_STREAM
            )
            error = None
        except socket.gaierror as exc:
            error = exc
        if not block or error is None:
            break
        delay = 2 ** attempt
        time.sleep(delay)
        logger.error("failed to resolve server name, wait %d seconds", delay)

    if error is not None or results is None:
        logger.error("getaddrinfo: %s", error)
        raise ResolveError(f"getaddrinfo: {error}")
    if not results:
        logger.error("failed to resolve remote addr")
        raise ResolveError("failed to resolve remote addr")

    preferred = socket.AF_INET6 if ipv6_first else socket.AF_INET
    for family, _type, _proto, _name, sockaddr in results:
        if family == preferred:
            return SockAddr(family, tuple(sockaddr))
    family, _type, _proto, _name, sockaddr = results[0]
    return SockAddr(family, tuple(sockaddr))


def _sign(a, b) -> int:
    return (a > b) - (a < b)


def _packed(family: int, host: str) -> bytes:
    host = host.split("%", 1)[0]
    return socket.inet_pton(family, host)


def _compare(addr1: SockAddr, addr2: SockAddr, with_port: bool) -> int:
    order = _sign(int(addr1.family), int(addr2.family))
    if order:
        return order
    if addr1.family in (socket.AF_INET, socket.AF_INET6):
        if with_port:
            order = _sign(addr1.address[1], addr2.address[1])
            if order:
                return order
        return _sign(
            _packed(addr1.family, addr1.address[0]),
            _packed(addr2.family, addr2.address[0]),
        )
    try:
        return _sign(addr1.address, addr2.address)
    except TypeError:
        return _sign(repr(addr1.address), repr(addr2.address))


def sockaddr_cmp(addr1: SockAddr, addr2: SockAddr) -> int:
    """Order two addresses by family, port and address: -1, 0 or 1."""
    return _compare(addr1, addr2, with_port=True)


def sockaddr_cmp_addr(addr1: SockAddr, addr2: SockAddr) -> int:
    """Order two addresses by family and address, ignoring the port: -1, 0 or 1."""
    return _compare(addr1, addr2, with_port=False)


def validate_hostname(hostname: Optional[str]) -> bool:
    """Tell whether ``hostname`` is a syntactically valid DNS host name."""
    if hostname is None:
        return False
    if not 1 <= len(hostname) <= 255:
        return False
    if hostname.startswith("."):
        return False
    labels = hostname.split(".")
    if hostname.endswith("."):
        labels.pop()
    for label in labels:
        if not 1 <= len(label) <= 63:
            return False
        if label.startswith("-") or label.endswith("-"):
            return False
        if not set(label) <= _VALID_LABEL_CHARS:
            return False
    return True
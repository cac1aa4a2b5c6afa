import socket
from unittest import mock

import pytest

from ssrcore.netutils import (
    ResolveError,
    SockAddr,
    bind_to_address,
    get_sockaddr,
    get_sockaddr_len,
    set_reuseport,
    sockaddr_cmp,
    sockaddr_cmp_addr,
    validate_hostname,
)


@pytest.mark.parametrize(
    "hostname",
    ["example.com", "example.com.", "a", "my_host.example.com", "a-b.c-d.example.com"],
)
def test_valid_hostnames(hostname):
    assert validate_hostname(hostname) is True


@pytest.mark.parametrize(
    "hostname",
    [
        None,
        "",
        ".example.com",
        "exa mple.com",
        "-example.com",
        "example-.com",
        "a..b",
        "x" * 64 + ".com",
        ("a." * 128)[:256],
    ],
)
def test_invalid_hostnames(hostname):
    assert validate_hostname(hostname) is False


def test_label_of_63_chars_is_valid():
    assert validate_hostname("x" * 63 + ".com") is True


def test_sockaddr_len():
    assert get_sockaddr_len(socket.AF_INET) == 16
    assert get_sockaddr_len(socket.AF_INET6) == 28
    assert get_sockaddr_len(socket.AF_UNIX) == 0


def test_get_sockaddr_ipv4_literal():
    addr = get_sockaddr("127.0.0.1", "8388")
    assert addr == SockAddr(socket.AF_INET, ("127.0.0.1", 8388))


def test_get_sockaddr_ipv6_literal():
    addr = get_sockaddr("::1", 443)
    assert addr.family == socket.AF_INET6
    assert addr.address[:2] == ("::1", 443)


def test_get_sockaddr_literal_without_port():
    assert get_sockaddr("10.0.0.1").address == ("10.0.0.1", 0)


_RESULTS = [
    (socket.AF_INET6, socket.SOCK_STREAM, 6, "", ("2001:db8::1", 80, 0, 0)),
    (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("192.0.2.1", 80)),
]


@mock.patch("socket.getaddrinfo", return_value=_RESULTS)
def test_get_sockaddr_prefers_ipv4(_getaddrinfo):
    addr = get_sockaddr("example.com", "80")
    assert addr == SockAddr(socket.AF_INET, ("192.0.2.1", 80))


@mock.patch("socket.getaddrinfo", return_value=_RESULTS)
def test_get_sockaddr_prefers_ipv6(_getaddrinfo):
    addr = get_sockaddr("example.com", "80", ipv6_first=True)
    assert addr == SockAddr(socket.AF_INET6, ("2001:db8::1", 80, 0, 0))


@mock.patch("socket.getaddrinfo", return_value=_RESULTS[:1])
def test_get_sockaddr_falls_back_to_first(_getaddrinfo):
    addr = get_sockaddr("example.com", "80")
    assert addr.family == socket.AF_INET6


@mock.patch("socket.getaddrinfo", side_effect=socket.gaierror("no such host"))
def test_get_sockaddr_failure_without_block(getaddrinfo):
    with pytest.raises(ResolveError):
        get_sockaddr("example.invalid", "80")
    assert getaddrinfo.call_count == 1


@mock.patch("time.sleep")
@mock.patch("socket.getaddrinfo", side_effect=socket.gaierror("no such host"))
def test_get_sockaddr_retries_when_blocking(getaddrinfo, sleep):
    with pytest.raises(ResolveError):
        get_sockaddr("example.invalid", "80", block=True)
    assert getaddrinfo.call_count > 1
    assert sleep.call_count == getaddrinfo.call_count
    delays = [call.args[0] for call in sleep.call_args_list]
    assert delays == sorted(delays)


@mock.patch("time.sleep")
@mock.patch(
    "socket.getaddrinfo",
    side_effect=[socket.gaierror("temporary"), _RESULTS],
)
def test_get_sockaddr_blocking_succeeds_after_retry(getaddrinfo, sleep):
    addr = get_sockaddr("example.com", "80", block=True)
    assert addr.address == ("192.0.2.1", 80)
    assert getaddrinfo.call_count == 2
    assert sleep.call_count == 1


def _v4(host, port):
    return SockAddr(socket.AF_INET, (host, port))


def _v6(host, port):
    return SockAddr(socket.AF_INET6, (host, port, 0, 0))


def test_sockaddr_cmp_equal():
    assert sockaddr_cmp(_v4("10.0.0.1", 80), _v4("10.0.0.1", 80)) == 0


def test_sockaddr_cmp_family_first():
    assert sockaddr_cmp(_v4("255.255.255.255", 65535), _v6("::", 0)) == -1
    assert sockaddr_cmp(_v6("::", 0), _v4("0.0.0.0", 0)) == 1


def test_sockaddr_cmp_port_before_address():
    assert sockaddr_cmp(_v4("10.0.0.9", 80), _v4("10.0.0.1", 81)) == -1


def test_sockaddr_cmp_address_bytes():
    assert sockaddr_cmp(_v4("10.0.0.2", 80), _v4("10.0.0.10", 80)) == -1
    assert sockaddr_cmp(_v6("2001:db8::2", 1), _v6("2001:db8::1", 1)) == 1


def test_sockaddr_cmp_is_antisymmetric():
    a, b = _v6("2001:db8::1", 5), _v6("2001:db8::1", 6)
    assert sockaddr_cmp(a, b) == -sockaddr_cmp(b, a)


def test_sockaddr_cmp_addr_ignores_port():
    assert sockaddr_cmp_addr(_v4("10.0.0.1", 80), _v4("10.0.0.1", 9999)) == 0
    assert sockaddr_cmp_addr(_v4("10.0.0.9", 80), _v4("10.0.0.1", 81)) == 1


def test_bind_to_address_ipv4():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        bind_to_address(sock, "127.0.0.1")
        assert sock.getsockname()[0] == "127.0.0.1"


@pytest.mark.parametrize("host", [None, "localhost", "not an address"])
def test_bind_to_address_rejects_non_ip(host):
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        with pytest.raises(ValueError):
            bind_to_address(sock, host)


def test_set_reuseport():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        assert sock.getsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT) == 0
        set_reuseport(sock)
        assert sock.getsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT) == 1
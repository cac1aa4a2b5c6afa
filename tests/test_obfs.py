import pytest

from ssrcore.http_simple import HttpPost, HttpSimple
from ssrcore.obfs import UnknownObfsError, new_obfs, new_obfs_class
from ssrcore.obfsutil import ServerInfo


@pytest.mark.parametrize("name", [None, "origin", "plain"])
def test_passthrough_names_have_no_class(name):
    assert new_obfs_class(name) is None


@pytest.mark.parametrize("name", [None, "origin", "plain"])
def test_passthrough_names_have_no_session(name):
    assert new_obfs(name, ServerInfo(host="example.com")) is None


def test_http_simple_class():
    assert new_obfs_class("http_simple") is HttpSimple


def test_http_post_class():
    assert new_obfs_class("http_post") is HttpPost


def test_unknown_name_raises():
    with pytest.raises(UnknownObfsError):
        new_obfs_class("no_such_obfs")


def test_unknown_name_raises_from_new_obfs():
    with pytest.raises(UnknownObfsError):
        new_obfs("no_such_obfs", ServerInfo())


def test_new_obfs_builds_session_of_right_type():
    session = new_obfs("http_post", ServerInfo(host="example.com", port=80))
    assert isinstance(session, HttpPost)
    assert session.server.host == "example.com"


def test_new_obfs_copies_server_info():
    info = ServerInfo(host="example.com", port=80, param="")
    session = new_obfs("http_simple", info)
    session.client_encode(b"x" * 50)
    assert session.server.param is None
    assert info.param == ""
    assert session.server is not info


def test_new_obfs_without_server_uses_defaults():
    session = new_obfs("http_simple")
    assert session.server == ServerInfo()


@pytest.mark.parametrize("name", ["http_simple", "http_post"])
def test_client_server_round_trip(name):
    payload = bytes(range(256)) * 2
    info = ServerInfo(host="example.com", port=80, param="example.com", head_len=10)
    client = new_obfs(name, info)
    server = new_obfs(name, info)
    wire = client.client_encode(payload)
    assert b"Host: example.com\r\n" in wire
    assert server.server_decode(wire) == payload

    reply = server.server_encode(b"response")
    assert client.client_decode(reply) == b"response"
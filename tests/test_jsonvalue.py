import pytest

from ssrcore.jsonvalue import JsonType, JsonValue


def _config():
    root = JsonValue(JsonType.OBJECT)
    port = JsonValue(JsonType.INTEGER, 8388, root)
    name = JsonValue(JsonType.STRING, "server", root)
    servers = JsonValue(JsonType.ARRAY, None, root)
    servers.value.append(JsonValue(JsonType.STRING, "a.example.com", servers))
    servers.value.append(JsonValue(JsonType.STRING, "b.example.com", servers))
    flag = JsonValue(JsonType.BOOLEAN, True, root)
    nothing = JsonValue(JsonType.NULL, None, root)
    root.value.extend(
        [
            ("server_port", port),
            ("name", name),
            ("servers", servers),
            ("fast_open", flag),
            ("nothing", nothing),
            ("name", JsonValue(JsonType.STRING, "other", root)),
        ]
    )
    return root


def test_object_lookup_by_name():
    root = _config()
    assert root["server_port"].as_int() == 8388
    assert root["name"].as_str() == "server"


def test_missing_key_gives_none_value():
    root = _config()
    missing = root["absent"]
    assert missing.type is JsonType.NONE
    assert missing.as_int() == 0
    assert missing.as_str() == ""


def test_string_key_on_non_object_gives_none():
    value = JsonValue(JsonType.ARRAY, [JsonValue(JsonType.INTEGER, 1)])
    assert value["x"].type is JsonType.NONE


def test_array_index_lookup_and_bounds():
    servers = _config()["servers"]
    assert servers[0].as_str() == "a.example.com"
    assert servers[1].as_str() == "b.example.com"
    assert servers[2].type is JsonType.NONE
    assert servers[-1].type is JsonType.NONE


def test_int_index_on_object_gives_none():
    assert _config()[0].type is JsonType.NONE


def test_len_of_containers_and_strings():
    root = _config()
    assert len(root) == 6
    assert len(root["servers"]) == 2
    assert len(root["name"]) == len("server")
    assert len(root["server_port"]) == 0


def test_bool_only_true_for_true_boolean():
    root = _config()
    truth = [
        bool(root["fast_open"]),
        bool(JsonValue(JsonType.BOOLEAN, False)),
        bool(root["server_port"]),
        bool(root["name"]),
    ]
    assert truth == [True, False, False, False]


def test_as_int_truncates_double():
    assert JsonValue(JsonType.DOUBLE, -2.7).as_int() == -2
    assert JsonValue(JsonType.DOUBLE, 3.9).as_int() == 3


def test_as_int_of_boolean_is_zero():
    assert JsonValue(JsonType.BOOLEAN, True).as_int() == 0


def test_as_float_conversions():
    assert JsonValue(JsonType.INTEGER, 5).as_float() == 5.0
    assert JsonValue(JsonType.DOUBLE, 1.5).as_float() == 1.5
    assert JsonValue(JsonType.STRING, "1.5").as_float() == 0.0


def test_as_str_on_non_string_is_empty():
    assert JsonValue(JsonType.INTEGER, 7).as_str() == ""


def test_defaults_by_type():
    assert JsonValue(JsonType.OBJECT).value == []
    assert JsonValue(JsonType.STRING).value == ""
    assert JsonValue(JsonType.INTEGER).as_int() == 0
    assert JsonValue().type is JsonType.NONE


def test_parent_links():
    root = _config()
    servers = root["servers"]
    assert servers.parent is root
    assert servers[0].parent is servers
    assert root.parent is None


def test_to_python_first_duplicate_wins():
    assert _config().to_python() == {
        "server_port": 8388,
        "name": "server",
        "servers": ["a.example.com", "b.example.com"],
        "fast_open": True,
        "nothing": None,
    }


@pytest.mark.parametrize(
    "kind, payload",
    [
        (JsonType.INTEGER, 42),
        (JsonType.DOUBLE, 0.25),
        (JsonType.STRING, "text"),
        (JsonType.BOOLEAN, False),
    ],
)
def test_to_python_scalars(kind, payload):
    assert JsonValue(kind, payload).to_python() == payload


def test_iteration():
    root = _config()
    assert [item.as_str() for item in root["servers"]] == [
        "a.example.com",
        "b.example.com",
    ]
    assert [name for name, _ in root][:2] == ["server_port", "name"]
    assert list(JsonValue(JsonType.INTEGER, 1)) == []


def test_empty_array_and_null_defaults():
    empty = JsonValue(JsonType.ARRAY)
    assert empty.value == []
    assert len(empty) == 0
    assert empty.to_python() == []
    assert JsonValue(JsonType.NULL).to_python() is None
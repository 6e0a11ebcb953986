import io
import json

import pytest

from shadowspotter.parse import (
    ParseErrors,
    ParserError,
    get_map_string,
    load_json_bytes,
    load_json_file,
    load_json_reader,
    load_json_string,
    slow_load_json_bytes,
    slow_load_json_file,
    unmarshal_json_value,
)
from shadowspotter.schema import API, Operation, Parameter, Schema, SecurityDefinition

SIMPLE_DOCUMENT = [
    {
        "ksuid": "0cc39f78f36dbe7fe7ea94c0f2687d269d728f96",
        "url": "api.example.com",
        "securityDefinitions": {
            "developerKey": {"in": "header", "name": "X-Developer-Key", "type": "apiKey"}
        },
        "paths": {
            "/onigokko/player": {
                "post": {
                    "consume": ["application/json"],
                    "produce": ["text/plain"],
                    "description": "Adds a new Player to the system",
                    "operationId": "CreatePlayer",
                    "parameter": [
                        {
                            "in": "header",
                            "name": "Token",
                            "description": "session token for validation purposes",
                            "required": True,
                            "type": "string",
                            "default": "token",
                        },
                        {
                            "in": "query",
                            "name": "QueryParam",
                            "description": "hahah123",
                            "required": True,
                            "type": "string",
                            "default": "example-query",
                        },
                        {
                            "in": "header",
                            "name": "Token",
                            "description": "session token for validation purposes",
                            "required": True,
                            "type": "string",
                            "default": "token",
                        },
                        {
                            "in": "body",
                            "name": "player",
                            "description": "Player to create",
                            "required": True,
                            "schema": {
                                "type": "object",
                                "required": ["id", "name"],
                                "properties": {
                                    "id": {"type": "integer", "example": 123455, "default": 5},
                                    "name": {
                                        "type": "string",
                                        "example": "Jane Doe",
                                        "default": "Jane Doe",
                                    },
                                },
                            },
                        },
                    ],
                }
            }
        },
    }
]


def _token_param():
    return Parameter(
        in_="header",
        name="Token",
        description="session token for validation purposes",
        required=True,
        type="string",
        default="token",
    )


EXPECTED_SIMPLE = [
    API(
        id="0cc39f78f36dbe7fe7ea94c0f2687d269d728f96",
        url="api.example.com",
        security_definitions={
            "developerKey": SecurityDefinition(in_="header", name="X-Developer-Key", type="apiKey")
        },
        paths={
            "/onigokko/player": {
                "post": Operation(
                    consumes=["application/json"],
                    produces=["text/plain"],
                    description="Adds a new Player to the system",
                    operation_id="CreatePlayer",
                    parameters=[
                        _token_param(),
                        Parameter(
                            in_="query",
                            name="QueryParam",
                            description="hahah123",
                            required=True,
                            type="string",
                            default="example-query",
                        ),
                        _token_param(),
                        Parameter(
                            in_="body",
                            name="player",
                            description="Player to create",
                            required=True,
                            schema=Schema(
                                type="object",
                                required=["id", "name"],
                                properties={
                                    "id": Schema(type="integer", example=123455, default=5),
                                    "name": Schema(
                                        type="string", example="Jane Doe", default="Jane Doe"
                                    ),
                                },
                            ),
                        ),
                    ],
                )
            }
        },
    )
]


def _slow_api(**overrides):
    api = {
        "url": "api.example.com",
        "ksuid": "abc",
        "paths": {"/a": {"get": {"description": "d", "operationId": "op"}}},
    }
    api.update(overrides)
    return api


def test_load_json_file_simple(tmp_path):
    path = tmp_path / "simple.json"
    path.write_text(json.dumps(SIMPLE_DOCUMENT))
    apis = load_json_file(str(path))
    assert apis == EXPECTED_SIMPLE
    assert [a.to_dict() for a in apis] == [a.to_dict() for a in EXPECTED_SIMPLE]


def test_load_json_string_and_reader_agree():
    text = json.dumps(SIMPLE_DOCUMENT)
    assert load_json_string(text) == EXPECTED_SIMPLE
    assert load_json_reader(io.BytesIO(text.encode())) == EXPECTED_SIMPLE
    assert load_json_reader(io.StringIO(text)) == EXPECTED_SIMPLE


def test_load_json_bytes_empty_and_null():
    assert load_json_bytes(b"[]") == []
    assert load_json_bytes(b"null") == []


def test_load_json_bytes_null_element_is_empty_api():
    assert load_json_bytes(b"[null]") == [API()]


@pytest.mark.parametrize(
    "data", [b"{not json", b'{"url": "x"}', b"[1]", b'[{"url": 5}]']
)
def test_load_json_bytes_errors(data):
    with pytest.raises(ValueError, match="failed to unmarshal json"):
        load_json_bytes(data)


def test_load_json_file_missing(tmp_path):
    with pytest.raises(OSError):
        load_json_file(str(tmp_path / "absent.json"))


def test_slow_load_valid():
    data = json.dumps(
        [
            _slow_api(
                securityDefinitions={"k": {"in": "header", "name": "X-Key", "type": "apiKey"}},
                paths={
                    "/a": {
                        "get": {
                            "description": "d",
                            "operationId": "op",
                            "consumes": ["application/json"],
                            "produces": ["text/plain"],
                            "parameters": [
                                [{"in": "query", "name": "a"}],
                                {"in": "header", "name": "b"},
                            ],
                        }
                    }
                },
            )
        ]
    )
    apis = slow_load_json_bytes(data)
    assert len(apis) == 1
    api = apis[0]
    assert api.url == "api.example.com"
    assert api.id == "abc"
    assert api.security_definitions == {
        "k": SecurityDefinition(in_="header", name="X-Key", type="apiKey")
    }
    op = api.paths["/a"]["get"]
    assert op.description == "d"
    assert op.operation_id == "op"
    assert op.consumes == ["application/json"]
    assert op.produces == ["text/plain"]
    assert [(p.in_, p.name) for p in op.parameters] == [("query", "a"), ("header", "b")]


def test_slow_load_nested_lists():
    data = json.dumps([[_slow_api(ksuid="one")], _slow_api(ksuid="two")])
    assert [a.id for a in slow_load_json_bytes(data)] == ["one", "two"]


def test_slow_load_missing_description_keeps_api():
    data = json.dumps([_slow_api(paths={"/a": {"get": {"operationId": "op"}}})])
    with pytest.raises(ParseErrors) as info:
        slow_load_json_bytes(data)
    err = info.value
    assert len(err.apis) == 1
    assert err.apis[0].paths["/a"]["get"].operation_id == "op"
    assert len(err.errors) == 1
    outer = err.errors[0]
    assert outer.context == "root.[].v"
    assert outer.api_id == "root"
    inner = list(outer.cause)
    assert len(inner) == 1
    assert inner[0].route == "/a"
    assert inner[0].method == "get"
    assert "failed to get operation description" in str(inner[0])


def test_slow_load_unexpected_element_type():
    with pytest.raises(ParseErrors) as info:
        slow_load_json_bytes(b"[1]")
    assert info.value.apis == []
    assert "unexpected type: number" in str(info.value.errors[0])
    assert info.value.errors[0].context == "root.[].v"


def test_slow_load_missing_paths():
    api = _slow_api()
    del api["paths"]
    with pytest.raises(ParseErrors) as info:
        slow_load_json_bytes(json.dumps([api]))
    inner = list(info.value.errors[0].cause)
    assert inner[0].message == "missing paths"
    assert info.value.apis[0].url == "api.example.com"


def test_slow_load_nil_parameter_reported():
    api = _slow_api(
        paths={
            "/a": {
                "get": {
                    "description": "d",
                    "operationId": "op",
                    "parameters": [None, {"name": "b"}],
                }
            }
        }
    )
    with pytest.raises(ParseErrors) as info:
        slow_load_json_bytes(json.dumps([api]))
    op = info.value.apis[0].paths["/a"]["get"]
    assert [p.name for p in op.parameters] == ["b"]
    api_errors = list(info.value.errors[0].cause)
    assert api_errors[0].context == "api.paths.operations.parameters"
    assert "unexpected nil type" in str(api_errors[0])


def test_slow_load_bad_operation_type():
    api = _slow_api(paths={"/a": {"get": "nope"}})
    with pytest.raises(ParseErrors) as info:
        slow_load_json_bytes(json.dumps([api]))
    assert info.value.apis[0].paths == {"/a": {}}
    inner = list(info.value.errors[0].cause)
    assert "unexpected type for operation: string" in str(inner[0])


def test_slow_load_invalid_json():
    with pytest.raises(ValueError, match="failed to unmarshal json"):
        slow_load_json_bytes(b"[")


def test_slow_load_json_file(tmp_path):
    path = tmp_path / "apis.json"
    path.write_text(json.dumps([_slow_api()]))
    apis = slow_load_json_file(str(path))
    assert apis[0].paths["/a"]["get"].description == "d"


def test_get_map_string():
    assert get_map_string({"url": "x"}, "url") == "x"
    assert get_map_string({"url": None}, "url") == ""


def test_get_map_string_missing():
    with pytest.raises(ParserError) as info:
        get_map_string({"other": 1}, "url")
    assert info.value.context == "url"
    assert info.value.message == "missing field"


def test_get_map_string_wrong_type():
    with pytest.raises(TypeError):
        get_map_string({"url": 3}, "url")


def test_unmarshal_json_value():
    assert unmarshal_json_value({"a": [1, 2]}, "a", lambda v: sum(v)) == 3
    assert unmarshal_json_value({}, "a", lambda v: 1) is None


def test_unmarshal_json_value_failure():
    def convert(value):
        raise TypeError("bad value")

    with pytest.raises(ParserError) as info:
        unmarshal_json_value({"a": 1}, "a", convert)
    assert info.value.context == "a"
    assert info.value.raw_json == b"1"
    assert "bad value" in str(info.value)
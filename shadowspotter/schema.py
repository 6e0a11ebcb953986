"""API descriptions: security definitions, paths, operations, parameters and schemas.

Objects are read from and written to plain JSON-style dictionaries using the
same keys as the API description files. Keys are matched exactly first and
then without regard to case. A ``null`` value leaves a field at its default,
unknown keys are ignored, and a value of the wrong type raises ``TypeError``.
When written out, empty fields are left out, except for an API's ``url``,
``securityDefinitions`` and ``paths`` and every field of a security
definition.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping


class OperationType(str, Enum):
    """The HTTP verbs an operation can be keyed by."""

    GET = "get"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"
    PATCH = "patch"
    POST = "post"
    PUT = "put"


@dataclass(frozen=True)
class _Spec:
    attr: str
    key: str
    kind: str
    omit_empty: bool = True


def _type_name(value: Any) -> str:
    return "null" if value is None else type(value).__name__


def _lookup(data: Mapping[str, Any], key: str) -> tuple[bool, Any]:
    if key in data:
        return True, data[key]
    folded = key.casefold()
    for name, value in data.items():
        if isinstance(name, str) and name.casefold() == folded:
            return True, value
    return False, None


def _expect(value: Any, kinds: type | tuple[type, ...], where: str, what: str) -> None:
    if not isinstance(value, kinds):
        raise TypeError(f"{where}: expected {what}, got {_type_name(value)}")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _dec_str(value: Any, where: str) -> str:
    _expect(value, str, where, "string")
    return value


def _dec_bool(value: Any, where: str) -> bool:
    _expect(value, bool, where, "boolean")
    return value


def _dec_float(value: Any, where: str) -> float:
    if not _is_number(value):
        raise TypeError(f"{where}: expected number, got {_type_name(value)}")
    return float(value)


def _dec_uint(value: Any, where: str) -> int:
    if not _is_number(value):
        raise TypeError(f"{where}: expected number, got {_type_name(value)}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"{where}: expected a whole number, got {value}")
    if value < 0:
        raise ValueError(f"{where}: expected a non-negative number, got {value}")
    return int(value)


def _dec_list(value: Any, where: str) -> list[Any]:
    _expect(value, list, where, "array")
    return list(value)


def _dec_strs(value: Any, where: str) -> list[str]:
    _expect(value, list, where, "array")
    return [_dec_str(item, f"{where}[{index}]") for index, item in enumerate(value)]


def _dec_schema(value: Any, where: str) -> Schema:
    return schema_from_dict(value)


def _dec_schemas(value: Any, where: str) -> list[Schema]:
    _expect(value, list, where, "array")
    return [Schema() if item is None else schema_from_dict(item) for item in value]


def _dec_schema_map(value: Any, where: str) -> dict[str, Schema]:
    _expect(value, Mapping, where, "object")
    return {k: Schema() if v is None else schema_from_dict(v) for k, v in value.items()}


def _dec_params(value: Any, where: str) -> list[Parameter]:
    _expect(value, list, where, "array")
    return [Parameter() if item is None else parameter_from_dict(item) for item in value]


def _dec_secdefs(value: Any, where: str) -> dict[str, SecurityDefinition]:
    _expect(value, Mapping, where, "object")
    return {
        k: SecurityDefinition() if v is None else security_definition_from_dict(v)
        for k, v in value.items()
    }


def _dec_paths(value: Any, where: str) -> dict[str, dict[str, Operation]]:
    _expect(value, Mapping, where, "object")
    paths: dict[str, dict[str, Operation]] = {}
    for path, operations in value.items():
        if operations is None:
            paths[path] = {}
            continue
        _expect(operations, Mapping, f"{where}.{path}", "object")
        paths[path] = {
            verb: Operation() if op is None else operation_from_dict(op)
            for verb, op in operations.items()
        }
    return paths


# Fields of kind "any" have no decoder: their values are kept as they are.
_DECODERS: dict[str, Callable[[Any, str], Any]] = {
    "str": _dec_str,
    "bool": _dec_bool,
    "float": _dec_float,
    "uint": _dec_uint,
    "list": _dec_list,
    "strs": _dec_strs,
    "schema": _dec_schema,
    "schemas": _dec_schemas,
    "schema_map": _dec_schema_map,
    "params": _dec_params,
    "secdefs": _dec_secdefs,
    "paths": _dec_paths,
}


def _enc_float(value: float) -> int | float:
    return int(value) if float(value).is_integer() else value


_ENCODERS: dict[str, Callable[[Any], Any]] = {
    "str": lambda v: v,
    "bool": lambda v: v,
    "float": _enc_float,
    "uint": lambda v: v,
    "any": lambda v: v,
    "list": list,
    "strs": list,
    "schema": lambda v: v.to_dict(),
    "schemas": lambda v: [s.to_dict() for s in v],
    "schema_map": lambda v: {k: v[k].to_dict() for k in sorted(v)},
    "params": lambda v: [p.to_dict() for p in v],
    "secdefs": lambda v: {k: v[k].to_dict() for k in sorted(v)},
    "paths": lambda v: {
        path: {verb: v[path][verb].to_dict() for verb in sorted(v[path])}
        for path in sorted(v)
    },
}


def _is_empty(kind: str, value: Any) -> bool:
    if value is None:
        return True
    if kind == "any":
        return False
    if isinstance(value, bool):
        return not value
    if _is_number(value):
        return value == 0
    if isinstance(value, (str, list, dict)):
        return len(value) == 0
    return False


def _decode_fields(specs: tuple[_Spec, ...], data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, Mapping):
        raise TypeError(f"cannot read {what} from {_type_name(data)}")
    values: dict[str, Any] = {}
    for spec in specs:
        found, raw = _lookup(data, spec.key)
        if not found or raw is None:
            continue
        decoder = _DECODERS.get(spec.kind)
        values[spec.attr] = raw if decoder is None else decoder(raw, f"{what}.{spec.key}")
    return values


def _encode_fields(obj: Any, specs: tuple[_Spec, ...]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for spec in specs:
        value = getattr(obj, spec.attr)
        if spec.omit_empty and _is_empty(spec.kind, value):
            continue
        if value is None:
            value = {} if spec.kind in ("secdefs", "paths", "schema_map") else value
        out[spec.key] = _ENCODERS[spec.kind](value)
    return out


@dataclass
class SecurityDefinition:
    """Where and under which name an API expects its credentials."""

    in_: str = ""
    name: str = ""
    type: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the definition as a JSON-style dictionary."""
        return _encode_fields(self, _SECDEF_SPECS)


@dataclass
class Schema:
    """The shape of a value: its type, format, limits and nested parts."""

    properties: dict[str, Schema] = field(default_factory=dict)
    type: str = ""
    title: str = ""
    format: str = ""
    description: str = ""
    enum: list[Any] = field(default_factory=list)
    default: Any = None
    example: Any = None
    name: str = ""
    collection_format: str = ""
    unique_items: bool = False
    exclusive_min: bool = False
    exclusive_max: bool = False
    nullable: bool = False
    read_only: bool = False
    write_only: bool = False
    allow_empty_value: bool = False
    xml: Any = None
    deprecated: bool = False
    minimum: float = 0.0
    maximum: float = 0.0
    multiple_of: float = 0.0
    min_length: int = 0
    max_length: int = 0
    pattern: str = ""
    min_items: int = 0
    max_items: int = 0
    items: Schema | None = None
    additional_properties: Schema | None = None
    required: Any = None
    min_props: int = 0
    max_props: int = 0
    all_of: list[Schema] = field(default_factory=list)

    def is_zero(self) -> bool:
        """Return whether every field is at its default."""
        return self == Schema()

    def to_dict(self) -> dict[str, Any]:
        """Return the schema as a JSON-style dictionary, leaving out empty fields."""
        return _encode_fields(self, _SCHEMA_SPECS)


@dataclass
class Parameter:
    """One parameter of an operation, in a header, query, path or body."""

    description: str = ""
    in_: str = ""
    name: str = ""
    required: Any = None
    schema: Schema | None = None
    type: str = ""
    allow_empty_value: bool = False
    pattern: str = ""
    format: str = ""
    example: Any = None
    minimum: float = 0.0
    maximum: float = 0.0
    max_length: int = 0
    max_items: int = 0
    min_length: int = 0
    min_items: int = 0
    enum: list[Any] = field(default_factory=list)
    default: Any = None
    items: Schema | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the parameter as a JSON-style dictionary, leaving out empty fields."""
        return _encode_fields(self, _PARAMETER_SPECS)


@dataclass
class Operation:
    """One verb on one path of an API."""

    description: str = ""
    operation_id: str = ""
    parameters: list[Parameter] = field(default_factory=list)
    consumes: list[str] = field(default_factory=list)
    produces: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return the operation as a JSON-style dictionary, leaving out empty fields."""
        return _encode_fields(self, _OPERATION_SPECS)


@dataclass
class API:
    """An API: its identifier, URL, security definitions and paths.

    ``paths`` maps each path to the operations on it, keyed by verb.
    """

    id: str = ""
    url: str = ""
    security_definitions: dict[str, SecurityDefinition] = field(default_factory=dict)
    paths: dict[str, dict[str, Operation]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the API as a JSON-style dictionary."""
        return _encode_fields(self, _API_SPECS)


_SECDEF_SPECS = (
    _Spec("in_", "in", "str", omit_empty=False),
    _Spec("name", "name", "str", omit_empty=False),
    _Spec("type", "type", "str", omit_empty=False),
)

_SCHEMA_SPECS = (
    _Spec("properties", "properties", "schema_map"),
    _Spec("type", "type", "str"),
    _Spec("title", "title", "str"),
    _Spec("format", "format", "str"),
    _Spec("description", "description", "str"),
    _Spec("enum", "enum", "list"),
    _Spec("default", "default", "any"),
    _Spec("example", "example", "any"),
    _Spec("name", "name", "str"),
    _Spec("collection_format", "collectionFormat", "str"),
    _Spec("unique_items", "uniqueItems", "bool"),
    _Spec("exclusive_min", "exclusiveMinimum", "bool"),
    _Spec("exclusive_max", "exclusiveMaximum", "bool"),
    _Spec("nullable", "nullable", "bool"),
    _Spec("read_only", "readOnly", "bool"),
    _Spec("write_only", "writeOnly", "bool"),
    _Spec("allow_empty_value", "allowEmptyValue", "bool"),
    _Spec("xml", "xml", "any"),
    _Spec("deprecated", "deprecated", "bool"),
    _Spec("minimum", "minimum", "float"),
    _Spec("maximum", "maximum", "float"),
    _Spec("multiple_of", "multipleOf", "float"),
    _Spec("min_length", "minLength", "uint"),
    _Spec("max_length", "maxLength", "uint"),
    _Spec("pattern", "pattern", "str"),
    _Spec("min_items", "minItems", "uint"),
    _Spec("max_items", "maxItems", "uint"),
    _Spec("items", "items", "schema"),
    _Spec("additional_properties", "additional_properties", "schema"),
    _Spec("required", "required", "any"),
    _Spec("min_props", "minProperties", "uint"),
    _Spec("max_props", "maxProperties", "uint"),
    _Spec("all_of", "allOf", "schemas"),
)

_PARAMETER_SPECS = (
    _Spec("description", "description", "str"),
    _Spec("in_", "in", "str"),
    _Spec("name", "name", "str"),
    _Spec("required", "required", "any"),
    _Spec("schema", "schema", "schema"),
    _Spec("type", "type", "str"),
    _Spec("allow_empty_value", "allowEmptyValue", "bool"),
    _Spec("pattern", "pattern", "str"),
    _Spec("format", "format", "str"),
    _Spec("example", "example", "any"),
    _Spec("minimum", "minimum", "float"),
    _Spec("maximum", "maximum", "float"),
    _Spec("max_length", "maxLength", "uint"),
    _Spec("max_items", "maxItems", "uint"),
    _Spec("min_length", "minLength", "uint"),
    _Spec("min_items", "minItems", "uint"),
    _Spec("enum", "enum", "list"),
    _Spec("default", "default", "any"),
    _Spec("items", "items", "schema"),
)

_OPERATION_SPECS = (
    _Spec("description", "description", "str"),
    _Spec("operation_id", "operationId", "str"),
    _Spec("parameters", "parameter", "params"),
    _Spec("consumes", "consume", "strs"),
    _Spec("produces", "produce", "strs"),
)

_API_SPECS = (
    _Spec("id", "ksuid", "str"),
    _Spec("url", "url", "str", omit_empty=False),
    _Spec("security_definitions", "securityDefinitions", "secdefs", omit_empty=False),
    _Spec("paths", "paths", "paths", omit_empty=False),
)


def schema_from_dict(data: Mapping[str, Any]) -> Schema:
    """Read a schema from a JSON-style dictionary."""
    return Schema(**_decode_fields(_SCHEMA_SPECS, data, "schema"))


def parameter_from_dict(data: Mapping[str, Any]) -> Parameter:
    """Read a parameter from a JSON-style dictionary."""
    return Parameter(**_decode_fields(_PARAMETER_SPECS, data, "parameter"))


def operation_from_dict(data: Mapping[str, Any]) -> Operation:
    """Read an operation from a JSON-style dictionary."""
    return Operation(**_decode_fields(_OPERATION_SPECS, data, "operation"))


def security_definition_from_dict(data: Mapping[str, Any]) -> SecurityDefinition:
    """Read a security definition from a JSON-style dictionary."""
    return SecurityDefinition(**_decode_fields(_SECDEF_SPECS, data, "securityDefinition"))


def api_from_dict(data: Mapping[str, Any]) -> API:
    """Read an API from a JSON-style dictionary."""
    return API(**_decode_fields(_API_SPECS, data, "api"))
"""Loading API descriptions from JSON.

``load_json_*`` read a document strictly and raise on the first problem.
``slow_load_json_*`` walk the document piece by piece, keep every API they can
read and report every problem they meet, so that faulty descriptions can be
tracked down.
"""

from __future__ import annotations

import json
import logging
from typing import IO, Any, Callable, Mapping, TypeVar

from .schema import (
    API,
    Operation,
    Parameter,
    SecurityDefinition,
    api_from_dict,
    operation_from_dict,
    parameter_from_dict,
    security_definition_from_dict,
)

log = logging.getLogger(__name__)

T = TypeVar("T")

_ROOT = "root"


class ParserError(ValueError):
    """A problem found at one place of an API description."""

    def __init__(
        self,
        message: str,
        *,
        context: str = "",
        raw_json: bytes = b"",
        api_id: str = "",
        route: str = "",
        method: str = "",
        cause: BaseException | None = None,
    ) -> None:
        self.message = f"{message}: {cause}" if cause is not None else message
        self.context = context
        self.raw_json = raw_json
        self.api_id = api_id
        self.route = route
        self.method = method
        self.cause = cause
        super().__init__(self.message)

    def __str__(self) -> str:
        where = " ".join(part for part in (self.api_id, self.method, self.route) if part)
        text = f"{self.context}: {self.message}" if self.context else self.message
        return f"{where} {text}" if where else text


class ParseErrors(Exception):
    """Every problem found while reading a document, with the APIs that were read."""

    def __init__(self, errors: list[ParserError], apis: list[API] | None = None) -> None:
        self.errors = list(errors)
        self.apis = list(apis) if apis is not None else []
        super().__init__(str(self))

    def __iter__(self):
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)

    def __str__(self) -> str:
        noun = "error" if len(self.errors) == 1 else "errors"
        lines = "\n".join(f"\t* {error}" for error in self.errors)
        return f"{len(self.errors)} {noun} occurred:\n{lines}"


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def _raw(value: Any) -> bytes:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str).encode()


def _decode(data: bytes | str) -> Any:
    try:
        return json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValueError(f"failed to unmarshal json: {exc}") from exc


def load_json_bytes(data: bytes | str) -> list[API]:
    """Read a list of APIs from JSON bytes."""
    document = _decode(data)
    if document is None:
        return []
    if not isinstance(document, list):
        raise ValueError(
            f"failed to unmarshal json: expected array, got {_type_name(document)}"
        )
    try:
        return [API() if item is None else api_from_dict(item) for item in document]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"failed to unmarshal json: {exc}") from exc


def load_json_string(text: str) -> list[API]:
    """Read a list of APIs from a JSON string."""
    return load_json_bytes(text.encode("utf-8"))


def load_json_reader(stream: IO[Any]) -> list[API]:
    """Read a list of APIs from everything left in a stream."""
    return load_json_bytes(stream.read())


def load_json_file(filename: str) -> list[API]:
    """Read a list of APIs from a JSON file."""
    with open(filename, "rb") as handle:
        return load_json_bytes(handle.read())


def slow_load_json_file(filename: str) -> list[API]:
    """Read a JSON file piece by piece; see ``slow_load_json_bytes``."""
    with open(filename, "rb") as handle:
        return slow_load_json_bytes(handle.read())


def get_map_string(mapping: Mapping[str, Any], key: str) -> str:
    """Return a string field; ``null`` gives an empty string.

    A missing key raises ``ParserError`` and a value of another type ``TypeError``.
    """
    if key in mapping:
        value = mapping[key]
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        raise TypeError(f"unexpected type for {key}: {_type_name(value)}")
    raise ParserError("missing field", context=key, raw_json=_raw(mapping))


def unmarshal_json_value(
    mapping: Mapping[str, Any], key: str, convert: Callable[[Any], T]
) -> T | None:
    """Convert the value under ``key``, or return None when the key is absent.

    A value the converter rejects raises ``ParserError``.
    """
    if key not in mapping:
        return None
    value = mapping[key]
    try:
        return convert(value)
    except (TypeError, ValueError) as exc:
        raise ParserError(
            "failed to unmarshal", context=key, raw_json=_raw(value), cause=exc
        ) from exc


def _security_definitions(value: Any) -> dict[str, SecurityDefinition]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise TypeError(f"expected object, got {_type_name(value)}")
    return {
        name: SecurityDefinition() if item is None else security_definition_from_dict(item)
        for name, item in value.items()
    }


def _content_types(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise TypeError(f"expected array, got {_type_name(value)}")
    for item in value:
        if not isinstance(item, str):
            raise TypeError(f"expected string, got {_type_name(item)}")
    return list(value)


def _read_parameter(
    value: Mapping[str, Any], context: str, errors: list[ParserError]
) -> Parameter:
    try:
        return parameter_from_dict(value)
    except (TypeError, ValueError) as exc:
        errors.append(
            ParserError(
                "failed to unmarshal param", context=context, raw_json=_raw(value), cause=exc
            )
        )
        return Parameter()


def _unmarshal_parameters(params: Any) -> tuple[list[Parameter], list[ParserError]]:
    result: list[Parameter] = []
    errors: list[ParserError] = []
    root_raw = _raw(params)

    if not isinstance(params, list):
        errors.append(
            ParserError(
                f"unexpected type: {_type_name(params)}", context="param.v", raw_json=root_raw
            )
        )
        return result, errors

    for item in params:
        if isinstance(item, list):
            for value in item:
                if value is None:
                    errors.append(
                        ParserError(
                            "found unexpected nil", context="param.[].[].v", raw_json=root_raw
                        )
                    )
                if isinstance(value, Mapping):
                    result.append(
                        _read_parameter(value, "param.[].[].map[string]interface{}", errors)
                    )
                else:
                    errors.append(
                        ParserError(
                            f"unexpected type: {_type_name(value)}",
                            context="param.[].[].v",
                            raw_json=_raw(value),
                        )
                    )
        elif isinstance(item, Mapping):
            result.append(_read_parameter(item, "param.[].v", errors))
        elif item is None:
            errors.append(
                ParserError("unexpected nil type", context="param.[].v", raw_json=root_raw)
            )
        else:
            errors.append(
                ParserError(
                    f"unexpected type: {_type_name(item)}", context="param.[].v", raw_json=root_raw
                )
            )
    return result, errors


def _unmarshal_operation(
    data: Mapping[str, Any], api_id: str, path: str, verb: str, raw: bytes
) -> tuple[Operation, list[ParserError]]:
    op = Operation()
    errors: list[ParserError] = []

    def fail(message: str, exc: BaseException, context: str = "api.paths.operations.v") -> None:
        errors.append(
            ParserError(
                message,
                context=context,
                raw_json=raw,
                api_id=api_id,
                route=path,
                method=verb,
                cause=exc,
            )
        )

    try:
        op.description = get_map_string(data, "description")
    except (TypeError, ValueError) as exc:
        fail("failed to get operation description", exc)
    try:
        op.operation_id = get_map_string(data, "operationId")
    except (TypeError, ValueError) as exc:
        fail("failed to get operation id", exc)
    try:
        consumes = unmarshal_json_value(data, "consumes", _content_types)
        if consumes is not None:
            op.consumes = consumes
    except ParserError as exc:
        fail("failed to get consumes", exc)
    try:
        produces = unmarshal_json_value(data, "produces", _content_types)
        if produces is not None:
            op.produces = produces
    except ParserError as exc:
        fail("failed to get produces", exc)

    if "parameters" in data:
        params, param_errors = _unmarshal_parameters(data["parameters"])
        op.parameters.extend(params)
        if param_errors:
            fail(
                "failed to get parameters",
                ParseErrors(param_errors),
                context="api.paths.operations.parameters",
            )
    return op, errors


def _unmarshal_api(data: Mapping[str, Any]) -> tuple[API, list[ParserError]]:
    api = API()
    errors: list[ParserError] = []
    raw = _raw(data)

    try:
        api.url = get_map_string(data, "url")
    except (TypeError, ValueError) as exc:
        errors.append(ParserError("failed to get url", context="api", raw_json=raw, cause=exc))
    try:
        api.id = get_map_string(data, "ksuid")
    except (TypeError, ValueError) as exc:
        errors.append(
            ParserError("failed to get api id", context="api", raw_json=raw, cause=exc)
        )

    log.debug("parsing api url=%s id=%s", api.url, api.id)
    try:
        definitions = unmarshal_json_value(data, "securityDefinitions", _security_definitions)
        if definitions is not None:
            api.security_definitions = definitions
    except ParserError as exc:
        errors.append(
            ParserError(
                "failed to get security definitions",
                context="api",
                raw_json=raw,
                api_id=api.id,
                cause=exc,
            )
        )

    if "paths" not in data:
        errors.append(ParserError("missing paths", context="api", raw_json=raw, api_id=api.id))
        return api, errors

    paths = data["paths"]
    if not isinstance(paths, Mapping):
        errors.append(
            ParserError(
                f"unexpected type for path: {_type_name(paths)}",
                context="api.paths",
                raw_json=raw,
                api_id=api.id,
            )
        )
        return api, errors

    for path, operations in paths.items():
        api.paths[path] = {}
        if not isinstance(operations, Mapping):
            errors.append(
                ParserError(
                    f"unexpected type for operations map: {_type_name(operations)}",
                    context="api.paths.operations",
                    raw_json=raw,
                    api_id=api.id,
                    route=path,
                )
            )
            continue
        for verb, op_data in operations.items():
            op_raw = _raw(op_data)
            if not isinstance(op_data, Mapping):
                errors.append(
                    ParserError(
                        f"unexpected type for operation: {_type_name(op_data)}",
                        context="api.paths.operations.v",
                        raw_json=op_raw,
                        api_id=api.id,
                        route=path,
                        method=verb,
                    )
                )
                continue
            op, op_errors = _unmarshal_operation(op_data, api.id, path, verb, op_raw)
            errors.extend(op_errors)
            api.paths[path][verb] = op
    return api, errors


def _read_root_api(
    value: Mapping[str, Any], context: str, apis: list[API], errors: list[ParserError]
) -> None:
    api, api_errors = _unmarshal_api(value)
    if api_errors:
        errors.append(
            ParserError(
                "failed to unmarshal api",
                context=context,
                raw_json=_raw(value),
                api_id=_ROOT,
                cause=ParseErrors(api_errors),
            )
        )
    apis.append(api)


def slow_load_json_bytes(data: bytes | str) -> list[API]:
    """Read a list of APIs, which may be nested one level, field by field.

    Returns the APIs when nothing was wrong. Otherwise raises ``ParseErrors``
    holding every problem found and every API that could be read.
    """
    log.debug("beginning slow load of json bytes")
    document = _decode(data)
    if document is None:
        return []
    if not isinstance(document, list):
        raise ValueError(
            f"failed to unmarshal json: expected array, got {_type_name(document)}"
        )

    apis: list[API] = []
    errors: list[ParserError] = []
    for value in document:
        if isinstance(value, list):
            for inner in value:
                if isinstance(inner, Mapping):
                    _read_root_api(inner, "root.[].[].v", apis, errors)
                else:
                    errors.append(
                        ParserError(
                            f"unexpected type: {_type_name(inner)}",
                            context="root.[].[].v",
                            raw_json=_raw(inner),
                            api_id=_ROOT,
                        )
                    )
        elif isinstance(value, Mapping):
            _read_root_api(value, "root.[].v", apis, errors)
        else:
            errors.append(
                ParserError(
                    f"unexpected type: {_type_name(value)}",
                    context="root.[].v",
                    raw_json=_raw(value),
                    api_id=_ROOT,
                )
            )

    if errors:
        raise ParseErrors(errors, apis)
    return apis
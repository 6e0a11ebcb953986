"""Summaries of loaded API descriptions."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable

from .schema import API

log = logging.getLogger(__name__)


@dataclass
class APISummary:
    """What a set of APIs holds.

    ``lines`` holds one line per API followed by one line per route of it.
    ``header_types`` counts the formats of string properties in untyped body
    schemas, ``parameter_types`` the parameter types, and
    ``route_distribution`` how many APIs have each number of routes.
    """

    lines: list[str] = field(default_factory=list)
    header_types: Counter = field(default_factory=Counter)
    parameter_types: Counter = field(default_factory=Counter)
    route_distribution: Counter = field(default_factory=Counter)
    apis: int = 0
    routes: int = 0


def summarize_apis(apis: Iterable[API]) -> APISummary:
    """Collect the lines and counts describing the APIs."""
    summary = APISummary()
    for api in apis:
        summary.apis += 1
        url = api.url or "<no-url>"
        security = " ".join(
            f"{{{d.in_}:{d.name}({d.type})}}" for d in api.security_definitions.values()
        )
        summary.lines.append(f"{url} [{api.id}] {security}")

        api_routes = 0
        for path, operations in api.paths.items():
            for method, op in operations.items():
                params = []
                for param in op.parameters:
                    params.append(f"{{{param.in_}:{param.name}({param.type})}}")
                    summary.parameter_types[param.type] += 1
                    schema = param.schema
                    if schema is not None and not schema.is_zero() and schema.type == "":
                        for prop in schema.properties.values():
                            if prop.type == "string":
                                summary.header_types[prop.format.lower()] += 1
                        for part in schema.all_of:
                            if part.type == "string":
                                summary.header_types[part.format.lower()] += 1
                verb = method.value if hasattr(method, "value") else method
                summary.lines.append(f"\t{verb} {path} {' '.join(params)}")
                summary.routes += 1
                api_routes += 1
        summary.route_distribution[api_routes] += 1
    return summary


def print_apis(apis: Iterable[API]) -> APISummary:
    """Log a summary of the APIs and return it."""
    summary = summarize_apis(apis)
    for line in summary.lines:
        log.info("%s", line)
    log.info("schema types: %s", dict(summary.header_types))
    log.info("parameter types: %s", dict(summary.parameter_types))
    log.info("route api distribution: %s", dict(summary.route_distribution))
    log.info("analysis complete: apis=%d routes=%d", summary.apis, summary.routes)
    return summary
"""One-line summaries of parameters, responses, auth and headers."""

from __future__ import annotations

import json
from typing import Any

from openapi_context.parser.base import Header, Parameter, RequestBody, Response

from .compact import format_value, schema_type

MAX_HEADER_ENUM = 5

_PARAMETER_LOCATIONS = ("path", "query", "header")


def summarize_parameters(params: list[Parameter], request_body: RequestBody | None = None) -> str:
    """e.g. ``path: {id}, query: {limit?, offset?}, body: required``"""
    grouped: dict[str, list[str]] = {}
    for param in params:
        grouped.setdefault(param.location, []).append(param.name if param.required else f"{param.name}?")

    parts = [f"{loc}: {{{', '.join(grouped[loc])}}}" for loc in _PARAMETER_LOCATIONS if grouped.get(loc)]
    if request_body is not None:
        parts.append(f"body: {'required' if request_body.required else 'optional'}")
    return ", ".join(parts) if parts else "none"


def summarize_responses(responses: dict[str, Response]) -> str:
    """e.g. ``200: object, 404: unknown``. Uses the first content type only."""
    parts = []
    for status_code, response in responses.items():
        kind = "unknown"
        if response.content:
            media = next(iter(response.content.values()))
            if media.schema_def is not None:
                kind = schema_type(media.schema_def) or "object"
        parts.append(f"{status_code}: {kind}")
    return ", ".join(parts)


def summarize_auth(security: list[dict[str, list[str]]] | None) -> str:
    """Alternatives joined by ``OR``, schemes required together by ``+``."""
    if not security:
        return "none"
    return " OR ".join(" + ".join(requirement) for requirement in security)


def format_header_schema(header: Header | dict[str, Any] | None) -> str:
    """Type string for a response header, e.g. ``string, uuid`` or ``array[string]``.

    Only the header's own schema is read. Composition keywords are not
    looked into, so a schema without a direct type renders as ``unknown``.
    """
    if header is None:
        return "unknown"
    schema = header.schema_def if isinstance(header, Header) else header.get("schema")
    if not isinstance(schema, dict) or not schema:
        return "unknown"

    result = schema_type(schema) or "unknown"
    if result == "array" and isinstance(schema.get("items"), dict):
        item_type = schema_type(schema["items"])
        if item_type:
            result = f"array[{item_type}]"

    fmt = schema.get("format")
    if isinstance(fmt, str) and fmt:
        result += f", {fmt}"
    elif schema.get("pattern"):
        result += ", pattern"

    enum = schema.get("enum")
    if isinstance(enum, list) and enum:
        if len(enum) <= MAX_HEADER_ENUM:
            result += f" ({' | '.join(format_value(v) for v in enum)})"
        else:
            result += f" (enum[{len(enum)}])"

    bounds = []
    for key, label in (
        ("minLength", "minLength"),
        ("maxLength", "maxLength"),
        ("minimum", "min"),
        ("maximum", "max"),
    ):
        if schema.get(key) is not None:
            bounds.append(f"{label}: {format_value(schema[key])}")
    if bounds:
        result += f" ({', '.join(bounds)})"

    return result


def _fingerprint(value: Any) -> str:
    try:
        return json.dumps(value, sort_keys=True, default=str)
    except (TypeError, ValueError):
        # Cyclic or otherwise unserializable values
        return repr(value)


def deduplicate_examples(examples: dict[str, Any]) -> dict[str, Any]:
    """Drop examples whose value serializes like an earlier one; first wins."""
    seen: set[str] = set()
    unique = {}
    for name, example in examples.items():
        value = getattr(example, "value", example)
        fingerprint = _fingerprint(value)
        if fingerprint in seen:
            continue
        seen.add(fingerprint)
        unique[name] = example
    return unique

"""Single-line type strings for schemas.

    {"type": "string", "format": "email"}            -> string (email)
    {"type": "integer", "minimum": 1}                -> integer (1-*)
    {"type": "array", "items": {"type": "string"}}   -> string[]
    {"properties": {"id": ..., "name": ...}, ...}    -> object { id: integer, name?: string }

Unrecognized or contradictory schemas render as ``unknown``; formatting
never raises.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from .simplify import CIRCULAR_MARKER

STRINGISH_FORMATS = frozenset(
    {"date-time", "date", "time", "email", "uuid", "uri", "hostname", "ipv4", "ipv6", "password"}
)

MAX_INLINE_PROPERTIES = 3
MAX_INLINE_ENUM = 5
MAX_PREVIEW_ENUM = 100


class SchemaKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    COMPOSITION = "composition"
    UNKNOWN = "unknown"


_KIND_BY_TYPE = {
    "string": SchemaKind.STRING,
    "number": SchemaKind.NUMBER,
    "integer": SchemaKind.NUMBER,
    "boolean": SchemaKind.BOOLEAN,
    "array": SchemaKind.ARRAY,
    "object": SchemaKind.OBJECT,
}


def schema_type(schema: Any) -> str | None:
    """Declared type; for a type list, its first non-null entry."""
    if not isinstance(schema, dict):
        return None
    declared = schema.get("type")
    if isinstance(declared, list):
        declared = next((t for t in declared if isinstance(t, str) and t != "null"), None)
    return declared if isinstance(declared, str) else None


def infer_enum_type(values: Any) -> str | None:
    """Primitive type shared by every enum member, if there is one."""
    if not isinstance(values, list) or not values:
        return None
    if all(isinstance(v, bool) for v in values):
        return "boolean"
    if all(isinstance(v, str) for v in values):
        return "string"
    if all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        return "integer"
    if all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in values):
        return "number"
    return None


def _primitive_type(schema: dict[str, Any]) -> str | None:
    declared = schema_type(schema)
    if declared:
        return declared
    if "properties" in schema or "additionalProperties" in schema:
        return "object"
    if "items" in schema:
        return "array"
    inferred = infer_enum_type(schema.get("enum"))
    if inferred:
        return inferred
    if schema.get("format") in STRINGISH_FORMATS:
        return "string"
    return None


def classify(schema: Any) -> SchemaKind:
    if not isinstance(schema, dict):
        return SchemaKind.UNKNOWN
    primitive = _primitive_type(schema)
    if primitive:
        return _KIND_BY_TYPE.get(primitive, SchemaKind.UNKNOWN)
    if any(key in schema for key in ("allOf", "oneOf", "anyOf")):
        return SchemaKind.COMPOSITION
    return SchemaKind.UNKNOWN


def format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (str, int, float)):
        return str(value)
    try:
        return json.dumps(value, default=str)
    except ValueError:
        return repr(value)


def enum_suffix(values: list[Any]) -> str:
    count = len(values)
    if count == 0:
        return ""
    if count <= MAX_INLINE_ENUM:
        return f" [{', '.join(format_value(v) for v in values)}]"
    if count <= MAX_PREVIEW_ENUM:
        preview = ", ".join(format_value(v) for v in values[:3])
        return f" [{preview}, ...and {count - 3} more]"
    return f" ({count}+ options available)"


def format_compact(schema: Any) -> str:
    """Render ``schema`` as one terse type string, never empty."""
    return _format(schema, frozenset())


def _format(schema: Any, ancestors: frozenset[int]) -> str:
    if not isinstance(schema, dict):
        return "unknown"
    if id(schema) in ancestors or CIRCULAR_MARKER in schema:
        return "circular"
    ancestors = ancestors | {id(schema)}

    kind = classify(schema)
    declared = schema_type(schema)
    enum = schema.get("enum") if isinstance(schema.get("enum"), list) else None

    if kind is SchemaKind.STRING:
        result = "string"
        fmt = schema.get("format")
        if isinstance(fmt, str) and fmt:
            result += f" ({fmt})"
        if enum:
            result += enum_suffix(enum)
        return result

    if kind is SchemaKind.NUMBER:
        result = declared or _primitive_type(schema) or "number"
        minimum, maximum = schema.get("minimum"), schema.get("maximum")
        if minimum is not None or maximum is not None:
            low = format_value(minimum) if minimum is not None else "*"
            high = format_value(maximum) if maximum is not None else "*"
            result += f" ({low}-{high})"
        if enum and not declared:
            result += enum_suffix(enum)
        return result

    if kind is SchemaKind.BOOLEAN:
        return "boolean" + (enum_suffix(enum) if enum and not declared else "")

    if kind is SchemaKind.ARRAY:
        return f"{_format(schema.get('items'), ancestors)}[]"

    if kind is SchemaKind.OBJECT:
        return _format_object(schema, ancestors)

    return "unknown"


def _format_object(schema: dict[str, Any], ancestors: frozenset[int]) -> str:
    properties = schema.get("properties")
    if not isinstance(properties, dict) or not properties:
        return "object"

    required = schema.get("required")
    required = set(r for r in required if isinstance(r, str)) if isinstance(required, list) else set()

    parts = []
    for name, sub in list(properties.items())[:MAX_INLINE_PROPERTIES]:
        marker = "" if name in required else "?"
        parts.append(f"{name}{marker}: {_format(sub, ancestors)}")

    if len(properties) > MAX_INLINE_PROPERTIES:
        parts.append("...")
    return f"object {{ {', '.join(parts)} }}"

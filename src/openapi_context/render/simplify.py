"""Schema simplification for lower-cost transmission.

Produces a reduced copy of a schema subtree:
- allOf branches merged into one object
- oneOf/anyOf kept, with every branch simplified the same way
- UUID / date-time patterns replaced by their format
- enums and examples truncated
- descriptions optionally stripped
- readOnly markers always dropped

The input is never modified. Schemas coming out of the resolver may share
nodes or contain cycles; a node that is already being simplified further
up the current path is replaced by a ``{"x-circular-ref": ...}`` marker.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

UUID_PATTERN_FRAGMENTS = (
    "[0-9a-fA-F]{8}-[0-9a-fA-F]{4}",
    "[0-9a-f]{8}-[0-9a-f]{4}",
    "[a-fA-F0-9]{8}-[a-fA-F0-9]{4}",
    "[a-f0-9]{8}-[a-f0-9]{4}",
)

CIRCULAR_MARKER = "x-circular-ref"
ENUM_NOTE = "x-enum-truncated"

# Keys whose value is a single subschema
_SUBSCHEMA_KEYS = ("items", "additionalProperties", "not")
_COMPOSITION_KEYS = ("allOf", "oneOf", "anyOf")


class SimplifyOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    include_patterns: bool = False
    include_examples: bool = True
    max_examples: int = Field(default=1, ge=0)
    include_descriptions: bool = False
    max_enum_values: int | None = Field(default=None, ge=0)


def simplify(schema: Any, options: SimplifyOptions | None = None) -> Any:
    """Return a simplified copy of ``schema``. Never raises on odd input."""
    return _simplify(schema, options or SimplifyOptions(), frozenset())


def detach(schema: Any) -> Any:
    """Deep copy ``schema``, replacing back-edges of cycles with a marker.

    The result is a plain tree and safe to pass to ``json.dumps``.
    """
    return _detach(schema, frozenset())


def _circular_marker(node: dict[str, Any]) -> dict[str, Any]:
    title = node.get("title")
    return {CIRCULAR_MARKER: title if isinstance(title, str) and title else True}


def _detach(node: Any, ancestors: frozenset[int]) -> Any:
    if isinstance(node, dict):
        if id(node) in ancestors:
            return _circular_marker(node)
        inner = ancestors | {id(node)}
        return {key: _detach(value, inner) for key, value in node.items()}
    if isinstance(node, list):
        if id(node) in ancestors:
            return []
        inner = ancestors | {id(node)}
        return [_detach(item, inner) for item in node]
    return node


def _simplify(node: Any, options: SimplifyOptions, ancestors: frozenset[int]) -> Any:
    if not isinstance(node, dict):
        return _detach(node, ancestors)
    if id(node) in ancestors:
        return _circular_marker(node)
    ancestors = ancestors | {id(node)}

    result: dict[str, Any] = {}
    for key, value in node.items():
        if key == "properties" and isinstance(value, dict):
            result[key] = {name: _simplify(sub, options, ancestors) for name, sub in value.items()}
        elif key in _SUBSCHEMA_KEYS and isinstance(value, dict):
            result[key] = _simplify(value, options, ancestors)
        elif key in _COMPOSITION_KEYS and isinstance(value, list):
            result[key] = [_simplify(branch, options, ancestors) for branch in value]
        else:
            result[key] = _detach(value, ancestors)

    if isinstance(result.get("allOf"), list):
        result = _merge_all_of(result)

    _strip_patterns(result, options)

    if not options.include_descriptions:
        result.pop("description", None)

    _limit_examples(result, options)
    _limit_enum(result, options)

    result.pop("readOnly", None)
    return result


def _merge_all_of(node: dict[str, Any]) -> dict[str, Any]:
    """Fold the node's own keys and its allOf branches into one object schema."""
    branches = [branch for branch in node.pop("allOf") if isinstance(branch, dict)]
    merged: dict[str, Any] = {}

    for source in (node, *branches):
        for key, value in source.items():
            if key == "properties" and isinstance(value, dict):
                merged.setdefault("properties", {}).update(value)
            elif key == "required" and isinstance(value, list):
                required = merged.setdefault("required", [])
                for name in value:
                    if name not in required:
                        required.append(name)
            elif key == "description":
                if value and not merged.get("description"):
                    merged["description"] = value
            elif key not in merged:
                merged[key] = value

    merged.setdefault("type", "object")
    return merged


def _is_uuid_pattern(pattern: Any) -> bool:
    return isinstance(pattern, str) and any(fragment in pattern for fragment in UUID_PATTERN_FRAGMENTS)


def _strip_patterns(node: dict[str, Any], options: SimplifyOptions) -> None:
    fmt = node.get("format")
    if fmt == "uuid" or _is_uuid_pattern(node.get("pattern")):
        node["type"] = "string"
        node["format"] = "uuid"
        if not options.include_patterns:
            node.pop("pattern", None)
    elif fmt == "date-time" and not options.include_patterns:
        node.pop("pattern", None)


def _limit_examples(node: dict[str, Any], options: SimplifyOptions) -> None:
    if not options.include_examples:
        node.pop("examples", None)
        node.pop("example", None)
        return

    examples = node.get("examples")
    if isinstance(examples, list) and len(examples) > options.max_examples:
        node["examples"] = examples[: options.max_examples]
    elif isinstance(examples, dict) and len(examples) > options.max_examples:
        node["examples"] = dict(list(examples.items())[: options.max_examples])


def _limit_enum(node: dict[str, Any], options: SimplifyOptions) -> None:
    enum = node.get("enum")
    limit = options.max_enum_values
    if limit is None or not isinstance(enum, list) or len(enum) <= limit:
        return
    node["enum"] = enum[:limit]
    node[ENUM_NOTE] = f"...and {len(enum) - limit} more values"

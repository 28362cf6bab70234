import copy
import json

from openapi_context.render.simplify import (
    CIRCULAR_MARKER,
    ENUM_NOTE,
    SimplifyOptions,
    detach,
    simplify,
)


def _cyclic_node():
    node = {"type": "object", "title": "Node", "properties": {"value": {"type": "integer"}}}
    node["properties"]["next"] = node
    return node


class TestAllOfMerge:
    def test_required_concatenated(self):
        schema = {"allOf": [{"type": "object", "required": ["a"]}, {"type": "object", "required": ["b"]}]}
        assert simplify(schema)["required"] == ["a", "b"]

    def test_properties_union_later_wins(self):
        schema = {
            "allOf": [
                {"properties": {"id": {"type": "string"}, "name": {"type": "string"}}},
                {"properties": {"name": {"type": "integer"}}},
            ]
        }
        result = simplify(schema)
        assert result["properties"] == {"id": {"type": "string"}, "name": {"type": "integer"}}
        assert result["type"] == "object"
        assert "allOf" not in result

    def test_required_deduplicated(self):
        schema = {"allOf": [{"required": ["a", "b"]}, {"required": ["b", "c"]}]}
        assert simplify(schema)["required"] == ["a", "b", "c"]

    def test_first_description_wins(self):
        schema = {"allOf": [{"description": "first"}, {"description": "second"}]}
        options = SimplifyOptions(include_descriptions=True)
        assert simplify(schema, options)["description"] == "first"

    def test_own_keys_kept(self):
        schema = {"title": "Pet", "allOf": [{"type": "object", "title": "Base"}]}
        assert simplify(schema)["title"] == "Pet"


class TestComposition:
    def test_one_of_branches_simplified(self):
        schema = {"oneOf": [{"type": "string", "description": "a"}, {"type": "integer", "readOnly": True}]}
        assert simplify(schema) == {"oneOf": [{"type": "string"}, {"type": "integer"}]}

    def test_any_of_kept(self):
        schema = {"anyOf": [{"type": "string"}, {"type": "null"}]}
        assert simplify(schema) == schema


class TestPatterns:
    def test_uuid_pattern_becomes_format(self):
        schema = {"type": "string", "pattern": "^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"}
        assert simplify(schema) == {"type": "string", "format": "uuid"}

    def test_uuid_pattern_kept_when_asked(self):
        pattern = "^[a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}$"
        result = simplify({"type": "string", "pattern": pattern}, SimplifyOptions(include_patterns=True))
        assert result == {"type": "string", "format": "uuid", "pattern": pattern}

    def test_date_time_pattern_dropped(self):
        schema = {"type": "string", "format": "date-time", "pattern": "^\\d{4}-\\d{2}-\\d{2}T"}
        assert simplify(schema) == {"type": "string", "format": "date-time"}

    def test_other_patterns_untouched(self):
        schema = {"type": "string", "pattern": "^[A-Z]{2}$"}
        assert simplify(schema) == schema


class TestTruncation:
    def test_descriptions_stripped_by_default(self):
        schema = {"type": "object", "description": "x", "properties": {"a": {"type": "string", "description": "y"}}}
        assert simplify(schema) == {"type": "object", "properties": {"a": {"type": "string"}}}

    def test_examples_capped(self):
        assert simplify({"type": "integer", "examples": [1, 2, 3]})["examples"] == [1]

    def test_example_map_capped(self):
        result = simplify({"type": "integer", "examples": {"a": 1, "b": 2}}, SimplifyOptions(max_examples=1))
        assert result["examples"] == {"a": 1}

    def test_examples_removed(self):
        schema = {"type": "integer", "example": 4, "examples": [1]}
        assert simplify(schema, SimplifyOptions(include_examples=False)) == {"type": "integer"}

    def test_enum_truncated_with_note(self):
        schema = {"type": "string", "enum": [f"v{i}" for i in range(10)]}
        result = simplify(schema, SimplifyOptions(max_enum_values=4))
        assert result["enum"] == ["v0", "v1", "v2", "v3"]
        assert result[ENUM_NOTE] == "...and 6 more values"

    def test_enum_untouched_without_cap(self):
        schema = {"type": "string", "enum": [f"v{i}" for i in range(50)]}
        assert simplify(schema)["enum"] == schema["enum"]

    def test_read_only_dropped(self):
        assert simplify({"type": "string", "readOnly": True}) == {"type": "string"}


class TestRoundTrip:
    def test_lossless_with_generous_options(self):
        schema = {
            "type": "object",
            "description": "A pet",
            "required": ["name"],
            "properties": {
                "name": {"type": "string", "enum": ["rex", "tom"], "description": "Pet name"},
                "tags": {"type": "array", "items": {"type": "string"}, "examples": [["a"], ["b"]]},
                "extra": {"type": "object", "additionalProperties": {"type": "integer"}},
            },
        }
        options = SimplifyOptions(include_descriptions=True, max_examples=10, max_enum_values=10)
        assert simplify(schema, options) == schema

    def test_input_not_modified(self):
        schema = {
            "allOf": [{"required": ["a"], "properties": {"a": {"type": "string", "readOnly": True}}}],
            "description": "d",
        }
        before = copy.deepcopy(schema)
        simplify(schema)
        assert schema == before

    def test_non_schema_input(self):
        assert simplify("string") == "string"
        assert simplify(None) is None


class TestCycles:
    def test_back_edge_marked(self):
        result = simplify(_cyclic_node())
        assert result["properties"]["next"] == {CIRCULAR_MARKER: "Node"}
        json.dumps(result)

    def test_untitled_back_edge(self):
        node = {"type": "array"}
        node["items"] = node
        assert simplify(node)["items"] == {CIRCULAR_MARKER: True}

    def test_shared_node_not_marked(self):
        shared = {"type": "string"}
        schema = {"properties": {"a": shared, "b": shared}}
        assert simplify(schema)["properties"]["b"] == {"type": "string"}

    def test_detach(self):
        result = detach(_cyclic_node())
        assert result["properties"]["next"] == {CIRCULAR_MARKER: "Node"}
        assert result["properties"]["value"] == {"type": "integer"}

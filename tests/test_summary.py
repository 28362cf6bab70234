import pytest

from openapi_context.parser.base import Example, Header, MediaType, Parameter, RequestBody, Response
from openapi_context.render.summary import (
    deduplicate_examples,
    format_header_schema,
    summarize_auth,
    summarize_parameters,
    summarize_responses,
)


class TestSummarizeParameters:
    def test_grouped_by_location(self):
        params = [
            Parameter(name="id", location="path", required=True),
            Parameter(name="limit", location="query"),
            Parameter(name="offset", location="query"),
            Parameter(name="X-Trace", location="header"),
            Parameter(name="session", location="cookie"),
        ]
        body = RequestBody(required=True)
        assert summarize_parameters(params, body) == (
            "path: {id}, query: {limit?, offset?}, header: {X-Trace?}, body: required"
        )

    def test_optional_body(self):
        assert summarize_parameters([], RequestBody()) == "body: optional"

    def test_none(self):
        assert summarize_parameters([]) == "none"


class TestSummarizeResponses:
    def test_types(self):
        responses = {
            "200": Response(content={"application/json": MediaType(schema_def={"type": "array"})}),
            "201": Response(content={"application/json": MediaType(schema_def={"properties": {}})}),
            "204": Response(description="No content"),
        }
        assert summarize_responses(responses) == "200: array, 201: object, 204: unknown"


class TestSummarizeAuth:
    def test_alternatives_and_combinations(self):
        security = [{"apiKey": []}, {"oauth": ["read"], "bearer": []}]
        assert summarize_auth(security) == "apiKey OR oauth + bearer"

    @pytest.mark.parametrize("security", [None, []])
    def test_none(self, security):
        assert summarize_auth(security) == "none"


class TestFormatHeaderSchema:
    @pytest.mark.parametrize(
        "schema, expected",
        [
            ({"type": "string", "format": "uuid"}, "string, uuid"),
            ({"type": "integer", "format": "int32"}, "integer, int32"),
            ({"type": "array"}, "array"),
            ({"type": "array", "items": {"type": "string"}}, "array[string]"),
            ({"type": "object"}, "object"),
            ({"type": "string", "enum": ["a", "b"]}, "string (a | b)"),
            ({"type": "string", "enum": [f"v{i}" for i in range(6)]}, "string (enum[6])"),
            ({"type": "string", "pattern": "^[A-Z]{2}[0-9]{4}$"}, "string, pattern"),
            ({"type": "string", "minLength": 5, "maxLength": 20}, "string (minLength: 5, maxLength: 20)"),
            ({"type": "integer", "minimum": 1, "maximum": 100}, "integer (min: 1, max: 100)"),
            ({"format": "date-time"}, "unknown, date-time"),
            ({"enum": ["value1", "value2"]}, "unknown (value1 | value2)"),
            ({"allOf": [{"type": "string"}, {"format": "uuid"}]}, "unknown"),
            ({"$ref": "#/components/schemas/HeaderType"}, "unknown"),
            ({"type": "string", "const": "fixed"}, "string"),
            ({}, "unknown"),
        ],
    )
    def test_schema(self, schema, expected):
        assert format_header_schema({"schema": schema}) == expected

    def test_header_model(self):
        assert format_header_schema(Header(schema_def={"type": "string", "format": "uuid"})) == "string, uuid"

    @pytest.mark.parametrize("header", [None, {}, {"description": "no schema"}, Header()])
    def test_missing_schema(self, header):
        assert format_header_schema(header) == "unknown"


class TestDeduplicateExamples:
    def test_first_wins(self):
        examples = {
            "basic": Example(name="basic", value={"a": 1, "b": 2}),
            "copy": Example(name="copy", value={"b": 2, "a": 1}),
            "other": Example(name="other", value={"a": 2}),
        }
        assert list(deduplicate_examples(examples)) == ["basic", "other"]

    def test_plain_values(self):
        assert list(deduplicate_examples({"x": 1, "y": 1, "z": "1"})) == ["x", "z"]

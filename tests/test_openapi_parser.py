from pathlib import Path

import pytest

from openapi_context.errors import DocumentError
from openapi_context.parser.detect import read_document
from openapi_context.parser.openapi import (
    extract_content_types,
    extract_operations,
    generate_operation_id,
)
from openapi_context.parser.resolver import dereference

FIXTURES = Path(__file__).parent / "fixtures"


def _operations(name: str):
    path = FIXTURES / name
    return extract_operations(dereference(read_document(path), path))


def _by_id(operations, operation_id):
    return [op for op in operations if op.operation_id == operation_id][0]


class TestSimpleDocument:
    def test_operation_count(self):
        assert len(_operations("simple-api.yaml")) == 2

    def test_get_has_no_body(self):
        get_health = [op for op in _operations("simple-api.yaml") if op.method == "GET"][0]
        assert get_health.path == "/health"
        assert get_health.request_body is None

    def test_post_body_content_types(self):
        echo = [op for op in _operations("simple-api.yaml") if op.method == "POST"][0]
        assert list(echo.request_body.content) == ["application/json"]
        assert echo.request_body.required is True

    def test_named_examples_unwrapped(self):
        echo = _by_id(_operations("simple-api.yaml"), "echoMessage")
        examples = echo.request_body.content["application/json"].examples
        assert list(examples) == ["basic", "copy", "repeated"]
        assert examples["basic"].summary == "A short message"
        assert examples["basic"].value == {"message": "hello"}

    def test_source_order(self):
        assert [op.operation_id for op in _operations("simple-api.yaml")] == ["getHealth", "echoMessage"]


class TestComplexDocument:
    def test_generated_operation_id(self):
        delete = [op for op in _operations("complex-api.yaml") if op.method == "DELETE"][0]
        assert delete.operation_id == "delete_/users/userId"
        assert delete.deprecated is True

    def test_methods_upper_case(self):
        assert {op.method for op in _operations("complex-api.yaml")} == {"GET", "POST", "DELETE"}

    def test_path_level_parameters_come_first(self):
        get_user = _by_id(_operations("complex-api.yaml"), "getUser")
        assert [p.name for p in get_user.parameters] == ["userId", "X-Trace"]
        assert get_user.parameters[0].location == "path"
        assert get_user.parameters[0].required is True

    def test_global_security_fallback(self):
        list_users = _by_id(_operations("complex-api.yaml"), "listUsers")
        assert list_users.security == [{"BearerAuth": []}]

    def test_operation_security_overrides(self):
        create = _by_id(_operations("complex-api.yaml"), "createUser")
        assert create.security == [{"ApiKeyAuth": []}, {"BearerAuth": ["users:write"], "ApiKeyAuth": []}]

    def test_explicit_empty_security_kept(self):
        status = _by_id(_operations("complex-api.yaml"), "getStatus")
        assert status.security == []

    def test_server_fallback_chain(self):
        operations = _operations("complex-api.yaml")
        assert _by_id(operations, "listUsers").servers[0].url == "https://api.example.com/{version}"
        categories = [op for op in operations if op.path == "/categories"][0]
        assert [s.url for s in categories.servers] == ["https://categories.example.com"]

    def test_response_refs_resolved(self):
        create = _by_id(_operations("complex-api.yaml"), "createUser")
        assert create.responses["400"].description == "Invalid input"
        assert create.responses["400"].content["application/json"].schema_def["required"] == ["code", "message"]

    def test_response_headers(self):
        headers = _by_id(_operations("complex-api.yaml"), "listUsers").responses["200"].headers
        assert list(headers) == ["X-Rate-Limit", "X-Request-Id"]
        assert headers["X-Request-Id"].required is True
        assert headers["X-Request-Id"].schema_def == {"type": "string", "format": "uuid"}

    def test_duplicate_operation_ids_preserved(self):
        ids = [op.operation_id for op in _operations("complex-api.yaml")]
        assert ids.count("listCategories") == 2

    def test_status_codes_are_strings(self):
        for op in _operations("complex-api.yaml"):
            assert all(isinstance(code, str) for code in op.responses)


class TestHelpers:
    def test_generate_operation_id(self):
        assert generate_operation_id("GET", "/pets/{petId}/toys") == "get_/pets/petId/toys"

    def test_extract_content_types(self):
        create = _by_id(_operations("complex-api.yaml"), "createUser")
        assert extract_content_types(create.responses) == ["application/json"]

    def test_unknown_path_item_keys_skipped(self):
        doc = {"paths": {"/x": {"summary": "s", "x-internal": True, "trace": {}, "get": {"responses": {}}}}}
        operations = extract_operations(doc)
        assert [op.method for op in operations] == ["GET"]

    def test_parameter_without_name(self):
        doc = {"paths": {"/x": {"get": {"parameters": [{"in": "query"}]}}}}
        with pytest.raises(DocumentError):
            extract_operations(doc)

    def test_bare_example_value(self):
        doc = {
            "paths": {
                "/x": {
                    "post": {
                        "requestBody": {"content": {"application/json": {"examples": {"raw": {"id": 1}}}}},
                    }
                }
            }
        }
        example = extract_operations(doc)[0].request_body.content["application/json"].examples["raw"]
        assert example.value == {"id": 1}

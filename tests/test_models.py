from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from openapi_context.parser.base import (
    DocumentShape,
    Info,
    Operation,
    Parameter,
    Server,
    SpecMetadata,
)


class TestInfo:
    def test_numeric_version_is_coerced(self):
        info = Info(title="API", version=1.0)
        assert info.version == "1.0"

    def test_date_version_is_coerced(self):
        info = Info(title="API", version=date(2024, 1, 1))
        assert info.version == "2024-01-01"

    def test_title_is_required(self):
        with pytest.raises(ValidationError):
            Info(version="1.0.0")


class TestDocumentShape:
    def test_minimal_document(self):
        shape = DocumentShape.model_validate({"openapi": "3.0.0", "info": {"title": "A", "version": "1"}})
        assert shape.paths == {}
        assert shape.components.schemas == {}
        assert shape.security == []

    def test_missing_info_rejected(self):
        with pytest.raises(ValidationError):
            DocumentShape.model_validate({"openapi": "3.0.0", "paths": {}})

    def test_extra_keys_allowed(self):
        shape = DocumentShape.model_validate(
            {"openapi": "3.0.0", "info": {"title": "A", "version": "1"}, "x-logo": {"url": "logo.png"}}
        )
        assert shape.info.title == "A"


class TestOperation:
    def test_defaults(self):
        op = Operation(operation_id="getPets", method="GET", path="/pets")
        assert op.parameters == []
        assert op.request_body is None
        assert op.responses == {}
        assert op.deprecated is False

    def test_parameter_keeps_schema(self):
        param = Parameter(name="id", location="path", required=True, schema_def={"type": "string"})
        assert param.schema_def == {"type": "string"}


class TestServer:
    def test_variables(self):
        server = Server(url="https://{host}", variables={"host": {"default": "api.example.com"}})
        assert server.variables["host"].default == "api.example.com"
        assert server.variables["host"].enum == []


class TestSpecMetadata:
    def test_fields(self):
        meta = SpecMetadata(
            title="A",
            version="1",
            path="/tmp/a.yaml",
            loaded_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
            sha256="00",
        )
        assert meta.description == ""

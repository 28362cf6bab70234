"""Data models for a loaded OpenAPI document.

The extractor converts the dereferenced document into these models.
Schema subtrees stay plain dicts (``schema_def``) so they can be shared
and handed to the simplifier and compact formatter untouched.
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

HTTP_METHODS = ("get", "post", "put", "delete", "patch", "head", "options")


class Info(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    title: str
    version: str
    description: str = ""

    @field_validator("version", mode="before")
    @classmethod
    def _date_version_to_str(cls, value: Any) -> Any:
        # Unquoted YAML dates such as 2024-01-01 load as date objects
        if isinstance(value, (date, datetime)):
            return value.isoformat()
        return value


class Components(BaseModel):
    model_config = ConfigDict(extra="allow")

    schemas: dict[str, Any] = {}
    securitySchemes: dict[str, Any] = {}


class DocumentShape(BaseModel):
    """Structural check of the document root, run before extraction."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    openapi: str
    info: Info
    paths: dict[str, dict[str, Any] | None] = {}
    components: Components = Components()
    servers: list[dict[str, Any]] = []
    security: list[dict[str, list[str]]] = []
    tags: list[dict[str, Any]] = []


class Example(BaseModel):
    """A named example attached to a request or response content block."""

    name: str
    summary: str = ""
    description: str = ""
    value: Any = None


class Parameter(BaseModel):
    """A single operation parameter."""

    name: str
    location: str  # path / query / header / cookie
    required: bool = False
    description: str = ""
    deprecated: bool = False
    schema_def: dict[str, Any] | None = None


class Header(BaseModel):
    description: str = ""
    required: bool = False
    deprecated: bool = False
    schema_def: dict[str, Any] | None = None


class MediaType(BaseModel):
    schema_def: dict[str, Any] | None = None
    examples: dict[str, Example] = {}


class RequestBody(BaseModel):
    description: str = ""
    required: bool = False
    content: dict[str, MediaType] = {}  # {content_type: MediaType}


class Response(BaseModel):
    description: str = ""
    content: dict[str, MediaType] = {}
    headers: dict[str, Header] = {}


class ServerVariable(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    default: str = ""
    description: str = ""
    enum: list[str] = []


class Server(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    url: str
    description: str = ""
    variables: dict[str, ServerVariable] = {}


class Operation(BaseModel):
    """One (method, path) pair with its metadata and payload shapes."""

    operation_id: str
    method: str  # GET / POST / PUT / DELETE / PATCH / HEAD / OPTIONS
    path: str  # /api/users/{id}
    summary: str = ""
    description: str = ""
    tags: list[str] = []
    parameters: list[Parameter] = []
    request_body: RequestBody | None = None
    responses: dict[str, Response] = {}  # {status_code: Response}
    security: list[dict[str, list[str]]] = []
    servers: list[Server] = []
    deprecated: bool = False


class SpecMetadata(BaseModel):
    title: str
    version: str
    description: str = ""
    path: str
    loaded_at: datetime
    sha256: str


class LoadSummary(BaseModel):
    """Counts reported after a successful load."""

    operation_count: int
    request_schema_count: int
    response_schema_count: int
    example_count: int
    schema_count: int

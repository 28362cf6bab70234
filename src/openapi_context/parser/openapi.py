"""OpenAPI 3.x operation extractor.

Walks a dereferenced document's path map and converts every
(path, method) pair into an Operation model, in source order.
"""

from typing import Any

from openapi_context.errors import DocumentError

from .base import (
    HTTP_METHODS,
    Example,
    Header,
    MediaType,
    Operation,
    Parameter,
    RequestBody,
    Response,
    Server,
)


def extract_operations(doc: dict[str, Any]) -> list[Operation]:
    """Extract all operations from a dereferenced OpenAPI document."""
    operations = []
    global_security = doc.get("security") or []
    global_servers = doc.get("servers") or []

    for path, path_item in (doc.get("paths") or {}).items():
        if not isinstance(path_item, dict):
            continue
        shared_params = path_item.get("parameters") or []

        # Unrecognized keys (summary, servers, x-*) are skipped without warning
        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if not isinstance(operation, dict):
                continue

            operations.append(
                Operation(
                    operation_id=operation.get("operationId") or generate_operation_id(method, path),
                    method=method.upper(),
                    path=path,
                    summary=operation.get("summary") or "",
                    description=operation.get("description") or "",
                    tags=operation.get("tags") or [],
                    parameters=_parse_parameters([*shared_params, *(operation.get("parameters") or [])]),
                    request_body=_parse_request_body(operation.get("requestBody")),
                    responses=_parse_responses(operation.get("responses") or {}),
                    security=_first_present(operation.get("security"), global_security),
                    servers=parse_servers(
                        _first_present(operation.get("servers"), path_item.get("servers"), global_servers)
                    ),
                    deprecated=bool(operation.get("deprecated", False)),
                )
            )

    return operations


def _first_present(*candidates: Any) -> Any:
    # An explicit empty list (e.g. "security: []") overrides the fallbacks
    return next((c for c in candidates if c is not None), [])


def generate_operation_id(method: str, path: str) -> str:
    """Fallback id for operations without an operationId, e.g. ``get_/users/id``."""
    return f"{method.lower()}_{path.replace('{', '').replace('}', '')}"


def extract_content_types(responses: dict[str, Response]) -> list[str]:
    """Distinct response content types, in first-seen order."""
    content_types: list[str] = []
    for response in responses.values():
        for content_type in response.content:
            if content_type not in content_types:
                content_types.append(content_type)
    return content_types


def _parse_parameters(params: list[dict]) -> list[Parameter]:
    result = []
    for p in params:
        if not isinstance(p, dict) or "name" not in p:
            raise DocumentError(f"Parameter without a name: {p!r}")
        result.append(
            Parameter(
                name=p["name"],
                location=p.get("in", "query"),
                required=p.get("required", False),
                description=p.get("description") or "",
                deprecated=p.get("deprecated", False),
                schema_def=p.get("schema"),
            )
        )
    return result


def _parse_request_body(body: dict | None) -> RequestBody | None:
    if not body:
        return None
    return RequestBody(
        description=body.get("description") or "",
        required=body.get("required", False),
        content=_parse_content(body.get("content") or {}),
    )


def _parse_responses(responses: dict) -> dict[str, Response]:
    result = {}
    for status_code, resp in responses.items():
        resp = resp or {}
        result[str(status_code)] = Response(
            description=resp.get("description") or "",
            content=_parse_content(resp.get("content") or {}),
            headers={
                name: Header(
                    description=header.get("description") or "",
                    required=header.get("required", False),
                    deprecated=header.get("deprecated", False),
                    schema_def=header.get("schema"),
                )
                for name, header in (resp.get("headers") or {}).items()
            },
        )
    return result


def _parse_content(content: dict) -> dict[str, MediaType]:
    result = {}
    for content_type, media in content.items():
        media = media or {}
        result[content_type] = MediaType(
            schema_def=media.get("schema"),
            examples={
                name: _parse_example(name, example)
                for name, example in (media.get("examples") or {}).items()
            },
        )
    return result


def _parse_example(name: str, example: Any) -> Example:
    # Example objects wrap the payload in "value"; bare payloads are kept as-is
    if isinstance(example, dict) and ({"value", "summary", "externalValue"} & example.keys()):
        return Example(
            name=name,
            summary=example.get("summary") or "",
            description=example.get("description") or "",
            value=example.get("value", example.get("externalValue")),
        )
    return Example(name=name, value=example)


def parse_servers(servers: list[dict]) -> list[Server]:
    return [Server(**server) for server in servers if isinstance(server, dict) and "url" in server]

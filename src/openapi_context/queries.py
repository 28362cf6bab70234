"""Markdown answers to questions about the loaded document.

Each public method of ``SchemaQueries`` answers one kind of question and
always returns text. Lookup misses, missing arguments and unexpected
errors are rendered as titled messages instead of being raised.
"""

from __future__ import annotations

import functools
import json
import logging
from typing import Any, Callable

from openapi_context.config import Settings, get_settings
from openapi_context.parser.base import Operation
from openapi_context.parser.openapi import extract_content_types
from openapi_context.render.compact import format_compact
from openapi_context.render.paginate import paginate
from openapi_context.render.simplify import SimplifyOptions, simplify
from openapi_context.render.summary import (
    deduplicate_examples,
    format_header_schema,
    summarize_auth,
    summarize_parameters,
    summarize_responses,
)
from openapi_context.store import SchemaStore


logger = logging.getLogger(__name__)

NO_SPEC_MESSAGE = (
    "**No OpenAPI Spec Available**\n\n"
    "No OpenAPI document has been loaded. To fix this:\n\n"
    "1. Point `OPENAPI_CONTEXT_SPEC_PATH` (default `/app/spec`) at your OpenAPI file\n"
    "2. Or pass the file path on the command line\n"
)

MISSING_OPERATION_PARAMETERS = (
    "**Missing Parameters**\n\nPlease provide either `operation_id` or both `method` and `path`."
)

COMPACT_OPTIONS = SimplifyOptions(include_examples=False)


def _safe(action: str) -> Callable:
    """Render any exception raised by the wrapped query as ``**Error <action>**``."""

    def decorator(func: Callable[..., str]) -> Callable[..., str]:
        @functools.wraps(func)
        def wrapper(self: "SchemaQueries", *args: Any, **kwargs: Any) -> str:
            try:
                return func(self, *args, **kwargs)
            except Exception as e:
                logger.exception("Query failed while %s", action.lower())
                return f"**Error {action}**\n\n{e}"

        return wrapper

    return decorator


def _json_block(value: Any) -> str:
    return f"```json\n{json.dumps(value, indent=2, default=str)}\n```"


def _title(op: Operation) -> str:
    return f"{op.method} {op.path}"


class SchemaQueries:
    """Query layer over a ``SchemaStore``."""

    def __init__(self, store: SchemaStore, settings: Settings | None = None):
        self.store = store
        self.settings = settings or get_settings()
        self.simplify_options = SimplifyOptions(
            max_examples=self.settings.max_examples,
            max_enum_values=self.settings.max_enum_values,
            include_descriptions=self.settings.include_descriptions,
        )

    # -- helpers ---------------------------------------------------------

    def _lookup(
        self,
        operation_id: str | None,
        method: str | None,
        path: str | None,
    ) -> tuple[Operation | None, str | None]:
        """Resolve an operation, or return the message explaining why not."""
        if not operation_id and not (method and path):
            return None, MISSING_OPERATION_PARAMETERS

        op = self.store.find_operation(
            operation_id=operation_id,
            method=method.upper() if method else None,
            path=path,
        )
        if op is None:
            wanted = operation_id or f"{method} {path}"
            return None, f"**Operation Not Found**\n\nOperation not found: {wanted}"
        return op, None

    def _render_schema(self, schema: Any, compact: bool) -> str:
        if compact:
            # Merge allOf first so composed objects list their properties
            return f"Type: `{format_compact(simplify(schema, COMPACT_OPTIONS))}`"
        return _json_block(simplify(schema, self.simplify_options))

    def _page(self, text: str, index: int, chunk_size: int | None) -> str:
        result = paginate(
            text,
            start_index=index,
            chunk_size=chunk_size or self.settings.chunk_size,
            smart_breaks=self.settings.smart_breaks,
        )
        if not (result.has_more or result.has_previous):
            return result.content
        return f"{result.content}\n\n---\n{result.navigation}"

    def _operation_lines(self, op: Operation, with_content_types: bool) -> str:
        lines = [
            f"- **{_title(op)}**",
            f"  - ID: `{op.operation_id}`",
            f"  - Summary: {op.summary or 'No summary'}",
            f"  - Tags: {', '.join(op.tags) or 'None'}",
        ]
        if with_content_types:
            content_types = list(op.request_body.content) if op.request_body else []
            lines.append(f"  - Content Types: {', '.join(content_types) or 'None'}")
        if op.deprecated:
            lines.append("  - Deprecated: Yes")
        return "\n".join(lines)

    # -- discovery -------------------------------------------------------

    @_safe("Listing Operations")
    def list_operations(self, filter: str | None = None) -> str:
        if not self.store.has_schema():
            return NO_SPEC_MESSAGE

        operations = self.store.find_operations(filter)
        if not operations:
            if filter:
                return f'**No Operations Found**\n\nNo operations found matching filter: "{filter}"'
            return "**No Operations Found**\n\nThe loaded document contains no operations."

        meta = self.store.metadata
        listing = "\n\n".join(self._operation_lines(op, with_content_types=True) for op in operations)
        return (
            f"**Available API Operations** ({len(operations)} found)\n"
            f"**API:** {meta.title} v{meta.version}\n\n{listing}"
        )

    @_safe("Searching Operations")
    def search_operations(self, query: str) -> str:
        if not self.store.has_schema():
            return NO_SPEC_MESSAGE

        operations = self.store.find_operations(query)
        if not operations:
            return f'**No Operations Found**\n\nNo operations found matching query: "{query}"'

        meta = self.store.metadata
        listing = "\n\n".join(self._operation_lines(op, with_content_types=False) for op in operations)
        return (
            f"**Search Results** ({len(operations)} found)\n"
            f"**API:** {meta.title} v{meta.version}\n"
            f'**Query:** "{query}"\n\n{listing}'
        )

    @_safe("Listing Tags")
    def list_tags(self) -> str:
        if not self.store.has_schema():
            return NO_SPEC_MESSAGE

        counts = self.store.get_tags()
        descriptions = self.store.get_tag_descriptions()
        untagged = sum(1 for op in self.store.get_operations() if not op.tags)

        lines = [f"**API Tags** ({len(counts)} tags)", ""]
        for tag, count in counts.items():
            noun = "operation" if count == 1 else "operations"
            line = f"- **{tag}** ({count} {noun})"
            if descriptions.get(tag):
                line += f": {descriptions[tag]}"
            lines.append(line)
        if untagged:
            noun = "operation" if untagged == 1 else "operations"
            lines.append(f"- **untagged** ({untagged} {noun})")
        if not counts and not untagged:
            lines.append("The loaded document defines no operations.")
        return "\n".join(lines)

    # -- single operation ------------------------------------------------

    @_safe("Getting Operation Summary")
    def get_operation_summary(
        self,
        operation_id: str | None = None,
        method: str | None = None,
        path: str | None = None,
    ) -> str:
        if not self.store.has_schema():
            return NO_SPEC_MESSAGE
        op, message = self._lookup(operation_id, method, path)
        if message:
            return message

        lines = [
            f"**Operation Summary: {_title(op)}**",
            "",
            f"- ID: `{op.operation_id}`",
            f"- Summary: {op.summary or 'No summary'}",
            f"- Tags: {', '.join(op.tags) or 'None'}",
            f"- Parameters: {summarize_parameters(op.parameters, op.request_body)}",
            f"- Responses: {summarize_responses(op.responses) or 'none'}",
            f"- Response Content Types: {', '.join(extract_content_types(op.responses)) or 'None'}",
            f"- Auth: {summarize_auth(op.security)}",
        ]
        if op.deprecated:
            lines.append("- Deprecated: Yes")
        return "\n".join(lines)

    @_safe("Getting Operation Details")
    def get_operation_details(
        self,
        operation_id: str | None = None,
        method: str | None = None,
        path: str | None = None,
        compact: bool = False,
        index: int = 0,
        chunk_size: int | None = None,
    ) -> str:
        if not self.store.has_schema():
            return NO_SPEC_MESSAGE
        op, message = self._lookup(operation_id, method, path)
        if message:
            return message

        parts = [
            f"**Operation Details: {_title(op)}**\n",
            f"**Operation ID:** `{op.operation_id}`",
            f"**Summary:** {op.summary or 'No summary'}",
            f"**Description:** {op.description or 'No description'}",
            f"**Tags:** {', '.join(op.tags) or 'None'}",
            f"**Security Required:** {'Yes' if op.security else 'No'}",
        ]
        if op.deprecated:
            parts.append("**Deprecated:** Yes")
        parts.append("")

        if op.parameters:
            parts.append("**Parameters:**\n")
            for param in op.parameters:
                parts.append(f"- **{param.name}** ({param.location}): {param.description or 'No description'}")
                parts.append(f"  - Required: {'Yes' if param.required else 'No'}")
                if param.schema_def is not None:
                    parts.append(f"  - Type: {format_compact(simplify(param.schema_def, COMPACT_OPTIONS))}")
            parts.append("")

        if op.request_body and op.request_body.content:
            parts.append("**Request Body Schemas:**\n")
            for content_type, media in op.request_body.content.items():
                parts.append(f"Content-Type: `{content_type}`")
                if media.schema_def is not None:
                    parts.append(self._render_schema(media.schema_def, compact) + "\n")
        else:
            parts.append("**Request Body:** None\n")

        parts.append("**Response Schemas:**\n")
        for status_code, response in op.responses.items():
            parts.append(f"Status Code: `{status_code}`")
            parts.append(f"Description: {response.description or 'No description'}")
            if not response.content:
                parts.append("No content schema\n")
            for content_type, media in response.content.items():
                parts.append(f"Content-Type: `{content_type}`")
                if media.schema_def is not None:
                    parts.append(self._render_schema(media.schema_def, compact) + "\n")

        return self._page("\n".join(parts), index, chunk_size)

    @_safe("Getting Request Schema")
    def get_request_schema(
        self,
        operation_id: str | None = None,
        method: str | None = None,
        path: str | None = None,
        content_type: str | None = None,
        compact: bool = False,
        index: int = 0,
        chunk_size: int | None = None,
    ) -> str:
        if not self.store.has_schema():
            return NO_SPEC_MESSAGE
        op, message = self._lookup(operation_id, method, path)
        if message:
            return message

        if not op.request_body or not op.request_body.content:
            return f"**No Request Body**\n\nOperation {_title(op)} does not have a request body."

        content = op.request_body.content
        if content_type:
            if content_type not in content:
                return (
                    f'**Content Type Not Found**\n\nContent type "{content_type}" not found for this operation. '
                    f"Available: {', '.join(content)}"
                )
            content = {content_type: content[content_type]}

        parts = [f"**Request Body Schema for {_title(op)}**\n"]
        if op.request_body.required:
            parts.append("Required: Yes\n")
        for ct, media in content.items():
            parts.append(f"Content-Type: `{ct}`")
            if media.schema_def is not None:
                parts.append(self._render_schema(media.schema_def, compact) + "\n")
            else:
                parts.append("No schema\n")

        return self._page("\n".join(parts), index, chunk_size)

    @_safe("Getting Response Schema")
    def get_response_schema(
        self,
        operation_id: str | None = None,
        method: str | None = None,
        path: str | None = None,
        status_code: str | None = None,
        compact: bool = False,
        index: int = 0,
        chunk_size: int | None = None,
    ) -> str:
        if not self.store.has_schema():
            return NO_SPEC_MESSAGE
        op, message = self._lookup(operation_id, method, path)
        if message:
            return message

        responses = op.responses
        if status_code is not None:
            status_code = str(status_code)
            if status_code not in responses:
                return (
                    f'**Status Code Not Found**\n\nStatus code "{status_code}" not found for this operation. '
                    f"Available: {', '.join(responses) or 'none'}"
                )
            responses = {status_code: responses[status_code]}
            parts = [f"**Response Schema for {status_code} ({_title(op)})**\n"]
        else:
            parts = [f"**Response Schemas for {_title(op)}**\n"]

        for code, response in responses.items():
            parts.append(f"Status Code: `{code}`")
            parts.append(f"Description: {response.description or 'No description'}")
            if not response.content:
                parts.append("No content schema\n")
            for ct, media in response.content.items():
                parts.append(f"Content-Type: `{ct}`")
                if media.schema_def is not None:
                    parts.append(self._render_schema(media.schema_def, compact) + "\n")

        return self._page("\n".join(parts), index, chunk_size)

    @_safe("Getting Response Headers")
    def get_headers(
        self,
        operation_id: str | None = None,
        method: str | None = None,
        path: str | None = None,
        status_code: str | None = None,
        compact: bool = False,
    ) -> str:
        if not self.store.has_schema():
            return NO_SPEC_MESSAGE
        op, message = self._lookup(operation_id, method, path)
        if message:
            return message

        responses = op.responses
        if status_code is not None:
            status_code = str(status_code)
            if status_code not in responses:
                return f'**Status Code Not Found**\n\nStatus code "{status_code}" not found for this operation.'
            responses = {status_code: responses[status_code]}

        parts = [f"**Response Headers for {_title(op)}**\n"]
        found = False
        for code, response in responses.items():
            if not response.headers:
                continue
            found = True
            parts.append(f"Status Code: `{code}`")
            for name, header in response.headers.items():
                type_string = format_header_schema(header)
                if compact:
                    line = f"- **{name}** ({type_string})"
                    if header.description:
                        line += f": {header.description}"
                    parts.append(line)
                    continue
                parts.append(f"- **{name}**")
                parts.append(f"  - Type: {type_string}")
                if header.required:
                    parts.append("  - Required: Yes")
                if header.deprecated:
                    parts.append("  - Deprecated: Yes")
                if header.description:
                    parts.append(f"  - Description: {header.description}")
            parts.append("")

        if not found:
            scope = f"status code {status_code}" if status_code else "any response"
            return f"**No Response Headers**\n\nOperation {_title(op)} defines no headers for {scope}."
        return "\n".join(parts).rstrip() + "\n"

    @_safe("Getting Operation Examples")
    def get_operation_examples(
        self,
        operation_id: str | None = None,
        method: str | None = None,
        path: str | None = None,
    ) -> str:
        if not self.store.has_schema():
            return NO_SPEC_MESSAGE
        op, message = self._lookup(operation_id, method, path)
        if message:
            return message

        parts = [f"**Examples for {_title(op)}**\n"]
        found = False

        if op.request_body and op.request_body.content:
            parts.append("**Request Examples:**\n")
            for content_type, media in op.request_body.content.items():
                if not media.examples:
                    continue
                found = True
                parts.append(f"Content-Type: `{content_type}`")
                for name, example in deduplicate_examples(media.examples).items():
                    parts.append(f"Example: `{name}`" + (f" ({example.summary})" if example.summary else ""))
                    parts.append(_json_block(example.value) + "\n")

        parts.append("**Response Examples:**\n")
        for status_code, response in op.responses.items():
            for content_type, media in response.content.items():
                if not media.examples:
                    continue
                found = True
                parts.append(f"Status: `{status_code}`, Content-Type: `{content_type}`")
                for name, example in deduplicate_examples(media.examples).items():
                    parts.append(f"Example: `{name}`" + (f" ({example.summary})" if example.summary else ""))
                    parts.append(_json_block(example.value) + "\n")

        if not found:
            parts.append("No examples available for this operation.")
        return "\n".join(parts)

    # -- document-wide ---------------------------------------------------

    @_safe("Getting Schema Definition")
    def get_schema_definition(
        self,
        name: str,
        compact: bool = False,
        index: int = 0,
        chunk_size: int | None = None,
    ) -> str:
        if not self.store.has_schema():
            return NO_SPEC_MESSAGE

        schema = self.store.get_schema(name)
        if schema is None:
            available = ", ".join(self.store.get_schema_names()) or "none"
            return f'**Schema Not Found**\n\nSchema "{name}" not found. Available schemas: {available}'

        text = f"**Schema: {name}**\n\n{self._render_schema(schema, compact)}"
        return self._page(text, index, chunk_size)

    def _describe_schemes(self, names: list[str] | None = None) -> list[str]:
        schemes = self.store.get_security_schemes()
        if names is not None:
            schemes = {name: schemes[name] for name in names if name in schemes}
        if not schemes:
            return []

        lines = ["", "**Security Schemes:**"]
        for name, scheme in schemes.items():
            scheme = scheme if isinstance(scheme, dict) else {}
            lines.append(f"- **{name}**")
            lines.append(f"  - Type: {scheme.get('type', 'unknown')}")
            if scheme.get("scheme"):
                lines.append(f"  - Scheme: {scheme['scheme']}")
            if scheme.get("bearerFormat"):
                lines.append(f"  - bearerFormat: {scheme['bearerFormat']}")
            if scheme.get("type") == "apiKey":
                lines.append(f"  - Location: {scheme.get('in', 'header')} `{scheme.get('name', '')}`")
            if scheme.get("description"):
                lines.append(f"  - Description: {scheme['description']}")

            usage = _usage_hint(scheme)
            if usage:
                lines.append(f"  - Usage: `{usage}`")
        return lines

    @_safe("Getting Auth Requirements")
    def get_auth_requirements(self, operation_id: str | None = None) -> str:
        if not self.store.has_schema():
            return NO_SPEC_MESSAGE

        if operation_id:
            op = self.store.find_operation(operation_id=operation_id)
            if op is None:
                return f"**Operation Not Found**\n\nOperation not found: {operation_id}"
            lines = [f"**Authentication for {operation_id}**", "", f"**Operation:** {_title(op)}", ""]
            requirements = op.security
            empty = "**Security:** No specific security requirements for this operation."
        else:
            meta = self.store.metadata
            lines = ["**Authentication Requirements**", "", f"**API:** {meta.title} v{meta.version}", ""]
            requirements = self.store.get_security()
            empty = "**Security:** No global security requirements defined."

        if requirements:
            lines.append(f"**Security Requirements:** {summarize_auth(requirements)}")
            for requirement in requirements:
                for scheme, scopes in requirement.items():
                    lines.append(f"- Scheme: `{scheme}`")
                    if scopes:
                        lines.append(f"  - Scopes: {', '.join(scopes)}")
        else:
            lines.append(empty)

        referenced = None
        if operation_id:
            referenced = [scheme for requirement in requirements for scheme in requirement]
        lines.extend(self._describe_schemes(referenced))
        return "\n".join(lines) + "\n"

    @_safe("Getting Server Info")
    def get_server_info(self) -> str:
        if not self.store.has_schema():
            return NO_SPEC_MESSAGE

        meta = self.store.metadata
        lines = ["**API Server Information**", "", f"**API:** {meta.title} v{meta.version}"]
        if meta.description:
            lines.append(f"**Description:** {meta.description}")
        lines.append(f"**Loaded:** {meta.loaded_at.isoformat()}")
        lines.append(f"**Path:** {meta.path}")
        lines.append(f"**SHA-256:** {meta.sha256}")
        lines.append("")

        servers = self.store.get_servers()
        if servers:
            lines.append("**Servers:**")
            for server in servers:
                lines.append(f"- **URL:** {server.url}")
                if server.description:
                    lines.append(f"  - Description: {server.description}")
                if server.variables:
                    lines.append("  - Variables:")
                    for name, variable in server.variables.items():
                        line = f"    - {name}: {variable.default or 'N/A'}"
                        if variable.description:
                            line += f" ({variable.description})"
                        lines.append(line)
            lines.append("")

        operations = self.store.get_operations()
        lines.append("**Statistics:**")
        lines.append(f"- Operations: {len(operations)}")
        lines.append(f"- Schemas: {len(self.store.get_schema_names())}")
        lines.append(f"- Tags: {len(self.store.get_tags())}")
        lines.append(f"- Paths: {len({op.path for op in operations})}")
        return "\n".join(lines) + "\n"


def _usage_hint(scheme: dict[str, Any]) -> str | None:
    kind = scheme.get("type")
    if kind == "http":
        http_scheme = str(scheme.get("scheme", "")).lower()
        if http_scheme == "bearer":
            return "Authorization: Bearer <token>"
        if http_scheme == "basic":
            return "Authorization: Basic <base64 credentials>"
    if kind == "apiKey":
        location = scheme.get("in", "header")
        name = scheme.get("name", "")
        if location == "header":
            return f"{name}: <api key>"
        if location == "query":
            return f"?{name}=<api key>"
        if location == "cookie":
            return f"Cookie: {name}=<api key>"
    if kind in ("oauth2", "openIdConnect"):
        return "Authorization: Bearer <access token>"
    return None

"""In-memory store for the currently loaded OpenAPI document.

The store holds one generation at a time: the dereferenced document plus
everything derived from it. A load builds a complete new generation off
to the side and installs it with a single assignment, so readers see
either the old generation or the new one, never a mix. A failed load
leaves the previous generation in place.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from openapi_context.errors import DocumentError, LoadError, ReferenceResolutionError
from openapi_context.parser.base import (
    DocumentShape,
    Example,
    LoadSummary,
    Operation,
    Server,
    SpecMetadata,
)
from openapi_context.parser.detect import detect_format, is_supported_version, read_document
from openapi_context.parser.examples import index_examples
from openapi_context.parser.openapi import extract_operations, parse_servers
from openapi_context.parser.resolver import dereference


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Generation:
    document: dict[str, Any]
    metadata: SpecMetadata
    operations: tuple[Operation, ...]
    schemas: dict[str, Any]
    examples: dict[str, Example]
    servers: tuple[Server, ...]
    security: tuple[dict[str, list[str]], ...]
    security_schemes: dict[str, Any]
    tag_descriptions: dict[str, str]


def _describe_validation_error(error: ValidationError) -> str:
    problems = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"]) or "document"
        problems.append(f"{location}: {err['msg']}")
    return "; ".join(problems)


def build_generation(spec_path: Path) -> tuple[Generation, LoadSummary]:
    """Read, dereference and index a document. Raises LoadError on any failure."""
    source = str(spec_path)

    try:
        content_hash = hashlib.sha256(spec_path.read_bytes()).hexdigest()
        raw = read_document(spec_path)
    except OSError as e:
        raise LoadError(source, f"cannot read file ({e.strerror or e})") from e
    except DocumentError as e:
        raise LoadError(source, str(e)) from e

    if not is_supported_version(raw):
        fmt = detect_format(raw)
        if fmt == "unknown":
            raise LoadError(source, "missing 'openapi' version marker")
        marker = raw.get(fmt)
        raise LoadError(source, f"unsupported description version {fmt} {marker}; OpenAPI 3.x is required")

    try:
        doc = dereference(raw, spec_path)
    except ReferenceResolutionError as e:
        raise LoadError(source, str(e)) from e

    try:
        shape = DocumentShape.model_validate(doc)
        operations = extract_operations(doc)
        servers = tuple(parse_servers(shape.servers))
    except ValidationError as e:
        raise LoadError(source, _describe_validation_error(e)) from e
    except (DocumentError, AttributeError, TypeError) as e:
        raise LoadError(source, f"malformed document structure ({e})") from e

    examples = index_examples(operations)
    generation = Generation(
        document=doc,
        metadata=SpecMetadata(
            title=shape.info.title,
            version=shape.info.version,
            description=shape.info.description,
            path=source,
            loaded_at=datetime.now(timezone.utc),
            sha256=content_hash,
        ),
        operations=tuple(operations),
        schemas=dict(shape.components.schemas),
        examples=examples,
        servers=servers,
        security=tuple(shape.security),
        security_schemes=dict(shape.components.securitySchemes),
        tag_descriptions={
            tag["name"]: tag.get("description") or "" for tag in shape.tags if "name" in tag
        },
    )

    summary = LoadSummary(
        operation_count=len(operations),
        request_schema_count=sum(len(op.request_body.content) for op in operations if op.request_body),
        response_schema_count=sum(len(op.responses) for op in operations),
        example_count=len(examples),
        schema_count=len(generation.schemas),
    )
    return generation, summary


class SchemaStore:
    """Holds the current generation and answers lookups against it.

    Construct one per process and pass it to whatever serves queries.
    """

    def __init__(self) -> None:
        self._generation: Generation | None = None

    def load(self, spec_path: str | Path) -> LoadSummary:
        """Load a document, replacing the current one only if loading succeeds."""
        path = Path(spec_path)
        logger.info("Loading OpenAPI document into memory: %s", path)
        try:
            generation, summary = build_generation(path)
        except LoadError as e:
            logger.warning("%s", e)
            raise

        self._generation = generation
        logger.info(
            "Loaded %s v%s: %d operations, %d schemas, %d examples",
            generation.metadata.title,
            generation.metadata.version,
            summary.operation_count,
            summary.schema_count,
            summary.example_count,
        )
        return summary

    def clear(self) -> None:
        self._generation = None
        logger.info("Schema cleared from memory")

    def has_schema(self) -> bool:
        return self._generation is not None

    @property
    def generation(self) -> Generation | None:
        return self._generation

    @property
    def metadata(self) -> SpecMetadata | None:
        return self._generation.metadata if self._generation else None

    def get_operations(self) -> list[Operation]:
        return list(self._generation.operations) if self._generation else []

    def find_operations(self, filter: str | None = None) -> list[Operation]:
        """Operations whose method, path, summary or a tag contains ``filter``.

        Matching is case-insensitive. No filter returns every operation.
        """
        operations = self.get_operations()
        if not filter:
            return operations

        needle = filter.lower()
        return [
            op
            for op in operations
            if needle in op.method.lower()
            or needle in op.path.lower()
            or needle in op.summary.lower()
            or any(needle in tag.lower() for tag in op.tags)
        ]

    def find_operation(
        self,
        operation_id: str | None = None,
        method: str | None = None,
        path: str | None = None,
    ) -> Operation | None:
        """First operation matching ``operation_id``, else ``method`` + ``path``.

        Duplicate operation ids are kept in the store; only the first is
        reachable by id. ``method`` is compared as given (stored upper-case).
        """
        operations = self.get_operations()
        if operation_id:
            for op in operations:
                if op.operation_id == operation_id:
                    return op
        if method and path:
            for op in operations:
                if op.method == method and op.path == path:
                    return op
        return None

    def get_schema(self, name: str) -> Any | None:
        if not self._generation:
            return None
        return self._generation.schemas.get(name)

    def get_schema_names(self) -> list[str]:
        return list(self._generation.schemas) if self._generation else []

    def get_examples_for_operation(self, operation_id: str) -> dict[str, Example]:
        # Prefix scan: "getUser" also matches keys of "getUserById"
        if not self._generation:
            return {}
        return {
            key: example
            for key, example in self._generation.examples.items()
            if key.startswith(operation_id)
        }

    def get_servers(self) -> list[Server]:
        return list(self._generation.servers) if self._generation else []

    def get_security(self) -> list[dict[str, list[str]]]:
        return list(self._generation.security) if self._generation else []

    def get_security_schemes(self) -> dict[str, Any]:
        return dict(self._generation.security_schemes) if self._generation else {}

    def get_tags(self) -> dict[str, int]:
        """Tag -> number of operations using it, in first-seen order."""
        counts: dict[str, int] = {}
        for op in self.get_operations():
            for tag in op.tags:
                counts[tag] = counts.get(tag, 0) + 1
        return counts

    def get_tag_descriptions(self) -> dict[str, str]:
        return dict(self._generation.tag_descriptions) if self._generation else {}

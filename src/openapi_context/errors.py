"""Exception hierarchy for openapi-context.

Lookup misses are never exceptions: the store answers them with ``None``
or an empty collection. Only loading and pagination raise.
"""


class ContextError(Exception):
    """Base for all openapi-context errors."""


class DocumentError(ContextError):
    """The source file parsed, but is not a usable API description."""


class ReferenceResolutionError(ContextError):
    """A ``$ref`` pointer could not be followed."""

    def __init__(self, ref: str, reason: str):
        self.ref = ref
        self.reason = reason
        super().__init__(f"Cannot resolve $ref '{ref}': {reason}")


class LoadError(ContextError):
    """Loading a document failed; the previously loaded document is kept."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load OpenAPI document {path}: {reason}")


class PaginationError(ContextError, ValueError):
    """Requested chunk lies outside the rendered content."""

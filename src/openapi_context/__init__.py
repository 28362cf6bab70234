"""Index an OpenAPI document in memory and answer compact, paginated queries about it."""

__version__ = "0.1.0"

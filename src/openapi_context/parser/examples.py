"""Flatten request/response examples into a single lookup map.

Keys look like ``createPet-request-application/json-basic`` and
``createPet-response-201-application/json-created``.
"""

from .base import Example, Operation


def example_key(operation_id: str, kind: str, content_type: str, name: str, status_code: str | None = None) -> str:
    if status_code is None:
        return f"{operation_id}-{kind}-{content_type}-{name}"
    return f"{operation_id}-{kind}-{status_code}-{content_type}-{name}"


def index_examples(operations: list[Operation]) -> dict[str, Example]:
    """Collect every named example of every operation, request bodies first."""
    examples: dict[str, Example] = {}

    for op in operations:
        if op.request_body:
            for content_type, media in op.request_body.content.items():
                for name, example in media.examples.items():
                    examples[example_key(op.operation_id, "request", content_type, name)] = example

        for status_code, response in op.responses.items():
            for content_type, media in response.content.items():
                for name, example in media.examples.items():
                    key = example_key(op.operation_id, "response", content_type, name, status_code)
                    examples[key] = example

    return examples

"""Dereference ``$ref`` pointers in an OpenAPI document.

Handles:
- Internal JSON pointers (``#/components/schemas/Pet``), RFC 6901 escaping
- Relative-file references (``common.yaml#/Error``)
- Sibling keys next to ``$ref`` (overlaid on a copy of the target)
- Recursive schemas: every reference resolves to one shared node, so a
  self-referencing schema becomes a cycle in the returned graph

Remote (URL) references are rejected.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from urllib.parse import unquote

from openapi_context.errors import DocumentError, ReferenceResolutionError

from .detect import read_document


def dereference(document: dict[str, Any], base_path: Path | None = None) -> dict[str, Any]:
    """Return a copy of ``document`` with every ``$ref`` replaced by its target.

    ``base_path`` is the file the document was read from; it anchors
    relative-file references. The input document is not modified.
    """
    return RefResolver(document, base_path).resolve()


def _split_ref(ref: str) -> tuple[str, str]:
    """Split ``'common.yaml#/a/b'`` into ``('common.yaml', '/a/b')``."""
    if "#" not in ref:
        return ref, ""
    file_part, pointer = ref.split("#", 1)
    return file_part, pointer


def _decode_token(token: str) -> str:
    return unquote(token).replace("~1", "/").replace("~0", "~")


def _pointer_get(document: Any, pointer: str, ref: str) -> Any:
    if pointer == "":
        return document
    if not pointer.startswith("/"):
        raise ReferenceResolutionError(ref, "pointer must start with '/'")

    node = document
    for raw_token in pointer[1:].split("/"):
        token = _decode_token(raw_token)
        if isinstance(node, dict):
            if token not in node:
                raise ReferenceResolutionError(ref, f"key '{token}' not found")
            node = node[token]
        elif isinstance(node, list):
            try:
                node = node[int(token)]
            except (ValueError, IndexError):
                raise ReferenceResolutionError(ref, f"'{token}' is not a valid list index") from None
        else:
            raise ReferenceResolutionError(ref, f"cannot descend into a scalar at '{token}'")
    return node


def _is_alias(node: Any) -> bool:
    return isinstance(node, dict) and set(node) == {"$ref"} and isinstance(node["$ref"], str)


class RefResolver:
    """Resolves references against a root document and the files it points to."""

    def __init__(self, document: dict[str, Any], base_path: Path | None = None):
        self._root_key = Path(base_path).resolve() if base_path else None
        self._documents: dict[Path | None, Any] = {self._root_key: document}
        self._resolved: dict[tuple[Path | None, str], Any] = {}
        self._following: set[tuple[Path | None, str]] = set()
        # ids of nodes whose body is still being walked
        self._building: set[int] = set()
        # id(overlay) -> (ref, overlay, target, siblings), filled after the walk
        self._pending: dict[int, tuple[str, dict[str, Any], dict[str, Any], dict[str, Any]]] = {}

    def resolve(self) -> dict[str, Any]:
        result = self._walk(self._documents[self._root_key], self._root_key)
        self._fill_pending()
        return result

    def _defer(self, ref: str, overlay: dict[str, Any], target: dict[str, Any], siblings: dict[str, Any]) -> None:
        self._pending[id(overlay)] = (ref, overlay, target, siblings)

    def _fill_pending(self) -> None:
        # An overlay can only be filled once its own target is filled
        while self._pending:
            ready = [key for key, entry in self._pending.items() if id(entry[2]) not in self._pending]
            if not ready:
                ref = next(iter(self._pending.values()))[0]
                raise ReferenceResolutionError(ref, "reference chain points back to itself")
            for key in ready:
                _, overlay, target, siblings = self._pending.pop(key)
                overlay.update(target)
                overlay.update(siblings)

    def _walk(self, node: Any, doc_key: Path | None) -> Any:
        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str):
                target = self._follow(ref, doc_key)
                siblings = {k: v for k, v in node.items() if k != "$ref"}
                if not siblings or not isinstance(target, dict):
                    return target
                walked = {key: self._walk(value, doc_key) for key, value in siblings.items()}
                if id(target) in self._building or id(target) in self._pending:
                    # Target is still empty; fill the overlay after the walk
                    overlay: dict[str, Any] = {}
                    self._defer(ref, overlay, target, walked)
                    return overlay
                merged = dict(target)
                merged.update(walked)
                return merged
            return {key: self._walk(value, doc_key) for key, value in node.items()}
        if isinstance(node, list):
            return [self._walk(item, doc_key) for item in node]
        return node

    def _follow(self, ref: str, doc_key: Path | None) -> Any:
        file_part, pointer = _split_ref(ref)
        target_key = self._load_file(file_part, doc_key, ref) if file_part else doc_key
        cache_key = (target_key, pointer)
        if cache_key in self._resolved:
            return self._resolved[cache_key]

        raw = _pointer_get(self._documents[target_key], pointer, ref)

        if _is_alias(raw):
            if cache_key in self._following:
                raise ReferenceResolutionError(ref, "reference chain points back to itself")
            self._following.add(cache_key)
            try:
                resolved = self._follow(raw["$ref"], target_key)
            finally:
                self._following.discard(cache_key)
            self._resolved[cache_key] = resolved
            return resolved

        if isinstance(raw, dict):
            # Registered before walking so recursive refs land on this node
            placeholder: dict[str, Any] = {}
            self._resolved[cache_key] = placeholder
            self._building.add(id(placeholder))
            try:
                body = self._walk(raw, target_key)
            finally:
                self._building.discard(id(placeholder))
            if id(body) in self._pending:
                # Body is a deferred overlay; defer this copy the same way
                _, _, target, siblings = self._pending[id(body)]
                self._defer(ref, placeholder, target, siblings)
            else:
                placeholder.update(body)
            return placeholder
        if isinstance(raw, list):
            items: list[Any] = []
            self._resolved[cache_key] = items
            items.extend(self._walk(raw, target_key))
            return items

        self._resolved[cache_key] = raw
        return raw

    def _load_file(self, file_part: str, doc_key: Path | None, ref: str) -> Path:
        if "://" in file_part:
            raise ReferenceResolutionError(ref, "remote references are not supported")
        if doc_key is None:
            raise ReferenceResolutionError(ref, "relative file reference without a base path")

        target = (doc_key.parent / file_part).resolve()
        if target not in self._documents:
            try:
                self._documents[target] = read_document(target)
            except (OSError, DocumentError) as e:
                raise ReferenceResolutionError(ref, str(e)) from e
        return target

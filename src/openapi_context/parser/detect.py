"""Read an API description file and detect its format."""

import json
from pathlib import Path
from typing import Any

import yaml

from openapi_context.errors import DocumentError


def read_document(file_path: Path) -> dict[str, Any]:
    """Read a YAML or JSON API description into a dict.

    Raises OSError when the file cannot be read and DocumentError when
    its content is not UTF-8 text or not a mapping.
    """
    try:
        text = Path(file_path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise DocumentError(f"Not UTF-8 text: {e}") from e

    # JSON is a YAML subset, so YAML first covers both
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as yaml_error:
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, ValueError):
            raise DocumentError(f"Not valid YAML or JSON: {yaml_error}") from yaml_error

    if not isinstance(data, dict):
        raise DocumentError("Document root must be a mapping")
    return data


def detect_format(document: dict[str, Any]) -> str:
    """Detect the description format of a parsed document.

    Returns: 'openapi', 'swagger', or 'unknown'.
    """
    if "openapi" in document:
        return "openapi"
    if "swagger" in document:
        return "swagger"
    return "unknown"


def is_supported_version(document: dict[str, Any]) -> bool:
    """Only OpenAPI 3.x documents can be loaded."""
    return detect_format(document) == "openapi" and str(document["openapi"]).startswith("3")

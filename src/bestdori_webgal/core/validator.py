"""JSON Schema validation for source scripts and Live2D build manifests.

This module loads the formal JSON Schemas shipped in schemas/ and validates
documents before they are turned into the script model.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema import ValidationError
from jsonschema.exceptions import best_match

# Path to the schema directory (relative to this module)
# src/bestdori_webgal/core/validator.py -> src/bestdori_webgal/schemas/
SCHEMA_DIR = Path(__file__).parent.parent / "schemas"

STORY_SCHEMA = "story.schema.json"
BUILD_DATA_SCHEMA = "build_data.schema.json"


@lru_cache(maxsize=None)
def load_schema(name: str) -> dict[str, Any]:
    """Load a JSON schema from disk.

    Args:
        name: File name inside the schema directory

    Returns:
        Dictionary containing the JSON Schema.

    Raises:
        FileNotFoundError: If schema file doesn't exist
        json.JSONDecodeError: If schema is invalid JSON
    """
    schema_path = SCHEMA_DIR / name
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_path}")

    with schema_path.open("r", encoding="utf-8") as f:
        return json.load(f)  # type: ignore[no-any-return]


def validate_document(document: Any, schema_name: str) -> None:
    """Validate a document against one of the bundled schemas.

    Raises:
        ValidationError: If the document doesn't conform to the schema
        FileNotFoundError: If schema file is missing
    """
    schema = load_schema(schema_name)
    jsonschema.validate(instance=document, schema=schema)


def validate_story(document: Any) -> None:
    validate_document(document, STORY_SCHEMA)


def describe_error(error: ValidationError) -> tuple[str, str]:
    """Split a ValidationError into (location, message).

    Uses the most specific sub-error when the failure comes from a
    combinator (allOf/anyOf/if-then), so the message points at the
    offending field rather than at the whole action.
    """
    best = best_match([error]) or error
    location = " -> ".join(str(p) for p in best.absolute_path) if best.absolute_path else "root"
    return location, best.message


def validate_with_error_details(document: Any, schema_name: str) -> tuple[bool, str | None]:
    """Validate a document and return detailed error information.

    This is a convenience wrapper that catches validation errors and
    returns user-friendly error messages.

    Returns:
        Tuple of (is_valid, error_message). error_message is None if valid.
    """
    try:
        validate_document(document, schema_name)
        return True, None
    except ValidationError as e:
        location, message = describe_error(e)
        return False, f"Validation error at {location}: {message}"
    except (FileNotFoundError, json.JSONDecodeError) as e:
        return False, f"Schema error: {e}"

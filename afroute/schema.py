"""JSON Schema validation infrastructure.

Provides schema validation for dataset documents with:
- Automatic schema resolution via $ref
- A cross-reference registry for every schema under ``schemas/``
- Cached validators
- Error messages that carry the JSON path of the failure
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, List

from jsonschema import Draft202012Validator
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT202012

from afroute.core import SCHEMAS_DIR, load_json

logger = logging.getLogger(__name__)

COUNTRY_DATASET_SCHEMA = "country-dataset.schema.json"
COUNTRIES_REGISTRY_SCHEMA = "countries.registry.schema.json"


@lru_cache(maxsize=1)
def _schema_registry(schemas_dir: Path = SCHEMAS_DIR) -> Registry:
    """Build a schema registry for all afroute schemas.

    This enables $ref resolution across the schema corpus.
    """
    if not schemas_dir.is_dir():
        return Registry()

    resources = []
    for schema_path in sorted(schemas_dir.glob("**/*.schema.json")):
        schema = load_json(schema_path)
        if not isinstance(schema, dict):
            logger.warning("skipping non-object schema %s", schema_path)
            continue

        # Use $id from schema, or derive from filename
        schema_id = schema.get("$id", "")
        if not schema_id:
            rel = schema_path.relative_to(schemas_dir)
            schema_id = f"https://schemas.afroute.org/{rel.as_posix()}"

        resource = Resource.from_contents(schema, default_specification=DRAFT202012)
        resources.append((schema_id, resource))

    return Registry().with_resources(resources)


@lru_cache(maxsize=None)
def schema_validator(schema_name: str, schemas_dir: Path = SCHEMAS_DIR) -> Draft202012Validator:
    """Create a validator for a schema file under ``schemas_dir``.

    Validators are cached per schema name; schema files are static.
    """
    schema = load_json(schemas_dir / schema_name)
    return Draft202012Validator(schema, registry=_schema_registry(schemas_dir))


def validate_with_schema(obj: Any, validator: Draft202012Validator) -> List[str]:
    """Validate ``obj`` and return ``"<json path>: <message>"`` strings (empty if valid)."""
    errors = sorted(validator.iter_errors(obj), key=lambda e: (list(e.absolute_path), e.message))
    return [f"{error.json_path}: {error.message}" for error in errors]


def validate_against_schema(obj: Any, schema_name: str, schemas_dir: Path = SCHEMAS_DIR) -> List[str]:
    """Validate an object against a named schema.

    Returns:
        List of validation error messages (empty if valid)
    """
    return validate_with_schema(obj, schema_validator(schema_name, schemas_dir))

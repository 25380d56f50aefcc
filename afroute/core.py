"""Core primitives for afroute.

This module provides the foundational utilities used throughout the package:
- Repository paths (data, schemas, registries)
- YAML/JSON loading with consistent encoding
- Canonical JSON serialization for deterministic CLI output

Design principles:
- Pure functions where possible
- No global mutable state
"""

from __future__ import annotations

import json
import pathlib
from typing import Any, Optional

import yaml

# Repository root, computed once at module load
REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]

DEFAULT_DATA_DIR = REPO_ROOT / "countries"
SCHEMAS_DIR = REPO_ROOT / "schemas"
COUNTRIES_REGISTRY_PATH = REPO_ROOT / "registries" / "countries.yaml"

DATASET_SUFFIXES = (".json", ".yaml", ".yml")


def load_yaml(path: pathlib.Path) -> Any:
    """Load YAML file with UTF-8 encoding."""
    return yaml.safe_load(pathlib.Path(path).read_text(encoding="utf-8"))


def load_json(path: pathlib.Path) -> Any:
    """Load JSON file with UTF-8 encoding."""
    return json.loads(pathlib.Path(path).read_text(encoding="utf-8"))


def load_structured(path: pathlib.Path) -> Any:
    """Load a JSON or YAML document, chosen by file suffix."""
    p = pathlib.Path(path)
    suffix = p.suffix.lower()
    if suffix == ".json":
        return load_json(p)
    if suffix in (".yaml", ".yml"):
        return load_yaml(p)
    raise ValueError(f"unsupported document format: {p} (expected one of {', '.join(DATASET_SUFFIXES)})")


def canonical_json(obj: Any, *, indent: Optional[int] = 2) -> str:
    """Serialize to JSON with sorted keys so CLI output is stable."""
    return json.dumps(obj, indent=indent, sort_keys=True, ensure_ascii=False)


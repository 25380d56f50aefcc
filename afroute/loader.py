"""Dataset loading: files on disk -> ``CountryDataset`` -> ``RouteRegistry``.

Layout of a data directory:

    countries/
      ng/institutions.json
      ke/institutions.json
      gh/institutions.yaml

One file per country directory. JSON and YAML are both accepted as long as
the document has the country dataset shape (``schemas/country-dataset.schema.json``).
All file access happens here; the registry itself never performs I/O.
"""

from __future__ import annotations

import json
import logging
import pathlib
from typing import Any, Dict, List, Optional, Union

import yaml

from afroute.config import get_config
from afroute.core import DATASET_SUFFIXES, load_structured
from afroute.registry import CountryDataset, DatasetError, RouteRegistry
from afroute.schema import COUNTRY_DATASET_SCHEMA, schema_validator, validate_with_schema

logger = logging.getLogger(__name__)

DATASET_STEM = "institutions"

PathLike = Union[str, pathlib.Path]


def read_dataset_document(path: PathLike) -> Any:
    """Parse a dataset file without validating it.

    Raises ``DatasetError`` when the file is missing, has an unsupported
    suffix, or is not valid JSON/YAML.
    """
    p = pathlib.Path(path)
    if not p.is_file():
        raise DatasetError(f"dataset file not found: {p}")
    try:
        return load_structured(p)
    except (json.JSONDecodeError, yaml.YAMLError, UnicodeDecodeError) as e:
        raise DatasetError(f"failed to parse dataset {p}: {e}") from e
    except ValueError as e:
        raise DatasetError(str(e)) from e


def schema_errors(obj: Any) -> List[str]:
    """Country dataset schema violations for ``obj`` (empty list if valid)."""
    return validate_with_schema(obj, schema_validator(COUNTRY_DATASET_SCHEMA))


def dataset_from_dict(obj: Any, *, source: str = "<memory>", validate_schema: bool = True) -> CountryDataset:
    """Build a ``CountryDataset`` from an already parsed document."""
    if not isinstance(obj, dict):
        raise DatasetError(f"invalid country dataset: {source}: document must be a mapping")
    if validate_schema:
        errs = schema_errors(obj)
        if errs:
            raise DatasetError(f"invalid country dataset: {source}: {errs[0]}")
    try:
        return CountryDataset.from_dict(obj)
    except (AttributeError, TypeError) as e:
        raise DatasetError(f"invalid country dataset: {source}: unexpected document shape ({e})") from e


def load_country_dataset(path: PathLike, *, validate_schema: Optional[bool] = None) -> CountryDataset:
    """Read, validate and build one country dataset.

    ``validate_schema`` defaults to the ``data.validate_schema`` config value.
    """
    if validate_schema is None:
        validate_schema = get_config().data.validate_schema.get()
    p = pathlib.Path(path)
    dataset = dataset_from_dict(read_dataset_document(p), source=str(p), validate_schema=validate_schema)
    logger.info(
        "loaded dataset %s",
        p,
        extra={"context": {"country": dataset.country.iso, "institutions": len(dataset.institutions)}},
    )
    return dataset


def data_dir_from_config() -> pathlib.Path:
    return pathlib.Path(get_config().data.data_dir.get()).expanduser()


def find_dataset_files(data_dir: Optional[PathLike] = None) -> Dict[str, pathlib.Path]:
    """Map lower-case ISO code -> dataset file for every country directory.

    A country directory holding more than one ``institutions.*`` file is an
    error, since it would be ambiguous which one is authoritative.
    """
    root = pathlib.Path(data_dir) if data_dir is not None else data_dir_from_config()
    if not root.is_dir():
        raise DatasetError(f"data directory not found: {root}")

    out: Dict[str, pathlib.Path] = {}
    for country_dir in sorted(p for p in root.iterdir() if p.is_dir()):
        candidates = [country_dir / f"{DATASET_STEM}{suffix}" for suffix in DATASET_SUFFIXES]
        present = [c for c in candidates if c.is_file()]
        if not present:
            continue
        if len(present) > 1:
            raise DatasetError(
                f"ambiguous dataset for {country_dir.name}: {', '.join(p.name for p in present)}"
            )
        out[country_dir.name.lower()] = present[0]
    return out


def resolve_dataset_path(country_or_path: PathLike, data_dir: Optional[PathLike] = None) -> pathlib.Path:
    """Accept either a dataset file path or an ISO alpha-2 code under ``data_dir``."""
    p = pathlib.Path(country_or_path)
    if p.suffix.lower() in DATASET_SUFFIXES:
        return p

    iso = str(country_or_path).strip().lower()
    files = find_dataset_files(data_dir)
    if iso not in files:
        raise DatasetError(
            f"no dataset for country '{country_or_path}'. Available: {sorted(files)}"
        )
    return files[iso]


def load_registry(
    country_or_path: Optional[PathLike] = None,
    *,
    data_dir: Optional[PathLike] = None,
    strict: Optional[bool] = None,
    validate_schema: Optional[bool] = None,
) -> RouteRegistry:
    """Load a dataset and wrap it in a ``RouteRegistry``.

    Unset arguments fall back to configuration (``data.default_country``,
    ``data.data_dir``, ``data.strict_integrity``, ``data.validate_schema``).
    """
    cfg = get_config().data
    if country_or_path is None:
        country_or_path = cfg.default_country.get()
    if strict is None:
        strict = cfg.strict_integrity.get()

    path = resolve_dataset_path(country_or_path, data_dir)
    dataset = load_country_dataset(path, validate_schema=validate_schema)
    return RouteRegistry(dataset, strict=strict)

"""afroute: standardized identifiers for African financial institutions.

Architecture:
    afroute/
    ├── __init__.py      # Package entry, version, public API
    ├── core.py          # Paths, JSON/YAML loading
    ├── schema.py        # JSON Schema validation infrastructure
    ├── identifier.py    # CCC + TT + SSSSSS codec
    ├── registry.py      # Data model and RouteRegistry lookups
    ├── loader.py        # Dataset files -> CountryDataset -> RouteRegistry
    ├── conventions.py   # Per-country prefix and category tables
    ├── catalog.py       # One registry per country, cross-country lookups
    ├── checks.py        # Dataset lint
    ├── config.py        # YAML + environment configuration
    ├── observability.py # Logging setup
    └── cli.py           # Command-line interface

Typical use:

    from afroute import load_registry

    registry = load_registry("ng")
    registry.to_legacy_code("23401000009")   # "058"
    registry.to_standard_code("058")         # "23401000009"
"""

__version__ = "0.3.0"

from afroute.identifier import (
    MalformedCodeError,
    StandardCode,
    format_standard_code,
    is_well_formed,
    parse_standard_code,
)
from afroute.registry import (
    Country,
    CountryDataset,
    DatasetError,
    DatasetIntegrityError,
    Institution,
    InstitutionSummary,
    LegacyCodes,
    RouteRegistry,
    ValidationResult,
)
from afroute.loader import dataset_from_dict, load_country_dataset, load_registry
from afroute.catalog import Catalog

__all__ = [
    "__version__",
    "MalformedCodeError",
    "StandardCode",
    "format_standard_code",
    "is_well_formed",
    "parse_standard_code",
    "Country",
    "CountryDataset",
    "DatasetError",
    "DatasetIntegrityError",
    "Institution",
    "InstitutionSummary",
    "LegacyCodes",
    "RouteRegistry",
    "ValidationResult",
    "dataset_from_dict",
    "load_country_dataset",
    "load_registry",
    "Catalog",
]

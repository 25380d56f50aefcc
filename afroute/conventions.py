"""Per-country identifier conventions (``registries/countries.yaml``).

Each country fixes the ``CCC`` prefix of its identifiers and the meaning of
the ``TT`` category digits. Registries do not depend on this table; the
catalog uses it to route a code to its country, and the dataset checks use it
to report category/type mismatches.
"""

from __future__ import annotations

import logging
import pathlib
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from afroute.core import COUNTRIES_REGISTRY_PATH, load_yaml
from afroute.registry import DatasetError
from afroute.schema import COUNTRIES_REGISTRY_SCHEMA, schema_validator, validate_with_schema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CountryConvention:
    iso: str
    name: str
    country_code: str
    currency: str
    categories: Mapping[str, str]

    def type_for_category(self, category: str) -> Optional[str]:
        return self.categories.get(category)

    def categories_for_type(self, institution_type: str) -> Tuple[str, ...]:
        return tuple(tt for tt, t in sorted(self.categories.items()) if t == institution_type)


class CountryConventions:
    """Lookup of conventions by ISO code or by ``CCC`` prefix."""

    def __init__(self, countries: Tuple[CountryConvention, ...], default_categories: Mapping[str, str]):
        self.default_categories = default_categories
        self._by_iso = MappingProxyType({c.iso.upper(): c for c in countries})
        by_code: Dict[str, CountryConvention] = {}
        for c in countries:
            if c.country_code in by_code:
                raise DatasetError(
                    f"country code {c.country_code} assigned to both "
                    f"{by_code[c.country_code].iso} and {c.iso}"
                )
            by_code[c.country_code] = c
        self._by_code = MappingProxyType(by_code)

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "CountryConventions":
        defaults = MappingProxyType({str(k): str(v) for k, v in (d.get("default_categories") or {}).items()})
        countries = []
        for e in d.get("countries") or []:
            own = e.get("categories")
            categories = MappingProxyType({str(k): str(v) for k, v in own.items()}) if own else defaults
            countries.append(CountryConvention(
                iso=str(e.get("iso") or "").upper(),
                name=str(e.get("name") or ""),
                country_code=str(e.get("country_code") or ""),
                currency=str(e.get("currency") or ""),
                categories=categories,
            ))
        return CountryConventions(tuple(countries), defaults)

    def for_iso(self, iso: str) -> Optional[CountryConvention]:
        return self._by_iso.get(str(iso).upper())

    def for_country_code(self, country_code: str) -> Optional[CountryConvention]:
        return self._by_code.get(country_code)

    def __iter__(self):
        return iter(self._by_iso.values())

    def __len__(self) -> int:
        return len(self._by_iso)


def load_conventions(path: pathlib.Path = COUNTRIES_REGISTRY_PATH) -> CountryConventions:
    obj = load_yaml(path)
    errs = validate_with_schema(obj, schema_validator(COUNTRIES_REGISTRY_SCHEMA))
    if errs:
        raise DatasetError(f"invalid country conventions: {path}: {errs[0]}")
    conventions = CountryConventions.from_dict(obj)
    logger.debug("loaded %d country conventions from %s", len(conventions), path)
    return conventions


@lru_cache(maxsize=1)
def default_conventions() -> CountryConventions:
    """Conventions shipped in ``registries/countries.yaml`` (loaded once)."""
    return load_conventions()

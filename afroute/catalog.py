"""Multi-country catalog: one ``RouteRegistry`` per shipped dataset.

Standardized identifiers are unique across every country, so the catalog can
resolve an identifier without being told its country. Legacy bank codes are
only unique within a country, so legacy lookups always name the country.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple

from afroute.config import get_config
from afroute.conventions import CountryConvention, CountryConventions, default_conventions
from afroute.identifier import is_well_formed
from afroute.loader import PathLike, find_dataset_files, load_country_dataset
from afroute.registry import DatasetIntegrityError, Institution, RouteRegistry, find_duplicates

logger = logging.getLogger(__name__)


class Catalog:
    """Read-only collection of country registries keyed by lower-case ISO code."""

    def __init__(
        self,
        registries: Mapping[str, RouteRegistry],
        *,
        conventions: Optional[CountryConventions] = None,
    ):
        self._registries = MappingProxyType({iso.lower(): r for iso, r in sorted(registries.items())})
        self._conventions = conventions

        # ids() is distinct per registry, so a repeat here spans two countries.
        all_ids = [code for r in self._registries.values() for code in r.ids()]
        duplicates = find_duplicates(all_ids)
        if duplicates:
            raise DatasetIntegrityError(
                f"standardized id used by more than one country: {', '.join(duplicates)}",
                duplicate_ids=duplicates,
            )

        owner: Dict[str, RouteRegistry] = {}
        for r in self._registries.values():
            for code in r.ids():
                owner[code] = r
        self._owner = MappingProxyType(owner)

        logger.info(
            "catalog built with %d countries",
            len(self._registries),
            extra={"context": {"countries": ",".join(self._registries), "institutions": len(owner)}},
        )

    @classmethod
    def from_directory(
        cls,
        data_dir: Optional[PathLike] = None,
        *,
        conventions: Optional[CountryConventions] = None,
        strict: Optional[bool] = None,
        validate_schema: Optional[bool] = None,
    ) -> "Catalog":
        if strict is None:
            strict = get_config().data.strict_integrity.get()
        registries = {
            iso: RouteRegistry(load_country_dataset(path, validate_schema=validate_schema), strict=strict)
            for iso, path in find_dataset_files(data_dir).items()
        }
        return cls(registries, conventions=conventions)

    @property
    def conventions(self) -> CountryConventions:
        if self._conventions is None:
            self._conventions = default_conventions()
        return self._conventions

    def countries(self) -> Tuple[str, ...]:
        return tuple(self._registries)

    def registry_for(self, iso: str) -> Optional[RouteRegistry]:
        return self._registries.get(str(iso).lower())

    def __iter__(self) -> Iterator[RouteRegistry]:
        return iter(self._registries.values())

    def __len__(self) -> int:
        return len(self._registries)

    def registry_for_code(self, code: str) -> Optional[RouteRegistry]:
        """The registry holding ``code``, or ``None`` if no loaded country has it."""
        if not isinstance(code, str):
            return None
        return self._owner.get(code)

    def find_by_standard_code(self, code: str) -> Optional[Institution]:
        registry = self.registry_for_code(code)
        return registry.find_by_standard_code(code) if registry is not None else None

    def find_by_legacy_code(self, iso: str, code: str) -> Optional[Institution]:
        registry = self.registry_for(iso)
        return registry.find_by_legacy_code(code) if registry is not None else None

    def country_for_code(self, code: str) -> Optional[CountryConvention]:
        """Country named by the ``CCC`` prefix, whether or not a dataset is loaded for it."""
        if not is_well_formed(code):
            return None
        return self.conventions.for_country_code(code[:3])

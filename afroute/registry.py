"""Route registry: lookups between standardized identifiers and legacy bank codes.

A ``RouteRegistry`` wraps one country's ``CountryDataset`` and answers:

    registry.find_by_standard_code("23401000009")   -> Institution | None
    registry.find_by_legacy_code("058")             -> Institution | None
    registry.to_legacy_code("23401000009")          -> "058"
    registry.to_standard_code("058")                -> "23401000009"
    registry.list_by_type("commercial_bank")        -> (InstitutionSummary, ...)
    registry.validate("23401000009")                -> ValidationResult

Misses are returned as ``None``; they are never raised. Lookups are exact
string matches with no normalization, so a malformed code behaves like any
other unknown code. The only failure the registry raises is a
``DatasetIntegrityError`` at construction, when the dataset repeats an ``id``
or a ``legacy.bank_code``.

Everything is immutable after construction (frozen dataclasses, tuples,
read-only mappings) so a registry can be shared between threads.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

_EMPTY_EXTRAS: Mapping[str, Optional[str]] = MappingProxyType({})


# ─────────────────────────────────────────────────────────────────────────────
# Errors
# ─────────────────────────────────────────────────────────────────────────────

class DatasetError(ValueError):
    """A dataset document could not be read or does not have the dataset shape."""


class DatasetIntegrityError(DatasetError):
    """A dataset repeats a key that must be unique (``id`` or ``legacy.bank_code``)."""

    def __init__(
        self,
        message: str,
        *,
        duplicate_ids: Tuple[str, ...] = (),
        duplicate_bank_codes: Tuple[str, ...] = (),
    ):
        super().__init__(message)
        self.duplicate_ids = duplicate_ids
        self.duplicate_bank_codes = duplicate_bank_codes


# ─────────────────────────────────────────────────────────────────────────────
# Data Types
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class LegacyCodes:
    """Pre-existing local identifiers for an institution.

    ``bank_code`` is the key payment providers use today. Any other legacy keys
    found in the dataset (``swift``, ``nip_code``, ...) are kept in ``extras``.
    """
    bank_code: str
    extras: Mapping[str, Optional[str]] = field(default_factory=lambda: _EMPTY_EXTRAS, hash=False)

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "LegacyCodes":
        extras = {
            str(k): (None if v is None else str(v))
            for k, v in d.items()
            if k != "bank_code"
        }
        return LegacyCodes(
            bank_code=str(d.get("bank_code") or ""),
            extras=MappingProxyType(extras) if extras else _EMPTY_EXTRAS,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"bank_code": self.bank_code}
        out.update(self.extras)
        return out


@dataclass(frozen=True)
class Institution:
    """One financial institution row."""
    id: str
    name: str
    short_name: str
    type: str
    legacy: LegacyCodes
    status: str  # open set: active, inactive, ...

    @property
    def bank_code(self) -> str:
        return self.legacy.bank_code

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "Institution":
        return Institution(
            id=str(d.get("id") or ""),
            name=str(d.get("name") or ""),
            short_name=str(d.get("short_name") or ""),
            type=str(d.get("type") or ""),
            legacy=LegacyCodes.from_dict(d.get("legacy") or {}),
            status=str(d.get("status") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "short_name": self.short_name,
            "type": self.type,
            "legacy": self.legacy.to_dict(),
            "status": self.status,
        }


@dataclass(frozen=True)
class Country:
    name: str
    iso: str
    currency: str

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "Country":
        return Country(
            name=str(d.get("name") or ""),
            iso=str(d.get("iso") or ""),
            currency=str(d.get("currency") or ""),
        )

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "iso": self.iso, "currency": self.currency}


@dataclass(frozen=True)
class CountryDataset:
    """The unit of distribution: one country and its institutions, in file order."""
    country: Country
    institutions: Tuple[Institution, ...]

    def __post_init__(self):
        # Accept any iterable of rows but always hold a tuple.
        object.__setattr__(self, "institutions", tuple(self.institutions))

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "CountryDataset":
        rows = (d.get("institutions") or {}).get("list") or []
        return CountryDataset(
            country=Country.from_dict(d.get("country") or {}),
            institutions=tuple(Institution.from_dict(r) for r in rows),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "country": self.country.to_dict(),
            "institutions": {"list": [i.to_dict() for i in self.institutions]},
        }


@dataclass(frozen=True)
class InstitutionSummary:
    """Read-only projection returned by ``RouteRegistry.list_by_type``."""
    id: str
    name: str
    short_name: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name, "short_name": self.short_name}


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of ``RouteRegistry.validate``."""
    is_valid: bool
    institution: Optional[Institution] = None
    legacy_code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "institution": self.institution.to_dict() if self.institution else None,
            "legacy_code": self.legacy_code,
        }


# ─────────────────────────────────────────────────────────────────────────────
# Registry
# ─────────────────────────────────────────────────────────────────────────────

def find_duplicates(values: List[str]) -> Tuple[str, ...]:
    """Return each value that occurs more than once, in first-seen order."""
    seen: Dict[str, int] = {}
    for v in values:
        seen[v] = seen.get(v, 0) + 1
    return tuple(v for v, n in seen.items() if n > 1)


class RouteRegistry:
    """Bidirectional lookup over one country's institutions.

    Args:
        dataset: the loaded country dataset
        strict: when True (default) a repeated ``id`` or ``legacy.bank_code``
            raises ``DatasetIntegrityError``. When False the first-listed record
            wins for every lookup and a warning is logged.
    """

    def __init__(self, dataset: CountryDataset, *, strict: bool = True):
        self._dataset = dataset
        institutions = self._institutions = tuple(dataset.institutions)

        duplicate_ids = find_duplicates([i.id for i in institutions])
        duplicate_bank_codes = find_duplicates([i.legacy.bank_code for i in institutions])
        if duplicate_ids or duplicate_bank_codes:
            parts = []
            if duplicate_ids:
                parts.append(f"duplicate id: {', '.join(duplicate_ids)}")
            if duplicate_bank_codes:
                parts.append(f"duplicate legacy.bank_code: {', '.join(duplicate_bank_codes)}")
            message = f"dataset {dataset.country.iso or '?'} failed integrity check ({'; '.join(parts)})"
            if strict:
                raise DatasetIntegrityError(
                    message,
                    duplicate_ids=duplicate_ids,
                    duplicate_bank_codes=duplicate_bank_codes,
                )
            logger.warning(
                "%s; keeping first-listed records",
                message,
                extra={"context": {"country": dataset.country.iso}},
            )

        by_id: Dict[str, Institution] = {}
        by_bank_code: Dict[str, Institution] = {}
        for inst in institutions:
            by_id.setdefault(inst.id, inst)
            by_bank_code.setdefault(inst.legacy.bank_code, inst)

        self._by_id: Mapping[str, Institution] = MappingProxyType(by_id)
        self._by_bank_code: Mapping[str, Institution] = MappingProxyType(by_bank_code)

        logger.debug(
            "registry built for %s with %d institutions",
            dataset.country.iso,
            len(institutions),
            extra={"context": {"country": dataset.country.iso}},
        )

    # -- introspection -----------------------------------------------------

    @property
    def country(self) -> Country:
        return self._dataset.country

    @property
    def dataset(self) -> CountryDataset:
        return self._dataset

    def __len__(self) -> int:
        return len(self._institutions)

    def __iter__(self) -> Iterator[Institution]:
        return iter(self._institutions)

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code in self._by_id

    def __repr__(self) -> str:
        return f"RouteRegistry(country={self.country.iso!r}, institutions={len(self)})"

    def ids(self) -> Tuple[str, ...]:
        """Distinct standardized ids, in dataset order."""
        return tuple(self._by_id)

    def types(self) -> Tuple[str, ...]:
        """Distinct institution types, in the order they first appear."""
        return tuple(dict.fromkeys(i.type for i in self._institutions))

    # -- lookups -----------------------------------------------------------

    def find_by_standard_code(self, code: str) -> Optional[Institution]:
        """Exact match on ``id``; ``None`` when nothing matches."""
        if not isinstance(code, str):
            return None
        return self._by_id.get(code)

    def find_by_legacy_code(self, code: str) -> Optional[Institution]:
        """Exact match on ``legacy.bank_code``; ``None`` when nothing matches."""
        if not isinstance(code, str):
            return None
        return self._by_bank_code.get(code)

    def to_legacy_code(self, standard_code: str) -> Optional[str]:
        inst = self.find_by_standard_code(standard_code)
        return inst.legacy.bank_code if inst is not None else None

    def to_standard_code(self, legacy_code: str) -> Optional[str]:
        inst = self.find_by_legacy_code(legacy_code)
        return inst.id if inst is not None else None

    def list_by_type(self, institution_type: str) -> Tuple[InstitutionSummary, ...]:
        """Summaries of every institution whose ``type`` equals ``institution_type``, in dataset order."""
        return tuple(
            InstitutionSummary(id=i.id, name=i.name, short_name=i.short_name)
            for i in self._institutions
            if i.type == institution_type
        )

    def validate(self, standard_code: str) -> ValidationResult:
        """Report whether ``standard_code`` resolves, with the record and its legacy code."""
        inst = self.find_by_standard_code(standard_code)
        if inst is None:
            return ValidationResult(is_valid=False)
        return ValidationResult(is_valid=True, institution=inst, legacy_code=inst.legacy.bank_code)

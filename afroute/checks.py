"""Dataset lint: problems a curator should fix before publishing a country file.

``check_dataset`` looks at an already built ``CountryDataset``;
``check_path`` starts from a file and also reports parse and schema failures.
Nothing here raises for a bad dataset: every problem becomes a ``CheckIssue``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from afroute.conventions import CountryConventions, default_conventions
from afroute.identifier import is_well_formed, parse_standard_code
from afroute.loader import PathLike, read_dataset_document, schema_errors
from afroute.registry import CountryDataset, DatasetError, find_duplicates

logger = logging.getLogger(__name__)

ERROR = "error"
WARNING = "warning"


@dataclass(frozen=True)
class CheckIssue:
    severity: str  # error | warning
    code: str
    message: str
    institution_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"severity": self.severity, "code": self.code, "message": self.message}
        if self.institution_id is not None:
            out["institution_id"] = self.institution_id
        return out


def has_errors(issues: List[CheckIssue]) -> bool:
    return any(i.severity == ERROR for i in issues)


def check_dataset(
    dataset: CountryDataset,
    conventions: Optional[CountryConventions] = None,
) -> List[CheckIssue]:
    """Report identifier, convention and uniqueness problems in ``dataset``."""
    if conventions is None:
        conventions = default_conventions()
    issues: List[CheckIssue] = []
    iso = dataset.country.iso

    convention = conventions.for_iso(iso)
    if convention is None:
        issues.append(CheckIssue(WARNING, "unknown_country", f"no identifier convention registered for country {iso!r}"))
    elif dataset.country.currency != convention.currency:
        issues.append(CheckIssue(
            WARNING,
            "currency_mismatch",
            f"dataset currency {dataset.country.currency!r} differs from registered {convention.currency!r}",
        ))

    for inst in dataset.institutions:
        if not inst.name.strip():
            issues.append(CheckIssue(ERROR, "empty_name", "institution name is empty", inst.id))

        if not is_well_formed(inst.id):
            issues.append(CheckIssue(ERROR, "malformed_id", f"id {inst.id!r} is not 11 ASCII digits", inst.id))
            continue
        if convention is None:
            continue

        code = parse_standard_code(inst.id)
        if code.country_code != convention.country_code:
            issues.append(CheckIssue(
                ERROR,
                "country_code_mismatch",
                f"id prefix {code.country_code} does not match {iso} country code {convention.country_code}",
                inst.id,
            ))

        expected_type = convention.type_for_category(code.category)
        if expected_type is None:
            issues.append(CheckIssue(
                WARNING,
                "unknown_category",
                f"category {code.category} is not defined for {iso}",
                inst.id,
            ))
        elif expected_type != inst.type:
            issues.append(CheckIssue(
                WARNING,
                "category_type_mismatch",
                f"category {code.category} means {expected_type!r} in {iso} but type is {inst.type!r}",
                inst.id,
            ))

    for dup in find_duplicates([i.id for i in dataset.institutions]):
        issues.append(CheckIssue(ERROR, "duplicate_id", f"id {dup} appears more than once", dup))
    for dup in find_duplicates([i.legacy.bank_code for i in dataset.institutions]):
        issues.append(CheckIssue(ERROR, "duplicate_bank_code", f"legacy.bank_code {dup!r} appears more than once"))

    return issues


def check_path(path: PathLike, conventions: Optional[CountryConventions] = None) -> List[CheckIssue]:
    """Lint a dataset file. Schema failures are reported alone, without the semantic pass."""
    try:
        doc = read_dataset_document(path)
    except DatasetError as e:
        return [CheckIssue(ERROR, "unreadable", str(e))]

    if not isinstance(doc, dict):
        return [CheckIssue(ERROR, "schema", "document must be a mapping")]

    errs = schema_errors(doc)
    if errs:
        return [CheckIssue(ERROR, "schema", e) for e in errs]

    issues = check_dataset(CountryDataset.from_dict(doc), conventions)
    logger.debug("checked %s: %d issues", path, len(issues))
    return issues

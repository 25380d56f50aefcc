import json
import logging
import os
import pathlib
import sys

import pytest


# Ensure repo root is on PYTHONPATH for direct package imports (e.g. `import afroute`).
_REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))


def _institution(id_, name, short_name, type_, bank_code, status="active", **legacy_extras):
    legacy = {"bank_code": bank_code}
    legacy.update(legacy_extras)
    return {
        "id": id_,
        "name": name,
        "short_name": short_name,
        "type": type_,
        "legacy": legacy,
        "status": status,
    }


@pytest.fixture
def sample_doc() -> dict:
    """A small Nigerian dataset in the on-disk document shape."""
    return {
        "country": {"name": "Nigeria", "iso": "NG", "currency": "NGN"},
        "institutions": {
            "list": [
                _institution("23401000001", "Access Bank Plc", "Access", "commercial_bank", "044"),
                _institution("23401000009", "Guaranty Trust Bank Limited", "GTBank", "commercial_bank", "058", swift="GTBINGLA"),
                _institution("23404000004", "OPay Digital Services Limited", "OPay", "mobile_money", "999992"),
                _institution("23401000024", "Zenith Bank Plc", "Zenith", "commercial_bank", "057"),
                _institution("23405000001", "Paga", "Paga", "psp", "100002"),
                _institution("23401000025", "Diamond Bank Plc", "Diamond", "commercial_bank", "063", status="inactive"),
            ]
        },
    }


@pytest.fixture
def sample_dataset(sample_doc):
    from afroute.registry import CountryDataset

    return CountryDataset.from_dict(sample_doc)


@pytest.fixture
def registry(sample_dataset):
    from afroute.registry import RouteRegistry

    return RouteRegistry(sample_dataset)


@pytest.fixture
def write_dataset(tmp_path):
    """Write a document as <tmp>/<iso>/institutions.json and return its path."""

    def _write(doc: dict, iso: str = "ng", suffix: str = ".json") -> pathlib.Path:
        d = tmp_path / iso
        d.mkdir(parents=True, exist_ok=True)
        p = d / f"institutions{suffix}"
        if suffix == ".json":
            p.write_text(json.dumps(doc, indent=2) + "\n", encoding="utf-8")
        else:
            import yaml

            p.write_text(yaml.safe_dump(doc, sort_keys=False), encoding="utf-8")
        return p

    return _write


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
    """Fresh configuration, logging and no AFROUTE_* environment leakage per test."""
    from afroute.config import ConfigManager
    from afroute.observability import ROOT_LOGGER_NAME, StructuredHandler

    for name in list(os.environ):
        if name.startswith("AFROUTE_"):
            monkeypatch.delenv(name, raising=False)
    ConfigManager.reset_instance()
    yield
    ConfigManager.reset_instance()

    # The CLI installs its own handler and stops propagation; undo that so
    # caplog keeps working in later tests.
    pkg_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for h in list(pkg_logger.handlers):
        if isinstance(h, StructuredHandler):
            pkg_logger.removeHandler(h)
    pkg_logger.propagate = True
    pkg_logger.setLevel(logging.NOTSET)

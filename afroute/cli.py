#!/usr/bin/env python3
"""afroute command-line interface.

Usage:
    afroute lookup 23401000009
    afroute lookup 058 --legacy --country ng
    afroute to-legacy 23401000009
    afroute to-standard 058
    afroute list --type mobile_money --country ke
    afroute validate 23401000009 --json
    afroute parse 23401000009
    afroute check [countries/ng/institutions.json ...]
    afroute countries

Exit codes: 0 found / ok, 1 not found, 2 invalid input, dataset or config error.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

from afroute import __version__
from afroute.catalog import Catalog
from afroute.checks import check_path, has_errors
from afroute.config import ConfigError, ConfigManager
from afroute.conventions import default_conventions
from afroute.core import canonical_json
from afroute.identifier import MalformedCodeError, parse_standard_code
from afroute.loader import find_dataset_files, load_registry
from afroute.observability import configure_logging
from afroute.registry import DatasetError, Institution, RouteRegistry

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_ERROR = 2


def _registry(args: argparse.Namespace) -> RouteRegistry:
    return load_registry(args.country or None)


def _print_institution(inst: Institution) -> None:
    print(f"{inst.id}  {inst.legacy.bank_code:<8}  {inst.type:<18}  {inst.status:<8}  {inst.name}")


def _not_found(args: argparse.Namespace, what: str) -> int:
    if args.json:
        print(canonical_json(None))
    else:
        print(f"not found: {what}", file=sys.stderr)
    return EXIT_NOT_FOUND


def cmd_lookup(args: argparse.Namespace) -> int:
    """Resolve a standardized code (any loaded country) or, with --legacy, a legacy code."""
    if args.legacy:
        inst = _registry(args).find_by_legacy_code(args.code)
    else:
        inst = Catalog.from_directory().find_by_standard_code(args.code)
    if inst is None:
        return _not_found(args, args.code)
    if args.json:
        print(canonical_json(inst.to_dict()))
    else:
        _print_institution(inst)
    return EXIT_OK


def cmd_to_legacy(args: argparse.Namespace) -> int:
    legacy = _registry(args).to_legacy_code(args.code)
    if legacy is None:
        return _not_found(args, args.code)
    print(canonical_json(legacy) if args.json else legacy)
    return EXIT_OK


def cmd_to_standard(args: argparse.Namespace) -> int:
    standard = _registry(args).to_standard_code(args.code)
    if standard is None:
        return _not_found(args, args.code)
    print(canonical_json(standard) if args.json else standard)
    return EXIT_OK


def cmd_list(args: argparse.Namespace) -> int:
    """List institutions of one type, or the available types when --type is omitted."""
    registry = _registry(args)
    if not args.type:
        types = list(registry.types())
        if args.json:
            print(canonical_json(types))
        else:
            for t in types:
                print(t)
        return EXIT_OK

    rows = [s.to_dict() for s in registry.list_by_type(args.type)]
    if args.json:
        print(canonical_json(rows))
    else:
        for r in rows:
            print(f"{r['id']}  {r['short_name']:<16}  {r['name']}")
    return EXIT_OK


def cmd_validate(args: argparse.Namespace) -> int:
    result = _registry(args).validate(args.code)
    if args.json:
        print(canonical_json(result.to_dict()))
    elif result.is_valid and result.institution is not None:
        print(f"valid: {result.institution.id} -> {result.legacy_code} ({result.institution.name})")
    else:
        print(f"invalid: {args.code}")
    return EXIT_OK if result.is_valid else EXIT_NOT_FOUND


def cmd_parse(args: argparse.Namespace) -> int:
    """Structural decode of a standardized code; no dataset lookup."""
    try:
        code = parse_standard_code(args.code)
    except MalformedCodeError as e:
        print(str(e), file=sys.stderr)
        return EXIT_ERROR

    out: Dict[str, Any] = code.to_dict()
    convention = default_conventions().for_country_code(code.country_code)
    out["country"] = convention.iso if convention else None
    out["type"] = convention.type_for_category(code.category) if convention else None

    if args.json:
        print(canonical_json(out))
    else:
        for k in ("id", "country_code", "country", "category", "type", "sequence"):
            print(f"{k:<13} {out[k] if out[k] is not None else '-'}")
    return EXIT_OK


def cmd_check(args: argparse.Namespace) -> int:
    paths: List[Any] = list(args.paths) or list(find_dataset_files().values())
    report: List[Dict[str, Any]] = []
    failed = False
    for p in paths:
        issues = check_path(p)
        failed = failed or has_errors(issues)
        report.append({"path": str(p), "issues": [i.to_dict() for i in issues]})

    if args.json:
        print(canonical_json(report))
    else:
        for entry in report:
            status = "FAIL" if any(i["severity"] == "error" for i in entry["issues"]) else "OK"
            print(f"[{status}] {entry['path']}")
            for i in entry["issues"]:
                where = f" ({i['institution_id']})" if "institution_id" in i else ""
                print(f"  {i['severity']:<7}  {i['code']}: {i['message']}{where}")
    return EXIT_ERROR if failed else EXIT_OK


def cmd_countries(args: argparse.Namespace) -> int:
    catalog = Catalog.from_directory()
    rows = [
        {
            "iso": r.country.iso,
            "name": r.country.name,
            "currency": r.country.currency,
            "institutions": len(r),
        }
        for r in catalog
    ]
    if args.json:
        print(canonical_json(rows))
    else:
        for r in rows:
            print(f"{r['iso']:<3} {r['currency']:<4} {r['institutions']:>5}  {r['name']}")
    return EXIT_OK


def _configure(args: argparse.Namespace) -> None:
    manager = ConfigManager()
    if args.config:
        manager.load_from_file(args.config)
    else:
        manager.load_defaults()
    if args.data_dir:
        manager.set("data.data_dir", args.data_dir)
    if args.log_level:
        manager.set("logging.log_level", args.log_level)
    if args.log_format:
        manager.set("logging.log_format", args.log_format)

    errors = manager.validate()
    if errors:
        raise ConfigError("; ".join(errors))

    configure_logging(manager.get("logging.log_level"), manager.get("logging.log_format"))


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="afroute",
        description="Standardized identifiers for African financial institutions",
    )
    ap.add_argument("--version", "-V", action="version", version=f"afroute {__version__}")
    ap.add_argument("--config", default="", help="YAML config file (default: ./afroute.yaml if present)")
    ap.add_argument("--data-dir", dest="data_dir", default="", help="Dataset directory (overrides config)")
    ap.add_argument("--log-level", dest="log_level", default="", choices=["", "debug", "info", "warning", "error", "critical"])
    ap.add_argument("--log-format", dest="log_format", default="", choices=["", "text", "json"])

    # Subcommand-level parents so options may follow the subcommand name.
    output = argparse.ArgumentParser(add_help=False)
    output.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    common = argparse.ArgumentParser(add_help=False, parents=[output])
    common.add_argument("--country", "-c", default="", help="ISO alpha-2 country (default: data.default_country)")

    sub = ap.add_subparsers(dest="cmd", required=True)

    lk = sub.add_parser("lookup", parents=[common], help="Show the institution for a code")
    lk.add_argument("code")
    lk.add_argument("--legacy", action="store_true", help="Treat CODE as a legacy bank code")
    lk.set_defaults(func=cmd_lookup)

    tl = sub.add_parser("to-legacy", parents=[common], help="Standardized code -> legacy bank code")
    tl.add_argument("code")
    tl.set_defaults(func=cmd_to_legacy)

    ts = sub.add_parser("to-standard", parents=[common], help="Legacy bank code -> standardized code")
    ts.add_argument("code")
    ts.set_defaults(func=cmd_to_standard)

    ls = sub.add_parser("list", parents=[common], help="List institutions by type")
    ls.add_argument("--type", "-t", default="", help="Institution type (omit to list types)")
    ls.set_defaults(func=cmd_list)

    va = sub.add_parser("validate", parents=[common], help="Check whether a standardized code resolves")
    va.add_argument("code")
    va.set_defaults(func=cmd_validate)

    pa = sub.add_parser("parse", parents=[output], help="Decode the parts of a standardized code")
    pa.add_argument("code")
    pa.set_defaults(func=cmd_parse)

    ck = sub.add_parser("check", parents=[output], help="Lint dataset files")
    ck.add_argument("paths", nargs="*", help="Dataset files (default: every dataset in the data directory)")
    ck.set_defaults(func=cmd_check)

    co = sub.add_parser("countries", parents=[output], help="List loaded country datasets")
    co.set_defaults(func=cmd_countries)

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        _configure(args)
        return args.func(args)
    except (ConfigError, DatasetError) as e:
        logger.debug("command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())

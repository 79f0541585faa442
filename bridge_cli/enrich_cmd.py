# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Enrichment CLI Commands

Commands:
- run: Enrich contacts from a JSON file (one contact, a list, or {contacts:[...]})
- gate: Evaluate the evidence gate over an evidence JSON file (offline)
- settings: Print the effective analysis settings and runtime config
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, NoReturn


def _load_json(path_str: str) -> Any:
    path = Path(path_str)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return json.loads(path.read_text(encoding="utf-8"))


def _contacts_from_payload(payload: Any) -> list[dict[str, Any]]:
    if isinstance(payload, dict) and isinstance(payload.get("contacts"), list):
        payload = payload["contacts"]
    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        raise ValueError("Expected a contact object, a list of contacts or {contacts:[...]}")
    return [c for c in payload if isinstance(c, dict)]


def _build_config(args: argparse.Namespace):
    from bridge_core.config import BridgeConfig, normalize_settings

    config = BridgeConfig.from_env()
    overrides: dict[str, Any] = config.analysis.model_dump()
    if getattr(args, "settings_file", None):
        overrides.update(normalize_settings(_load_json(args.settings_file)).model_dump())
    if getattr(args, "focus", None):
        overrides["focus_mode"] = args.focus
    if getattr(args, "mode", None):
        overrides["analysis_model"] = args.mode
    return config.model_copy(update={"analysis": normalize_settings(overrides)})


async def _run_contacts(config, contacts: list[dict[str, Any]]) -> dict[str, Any]:
    from bridge_core.engine import BridgeEngine

    engine = BridgeEngine(config)
    try:
        results = await engine.enrich_contacts(contacts)
    finally:
        await engine.close()
    return {contact_id: result.to_dict() for contact_id, result in results.items()}


def cmd_run(args: argparse.Namespace) -> int:
    """Enrich contacts and print (or write) the results as JSON."""
    try:
        contacts = _contacts_from_payload(_load_json(args.contacts_file))
    except (FileNotFoundError, ValueError) as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1

    if not contacts:
        print("✗ No contacts found in input", file=sys.stderr)
        return 1

    config = _build_config(args)
    output = asyncio.run(_run_contacts(config, contacts))
    text = json.dumps(output, ensure_ascii=False, indent=2)

    if args.output_json:
        Path(args.output_json).write_text(text, encoding="utf-8")
        print(f"Results written to {args.output_json}")
    else:
        print(text)

    failures = sum(1 for r in output.values() if "analysis_error" in r["enrichment"]["flaggedAttributes"])
    if failures:
        print(f"{failures} of {len(output)} contacts failed enrichment", file=sys.stderr)
    return 0 if failures == 0 else 3


def cmd_gate(args: argparse.Namespace) -> int:
    """Run the evidence gate over a list of evidence entries."""
    from bridge_core.verification.evidence_normalizer import normalize_evidence
    from bridge_core.verification.gate import evaluate_evidence_gate

    try:
        payload = _load_json(args.evidence_file)
    except (FileNotFoundError, ValueError) as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1
    if isinstance(payload, dict):
        payload = payload.get("evidenceLinks") or payload.get("evidence") or []

    evidence = normalize_evidence(payload)
    result = evaluate_evidence_gate(evidence, _build_config(args).analysis)
    if result.passed:
        print(f"✓ Evidence gate passed ({len(evidence)} links)")
        return 0
    print(f"✗ Evidence gate blocked ({len(evidence)} links):", file=sys.stderr)
    for issue in result.issues:
        print(f"  - {issue}", file=sys.stderr)
    return 2


def cmd_settings(args: argparse.Namespace) -> int:
    config = _build_config(args)
    print(json.dumps({
        "analysis": config.analysis.model_dump(mode="json", by_alias=True),
        "runtime": config.runtime.to_safe_log_dict(),
        "openai_model": config.openai_model,
        "openai_api_key_set": bool(config.openai_api_key),
    }, ensure_ascii=False, indent=2))
    return 0


def _add_settings_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--settings-file",
        help="JSON file with analysis settings (or an app settings document with an 'analysis' block)",
    )
    parser.add_argument(
        "--focus",
        choices=["BALANCED", "GATEKEEPER", "DEAL_HUNTER", "GOVT_INTEL"],
        help="Strategic focus override",
    )
    parser.add_argument(
        "--mode",
        choices=["fast", "quality"],
        help="Analysis model preset override",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="bridge-cli",
        description="Contact enrichment commands",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Enrich contacts from a JSON file")
    run_parser.add_argument("contacts_file", help="Path to JSON file with contacts")
    run_parser.add_argument("--output-json", help="Write results JSON to this path")
    _add_settings_args(run_parser)
    run_parser.set_defaults(func=cmd_run)

    gate_parser = subparsers.add_parser("gate", help="Evaluate the evidence gate offline")
    gate_parser.add_argument("evidence_file", help="Path to JSON file with evidence entries")
    _add_settings_args(gate_parser)
    gate_parser.set_defaults(func=cmd_gate)

    settings_parser = subparsers.add_parser("settings", help="Show effective settings")
    _add_settings_args(settings_parser)
    settings_parser.set_defaults(func=cmd_settings)

    return parser


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for the enrichment CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    try:
        exit_code = args.func(args)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()

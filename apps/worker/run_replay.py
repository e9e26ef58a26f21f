"""
Replay a scripted sequence of ledger operations against a fresh ledger.

Script format (JSON list):
    [{"caller": "admin", "op": "register_patient",
      "args": {"patient_id": "p1", "name": "...", ...}}, ...]

Exit codes:
- 0: every operation succeeded (or --keep-going was given)
- 1: an operation failed
- 2: the script could not be loaded or a step does not fit its operation
"""
from __future__ import annotations

import argparse
import inspect
import json
import sys
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from packages.core.config import LedgerSettings
from packages.core.errors import LedgerError
from packages.core.logging import configure_logging
from packages.core.render.markdown import render_replay_report_md
from packages.ledger.service import OPERATIONS, MedicalLedger


def load_script(path: Path) -> list[dict]:
    if not path.exists():
        raise FileNotFoundError(f"Script not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        steps = json.load(handle)
    if not isinstance(steps, list):
        raise ValueError("Script must be a JSON list of operations.")
    for index, step in enumerate(steps, start=1):
        if not isinstance(step, dict) or "caller" not in step or "op" not in step:
            raise ValueError(f"Step {index} must be an object with 'caller' and 'op'.")
        if step["op"] not in OPERATIONS:
            raise ValueError(f"Step {index}: unknown operation {step['op']!r}")
        args = step.get("args") or {}
        if not isinstance(args, dict):
            raise ValueError(f"Step {index}: 'args' must be an object.")
        try:
            inspect.signature(getattr(MedicalLedger, step["op"])).bind(None, step["caller"], **args)
        except TypeError as exc:
            raise ValueError(f"Step {index}: bad arguments for {step['op']}: {exc}") from exc
    return steps


def _to_jsonable(value: Any) -> Any:
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [_to_jsonable(item) for item in value]
    return value


def replay(ledger: MedicalLedger, steps: list[dict], keep_going: bool = False) -> list[dict]:
    outcomes: list[dict] = []
    for step in steps:
        caller = step["caller"]
        op = step["op"]
        args = step.get("args") or {}
        outcome: dict[str, Any] = {"caller": caller, "op": op}
        try:
            result = getattr(ledger, op)(caller, **args)
        except (LedgerError, TypeError) as exc:
            if isinstance(exc, LedgerError):
                outcome.update({"ok": False, "error_code": exc.code, "message": exc.message})
            else:
                outcome.update({"ok": False, "error_code": "invalid_arguments", "message": str(exc)})
            outcomes.append(outcome)
            if not keep_going:
                break
            continue
        outcome.update({"ok": True, "result": _to_jsonable(result)})
        outcomes.append(outcome)
    return outcomes


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Replay ledger operations.")
    parser.add_argument("script", type=Path, help="Path to a JSON operation script.")
    parser.add_argument("--format", choices=["json", "md"], default="json")
    parser.add_argument("--out", type=Path, help="Output path for markdown report.")
    parser.add_argument("--audit-out", type=Path, help="Write the audit trail as JSON lines.")
    parser.add_argument("--keep-going", action="store_true", help="Continue after a failed operation.")
    parser.add_argument("--admin", help="Initial admin principal (overrides LEDGER_ADMIN_ID).")
    args = parser.parse_args(argv)

    if args.format == "md" and args.out is None:
        print("Error: --out is required when --format md is used.", file=sys.stderr)
        return 2

    try:
        settings = LedgerSettings.from_env()
        if args.admin is not None:
            settings = LedgerSettings.model_validate({**settings.model_dump(), "admin_id": args.admin})
    except ValidationError as exc:
        print(f"Error: invalid settings: {exc.errors()[0]['msg']}", file=sys.stderr)
        return 2
    configure_logging(settings.log_level, settings.log_format)

    try:
        steps = load_script(args.script)
    except (FileNotFoundError, ValueError, json.JSONDecodeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    ledger = MedicalLedger(settings)
    outcomes = replay(ledger, steps, keep_going=args.keep_going)
    events = ledger.state.audit.events()

    if args.audit_out is not None:
        ledger.state.audit.export(args.audit_out)

    if args.format == "md":
        args.out.parent.mkdir(parents=True, exist_ok=True)
        args.out.write_text(render_replay_report_md(outcomes, events), encoding="utf-8")
        print(f"Markdown report written to {args.out}")
    else:
        payload = {
            "outcomes": outcomes,
            "audit": [event.model_dump(mode="json") for event in events],
            "total_records": ledger.state.record_counter,
        }
        print(json.dumps(payload, indent=2))

    failed = any(not outcome["ok"] for outcome in outcomes)
    return 1 if failed and not args.keep_going else 0


if __name__ == "__main__":
    raise SystemExit(main())

from __future__ import annotations

import argparse
import json
import sys
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, Optional

from packages.core.errors import LedgerError, error_from_code
from packages.core.render.markdown import render_patient_chart_md
from packages.core.schemas.ledger import MedicalRecord, PatientInfo


def build_request(
    url: str, principal: str, path: str, payload: Optional[Dict[str, Any]] = None, method: str = "GET"
) -> urllib.request.Request:
    data = json.dumps(payload).encode("utf-8") if payload is not None else None
    headers = {"X-Principal-Id": principal}
    if data is not None:
        headers["Content-Type"] = "application/json"
    return urllib.request.Request(
        f"{url.rstrip('/')}/v1/{path.lstrip('/')}",
        data=data,
        headers=headers,
        method=method,
    )


def _error_from_body(body: str) -> LedgerError:
    try:
        error = json.loads(body).get("error") or {}
    except (ValueError, AttributeError):
        return LedgerError(body or "request failed")
    return error_from_code(error.get("code", ""), error.get("message"))


def call(
    url: str, principal: str, path: str, payload: Optional[Dict[str, Any]] = None, method: str = "GET"
) -> Any:
    request = build_request(url, principal, path, payload, method)
    try:
        with urllib.request.urlopen(request, timeout=30) as response:
            raw = response.read().decode("utf-8", errors="replace")
    except urllib.error.HTTPError as exc:
        body = exc.read().decode("utf-8", errors="replace") if hasattr(exc, "read") else ""
        raise _error_from_body(body) from exc
    return json.loads(raw)


def format_pretty(patient_id: str, info: Dict[str, Any], history: Optional[list] = None) -> str:
    lines = [
        f"patient: {patient_id} ({'active' if info.get('is_active') else 'inactive'})",
        f"name: {info.get('name', 'unknown')}",
        f"blood type: {info.get('blood_type', 'unknown')}",
        f"allergies: {', '.join(info.get('allergies') or []) or 'none'}",
    ]
    if history is not None:
        lines.append(f"total records: {len(history)}")
        for record in history:
            lines.append(
                f"  #{record.get('id')} | {record.get('record_type', 'unknown')} | {record.get('content', '')}"
            )
    return "\n".join(lines)


def format_markdown(patient_id: str, info: Dict[str, Any], history: Optional[list] = None) -> str:
    return render_patient_chart_md(
        patient_id,
        PatientInfo.model_validate(info),
        [MedicalRecord.model_validate(record) for record in history or []],
    )


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Read a patient through the ledger API.")
    parser.add_argument("--url", required=True, help="Base API URL, e.g. http://127.0.0.1:8000")
    parser.add_argument("--principal", required=True, help="Verified caller principal id.")
    parser.add_argument("--patient", required=True, help="Patient principal id.")
    parser.add_argument("--history", action="store_true", help="Include the medical history.")
    parser.add_argument("--pretty", action="store_true", help="Print human readable output.")
    parser.add_argument(
        "--markdown", action="store_true", help="Print the patient chart as Markdown (includes history)."
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    try:
        patient_path = f"patients/{urllib.parse.quote(args.patient, safe='')}"
        info = call(args.url, args.principal, patient_path)
        wants_history = args.history or args.markdown
        history = call(args.url, args.principal, f"{patient_path}/records") if wants_history else None
    except LedgerError as exc:
        print(f"{exc.code}: {exc.message}", file=sys.stderr)
        return 1
    except Exception as exc:
        print(str(exc), file=sys.stderr)
        return 1

    if args.markdown:
        print(format_markdown(args.patient, info, history), end="")
    elif args.pretty:
        print(format_pretty(args.patient, info, history))
    else:
        print(json.dumps({"info": info, "history": history}, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

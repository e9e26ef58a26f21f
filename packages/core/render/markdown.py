from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from packages.core.schemas.ledger import AuditEvent, MedicalRecord, PatientInfo


def _escape_table(value: object) -> str:
    text = "" if value is None else str(value)
    return text.replace("|", "\\|").replace("\n", " ")


def _normalize_timestamp(value: object) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    if value is None:
        return "unknown"
    return str(value)


def _get_value(obj: object, key: str, default: object = None) -> object:
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def render_patient_chart_md(
    patient_id: str, info: PatientInfo, history: Iterable[MedicalRecord]
) -> str:
    lines: list[str] = [
        "# Patient Chart",
        f"Patient ID: {patient_id}",
        f"Status: {'active' if info.is_active else 'inactive'}",
        "",
        "## Demographics",
        f"- Name: {info.name}",
        f"- Birth year: {info.birth_year}",
        f"- Blood type: {info.blood_type}",
        f"- Emergency contact: {info.emergency_contact}",
        f"- Registered: {_normalize_timestamp(info.registration_date)}",
        "",
        "## Allergies",
    ]
    if info.allergies:
        lines.extend(f"- {allergy}" for allergy in info.allergies)
    else:
        lines.append("No allergies recorded.")

    lines.extend(
        [
            "",
            "## Medical History",
            "| Record | Type | Added by | Timestamp | Content |",
            "| --- | --- | --- | --- | --- |",
        ]
    )
    for record in history:
        lines.append(
            "| {id} | {type} | {by} | {ts} | {content} |".format(
                id=record.id,
                type=_escape_table(record.record_type),
                by=_escape_table(record.added_by),
                ts=_normalize_timestamp(record.timestamp),
                content=_escape_table(record.content),
            )
        )
    lines.append("")
    return "\n".join(lines).strip() + "\n"


def render_replay_report_md(
    outcomes: Iterable[dict], events: Iterable[AuditEvent], title: Optional[str] = None
) -> str:
    lines: list[str] = [f"# {title or 'Ledger Replay Report'}", "", "## Operations"]
    lines.extend(["| # | Caller | Operation | Status | Detail |", "| --- | --- | --- | --- | --- |"])
    for index, outcome in enumerate(outcomes, start=1):
        status = "ok" if _get_value(outcome, "ok") else _get_value(outcome, "error_code", "error")
        detail = _get_value(outcome, "message") or ""
        lines.append(
            f"| {index} | {_escape_table(_get_value(outcome, 'caller'))} | "
            f"{_escape_table(_get_value(outcome, 'op'))} | {_escape_table(status)} | "
            f"{_escape_table(detail)} |"
        )

    lines.extend(["", "## Audit Trail"])
    events = list(events)
    if not events:
        lines.append("No audit events recorded.")
    for event in events:
        parts = [f"actor={event.actor}"]
        for key in ("patient_id", "doctor_id", "institution_id", "record_id"):
            value = getattr(event, key)
            if value is not None:
                parts.append(f"{key}={value}")
        lines.append(
            f"- {event.sequence}. {event.kind.value} at "
            f"{_normalize_timestamp(event.timestamp)} ({', '.join(parts)})"
        )
    lines.append("")
    return "\n".join(lines).strip() + "\n"


__all__ = ["render_patient_chart_md", "render_replay_report_md"]

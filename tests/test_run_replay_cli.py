import json
from pathlib import Path

import pytest

from apps.worker import run_replay

WALKTHROUGH = Path(__file__).resolve().parents[1] / "data" / "scenarios" / "walkthrough.json"


def _write_script(tmp_path: Path, steps: list) -> Path:
    path = tmp_path / "script.json"
    path.write_text(json.dumps(steps), encoding="utf-8")
    return path


def test_replay_walkthrough_json(capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
    audit_out = tmp_path / "audit.jsonl"
    exit_code = run_replay.main(
        [str(WALKTHROUGH), "--admin", "admin", "--audit-out", str(audit_out)]
    )
    assert exit_code == 0

    payload = json.loads(capsys.readouterr().out)
    assert all(outcome["ok"] for outcome in payload["outcomes"])
    by_op = {outcome["op"]: outcome for outcome in payload["outcomes"]}
    assert by_op["add_medical_record"]["result"] == 1
    assert by_op["get_medical_history"]["result"] == []
    assert len(by_op["get_records_by_type"]["result"]) == 1
    assert "medical_history" not in by_op["emergency_access"]["result"]
    assert payload["total_records"] == 1
    assert [event["kind"] for event in payload["audit"]] == [
        "patient_registered",
        "doctor_registered",
        "doctor_authorized",
        "medical_record_added",
    ]
    assert len(audit_out.read_text(encoding="utf-8").splitlines()) == 4


def test_replay_stops_at_first_failure(capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
    script = _write_script(
        tmp_path,
        [
            {"caller": "mallory", "op": "register_doctor",
             "args": {"doctor_id": "d", "name": "n", "specialization": "s", "license_number": "l"}},
            {"caller": "admin", "op": "get_total_records"},
        ],
    )
    exit_code = run_replay.main([str(script), "--admin", "admin"])
    assert exit_code == 1
    outcomes = json.loads(capsys.readouterr().out)["outcomes"]
    assert len(outcomes) == 1
    assert outcomes[0]["error_code"] == "unauthorized"


def test_replay_keep_going(capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
    script = _write_script(
        tmp_path,
        [
            {"caller": "admin", "op": "get_medical_history", "args": {"patient_id": "ghost"}},
            {"caller": "admin", "op": "get_total_records"},
        ],
    )
    exit_code = run_replay.main([str(script), "--admin", "admin", "--keep-going"])
    assert exit_code == 0
    outcomes = json.loads(capsys.readouterr().out)["outcomes"]
    assert [outcome["ok"] for outcome in outcomes] == [False, True]
    assert outcomes[0]["error_code"] == "not_found"


def test_replay_markdown_report(tmp_path: Path) -> None:
    out = tmp_path / "report.md"
    exit_code = run_replay.main([str(WALKTHROUGH), "--admin", "admin", "--format", "md", "--out", str(out)])
    assert exit_code == 0
    text = out.read_text(encoding="utf-8")
    assert text.startswith("# Ledger Replay Report")
    assert "medical_record_added" in text


def test_replay_rejects_unknown_operation(capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
    script = _write_script(tmp_path, [{"caller": "admin", "op": "drop_everything"}])
    assert run_replay.main([str(script)]) == 2
    assert "unknown operation" in capsys.readouterr().err


def test_markdown_requires_out(capsys: pytest.CaptureFixture[str]) -> None:
    assert run_replay.main([str(WALKTHROUGH), "--format", "md"]) == 2
    assert "--out is required" in capsys.readouterr().err


@pytest.mark.parametrize(
    "step",
    [
        {"caller": "admin", "op": "get_total_records", "args": {"bogus": 1}},
        {"caller": "admin", "op": "get_medical_history", "args": {}},
        {"caller": "admin", "op": "get_total_records", "args": ["patient-p"]},
    ],
)
def test_replay_rejects_mismatched_arguments(
    capsys: pytest.CaptureFixture[str], tmp_path: Path, step: dict
) -> None:
    script = _write_script(tmp_path, [step])
    assert run_replay.main([str(script), "--admin", "admin"]) == 2
    assert "Step 1" in capsys.readouterr().err


def test_replay_records_type_errors_as_failures() -> None:
    from packages.core.config import LedgerSettings
    from packages.ledger.service import MedicalLedger

    ledger = MedicalLedger(LedgerSettings(admin_id="admin"))
    outcomes = run_replay.replay(
        ledger,
        [
            {"caller": "admin", "op": "get_total_records", "args": {"bogus": 1}},
            {"caller": "admin", "op": "get_total_records"},
        ],
        keep_going=True,
    )
    assert outcomes[0]["ok"] is False
    assert outcomes[0]["error_code"] == "invalid_arguments"
    assert outcomes[1] == {"caller": "admin", "op": "get_total_records", "ok": True, "result": 0}


def test_replay_string_birth_year_is_invalid(capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
    script = _write_script(
        tmp_path,
        [
            {"caller": "admin", "op": "register_patient",
             "args": {"patient_id": "p1", "name": "Pat", "birth_year": "1990",
                      "emergency_contact": "c", "blood_type": "O+"}},
        ],
    )
    assert run_replay.main([str(script), "--admin", "admin"]) == 1
    outcomes = json.loads(capsys.readouterr().out)["outcomes"]
    assert outcomes[0]["error_code"] == "invalid_birth_year"


def test_replay_rejects_null_admin(capsys: pytest.CaptureFixture[str]) -> None:
    assert run_replay.main([str(WALKTHROUGH), "--admin", ""]) == 2
    assert "invalid settings" in capsys.readouterr().err

import pytest

from packages.core.errors import (
    AccessDenied,
    AlreadyAuthorized,
    InactiveAccount,
    NotFound,
    NotRegistered,
)
from packages.core.schemas.ledger import AuditEventKind
from packages.ledger.service import MedicalLedger


def test_grant_gives_access_and_emits_one_event(seeded_ledger: MedicalLedger) -> None:
    before = len(seeded_ledger.state.audit)
    with pytest.raises(AccessDenied):
        seeded_ledger.get_medical_history("doctor-d", "patient-p")

    seeded_ledger.authorize_doctor("patient-p", "patient-p", "doctor-d")

    events = seeded_ledger.get_audit_events("admin")
    assert len(events) == before + 1
    assert events[-1].kind == AuditEventKind.DOCTOR_AUTHORIZED
    assert events[-1].doctor_id == "doctor-d"
    assert events[-1].patient_id == "patient-p"
    assert seeded_ledger.get_medical_history("doctor-d", "patient-p") == []
    assert seeded_ledger.is_authorized_doctor("anyone", "patient-p", "doctor-d") is True


def test_duplicate_grant_rejected_without_change(seeded_ledger: MedicalLedger) -> None:
    seeded_ledger.authorize_doctor("patient-p", "patient-p", "doctor-d")
    events_before = len(seeded_ledger.state.audit)
    with pytest.raises(AlreadyAuthorized):
        seeded_ledger.authorize_doctor("patient-p", "patient-p", "doctor-d")
    assert seeded_ledger.get_authorized_doctors("patient-p", "patient-p") == ["doctor-d"]
    assert len(seeded_ledger.state.audit) == events_before


def test_grant_requires_registered_target(seeded_ledger: MedicalLedger) -> None:
    with pytest.raises(NotRegistered):
        seeded_ledger.authorize_doctor("patient-p", "patient-p", "doctor-unknown")
    with pytest.raises(NotRegistered):
        seeded_ledger.authorize_institution("patient-p", "patient-p", "clinic-unknown")
    assert seeded_ledger.get_authorized_doctors("patient-p", "patient-p") == []


def test_grant_blocked_on_inactive_patient(seeded_ledger: MedicalLedger) -> None:
    seeded_ledger.deactivate_patient("admin", "patient-p")
    with pytest.raises(InactiveAccount):
        seeded_ledger.authorize_doctor("patient-p", "patient-p", "doctor-d")


def test_grant_by_stranger_denied_before_target_checks(seeded_ledger: MedicalLedger) -> None:
    with pytest.raises(AccessDenied):
        seeded_ledger.authorize_doctor("doctor-d", "patient-p", "doctor-unknown")


def test_delegate_can_grant_further_access(seeded_ledger: MedicalLedger) -> None:
    seeded_ledger.authorize_doctor("patient-p", "patient-p", "doctor-d")
    seeded_ledger.authorize_doctor("doctor-d", "patient-p", "doctor-e")
    assert seeded_ledger.get_authorized_doctors("doctor-e", "patient-p") == ["doctor-d", "doctor-e"]
    assert seeded_ledger.get_audit_events("admin")[-1].actor == "doctor-d"


def test_revoke_absent_is_silent_noop(seeded_ledger: MedicalLedger) -> None:
    seeded_ledger.authorize_doctor("patient-p", "patient-p", "doctor-d")
    seeded_ledger.authorize_doctor("patient-p", "patient-p", "doctor-e")
    assert seeded_ledger.revoke_doctor("patient-p", "patient-p", "doctor-f") is False
    assert seeded_ledger.revoke_doctor("patient-p", "patient-p", "doctor-unknown") is False
    assert seeded_ledger.get_authorized_doctors("patient-p", "patient-p") == ["doctor-d", "doctor-e"]


def test_revoke_uses_swap_and_shrink(seeded_ledger: MedicalLedger) -> None:
    for doctor in ("doctor-d", "doctor-e", "doctor-f"):
        seeded_ledger.authorize_doctor("patient-p", "patient-p", doctor)
    assert seeded_ledger.revoke_doctor("patient-p", "patient-p", "doctor-d") is True
    assert seeded_ledger.get_authorized_doctors("patient-p", "patient-p") == ["doctor-f", "doctor-e"]
    with pytest.raises(AccessDenied):
        seeded_ledger.get_medical_history("doctor-d", "patient-p")


def test_revoke_is_not_audited(seeded_ledger: MedicalLedger) -> None:
    seeded_ledger.authorize_doctor("patient-p", "patient-p", "doctor-d")
    events_before = len(seeded_ledger.state.audit)
    seeded_ledger.revoke_doctor("patient-p", "patient-p", "doctor-d")
    assert len(seeded_ledger.state.audit) == events_before


def test_revoke_allowed_on_deactivated_account(seeded_ledger: MedicalLedger) -> None:
    seeded_ledger.authorize_doctor("patient-p", "patient-p", "doctor-d")
    seeded_ledger.deactivate_patient("admin", "patient-p")
    assert seeded_ledger.revoke_doctor("patient-p", "patient-p", "doctor-d") is True
    assert seeded_ledger.get_authorized_doctors("patient-p", "patient-p") == []


def test_revoke_guards(seeded_ledger: MedicalLedger) -> None:
    with pytest.raises(AccessDenied):
        seeded_ledger.revoke_doctor("doctor-d", "patient-p", "doctor-d")
    with pytest.raises(NotFound):
        seeded_ledger.revoke_doctor("admin", "ghost", "doctor-d")


def test_institution_grant_and_revoke(seeded_ledger: MedicalLedger) -> None:
    seeded_ledger.authorize_institution("patient-p", "patient-p", "clinic-h")
    assert seeded_ledger.get_audit_events("admin")[-1].kind == AuditEventKind.INSTITUTION_AUTHORIZED
    info = seeded_ledger.get_patient_info("clinic-h", "patient-p")
    assert info.name == "Pat Example"
    with pytest.raises(AlreadyAuthorized):
        seeded_ledger.authorize_institution("clinic-h", "patient-p", "clinic-h")

    assert seeded_ledger.revoke_institution("patient-p", "patient-p", "clinic-h") is True
    assert seeded_ledger.is_authorized_institution("anyone", "patient-p", "clinic-h") is False
    with pytest.raises(AccessDenied):
        seeded_ledger.get_patient_info("clinic-h", "patient-p")


def test_grant_is_scoped_to_one_patient(seeded_ledger: MedicalLedger) -> None:
    seeded_ledger.authorize_doctor("patient-p", "patient-p", "doctor-d")
    with pytest.raises(AccessDenied):
        seeded_ledger.get_medical_history("doctor-d", "patient-q")


def test_authorized_lists_require_access(seeded_ledger: MedicalLedger) -> None:
    with pytest.raises(AccessDenied):
        seeded_ledger.get_authorized_doctors("doctor-d", "patient-p")
    with pytest.raises(AccessDenied):
        seeded_ledger.get_authorized_institutions("clinic-h", "patient-p")
    assert seeded_ledger.get_authorized_institutions("admin", "patient-p") == []

from __future__ import annotations

from packages.core.logging import log_domain_event
from packages.core.schemas.ledger import AuditEventKind, EmergencyInfo
from packages.ledger.guards import patient_exists, run_guards, verified_doctor
from packages.ledger.state import LedgerState


class EmergencyAccess:
    """Safety-critical read open to any verified doctor.

    Per-patient grants are not consulted and the active flag is ignored.
    Medical history and authorization lists are never exposed here.
    """

    def __init__(self, state: LedgerState) -> None:
        self.state = state

    def emergency_access(self, caller: str, patient_id: str) -> EmergencyInfo:
        state = self.state
        run_guards([verified_doctor(state, caller), patient_exists(state, patient_id)])
        patient = state.patients[patient_id]
        info = EmergencyInfo(
            name=patient.name,
            blood_type=patient.blood_type,
            allergies=list(patient.allergies),
            emergency_contact=patient.emergency_contact,
        )
        audited = state.settings.audit_emergency_access
        if audited:
            state.audit.append(
                AuditEventKind.EMERGENCY_ACCESS,
                caller,
                state.now(),
                patient_id=patient_id,
                doctor_id=caller,
            )
        log_domain_event(
            "emergency_access",
            actor=caller,
            patient_id=patient_id,
            audited=audited,
        )
        return info


__all__ = ["EmergencyAccess"]

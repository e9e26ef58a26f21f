from __future__ import annotations

from typing import List

from packages.core.logging import log_domain_event
from packages.core.schemas.ledger import AuditEventKind
from packages.ledger.guards import (
    authorized_for,
    doctor_registered,
    institution_registered,
    is_authorized,
    not_in_set,
    patient_active,
    patient_exists,
    run_guards,
)
from packages.ledger.state import LedgerState


class AuthorizationEngine:
    """Per-patient delegated access: grants, revocations and the access predicate.

    Grants reject duplicates with ``AlreadyAuthorized``; revoking an absent
    principal is a silent no-op. Revocations are not audited and are
    allowed on deactivated accounts.
    """

    def __init__(self, state: LedgerState) -> None:
        self.state = state

    def is_authorized(self, caller: str, patient_id: str) -> bool:
        return is_authorized(self.state, caller, patient_id)

    def is_authorized_doctor(self, patient_id: str, doctor_id: str) -> bool:
        patient = self.state.patients.get(patient_id)
        return patient is not None and doctor_id in patient.authorized_doctors

    def is_authorized_institution(self, patient_id: str, institution_id: str) -> bool:
        patient = self.state.patients.get(patient_id)
        return patient is not None and institution_id in patient.authorized_institutions

    def authorize_doctor(self, caller: str, patient_id: str, doctor_id: str) -> None:
        state = self.state
        run_guards(
            [
                authorized_for(state, caller, patient_id),
                patient_exists(state, patient_id),
                patient_active(state, patient_id),
                doctor_registered(state, doctor_id),
                not_in_set(
                    lambda: state.patients[patient_id].authorized_doctors, doctor_id, "Doctor"
                ),
            ]
        )
        state.patients[patient_id].authorized_doctors.append(doctor_id)
        state.audit.append(
            AuditEventKind.DOCTOR_AUTHORIZED,
            caller,
            state.now(),
            patient_id=patient_id,
            doctor_id=doctor_id,
        )
        log_domain_event("doctor_authorized", actor=caller, patient_id=patient_id, doctor_id=doctor_id)

    def authorize_institution(self, caller: str, patient_id: str, institution_id: str) -> None:
        state = self.state
        run_guards(
            [
                authorized_for(state, caller, patient_id),
                patient_exists(state, patient_id),
                patient_active(state, patient_id),
                institution_registered(state, institution_id),
                not_in_set(
                    lambda: state.patients[patient_id].authorized_institutions,
                    institution_id,
                    "Institution",
                ),
            ]
        )
        state.patients[patient_id].authorized_institutions.append(institution_id)
        state.audit.append(
            AuditEventKind.INSTITUTION_AUTHORIZED,
            caller,
            state.now(),
            patient_id=patient_id,
            institution_id=institution_id,
        )
        log_domain_event(
            "institution_authorized",
            actor=caller,
            patient_id=patient_id,
            institution_id=institution_id,
        )

    def revoke_doctor(self, caller: str, patient_id: str, doctor_id: str) -> bool:
        state = self.state
        run_guards([authorized_for(state, caller, patient_id), patient_exists(state, patient_id)])
        removed = state.patients[patient_id].authorized_doctors.swap_remove(doctor_id)
        log_domain_event(
            "doctor_revoked",
            result="success" if removed else "noop",
            actor=caller,
            patient_id=patient_id,
            doctor_id=doctor_id,
        )
        return removed

    def revoke_institution(self, caller: str, patient_id: str, institution_id: str) -> bool:
        state = self.state
        run_guards([authorized_for(state, caller, patient_id), patient_exists(state, patient_id)])
        removed = state.patients[patient_id].authorized_institutions.swap_remove(institution_id)
        log_domain_event(
            "institution_revoked",
            result="success" if removed else "noop",
            actor=caller,
            patient_id=patient_id,
            institution_id=institution_id,
        )
        return removed

    def get_authorized_doctors(self, caller: str, patient_id: str) -> List[str]:
        state = self.state
        run_guards([authorized_for(state, caller, patient_id), patient_exists(state, patient_id)])
        return state.patients[patient_id].authorized_doctors.to_list()

    def get_authorized_institutions(self, caller: str, patient_id: str) -> List[str]:
        state = self.state
        run_guards([authorized_for(state, caller, patient_id), patient_exists(state, patient_id)])
        return state.patients[patient_id].authorized_institutions.to_list()


__all__ = ["AuthorizationEngine"]

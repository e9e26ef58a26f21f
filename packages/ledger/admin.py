from __future__ import annotations

from packages.core.logging import log_domain_event
from packages.ledger.guards import (
    authorized_for,
    non_null_principal,
    only_admin,
    patient_exists,
    run_guards,
)
from packages.ledger.state import LedgerState


class AdminOperations:
    def __init__(self, state: LedgerState) -> None:
        self.state = state

    def deactivate_patient(self, caller: str, patient_id: str) -> None:
        self._set_active(caller, patient_id, False)

    def reactivate_patient(self, caller: str, patient_id: str) -> None:
        self._set_active(caller, patient_id, True)

    def _set_active(self, caller: str, patient_id: str, active: bool) -> None:
        state = self.state
        run_guards([only_admin(state, caller), patient_exists(state, patient_id)])
        state.patients[patient_id].is_active = active
        log_domain_event(
            "patient_reactivated" if active else "patient_deactivated",
            actor=caller,
            patient_id=patient_id,
        )

    def update_patient_emergency_contact(self, caller: str, patient_id: str, contact: str) -> None:
        # Deliberately no active-state gate.
        state = self.state
        run_guards([authorized_for(state, caller, patient_id), patient_exists(state, patient_id)])
        state.patients[patient_id].emergency_contact = contact
        log_domain_event("emergency_contact_updated", actor=caller, patient_id=patient_id)

    def transfer_admin(self, caller: str, new_admin: str) -> None:
        state = self.state
        run_guards([only_admin(state, caller), non_null_principal(new_admin)])
        state.admin = new_admin
        log_domain_event("admin_transferred", actor=caller, new_admin=new_admin)

    def get_total_records(self, caller: str) -> int:
        run_guards([only_admin(self.state, caller)])
        return self.state.record_counter


__all__ = ["AdminOperations"]

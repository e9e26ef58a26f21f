from __future__ import annotations

from typing import List

from packages.core.logging import log_domain_event
from packages.core.schemas.ledger import AuditEventKind, MedicalRecord, PatientInfo
from packages.ledger.guards import authorized_for, patient_active, patient_exists, run_guards
from packages.ledger.state import LedgerState


class RecordStore:
    """Append-only medical history and allergy lists."""

    def __init__(self, state: LedgerState) -> None:
        self.state = state

    def _write_guards(self, caller: str, patient_id: str) -> None:
        state = self.state
        run_guards(
            [
                authorized_for(state, caller, patient_id),
                patient_exists(state, patient_id),
                patient_active(state, patient_id),
            ]
        )

    def _read_guards(self, caller: str, patient_id: str) -> None:
        state = self.state
        run_guards([authorized_for(state, caller, patient_id), patient_exists(state, patient_id)])

    def add_medical_record(self, caller: str, patient_id: str, content: str, record_type: str) -> int:
        self._write_guards(caller, patient_id)
        state = self.state
        now = state.now()
        record = MedicalRecord(
            id=state.record_counter + 1,
            content=content,
            added_by=caller,
            timestamp=now,
            record_type=record_type,
        )
        state.record_counter = record.id
        state.patients[patient_id].medical_history.append(record)
        state.audit.append(
            AuditEventKind.MEDICAL_RECORD_ADDED,
            caller,
            now,
            patient_id=patient_id,
            record_id=record.id,
        )
        log_domain_event(
            "medical_record_added",
            actor=caller,
            patient_id=patient_id,
            record_id=record.id,
            record_type=record_type,
        )
        return record.id

    def add_allergy(self, caller: str, patient_id: str, allergy: str) -> None:
        self._write_guards(caller, patient_id)
        self.state.patients[patient_id].allergies.append(allergy)
        log_domain_event("allergy_added", actor=caller, patient_id=patient_id)

    def get_medical_history(self, caller: str, patient_id: str) -> List[MedicalRecord]:
        self._read_guards(caller, patient_id)
        return list(self.state.patients[patient_id].medical_history)

    def get_records_by_type(self, caller: str, patient_id: str, record_type: str) -> List[MedicalRecord]:
        """Records whose type equals *record_type* exactly, in history order."""
        self._read_guards(caller, patient_id)
        history = self.state.patients[patient_id].medical_history
        return [record for record in history if record.record_type == record_type]

    def get_patient_info(self, caller: str, patient_id: str) -> PatientInfo:
        self._read_guards(caller, patient_id)
        patient = self.state.patients[patient_id]
        return PatientInfo(
            name=patient.name,
            birth_year=patient.birth_year,
            emergency_contact=patient.emergency_contact,
            blood_type=patient.blood_type,
            allergies=list(patient.allergies),
            is_active=patient.is_active,
            registration_date=patient.registration_date,
        )


__all__ = ["RecordStore"]

"""
The ledger facade.

``MedicalLedger`` wires the registry, authorization engine, record store,
emergency path and admin operations around one shared :class:`LedgerState`
and runs every public operation to completion under a single lock. Each
operation takes the verified caller principal as its first argument.
"""
from __future__ import annotations

import functools
import threading
from typing import Any, Callable, List, Optional, TypeVar

from packages.core.config import LedgerSettings
from packages.core.errors import LedgerError
from packages.core.logging import log_domain_event
from packages.core.schemas.ledger import (
    AuditEvent,
    AuditEventKind,
    DoctorInfo,
    EmergencyInfo,
    InstitutionInfo,
    MedicalRecord,
    PatientInfo,
)
from packages.ledger.admin import AdminOperations
from packages.ledger.audit import AuditListener
from packages.ledger.authorization import AuthorizationEngine
from packages.ledger.emergency import EmergencyAccess
from packages.ledger.guards import only_admin, run_guards
from packages.ledger.records import RecordStore
from packages.ledger.registry import Registry
from packages.ledger.state import Clock, LedgerState

F = TypeVar("F", bound=Callable[..., Any])

# Operations callable by name from the replay tool.
OPERATIONS = (
    "register_patient",
    "register_doctor",
    "register_institution",
    "is_patient_registered",
    "is_doctor_registered",
    "is_institution_registered",
    "get_doctor_info",
    "get_institution_info",
    "authorize_doctor",
    "authorize_institution",
    "revoke_doctor",
    "revoke_institution",
    "is_authorized_doctor",
    "is_authorized_institution",
    "get_authorized_doctors",
    "get_authorized_institutions",
    "add_medical_record",
    "add_allergy",
    "get_medical_history",
    "get_records_by_type",
    "get_patient_info",
    "emergency_access",
    "deactivate_patient",
    "reactivate_patient",
    "update_patient_emergency_contact",
    "transfer_admin",
    "get_total_records",
    "get_audit_events",
)


def _operation(func: F) -> F:
    name = func.__name__

    @functools.wraps(func)
    def wrapper(self: "MedicalLedger", *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            mark = len(self.state.audit)
            try:
                result = func(self, *args, **kwargs)
            except LedgerError as exc:
                caller = args[0] if args else kwargs.get("caller")
                log_domain_event(name, result="denied", actor=caller, error_code=exc.code)
                raise
            fresh = self.state.audit.since(mark)
        # Listeners run outside the lock and may call back into the ledger.
        self.state.audit.publish(fresh)
        return result

    return wrapper  # type: ignore[return-value]


class MedicalLedger:
    def __init__(
        self,
        settings: Optional[LedgerSettings] = None,
        *,
        clock: Optional[Clock] = None,
        state: Optional[LedgerState] = None,
    ) -> None:
        self.state = state or LedgerState.create(settings, clock)
        self._lock = threading.RLock()
        self.registry = Registry(self.state)
        self.authorization = AuthorizationEngine(self.state)
        self.records = RecordStore(self.state)
        self.emergency = EmergencyAccess(self.state)
        self.admin_ops = AdminOperations(self.state)

    @property
    def admin(self) -> str:
        return self.state.admin

    def subscribe(self, listener: AuditListener) -> None:
        self.state.audit.subscribe(listener)

    # Registry

    @_operation
    def register_patient(
        self,
        caller: str,
        patient_id: str,
        name: str,
        birth_year: int,
        emergency_contact: str,
        blood_type: str,
    ) -> None:
        self.registry.register_patient(caller, patient_id, name, birth_year, emergency_contact, blood_type)

    @_operation
    def register_doctor(
        self, caller: str, doctor_id: str, name: str, specialization: str, license_number: str
    ) -> None:
        self.registry.register_doctor(caller, doctor_id, name, specialization, license_number)

    @_operation
    def register_institution(
        self, caller: str, institution_id: str, name: str, institution_type: str
    ) -> None:
        self.registry.register_institution(caller, institution_id, name, institution_type)

    @_operation
    def is_patient_registered(self, caller: str, principal: str) -> bool:
        return self.registry.is_patient_registered(principal)

    @_operation
    def is_doctor_registered(self, caller: str, principal: str) -> bool:
        return self.registry.is_doctor_registered(principal)

    @_operation
    def is_institution_registered(self, caller: str, principal: str) -> bool:
        return self.registry.is_institution_registered(principal)

    @_operation
    def get_doctor_info(self, caller: str, doctor_id: str) -> DoctorInfo:
        return self.registry.get_doctor_info(doctor_id)

    @_operation
    def get_institution_info(self, caller: str, institution_id: str) -> InstitutionInfo:
        return self.registry.get_institution_info(institution_id)

    # Authorization

    @_operation
    def authorize_doctor(self, caller: str, patient_id: str, doctor_id: str) -> None:
        self.authorization.authorize_doctor(caller, patient_id, doctor_id)

    @_operation
    def authorize_institution(self, caller: str, patient_id: str, institution_id: str) -> None:
        self.authorization.authorize_institution(caller, patient_id, institution_id)

    @_operation
    def revoke_doctor(self, caller: str, patient_id: str, doctor_id: str) -> bool:
        return self.authorization.revoke_doctor(caller, patient_id, doctor_id)

    @_operation
    def revoke_institution(self, caller: str, patient_id: str, institution_id: str) -> bool:
        return self.authorization.revoke_institution(caller, patient_id, institution_id)

    @_operation
    def is_authorized_doctor(self, caller: str, patient_id: str, doctor_id: str) -> bool:
        return self.authorization.is_authorized_doctor(patient_id, doctor_id)

    @_operation
    def is_authorized_institution(self, caller: str, patient_id: str, institution_id: str) -> bool:
        return self.authorization.is_authorized_institution(patient_id, institution_id)

    @_operation
    def get_authorized_doctors(self, caller: str, patient_id: str) -> List[str]:
        return self.authorization.get_authorized_doctors(caller, patient_id)

    @_operation
    def get_authorized_institutions(self, caller: str, patient_id: str) -> List[str]:
        return self.authorization.get_authorized_institutions(caller, patient_id)

    # Records

    @_operation
    def add_medical_record(self, caller: str, patient_id: str, content: str, record_type: str) -> int:
        return self.records.add_medical_record(caller, patient_id, content, record_type)

    @_operation
    def add_allergy(self, caller: str, patient_id: str, allergy: str) -> None:
        self.records.add_allergy(caller, patient_id, allergy)

    @_operation
    def get_medical_history(self, caller: str, patient_id: str) -> List[MedicalRecord]:
        return self.records.get_medical_history(caller, patient_id)

    @_operation
    def get_records_by_type(self, caller: str, patient_id: str, record_type: str) -> List[MedicalRecord]:
        return self.records.get_records_by_type(caller, patient_id, record_type)

    @_operation
    def get_patient_info(self, caller: str, patient_id: str) -> PatientInfo:
        return self.records.get_patient_info(caller, patient_id)

    # Emergency path

    @_operation
    def emergency_access(self, caller: str, patient_id: str) -> EmergencyInfo:
        return self.emergency.emergency_access(caller, patient_id)

    # Administration

    @_operation
    def deactivate_patient(self, caller: str, patient_id: str) -> None:
        self.admin_ops.deactivate_patient(caller, patient_id)

    @_operation
    def reactivate_patient(self, caller: str, patient_id: str) -> None:
        self.admin_ops.reactivate_patient(caller, patient_id)

    @_operation
    def update_patient_emergency_contact(self, caller: str, patient_id: str, contact: str) -> None:
        self.admin_ops.update_patient_emergency_contact(caller, patient_id, contact)

    @_operation
    def transfer_admin(self, caller: str, new_admin: str) -> None:
        self.admin_ops.transfer_admin(caller, new_admin)

    @_operation
    def get_total_records(self, caller: str) -> int:
        return self.admin_ops.get_total_records(caller)

    @_operation
    def get_audit_events(
        self,
        caller: str,
        kind: Optional[AuditEventKind] = None,
        principal: Optional[str] = None,
    ) -> List[AuditEvent]:
        run_guards([only_admin(self.state, caller)])
        return self.state.audit.events(kind=kind, principal=principal)


__all__ = ["MedicalLedger", "OPERATIONS"]

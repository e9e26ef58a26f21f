from __future__ import annotations

from packages.core.errors import NotRegistered
from packages.core.logging import log_domain_event
from packages.core.schemas.ledger import AuditEventKind, DoctorInfo, InstitutionInfo
from packages.ledger.guards import not_registered, only_admin, run_guards, valid_birth_year
from packages.ledger.state import DoctorProfile, InstitutionProfile, LedgerState, PatientProfile


class Registry:
    """Identity tables for patients, doctors and institutions."""

    def __init__(self, state: LedgerState) -> None:
        self.state = state

    def register_patient(
        self,
        caller: str,
        patient_id: str,
        name: str,
        birth_year: int,
        emergency_contact: str,
        blood_type: str,
    ) -> None:
        state = self.state
        run_guards(
            [
                only_admin(state, caller),
                not_registered(state, state.patients, patient_id, "Patient"),
                valid_birth_year(birth_year),
            ]
        )
        now = state.now()
        state.patients[patient_id] = PatientProfile(
            name=name,
            birth_year=birth_year,
            emergency_contact=emergency_contact,
            blood_type=blood_type,
            registration_date=now,
        )
        state.audit.append(
            AuditEventKind.PATIENT_REGISTERED, caller, now, patient_id=patient_id
        )
        log_domain_event("patient_registered", actor=caller, patient_id=patient_id)

    def register_doctor(
        self,
        caller: str,
        doctor_id: str,
        name: str,
        specialization: str,
        license_number: str,
    ) -> None:
        state = self.state
        run_guards(
            [
                only_admin(state, caller),
                not_registered(state, state.doctors, doctor_id, "Doctor"),
            ]
        )
        now = state.now()
        # No separate verification workflow exists; doctors are verified on registration.
        state.doctors[doctor_id] = DoctorProfile(
            name=name,
            specialization=specialization,
            license_number=license_number,
            registration_date=now,
            is_verified=True,
        )
        state.audit.append(AuditEventKind.DOCTOR_REGISTERED, caller, now, doctor_id=doctor_id)
        log_domain_event("doctor_registered", actor=caller, doctor_id=doctor_id)

    def register_institution(
        self,
        caller: str,
        institution_id: str,
        name: str,
        institution_type: str,
    ) -> None:
        state = self.state
        run_guards(
            [
                only_admin(state, caller),
                not_registered(state, state.institutions, institution_id, "Institution"),
            ]
        )
        now = state.now()
        state.institutions[institution_id] = InstitutionProfile(
            name=name,
            institution_type=institution_type,
            admin_principal=caller,
            registration_date=now,
            is_verified=True,
        )
        state.audit.append(
            AuditEventKind.INSTITUTION_REGISTERED, caller, now, institution_id=institution_id
        )
        log_domain_event("institution_registered", actor=caller, institution_id=institution_id)

    def is_patient_registered(self, principal: str) -> bool:
        return principal in self.state.patients

    def is_doctor_registered(self, principal: str) -> bool:
        return principal in self.state.doctors

    def is_institution_registered(self, principal: str) -> bool:
        return principal in self.state.institutions

    def get_doctor_info(self, doctor_id: str) -> DoctorInfo:
        doctor = self.state.doctors.get(doctor_id)
        if doctor is None:
            raise NotRegistered("Doctor not registered", doctor_id=doctor_id)
        return DoctorInfo(
            name=doctor.name,
            specialization=doctor.specialization,
            license_number=doctor.license_number,
            is_verified=doctor.is_verified,
            registration_date=doctor.registration_date,
        )

    def get_institution_info(self, institution_id: str) -> InstitutionInfo:
        institution = self.state.institutions.get(institution_id)
        if institution is None:
            raise NotRegistered("Institution not registered", institution_id=institution_id)
        return InstitutionInfo(
            name=institution.name,
            institution_type=institution.institution_type,
            admin_principal=institution.admin_principal,
            is_verified=institution.is_verified,
            registration_date=institution.registration_date,
        )


__all__ = ["Registry"]

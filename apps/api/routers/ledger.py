from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Request
from pydantic import BaseModel

from packages.core.config import is_null_principal
from packages.core.errors import NotFound, Unauthorized
from packages.core.schemas.ledger import (
    AuditEvent,
    AuditEventKind,
    DoctorInfo,
    EmergencyInfo,
    InstitutionInfo,
    MedicalRecord,
    PatientInfo,
)
from packages.ledger.service import MedicalLedger

router = APIRouter(prefix="/v1")


class PatientRegistration(BaseModel):
    patient_id: str
    name: str
    birth_year: int
    emergency_contact: str
    blood_type: str


class DoctorRegistration(BaseModel):
    doctor_id: str
    name: str
    specialization: str
    license_number: str


class InstitutionRegistration(BaseModel):
    institution_id: str
    name: str
    institution_type: str


class RecordRequest(BaseModel):
    content: str
    record_type: str


class AllergyRequest(BaseModel):
    allergy: str


class ContactRequest(BaseModel):
    contact: str


class DoctorGrant(BaseModel):
    doctor_id: str


class InstitutionGrant(BaseModel):
    institution_id: str


class AdminTransfer(BaseModel):
    new_admin: str


def get_ledger(request: Request) -> MedicalLedger:
    return request.app.state.ledger


def get_caller(x_principal_id: str = Header(..., alias="X-Principal-Id")) -> str:
    if is_null_principal(x_principal_id):
        raise Unauthorized("Caller principal required")
    return x_principal_id


# Registry


@router.post("/patients", status_code=201)
def register_patient(
    body: PatientRegistration,
    caller: str = Depends(get_caller),
    ledger: MedicalLedger = Depends(get_ledger),
) -> dict:
    ledger.register_patient(
        caller, body.patient_id, body.name, body.birth_year, body.emergency_contact, body.blood_type
    )
    return {"patient_id": body.patient_id}


@router.post("/doctors", status_code=201)
def register_doctor(
    body: DoctorRegistration,
    caller: str = Depends(get_caller),
    ledger: MedicalLedger = Depends(get_ledger),
) -> dict:
    ledger.register_doctor(caller, body.doctor_id, body.name, body.specialization, body.license_number)
    return {"doctor_id": body.doctor_id}


@router.post("/institutions", status_code=201)
def register_institution(
    body: InstitutionRegistration,
    caller: str = Depends(get_caller),
    ledger: MedicalLedger = Depends(get_ledger),
) -> dict:
    ledger.register_institution(caller, body.institution_id, body.name, body.institution_type)
    return {"institution_id": body.institution_id}


@router.get("/registry/{role}/{principal}")
def is_registered(
    role: str,
    principal: str,
    caller: str = Depends(get_caller),
    ledger: MedicalLedger = Depends(get_ledger),
) -> dict:
    checks = {
        "patients": ledger.is_patient_registered,
        "doctors": ledger.is_doctor_registered,
        "institutions": ledger.is_institution_registered,
    }
    check = checks.get(role)
    if check is None:
        raise NotFound(f"Unknown role {role!r}", role=role)
    return {"registered": check(caller, principal), "role": role}


@router.get("/doctors/{doctor_id}", response_model=DoctorInfo)
def get_doctor_info(
    doctor_id: str,
    caller: str = Depends(get_caller),
    ledger: MedicalLedger = Depends(get_ledger),
) -> DoctorInfo:
    return ledger.get_doctor_info(caller, doctor_id)


@router.get("/institutions/{institution_id}", response_model=InstitutionInfo)
def get_institution_info(
    institution_id: str,
    caller: str = Depends(get_caller),
    ledger: MedicalLedger = Depends(get_ledger),
) -> InstitutionInfo:
    return ledger.get_institution_info(caller, institution_id)


# Patient data


@router.get("/patients/{patient_id}", response_model=PatientInfo)
def get_patient_info(
    patient_id: str,
    caller: str = Depends(get_caller),
    ledger: MedicalLedger = Depends(get_ledger),
) -> PatientInfo:
    return ledger.get_patient_info(caller, patient_id)


@router.get("/patients/{patient_id}/records", response_model=List[MedicalRecord])
def get_records(
    patient_id: str,
    record_type: Optional[str] = None,
    caller: str = Depends(get_caller),
    ledger: MedicalLedger = Depends(get_ledger),
) -> List[MedicalRecord]:
    if record_type is None:
        return ledger.get_medical_history(caller, patient_id)
    return ledger.get_records_by_type(caller, patient_id, record_type)


@router.post("/patients/{patient_id}/records", status_code=201)
def add_medical_record(
    patient_id: str,
    body: RecordRequest,
    caller: str = Depends(get_caller),
    ledger: MedicalLedger = Depends(get_ledger),
) -> dict:
    record_id = ledger.add_medical_record(caller, patient_id, body.content, body.record_type)
    return {"record_id": record_id}


@router.post("/patients/{patient_id}/allergies", status_code=201)
def add_allergy(
    patient_id: str,
    body: AllergyRequest,
    caller: str = Depends(get_caller),
    ledger: MedicalLedger = Depends(get_ledger),
) -> dict:
    ledger.add_allergy(caller, patient_id, body.allergy)
    return {"status": "ok"}


@router.put("/patients/{patient_id}/emergency-contact")
def update_emergency_contact(
    patient_id: str,
    body: ContactRequest,
    caller: str = Depends(get_caller),
    ledger: MedicalLedger = Depends(get_ledger),
) -> dict:
    ledger.update_patient_emergency_contact(caller, patient_id, body.contact)
    return {"status": "ok"}


@router.get("/patients/{patient_id}/emergency", response_model=EmergencyInfo)
def emergency_access(
    patient_id: str,
    caller: str = Depends(get_caller),
    ledger: MedicalLedger = Depends(get_ledger),
) -> EmergencyInfo:
    return ledger.emergency_access(caller, patient_id)


# Delegated access


@router.get("/patients/{patient_id}/doctors")
def get_authorized_doctors(
    patient_id: str,
    caller: str = Depends(get_caller),
    ledger: MedicalLedger = Depends(get_ledger),
) -> dict:
    return {"doctors": ledger.get_authorized_doctors(caller, patient_id)}


@router.post("/patients/{patient_id}/doctors", status_code=201)
def authorize_doctor(
    patient_id: str,
    body: DoctorGrant,
    caller: str = Depends(get_caller),
    ledger: MedicalLedger = Depends(get_ledger),
) -> dict:
    ledger.authorize_doctor(caller, patient_id, body.doctor_id)
    return {"status": "ok"}


@router.delete("/patients/{patient_id}/doctors/{doctor_id}")
def revoke_doctor(
    patient_id: str,
    doctor_id: str,
    caller: str = Depends(get_caller),
    ledger: MedicalLedger = Depends(get_ledger),
) -> dict:
    return {"removed": ledger.revoke_doctor(caller, patient_id, doctor_id)}


@router.get("/patients/{patient_id}/institutions")
def get_authorized_institutions(
    patient_id: str,
    caller: str = Depends(get_caller),
    ledger: MedicalLedger = Depends(get_ledger),
) -> dict:
    return {"institutions": ledger.get_authorized_institutions(caller, patient_id)}


@router.post("/patients/{patient_id}/institutions", status_code=201)
def authorize_institution(
    patient_id: str,
    body: InstitutionGrant,
    caller: str = Depends(get_caller),
    ledger: MedicalLedger = Depends(get_ledger),
) -> dict:
    ledger.authorize_institution(caller, patient_id, body.institution_id)
    return {"status": "ok"}


@router.delete("/patients/{patient_id}/institutions/{institution_id}")
def revoke_institution(
    patient_id: str,
    institution_id: str,
    caller: str = Depends(get_caller),
    ledger: MedicalLedger = Depends(get_ledger),
) -> dict:
    return {"removed": ledger.revoke_institution(caller, patient_id, institution_id)}


# Administration


@router.post("/patients/{patient_id}/deactivate")
def deactivate_patient(
    patient_id: str,
    caller: str = Depends(get_caller),
    ledger: MedicalLedger = Depends(get_ledger),
) -> dict:
    ledger.deactivate_patient(caller, patient_id)
    return {"is_active": False}


@router.post("/patients/{patient_id}/reactivate")
def reactivate_patient(
    patient_id: str,
    caller: str = Depends(get_caller),
    ledger: MedicalLedger = Depends(get_ledger),
) -> dict:
    ledger.reactivate_patient(caller, patient_id)
    return {"is_active": True}


@router.post("/admin/transfer")
def transfer_admin(
    body: AdminTransfer,
    caller: str = Depends(get_caller),
    ledger: MedicalLedger = Depends(get_ledger),
) -> dict:
    ledger.transfer_admin(caller, body.new_admin)
    return {"admin": body.new_admin}


@router.get("/admin/total-records")
def get_total_records(
    caller: str = Depends(get_caller),
    ledger: MedicalLedger = Depends(get_ledger),
) -> dict:
    return {"total_records": ledger.get_total_records(caller)}


@router.get("/audit", response_model=List[AuditEvent])
def get_audit_events(
    kind: Optional[AuditEventKind] = None,
    principal: Optional[str] = None,
    caller: str = Depends(get_caller),
    ledger: MedicalLedger = Depends(get_ledger),
) -> List[AuditEvent]:
    return ledger.get_audit_events(caller, kind=kind, principal=principal)

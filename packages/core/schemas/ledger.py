from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class MedicalRecord(BaseModel):
    """One immutable history entry; ``id`` is global across all patients."""
    model_config = ConfigDict(frozen=True)

    id: int
    content: str
    added_by: str
    timestamp: datetime
    record_type: str


class AuditEventKind(str, Enum):
    PATIENT_REGISTERED = "patient_registered"
    DOCTOR_REGISTERED = "doctor_registered"
    INSTITUTION_REGISTERED = "institution_registered"
    DOCTOR_AUTHORIZED = "doctor_authorized"
    INSTITUTION_AUTHORIZED = "institution_authorized"
    MEDICAL_RECORD_ADDED = "medical_record_added"
    EMERGENCY_ACCESS = "emergency_access"


class AuditEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    sequence: int
    kind: AuditEventKind
    actor: str
    timestamp: datetime
    patient_id: Optional[str] = None
    doctor_id: Optional[str] = None
    institution_id: Optional[str] = None
    record_id: Optional[int] = None

    def principals(self) -> List[str]:
        ids = [self.actor, self.patient_id, self.doctor_id, self.institution_id]
        return [pid for pid in ids if pid]


class PatientInfo(BaseModel):
    """Demographics as returned to authorized callers (history excluded)."""
    name: str
    birth_year: int
    emergency_contact: str
    blood_type: str
    allergies: List[str] = Field(default_factory=list)
    is_active: bool = True
    registration_date: datetime


class EmergencyInfo(BaseModel):
    """Safety-critical subset exposed on the emergency path."""
    name: str
    blood_type: str
    allergies: List[str] = Field(default_factory=list)
    emergency_contact: str


class DoctorInfo(BaseModel):
    name: str
    specialization: str
    license_number: str
    is_verified: bool
    registration_date: datetime


class InstitutionInfo(BaseModel):
    name: str
    institution_type: str
    admin_principal: str
    is_verified: bool
    registration_date: datetime


__all__ = [
    "MedicalRecord",
    "AuditEventKind",
    "AuditEvent",
    "PatientInfo",
    "EmergencyInfo",
    "DoctorInfo",
    "InstitutionInfo",
]

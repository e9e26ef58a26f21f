from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from packages.core.config import NULL_PRINCIPAL, LedgerSettings, is_null_principal
from packages.core.schemas.ledger import MedicalRecord
from packages.ledger.audit import AuditTrail
from packages.ledger.principal_set import PrincipalSet

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PatientProfile:
    name: str
    birth_year: int
    emergency_contact: str
    blood_type: str
    registration_date: datetime
    allergies: List[str] = field(default_factory=list)
    medical_history: List[MedicalRecord] = field(default_factory=list)
    authorized_doctors: PrincipalSet = field(default_factory=PrincipalSet)
    authorized_institutions: PrincipalSet = field(default_factory=PrincipalSet)
    is_active: bool = True


@dataclass
class DoctorProfile:
    name: str
    specialization: str
    license_number: str
    registration_date: datetime
    is_verified: bool = True


@dataclass
class InstitutionProfile:
    name: str
    institution_type: str
    admin_principal: str
    registration_date: datetime
    is_verified: bool = True


@dataclass
class LedgerState:
    """Everything the ledger owns; created once and shared by reference."""
    admin: str
    settings: LedgerSettings = field(default_factory=LedgerSettings)
    clock: Clock = utc_now
    patients: Dict[str, PatientProfile] = field(default_factory=dict)
    doctors: Dict[str, DoctorProfile] = field(default_factory=dict)
    institutions: Dict[str, InstitutionProfile] = field(default_factory=dict)
    record_counter: int = 0
    audit: AuditTrail = field(default_factory=AuditTrail)

    @classmethod
    def create(cls, settings: Optional[LedgerSettings] = None, clock: Optional[Clock] = None) -> "LedgerState":
        settings = settings or LedgerSettings()
        return cls(admin=settings.admin_id, settings=settings, clock=clock or utc_now)

    def now(self) -> datetime:
        return self.clock()

    def roles_of(self, principal: str) -> List[str]:
        roles = []
        if principal in self.patients:
            roles.append("patient")
        if principal in self.doctors:
            roles.append("doctor")
        if principal in self.institutions:
            roles.append("institution")
        return roles


__all__ = [
    "Clock",
    "NULL_PRINCIPAL",
    "DoctorProfile",
    "InstitutionProfile",
    "LedgerState",
    "PatientProfile",
    "is_null_principal",
    "utc_now",
]

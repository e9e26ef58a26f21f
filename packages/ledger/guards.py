"""
Ordered precondition checks.

Each ledger operation declares its guards as a list; :func:`run_guards`
evaluates them in order against the state as it stands before the
operation body runs and raises the error of the first guard that fails.
"""
from __future__ import annotations

from typing import Callable, Iterable, NamedTuple, Optional

from packages.core.config import MAX_BIRTH_YEAR, MIN_BIRTH_YEAR_EXCLUSIVE
from packages.core.errors import (
    AccessDenied,
    AlreadyAuthorized,
    AlreadyRegistered,
    InactiveAccount,
    InvalidBirthYear,
    InvalidPrincipal,
    LedgerError,
    NotFound,
    NotRegistered,
    NotVerifiedDoctor,
    Unauthorized,
)
from packages.ledger.principal_set import PrincipalSet
from packages.ledger.state import LedgerState, is_null_principal


class Guard(NamedTuple):
    name: str
    check: Callable[[], bool]
    error: Callable[[], LedgerError]


def run_guards(guards: Iterable[Guard]) -> None:
    for guard in guards:
        if not guard.check():
            raise guard.error()


def is_authorized(state: LedgerState, caller: str, patient_id: str) -> bool:
    """Self, admin, or a member of either delegated set."""
    if caller == patient_id or caller == state.admin:
        return True
    patient = state.patients.get(patient_id)
    if patient is None:
        return False
    return caller in patient.authorized_doctors or caller in patient.authorized_institutions


def only_admin(state: LedgerState, caller: str) -> Guard:
    return Guard(
        "only_admin",
        lambda: caller == state.admin,
        lambda: Unauthorized("Only admin can perform this action", caller=caller),
    )


def authorized_for(state: LedgerState, caller: str, patient_id: str) -> Guard:
    return Guard(
        "authorized_for",
        lambda: is_authorized(state, caller, patient_id),
        lambda: AccessDenied(
            "Not authorized to access this patient's data", caller=caller, patient_id=patient_id
        ),
    )


def patient_exists(state: LedgerState, patient_id: str) -> Guard:
    return Guard(
        "patient_exists",
        lambda: patient_id in state.patients,
        lambda: NotFound("Patient not registered", patient_id=patient_id),
    )


def patient_active(state: LedgerState, patient_id: str) -> Guard:
    return Guard(
        "patient_active",
        lambda: state.patients[patient_id].is_active,
        lambda: InactiveAccount("Patient account is not active", patient_id=patient_id),
    )


def verified_doctor(state: LedgerState, caller: str) -> Guard:
    def check() -> bool:
        doctor = state.doctors.get(caller)
        return doctor is not None and doctor.is_verified

    return Guard(
        "verified_doctor",
        check,
        lambda: NotVerifiedDoctor("Only verified doctors can perform this action", caller=caller),
    )


def doctor_registered(state: LedgerState, doctor_id: str) -> Guard:
    return Guard(
        "doctor_registered",
        lambda: doctor_id in state.doctors,
        lambda: NotRegistered("Doctor not registered", doctor_id=doctor_id),
    )


def institution_registered(state: LedgerState, institution_id: str) -> Guard:
    return Guard(
        "institution_registered",
        lambda: institution_id in state.institutions,
        lambda: NotRegistered("Institution not registered", institution_id=institution_id),
    )


def not_in_set(members: Callable[[], PrincipalSet], principal: str, label: str) -> Guard:
    return Guard(
        "not_in_set",
        lambda: principal not in members(),
        lambda: AlreadyAuthorized(f"{label} already authorized", principal=principal),
    )


def not_registered(
    state: LedgerState, table: dict, principal: str, role: str
) -> Guard:
    def check() -> bool:
        if principal in table:
            return False
        if state.settings.allow_dual_roles:
            return True
        return not state.roles_of(principal)

    def error() -> LedgerError:
        if principal in table:
            return AlreadyRegistered(f"{role} already registered", principal=principal)
        return AlreadyRegistered(
            f"Principal already registered as {', '.join(state.roles_of(principal))}",
            principal=principal,
        )

    return Guard("not_registered", check, error)


def valid_birth_year(birth_year: int) -> Guard:
    def check() -> bool:
        if not isinstance(birth_year, int) or isinstance(birth_year, bool):
            return False
        return MIN_BIRTH_YEAR_EXCLUSIVE < birth_year <= MAX_BIRTH_YEAR

    return Guard(
        "valid_birth_year",
        check,
        lambda: InvalidBirthYear("Invalid birth year", birth_year=birth_year),
    )


def non_null_principal(principal: Optional[str]) -> Guard:
    return Guard(
        "non_null_principal",
        lambda: not is_null_principal(principal),
        lambda: InvalidPrincipal("Invalid principal", principal=principal),
    )


__all__ = [
    "Guard",
    "authorized_for",
    "doctor_registered",
    "institution_registered",
    "is_authorized",
    "non_null_principal",
    "not_in_set",
    "not_registered",
    "only_admin",
    "patient_active",
    "patient_exists",
    "run_guards",
    "valid_birth_year",
    "verified_doctor",
]

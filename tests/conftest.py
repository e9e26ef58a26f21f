from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from packages.core.config import LedgerSettings
from packages.ledger.service import MedicalLedger


class TickingClock:
    """Deterministic clock advancing one second per reading."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock(datetime(2024, 1, 1, tzinfo=timezone.utc))


@pytest.fixture
def ledger(clock: TickingClock) -> MedicalLedger:
    return MedicalLedger(LedgerSettings(admin_id="admin"), clock=clock)


@pytest.fixture
def seeded_ledger(ledger: MedicalLedger) -> MedicalLedger:
    ledger.register_patient("admin", "patient-p", "Pat Example", 1990, "+1-555-0100", "O+")
    ledger.register_patient("admin", "patient-q", "Quinn Example", 1975, "+1-555-0101", "A-")
    ledger.register_doctor("admin", "doctor-d", "Dana Example", "Cardiology", "LIC-001")
    ledger.register_doctor("admin", "doctor-e", "Eli Example", "Oncology", "LIC-002")
    ledger.register_doctor("admin", "doctor-f", "Fay Example", "Neurology", "LIC-003")
    ledger.register_institution("admin", "clinic-h", "Harbor Clinic", "clinic")
    return ledger

from packages.ledger.principal_set import PrincipalSet
from packages.ledger.service import OPERATIONS, MedicalLedger
from packages.ledger.state import LedgerState

__all__ = [
    "LedgerState",
    "MedicalLedger",
    "OPERATIONS",
    "PrincipalSet",
]

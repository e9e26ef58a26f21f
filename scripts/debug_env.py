import os
from dotenv import load_dotenv

load_dotenv()

for name in (
    "LEDGER_ADMIN_ID",
    "LEDGER_LOG_LEVEL",
    "LEDGER_LOG_FORMAT",
    "LEDGER_AUDIT_EMERGENCY_ACCESS",
    "LEDGER_ALLOW_DUAL_ROLES",
):
    print(f"{name} set:", bool(os.getenv(name)))

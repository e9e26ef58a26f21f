from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from apps.api.routers.ledger import router as ledger_router
from packages.core.config import LedgerSettings
from packages.core.errors import LedgerError
from packages.core.logging import configure_logging
from packages.ledger.service import MedicalLedger


def _error(status: int, code: str, message: str, detail: Optional[dict] = None) -> JSONResponse:
    payload = {"error": {"code": code, "message": message, "detail": detail or {}}}
    return JSONResponse(status_code=status, content=payload)


def create_app(
    settings: Optional[LedgerSettings] = None, ledger: Optional[MedicalLedger] = None
) -> FastAPI:
    settings = settings or LedgerSettings.from_env()
    configure_logging(settings.log_level, settings.log_format)

    app = FastAPI(title="Patient Ledger API")
    app.state.settings = settings
    app.state.ledger = ledger or MedicalLedger(settings)
    app.include_router(ledger_router)

    @app.exception_handler(LedgerError)
    def ledger_error_handler(_request: Request, exc: LedgerError) -> JSONResponse:
        return _error(exc.status_code, exc.code, exc.message, exc.detail)

    @app.get("/")
    def root() -> dict:
        return {
            "name": "patient-ledger",
            "status": "ok",
            "endpoints": ["/healthz", "/readyz", "/v1"],
        }

    @app.get("/healthz")
    def healthz() -> dict:
        return {"status": "ok"}

    @app.get("/readyz")
    def readyz(request: Request) -> JSONResponse:
        ledger_ready = getattr(request.app.state, "ledger", None) is not None
        if not ledger_ready:
            return JSONResponse(status_code=500, content={"status": "error", "detail": "ledger missing"})
        return JSONResponse(status_code=200, content={"status": "ok"})

    return app


__all__ = ["create_app"]

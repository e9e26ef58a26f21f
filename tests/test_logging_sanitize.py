import json
import logging

from packages.core.logging import SanitizedJSONFormatter, get_logger, log_domain_event


class _ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


def test_formatter_redacts_sensitive_fields() -> None:
    record = logging.LogRecord("ledger.test", logging.INFO, __file__, 1, "hello", None, None)
    record.patient_id = "patient-p"
    record.content = "diagnosis text"
    record.details = {"emergency_contact": "+1-555-0100", "record_id": 4}

    payload = json.loads(SanitizedJSONFormatter().format(record))

    assert payload["message"] == "hello"
    assert payload["patient_id"] == "patient-p"
    assert payload["content"] == "[REDACTED]"
    assert payload["details"] == {"emergency_contact": "[REDACTED]", "record_id": 4}


def test_domain_event_levels_and_reserved_keys() -> None:
    logger = get_logger("events")
    handler = _ListHandler()
    logger.addHandler(handler)
    previous = logger.level
    logger.setLevel(logging.INFO)
    try:
        log_domain_event("patient_registered", actor="admin", name="Pat Example")
        log_domain_event("add_medical_record", result="denied", actor="stranger", error_code="access_denied")
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous)

    first, second = handler.records
    assert first.levelno == logging.INFO
    assert first.event == "patient_registered"
    assert first.field_name == "[REDACTED]"
    assert second.levelno == logging.WARNING
    assert second.error_code == "access_denied"


def test_get_logger_namespaces_under_ledger() -> None:
    assert get_logger("packages.ledger.audit").name == "ledger.packages.ledger.audit"
    assert get_logger("ledger.events").name == "ledger.events"

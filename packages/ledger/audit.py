from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from packages.core.logging import get_logger
from packages.core.schemas.ledger import AuditEvent, AuditEventKind

AuditListener = Callable[[AuditEvent], None]

logger = get_logger(__name__)


class AuditTrail:
    """Append-only log of state-changing ledger actions.

    Appending only stores the event. Listeners receive events through
    :meth:`publish`, which the ledger calls once the operation that
    produced them has released the ledger lock, so a listener may call
    back into the ledger. A failing listener is logged and does not undo
    the operation.
    """

    def __init__(self) -> None:
        self._events: List[AuditEvent] = []
        self._listeners: List[AuditListener] = []

    def __len__(self) -> int:
        return len(self._events)

    def subscribe(self, listener: AuditListener) -> None:
        self._listeners.append(listener)

    def append(
        self, kind: AuditEventKind, actor: str, timestamp: datetime, **principals
    ) -> AuditEvent:
        event = AuditEvent(
            sequence=len(self._events) + 1,
            kind=kind,
            actor=actor,
            timestamp=timestamp,
            **principals,
        )
        self._events.append(event)
        return event

    def since(self, mark: int) -> List[AuditEvent]:
        return self._events[mark:]

    def publish(self, events: List[AuditEvent]) -> None:
        for event in events:
            for listener in list(self._listeners):
                try:
                    listener(event)
                except Exception:
                    logger.exception(
                        "Audit listener failed",
                        extra={"audit_sequence": event.sequence, "audit_kind": event.kind.value},
                    )

    def events(
        self,
        kind: Optional[AuditEventKind] = None,
        principal: Optional[str] = None,
    ) -> List[AuditEvent]:
        selected = []
        for event in self._events:
            if kind is not None and event.kind != kind:
                continue
            if principal is not None and principal not in event.principals():
                continue
            selected.append(event)
        return selected

    def to_jsonl(self) -> str:
        lines = [event.model_dump_json() for event in self._events]
        return "\n".join(lines) + ("\n" if lines else "")

    def export(self, path: str | Path) -> Path:
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(self.to_jsonl(), encoding="utf-8")
        return out


def load_jsonl(path: str | Path) -> List[AuditEvent]:
    events: List[AuditEvent] = []
    with Path(path).open("r", encoding="utf-8") as handle:
        for line in handle:
            line = line.strip()
            if not line:
                continue
            events.append(AuditEvent.model_validate_json(line))
    return events


__all__ = ["AuditListener", "AuditTrail", "load_jsonl"]

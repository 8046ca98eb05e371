# src/ndef_text_qt5/nfc/events.py
# Diagnostic events emitted while reading, parsing and writing a tag.
# Sinks are advisory: nothing in the codec looks at what a sink did.
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional


@dataclass(frozen=True)
class DiagnosticEvent:
    stage: str                      # "read", "tlv", "record", "text", "write", "session"
    message: str
    offset: Optional[int] = None    # byte offset or page number, depending on stage

    def __str__(self) -> str:
        where = f" @{self.offset}" if self.offset is not None else ""
        return f"[{self.stage}{where}] {self.message}"


EventSink = Callable[[DiagnosticEvent], None]


def null_sink(event: DiagnosticEvent) -> None:
    return None


def emitter(sink: Optional[EventSink], stage: str) -> Callable[..., None]:
    """Return emit(message, offset=None) bound to one stage; sink may be None."""
    target = sink or null_sink

    def emit(message: str, offset: Optional[int] = None) -> None:
        target(DiagnosticEvent(stage, message, offset))
    return emit


class EventLog:
    """Ordered in-memory sink; pass the instance itself as the sink."""
    def __init__(self):
        self.events: List[DiagnosticEvent] = []

    def __call__(self, event: DiagnosticEvent) -> None:
        self.events.append(event)

    def __iter__(self) -> Iterator[DiagnosticEvent]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)

    def stages(self) -> List[str]:
        return [e.stage for e in self.events]

    def lines(self) -> List[str]:
        return [str(e) for e in self.events]

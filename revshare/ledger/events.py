"""Mini README: Observable events emitted by the revenue ledger.

Structure:
    * Constructed, Received, Distributed, Withdrawn - immutable event records.
    * EventLog - ordered, append-only log with synchronous listeners.

The ledger records events while it holds its lock and publishes them to
listeners once the lock is released. A rejected call never leaves a trace in
the log, and a listener that raises cannot undo or fail a committed call.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Callable, Dict, Iterator, List, Optional, Union

from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Constructed:
    company: str
    platform: str
    creator: str
    platform_share: int
    creator_share: int

    name = "Constructed"

    def as_dict(self) -> Dict[str, object]:
        return {"event": self.name, **asdict(self)}


@dataclass(frozen=True, slots=True)
class Received:
    """Value entered the pool from ``sender``."""

    sender: str
    amount: int

    name = "Received"

    def as_dict(self) -> Dict[str, object]:
        return {"event": self.name, **asdict(self)}


@dataclass(frozen=True, slots=True)
class Distributed:
    """A funding amount was split between platform and creator."""

    platform_amount: int
    creator_amount: int

    name = "Distributed"

    def as_dict(self) -> Dict[str, object]:
        return {"event": self.name, **asdict(self)}


@dataclass(frozen=True, slots=True)
class Withdrawn:
    recipient: str
    amount: int

    name = "Withdrawn"

    def as_dict(self) -> Dict[str, object]:
        return {"event": self.name, **asdict(self)}


LedgerEvent = Union[Constructed, Received, Distributed, Withdrawn]
Listener = Callable[[LedgerEvent], None]


class EventLog:
    """Ordered record of ledger events."""

    def __init__(self) -> None:
        self._events: List[LedgerEvent] = []
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        """Register a callable invoked for every appended event."""

        self._listeners.append(listener)

    def record(self, *events: LedgerEvent) -> None:
        """Append events without notifying listeners."""

        for event in events:
            self._events.append(event)
            LOGGER.debug("Event %s recorded: %s", event.name, event)

    def publish(self, *events: LedgerEvent) -> None:
        """Hand committed events to listeners; a failing listener is only logged."""

        for event in events:
            for listener in list(self._listeners):
                try:
                    listener(event)
                except Exception:
                    LOGGER.exception("Listener %r failed on %s", listener, event.name)

    def list_events(self, name: Optional[str] = None) -> List[LedgerEvent]:
        """Return events in emission order, optionally filtered by name."""

        if name is None:
            return list(self._events)
        return [event for event in self._events if event.name == name]

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[LedgerEvent]:
        return iter(list(self._events))

"""Append-only thought trace recorded during a single pipeline run."""

from __future__ import annotations

import itertools
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from .logging import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class ThoughtEvent:
    """One explanatory event emitted by a pipeline stage."""

    id: int
    content: str
    category: str
    confidence: float
    timestamp: float

    def render(self) -> str:
        return f"[{self.category}] {self.content}"


class ThoughtTrace:
    """Ordered record of :class:`ThoughtEvent` objects for one run.

    Events are only ever appended. Identifiers come from a per-trace counter so
    the emission order is total even when two events share a timestamp.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._counter = itertools.count(1)
        self._events: list[ThoughtEvent] = []

    def emit(self, content: str, category: str, confidence: float) -> ThoughtEvent:
        event = ThoughtEvent(
            id=next(self._counter),
            content=content,
            category=category,
            confidence=min(max(float(confidence), 0.0), 1.0),
            timestamp=self._clock(),
        )
        self._events.append(event)
        LOGGER.debug("%s", event.render())
        return event

    def snapshot(self) -> tuple[ThoughtEvent, ...]:
        return tuple(self._events)

    def render(self) -> list[str]:
        return [event.render() for event in self._events]

    def __iter__(self) -> Iterator[ThoughtEvent]:
        return iter(tuple(self._events))

    def __len__(self) -> int:
        return len(self._events)

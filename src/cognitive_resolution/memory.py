"""Personal-fact snapshots and the sink interface for extracted facts."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Optional, Protocol, runtime_checkable

from .logging import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class FactSuggestion:
    """A fact discovered during a run, for the caller to persist."""

    key: str
    value: Any
    source: str = "personal"


class PersonalFactsView(Mapping[str, Any]):
    """Read-only snapshot of personal facts passed by value into a run."""

    __slots__ = ("_facts",)

    def __init__(self, facts: Optional[Mapping[str, Any]] = None) -> None:
        self._facts: Mapping[str, Any] = MappingProxyType(dict(facts or {}))

    def __getitem__(self, key: str) -> Any:
        return self._facts[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._facts)

    def __len__(self) -> int:
        return len(self._facts)

    def __repr__(self) -> str:
        return f"PersonalFactsView({dict(self._facts)!r})"

    def with_suggestions(self, suggestions: Iterable[FactSuggestion]) -> PersonalFactsView:
        """Return a new snapshot with ``suggestions`` applied."""
        merged = dict(self._facts)
        for suggestion in suggestions:
            merged[suggestion.key] = suggestion.value
        return PersonalFactsView(merged)


@runtime_checkable
class FactSink(Protocol):
    def submit(self, suggestions: Iterable[FactSuggestion]) -> None: ...


class InMemoryFactStore:
    """Session-scoped fact store that hands out snapshots and accepts suggestions."""

    def __init__(self, initial: Optional[Mapping[str, Any]] = None) -> None:
        self._facts: dict[str, Any] = dict(initial or {})

    def snapshot(self) -> PersonalFactsView:
        return PersonalFactsView(self._facts)

    def submit(self, suggestions: Iterable[FactSuggestion]) -> None:
        for suggestion in suggestions:
            LOGGER.debug("Storing fact %s=%r", suggestion.key, suggestion.value)
            self._facts[suggestion.key] = suggestion.value

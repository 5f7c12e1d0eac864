"""Read-only knowledge store with lexical relevance ranking."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .logging import get_logger
from .utils.io import load_jsonl, load_yaml_or_json
from .utils.text import simple_tokenize

LOGGER = get_logger(__name__)

STOPWORDS = frozenset(
    {
        "a", "about", "an", "and", "are", "as", "at", "be", "but", "by", "can", "could",
        "do", "does", "for", "from", "give", "how", "i", "in", "into", "is", "it", "me",
        "of", "on", "or", "please", "so", "that", "the", "this", "to", "was", "what",
        "when", "where", "which", "who", "why", "with", "would", "you", "your",
    }
)

REQUEST_VERBS = frozenset({"define", "describe", "explain", "know", "show", "tell"})


def query_tokens(text: str) -> list[str]:
    """Tokenise ``text`` for knowledge lookup, dropping stopwords and request verbs."""
    return [
        token
        for token in simple_tokenize(text)
        if token not in STOPWORDS and token not in REQUEST_VERBS
    ]


@dataclass(frozen=True)
class KnowledgeEntry:
    key: str
    concept: str
    description: str
    keywords: frozenset[str]
    base_confidence: float

    @property
    def searchable_text(self) -> str:
        keywords = " ".join(sorted(self.keywords))
        return f"{self.concept} {self.description} {keywords}".lower()


@dataclass(frozen=True)
class KnowledgeHit:
    entry: KnowledgeEntry
    score: float


def _entry_from_record(record: Mapping[str, Any]) -> KnowledgeEntry:
    try:
        concept = str(record["concept"])
        description = str(record["description"])
    except KeyError as exc:
        raise ValueError(f"Knowledge record missing field {exc.args[0]!r}: {dict(record)!r}") from exc
    key = str(record.get("key") or concept)
    confidence = float(record.get("base_confidence", record.get("confidence", 0.8)))
    if not 0.0 <= confidence <= 1.0:
        raise ValueError(f"Knowledge record {key!r} has confidence outside [0, 1]")
    keywords = frozenset(str(word).lower() for word in record.get("keywords", []))
    return KnowledgeEntry(
        key=key,
        concept=concept,
        description=description,
        keywords=keywords,
        base_confidence=confidence,
    )


def entries_from_math_seed(payload: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Convert the seed-math layout into knowledge records."""

    records: list[dict[str, Any]] = []
    for term, definition in (payload.get("mathematical_vocabulary") or {}).items():
        records.append(
            {
                "key": f"math_vocab_{term}",
                "concept": term,
                "description": str(definition),
                "keywords": [term],
                "confidence": 0.95,
            }
        )
    for symbol, data in (payload.get("mathematical_symbols") or {}).items():
        records.append(
            {
                "key": f"math_symbol_{symbol}",
                "concept": symbol,
                "description": str(data.get("meaning", "")),
                "keywords": list(data.get("synonyms", [])),
                "confidence": 0.95,
            }
        )
    if payload.get("calculation_methods"):
        records.append(
            {
                "key": "arithmetic_methods",
                "concept": "arithmetic_calculation_methods",
                "description": "Step-by-step methods for basic arithmetic operations",
                "keywords": ["calculate", "method", "algorithm", "steps"],
                "confidence": 0.95,
            }
        )
    return records


BASIC_KNOWLEDGE: tuple[dict[str, Any], ...] = (
    {
        "key": "arithmetic",
        "concept": "arithmetic",
        "description": "Basic mathematical operations: addition, subtraction, multiplication, division",
        "keywords": ["add", "subtract", "multiply", "divide", "plus", "minus", "times"],
        "confidence": 0.95,
    },
    {
        "key": "personal_info",
        "concept": "personal_information",
        "description": "Information about individuals including names, family, pets, relationships",
        "keywords": ["name", "family", "wife", "husband", "cats", "dogs", "children", "household"],
        "confidence": 0.9,
    },
)


class KnowledgeStore:
    """Immutable collection of :class:`KnowledgeEntry` objects.

    The store is built once and only read afterwards, so any number of runs
    may query it at the same time.
    """

    def __init__(self, entries: Iterable[KnowledgeEntry] = ()) -> None:
        ordered: list[KnowledgeEntry] = []
        seen: set[str] = set()
        for entry in entries:
            if entry.key in seen:
                raise ValueError(f"Duplicate knowledge key: {entry.key!r}")
            seen.add(entry.key)
            ordered.append(entry)
        self._entries = tuple(ordered)

    # Building --------------------------------------------------------------------
    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> KnowledgeStore:
        store = cls(_entry_from_record(record) for record in records)
        LOGGER.info("Loaded %d knowledge entries", len(store))
        return store

    @classmethod
    def from_path(cls, path: Path) -> KnowledgeStore:
        """Load records from a JSON, JSONL or YAML file.

        JSON and YAML files may hold a list of records, a mapping with a
        ``records`` list, or the seed-math layout.
        """
        path = Path(path)
        if path.suffix.lower() == ".jsonl":
            return cls.from_records(load_jsonl(path))
        payload = load_yaml_or_json(path)
        if isinstance(payload, list):
            return cls.from_records(payload)
        if isinstance(payload, Mapping):
            if "records" in payload:
                records = payload["records"]
                if not isinstance(records, list):
                    raise TypeError("Expected 'records' list in knowledge payload")
                return cls.from_records(records)
            return cls.from_records(entries_from_math_seed(payload))
        raise TypeError(f"Unsupported knowledge payload in {path}")

    @classmethod
    def basic(cls) -> KnowledgeStore:
        return cls.from_records(BASIC_KNOWLEDGE)

    # Querying --------------------------------------------------------------------
    def query(self, tokens: Sequence[str], top_k: Optional[int] = None) -> list[KnowledgeHit]:
        """Rank entries by the share of ``tokens`` found in their text."""
        words = [token.lower() for token in tokens if token]
        if not words:
            return []
        hits: list[KnowledgeHit] = []
        for entry in self._entries:
            text = entry.searchable_text
            matched = sum(1 for word in words if word in text)
            if matched:
                hits.append(KnowledgeHit(entry=entry, score=matched / len(words)))
        hits.sort(key=lambda hit: hit.score, reverse=True)
        return hits if top_k is None else hits[:top_k]

    def get(self, key: str) -> Optional[KnowledgeEntry]:
        for entry in self._entries:
            if entry.key == key:
                return entry
        return None

    @property
    def entries(self) -> tuple[KnowledgeEntry, ...]:
        return self._entries

    def __iter__(self) -> Iterator[KnowledgeEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def load_default_store(path: Optional[Path] = None) -> KnowledgeStore:
    """Load ``path`` or the bundled seed data, falling back to basic entries."""

    from .data import load_seed_knowledge

    if path is not None:
        return KnowledgeStore.from_path(path)
    records = load_seed_knowledge()
    if not records:
        LOGGER.warning("No bundled seed knowledge found; using basic knowledge")
        return KnowledgeStore.basic()
    return KnowledgeStore.from_records(records)

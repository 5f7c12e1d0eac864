from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from cognitive_resolution.knowledge import (
    KnowledgeStore,
    load_default_store,
    query_tokens,
)


def test_query_tokens_drop_stopwords_and_request_verbs() -> None:
    assert query_tokens("Tell me about gravity") == ["gravity"]
    assert query_tokens("Explain what photosynthesis is") == ["photosynthesis"]
    assert query_tokens("Tell me a joke") == ["joke"]


def test_query_ranks_by_fraction_of_matched_tokens(store: KnowledgeStore) -> None:
    hits = store.query(["orbit", "planet"])
    assert [hit.entry.key for hit in hits] == ["orbit", "gravity"]
    assert hits[0].score == pytest.approx(1.0)
    assert hits[1].score == pytest.approx(0.5)


def test_query_ties_keep_insertion_order(store: KnowledgeStore) -> None:
    hits = store.query(["orbit"])
    assert [hit.entry.key for hit in hits] == ["gravity", "orbit"]
    assert all(hit.score == pytest.approx(1.0) for hit in hits)


def test_query_matches_substrings(store: KnowledgeStore) -> None:
    hits = store.query(["grav"])
    assert [hit.entry.key for hit in hits] == ["gravity"]


def test_query_without_tokens_or_matches(store: KnowledgeStore) -> None:
    assert store.query([]) == []
    assert store.query(["joke"]) == []


def test_query_respects_top_k(store: KnowledgeStore) -> None:
    assert len(store.query(["orbit"], top_k=1)) == 1


def test_store_is_read_only_collection(store: KnowledgeStore) -> None:
    assert len(store) == 3
    assert isinstance(store.entries, tuple)
    assert store.get("gravity").base_confidence == pytest.approx(0.9)
    assert store.get("missing") is None
    assert "force" in store.get("gravity").keywords


def test_duplicate_keys_are_rejected() -> None:
    record = {"key": "a", "concept": "a", "description": "first"}
    with pytest.raises(ValueError):
        KnowledgeStore.from_records([record, dict(record, description="second")])


def test_invalid_records_are_rejected() -> None:
    with pytest.raises(ValueError):
        KnowledgeStore.from_records([{"concept": "no description"}])
    with pytest.raises(ValueError):
        KnowledgeStore.from_records([{"concept": "c", "description": "d", "confidence": 1.5}])


def test_from_path_reads_jsonl(tmp_path: Path) -> None:
    path = tmp_path / "facts.jsonl"
    lines = [
        {"key": "tide", "concept": "tide", "description": "Rise and fall of the sea.", "confidence": 0.7},
        {"key": "moon", "concept": "moon", "description": "Earth's natural satellite."},
    ]
    path.write_text("\n".join(json.dumps(line) for line in lines) + "\n", encoding="utf8")
    store = KnowledgeStore.from_path(path)
    assert [entry.key for entry in store] == ["tide", "moon"]
    assert store.get("moon").base_confidence == pytest.approx(0.8)


def test_from_path_reads_yaml_records(tmp_path: Path) -> None:
    path = tmp_path / "facts.yaml"
    path.write_text(
        yaml.safe_dump({"records": [{"concept": "volcano", "description": "An opening in the crust."}]}),
        encoding="utf8",
    )
    store = KnowledgeStore.from_path(path)
    assert store.get("volcano") is not None


def test_from_path_converts_math_seed_layout(tmp_path: Path) -> None:
    path = tmp_path / "seed-math.json"
    payload = {
        "mathematical_vocabulary": {"sum": "The result of adding numbers"},
        "mathematical_symbols": {"+": {"meaning": "addition", "synonyms": ["plus", "add"]}},
        "calculation_methods": {"addition": ["line up digits"]},
    }
    path.write_text(json.dumps(payload), encoding="utf8")
    store = KnowledgeStore.from_path(path)
    assert [entry.key for entry in store] == ["math_vocab_sum", "math_symbol_+", "arithmetic_methods"]
    assert store.get("math_symbol_+").keywords == frozenset({"plus", "add"})


def test_from_path_rejects_scalar_payload(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text("42", encoding="utf8")
    with pytest.raises(TypeError):
        KnowledgeStore.from_path(path)


def test_basic_store_has_core_entries() -> None:
    store = KnowledgeStore.basic()
    assert [entry.key for entry in store] == ["arithmetic", "personal_info"]


def test_default_store_uses_bundled_seed() -> None:
    store = load_default_store()
    assert len(store) >= 8
    assert store.get("gravity") is not None
    assert store.query(query_tokens("Tell me a joke")) == []

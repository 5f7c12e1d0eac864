"""Utility helpers shared across the Cognitive Resolution package."""

from .io import load_jsonl, load_yaml_or_json, save_json
from .random import deterministic_hash, make_rng, resolve_seed
from .text import format_number, json_number, normalise_text, simple_tokenize

__all__ = [
    "deterministic_hash",
    "format_number",
    "json_number",
    "load_jsonl",
    "load_yaml_or_json",
    "make_rng",
    "normalise_text",
    "resolve_seed",
    "save_json",
    "simple_tokenize",
]

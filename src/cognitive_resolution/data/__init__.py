"""Bundled seed data for the Cognitive Resolution package."""

from __future__ import annotations

import json
from importlib import resources
from typing import Any, Dict, List


def load_seed_knowledge() -> List[Dict[str, Any]]:
    resource = resources.files(__package__).joinpath("seed_knowledge.json")
    if not resource.is_file():
        return []
    with resource.open("r", encoding="utf-8") as stream:
        payload = json.load(stream)
    return list(payload.get("records", []))


__all__ = ["load_seed_knowledge"]

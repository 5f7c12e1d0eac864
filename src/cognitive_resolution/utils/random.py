"""Randomness helpers for deterministic behaviour."""

from __future__ import annotations

import hashlib
import os
from typing import Optional

import numpy as np


def deterministic_hash(value: str) -> int:
    """Return a deterministic integer hash for ``value``."""
    digest = hashlib.sha256(value.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], byteorder="big", signed=False)


def resolve_seed(seed: Optional[int] = None) -> int:
    """Return ``seed`` or derive one from ``COGNITIVE_RESOLUTION_SEED``."""
    if seed is None:
        seed = deterministic_hash(os.getenv("COGNITIVE_RESOLUTION_SEED", "cognitive-resolution")) % (2**32)
    return seed


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Build a seeded NumPy generator for template selection."""
    return np.random.default_rng(resolve_seed(seed))

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from cognitive_resolution.config import PipelineConfig
from cognitive_resolution.knowledge import KnowledgeStore
from cognitive_resolution.pipeline import CognitivePipeline
from cognitive_resolution.trace import ThoughtTrace


@pytest.fixture
def config() -> PipelineConfig:
    return PipelineConfig()


@pytest.fixture
def store() -> KnowledgeStore:
    return KnowledgeStore.from_records(
        [
            {
                "key": "gravity",
                "concept": "gravity",
                "description": "Gravity is the force by which a mass attracts every other mass.",
                "keywords": ["force", "mass", "orbit"],
                "confidence": 0.9,
            },
            {
                "key": "arithmetic",
                "concept": "arithmetic",
                "description": "Basic operations on numbers.",
                "keywords": ["add", "subtract", "multiply", "divide"],
                "confidence": 0.95,
            },
            {
                "key": "orbit",
                "concept": "orbit",
                "description": "The curved path of a body around a star or planet.",
                "keywords": ["planet", "path"],
                "confidence": 0.8,
            },
        ]
    )


@pytest.fixture
def trace() -> ThoughtTrace:
    return ThoughtTrace()


@pytest.fixture
def pipeline(store: KnowledgeStore, config: PipelineConfig) -> CognitivePipeline:
    return CognitivePipeline(store, config, rng=np.random.default_rng(0))

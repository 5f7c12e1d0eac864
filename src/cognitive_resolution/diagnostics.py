"""Diagnostics suite for the Cognitive Resolution pipeline."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .logging import get_logger
from .pipeline import CognitivePipeline
from .utils.io import save_json
from .utils.text import json_number

LOGGER = get_logger(__name__)


@dataclass
class Probe:
    utterance: str
    expected_category: str
    expected_answer: Optional[float] = None
    facts: Dict[str, object] = field(default_factory=dict)


@dataclass
class ProbeOutcome:
    utterance: str
    expected_category: str
    predicted_category: str
    confidence: float
    answer: Optional[float]
    expected_answer: Optional[float]
    passes: int
    preview: str

    @property
    def matches(self) -> bool:
        if self.expected_category != self.predicted_category:
            return False
        if self.expected_answer is None:
            return True
        if self.answer is None:
            return False
        if math.isnan(self.expected_answer):
            return math.isnan(self.answer)
        return math.isclose(self.answer, self.expected_answer, abs_tol=1e-9)


@dataclass
class DiagnosticsResult:
    outcomes: Sequence[ProbeOutcome] = field(default_factory=list)
    knowledge_entries: int = 0

    @property
    def passed(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.matches)

    def to_dict(self) -> Dict[str, object]:
        return {
            "knowledge_entries": self.knowledge_entries,
            "passed": self.passed,
            "total": len(self.outcomes),
            "probes": [
                {
                    "utterance": outcome.utterance,
                    "expected_category": outcome.expected_category,
                    "predicted_category": outcome.predicted_category,
                    "confidence": outcome.confidence,
                    "answer": json_number(outcome.answer),
                    "expected_answer": json_number(outcome.expected_answer),
                    "passes": outcome.passes,
                    "matches": outcome.matches,
                    "preview": outcome.preview,
                }
                for outcome in self.outcomes
            ],
        }

    def to_json(self, path: Path) -> None:
        save_json(Path(path), self.to_dict())


DEFAULT_PROBES: tuple[Probe, ...] = (
    Probe("What is 2+3*4?", "mathematical", 14),
    Probe("3×3+3", "mathematical", 12),
    Probe("multiply 6 by 7", "mathematical", 42),
    Probe("10/0", "mathematical", math.nan),
    Probe("My name is Ron and I have 1 wife and 2 cats", "personal", 2),
    Probe("What is gravity?", "inquiry"),
    Probe("Tell me a joke", "conversational"),
)


@dataclass
class DiagnosticsSuite:
    """Convenience harness that runs canned probes through the pipeline."""

    pipeline: CognitivePipeline = field(default_factory=CognitivePipeline)
    probes: Sequence[Probe] = DEFAULT_PROBES

    def run(self) -> DiagnosticsResult:
        LOGGER.info("Running diagnostics suite with %d probes", len(self.probes))
        outcomes: List[ProbeOutcome] = []
        for probe in self.probes:
            response = self.pipeline.resolve(probe.utterance, probe.facts)
            answer = None if response.answer is None else float(response.answer)
            outcome = ProbeOutcome(
                utterance=probe.utterance,
                expected_category=probe.expected_category,
                predicted_category=response.category,
                confidence=response.confidence,
                answer=answer,
                expected_answer=probe.expected_answer,
                passes=response.iterations,
                preview=response.content[:80],
            )
            if not outcome.matches:
                LOGGER.warning("Probe %r did not match expectations", probe.utterance)
            outcomes.append(outcome)
        return DiagnosticsResult(outcomes=outcomes, knowledge_entries=len(self.pipeline.knowledge))

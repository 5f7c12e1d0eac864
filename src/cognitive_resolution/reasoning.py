"""Bounded iterative self-prompting over the category pathways."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Optional

from .classifier import Category, InputSpark
from .config import ReasoningConfig
from .logging import get_logger
from .memory import PersonalFactsView
from .pathways import Pathway, PathwayResult, default_pathways
from .trace import ThoughtTrace

LOGGER = get_logger(__name__)

SELF_PROMPTS: Mapping[Category, tuple[str, ...]] = {
    Category.MATHEMATICAL: (
        "What numbers and operations are involved?",
        "What is the correct order of operations?",
        "Can I break this into simpler steps?",
        "How can I verify this answer?",
        "What mathematical principles apply here?",
    ),
    Category.PERSONAL: (
        "What personal information was shared?",
        "How many people are mentioned?",
        "What relationships are described?",
        "What can I calculate from this information?",
        "How should I respond personally?",
    ),
    Category.INQUIRY: (
        "What is being asked?",
        "What knowledge do I need?",
        "How can I find the answer?",
        "What would be most helpful?",
        "How confident am I in my knowledge?",
    ),
    Category.CONVERSATIONAL: (
        "What is the intent behind this message?",
        "How should I respond appropriately?",
        "What tone is most suitable?",
        "What information would be helpful?",
        "How can I be most useful?",
    ),
}


def self_prompt(category: Category, iteration: int) -> str:
    """Return the clarifying question for 1-based ``iteration``; the last one repeats."""
    prompts = SELF_PROMPTS[category]
    return prompts[min(iteration - 1, len(prompts) - 1)]


@dataclass(frozen=True)
class IterationRecord:
    index: int
    self_prompt: str
    result: PathwayResult
    confidence: float


@dataclass
class IterationResult:
    best: Optional[IterationRecord]
    records: list[IterationRecord] = field(default_factory=list)
    pathways: list[str] = field(default_factory=list)

    @property
    def iterations(self) -> int:
        return len(self.records)

    @property
    def confidence(self) -> float:
        return 0.0 if self.best is None else self.best.confidence


class IterativeReasoningEngine:
    """Drive up to ``max_iterations`` pathway passes, keeping the best result."""

    def __init__(
        self,
        config: Optional[ReasoningConfig] = None,
        pathways: Optional[Mapping[Category, Pathway]] = None,
    ) -> None:
        self.config = config or ReasoningConfig()
        self.pathways = dict(pathways or default_pathways())

    def run(
        self,
        utterance: str,
        spark: InputSpark,
        facts: PersonalFactsView,
        trace: ThoughtTrace,
    ) -> IterationResult:
        pathway = self.pathways[spark.category]
        result = IterationResult(best=None)
        current_thought = utterance
        trace.emit("Starting iterative thinking process", "iteration", 0.8)

        for index in range(1, self.config.max_iterations + 1):
            trace.emit(f'Iteration {index}: considering "{current_thought}"', "iteration", 0.7)
            prompt = self_prompt(spark.category, index)
            trace.emit(f"Self-prompt: {prompt}", "reasoning", 0.8)

            outcome = pathway.process(utterance, prompt, facts, trace)
            record = IterationRecord(index=index, self_prompt=prompt, result=outcome, confidence=outcome.confidence)
            result.records.append(record)
            if spark.category.value not in result.pathways:
                result.pathways.append(spark.category.value)

            if result.best is None or record.confidence > result.best.confidence:
                result.best = record
                trace.emit(f"New best result (confidence: {record.confidence:.0%})", "breakthrough", record.confidence)

            if result.best.confidence > self.config.early_exit_threshold:
                trace.emit("High confidence achieved - stopping iterations", "success", result.best.confidence)
                break

            current_thought = outcome.next_thought or current_thought

        trace.emit(
            f"Iterative thinking complete after {result.iterations} iterations",
            "success",
            result.confidence,
        )
        LOGGER.debug(
            "Reasoning finished: %d passes, best confidence %.2f",
            result.iterations,
            result.confidence,
        )
        return result

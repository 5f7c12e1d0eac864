"""Single-utterance cognitive resolution pipeline."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np

from .classifier import InputClassifier, InputSpark
from .config import PipelineConfig
from .evaluator import ExpressionEvaluator, Number, ParseWarning
from .knowledge import KnowledgeHit, KnowledgeStore, load_default_store, query_tokens
from .logging import get_logger
from .memory import FactSink, FactSuggestion, PersonalFactsView
from .pathways import default_pathways
from .reasoning import IterationResult, IterativeReasoningEngine
from .synthesis import ResolutionSynthesizer
from .trace import ThoughtEvent, ThoughtTrace
from .utils.random import make_rng
from .utils.text import json_number
from .verification import ResolutionVerifier, VerificationReport

LOGGER = get_logger(__name__)


@dataclass
class PipelineResponse:
    content: str
    confidence: float
    reasoning: list[str]
    pathways: list[str]
    category: str
    answer: Optional[Number] = None
    iterations: int = 0
    steps: list[str] = field(default_factory=list)
    suggestions: list[FactSuggestion] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    knowledge: list[str] = field(default_factory=list)
    thoughts: tuple[ThoughtEvent, ...] = ()
    spark: Optional[InputSpark] = None
    verification: Optional[VerificationReport] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "confidence": self.confidence,
            "category": self.category,
            "answer": json_number(self.answer),
            "iterations": self.iterations,
            "steps": list(self.steps),
            "reasoning": list(self.reasoning),
            "pathways": list(self.pathways),
            "knowledge": list(self.knowledge),
            "warnings": list(self.warnings),
            "suggestions": [{"key": item.key, "value": item.value} for item in self.suggestions],
        }


def _collect_warnings(iteration: IterationResult) -> list[ParseWarning]:
    if iteration.best is None:
        return []
    return list(iteration.best.result.warnings)


def _collect_suggestions(iteration: IterationResult) -> list[FactSuggestion]:
    if iteration.best is None or iteration.best.result.personal is None:
        return []
    return iteration.best.result.personal.suggestions()


class CognitivePipeline:
    """Classify, reason, synthesise and verify one utterance at a time.

    The knowledge store is shared read-only between runs; every run builds its
    own trace and never writes personal facts itself.
    """

    def __init__(
        self,
        knowledge: Optional[KnowledgeStore] = None,
        config: Optional[PipelineConfig] = None,
        *,
        rng: Optional[np.random.Generator] = None,
        fact_sink: Optional[FactSink] = None,
    ) -> None:
        self.config = config or PipelineConfig()
        self.knowledge = knowledge if knowledge is not None else load_default_store(self.config.knowledge.seed_path)
        evaluator = ExpressionEvaluator()
        self.classifier = InputClassifier(self.config.classifier)
        self.reasoning = IterativeReasoningEngine(self.config.reasoning, default_pathways(evaluator))
        self.synthesizer = ResolutionSynthesizer(
            self.config.synthesis,
            rng=rng if rng is not None else make_rng(self.config.synthesis.seed),
        )
        self.verifier = ResolutionVerifier(self.config.verification, evaluator)
        self.fact_sink = fact_sink

    def resolve(
        self,
        utterance: str,
        personal_facts: Optional[Mapping[str, Any]] = None,
    ) -> PipelineResponse:
        facts = personal_facts if isinstance(personal_facts, PersonalFactsView) else PersonalFactsView(personal_facts)
        trace = ThoughtTrace()
        trace.emit("Cognitive flow initiated", "system", 1.0)
        trace.emit(f'Input received: "{utterance}"', "input", 0.9)

        spark = self.classifier.classify(utterance)
        trace.emit(f"Input analysis: {spark.features.to_dict()}", "analysis", 0.9)
        trace.emit(f"Initial cognitive spark: {spark.category.value}", "analysis", spark.confidence)

        iteration = self.reasoning.run(utterance, spark, facts, trace)

        hits = self._activate_knowledge(utterance, trace)
        resolution = self.synthesizer.synthesize(utterance, iteration, hits, facts, trace)
        resolution, report = self.verifier.verify(resolution, trace)
        trace.emit(f'Final response prepared: "{resolution.content}"', "success", resolution.confidence)

        suggestions = _collect_suggestions(iteration)
        if suggestions and self.fact_sink is not None:
            self.fact_sink.submit(suggestions)

        LOGGER.info(
            "Resolved %s utterance with confidence %.2f after %d passes",
            resolution.category.value,
            resolution.confidence,
            iteration.iterations,
        )
        return PipelineResponse(
            content=resolution.content,
            confidence=min(max(resolution.confidence, 0.0), 1.0),
            reasoning=trace.render(),
            pathways=list(iteration.pathways),
            category=resolution.category.value,
            answer=resolution.answer,
            iterations=iteration.iterations,
            steps=list(resolution.steps),
            suggestions=suggestions,
            warnings=[warning.message for warning in _collect_warnings(iteration)],
            knowledge=[hit.entry.key for hit in hits],
            thoughts=trace.snapshot(),
            spark=spark,
            verification=report,
        )

    def _activate_knowledge(self, utterance: str, trace: ThoughtTrace) -> list[KnowledgeHit]:
        trace.emit("Activating knowledge store", "system", 0.8)
        hits = self.knowledge.query(query_tokens(utterance), top_k=self.config.knowledge.top_k)
        for hit in hits:
            trace.emit(
                f"Knowledge activated: {hit.entry.key} (relevance: {hit.score:.0%})",
                "reasoning",
                hit.score,
            )
        return hits


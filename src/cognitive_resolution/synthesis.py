"""Merge reasoning output, knowledge hits and personal facts into a resolution."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from .classifier import Category
from .config import SynthesisConfig
from .evaluator import Number
from .knowledge import KnowledgeHit
from .logging import get_logger
from .memory import PersonalFactsView
from .pathways import PersonalExtraction
from .reasoning import IterationResult
from .trace import ThoughtTrace
from .utils.random import make_rng
from .utils.text import format_number

LOGGER = get_logger(__name__)

FALLBACK_RESPONSES: tuple[str, ...] = (
    "I understand. How can I help you?",
    "I hear you. What would you like to explore next?",
    "Got it. Tell me more about what you need.",
)


@dataclass
class Resolution:
    category: Category
    content: str
    confidence: float
    original_input: str
    answer: Optional[Number] = None
    steps: list[str] = field(default_factory=list)
    knowledge_key: Optional[str] = None


def math_content(answer: Number, steps: Sequence[str]) -> str:
    content = f"the answer is {format_number(answer)}"
    if steps:
        content += ". Here's how I solved it: " + " → ".join(steps)
    return content


def _format_facts(facts: PersonalFactsView) -> str:
    return ", ".join(f"{key}: {value}" for key, value in facts.items())


class ResolutionSynthesizer:
    """Always produce a :class:`Resolution`; there is no failure path."""

    def __init__(
        self,
        config: Optional[SynthesisConfig] = None,
        rng: Optional[np.random.Generator] = None,
        fallback_responses: Sequence[str] = FALLBACK_RESPONSES,
    ) -> None:
        self.config = config or SynthesisConfig()
        self.rng = rng if rng is not None else make_rng(self.config.seed)
        if not fallback_responses:
            raise ValueError("At least one fallback response is required")
        self.fallback_responses = tuple(fallback_responses)

    def synthesize(
        self,
        utterance: str,
        iteration: IterationResult,
        hits: Sequence[KnowledgeHit],
        facts: PersonalFactsView,
        trace: ThoughtTrace,
    ) -> Resolution:
        best = iteration.best.result if iteration.best is not None else None

        if best is not None and best.category is Category.MATHEMATICAL and best.answer is not None:
            resolution = Resolution(
                category=Category.MATHEMATICAL,
                content=math_content(best.answer, best.steps),
                confidence=best.confidence,
                original_input=utterance,
                answer=best.answer,
                steps=list(best.steps),
            )
        elif best is not None and best.category is Category.PERSONAL:
            resolution = Resolution(
                category=Category.PERSONAL,
                content=self._personal_content(best.personal, best.answer, facts),
                confidence=best.confidence,
                original_input=utterance,
                answer=best.answer,
            )
        elif hits:
            top = hits[0]
            trace.emit(
                f"Grounding answer in knowledge entry '{top.entry.key}' (relevance: {top.score:.0%})",
                "reasoning",
                top.entry.base_confidence,
            )
            resolution = Resolution(
                category=best.category if best is not None else Category.INQUIRY,
                content=top.entry.description,
                confidence=top.entry.base_confidence,
                original_input=utterance,
                knowledge_key=top.entry.key,
            )
        else:
            index = int(self.rng.integers(len(self.fallback_responses)))
            resolution = Resolution(
                category=best.category if best is not None else Category.CONVERSATIONAL,
                content=self.fallback_responses[index],
                confidence=self.config.fallback_confidence,
                original_input=utterance,
            )

        trace.emit(
            f"Synthesis complete with confidence {resolution.confidence:.0%}",
            "synthesis",
            resolution.confidence,
        )
        LOGGER.debug("Synthesised %s resolution", resolution.category.value)
        return resolution

    @staticmethod
    def _personal_content(
        extraction: Optional[PersonalExtraction],
        answer: Optional[Number],
        facts: PersonalFactsView,
    ) -> str:
        name = None
        if extraction is not None and extraction.name:
            name = extraction.name
        elif facts.get("name"):
            name = str(facts["name"])
        content = f"Hello {name or 'there'}! "
        if answer is not None:
            content += f"Based on what you told me, there are {format_number(answer)} people in your household."
        elif (extraction is None or extraction.empty) and facts:
            content += f"Here's what I remember about you: {_format_facts(facts)}."
        else:
            content += "Nice to meet you!"
        return content

"""Category-specific processing strategies used by the reasoning loop."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Optional, Protocol

from .classifier import Category
from .evaluator import ExpressionEvaluator, Number, ParseWarning
from .logging import get_logger
from .memory import FactSuggestion, PersonalFactsView
from .trace import ThoughtTrace
from .utils.text import format_number

LOGGER = get_logger(__name__)

NUMBER_WORDS = {
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5, "six": 6,
    "seven": 7, "eight": 8, "nine": 9, "ten": 10, "eleven": 11, "twelve": 12,
}

# Person-denoting relations; each maps plural forms onto one canonical key.
RELATION_WORDS = {
    "wife": "wife", "wives": "wife",
    "husband": "husband", "husbands": "husband",
    "partner": "partner", "partners": "partner",
    "child": "children", "children": "children",
    "kid": "children", "kids": "children",
    "son": "sons", "sons": "sons",
    "daughter": "daughters", "daughters": "daughters",
    "brother": "brothers", "brothers": "brothers",
    "sister": "sisters", "sisters": "sisters",
    "parent": "parents", "parents": "parents",
    "roommate": "roommates", "roommates": "roommates",
}

# Non-person possessions; never counted towards household size.
POSSESSION_WORDS = {
    "cat": "cats", "cats": "cats",
    "dog": "dogs", "dogs": "dogs",
    "pet": "pets", "pets": "pets",
    "fish": "fish",
    "bird": "birds", "birds": "birds",
    "hamster": "hamsters", "hamsters": "hamsters",
    "rabbit": "rabbits", "rabbits": "rabbits",
    "car": "cars", "cars": "cars",
}

_QUANTITY = r"(\d+|" + "|".join(NUMBER_WORDS) + r")"
_RELATION_RE = re.compile(rf"\b{_QUANTITY}\s+({'|'.join(RELATION_WORDS)})\b", re.IGNORECASE)
_POSSESSION_RE = re.compile(rf"\b{_QUANTITY}\s+({'|'.join(POSSESSION_WORDS)})\b", re.IGNORECASE)
_NAME_RE = re.compile(r"\b(?:my name is|call me)\s+([A-Za-z][\w'-]*)", re.IGNORECASE)
_IDENTITY_RE = re.compile(r"\b(?:I am|I'm)\s+([A-Z][\w'-]*)")


@dataclass(frozen=True)
class PersonalExtraction:
    name: Optional[str] = None
    relations: Mapping[str, int] = field(default_factory=dict)
    possessions: Mapping[str, int] = field(default_factory=dict)
    household_size: Optional[int] = None

    @property
    def empty(self) -> bool:
        return self.name is None and not self.relations and not self.possessions

    def suggestions(self) -> list[FactSuggestion]:
        facts: list[FactSuggestion] = []
        if self.name is not None:
            facts.append(FactSuggestion("name", self.name))
        for relation, count in self.relations.items():
            facts.append(FactSuggestion(f"relation.{relation}", count))
        for possession, count in self.possessions.items():
            facts.append(FactSuggestion(f"possession.{possession}", count))
        if self.household_size is not None:
            facts.append(FactSuggestion("household_size", self.household_size))
        return facts

    def describe(self) -> str:
        parts: list[str] = []
        if self.name is not None:
            parts.append(f"name={self.name}")
        parts.extend(f"{key}={value}" for key, value in self.relations.items())
        parts.extend(f"{key}={value}" for key, value in self.possessions.items())
        return ", ".join(parts) or "nothing"


def _quantity(text: str) -> int:
    lowered = text.lower()
    return NUMBER_WORDS[lowered] if lowered in NUMBER_WORDS else int(lowered)


def _count(pattern: re.Pattern[str], text: str, vocabulary: Mapping[str, str]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for match in pattern.finditer(text):
        key = vocabulary[match.group(2).lower()]
        counts[key] = counts.get(key, 0) + _quantity(match.group(1))
    return counts


def extract_personal_facts(text: str) -> PersonalExtraction:
    """Pull a name, relation counts and possession counts from ``text``."""
    name: Optional[str] = None
    match = _NAME_RE.search(text) or _IDENTITY_RE.search(text)
    if match:
        raw = match.group(1)
        name = raw[:1].upper() + raw[1:]
    relations = _count(_RELATION_RE, text, RELATION_WORDS)
    possessions = _count(_POSSESSION_RE, text, POSSESSION_WORDS)
    household = 1 + sum(relations.values()) if relations else None
    return PersonalExtraction(name=name, relations=relations, possessions=possessions, household_size=household)


@dataclass
class PathwayResult:
    """Outcome of one pathway pass."""

    category: Category
    confidence: float
    next_thought: str
    answer: Optional[Number] = None
    steps: list[str] = field(default_factory=list)
    personal: Optional[PersonalExtraction] = None
    warnings: list[ParseWarning] = field(default_factory=list)


class Pathway(Protocol):
    category: Category

    def process(
        self,
        utterance: str,
        self_prompt: str,
        facts: PersonalFactsView,
        trace: ThoughtTrace,
    ) -> PathwayResult: ...


class MathematicalPathway:
    category = Category.MATHEMATICAL

    def __init__(self, evaluator: Optional[ExpressionEvaluator] = None) -> None:
        self.evaluator = evaluator or ExpressionEvaluator()

    def process(
        self,
        utterance: str,
        self_prompt: str,
        facts: PersonalFactsView,
        trace: ThoughtTrace,
    ) -> PathwayResult:
        trace.emit("Processing mathematical iteration", "mathematical", 0.8)
        evaluation = self.evaluator.evaluate(utterance, trace)
        if evaluation is None:
            return PathwayResult(
                category=self.category,
                confidence=0.3,
                next_thought="Unable to process mathematical expression",
            )
        return PathwayResult(
            category=self.category,
            confidence=0.95,
            next_thought=f"Verify: {format_number(evaluation.answer)}",
            answer=evaluation.answer,
            steps=list(evaluation.steps),
            warnings=list(evaluation.warnings),
        )


class PersonalPathway:
    category = Category.PERSONAL

    def process(
        self,
        utterance: str,
        self_prompt: str,
        facts: PersonalFactsView,
        trace: ThoughtTrace,
    ) -> PathwayResult:
        trace.emit("Processing personal information iteration", "personal", 0.8)
        extraction = extract_personal_facts(utterance)
        trace.emit(f"Extracted: {extraction.describe()}", "personal", 0.9)
        if extraction.household_size is not None:
            counted = " + ".join(f"{count} {relation}" for relation, count in extraction.relations.items())
            trace.emit(
                f"Household calculation: 1 person + {counted} = {extraction.household_size} people",
                "personal",
                0.95,
            )
            return PathwayResult(
                category=self.category,
                confidence=0.95,
                next_thought=f"Household has {extraction.household_size} people",
                answer=extraction.household_size,
                personal=extraction,
            )
        return PathwayResult(
            category=self.category,
            confidence=0.7,
            next_thought="Personal information processed",
            personal=extraction,
        )


class InquiryPathway:
    category = Category.INQUIRY

    def process(
        self,
        utterance: str,
        self_prompt: str,
        facts: PersonalFactsView,
        trace: ThoughtTrace,
    ) -> PathwayResult:
        return PathwayResult(category=self.category, confidence=0.6, next_thought="Processing inquiry...")


class ConversationalPathway:
    category = Category.CONVERSATIONAL

    def process(
        self,
        utterance: str,
        self_prompt: str,
        facts: PersonalFactsView,
        trace: ThoughtTrace,
    ) -> PathwayResult:
        return PathwayResult(category=self.category, confidence=0.6, next_thought="Processing conversation...")


def default_pathways(evaluator: Optional[ExpressionEvaluator] = None) -> dict[Category, Pathway]:
    return {
        Category.MATHEMATICAL: MathematicalPathway(evaluator),
        Category.PERSONAL: PersonalPathway(),
        Category.INQUIRY: InquiryPathway(),
        Category.CONVERSATIONAL: ConversationalPathway(),
    }

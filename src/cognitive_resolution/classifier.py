"""Lexical classification of an utterance into a spark category."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Optional

from .config import ClassifierConfig
from .logging import get_logger

LOGGER = get_logger(__name__)


class Category(str, Enum):
    MATHEMATICAL = "mathematical"
    PERSONAL = "personal"
    INQUIRY = "inquiry"
    CONVERSATIONAL = "conversational"


_DIGIT_RE = re.compile(r"\d")
_DIGIT_GROUP_RE = re.compile(r"\d+")
_OPERATOR_RE = re.compile(r"[+\-*/×÷]")
_IMPLICIT_MULTIPLY_RE = re.compile(r"\d\s*x\s*\d", re.IGNORECASE)
_OPERATOR_WORD_RE = re.compile(
    r"\b(multipl(?:y|ied)|times|product|divided?|quotient|add(?:ed)?|plus|sum|total"
    r"|subtract(?:ed)?|minus|difference|calculate|compute|solve)\b",
    re.IGNORECASE,
)
_PERSONAL_RE = re.compile(r"\b(i|i'm|im|i've|my|mine|myself|your|yours)\b|\bcall me\b", re.IGNORECASE)
INTERROGATIVES = frozenset(
    {
        "what", "who", "whom", "whose", "where", "when", "why", "how", "which",
        "is", "are", "can", "could", "do", "does", "did", "will", "would", "should",
    }
)


@dataclass(frozen=True)
class SparkFeatures:
    has_numbers: bool
    has_operators: bool
    has_question_markers: bool
    has_personal_markers: bool
    word_count: int
    complexity_score: float

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass(frozen=True)
class InputSpark:
    """Initial category decision for one utterance."""

    category: Category
    confidence: float
    features: SparkFeatures


def _leading_word(text: str) -> str:
    match = re.match(r"\s*([A-Za-z']+)", text)
    return match.group(1).lower() if match else ""


def complexity_score(text: str) -> float:
    """Blend length, operator, digit-group and question-mark counts into [0, 1]."""
    score = (
        0.3 * min(len(text) / 100, 1.0)
        + 0.1 * len(_OPERATOR_RE.findall(text))
        + 0.1 * len(_DIGIT_GROUP_RE.findall(text))
        + 0.1 * text.count("?")
    )
    return min(max(score, 0.0), 1.0)


class InputClassifier:
    """Rule-based classifier; first matching rule decides the category."""

    def __init__(self, config: Optional[ClassifierConfig] = None) -> None:
        self.config = config or ClassifierConfig()

    def features(self, text: str) -> SparkFeatures:
        return SparkFeatures(
            has_numbers=bool(_DIGIT_RE.search(text)),
            has_operators=bool(_OPERATOR_RE.search(text) or _IMPLICIT_MULTIPLY_RE.search(text)),
            has_question_markers="?" in text or _leading_word(text) in INTERROGATIVES,
            has_personal_markers=bool(_PERSONAL_RE.search(text)),
            word_count=len(text.split()),
            complexity_score=complexity_score(text),
        )

    def classify(self, text: str) -> InputSpark:
        if not text or not text.strip():
            raise ValueError("Utterance must be non-empty")
        features = self.features(text)
        operator_words = bool(_OPERATOR_WORD_RE.search(text))
        if features.has_numbers and (features.has_operators or operator_words):
            category, confidence = Category.MATHEMATICAL, self.config.mathematical_confidence
        elif features.has_personal_markers:
            category, confidence = Category.PERSONAL, self.config.personal_confidence
        elif features.has_question_markers:
            category, confidence = Category.INQUIRY, self.config.inquiry_confidence
        else:
            category, confidence = Category.CONVERSATIONAL, self.config.conversational_confidence
        LOGGER.debug("Classified %r as %s (%.2f)", text, category.value, confidence)
        return InputSpark(category=category, confidence=confidence, features=features)

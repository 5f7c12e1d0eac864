from __future__ import annotations

import pytest

from cognitive_resolution.classifier import Category, InputClassifier, complexity_score
from cognitive_resolution.config import ClassifierConfig


@pytest.fixture
def classifier() -> InputClassifier:
    return InputClassifier()


@pytest.mark.parametrize(
    ("text", "category", "confidence"),
    [
        ("What is 2+3*4?", Category.MATHEMATICAL, 0.9),
        ("multiply 6 by 7", Category.MATHEMATICAL, 0.9),
        ("3x3", Category.MATHEMATICAL, 0.9),
        ("My name is Ron and I have 1 wife and 2 cats", Category.PERSONAL, 0.8),
        ("What is gravity?", Category.INQUIRY, 0.7),
        ("How are you?", Category.INQUIRY, 0.7),
        ("Tell me a joke", Category.CONVERSATIONAL, 0.5),
    ],
)
def test_classify_categories(classifier, text, category, confidence) -> None:
    spark = classifier.classify(text)
    assert spark.category is category
    assert spark.confidence == pytest.approx(confidence)


def test_numbers_without_operators_are_not_mathematical(classifier) -> None:
    spark = classifier.classify("I have 3 apples")
    assert spark.category is Category.PERSONAL


def test_blank_input_is_rejected(classifier) -> None:
    with pytest.raises(ValueError):
        classifier.classify("   ")


def test_features_are_reported(classifier) -> None:
    features = classifier.features("What is 2+3?")
    assert features.has_numbers
    assert features.has_operators
    assert features.has_question_markers
    assert not features.has_personal_markers
    assert features.word_count == 3
    assert set(features.to_dict()) >= {"has_numbers", "complexity_score"}


def test_complexity_score_blends_counts() -> None:
    assert complexity_score("2+3") == pytest.approx(0.3 * 0.03 + 0.1 + 0.2)
    assert complexity_score("1+2+3+4+5+6+7+8+9?") == 1.0


def test_custom_confidences_are_used() -> None:
    classifier = InputClassifier(ClassifierConfig(conversational_confidence=0.4))
    assert classifier.classify("hello there").confidence == pytest.approx(0.4)


def test_config_rejects_out_of_range_confidence() -> None:
    with pytest.raises(ValueError):
        ClassifierConfig(mathematical_confidence=1.2)


def test_category_renders_as_value() -> None:
    assert Category.INQUIRY.value == "inquiry"
    assert f"{Category.PERSONAL.value}" == "personal"

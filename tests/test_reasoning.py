from __future__ import annotations

from collections.abc import Sequence

import pytest

from cognitive_resolution.classifier import Category, InputClassifier
from cognitive_resolution.config import ReasoningConfig
from cognitive_resolution.memory import PersonalFactsView
from cognitive_resolution.pathways import PathwayResult
from cognitive_resolution.reasoning import SELF_PROMPTS, IterativeReasoningEngine, self_prompt


class ScriptedPathway:
    category = Category.CONVERSATIONAL

    def __init__(self, confidences: Sequence[float]) -> None:
        self.confidences = list(confidences)
        self.prompts: list[str] = []

    def process(self, utterance, prompt, facts, trace) -> PathwayResult:
        self.prompts.append(prompt)
        confidence = self.confidences[len(self.prompts) - 1]
        return PathwayResult(category=self.category, confidence=confidence, next_thought=f"pass {len(self.prompts)}")


def _run(confidences: Sequence[float], trace, config: ReasoningConfig | None = None):
    pathway = ScriptedPathway(confidences)
    engine = IterativeReasoningEngine(config, {Category.CONVERSATIONAL: pathway})
    spark = InputClassifier().classify("Tell me a joke")
    return engine.run("Tell me a joke", spark, PersonalFactsView(), trace), pathway


def test_runs_at_most_five_passes(trace) -> None:
    result, pathway = _run([0.4, 0.7, 0.5, 0.6, 0.65], trace)
    assert result.iterations == 5
    assert pathway.prompts == list(SELF_PROMPTS[Category.CONVERSATIONAL])


def test_keeps_best_record(trace) -> None:
    result, _ = _run([0.4, 0.7, 0.5, 0.6, 0.65], trace)
    assert result.best.index == 2
    assert result.confidence == pytest.approx(0.7)


def test_equal_confidence_does_not_replace_best(trace) -> None:
    result, _ = _run([0.6, 0.6, 0.6, 0.6, 0.6], trace)
    assert result.best.index == 1


def test_stops_once_confidence_exceeds_threshold(trace) -> None:
    result, pathway = _run([0.5, 0.95, 0.99], trace)
    assert result.iterations == 2
    assert len(pathway.prompts) == 2
    assert any("stopping iterations" in line for line in trace.render())


def test_threshold_is_strict(trace) -> None:
    result, _ = _run([0.9, 0.9, 0.9, 0.9, 0.9], trace)
    assert result.iterations == 5


def test_max_iterations_is_configurable(trace) -> None:
    result, _ = _run([0.1, 0.2, 0.3], trace, ReasoningConfig(max_iterations=3))
    assert result.iterations == 3
    assert result.pathways == ["conversational"]


def test_max_iterations_is_bounded() -> None:
    with pytest.raises(ValueError):
        ReasoningConfig(max_iterations=6)
    with pytest.raises(ValueError):
        ReasoningConfig(max_iterations=0)


def test_self_prompt_repeats_last_question() -> None:
    assert self_prompt(Category.MATHEMATICAL, 1) == "What numbers and operations are involved?"
    assert self_prompt(Category.MATHEMATICAL, 9) == SELF_PROMPTS[Category.MATHEMATICAL][-1]


def test_default_pathways_solve_math_in_one_pass(trace) -> None:
    engine = IterativeReasoningEngine()
    spark = InputClassifier().classify("What is 2+3*4?")
    result = engine.run("What is 2+3*4?", spark, PersonalFactsView(), trace)
    assert result.iterations == 1
    assert result.best.result.answer == 14

"""Self-verification of numeric resolutions with a single corrective retry."""

from __future__ import annotations

import ast
import math
import re
from dataclasses import dataclass, replace
from typing import Optional

from .classifier import Category
from .config import VerificationConfig
from .evaluator import GLYPHS, ExpressionEvaluator, Number, apply_operator
from .logging import get_logger
from .synthesis import Resolution, math_content
from .trace import ThoughtTrace
from .utils.text import format_number

LOGGER = get_logger(__name__)

_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")
_SYMBOL_RE = re.compile(r"[+\-*/×÷]")

_AST_OPERATORS = {ast.Add: "+", ast.Sub: "-", ast.Mult: "*", ast.Div: "/"}


@dataclass(frozen=True)
class VerificationReport:
    checked: bool
    expected: Optional[Number] = None
    agreed: bool = True
    corrected: bool = False


def extract_operands(text: str) -> tuple[list[Number], list[str]]:
    """Return the numeric literals and symbolic operators written in ``text``."""
    numbers: list[Number] = [float(raw) if "." in raw else int(raw) for raw in _NUMBER_RE.findall(text)]
    operators = [GLYPHS.get(symbol, symbol) for symbol in _SYMBOL_RE.findall(text)]
    return numbers, operators


def reference_value(numbers: list[Number], operators: list[str]) -> Number:
    """Evaluate the interleaved tokens with Python's own operator precedence."""
    source = "".join(
        f"{number!r}{operators[index]}" if index < len(operators) else repr(number)
        for index, number in enumerate(numbers)
    )
    tree = ast.parse(source, mode="eval")

    def walk(node: ast.AST) -> Number:
        if isinstance(node, ast.Expression):
            return walk(node.body)
        if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)):
            return node.value
        if isinstance(node, ast.BinOp) and type(node.op) in _AST_OPERATORS:
            left = walk(node.left)
            right = walk(node.right)
            if math.isnan(left) or math.isnan(right):
                return math.nan
            return apply_operator(left, _AST_OPERATORS[type(node.op)], right)
        raise ValueError(f"Unsupported expression node: {ast.dump(node)}")

    return walk(tree)


def _agrees(answer: Number, expected: Number, tolerance: float) -> bool:
    if math.isnan(answer) or math.isnan(expected):
        return math.isnan(answer) and math.isnan(expected)
    return abs(answer - expected) < tolerance


class ResolutionVerifier:
    """Re-derive numeric answers and repair a mismatch exactly once."""

    def __init__(
        self,
        config: Optional[VerificationConfig] = None,
        evaluator: Optional[ExpressionEvaluator] = None,
    ) -> None:
        self.config = config or VerificationConfig()
        self.evaluator = evaluator or ExpressionEvaluator()

    def expected_value(self, text: str) -> Optional[Number]:
        numbers, operators = extract_operands(text)
        if not operators or len(operators) != len(numbers) - 1:
            return None
        if len(numbers) == 2:
            return apply_operator(numbers[0], operators[0], numbers[1])
        if not self.config.verify_nary:
            return None
        return reference_value(numbers, operators)

    def verify(self, resolution: Resolution, trace: ThoughtTrace) -> tuple[Resolution, VerificationReport]:
        if resolution.category is not Category.MATHEMATICAL or resolution.answer is None:
            return resolution, VerificationReport(checked=False)

        trace.emit(f"Verifying mathematical answer: {format_number(resolution.answer)}", "verification", 0.9)
        expected = self.expected_value(resolution.original_input)
        if expected is None:
            trace.emit("Expression not re-derivable; accepting answer", "verification", resolution.confidence)
            return resolution, VerificationReport(checked=False)

        if _agrees(resolution.answer, expected, self.config.tolerance):
            trace.emit("Mathematical verification passed", "success", 0.95)
            return resolution, VerificationReport(checked=True, expected=expected)

        trace.emit(
            f"Verification failed: expected {format_number(expected)}, got {format_number(resolution.answer)}; recalculating",
            "error",
            0.3,
        )
        LOGGER.info("Correcting answer for %r", resolution.original_input)
        recomputed = self.evaluator.evaluate(resolution.original_input)
        if recomputed is None:
            trace.emit("Recalculation produced no result; keeping original answer", "error", 0.3)
            return resolution, VerificationReport(checked=True, expected=expected, agreed=False)

        corrected = replace(
            resolution,
            answer=recomputed.answer,
            steps=list(recomputed.steps),
            content=math_content(recomputed.answer, recomputed.steps),
        )
        trace.emit(f"Corrected answer: {format_number(recomputed.answer)}", "success", 0.9)
        return corrected, VerificationReport(checked=True, expected=expected, agreed=False, corrected=True)

"""Deterministic arithmetic evaluation with operator precedence."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Optional, Union

from .logging import get_logger
from .trace import ThoughtTrace
from .utils.text import format_number

LOGGER = get_logger(__name__)

Number = Union[int, float]

_NUM = r"(\d+(?:\.\d+)?)"

# Applied in order to lower-cased text; each pattern maps to a symbolic form.
NATURAL_LANGUAGE_OPERATORS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(rf"multiply\s+{_NUM}\s+(?:by|and|with)\s+{_NUM}"), r"\1*\2"),
    (re.compile(rf"{_NUM}\s+multiplied\s+by\s+{_NUM}"), r"\1*\2"),
    (re.compile(rf"product\s+of\s+{_NUM}\s+and\s+{_NUM}"), r"\1*\2"),
    (re.compile(rf"{_NUM}\s+times\s+{_NUM}"), r"\1*\2"),
    (re.compile(rf"divide\s+{_NUM}\s+by\s+{_NUM}"), r"\1/\2"),
    (re.compile(rf"{_NUM}\s+divided\s+by\s+{_NUM}"), r"\1/\2"),
    (re.compile(rf"{_NUM}\s+over\s+{_NUM}"), r"\1/\2"),
    (re.compile(rf"add\s+{_NUM}\s+(?:and|to)\s+{_NUM}"), r"\1+\2"),
    (re.compile(rf"sum\s+of\s+{_NUM}\s+and\s+{_NUM}"), r"\1+\2"),
    (re.compile(rf"{_NUM}\s+plus\s+{_NUM}"), r"\1+\2"),
    (re.compile(rf"subtract\s+{_NUM}\s+from\s+{_NUM}"), r"\2-\1"),
    (re.compile(rf"{_NUM}\s+minus\s+{_NUM}"), r"\1-\2"),
)

GLYPHS = {"×": "*", "÷": "/", "−": "-"}
DISPLAY_SYMBOLS = {"*": "×", "/": "÷", "+": "+", "-": "-"}
DIVIDE_BY_ZERO = "Cannot divide by zero"

_THOUSANDS_RE = re.compile(r"(?<=\d),(?=\d{3}\b)")
_TOKEN_RE = re.compile(
    r"(?P<number>\d+(?:\.\d+)?)|(?P<operator>[+\-*/])|(?P<word>[a-z_']+)|(?P<other>\S)"
)


@dataclass(frozen=True)
class NumberToken:
    value: Number
    position: int


@dataclass(frozen=True)
class OperatorToken:
    symbol: str
    position: int
    implicit: bool = False


@dataclass(frozen=True)
class UnknownToken:
    text: str
    position: int


Token = Union[NumberToken, OperatorToken, UnknownToken]


@dataclass(frozen=True)
class ParseWarning:
    """Non-fatal observation made while reading an expression."""

    message: str
    position: int


@dataclass
class ParsedExpression:
    normalised: str
    tokens: list[Token]
    warnings: list[ParseWarning] = field(default_factory=list)

    @property
    def numbers(self) -> list[Number]:
        return [token.value for token in self.tokens if isinstance(token, NumberToken)]

    @property
    def operators(self) -> list[str]:
        return [token.symbol for token in self.tokens if isinstance(token, OperatorToken)]


@dataclass
class Evaluation:
    """Outcome of evaluating an arithmetic fragment."""

    answer: Number
    steps: list[str]
    expression: str
    warnings: list[ParseWarning] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return isinstance(self.answer, float) and math.isnan(self.answer)


def normalise_expression(text: str) -> str:
    """Lower-case ``text`` and rewrite operator phrases and glyphs symbolically."""
    normalised = text.lower()
    # Repeat until stable so chained phrases ("2 plus 3 plus 4") translate fully.
    previous = None
    while previous != normalised:
        previous = normalised
        for pattern, replacement in NATURAL_LANGUAGE_OPERATORS:
            normalised = pattern.sub(replacement, normalised)
    for glyph, symbol in GLYPHS.items():
        normalised = normalised.replace(glyph, symbol)
    normalised = _THOUSANDS_RE.sub("", normalised)
    return " ".join(normalised.split())


def _parse_number(text: str) -> Number:
    return float(text) if "." in text else int(text)


def tokenize_expression(text: str) -> ParsedExpression:
    """Split ``text`` into number, operator and unknown tokens.

    A bare ``x`` sitting between two numbers is read as multiplication and
    reported as a warning; any other ``x`` stays an unknown token.
    """
    normalised = normalise_expression(text)
    raw: list[Token] = []
    for match in _TOKEN_RE.finditer(normalised):
        kind = match.lastgroup
        value = match.group()
        if kind == "number":
            raw.append(NumberToken(_parse_number(value), match.start()))
        elif kind == "operator":
            raw.append(OperatorToken(value, match.start()))
        else:
            raw.append(UnknownToken(value, match.start()))

    tokens: list[Token] = []
    warnings: list[ParseWarning] = []
    for index, token in enumerate(raw):
        if isinstance(token, UnknownToken) and token.text == "x":
            before = raw[index - 1] if index > 0 else None
            after = raw[index + 1] if index + 1 < len(raw) else None
            if isinstance(before, NumberToken) and isinstance(after, NumberToken):
                tokens.append(OperatorToken("*", token.position, implicit=True))
                warnings.append(
                    ParseWarning(
                        f"read 'x' between {format_number(before.value)} and "
                        f"{format_number(after.value)} as multiplication",
                        token.position,
                    )
                )
                continue
            if isinstance(before, NumberToken) or isinstance(after, NumberToken):
                warnings.append(ParseWarning("ignored 'x' next to a number; not read as multiplication", token.position))
        tokens.append(token)
    return ParsedExpression(normalised=normalised, tokens=tokens, warnings=warnings)


def apply_operator(left: Number, symbol: str, right: Number) -> Number:
    """Apply ``symbol`` to two operands; division by zero yields ``NaN``."""
    if symbol == "+":
        return left + right
    if symbol == "-":
        return left - right
    if symbol == "*":
        return left * right
    if symbol == "/":
        return math.nan if right == 0 else left / right
    raise ValueError(f"Unsupported operator: {symbol!r}")


class ExpressionEvaluator:
    """Evaluate arithmetic text in two precedence passes."""

    def evaluate(self, text: str, trace: Optional[ThoughtTrace] = None) -> Optional[Evaluation]:
        parsed = tokenize_expression(text)
        numbers = parsed.numbers
        operators = parsed.operators
        if trace is not None:
            trace.emit(f'Normalised expression: "{parsed.normalised}"', "mathematical", 0.8)
            trace.emit(f"Numbers found: [{', '.join(format_number(n) for n in numbers)}]", "mathematical", 0.8)
            trace.emit(f"Operators found: [{', '.join(operators)}]", "mathematical", 0.8)
            for warning in parsed.warnings:
                trace.emit(f"Parse warning: {warning.message}", "warning", 0.6)

        if not numbers:
            LOGGER.debug("No numeric token in %r", text)
            return None
        if len(numbers) == 1 and not operators:
            value = numbers[0]
            return Evaluation(value, [f"The number is {format_number(value)}"], parsed.normalised, parsed.warnings)
        if len(operators) != len(numbers) - 1:
            LOGGER.debug("Malformed expression %r: %d numbers, %d operators", text, len(numbers), len(operators))
            if trace is not None:
                trace.emit(
                    f"Mismatched numbers ({len(numbers)}) and operators ({len(operators)})",
                    "error",
                    0.3,
                )
            return None

        result = self._reduce(list(numbers), list(operators), trace)
        answer, steps = result
        evaluation = Evaluation(answer, steps, parsed.normalised, parsed.warnings)
        if trace is not None and not evaluation.failed:
            trace.emit(f"Final result: {format_number(answer)}", "mathematical", 0.95)
        return evaluation

    def _reduce(
        self,
        numbers: list[Number],
        operators: list[str],
        trace: Optional[ThoughtTrace],
    ) -> tuple[Number, list[str]]:
        steps: list[str] = []

        # Multiplicative pass.
        index = 0
        while index < len(operators):
            symbol = operators[index]
            if symbol not in ("*", "/"):
                index += 1
                continue
            left, right = numbers[index], numbers[index + 1]
            if symbol == "/" and right == 0:
                if trace is not None:
                    trace.emit(DIVIDE_BY_ZERO, "error", 0.3)
                return math.nan, [DIVIDE_BY_ZERO]
            value = apply_operator(left, symbol, right)
            steps.append(self._step(left, symbol, right, value, trace))
            numbers[index : index + 2] = [value]
            del operators[index]

        # Additive pass.
        while operators:
            symbol = operators.pop(0)
            left, right = numbers[0], numbers[1]
            value = apply_operator(left, symbol, right)
            steps.append(self._step(left, symbol, right, value, trace))
            numbers[0:2] = [value]

        return numbers[0], steps

    @staticmethod
    def _step(left: Number, symbol: str, right: Number, value: Number, trace: Optional[ThoughtTrace]) -> str:
        step = f"{format_number(left)} {DISPLAY_SYMBOLS[symbol]} {format_number(right)} = {format_number(value)}"
        if trace is not None:
            trace.emit(step, "mathematical", 0.9)
        return step

"""Text processing helpers used throughout the Cognitive Resolution package."""

from __future__ import annotations

import math
import re
from typing import List, Optional, Union

_WORD_RE = re.compile(r"[\w']+")


def normalise_text(value: str) -> str:
    """Normalise text by lowercasing and collapsing whitespace."""
    collapsed = " ".join(value.strip().split())
    return collapsed.lower()


def simple_tokenize(value: str) -> List[str]:
    """Tokenise text using a simple regex-based word splitter."""
    if not value:
        return []
    return _WORD_RE.findall(normalise_text(value))


def format_number(value: Union[int, float]) -> str:
    """Render ``value`` without a trailing ``.0`` when it is integral."""
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return f"{value:.10g}"
    return str(value)


def json_number(value: Optional[Union[int, float]]) -> Optional[Union[int, float, str]]:
    """Return ``value`` unchanged unless it is non-finite, which JSON cannot hold."""
    if isinstance(value, float) and not math.isfinite(value):
        return format_number(value)
    return value

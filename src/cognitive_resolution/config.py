"""Configuration helpers for Cognitive Resolution."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional, cast

import yaml

from .utils.io import load_yaml_or_json, save_json

MAX_ITERATIONS = 5


def _check_unit_interval(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        msg = f"{name} must lie in [0, 1], got {value!r}"
        raise ValueError(msg)


@dataclass
class ClassifierConfig:
    """Confidence assigned to each spark category."""

    mathematical_confidence: float = 0.9
    personal_confidence: float = 0.8
    inquiry_confidence: float = 0.7
    conversational_confidence: float = 0.5

    def __post_init__(self) -> None:
        for name, value in asdict(self).items():
            _check_unit_interval(name, value)


@dataclass
class ReasoningConfig:
    """Configuration for the iterative reasoning loop."""

    max_iterations: int = MAX_ITERATIONS
    early_exit_threshold: float = 0.9

    def __post_init__(self) -> None:
        if not 1 <= self.max_iterations <= MAX_ITERATIONS:
            msg = f"max_iterations must be between 1 and {MAX_ITERATIONS}, got {self.max_iterations!r}"
            raise ValueError(msg)
        _check_unit_interval("early_exit_threshold", self.early_exit_threshold)


@dataclass
class KnowledgeConfig:
    """Configuration for the knowledge store bootstrap and ranking."""

    seed_path: Optional[Path] = None
    top_k: int = 5

    def __post_init__(self) -> None:
        if self.seed_path is not None:
            self.seed_path = Path(self.seed_path)
        if self.top_k < 1:
            raise ValueError("top_k must be positive")


@dataclass
class SynthesisConfig:
    """Configuration for resolution synthesis."""

    fallback_confidence: float = 0.6
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        _check_unit_interval("fallback_confidence", self.fallback_confidence)


@dataclass
class VerificationConfig:
    """Configuration for the self-verification loop."""

    tolerance: float = 1e-3
    verify_nary: bool = True

    def __post_init__(self) -> None:
        if self.tolerance <= 0:
            raise ValueError("tolerance must be positive")


@dataclass
class PipelineConfig:
    """Top-level configuration for the cognitive resolution pipeline."""

    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    reasoning: ReasoningConfig = field(default_factory=ReasoningConfig)
    knowledge: KnowledgeConfig = field(default_factory=KnowledgeConfig)
    synthesis: SynthesisConfig = field(default_factory=SynthesisConfig)
    verification: VerificationConfig = field(default_factory=VerificationConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PipelineConfig:
        return cls(
            classifier=ClassifierConfig(**data.get("classifier", {})),
            reasoning=ReasoningConfig(**data.get("reasoning", {})),
            knowledge=KnowledgeConfig(**data.get("knowledge", {})),
            synthesis=SynthesisConfig(**data.get("synthesis", {})),
            verification=VerificationConfig(**data.get("verification", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        seed_path = data["knowledge"]["seed_path"]
        data["knowledge"]["seed_path"] = None if seed_path is None else str(seed_path)
        return data

    def save(self, path: Path) -> None:
        """Write the configuration as YAML or JSON depending on the suffix."""
        path = Path(path)
        if path.suffix.lower() in {".yaml", ".yml"}:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf8") as handle:
                yaml.safe_dump(self.to_dict(), handle, sort_keys=False)
            return
        save_json(path, self.to_dict())


def _load_mapping(path: Path) -> dict[str, Any]:
    loaded = load_yaml_or_json(path)
    if loaded is None:
        return {}
    if isinstance(loaded, Mapping):
        return cast(dict[str, Any], dict(loaded))
    msg = f"Expected mapping at root of configuration file {path}"
    raise TypeError(msg)


def _merge_dict(base: dict[str, Any], overrides: Iterable[Mapping[str, Any]]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for override in overrides:
        for key, value in override.items():
            existing = result.get(key)
            if isinstance(value, Mapping) and isinstance(existing, dict):
                result[key] = _merge_dict(cast(dict[str, Any], existing), [value])
            else:
                result[key] = value
    return result


def load_config(
    path: Optional[Path] = None,
    overrides: Optional[Iterable[Mapping[str, Any]]] = None,
) -> PipelineConfig:
    """Load configuration from disk and merge overrides."""

    overrides = list(overrides or [])
    base: dict[str, Any] = {} if path is None else _load_mapping(Path(path))
    merged = _merge_dict(base, overrides)
    return PipelineConfig.from_dict(merged)

"""Cognitive Resolution package."""

from .classifier import Category, InputClassifier, InputSpark, SparkFeatures
from .config import PipelineConfig, load_config
from .evaluator import Evaluation, ExpressionEvaluator
from .knowledge import KnowledgeEntry, KnowledgeHit, KnowledgeStore, load_default_store
from .memory import FactSink, FactSuggestion, InMemoryFactStore, PersonalFactsView
from .pipeline import CognitivePipeline, PipelineResponse
from .reasoning import IterationRecord, IterationResult, IterativeReasoningEngine
from .synthesis import Resolution, ResolutionSynthesizer
from .trace import ThoughtEvent, ThoughtTrace
from .verification import ResolutionVerifier

__all__ = [
    "Category",
    "CognitivePipeline",
    "Evaluation",
    "ExpressionEvaluator",
    "FactSink",
    "FactSuggestion",
    "InMemoryFactStore",
    "InputClassifier",
    "InputSpark",
    "IterationRecord",
    "IterationResult",
    "IterativeReasoningEngine",
    "KnowledgeEntry",
    "KnowledgeHit",
    "KnowledgeStore",
    "PersonalFactsView",
    "PipelineConfig",
    "PipelineResponse",
    "Resolution",
    "ResolutionSynthesizer",
    "ResolutionVerifier",
    "SparkFeatures",
    "ThoughtEvent",
    "ThoughtTrace",
    "load_config",
    "load_default_store",
]

__version__ = "0.1.0"

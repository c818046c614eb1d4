"""Combolens - keyword combination engine for App Store metadata.

Generates every plausible multi-word search phrase from an app's title and
subtitle and classifies how strongly each one can rank.
"""

__version__ = "0.1.0"

from .engine.analyzer import AnalysisResult, Analyzer, analyze_combinations
from .engine.classifier import StrengthTier
from .engine.generator import GenerationOptions

__all__ = [
    "__version__",
    "AnalysisResult",
    "Analyzer",
    "GenerationOptions",
    "StrengthTier",
    "analyze_combinations",
]

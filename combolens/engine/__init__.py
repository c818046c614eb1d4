"""Combination generation, classification and ranking engine."""

from .analyzer import Analyzer
from .classifier import StrengthClassifier
from .generator import CombinationGenerator
from .ranker import ValueRanker

__all__ = ["Analyzer", "CombinationGenerator", "StrengthClassifier", "ValueRanker"]

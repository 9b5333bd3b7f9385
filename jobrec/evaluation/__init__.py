"""Evaluation package"""
from .evaluator import HoldoutSplitter, RecommendationEvaluator
from .metrics import MetricsCalculator

__all__ = ["HoldoutSplitter", "RecommendationEvaluator", "MetricsCalculator"]

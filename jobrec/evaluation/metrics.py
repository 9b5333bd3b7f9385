"""Ranking metrics for recommendation lists"""
from typing import List, Set
import numpy as np

class MetricsCalculator:
    """Calculate recommendation metrics"""

    @staticmethod
    def precision_at_k(recommended: List[str], relevant: Set[str], k: int) -> float:
        """Share of the top-k slots holding a relevant job"""
        if not recommended or k <= 0:
            return 0.0
        hits = sum(1 for job in recommended[:k] if job in relevant)
        return hits / k

    @staticmethod
    def recall_at_k(recommended: List[str], relevant: Set[str], k: int) -> float:
        """Share of relevant jobs found in the top k"""
        if not relevant:
            return 0.0
        hits = sum(1 for job in recommended[:k] if job in relevant)
        return hits / len(relevant)

    @staticmethod
    def hit_rate_at_k(recommended: List[str], relevant: Set[str], k: int) -> float:
        return 1.0 if any(job in relevant for job in recommended[:k]) else 0.0

    @staticmethod
    def f1_score(precision: float, recall: float) -> float:
        if precision + recall == 0:
            return 0.0
        return 2 * (precision * recall) / (precision + recall)

    @staticmethod
    def mean_reciprocal_rank(recommended: List[str], relevant: Set[str]) -> float:
        """Reciprocal rank of the first relevant job, 0 if none"""
        for rank, job in enumerate(recommended, 1):
            if job in relevant:
                return 1.0 / rank
        return 0.0

    @staticmethod
    def ndcg_at_k(recommended: List[str], relevant: Set[str], k: int) -> float:
        """Normalized Discounted Cumulative Gain@K with binary relevance"""
        gains = np.array([1.0 if job in relevant else 0.0 for job in recommended[:k]])
        discounts = 1.0 / np.log2(np.arange(2, len(gains) + 2))
        dcg = float(np.sum(gains * discounts)) if len(gains) else 0.0
        ideal = min(k, len(relevant))
        idcg = float(np.sum(1.0 / np.log2(np.arange(2, ideal + 2))))
        return dcg / idcg if idcg > 0 else 0.0

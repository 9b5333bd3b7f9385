"""Hybrid blending of content-based and collaborative results"""
from typing import Dict, Iterable, List, Optional

from .models import RecommendationResult, ScoredJob


CONTENT_WEIGHT = 0.6
COLLABORATIVE_WEIGHT = 0.4
REASON_THRESHOLD = 0.3

CONTENT_REASON = "Matches your skills and preferences"
COLLABORATIVE_REASON = "Popular among similar users"


def recommendation_reasons(
    content_score: float,
    collaborative_score: float,
    threshold: float = REASON_THRESHOLD,
) -> List[str]:
    reasons = []
    if content_score > threshold:
        reasons.append(CONTENT_REASON)
    if collaborative_score > threshold:
        reasons.append(COLLABORATIVE_REASON)
    return reasons


def blend(
    content_results: Iterable[ScoredJob],
    collaborative_results: Iterable[ScoredJob],
    limit: int,
    content_weight: float = CONTENT_WEIGHT,
    collaborative_weight: float = COLLABORATIVE_WEIGHT,
    reason_threshold: Optional[float] = None,
) -> List[RecommendationResult]:
    """
    Merge both result lists by job id and rank by the weighted final score.

    Ties keep insertion order (content results first, then collaborative-only
    jobs) since ``sorted`` is stable.
    """
    threshold = REASON_THRESHOLD if reason_threshold is None else reason_threshold
    combined: Dict[str, Dict[str, float]] = {}

    for job_id, score in content_results:
        combined[job_id] = {
            "content": score,
            "collaborative": 0.0,
            "final": score * content_weight,
        }

    for job_id, score in collaborative_results:
        entry = combined.get(job_id)
        if entry is not None:
            entry["collaborative"] = score
            entry["final"] = entry["content"] * content_weight + score * collaborative_weight
        else:
            combined[job_id] = {
                "content": 0.0,
                "collaborative": score,
                "final": score * collaborative_weight,
            }

    ranked = sorted(combined.items(), key=lambda item: item[1]["final"], reverse=True)

    return [
        RecommendationResult(
            job_id=job_id,
            content_score=entry["content"],
            collaborative_score=entry["collaborative"],
            final_score=entry["final"],
            reasons=recommendation_reasons(entry["content"], entry["collaborative"], threshold),
        )
        for job_id, entry in ranked[:max(limit, 0)]
    ]

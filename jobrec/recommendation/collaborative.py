"""Collaborative filtering over the user-item matrix"""
from typing import Container, Dict, List, Optional

from .models import ScoredJob, UserItemMatrix
from .similarity import SimilarityMatrix


DEFAULT_SIMILARITY_THRESHOLD = 0.1


def score_collaborative(
    target_user_id: str,
    matrix: UserItemMatrix,
    user_similarities: SimilarityMatrix,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> Dict[str, float]:
    """
    Neighbourhood-weighted sum of similar users' interactions.

    Neighbours with similarity at or above ``threshold`` contribute
    ``similarity * weight`` for every job the target has not touched. Scores
    are summed, not averaged, so jobs endorsed by many peers rise above jobs
    endorsed by a single close peer.
    """
    own_items = matrix.get(target_user_id)
    if own_items is None:
        return {}

    scores: Dict[str, float] = {}
    for other_user_id, similarity in user_similarities.neighbors(target_user_id):
        if similarity < threshold:
            continue
        other_items = matrix.get(other_user_id)
        if not other_items:
            continue
        for job_id, weight in other_items.items():
            if job_id in own_items:
                continue
            scores[job_id] = scores.get(job_id, 0.0) + similarity * weight
    return scores


def top_collaborative(
    scores: Dict[str, float],
    active_jobs: Optional[Container[str]] = None,
    limit: Optional[int] = None,
) -> List[ScoredJob]:
    """Sort collaborative scores, dropping jobs that are no longer active"""
    ranked = [
        (job_id, score)
        for job_id, score in scores.items()
        if active_jobs is None or job_id in active_jobs
    ]
    ranked.sort(key=lambda pair: pair[1], reverse=True)
    return ranked if limit is None else ranked[:limit]

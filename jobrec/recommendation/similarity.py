"""Similarity measures between skills, jobs and users"""
from collections import defaultdict
from itertools import combinations
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .models import EXPERIENCE_LEVELS, JobPosting, UserItemMatrix
from ..utils import logger


JOB_SIMILARITY_WEIGHTS: Dict[str, float] = {
    "skills": 0.40,
    "location": 0.20,
    "job_type": 0.15,
    "experience": 0.15,
    "work_mode": 0.10,
}


def _normalize_skills(skills: Optional[Iterable[str]]) -> set:
    return {skill.lower() for skill in skills or () if skill}


def skill_similarity(skills_a: Optional[Iterable[str]], skills_b: Optional[Iterable[str]]) -> float:
    """Case-insensitive Jaccard index; 0.0 when either side is empty"""
    set_a = _normalize_skills(skills_a)
    set_b = _normalize_skills(skills_b)
    if not set_a or not set_b:
        return 0.0
    return len(set_a & set_b) / len(set_a | set_b)


def experience_closeness(job_a: JobPosting, job_b: JobPosting) -> float:
    distance = abs(job_a.experience_level.rank - job_b.experience_level.rank)
    return 1.0 - distance / len(EXPERIENCE_LEVELS)


def job_similarity(job_a: JobPosting, job_b: JobPosting) -> float:
    """
    Weighted blend of skill overlap and exact attribute matches.

    Skills always count. Location, job type, experience level and work mode
    count only when both postings carry the field, and the sum is divided by
    the weights that were applied, so a missing field neither helps nor hurts.
    """
    weights = JOB_SIMILARITY_WEIGHTS
    similarity = skill_similarity(job_a.skills, job_b.skills) * weights["skills"]
    applied = weights["skills"]

    if job_a.location is not None and job_b.location is not None:
        similarity += weights["location"] if job_a.location == job_b.location else 0.0
        applied += weights["location"]

    if job_a.job_type is not None and job_b.job_type is not None:
        similarity += weights["job_type"] if job_a.job_type == job_b.job_type else 0.0
        applied += weights["job_type"]

    if job_a.experience_level is not None and job_b.experience_level is not None:
        similarity += experience_closeness(job_a, job_b) * weights["experience"]
        applied += weights["experience"]

    if job_a.work_mode is not None and job_b.work_mode is not None:
        similarity += weights["work_mode"] if job_a.work_mode == job_b.work_mode else 0.0
        applied += weights["work_mode"]

    return min(similarity / applied, 1.0)


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """Cosine of two equal-length vectors; 0.0 for empty or zero vectors"""
    if len(vec_a) == 0 or len(vec_a) != len(vec_b):
        return 0.0
    a = np.asarray(vec_a, dtype=float)
    b = np.asarray(vec_b, dtype=float)
    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return float(min(max(np.dot(a, b) / (norm_a * norm_b), 0.0), 1.0))


def user_similarity(items_a: Optional[Dict[str, float]], items_b: Optional[Dict[str, float]]) -> float:
    """Cosine similarity restricted to the jobs both users interacted with"""
    if not items_a or not items_b:
        return 0.0
    common = [job_id for job_id in items_a if job_id in items_b]
    if not common:
        return 0.0
    return cosine_similarity(
        [items_a[job_id] for job_id in common],
        [items_b[job_id] for job_id in common],
    )


class SimilarityMatrix:
    """
    Symmetric pairwise similarity store.

    Only off-diagonal pairs are kept; ``get`` returns 0.0 for pairs that were
    never set (including ``get(a, a)``).
    """

    def __init__(self):
        self._rows: Dict[str, Dict[str, float]] = {}

    def set(self, key_a: str, key_b: str, value: float) -> None:
        if key_a == key_b:
            return
        self._rows.setdefault(key_a, {})[key_b] = value
        self._rows.setdefault(key_b, {})[key_a] = value

    def get(self, key_a: str, key_b: str) -> float:
        return self._rows.get(key_a, {}).get(key_b, 0.0)

    def neighbors(self, key: str) -> Iterator[Tuple[str, float]]:
        return iter(self._rows.get(key, {}).items())

    def top_neighbors(self, key: str, limit: int) -> List[Tuple[str, float]]:
        ranked = sorted(self.neighbors(key), key=lambda pair: pair[1], reverse=True)
        return ranked[:limit]

    def keys(self) -> List[str]:
        return list(self._rows)

    def __contains__(self, key: str) -> bool:
        return key in self._rows

    def __len__(self) -> int:
        """Number of distinct unordered pairs"""
        return sum(len(row) for row in self._rows.values()) // 2


def build_item_similarity(jobs: Iterable[JobPosting]) -> SimilarityMatrix:
    """Pairwise job similarity over all active postings"""
    active = [job for job in jobs if job.is_active]
    matrix = SimilarityMatrix()
    for job_a, job_b in combinations(active, 2):
        matrix.set(job_a.id, job_b.id, job_similarity(job_a, job_b))
    logger.info(f"Built item similarity for {len(active)} jobs ({len(matrix)} pairs)")
    return matrix


def build_user_similarity(matrix: UserItemMatrix) -> SimilarityMatrix:
    """
    Pairwise user cosine similarity.

    Users with no job in common have similarity 0 by definition, so only
    pairs that co-occur on at least one job are computed and stored.
    """
    users_by_job: Dict[str, List[str]] = defaultdict(list)
    for user_id, items in matrix.items():
        for job_id in items:
            users_by_job[job_id].append(user_id)

    pairs = set()
    for users in users_by_job.values():
        for user_a, user_b in combinations(users, 2):
            pairs.add((user_a, user_b) if user_a < user_b else (user_b, user_a))

    similarities = SimilarityMatrix()
    for user_a, user_b in pairs:
        value = user_similarity(matrix[user_a], matrix[user_b])
        if value > 0.0:
            similarities.set(user_a, user_b, value)
    logger.info(f"Built user similarity for {len(matrix)} users ({len(similarities)} non-zero pairs)")
    return similarities

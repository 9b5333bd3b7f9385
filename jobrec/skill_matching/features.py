"""Feature vectors for the learned skill-matching model"""
import math
import re
from collections import Counter
from typing import List, Sequence

import numpy as np


# Input width of the trained model; changing it requires retraining.
VECTOR_SIZE = 100

CANDIDATE_SKILL_NORM = 20.0
JOB_SKILL_NORM = 20.0
MATCH_COUNT_NORM = 10.0

# ASCII word characters plus Cyrillic; other letters (accents, CJK) act as separators
_SPLIT_RE = re.compile(r"[^a-z0-9_а-я]+")


def tokenize(text: str) -> List[str]:
    """Lowercase and split on anything outside [a-z0-9_] and Cyrillic letters"""
    return [token for token in _SPLIT_RE.split((text or "").lower()) if token]


def fuzzy_skill_matches(candidate_skills: Sequence[str], job_skills: Sequence[str]) -> List[str]:
    """
    Candidate skills that contain, or are contained in, some job skill.

    Substring matching is deliberately loose: "java" matches "javascript".
    """
    job_lower = [skill.lower() for skill in job_skills if skill]
    matches = []
    for skill in candidate_skills:
        if not skill:
            continue
        lowered = skill.lower()
        if any(lowered in job_skill or job_skill in lowered for job_skill in job_lower):
            matches.append(skill)
    return matches


def text_similarity(text_a: str, text_b: str) -> float:
    """
    Two-document TF-IDF overlap, capped at 1.0.

    Document 0 is ``text_a``, document 1 is ``text_b``. Term frequency is the
    raw count and idf is ``1 + ln(N / (1 + df))``. The result is the sum over
    all terms of the product of the two tf-idf weights, so only shared terms
    contribute.
    """
    counts_a = Counter(tokenize(text_a))
    counts_b = Counter(tokenize(text_b))
    if not counts_a or not counts_b:
        return 0.0

    documents = (counts_a, counts_b)
    similarity = 0.0
    for term in set(counts_a) | set(counts_b):
        doc_freq = sum(1 for doc in documents if term in doc)
        idf = 1.0 + math.log(len(documents) / (1 + doc_freq))
        similarity += (counts_a[term] * idf) * (counts_b[term] * idf)
    return min(similarity, 1.0)


def build_feature_vector(
    candidate_skills: Sequence[str],
    job_skills: Sequence[str],
    job_title: str = "",
    job_description: str = "",
    size: int = VECTOR_SIZE,
) -> np.ndarray:
    """Encode a candidate/job pair as a fixed-width vector"""
    candidate_skills = list(candidate_skills or [])
    job_skills = list(job_skills or [])
    match_count = len(fuzzy_skill_matches(candidate_skills, job_skills))
    skills_text = " ".join(candidate_skills)

    features = [
        match_count / max(len(job_skills), 1),
        len(candidate_skills) / CANDIDATE_SKILL_NORM,
        len(job_skills) / JOB_SKILL_NORM,
        text_similarity(skills_text, job_title),
        text_similarity(skills_text, job_description),
        match_count / MATCH_COUNT_NORM,
    ]

    vector = np.zeros(size, dtype=float)
    head = features[:size]
    vector[:len(head)] = head
    return vector


def build_feature_matrix(candidate_skills: Sequence[str], jobs) -> np.ndarray:
    """Stack one feature vector per job posting"""
    rows = [
        build_feature_vector(candidate_skills, job.skills, job.title, job.description)
        for job in jobs
    ]
    if not rows:
        return np.zeros((0, VECTOR_SIZE), dtype=float)
    return np.vstack(rows)

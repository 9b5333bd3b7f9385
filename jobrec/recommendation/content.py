"""Content-based scoring from a candidate's stated profile"""
from typing import Container, Iterable, List, Optional

from .models import CandidateProfile, JobPosting, ScoredJob, WorkMode
from .similarity import skill_similarity


SKILL_WEIGHT = 0.50
LOCATION_BONUS = 0.20
JOB_TYPE_BONUS = 0.15
WORK_MODE_BONUS = 0.15


def content_score(candidate: CandidateProfile, job: JobPosting) -> float:
    """Score in [0, 1] from skills overlap plus preference bonuses"""
    preferences = candidate.preferences
    score = skill_similarity(candidate.skills, job.skills) * SKILL_WEIGHT

    if job.location is not None and job.location in preferences.locations:
        score += LOCATION_BONUS

    if job.job_type is not None and job.job_type in preferences.job_types:
        score += JOB_TYPE_BONUS

    if preferences.work_mode is not None and (
        preferences.work_mode == WorkMode.ANY or preferences.work_mode == job.work_mode
    ):
        score += WORK_MODE_BONUS

    return score


def score_content(
    candidate: CandidateProfile,
    jobs: Iterable[JobPosting],
    exclude: Optional[Container[str]] = None,
    limit: Optional[int] = None,
) -> List[ScoredJob]:
    """Rank active jobs for a candidate, skipping job ids in ``exclude``"""
    exclude = exclude or ()
    scored = [
        (job.id, content_score(candidate, job))
        for job in jobs
        if job.is_active and job.id not in exclude
    ]
    scored.sort(key=lambda pair: pair[1], reverse=True)
    return scored if limit is None else scored[:limit]

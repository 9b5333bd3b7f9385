"""Shared pytest fixtures for jobrec tests."""

from datetime import datetime, timezone

import pytest

from jobrec.recommendation.database import InMemoryInteractionStore
from jobrec.recommendation.engine import EngineSettings, RecommendationEngine
from jobrec.recommendation.models import (
    ApplicationRecord,
    CandidatePreferences,
    CandidateProfile,
    ExperienceLevel,
    JobPosting,
    JobType,
    SavedJobs,
    WorkMode,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def make_job(job_id: str, skills, **overrides) -> JobPosting:
    fields = {
        "id": job_id,
        "title": f"Job {job_id}",
        "description": "",
        "skills": list(skills),
        "location": "Berlin",
        "job_type": JobType.FULL_TIME,
        "work_mode": WorkMode.ONSITE,
        "experience_level": ExperienceLevel.MID,
    }
    fields.update(overrides)
    return JobPosting(**fields)


def make_candidate(candidate_id: str, skills=(), **preferences) -> CandidateProfile:
    return CandidateProfile(
        id=candidate_id,
        skills=list(skills),
        preferences=CandidatePreferences(**preferences),
    )


@pytest.fixture()
def settings() -> EngineSettings:
    return EngineSettings()


@pytest.fixture()
def clock():
    """Mutable clock: set ``clock.now`` to move time"""

    class Clock:
        now = NOW

        def __call__(self):
            return self.now

    return Clock()


@pytest.fixture()
def job_a() -> JobPosting:
    return make_job("jobA", ["python", "sql", "aws"])


@pytest.fixture()
def job_b() -> JobPosting:
    return make_job("jobB", ["java"])


@pytest.fixture()
def python_candidate() -> CandidateProfile:
    return make_candidate("cand_py", ["python", "sql"])


@pytest.fixture()
def collaborative_store() -> InMemoryInteractionStore:
    """U1 hired at jobX; U2 shortlisted at jobX and interviewing at jobY"""
    jobs = [make_job("jobX", ["python"]), make_job("jobY", ["go"]), make_job("jobZ", ["rust"])]
    candidates = [make_candidate("U1"), make_candidate("U2"), make_candidate("U3", ["rust"])]
    applications = [
        ApplicationRecord(candidate_id="U1", job_id="jobX", status="hired", created_at=NOW),
        ApplicationRecord(candidate_id="U2", job_id="jobX", status="shortlisted", created_at=NOW),
        ApplicationRecord(candidate_id="U2", job_id="jobY", status="interview-scheduled", created_at=NOW),
    ]
    return InMemoryInteractionStore(candidates, jobs, applications, [SavedJobs(candidate_id="U3", job_ids=[])])


@pytest.fixture()
def engine(collaborative_store, settings, clock) -> RecommendationEngine:
    engine = RecommendationEngine(collaborative_store, settings=settings, clock=clock)
    yield engine
    engine.close()

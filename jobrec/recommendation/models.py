"""Recommendation models"""
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator


def as_utc(value: datetime) -> datetime:
    """Aware UTC datetime; naive values are taken to be UTC already"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class WorkMode(str, Enum):
    REMOTE = "remote"
    ONSITE = "onsite"
    HYBRID = "hybrid"
    ANY = "any"


class JobType(str, Enum):
    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"
    FREELANCE = "freelance"


class ExperienceLevel(str, Enum):
    """Ordered seniority ladder, lowest first"""
    ENTRY = "entry"
    JUNIOR = "junior"
    MID = "mid"
    SENIOR = "senior"
    LEAD = "lead"
    EXECUTIVE = "executive"

    @property
    def rank(self) -> int:
        return EXPERIENCE_LEVELS.index(self)


EXPERIENCE_LEVELS: List[ExperienceLevel] = list(ExperienceLevel)


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    SHORTLISTED = "shortlisted"
    INTERVIEW_SCHEDULED = "interview-scheduled"
    REJECTED = "rejected"
    HIRED = "hired"


class InteractionType(str, Enum):
    VIEW = "view"
    SAVE = "save"
    APPLY = "apply"
    SHORTLISTED = "shortlisted"
    HIRED = "hired"


class CandidatePreferences(BaseModel):
    """What a candidate says they are looking for"""
    model_config = ConfigDict(frozen=True)

    locations: Set[str] = Field(default_factory=set, description="Preferred job locations")
    job_types: Set[JobType] = Field(default_factory=set, description="Preferred job types")
    work_mode: Optional[WorkMode] = Field(None, description="Preferred work mode, 'any' accepts all")


class CandidateProfile(BaseModel):
    """Read-only snapshot of a job-seeking user"""
    model_config = ConfigDict(frozen=True)

    id: str
    skills: List[str] = Field(default_factory=list, description="Skills in profile order")
    preferences: CandidatePreferences = Field(default_factory=CandidatePreferences)


class JobPosting(BaseModel):
    """Read-only snapshot of a job posting"""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    description: str = ""
    skills: List[str] = Field(default_factory=list, description="Required skills")
    location: Optional[str] = None
    job_type: Optional[JobType] = None
    work_mode: Optional[WorkMode] = None
    experience_level: Optional[ExperienceLevel] = None
    is_active: bool = True


class ApplicationRecord(BaseModel):
    """Current state of one application"""
    model_config = ConfigDict(frozen=True)

    candidate_id: str
    job_id: str
    status: ApplicationStatus = ApplicationStatus.PENDING
    created_at: Optional[datetime] = None

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value) if value is not None else None


class SavedJobs(BaseModel):
    """Jobs a candidate bookmarked"""
    model_config = ConfigDict(frozen=True)

    candidate_id: str
    job_ids: List[str] = Field(default_factory=list)


class InteractionRecord(BaseModel):
    """Collapsed association strength for one (candidate, job) pair"""
    candidate_id: str
    job_id: str
    weight: float = Field(..., ge=0.0, le=5.0)


class InteractionSnapshot(BaseModel):
    """Everything one recommendation cycle reads from the store"""
    candidates: List[CandidateProfile] = Field(default_factory=list)
    jobs: List[JobPosting] = Field(default_factory=list)
    applications: List[ApplicationRecord] = Field(default_factory=list)
    saved_jobs: List[SavedJobs] = Field(default_factory=list)


class RecommendationResult(BaseModel):
    """Single blended recommendation"""
    job_id: str
    content_score: float = 0.0
    collaborative_score: float = 0.0
    final_score: float = 0.0
    reasons: List[str] = Field(default_factory=list, description="Human-readable reasons")
    job: Optional[JobPosting] = None


class SkillMatchRecommendation(BaseModel):
    """Recommendation produced by the learned skill-matching model"""
    job_id: str
    match_score: float = Field(..., ge=0.0, le=1.0)
    reasons: List[str] = Field(default_factory=list)
    job: Optional[JobPosting] = None


class TrendingJob(BaseModel):
    """Job ranked by recent application activity"""
    job_id: str
    score: float
    interaction_count: int
    job: Optional[JobPosting] = None


class EngineStatus(BaseModel):
    """Readiness report for the recommendation engine"""
    initialized: bool
    built_at: Optional[datetime] = None
    candidates: int = 0
    jobs: int = 0
    pending_updates: int = 0
    last_error: Optional[str] = None


# candidate_id -> job_id -> weight
UserItemMatrix = Dict[str, Dict[str, float]]

# (job_id, score) pairs as produced by the scorers
ScoredJob = Tuple[str, float]

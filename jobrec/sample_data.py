"""Synthetic job-board data for demos, seeding and evaluation"""
import random
from datetime import datetime, timedelta, timezone
from typing import List

from .recommendation.models import (
    ApplicationRecord,
    ApplicationStatus,
    CandidatePreferences,
    CandidateProfile,
    ExperienceLevel,
    InteractionSnapshot,
    JobPosting,
    JobType,
    SavedJobs,
    WorkMode,
)


JOB_TEMPLATES = [
    {
        "title": "Senior Machine Learning Engineer",
        "description": "Build and deploy ML models for production systems. Work with large datasets and Python.",
        "skills": ["Python", "TensorFlow", "PyTorch", "AWS", "Docker"],
        "experience_level": ExperienceLevel.SENIOR,
    },
    {
        "title": "Full Stack Developer",
        "description": "Develop modern web applications using React and Node.js. Build RESTful APIs.",
        "skills": ["JavaScript", "React", "Node.js", "MongoDB", "Git"],
        "experience_level": ExperienceLevel.MID,
    },
    {
        "title": "Data Scientist",
        "description": "Analyze large datasets with SQL and Python and build predictive models.",
        "skills": ["Python", "Pandas", "SQL", "Machine Learning", "Statistics"],
        "experience_level": ExperienceLevel.JUNIOR,
    },
    {
        "title": "DevOps Engineer",
        "description": "Manage cloud infrastructure and CI/CD pipelines on Kubernetes.",
        "skills": ["AWS", "Kubernetes", "Docker", "Terraform", "Jenkins"],
        "experience_level": ExperienceLevel.MID,
    },
    {
        "title": "Backend Developer",
        "description": "Design and implement scalable backend services with Java and PostgreSQL.",
        "skills": ["Java", "Spring Boot", "PostgreSQL", "Redis", "REST APIs"],
        "experience_level": ExperienceLevel.ENTRY,
    },
]

LOCATIONS = ["Berlin", "Munich", "London", "Remote"]
JOB_TYPES = list(JobType)
WORK_MODES = [WorkMode.REMOTE, WorkMode.ONSITE, WorkMode.HYBRID]
STATUSES = list(ApplicationStatus)


def generate_sample_jobs(num_jobs: int = 10, seed: int = 7) -> List[JobPosting]:
    """Generate sample job postings cycling through the templates"""
    rng = random.Random(seed)
    jobs = []
    for i in range(num_jobs):
        template = JOB_TEMPLATES[i % len(JOB_TEMPLATES)]
        jobs.append(JobPosting(
            id=f"job_{str(i + 1).zfill(3)}",
            title=template["title"],
            description=template["description"],
            skills=template["skills"],
            location=rng.choice(LOCATIONS),
            job_type=rng.choice(JOB_TYPES),
            work_mode=rng.choice(WORK_MODES),
            experience_level=template["experience_level"],
        ))
    return jobs


def generate_sample_snapshot(
    num_candidates: int = 20,
    num_jobs: int = 25,
    applications_per_candidate: int = 3,
    seed: int = 7,
) -> InteractionSnapshot:
    """
    Candidates follow one template profile each and mostly apply to jobs of
    that template, which gives collaborative filtering a signal to find.
    """
    rng = random.Random(seed)
    jobs = generate_sample_jobs(num_jobs, seed)
    now = datetime.now(timezone.utc)

    candidates, applications, saved_jobs = [], [], []
    for i in range(num_candidates):
        profile_type = i % len(JOB_TEMPLATES)
        template = JOB_TEMPLATES[profile_type]
        candidate_id = f"candidate_{i}"
        candidates.append(CandidateProfile(
            id=candidate_id,
            skills=rng.sample(template["skills"], k=3),
            preferences=CandidatePreferences(
                locations={rng.choice(LOCATIONS)},
                job_types={rng.choice(JOB_TYPES)},
                work_mode=rng.choice(list(WorkMode)),
            ),
        ))

        matching_jobs = [job for j, job in enumerate(jobs) if j % len(JOB_TEMPLATES) == profile_type]
        picks = rng.sample(matching_jobs, k=min(applications_per_candidate, len(matching_jobs)))
        for job in picks:
            applications.append(ApplicationRecord(
                candidate_id=candidate_id,
                job_id=job.id,
                status=rng.choice(STATUSES),
                created_at=now - timedelta(days=rng.randint(0, 20)),
            ))

        saved_jobs.append(SavedJobs(candidate_id=candidate_id, job_ids=[rng.choice(jobs).id]))

    return InteractionSnapshot(
        candidates=candidates,
        jobs=jobs,
        applications=applications,
        saved_jobs=saved_jobs,
    )

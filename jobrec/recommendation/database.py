"""Interaction store: bulk reads of candidates, jobs and interactions"""
import json
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Protocol, TypeVar

from pydantic import ValidationError
from sqlalchemy import create_engine, text, pool
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .errors import StoreError
from .models import (
    ApplicationRecord,
    CandidatePreferences,
    CandidateProfile,
    InteractionSnapshot,
    JobPosting,
    SavedJobs,
    as_utc,
)
from ..utils import config, logger


T = TypeVar("T")


class InteractionStore(Protocol):
    """Read-only data supplier for the recommendation engine"""

    def fetch_snapshot(self) -> InteractionSnapshot: ...

    def get_candidate(self, candidate_id: str) -> Optional[CandidateProfile]: ...

    def get_active_jobs(self) -> List[JobPosting]: ...

    def get_recent_applications(self, since: datetime) -> List[ApplicationRecord]: ...


class InMemoryInteractionStore:
    """Interaction store backed by plain lists"""

    def __init__(
        self,
        candidates: Iterable[CandidateProfile] = (),
        jobs: Iterable[JobPosting] = (),
        applications: Iterable[ApplicationRecord] = (),
        saved_jobs: Iterable[SavedJobs] = (),
    ):
        self.candidates = list(candidates)
        self.jobs = list(jobs)
        self.applications = list(applications)
        self.saved_jobs = list(saved_jobs)

    @classmethod
    def from_snapshot(cls, snapshot: InteractionSnapshot) -> "InMemoryInteractionStore":
        return cls(snapshot.candidates, snapshot.jobs, snapshot.applications, snapshot.saved_jobs)

    def fetch_snapshot(self) -> InteractionSnapshot:
        return InteractionSnapshot(
            candidates=list(self.candidates),
            jobs=self.get_active_jobs(),
            applications=list(self.applications),
            saved_jobs=list(self.saved_jobs),
        )

    def get_candidate(self, candidate_id: str) -> Optional[CandidateProfile]:
        return next((c for c in self.candidates if c.id == candidate_id), None)

    def get_active_jobs(self) -> List[JobPosting]:
        return [job for job in self.jobs if job.is_active]

    def get_recent_applications(self, since: datetime) -> List[ApplicationRecord]:
        since = as_utc(since)
        return [
            app for app in self.applications
            if app.created_at is not None and app.created_at >= since
        ]


SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS candidates (
        id VARCHAR(64) PRIMARY KEY,
        skills TEXT NOT NULL DEFAULT '[]',
        preferred_locations TEXT NOT NULL DEFAULT '[]',
        preferred_job_types TEXT NOT NULL DEFAULT '[]',
        work_mode VARCHAR(16)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS jobs (
        id VARCHAR(64) PRIMARY KEY,
        title TEXT NOT NULL DEFAULT '',
        description TEXT NOT NULL DEFAULT '',
        skills TEXT NOT NULL DEFAULT '[]',
        location VARCHAR(255),
        job_type VARCHAR(32),
        work_mode VARCHAR(16),
        experience_level VARCHAR(16),
        is_active BOOLEAN NOT NULL DEFAULT TRUE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS applications (
        candidate_id VARCHAR(64) NOT NULL,
        job_id VARCHAR(64) NOT NULL,
        status VARCHAR(32) NOT NULL DEFAULT 'pending',
        created_at VARCHAR(40)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS saved_jobs (
        candidate_id VARCHAR(64) NOT NULL,
        job_id VARCHAR(64) NOT NULL,
        PRIMARY KEY (candidate_id, job_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_applications_created_at ON applications (created_at)",
]


def create_db_engine(database_url: str) -> Engine:
    """Create a pooled engine; SQLite keeps its default pool"""
    if database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)
    return create_engine(
        database_url,
        poolclass=pool.QueuePool,
        pool_size=10,
        max_overflow=5,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=False
    )


def _json_list(value) -> list:
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    parsed = json.loads(value)
    if not isinstance(parsed, list):
        raise ValueError(f"expected JSON list, got {type(parsed).__name__}")
    return parsed


def _candidate_from_row(row: Dict) -> CandidateProfile:
    return CandidateProfile(
        id=str(row["id"]),
        skills=_json_list(row["skills"]),
        preferences=CandidatePreferences(
            locations=set(_json_list(row["preferred_locations"])),
            job_types=set(_json_list(row["preferred_job_types"])),
            work_mode=row["work_mode"] or None,
        ),
    )


def _job_from_row(row: Dict) -> JobPosting:
    return JobPosting(
        id=str(row["id"]),
        title=row["title"] or "",
        description=row["description"] or "",
        skills=_json_list(row["skills"]),
        location=row["location"],
        job_type=row["job_type"] or None,
        work_mode=row["work_mode"] or None,
        experience_level=row["experience_level"] or None,
        is_active=bool(row["is_active"]),
    )


def _application_from_row(row: Dict) -> ApplicationRecord:
    return ApplicationRecord(
        candidate_id=str(row["candidate_id"]),
        job_id=str(row["job_id"]),
        status=row["status"] or "pending",
        created_at=row["created_at"] or None,
    )


class SqlInteractionStore:
    """Interaction store over a relational database"""

    def __init__(self, database_url: str = None, engine: Engine = None):
        self.engine = engine or create_db_engine(database_url or config.database_url)

    def create_schema(self):
        """Create tables if they do not exist yet"""
        with self.engine.begin() as conn:
            for statement in SCHEMA_STATEMENTS:
                conn.execute(text(statement))
        logger.info("✓ Interaction store schema ready")

    def _rows(self, conn, sql: str, **params) -> List[Dict]:
        return [dict(row) for row in conn.execute(text(sql), params).mappings()]

    def _parse_rows(self, rows: List[Dict], parse: Callable[[Dict], T], kind: str) -> List[T]:
        parsed = []
        for row in rows:
            try:
                parsed.append(parse(row))
            except (ValidationError, ValueError, TypeError) as e:
                logger.warning(f"Skipping malformed {kind} row {row.get('id', row)}: {e}")
        return parsed

    def fetch_snapshot(self) -> InteractionSnapshot:
        """Read everything a rebuild needs in four bulk queries"""
        try:
            with self.engine.connect() as conn:
                candidate_rows = self._rows(conn, "SELECT * FROM candidates ORDER BY id")
                job_rows = self._rows(conn, "SELECT * FROM jobs WHERE is_active = :active ORDER BY id", active=True)
                application_rows = self._rows(
                    conn,
                    "SELECT candidate_id, job_id, status, created_at FROM applications "
                    "ORDER BY created_at",
                )
                saved_rows = self._rows(
                    conn, "SELECT candidate_id, job_id FROM saved_jobs ORDER BY candidate_id, job_id"
                )
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to fetch interaction snapshot: {e}") from e

        saved: Dict[str, List[str]] = {}
        for row in saved_rows:
            saved.setdefault(str(row["candidate_id"]), []).append(str(row["job_id"]))

        snapshot = InteractionSnapshot(
            candidates=self._parse_rows(candidate_rows, _candidate_from_row, "candidate"),
            jobs=self._parse_rows(job_rows, _job_from_row, "job"),
            applications=self._parse_rows(application_rows, _application_from_row, "application"),
            saved_jobs=[SavedJobs(candidate_id=cid, job_ids=job_ids) for cid, job_ids in saved.items()],
        )
        logger.info(
            f"Fetched snapshot: {len(snapshot.candidates)} candidates, {len(snapshot.jobs)} active jobs, "
            f"{len(snapshot.applications)} applications"
        )
        return snapshot

    def get_candidate(self, candidate_id: str) -> Optional[CandidateProfile]:
        try:
            with self.engine.connect() as conn:
                rows = self._rows(conn, "SELECT * FROM candidates WHERE id = :id", id=candidate_id)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load candidate {candidate_id}: {e}") from e
        parsed = self._parse_rows(rows, _candidate_from_row, "candidate")
        return parsed[0] if parsed else None

    def get_active_jobs(self) -> List[JobPosting]:
        try:
            with self.engine.connect() as conn:
                rows = self._rows(conn, "SELECT * FROM jobs WHERE is_active = :active ORDER BY id", active=True)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load active jobs: {e}") from e
        return self._parse_rows(rows, _job_from_row, "job")

    def get_recent_applications(self, since: datetime) -> List[ApplicationRecord]:
        try:
            with self.engine.connect() as conn:
                rows = self._rows(
                    conn,
                    "SELECT candidate_id, job_id, status, created_at FROM applications "
                    "WHERE created_at >= :since ORDER BY created_at",
                    since=as_utc(since).isoformat(),
                )
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load recent applications: {e}") from e
        return self._parse_rows(rows, _application_from_row, "application")

    # --- Seeding helpers (scripts and tests) ---

    def add_candidate(self, candidate: CandidateProfile):
        prefs = candidate.preferences
        with self.engine.begin() as conn:
            conn.execute(
                text(
                    "INSERT INTO candidates (id, skills, preferred_locations, preferred_job_types, work_mode) "
                    "VALUES (:id, :skills, :locations, :job_types, :work_mode)"
                ),
                {
                    "id": candidate.id,
                    "skills": json.dumps(candidate.skills),
                    "locations": json.dumps(sorted(prefs.locations)),
                    "job_types": json.dumps(sorted(t.value for t in prefs.job_types)),
                    "work_mode": prefs.work_mode.value if prefs.work_mode else None,
                },
            )

    def add_job(self, job: JobPosting):
        with self.engine.begin() as conn:
            conn.execute(
                text(
                    "INSERT INTO jobs (id, title, description, skills, location, job_type, work_mode, "
                    "experience_level, is_active) VALUES (:id, :title, :description, :skills, :location, "
                    ":job_type, :work_mode, :experience_level, :is_active)"
                ),
                {
                    "id": job.id,
                    "title": job.title,
                    "description": job.description,
                    "skills": json.dumps(job.skills),
                    "location": job.location,
                    "job_type": job.job_type.value if job.job_type else None,
                    "work_mode": job.work_mode.value if job.work_mode else None,
                    "experience_level": job.experience_level.value if job.experience_level else None,
                    "is_active": job.is_active,
                },
            )

    def add_application(self, application: ApplicationRecord):
        with self.engine.begin() as conn:
            conn.execute(
                text(
                    "INSERT INTO applications (candidate_id, job_id, status, created_at) "
                    "VALUES (:candidate_id, :job_id, :status, :created_at)"
                ),
                {
                    "candidate_id": application.candidate_id,
                    "job_id": application.job_id,
                    "status": application.status.value,
                    "created_at": application.created_at.isoformat() if application.created_at else None,
                },
            )

    def save_job(self, candidate_id: str, job_id: str):
        with self.engine.begin() as conn:
            conn.execute(
                text("INSERT INTO saved_jobs (candidate_id, job_id) VALUES (:candidate_id, :job_id)"),
                {"candidate_id": candidate_id, "job_id": job_id},
            )

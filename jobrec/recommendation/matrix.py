"""User-item interaction matrix"""
import threading
from typing import Dict, Iterable, List, Tuple

from .models import (
    ApplicationRecord,
    ApplicationStatus,
    CandidateProfile,
    InteractionRecord,
    InteractionType,
    JobPosting,
    SavedJobs,
    UserItemMatrix,
)
from ..utils import logger


MAX_INTERACTION_WEIGHT = 5.0
SAVED_JOB_WEIGHT = 0.8
DEFAULT_STATUS_WEIGHT = 1.0

STATUS_WEIGHTS: Dict[ApplicationStatus, float] = {
    ApplicationStatus.HIRED: 5.0,
    ApplicationStatus.SHORTLISTED: 4.0,
    ApplicationStatus.INTERVIEW_SCHEDULED: 3.0,
    ApplicationStatus.REVIEWED: 2.0,
    ApplicationStatus.REJECTED: 0.5,
    ApplicationStatus.PENDING: DEFAULT_STATUS_WEIGHT,
}

INTERACTION_INCREMENTS: Dict[InteractionType, float] = {
    InteractionType.VIEW: 0.1,
    InteractionType.SAVE: 0.5,
    InteractionType.APPLY: 1.0,
    InteractionType.SHORTLISTED: 2.0,
    InteractionType.HIRED: 5.0,
}


def status_weight(status: ApplicationStatus) -> float:
    return STATUS_WEIGHTS.get(status, DEFAULT_STATUS_WEIGHT)


def build_user_item_matrix(
    candidates: Iterable[CandidateProfile],
    jobs: Iterable[JobPosting],
    applications: Iterable[ApplicationRecord],
    saved_jobs: Iterable[SavedJobs] = (),
) -> UserItemMatrix:
    """
    Collapse application and saved-job signals into one weight per pair.

    Every candidate gets an entry, even without interactions. Application
    status overwrites (an application has one current status); saved jobs
    only fill pairs that have no application. References to unknown
    candidates or inactive jobs are logged and skipped.
    """
    matrix: UserItemMatrix = {candidate.id: {} for candidate in candidates}
    active_jobs = {job.id for job in jobs if job.is_active}

    skipped = 0
    for app in applications:
        user_items = matrix.get(app.candidate_id)
        if user_items is None or app.job_id not in active_jobs:
            logger.warning(
                f"Skipping application {app.candidate_id}/{app.job_id}: unknown candidate or inactive job"
            )
            skipped += 1
            continue
        user_items[app.job_id] = status_weight(app.status)

    for saved in saved_jobs:
        user_items = matrix.get(saved.candidate_id)
        if user_items is None:
            logger.warning(f"Skipping saved jobs of unknown candidate {saved.candidate_id}")
            skipped += 1
            continue
        for job_id in saved.job_ids:
            if job_id not in active_jobs:
                skipped += 1
                continue
            user_items.setdefault(job_id, SAVED_JOB_WEIGHT)

    interactions = sum(len(items) for items in matrix.values())
    logger.info(
        f"Built user-item matrix: {len(matrix)} candidates, {interactions} interactions, {skipped} skipped"
    )
    return matrix


def apply_interaction(
    current: float,
    interaction_type: InteractionType,
    multiplier: float = 1.0,
) -> float:
    """Add the increment for one interaction event, capped at the maximum weight"""
    increment = INTERACTION_INCREMENTS[InteractionType(interaction_type)] * multiplier
    return max(0.0, min(current + increment, MAX_INTERACTION_WEIGHT))


class InteractionOverlay:
    """
    Incremental interaction updates layered over a published matrix.

    Updates never touch the published snapshot. Each pair keeps its running
    weight (seeded from the base weight the first time it is touched) so
    repeated events accumulate and stay capped. Every update is stamped with
    a sequence number; a rebuild that started at sequence ``mark`` discards
    the entries it has superseded via ``rebase(mark)``.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._weights: Dict[Tuple[str, str], float] = {}
        self._stamps: Dict[Tuple[str, str], int] = {}
        self._seq = 0
        self._dirty = 0

    def apply(
        self,
        base: UserItemMatrix,
        user_id: str,
        job_id: str,
        interaction_type: InteractionType,
        multiplier: float = 1.0,
    ) -> float:
        key = (user_id, job_id)
        with self._lock:
            current = self._weights.get(key)
            if current is None:
                current = base.get(user_id, {}).get(job_id, 0.0)
            updated = apply_interaction(current, interaction_type, multiplier)
            self._seq += 1
            self._weights[key] = updated
            self._stamps[key] = self._seq
            self._dirty += 1
            return updated

    @property
    def dirty(self) -> int:
        return self._dirty

    def mark(self) -> int:
        with self._lock:
            return self._seq

    def __len__(self) -> int:
        return len(self._weights)

    def merged(self, base: UserItemMatrix) -> UserItemMatrix:
        """Return base plus overlay as a new matrix; base is left untouched"""
        with self._lock:
            if not self._weights:
                return base
            overlay = dict(self._weights)

        merged: UserItemMatrix = {}
        touched_users = {user_id for user_id, _ in overlay}
        for user_id, items in base.items():
            merged[user_id] = dict(items) if user_id in touched_users else items
        for (user_id, job_id), weight in overlay.items():
            merged.setdefault(user_id, {})[job_id] = weight
        return merged

    def entries(self) -> List[InteractionRecord]:
        with self._lock:
            return [
                InteractionRecord(candidate_id=user_id, job_id=job_id, weight=weight)
                for (user_id, job_id), weight in self._weights.items()
            ]

    def rebase(self, mark: int) -> None:
        """Drop entries last updated at or before ``mark``"""
        with self._lock:
            stale = [key for key, stamp in self._stamps.items() if stamp <= mark]
            for key in stale:
                del self._weights[key]
                del self._stamps[key]
            self._dirty = len(self._weights)

"""Hybrid recommendation engine with LangGraph rebuild pipeline"""
import threading
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Callable, Dict, List, Optional, Union

from typing_extensions import TypedDict
from langgraph.graph import StateGraph, END
from pydantic import BaseModel, Field

from .blender import blend
from .collaborative import score_collaborative, top_collaborative
from .content import score_content
from .database import InteractionStore
from .errors import StoreError
from .matrix import InteractionOverlay, build_user_item_matrix
from .models import (
    ApplicationStatus,
    CandidateProfile,
    EngineStatus,
    InteractionRecord,
    InteractionSnapshot,
    InteractionType,
    JobPosting,
    RecommendationResult,
    ScoredJob,
    TrendingJob,
    UserItemMatrix,
)
from .similarity import SimilarityMatrix, build_item_similarity, build_user_similarity
from ..utils import config, logger, monitor
from ..utils.config import Config


TRENDING_STATUS_WEIGHTS: Dict[ApplicationStatus, float] = {
    ApplicationStatus.HIRED: 5.0,
    ApplicationStatus.SHORTLISTED: 3.0,
    ApplicationStatus.INTERVIEW_SCHEDULED: 2.0,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EngineSettings(BaseModel):
    """Tunables for scoring and the rebuild policy"""
    content_weight: float = Field(0.6, ge=0.0, le=1.0)
    collaborative_weight: float = Field(0.4, ge=0.0, le=1.0)
    similarity_threshold: float = Field(0.1, ge=0.0, le=1.0)
    reason_threshold: float = 0.3
    default_limit: int = Field(10, ge=1)
    rebuild_after_updates: int = Field(100, ge=1)
    max_index_age_seconds: float = Field(3600.0, gt=0)
    rebuild_timeout_seconds: float = Field(120.0, gt=0)
    poll_interval_seconds: float = Field(30.0, gt=0)
    trending_window_days: int = Field(7, ge=1)

    @classmethod
    def from_config(cls, cfg: Config = None) -> "EngineSettings":
        cfg = cfg or config
        values = {
            "content_weight": cfg.get("recommendation.weights.content"),
            "collaborative_weight": cfg.get("recommendation.weights.collaborative"),
            "similarity_threshold": cfg.get("recommendation.similarity_threshold"),
            "reason_threshold": cfg.get("recommendation.reason_threshold"),
            "default_limit": cfg.get("recommendation.default_limit"),
            "rebuild_after_updates": cfg.get("recommendation.rebuild.after_updates"),
            "max_index_age_seconds": cfg.get("recommendation.rebuild.max_age_seconds"),
            "rebuild_timeout_seconds": cfg.get("recommendation.rebuild.timeout_seconds"),
            "poll_interval_seconds": cfg.get("recommendation.rebuild.poll_interval_seconds"),
            "trending_window_days": cfg.get("recommendation.trending_window_days"),
        }
        return cls(**{key: value for key, value in values.items() if value is not None})


# --- State Definition ---

class IndexBuildState(TypedDict):
    """State for the index build graph"""
    store: Optional[InteractionStore]
    snapshot: Optional[InteractionSnapshot]
    matrix: UserItemMatrix
    item_similarity: Optional[SimilarityMatrix]
    user_similarity: Optional[SimilarityMatrix]


# --- Nodes ---

def fetch_snapshot_node(state: IndexBuildState) -> Dict:
    """Read the interaction snapshot unless one was supplied"""
    snapshot = state.get("snapshot")
    if snapshot is None:
        store = state.get("store")
        if store is None:
            raise StoreError("Index build needs either a snapshot or a store")
        logger.info("Fetching interaction snapshot")
        snapshot = store.fetch_snapshot()
    return {"snapshot": snapshot}


def build_matrix_node(state: IndexBuildState) -> Dict:
    snapshot = state["snapshot"]
    matrix = build_user_item_matrix(
        snapshot.candidates, snapshot.jobs, snapshot.applications, snapshot.saved_jobs
    )
    return {"matrix": matrix}


def item_similarity_node(state: IndexBuildState) -> Dict:
    return {"item_similarity": build_item_similarity(state["snapshot"].jobs)}


def user_similarity_node(state: IndexBuildState) -> Dict:
    return {"user_similarity": build_user_similarity(state["matrix"])}


# --- Graph Construction ---

@lru_cache(maxsize=None)
def build_index_graph():
    """Build the index construction workflow graph"""
    workflow = StateGraph(IndexBuildState)

    workflow.add_node("fetch", fetch_snapshot_node)
    workflow.add_node("build_matrix", build_matrix_node)
    workflow.add_node("item_similarity", item_similarity_node)
    workflow.add_node("user_similarity", user_similarity_node)

    workflow.set_entry_point("fetch")
    workflow.add_edge("fetch", "build_matrix")
    workflow.add_edge("build_matrix", "item_similarity")
    workflow.add_edge("item_similarity", "user_similarity")
    workflow.add_edge("user_similarity", END)

    return workflow.compile()


@dataclass(frozen=True)
class RecommendationIndex:
    """Immutable snapshot of everything the scorers read"""
    candidates: Dict[str, CandidateProfile]
    jobs: Dict[str, JobPosting]
    matrix: UserItemMatrix
    item_similarity: SimilarityMatrix
    user_similarity: SimilarityMatrix
    built_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def build(cls, snapshot: InteractionSnapshot, built_at: datetime = None) -> "RecommendationIndex":
        """Build an index from an already fetched snapshot"""
        return cls._run_graph({"store": None, "snapshot": snapshot}, built_at)

    @classmethod
    def from_store(cls, store: InteractionStore, built_at: datetime = None) -> "RecommendationIndex":
        """Fetch a snapshot from the store and build an index from it"""
        return cls._run_graph({"store": store, "snapshot": None}, built_at)

    @classmethod
    def _run_graph(cls, initial_state: Dict, built_at: Optional[datetime]) -> "RecommendationIndex":
        state = {"matrix": {}, "item_similarity": None, "user_similarity": None, **initial_state}
        final_state = build_index_graph().invoke(state)
        snapshot = final_state["snapshot"]
        return cls(
            candidates={candidate.id: candidate for candidate in snapshot.candidates},
            jobs={job.id: job for job in snapshot.jobs if job.is_active},
            matrix=final_state["matrix"],
            item_similarity=final_state["item_similarity"],
            user_similarity=final_state["user_similarity"],
            built_at=built_at or _utcnow(),
        )


# --- Public API ---

class RecommendationEngine:
    """
    Owns the published recommendation index.

    Rebuilds construct a complete new index and publish it by reference
    swap, so readers always see a whole snapshot. Interaction updates go to
    an overlay that is merged into the published matrix at read time.
    """

    def __init__(
        self,
        store: InteractionStore,
        settings: EngineSettings = None,
        clock: Callable[[], datetime] = None,
    ):
        self.store = store
        self.settings = settings or EngineSettings.from_config()
        self._clock = clock or _utcnow
        self._index: Optional[RecommendationIndex] = None
        self._overlay = InteractionOverlay()
        self._publish_lock = threading.Lock()
        self._rebuild_lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="jobrec-rebuild")
        self.last_error: Optional[str] = None

    @property
    def index(self) -> Optional[RecommendationIndex]:
        return self._index

    @property
    def is_initialized(self) -> bool:
        return self._index is not None

    def initialize(self) -> bool:
        return self.rebuild()

    @monitor.measure
    def rebuild(self) -> bool:
        """
        Build and publish a fresh index.

        On failure the previous index stays published and the error is
        recorded; the call returns False instead of raising.
        """
        with self._rebuild_lock:
            mark = self._overlay.mark()
            logger.info("Rebuilding recommendation index")
            try:
                index = RecommendationIndex.from_store(self.store, built_at=self._clock())
            except Exception as e:
                self.last_error = str(e)
                logger.error(f"Recommendation index rebuild failed, keeping previous snapshot: {e}")
                return False

            with self._publish_lock:
                self._index = index
                self._overlay.rebase(mark)
                self.last_error = None

            logger.info(
                f"Published index: {len(index.candidates)} candidates, {len(index.jobs)} jobs, "
                f"{len(index.user_similarity)} user pairs"
            )
            return True

    def rebuild_with_timeout(self, timeout: float = None) -> bool:
        """Rebuild on the worker thread; on timeout keep serving the stale index"""
        timeout = self.settings.rebuild_timeout_seconds if timeout is None else timeout
        future = self._executor.submit(self.rebuild)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            logger.warning(f"Index rebuild exceeded {timeout}s, serving previous snapshot")
            return False

    def needs_rebuild(self) -> bool:
        """Staleness policy: missing index, too many pending updates, or too old"""
        index = self._index
        if index is None:
            return True
        if self._overlay.dirty >= self.settings.rebuild_after_updates:
            return True
        age = (self._clock() - index.built_at).total_seconds()
        return age >= self.settings.max_index_age_seconds

    def current_matrix(self) -> UserItemMatrix:
        """Published matrix with pending interaction updates applied"""
        index = self._index
        return self._overlay.merged(index.matrix if index else {})

    def _resolve_candidate(self, index: RecommendationIndex, user_id: str) -> Optional[CandidateProfile]:
        candidate = index.candidates.get(user_id)
        if candidate is not None:
            return candidate
        try:
            return self.store.get_candidate(user_id)
        except StoreError as e:
            logger.error(f"Could not load candidate {user_id}: {e}")
            return None

    @monitor.measure
    def get_personalized_recommendations(self, user_id: str, limit: int = None) -> List[RecommendationResult]:
        """Blend content-based and collaborative recommendations for one user"""
        limit = self.settings.default_limit if limit is None else limit
        if not self.is_initialized:
            self.initialize()

        index = self._index
        if index is None:
            return []

        candidate = self._resolve_candidate(index, user_id)
        if candidate is None:
            logger.info(f"No candidate profile for {user_id}")
            return []

        matrix = self.current_matrix()
        own_items = matrix.get(user_id, {})

        # preference bonuses apply even without skills
        content = score_content(candidate, index.jobs.values(), exclude=own_items, limit=limit)

        collaborative = top_collaborative(
            score_collaborative(user_id, matrix, index.user_similarity, self.settings.similarity_threshold),
            active_jobs=index.jobs,
            limit=limit,
        )

        results = blend(
            content,
            collaborative,
            limit,
            content_weight=self.settings.content_weight,
            collaborative_weight=self.settings.collaborative_weight,
            reason_threshold=self.settings.reason_threshold,
        )
        for result in results:
            result.job = index.jobs.get(result.job_id)

        logger.info(
            f"Generated {len(results)} recommendations for {user_id} "
            f"({len(content)} content, {len(collaborative)} collaborative)"
        )
        return results

    def update_user_interaction(
        self,
        user_id: str,
        job_id: str,
        interaction_type: Union[InteractionType, str],
        weight: float = 1.0,
    ) -> float:
        """Record one interaction event; returns the pair's new weight (capped at 5.0)"""
        interaction_type = InteractionType(interaction_type)
        index = self._index
        new_weight = self._overlay.apply(
            index.matrix if index else {}, user_id, job_id, interaction_type, weight
        )
        logger.debug(f"Interaction {interaction_type.value} {user_id}/{job_id} -> {new_weight:.2f}")
        return new_weight

    def get_similar_jobs(self, job_id: str, limit: int = 5) -> List[ScoredJob]:
        index = self._index
        if index is None:
            return []
        return index.item_similarity.top_neighbors(job_id, limit)

    def get_trending_jobs(self, limit: int = 10, days: int = None) -> List[TrendingJob]:
        """Rank jobs by status-weighted applications over the recent window"""
        days = self.settings.trending_window_days if days is None else days
        since = self._clock() - timedelta(days=days)
        try:
            applications = self.store.get_recent_applications(since)
        except StoreError as e:
            logger.error(f"Error getting trending jobs: {e}")
            return []

        trending: Dict[str, TrendingJob] = {}
        for app in applications:
            entry = trending.get(app.job_id)
            if entry is None:
                entry = trending[app.job_id] = TrendingJob(job_id=app.job_id, score=0.0, interaction_count=0)
            entry.interaction_count += 1
            entry.score += TRENDING_STATUS_WEIGHTS.get(app.status, 1.0)

        index = self._index
        ranked = sorted(trending.values(), key=lambda item: item.score, reverse=True)[:limit]
        if index is not None:
            for item in ranked:
                item.job = index.jobs.get(item.job_id)
        return ranked

    def pending_interactions(self) -> List[InteractionRecord]:
        """Overlay updates not yet covered by a rebuild, e.g. for persisting to the store"""
        return self._overlay.entries()

    def status(self) -> EngineStatus:
        index = self._index
        return EngineStatus(
            initialized=index is not None,
            built_at=index.built_at if index else None,
            candidates=len(index.candidates) if index else 0,
            jobs=len(index.jobs) if index else 0,
            pending_updates=self._overlay.dirty,
            last_error=self.last_error,
        )

    def close(self):
        self._executor.shutdown(wait=False)


class RebuildScheduler:
    """Caller-owned background thread that rebuilds the index when stale"""

    def __init__(self, engine: RecommendationEngine, poll_interval: float = None):
        self.engine = engine
        self.poll_interval = poll_interval or engine.settings.poll_interval_seconds
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def run_once(self) -> bool:
        if not self.engine.needs_rebuild():
            return False
        return self.engine.rebuild_with_timeout()

    def _run(self):
        while not self._stop.wait(self.poll_interval):
            self.run_once()

    def start(self):
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="jobrec-scheduler", daemon=True)
        self._thread.start()
        logger.info(f"Rebuild scheduler started (every {self.poll_interval}s)")

    def stop(self, timeout: float = None):
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)
            self._thread = None

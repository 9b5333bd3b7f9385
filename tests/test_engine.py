"""Tests for the hybrid recommendation engine"""

import threading
from datetime import timedelta

import pytest

from jobrec.recommendation.blender import COLLABORATIVE_REASON, CONTENT_REASON
from jobrec.recommendation.database import InMemoryInteractionStore
from jobrec.recommendation.engine import (
    EngineSettings,
    RebuildScheduler,
    RecommendationEngine,
    RecommendationIndex,
)
from jobrec.recommendation.errors import StoreError
from jobrec.recommendation.models import ApplicationRecord, InteractionType

from conftest import NOW, make_candidate, make_job


class FlakyStore:
    """Delegates to a real store until ``fail`` is switched on"""

    def __init__(self, inner):
        self.inner = inner
        self.fail = False

    def _check(self):
        if self.fail:
            raise StoreError("database unavailable")

    def fetch_snapshot(self):
        self._check()
        return self.inner.fetch_snapshot()

    def get_candidate(self, candidate_id):
        self._check()
        return self.inner.get_candidate(candidate_id)

    def get_active_jobs(self):
        self._check()
        return self.inner.get_active_jobs()

    def get_recent_applications(self, since):
        self._check()
        return self.inner.get_recent_applications(since)


class BlockingStore(FlakyStore):
    """Holds ``fetch_snapshot`` until ``release`` is set"""

    def __init__(self, inner):
        super().__init__(inner)
        self.entered = threading.Event()
        self.release = threading.Event()

    def fetch_snapshot(self):
        self.entered.set()
        self.release.wait(5)
        return super().fetch_snapshot()


class TestRecommendationIndex:
    def test_build_from_snapshot(self, collaborative_store):
        index = RecommendationIndex.build(collaborative_store.fetch_snapshot(), built_at=NOW)

        assert set(index.candidates) == {"U1", "U2", "U3"}
        assert set(index.jobs) == {"jobX", "jobY", "jobZ"}
        assert index.matrix["U1"] == {"jobX": 5.0}
        assert index.matrix["U2"] == {"jobX": 4.0, "jobY": 3.0}
        assert index.matrix["U3"] == {}
        assert index.user_similarity.get("U1", "U2") == pytest.approx(1.0)
        assert index.built_at == NOW

    def test_from_store(self, collaborative_store):
        index = RecommendationIndex.from_store(collaborative_store)
        assert len(index.item_similarity) == 3


class TestPersonalizedRecommendations:
    def test_collaborative_scenario(self, engine):
        results = engine.get_personalized_recommendations("U1")

        # U1 has no skills or preferences, so jobZ trails with a zero content score
        assert [r.job_id for r in results] == ["jobY", "jobZ"]
        assert results[1].final_score == 0.0
        result = results[0]
        assert result.content_score == 0.0
        assert result.collaborative_score == pytest.approx(3.0)
        assert result.final_score == pytest.approx(1.2)
        assert result.reasons == [COLLABORATIVE_REASON]
        assert result.job is not None and result.job.id == "jobY"

    def test_initializes_lazily(self, engine):
        assert not engine.is_initialized
        engine.get_personalized_recommendations("U1")
        assert engine.is_initialized

    def test_content_only_candidate(self, engine):
        results = engine.get_personalized_recommendations("U3")

        assert results[0].job_id == "jobZ"
        assert results[0].final_score == pytest.approx(0.5 * 0.6)
        assert results[0].reasons == [CONTENT_REASON]

    def test_excludes_interacted_jobs(self, engine):
        engine.initialize()
        engine.update_user_interaction("U3", "jobZ", InteractionType.SAVE)

        job_ids = [r.job_id for r in engine.get_personalized_recommendations("U3")]
        assert "jobZ" not in job_ids

    def test_respects_limit(self, engine):
        assert len(engine.get_personalized_recommendations("U3", limit=2)) == 2

    def test_unknown_user(self, engine):
        assert engine.get_personalized_recommendations("ghost") == []

    def test_preferences_without_skills(self, settings, clock):
        store = InMemoryInteractionStore(
            [make_candidate("c1", [], locations={"NYC"}, work_mode="any")],
            [make_job("nyc", ["python"], location="NYC")],
        )
        engine = RecommendationEngine(store, settings=settings, clock=clock)
        try:
            results = engine.get_personalized_recommendations("c1")
        finally:
            engine.close()

        assert [r.job_id for r in results] == ["nyc"]
        assert results[0].content_score == pytest.approx(0.35)
        assert results[0].final_score == pytest.approx(0.35 * 0.6)

    def test_zero_limit(self, engine):
        assert engine.get_personalized_recommendations("U3", limit=0) == []

    def test_default_limit(self, collaborative_store, clock):
        engine = RecommendationEngine(collaborative_store, settings=EngineSettings(default_limit=1), clock=clock)
        try:
            assert len(engine.get_personalized_recommendations("U3")) == 1
        finally:
            engine.close()

    def test_candidate_added_after_rebuild(self, collaborative_store, engine):
        engine.initialize()
        collaborative_store.candidates.append(make_candidate("late", ["rust"]))

        results = engine.get_personalized_recommendations("late")
        assert results[0].job_id == "jobZ"

    def test_scores_ordered(self, engine):
        results = engine.get_personalized_recommendations("U3")
        finals = [r.final_score for r in results]
        assert finals == sorted(finals, reverse=True)


class TestInteractionUpdates:
    def test_hired_is_capped(self, engine):
        engine.initialize()
        for _ in range(3):
            weight = engine.update_user_interaction("U1", "jobX", "hired")
        assert weight == 5.0
        assert engine.current_matrix()["U1"]["jobX"] == 5.0

    def test_accumulates_from_published_weight(self, engine):
        engine.initialize()
        assert engine.update_user_interaction("U2", "jobY", "apply") == pytest.approx(4.0)

    def test_published_matrix_untouched(self, engine):
        engine.initialize()
        engine.update_user_interaction("U3", "jobX", "apply")

        assert engine.index.matrix["U3"] == {}
        assert engine.current_matrix()["U3"] == {"jobX": 1.0}

    def test_update_removes_job_from_collaborative_results(self, engine):
        engine.initialize()
        engine.update_user_interaction("U1", "jobY", "apply")

        # U1 now counts jobY as seen; U2 has nothing else to offer
        results = engine.get_personalized_recommendations("U1")
        assert [r.job_id for r in results] == ["jobZ"]
        assert results[0].collaborative_score == 0.0

    def test_pending_interactions(self, engine):
        engine.initialize()
        engine.update_user_interaction("U3", "jobX", "save")

        pending = engine.pending_interactions()

        assert [(r.candidate_id, r.job_id) for r in pending] == [("U3", "jobX")]
        assert pending[0].weight == pytest.approx(0.5)
        engine.rebuild()
        assert engine.pending_interactions() == []

    def test_invalid_type(self, engine):
        with pytest.raises(ValueError):
            engine.update_user_interaction("U1", "jobX", "like")

    def test_multiplier(self, engine):
        engine.initialize()
        assert engine.update_user_interaction("U3", "jobX", "view", weight=3.0) == pytest.approx(0.3)


class TestRebuild:
    def test_failure_keeps_previous_index(self, collaborative_store, settings, clock):
        store = FlakyStore(collaborative_store)
        engine = RecommendationEngine(store, settings=settings, clock=clock)
        assert engine.initialize()
        published = engine.index

        store.fail = True
        assert engine.rebuild() is False

        assert engine.index is published
        assert engine.status().last_error == "database unavailable"
        assert engine.get_personalized_recommendations("U1")[0].job_id == "jobY"
        engine.close()

    def test_recovery_clears_error(self, collaborative_store, settings, clock):
        store = FlakyStore(collaborative_store)
        engine = RecommendationEngine(store, settings=settings, clock=clock)
        store.fail = True
        assert engine.initialize() is False
        assert engine.get_personalized_recommendations("U1") == []

        store.fail = False
        assert engine.rebuild()
        assert engine.last_error is None
        engine.close()

    def test_rebuild_picks_up_new_data(self, collaborative_store, engine):
        engine.initialize()
        collaborative_store.jobs.append(make_job("jobNew", ["rust", "go"]))
        engine.rebuild()
        assert "jobNew" in engine.index.jobs

    def test_rebuild_drops_superseded_updates(self, engine):
        engine.initialize()
        engine.update_user_interaction("U1", "jobZ", "view")
        assert engine.status().pending_updates == 1

        engine.rebuild()

        assert engine.status().pending_updates == 0
        assert "jobZ" not in engine.current_matrix()["U1"]

    def test_updates_during_rebuild_survive(self, collaborative_store, settings, clock):
        store = BlockingStore(collaborative_store)
        store.release.set()
        engine = RecommendationEngine(store, settings=settings, clock=clock)
        engine.initialize()

        store.release.clear()
        store.entered.clear()
        worker = threading.Thread(target=engine.rebuild)
        worker.start()
        assert store.entered.wait(5)
        engine.update_user_interaction("U1", "jobZ", "apply")
        store.release.set()
        worker.join(5)

        assert engine.current_matrix()["U1"]["jobZ"] == 1.0
        assert engine.status().pending_updates == 1
        engine.close()

    def test_timeout_serves_stale_index(self, collaborative_store, settings, clock):
        store = BlockingStore(collaborative_store)
        store.release.set()
        engine = RecommendationEngine(store, settings=settings, clock=clock)
        engine.initialize()
        published = engine.index

        store.release.clear()
        assert engine.rebuild_with_timeout(timeout=0.05) is False
        assert engine.index is published

        store.release.set()
        engine.close()


class TestStalenessPolicy:
    def test_uninitialized_needs_rebuild(self, engine):
        assert engine.needs_rebuild()

    def test_fresh_index(self, engine):
        engine.initialize()
        assert not engine.needs_rebuild()

    def test_age(self, engine, clock):
        engine.initialize()
        clock.now = NOW + timedelta(seconds=engine.settings.max_index_age_seconds)
        assert engine.needs_rebuild()

    def test_pending_updates(self, collaborative_store, clock):
        engine = RecommendationEngine(
            collaborative_store, settings=EngineSettings(rebuild_after_updates=2), clock=clock
        )
        engine.initialize()
        engine.update_user_interaction("U1", "jobY", "view")
        assert not engine.needs_rebuild()
        engine.update_user_interaction("U1", "jobY", "view")
        assert engine.needs_rebuild()
        engine.close()


class TestScheduler:
    def test_run_once(self, engine):
        scheduler = RebuildScheduler(engine, poll_interval=60)
        assert scheduler.run_once() is True
        assert engine.is_initialized
        assert scheduler.run_once() is False

    def test_start_stop(self, engine):
        scheduler = RebuildScheduler(engine, poll_interval=0.01)
        scheduler.start()
        scheduler.stop(timeout=1)
        assert scheduler._thread is None


class TestSimilarAndTrending:
    def test_similar_jobs(self, engine):
        engine.initialize()
        similar = engine.get_similar_jobs("jobX", limit=5)

        assert {job_id for job_id, _ in similar} == {"jobY", "jobZ"}
        assert all(score == pytest.approx(0.6) for _, score in similar)

    def test_similar_jobs_unknown(self, engine):
        engine.initialize()
        assert engine.get_similar_jobs("nope") == []

    def test_trending(self, collaborative_store, engine):
        collaborative_store.applications.append(
            ApplicationRecord(candidate_id="U3", job_id="jobZ", status="hired", created_at=NOW - timedelta(days=8))
        )
        engine.initialize()

        trending = engine.get_trending_jobs()

        assert [item.job_id for item in trending] == ["jobX", "jobY"]
        assert trending[0].score == pytest.approx(8.0)
        assert trending[0].interaction_count == 2
        assert trending[1].score == pytest.approx(2.0)
        assert trending[0].job.id == "jobX"

    def test_trending_with_naive_timestamps(self, collaborative_store, engine):
        collaborative_store.applications.append(ApplicationRecord(
            candidate_id="U3", job_id="jobZ", status="hired", created_at=NOW.replace(tzinfo=None)
        ))

        trending = engine.get_trending_jobs()

        assert [item.job_id for item in trending] == ["jobX", "jobZ", "jobY"]

    def test_trending_zero_limit(self, engine):
        assert engine.get_trending_jobs(limit=0) == []

    def test_trending_store_failure(self, collaborative_store, settings, clock):
        store = FlakyStore(collaborative_store)
        store.fail = True
        engine = RecommendationEngine(store, settings=settings, clock=clock)
        assert engine.get_trending_jobs() == []
        engine.close()


class TestStatus:
    def test_before_initialize(self, engine):
        status = engine.status()
        assert status.initialized is False
        assert status.built_at is None

    def test_after_initialize(self, engine):
        engine.initialize()
        status = engine.status()
        assert status.initialized
        assert status.built_at == NOW
        assert status.candidates == 3
        assert status.jobs == 3
        assert status.last_error is None


def test_empty_store(settings, clock):
    engine = RecommendationEngine(InMemoryInteractionStore(), settings=settings, clock=clock)
    assert engine.initialize()
    assert engine.get_personalized_recommendations("anyone") == []
    engine.close()

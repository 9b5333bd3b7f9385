"""Tests for the learned skill-matching path"""

import math

import numpy as np
import pytest

from jobrec.recommendation.database import InMemoryInteractionStore
from jobrec.recommendation.models import ApplicationRecord, ExperienceLevel, WorkMode
from jobrec.sample_data import generate_sample_snapshot
from jobrec.skill_matching.features import (
    VECTOR_SIZE,
    build_feature_matrix,
    build_feature_vector,
    fuzzy_skill_matches,
    text_similarity,
    tokenize,
)
from jobrec.skill_matching.matcher import SkillMatcher, match_reasons
from jobrec.skill_matching.model import SklearnMatchModel, prepare_training_data, train_match_model

from conftest import make_candidate, make_job

SHARED_TERM = (1 + math.log(2 / 3)) ** 2


class RatioModel:
    """Scores a vector by its skill-match ratio slot"""

    def predict(self, vectors):
        return np.asarray(vectors)[:, 0]


class BrokenModel:
    def predict(self, vectors):
        raise RuntimeError("model exploded")


@pytest.fixture()
def store(job_a, job_b, python_candidate):
    remote_entry = make_job(
        "jobR", ["python", "docker"], work_mode=WorkMode.REMOTE, experience_level=ExperienceLevel.ENTRY
    )
    return InMemoryInteractionStore([python_candidate, make_candidate("no_skills")], [job_a, job_b, remote_entry])


class TestFeatures:
    def test_tokenize(self):
        assert tokenize("Senior Python/SQL developer!") == ["senior", "python", "sql", "developer"]
        assert tokenize("") == []

    def test_tokenize_character_class(self):
        assert tokenize("Café résumé") == ["caf", "r", "sum"]
        assert tokenize("Python-разработчик") == ["python", "разработчик"]
        assert tokenize("node_js 2024") == ["node_js", "2024"]

    def test_fuzzy_substring(self):
        assert fuzzy_skill_matches(["java"], ["JavaScript"]) == ["java"]
        assert fuzzy_skill_matches(["React.js"], ["react"]) == ["React.js"]
        assert fuzzy_skill_matches(["go", ""], ["rust", ""]) == []

    def test_text_similarity_shared_term(self):
        assert text_similarity("python", "python developer") == pytest.approx(SHARED_TERM)

    def test_text_similarity_capped(self):
        assert text_similarity("python python sql", "python python sql sql") == 1.0

    def test_text_similarity_empty(self):
        assert text_similarity("", "python") == 0.0
        assert text_similarity("python", "java") == 0.0

    def test_vector_layout(self):
        vector = build_feature_vector(
            ["python", "sql"], ["python", "sql", "aws"], "Python Developer", "We use sql and python daily"
        )
        assert vector.shape == (VECTOR_SIZE,)
        assert vector[0] == pytest.approx(2 / 3)
        assert vector[1] == pytest.approx(2 / 20)
        assert vector[2] == pytest.approx(3 / 20)
        assert vector[3] == pytest.approx(SHARED_TERM)
        assert vector[4] == pytest.approx(2 * SHARED_TERM)
        assert vector[5] == pytest.approx(0.2)
        assert not vector[6:].any()

    def test_full_match(self):
        vector = build_feature_vector(["python"], ["python"])
        assert vector[0] == 1.0
        assert np.count_nonzero(vector[6:]) == 0
        assert len(vector[6:]) == 94

    def test_no_job_skills(self):
        assert build_feature_vector(["python"], [])[0] == 0.0

    def test_feature_matrix(self, job_a, job_b):
        assert build_feature_matrix(["python"], [job_a, job_b]).shape == (2, VECTOR_SIZE)
        assert build_feature_matrix(["python"], []).shape == (0, VECTOR_SIZE)


class TestMatchReasons:
    def test_all_reasons(self):
        job = make_job(
            "j", ["python", "sql", "aws", "docker"],
            work_mode=WorkMode.REMOTE, experience_level=ExperienceLevel.ENTRY,
        )
        assert match_reasons(["python", "sql", "aws", "docker"], job) == [
            "4 matching skills: python, sql, aws",
            "Good for entry-level candidates",
            "Remote work opportunity",
        ]

    def test_no_reasons(self, job_b):
        assert match_reasons(["python"], job_b) == []


class TestTraining:
    def test_prepare_training_data(self, job_a, job_b, python_candidate):
        applications = [
            ApplicationRecord(candidate_id="cand_py", job_id="jobA", status="hired"),
            ApplicationRecord(candidate_id="cand_py", job_id="jobB", status="rejected"),
            ApplicationRecord(candidate_id="ghost", job_id="jobA", status="hired"),
        ]
        inputs, outputs = prepare_training_data(applications, [python_candidate], [job_a, job_b])

        assert inputs.shape == (2, VECTOR_SIZE)
        assert outputs.tolist() == [1, 0]

    def test_single_class_is_not_trainable(self):
        inputs = np.zeros((4, VECTOR_SIZE))
        assert train_match_model(inputs, np.ones(4, dtype=int)) is None
        assert train_match_model(np.zeros((0, VECTOR_SIZE)), np.zeros(0, dtype=int)) is None

    def test_train_save_load(self, tmp_path):
        rng = np.random.default_rng(0)
        inputs = rng.random((40, VECTOR_SIZE))
        outputs = (inputs[:, 0] > 0.5).astype(int)
        outputs[:2] = [0, 1]

        model = train_match_model(inputs, outputs, max_iter=30)
        scores = model.predict(inputs[:5])
        assert scores.shape == (5,)
        assert ((scores >= 0.0) & (scores <= 1.0)).all()

        path = tmp_path / "models" / "match.joblib"
        model.save(path)
        loaded = SklearnMatchModel.load(path)
        np.testing.assert_allclose(loaded.predict(inputs[:5]), scores)

    def test_predict_rejects_wrong_width(self):
        rng = np.random.default_rng(1)
        inputs = rng.random((10, VECTOR_SIZE))
        outputs = np.array([0, 1] * 5)
        model = train_match_model(inputs, outputs, max_iter=5)
        with pytest.raises(ValueError):
            model.predict(np.zeros((1, 5)))

    def test_adapter_requires_probabilities(self):
        with pytest.raises(TypeError):
            SklearnMatchModel(object())


class TestSkillMatcher:
    def test_ranked_by_model_score(self, store, tmp_path):
        matcher = SkillMatcher(store, model=RatioModel(), model_path=tmp_path / "unused.joblib")
        results = matcher.get_job_recommendations("cand_py")

        assert [r.job_id for r in results] == ["jobA", "jobR", "jobB"]
        assert results[0].match_score == pytest.approx(2 / 3)
        assert results[1].reasons == [
            "1 matching skills: python",
            "Good for entry-level candidates",
            "Remote work opportunity",
        ]
        assert results[0].job.id == "jobA"

    def test_limit(self, store, tmp_path):
        matcher = SkillMatcher(store, model=RatioModel(), model_path=tmp_path / "unused.joblib")
        assert len(matcher.get_job_recommendations("cand_py", limit=1)) == 1

    def test_candidate_without_skills(self, store, tmp_path):
        matcher = SkillMatcher(store, model=RatioModel(), model_path=tmp_path / "unused.joblib")
        assert matcher.get_job_recommendations("no_skills") == []
        assert matcher.get_job_recommendations("ghost") == []

    def test_no_model_degrades_to_empty(self, store, tmp_path):
        matcher = SkillMatcher(store, model_path=tmp_path / "missing.joblib")
        assert matcher.get_job_recommendations("cand_py") == []
        assert not matcher.is_model_trained

    def test_failing_model_degrades_to_empty(self, store, tmp_path):
        matcher = SkillMatcher(store, model=BrokenModel(), model_path=tmp_path / "unused.joblib")
        assert matcher.get_job_recommendations("cand_py") == []

    def test_trains_and_saves_when_missing(self, tmp_path):
        snapshot = generate_sample_snapshot(num_candidates=30, num_jobs=10, applications_per_candidate=2)
        path = tmp_path / "model.joblib"
        matcher = SkillMatcher(InMemoryInteractionStore.from_snapshot(snapshot), model_path=path)

        assert matcher.initialize()
        assert path.exists()

        reloaded = SkillMatcher(InMemoryInteractionStore.from_snapshot(snapshot), model_path=path)
        assert reloaded.initialize()
        results = reloaded.get_job_recommendations("candidate_0", limit=3)
        assert len(results) == 3
        assert all(0.0 <= r.match_score <= 1.0 for r in results)

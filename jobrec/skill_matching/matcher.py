"""Skill-matching recommendations scored by the learned model"""
from pathlib import Path
from typing import List, Optional, Sequence

from .features import build_feature_matrix, fuzzy_skill_matches
from .model import MatchModel, SklearnMatchModel, prepare_training_data, train_match_model
from ..recommendation.database import InteractionStore
from ..recommendation.models import (
    ExperienceLevel,
    JobPosting,
    SkillMatchRecommendation,
    WorkMode,
)
from ..utils import config, logger


def match_reasons(candidate_skills: Sequence[str], job: JobPosting) -> List[str]:
    """Human-readable reasons for a skill-matching recommendation"""
    reasons = []
    matching = fuzzy_skill_matches(candidate_skills, job.skills)
    if matching:
        reasons.append(f"{len(matching)} matching skills: {', '.join(matching[:3])}")
    if job.experience_level == ExperienceLevel.ENTRY and len(candidate_skills) < 5:
        reasons.append("Good for entry-level candidates")
    if job.work_mode == WorkMode.REMOTE:
        reasons.append("Remote work opportunity")
    return reasons


class SkillMatcher:
    """
    Ranks active jobs for a candidate with the learned match model.

    The model is optional: without one (none saved, not enough data to
    train, or a failing predict) recommendations degrade to an empty list.
    """

    def __init__(self, store: InteractionStore, model: MatchModel = None, model_path: str = None):
        self.store = store
        self.model: Optional[MatchModel] = model
        self.model_path = Path(model_path or config.model_path)

    @property
    def is_model_trained(self) -> bool:
        return self.model is not None

    def initialize(self) -> bool:
        """Load a saved model, otherwise try to train one from application history"""
        if self.model is not None:
            return True

        if self.model_path.exists():
            try:
                self.model = SklearnMatchModel.load(self.model_path)
                return True
            except Exception as e:
                logger.warning(f"Could not load model from {self.model_path}, retraining: {e}")

        try:
            snapshot = self.store.fetch_snapshot()
            inputs, outputs = prepare_training_data(snapshot.applications, snapshot.candidates, snapshot.jobs)
            model = train_match_model(inputs, outputs)
        except Exception as e:
            logger.error(f"Error training skill matching model: {e}")
            return False

        if model is None:
            return False
        self.model = model
        try:
            model.save(self.model_path)
        except OSError as e:
            logger.warning(f"Trained model could not be saved: {e}")
        return True

    def get_job_recommendations(self, user_id: str, limit: int = 10) -> List[SkillMatchRecommendation]:
        if not self.is_model_trained and not self.initialize():
            logger.warning("Skill matching model unavailable, returning no recommendations")
            return []

        try:
            candidate = self.store.get_candidate(user_id)
            if candidate is None or not candidate.skills:
                return []

            jobs = self.store.get_active_jobs()
            if not jobs:
                return []

            scores = self.model.predict(build_feature_matrix(candidate.skills, jobs))
        except Exception as e:
            logger.error(f"Error getting job recommendations for {user_id}: {e}")
            return []

        recommendations = [
            SkillMatchRecommendation(
                job_id=job.id,
                match_score=min(max(float(score), 0.0), 1.0),
                reasons=match_reasons(candidate.skills, job),
                job=job,
            )
            for job, score in zip(jobs, scores)
        ]
        recommendations.sort(key=lambda rec: rec.match_score, reverse=True)
        return recommendations[:limit]

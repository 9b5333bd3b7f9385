"""Learned scorer behind the skill-matching feature vectors"""
from pathlib import Path
from typing import Dict, Iterable, Optional, Protocol, Sequence, Tuple, Union

import joblib
import numpy as np
from sklearn.neural_network import MLPClassifier

from .features import VECTOR_SIZE, build_feature_vector
from ..recommendation.errors import ModelUnavailableError
from ..recommendation.models import (
    ApplicationRecord,
    ApplicationStatus,
    CandidateProfile,
    JobPosting,
)
from ..utils import logger


POSITIVE_STATUSES = {
    ApplicationStatus.HIRED,
    ApplicationStatus.SHORTLISTED,
    ApplicationStatus.INTERVIEW_SCHEDULED,
}


class MatchModel(Protocol):
    """Vector in, score in [0, 1] out"""

    def predict(self, vectors: np.ndarray) -> Sequence[float]: ...


class SklearnMatchModel:
    """Adapter around a fitted scikit-learn binary classifier"""

    def __init__(self, estimator):
        if not hasattr(estimator, "predict_proba"):
            raise TypeError(f"{type(estimator).__name__} has no predict_proba")
        self.estimator = estimator

    def predict(self, vectors: np.ndarray) -> np.ndarray:
        vectors = np.atleast_2d(np.asarray(vectors, dtype=float))
        if vectors.shape[1] != VECTOR_SIZE:
            raise ValueError(f"expected vectors of width {VECTOR_SIZE}, got {vectors.shape[1]}")
        probabilities = self.estimator.predict_proba(vectors)
        classes = list(self.estimator.classes_)
        if 1 not in classes:
            raise ModelUnavailableError("classifier was not trained on positive examples")
        return np.clip(probabilities[:, classes.index(1)], 0.0, 1.0)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "SklearnMatchModel":
        logger.info(f"Loading skill matching model from {path}")
        return cls(joblib.load(path))

    def save(self, path: Union[str, Path]):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        joblib.dump(self.estimator, path)
        logger.info(f"✓ Saved skill matching model to {path}")


def prepare_training_data(
    applications: Iterable[ApplicationRecord],
    candidates: Iterable[CandidateProfile],
    jobs: Iterable[JobPosting],
) -> Tuple[np.ndarray, np.ndarray]:
    """Label each application 1 if it progressed past review, else 0"""
    candidates_by_id: Dict[str, CandidateProfile] = {c.id: c for c in candidates}
    jobs_by_id: Dict[str, JobPosting] = {j.id: j for j in jobs}

    inputs, outputs = [], []
    for app in applications:
        candidate = candidates_by_id.get(app.candidate_id)
        job = jobs_by_id.get(app.job_id)
        if candidate is None or job is None or not candidate.skills or not job.skills:
            continue
        inputs.append(build_feature_vector(candidate.skills, job.skills, job.title, job.description))
        outputs.append(1 if app.status in POSITIVE_STATUSES else 0)

    if not inputs:
        return np.zeros((0, VECTOR_SIZE), dtype=float), np.zeros(0, dtype=int)
    return np.vstack(inputs), np.asarray(outputs, dtype=int)


def train_match_model(
    inputs: np.ndarray,
    outputs: np.ndarray,
    random_state: int = 42,
    max_iter: int = 200,
) -> Optional[SklearnMatchModel]:
    """
    Fit a small feed-forward network on labelled feature vectors.

    Returns None when there is nothing to learn from, i.e. no examples or
    only one class.
    """
    if len(outputs) == 0 or len(set(outputs.tolist())) < 2:
        logger.warning("Not enough labelled applications to train a skill matching model")
        return None

    estimator = MLPClassifier(
        hidden_layer_sizes=(128, 64, 32),
        activation="relu",
        solver="adam",
        learning_rate_init=0.001,
        batch_size=min(32, len(outputs)),
        max_iter=max_iter,
        early_stopping=len(outputs) >= 50,
        validation_fraction=0.2,
        random_state=random_state,
    )
    logger.info(f"Training skill matching model on {len(outputs)} applications")
    estimator.fit(inputs, outputs)
    return SklearnMatchModel(estimator)

"""Recommendation package"""
from .blender import blend
from .collaborative import score_collaborative
from .content import content_score
from .database import InMemoryInteractionStore, SqlInteractionStore
from .engine import EngineSettings, RebuildScheduler, RecommendationEngine, RecommendationIndex
from .errors import ModelUnavailableError, RecommendationError, StoreError
from .matrix import build_user_item_matrix
from .models import RecommendationResult
from .similarity import job_similarity, skill_similarity, user_similarity

__all__ = [
    "blend",
    "score_collaborative",
    "content_score",
    "InMemoryInteractionStore",
    "SqlInteractionStore",
    "EngineSettings",
    "RebuildScheduler",
    "RecommendationEngine",
    "RecommendationIndex",
    "ModelUnavailableError",
    "RecommendationError",
    "StoreError",
    "build_user_item_matrix",
    "RecommendationResult",
    "job_similarity",
    "skill_similarity",
    "user_similarity",
]

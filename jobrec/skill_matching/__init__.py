"""Skill-matching package"""
from .features import VECTOR_SIZE, build_feature_vector, text_similarity
from .matcher import SkillMatcher, match_reasons
from .model import MatchModel, SklearnMatchModel, prepare_training_data, train_match_model

__all__ = [
    "VECTOR_SIZE",
    "build_feature_vector",
    "text_similarity",
    "SkillMatcher",
    "match_reasons",
    "MatchModel",
    "SklearnMatchModel",
    "prepare_training_data",
    "train_match_model",
]

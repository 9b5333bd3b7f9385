"""Recommendation engine exceptions"""


class RecommendationError(Exception):
    """Base class for engine failures"""


class StoreError(RecommendationError):
    """The interaction store could not supply a snapshot"""


class ModelUnavailableError(RecommendationError):
    """No trained skill-matching model is loaded"""

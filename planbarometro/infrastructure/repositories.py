"""
Repository exports.

    from planbarometro.infrastructure.repositories import BestPracticeRepo, EvaluationRepo
"""

from __future__ import annotations

from .repositories_base import BaseRepository
from .repositories_best_practice import BestPracticeRepo, PracticeRecommendationRepo
from .repositories_evaluation import EvaluationRepo

__all__ = ["BaseRepository", "BestPracticeRepo", "EvaluationRepo", "PracticeRecommendationRepo"]

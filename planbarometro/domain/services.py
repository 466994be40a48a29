from __future__ import annotations

import logging
import math

from .i18n import Translate, get_translator
from .models import (
    CapabilityModel,
    CompletionResult,
    CriterionScore,
    DimensionScore,
    EvaluationScores,
    ResponseMap,
)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (browser ``Math.round``)."""
    return int(math.floor(value + 0.5))


def _mean_percentage(values: list[int]) -> int:
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))


def compute_scores(responses: ResponseMap, model: CapabilityModel) -> EvaluationScores:
    """
    Reduce a response map to criterion, dimension and overall percentages.

    - Criterion % = present elements / all elements of the criterion; an
      unanswered element counts as absent.
    - Dimension % = unweighted mean of its criteria percentages.
    - Overall % = mean of the dimension percentages.
    - Empty criteria, dimensions or models score 0.
    - Ids in ``responses`` that the model does not declare are ignored.
    """
    dimension_scores: list[DimensionScore] = []

    for dimension in model.dimensions:
        criterion_scores: list[CriterionScore] = []
        dimension_present = 0

        for criterion in dimension.criteria:
            total = len(criterion.elements)
            present = sum(1 for e in criterion.elements if responses.get(e.id) == 1)
            percentage = round_half_up(present / total * 100) if total else 0
            criterion_scores.append(CriterionScore(criterion.id, present, percentage))
            dimension_present += present

        dimension_scores.append(
            DimensionScore(
                dimension_id=dimension.id,
                score=dimension_present,
                percentage=_mean_percentage([c.percentage for c in criterion_scores]),
                criteria=tuple(criterion_scores),
            )
        )

    return EvaluationScores(
        overall=_mean_percentage([d.percentage for d in dimension_scores]),
        dimensions=tuple(dimension_scores),
    )


def filter_known_responses(responses: ResponseMap, model: CapabilityModel) -> dict[str, int]:
    """Keep only the entries whose element id the model declares."""
    known = model.element_ids()
    return {element_id: value for element_id, value in responses.items() if element_id in known}


def compute_completion(responses: ResponseMap, model: CapabilityModel) -> CompletionResult:
    total = model.total_elements
    answered = len(filter_known_responses(responses, model))
    percentage = round_half_up(answered / total * 100) if total else 0
    return CompletionResult(
        answered=answered,
        total=total,
        percentage=percentage,
        is_complete=total > 0 and answered == total,
    )


def get_score_status(percentage: float, translate: Translate | None = None) -> str:
    t = translate or get_translator()
    if percentage >= 75:
        return t("excellent")
    if percentage >= 50:
        return t("good")
    if percentage >= 25:
        return t("fair")
    return t("poor")


def get_score_color(percentage: float) -> str:
    if percentage >= 75:
        return "green"
    if percentage >= 50:
        return "blue"
    if percentage >= 25:
        return "yellow"
    return "red"


class ScoringService:
    def __init__(self, model: CapabilityModel, logger: logging.Logger | None = None):
        self.model = model
        self.logger = logger or logging.getLogger(__name__)

    def compute_scores(self, responses: ResponseMap) -> EvaluationScores:
        scores = compute_scores(responses, self.model)
        self.logger.debug(
            "Computed scores for model %s: overall=%s dimensions=%s",
            self.model.id,
            scores.overall,
            scores.percentages(),
        )
        return scores

    def compute_completion(self, responses: ResponseMap) -> CompletionResult:
        completion = compute_completion(responses, self.model)
        self.logger.debug(
            "Completion for model %s: %d/%d answered",
            self.model.id,
            completion.answered,
            completion.total,
        )
        return completion

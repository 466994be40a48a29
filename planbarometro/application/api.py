"""
Application API layer for the Planbarómetro service.

Use cases sitting between the web routes and the domain: stateless scoring,
evaluation snapshot CRUD, results recomputation, figures, exports and the
best-practices repository with its criteria matching. Every stored snapshot
has its ``scores`` recomputed from its responses on write; alerts are never
stored, they are regenerated on read.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any

import pandas as pd
from sqlalchemy.orm import Session

from ..domain.alerts import (
    DIMENSION_LABEL_KEYS,
    generate_alerts,
    get_alert_icon,
    get_alert_severity_color,
    merge_alerts,
    summarize_risk,
)
from ..domain.catalog import get_model
from ..domain.i18n import Translate, get_translator
from ..domain.models import CapabilityModel, Dimension, EvaluationScores, StrategicAlert
from ..domain.practices import match_practices
from ..domain.schemas import (
    BestPracticeInput,
    BestPracticeUpdateInput,
    CustomAlertInput,
    EvaluateInput,
    EvaluationInput,
    EvaluationUpdateInput,
    PracticeRecommendationInput,
    ValidationResponse,
    validate_input,
)
from ..domain.services import (
    ScoringService,
    filter_known_responses,
    get_score_color,
    get_score_status,
)
from ..infrastructure.exceptions import (
    ExportError,
    MultipleValidationError,
    PlanbarometroError,
    ValidationError,
    handle_database_error,
    log_error_details,
)
from ..infrastructure.logging import get_logger, log_operation, set_context
from ..infrastructure.models import BestPracticeORM, EvaluationORM, PracticeRecommendationORM
from ..infrastructure.repositories import (
    BestPracticeRepo,
    EvaluationRepo,
    PracticeRecommendationRepo,
)
from ..utils.capability_radar import gradient_color, make_capability_radar

logger = get_logger(__name__)


def _raise_validation_errors(result: ValidationResponse, label: str) -> None:
    errors = [ValidationError(e.field, e.message, e.value) for e in result.errors]
    error_msg = "; ".join(f"{e.field}: {e.message}" for e in result.errors)
    logger.warning(f"{label} validation failed: {error_msg}")
    if len(errors) == 1:
        raise errors[0]
    raise MultipleValidationError(errors)


def _custom_alerts_from_input(raw: list[dict[str, Any]] | None) -> list[StrategicAlert]:
    return [CustomAlertInput.model_validate(item).to_alert() for item in raw or []]


def dimension_label(dimension: Dimension, translate: Translate) -> str:
    key = DIMENSION_LABEL_KEYS.get(dimension.id)
    return translate(key) if key else dimension.name


def _alert_payload(alert: StrategicAlert, source: str) -> dict[str, Any]:
    payload = alert.to_dict()
    payload["source"] = source
    payload["color"] = get_alert_severity_color(alert.severity)
    payload["icon"] = get_alert_icon(alert.severity)
    return payload


def _build_results(
    model: CapabilityModel,
    responses: dict[str, int],
    custom_alerts: list[StrategicAlert],
    translate: Translate,
) -> dict[str, Any]:
    service = ScoringService(model, logger=logger)
    scores = service.compute_scores(responses)
    completion = service.compute_completion(responses)

    known_responses = filter_known_responses(responses, model)
    if len(known_responses) != len(responses):
        logger.debug(
            f"Ignoring {len(responses) - len(known_responses)} responses for unknown elements"
        )
    engine_alerts = generate_alerts(
        scores, model.id, responses=known_responses, translate=translate
    )
    all_alerts = merge_alerts(engine_alerts, custom_alerts)

    statuses = {
        d.dimension_id: {
            "status": get_score_status(d.percentage, translate),
            "color": get_score_color(d.percentage),
        }
        for d in scores.dimensions
    }
    statuses["overall"] = {
        "status": get_score_status(scores.overall, translate),
        "color": get_score_color(scores.overall),
    }

    engine_payload = [_alert_payload(a, "engine") for a in engine_alerts]
    custom_payload = [_alert_payload(a, "custom") for a in custom_alerts]
    summary = summarize_risk(all_alerts)
    logger.info(
        f"Evaluated model '{model.id}': overall={scores.overall}%, "
        f"{len(engine_alerts)} engine alerts, {len(custom_alerts)} custom alerts"
    )

    return {
        "model": model.id,
        "locale": getattr(translate, "locale", None),
        "scores": scores.to_dict(),
        "completion": asdict(completion),
        "statuses": statuses,
        "alerts": engine_payload,
        "custom_alerts": custom_payload,
        "all_alerts": engine_payload + custom_payload,
        "risk_summary": summary.to_dict(),
        "favorable": not all_alerts,
    }


@log_operation("evaluate")
def evaluate(
    responses: dict[str, int],
    model_id: str = "topp",
    locale: str | None = None,
    custom_alerts: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """
    Score a response map and run the alert rules without storing anything.

    Raises:
        ModelNotFoundError: If ``model_id`` is not a known capability model
        ValidationError: If a response value is not 0 or 1

    Example:
        >>> result = evaluate({"t1_1_1": 1, "t1_1_2": 0}, "topp", locale="en")
        >>> result["scores"]["overall"]
        3
    """
    model = get_model(model_id)
    validation_result = validate_input(
        EvaluateInput, {"responses": responses, "custom_alerts": custom_alerts or []}
    )
    if not validation_result.success:
        _raise_validation_errors(validation_result, "Evaluation request")

    data = validation_result.data or {}
    return _build_results(
        model,
        data.get("responses", {}),
        _custom_alerts_from_input(data.get("custom_alerts")),
        get_translator(locale),
    )


def _scores_snapshot(model_id: str, responses: dict[str, int]) -> dict[str, Any]:
    model = get_model(model_id)
    return ScoringService(model, logger=logger).compute_scores(responses).to_dict()


@log_operation("create_evaluation")
def create_evaluation(session: Session, data: dict[str, Any]) -> EvaluationORM:
    """
    Validate and store a new evaluation snapshot.

    Args:
        session: Database session
        data: Snapshot fields (``title`` required; ``model`` defaults to ``topp``)

    Returns:
        Created EvaluationORM instance with its ``scores`` snapshot filled in

    Raises:
        ValidationError: If input data is invalid
        DatabaseError: If the insert fails
    """
    validation_result = validate_input(EvaluationInput, data)
    if not validation_result.success:
        _raise_validation_errors(validation_result, "Evaluation creation")

    validated = validation_result.data
    if validated is None:
        raise RuntimeError("Validation succeeded but returned no data")

    try:
        set_context(operation="create_evaluation", evaluation_title=validated["title"])
        custom_alerts = _custom_alerts_from_input(validated.pop("custom_alerts", []))
        validated["scores"] = _scores_snapshot(validated["model"], validated["responses"])
        validated["custom_alerts"] = [a.to_dict() for a in custom_alerts]

        evaluation = EvaluationRepo(session).create(**validated)
        logger.info(f"Created evaluation '{evaluation.title}' with ID {evaluation.id}")
        return evaluation

    except PlanbarometroError:
        raise
    except Exception as e:
        error_details = log_error_details(e, {"evaluation_title": validated.get("title")})
        logger.error("Failed to create evaluation", extra=error_details)
        raise handle_database_error(e, "create_evaluation") from e


def get_evaluation(session: Session, evaluation_id: int) -> EvaluationORM:
    return EvaluationRepo(session).get_required(evaluation_id)


def list_evaluations(
    session: Session,
    model_id: str | None = None,
    exercise_code: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> list[EvaluationORM]:
    """Stored evaluations, newest first, optionally filtered by model or exercise."""
    repo = EvaluationRepo(session)
    if not exercise_code and not model_id:
        return repo.list_all(limit=limit, offset=offset)

    if exercise_code:
        evaluations = repo.list_by_exercise(exercise_code)
        if model_id:
            evaluations = [e for e in evaluations if e.model == model_id]
    else:
        evaluations = repo.list_by_model(model_id)

    start = offset or 0
    stop = start + limit if limit else None
    return evaluations[start:stop]


@log_operation("update_evaluation")
def update_evaluation(
    session: Session, evaluation_id: int, data: dict[str, Any]
) -> EvaluationORM:
    """
    Apply a partial update and recompute the scores snapshot.

    Raises:
        EvaluationNotFoundError: If the evaluation doesn't exist
        ValidationError: If input data is invalid
    """
    repo = EvaluationRepo(session)
    evaluation = repo.get_required(evaluation_id)

    validation_result = validate_input(EvaluationUpdateInput, data, exclude_unset=True)
    if not validation_result.success:
        _raise_validation_errors(validation_result, "Evaluation update")

    changes = dict(validation_result.data or {})
    if "title" in changes and not changes["title"]:
        raise ValidationError("title", "Evaluation title cannot be empty")
    if "model" in changes and changes["model"] is None:
        changes.pop("model")

    try:
        set_context(operation="update_evaluation", evaluation_id=evaluation_id)
        if "custom_alerts" in changes:
            changes["custom_alerts"] = [
                a.to_dict() for a in _custom_alerts_from_input(changes["custom_alerts"] or [])
            ]
        for key in ("responses", "justifications"):
            if key in changes and changes[key] is None:
                changes[key] = {}

        model_id = changes.get("model") or evaluation.model
        responses = changes.get("responses", evaluation.responses) or {}
        changes["scores"] = _scores_snapshot(model_id, responses)

        evaluation = repo.update(evaluation, **changes)
        logger.info(f"Updated evaluation {evaluation_id}: {', '.join(sorted(changes))}")
        return evaluation

    except PlanbarometroError:
        raise
    except Exception as e:
        error_details = log_error_details(e, {"evaluation_id": evaluation_id})
        logger.error("Failed to update evaluation", extra=error_details)
        raise handle_database_error(e, "update_evaluation") from e


@log_operation("delete_evaluation")
def delete_evaluation(session: Session, evaluation_id: int) -> None:
    repo = EvaluationRepo(session)
    evaluation = repo.get_required(evaluation_id)
    repo.delete(evaluation)
    logger.info(f"Deleted evaluation {evaluation_id}")


@log_operation("get_evaluation_results")
def get_evaluation_results(
    session: Session, evaluation_id: int, locale: str | None = None
) -> dict[str, Any]:
    """
    Recompute scores and alerts for a stored snapshot.

    The stored custom alerts are appended after the engine alerts.
    """
    evaluation = get_evaluation(session, evaluation_id)
    set_context(operation="get_evaluation_results", evaluation_id=evaluation_id)

    model = get_model(evaluation.model)
    custom_alerts = [StrategicAlert.from_dict(a) for a in evaluation.custom_alerts or []]
    results = _build_results(
        model, dict(evaluation.responses or {}), custom_alerts, get_translator(locale)
    )
    results["evaluation_id"] = evaluation.id
    results["title"] = evaluation.title
    return results


def build_results_figures(
    scores: EvaluationScores, model: CapabilityModel, translate: Translate | None = None
) -> dict[str, Any]:
    """Create a Plotly-ready payload: one tile per dimension plus the radar figure."""
    t = translate or get_translator()
    dimensions = {d.id: d for d in model.dimensions}

    tiles = []
    dimension_rows = []
    criterion_rows = []
    for dimension_score in scores.dimensions:
        dimension = dimensions[dimension_score.dimension_id]
        label = dimension_label(dimension, t)
        tiles.append(
            {
                "id": dimension.id,
                "name": label,
                "percentage": dimension_score.percentage,
                "status": get_score_status(dimension_score.percentage, t),
                "color": gradient_color(dimension_score.percentage),
            }
        )
        dimension_rows.append({"Dimension": label, "Percentage": dimension_score.percentage})
        criteria = {c.id: c for c in dimension.criteria}
        for criterion_score in dimension_score.criteria:
            criterion_rows.append(
                {
                    "Dimension": label,
                    "Criterion": criteria[criterion_score.criterion_id].name,
                    "Percentage": criterion_score.percentage,
                }
            )

    radar_json: dict[str, Any] | None = None
    if dimension_rows:
        figure = make_capability_radar(
            pd.DataFrame(dimension_rows, columns=["Dimension", "Percentage"]),
            pd.DataFrame(criterion_rows, columns=["Dimension", "Criterion", "Percentage"]),
            title=f"{model.name}: {scores.overall}%",
        )
        radar_json = json.loads(figure.to_json())

    return {"overall": scores.overall, "tiles": tiles, "radar": radar_json}


@log_operation("get_evaluation_figures")
def get_evaluation_figures(
    session: Session, evaluation_id: int, locale: str | None = None
) -> dict[str, Any]:
    evaluation = get_evaluation(session, evaluation_id)
    model = get_model(evaluation.model)
    scores = ScoringService(model, logger=logger).compute_scores(evaluation.responses or {})
    return build_results_figures(scores, model, get_translator(locale))


def _evaluation_metadata(evaluation: EvaluationORM) -> dict[str, Any]:
    return {
        "id": evaluation.id,
        "title": evaluation.title,
        "model": evaluation.model,
        "exercise_code": evaluation.exercise_code,
        "group_code": evaluation.group_code,
        "country": evaluation.country,
        "territory": evaluation.territory,
        "notes": evaluation.notes,
        "created_at": evaluation.created_at,
        "updated_at": evaluation.updated_at,
    }


@log_operation("export_evaluation")
def export_evaluation(
    session: Session, evaluation_id: int, locale: str | None = None
) -> tuple[dict[str, Any], pd.DataFrame, pd.DataFrame, dict[str, Any]]:
    """
    Flatten a stored evaluation for export.

    Returns:
        ``(metadata, responses_df, alerts_df, scores)`` where ``responses_df`` has
        one row per model element and ``alerts_df`` one row per engine or custom
        alert.

    Raises:
        EvaluationNotFoundError: If the evaluation doesn't exist
        ExportError: If the export tables cannot be built
    """
    evaluation = get_evaluation(session, evaluation_id)
    t = get_translator(locale)

    try:
        model = get_model(evaluation.model)
        results = get_evaluation_results(session, evaluation_id, locale)
        responses = evaluation.responses or {}
        justifications = evaluation.justifications or {}

        dimension_pct = {d["dimensionId"]: d["percentage"] for d in results["scores"]["dimensions"]}
        criterion_pct = {
            c["criterionId"]: c["percentage"]
            for d in results["scores"]["dimensions"]
            for c in d["criteria"]
        }

        response_rows = []
        for dimension, criterion, element in model.elements():
            response_rows.append(
                {
                    "Dimension": dimension_label(dimension, t),
                    "DimensionPercentage": dimension_pct.get(dimension.id),
                    "CriterionID": criterion.id,
                    "Criterion": criterion.name,
                    "CriterionPercentage": criterion_pct.get(criterion.id),
                    "ElementID": element.id,
                    "Element": element.name,
                    "Response": responses.get(element.id),
                    "Justification": justifications.get(element.id),
                }
            )

        alert_rows = [
            {
                "Source": alert["source"],
                "AlertID": alert["id"],
                "Title": alert["title"],
                "Severity": alert["severity"],
                "Criteria": "; ".join(alert["criteria"]),
                "Description": alert["description"],
                "Recommendation": alert.get("recommendation"),
                "RiskLevel": (alert.get("metrics") or {}).get("riskLevel"),
                "ImpactLevel": (alert.get("metrics") or {}).get("impactLevel"),
                "UrgencyLevel": (alert.get("metrics") or {}).get("urgencyLevel"),
            }
            for alert in results["all_alerts"]
        ]

        responses_df = pd.DataFrame(response_rows)
        if not responses_df.empty:
            responses_df = responses_df.astype({"Response": "Int64"})
        alerts_df = pd.DataFrame(alert_rows)
        logger.info(
            f"Prepared export for evaluation {evaluation_id}: "
            f"{len(responses_df)} elements, {len(alerts_df)} alerts"
        )
        return _evaluation_metadata(evaluation), responses_df, alerts_df, results["scores"]

    except PlanbarometroError:
        raise
    except Exception as e:
        error_details = log_error_details(e, {"evaluation_id": evaluation_id})
        logger.error("Failed to export evaluation", extra=error_details)
        raise ExportError(
            f"Failed to export evaluation {evaluation_id}: {str(e)}",
            details=error_details,
        ) from e


# ---------- Best practices ----------


@log_operation("create_best_practice")
def create_best_practice(session: Session, data: dict[str, Any]) -> BestPracticeORM:
    """
    Validate and store a new best practice.

    Raises:
        ValidationError: If input data is invalid
        DatabaseError: If the insert fails
    """
    validation_result = validate_input(BestPracticeInput, data)
    if not validation_result.success:
        _raise_validation_errors(validation_result, "Best practice creation")

    validated = validation_result.data
    if validated is None:
        raise RuntimeError("Validation succeeded but returned no data")

    try:
        practice = BestPracticeRepo(session).create(**validated)
        logger.info(f"Created best practice '{practice.title}' with ID {practice.id}")
        return practice

    except PlanbarometroError:
        raise
    except Exception as e:
        error_details = log_error_details(e, {"practice_title": validated.get("title")})
        logger.error("Failed to create best practice", extra=error_details)
        raise handle_database_error(e, "create_best_practice") from e


def get_best_practice(session: Session, practice_id: int) -> BestPracticeORM:
    return BestPracticeRepo(session).get_required(practice_id)


def list_best_practices(
    session: Session,
    country: str | None = None,
    query: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> list[BestPracticeORM]:
    """Active practices, optionally narrowed by country and a free-text query."""
    repo = BestPracticeRepo(session)
    if not country and not query:
        return repo.list_active(limit=limit, offset=offset)

    practices = repo.search(query) if query else repo.list_by_country(country or "")
    if query and country:
        practices = [p for p in practices if country.lower() in p.country.lower()]

    start = offset or 0
    stop = start + limit if limit else None
    return practices[start:stop]


@log_operation("update_best_practice")
def update_best_practice(
    session: Session, practice_id: int, data: dict[str, Any]
) -> BestPracticeORM:
    """
    Apply a partial update to an active best practice.

    Raises:
        BestPracticeNotFoundError: If the practice doesn't exist or was retired
        ValidationError: If input data is invalid
    """
    repo = BestPracticeRepo(session)
    practice = repo.get_required(practice_id)

    validation_result = validate_input(BestPracticeUpdateInput, data, exclude_unset=True)
    if not validation_result.success:
        _raise_validation_errors(validation_result, "Best practice update")

    changes = dict(validation_result.data or {})
    for key in ("title", "description", "country", "source_type", "target_criteria"):
        if key in changes and changes[key] is None:
            changes.pop(key)

    try:
        practice = repo.update(practice, **changes)
        logger.info(f"Updated best practice {practice_id}: {', '.join(sorted(changes))}")
        return practice

    except PlanbarometroError:
        raise
    except Exception as e:
        error_details = log_error_details(e, {"practice_id": practice_id})
        logger.error("Failed to update best practice", extra=error_details)
        raise handle_database_error(e, "update_best_practice") from e


@log_operation("delete_best_practice")
def delete_best_practice(session: Session, practice_id: int) -> None:
    repo = BestPracticeRepo(session)
    repo.retire(repo.get_required(practice_id))
    logger.info(f"Retired best practice {practice_id}")


def find_best_practices(session: Session, criteria: list[str]) -> list[BestPracticeORM]:
    """Active practices matching at least one of ``criteria``."""
    practices = match_practices(BestPracticeRepo(session).list_active(), criteria)
    logger.debug(f"Found {len(practices)} practices for criteria {criteria}")
    return practices


@log_operation("get_evaluation_practices")
def get_evaluation_practices(
    session: Session, evaluation_id: int, locale: str | None = None
) -> list[dict[str, Any]]:
    """
    Pair every alert of a stored evaluation with the practices matching its criteria.

    Alerts keep their result order (engine alerts first, then custom ones).
    """
    results = get_evaluation_results(session, evaluation_id, locale)
    active = BestPracticeRepo(session).list_active()
    return [
        {
            "alert_id": alert["id"],
            "title": alert["title"],
            "criteria": alert["criteria"],
            "practices": match_practices(active, alert["criteria"]),
        }
        for alert in results["all_alerts"]
    ]


@log_operation("create_practice_recommendation")
def create_practice_recommendation(
    session: Session, data: dict[str, Any]
) -> PracticeRecommendationORM:
    """
    Store a recommendation, optionally attached to an active practice.

    Raises:
        ValidationError: If input data is invalid
        BestPracticeNotFoundError: If ``practice_id`` names no active practice
    """
    validation_result = validate_input(PracticeRecommendationInput, data)
    if not validation_result.success:
        _raise_validation_errors(validation_result, "Recommendation creation")

    validated = validation_result.data or {}
    if validated.get("practice_id") is not None:
        get_best_practice(session, validated["practice_id"])

    try:
        recommendation = PracticeRecommendationRepo(session).create(**validated)
        logger.info(
            f"Created recommendation {recommendation.id} for '{recommendation.criterion_name}'"
        )
        return recommendation

    except PlanbarometroError:
        raise
    except Exception as e:
        error_details = log_error_details(e, {"practice_id": validated.get("practice_id")})
        logger.error("Failed to create recommendation", extra=error_details)
        raise handle_database_error(e, "create_practice_recommendation") from e


def list_practice_recommendations(
    session: Session, practice_id: int | None = None, criterion: str | None = None
) -> list[PracticeRecommendationORM]:
    repo = PracticeRecommendationRepo(session)
    if practice_id is not None:
        get_best_practice(session, practice_id)
        recommendations = repo.list_by_practice(practice_id)
        if criterion:
            needle = criterion.lower()
            recommendations = [
                r for r in recommendations if needle in r.criterion_name.lower()
            ]
        return recommendations
    if criterion:
        return repo.list_by_criterion(criterion)
    return repo.list()

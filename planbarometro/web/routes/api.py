from __future__ import annotations

import io
import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import JSONResponse, StreamingResponse
from sqlalchemy.orm import Session

from planbarometro.application import api as app_api
from planbarometro.domain.catalog import get_model, list_models
from planbarometro.domain.i18n import get_translator
from planbarometro.domain.models import CapabilityModel
from planbarometro.infrastructure.config import get_settings
from planbarometro.infrastructure.exceptions import (
    BestPracticeNotFoundError,
    EvaluationNotFoundError,
    ModelNotFoundError,
    PlanbarometroError,
)
from planbarometro.infrastructure.models import BestPracticeORM, EvaluationORM
from planbarometro.utils.exports import make_json_export_payload, make_xlsx_export_bytes
from planbarometro.web.dependencies import get_db_session, get_locale
from planbarometro.web.schemas import (
    AlertPractices,
    BestPractice,
    BestPracticeCreateRequest,
    BestPracticeUpdateRequest,
    Criterion,
    Dimension,
    Element,
    EvaluateRequest,
    EvaluationCreateRequest,
    EvaluationDetail,
    EvaluationListItem,
    EvaluationResults,
    EvaluationUpdateRequest,
    FiguresResponse,
    ModelDetail,
    ModelSummary,
    PracticeMatchRequest,
    PracticeRecommendation,
    PracticeRecommendationCreateRequest,
)

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
NOT_FOUND_ERRORS = (EvaluationNotFoundError, ModelNotFoundError, BestPracticeNotFoundError)


def _http_error(exc: PlanbarometroError) -> HTTPException:
    if isinstance(exc, NOT_FOUND_ERRORS):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.user_message)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.user_message)


def _model_summary(model: CapabilityModel) -> ModelSummary:
    return ModelSummary(
        id=model.id,
        name=model.name,
        description=model.description or None,
        dimension_count=len(model.dimensions),
        element_count=model.total_elements,
    )


def _overall(evaluation: EvaluationORM) -> int | None:
    return (evaluation.scores or {}).get("overall")


def _list_item(evaluation: EvaluationORM) -> EvaluationListItem:
    item = EvaluationListItem.model_validate(evaluation)
    item.overall = _overall(evaluation)
    return item


def _detail(evaluation: EvaluationORM) -> EvaluationDetail:
    detail = EvaluationDetail.model_validate(evaluation)
    detail.overall = _overall(evaluation)
    return detail


def _practice(practice: BestPracticeORM) -> BestPractice:
    return BestPractice.model_validate(practice)


def _ensure_exports_enabled() -> None:
    if not get_settings().app.enable_data_export:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Data export is disabled")


@router.get("/health")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/models", response_model=list[ModelSummary])
def list_capability_models() -> list[ModelSummary]:
    return [_model_summary(model) for model in list_models()]


@router.get("/models/{model_id}", response_model=ModelDetail)
def get_capability_model(model_id: str, locale: str = Depends(get_locale)) -> ModelDetail:
    try:
        model = get_model(model_id)
    except ModelNotFoundError as exc:
        raise _http_error(exc) from exc

    t = get_translator(locale)
    summary = _model_summary(model)
    return ModelDetail(
        **summary.model_dump(),
        dimensions=[
            Dimension(
                id=dimension.id,
                name=dimension.name,
                label=app_api.dimension_label(dimension, t),
                description=dimension.description or None,
                criteria=[
                    Criterion(
                        id=criterion.id,
                        name=criterion.name,
                        description=criterion.description,
                        weight=criterion.weight,
                        elements=[Element(id=e.id, name=e.name) for e in criterion.elements],
                    )
                    for criterion in dimension.criteria
                ],
            )
            for dimension in model.dimensions
        ],
    )


@router.post("/models/{model_id}/evaluate", response_model=EvaluationResults)
def evaluate_responses(
    model_id: str,
    payload: EvaluateRequest,
    locale: str = Depends(get_locale),
) -> EvaluationResults:
    try:
        results = app_api.evaluate(
            payload.responses,
            model_id=model_id,
            locale=locale,
            custom_alerts=payload.custom_alerts,
        )
    except PlanbarometroError as exc:
        raise _http_error(exc) from exc
    return EvaluationResults(**results)


@router.get("/evaluations", response_model=list[EvaluationListItem])
def list_evaluations(
    model: str | None = Query(None),
    exercise_code: str | None = Query(None),
    limit: int | None = Query(None, ge=1, le=500),
    offset: int | None = Query(None, ge=0),
    db: Session = Depends(get_db_session),
) -> list[EvaluationListItem]:
    evaluations = app_api.list_evaluations(
        db, model_id=model, exercise_code=exercise_code, limit=limit, offset=offset
    )
    return [_list_item(item) for item in evaluations]


@router.post("/evaluations", response_model=EvaluationDetail, status_code=status.HTTP_201_CREATED)
def create_evaluation(
    payload: EvaluationCreateRequest,
    db: Session = Depends(get_db_session),
) -> EvaluationDetail:
    try:
        evaluation = app_api.create_evaluation(db, payload.model_dump())
        db.commit()
        db.refresh(evaluation)
    except PlanbarometroError as exc:
        db.rollback()
        raise _http_error(exc) from exc
    except Exception:
        db.rollback()
        raise

    return _detail(evaluation)


@router.get("/evaluations/{evaluation_id}", response_model=EvaluationDetail)
def get_evaluation(evaluation_id: int, db: Session = Depends(get_db_session)) -> EvaluationDetail:
    try:
        evaluation = app_api.get_evaluation(db, evaluation_id)
    except PlanbarometroError as exc:
        raise _http_error(exc) from exc
    return _detail(evaluation)


@router.put("/evaluations/{evaluation_id}", response_model=EvaluationDetail)
def update_evaluation(
    evaluation_id: int,
    payload: EvaluationUpdateRequest,
    db: Session = Depends(get_db_session),
) -> EvaluationDetail:
    try:
        evaluation = app_api.update_evaluation(
            db, evaluation_id, payload.model_dump(exclude_unset=True)
        )
        db.commit()
        db.refresh(evaluation)
    except PlanbarometroError as exc:
        db.rollback()
        raise _http_error(exc) from exc
    except Exception:
        db.rollback()
        raise

    return _detail(evaluation)


@router.delete("/evaluations/{evaluation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_evaluation(evaluation_id: int, db: Session = Depends(get_db_session)) -> Response:
    try:
        app_api.delete_evaluation(db, evaluation_id)
        db.commit()
    except PlanbarometroError as exc:
        db.rollback()
        raise _http_error(exc) from exc
    except Exception:
        db.rollback()
        raise
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/evaluations/{evaluation_id}/results", response_model=EvaluationResults)
def get_evaluation_results(
    evaluation_id: int,
    locale: str = Depends(get_locale),
    db: Session = Depends(get_db_session),
) -> EvaluationResults:
    try:
        results = app_api.get_evaluation_results(db, evaluation_id, locale)
    except PlanbarometroError as exc:
        raise _http_error(exc) from exc
    return EvaluationResults(**results)


@router.get("/evaluations/{evaluation_id}/figures", response_model=FiguresResponse)
def get_evaluation_figures(
    evaluation_id: int,
    locale: str = Depends(get_locale),
    db: Session = Depends(get_db_session),
) -> FiguresResponse:
    try:
        payload = app_api.get_evaluation_figures(db, evaluation_id, locale)
    except PlanbarometroError as exc:
        raise _http_error(exc) from exc
    return FiguresResponse(**payload)


@router.get("/evaluations/{evaluation_id}/export.json")
def export_evaluation_json(
    evaluation_id: int,
    locale: str = Depends(get_locale),
    db: Session = Depends(get_db_session),
) -> JSONResponse:
    _ensure_exports_enabled()
    try:
        metadata, responses_df, alerts_df, scores = app_api.export_evaluation(
            db, evaluation_id, locale
        )
    except PlanbarometroError as exc:
        raise _http_error(exc) from exc

    payload_str = make_json_export_payload(metadata, responses_df, alerts_df, scores)
    return JSONResponse(content=json.loads(payload_str))


@router.get("/evaluations/{evaluation_id}/export.xlsx")
def export_evaluation_xlsx(
    evaluation_id: int,
    locale: str = Depends(get_locale),
    db: Session = Depends(get_db_session),
) -> StreamingResponse:
    _ensure_exports_enabled()
    try:
        _, responses_df, alerts_df, _ = app_api.export_evaluation(db, evaluation_id, locale)
    except PlanbarometroError as exc:
        raise _http_error(exc) from exc

    xlsx_bytes = make_xlsx_export_bytes(responses_df, alerts_df)
    stream = io.BytesIO(xlsx_bytes)
    stream.seek(0)
    headers = {"Content-Disposition": f"attachment; filename=evaluation_{evaluation_id}.xlsx"}
    return StreamingResponse(stream, media_type=XLSX_MEDIA_TYPE, headers=headers)


@router.get("/evaluations/{evaluation_id}/practices", response_model=list[AlertPractices])
def get_evaluation_practices(
    evaluation_id: int,
    locale: str = Depends(get_locale),
    db: Session = Depends(get_db_session),
) -> list[AlertPractices]:
    try:
        pairs = app_api.get_evaluation_practices(db, evaluation_id, locale)
    except PlanbarometroError as exc:
        raise _http_error(exc) from exc
    return [
        AlertPractices(
            alert_id=pair["alert_id"],
            title=pair["title"],
            criteria=pair["criteria"],
            practices=[_practice(p) for p in pair["practices"]],
        )
        for pair in pairs
    ]


@router.get("/best-practices", response_model=list[BestPractice])
def list_best_practices(
    country: str | None = Query(None),
    q: str | None = Query(None, description="Search title, description and institution"),
    limit: int | None = Query(None, ge=1, le=500),
    offset: int | None = Query(None, ge=0),
    db: Session = Depends(get_db_session),
) -> list[BestPractice]:
    practices = app_api.list_best_practices(
        db, country=country, query=q, limit=limit, offset=offset
    )
    return [_practice(p) for p in practices]


@router.post("/best-practices", response_model=BestPractice, status_code=status.HTTP_201_CREATED)
def create_best_practice(
    payload: BestPracticeCreateRequest,
    db: Session = Depends(get_db_session),
) -> BestPractice:
    try:
        practice = app_api.create_best_practice(db, payload.model_dump())
        db.commit()
        db.refresh(practice)
    except PlanbarometroError as exc:
        db.rollback()
        raise _http_error(exc) from exc
    except Exception:
        db.rollback()
        raise

    return _practice(practice)


@router.post("/best-practices/match", response_model=list[BestPractice])
def match_best_practices(
    payload: PracticeMatchRequest,
    db: Session = Depends(get_db_session),
) -> list[BestPractice]:
    return [_practice(p) for p in app_api.find_best_practices(db, payload.criteria)]


@router.get("/best-practices/{practice_id}", response_model=BestPractice)
def get_best_practice(practice_id: int, db: Session = Depends(get_db_session)) -> BestPractice:
    try:
        practice = app_api.get_best_practice(db, practice_id)
    except PlanbarometroError as exc:
        raise _http_error(exc) from exc
    return _practice(practice)


@router.put("/best-practices/{practice_id}", response_model=BestPractice)
def update_best_practice(
    practice_id: int,
    payload: BestPracticeUpdateRequest,
    db: Session = Depends(get_db_session),
) -> BestPractice:
    try:
        practice = app_api.update_best_practice(
            db, practice_id, payload.model_dump(exclude_unset=True)
        )
        db.commit()
        db.refresh(practice)
    except PlanbarometroError as exc:
        db.rollback()
        raise _http_error(exc) from exc
    except Exception:
        db.rollback()
        raise

    return _practice(practice)


@router.delete("/best-practices/{practice_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_best_practice(practice_id: int, db: Session = Depends(get_db_session)) -> Response:
    try:
        app_api.delete_best_practice(db, practice_id)
        db.commit()
    except PlanbarometroError as exc:
        db.rollback()
        raise _http_error(exc) from exc
    except Exception:
        db.rollback()
        raise
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/best-practices/{practice_id}/recommendations",
    response_model=list[PracticeRecommendation],
)
def list_practice_recommendations(
    practice_id: int, db: Session = Depends(get_db_session)
) -> list[PracticeRecommendation]:
    try:
        recommendations = app_api.list_practice_recommendations(db, practice_id=practice_id)
    except PlanbarometroError as exc:
        raise _http_error(exc) from exc
    return [PracticeRecommendation.model_validate(r) for r in recommendations]


@router.post(
    "/best-practices/{practice_id}/recommendations",
    response_model=PracticeRecommendation,
    status_code=status.HTTP_201_CREATED,
)
def create_practice_recommendation(
    practice_id: int,
    payload: PracticeRecommendationCreateRequest,
    db: Session = Depends(get_db_session),
) -> PracticeRecommendation:
    try:
        recommendation = app_api.create_practice_recommendation(
            db, {**payload.model_dump(), "practice_id": practice_id}
        )
        db.commit()
        db.refresh(recommendation)
    except PlanbarometroError as exc:
        db.rollback()
        raise _http_error(exc) from exc
    except Exception:
        db.rollback()
        raise

    return PracticeRecommendation.model_validate(recommendation)


@router.get("/recommendations", response_model=list[PracticeRecommendation])
def search_recommendations(
    criterion: str | None = Query(None),
    db: Session = Depends(get_db_session),
) -> list[PracticeRecommendation]:
    recommendations = app_api.list_practice_recommendations(db, criterion=criterion)
    return [PracticeRecommendation.model_validate(r) for r in recommendations]

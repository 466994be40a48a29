from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Element(BaseModel):
    id: str
    name: str


class Criterion(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    weight: float = 1.0
    elements: list[Element]


class Dimension(BaseModel):
    id: str
    name: str
    label: str
    description: Optional[str] = None
    criteria: list[Criterion]


class ModelSummary(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    dimension_count: int
    element_count: int


class ModelDetail(ModelSummary):
    dimensions: list[Dimension]


class EvaluateRequest(BaseModel):
    responses: dict[str, Any] = Field(default_factory=dict)
    custom_alerts: list[dict[str, Any]] = Field(default_factory=list)


class Completion(BaseModel):
    answered: int
    total: int
    percentage: int
    is_complete: bool


class ScoreStatus(BaseModel):
    status: str
    color: str


class Alert(BaseModel):
    id: str
    title: str
    description: str
    severity: Literal["high", "medium", "low"]
    criteria: list[str]
    recommendation: Optional[str] = None
    metrics: Optional[dict[str, int]] = None
    source: Literal["engine", "custom"]
    color: str
    icon: str


class RiskSummary(BaseModel):
    status: str
    generalRisk: int
    stability: int
    urgency: int


class EvaluationResults(BaseModel):
    model: str
    locale: Optional[str] = None
    scores: dict[str, Any]
    completion: Completion
    statuses: dict[str, ScoreStatus]
    alerts: list[Alert]
    custom_alerts: list[Alert]
    all_alerts: list[Alert]
    risk_summary: RiskSummary
    favorable: bool
    evaluation_id: Optional[int] = None
    title: Optional[str] = None


class EvaluationCreateRequest(BaseModel):
    title: str
    model: str = "topp"
    exercise_code: Optional[str] = None
    group_code: Optional[str] = None
    country: Optional[str] = None
    territory: Optional[str] = None
    notes: Optional[str] = None
    responses: dict[str, Any] = Field(default_factory=dict)
    justifications: dict[str, str] = Field(default_factory=dict)
    custom_alerts: list[dict[str, Any]] = Field(default_factory=list)


class EvaluationUpdateRequest(BaseModel):
    title: Optional[str] = None
    model: Optional[str] = None
    exercise_code: Optional[str] = None
    group_code: Optional[str] = None
    country: Optional[str] = None
    territory: Optional[str] = None
    notes: Optional[str] = None
    responses: Optional[dict[str, Any]] = None
    justifications: Optional[dict[str, str]] = None
    custom_alerts: Optional[list[dict[str, Any]]] = None


class EvaluationListItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    model: str
    exercise_code: Optional[str] = None
    group_code: Optional[str] = None
    country: Optional[str] = None
    territory: Optional[str] = None
    overall: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class EvaluationDetail(EvaluationListItem):
    notes: Optional[str] = None
    responses: dict[str, int]
    justifications: dict[str, str]
    scores: Optional[dict[str, Any]] = None
    custom_alerts: list[dict[str, Any]]


class DimensionTile(BaseModel):
    id: str
    name: str
    percentage: int
    status: str
    color: str


class PlotlyFigure(BaseModel):
    model_config = ConfigDict(extra="allow")

    data: list[Any]
    layout: dict[str, Any]
    frames: Optional[list[Any]] = None


class FiguresResponse(BaseModel):
    overall: int
    tiles: list[DimensionTile]
    radar: Optional[PlotlyFigure] = None


class BestPracticeCreateRequest(BaseModel):
    title: str
    description: str
    country: str
    institution: Optional[str] = None
    year: Optional[int] = None
    source_url: Optional[str] = None
    source_type: str
    target_criteria: list[str]
    results: Optional[str] = None
    key_lessons: Optional[list[str]] = None
    tags: Optional[list[str]] = None


class BestPracticeUpdateRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    country: Optional[str] = None
    institution: Optional[str] = None
    year: Optional[int] = None
    source_url: Optional[str] = None
    source_type: Optional[str] = None
    target_criteria: Optional[list[str]] = None
    results: Optional[str] = None
    key_lessons: Optional[list[str]] = None
    tags: Optional[list[str]] = None


class BestPractice(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    country: str
    institution: Optional[str] = None
    year: Optional[int] = None
    source_url: Optional[str] = None
    source_type: str
    target_criteria: list[str]
    results: Optional[str] = None
    key_lessons: Optional[list[str]] = None
    tags: Optional[list[str]] = None
    created_at: datetime
    updated_at: datetime


class PracticeMatchRequest(BaseModel):
    criteria: list[str] = Field(..., min_length=1)


class AlertPractices(BaseModel):
    alert_id: str
    title: str
    criteria: list[str]
    practices: list[BestPractice]


class PracticeRecommendationCreateRequest(BaseModel):
    criterion_name: str
    recommendation: str
    implementation_steps: Optional[list[str]] = None
    expected_impact: Optional[str] = None
    timeframe: Optional[str] = None


class PracticeRecommendation(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    practice_id: Optional[int] = None
    criterion_name: str
    recommendation: str
    implementation_steps: Optional[list[str]] = None
    expected_impact: Optional[str] = None
    timeframe: Optional[str] = None
    created_at: datetime

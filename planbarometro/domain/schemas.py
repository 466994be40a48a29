"""
Pydantic schemas for validating evaluation snapshots and custom alerts.

Scoring itself accepts any mapping; these schemas guard what the API and
the persistence layer accept from clients.
"""

from __future__ import annotations

import re
import time
from html import unescape
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .catalog import list_models
from .models import AlertMetrics, StrategicAlert


class BaseValidationSchema(BaseModel):
    """Base schema with common string sanitising."""

    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    @field_validator("*", mode="before")
    @classmethod
    def sanitize_strings(cls, v):
        """Strip markup and control characters from free-text inputs."""
        if isinstance(v, str):
            cleaned = unescape(v.strip())
            cleaned = re.sub(
                r"<\s*script[^>]*>.*?<\s*/\s*script\s*>",
                "",
                cleaned,
                flags=re.IGNORECASE | re.DOTALL,
            )
            cleaned = re.sub(r"<[^>]+>", "", cleaned)
            cleaned = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]", "", cleaned)
            return cleaned
        return v


def _custom_alert_id() -> str:
    return f"custom-{int(time.time() * 1000)}"


class AlertMetricsInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    risk_level: int = Field(50, ge=0, le=100, alias="riskLevel")
    impact_level: int = Field(50, ge=0, le=100, alias="impactLevel")
    urgency_level: int = Field(50, ge=0, le=100, alias="urgencyLevel")


class CustomAlertInput(BaseValidationSchema):
    """A user-authored alert with the same shape as the rule engine's output."""

    model_config = ConfigDict(
        str_strip_whitespace=True, validate_assignment=True, populate_by_name=True
    )

    id: str = Field(default_factory=_custom_alert_id, min_length=1, max_length=64)
    title: str = Field(..., max_length=255)
    description: str = Field(..., max_length=2000)
    severity: Literal["high", "medium", "low"] = "medium"
    criteria: list[str] = Field(..., min_length=1)
    recommendation: str | None = Field(None, max_length=2000)
    metrics: AlertMetricsInput = Field(default_factory=AlertMetricsInput)

    @field_validator("title", "description")
    @classmethod
    def validate_required_text(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @field_validator("criteria")
    @classmethod
    def validate_criteria(cls, v: list[str]) -> list[str]:
        cleaned = [c.strip() for c in v if c and c.strip()]
        if not cleaned:
            raise ValueError("at least one criterion is required")
        return cleaned

    def to_alert(self) -> StrategicAlert:
        return StrategicAlert(
            id=self.id,
            title=self.title,
            description=self.description,
            severity=self.severity,
            criteria=tuple(self.criteria),
            recommendation=self.recommendation or None,
            metrics=AlertMetrics(
                risk_level=self.metrics.risk_level,
                impact_level=self.metrics.impact_level,
                urgency_level=self.metrics.urgency_level,
            ),
        )


def _check_model_id(v: str) -> str:
    known = [m.id for m in list_models()]
    if v not in known:
        raise ValueError(f"unknown model '{v}', expected one of {', '.join(known)}")
    return v


def _check_responses(v: dict[str, int]) -> dict[str, int]:
    bad = sorted(element_id for element_id, value in v.items() if value not in (0, 1))
    if bad:
        raise ValueError(f"responses must be 0 (absent) or 1 (present); invalid: {', '.join(bad)}")
    return v


class EvaluateInput(BaseValidationSchema):
    """Stateless scoring request: responses plus optional custom alerts."""

    responses: dict[str, int] = Field(default_factory=dict)
    custom_alerts: list[CustomAlertInput] = Field(default_factory=list)

    @field_validator("responses")
    @classmethod
    def validate_responses(cls, v: dict[str, int]) -> dict[str, int]:
        return _check_responses(v)


class EvaluationInput(BaseValidationSchema):
    """Validation schema for creating an evaluation snapshot."""

    title: str = Field(..., min_length=1, max_length=255)
    model: str = Field("topp", min_length=1, max_length=64)
    exercise_code: str | None = Field(None, max_length=255)
    group_code: str | None = Field(None, max_length=255)
    country: str | None = Field(None, max_length=255)
    territory: str | None = Field(None, max_length=255)
    notes: str | None = Field(None, max_length=10000)
    responses: dict[str, int] = Field(default_factory=dict)
    justifications: dict[str, str] = Field(default_factory=dict)
    custom_alerts: list[CustomAlertInput] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Evaluation title cannot be empty")
        return v.strip()

    @field_validator("model")
    @classmethod
    def validate_model(cls, v: str) -> str:
        return _check_model_id(v)

    @field_validator("responses")
    @classmethod
    def validate_responses(cls, v: dict[str, int]) -> dict[str, int]:
        return _check_responses(v)

    @field_validator("exercise_code", "group_code", "country", "territory", "notes")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v


class EvaluationUpdateInput(BaseValidationSchema):
    """Partial update: only the supplied fields are changed."""

    title: str | None = Field(None, min_length=1, max_length=255)
    model: str | None = Field(None, min_length=1, max_length=64)
    exercise_code: str | None = Field(None, max_length=255)
    group_code: str | None = Field(None, max_length=255)
    country: str | None = Field(None, max_length=255)
    territory: str | None = Field(None, max_length=255)
    notes: str | None = Field(None, max_length=10000)
    responses: dict[str, int] | None = None
    justifications: dict[str, str] | None = None
    custom_alerts: list[CustomAlertInput] | None = None

    @field_validator("model")
    @classmethod
    def validate_model(cls, v: str | None) -> str | None:
        return _check_model_id(v) if v is not None else v

    @field_validator("responses")
    @classmethod
    def validate_responses(cls, v: dict[str, int] | None) -> dict[str, int] | None:
        return _check_responses(v) if v is not None else v


SourceType = Literal["pdf", "web", "academic", "case_study"]


def _clean_terms(v: list[str] | None) -> list[str] | None:
    if v is None:
        return None
    return [term.strip() for term in v if term and term.strip()]


def _check_source_url(v: str | None) -> str | None:
    if not v:
        return None
    if not v.startswith(("http://", "https://")):
        raise ValueError("source URL must start with http:// or https://")
    return v


class BestPracticeInput(BaseValidationSchema):
    """Validation schema for adding a practice to the best-practices repository."""

    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(..., min_length=1, max_length=5000)
    country: str = Field(..., min_length=1, max_length=255)
    institution: str | None = Field(None, max_length=255)
    year: int | None = Field(None, ge=1900, le=2100)
    source_url: str | None = Field(None, max_length=1000)
    source_type: SourceType
    target_criteria: list[str] = Field(..., min_length=1)
    results: str | None = Field(None, max_length=5000)
    key_lessons: list[str] | None = None
    tags: list[str] | None = None

    @field_validator("target_criteria")
    @classmethod
    def validate_target_criteria(cls, v: list[str]) -> list[str]:
        cleaned = _clean_terms(v) or []
        if not cleaned:
            raise ValueError("at least one target criterion is required")
        return cleaned

    @field_validator("key_lessons", "tags")
    @classmethod
    def validate_terms(cls, v: list[str] | None) -> list[str] | None:
        return _clean_terms(v)

    @field_validator("source_url")
    @classmethod
    def validate_source_url(cls, v: str | None) -> str | None:
        return _check_source_url(v)


class BestPracticeUpdateInput(BaseValidationSchema):
    """Partial update of a best practice."""

    title: str | None = Field(None, min_length=1, max_length=500)
    description: str | None = Field(None, min_length=1, max_length=5000)
    country: str | None = Field(None, min_length=1, max_length=255)
    institution: str | None = Field(None, max_length=255)
    year: int | None = Field(None, ge=1900, le=2100)
    source_url: str | None = Field(None, max_length=1000)
    source_type: SourceType | None = None
    target_criteria: list[str] | None = None
    results: str | None = Field(None, max_length=5000)
    key_lessons: list[str] | None = None
    tags: list[str] | None = None

    @field_validator("target_criteria")
    @classmethod
    def validate_target_criteria(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return None
        cleaned = _clean_terms(v) or []
        if not cleaned:
            raise ValueError("at least one target criterion is required")
        return cleaned

    @field_validator("source_url")
    @classmethod
    def validate_source_url(cls, v: str | None) -> str | None:
        return _check_source_url(v)

    @field_validator("key_lessons", "tags")
    @classmethod
    def validate_terms(cls, v: list[str] | None) -> list[str] | None:
        return _clean_terms(v)


class PracticeRecommendationInput(BaseValidationSchema):
    practice_id: int | None = Field(None, ge=1)
    criterion_name: str = Field(..., min_length=1, max_length=255)
    recommendation: str = Field(..., min_length=1, max_length=5000)
    implementation_steps: list[str] | None = None
    expected_impact: str | None = Field(None, max_length=2000)
    timeframe: str | None = Field(None, max_length=255)

    @field_validator("implementation_steps")
    @classmethod
    def validate_steps(cls, v: list[str] | None) -> list[str] | None:
        return _clean_terms(v)


class ValidationErrorDetail(BaseModel):
    field: str
    message: str
    value: Any = None


class ValidationResponse(BaseModel):
    success: bool
    errors: list[ValidationErrorDetail] = []
    data: dict[str, Any] | None = None


def validate_input(
    schema_class: type[BaseModel], data: dict[str, Any], exclude_unset: bool = False
) -> ValidationResponse:
    """
    Validate ``data`` against ``schema_class`` and return a structured result.

    Example:
        >>> result = validate_input(EvaluationInput, {"title": "Baseline"})
        >>> result.success
        True
    """
    try:
        validated = schema_class(**data)
        return ValidationResponse(
            success=True, data=validated.model_dump(exclude_unset=exclude_unset)
        )
    except Exception as e:
        errors = []
        if hasattr(e, "errors"):
            for error in e.errors():
                errors.append(
                    ValidationErrorDetail(
                        field=".".join(str(x) for x in error["loc"]) or "general",
                        message=error["msg"],
                        value=error.get("input"),
                    )
                )
        else:
            errors.append(ValidationErrorDetail(field="general", message=str(e)))

        return ValidationResponse(success=False, errors=errors)

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.utcnow()


class Base(DeclarativeBase):
    pass


class EvaluationORM(Base):
    """Stored snapshot of one evaluation: responses plus derived scores and custom alerts."""

    __tablename__ = "evaluations"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    model: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    exercise_code: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    group_code: Mapped[str | None] = mapped_column(String(255), nullable=True)
    country: Mapped[str | None] = mapped_column(String(255), nullable=True)
    territory: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    responses: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    justifications: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    scores: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    custom_alerts: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=_utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=_utcnow, onupdate=_utcnow, nullable=False
    )


class BestPracticeORM(Base):
    """Documented public-management experience that can be matched to alert criteria."""

    __tablename__ = "best_practices"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    country: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    institution: Mapped[str | None] = mapped_column(String(255), nullable=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    source_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    source_type: Mapped[str] = mapped_column(String(32), nullable=False)
    target_criteria: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    results: Mapped[str | None] = mapped_column(Text, nullable=True)
    key_lessons: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    tags: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=_utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=_utcnow, onupdate=_utcnow, nullable=False
    )


class PracticeRecommendationORM(Base):
    __tablename__ = "practice_recommendations"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    practice_id: Mapped[int | None] = mapped_column(
        ForeignKey("best_practices.id", ondelete="CASCADE"), nullable=True, index=True
    )
    criterion_name: Mapped[str] = mapped_column(String(255), nullable=False)
    recommendation: Mapped[str] = mapped_column(Text, nullable=False)
    implementation_steps: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    expected_impact: Mapped[str | None] = mapped_column(Text, nullable=True)
    timeframe: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=_utcnow, nullable=False
    )

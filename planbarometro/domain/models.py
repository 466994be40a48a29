from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

Severity = Literal["high", "medium", "low"]
SEVERITIES: tuple[str, ...] = ("high", "medium", "low")

# element id -> 0 (absent) / 1 (present); missing key = unanswered
ResponseMap = Mapping[str, int]


@dataclass(frozen=True, slots=True)
class Element:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class Criterion:
    id: str
    name: str
    elements: tuple[Element, ...] = ()
    description: str | None = None
    weight: float = 1.0  # stored only; scoring uses an unweighted mean


@dataclass(frozen=True, slots=True)
class Dimension:
    id: str
    name: str
    criteria: tuple[Criterion, ...] = ()
    description: str = ""


@dataclass(frozen=True, slots=True)
class CapabilityModel:
    id: str
    name: str
    dimensions: tuple[Dimension, ...] = ()
    description: str = ""

    def elements(self) -> Iterator[tuple[Dimension, Criterion, Element]]:
        """Walk every element in declaration order with its parents."""
        for dimension in self.dimensions:
            for criterion in dimension.criteria:
                for element in criterion.elements:
                    yield dimension, criterion, element

    def element_ids(self) -> set[str]:
        return {element.id for _, _, element in self.elements()}

    @property
    def total_elements(self) -> int:
        return sum(1 for _ in self.elements())

    def validate(self) -> None:
        seen: set[str] = set()
        for _, criterion, element in self.elements():
            if element.id in seen:
                raise ValueError(
                    f"Duplicate element id '{element.id}' in model '{self.id}' "
                    f"(criterion '{criterion.id}')"
                )
            seen.add(element.id)


@dataclass(frozen=True, slots=True)
class CriterionScore:
    criterion_id: str
    score: int  # elements answered as present
    percentage: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "criterionId": self.criterion_id,
            "score": self.score,
            "percentage": self.percentage,
        }


@dataclass(frozen=True, slots=True)
class DimensionScore:
    dimension_id: str
    score: int
    percentage: int
    criteria: tuple[CriterionScore, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "dimensionId": self.dimension_id,
            "score": self.score,
            "percentage": self.percentage,
            "criteria": [c.to_dict() for c in self.criteria],
        }


@dataclass(frozen=True, slots=True)
class EvaluationScores:
    overall: int
    dimensions: tuple[DimensionScore, ...] = ()

    def percentages(self) -> list[int]:
        return [d.percentage for d in self.dimensions]

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall": self.overall,
            "dimensions": [d.to_dict() for d in self.dimensions],
        }


@dataclass(frozen=True, slots=True)
class AlertMetrics:
    risk_level: int
    impact_level: int
    urgency_level: int

    def to_dict(self) -> dict[str, int]:
        return {
            "riskLevel": self.risk_level,
            "impactLevel": self.impact_level,
            "urgencyLevel": self.urgency_level,
        }


@dataclass(frozen=True, slots=True)
class StrategicAlert:
    id: str
    title: str
    description: str
    severity: Severity
    criteria: tuple[str, ...] = ()
    recommendation: str | None = None
    metrics: AlertMetrics | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "severity": self.severity,
            "criteria": list(self.criteria),
            "recommendation": self.recommendation,
        }
        if self.metrics is not None:
            payload["metrics"] = self.metrics.to_dict()
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StrategicAlert:
        metrics_data = data.get("metrics")
        metrics = None
        if metrics_data:
            metrics = AlertMetrics(
                risk_level=int(metrics_data.get("riskLevel", 0)),
                impact_level=int(metrics_data.get("impactLevel", 0)),
                urgency_level=int(metrics_data.get("urgencyLevel", 0)),
            )
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            description=str(data["description"]),
            severity=data["severity"],
            criteria=tuple(data.get("criteria") or ()),
            recommendation=data.get("recommendation"),
            metrics=metrics,
        )


@dataclass(slots=True)
class CompletionResult:
    answered: int
    total: int
    percentage: int
    is_complete: bool = field(default=False)

"""
Strategic alert rules for the TOPP capability model.

Each rule is an independent ``AlertRule`` record: a condition over the four
dimension percentages (and, for two rules, the raw responses) plus the
formulas for its risk metric. ``ALERT_RULES`` is evaluated top to bottom and
the resulting alerts keep that order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

from .catalog import TOPP_DIMENSION_IDS, TOPP_MODEL_ID
from .i18n import Translate, get_translator
from .models import (
    SEVERITIES,
    AlertMetrics,
    EvaluationScores,
    ResponseMap,
    Severity,
    StrategicAlert,
)
from .services import round_half_up

logger = logging.getLogger(__name__)

DIMENSION_LABEL_KEYS: dict[str, str] = {
    "technical": "technicalCapacity",
    "operational": "operationalCapacity",
    "political": "politicalCapacity",
    "prospective": "prospectiveCapacity",
}

# SEVERITIES is ordered most severe first
SEVERITY_RANK: dict[str, int] = {s: len(SEVERITIES) - i for i, s in enumerate(SEVERITIES)}


def clamp_metric(value: float) -> int:
    return max(0, min(100, round_half_up(value)))


def unanswered_percentage(responses: ResponseMap) -> float:
    """Share of entries explicitly marked absent (value 0) among all entries."""
    if not responses:
        return 0.0
    absent = sum(1 for value in responses.values() if value == 0)
    return absent / len(responses) * 100


@dataclass(frozen=True, slots=True)
class AlertContext:
    technical: int
    operational: int
    political: int
    prospective: int
    unanswered_percentage: float | None = None

    @classmethod
    def from_scores(
        cls, scores: EvaluationScores, responses: ResponseMap | None = None
    ) -> AlertContext:
        technical, operational, political, prospective = scores.percentages()
        return cls(
            technical=technical,
            operational=operational,
            political=political,
            prospective=prospective,
            unanswered_percentage=(
                unanswered_percentage(responses) if responses is not None else None
            ),
        )

    @property
    def values(self) -> tuple[int, int, int, int]:
        return (self.technical, self.operational, self.political, self.prospective)

    @property
    def average(self) -> float:
        return sum(self.values) / 4

    @property
    def max_value(self) -> int:
        return max(self.values)

    @property
    def min_value(self) -> int:
        return min(self.values)

    @property
    def max_diff(self) -> int:
        return self.max_value - self.min_value

    @property
    def strongest_dimension(self) -> str:
        return TOPP_DIMENSION_IDS[self.values.index(self.max_value)]

    @property
    def others_average(self) -> float:
        """Mean of the three dimensions other than the strongest one."""
        others = list(self.values)
        others.pop(others.index(self.max_value))
        return sum(others) / 3


@dataclass(frozen=True)
class AlertRule:
    id: str
    text_key: str
    severity: Severity
    condition: Callable[[AlertContext], bool]
    risk: Callable[[AlertContext], float]
    impact: int
    urgency: int
    criteria: Callable[[AlertContext], Sequence[str]]
    requires_responses: bool = False
    text_params: Callable[[AlertContext, Translate], dict[str, object]] = field(
        default=lambda ctx, t: {}
    )

    def applies(self, ctx: AlertContext) -> bool:
        if self.requires_responses and ctx.unanswered_percentage is None:
            return False
        return bool(self.condition(ctx))

    def build(self, ctx: AlertContext, translate: Translate) -> StrategicAlert:
        params = self.text_params(ctx, translate)
        return StrategicAlert(
            id=self.id,
            title=translate(self.text_key, **params),
            description=translate(f"{self.text_key}Desc", **params),
            severity=self.severity,
            criteria=tuple(translate(key) for key in self.criteria(ctx)),
            recommendation=translate(f"{self.text_key}Rec", **params),
            metrics=AlertMetrics(
                risk_level=clamp_metric(self.risk(ctx)),
                impact_level=clamp_metric(self.impact),
                urgency_level=clamp_metric(self.urgency),
            ),
        )

    def evaluate(self, ctx: AlertContext, translate: Translate) -> StrategicAlert | None:
        if not self.applies(ctx):
            return None
        return self.build(ctx, translate)


def _labels(*dimension_ids: str) -> Callable[[AlertContext], Sequence[str]]:
    keys = tuple(DIMENSION_LABEL_KEYS[d] for d in dimension_ids)
    return lambda ctx: keys


def _all_dimensions(ctx: AlertContext) -> Sequence[str]:
    return ("allDimensions",)


def _unanswered(ctx: AlertContext) -> float:
    return ctx.unanswered_percentage or 0.0


def _unanswered_params(ctx: AlertContext, t: Translate) -> dict[str, object]:
    return {"percentage": round_half_up(_unanswered(ctx))}


def _strongest_params(ctx: AlertContext, t: Translate) -> dict[str, object]:
    return {"dimension": t(DIMENSION_LABEL_KEYS[ctx.strongest_dimension])}


ALERT_RULES: tuple[AlertRule, ...] = (
    AlertRule(
        id="design_without_political_traction",
        text_key="designWithoutPoliticalTraction",
        severity="high",
        condition=lambda c: c.technical >= 60 and c.political < 40,
        risk=lambda c: min(100, (c.technical - c.political) * 1.5),
        impact=85,
        urgency=75,
        criteria=_labels("technical", "political"),
    ),
    AlertRule(
        id="implementation_without_strategic_direction",
        text_key="implementationWithoutDirection",
        severity="medium",
        condition=lambda c: c.operational >= 50 and c.prospective < 50,
        risk=lambda c: min(100, (c.operational - c.prospective) * 1.2),
        impact=70,
        urgency=60,
        criteria=_labels("operational", "prospective"),
    ),
    AlertRule(
        id="government_without_governance",
        text_key="governmentWithoutGovernance",
        severity="high",
        condition=lambda c: c.political >= 60 and c.technical < 40 and c.operational < 40,
        risk=lambda c: min(100, c.political - max(c.technical, c.operational)),
        impact=90,
        urgency=80,
        criteria=_labels("political", "technical", "operational"),
    ),
    AlertRule(
        id="general_imbalance",
        text_key="generalImbalance",
        severity="medium",
        condition=lambda c: c.max_diff > 30,
        risk=lambda c: min(100, c.max_diff * 1.5),
        impact=65,
        urgency=50,
        criteria=_all_dimensions,
    ),
    AlertRule(
        id="insufficient_capabilities",
        text_key="insufficientCapabilities",
        severity="high",
        condition=lambda c: c.average < 30,
        risk=lambda c: max(50, 100 - c.average * 2),
        impact=95,
        urgency=90,
        criteria=_all_dimensions,
    ),
    AlertRule(
        id="high_unanswered_elements",
        text_key="highAbsentElements",
        severity="high",
        condition=lambda c: _unanswered(c) > 50,
        risk=lambda c: min(100, _unanswered(c) * 1.5),
        impact=85,
        urgency=70,
        criteria=_all_dimensions,
        requires_responses=True,
        text_params=_unanswered_params,
    ),
    AlertRule(
        id="medium_unanswered_elements",
        text_key="mediumAbsentElements",
        severity="medium",
        condition=lambda c: 25 < _unanswered(c) <= 50,
        risk=lambda c: _unanswered(c) * 1.2,
        impact=60,
        urgency=50,
        criteria=_all_dimensions,
        requires_responses=True,
        text_params=_unanswered_params,
    ),
    AlertRule(
        id="weak_prospective_capabilities",
        text_key="weakProspectiveCapabilities",
        severity="high",
        condition=lambda c: c.prospective < 45,
        risk=lambda c: 100 - c.prospective,
        impact=90,
        urgency=85,
        criteria=_labels("prospective"),
    ),
    AlertRule(
        id="weak_technical_capabilities",
        text_key="weakTechnicalCapabilities",
        severity="high",
        condition=lambda c: c.technical < 25,
        risk=lambda c: 100 - c.technical,
        impact=80,
        urgency=75,
        criteria=_labels("technical"),
    ),
    AlertRule(
        id="political_instability_risk",
        text_key="politicalInstabilityRisk",
        severity="medium",
        condition=lambda c: c.political < 30 and c.technical > 50,
        risk=lambda c: c.technical - c.political,
        impact=70,
        urgency=60,
        criteria=_labels("political", "technical"),
    ),
    AlertRule(
        id="operational_bottlenecks",
        text_key="operationalBottlenecks",
        severity="high",
        condition=lambda c: c.operational < 30,
        risk=lambda c: 100 - c.operational,
        impact=85,
        urgency=80,
        criteria=_labels("operational"),
    ),
    AlertRule(
        id="isolated_excellence",
        text_key="isolatedExcellence",
        severity="medium",
        condition=lambda c: c.max_value > 75 and c.others_average < 50,
        risk=lambda c: c.max_value - c.others_average,
        impact=65,
        urgency=45,
        criteria=lambda c: (DIMENSION_LABEL_KEYS[c.strongest_dimension],),
        text_params=_strongest_params,
    ),
    AlertRule(
        id="moderate_balanced_capabilities",
        text_key="moderateBalancedCapabilities",
        severity="low",
        condition=lambda c: 40 <= c.average < 60 and c.max_diff < 25,
        risk=lambda c: 25,
        impact=40,
        urgency=30,
        criteria=_all_dimensions,
    ),
)

RULES_BY_ID: dict[str, AlertRule] = {rule.id: rule for rule in ALERT_RULES}


def generate_alerts(
    scores: EvaluationScores,
    model_id: str,
    responses: ResponseMap | None = None,
    translate: Translate | None = None,
    rules: Sequence[AlertRule] = ALERT_RULES,
) -> list[StrategicAlert]:
    """
    Evaluate ``rules`` in order against the TOPP dimension percentages.

    Returns an empty list for any model other than TOPP or when the scores
    do not carry exactly four dimensions. Without ``responses`` the rules
    that need them are skipped.
    """
    if model_id != TOPP_MODEL_ID or len(scores.dimensions) != len(TOPP_DIMENSION_IDS):
        return []

    t = translate or get_translator()
    ctx = AlertContext.from_scores(scores, responses)
    logger.debug(
        "Evaluating %d alert rules: values=%s average=%.2f max_diff=%s unanswered=%s",
        len(rules),
        ctx.values,
        ctx.average,
        ctx.max_diff,
        ctx.unanswered_percentage,
    )

    alerts: list[StrategicAlert] = []
    for rule in rules:
        alert = rule.evaluate(ctx, t)
        if alert is not None:
            alerts.append(alert)
    return alerts


def merge_alerts(
    engine_alerts: Iterable[StrategicAlert], custom_alerts: Iterable[StrategicAlert]
) -> list[StrategicAlert]:
    return [*engine_alerts, *custom_alerts]


def get_alert_severity_color(severity: str) -> str:
    if severity == "high":
        return "border-red-500 text-red-700"
    if severity == "medium":
        return "border-yellow-500 text-yellow-700"
    if severity == "low":
        return "border-green-500 text-green-700"
    return "border-gray-500 text-gray-700"


def get_alert_icon(severity: str) -> str:
    return {"high": "AlertTriangle", "medium": "AlertCircle"}.get(severity, "Info")


@dataclass(frozen=True, slots=True)
class RiskSummary:
    status: str
    general_risk: int
    stability: int
    urgency: int

    def to_dict(self) -> dict[str, object]:
        return {
            "status": self.status,
            "generalRisk": self.general_risk,
            "stability": self.stability,
            "urgency": self.urgency,
        }


FAVORABLE_SUMMARY = RiskSummary(status="low", general_risk=20, stability=90, urgency=15)


def summarize_risk(alerts: Sequence[StrategicAlert]) -> RiskSummary:
    if not alerts:
        return FAVORABLE_SUMMARY
    status = max(alerts, key=lambda a: SEVERITY_RANK.get(a.severity, 0)).severity
    risks = [a.metrics.risk_level for a in alerts if a.metrics is not None]
    urgencies = [a.metrics.urgency_level for a in alerts if a.metrics is not None]
    general_risk = max(risks, default=0)
    return RiskSummary(
        status=status,
        general_risk=general_risk,
        stability=100 - general_risk,
        urgency=max(urgencies, default=0),
    )

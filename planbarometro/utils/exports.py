from __future__ import annotations

import io
import json
from typing import Any

import pandas as pd

RESPONSE_COLUMNS = [
    "Dimension",
    "DimensionPercentage",
    "CriterionID",
    "Criterion",
    "CriterionPercentage",
    "ElementID",
    "Element",
    "Response",
    "Justification",
]

ALERT_COLUMNS = [
    "Source",
    "AlertID",
    "Title",
    "Severity",
    "Criteria",
    "Description",
    "Recommendation",
    "RiskLevel",
    "ImpactLevel",
    "UrgencyLevel",
]


def _to_iso(val):
    if hasattr(val, "isoformat"):
        try:
            return val.isoformat()
        except Exception:
            return str(val)
    return val


def _json_default(val):
    # numpy scalars leak out of DataFrame records
    if hasattr(val, "item"):
        return val.item()
    return str(_to_iso(val))


def _records(df: pd.DataFrame) -> list[dict[str, Any]]:
    # NaN is not valid JSON; missing cells become null
    clean = df.astype(object).where(pd.notna(df), None)
    return clean.to_dict(orient="records")


def _with_columns(df: pd.DataFrame | None, columns: list[str]) -> pd.DataFrame:
    if df is None:
        return pd.DataFrame(columns=columns)
    df = df.copy()
    for column in columns:
        if column not in df.columns:
            df[column] = pd.NA
    return df[columns]


def make_json_export_payload(
    evaluation: dict[str, Any],
    responses_df: pd.DataFrame,
    alerts_df: pd.DataFrame,
    scores: dict[str, Any] | None = None,
) -> str:
    payload = {
        "evaluation": {key: _to_iso(value) for key, value in evaluation.items()},
        "scores": scores or {},
        "responses": _records(_with_columns(responses_df, RESPONSE_COLUMNS)),
        "alerts": _records(_with_columns(alerts_df, ALERT_COLUMNS)),
    }
    return json.dumps(payload, indent=2, ensure_ascii=False, default=_json_default)


def make_xlsx_export_bytes(responses_df: pd.DataFrame, alerts_df: pd.DataFrame) -> bytes:
    """Excel workbook with one sheet of element responses and one of alerts."""
    responses = _with_columns(responses_df, RESPONSE_COLUMNS)
    alerts = _with_columns(alerts_df, ALERT_COLUMNS)

    bio = io.BytesIO()
    with pd.ExcelWriter(bio, engine="xlsxwriter") as writer:
        responses.to_excel(writer, index=False, sheet_name="Evaluation")
        alerts.to_excel(writer, index=False, sheet_name="Alerts")
    return bio.getvalue()

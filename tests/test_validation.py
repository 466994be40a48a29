from planbarometro.domain.schemas import (
    CustomAlertInput,
    EvaluateInput,
    EvaluationInput,
    EvaluationUpdateInput,
    validate_input,
)


class TestEvaluationInput:
    def test_minimal_input(self):
        result = validate_input(EvaluationInput, {"title": "Línea base 2024"})

        assert result.success is True
        data = result.data
        assert data["title"] == "Línea base 2024"
        assert data["model"] == "topp"
        assert data["responses"] == {}
        assert data["custom_alerts"] == []

    def test_rejects_values_other_than_zero_or_one(self):
        result = validate_input(
            EvaluationInput, {"title": "Test", "responses": {"t1_1_1": 1, "t1_1_2": 2}}
        )

        assert result.success is False
        assert any(e.field == "responses" for e in result.errors)
        assert "t1_1_2" in result.errors[0].message

    def test_rejects_unknown_model(self):
        result = validate_input(EvaluationInput, {"title": "Test", "model": "regional"})

        assert result.success is False
        assert result.errors[0].field == "model"

    def test_blank_title(self):
        result = validate_input(EvaluationInput, {"title": "   "})

        assert result.success is False
        assert result.errors[0].field == "title"

    def test_sanitizes_markup_and_blank_optionals(self):
        result = validate_input(
            EvaluationInput,
            {
                "title": "  <b>Plan</b> nacional<script>alert('x')</script> ",
                "country": "  ",
                "notes": "Nota\x00 final",
            },
        )

        assert result.success is True
        assert result.data["title"] == "Plan nacional"
        assert result.data["country"] is None
        assert "\x00" not in result.data["notes"]


class TestCustomAlertInput:
    def test_defaults(self):
        alert = CustomAlertInput(
            title="Recorte presupuestario", description="Se congela el presupuesto", criteria=["Operativa"]
        )

        assert alert.id.startswith("custom-")
        assert alert.severity == "medium"
        assert alert.metrics.risk_level == 50
        assert alert.to_alert().metrics.urgency_level == 50

    def test_accepts_camel_case_metrics(self):
        alert = CustomAlertInput.model_validate(
            {
                "id": "custom-1",
                "title": "Cambio de gobierno",
                "description": "Elecciones en seis meses",
                "severity": "high",
                "criteria": ["Capacidad Política"],
                "metrics": {"riskLevel": 70, "impactLevel": 80, "urgencyLevel": 90},
            }
        )
        payload = alert.to_alert().to_dict()

        assert payload["metrics"] == {"riskLevel": 70, "impactLevel": 80, "urgencyLevel": 90}
        assert payload["criteria"] == ["Capacidad Política"]

    def test_requires_criteria_title_and_description(self):
        base = {"title": "T", "description": "D", "criteria": ["C"]}

        assert validate_input(CustomAlertInput, {**base, "criteria": []}).success is False
        assert validate_input(CustomAlertInput, {**base, "criteria": ["  "]}).success is False
        assert validate_input(CustomAlertInput, {**base, "title": " "}).success is False
        assert validate_input(CustomAlertInput, {**base, "description": ""}).success is False

    def test_metric_and_severity_bounds(self):
        base = {"title": "T", "description": "D", "criteria": ["C"]}

        assert validate_input(CustomAlertInput, {**base, "metrics": {"riskLevel": 101}}).success is False
        assert validate_input(CustomAlertInput, {**base, "severity": "critical"}).success is False


def test_update_input_keeps_only_supplied_fields():
    result = validate_input(EvaluationUpdateInput, {"notes": "Revisado"}, exclude_unset=True)

    assert result.success is True
    assert result.data == {"notes": "Revisado"}


def test_evaluate_input_validates_responses():
    assert validate_input(EvaluateInput, {"responses": {"a": 0, "b": 1}}).success is True
    assert validate_input(EvaluateInput, {"responses": {"a": -1}}).success is False

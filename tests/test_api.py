from __future__ import annotations

import io

import pandas as pd
from fastapi.testclient import TestClient

from factories import responses_for

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _create(client: TestClient, **overrides) -> dict:
    payload = {
        "title": "Ejercicio piloto",
        "exercise_code": "EX-01",
        "country": "Chile",
        "responses": responses_for(technical=1, operational=1, political=0, prospective=1),
    }
    payload.update(overrides)
    response = client.post("/api/evaluations", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_healthcheck(client: TestClient) -> None:
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_models_endpoints(client: TestClient) -> None:
    models = client.get("/api/models").json()
    assert [m["id"] for m in models] == ["topp", "nacional", "subnacional"]
    assert models[0]["element_count"] == 20
    assert models[1]["dimension_count"] == 0

    detail = client.get("/api/models/topp", params={"lang": "en"}).json()
    assert [d["label"] for d in detail["dimensions"]] == [
        "Technical Capacity",
        "Operational Capacity",
        "Political Capacity",
        "Prospective Capacity",
    ]
    assert detail["dimensions"][0]["criteria"][0]["elements"][0]["id"] == "t1_1_1"

    assert client.get("/api/models/regional").status_code == 404


def test_stateless_evaluation(client: TestClient) -> None:
    responses = responses_for(technical=1, operational=1, political=1, prospective=1)

    response = client.post("/api/models/topp/evaluate", json={"responses": responses})

    assert response.status_code == 200
    body = response.json()
    assert body["scores"]["overall"] == 100
    assert body["alerts"] == []
    assert body["favorable"] is True
    assert body["risk_summary"] == {"status": "low", "generalRisk": 20, "stability": 90, "urgency": 15}
    assert body["locale"] == "es"


def test_stateless_evaluation_with_custom_alert_in_english(client: TestClient) -> None:
    response = client.post(
        "/api/models/topp/evaluate",
        params={"lang": "en"},
        json={
            "responses": {"t1_1_1": 1, "t1_1_2": 0},
            "custom_alerts": [
                {"title": "Budget cut", "description": "Funding halved", "criteria": ["Operational"]}
            ],
        },
    )

    body = response.json()
    assert response.status_code == 200
    assert body["alerts"][0]["title"] == "Insufficient institutional capabilities"
    assert body["all_alerts"][-1]["title"] == "Budget cut"
    assert body["all_alerts"][-1]["metrics"] == {"riskLevel": 50, "impactLevel": 50, "urgencyLevel": 50}


def test_stateless_evaluation_errors(client: TestClient) -> None:
    bad_value = client.post("/api/models/topp/evaluate", json={"responses": {"t1_1_1": 2}})
    assert bad_value.status_code == 400
    assert "responses" in bad_value.json()["detail"]

    bad_alert = client.post(
        "/api/models/topp/evaluate",
        json={"custom_alerts": [{"title": "No criteria", "description": "x", "criteria": []}]},
    )
    assert bad_alert.status_code == 400

    assert client.post("/api/models/regional/evaluate", json={}).status_code == 404


def test_evaluation_crud(client: TestClient) -> None:
    created = _create(client)
    evaluation_id = created["id"]
    assert created["overall"] == 75
    assert created["scores"]["dimensions"][2]["percentage"] == 0

    fetched = client.get(f"/api/evaluations/{evaluation_id}").json()
    assert fetched["title"] == "Ejercicio piloto"
    assert fetched["country"] == "Chile"

    listing = client.get("/api/evaluations", params={"exercise_code": "EX-01"}).json()
    assert [item["id"] for item in listing] == [evaluation_id]

    updated = client.put(
        f"/api/evaluations/{evaluation_id}",
        json={"responses": responses_for(technical=1, operational=1, political=1, prospective=1)},
    )
    assert updated.status_code == 200
    assert updated.json()["overall"] == 100
    assert updated.json()["title"] == "Ejercicio piloto"

    deleted = client.delete(f"/api/evaluations/{evaluation_id}")
    assert deleted.status_code == 204
    assert client.get(f"/api/evaluations/{evaluation_id}").status_code == 404


def test_evaluation_validation_errors(client: TestClient) -> None:
    response = client.post("/api/evaluations", json={"title": "Plan", "model": "regional"})
    assert response.status_code == 400

    response = client.post("/api/evaluations", json={"title": "Plan", "responses": {"t1_1_1": 7}})
    assert response.status_code == 400

    assert client.put("/api/evaluations/999", json={"title": "X"}).status_code == 404
    assert client.delete("/api/evaluations/999").status_code == 404


def test_results_regenerate_alerts(client: TestClient) -> None:
    evaluation_id = _create(client)["id"]

    es = client.get(f"/api/evaluations/{evaluation_id}/results").json()
    en = client.get(f"/api/evaluations/{evaluation_id}/results", params={"lang": "en"}).json()

    assert [a["id"] for a in es["alerts"]] == [
        "design_without_political_traction",
        "general_imbalance",
        "political_instability_risk",
    ]
    assert es["alerts"][0]["title"] == "Diseño sin tracción política"
    assert en["alerts"][0]["title"] == "Design without political traction"
    assert en["title"] == "Ejercicio piloto"
    assert client.get("/api/evaluations/999/results").status_code == 404


def test_figures(client: TestClient) -> None:
    evaluation_id = _create(client)["id"]

    body = client.get(f"/api/evaluations/{evaluation_id}/figures", params={"lang": "en"}).json()

    assert [tile["percentage"] for tile in body["tiles"]] == [100, 100, 0, 100]
    assert body["tiles"][2]["status"] == "Poor"
    assert body["radar"]["data"]
    assert "layout" in body["radar"]


def test_exports(client: TestClient) -> None:
    evaluation_id = _create(client, justifications={"t1_1_1": "Informe técnico"})["id"]

    exported = client.get(f"/api/evaluations/{evaluation_id}/export.json").json()
    assert exported["evaluation"]["id"] == evaluation_id
    assert len(exported["responses"]) == 20
    assert exported["responses"][0]["Justification"] == "Informe técnico"
    assert [a["AlertID"] for a in exported["alerts"]][0] == "design_without_political_traction"

    xlsx = client.get(f"/api/evaluations/{evaluation_id}/export.xlsx")
    assert xlsx.status_code == 200
    assert xlsx.headers["content-type"] == XLSX_MEDIA_TYPE
    sheets = pd.read_excel(io.BytesIO(xlsx.content), sheet_name=None)
    assert len(sheets["Evaluation"]) == 20

    assert client.get("/api/evaluations/999/export.json").status_code == 404


PRACTICE = {
    "title": "Gabinetes territoriales",
    "description": "Mesas de coordinación con los gobiernos locales",
    "country": "Chile",
    "institution": "SUBDERE",
    "source_type": "case_study",
    "target_criteria": ["Capacidad Política"],
    "tags": ["gobernanza"],
}


def test_best_practice_crud(client: TestClient) -> None:
    created = client.post("/api/best-practices", json=PRACTICE)
    assert created.status_code == 201, created.text
    practice_id = created.json()["id"]
    assert created.json()["target_criteria"] == ["Capacidad Política"]

    listed = client.get("/api/best-practices", params={"country": "chile"}).json()
    assert [p["id"] for p in listed] == [practice_id]
    assert client.get("/api/best-practices", params={"q": "SUBDERE"}).json()[0]["id"] == practice_id

    updated = client.put(f"/api/best-practices/{practice_id}", json={"year": 2020})
    assert updated.status_code == 200
    assert updated.json()["year"] == 2020
    assert updated.json()["title"] == "Gabinetes territoriales"

    assert client.delete(f"/api/best-practices/{practice_id}").status_code == 204
    assert client.get(f"/api/best-practices/{practice_id}").status_code == 404
    assert client.put(f"/api/best-practices/{practice_id}", json={"year": 2021}).status_code == 404
    assert client.get("/api/best-practices").json() == []


def test_best_practice_validation(client: TestClient) -> None:
    bad_type = client.post("/api/best-practices", json={**PRACTICE, "source_type": "blog"})
    assert bad_type.status_code == 400

    bad_url = client.post("/api/best-practices", json={**PRACTICE, "source_url": "www.example.org"})
    assert bad_url.status_code == 400

    missing = {k: v for k, v in PRACTICE.items() if k != "target_criteria"}
    assert client.post("/api/best-practices", json=missing).status_code == 422
    assert client.post("/api/best-practices/match", json={"criteria": []}).status_code == 422


def test_best_practice_match_and_recommendations(client: TestClient) -> None:
    practice_id = client.post("/api/best-practices", json=PRACTICE).json()["id"]

    matched = client.post("/api/best-practices/match", json={"criteria": ["coordinación"]})
    assert matched.status_code == 200
    assert [p["id"] for p in matched.json()] == [practice_id]

    created = client.post(
        f"/api/best-practices/{practice_id}/recommendations",
        json={
            "criterion_name": "Capacidad Política",
            "recommendation": "Instalar un gabinete territorial",
            "timeframe": "6 meses",
        },
    )
    assert created.status_code == 201, created.text
    assert created.json()["practice_id"] == practice_id

    listed = client.get(f"/api/best-practices/{practice_id}/recommendations").json()
    assert [r["recommendation"] for r in listed] == ["Instalar un gabinete territorial"]
    by_criterion = client.get("/api/recommendations", params={"criterion": "Capacidad"}).json()
    assert len(by_criterion) == 1

    missing = client.post(
        "/api/best-practices/999/recommendations",
        json={"criterion_name": "X", "recommendation": "Y"},
    )
    assert missing.status_code == 404
    assert client.get("/api/best-practices/999/recommendations").status_code == 404


def test_evaluation_practices(client: TestClient) -> None:
    practice_id = client.post("/api/best-practices", json=PRACTICE).json()["id"]
    evaluation = _create(client)

    response = client.get(f"/api/evaluations/{evaluation['id']}/practices", params={"lang": "es"})
    assert response.status_code == 200
    pairs = {pair["alert_id"]: pair for pair in response.json()}
    assert [p["id"] for p in pairs["design_without_political_traction"]["practices"]] == [
        practice_id
    ]
    assert pairs["general_imbalance"]["practices"] == []

    assert client.get("/api/evaluations/999/practices").status_code == 404

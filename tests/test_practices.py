from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from planbarometro.application import api as app_api
from planbarometro.domain.practices import are_related_terms, match_practices, matches_criterion
from planbarometro.infrastructure.exceptions import (
    BestPracticeNotFoundError,
    MultipleValidationError,
    ValidationError,
)
from planbarometro.infrastructure.repositories import BestPracticeRepo
from planbarometro.utils.seed import INITIAL_BEST_PRACTICES, seed_best_practices

from factories import responses_for


@dataclass
class Practice:
    title: str
    description: str = ""
    target_criteria: list[str] = field(default_factory=list)
    tags: list[str] | None = None


def practice_data(**overrides) -> dict:
    data = {
        "title": "Mesas de coordinación intersectorial",
        "description": "Gabinetes territoriales con agenda compartida",
        "country": "Chile",
        "institution": "SUBDERE",
        "year": 2019,
        "source_url": "https://www.subdere.gov.cl",
        "source_type": "case_study",
        "target_criteria": ["Capacidad Política", "Coordinación"],
        "key_lessons": ["El liderazgo político sostiene la agenda"],
        "tags": ["gobernanza"],
    }
    data.update(overrides)
    return data


class TestMatching:
    def test_target_criteria_overlap_either_way(self):
        practice = Practice("Gabinetes", target_criteria=["Capacidad Política"])

        assert matches_criterion(practice, "capacidad política")
        assert matches_criterion(practice, "Política")
        assert matches_criterion(practice, "Capacidad Política del gobierno")
        assert not matches_criterion(practice, "Capacidad Técnica")

    def test_related_terms_match_across_languages(self):
        practice = Practice("Gabinetes", target_criteria=["Coordinación"])

        assert are_related_terms("coordination", "coordinación")
        assert not are_related_terms("coordination", "planning")
        assert matches_criterion(practice, "Coordination")
        assert matches_criterion(practice, "coordinacion")

    def test_title_description_and_tags_match(self):
        practice = Practice(
            "Presupuesto participativo",
            description="Consulta ciudadana anual sobre inversión local",
            target_criteria=["Participación"],
            tags=["transparencia fiscal", "  "],
        )

        assert matches_criterion(practice, "presupuesto")
        assert matches_criterion(practice, "inversión local")
        assert matches_criterion(practice, "Transparencia")
        assert not matches_criterion(practice, "Prospectiva")

    def test_blank_criterion_never_matches(self):
        practice = Practice("Gabinetes", target_criteria=["Capacidad Política"])

        assert not matches_criterion(practice, "   ")

    def test_match_practices_keeps_input_order(self):
        practices = [
            Practice("A", target_criteria=["Capacidad Técnica"]),
            Practice("B", target_criteria=["Capacidad Prospectiva"]),
            Practice("C", target_criteria=["Capacidad Técnica", "Capacidad Política"]),
        ]

        matched = match_practices(practices, ["Capacidad Técnica", "Capacidad Política"])

        assert [p.title for p in matched] == ["A", "C"]
        assert match_practices(practices, []) == []


class TestBestPracticeRepository:
    def test_create_and_get(self, db_session):
        practice = app_api.create_best_practice(
            db_session, practice_data(target_criteria=["  Coordinación  ", ""])
        )

        stored = app_api.get_best_practice(db_session, practice.id)
        assert stored.title == "Mesas de coordinación intersectorial"
        assert stored.target_criteria == ["Coordinación"]
        assert stored.is_active is True

    def test_create_validation(self, db_session):
        with pytest.raises(ValidationError):
            app_api.create_best_practice(db_session, practice_data(target_criteria=[" "]))
        with pytest.raises(ValidationError):
            app_api.create_best_practice(db_session, practice_data(source_url="ftp://example"))
        with pytest.raises(MultipleValidationError):
            app_api.create_best_practice(
                db_session, practice_data(source_type="blog", year=1800)
            )

    def test_list_filters(self, db_session):
        app_api.create_best_practice(db_session, practice_data())
        app_api.create_best_practice(
            db_session,
            practice_data(
                title="Tableros de seguimiento",
                country="Colombia",
                institution="DNP",
                target_criteria=["Monitoreo"],
            ),
        )
        app_api.create_best_practice(
            db_session,
            practice_data(title="Planes de desarrollo", country="Colombia", institution="CEPAL"),
        )

        assert len(app_api.list_best_practices(db_session)) == 3
        assert [p.title for p in app_api.list_best_practices(db_session, limit=1, offset=1)] == [
            "Tableros de seguimiento"
        ]
        assert [p.title for p in app_api.list_best_practices(db_session, country="colombia")] == [
            "Tableros de seguimiento",
            "Planes de desarrollo",
        ]
        assert [p.title for p in app_api.list_best_practices(db_session, query="DNP")] == [
            "Tableros de seguimiento"
        ]
        assert (
            app_api.list_best_practices(db_session, country="Chile", query="Tableros") == []
        )

    def test_update_keeps_required_fields(self, db_session):
        practice = app_api.create_best_practice(db_session, practice_data())

        updated = app_api.update_best_practice(
            db_session, practice.id, {"title": None, "year": 2022, "tags": ["agenda"]}
        )

        assert updated.title == "Mesas de coordinación intersectorial"
        assert updated.year == 2022
        assert updated.tags == ["agenda"]
        with pytest.raises(ValidationError):
            app_api.update_best_practice(db_session, practice.id, {"source_type": "blog"})

    def test_delete_retires_practice(self, db_session):
        practice = app_api.create_best_practice(db_session, practice_data())

        app_api.delete_best_practice(db_session, practice.id)

        with pytest.raises(BestPracticeNotFoundError):
            app_api.get_best_practice(db_session, practice.id)
        with pytest.raises(BestPracticeNotFoundError):
            app_api.delete_best_practice(db_session, practice.id)
        assert app_api.list_best_practices(db_session) == []
        assert BestPracticeRepo(db_session).get(practice.id).is_active is False

    def test_find_best_practices(self, db_session):
        app_api.create_best_practice(db_session, practice_data())
        retired = app_api.create_best_practice(db_session, practice_data(title="Retirada"))
        app_api.delete_best_practice(db_session, retired.id)

        found = app_api.find_best_practices(db_session, ["Coordination"])

        assert [p.title for p in found] == ["Mesas de coordinación intersectorial"]
        assert app_api.find_best_practices(db_session, ["Capacidad Prospectiva"]) == []


class TestEvaluationPractices:
    def test_alert_criteria_pull_matching_practices(self, db_session):
        app_api.create_best_practice(db_session, practice_data(target_criteria=["Capacidad Política"]))
        app_api.create_best_practice(
            db_session, practice_data(title="Datos abiertos", target_criteria=["Transparencia"])
        )
        evaluation = app_api.create_evaluation(
            db_session,
            {
                "title": "Piloto",
                "responses": responses_for(
                    technical=1, operational=1, political=0, prospective=1
                ),
            },
        )

        pairs = app_api.get_evaluation_practices(db_session, evaluation.id, locale="es")

        by_alert = {pair["alert_id"]: pair for pair in pairs}
        assert list(by_alert) == [
            "design_without_political_traction",
            "general_imbalance",
            "political_instability_risk",
        ]
        design = by_alert["design_without_political_traction"]
        assert design["criteria"] == ["Capacidad Técnica", "Capacidad Política"]
        assert [p.title for p in design["practices"]] == ["Mesas de coordinación intersectorial"]
        assert by_alert["general_imbalance"]["practices"] == []


class TestRecommendations:
    def test_create_and_list(self, db_session):
        practice = app_api.create_best_practice(db_session, practice_data())
        app_api.create_practice_recommendation(
            db_session,
            {
                "practice_id": practice.id,
                "criterion_name": "Capacidad Política",
                "recommendation": "Instalar un gabinete territorial",
                "implementation_steps": ["Mapear actores", " ", "Acordar agenda"],
                "timeframe": "6 meses",
            },
        )
        app_api.create_practice_recommendation(
            db_session,
            {"criterion_name": "Capacidad Técnica", "recommendation": "Formar equipos"},
        )

        for_practice = app_api.list_practice_recommendations(db_session, practice_id=practice.id)
        assert [r.recommendation for r in for_practice] == ["Instalar un gabinete territorial"]
        assert for_practice[0].implementation_steps == ["Mapear actores", "Acordar agenda"]
        assert [
            r.recommendation
            for r in app_api.list_practice_recommendations(db_session, criterion="técnica")
        ] == ["Formar equipos"]
        assert len(app_api.list_practice_recommendations(db_session)) == 2

    def test_unknown_practice(self, db_session):
        with pytest.raises(BestPracticeNotFoundError):
            app_api.create_practice_recommendation(
                db_session,
                {"practice_id": 99, "criterion_name": "X", "recommendation": "Y"},
            )
        with pytest.raises(BestPracticeNotFoundError):
            app_api.list_practice_recommendations(db_session, practice_id=99)
        with pytest.raises(ValidationError):
            app_api.create_practice_recommendation(
                db_session, {"criterion_name": "X", "recommendation": ""}
            )


def test_seed_best_practices_only_fills_empty_repository(db_session):
    assert seed_best_practices(db_session) == len(INITIAL_BEST_PRACTICES)
    assert seed_best_practices(db_session) == 0
    assert seed_best_practices(db_session, practices=INITIAL_BEST_PRACTICES[:1], force=True) == 1

    found = app_api.find_best_practices(db_session, ["Participación ciudadana"])
    assert len(found) == 3

import pytest

from planbarometro.domain.catalog import NATIONAL_MODEL, TOPP_MODEL, get_model, list_models
from planbarometro.domain.i18n import Translator
from planbarometro.domain.models import CapabilityModel, Criterion, Dimension, Element
from planbarometro.domain.services import (
    ScoringService,
    compute_completion,
    compute_scores,
    filter_known_responses,
    get_score_color,
    get_score_status,
    round_half_up,
)
from planbarometro.infrastructure.exceptions import ModelNotFoundError

from factories import responses_for


def _model(*criteria_sizes: int) -> CapabilityModel:
    criteria = tuple(
        Criterion(
            id=f"c{i}",
            name=f"Criterion {i}",
            elements=tuple(Element(id=f"c{i}_e{j}", name=f"Element {j}") for j in range(size)),
        )
        for i, size in enumerate(criteria_sizes)
    )
    return CapabilityModel(id="custom", name="Custom", dimensions=(Dimension("d", "D", criteria),))


def test_catalog_topp_structure():
    assert [d.id for d in TOPP_MODEL.dimensions] == [
        "technical",
        "operational",
        "political",
        "prospective",
    ]
    assert sum(len(d.criteria) for d in TOPP_MODEL.dimensions) == 16
    assert TOPP_MODEL.total_elements == 20
    TOPP_MODEL.validate()


def test_catalog_lookup():
    assert [m.id for m in list_models()] == ["topp", "nacional", "subnacional"]
    assert get_model("topp") is TOPP_MODEL
    with pytest.raises(ModelNotFoundError):
        get_model("regional")


def test_duplicate_element_ids_rejected():
    criterion = Criterion("c", "C", (Element("e", "E"), Element("e", "E again")))
    model = CapabilityModel("dup", "Dup", (Dimension("d", "D", (criterion,)),))
    with pytest.raises(ValueError):
        model.validate()


def test_all_present_scores_full_marks():
    scores = compute_scores(responses_for(technical=1, operational=1, political=1, prospective=1), TOPP_MODEL)
    assert scores.overall == 100
    assert scores.percentages() == [100, 100, 100, 100]
    assert all(c.percentage == 100 for d in scores.dimensions for c in d.criteria)


def test_empty_responses_score_zero():
    scores = compute_scores({}, TOPP_MODEL)
    assert scores.overall == 0
    assert scores.percentages() == [0, 0, 0, 0]
    assert [d.dimension_id for d in scores.dimensions] == [d.id for d in TOPP_MODEL.dimensions]


def test_unanswered_counts_as_absent():
    answered_absent = compute_scores(
        responses_for(technical=0, operational=0, political=0, prospective=0), TOPP_MODEL
    )
    assert answered_absent == compute_scores({}, TOPP_MODEL)


def test_single_element_rounds_half_up():
    scores = compute_scores({"t1_1_1": 1}, TOPP_MODEL)
    technical = scores.dimensions[0]
    assert technical.criteria[0].percentage == 50
    assert technical.criteria[0].score == 1
    # mean of 50, 0, 0, 0 is 12.5
    assert technical.percentage == 13
    assert technical.score == 1
    assert scores.overall == 3


def test_criterion_thirds():
    model = _model(3)
    assert compute_scores({"c0_e0": 1}, model).dimensions[0].criteria[0].percentage == 33
    assert compute_scores({"c0_e0": 1, "c0_e1": 1}, model).dimensions[0].criteria[0].percentage == 67


def test_unknown_ids_are_ignored():
    assert compute_scores({"not_an_element": 1, "t9_9_9": 0}, TOPP_MODEL) == compute_scores(
        {}, TOPP_MODEL
    )


def test_empty_criterion_and_dimension_score_zero():
    model = CapabilityModel(
        id="sparse",
        name="Sparse",
        dimensions=(
            Dimension("full", "Full", (Criterion("c1", "C1", (Element("e1", "E1"),)), Criterion("c2", "C2"))),
            Dimension("empty", "Empty"),
        ),
    )
    scores = compute_scores({"e1": 1}, model)
    full, empty = scores.dimensions
    assert [c.percentage for c in full.criteria] == [100, 0]
    assert full.percentage == 50
    assert empty.percentage == 0
    assert empty.criteria == ()
    assert scores.overall == 25


def test_model_without_dimensions():
    scores = compute_scores({"t1_1_1": 1}, NATIONAL_MODEL)
    assert scores.overall == 0
    assert scores.dimensions == ()


def test_scores_are_deterministic_and_bounded():
    responses = {"t1_1_1": 1, "t2_2_2": 1, "t3_3_1": 0, "t4_2_1": 1, "t4_4_1": 1}
    first = compute_scores(responses, TOPP_MODEL)
    assert first == compute_scores(dict(responses), TOPP_MODEL)
    values = [first.overall, *first.percentages()]
    values += [c.percentage for d in first.dimensions for c in d.criteria]
    assert all(0 <= v <= 100 for v in values)


def test_marking_an_element_present_never_lowers_scores():
    base = {"t1_1_1": 1, "t2_1_1": 0}
    improved = {**base, "t2_1_1": 1}
    before = compute_scores(base, TOPP_MODEL)
    after = compute_scores(improved, TOPP_MODEL)
    assert after.overall >= before.overall
    for b, a in zip(before.dimensions, after.dimensions):
        assert a.percentage >= b.percentage


def test_weight_is_not_used():
    light = CapabilityModel(
        "w",
        "W",
        (
            Dimension(
                "d",
                "D",
                (
                    Criterion("c1", "C1", (Element("e1", "E1"),), weight=5.0),
                    Criterion("c2", "C2", (Element("e2", "E2"),), weight=0.1),
                ),
            ),
        ),
    )
    assert compute_scores({"e1": 1}, light).dimensions[0].percentage == 50


def test_scores_to_dict_shape():
    payload = compute_scores({"t1_1_1": 1}, TOPP_MODEL).to_dict()
    assert payload["overall"] == 3
    assert payload["dimensions"][0]["dimensionId"] == "technical"
    assert payload["dimensions"][0]["criteria"][0] == {
        "criterionId": "t1_1",
        "score": 1,
        "percentage": 50,
    }


def test_completion_counts_known_ids_only():
    completion = compute_completion({"t1_1_1": 1, "t1_1_2": 0, "bogus": 1}, TOPP_MODEL)
    assert completion.answered == 2
    assert completion.total == 20
    assert completion.percentage == 10
    assert completion.is_complete is False

    full = responses_for(technical=0, operational=1, political=0, prospective=1)
    assert compute_completion(full, TOPP_MODEL).is_complete is True
    assert compute_completion({}, NATIONAL_MODEL).percentage == 0


def test_filter_known_responses_drops_unknown_ids():
    responses = {"t1_1_1": 1, "bogus_a": 0, "t4_1_1": 0, "bogus_b": 1}

    assert filter_known_responses(responses, TOPP_MODEL) == {"t1_1_1": 1, "t4_1_1": 0}
    assert filter_known_responses(responses, NATIONAL_MODEL) == {}


@pytest.mark.parametrize(
    "percentage, status, color",
    [
        (100, "Excellent", "green"),
        (75, "Excellent", "green"),
        (74, "Good", "blue"),
        (50, "Good", "blue"),
        (49, "Fair", "yellow"),
        (25, "Fair", "yellow"),
        (24, "Poor", "red"),
        (0, "Poor", "red"),
    ],
)
def test_score_status_bands(percentage, status, color):
    assert get_score_status(percentage, Translator("en")) == status
    assert get_score_color(percentage) == color


def test_score_status_defaults_to_spanish():
    assert get_score_status(80) == "Excelente"


def test_round_half_up():
    assert round_half_up(12.5) == 13
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2
    assert round_half_up(0) == 0


def test_scoring_service_matches_functions():
    service = ScoringService(TOPP_MODEL)
    responses = {"t3_1_1": 1, "t3_2_1": 1}
    assert service.compute_scores(responses) == compute_scores(responses, TOPP_MODEL)
    assert service.compute_completion(responses) == compute_completion(responses, TOPP_MODEL)

import pytest

from planbarometro.domain.i18n import (
    DEFAULT_LOCALE,
    TRANSLATIONS,
    Translator,
    get_translator,
    normalize_locale,
)


def test_locales_share_keys():
    assert set(TRANSLATIONS["es"]) == set(TRANSLATIONS["en"])


@pytest.mark.parametrize(
    "raw, expected",
    [("en", "en"), ("EN", "en"), ("es-ES", "es"), ("en_GB", "en"), ("fr", "es"), (None, "es"), ("", "es")],
)
def test_normalize_locale(raw, expected):
    assert normalize_locale(raw) == expected


def test_default_locale_is_spanish():
    assert DEFAULT_LOCALE == "es"
    assert get_translator().locale == "es"
    assert get_translator()("technicalCapacity") == "Capacidad Técnica"


def test_interpolation():
    t = Translator("en")
    assert t("isolatedExcellenceRec", dimension="Political Capacity").startswith(
        "Leverage the strength in Political Capacity"
    )


def test_missing_key_falls_back_to_key():
    assert Translator("es")("doesNotExist") == "doesNotExist"


def test_missing_parameter_returns_raw_text():
    text = Translator("en")("highAbsentElementsDesc")
    assert "{percentage}" in text


def test_translators_are_independent():
    en, es = Translator("en"), Translator("es")
    assert en("poor") == "Poor"
    assert es("poor") != "Poor"
    assert en("poor") == "Poor"


def test_malformed_template_returns_raw_text(monkeypatch):
    monkeypatch.setitem(TRANSLATIONS["en"], "brokenTemplate", "Marked {percentage% absent")

    assert Translator("en")("brokenTemplate", percentage=40) == "Marked {percentage% absent"

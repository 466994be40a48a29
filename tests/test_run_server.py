from __future__ import annotations

import pytest

from planbarometro.infrastructure.config import reset_settings
from scripts import run_server


@pytest.fixture(autouse=True)
def clean_settings():
    reset_settings()
    yield
    reset_settings()


def test_options_follow_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_HOST", "127.0.0.1")
    monkeypatch.setenv("APP_PORT", "9001")

    options = run_server.build_uvicorn_options()

    assert options["host"] == "127.0.0.1"
    assert options["port"] == 9001
    assert options["reload"] is False


def test_main_launches_uvicorn(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, dict]] = []

    def fake_run(app_path: str, **kwargs) -> None:
        calls.append((app_path, kwargs))

    monkeypatch.setattr(run_server.uvicorn, "run", fake_run)

    run_server.main()

    assert calls[0][0] == "planbarometro.web.main:app"
    assert set(calls[0][1]) == {"host", "port", "reload", "log_level"}

from __future__ import annotations

from pathlib import Path

import pytest

from shadowbinder.common.config import ServerSettings, load_client_settings


def test_server_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "k")
    monkeypatch.setenv("GEMINI_MODEL_ID", "gemini-x")
    monkeypatch.setenv("GEMINI_TIMEOUT_S", "12.5")
    s = ServerSettings.from_env()
    assert s.api_key == "k"
    assert s.model_id == "gemini-x"
    assert s.timeout_s == 12.5
    assert "'k'" not in repr(s)


def test_server_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("GEMINI_API_KEY", "GEMINI_MODEL_ID", "GEMINI_BASE_URL", "GEMINI_TIMEOUT_S"):
        monkeypatch.delenv(name, raising=False)
    s = ServerSettings.from_env()
    assert s.api_key is None
    assert s.model_id == "gemini-1.5-flash"
    assert s.base_url == "https://generativelanguage.googleapis.com"


def test_client_settings_from_repo_config() -> None:
    cfg = Path(__file__).resolve().parents[1] / "configs" / "client.yaml"
    s = load_client_settings(str(cfg))
    assert s.endpoint_url == "http://localhost:8000/api/generate"
    assert s.timeout_s == 30.0


def test_client_settings_missing_file_uses_defaults(tmp_path: Path) -> None:
    s = load_client_settings(str(tmp_path / "absent.yaml"))
    assert s.timeout_s == 30.0


def test_client_settings_override(tmp_path: Path) -> None:
    cfg = tmp_path / "client.yaml"
    cfg.write_text("endpoint_url: http://example.test/api/generate\ntimeout_s: 5\n", encoding="utf-8")
    s = load_client_settings(str(cfg))
    assert s.endpoint_url == "http://example.test/api/generate"
    assert s.timeout_s == 5.0

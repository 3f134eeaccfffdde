from __future__ import annotations

import pytest

import jfk_mcp.config as config_mod
from jfk_mcp.config import DEFAULT_BASE_URL, ArchivesSettings


@pytest.fixture(autouse=True)
def _no_dotenv(monkeypatch: pytest.MonkeyPatch) -> None:
    # 開発者の .env に影響されないようにする
    monkeypatch.setattr(config_mod, "load_dotenv", lambda *a, **k: False)
    for name in ("ARCHIVES_API_KEY", "ARCHIVES_API_URL", "ARCHIVES_COLLECTION", "ARCHIVES_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


def test_missing_api_key_raises() -> None:
    with pytest.raises(RuntimeError) as ei:
        ArchivesSettings.from_env()

    assert "ARCHIVES_API_KEY" in str(ei.value)


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ARCHIVES_API_KEY", "secret")

    settings = ArchivesSettings.from_env()

    assert settings.api_key == "secret"
    assert settings.base_url == DEFAULT_BASE_URL
    assert settings.collection == "jfk"
    assert settings.timeout is None


def test_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ARCHIVES_API_KEY", "secret")
    monkeypatch.setenv("ARCHIVES_API_URL", "http://localhost:8080/")
    monkeypatch.setenv("ARCHIVES_COLLECTION", "/rfk/")
    monkeypatch.setenv("ARCHIVES_TIMEOUT", "12.5")

    settings = ArchivesSettings.from_env()

    assert settings.base_url == "http://localhost:8080"
    assert settings.collection == "rfk"
    assert settings.timeout == 12.5


@pytest.mark.parametrize("raw", ["abc", "0", "-3"])
def test_invalid_timeout_means_no_timeout(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("ARCHIVES_API_KEY", "secret")
    monkeypatch.setenv("ARCHIVES_TIMEOUT", raw)

    assert ArchivesSettings.from_env().timeout is None

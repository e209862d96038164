"""Tests for environment-driven settings."""

import pytest

from core import config


def test_cors_allows_no_origins_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)
    assert config.cors_allow_origins() == []


def test_cors_origins_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.example.com, https://b.example.com,")
    assert config.cors_allow_origins() == ["https://a.example.com", "https://b.example.com"]


def test_env_int_falls_back_on_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DB_POOL_MAX_SIZE", "lots")
    assert config.env_int("DB_POOL_MAX_SIZE", 25) == 25

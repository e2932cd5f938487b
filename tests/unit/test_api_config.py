"""
Unit tests for API settings.
It asserts expected behavior and guards against regressions in the corresponding component.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

import pytest

from src.api import api_config as config_module


def test_load_api_config_success(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_MAX_PAGE_SIZE", "50")
    monkeypatch.setenv("JWT_ALGORITHM", "hs512")
    config = config_module.load_api_config(load_env=False)

    assert config.api_version_path == "/v1"
    assert config.api_version_label() == "v1"
    assert config.max_page_size == 50
    assert config.jwt_algorithm == "HS512"
    assert {"users", "resources", "follows", "comments"} <= config.allowed_table_names


def test_load_api_config_missing_secret(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("JWT_SECRET", "")
    with pytest.raises(RuntimeError, match="JWT_SECRET is required"):
        config_module.load_api_config(load_env=False)


def test_load_api_config_missing_database_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "")
    with pytest.raises(RuntimeError, match="DATABASE_URL is required"):
        config_module.load_api_config(load_env=False)


def test_secret_is_hidden_from_repr() -> None:
    config = config_module.load_api_config(load_env=False)
    assert config.jwt_secret not in repr(config)


def test_unsafe_table_name_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_RESOURCES_TABLE_NAME", "resources; DROP TABLE users")
    with pytest.raises(ValueError, match="Unsafe SQL identifier"):
        config_module.load_api_config(load_env=False)


def test_unsupported_jwt_algorithm_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("JWT_ALGORITHM", "none")
    with pytest.raises(ValueError, match="jwt_algorithm"):
        config_module.load_api_config(load_env=False)


def test_bad_boolean_flag_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_ENABLE_REQUEST_LOGGING", "sometimes")
    with pytest.raises(ValueError, match="boolean-like"):
        config_module.load_api_config(load_env=False)

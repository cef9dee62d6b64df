"""Tests for regulium/common/config_loader.py - configuration loading.

Covers:
- Defaults when settings.yaml is missing
- YAML loading and relative path resolution
- Environment variable overrides
- Validation logic
- Schema fallback on malformed YAML
"""

from pathlib import Path

import pytest

import regulium.common.config_loader as config_loader
from regulium.common.config_loader import (
    Settings,
    SettingsFileSchema,
    _validate_settings,
    clear_config_cache,
    get_settings_yaml,
    load_settings,
    validate_settings_file,
)


def _write_settings(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def repo_root(monkeypatch, tmp_path):
    monkeypatch.setattr(config_loader, "_REPO_ROOT", tmp_path)
    return tmp_path


# ─────────────────────────────────────────────────────────────────────────────
# YAML Loading
# ─────────────────────────────────────────────────────────────────────────────


class TestLoadSettingsYaml:
    def test_returns_empty_dict_for_missing_file(self, monkeypatch, tmp_path):
        """Missing settings.yaml yields an empty dict."""
        monkeypatch.setenv("REGULIUM_SETTINGS_PATH", str(tmp_path / "nope.yaml"))
        assert get_settings_yaml() == {}

    def test_loads_yaml_content(self, monkeypatch, tmp_path):
        """Reads the file named by REGULIUM_SETTINGS_PATH."""
        path = _write_settings(tmp_path, "llm:\n  chat_model: test-model\n")
        monkeypatch.setenv("REGULIUM_SETTINGS_PATH", str(path))
        assert get_settings_yaml() == {"llm": {"chat_model": "test-model"}}


# ─────────────────────────────────────────────────────────────────────────────
# load_settings
# ─────────────────────────────────────────────────────────────────────────────


class TestLoadSettings:
    def test_defaults_without_yaml(self, monkeypatch, tmp_path, repo_root):
        """Defaults match the documented model call parameters."""
        monkeypatch.setenv("REGULIUM_SETTINGS_PATH", str(tmp_path / "missing.yaml"))
        settings = load_settings()

        assert settings.chat_model == "google/gemini-2.0-flash-001"
        assert settings.temperature == 0.3
        assert settings.max_tokens == 1000
        assert settings.request_timeout_secs == 30.0
        assert settings.max_retries == 0
        assert settings.max_workers == 1
        assert settings.laws_csv_path == tmp_path / "data" / "laws.csv"

    def test_loads_sections(self, monkeypatch, tmp_path, repo_root):
        """Values from every section end up on Settings."""
        path = _write_settings(tmp_path, """
llm:
  base_url: https://openrouter.ai/api/v1
  chat_model: some/model
  timeout_secs: 12
  app_title: Checker
evaluation:
  temperature: 0.2
  max_tokens: 800
  max_workers: 4
screening:
  max_tokens: 300
paths:
  laws_csv: tables/laws.csv
  csv_delimiter: ";"
server:
  cors_origins: http://example.test
""")
        monkeypatch.setenv("REGULIUM_SETTINGS_PATH", str(path))
        settings = load_settings()

        assert settings.api_base_url == "https://openrouter.ai/api/v1"
        assert settings.chat_model == "some/model"
        assert settings.request_timeout_secs == 12
        assert settings.app_title == "Checker"
        assert settings.temperature == 0.2
        assert settings.max_tokens == 800
        assert settings.max_workers == 4
        assert settings.screening_max_tokens == 300
        assert settings.laws_csv_path == tmp_path / "tables" / "laws.csv"
        assert settings.csv_delimiter == ";"
        assert settings.cors_origins == ("http://example.test",)

    def test_env_vars_override_yaml(self, monkeypatch, tmp_path, repo_root):
        """Environment variables override YAML values."""
        path = _write_settings(tmp_path, "llm:\n  chat_model: yaml-model\n  timeout_secs: 10\n")
        monkeypatch.setenv("REGULIUM_SETTINGS_PATH", str(path))
        monkeypatch.setenv("OPENAI_MODEL", "env-model")
        monkeypatch.setenv("OPENAI_API_BASE", "http://localhost:9999/v1")
        monkeypatch.setenv("REGULIUM_TIMEOUT_SECS", "5")
        monkeypatch.setenv("REGULIUM_MAX_WORKERS", "3")
        monkeypatch.setenv("FEATURES_CSV_PATH", str(tmp_path / "f.csv"))
        monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")

        settings = load_settings()
        assert settings.chat_model == "env-model"
        assert settings.api_base_url == "http://localhost:9999/v1"
        assert settings.request_timeout_secs == 5.0
        assert settings.max_workers == 3
        assert settings.features_csv_path == tmp_path / "f.csv"
        assert settings.cors_origins == ("http://a.test", "http://b.test")

    def test_result_is_cached_until_cleared(self, monkeypatch, tmp_path, repo_root):
        """load_settings() is cached until clear_config_cache()."""
        monkeypatch.setenv("REGULIUM_SETTINGS_PATH", str(tmp_path / "missing.yaml"))
        first = load_settings()
        monkeypatch.setenv("OPENAI_MODEL", "changed")
        assert load_settings() is first

        clear_config_cache()
        assert load_settings().chat_model == "changed"

    def test_invalid_value_raises(self, monkeypatch, tmp_path, repo_root):
        """Out-of-range YAML values raise ValueError on load."""
        path = _write_settings(tmp_path, "evaluation:\n  max_workers: 0\n")
        monkeypatch.setenv("REGULIUM_SETTINGS_PATH", str(path))
        with pytest.raises(ValueError, match="max_workers"):
            load_settings()


# ─────────────────────────────────────────────────────────────────────────────
# Validation
# ─────────────────────────────────────────────────────────────────────────────


class TestValidateSettings:
    def test_defaults_are_valid(self):
        """Default settings pass validation."""
        _validate_settings(Settings())

    @pytest.mark.parametrize("overrides, message", [
        ({"request_timeout_secs": 0}, "timeout_secs"),
        ({"max_retries": -1}, "max_retries"),
        ({"max_tokens": 0}, "max_tokens"),
        ({"temperature": 3.0}, "evaluation.temperature"),
        ({"csv_delimiter": '"'}, "csv_delimiter"),
        ({"csv_delimiter": ",;"}, "csv_delimiter"),
    ])
    def test_rejects_invalid_values(self, overrides, message):
        """Each invalid setting raises with a descriptive message."""
        with pytest.raises(ValueError, match=message):
            _validate_settings(Settings(**overrides))


class TestSettingsFileSchema:
    def test_null_sections_become_defaults(self):
        """Empty YAML sections fall back to defaults."""
        schema = validate_settings_file({"llm": None, "paths": None})
        assert schema.llm.chat_model == "google/gemini-2.0-flash-001"
        assert schema.paths.laws_csv == "data/laws.csv"

    def test_malformed_file_falls_back_to_defaults(self, caplog):
        """Wrongly typed values fall back to the default schema."""
        schema = validate_settings_file({"evaluation": {"max_tokens": "lots"}})
        assert schema == SettingsFileSchema()
        assert "Invalid settings.yaml" in caplog.text

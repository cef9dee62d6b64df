"""
Unified configuration loader for the compliance checker.

This module is the single source of truth for all configuration:
- Settings dataclass (frozen, built once per process)
- Loading settings from config/settings.yaml with env var overrides
- Pydantic schema validation of the YAML sections

All code should import configuration from this module, not from settings.yaml directly.
"""

from __future__ import annotations

import functools
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

logger = logging.getLogger(__name__)

_REPO_ROOT = Path(__file__).resolve().parents[2]
_CONFIG_DIR = _REPO_ROOT / "config"


# ─────────────────────────────────────────────────────────────────────────────
# Core Settings Dataclass
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Settings:
    """Application settings - all values loaded from config/settings.yaml.

    This is a frozen dataclass to ensure immutability after loading.
    All values are set at load time from the YAML config with env var overrides.
    """
    # LLM endpoint (OpenAI-compatible, e.g. OpenRouter)
    chat_model: str = "google/gemini-2.0-flash-001"
    api_base_url: str | None = None
    request_timeout_secs: float = 30.0
    max_retries: int = 0
    app_referer: str | None = None
    app_title: str | None = None

    # Pair evaluation
    temperature: float = 0.3
    max_tokens: int = 1000
    max_workers: int = 1

    # Relevance screening
    screening_temperature: float = 0.1
    screening_max_tokens: int = 500

    # Data files
    laws_csv_path: Path = Path("data/laws.csv")
    features_csv_path: Path = Path("data/features.csv")
    corrections_json_path: Path = Path("data/corrections.json")
    abbreviations_json_path: Path = Path("data/abbreviations.json")
    csv_delimiter: str = ","

    # API server
    cors_origins: tuple[str, ...] = field(default_factory=tuple)


# ─────────────────────────────────────────────────────────────────────────────
# Pydantic Schema for settings.yaml
# ─────────────────────────────────────────────────────────────────────────────


class LLMSectionSchema(BaseModel):
    """Schema for the `llm` section."""

    chat_model: str = "google/gemini-2.0-flash-001"
    base_url: str | None = None
    timeout_secs: float = 30.0
    max_retries: int = 0
    app_referer: str | None = None
    app_title: str | None = None


class EvaluationSectionSchema(BaseModel):
    """Schema for the `evaluation` section."""

    temperature: float = 0.3
    max_tokens: int = 1000
    max_workers: int = 1


class ScreeningSectionSchema(BaseModel):
    """Schema for the `screening` section."""

    temperature: float = 0.1
    max_tokens: int = 500


class PathsSectionSchema(BaseModel):
    """Schema for the `paths` section."""

    laws_csv: str = "data/laws.csv"
    features_csv: str = "data/features.csv"
    corrections_json: str = "data/corrections.json"
    abbreviations_json: str = "data/abbreviations.json"
    csv_delimiter: str = ","


class ServerSectionSchema(BaseModel):
    """Schema for the `server` section."""

    cors_origins: list[str] = []

    @field_validator("cors_origins", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str]:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return list(v)


class SettingsFileSchema(BaseModel):
    """Schema for the whole settings.yaml file."""

    llm: LLMSectionSchema = LLMSectionSchema()
    evaluation: EvaluationSectionSchema = EvaluationSectionSchema()
    screening: ScreeningSectionSchema = ScreeningSectionSchema()
    paths: PathsSectionSchema = PathsSectionSchema()
    server: ServerSectionSchema = ServerSectionSchema()

    @field_validator("llm", "evaluation", "screening", "paths", "server", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return {} if v is None else v


# ─────────────────────────────────────────────────────────────────────────────
# Settings Loading Helpers
# ─────────────────────────────────────────────────────────────────────────────


def _settings_path() -> Path:
    """Get settings.yaml path. Can be overridden via REGULIUM_SETTINGS_PATH for testing."""
    override = os.getenv("REGULIUM_SETTINGS_PATH")
    if override:
        return Path(override)
    return _CONFIG_DIR / "settings.yaml"


def _load_settings_yaml() -> dict[str, Any]:
    """Load raw settings from config/settings.yaml."""
    settings_path = _settings_path()
    if not settings_path.exists():
        return {}
    with open(settings_path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_settings_yaml() -> dict[str, Any]:
    """Get raw settings dict from YAML."""
    return _load_settings_yaml()


def validate_settings_file(config: dict[str, Any]) -> SettingsFileSchema:
    """Validate the raw YAML against the schema.

    Falls back to schema defaults (with a warning) when the file is malformed,
    so a typo in settings.yaml never prevents the API from starting.
    """
    try:
        return SettingsFileSchema.model_validate(config)
    except ValidationError as e:
        logger.warning("Invalid settings.yaml, using defaults: %s", e.errors())
        return SettingsFileSchema()


def _resolve_path(raw: str) -> Path:
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = _REPO_ROOT / path
    return path


def _validate_settings(settings: Settings) -> None:
    """Validate settings values."""
    if settings.request_timeout_secs <= 0:
        raise ValueError(f"llm.timeout_secs must be > 0 (got {settings.request_timeout_secs})")

    if settings.max_retries < 0:
        raise ValueError(f"llm.max_retries must be >= 0 (got {settings.max_retries})")

    if settings.max_tokens < 1 or settings.screening_max_tokens < 1:
        raise ValueError(
            f"max_tokens must be >= 1 (got evaluation={settings.max_tokens}, "
            f"screening={settings.screening_max_tokens})"
        )

    for name, value in (
        ("evaluation.temperature", settings.temperature),
        ("screening.temperature", settings.screening_temperature),
    ):
        if not (0.0 <= value <= 2.0):
            raise ValueError(f"{name} must be within [0, 2] (got {value})")

    if settings.max_workers < 1:
        raise ValueError(f"evaluation.max_workers must be >= 1 (got {settings.max_workers})")

    if len(settings.csv_delimiter) != 1 or settings.csv_delimiter == '"':
        raise ValueError(f"paths.csv_delimiter must be a single non-quote character (got {settings.csv_delimiter!r})")


@functools.lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load and validate application settings from config/settings.yaml.

    Environment variables override YAML values:
    - OPENAI_MODEL, OPENAI_API_BASE
    - REGULIUM_TIMEOUT_SECS, REGULIUM_MAX_WORKERS
    - LAWS_CSV_PATH, FEATURES_CSV_PATH, CORRECTIONS_JSON_PATH, ABBREVIATIONS_JSON_PATH
    - CORS_ORIGINS (comma separated, appended to the YAML list)

    OPENAI_API_KEY is read when the model client is first built and never stored here.

    Returns:
        Settings: Validated, frozen settings object
    """
    load_dotenv()

    schema = validate_settings_file(_load_settings_yaml())
    llm_cfg = schema.llm
    eval_cfg = schema.evaluation
    screen_cfg = schema.screening
    paths_cfg = schema.paths

    def _env_int(key: str, default: int) -> int:
        val = os.getenv(key)
        return int(val) if val and val.strip() else default

    def _env_float(key: str, default: float) -> float:
        val = os.getenv(key)
        if val is None or val.strip() == "":
            return default
        return float(val)

    def _env_path(key: str, default: str) -> Path:
        val = os.getenv(key)
        return _resolve_path(val if val and val.strip() else default)

    cors_origins = list(schema.server.cors_origins)
    extra_origins = os.getenv("CORS_ORIGINS", "")
    if extra_origins:
        cors_origins.extend(o.strip() for o in extra_origins.split(",") if o.strip())

    settings = Settings(
        chat_model=os.getenv("OPENAI_MODEL") or llm_cfg.chat_model,
        api_base_url=os.getenv("OPENAI_API_BASE") or llm_cfg.base_url,
        request_timeout_secs=_env_float("REGULIUM_TIMEOUT_SECS", llm_cfg.timeout_secs),
        max_retries=llm_cfg.max_retries,
        app_referer=llm_cfg.app_referer,
        app_title=llm_cfg.app_title,
        temperature=eval_cfg.temperature,
        max_tokens=eval_cfg.max_tokens,
        max_workers=_env_int("REGULIUM_MAX_WORKERS", eval_cfg.max_workers),
        screening_temperature=screen_cfg.temperature,
        screening_max_tokens=screen_cfg.max_tokens,
        laws_csv_path=_env_path("LAWS_CSV_PATH", paths_cfg.laws_csv),
        features_csv_path=_env_path("FEATURES_CSV_PATH", paths_cfg.features_csv),
        corrections_json_path=_env_path("CORRECTIONS_JSON_PATH", paths_cfg.corrections_json),
        abbreviations_json_path=_env_path("ABBREVIATIONS_JSON_PATH", paths_cfg.abbreviations_json),
        csv_delimiter=paths_cfg.csv_delimiter,
        cors_origins=tuple(dict.fromkeys(cors_origins)),
    )

    _validate_settings(settings)
    return settings


def clear_config_cache() -> None:
    """Clear all cached configurations (useful for testing)."""
    load_settings.cache_clear()

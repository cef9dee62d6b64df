"""Pytest configuration and shared fixtures for tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from regulium.common import config_loader
from regulium.engine.types import Feature, Law
from regulium.services.catalog_store import CatalogStore
from regulium.services.correction_store import CorrectionStore


LAWS_CSV = """\
index,law_description,law_title,country-region
1,"Processing of personal data, consent and data subject rights.",GDPR,EU
2,Obligations for online platforms and intermediaries.,DSA,EU
"""

FEATURES_CSV = """\
feature_name,feature_description
Age verification,"Checks user age at sign-up, using ID upload."
Personalized feed,Ranks videos by watch history (PF).
"""


def verdict_json(status: str = "compliant", reasoning: str = "Looks fine.", recommendations=None) -> str:
    """Build a well-formed model answer for one pair."""
    return json.dumps({
        "compliance_status": status,
        "reasoning": reasoning,
        "recommendations": recommendations if recommendations is not None else ["Keep audit logs"],
    })


class FakeComplete:
    """Records model calls and returns scripted answers.

    `responses` may be a string (returned for every call), a list (consumed in
    order), or a callable (system, prompt) -> str. Exceptions are raised.
    """

    def __init__(self, responses="[]"):
        self.responses = responses
        self.calls: list[dict] = []

    def __call__(self, system, prompt, *, temperature, max_tokens):
        self.calls.append({
            "system": system,
            "prompt": prompt,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        if callable(self.responses):
            result = self.responses(system, prompt)
        elif isinstance(self.responses, list):
            result = self.responses.pop(0)
        else:
            result = self.responses
        if isinstance(result, BaseException):
            raise result
        return result

    @property
    def prompts(self) -> list[str]:
        return [c["prompt"] for c in self.calls]


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep developer env vars and cached settings out of every test."""
    for key in (
        "OPENAI_API_KEY", "OPENAI_API_BASE", "OPENAI_MODEL",
        "LAWS_CSV_PATH", "FEATURES_CSV_PATH", "CORRECTIONS_JSON_PATH", "ABBREVIATIONS_JSON_PATH",
        "REGULIUM_TIMEOUT_SECS", "REGULIUM_MAX_WORKERS", "CORS_ORIGINS", "REGULIUM_SETTINGS_PATH",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(config_loader, "load_dotenv", lambda *args, **kwargs: False)
    config_loader.clear_config_cache()
    yield
    config_loader.clear_config_cache()


@pytest.fixture
def laws_csv(tmp_path) -> Path:
    path = tmp_path / "laws.csv"
    path.write_text(LAWS_CSV, encoding="utf-8")
    return path


@pytest.fixture
def features_csv(tmp_path) -> Path:
    path = tmp_path / "features.csv"
    path.write_text(FEATURES_CSV, encoding="utf-8")
    return path


@pytest.fixture
def catalog(laws_csv, features_csv) -> CatalogStore:
    store = CatalogStore(laws_csv, features_csv)
    store.load_all()
    return store


@pytest.fixture
def correction_store(tmp_path) -> CorrectionStore:
    return CorrectionStore(tmp_path / "corrections.json")


@pytest.fixture
def gdpr() -> Law:
    return Law(id="1", title="GDPR", description="Personal data protection.", jurisdiction="EU")


@pytest.fixture
def dsa() -> Law:
    return Law(id="2", title="DSA", description="Online platform obligations.", jurisdiction="EU")


@pytest.fixture
def age_verification() -> Feature:
    return Feature(name="Age verification", description="Checks user age at sign-up.")


@pytest.fixture
def fake_llm():
    """Factory for FakeComplete: fake_llm(responses) -> callable model stub."""
    return FakeComplete


@pytest.fixture
def answer():
    """Factory for a well-formed pair verdict answer (JSON text)."""
    return verdict_json

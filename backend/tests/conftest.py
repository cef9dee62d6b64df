"""Pytest fixtures for backend tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from backend.main import create_app
from regulium.common.config_loader import Settings
from regulium.services.container import build_services


class ScriptedModel:
    """Stand-in for the chat-completion client.

    Screening prompts get `screening`; evaluation prompts get `verdict`.
    Set `error` to make every call raise.
    """

    def __init__(self):
        self.screening = '["GDPR"]'
        self.verdict = json.dumps({
            "compliance_status": "compliant",
            "reasoning": "Test reasoning.",
            "recommendations": ["Document the flow"],
        })
        self.error: Exception | None = None
        self.prompts: list[str] = []

    def __call__(self, system, prompt, *, temperature, max_tokens):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.screening if "Law catalog:" in prompt else self.verdict


@pytest.fixture
def data_dir(tmp_path) -> Path:
    (tmp_path / "laws.csv").write_text(
        "index,law_description,law_title,country-region\n"
        "1,Personal data protection.,GDPR,EU\n"
        "2,Online platform obligations.,DSA,EU\n"
        "3,Children's online privacy.,COPPA,United States\n",
        encoding="utf-8",
    )
    (tmp_path / "features.csv").write_text(
        "feature_name,feature_description\n"
        "Age verification,Checks user age at sign-up.\n"
        "Personalized feed,Ranks videos by watch history.\n",
        encoding="utf-8",
    )
    (tmp_path / "abbreviations.json").write_text('{"PF": "Personalized feed"}', encoding="utf-8")
    return tmp_path


@pytest.fixture
def model() -> ScriptedModel:
    return ScriptedModel()


@pytest.fixture
def services(data_dir, model):
    settings = Settings(
        laws_csv_path=data_dir / "laws.csv",
        features_csv_path=data_dir / "features.csv",
        corrections_json_path=data_dir / "corrections.json",
        abbreviations_json_path=data_dir / "abbreviations.json",
        cors_origins=("http://example.test",),
    )
    return build_services(settings, complete_fn=model)


@pytest.fixture
def client(services):
    """Provide a test client around real services and a scripted model."""
    return TestClient(create_app(services), raise_server_exceptions=False)

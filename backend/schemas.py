"""Pydantic schemas for API request/response models.

Single Responsibility: Define data structures for API communication.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


class ApiResponse(BaseModel):
    """Success envelope shared by every endpoint."""

    success: bool = True
    data: Any = None
    count: int | None = None
    message: str | None = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


class AddFeatureRequest(BaseModel):
    """Request payload for adding a feature to the catalog."""

    feature_name: str = Field(..., min_length=1, description="Unique feature name")
    feature_description: str = Field(..., min_length=1, description="What the feature does")


class EvaluationSwitches(BaseModel):
    include_corrections: bool = Field(default=True, description="Inject implemented corrections into prompts")
    include_abbreviations: bool = Field(default=True, description="Inject matching glossary terms into prompts")


class ComplianceCheckRequest(EvaluationSwitches):
    """Explicit-mode check. Omitted lists mean "all"; empty lists mean "none"."""

    features: list[str] | None = Field(default=None, description="Feature names to check")
    laws: list[str] | None = Field(default=None, description="Law titles to check against")


class CheckFeatureRequest(EvaluationSwitches):
    """Discovery-mode check for one ad-hoc feature."""

    feature_name: str = Field(..., min_length=1)
    feature_description: str = Field(default="")


class FeedbackRequest(BaseModel):
    """Request payload for submitting feedback on a verdict."""

    feature_name: str = Field(..., min_length=1)
    law_title: str = Field(..., min_length=1)
    feedback_type: Literal["correction", "suggestion", "question"]
    message: str = Field(..., min_length=1)
    user_email: str | None = None

    @field_validator("feature_name", "law_title", "message", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class StatusUpdateRequest(BaseModel):
    status: Literal["pending", "reviewed", "implemented"]

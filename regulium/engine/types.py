"""Shared type definitions for the compliance pipeline.

Single Responsibility: Define the records that flow between the catalog,
the correction store, the screener, the evaluator and the aggregator.
This module has no dependencies on other regulium modules to avoid circular imports.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Union


class ComplianceStatus(str, Enum):
    COMPLIANT = "compliant"
    NON_COMPLIANT = "non-compliant"
    REQUIRES_REVIEW = "requires-review"

    @staticmethod
    def normalize(value: Any) -> str:
        """Lower-case and map "_"/" " separators to "-"."""
        return str(value or "").strip().lower().replace("_", "-").replace(" ", "-")

    @classmethod
    def coerce(cls, value: Any) -> "ComplianceStatus":
        """Map a model-supplied status onto the enum.

        Separator and case variants ("non_compliant", "Requires Review") are
        normalized first; anything else becomes REQUIRES_REVIEW.
        """
        try:
            return cls(cls.normalize(value))
        except ValueError:
            return cls.REQUIRES_REVIEW


class CorrectionKind(str, Enum):
    CORRECTION = "correction"
    SUGGESTION = "suggestion"
    QUESTION = "question"


class CorrectionStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    IMPLEMENTED = "implemented"


@dataclass(frozen=True)
class Law:
    """A law from the catalog. Identity is the title."""

    id: str
    title: str
    description: str
    jurisdiction: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Feature:
    """A product feature. Identity is the case-insensitive name."""

    name: str
    description: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Correction:
    """A piece of user feedback on a (feature, law) verdict."""

    id: str
    feature_name: str
    law_title: str
    kind: CorrectionKind
    message: str
    created_at: str
    status: CorrectionStatus = CorrectionStatus.PENDING
    contact: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "feature_name": self.feature_name,
            "law_title": self.law_title,
            "feedback_type": self.kind.value,
            "message": self.message,
            "user_email": self.contact,
            "timestamp": self.created_at,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Correction":
        """Build from the persisted JSON shape. Unknown enum values fall back to defaults."""
        try:
            kind = CorrectionKind(data.get("feedback_type"))
        except ValueError:
            kind = CorrectionKind.SUGGESTION
        try:
            status = CorrectionStatus(data.get("status"))
        except ValueError:
            status = CorrectionStatus.PENDING
        return cls(
            id=str(data.get("id", "")),
            feature_name=str(data.get("feature_name", "")),
            law_title=str(data.get("law_title", "")),
            kind=kind,
            message=str(data.get("message", "")),
            created_at=str(data.get("timestamp", "")),
            status=status,
            contact=data.get("user_email"),
        )


@dataclass(frozen=True)
class EvaluationOptions:
    """Per-request switches for the pair evaluator."""

    include_corrections: bool = True
    include_abbreviations: bool = True


@dataclass(frozen=True)
class Verdict:
    """Compliance result for one (feature, law) pair."""

    feature_name: str
    law_title: str
    law_description: str
    status: ComplianceStatus
    reasoning: str
    recommendations: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "feature_name": self.feature_name,
            "law_title": self.law_title,
            "law_description": self.law_description,
            "compliance_status": self.status.value,
            "reasoning": self.reasoning,
            "recommendations": list(self.recommendations),
        }


# ---------------------------------------------------------------------------
# Tagged parse result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Parsed:
    """Model output parsed into a verdict."""

    verdict: Verdict


@dataclass(frozen=True)
class ParseFailed:
    """Model output that could not be turned into a verdict."""

    raw_text: str
    reason: str


ParseResult = Union[Parsed, ParseFailed]


# ---------------------------------------------------------------------------
# Aggregation results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ComplianceSummary:
    total_features: int = 0
    total_laws: int = 0
    relevant_laws: int = 0
    compliant_count: int = 0
    non_compliant_count: int = 0
    review_required_count: int = 0
    overall_risk_score: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScreeningResult:
    """Output of the relevance screener.

    Attributes:
        laws: Catalog laws judged relevant, in catalog order
        raw_titles: Titles as returned by the model (before re-resolution)
        failed_open: True when the model call failed and every law was returned
    """

    laws: tuple[Law, ...]
    raw_titles: tuple[str, ...] = ()
    failed_open: bool = False


@dataclass(frozen=True)
class ComplianceReport:
    mode: str  # "explicit" | "discovery"
    results: tuple[Verdict, ...]
    summary: ComplianceSummary
    timestamp: str
    screening: ScreeningResult | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "mode": self.mode,
            "results": [v.to_dict() for v in self.results],
            "summary": self.summary.to_dict(),
            "timestamp": self.timestamp,
        }
        if self.screening is not None:
            payload["screening"] = {
                "relevant_laws": [law.title for law in self.screening.laws],
                "raw_titles": list(self.screening.raw_titles),
                "failed_open": self.screening.failed_open,
            }
        return payload


class ComplianceEngineError(RuntimeError):
    """Raised when the compliance engine encounters a recoverable error."""


class LLMCallError(ComplianceEngineError):
    """Raised when the external model call fails or returns no content."""

"""Best-effort parsing of free-text model responses.

Single Responsibility: Turn raw model text into a tagged ParseResult (for
pair evaluation) or a list of titles (for screening). Nothing here raises on
malformed input; the model is treated as unreliable.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from .types import ComplianceStatus, Feature, Law, Parsed, ParseFailed, ParseResult, Verdict

logger = logging.getLogger(__name__)

REQUIRED_VERDICT_KEYS = ("compliance_status", "reasoning", "recommendations")
DEFAULT_RECOMMENDATIONS = ("Review implementation manually",)

_FENCE_OPEN_RE = re.compile(r"^```[a-zA-Z]*\s*")
_FENCE_CLOSE_RE = re.compile(r"\s*```$")
_QUOTED_RE = re.compile(r'"([^"\n]+)"')


def strip_code_fences(text: str) -> str:
    """Remove a leading ```/```json fence and its closing fence."""
    cleaned = (text or "").strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_OPEN_RE.sub("", cleaned, count=1)
        cleaned = _FENCE_CLOSE_RE.sub("", cleaned, count=1)
    return cleaned.strip()


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Decode the outermost {...} span (greedy match). None if absent or invalid."""
    match = re.search(r"\{.*\}", strip_code_fences(text), re.DOTALL)
    if not match:
        return None
    try:
        value = json.loads(match.group())
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None


def extract_json_array(text: str) -> list[str]:
    """Extract a list of strings from the outermost [...] span.

    Falls back to every double-quoted substring when the span does not decode.
    Returns [] when nothing usable is found.
    """
    cleaned = strip_code_fences(text)
    match = re.search(r"\[.*\]", cleaned, re.DOTALL)
    if not match:
        return []

    try:
        value = json.loads(match.group())
    except json.JSONDecodeError:
        return [s.strip() for s in _QUOTED_RE.findall(match.group()) if s.strip()]

    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if isinstance(item, (str, int, float)) and str(item).strip()]


def parse_verdict(raw_text: str, feature: Feature, law: Law) -> ParseResult:
    """Parse a pair-evaluation response into Parsed(verdict) or ParseFailed."""
    data = extract_json_object(raw_text)
    if data is None:
        return ParseFailed(raw_text=raw_text, reason="no JSON object found")

    missing = [key for key in REQUIRED_VERDICT_KEYS if key not in data]
    if missing:
        return ParseFailed(raw_text=raw_text, reason=f"missing keys: {', '.join(missing)}")

    reasoning = data.get("reasoning")
    if not isinstance(reasoning, str) or not reasoning.strip():
        return ParseFailed(raw_text=raw_text, reason="empty reasoning")

    status = ComplianceStatus.coerce(data.get("compliance_status"))
    if status.value != ComplianceStatus.normalize(data.get("compliance_status")):
        logger.warning(
            "Invalid compliance_status %r for %s vs %s, defaulting to %s",
            data.get("compliance_status"), feature.name, law.title, status.value,
        )

    raw_recs = data.get("recommendations")
    if isinstance(raw_recs, list):
        recommendations = tuple(str(r) for r in raw_recs if r is not None and str(r).strip())
    else:
        recommendations = DEFAULT_RECOMMENDATIONS

    return Parsed(
        verdict=Verdict(
            feature_name=feature.name,
            law_title=law.title,
            law_description=law.description,
            status=status,
            reasoning=reasoning.strip(),
            recommendations=recommendations,
        )
    )

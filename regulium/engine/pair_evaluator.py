"""Evaluate one (feature, law) pair with the model.

Per-pair state machine (logged at debug level):

    start -> prompt-built -> model-called -> {parsed-ok | parse-failed | call-failed}
          -> verdict-returned

The terminal state is always verdict-returned. There is no retry: any failure
while fetching corrections, building the prompt, calling the model or parsing
the answer yields the fixed fallback verdict. No exception leaves evaluate().
"""

from __future__ import annotations

import logging
from typing import Callable, Mapping, Protocol, Sequence

from . import prompt_templates as PT
from .prompt_builder import build_evaluation_prompt
from .response_parsing import parse_verdict
from .types import (
    ComplianceStatus,
    Correction,
    EvaluationOptions,
    Feature,
    Law,
    LLMCallError,
    Parsed,
    Verdict,
)

logger = logging.getLogger(__name__)

FALLBACK_REASONING = "Error occurred during compliance check. Manual review required."
FALLBACK_RECOMMENDATIONS = (
    "Review the feature implementation manually",
    "Check system logs for errors",
)

CompleteFn = Callable[..., str]


class CorrectionSource(Protocol):
    def implemented_for(self, feature_name: str, law_title: str) -> Sequence[Correction]: ...


class TermSource(Protocol):
    def relevant_terms(self, text: str) -> Mapping[str, str]: ...


def fallback_verdict(feature: Feature, law: Law) -> Verdict:
    """The deterministic verdict returned whenever evaluation fails."""
    return Verdict(
        feature_name=feature.name,
        law_title=law.title,
        law_description=law.description,
        status=ComplianceStatus.REQUIRES_REVIEW,
        reasoning=FALLBACK_REASONING,
        recommendations=FALLBACK_RECOMMENDATIONS,
    )


class PairEvaluator:
    """Build the evaluation prompt, call the model, parse the verdict."""

    def __init__(
        self,
        complete_fn: CompleteFn,
        corrections: CorrectionSource | None = None,
        glossary: TermSource | None = None,
        *,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ):
        self._complete = complete_fn
        self._corrections = corrections
        self._glossary = glossary
        self.temperature = temperature
        self.max_tokens = max_tokens

    def build_prompt(self, feature: Feature, law: Law, options: EvaluationOptions) -> str:
        corrections: Sequence[Correction] = ()
        if options.include_corrections and self._corrections is not None:
            corrections = self._corrections.implemented_for(feature.name, law.title)

        terminology: Mapping[str, str] = {}
        if options.include_abbreviations and self._glossary is not None:
            terminology = self._glossary.relevant_terms(f"{feature.name} {feature.description}")

        return build_evaluation_prompt(
            feature, law, corrections=corrections, terminology=terminology
        )

    def evaluate(
        self,
        feature: Feature,
        law: Law,
        options: EvaluationOptions | None = None,
    ) -> Verdict:
        options = options or EvaluationOptions()
        pair = f"{feature.name} vs {law.title}"
        logger.debug("[%s] start", pair)

        try:
            prompt = self.build_prompt(feature, law, options)
        except Exception as exc:
            logger.error("[%s] prompt-failed: %s", pair, exc)
            logger.debug("[%s] verdict-returned (fallback)", pair)
            return fallback_verdict(feature, law)
        logger.debug("[%s] prompt-built (%d chars)", pair, len(prompt))

        try:
            raw_text = self._complete(
                PT.EVALUATION_SYSTEM_PROMPT,
                prompt,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
            if not raw_text or not raw_text.strip():
                raise LLMCallError("LLM returned empty content.")
            logger.debug("[%s] model-called", pair)
        except Exception as exc:
            logger.error("[%s] call-failed: %s", pair, exc)
            logger.debug("[%s] verdict-returned (fallback)", pair)
            return fallback_verdict(feature, law)

        try:
            result = parse_verdict(raw_text, feature, law)
        except Exception:
            logger.exception("[%s] parse-failed: unexpected parser error", pair)
            return fallback_verdict(feature, law)

        if isinstance(result, Parsed):
            logger.debug("[%s] parsed-ok: %s", pair, result.verdict.status.value)
            logger.debug("[%s] verdict-returned", pair)
            return result.verdict

        logger.warning(
            "[%s] parse-failed: %s (raw: %.200s)", pair, result.reason, result.raw_text
        )
        logger.debug("[%s] verdict-returned (fallback)", pair)
        return fallback_verdict(feature, law)

"""Relevance screening: which catalog laws could apply to a feature.

One model call lists the feature and every law title; the model answers with
a JSON array of relevant titles. Titles are re-resolved against the catalog so
the result is always a subset of the catalog, in catalog order.

Failure policy: a failed model call fails OPEN (every law is returned), so an
outage never silently drops laws from a compliance check.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from . import prompt_templates as PT
from .prompt_builder import build_screening_prompt
from .response_parsing import extract_json_array
from .types import Feature, Law, ScreeningResult

logger = logging.getLogger(__name__)

# (system, prompt, *, temperature, max_tokens) -> text
CompleteFn = Callable[..., str]


def resolve_titles(titles: Sequence[str], laws: Sequence[Law]) -> tuple[Law, ...]:
    """Map model-returned titles back onto catalog laws.

    A law matches when its title contains a returned title or is contained by
    it (case-insensitive), which tolerates minor wording drift.
    """
    wanted = [t.strip().lower() for t in titles if t and t.strip()]
    if not wanted:
        return ()

    matched: list[Law] = []
    for law in laws:
        catalog_title = law.title.strip().lower()
        if not catalog_title:
            continue
        if any(w in catalog_title or catalog_title in w for w in wanted):
            matched.append(law)
    return tuple(matched)


class RelevanceScreener:
    """Select the subset of laws plausibly relevant to one feature."""

    def __init__(
        self,
        complete_fn: CompleteFn,
        *,
        temperature: float = 0.1,
        max_tokens: int = 500,
    ):
        self._complete = complete_fn
        self.temperature = temperature
        self.max_tokens = max_tokens

    def screen(self, feature: Feature, laws: Sequence[Law]) -> ScreeningResult:
        if not laws:
            return ScreeningResult(laws=())

        prompt = build_screening_prompt(feature, laws)
        try:
            raw_text = self._complete(
                PT.SCREENING_SYSTEM_PROMPT,
                prompt,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except Exception:
            logger.warning(
                "Screening call failed for '%s'; returning all %d laws",
                feature.name, len(laws), exc_info=True,
            )
            return ScreeningResult(laws=tuple(laws), failed_open=True)

        titles = extract_json_array(raw_text or "")
        if not titles:
            logger.info(
                "Screener found no relevant laws for '%s' (raw: %.200s)",
                feature.name, raw_text,
            )
            return ScreeningResult(laws=(), raw_titles=())

        relevant = resolve_titles(titles, laws)
        logger.info(
            "Screener: %d/%d laws relevant for '%s'",
            len(relevant), len(laws), feature.name,
        )
        return ScreeningResult(laws=relevant, raw_titles=tuple(titles))

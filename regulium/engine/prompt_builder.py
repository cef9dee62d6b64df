"""Prompt building for the compliance pipeline.

Turns domain records (feature, law, corrections, glossary terms) into the
user prompts sent to the model. No model calls and no parsing here.

Single Responsibility: Build LLM prompts from domain records.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from . import prompt_templates as PT
from .types import Correction, Feature, Law


def render_corrections(corrections: Iterable[Correction]) -> str:
    """Render corrections as a bullet block, or "" when there are none."""
    lines = [f"- {c.message}" for c in corrections if c.message.strip()]
    if not lines:
        return ""
    return f"\n{PT.CORRECTIONS_HEADER}\n" + "\n".join(lines) + "\n"


def render_terminology(terms: Mapping[str, str]) -> str:
    """Render glossary terms as a "Terminology" block, or "" when empty."""
    if not terms:
        return ""
    lines = [f"- {term}: {expansion}" for term, expansion in terms.items()]
    return f"\n{PT.TERMINOLOGY_HEADER}\n" + "\n".join(lines) + "\n"


def build_evaluation_prompt(
    feature: Feature,
    law: Law,
    *,
    corrections: Sequence[Correction] = (),
    terminology: Mapping[str, str] | None = None,
) -> str:
    """Build the user prompt for one (feature, law) evaluation."""
    return PT.EVALUATION_PROMPT.format(
        feature_name=feature.name,
        feature_description=feature.description,
        law_title=law.title,
        law_description=law.description,
        terminology_block=render_terminology(terminology or {}),
        corrections_block=render_corrections(corrections),
    )


def build_screening_prompt(feature: Feature, laws: Sequence[Law]) -> str:
    """Build the user prompt listing every catalog law title for screening."""
    law_titles = "\n".join(f"- {law.title}" for law in laws)
    return PT.SCREENING_PROMPT.format(
        feature_name=feature.name,
        feature_description=feature.description,
        law_titles=law_titles,
    )

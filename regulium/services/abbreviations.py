"""Abbreviation glossary (term -> expansion) loaded from a flat JSON object."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)


class AbbreviationGlossary:
    def __init__(self, path: Path | None = None, terms: dict[str, str] | None = None):
        self.path = Path(path) if path is not None else None
        self._terms: dict[str, str] = dict(terms or {})
        self._patterns: dict[str, re.Pattern[str]] = {}
        self._compile()

    def _compile(self) -> None:
        self._patterns = {
            term: re.compile(rf"(?<!\w){re.escape(term)}(?!\w)")
            for term in self._terms
        }

    def load(self) -> None:
        """(Re)load the glossary file. Missing or invalid file -> empty glossary."""
        if self.path is None:
            return
        terms: dict[str, str] = {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.warning("Abbreviations file not found: %s", self.path)
        except (OSError, json.JSONDecodeError) as err:
            logger.warning("Could not load abbreviations from %s: %s", self.path, err)
        else:
            if isinstance(data, dict):
                terms = {
                    str(k).strip(): str(v).strip()
                    for k, v in data.items()
                    if str(k).strip() and isinstance(v, (str, int, float)) and str(v).strip()
                }
            else:
                logger.warning("Abbreviations file %s is not a JSON object", self.path)

        self._terms = terms
        self._compile()
        logger.info("Loaded %d abbreviations", len(terms))

    def __len__(self) -> int:
        return len(self._terms)

    def relevant_terms(self, text: str) -> dict[str, str]:
        """Terms that occur in text as whole words (case-sensitive), in glossary order."""
        if not text:
            return {}
        return {
            term: self._terms[term]
            for term, pattern in self._patterns.items()
            if pattern.search(text)
        }

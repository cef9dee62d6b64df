"""In-memory catalog of laws and features backed by two delimited files.

Loading never raises: a missing or malformed file is logged and leaves that
table empty, and the catalog reports itself as not ready.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from ..common.delimited import TableFormatError, append_row, normalize_field, read_table
from ..engine.types import Feature, Law
from .errors import PersistenceError, ValidationError

logger = logging.getLogger(__name__)

LAW_COLUMNS = {
    "id": ("index", "law_id", "id"),
    "title": ("law_title", "title"),
    "description": ("law_description", "description"),
    "jurisdiction": ("country-region", "jurisdiction"),
}

FEATURE_COLUMNS = {
    "name": ("feature_name", "name"),
    "description": ("feature_description", "description"),
}

FEATURE_HEADER = ("feature_name", "feature_description")


def _feature_key(name: str) -> str:
    return (name or "").strip().lower()


class CatalogStore:
    """Laws and features loaded from the configured tables."""

    def __init__(self, laws_path: Path, features_path: Path, delimiter: str = ","):
        self.laws_path = Path(laws_path)
        self.features_path = Path(features_path)
        self.delimiter = delimiter
        self._laws: list[Law] = []
        self._features: list[Feature] = []
        self._laws_ok = False
        self._features_ok = False
        self._lock = threading.Lock()

    # ─────────────────────────────────────────────────────────────────────
    # Loading
    # ─────────────────────────────────────────────────────────────────────

    def _load_laws(self) -> None:
        try:
            result = read_table(self.laws_path, LAW_COLUMNS, self.delimiter)
        except TableFormatError as err:
            logger.error("Could not load laws: %s", err)
            self._laws, self._laws_ok = [], False
            return

        laws = [
            Law(id=row["id"], title=row["title"], description=row["description"],
                jurisdiction=row["jurisdiction"])
            for row in result.rows
            if row["title"]
        ]
        self._laws = laws
        self._laws_ok = bool(laws)
        logger.info("Loaded %d laws from %s (%d rows skipped)", len(laws), self.laws_path, result.skipped)

    def _load_features(self) -> None:
        try:
            result = read_table(self.features_path, FEATURE_COLUMNS, self.delimiter)
        except TableFormatError as err:
            logger.error("Could not load features: %s", err)
            self._features, self._features_ok = [], False
            return

        features: list[Feature] = []
        seen: set[str] = set()
        for row in result.rows:
            key = _feature_key(row["name"])
            if not key:
                continue
            if key in seen:
                logger.warning("Duplicate feature '%s' in %s ignored", row["name"], self.features_path)
                continue
            seen.add(key)
            features.append(Feature(name=row["name"], description=row["description"]))

        self._features = features
        self._features_ok = bool(features)
        logger.info(
            "Loaded %d features from %s (%d rows skipped)",
            len(features), self.features_path, result.skipped,
        )

    def load_all(self) -> None:
        with self._lock:
            self._load_laws()
            self._load_features()

    def refresh(self) -> None:
        """Reload both tables from disk."""
        logger.info("Refreshing catalog data")
        self.load_all()

    def is_ready(self) -> bool:
        return self._laws_ok and self._features_ok

    # ─────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────

    def get_laws(self) -> list[Law]:
        return list(self._laws)

    def get_features(self) -> list[Feature]:
        return list(self._features)

    def find_law_by_title(self, title: str) -> Law | None:
        for law in self._laws:
            if law.title == title:
                return law
        return None

    def find_feature_by_name(self, name: str) -> Feature | None:
        key = _feature_key(name)
        for feature in self._features:
            if _feature_key(feature.name) == key:
                return feature
        return None

    def laws_by_jurisdiction(self, jurisdiction: str) -> list[Law]:
        needle = (jurisdiction or "").strip().lower()
        if not needle:
            return self.get_laws()
        return [law for law in self._laws if needle in law.jurisdiction.lower()]

    # ─────────────────────────────────────────────────────────────────────
    # Mutation
    # ─────────────────────────────────────────────────────────────────────

    def append_feature(self, name: str, description: str) -> Feature:
        """Add a feature in memory and append it to the features file.

        Raises:
            ValidationError: blank name or a feature with that name exists
            PersistenceError: the file could not be written (memory is rolled back)
        """
        name = normalize_field(name or "")
        description = normalize_field(description or "")
        if not name:
            raise ValidationError("Feature name is required")
        if not description:
            raise ValidationError("Feature description is required")

        with self._lock:
            if any(_feature_key(f.name) == _feature_key(name) for f in self._features):
                raise ValidationError(f"Feature '{name}' already exists")

            feature = Feature(name=name, description=description)
            self._features.append(feature)
            try:
                append_row(self.features_path, (name, description), FEATURE_HEADER, self.delimiter)
            except OSError as err:
                self._features.pop()
                logger.error("Could not persist feature '%s': %s", name, err)
                raise PersistenceError(f"Could not write features file '{self.features_path}': {err}") from err

            self._features_ok = True
            logger.info("Added feature '%s'", name)
            return feature

"""JSON-file store for user feedback and corrections.

File shape::

    {"corrections": [...], "feedback": [...], "lastUpdated": "<ISO-8601>"}

Every feedback item goes to ``feedback``; items of kind "correction" are also
copied to ``corrections``. The whole file is rewritten on each mutation,
under a process-local lock, through a temp file and os.replace.
"""

from __future__ import annotations

import json
import logging
import os
import threading
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..engine.types import Correction, CorrectionKind, CorrectionStatus
from .errors import PersistenceError, ValidationError

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _empty_document() -> dict[str, Any]:
    return {"corrections": [], "feedback": [], "lastUpdated": _now_iso()}


def generate_feedback_id() -> str:
    """Return an id of the form feedback_<epoch ms>_<9 random chars>."""
    return f"feedback_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


class CorrectionStore:
    """Feedback persisted to one JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._corrupt = False
        self._ensure_file()

    # ─────────────────────────────────────────────────────────────────────
    # File I/O
    # ─────────────────────────────────────────────────────────────────────

    def _ensure_file(self) -> None:
        if self.path.exists():
            return
        try:
            self._write(_empty_document())
        except PersistenceError:
            logger.error("Could not initialize corrections file %s", self.path)

    def _read(self) -> dict[str, Any]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return _empty_document()
        except OSError as err:
            logger.error("Error reading corrections file %s: %s", self.path, err)
            return _empty_document()
        except json.JSONDecodeError as err:
            logger.error("Corrections file %s is not valid JSON: %s", self.path, err)
            self._corrupt = True
            return _empty_document()

        if not isinstance(data, dict):
            logger.error("Corrections file %s is not a JSON object; treating as empty", self.path)
            self._corrupt = True
            return _empty_document()
        for key in ("corrections", "feedback"):
            if not isinstance(data.get(key), list):
                data[key] = []
        self._corrupt = False
        return data

    def _write(self, data: dict[str, Any]) -> None:
        data["lastUpdated"] = _now_iso()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")

        payload = json.dumps(data, ensure_ascii=False, indent=2)
        try:
            tmp_path.write_text(payload + "\n", encoding="utf-8")
            if self._corrupt and self.path.exists():
                backup = self.path.with_suffix(self.path.suffix + ".corrupt")
                os.replace(self.path, backup)
                logger.warning("Moved unreadable corrections file to %s", backup)
            self._corrupt = False
            os.replace(tmp_path, self.path)
        except OSError as err:
            raise PersistenceError(f"Could not write corrections file '{self.path}': {err}") from err

    @staticmethod
    def _items(entries: list[Any]) -> list[Correction]:
        return [Correction.from_dict(e) for e in entries if isinstance(e, dict)]

    # ─────────────────────────────────────────────────────────────────────
    # Operations
    # ─────────────────────────────────────────────────────────────────────

    def submit(
        self,
        feature_name: str,
        law_title: str,
        kind: str | CorrectionKind,
        message: str,
        contact: str | None = None,
    ) -> Correction:
        """Validate and store one feedback item.

        Raises:
            ValidationError: a required field is blank or kind is unknown
            PersistenceError: the file could not be written
        """
        feature_name = (feature_name or "").strip()
        law_title = (law_title or "").strip()
        message = (message or "").strip()
        if not feature_name:
            raise ValidationError("Missing required field: feature_name")
        if not law_title:
            raise ValidationError("Missing required field: law_title")
        if not message:
            raise ValidationError("Missing required field: message")
        try:
            kind = CorrectionKind(kind)
        except ValueError:
            allowed = ", ".join(k.value for k in CorrectionKind)
            raise ValidationError(f"Invalid feedback_type '{kind}'. Must be one of: {allowed}")

        correction = Correction(
            id=generate_feedback_id(),
            feature_name=feature_name,
            law_title=law_title,
            kind=kind,
            message=message,
            created_at=_now_iso(),
            status=CorrectionStatus.PENDING,
            contact=(contact or "").strip() or None,
        )

        with self._lock:
            data = self._read()
            data["feedback"].append(correction.to_dict())
            if kind is CorrectionKind.CORRECTION:
                data["corrections"].append(correction.to_dict())
            self._write(data)

        logger.info("Stored %s %s for %s / %s", kind.value, correction.id, feature_name, law_title)
        return correction

    def list_all(self) -> list[Correction]:
        """Every feedback item, corrections included."""
        return self._items(self._read()["feedback"])

    def list_corrections(self) -> list[Correction]:
        return self._items(self._read()["corrections"])

    def list_by_feature(self, feature_name: str) -> list[Correction]:
        return [c for c in self.list_corrections() if c.feature_name == feature_name]

    def list_by_law(self, law_title: str) -> list[Correction]:
        return [c for c in self.list_corrections() if c.law_title == law_title]

    def implemented_for(self, feature_name: str, law_title: str) -> list[Correction]:
        """Corrections for this exact pair whose status is implemented."""
        return [
            c for c in self.list_corrections()
            if c.feature_name == feature_name
            and c.law_title == law_title
            and c.status is CorrectionStatus.IMPLEMENTED
        ]

    def set_status(self, correction_id: str, status: str | CorrectionStatus) -> int:
        """Update the status of every entry with this id.

        Returns:
            Number of entries updated across both lists (0 when nothing matched)

        Raises:
            ValidationError: unknown status
            PersistenceError: the file could not be written
        """
        try:
            status = CorrectionStatus(status)
        except ValueError:
            allowed = ", ".join(s.value for s in CorrectionStatus)
            raise ValidationError(f"Invalid status '{status}'. Must be one of: {allowed}")

        with self._lock:
            data = self._read()
            matched = 0
            for key in ("corrections", "feedback"):
                for entry in data[key]:
                    if isinstance(entry, dict) and entry.get("id") == correction_id:
                        entry["status"] = status.value
                        matched += 1
            if matched:
                self._write(data)

        logger.info("Status of %s set to %s (%d entries)", correction_id, status.value, matched)
        return matched

    def delete(self, correction_id: str) -> int:
        """Remove every entry with this id. Returns how many were removed."""
        with self._lock:
            data = self._read()
            removed = 0
            for key in ("corrections", "feedback"):
                kept = [e for e in data[key] if not (isinstance(e, dict) and e.get("id") == correction_id)]
                removed += len(data[key]) - len(kept)
                data[key] = kept
            if removed:
                self._write(data)

        logger.info("Deleted %s (%d entries)", correction_id, removed)
        return removed

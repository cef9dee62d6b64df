"""Delimited-table codec for the laws/features catalog files.

Single Responsibility: split and join rows of a delimited text file and map
them onto named columns. No knowledge of laws or features.

Quoting follows the simple convention of the catalog files: a double quote
toggles an "inside field" state, so a quoted field may contain the delimiter.
Escaped quotes ("") are not supported.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence

logger = logging.getLogger(__name__)

QUOTE = '"'


class TableFormatError(ValueError):
    """Raised when a table is structurally unusable (missing file, header or columns)."""


@dataclass(frozen=True)
class TableReadResult:
    """Rows read from one table plus bookkeeping for readiness checks."""

    rows: tuple[dict[str, str], ...]
    skipped: int


def split_row(line: str, delimiter: str = ",") -> list[str]:
    """Split one line into fields, honoring double-quoted fields.

    Surrounding whitespace is trimmed from every field and the quote
    characters themselves are dropped.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == QUOTE:
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    fields.append("".join(current).strip())
    return fields


def normalize_field(value: str) -> str:
    """Return the form a value takes after a write and a re-read.

    Double quotes cannot be represented without escaped-quote support, so
    they become single quotes. Line breaks become spaces and the ends are
    trimmed, as split_row does on read.
    """
    return " ".join(str(value).replace(QUOTE, "'").splitlines()).strip()


def join_row(values: Sequence[str], delimiter: str = ",") -> str:
    """Join values into one line, quoting fields that contain the delimiter."""
    out: list[str] = []
    for value in values:
        text = normalize_field(value)
        if delimiter in text:
            text = f"{QUOTE}{text}{QUOTE}"
        out.append(text)
    return delimiter.join(out)


def resolve_columns(header: Sequence[str], aliases: Mapping[str, Sequence[str]]) -> dict[str, int]:
    """Map logical field names to header positions using column-name aliases.

    Matching is case-insensitive. Raises TableFormatError listing every field
    that has no matching column.
    """
    normalized = [h.strip().lower() for h in header]
    positions: dict[str, int] = {}
    missing: list[str] = []

    for field_name, candidates in aliases.items():
        for candidate in candidates:
            if candidate.lower() in normalized:
                positions[field_name] = normalized.index(candidate.lower())
                break
        else:
            missing.append(field_name)

    if missing:
        raise TableFormatError(
            f"Header {list(header)!r} is missing columns for: {', '.join(missing)}"
        )
    return positions


def read_table(
    path: Path,
    aliases: Mapping[str, Sequence[str]],
    delimiter: str = ",",
) -> TableReadResult:
    """Read a delimited file into dicts keyed by logical field name.

    The first non-blank line is the header. Rows with fewer fields than the
    highest required column position are skipped with a warning.

    Raises:
        TableFormatError: file missing, empty, or header lacks required columns
    """
    if not path.exists():
        raise TableFormatError(f"Table file not found: {path}")

    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as err:
        raise TableFormatError(f"Could not read table file '{path}': {err}") from err

    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        raise TableFormatError(f"Table file is empty: {path}")

    positions = resolve_columns(split_row(lines[0], delimiter), aliases)
    required_width = max(positions.values()) + 1

    rows: list[dict[str, str]] = []
    skipped = 0
    for line_no, line in enumerate(lines[1:], start=2):
        fields = split_row(line, delimiter)
        if len(fields) < required_width:
            logger.warning(
                "Skipping %s line %d: expected at least %d fields, got %d",
                path.name, line_no, required_width, len(fields),
            )
            skipped += 1
            continue
        rows.append({name: fields[pos] for name, pos in positions.items()})

    return TableReadResult(rows=tuple(rows), skipped=skipped)


def append_row(
    path: Path,
    values: Sequence[str],
    header: Sequence[str],
    delimiter: str = ",",
) -> None:
    """Append one row, writing the header first when the file does not exist.

    Raises:
        OSError: on any write failure (caller decides how to recover)
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    needs_header = not path.exists() or path.stat().st_size == 0
    needs_newline = False
    if not needs_header:
        with open(path, "rb") as f:
            f.seek(-1, 2)
            needs_newline = f.read(1) not in (b"\n", b"\r")

    with open(path, "a", encoding="utf-8", newline="") as f:
        if needs_header:
            f.write(join_row(header, delimiter) + "\n")
        elif needs_newline:
            f.write("\n")
        f.write(join_row(values, delimiter) + "\n")

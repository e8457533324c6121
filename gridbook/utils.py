"""Utility helpers shared across the gridbook package."""
from __future__ import annotations

import logging
import re
from typing import Any, Iterable, List, Mapping, Sequence, Tuple

from .errors import InvalidRangeError

LOGGER = logging.getLogger("gridbook")

MAX_SHEET_NAME_LENGTH = 31
_INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")
_CELL_REF = re.compile(r"^\$?([A-Za-z]{1,3})\$?([0-9]+)$")


class _Absent:
    """Marker for a dot-path lookup that found nothing."""

    _instance = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"

    def __reduce__(self):
        return (_Absent, ())


ABSENT = _Absent()


def resolve_path(record: Any, path: str) -> Any:
    """Follow a dot separated ``path`` through mappings, objects and sequences.

    Returns :data:`ABSENT` as soon as a segment cannot be resolved, so callers
    can tell a missing field apart from a stored ``None``.
    """

    if isinstance(record, Mapping) and path in record:
        return record[path]
    current = record
    for part in str(path).split("."):
        if current is None or current is ABSENT:
            return ABSENT
        if isinstance(current, Mapping):
            if part not in current:
                return ABSENT
            current = current[part]
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
            try:
                current = current[int(part)]
            except (ValueError, IndexError):
                return ABSENT
        else:
            try:
                current = getattr(current, part)
            except AttributeError:
                return ABSENT
    return current


def value_or_none(value: Any) -> Any:
    return None if value is ABSENT else value


def record_fields(record: Any) -> List[str]:
    """Return the top-level field names of ``record`` in declaration order."""

    if isinstance(record, Mapping):
        return [str(key) for key in record.keys()]
    if hasattr(record, "__dict__"):
        return [key for key in vars(record) if not key.startswith("_")]
    return []


def column_letter(index: int) -> str:
    """Encode a 1-based column index as bijective base-26 letters (1 -> A)."""

    if isinstance(index, bool) or not isinstance(index, int) or index < 1:
        raise ValueError(f"Column index must be a positive integer, got {index!r}")
    letters: List[str] = []
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters.append(chr(ord("A") + remainder))
    return "".join(reversed(letters))


def column_index(letters: str) -> int:
    """Decode bijective base-26 column letters into a 1-based index."""

    text = str(letters).strip().upper()
    if not text or not text.isalpha() or not text.isascii():
        raise ValueError(f"Invalid column letters {letters!r}")
    index = 0
    for char in text:
        index = index * 26 + (ord(char) - ord("A") + 1)
    return index


def cell_reference(row: int, col: int) -> str:
    """Return the A1 reference for zero-based ``row``/``col``."""

    return f"{column_letter(col + 1)}{row + 1}"


def parse_cell_reference(reference: str) -> Tuple[int, int]:
    """Parse ``"B3"`` into zero-based ``(row, col)``."""

    match = _CELL_REF.match(str(reference).strip())
    if not match or int(match.group(2)) < 1:
        raise InvalidRangeError(f"Malformed cell reference {reference!r}")
    return int(match.group(2)) - 1, column_index(match.group(1)) - 1


def parse_range(reference: str) -> Tuple[int, int, int, int]:
    """Parse ``"A1:C4"`` into zero-based ``(start_row, start_col, end_row, end_col)``."""

    parts = str(reference).split(":")
    if len(parts) == 1:
        parts = parts * 2
    if len(parts) != 2:
        raise InvalidRangeError(f"Malformed range {reference!r}")
    start_row, start_col = parse_cell_reference(parts[0])
    end_row, end_col = parse_cell_reference(parts[1])
    return start_row, start_col, end_row, end_col


def sanitize_sheet_name(name: Any, default: str = "Sheet") -> str:
    """Make ``name`` acceptable as a spreadsheet tab title."""

    text = _INVALID_SHEET_CHARS.sub("_", str(name or "")).strip("'")
    text = text[:MAX_SHEET_NAME_LENGTH]
    return text or default


def unique_sheet_names(names: Iterable[Any]) -> List[str]:
    """Sanitise ``names`` and suffix repeats so each title occurs once.

    Comparison is case-insensitive, matching how spreadsheet applications
    treat tab titles.
    """

    result: List[str] = []
    seen = set()
    for position, raw in enumerate(names, start=1):
        base = sanitize_sheet_name(raw, default=f"Sheet{position}")
        candidate = base
        counter = 2
        while candidate.casefold() in seen:
            suffix = f" ({counter})"
            candidate = base[: MAX_SHEET_NAME_LENGTH - len(suffix)] + suffix
            counter += 1
        if candidate != raw:
            LOGGER.warning("Sheet name %r written as %r", raw, candidate)
        seen.add(candidate.casefold())
        result.append(candidate)
    return result


__all__ = [
    "ABSENT",
    "resolve_path",
    "value_or_none",
    "record_fields",
    "column_letter",
    "column_index",
    "cell_reference",
    "parse_cell_reference",
    "parse_range",
    "sanitize_sheet_name",
    "unique_sheet_names",
]

"""Stable partitioning of records by key."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Sequence, Union

from .utils import ABSENT, resolve_path

KEY_SEPARATOR = " › "
BLANK_KEY = "(blank)"

GroupKey = Union[str, Callable[[Any], Any]]


def key_text(value: Any) -> str:
    if value is ABSENT or value is None:
        return BLANK_KEY
    return str(value)


def group_records(records: Sequence[Any], key: GroupKey) -> Dict[str, List[Any]]:
    """Partition ``records`` by ``key`` (a dot path or a callable).

    Groups appear in first-seen key order and keep the input order of their
    members.
    """

    groups: Dict[str, List[Any]] = {}
    for record in records:
        raw = key(record) if callable(key) else resolve_path(record, key)
        groups.setdefault(key_text(raw), []).append(record)
    return groups


def group_multi_level(
    records: Sequence[Any], dimensions: Sequence[GroupKey], separator: str = KEY_SEPARATOR
) -> Dict[str, List[Any]]:
    """Group by the composite key of all ``dimensions`` joined with ``separator``."""

    def composite(record: Any) -> str:
        parts = [
            key_text(dim(record) if callable(dim) else resolve_path(record, dim))
            for dim in dimensions
        ]
        return separator.join(parts)

    return group_records(records, composite)


__all__ = ["BLANK_KEY", "KEY_SEPARATOR", "group_records", "group_multi_level", "key_text"]

"""Configuration loading utilities for gridbook."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

from .errors import ExportOptionError, UnsupportedFormatError


class ExportFormat(str, Enum):
    XLSX = "xlsx"
    CSV = "csv"
    JSON = "json"


FORMAT_ALIASES = {
    "xlsx": ExportFormat.XLSX,
    "excel": ExportFormat.XLSX,
    "csv": ExportFormat.CSV,
    "json": ExportFormat.JSON,
}


def resolve_format(value: Any) -> ExportFormat:
    """Map a requested format onto :class:`ExportFormat`; ``None`` means xlsx."""

    if value is None or value == "":
        return ExportFormat.XLSX
    if isinstance(value, ExportFormat):
        return value
    try:
        return FORMAT_ALIASES[str(value).strip().lower()]
    except KeyError:
        raise UnsupportedFormatError(value, [fmt.value for fmt in ExportFormat]) from None


@dataclass
class ExportOptions:
    """Options recognised by the export pipeline.

    ``filename`` is advisory and only echoed back in the result. Keys the
    pipeline does not know are kept in ``extra`` for individual writers.
    """

    filename: Optional[str] = None
    format: ExportFormat = ExportFormat.XLSX
    include_styles: bool = True
    include_hidden: bool = True
    sheet_name: Optional[str] = None
    locale: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.format = resolve_format(self.format)
        for name in ("include_styles", "include_hidden"):
            if not isinstance(getattr(self, name), bool):
                raise ExportOptionError(
                    f"Export option '{name}' must be a boolean, got {getattr(self, name)!r}",
                    {"option": name},
                )
        for name in ("filename", "sheet_name", "locale"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise ExportOptionError(f"Export option '{name}' must be a string, got {value!r}", {"option": name})

    @property
    def resolved_filename(self) -> str:
        return self.filename or f"workbook.{self.format.value}"

    @classmethod
    def from_mapping(cls, section: Mapping[str, Any], base: Optional["ExportOptions"] = None) -> "ExportOptions":
        """Build options from a mapping using camelCase or snake_case keys."""

        known = {info.name for info in fields(cls)} - {"extra"}
        parsed: Dict[str, Any] = {}
        extra: Dict[str, Any] = dict(base.extra) if base is not None else {}
        for key, value in section.items():
            name = _snake_case(str(key))
            if name in known:
                parsed[name] = value
            elif name == "extra" and isinstance(value, Mapping):
                extra.update(value)
            else:
                extra[str(key)] = value
        if base is not None:
            return replace(base, extra=extra, **parsed)
        return cls(extra=extra, **parsed)

    @classmethod
    def coerce(
        cls,
        value: Union["ExportOptions", Mapping[str, Any], None],
        base: Optional["ExportOptions"] = None,
    ) -> "ExportOptions":
        if value is None:
            return base if base is not None else cls()
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            return cls.from_mapping(value, base=base)
        raise ExportOptionError(f"Export options must be a mapping, got {type(value).__name__}")


@dataclass
class LayoutConfig:
    """Presentation defaults used by the layout engine."""

    header_colors: List[str] = field(default_factory=lambda: ["#e6f2ff", "#f0f0f0", "#f9f9f9", "#ffffff"])
    header_font_size: float = 12
    label_fill: str = "#e6e6e6"
    summary_fill: str = "#f5f5f5"
    indicator_color: str = "#666666"
    collapsed_indicator: str = "▶"
    expanded_indicator: str = "▼"
    key_separator: str = " › "

    def __post_init__(self) -> None:
        if not self.header_colors:
            raise ValueError("layout.header_colors must contain at least one colour")

    def header_color(self, level: int) -> str:
        return self.header_colors[min(max(level, 0), len(self.header_colors) - 1)]


@dataclass
class GridbookConfig:
    export: ExportOptions = field(default_factory=ExportOptions)
    layout: LayoutConfig = field(default_factory=LayoutConfig)


def load_config(path: Union[str, Path]) -> GridbookConfig:
    """Load :class:`GridbookConfig` from a YAML file."""

    config_path = Path(path).expanduser()
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file '{config_path}' does not exist")

    with config_path.open("r", encoding="utf-8") as stream:
        raw_config = yaml.safe_load(stream) or {}

    if not isinstance(raw_config, Mapping):
        raise ValueError("Configuration root must be a mapping")

    export_section = raw_config.get("export", {}) or {}
    layout_section = raw_config.get("layout", {}) or {}
    if not isinstance(export_section, Mapping):
        raise ValueError("The 'export' section must be a mapping")
    if not isinstance(layout_section, Mapping):
        raise ValueError("The 'layout' section must be a mapping")

    return GridbookConfig(
        export=ExportOptions.from_mapping(export_section),
        layout=_parse_layout_section(layout_section),
    )


def _parse_layout_section(section: Mapping[str, Any]) -> LayoutConfig:
    known = {info.name for info in fields(LayoutConfig)}
    parsed: Dict[str, Any] = {}
    for key, value in section.items():
        name = _snake_case(str(key))
        if name not in known:
            raise ValueError(f"Unknown layout setting '{key}'")
        parsed[name] = list(value) if name == "header_colors" else value
    return LayoutConfig(**parsed)


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


__all__ = [
    "ExportFormat",
    "ExportOptions",
    "GridbookConfig",
    "LayoutConfig",
    "load_config",
    "resolve_format",
]

"""Cell styles and the builder that resolves them."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional

BORDER_STYLES = {"thin", "medium", "thick", "dashed", "dotted", "double", "hair"}
HORIZONTAL_ALIGNMENTS = {"left", "center", "right"}
VERTICAL_ALIGNMENTS = {"top", "middle", "bottom"}
BORDER_SIDES = ("top", "right", "bottom", "left")


@dataclass(frozen=True)
class BorderSide:
    """Line style and colour of one cell edge."""

    style: str = "thin"
    color: Optional[str] = None

    def __post_init__(self) -> None:
        if self.style not in BORDER_STYLES:
            raise ValueError(f"Unknown border style '{self.style}'")

    def to_data(self) -> Dict[str, Any]:
        return {"style": self.style, "color": self.color}

    @classmethod
    def from_data(cls, data: Optional[Mapping[str, Any]]) -> Optional["BorderSide"]:
        if not data:
            return None
        return cls(style=data.get("style", "thin"), color=data.get("color"))


@dataclass(frozen=True)
class Border:
    top: Optional[BorderSide] = None
    right: Optional[BorderSide] = None
    bottom: Optional[BorderSide] = None
    left: Optional[BorderSide] = None

    @classmethod
    def all(cls, style: str = "thin", color: Optional[str] = None) -> "Border":
        side = BorderSide(style, color)
        return cls(top=side, right=side, bottom=side, left=side)

    def merge(self, other: Optional["Border"]) -> "Border":
        if other is None:
            return self
        return Border(
            **{
                name: getattr(other, name) if getattr(other, name) is not None else getattr(self, name)
                for name in BORDER_SIDES
            }
        )

    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in BORDER_SIDES)

    def to_data(self) -> Dict[str, Any]:
        return {
            name: getattr(self, name).to_data()
            for name in BORDER_SIDES
            if getattr(self, name) is not None
        }

    @classmethod
    def from_data(cls, data: Optional[Mapping[str, Any]]) -> Optional["Border"]:
        if not data:
            return None
        return cls(**{name: BorderSide.from_data(data.get(name)) for name in BORDER_SIDES})


@dataclass(frozen=True)
class Style:
    """Canonical, immutable cell style.

    ``None`` means "not set"; merging lets later non-``None`` fields win.
    """

    bold: Optional[bool] = None
    italic: Optional[bool] = None
    underline: Optional[bool] = None
    font_family: Optional[str] = None
    font_size: Optional[float] = None
    color: Optional[str] = None
    background_color: Optional[str] = None
    border: Optional[Border] = None
    alignment: Optional[str] = None
    vertical_alignment: Optional[str] = None
    wrap_text: Optional[bool] = None
    number_format: Optional[str] = None

    def merge(self, other: Optional["Style"]) -> "Style":
        if other is None:
            return self
        updates: Dict[str, Any] = {}
        for info in fields(self):
            value = getattr(other, info.name)
            if value is None:
                continue
            if info.name == "border" and self.border is not None:
                value = self.border.merge(value)
            updates[info.name] = value
        return replace(self, **updates)

    def is_empty(self) -> bool:
        return all(getattr(self, info.name) is None for info in fields(self))

    def to_data(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for info in fields(self):
            value = getattr(self, info.name)
            if value is None:
                continue
            data[info.name] = value.to_data() if isinstance(value, Border) else value
        return data

    @classmethod
    def from_data(cls, data: Optional[Mapping[str, Any]]) -> Optional["Style"]:
        if data is None:
            return None
        known = {info.name for info in fields(cls)}
        kwargs = {key: value for key, value in data.items() if key in known}
        if "border" in kwargs:
            kwargs["border"] = Border.from_data(kwargs["border"])
        return cls(**kwargs)


def merge_styles(*styles: Optional[Style]) -> Optional[Style]:
    """Overlay ``styles`` left to right, ignoring ``None`` entries."""

    result: Optional[Style] = None
    for style in styles:
        if style is None:
            continue
        result = style if result is None else result.merge(style)
    return result


class StyleBuilder:
    """Fluent builder producing :class:`Style` values.

    Each call touches exactly one field. :meth:`build` snapshots the current
    state into a frozen :class:`Style`, so styles built earlier are never
    affected by later calls.
    """

    def __init__(self, base: Optional[Style] = None) -> None:
        self._values: Dict[str, Any] = {}
        self._borders: Dict[str, Optional[BorderSide]] = {}
        if base is not None:
            for info in fields(base):
                value = getattr(base, info.name)
                if value is None:
                    continue
                if info.name == "border":
                    self._borders.update({name: getattr(value, name) for name in BORDER_SIDES})
                else:
                    self._values[info.name] = value

    @classmethod
    def create(cls, base: Optional[Style] = None) -> "StyleBuilder":
        return cls(base)

    def bold(self, bold: bool = True) -> "StyleBuilder":
        self._values["bold"] = bold
        return self

    def italic(self, italic: bool = True) -> "StyleBuilder":
        self._values["italic"] = italic
        return self

    def underline(self, underline: bool = True) -> "StyleBuilder":
        self._values["underline"] = underline
        return self

    def font_size(self, size: float) -> "StyleBuilder":
        if size <= 0:
            raise ValueError("Font size must be positive")
        self._values["font_size"] = size
        return self

    def font_family(self, family: str) -> "StyleBuilder":
        self._values["font_family"] = family
        return self

    def color(self, color: str) -> "StyleBuilder":
        self._values["color"] = color
        return self

    def background_color(self, color: str) -> "StyleBuilder":
        self._values["background_color"] = color
        return self

    fill = background_color

    def align(self, alignment: str) -> "StyleBuilder":
        if alignment not in HORIZONTAL_ALIGNMENTS:
            raise ValueError(f"Unknown horizontal alignment '{alignment}'")
        self._values["alignment"] = alignment
        return self

    def vertical_align(self, alignment: str) -> "StyleBuilder":
        if alignment not in VERTICAL_ALIGNMENTS:
            raise ValueError(f"Unknown vertical alignment '{alignment}'")
        self._values["vertical_alignment"] = alignment
        return self

    def wrap_text(self, wrap: bool = True) -> "StyleBuilder":
        self._values["wrap_text"] = wrap
        return self

    def number_format(self, fmt: str) -> "StyleBuilder":
        self._values["number_format"] = fmt
        return self

    def border(self, border: Border) -> "StyleBuilder":
        self._borders = {name: getattr(border, name) for name in BORDER_SIDES}
        return self

    def border_top(self, style: str = "thin", color: Optional[str] = None) -> "StyleBuilder":
        self._borders["top"] = BorderSide(style, color)
        return self

    def border_right(self, style: str = "thin", color: Optional[str] = None) -> "StyleBuilder":
        self._borders["right"] = BorderSide(style, color)
        return self

    def border_bottom(self, style: str = "thin", color: Optional[str] = None) -> "StyleBuilder":
        self._borders["bottom"] = BorderSide(style, color)
        return self

    def border_left(self, style: str = "thin", color: Optional[str] = None) -> "StyleBuilder":
        self._borders["left"] = BorderSide(style, color)
        return self

    def border_all(self, style: str = "thin", color: Optional[str] = None) -> "StyleBuilder":
        side = BorderSide(style, color)
        self._borders = {name: side for name in BORDER_SIDES}
        return self

    def build(self) -> Style:
        border = None
        if any(side is not None for side in self._borders.values()):
            border = Border(**{name: self._borders.get(name) for name in BORDER_SIDES})
        return Style(border=border, **self._values)


__all__ = [
    "BORDER_STYLES",
    "Border",
    "BorderSide",
    "Style",
    "StyleBuilder",
    "merge_styles",
]

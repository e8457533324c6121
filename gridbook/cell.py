"""Single cell of a worksheet."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .styles import Style
from .values import CellType, classify_value, display_value


@dataclass(init=False)
class Cell:
    """A value tagged with its :class:`CellType` plus an optional style."""

    value: Any = None
    style: Optional[Style] = None
    formula: Optional[str] = None
    type: CellType = CellType.STRING

    def __init__(self, value: Any = None, style: Optional[Style] = None) -> None:
        self.value = None
        self.style = style
        self.formula = None
        self.type = CellType.STRING
        if value is not None:
            self.set_value(value)

    def set_value(self, value: Any) -> "Cell":
        self.value = value
        self.formula = None
        self.type = classify_value(value)
        return self

    def set_style(self, style: Optional[Style]) -> "Cell":
        self.style = style
        return self

    def set_formula(self, formula: str) -> "Cell":
        text = str(formula)
        self.formula = text[1:] if text.startswith("=") else text
        self.type = CellType.FORMULA
        return self

    def set_type(self, cell_type: CellType) -> "Cell":
        self.type = CellType(cell_type)
        if self.type is CellType.FORMULA:
            self.formula = self.formula or ""
        else:
            self.formula = None
        return self

    @property
    def is_blank(self) -> bool:
        return self.value is None and self.type is not CellType.FORMULA

    def formatted_value(self) -> str:
        return display_value(self.value, self.type, self.formula)

    def to_data(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "type": self.type.value,
            "formula": self.formula,
            "style": self.style.to_data() if self.style is not None else None,
        }

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "Cell":
        cell = cls()
        cell.value = data.get("value")
        cell.style = Style.from_data(data.get("style"))
        if data.get("type") is None:
            cell.type = classify_value(cell.value)
        else:
            cell.type = CellType.coerce(data["type"])
        if cell.type is CellType.FORMULA:
            cell.formula = data.get("formula") or ""
        return cell


__all__ = ["Cell"]

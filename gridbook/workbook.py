"""Workbook: the ordered collection of sheets plus document properties."""

from __future__ import annotations

import logging
from copy import deepcopy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Dict, List, Mapping, Optional, Union

from .worksheet import Worksheet

if TYPE_CHECKING:  # pragma: no cover
    from .config import ExportOptions
    from .export import ExportResult

logger = logging.getLogger(__name__)


@dataclass
class Workbook:
    """Container for worksheets and document properties.

    Sheet names are not required to be unique here; the spreadsheet writer
    de-duplicates them when building the package. A workbook is meant to be
    built from a single call site; concurrent mutation is not guarded.
    """

    sheets: List[Worksheet] = field(default_factory=list)
    properties: Dict[str, Any] = field(default_factory=dict)

    def add_sheet(self, sheet: Worksheet) -> "Workbook":
        self.sheets.append(sheet)
        return self

    def create_sheet(self, name: str) -> Worksheet:
        sheet = Worksheet(name)
        self.sheets.append(sheet)
        return sheet

    def get_sheet(self, index: int) -> Optional[Worksheet]:
        if 0 <= index < len(self.sheets):
            return self.sheets[index]
        return None

    def get_sheet_by_name(self, name: str) -> Optional[Worksheet]:
        return next((sheet for sheet in self.sheets if sheet.name == name), None)

    def remove_sheet(self, index: int) -> "Workbook":
        if 0 <= index < len(self.sheets):
            removed = self.sheets.pop(index)
            logger.debug("Removed sheet '%s'", removed.name)
        else:
            logger.debug("remove_sheet(%s) ignored; workbook has %s sheets", index, len(self.sheets))
        return self

    @property
    def sheet_names(self) -> List[str]:
        return [sheet.name for sheet in self.sheets]

    def set_property(self, key: str, value: Any) -> "Workbook":
        self.properties[key] = value
        return self

    def to_data(self) -> Dict[str, Any]:
        return {
            "sheets": [sheet.to_data() for sheet in self.sheets],
            "properties": deepcopy(self.properties),
        }

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "Workbook":
        return cls(
            sheets=[Worksheet.from_data(item) for item in data.get("sheets", [])],
            properties=deepcopy(dict(data.get("properties") or {})),
        )

    def export(
        self, options: Union["ExportOptions", Mapping[str, Any], None] = None
    ) -> Awaitable["ExportResult"]:
        """Serialise the workbook; see :func:`gridbook.export.export_workbook`."""

        from .export import export_workbook

        return export_workbook(self, options)


__all__ = ["Workbook"]

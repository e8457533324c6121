"""Export dispatcher: picks a writer for the requested format and runs it."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Dict, Mapping, Optional, Union

from .config import ExportFormat, ExportOptions, GridbookConfig, resolve_format
from .workbook import Workbook
from .writers import CsvWriter, JsonWriter, Writer, XlsxWriter

logger = logging.getLogger(__name__)

WRITERS: Dict[ExportFormat, Writer] = {
    ExportFormat.XLSX: XlsxWriter(),
    ExportFormat.CSV: CsvWriter(),
    ExportFormat.JSON: JsonWriter(),
}


@dataclass(frozen=True)
class ExportResult:
    data: bytes
    media_type: str
    filename: str
    format: ExportFormat

    @property
    def size(self) -> int:
        return len(self.data)


def get_writer(fmt: Any) -> Writer:
    """Return the writer for ``fmt``; unknown formats raise ``UnsupportedFormatError``."""

    return WRITERS[resolve_format(fmt)]


def export_workbook(
    workbook: Workbook, options: Union[ExportOptions, Mapping[str, Any], None] = None
) -> Awaitable[ExportResult]:
    """Validate ``options`` now and return an awaitable producing the bytes.

    Unsupported formats and malformed options raise immediately, before any
    asynchronous work is scheduled. Awaiting the result either yields the
    complete output or raises; no partial output is ever returned.
    """

    resolved = ExportOptions.coerce(options)
    writer = get_writer(resolved.format)
    writer.validate(workbook, resolved)
    return _run(writer, workbook, resolved)


async def _run(writer: Writer, workbook: Workbook, options: ExportOptions) -> ExportResult:
    logger.info("Exporting %s sheet(s) as %s", len(workbook.sheets), options.format.value)
    data = await writer.write(workbook, options)
    logger.info("Export produced %s bytes (%s)", len(data), options.resolved_filename)
    return ExportResult(
        data=data,
        media_type=writer.media_type,
        filename=options.resolved_filename,
        format=options.format,
    )


def export_with_config(
    workbook: Workbook, config: GridbookConfig, overrides: Optional[Mapping[str, Any]] = None
) -> Awaitable[ExportResult]:
    """Export using the defaults from a :class:`~gridbook.config.GridbookConfig`."""

    return export_workbook(workbook, ExportOptions.coerce(overrides, base=config.export))


__all__ = ["ExportResult", "WRITERS", "export_with_config", "export_workbook", "get_writer"]

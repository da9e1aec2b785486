"""Record export to CSV, Excel-compatible CSV and JSON.

Rendering functions are pure transforms of a record list. ``RecordExporter``
adds the file handling: fixed file names under a configurable output
directory.
"""

import csv
import json
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

import pandas as pd

from ..exceptions import ExportError
from ..models import ExportFormat, Record

logger = logging.getLogger(__name__)

CSV_HEADERS = ["Name", "Phone", "Website", "Address", "Rating", "Reviews", "URL"]
CSV_FIELDS = ["name", "phone", "website", "address", "rating", "review_count", "source_url"]

UTF8_BOM = "\ufeff"

FILENAMES = {
    ExportFormat.CSV: "google-maps-data.csv",
    ExportFormat.EXCEL: "google-maps-data-excel.csv",
    ExportFormat.JSON: "google-maps-data.json",
}


def to_csv(records: Sequence[Record]) -> str:
    """Render records as CSV with every field quoted.

    Args:
        records: Records to render.

    Returns:
        Header row plus one row per record, rows joined by ``\\n``.
    """
    rows = [[getattr(record, field) or "" for field in CSV_FIELDS] for record in records]
    frame = pd.DataFrame(rows, columns=CSV_HEADERS, dtype=str)
    content = frame.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
    return content.rstrip("\n")


def to_excel_csv(records: Sequence[Record]) -> str:
    """Render records as CSV prefixed with a UTF-8 byte-order mark."""
    return UTF8_BOM + to_csv(records)


def to_json(records: Sequence[Record]) -> str:
    """Render the full records as indented JSON."""
    return json.dumps(
        [record.model_dump(mode="json") for record in records], indent=2, ensure_ascii=False
    )


RENDERERS = {
    ExportFormat.CSV: to_csv,
    ExportFormat.EXCEL: to_excel_csv,
    ExportFormat.JSON: to_json,
}


class RecordExporter:
    """Writes rendered records to the output directory.

    Attributes:
        output_dir: Directory export files are written to.
    """

    def __init__(self, output_dir: str | Path = "data") -> None:
        self.output_dir = Path(output_dir)

    def render(self, records: Sequence[Record], fmt: ExportFormat) -> str:
        """Render records in the requested format."""
        return RENDERERS[ExportFormat(fmt)](records)

    def write(self, records: Sequence[Record], fmt: ExportFormat) -> Path:
        """Render records and write them to the format's file.

        Args:
            records: Records to export, must not be empty.
            fmt: Export format.

        Returns:
            Path of the written file.

        Raises:
            ExportError: If there is nothing to export or writing fails.
        """
        if not records:
            raise ExportError("No records to export")

        fmt = ExportFormat(fmt)
        path = self.output_dir / FILENAMES[fmt]
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.render(records, fmt), encoding="utf-8")
        except OSError as e:
            raise ExportError(f"Failed to write {path}: {e}", {"format": fmt.value}) from e

        logger.info(f"Exported {len(records)} records as {fmt.value}: {path}")
        return path

    def write_all(self, records: Sequence[Record], formats: Iterable[ExportFormat]) -> list[Path]:
        """Write records in each of the given formats."""
        return [self.write(records, fmt) for fmt in formats]

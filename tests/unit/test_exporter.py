"""Tests for record rendering and export files."""

import csv
import io
import json

import pytest

from maps_scraper.exceptions import ExportError
from maps_scraper.models import ExportFormat
from maps_scraper.services.exporter import (
    CSV_HEADERS,
    RecordExporter,
    to_csv,
    to_excel_csv,
    to_json,
)


def test_csv_header_and_quoting(sample_records) -> None:
    lines = to_csv(sample_records).split("\n")

    assert lines[0] == '"Name","Phone","Website","Address","Rating","Reviews","URL"'
    assert lines[2] == (
        '"The ""Quoted"" Diner, Inc.","","","","","",'
        '"https://www.google.com/maps/place/Quoted+Diner"'
    )
    assert not to_csv(sample_records).endswith("\n")


def test_csv_round_trip(sample_records) -> None:
    rows = list(csv.reader(io.StringIO(to_csv(sample_records))))

    assert rows[0] == CSV_HEADERS
    assert rows[1] == [
        "Blue Door Cafe",
        "+1 415-555-0101",
        "https://bluedoor.example.com/",
        "Market St, San Francisco",
        "4.6",
        "1204",
        "https://www.google.com/maps/place/Blue+Door+Cafe?hl=en",
    ]
    assert rows[2][0] == 'The "Quoted" Diner, Inc.'
    assert len(rows) == len(sample_records) + 1


def test_csv_without_records_is_header_only() -> None:
    assert to_csv([]) == '"Name","Phone","Website","Address","Rating","Reviews","URL"'


def test_excel_variant_has_byte_order_mark(sample_records) -> None:
    content = to_excel_csv(sample_records)

    assert content.startswith("\ufeff")
    assert content[1:] == to_csv(sample_records)


def test_json_keeps_full_records(sample_records) -> None:
    content = to_json(sample_records)
    data = json.loads(content)

    assert content.startswith('[\n  {\n    "name"')
    assert data[0]["name"] == "Blue Door Cafe"
    assert data[0]["review_count"] == "1204"
    assert data[0]["provenance"] == {"name": "heading", "phone": "phone_control"}
    assert data[0]["captured_at"].startswith("2024-05-01T12:00:00")
    assert data[1]["phone"] is None


class TestRecordExporter:
    @pytest.mark.parametrize(
        "fmt, filename",
        [
            (ExportFormat.CSV, "google-maps-data.csv"),
            (ExportFormat.EXCEL, "google-maps-data-excel.csv"),
            (ExportFormat.JSON, "google-maps-data.json"),
        ],
    )
    def test_write_uses_fixed_file_names(self, exporter, sample_records, fmt, filename) -> None:
        path = exporter.write(sample_records, fmt)

        assert path.name == filename
        assert path.parent == exporter.output_dir
        assert path.read_text(encoding="utf-8") == exporter.render(sample_records, fmt)

    def test_write_without_records_fails(self, exporter) -> None:
        with pytest.raises(ExportError):
            exporter.write([], ExportFormat.CSV)

        assert not exporter.output_dir.exists()

    def test_write_all(self, exporter, sample_records) -> None:
        paths = exporter.write_all(sample_records, [ExportFormat.CSV, ExportFormat.JSON])

        assert [p.name for p in paths] == ["google-maps-data.csv", "google-maps-data.json"]

    def test_write_failure_is_export_error(self, tmp_path, sample_records) -> None:
        blocker = tmp_path / "occupied"
        blocker.write_text("not a directory")

        with pytest.raises(ExportError):
            RecordExporter(blocker).write(sample_records, ExportFormat.CSV)

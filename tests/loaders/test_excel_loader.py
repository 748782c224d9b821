import logging
from datetime import datetime

import openpyxl
import pytest

from rowdriven.config import ACTUAL_RESULT, TEST_STATUS
from rowdriven.exceptions import SourceReadError, SourceWriteError
from rowdriven.loaders.excel import ExcelLoader


class TestExcelLoad:
    def test_load_blocks(self, lookup_workbook):
        data = ExcelLoader().load([lookup_workbook])

        assert data == {
            "lookup": [{"id": "4", "kind": "journal"}, {"id": "1", "kind": "ebook"}],
            "search": [{"text": "batman"}],
        }

    def test_single_path(self, lookup_workbook):
        assert "lookup" in ExcelLoader().load(lookup_workbook)

    def test_cell_types(self, make_workbook):
        path = make_workbook(
            [
                ["types", "count", "ratio", "flag", "when", "label"],
                [None, 4.0, 2.5, True, datetime(2020, 1, 2), "text"],
            ]
        )
        row = ExcelLoader().load([path])["types"][0]

        assert row["count"] == "4"
        assert row["ratio"] == 2.5
        assert row["flag"] is True
        assert row["when"] == datetime(2020, 1, 2)
        assert row["label"] == "text"

    def test_key_row_without_data(self, make_workbook):
        path = make_workbook([["first", "a"], ["second", "b"], [None, "x"]])
        data = ExcelLoader().load([path])

        assert data["first"] == []
        assert data["second"] == [{"b": "x"}]

    def test_missing_source_is_skipped(self, lookup_workbook, tmp_path, caplog):
        missing = tmp_path / "missing.xlsx"
        with caplog.at_level(logging.ERROR, logger="rowdriven"):
            data = ExcelLoader().load([lookup_workbook, missing])

        assert set(data) == {"lookup", "search"}
        assert "missing.xlsx" in caplog.text

    def test_unreadable_source_is_skipped(self, lookup_workbook, tmp_path):
        broken = tmp_path / "broken.xlsx"
        broken.write_bytes(b"not a zip archive")

        data = ExcelLoader().load([broken, lookup_workbook])
        assert "lookup" in data

    def test_load_source_raises_for_unreadable(self, tmp_path):
        broken = tmp_path / "broken.xlsx"
        broken.write_bytes(b"not a zip archive")

        with pytest.raises(SourceReadError):
            ExcelLoader().load_source(broken)

    def test_later_source_overrides_test_case(self, make_workbook):
        first = make_workbook([["lookup", "id"], [None, "first"]], name="a.xlsx")
        second = make_workbook([["lookup", "id"], [None, "second"]], name="b.xlsx")

        data = ExcelLoader().load([first, second])
        assert data["lookup"] == [{"id": "second"}]


class TestExcelWrite:
    def test_results_appended_after_data_columns(self, lookup_workbook):
        results = {
            "lookup": [
                {"id": "4", "kind": "journal", ACTUAL_RESULT: "3 items", TEST_STATUS: "PASSED"},
                {"id": "1", "kind": "ebook", ACTUAL_RESULT: "0 items"},
            ]
        }
        found = ExcelLoader().write(lookup_workbook, results)
        assert found == 1

        sheet = openpyxl.load_workbook(lookup_workbook).worksheets[0]
        assert sheet.cell(row=1, column=4).value == ACTUAL_RESULT
        assert sheet.cell(row=1, column=5).value == TEST_STATUS
        assert sheet.cell(row=2, column=4).value == "3 items"
        assert sheet.cell(row=2, column=5).value == "PASSED"
        assert sheet.cell(row=3, column=4).value == "0 items"
        assert sheet.cell(row=3, column=5).value is None
        # existing cells untouched
        assert sheet.cell(row=2, column=2).value == 4
        assert sheet.cell(row=2, column=3).value == "journal"
        assert sheet.cell(row=4, column=1).value == "search"

    def test_round_trip_keeps_existing_values(self, lookup_workbook):
        loader = ExcelLoader()
        before = loader.load([lookup_workbook])
        results = {"search": [dict(before["search"][0], **{ACTUAL_RESULT: "found"})]}

        loader.write(lookup_workbook, results)
        after = loader.load([lookup_workbook])

        assert after["lookup"] == before["lookup"]
        assert after["search"][0]["text"] == "batman"
        sheet = openpyxl.load_workbook(lookup_workbook).worksheets[0]
        assert sheet.cell(row=5, column=3).value == "found"

    def test_unknown_test_case_leaves_file_alone(self, lookup_workbook):
        mtime = lookup_workbook.stat().st_mtime_ns
        found = ExcelLoader().write(lookup_workbook, {"other": [{ACTUAL_RESULT: "x"}]})

        assert found == 0
        assert lookup_workbook.stat().st_mtime_ns == mtime

    def test_missing_workbook(self, tmp_path):
        with pytest.raises(SourceWriteError):
            ExcelLoader().write(tmp_path / "missing.xlsx", {"lookup": [{ACTUAL_RESULT: "x"}]})

import logging
from dataclasses import replace
from unittest.mock import Mock

import openpyxl

from rowdriven.config import ACTUAL_RESULT, TEST_STATUS
from rowdriven.context import DataContext, DataSource
from rowdriven.decorators import data
from rowdriven.exceptions import SourceWriteError
from rowdriven.loaders.base import Loader
from rowdriven.loaders.excel import ExcelLoader
from rowdriven.model import TestCaseReport
from rowdriven.runner.execute import run_test_case
from rowdriven.runner.writeback import apply_results, write_back


class TestApplyResults:
    def test_scenario_lookup_three_items(self, lookup_workbook):
        results = {"lookup": [{"id": "4", "kind": "journal", ACTUAL_RESULT: "3 items"}]}

        assert apply_results(ExcelLoader(), lookup_workbook, results) == 1

        sheet = openpyxl.load_workbook(lookup_workbook).worksheets[0]
        assert sheet.cell(row=1, column=1).value == "lookup"
        assert sheet.cell(row=2, column=4).value == "3 items"

    def test_rows_without_actual_result_are_not_written(self):
        loader = Mock(spec=Loader)
        loader.supports_write = True

        written = apply_results(loader, "data.xlsx", {"lookup": [{"id": "4", TEST_STATUS: "SKIPPED"}]})

        assert written == 0
        loader.write.assert_not_called()

    def test_failure_for_one_test_case_does_not_stop_others(self, caplog):
        loader = Mock(spec=Loader)
        loader.supports_write = True
        loader.write.side_effect = [SourceWriteError("locked"), 1]
        results = {
            "first": [{ACTUAL_RESULT: "a"}],
            "second": [{ACTUAL_RESULT: "b"}],
        }

        with caplog.at_level(logging.ERROR, logger="rowdriven"):
            written = apply_results(loader, "data.xlsx", results)

        assert written == 1
        assert loader.write.call_count == 2
        loader.write.assert_called_with("data.xlsx", {"second": [{ACTUAL_RESULT: "b"}]})
        assert "locked" in caplog.text

    def test_loader_without_write_support(self, caplog):
        loader = Mock(spec=Loader)
        loader.supports_write = False

        with caplog.at_level(logging.WARNING, logger="rowdriven"):
            assert apply_results(loader, "db", {"lookup": [{ACTUAL_RESULT: "a"}]}) == 0

        loader.write.assert_not_called()
        assert "cannot write results" in caplog.text

    def test_missing_file_is_logged(self, tmp_path, caplog):
        with caplog.at_level(logging.ERROR, logger="rowdriven"):
            written = apply_results(ExcelLoader(), tmp_path / "gone.xlsx", {"lookup": [{ACTUAL_RESULT: "a"}]})
        assert written == 0
        assert "gone.xlsx" in caplog.text


class TestWriteBack:
    def test_last_source_defining_test_case_wins(self, make_workbook):
        first = make_workbook([["lookup", "id"], [None, "1"]], name="first.xlsx")
        second = make_workbook([["lookup", "id"], [None, "2"]], name="second.xlsx")
        source = DataSource([first, second], write_results=True)
        context = DataContext(data_set={}, test_case="lookup", source=source, loader=ExcelLoader())
        report = TestCaseReport(test_case="lookup", result_rows=[{"id": "2", ACTUAL_RESULT: "done"}])

        assert write_back(context, report) is True

        assert openpyxl.load_workbook(second).worksheets[0].cell(row=2, column=3).value == "done"
        assert openpyxl.load_workbook(first).worksheets[0].cell(row=2, column=3).value is None

    def test_without_source(self):
        context = DataContext(data_set={}, test_case="lookup")
        assert write_back(context, TestCaseReport(test_case="lookup")) is False

    def test_run_with_blank_row_inside_block(self, make_workbook):
        path = make_workbook(
            [
                ["lookup", "id", "kind"],
                [None, 4, "journal"],
                [None, None, None],
                [None, 1, "ebook"],
            ]
        )
        slots = [replace(data("kind"), position=0)]

        run_test_case("lookup", lambda kind: f"got {kind}", slots, source=DataSource(path, write_results=True))

        sheet = openpyxl.load_workbook(path).worksheets[0]
        assert sheet.cell(row=2, column=4).value == "got journal"
        assert sheet.cell(row=3, column=4).value is None
        assert sheet.cell(row=4, column=4).value == "got ebook"
        assert sheet.cell(row=4, column=5).value == "PASSED"

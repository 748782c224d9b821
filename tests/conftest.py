import pytest
import openpyxl

from rowdriven.context import DataContext
from rowdriven.model import ParameterSlot, SlotKind


LOOKUP_SHEET = [
    ["lookup", "id", "kind"],
    [None, 4, "journal"],
    [None, 1, "ebook"],
    ["search", "text"],
    [None, "batman"],
]


@pytest.fixture
def make_workbook(tmp_path):
    """Factory writing rows to the first worksheet of a fresh .xlsx file."""

    def _make(rows, name="data.xlsx"):
        path = tmp_path / name
        workbook = openpyxl.Workbook()
        sheet = workbook.active
        for row in rows:
            sheet.append(list(row))
        workbook.save(path)
        workbook.close()
        return path

    return _make


@pytest.fixture
def make_csv(tmp_path):
    """Factory writing delimited text to a file."""

    def _make(text, name="data.csv"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _make


@pytest.fixture
def lookup_workbook(make_workbook):
    return make_workbook(LOOKUP_SHEET, name="lookup.xlsx")


@pytest.fixture
def lookup_context():
    """Context with the two-row 'lookup' block used across tests."""
    data_set = {
        "lookup": [
            {"id": 4, "kind": "journal"},
            {"id": 1, "kind": "ebook"},
        ]
    }
    return DataContext(data_set=data_set, test_case="lookup")


@pytest.fixture
def id_kind_slots():
    return [
        ParameterSlot(position=0, name="id", kind=SlotKind.DATA),
        ParameterSlot(position=1, name="kind", kind=SlotKind.DATA),
    ]

#!/usr/bin/env python3
"""Basic usage example for rowdriven.

This example demonstrates how to:
1. Author a workbook with two test case blocks
2. Declare data-driven test cases
3. Run them and write actual results back into the workbook
4. Summarize the persisted reports
"""

import tempfile
from pathlib import Path

import openpyxl

from rowdriven import DataSource, assume, data_driven
from rowdriven.exceptions import ParameterizedAssertionError
from rowdriven.runner.aggregate import collect

CATALOGUE = {
    (4, "journal"): ["batman", "superman"],
    (2, "ebook"): ["spiderman"],
    (1, "ebook"): [],
}


def write_workbook(path: Path) -> None:
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    for row in [
        ["getItems", "libraryId", "itemType"],
        [None, 4, "journal"],
        [None, 2, "ebook"],
        [None, 1, "ebook"],
        ["findTitle", "title"],
        [None, "batman"],
        [None, "potter"],
    ]:
        sheet.append(row)
    workbook.save(path)


def main():
    """Run basic rowdriven example."""

    work_dir = Path(tempfile.mkdtemp(prefix="rowdriven-"))
    workbook_path = work_dir / "items.xlsx"
    out_dir = work_dir / "runs"

    # 1. Test data
    write_workbook(workbook_path)
    source = DataSource(workbook_path, write_results=True)
    print(f"Test data written to {workbook_path}")

    # 2. Declarations: parameter names are column names
    @data_driven(source, test_case="getItems", out_dir=str(out_dir))
    def get_items(libraryId: int, itemType):
        items = CATALOGUE[(libraryId, itemType)]
        assume(items, f"library {libraryId} has no {itemType} items")
        return len(items)

    @data_driven(source, test_case="findTitle", out_dir=str(out_dir))
    def find_title(title):
        titles = [t for items in CATALOGUE.values() for t in items]
        assert title in titles, f"{title} is not in the catalogue"
        return title

    # 3. Run; results land next to the data of each block
    report = get_items.rowdriven.run()
    print(f"getItems: {report.successes} passed, {len(report.violations)} skipped")

    try:
        find_title.rowdriven.run()
    except ParameterizedAssertionError as e:
        print(f"findTitle failed: {e}")

    # 4. Summary of persisted reports
    entries = collect(str(out_dir))
    for entry in entries:
        status = "passed" if entry["passed"] else "failed"
        print(f"  {entry['test_case']}: {status}")

    sheet = openpyxl.load_workbook(workbook_path).worksheets[0]
    print("Workbook after the run:")
    for row in sheet.iter_rows(values_only=True):
        print("  " + " | ".join("" if v is None else str(v) for v in row))

    return entries


if __name__ == "__main__":
    main()

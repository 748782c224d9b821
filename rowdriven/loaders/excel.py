"""Spreadsheet (.xlsx) adapter built on openpyxl."""

import zipfile
from pathlib import Path

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from rowdriven.exceptions import SourceReadError, SourceWriteError
from rowdriven.loaders.base import Loader, Location, locate_test_case_row, parse_blocks, result_cells
from rowdriven.loaders.normalize import normalize_cell
from rowdriven.logging_config import get_logger
from rowdriven.model import DataSet

logger = get_logger("loaders")


class ExcelLoader(Loader):
    """Loads test data from the first worksheet of an Excel workbook.

    Example layout::

        testGetItems  libraryId  itemType  searchText
        <blank>       4          journal   batman
        <blank>       2          ebook     spiderman

    Results are written back into the same workbook, next to the data of
    the matching test case.
    """

    kind = "excel"
    supports_write = True

    def load_source(self, path: Location) -> DataSet:
        path = Path(path)
        workbook = _open(path, data_only=True)
        try:
            sheet = workbook.worksheets[0]
            rows = (
                [normalize_cell(cell) for cell in row]
                for row in sheet.iter_rows()
            )
            return parse_blocks(rows, source=str(path))
        finally:
            workbook.close()

    def write(self, location: Location, data: DataSet) -> int:
        path = Path(location)
        try:
            workbook = _open(path, data_only=False)
        except (FileNotFoundError, SourceReadError) as e:
            raise SourceWriteError(f"Cannot open {path} for writing results: {e}") from e

        sheet = workbook.worksheets[0]
        written = 0
        found = 0
        for test_case, rows in data.items():
            grid = [list(values) for values in sheet.iter_rows(values_only=True)]
            header_index = locate_test_case_row((cells[0] if cells else None for cells in grid), test_case)
            if header_index is None:
                logger.debug(
                    f"Test case '{test_case}' not found in {path}; results not written",
                    extra={"test_case": test_case, "source": str(path)},
                )
                continue
            found += 1
            for row_index, column_index, text in result_cells(grid, header_index, rows):
                sheet.cell(row=row_index + 1, column=column_index + 1, value=text)
                written += 1

        if not found:
            workbook.close()
            return 0

        try:
            workbook.save(path)
        except OSError as e:
            raise SourceWriteError(f"Cannot save results to {path}: {e}") from e
        finally:
            workbook.close()
        logger.info(f"Wrote {written} result cell(s) to {path}", extra={"source": str(path)})
        return found


def _open(path: Path, data_only: bool):
    if not path.exists():
        raise FileNotFoundError(str(path))
    try:
        return openpyxl.load_workbook(path, data_only=data_only)
    except (InvalidFileException, zipfile.BadZipFile, KeyError) as e:
        raise SourceReadError(f"{path} is not a readable workbook: {e}") from e

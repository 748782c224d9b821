"""Delimited-text adapter.

Same block layout as the spreadsheet adapter, one record per line. Values
are kept as authored text; an empty field is absent.
"""

import csv
from pathlib import Path
from typing import List, Optional

from rowdriven.config import csv_delimiter
from rowdriven.exceptions import SourceReadError, SourceWriteError
from rowdriven.loaders.base import Loader, Location, locate_test_case_row, parse_blocks, result_cells
from rowdriven.logging_config import get_logger
from rowdriven.model import DataSet

logger = get_logger("loaders")


class CsvLoader(Loader):
    kind = "csv"
    supports_write = True

    def __init__(self, delimiter: Optional[str] = None, encoding: str = "utf-8-sig"):
        self.delimiter = delimiter or csv_delimiter()
        self.encoding = encoding

    def _read_records(self, path: Path) -> List[List[str]]:
        try:
            with path.open("r", encoding=self.encoding, newline="") as handle:
                return list(csv.reader(handle, delimiter=self.delimiter))
        except (UnicodeDecodeError, csv.Error) as e:
            raise SourceReadError(f"{path} is not readable delimited text: {e}") from e

    def load_source(self, path: Location) -> DataSet:
        path = Path(path)
        records = self._read_records(path)
        rows = ([field if field != "" else None for field in record] for record in records)
        return parse_blocks(rows, source=str(path))

    def write(self, location: Location, data: DataSet) -> int:
        path = Path(location)
        try:
            records = self._read_records(path)
        except (OSError, SourceReadError) as e:
            raise SourceWriteError(f"Cannot open {path} for writing results: {e}") from e

        found = 0
        for test_case, rows in data.items():
            grid = [[field if field != "" else None for field in record] for record in records]
            header_index = locate_test_case_row((cells[0] if cells else None for cells in grid), test_case)
            if header_index is None:
                logger.debug(
                    f"Test case '{test_case}' not found in {path}; results not written",
                    extra={"test_case": test_case, "source": str(path)},
                )
                continue
            found += 1
            for row_index, column_index, text in result_cells(grid, header_index, rows):
                record = records[row_index]
                if len(record) <= column_index:
                    record.extend([""] * (column_index + 1 - len(record)))
                record[column_index] = text

        if not found:
            return 0

        try:
            with path.open("w", encoding="utf-8", newline="") as handle:
                csv.writer(handle, delimiter=self.delimiter).writerows(records)
        except OSError as e:
            raise SourceWriteError(f"Cannot save results to {path}: {e}") from e
        logger.info(f"Wrote results to {path}", extra={"source": str(path)})
        return found

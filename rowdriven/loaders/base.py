"""Loader contract and the key row / data row block layout shared by all tabular adapters.

Layout of a source (one record per row)::

    lookup      id   kind
    <blank>     4    journal
    <blank>     1    ebook
    search      text
    <blank>     batman

A non-blank first cell starts a new test case block: it names the test case
and the remaining cells of that row name its parameters (the key row). Rows
with a blank first cell hold values for the parameters of the current block.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from rowdriven.config import ACTUAL_RESULT, TEST_STATUS
from rowdriven.exceptions import InvalidSourceError, SourceReadError, WriteNotSupportedError
from rowdriven.logging_config import get_logger
from rowdriven.model import DataRow, DataSet, Value

logger = get_logger("loaders")

Location = Union[str, Path]


class Loader(ABC):
    """Reads one physical source format into a :data:`~rowdriven.model.DataSet`."""

    kind: str = "custom"
    supports_write: bool = False

    def load(self, paths: Union[Location, Sequence[Location]]) -> DataSet:
        """Load and merge several sources, in order.

        A source that is missing or unreadable is logged and skipped. A test
        case defined by a later source replaces a same-named earlier one.
        """
        if isinstance(paths, (str, Path)):
            paths = [paths]

        logger.info(
            f"Loading {len(paths)} {self.kind} source(s)",
            extra={"kind": self.kind, "sources": [str(p) for p in paths]},
        )
        data: DataSet = {}
        for path in paths:
            try:
                loaded = self.load_source(path)
            except FileNotFoundError:
                logger.error(
                    f"The specified source was not found: {path}. Continuing with the next source.",
                    extra={"source": str(path)},
                )
                continue
            except (OSError, SourceReadError) as e:
                logger.error(
                    f"Could not read source {path}: {e}. Continuing with the next source.",
                    extra={"source": str(path), "error": str(e)},
                )
                continue
            logger.debug(
                f"Loaded {len(loaded)} test case(s) from {path}",
                extra={"source": str(path), "test_cases": sorted(loaded)},
            )
            data.update(loaded)
        return data

    @abstractmethod
    def load_source(self, path: Location) -> DataSet:
        """Load a single source. Raises ``FileNotFoundError``/``SourceReadError``."""
        raise NotImplementedError

    def write(self, location: Location, data: DataSet) -> int:
        """Write actual results and statuses of ``data`` back into ``location``.

        Returns the number of test cases found in the source. Test cases that
        are not found are skipped silently.
        """
        raise WriteNotSupportedError(f"{type(self).__name__} does not support writing results")


def leading_column_count(row: Sequence[Value]) -> int:
    """Number of contiguous non-blank cells from column 0."""
    count = 0
    for value in row:
        if value is None:
            break
        count += 1
    return count


def parse_blocks(rows: Iterable[Sequence[Value]], source: str = "<memory>") -> DataSet:
    """Turn normalized rows into a DataSet.

    The column count is fixed by the first row; cells beyond it are ignored
    for the rest of the source. Entirely blank rows are skipped.
    """
    data: DataSet = {}
    column_count: Optional[int] = None
    names = {}
    current: Optional[List[DataRow]] = None

    for line_no, row in enumerate(rows, start=1):
        row = list(row)
        if column_count is None:
            column_count = leading_column_count(row)
            if column_count == 0:
                if any(cell is not None for cell in row):
                    raise InvalidSourceError(f"{source}: data row {line_no} appears before any key row")
                logger.warning(f"First row of {source} is blank, no test data loaded")
                return data

        cells = (row + [None] * column_count)[:column_count]
        if all(cell is None for cell in cells):
            continue

        if cells[0] is not None:
            test_case = str(cells[0]).strip()
            names = {}
            for column in range(1, column_count):
                if cells[column] is None:
                    continue
                name = str(cells[column])
                if name in names.values():
                    raise InvalidSourceError(
                        f"{source}: duplicate parameter '{name}' for test case '{test_case}' (row {line_no})"
                    )
                names[column] = name
            current = []
            data[test_case] = current
            continue

        if current is None:
            raise InvalidSourceError(f"{source}: data row {line_no} appears before any key row")

        values: DataRow = {}
        for column in range(1, column_count):
            if cells[column] is None:
                continue
            name = names.get(column)
            if name is None:
                logger.warning(
                    f"{source}: value in row {line_no}, column {column} has no parameter name; ignored"
                )
                continue
            values[name] = cells[column]
        current.append(values)

    return data


def locate_test_case_row(first_column: Iterable[Value], test_case: str) -> Optional[int]:
    """Index of the first row whose first cell, trimmed, equals ``test_case``."""
    for index, value in enumerate(first_column):
        if value is not None and str(value).strip() == test_case:
            return index
    return None


def data_row_indices(records: Sequence[Sequence[Value]], header_index: int) -> List[int]:
    """Physical indices of the data rows under the key row at ``header_index``.

    Follows the same rules as :func:`parse_blocks`: only the first row's
    column count matters and blank rows are skipped, so index ``i`` of the
    result is the row that produced DataRow ``i`` of the block.
    """
    if not records:
        return []
    column_count = leading_column_count(records[0])
    indices = []
    for index in range(header_index + 1, len(records)):
        cells = (list(records[index]) + [None] * column_count)[:column_count]
        if all(cell is None for cell in cells):
            continue
        if cells[0] is not None:
            break
        indices.append(index)
    return indices


def result_cells(
    records: Sequence[Sequence[Value]], header_index: int, rows: Sequence[DataRow]
) -> List[Tuple[int, int, str]]:
    """Cells to write for the results of one test case, as ``(row, column, text)``.

    ``records`` is the whole source grid, blank cells as ``None``. Results go
    into an existing ``actualResult`` column of the key row so that rewriting
    is stable, otherwise one past the last non-blank cell of the key row and
    its data rows. Row ``i`` of ``rows`` lands on the row that produced it.
    Rows without an actual result are left untouched.
    """
    header = list(records[header_index])
    row_indices = data_row_indices(records, header_index)
    if len(rows) > len(row_indices):
        logger.warning(
            f"{len(rows)} result row(s) but only {len(row_indices)} data row(s) under '{header[0]}'; "
            f"extra results dropped",
            extra={"test_case": header[0]},
        )

    if ACTUAL_RESULT in header:
        actual_column = header.index(ACTUAL_RESULT)
    else:
        block = [header] + [list(records[i]) for i in row_indices]
        actual_column = max(
            (i for cells in block for i, v in enumerate(cells) if v is not None),
            default=0,
        ) + 1
    status_column = actual_column + 1

    cells: List[Tuple[int, int, str]] = []
    wrote_status = False
    for row_index, row in zip(row_indices, rows):
        actual = row.get(ACTUAL_RESULT)
        if actual is None:
            continue
        cells.append((row_index, actual_column, str(actual)))
        status = row.get(TEST_STATUS)
        if status is not None:
            cells.append((row_index, status_column, str(status)))
            wrote_status = True

    if cells:
        cells.insert(0, (header_index, actual_column, ACTUAL_RESULT))
        if wrote_status:
            cells.insert(1, (header_index, status_column, TEST_STATUS))
    return cells

"""Write actual results and statuses back into the tabular source."""

from typing import Dict, List

from rowdriven.config import ACTUAL_RESULT
from rowdriven.exceptions import SourceWriteError, WriteNotSupportedError
from rowdriven.loaders.base import Loader, Location
from rowdriven.logging_config import get_logger
from rowdriven.model import DataRow

logger = get_logger("runner")


def apply_results(loader: Loader, location: Location, results_by_test_case: Dict[str, List[DataRow]]) -> int:
    """Write each test case's results into ``location``.

    Only test cases with at least one row carrying an actual result are
    written. A failure while writing one test case is logged and the next
    test case is still written.

    Returns:
        Number of test cases whose block was found and written.
    """
    if not loader.supports_write:
        logger.warning(
            f"{type(loader).__name__} cannot write results; {location} left unchanged",
            extra={"source": str(location)},
        )
        return 0

    written = 0
    for test_case, rows in results_by_test_case.items():
        if not any(row.get(ACTUAL_RESULT) is not None for row in rows):
            logger.debug(f"No actual results for '{test_case}', nothing to write")
            continue
        try:
            written += loader.write(location, {test_case: rows})
        except WriteNotSupportedError as e:
            logger.warning(str(e), extra={"source": str(location)})
            return written
        except (SourceWriteError, OSError) as e:
            logger.error(
                f"Writing results of '{test_case}' to {location} failed: {e}",
                extra={"test_case": test_case, "source": str(location), "error": str(e)},
            )
    return written


def write_back(context, report) -> bool:
    """Write a report's result rows to the source that defines its test case.

    Locations are tried last to first, matching the load precedence where a
    later source replaces a same-named test case.
    """
    if context.source is None or context.loader is None:
        return False
    results = {report.test_case: report.result_rows}
    for location in reversed(context.source.paths):
        if apply_results(context.loader, location, results):
            logger.info(
                f"Results of '{report.test_case}' written to {location}",
                extra={"test_case": report.test_case, "source": location},
            )
            return True
    return False

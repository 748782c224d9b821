import time
from datetime import datetime
from typing import Any, Callable, List, Optional, Sequence

from rowdriven.config import STATUS_FAILED, STATUS_PASSED, STATUS_SKIPPED
from rowdriven.context import DataSource, load_context
from rowdriven.exceptions import (
    AssumptionViolated,
    NoSuccessfulAssignmentError,
    ParameterizedAssertionError,
)
from rowdriven.logging_config import get_logger
from rowdriven.model import (
    AssignmentPlan,
    DataRow,
    ExecutionOutcome,
    Outcome,
    ParameterSlot,
    TestCaseReport,
)
from rowdriven.runner.aggregate import write_report
from rowdriven.runner.assignment import build_plans
from rowdriven.runner.writeback import write_back

logger = get_logger("runner")


def assume(condition: Any, message: str = "assumption not met") -> None:
    """Skip the current row unless ``condition`` holds."""
    if not condition:
        raise AssumptionViolated(message)


def _run_single_plan(
    test_case: str, body: Callable, plan: AssignmentPlan, index: int
) -> ExecutionOutcome:
    """Invoke the body with one plan's arguments.

    Assumption violations come back as an outcome; any other exception is
    wrapped with the plan's arguments and raised.
    """
    arguments = plan.argument_strings()
    start_time = time.time()
    try:
        actual = body(*plan.arguments())
    except AssumptionViolated as e:
        execution_time = time.time() - start_time
        logger.info(
            f"Row {index} of '{test_case}' skipped: {e}",
            extra={"test_case": test_case, "row": index, "status": "assumption_violated"},
        )
        return ExecutionOutcome(
            index=index,
            outcome=Outcome.ASSUMPTION_VIOLATED,
            arguments=arguments,
            cause=str(e),
            execution_time=execution_time,
            executed_at=datetime.now().isoformat(),
        )
    except Exception as e:
        execution_time = time.time() - start_time
        logger.error(
            f"Row {index} of '{test_case}' failed in {execution_time:.2f}s: {e}",
            extra={
                "test_case": test_case,
                "row": index,
                "arguments": arguments,
                "execution_time": execution_time,
                "error": str(e),
            },
        )
        raise ParameterizedAssertionError(test_case, arguments, e) from e

    execution_time = time.time() - start_time
    logger.debug(
        f"Row {index} of '{test_case}' passed in {execution_time:.2f}s",
        extra={"test_case": test_case, "row": index, "execution_time": execution_time, "status": "success"},
    )
    return ExecutionOutcome(
        index=index,
        outcome=Outcome.SUCCESS,
        arguments=arguments,
        actual_result=actual,
        execution_time=execution_time,
        executed_at=datetime.now().isoformat(),
    )


def run_plans(
    test_case: str,
    body: Callable,
    plans: Sequence[AssignmentPlan],
    rows: Optional[Sequence[DataRow]] = None,
    report: Optional[TestCaseReport] = None,
) -> TestCaseReport:
    """Run ``body`` once per plan, strictly in plan order.

    Args:
        test_case: Test case identifier, used in diagnostics
        body: The test callable; receives the plan's values positionally
        plans: Complete assignment plans
        rows: Source row behind each plan (for the write-back result rows)
        report: Report to fill in; lets the caller keep partial results
            when a row fails

    Raises:
        ParameterizedAssertionError: a row failed; remaining rows are not run
        NoSuccessfulAssignmentError: no row succeeded and none failed
    """
    rows = list(rows or [])
    if report is None:
        report = TestCaseReport(test_case=test_case)

    logger.info(
        f"Executing {len(plans)} row(s) for test case '{test_case}'",
        extra={"test_case": test_case, "plan_count": len(plans)},
    )
    overall_start = time.time()

    for index, plan in enumerate(plans):
        row = rows[index] if index < len(rows) else {}
        try:
            outcome = _run_single_plan(test_case, body, plan, index)
        except ParameterizedAssertionError as e:
            report.record(
                ExecutionOutcome(
                    index=index,
                    outcome=Outcome.FAILURE,
                    arguments=e.arguments,
                    cause=f"{type(e.cause).__name__}: {e.cause}",
                    executed_at=datetime.now().isoformat(),
                ),
                row,
                STATUS_FAILED,
            )
            raise
        status = STATUS_PASSED if outcome.outcome is Outcome.SUCCESS else STATUS_SKIPPED
        report.record(outcome, row, status)

    total_time = time.time() - overall_start
    logger.info(
        f"Completed '{test_case}': {report.successes} passed, "
        f"{len(report.violations)} skipped in {total_time:.2f}s",
        extra={
            "test_case": test_case,
            "successes": report.successes,
            "violations": len(report.violations),
            "total_time": total_time,
        },
    )

    if report.successes == 0:
        raise NoSuccessfulAssignmentError(test_case, report.violations)
    return report


def run_test_case(
    test_case: str,
    body: Callable,
    slots: Sequence[ParameterSlot],
    source: Optional[DataSource] = None,
    out_dir: Optional[str] = None,
) -> TestCaseReport:
    """Load data, build row-aligned plans and run them.

    Configuration errors surface before any row runs. When the source asks
    for it, results are written back even if a row aborted the pass.
    """
    context = load_context(source, test_case)
    plans = build_plans(slots, context)
    data_bound = any(slot.is_data_bound for slot in slots)
    rows: List[DataRow] = context.rows() if data_bound else []

    report = TestCaseReport(test_case=test_case)
    try:
        return run_plans(test_case, body, plans, rows, report=report)
    finally:
        if source is not None and source.write_results:
            write_back(context, report)
        if out_dir:
            write_report(out_dir, report)

"""Row-driven test execution: one test invocation per row of tabular test data."""

__version__ = "0.1.0"

# Core components
from rowdriven.context import DataContext, DataSource, load_context
from rowdriven.model import (
    AssignmentPlan,
    DataRow,
    DataSet,
    ExecutionOutcome,
    Outcome,
    ParameterSlot,
    SlotKind,
    TestCaseReport,
)
from rowdriven.exceptions import (
    AssumptionViolated,
    ConfigurationError,
    NoSuccessfulAssignmentError,
    ParameterizedAssertionError,
)

# Loading
from rowdriven.loaders import (
    CsvLoader,
    ExcelLoader,
    Loader,
    LoaderType,
    SqlLoader,
    register_loader,
    resolve_loader,
)

# Execution
from rowdriven.runner.assignment import build_plans
from rowdriven.runner.execute import assume, run_plans, run_test_case
from rowdriven.runner.writeback import apply_results
from rowdriven.decorators import data, data_driven, fixed, row, test_data

__all__ = [
    # Version
    "__version__",
    # Core
    "DataContext",
    "DataSource",
    "load_context",
    "AssignmentPlan",
    "DataRow",
    "DataSet",
    "ExecutionOutcome",
    "Outcome",
    "ParameterSlot",
    "SlotKind",
    "TestCaseReport",
    "AssumptionViolated",
    "ConfigurationError",
    "NoSuccessfulAssignmentError",
    "ParameterizedAssertionError",
    # Loading
    "Loader",
    "CsvLoader",
    "ExcelLoader",
    "SqlLoader",
    "LoaderType",
    "register_loader",
    "resolve_loader",
    # Execution
    "build_plans",
    "run_plans",
    "run_test_case",
    "assume",
    "apply_results",
    # Declarations
    "data_driven",
    "data",
    "row",
    "fixed",
    "test_data",
]

"""Custom exception hierarchy for the rowdriven test engine."""


class RowDrivenError(Exception):
    """Base exception for all rowdriven errors."""

    pass


class ConfigurationError(RowDrivenError):
    """Raised when a test case's data source declaration is invalid or incomplete."""

    pass


class LoaderNotFoundError(ConfigurationError):
    """Raised when no adapter is available for the declared source kind."""

    pass


class SourceReadError(RowDrivenError):
    """Raised when a tabular source cannot be opened or read."""

    pass


class InvalidSourceError(SourceReadError):
    """Raised when a source does not follow the key row / data row layout."""

    pass


class SourceWriteError(RowDrivenError):
    """Raised when results cannot be written back to a source."""

    pass


class WriteNotSupportedError(SourceWriteError):
    """Raised when an adapter has no write-back support."""

    pass


class AssumptionViolated(RowDrivenError):
    """Signals that a row's preconditions do not apply to the test.

    Raised from a test body (directly or through :func:`rowdriven.assume`),
    it is recorded and the engine moves on to the next row.
    """

    pass


class ParameterizedAssertionError(AssertionError):
    """A row failed; carries the argument values of the row that produced it."""

    def __init__(self, test_case: str, arguments, cause: BaseException):
        self.test_case = test_case
        self.arguments = list(arguments)
        self.cause = cause
        super().__init__(
            f"{test_case}({', '.join(self.arguments)}) failed: "
            f"{type(cause).__name__}: {cause}"
        )


class NoSuccessfulAssignmentError(AssertionError):
    """Raised when no row ran successfully and none failed outright."""

    def __init__(self, test_case: str, violations):
        self.test_case = test_case
        self.violations = list(violations)
        super().__init__(
            f"Never found parameters that satisfied method assumptions for "
            f"'{test_case}'. Violated assumptions: {self.violations}"
        )

"""Core data model: rows, data sets, parameter slots, assignment plans and outcomes."""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from rowdriven.config import ACTUAL_RESULT, TEST_STATUS

# A normalized cell. None marks an absent (blank) cell, distinct from "".
Value = Union[str, int, float, bool, datetime, None]

# One unit of test input: parameter name -> value, in column order.
DataRow = Dict[str, Value]

# Test case identifier -> rows, in source order.
DataSet = Dict[str, List[DataRow]]


class SlotKind(Enum):
    """Where a parameter slot takes its value from."""

    DATA = "data"  # one named column of the active row
    ROW = "row"  # the whole active row as a mapping
    FIXED = "fixed"  # a single provider, independent of the row


@dataclass(frozen=True)
class ParameterSlot:
    """One formal parameter of a test case."""

    position: int
    name: str
    kind: SlotKind = SlotKind.DATA
    provider: Optional[Callable[[], Any]] = None
    converter: Optional[Callable[[Value], Any]] = None

    @property
    def is_data_bound(self) -> bool:
        return self.kind is not SlotKind.FIXED

    def potential_values(self, context) -> List[Any]:
        """Candidate values for this slot, one per active row for data-bound slots."""
        if self.kind is SlotKind.FIXED:
            if self.provider is None:
                raise ValueError(f"Fixed slot '{self.name}' has no value provider")
            return [self.provider()]

        rows = context.rows()
        if self.kind is SlotKind.ROW:
            return [dict(row) for row in rows]

        values = [row.get(self.name) for row in rows]
        if self.converter is not None:
            values = [self.converter(v) for v in values]
        return values


class _Unassigned:
    def __repr__(self) -> str:
        return "<unassigned>"


UNASSIGNED = _Unassigned()


class AssignmentPlan:
    """Binding of every slot of a test case to a value for one invocation.

    Plans are immutable; every assignment returns a new plan. A plan with
    unassigned slots only exists while the engine is still resolving slots.
    """

    def __init__(self, slots, values=None):
        self.slots = tuple(slots)
        if values is None:
            values = (UNASSIGNED,) * len(self.slots)
        self.values = tuple(values)
        if len(self.values) != len(self.slots):
            raise ValueError("An assignment plan needs exactly one value per slot")

    @classmethod
    def all_unassigned(cls, slots) -> "AssignmentPlan":
        return cls(slots)

    def is_complete(self) -> bool:
        return all(v is not UNASSIGNED for v in self.values)

    def next_unassigned(self) -> Optional[ParameterSlot]:
        for slot, value in zip(self.slots, self.values):
            if value is UNASSIGNED:
                return slot
        return None

    def assign_next(self, value) -> "AssignmentPlan":
        slot = self.next_unassigned()
        if slot is None:
            raise ValueError("All slots are already assigned")
        return self.with_value(slot.position, value)

    def with_value(self, position: int, value) -> "AssignmentPlan":
        values = list(self.values)
        values[position] = value
        return AssignmentPlan(self.slots, values)

    def arguments(self) -> List[Any]:
        if not self.is_complete():
            raise ValueError(f"Assignment plan is incomplete: {self!r}")
        return list(self.values)

    def argument_strings(self) -> List[str]:
        return [f"{slot.name}={value!r}" for slot, value in zip(self.slots, self.values)]

    def __eq__(self, other):
        if not isinstance(other, AssignmentPlan):
            return NotImplemented
        return self.slots == other.slots and self.values == other.values

    def __repr__(self) -> str:
        return f"AssignmentPlan({', '.join(self.argument_strings())})"


class Outcome(Enum):
    """Result of running one assignment plan."""

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    ASSUMPTION_VIOLATED = "ASSUMPTION_VIOLATED"


@dataclass
class ExecutionOutcome:
    index: int
    outcome: Outcome
    arguments: List[str] = field(default_factory=list)
    cause: Optional[str] = None
    actual_result: Any = None
    execution_time: Optional[float] = None
    executed_at: Optional[str] = None  # ISO timestamp when the plan ran

    def to_dict(self):
        d = asdict(self)
        d["outcome"] = self.outcome.value
        if self.actual_result is not None:
            d["actual_result"] = str(self.actual_result)
        return d


@dataclass
class TestCaseReport:
    """Per-test-case aggregation of plan outcomes."""

    __test__ = False  # keep pytest from collecting this class

    test_case: str
    outcomes: List[ExecutionOutcome] = field(default_factory=list)
    successes: int = 0
    violations: List[str] = field(default_factory=list)
    # Row copies carrying actualResult/testStatus for the write-back path
    result_rows: List[DataRow] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return any(o.outcome is Outcome.FAILURE for o in self.outcomes)

    @property
    def passed(self) -> bool:
        return self.successes > 0 and not self.failed

    def record(self, outcome: ExecutionOutcome, row: Optional[DataRow], status: str) -> None:
        self.outcomes.append(outcome)
        if outcome.outcome is Outcome.SUCCESS:
            self.successes += 1
        elif outcome.outcome is Outcome.ASSUMPTION_VIOLATED:
            self.violations.append(outcome.cause or "")

        result_row = dict(row or {})
        result_row[ACTUAL_RESULT] = outcome.actual_result
        result_row[TEST_STATUS] = status
        self.result_rows.append(result_row)

    def to_dict(self):
        return {
            "test_case": self.test_case,
            "passed": self.passed,
            "successes": self.successes,
            "violations": list(self.violations),
            "outcomes": [o.to_dict() for o in self.outcomes],
        }

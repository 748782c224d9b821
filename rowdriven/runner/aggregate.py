import json
import os
from datetime import datetime
from typing import Dict, List

import pandas as pd

from rowdriven.model import DataSet, TestCaseReport


def summary(reports: List[TestCaseReport]) -> Dict[str, int]:
    counts = {"test_cases": len(reports), "passed": 0, "failed": 0, "rows": 0,
              "successes": 0, "violations": 0}
    for report in reports:
        counts["passed" if report.passed else "failed"] += 1
        counts["rows"] += len(report.outcomes)
        counts["successes"] += report.successes
        counts["violations"] += len(report.violations)
    return counts


def write_report(out_dir: str, report: TestCaseReport) -> str:
    """Append a report to ``<out_dir>/<test_case>/results.jsonl``."""
    case_dir = os.path.join(out_dir, report.test_case)
    os.makedirs(case_dir, exist_ok=True)
    jsonl_path = os.path.join(case_dir, "results.jsonl")
    entry = report.to_dict()
    entry["written_at"] = datetime.now().isoformat()
    with open(jsonl_path, "a", encoding="utf-8") as f:
        f.write(json.dumps(entry, default=str) + "\n")
    return jsonl_path


def collect(out_dir: str) -> List[Dict]:
    """Latest report entry of every test case under ``out_dir``."""
    items: List[Dict] = []
    if not os.path.isdir(out_dir):
        return items
    for name in sorted(os.listdir(out_dir)):
        path = os.path.join(out_dir, name, "results.jsonl")
        if not os.path.isfile(path):
            continue
        with open(path, "r", encoding="utf-8") as f:
            lines = [line for line in f.read().splitlines() if line.strip()]
        # Take only the last line (most recent result)
        if lines:
            items.append(json.loads(lines[-1]))
    return items


def to_frame(data_set: DataSet) -> pd.DataFrame:
    """Flatten a DataSet to one DataFrame row per data row.

    Columns are ``test_case``, ``row`` (index within the test case) and the
    union of parameter names, in first-seen order. Absent values are NaN.
    """
    records = []
    columns = ["test_case", "row"]
    for test_case, rows in data_set.items():
        for index, row in enumerate(rows):
            record = {"test_case": test_case, "row": index}
            record.update(row)
            records.append(record)
            for name in row:
                if name not in columns:
                    columns.append(name)
    return pd.DataFrame.from_records(records, columns=columns)

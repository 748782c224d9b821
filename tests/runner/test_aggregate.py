from rowdriven.model import ExecutionOutcome, Outcome, TestCaseReport
from rowdriven.runner.aggregate import collect, summary, to_frame, write_report


def _report(name, outcomes):
    report = TestCaseReport(test_case=name)
    for index, outcome in enumerate(outcomes):
        report.record(ExecutionOutcome(index, outcome, cause="c"), {}, outcome.value)
    return report


class TestSummary:
    def test_counts(self):
        reports = [
            _report("a", [Outcome.SUCCESS, Outcome.ASSUMPTION_VIOLATED]),
            _report("b", [Outcome.SUCCESS, Outcome.FAILURE]),
        ]
        assert summary(reports) == {
            "test_cases": 2,
            "passed": 1,
            "failed": 1,
            "rows": 4,
            "successes": 2,
            "violations": 1,
        }


class TestReports:
    def test_write_and_collect_latest(self, tmp_path):
        out_dir = str(tmp_path)
        write_report(out_dir, _report("lookup", [Outcome.ASSUMPTION_VIOLATED]))
        write_report(out_dir, _report("lookup", [Outcome.SUCCESS]))
        write_report(out_dir, _report("search", [Outcome.SUCCESS]))

        items = collect(out_dir)
        assert [item["test_case"] for item in items] == ["lookup", "search"]
        assert items[0]["passed"] is True

    def test_collect_missing_dir(self, tmp_path):
        assert collect(str(tmp_path / "missing")) == []


class TestToFrame:
    def test_flattens_rows(self):
        frame = to_frame({
            "lookup": [{"id": "4", "kind": "journal"}, {"id": "1"}],
            "search": [{"text": "batman"}],
        })

        assert list(frame.columns) == ["test_case", "row", "id", "kind", "text"]
        assert frame["test_case"].tolist() == ["lookup", "lookup", "search"]
        assert frame["row"].tolist() == [0, 1, 0]
        assert frame["kind"].isna().tolist() == [False, True, True]

    def test_empty(self):
        assert to_frame({}).empty

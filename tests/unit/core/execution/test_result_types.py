"""Tests for cycle result types."""

from snippet_runner.core.execution.result_types import CycleReport, PartitionResult
from snippet_runner.schemas.snippet import Snippet


class TestPartitionResult:
    def test_external_filters_flatten_snippets(self) -> None:
        result = PartitionResult(
            local=[Snippet("skip", ("x",))],
            external=[Snippet("a", ("1", "2")), Snippet("b")],
        )

        assert result.external_filters() == [["a", "1", "2"], ["b"]]


class TestCycleReport:
    def test_to_dict_omits_empty_errors(self) -> None:
        report = CycleReport(
            status="completed",
            parsed=2,
            queued=2,
            local=[Snippet("skip", ("x",))],
            external=[Snippet("a")],
            external_invoked=True,
        )

        assert report.to_dict() == {
            "status": "completed",
            "parsed": 2,
            "queued": 2,
            "local": [["skip", "x"]],
            "external": [["a"]],
            "external_invoked": True,
        }

    def test_to_dict_includes_errors(self) -> None:
        report = CycleReport(status="completed", errors=["skip: boom"])

        assert report.to_dict()["errors"] == ["skip: boom"]

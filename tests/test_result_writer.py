# tests/test_result_writer.py
import json
import pytest

from storage.result_writer import ResultWriter, StorageError
from validation.models import IssueType, Severity, Statistics, ValidationError, ValidationResult


def make_results():
    bad = ValidationResult.build(
        [ValidationError(type=IssueType.DATA_TYPE, severity=Severity.ERROR, message="JSON parse failed")],
        [],
        Statistics(total_events=2),
    )
    good = ValidationResult.build([], [], Statistics(total_events=5, event_counts={"login": 5}))
    return {"a.jsonl": bad, "b.jsonl": good}


def test_writes_one_line_per_file(tmp_path):
    out = tmp_path / "reports" / "results.jsonl"
    writer = ResultWriter(out)

    assert writer.write_results(make_results()) == out

    rows = [json.loads(line) for line in out.read_text(encoding="utf-8").splitlines()]
    assert [r["file"] for r in rows] == ["a.jsonl", "b.jsonl"]
    assert rows[0]["is_valid"] is False
    assert rows[0]["errors"][0]["type"] == "DATA_TYPE"
    assert rows[0]["errors"][0]["severity"] == "error"
    assert rows[1]["statistics"]["event_counts"] == {"login": 5}
    assert writer.stats["writes"] == 2


def test_rewrite_replaces_previous_output(tmp_path):
    out = tmp_path / "results.jsonl"
    writer = ResultWriter(out)
    writer.write_results(make_results())
    writer.write_results({"only.jsonl": make_results()["b.jsonl"]})

    assert len(out.read_text(encoding="utf-8").splitlines()) == 1
    # no temp files left behind
    assert [p.name for p in tmp_path.iterdir()] == ["results.jsonl"]


def test_output_round_trips_into_model(tmp_path):
    out = tmp_path / "results.jsonl"
    results = make_results()
    ResultWriter(out).write_results(results)

    row = json.loads(out.read_text(encoding="utf-8").splitlines()[0])
    row.pop("file")
    assert ValidationResult.model_validate(row) == results["a.jsonl"]


def test_unwritable_target_raises_storage_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory")

    with pytest.raises(StorageError):
        ResultWriter(blocker / "results.jsonl").write_results(make_results())

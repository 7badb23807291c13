"""
Tests for the per-submission evaluation pipeline.
"""

import os
import time

import pytest
from conftest import ADDER, add_submission, write_script

from cgrader.models import OutcomeKind, RunResult, Tier
from cgrader.output_classifier import OutputClassifier
from cgrader.pipeline import EvaluationPipeline, find_submissions
from cgrader.results_writer import ResultsWriter, read_results


class RecordingRunner:
    """Runner stand-in that records calls."""

    def __init__(self, result=RunResult.COMPLETED):
        self.result = result
        self.calls = []

    def run(self, executable, input_path, output_path):
        self.calls.append(executable)
        return self.result


class RecordingClassifier:
    """Classifier stand-in that records calls."""

    def __init__(self):
        self.calls = []

    def classify(self, produced_output, reference_output):
        self.calls.append(produced_output)
        raise AssertionError("classifier must not be called")


def grade(pipeline, submissions_dir, student_id):
    submission = next(s for s in find_submissions(submissions_dir) if s.student_id == student_id)
    return pipeline.evaluate(submission)


def test_find_submissions_lists_only_directories_in_name_order(submissions_dir):
    add_submission(submissions_dir, "carol")
    add_submission(submissions_dir, "alice")
    add_submission(submissions_dir, "bob")
    (submissions_dir / "notes.txt").write_text("")

    assert [s.student_id for s in find_submissions(submissions_dir)] == ["alice", "bob", "carol"]


def test_find_submissions_missing_root_raises(tmp_path):
    with pytest.raises(OSError):
        find_submissions(tmp_path / "missing")


def test_empty_directory_is_no_source(pipeline, submissions_dir):
    add_submission(submissions_dir, "alice")

    outcome = grade(pipeline, submissions_dir, "alice")

    assert outcome.kind is OutcomeKind.NO_SOURCE
    assert (outcome.grade, outcome.reason) == (0, "NO_C_FILE")


def test_directory_without_c_file_is_no_source(pipeline, submissions_dir):
    add_submission(submissions_dir, "alice", {"sol.py": ADDER, "docs/README": "hi"})

    assert grade(pipeline, submissions_dir, "alice").reason == "NO_C_FILE"


def test_compile_error_skips_later_stages(pipeline, submissions_dir):
    add_submission(submissions_dir, "alice", {"sol.c": "int main( {\n"})
    runner = RecordingRunner()
    classifier = RecordingClassifier()
    pipeline.runner = runner
    pipeline.classifier = classifier

    outcome = grade(pipeline, submissions_dir, "alice")

    assert outcome.kind is OutcomeKind.BUILD_FAILED
    assert (outcome.grade, outcome.reason) == (0, "COMPILATION_ERROR")
    assert runner.calls == []
    assert classifier.calls == []


def test_infinite_loop_times_out(pipeline, submissions_dir):
    add_submission(submissions_dir, "alice", {"sol.c": "while True:\n    pass\n"})
    pipeline.classifier = RecordingClassifier()

    start = time.monotonic()
    outcome = grade(pipeline, submissions_dir, "alice")

    assert time.monotonic() - start >= pipeline.runner.timeout_seconds
    assert outcome.kind is OutcomeKind.TIMED_OUT
    assert (outcome.grade, outcome.reason) == (0, "TIMEOUT")


def test_identical_output_gets_full_marks(pipeline, submissions_dir):
    add_submission(submissions_dir, "alice", {"sol.c": ADDER})

    outcome = grade(pipeline, submissions_dir, "alice")

    assert outcome.tier is Tier.IDENTICAL
    assert (outcome.grade, outcome.reason) == (100, "GREAT_JOB")


def test_whitespace_difference_is_similar(pipeline, submissions_dir):
    add_submission(submissions_dir, "alice", {"sol.c": "a, b = map(int, input().split())\nprint(' ', a + b)\n"})

    outcome = grade(pipeline, submissions_dir, "alice")

    assert (outcome.grade, outcome.reason) == (80, "SIMILAR_OUTPUT")


def test_wrong_answer_is_bad_output(pipeline, submissions_dir):
    add_submission(submissions_dir, "alice", {"sol.c": "a, b = map(int, input().split())\nprint(a * b)\n"})

    outcome = grade(pipeline, submissions_dir, "alice")

    assert (outcome.grade, outcome.reason) == (60, "BAD_OUTPUT")


def test_crashing_program_is_still_classified(pipeline, submissions_dir):
    add_submission(submissions_dir, "alice", {"sol.c": "raise SystemExit(1)\n"})

    outcome = grade(pipeline, submissions_dir, "alice")

    assert (outcome.grade, outcome.reason) == (60, "BAD_OUTPUT")


def test_source_in_subfolder_is_graded(pipeline, submissions_dir):
    add_submission(submissions_dir, "alice", {"ex1/src/sol.c": ADDER})

    assert grade(pipeline, submissions_dir, "alice").reason == "GREAT_JOB"


def test_unexpected_comparator_code_is_reported(pipeline, submissions_dir, tmp_path):
    add_submission(submissions_dir, "alice", {"sol.c": ADDER})
    pipeline.classifier = OutputClassifier(write_script(tmp_path / "badcomp", "import sys\nsys.exit(9)\n"))

    outcome = grade(pipeline, submissions_dir, "alice")

    assert outcome.kind is OutcomeKind.CLASSIFICATION_ERROR
    assert (outcome.grade, outcome.reason) == (0, "COMPARISON_ERROR")
    assert "9" in outcome.detail


def test_run_setup_error_is_per_submission(pipeline, submissions_dir):
    add_submission(submissions_dir, "alice", {"sol.c": ADDER})
    pipeline.runner = RecordingRunner(RunResult.SETUP_ERROR)

    outcome = grade(pipeline, submissions_dir, "alice")

    assert (outcome.grade, outcome.reason) == (0, "RUN_SETUP_ERROR")


def test_vanished_submission_is_unreadable(pipeline, submissions_dir):
    folder = add_submission(submissions_dir, "alice")
    [submission] = find_submissions(submissions_dir)
    folder.rmdir()

    outcome = pipeline.evaluate(submission)

    assert outcome.kind is OutcomeKind.UNREADABLE_SUBMISSION
    assert (outcome.grade, outcome.reason) == (0, "UNREADABLE_SUBMISSION")


def test_vanished_submission_aborts_in_strict_mode(pipeline, submissions_dir):
    folder = add_submission(submissions_dir, "alice")
    [submission] = find_submissions(submissions_dir)
    folder.rmdir()
    pipeline.strict_traversal = True

    with pytest.raises(OSError):
        pipeline.evaluate(submission)


@pytest.fixture
def mixed_class(submissions_dir):
    add_submission(submissions_dir, "dave", {"sol.c": "print(7)\n"})
    add_submission(submissions_dir, "alice", {"sol.c": ADDER})
    add_submission(submissions_dir, "carol", {"sol.c": "int main( {\n"})
    add_submission(submissions_dir, "bob")
    return submissions_dir


def test_run_writes_records_in_discovery_order(pipeline, mixed_class, tmp_path):
    results = tmp_path / "results.csv"

    with ResultsWriter(results) as writer:
        statistics = pipeline.run(find_submissions(mixed_class), writer)

    assert results.read_text() == (
        "alice,100,GREAT_JOB\n"
        "bob,0,NO_C_FILE\n"
        "carol,0,COMPILATION_ERROR\n"
        "dave,100,GREAT_JOB\n"
    )
    assert statistics["total_students"] == 4
    assert statistics["average_grade"] == 50


def test_rerun_is_byte_identical(pipeline, mixed_class, tmp_path):
    results = tmp_path / "results.csv"

    with ResultsWriter(results) as writer:
        pipeline.run(find_submissions(mixed_class), writer)
    first = results.read_bytes()

    with ResultsWriter(results) as writer:
        pipeline.run(find_submissions(mixed_class), writer)

    assert results.read_bytes() == first


def test_run_removes_transient_artifacts(pipeline, mixed_class, tmp_path):
    with ResultsWriter(tmp_path / "results.csv") as writer:
        pipeline.run(find_submissions(mixed_class), writer)

    assert not pipeline.artifacts.build_output.exists()
    assert not pipeline.artifacts.program_output.exists()


def test_strict_abort_keeps_earlier_records(pipeline, submissions_dir, tmp_path):
    add_submission(submissions_dir, "alice", {"sol.c": ADDER})
    folder = add_submission(submissions_dir, "bob")
    submissions = find_submissions(submissions_dir)
    folder.rmdir()
    pipeline.strict_traversal = True
    results = tmp_path / "results.csv"

    with pytest.raises(OSError):
        with ResultsWriter(results) as writer:
            pipeline.run(submissions, writer)

    assert results.read_text() == "alice,100,GREAT_JOB\n"


def test_cleanup_tolerates_missing_artifacts(pipeline, submissions_dir, tmp_path):
    add_submission(submissions_dir, "bob")
    pipeline.artifacts.build_output.write_text("stale binary")

    with ResultsWriter(tmp_path / "results.csv") as writer:
        pipeline.run(find_submissions(submissions_dir), writer)

    assert not pipeline.artifacts.build_output.exists()
    assert not pipeline.artifacts.program_output.exists()


def test_non_utf8_folder_name_is_written_byte_for_byte(pipeline, submissions_dir, tmp_path, capsys):
    add_submission(submissions_dir, "alice", {"sol.c": ADDER})
    os.mkdir(os.path.join(os.fsencode(submissions_dir), b"caf\xe9"))
    results = tmp_path / "results.csv"

    with ResultsWriter(results) as writer:
        pipeline.run(find_submissions(submissions_dir), writer)

    assert results.read_bytes() == b"alice,100,GREAT_JOB\ncaf\xe9,0,NO_C_FILE\n"
    assert read_results(results)[1] == (os.fsdecode(b"caf\xe9"), 0, "NO_C_FILE")
    assert "Processing caf�..." in capsys.readouterr().out

"""
Evaluation pipeline that grades submissions one at a time.

Each submission goes through locate, build, run and classify. The first
stage that fails decides the submission's outcome and later stages are
skipped.
"""

import os
from pathlib import Path

from .builder import Builder
from .config import SOURCE_EXTENSION
from .config_loader import GraderConfig
from .local_runner import LocalRunner
from .models import (
    ArtifactPaths,
    EvaluationOutcome,
    ReferenceMaterial,
    RunResult,
    Submission,
)
from .output_classifier import OutputClassifier
from .results_writer import ResultsWriter
from .source_locator import locate_source


def find_submissions(submissions_dir: Path) -> list[Submission]:
    """
    Find all student submission directories.

    Args:
        submissions_dir: Path to directory containing student folders.

    Returns:
        List of Submission objects sorted by folder name.

    Raises:
        OSError: If the directory cannot be listed.
    """
    with os.scandir(submissions_dir) as it:
        entries = sorted(it, key=lambda entry: entry.name)

    return [
        Submission(student_id=entry.name, submission_path=Path(entry.path))
        for entry in entries
        if entry.is_dir(follow_symlinks=False)
    ]


class EvaluationPipeline:
    """
    Grades submissions sequentially.

    The build output and captured program output are the same two files for
    every submission, so evaluations must never overlap.
    """

    def __init__(
        self,
        builder: Builder,
        runner: LocalRunner,
        classifier: OutputClassifier,
        reference: ReferenceMaterial,
        artifacts: ArtifactPaths,
        source_extension: str = SOURCE_EXTENSION,
        strict_traversal: bool = False,
        verbose: bool = False,
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            builder: Compiles the located source file.
            runner: Executes the compiled program.
            classifier: Judges the captured output.
            reference: Fixed input and expected output.
            artifacts: Intermediate files reused across submissions.
            source_extension: Suffix of eligible source files.
            strict_traversal: Re-raise errors reading a submission folder
                instead of grading that submission as unreadable.
            verbose: Print per-stage detail.
        """
        self.builder = builder
        self.runner = runner
        self.classifier = classifier
        self.reference = reference
        self.artifacts = artifacts
        self.source_extension = source_extension
        self.strict_traversal = strict_traversal
        self.verbose = verbose

    @classmethod
    def from_config(cls, config: GraderConfig) -> "EvaluationPipeline":
        return cls(
            builder=Builder(config.compiler),
            runner=LocalRunner(
                timeout_seconds=config.timeout_seconds,
                kill_on_timeout=config.kill_on_timeout,
            ),
            classifier=OutputClassifier(config.comparator),
            reference=config.reference,
            artifacts=config.artifacts,
            source_extension=config.source_extension,
            strict_traversal=config.strict_traversal,
            verbose=config.verbose,
        )

    def evaluate(self, submission: Submission) -> EvaluationOutcome:
        """
        Grade a single submission.

        Args:
            submission: Submission to grade.

        Returns:
            The outcome of the first failing stage, or the classified tier.

        Raises:
            OSError: If the submission folder cannot be read and
                strict_traversal is set.
        """
        student_id = submission.student_id

        try:
            source = locate_source(submission.submission_path, self.source_extension)
        except OSError as e:
            if self.strict_traversal:
                raise
            return EvaluationOutcome.unreadable_submission(student_id, detail=str(e))

        if source is None:
            return EvaluationOutcome.no_source(student_id)

        if self.verbose:
            print(f"  Source: {_printable(str(source))}")
            command = " ".join(self.builder.command(source, self.artifacts.build_output))
            print(f"  Executing: {_printable(command)}")

        if not self.builder.build(source, self.artifacts.build_output):
            return EvaluationOutcome.build_failed(student_id)

        run_result = self.runner.run(
            self.artifacts.build_output,
            self.reference.input_file,
            self.artifacts.program_output,
        )
        if run_result is RunResult.TIMED_OUT:
            return EvaluationOutcome.timed_out(student_id)
        if run_result is RunResult.SETUP_ERROR:
            return EvaluationOutcome.run_setup_error(student_id)

        comparison = self.classifier.classify(
            self.artifacts.program_output,
            self.reference.correct_output_file,
        )
        if not comparison.recognized:
            return EvaluationOutcome.classification_error(student_id, detail=comparison.detail)

        return EvaluationOutcome.classified(student_id, comparison.tier)

    def run(self, submissions: list[Submission], writer: ResultsWriter) -> dict:
        """
        Grade every submission in order, writing each outcome immediately.

        Args:
            submissions: Submissions in discovery order.
            writer: Open results writer.

        Returns:
            Summary statistics from the writer.
        """
        try:
            for i, submission in enumerate(submissions, 1):
                print(f"\n[{i}/{len(submissions)}] Processing {_printable(submission.student_id)}...")

                outcome = self.evaluate(submission)
                writer.add_outcome(outcome)

                if outcome.detail:
                    print(f"  Warning: {_printable(outcome.detail)}")
                print(f"  Result: {outcome.grade} ({outcome.reason})")
        finally:
            self._remove_artifacts()

        return writer.statistics()

    def _remove_artifacts(self) -> None:
        """
        Remove the compiled program and captured output, ignoring files that are already gone.
        """
        for path in (self.artifacts.build_output, self.artifacts.program_output):
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                print(f"  Warning: Could not remove {path}: {e}")


def _printable(text: str) -> str:
    # Folder names that are not valid UTF-8 arrive as surrogate escapes
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "replace")

"""
Pydantic models for the C Batch Grader system.

Defines the submissions being graded, the result of each pipeline stage,
and the single outcome record produced per submission.
"""

from enum import Enum, IntEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .config import (
    BAD_OUTPUT,
    BAD_OUTPUT_GRADE,
    COMPARISON_ERROR,
    COMPILATION_ERROR,
    FAILURE_GRADE,
    GREAT_JOB,
    GREAT_JOB_GRADE,
    NO_C_FILE,
    RUN_SETUP_ERROR,
    SIMILAR_OUTPUT,
    SIMILAR_OUTPUT_GRADE,
    TIMEOUT,
    UNREADABLE_SUBMISSION,
)


class Tier(IntEnum):
    """
    Output similarity class reported by the comparator.

    Values are the comparator exit codes.
    """

    DIFFERENT = 1
    SIMILAR = 2
    IDENTICAL = 3

    @property
    def grade(self) -> int:
        return _TIER_GRADES[self]

    @property
    def reason(self) -> str:
        return _TIER_REASONS[self]


_TIER_GRADES = {
    Tier.DIFFERENT: BAD_OUTPUT_GRADE,
    Tier.SIMILAR: SIMILAR_OUTPUT_GRADE,
    Tier.IDENTICAL: GREAT_JOB_GRADE,
}

_TIER_REASONS = {
    Tier.DIFFERENT: BAD_OUTPUT,
    Tier.SIMILAR: SIMILAR_OUTPUT,
    Tier.IDENTICAL: GREAT_JOB,
}


class RunResult(str, Enum):
    """Result of executing a built program."""

    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    SETUP_ERROR = "setup_error"


class OutcomeKind(str, Enum):
    """Terminal state reached by one submission's pipeline."""

    NO_SOURCE = "no_source"
    BUILD_FAILED = "build_failed"
    TIMED_OUT = "timed_out"
    CLASSIFIED = "classified"
    RUN_SETUP_ERROR = "run_setup_error"
    CLASSIFICATION_ERROR = "classification_error"
    UNREADABLE_SUBMISSION = "unreadable_submission"


class Submission(BaseModel):
    """
    Represents a student's submission directory.

    Attributes:
        student_id: Student identifier (folder name).
        submission_path: Path to the submission directory.
    """

    model_config = ConfigDict(frozen=True)

    student_id: str = Field(..., description="Student identifier (folder name)")
    submission_path: Path = Field(..., description="Directory searched for source code")


class ReferenceMaterial(BaseModel):
    """
    Fixed input and expected output shared by every submission.

    Attributes:
        input_file: File fed to each program's standard input.
        correct_output_file: Expected output the comparator judges against.
    """

    model_config = ConfigDict(frozen=True)

    input_file: Path = Field(..., description="Program input file")
    correct_output_file: Path = Field(..., description="Reference output file")


class ArtifactPaths(BaseModel):
    """
    Intermediate files reused by every submission in a run.

    Attributes:
        build_output: Where the compiler writes the executable.
        program_output: Where the program's standard output is captured.
    """

    model_config = ConfigDict(frozen=True)

    build_output: Path = Field(..., description="Compiled executable path")
    program_output: Path = Field(..., description="Captured program output path")

    @classmethod
    def in_directory(cls, work_dir: Path, build_name: str, output_name: str) -> "ArtifactPaths":
        return cls(build_output=work_dir / build_name, program_output=work_dir / output_name)


class ComparisonResult(BaseModel):
    """
    Result from running the external comparator.

    Attributes:
        exit_code: Comparator exit status (negative when killed by a signal,
            None when it could not be started).
        tier: Output tier, or None when the exit status is not recognized.
        detail: Human readable explanation for unrecognized results.
    """

    exit_code: int | None = Field(default=None, description="Comparator exit status")
    tier: Tier | None = Field(default=None, description="Recognized output tier")
    detail: str = Field(default="", description="Explanation for unrecognized results")

    @property
    def recognized(self) -> bool:
        return self.tier is not None


class EvaluationOutcome(BaseModel):
    """
    Graded record for one submission.

    Use the named constructors so that grade and reason always match the kind.

    Attributes:
        student_id: Student identifier (folder name).
        kind: Terminal pipeline state.
        tier: Output tier for classified submissions.
        grade: Numeric grade written to the results file.
        reason: Machine readable reason code.
        detail: Extra context for console output (not written to results).
    """

    model_config = ConfigDict(frozen=True)

    student_id: str = Field(..., description="Student identifier")
    kind: OutcomeKind = Field(..., description="Terminal pipeline state")
    tier: Tier | None = Field(default=None, description="Output tier if classified")
    grade: int = Field(..., ge=0, le=100, description="Numeric grade")
    reason: str = Field(..., description="Reason code")
    detail: str = Field(default="", description="Extra context for console output")

    @classmethod
    def no_source(cls, student_id: str) -> "EvaluationOutcome":
        return cls(student_id=student_id, kind=OutcomeKind.NO_SOURCE, grade=FAILURE_GRADE, reason=NO_C_FILE)

    @classmethod
    def build_failed(cls, student_id: str) -> "EvaluationOutcome":
        return cls(
            student_id=student_id,
            kind=OutcomeKind.BUILD_FAILED,
            grade=FAILURE_GRADE,
            reason=COMPILATION_ERROR,
        )

    @classmethod
    def timed_out(cls, student_id: str) -> "EvaluationOutcome":
        return cls(student_id=student_id, kind=OutcomeKind.TIMED_OUT, grade=FAILURE_GRADE, reason=TIMEOUT)

    @classmethod
    def classified(cls, student_id: str, tier: Tier) -> "EvaluationOutcome":
        return cls(
            student_id=student_id,
            kind=OutcomeKind.CLASSIFIED,
            tier=tier,
            grade=tier.grade,
            reason=tier.reason,
        )

    @classmethod
    def run_setup_error(cls, student_id: str) -> "EvaluationOutcome":
        return cls(
            student_id=student_id,
            kind=OutcomeKind.RUN_SETUP_ERROR,
            grade=FAILURE_GRADE,
            reason=RUN_SETUP_ERROR,
        )

    @classmethod
    def classification_error(cls, student_id: str, detail: str = "") -> "EvaluationOutcome":
        return cls(
            student_id=student_id,
            kind=OutcomeKind.CLASSIFICATION_ERROR,
            grade=FAILURE_GRADE,
            reason=COMPARISON_ERROR,
            detail=detail,
        )

    @classmethod
    def unreadable_submission(cls, student_id: str, detail: str = "") -> "EvaluationOutcome":
        return cls(
            student_id=student_id,
            kind=OutcomeKind.UNREADABLE_SUBMISSION,
            grade=FAILURE_GRADE,
            reason=UNREADABLE_SUBMISSION,
            detail=detail,
        )

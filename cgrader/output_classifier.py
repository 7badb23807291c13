"""
Classification of program output using an external comparator.

The comparator judges the produced output against the reference output and
reports its verdict through its exit status.
"""

import subprocess
from pathlib import Path

from .config import DEFAULT_COMPARATOR
from .models import ComparisonResult, Tier


class OutputClassifier:
    """
    Maps the comparator's exit status onto an output tier.

    Exit status 1, 2 and 3 mean different, similar and identical output.
    Anything else is returned as an unrecognized result.
    """

    def __init__(self, comparator: Path = DEFAULT_COMPARATOR) -> None:
        """
        Initialize the classifier.

        Args:
            comparator: Path to the comparator executable.
        """
        self.comparator = comparator

    def classify(self, produced_output: Path, reference_output: Path) -> ComparisonResult:
        """
        Compare the produced output against the reference output.

        Args:
            produced_output: Output captured from the student's program.
            reference_output: Expected output.

        Returns:
            ComparisonResult with the recognized tier, or with tier None and
            an explanation when the comparator misbehaved.
        """
        cmd = [str(Path(self.comparator).resolve()), str(produced_output), str(reference_output)]

        try:
            process = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError as e:
            return ComparisonResult(detail=f"Cannot start comparator {self.comparator}: {e}")

        exit_code = process.returncode
        if exit_code < 0:
            return ComparisonResult(
                exit_code=exit_code,
                detail=f"Comparator killed by signal {-exit_code}",
            )

        try:
            tier = Tier(exit_code)
        except ValueError:
            return ComparisonResult(
                exit_code=exit_code,
                detail=f"Unexpected comparator exit code {exit_code}",
            )

        return ComparisonResult(exit_code=exit_code, tier=tier)

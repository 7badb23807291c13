"""
Results writer for recording every student's grade as it is produced.

Appends one CSV row per submission and keeps running totals for the
end-of-run summary.
"""

import csv
from collections import Counter
from pathlib import Path
from types import TracebackType

from .config import RESULTS_FILENAME
from .models import EvaluationOutcome


class ResultsWriter:
    """
    Writes graded records to the results file in the order they arrive.

    The file is opened once for the whole run. Every row is flushed before
    `add_outcome` returns so an interrupted run leaves only complete rows.
    Outcomes are not kept after they are written.
    """

    def __init__(self, results_path: Path | None = None) -> None:
        """
        Initialize the results writer.

        Args:
            results_path: File to write. Defaults to ./results.csv
        """
        self.results_path = results_path or Path(RESULTS_FILENAME)
        self.reason_counts: Counter[str] = Counter()
        self.total_records = 0
        self.grade_sum = 0
        self._file = None
        self._writer = None

    def open(self) -> "ResultsWriter":
        """
        Create or truncate the results file.
        """
        self.results_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.results_path, "w", newline="", encoding="utf-8", errors="surrogateescape")
        self._writer = csv.writer(self._file, lineterminator="\n")
        return self

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
            self._writer = None

    def __enter__(self) -> "ResultsWriter":
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def add_outcome(self, outcome: EvaluationOutcome) -> None:
        """
        Append one `identifier,grade,reason` row.

        Args:
            outcome: Graded record to write.

        Raises:
            RuntimeError: If the writer has not been opened.
        """
        if self._writer is None:
            raise RuntimeError("ResultsWriter is not open")

        self._writer.writerow([outcome.student_id, outcome.grade, outcome.reason])
        self._file.flush()

        self.total_records += 1
        self.grade_sum += outcome.grade
        self.reason_counts[outcome.reason] += 1

    def statistics(self) -> dict:
        """
        Calculate summary statistics for the rows written so far.

        Returns:
            Dictionary with statistics.
        """
        return _summarize(self.total_records, self.grade_sum, self.reason_counts)


def read_results(results_path: Path) -> list[tuple[str, int, str]]:
    """
    Load the rows of a results file.

    Args:
        results_path: Path to the results CSV file.

    Returns:
        List of (student_id, grade, reason) tuples in file order.

    Raises:
        ValueError: If a row does not have three fields or a numeric grade.
    """
    rows: list[tuple[str, int, str]] = []

    with open(results_path, "r", newline="", encoding="utf-8", errors="surrogateescape") as f:
        for line_number, row in enumerate(csv.reader(f), 1):
            if not row:
                continue
            if len(row) != 3:
                raise ValueError(f"{results_path}:{line_number}: expected 3 fields, got {len(row)}")
            student_id, grade, reason = row
            try:
                rows.append((student_id, int(grade), reason))
            except ValueError:
                raise ValueError(f"{results_path}:{line_number}: invalid grade {grade!r}") from None

    return rows


def summarize_results(rows: list[tuple[str, int, str]]) -> dict:
    """
    Calculate the same statistics as ResultsWriter for rows read from a file.
    """
    return _summarize(len(rows), sum(grade for _, grade, _ in rows), Counter(reason for _, _, reason in rows))


def _summarize(total: int, grade_sum: int, reason_counts: Counter) -> dict:
    if not total:
        return {}

    return {
        "total_students": total,
        "average_grade": grade_sum / total,
        "reasons": dict(sorted(reason_counts.items())),
    }

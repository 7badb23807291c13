"""
C Batch Grader: Compile, run and grade C homework submissions

Usage:
  main.py <config> [--timeout=SEC] [--results=PATH] [--comparator=PATH] [--verbose]
  main.py --summary=PATH
  main.py (-h | --help)

Arguments:
  <config>           Three-line text file (submissions dir, input file, correct
                     output file) or a YAML configuration file.

Options:
  --timeout=SEC      Seconds each program may run before it is graded TIMEOUT.
  --results=PATH     Results CSV file to write.
  --comparator=PATH  Comparator executable.
  --verbose          Print per-stage detail.
  --summary=PATH     Print statistics for an existing results file and exit.
  -h --help          Show this screen.
"""

import sys
from pathlib import Path

from docopt import docopt
from pydantic import ValidationError
import yaml

from cgrader.config_loader import GraderConfig, load_config
from cgrader.pipeline import EvaluationPipeline, find_submissions
from cgrader.results_writer import ResultsWriter, read_results, summarize_results


def print_summary(statistics: dict) -> None:
    """
    Print the end-of-run statistics.

    Args:
        statistics: Dictionary from ResultsWriter.statistics().
    """
    print("\n" + "=" * 60)
    print("GRADING COMPLETE")
    print("=" * 60)
    print(f"Total submissions processed: {statistics.get('total_students', 0)}")

    if statistics:
        print(f"Average grade: {statistics['average_grade']:.1f}")
        for reason, count in statistics["reasons"].items():
            print(f"  {reason}: {count}")


def apply_overrides(config: GraderConfig, arguments: dict) -> GraderConfig:
    """
    Apply command line options on top of the loaded configuration.
    """
    overrides = {}
    if arguments["--timeout"]:
        overrides["timeout_seconds"] = arguments["--timeout"]
    if arguments["--results"]:
        overrides["results_path"] = Path(arguments["--results"])
    if arguments["--comparator"]:
        overrides["comparator"] = Path(arguments["--comparator"])
    if arguments["--verbose"]:
        overrides["verbose"] = True

    if not overrides:
        return config
    # Re-validate the overridden values
    return GraderConfig(**{**config.model_dump(), **overrides})


def run_grading_pipeline(config: GraderConfig) -> dict:
    """
    Run the complete grading pipeline.

    Args:
        config: Validated grader configuration.

    Returns:
        Summary statistics of the written results.

    Raises:
        OSError: If the submissions directory cannot be listed, the results
            file cannot be created, or (with strict_traversal) a submission
            folder cannot be read.
    """
    print(f"\nScanning {config.submissions_dir} for submissions...")
    submissions = find_submissions(config.submissions_dir)
    print(f"Found {len(submissions)} submissions")

    if config.verbose:
        print(f"  Input: {config.input_file}")
        print(f"  Correct output: {config.correct_output_file}")
        print(f"  Comparator: {config.comparator}")
        print(f"  Timeout: {config.timeout_seconds}s")

    pipeline = EvaluationPipeline.from_config(config)

    with ResultsWriter(config.results_path) as writer:
        statistics = pipeline.run(submissions, writer)

    print(f"\nResults written to {config.results_path}")
    print_summary(statistics)
    return statistics


def main(argv: list[str] | None = None) -> int:
    """
    Main CLI entrypoint.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    arguments = docopt(__doc__, argv=argv)

    if arguments["--summary"]:
        try:
            rows = read_results(Path(arguments["--summary"]))
        except (OSError, ValueError) as e:
            print(f"Error reading results: {e}")
            return 1
        print_summary(summarize_results(rows))
        return 0

    config_path = Path(arguments["<config>"])

    try:
        config = apply_overrides(load_config(config_path), arguments)
        print(f"Loaded configuration from {config_path}")
    except (OSError, ValueError, ValidationError, yaml.YAMLError) as e:
        print(f"Error loading config: {e}")
        return 1

    if not config.submissions_dir.is_dir():
        print(f"Error: Submissions directory not found: {config.submissions_dir}")
        return 1

    try:
        run_grading_pipeline(config)
        return 0
    except KeyboardInterrupt:
        print("\nGrading interrupted by user.")
        return 1
    except Exception as e:
        print(f"\nError: {e}")
        if config.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())

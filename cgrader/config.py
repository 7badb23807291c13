"""
Configuration constants for the C Batch Grader system.
"""

from pathlib import Path


# Execution configuration
EXECUTION_TIMEOUT_SECONDS: int = 5

# Toolchain
DEFAULT_COMPILER: list[str] = ["gcc"]
DEFAULT_COMPARATOR: Path = Path("./comp.out")

# File patterns
SOURCE_EXTENSION: str = ".c"
COMPILED_FILENAME: str = "current.out"
PROGRAM_OUTPUT_FILENAME: str = "out.txt"
RESULTS_FILENAME: str = "results.csv"
YAML_SUFFIXES: list[str] = [".yml", ".yaml"]

# Reason codes written to the results file
NO_C_FILE: str = "NO_C_FILE"
COMPILATION_ERROR: str = "COMPILATION_ERROR"
TIMEOUT: str = "TIMEOUT"
BAD_OUTPUT: str = "BAD_OUTPUT"
SIMILAR_OUTPUT: str = "SIMILAR_OUTPUT"
GREAT_JOB: str = "GREAT_JOB"
COMPARISON_ERROR: str = "COMPARISON_ERROR"
RUN_SETUP_ERROR: str = "RUN_SETUP_ERROR"
UNREADABLE_SUBMISSION: str = "UNREADABLE_SUBMISSION"

# Grades per output tier (Different, Similar, Identical)
BAD_OUTPUT_GRADE: int = 60
SIMILAR_OUTPUT_GRADE: int = 80
GREAT_JOB_GRADE: int = 100
FAILURE_GRADE: int = 0

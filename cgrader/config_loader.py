"""
Configuration loader for the C Batch Grader system.

Handles parsing and validation of the three-line text configuration file
and of YAML configuration files.
"""

from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import BaseModel, Field

from .config import (
    COMPILED_FILENAME,
    DEFAULT_COMPARATOR,
    DEFAULT_COMPILER,
    EXECUTION_TIMEOUT_SECONDS,
    PROGRAM_OUTPUT_FILENAME,
    RESULTS_FILENAME,
    SOURCE_EXTENSION,
    YAML_SUFFIXES,
)
from .models import ArtifactPaths, ReferenceMaterial

LEGACY_FIELDS: list[str] = ["submissions_dir", "input_file", "correct_output_file"]


class GraderConfig(BaseModel):
    """
    Configuration model for the grader.
    """
    submissions_dir: Path = Field(..., description="Path to directory containing one folder per student")
    input_file: Path = Field(..., description="File fed to every program's standard input")
    correct_output_file: Path = Field(..., description="Reference output the comparator judges against")

    comparator: Path = Field(DEFAULT_COMPARATOR, description="Path to the comparator executable")
    compiler: list[str] = Field(default_factory=lambda: list(DEFAULT_COMPILER), description="Compiler command prefix")
    timeout_seconds: float = Field(EXECUTION_TIMEOUT_SECONDS, gt=0, description="Wall-clock limit per program")
    results_path: Path = Field(Path(RESULTS_FILENAME), description="Results CSV file (truncated on each run)")
    work_dir: Path = Field(Path("."), description="Directory for the compiled program and captured output")
    source_extension: str = Field(SOURCE_EXTENSION, description="Suffix of eligible source files")

    # Behaviour flags
    kill_on_timeout: bool = Field(True, description="Kill programs that exceed the timeout")
    strict_traversal: bool = Field(False, description="Abort the run if a submission folder cannot be read")
    verbose: bool = Field(False, description="Enable verbose output")

    @property
    def reference(self) -> ReferenceMaterial:
        return ReferenceMaterial(input_file=self.input_file, correct_output_file=self.correct_output_file)

    @property
    def artifacts(self) -> ArtifactPaths:
        return ArtifactPaths.in_directory(self.work_dir, COMPILED_FILENAME, PROGRAM_OUTPUT_FILENAME)


def load_config(config_path: Path) -> GraderConfig:
    """
    Load configuration from a text or YAML file.

    Files ending in `.yml` or `.yaml` are parsed as YAML; anything else is
    read as three lines: submissions directory, input file, correct output
    file.

    Args:
        config_path: Path to the configuration file.

    Returns:
        GraderConfig object with loaded values.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If a text config file has fewer than three lines.
        yaml.YAMLError: If config file is invalid YAML.
        ValidationError: If config data is invalid.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    if config_path.suffix.lower() in YAML_SUFFIXES:
        return GraderConfig(**_read_yaml(config_path))

    return GraderConfig(**_read_lines(config_path))


def _read_lines(config_path: Path) -> Dict[str, Any]:
    """
    Parse the three-line text format. Paths are kept as written.
    """
    with open(config_path, "r", encoding="utf-8") as f:
        lines = f.read().splitlines()

    if len(lines) < len(LEGACY_FIELDS) or not all(lines[: len(LEGACY_FIELDS)]):
        raise ValueError(
            f"{config_path} must contain {len(LEGACY_FIELDS)} lines: "
            "submissions directory, input file, correct output file"
        )

    return dict(zip(LEGACY_FIELDS, lines))


def _read_yaml(config_path: Path) -> Dict[str, Any]:
    """
    Parse a YAML config, resolving relative paths against its directory.
    """
    with open(config_path, "r", encoding="utf-8") as f:
        config_data = yaml.safe_load(f)

    if not config_data:
        raise ValueError(f"Configuration file is empty: {config_path}")
    if not isinstance(config_data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {config_path}")

    config_dir = config_path.parent

    for path_field in ["submissions_dir", "input_file", "correct_output_file", "comparator", "results_path", "work_dir"]:
        if path_field in config_data and config_data[path_field]:
            path = Path(config_data[path_field])
            if not path.is_absolute():
                config_data[path_field] = config_dir / path

    # Allow "gcc -Wall" as well as a list
    compiler = config_data.get("compiler")
    if isinstance(compiler, str):
        config_data["compiler"] = compiler.split()

    return config_data

"""
Shared fixtures: stand-in compiler and comparator executables.

The fake compiler "compiles" a source file by checking that it is valid
Python and writing it out as an executable script, so submissions in these
tests are Python programs saved with a `.c` name.
"""

import stat
import sys
from pathlib import Path

import pytest

from cgrader.builder import Builder
from cgrader.local_runner import LocalRunner
from cgrader.models import ArtifactPaths, ReferenceMaterial
from cgrader.output_classifier import OutputClassifier
from cgrader.pipeline import EvaluationPipeline

FAKE_COMPILER = """
import os
import sys

args = sys.argv[1:]
output = args[args.index("-o") + 1]
source = args[-1]

with open(source) as f:
    code = f.read()
try:
    compile(code, source, "exec")
except SyntaxError as e:
    print(e, file=sys.stderr)
    sys.exit(1)

with open(output, "w") as f:
    f.write("#!" + sys.executable + "\\n" + code)
os.chmod(output, 0o755)
"""

# Identical -> 3, equal after collapsing whitespace -> 2, otherwise -> 1
FAKE_COMPARATOR = """
import sys

with open(sys.argv[1]) as f:
    produced = f.read()
with open(sys.argv[2]) as f:
    reference = f.read()

if produced == reference:
    sys.exit(3)
if produced.split() == reference.split():
    sys.exit(2)
sys.exit(1)
"""

ADDER = """
a, b = map(int, input().split())
print(a + b)
"""


def write_script(path: Path, body: str) -> Path:
    """Write an executable Python script."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"#!{sys.executable}\n{body}")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def add_submission(submissions_dir: Path, student_id: str, files: dict[str, str] | None = None) -> Path:
    """Create a student folder holding the given relative files."""
    folder = submissions_dir / student_id
    folder.mkdir(parents=True)
    for name, content in (files or {}).items():
        path = folder / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return folder


@pytest.fixture
def fake_compiler(tmp_path: Path) -> Path:
    return write_script(tmp_path / "bin" / "fakecc", FAKE_COMPILER)


@pytest.fixture
def fake_comparator(tmp_path: Path) -> Path:
    return write_script(tmp_path / "bin" / "comp.out", FAKE_COMPARATOR)


@pytest.fixture
def reference(tmp_path: Path) -> ReferenceMaterial:
    input_file = tmp_path / "input.txt"
    input_file.write_text("3 4\n")
    correct_output_file = tmp_path / "expected.txt"
    correct_output_file.write_text("7\n")
    return ReferenceMaterial(input_file=input_file, correct_output_file=correct_output_file)


@pytest.fixture
def submissions_dir(tmp_path: Path) -> Path:
    path = tmp_path / "submissions"
    path.mkdir()
    return path


@pytest.fixture
def artifacts(tmp_path: Path) -> ArtifactPaths:
    work_dir = tmp_path / "work"
    work_dir.mkdir()
    return ArtifactPaths.in_directory(work_dir, "current.out", "out.txt")


@pytest.fixture
def pipeline(fake_compiler, fake_comparator, reference, artifacts) -> EvaluationPipeline:
    return EvaluationPipeline(
        builder=Builder([str(fake_compiler)]),
        runner=LocalRunner(timeout_seconds=1),
        classifier=OutputClassifier(fake_comparator),
        reference=reference,
        artifacts=artifacts,
    )

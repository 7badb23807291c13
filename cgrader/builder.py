"""
Compilation of submission source files.

Runs the external compiler and reports only whether it succeeded.
"""

import subprocess
from pathlib import Path

from .config import DEFAULT_COMPILER


class Builder:
    """
    Compiles one source file into an executable.

    The compiler's diagnostics are discarded; success is decided by its exit
    status alone.
    """

    def __init__(self, compiler: list[str] | None = None) -> None:
        """
        Initialize the builder.

        Args:
            compiler: Compiler command prefix. `-o <output> <source>` is
                appended to it. Defaults to `gcc`.
        """
        self.compiler = list(compiler or DEFAULT_COMPILER)

    def command(self, source_path: Path, output_path: Path) -> list[str]:
        return [*self.compiler, "-o", str(output_path), str(source_path)]

    def build(self, source_path: Path, output_path: Path) -> bool:
        """
        Compile a source file.

        Args:
            source_path: Source file to compile.
            output_path: Executable to write (overwritten if present).

        Returns:
            True if the compiler exited normally with status 0.
        """
        try:
            process = subprocess.run(
                self.command(source_path, output_path),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError:
            return False

        # Death by signal shows up as a negative return code
        return process.returncode == 0

"""
Local execution runner for compiled student programs.

Executes the program on the host machine with its standard input and
output redirected to files, bounded by a wall-clock timeout.
"""

import os
import signal
import subprocess
from pathlib import Path

from .config import EXECUTION_TIMEOUT_SECONDS
from .models import RunResult


class LocalRunner:
    """
    Runs a compiled program locally on the host machine.

    Uses subprocess to execute the program in its own session so that the
    whole process group can be stopped when it runs past the deadline.
    """

    def __init__(
        self,
        timeout_seconds: float = EXECUTION_TIMEOUT_SECONDS,
        kill_on_timeout: bool = True,
    ) -> None:
        """
        Initialize the Local runner.

        Args:
            timeout_seconds: Maximum execution time per program.
            kill_on_timeout: Kill and reap a program that runs past the
                timeout. When False the program is left running.
        """
        self.timeout_seconds = timeout_seconds
        self.kill_on_timeout = kill_on_timeout

    def run(self, executable: Path, input_path: Path, output_path: Path) -> RunResult:
        """
        Run a compiled program against the fixed input.

        A crash counts as completion; only a program still alive at the
        deadline is reported as timed out.

        Args:
            executable: Program to execute, started without arguments.
            input_path: File connected to the program's standard input.
            output_path: File receiving the program's standard output
                (created or truncated).

        Returns:
            RunResult.COMPLETED, RunResult.TIMED_OUT, or RunResult.SETUP_ERROR
            when the redirection files cannot be opened or the program cannot
            be started.
        """
        try:
            stdin = open(input_path, "rb")
        except OSError as e:
            print(f"  Warning: Cannot open input file {input_path}: {e}")
            return RunResult.SETUP_ERROR

        with stdin:
            try:
                stdout = open(output_path, "wb")
            except OSError as e:
                print(f"  Warning: Cannot open output file {output_path}: {e}")
                return RunResult.SETUP_ERROR

            with stdout:
                try:
                    process = subprocess.Popen(
                        [str(Path(executable).resolve())],
                        stdin=stdin,
                        stdout=stdout,
                        stderr=subprocess.DEVNULL,
                        close_fds=True,
                        start_new_session=True,
                    )
                except OSError as e:
                    print(f"  Warning: Cannot start {executable}: {e}")
                    return RunResult.SETUP_ERROR

        try:
            process.wait(timeout=self.timeout_seconds)
        except subprocess.TimeoutExpired:
            if self.kill_on_timeout:
                self._terminate(process)
            return RunResult.TIMED_OUT

        return RunResult.COMPLETED

    def _terminate(self, process: subprocess.Popen) -> None:
        """
        Kill the program's process group and reap the program.
        """
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
        except PermissionError:
            process.kill()
        process.wait()

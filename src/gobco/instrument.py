"""Interface to the instrumentation engine.

The engine rewrites the Go files of a package so that each condition
counts how often it evaluates to true and false. At program exit (or at
every evaluation, with --immediately) the instrumented code writes these
counts as JSON to the file named by the GOBCO_STATS environment variable.
"""

import os
import shutil
import subprocess
from dataclasses import dataclass

from gobco.errors import GobcoError

INSTRUMENTER_ENV = "GOBCO_INSTRUMENTER"
INSTRUMENTER_NAME = "gobco-instrument"


@dataclass(frozen=True)
class InstrumentOptions:
    immediately: bool = False
    list_all: bool = False
    cover_test: bool = False


class Instrumenter:
    """Base class for instrumentation engines."""

    def __init__(self, options=None):
        self.options = options or InstrumentOptions()

    def instrument(self, src_dir, single_file, dst_dir):
        """Write the instrumented code from src_dir into dst_dir.

        If single_file is not empty, only that file of src_dir is
        instrumented.
        """
        raise NotImplementedError


class CommandInstrumenter(Instrumenter):
    """Runs an external instrumentation engine executable."""

    def __init__(self, executable, options=None, timeout=300):
        super().__init__(options)
        self.executable = executable
        self.timeout = timeout

    def command(self, src_dir, single_file, dst_dir):
        cmd = [self.executable]
        if self.options.immediately:
            cmd.append("--immediately")
        if self.options.list_all:
            cmd.append("--list-all")
        if self.options.cover_test:
            cmd.append("--cover-test")
        if single_file:
            cmd.extend(["--file", single_file])
        cmd.extend([src_dir, dst_dir])
        return cmd

    def instrument(self, src_dir, single_file, dst_dir):
        cmd = self.command(src_dir, single_file, dst_dir)
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise GobcoError(
                f"instrumentation engine not found at {self.executable}. "
                f"Use --instrumenter or set {INSTRUMENTER_ENV}."
            )
        except subprocess.TimeoutExpired:
            raise GobcoError(f"Instrumentation of {src_dir} timed out")

        if result.returncode != 0:
            raise GobcoError(
                f"instrumentation of {src_dir} failed: {result.stderr.strip()}"
            )


def find_instrumenter(explicit=None, environ=None):
    """Locate the instrumentation engine executable.

    Search order:
    1. the explicitly given path
    2. the GOBCO_INSTRUMENTER environment variable
    3. gobco-instrument in PATH
    """
    if explicit:
        return explicit
    environ = os.environ if environ is None else environ
    from_env = environ.get(INSTRUMENTER_ENV)
    if from_env:
        return from_env
    return shutil.which(INSTRUMENTER_NAME)

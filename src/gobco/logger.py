# Output for a gobco run: regular output on stdout, progress and
# errors on stderr.

import sys


class Logger:
    """Writes to the two output streams of a single gobco invocation."""

    def __init__(self, stdout=None, stderr=None, verbose=False):
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr
        self.verbose = verbose

    def outf(self, fmt, *args):
        print(fmt % args if args else fmt, file=self.stdout)

    def errf(self, fmt, *args):
        print(fmt % args if args else fmt, file=self.stderr)

    def verbosef(self, fmt, *args):
        if self.verbose:
            self.errf(fmt, *args)

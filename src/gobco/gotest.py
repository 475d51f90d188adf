"""Run 'go test' on the instrumented copy of a package."""

import os
import subprocess

STATS_ENV = "GOBCO_STATS"


def _passthrough(stream):
    """Return stream if the child process can write to it directly.

    In-memory streams have no file descriptor; for them the child keeps
    writing to the inherited descriptor instead.
    """
    try:
        stream.fileno()
    except (AttributeError, OSError, ValueError):
        return None
    stream.flush()
    return stream


class GoTest:
    """Builds and runs the 'go test' command with the proper arguments."""

    def __init__(self, go="go"):
        self.go = go

    def args(self, verbose, extra_args):
        args = [self.go, "test"]

        if verbose:
            # Without -v, most of the test output is suppressed.
            args.append("-v")

        # The instrumented files are in a new directory on every run, so
        # the test cache never applies and only costs time.
        args.extend(["-test.count", "1"])

        args.append(".")

        # 'go test' accepts flags even after the packages.
        args.extend(extra_args)

        return args

    def env(self, tmpdir, gopaths, stats_filename, environ=None):
        """Return the environment for 'go test'.

        A non-empty gopaths means the package is in GOPATH, in which case
        the workspace's own GOPATH root comes first and module mode is
        switched off. For modules, GOPATH stays as it is.
        """
        env = dict(os.environ if environ is None else environ)

        if gopaths:
            gopath_dir = os.path.join(tmpdir, "gopath")
            env["GOPATH"] = gopath_dir + os.pathsep + gopaths
            env["GO111MODULE"] = "off"

        env[STATS_ENV] = stats_filename
        return env

    def run(self, arg, extra_args, verbose, gopaths, stats_filename, workspace, log):
        """Run the tests and return the exit code for gobco, 0 or 1.

        The output of 'go test' goes directly to the streams of log. A failing
        test is a regular outcome, it is not retried.
        """
        args = self.args(verbose, extra_args)
        cwd = workspace.resolve(arg.instr_dir)
        env = self.env(workspace.tmpdir, gopaths, stats_filename)

        cmdline = " ".join(args)
        log.verbosef('Running "%s" in "%s"', cmdline, cwd)

        try:
            result = subprocess.run(
                args,
                cwd=cwd,
                env=env,
                stdout=_passthrough(log.stdout),
                stderr=_passthrough(log.stderr),
            )
        except OSError as e:
            log.errf("Error: cannot run %s: %s", args[0], e)
            return 1

        if result.returncode != 0:
            log.errf("Error: %s exited with code %d", cmdline, result.returncode)
            return 1

        log.verbosef("Finished %s", cmdline)
        return 0

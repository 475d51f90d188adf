#!/usr/bin/env python3
"""Command line interface for gobco.

Measures condition coverage of a single Go package: the package is copied
to a private temporary directory, instrumented there, tested with
'go test', and finally the coverage of each condition is reported.
"""

import argparse
import sys
from dataclasses import dataclass, field

from gobco._version import __version__
from gobco.errors import GobcoError, UsageError
from gobco.gotest import GoTest
from gobco.instrument import (
    INSTRUMENTER_ENV,
    CommandInstrumenter,
    InstrumentOptions,
    find_instrumenter,
)
from gobco.logger import Logger
from gobco.report import print_report
from gobco.resolver import classify_args, gopaths
from gobco.stage import stage, stats_filename
from gobco.workspace import Workspace


class _ArgumentParser(argparse.ArgumentParser):
    """Reports usage errors to the caller instead of exiting."""

    def error(self, message):
        raise UsageError(message)


@dataclass
class Options:
    packages: list = field(default_factory=list)
    immediately: bool = False
    keep: bool = False
    list_all: bool = False
    stats: str = None
    test_args: list = field(default_factory=list)
    verbose: bool = False
    cover_test: bool = False
    instrumenter: str = None


def build_parser(prog="gobco"):
    parser = _ArgumentParser(
        prog=prog,
        description="Measure the condition coverage of a Go package",
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument(
        "--help", action="store_true", help="Print the available command line options"
    )
    parser.add_argument(
        "--immediately",
        action="store_true",
        help="Persist the coverage immediately at each check point",
    )
    parser.add_argument(
        "--keep", action="store_true", help="Don't remove the temporary working directory"
    )
    parser.add_argument(
        "--list-all",
        action="store_true",
        help="At finish, print also those conditions that are fully covered",
    )
    parser.add_argument(
        "--stats", metavar="FILE", default=None,
        help="Load and persist the JSON coverage data to this file",
    )
    parser.add_argument(
        "--test",
        dest="test_args",
        metavar="OPTION",
        action="append",
        default=[],
        help='Pass the option to "go test", such as --test=-vet=off (repeatable)',
    )
    parser.add_argument("--verbose", action="store_true", help="Show progress messages")
    parser.add_argument(
        "--cover-test", action="store_true", help="Cover the test code as well"
    )
    parser.add_argument(
        "--instrumenter",
        default=None,
        help=f"Path to the instrumentation engine (default: ${INSTRUMENTER_ENV}, "
        "then gobco-instrument in PATH)",
    )
    parser.add_argument("--version", action="store_true", help="Print the gobco version")
    parser.add_argument("packages", nargs="*", help="The package directory or Go file")
    return parser


def parse_command_line(argv, log):
    """Parse argv (without the program name).

    Returns the Options, or None if the request has already been handled
    completely, as for --help and --version.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.help:
        parser.print_help(file=log.stdout)
        return None

    if args.version:
        log.outf("%s", __version__)
        return None

    if len(args.packages) > 1:
        raise UsageError("checking multiple packages is not supported")

    options = Options(**{k: v for k, v in vars(args).items() if k not in ("help", "version")})
    log.verbose = options.verbose
    return options


def run(options, log):
    """Stage, instrument and test the package, then print the coverage.

    Returns the exit code.
    """
    arg = classify_args(options.packages)

    executable = find_instrumenter(options.instrumenter)
    if executable is None:
        raise GobcoError(
            "instrumentation engine not found. Use --instrumenter or set "
            f"{INSTRUMENTER_ENV}."
        )
    instrumenter = CommandInstrumenter(
        executable,
        InstrumentOptions(
            immediately=options.immediately,
            list_all=options.list_all,
            cover_test=options.cover_test,
        ),
    )

    workspace = Workspace.create(log)
    try:
        stats = stats_filename(options.stats, workspace)
        stage(arg, workspace, instrumenter, log)

        exit_code = GoTest().run(
            arg,
            options.test_args,
            options.verbose,
            "" if arg.module else gopaths(),
            stats,
            workspace,
            log,
        )

        print_report(stats, options.list_all, log)
        return exit_code
    finally:
        workspace.clean_up(options.keep)


def gobco_main(argv, stdout=None, stderr=None):
    log = Logger(stdout, stderr)
    try:
        options = parse_command_line(argv, log)
        if options is None:
            return 0
        return run(options, log)
    except UsageError as e:
        log.errf("Error: %s", e)
        log.errf("usage: gobco [options] package")
        return 2
    except GobcoError as e:
        log.errf("Error: %s", e)
        return 1


def main():
    sys.exit(gobco_main(sys.argv[1:]))


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
# Reporting for gobco condition coverage data.
# Reads the JSON counts written by the instrumented code and prints
# which conditions were not evaluated to both true and false.

import argparse
import json
import sys
from dataclasses import dataclass

from gobco.errors import GobcoError
from gobco.logger import Logger

# Keyed by lowercase name; like Go's encoding/json, keys match
# case-insensitively.
FIELDS = {
    "start": ("start", str),
    "code": ("code", str),
    "truecount": ("true_count", int),
    "falsecount": ("false_count", int),
}

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}


@dataclass(frozen=True)
class Condition:
    start: str = ""
    code: str = ""
    true_count: int = 0
    false_count: int = 0

    @property
    def fully_covered(self):
        return self.true_count > 0 and self.false_count > 0


def _decode_condition(index, obj):
    if not isinstance(obj, dict):
        raise GobcoError(f"condition {index}: expected an object, got {type(obj).__name__}")

    kwargs = {}
    for key, value in obj.items():
        if key.lower() not in FIELDS:
            raise GobcoError(f"condition {index}: unknown field {key!r}")
        attr, typ = FIELDS[key.lower()]
        # bool is a subclass of int, but true is no count.
        if not isinstance(value, typ) or isinstance(value, bool):
            raise GobcoError(f"condition {index}: field {key!r} must be of type {typ.__name__}")
        if typ is int and value < 0:
            raise GobcoError(f"condition {index}: field {key!r} must not be negative")
        kwargs[attr] = value
    return Condition(**kwargs)


def load(filename):
    """Load the conditions from the JSON file written by the instrumented code.

    Unknown fields are rejected, so that a newer file format is noticed
    instead of silently losing data.
    """
    try:
        with open(filename, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise GobcoError(f"cannot read {filename}: {e}") from e
    except json.JSONDecodeError as e:
        raise GobcoError(f"cannot parse {filename}: {e}") from e

    if data is None:
        return []
    if not isinstance(data, list):
        raise GobcoError(f"{filename}: expected a JSON array of conditions")
    return [_decode_condition(i, obj) for i, obj in enumerate(data)]


def count_evaluated(conds):
    """Count the outcomes that were observed at least once, two per condition."""
    cnt = 0
    for c in conds:
        if c.true_count > 0:
            cnt += 1
        if c.false_count > 0:
            cnt += 1
    return cnt


def _capped(count):
    if count > 1:
        return 2
    return count


def quote(s):
    r"""Quote s the way Go's %q verb does.

    Control characters are written as \xNN, other non-printable
    characters as \uNNNN or \UNNNNNNNN.
    """
    out = []
    for ch in s:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ch.isprintable():
            out.append(ch)
        elif ord(ch) < 0x80:
            out.append(f"\\x{ord(ch):02x}")
        elif ord(ch) <= 0xFFFF:
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(f"\\U{ord(ch):08x}")
    return '"' + "".join(out) + '"'


def format_condition(cond):
    t = cond.true_count
    f = cond.false_count

    wording = {
        0: "was never evaluated",
        1: "was once false but never true",
        2: f"was {f} times false but never true",
        3: "was once true but never false",
        4: "was once true and once false",
        5: f"was once true and {f} times false",
        6: f"was {t} times true but never false",
        7: f"was {t} times true and once false",
        8: f"was {t} times true and {f} times false",
    }[3 * _capped(t) + _capped(f)]

    return f"{cond.start}: condition {quote(cond.code)} {wording}"


def report(conds, list_all=False):
    """Return the report lines: a blank line, the summary, the details.

    Fully covered conditions only count in the summary, unless list_all
    is set. The conditions keep their order.
    """
    lines = ["", f"Branch coverage: {count_evaluated(conds)}/{len(conds) * 2}"]
    for cond in conds:
        if not list_all and cond.fully_covered:
            continue
        lines.append(format_condition(cond))
    return lines


def print_report(filename, list_all, log):
    for line in report(load(filename), list_all):
        log.outf("%s", line)


def main():
    parser = argparse.ArgumentParser(
        description="Print the condition coverage from a gobco stats file"
    )
    parser.add_argument("stats_file", help="JSON file written by the instrumented code")
    parser.add_argument(
        "--list-all", action="store_true", help="Also list fully covered conditions"
    )

    args = parser.parse_args()

    log = Logger()
    try:
        print_report(args.stats_file, args.list_all, log)
    except GobcoError as e:
        log.errf("Error: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()

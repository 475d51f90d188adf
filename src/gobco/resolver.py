"""Decide how a command line argument is copied and instrumented.

Go code lives either in a module, which is identified by a go.mod file in
the package directory or one of its parents, or in the traditional GOPATH
layout, in which packages are found below the 'src' directory of one of
the GOPATH roots.

A module is copied as a whole, so that go.mod travels with it, to a
randomly named directory outside 'gopath/'. A GOPATH package is copied by
itself to 'gopath/src/...' in the workspace, which is then put in front of
the original GOPATH when running the tests.

In both cases the instrumented directory corresponds to the original
package directory, so that the source positions that the instrumented code
records still make sense to the user.
"""

import os
from dataclasses import dataclass

from gobco.errors import UsageError
from gobco.workspace import random_hex

MODULE_FILE = "go.mod"


@dataclass(frozen=True)
class ArgInfo:
    """How a single command line argument is handled.

    If the argument is a file, only that file is instrumented, but its
    whole directory is copied anyway.
    """

    # From the command line, with the separators of the host.
    arg: str

    # Either arg if it is a directory, or its containing directory.
    # This is the directory from which the code is instrumented, and the
    # paths to its files end up in the coverage output.
    arg_dir: str

    # Whether arg is in a module (True) or in GOPATH (False).
    module: bool

    # The directory that is copied to the workspace; for modules it is
    # the module root, for GOPATH packages the package directory.
    copy_src: str

    # The copy destination, relative to the workspace.
    copy_dst: str

    # The single file to instrument, or "" for the whole package.
    instr_file: str

    # Where the instrumented code is saved and 'go test' runs, relative
    # to the workspace.
    instr_dir: str


def gopaths(environ=None):
    """Return the GOPATH list, defaulting to ~/go like the go tool."""
    environ = os.environ if environ is None else environ
    value = environ.get("GOPATH", "")
    if value:
        return value
    return os.path.join(os.path.expanduser("~"), "go")


def find_in_module(dir):
    """Find the module that contains dir.

    Returns (module_root, rel), where rel is the path from module_root to
    dir, or None if dir is not inside a module.
    """
    abs_dir = os.path.abspath(dir)

    current = abs_dir
    while True:
        try:
            os.lstat(os.path.join(current, MODULE_FILE))
        except OSError:
            pass
        else:
            rel = os.path.relpath(abs_dir, current)
            root = dir if rel == "." else current
            return root, rel

        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


def find_in_gopath(dir, gopath_list):
    """Return dir relative to the first matching GOPATH root, or None.

    The first root in which dir is below 'src' wins, even if a later root
    matches more specifically. This is how the go tool itself picks the
    root.
    """
    abs_dir = os.path.abspath(dir)

    for gopath in gopath_list.split(os.pathsep):
        if not gopath:
            continue
        try:
            rel = os.path.relpath(abs_dir, os.path.abspath(gopath))
        except ValueError:
            # Different drives on Windows.
            continue
        if rel == "src" or rel.startswith("src" + os.sep):
            return rel
    return None


def classify(arg, environ=None):
    """Determine how to copy and instrument arg.

    Raises UsageError if arg is neither inside a module nor inside GOPATH.
    """
    is_dir = os.path.isdir(arg)

    dir = arg
    base = ""
    if not is_dir:
        dir = os.path.dirname(arg) or "."
        base = os.path.basename(arg)

    found = find_in_module(dir)
    if found is not None:
        module_root, module_rel = found
        copy_dst = "module-" + random_hex(8)  # Must be outside 'gopath/'.
        instr_dir = copy_dst if module_rel == "." else os.path.join(copy_dst, module_rel)
        return ArgInfo(
            arg=arg,
            arg_dir=dir,
            module=True,
            copy_src=module_root,
            copy_dst=copy_dst,
            instr_file=base,
            instr_dir=instr_dir,
        )

    rel_dir = find_in_gopath(dir, gopaths(environ))
    if rel_dir is not None:
        rel_dir = os.path.join("gopath", rel_dir)
        return ArgInfo(
            arg=arg,
            arg_dir=dir,
            module=False,
            copy_src=dir,
            copy_dst=rel_dir,
            instr_file=base,
            instr_dir=rel_dir,
        )

    raise UsageError(f'argument "{arg}" must be inside a Go module or GOPATH')


def classify_args(args, environ=None):
    """Classify the positional arguments; only a single one is supported."""
    if not args:
        args = ["."]
    if len(args) > 1:
        raise UsageError("checking multiple packages is not supported")
    return classify(args[0].replace("/", os.sep), environ)

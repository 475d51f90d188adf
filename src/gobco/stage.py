"""Copy the source into the workspace and instrument the copy."""

import os

from gobco.workspace import STATS_BASENAME, copy_dir


def stats_filename(requested, workspace):
    """Return the absolute path of the file that receives the counts.

    Without --stats the file is private to the workspace.
    """
    if requested:
        return os.path.abspath(requested)
    return workspace.resolve(STATS_BASENAME)


def stage(arg, workspace, instrumenter, log):
    """Copy arg.copy_src to the workspace, then instrument the copy.

    Some of the copied files are overwritten by their instrumented
    versions.
    """
    dst_dir = workspace.resolve(arg.copy_dst)
    log.verbosef("Copying %s to %s", arg.copy_src, dst_dir)
    copy_dir(arg.copy_src, dst_dir)

    instr_dst = workspace.resolve(arg.instr_dir)
    instrumenter.instrument(arg.arg_dir, arg.instr_file, instr_dst)
    log.verbosef("Instrumented %s to %s", arg.arg, instr_dst)

"""The private temporary directory in which a gobco run takes place.

Each invocation gets its own directory with a random suffix, so that
several runs, even against the same package, never share any files.
"""

import os
import secrets
import shutil
import tempfile

from gobco.errors import GobcoError

STATS_BASENAME = "gobco-counts.json"


def random_hex(nbytes):
    """Return 2*nbytes random lowercase hex digits."""
    return secrets.token_hex(nbytes)


def _ignore_special(dir, names):
    """Name the entries that are neither real directories nor regular files."""
    ignored = []
    for name in names:
        path = os.path.join(dir, name)
        if os.path.islink(path) or not (os.path.isdir(path) or os.path.isfile(path)):
            ignored.append(name)
    return ignored


def copy_dir(src, dst):
    """Copy the directory tree src to dst, keeping its structure.

    Only directories and regular files are copied; symbolic links,
    including dangling ones and loops, and special files are skipped.
    """
    try:
        shutil.copytree(src, dst, ignore=_ignore_special, dirs_exist_ok=True)
    except OSError as e:
        raise GobcoError(f"cannot copy {src} to {dst}: {e}") from e


class Workspace:
    """A uniquely named temporary root; all staged files live below it."""

    def __init__(self, tmpdir, log):
        self.tmpdir = tmpdir
        self.log = log

    @classmethod
    def create(cls, log, parent=None):
        parent = parent or tempfile.gettempdir()
        tmpdir = os.path.join(parent, "gobco-" + random_hex(8))
        try:
            os.makedirs(tmpdir)
        except OSError as e:
            raise GobcoError(f"cannot create {tmpdir}: {e}") from e
        log.verbosef("The temporary working directory is %s", tmpdir)
        return cls(tmpdir, log)

    def resolve(self, rel):
        """Return the absolute path of rel, which uses '/' as separator."""
        return os.path.join(self.tmpdir, *rel.split("/"))

    def clean_up(self, keep):
        if keep:
            self.log.errf("")
            self.log.errf("the temporary files are in %s", self.tmpdir)
            return
        try:
            shutil.rmtree(self.tmpdir)
        except OSError as e:
            self.log.verbosef("%s", e)

"""Shared fixtures for the gobco tests.

No Go toolchain or instrumentation engine is needed: subprocess.run is
replaced by a fake that records the commands and, for 'go test', writes
the stats file the way the instrumented code would.
"""

import io
import json
import os
import subprocess
import tempfile

import pytest

from gobco.logger import Logger


@pytest.fixture
def log():
    return Logger(io.StringIO(), io.StringIO())


@pytest.fixture
def module_tree(tmp_path):
    """A Go module with a nested package, yields the module root."""
    root = tmp_path / "mod"
    pkg = root / "internal" / "pkg"
    pkg.mkdir(parents=True)
    (root / "go.mod").write_text("module example.com/mod\n")
    (pkg / "pkg.go").write_text("package pkg\n")
    (pkg / "pkg_test.go").write_text("package pkg\n")
    return root


@pytest.fixture
def private_tmp(tmp_path, monkeypatch):
    """Make workspaces appear below tmp_path instead of the system tmp."""
    tmp = tmp_path / "tmp"
    tmp.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(tmp))
    return tmp


class FakeSubprocess:
    def __init__(self):
        self.calls = []
        self.conditions = []
        self.go_returncode = 0
        self.instrument_returncode = 0
        self.write_stats = True

    def go_calls(self):
        return [(cmd, kwargs) for cmd, kwargs in self.calls if cmd[0] == "go"]

    def __call__(self, cmd, **kwargs):
        self.calls.append((list(cmd), kwargs))
        if cmd[0] == "go":
            assert os.path.isdir(kwargs["cwd"])
            if self.write_stats:
                with open(kwargs["env"]["GOBCO_STATS"], "w") as f:
                    json.dump(self.conditions, f)
            return subprocess.CompletedProcess(cmd, self.go_returncode)
        return subprocess.CompletedProcess(
            cmd, self.instrument_returncode, stdout="", stderr="engine failed\n"
        )


@pytest.fixture
def fake_subprocess(monkeypatch):
    fake = FakeSubprocess()
    monkeypatch.setattr(subprocess, "run", fake)
    return fake

"""Tests for running 'go test' on the staged copy."""

import os
import subprocess

import pytest

from gobco.gotest import GoTest
from gobco.logger import Logger
from gobco.resolver import classify
from gobco.workspace import Workspace


@pytest.fixture
def staged(module_tree, tmp_path, log):
    ws = Workspace.create(log, parent=str(tmp_path))
    arg = classify(str(module_tree / "internal" / "pkg"), environ={})
    os.makedirs(ws.resolve(arg.instr_dir))
    yield arg, ws
    ws.clean_up(keep=False)


class TestArgs:
    def test_plain(self):
        assert GoTest().args(False, []) == ["go", "test", "-test.count", "1", "."]

    def test_verbose_and_extra_args(self):
        args = GoTest().args(True, ["-vet=off", "-run", "TestX"])
        assert args == [
            "go", "test", "-v", "-test.count", "1", ".", "-vet=off", "-run", "TestX",
        ]

    def test_custom_go(self):
        assert GoTest(go="/opt/go/bin/go").args(False, [])[0] == "/opt/go/bin/go"


class TestEnv:
    def test_gopath_layout(self):
        environ = {"GOPATH": "/home/u/go", "PATH": "/bin"}
        env = GoTest().env("/tmp/gobco-1", "/home/u/go", "/tmp/stats.json", environ)
        assert env["GOPATH"] == os.path.join("/tmp/gobco-1", "gopath") + os.pathsep + "/home/u/go"
        assert env["GO111MODULE"] == "off"
        assert env["GOBCO_STATS"] == "/tmp/stats.json"
        assert env["PATH"] == "/bin"

    def test_module_layout_keeps_gopath(self):
        environ = {"GOPATH": "/home/u/go", "GO111MODULE": "on"}
        env = GoTest().env("/tmp/gobco-1", "", "/tmp/stats.json", environ)
        assert env["GOPATH"] == "/home/u/go"
        assert env["GO111MODULE"] == "on"
        assert env["GOBCO_STATS"] == "/tmp/stats.json"

    def test_does_not_modify_input(self):
        environ = {"GOPATH": "/home/u/go"}
        GoTest().env("/tmp/gobco-1", "/home/u/go", "/tmp/stats.json", environ)
        assert environ == {"GOPATH": "/home/u/go"}

    def test_inherits_process_environment(self, monkeypatch):
        monkeypatch.setenv("GOBCO_TEST_MARKER", "1")
        env = GoTest().env("/tmp/gobco-1", "", "/tmp/stats.json")
        assert env["GOBCO_TEST_MARKER"] == "1"


class TestRun:
    def test_success(self, staged, log, fake_subprocess):
        arg, ws = staged
        stats = ws.resolve("gobco-counts.json")

        code = GoTest().run(arg, ["-vet=off"], False, "", stats, ws, log)

        assert code == 0
        ((cmd, kwargs),) = fake_subprocess.go_calls()
        assert cmd == ["go", "test", "-test.count", "1", ".", "-vet=off"]
        assert kwargs["cwd"] == ws.resolve(arg.instr_dir)
        assert kwargs["env"]["GOBCO_STATS"] == stats
        assert os.path.isfile(stats)

    def test_test_failure(self, staged, log, fake_subprocess):
        arg, ws = staged
        fake_subprocess.go_returncode = 1

        code = GoTest().run(arg, [], False, "", ws.resolve("s.json"), ws, log)

        assert code == 1
        assert "exited with code 1" in log.stderr.getvalue()
        assert len(fake_subprocess.go_calls()) == 1

    def test_go_not_found(self, staged, log, monkeypatch):
        arg, ws = staged

        def not_found(cmd, **kwargs):
            raise FileNotFoundError(2, "No such file or directory", cmd[0])

        monkeypatch.setattr(subprocess, "run", not_found)

        assert GoTest().run(arg, [], False, "", ws.resolve("s.json"), ws, log) == 1
        assert "cannot run go" in log.stderr.getvalue()

    def test_verbose(self, staged, log, fake_subprocess):
        arg, ws = staged
        log.verbose = True
        GoTest().run(arg, [], True, "", ws.resolve("s.json"), ws, log)
        err = log.stderr.getvalue()
        assert 'Running "go test -v -test.count 1 ."' in err
        assert "Finished go test -v -test.count 1 ." in err

    def test_output_goes_to_log_streams(self, staged, tmp_path, fake_subprocess):
        arg, ws = staged
        with open(tmp_path / "out.txt", "w") as out, open(tmp_path / "err.txt", "w") as err:
            log = Logger(out, err)
            log.outf("before")

            GoTest().run(arg, [], False, "", ws.resolve("s.json"), ws, log)

            ((_, kwargs),) = fake_subprocess.go_calls()
            assert kwargs["stdout"] is out
            assert kwargs["stderr"] is err
            # Buffered output is flushed before the child writes.
            assert (tmp_path / "out.txt").read_text() == "before\n"

    def test_in_memory_streams_are_not_passed(self, staged, log, fake_subprocess):
        arg, ws = staged

        GoTest().run(arg, [], False, "", ws.resolve("s.json"), ws, log)

        ((_, kwargs),) = fake_subprocess.go_calls()
        assert kwargs["stdout"] is None
        assert kwargs["stderr"] is None

import time

import pytest

from archinstaller.errors import StepTimeout
from archinstaller.lib.command import CmdResult, command_exists, run_cmd


class TestRunCmd:
    def test_dry_run_does_not_execute(self, tmp_path, caplog):
        target = tmp_path / "created"
        caplog.set_level("INFO")
        r = run_cmd(["touch", str(target)], sudo=True, dry_run=True)
        assert r.ok
        assert r.argv[0] == "sudo"
        assert not target.exists()
        assert "[DRY RUN] Would execute: sudo touch" in caplog.text

    def test_captures_output(self):
        r = run_cmd(["echo", "hello"])
        assert r.ok
        assert r.stdout.strip() == "hello"

    def test_failure_raises_when_checked(self):
        with pytest.raises(RuntimeError, match="Command failed"):
            run_cmd(["false"])

    def test_failure_returned_when_unchecked(self):
        r = run_cmd(["false"], check=False)
        assert not r.ok
        assert r.returncode != 0

    def test_missing_binary(self):
        r = run_cmd(["archinstaller-no-such-binary"], check=False)
        assert r.returncode == 127
        with pytest.raises(RuntimeError, match="Command not found"):
            run_cmd(["archinstaller-no-such-binary"])

    def test_timeout_kills_command(self):
        began = time.monotonic()
        with pytest.raises(StepTimeout, match="sleep 5"):
            run_cmd(["sleep", "5"], check=False, timeout=0.1)
        assert time.monotonic() - began < 4

    def test_env_is_merged(self):
        r = run_cmd(["sh", "-c", "echo $ARCHINSTALLER_TEST_VAR"], env={"ARCHINSTALLER_TEST_VAR": "x1"})
        assert r.stdout.strip() == "x1"


def test_command_exists():
    assert command_exists("sh")
    assert not command_exists("archinstaller-no-such-binary")


def test_cmd_result_ok():
    assert CmdResult(argv=["x"], returncode=0, stdout="", stderr="").ok
    assert not CmdResult(argv=["x"], returncode=2, stdout="", stderr="").ok

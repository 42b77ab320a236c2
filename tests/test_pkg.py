import pytest

import archinstaller.lib.pkg as pkg_mod
from archinstaller.errors import ErrorAggregator, StepTimeout
from archinstaller.lib.command import CmdResult
from archinstaller.lib.pkg import PackageInstaller
from archinstaller.timing import StepDeadline


class FakeRunner:
    def __init__(self, installed=(), broken=()):
        self.installed = set(installed)
        self.broken = set(broken)
        self.calls = []
        self.timeouts = []

    def __call__(self, argv, *, check=True, sudo=False, dry_run=False, **kw):
        argv = list(argv)
        self.calls.append((argv, sudo))
        self.timeouts.append(kw.get("timeout"))
        name = argv[-1]
        if argv[:2] in (["pacman", "-Q"], ["flatpak", "info"]):
            rc = 0 if name in self.installed else 1
        elif name in self.broken:
            rc = 1
        else:
            rc = 0
        return CmdResult(argv=argv, returncode=rc, stdout="", stderr="error: target not found" if rc else "")

    def installs(self):
        return [argv for argv, _ in self.calls if argv[:2] not in (["pacman", "-Q"], ["flatpak", "info"])]


@pytest.fixture
def runner(monkeypatch):
    r = FakeRunner(installed={"git"}, broken={"nope"})
    monkeypatch.setattr(pkg_mod, "run_cmd", r)
    return r


class TestInstall:
    def test_installs_missing_and_skips_installed(self, runner):
        inst = PackageInstaller(errors=ErrorAggregator())
        assert inst.install("pacman", ["git", "zsh", "zsh"])
        assert runner.installs() == [["pacman", "-S", "--noconfirm", "--needed", "zsh"]]
        assert inst.installed == ["zsh"]

    def test_failure_is_reported_and_continues(self, runner):
        errors = ErrorAggregator()
        inst = PackageInstaller(errors=errors)
        assert not inst.install("pacman", ["nope", "vim"])
        assert inst.installed == ["vim"]
        assert errors.all() == ["Failed to install nope via Pacman"]

    def test_aur_runs_without_sudo(self, runner):
        inst = PackageInstaller(errors=ErrorAggregator())
        inst.install("aur", ["stremio"])
        installs = [(argv, sudo) for argv, sudo in runner.calls if argv[0] == "yay"]
        assert installs == [(["yay", "-S", "--noconfirm", "--needed", "stremio"], False)]

    def test_flatpak_checks_flatpak_info(self, runner):
        inst = PackageInstaller(errors=ErrorAggregator())
        inst.install("flatpak", ["org.example.App"])
        assert ["flatpak", "info", "org.example.App"] in [argv for argv, _ in runner.calls]

    def test_dry_run_skips_installed_check(self, runner):
        inst = PackageInstaller(errors=ErrorAggregator(), dry_run=True)
        assert inst.install("pacman", ["git"])
        assert runner.installs() == [["pacman", "-S", "--noconfirm", "--needed", "git"]]

    def test_empty_list_is_success(self, runner):
        assert PackageInstaller(errors=ErrorAggregator()).install("pacman", [])
        assert runner.calls == []

    def test_unknown_manager(self, runner):
        with pytest.raises(ValueError):
            PackageInstaller(errors=ErrorAggregator()).install("apt", ["x"])


class TestRemove:
    def test_removes_only_installed(self, runner):
        inst = PackageInstaller(errors=ErrorAggregator())
        assert inst.remove(["git", "absent"])
        assert runner.installs() == [["pacman", "-Rns", "--noconfirm", "git"]]
        assert inst.removed == ["git"]

    def test_nothing_to_remove(self, runner):
        assert PackageInstaller(errors=ErrorAggregator()).remove(["absent"])
        assert runner.installs() == []


class TestDeadline:
    def test_commands_get_remaining_time(self, runner):
        now = [100.0]
        deadline = StepDeadline(clock=lambda: now[0])
        deadline.arm(60)
        now[0] += 15
        inst = PackageInstaller(errors=ErrorAggregator(), deadline=deadline)
        inst.install("pacman", ["zsh"])
        assert runner.timeouts == [45.0, 45.0]

    def test_spent_deadline_stops_installation(self, runner):
        now = [100.0]
        deadline = StepDeadline(clock=lambda: now[0])
        deadline.arm(1)
        now[0] += 2
        inst = PackageInstaller(errors=ErrorAggregator(), deadline=deadline)
        with pytest.raises(StepTimeout):
            inst.install("pacman", ["zsh", "vim"])
        assert runner.calls == []
        assert inst.installed == []

    def test_no_deadline_means_no_timeout(self, runner):
        PackageInstaller(errors=ErrorAggregator()).install("pacman", ["zsh"])
        assert runner.timeouts == [None, None]

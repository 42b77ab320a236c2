import pytest

import archinstaller.steps.step_07_bootloader_config as bootloader
from archinstaller.config import InstallConfig
from archinstaller.context import InstallContext
from archinstaller.errors import ErrorAggregator, StepTimeout
from archinstaller.pipeline import Criticality
from archinstaller.steps import ALL_STEPS, build_steps
from archinstaller.steps.step_06_gaming_mode import multilib_enabled
from archinstaller.steps.step_07_bootloader_config import detect_bootloader
from archinstaller.timing import StepDeadline


@pytest.fixture
def dry_ctx(tmp_path):
    config = InstallConfig(
        dry_run=True,
        check_requirements=False,
        state_path=str(tmp_path / "state"),
        log_path=str(tmp_path / "log"),
    )
    return InstallContext(config=config, errors=ErrorAggregator())


class TestBuildSteps:
    def test_order_and_names(self, dry_ctx):
        steps = build_steps(dry_ctx)
        assert [s.ordinal for s in steps] == list(range(1, len(ALL_STEPS) + 1))
        assert [s.name for s in steps] == [
            "system_preparation",
            "shell_setup",
            "plymouth_setup",
            "yay_installation",
            "programs_installation",
            "gaming_mode",
            "bootloader_config",
            "fail2ban_setup",
            "system_services",
            "maintenance",
        ]

    def test_fatal_steps(self, dry_ctx):
        fatal = {s.name for s in build_steps(dry_ctx) if s.criticality is Criticality.FATAL}
        assert fatal == {"system_preparation", "bootloader_config"}

    def test_server_skips_desktop_steps(self, dry_ctx):
        skipped = {s.name for s in build_steps(dry_ctx) if "server" in s.skippable_in_mode}
        assert skipped == {"plymouth_setup", "gaming_mode"}

    def test_timeout_applied(self, dry_ctx):
        assert all(s.timeout == 60 for s in build_steps(dry_ctx, timeout=60))


def test_every_step_succeeds_in_dry_run(dry_ctx, monkeypatch):
    monkeypatch.setattr(bootloader, "detect_bootloader", lambda: "grub")
    for step in build_steps(dry_ctx):
        assert step.action(), step.name
    assert not dry_ctx.errors.has_errors()


def test_bootloader_step_fails_without_bootloader(dry_ctx, monkeypatch):
    monkeypatch.setattr(bootloader, "detect_bootloader", lambda: None)
    assert not bootloader.BootloaderConfigStep().run(dry_ctx)
    assert dry_ctx.errors.has_errors()


class TestDetectBootloader:
    def test_none(self, tmp_path):
        assert detect_bootloader(tmp_path) is None

    def test_grub(self, tmp_path):
        (tmp_path / "grub").mkdir()
        (tmp_path / "grub/grub.cfg").write_text("", encoding="utf-8")
        assert detect_bootloader(tmp_path) == "grub"

    def test_systemd_boot(self, tmp_path):
        (tmp_path / "loader").mkdir()
        (tmp_path / "loader/loader.conf").write_text("", encoding="utf-8")
        assert detect_bootloader(tmp_path) == "systemd-boot"

    def test_limine(self, tmp_path):
        (tmp_path / "limine.conf").write_text("", encoding="utf-8")
        assert detect_bootloader(tmp_path) == "limine"


def test_multilib_enabled(tmp_path):
    conf = tmp_path / "pacman.conf"
    conf.write_text("#[multilib]\n#Include = /etc/pacman.d/mirrorlist\n", encoding="utf-8")
    assert not multilib_enabled(conf)
    conf.write_text("[multilib]\nInclude = /etc/pacman.d/mirrorlist\n", encoding="utf-8")
    assert multilib_enabled(conf)
    assert not multilib_enabled(tmp_path / "missing")


class TestContextCommands:
    def test_cmd_follows_dry_run(self, dry_ctx, tmp_path):
        target = tmp_path / "never"
        assert dry_ctx.cmd(["touch", str(target)]).ok
        assert not target.exists()

    def test_cmd_refuses_once_step_budget_is_spent(self, dry_ctx):
        now = [0.0]
        ctx = InstallContext(config=dry_ctx.config, deadline=StepDeadline(clock=lambda: now[0]))
        ctx.deadline.arm(5)
        now[0] = 6
        with pytest.raises(StepTimeout):
            ctx.cmd(["true"])

    def test_packages_share_the_step_deadline(self, dry_ctx):
        assert dry_ctx.packages.deadline is dry_ctx.deadline

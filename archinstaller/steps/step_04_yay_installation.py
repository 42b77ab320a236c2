from __future__ import annotations

import logging
import tempfile

from ..context import InstallContext
from ..lib.command import command_exists
from ..pipeline import Criticality

logger = logging.getLogger(__name__)

YAY_REPO = "https://aur.archlinux.org/yay.git"


class YayInstallationStep:
    step_id = "yay_installation"
    title = "Yay Installation"
    criticality = Criticality.RECOVERABLE
    skip_modes: frozenset[str] = frozenset()

    def run(self, ctx: InstallContext) -> bool:
        if command_exists("yay"):
            logger.info("yay is already installed")
            return True

        logger.info("Installing AUR helper for additional software...")
        if not ctx.packages.install("pacman", ["base-devel", "git"]):
            return False

        with tempfile.TemporaryDirectory(prefix="yay-") as build_dir:
            for argv, what in (
                (["git", "clone", YAY_REPO, build_dir], "clone yay repository"),
                (["makepkg", "-si", "--noconfirm", "--needed"], "build yay"),
            ):
                r = ctx.cmd(argv, cwd=build_dir, check=False)
                if not r.ok:
                    ctx.errors.report(f"Failed to {what}")
                    return False

        logger.info("yay AUR helper installed successfully")
        return True

from __future__ import annotations

import logging

from ..context import InstallContext
from ..lib.command import command_exists
from ..lib.manifests import package_names
from ..pipeline import Criticality

logger = logging.getLogger(__name__)


class ProgramsInstallationStep:
    step_id = "programs_installation"
    title = "Programs Installation"
    criticality = Criticality.RECOVERABLE
    skip_modes: frozenset[str] = frozenset()

    def run(self, ctx: InstallContext) -> bool:
        logger.info("Installing applications for %s mode...", ctx.mode)
        m = ctx.manifest
        ok = ctx.packages.install("pacman", package_names(m, "pacman", ctx.mode) + package_names(m, "essential", ctx.mode))

        aur = package_names(m, "aur", ctx.mode)
        if aur and not ctx.dry_run and not command_exists("yay"):
            logger.warning("yay not available; skipping %d AUR packages", len(aur))
            ctx.errors.report("AUR packages skipped: yay is not installed")
            ok = False
        else:
            ok = ctx.packages.install("aur", aur) and ok

        ok = ctx.packages.install("flatpak", package_names(m, "flatpak", ctx.mode)) and ok
        return ok

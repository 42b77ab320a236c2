from __future__ import annotations

import logging

from ..context import InstallContext
from ..pipeline import Criticality

logger = logging.getLogger(__name__)


class MaintenanceStep:
    step_id = "maintenance"
    title = "Maintenance"
    criticality = Criticality.RECOVERABLE
    skip_modes: frozenset[str] = frozenset()

    def run(self, ctx: InstallContext) -> bool:
        logger.info("Final cleanup and system optimization...")

        orphans = ctx.cmd(["pacman", "-Qtdq"], check=False)
        names = orphans.stdout.split()
        if names and not ctx.packages.remove(names):
            return False

        r = ctx.cmd(["pacman", "-Sc", "--noconfirm"], sudo=True, check=False)
        if not r.ok:
            ctx.errors.report("Package cache cleanup failed")
            return False
        return True

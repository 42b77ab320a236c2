from __future__ import annotations

import logging

from ..context import InstallContext
from ..pipeline import Criticality

logger = logging.getLogger(__name__)

THEME = "bgrt"
FALLBACK_THEME = "spinner"


class PlymouthSetupStep:
    step_id = "plymouth_setup"
    title = "Plymouth Setup"
    criticality = Criticality.RECOVERABLE
    skip_modes = frozenset({"server"})

    def run(self, ctx: InstallContext) -> bool:
        logger.info("Setting up boot screen...")
        if not ctx.packages.install("pacman", ["plymouth"]):
            return False

        for theme in (THEME, FALLBACK_THEME):
            r = ctx.cmd(["plymouth-set-default-theme", "-R", theme], sudo=True, check=False)
            if r.ok:
                logger.info("Plymouth theme set to %s", theme)
                return True
            logger.warning("Plymouth theme %s unavailable", theme)

        ctx.errors.report("Could not set a Plymouth theme")
        return False

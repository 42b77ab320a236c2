from __future__ import annotations

import logging

from ..context import InstallContext
from ..lib.manifests import package_names
from ..pipeline import Criticality

logger = logging.getLogger(__name__)

PACMAN_CONF = "/etc/pacman.conf"


class SystemPreparationStep:
    step_id = "system_preparation"
    title = "System Preparation"
    criticality = Criticality.FATAL
    skip_modes: frozenset[str] = frozenset()

    def run(self, ctx: InstallContext) -> bool:
        logger.info("Updating package lists and installing system utilities...")

        # Colored output and parallel downloads; both lines ship commented out.
        for pattern in (r"s/^#Color/Color/", r"s/^#ParallelDownloads.*/ParallelDownloads = 10/"):
            ctx.cmd(["sed", "-i", pattern, PACMAN_CONF], sudo=True)

        r = ctx.cmd(["pacman", "-Syu", "--noconfirm"], sudo=True, check=False)
        if not r.ok:
            ctx.errors.report("System update (pacman -Syu) failed")
            return False

        return ctx.packages.install("pacman", package_names(ctx.manifest, "helpers"))

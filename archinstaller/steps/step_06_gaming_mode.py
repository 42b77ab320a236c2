from __future__ import annotations

import logging
from pathlib import Path

from ..context import InstallContext
from ..lib.manifests import package_names
from ..pipeline import Criticality

logger = logging.getLogger(__name__)

PACMAN_CONF = Path("/etc/pacman.conf")


def multilib_enabled(conf: Path = PACMAN_CONF) -> bool:
    try:
        return any(ln.strip() == "[multilib]" for ln in conf.read_text(encoding="utf-8").splitlines())
    except OSError:
        return False


class GamingModeStep:
    step_id = "gaming_mode"
    title = "Gaming Mode"
    criticality = Criticality.RECOVERABLE
    skip_modes = frozenset({"server"})

    def run(self, ctx: InstallContext) -> bool:
        logger.info("Setting up gaming tools...")
        if not multilib_enabled():
            logger.info("Enabling multilib repository in %s", PACMAN_CONF)
            ctx.cmd(["sed", "-i", r"/^#\[multilib\]/,/Include/s/^#//", str(PACMAN_CONF)], sudo=True)
            ctx.cmd(["pacman", "-Sy"], sudo=True)

        gaming = ctx.manifest.get("gaming") or {}
        ok = ctx.packages.install("pacman", package_names(gaming, "pacman"))
        ok = ctx.packages.install("flatpak", package_names(gaming, "flatpak")) and ok

        r = ctx.cmd(["systemctl", "--user", "enable", "--now", "gamemoded"], check=False)
        if not r.ok:
            logger.warning("Could not enable gamemoded user service")
        return ok

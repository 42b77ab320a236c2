from __future__ import annotations

import logging
from pathlib import Path

from ..context import InstallContext
from ..pipeline import Criticality

logger = logging.getLogger(__name__)

JAIL_CONF = "/etc/fail2ban/jail.conf"
JAIL_LOCAL = "/etc/fail2ban/jail.local"


class Fail2banSetupStep:
    step_id = "fail2ban_setup"
    title = "Fail2ban Setup"
    criticality = Criticality.RECOVERABLE
    skip_modes: frozenset[str] = frozenset()

    def run(self, ctx: InstallContext) -> bool:
        logger.info("Setting up security protection for SSH...")
        if not ctx.packages.install("pacman", ["fail2ban"]):
            return False

        if ctx.dry_run or not Path(JAIL_LOCAL).exists():
            ctx.cmd(["cp", JAIL_CONF, JAIL_LOCAL], sudo=True)
            ctx.cmd(["sed", "-i", "s/^backend = auto/backend = systemd/", JAIL_LOCAL], sudo=True)

        r = ctx.cmd(["systemctl", "enable", "--now", "fail2ban"], sudo=True, check=False)
        if not r.ok:
            ctx.errors.report("Failed to enable fail2ban service")
            return False
        return True

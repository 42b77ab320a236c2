from __future__ import annotations

import logging

from ..context import InstallContext
from ..pipeline import Criticality

logger = logging.getLogger(__name__)

SERVICES = ("cronie.service", "sshd.service", "fstrim.timer", "paccache.timer")


class SystemServicesStep:
    step_id = "system_services"
    title = "System Services"
    criticality = Criticality.RECOVERABLE
    skip_modes: frozenset[str] = frozenset()

    def run(self, ctx: InstallContext) -> bool:
        logger.info("Enabling and configuring system services...")
        ok = True

        for argv in (["ufw", "default", "deny", "incoming"], ["ufw", "allow", "ssh"], ["ufw", "--force", "enable"]):
            if not ctx.cmd(argv, sudo=True, check=False).ok:
                ctx.errors.report(f"Firewall command failed: {' '.join(argv)}")
                ok = False

        for unit in SERVICES:
            if not ctx.cmd(["systemctl", "enable", "--now", unit], sudo=True, check=False).ok:
                ctx.errors.report(f"Failed to enable {unit}")
                ok = False
        return ok

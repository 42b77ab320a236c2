from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..context import InstallContext
from ..pipeline import Criticality

logger = logging.getLogger(__name__)


def detect_bootloader(boot: Path = Path("/boot")) -> Optional[str]:
    if (boot / "grub/grub.cfg").exists():
        return "grub"
    if (boot / "loader/loader.conf").exists():
        return "systemd-boot"
    if (boot / "limine.conf").exists() or (boot / "limine/limine.conf").exists():
        return "limine"
    return None


class BootloaderConfigStep:
    step_id = "bootloader_config"
    title = "Bootloader and Kernel Configuration"
    criticality = Criticality.FATAL
    skip_modes: frozenset[str] = frozenset()

    def run(self, ctx: InstallContext) -> bool:
        loader = detect_bootloader()
        if loader is None:
            ctx.errors.report("No supported bootloader detected (grub, systemd-boot, limine)")
            return False
        logger.info("Configuring %s...", loader)

        if loader == "grub":
            argv = ["grub-mkconfig", "-o", "/boot/grub/grub.cfg"]
        elif loader == "systemd-boot":
            argv = ["bootctl", "update", "--graceful"]
        else:
            argv = ["limine-update"]

        r = ctx.cmd(argv, sudo=True, check=False)
        if not r.ok:
            ctx.errors.report(f"{loader} configuration failed")
            return False
        return True

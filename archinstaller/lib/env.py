from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import List

from .command import run_cmd

logger = logging.getLogger(__name__)

MIN_FREE_BYTES = 2 * 1024 ** 3


def is_online(*, dry_run: bool = False) -> bool:
    """Best-effort online check."""

    r = run_cmd(["ping", "-c", "1", "-W", "2", "archlinux.org"], check=False, dry_run=dry_run)
    return r.ok


def check_system_requirements(*, root: str = "/", arch_release: str = "/etc/arch-release") -> List[str]:
    """Return a list of unmet requirements (empty when all are satisfied)."""

    problems: List[str] = []

    if hasattr(os, "geteuid") and os.geteuid() == 0:
        problems.append("This installer should NOT be run as root; run it as a regular user with sudo privileges.")

    if not Path(arch_release).exists():
        problems.append("This installer is designed for Arch Linux only.")

    if not is_online():
        problems.append("No internet connection detected.")

    free = shutil.disk_usage(root).free
    if free < MIN_FREE_BYTES:
        problems.append(f"Insufficient disk space: at least 2GB free is required (available: {free // 1024 ** 2}MB).")

    for p in problems:
        logger.error("%s", p)
    return problems

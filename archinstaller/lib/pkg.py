from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..errors import ErrorAggregator
from ..timing import StepDeadline
from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)

_MANAGER_NAMES = {"pacman": "Pacman", "aur": "AUR", "flatpak": "Flatpak"}


def _install_argv(manager: str, package: str) -> tuple[list[str], bool]:
    if manager == "pacman":
        return ["pacman", "-S", "--noconfirm", "--needed", package], True
    if manager == "aur":
        return ["yay", "-S", "--noconfirm", "--needed", package], False
    if manager == "flatpak":
        return ["flatpak", "install", "--noninteractive", "-y", "flathub", package], True
    raise ValueError(f"Unknown package manager: {manager}")


@dataclass
class PackageInstaller:
    """Installs packages one by one and keeps per-run bookkeeping.

    Per-package failures are pushed into the error aggregator here; the
    orchestrator only ever sees the step's overall boolean.
    """

    errors: ErrorAggregator
    dry_run: bool = False
    deadline: Optional[StepDeadline] = None
    installed: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)

    def _run(self, argv: Sequence[str], **kw) -> CmdResult:
        timeout = self.deadline.remaining() if self.deadline is not None else None
        return run_cmd(argv, check=False, timeout=timeout, **kw)

    def _is_installed(self, manager: str, package: str) -> bool:
        if manager == "flatpak":
            return self._run(["flatpak", "info", package]).ok
        return self._run(["pacman", "-Q", package]).ok

    def install(self, manager: str, packages: Sequence[str]) -> bool:
        pkgs = list(dict.fromkeys(packages))
        if not pkgs:
            logger.info("No packages to install")
            return True

        name = _MANAGER_NAMES.get(manager, manager)
        logger.info("Installing %d packages via %s...", len(pkgs), name)

        failures = 0
        for i, pkg in enumerate(pkgs, start=1):
            argv, sudo = _install_argv(manager, pkg)
            if not self.dry_run and self._is_installed(manager, pkg):
                logger.debug("[%d/%d] %s [SKIP] Already installed", i, len(pkgs), pkg)
                continue

            r = self._run(argv, sudo=sudo, dry_run=self.dry_run)
            if r.ok:
                logger.debug("[%d/%d] %s [OK]", i, len(pkgs), pkg)
                self.installed.append(pkg)
                continue

            failures += 1
            last = next((ln for ln in reversed(r.stderr.splitlines()) if "error" in ln.lower()), "")
            logger.error("[%d/%d] %s [FAIL] %s", i, len(pkgs), pkg, last)
            self.errors.report(f"Failed to install {pkg} via {name}")

        if failures:
            logger.warning(
                "Package installation completed with %d failures (%d packages processed)", failures, len(pkgs)
            )
            return False
        logger.info("Package installation completed (%d packages processed)", len(pkgs))
        return True

    def remove(self, packages: Sequence[str]) -> bool:
        pkgs = [p for p in packages if self.dry_run or self._is_installed("pacman", p)]
        if not pkgs:
            return True
        r = self._run(["pacman", "-Rns", "--noconfirm", *pkgs], sudo=True, dry_run=self.dry_run)
        if r.ok:
            self.removed.extend(pkgs)
            return True
        self.errors.report(f"Failed to remove {', '.join(pkgs)}")
        return False

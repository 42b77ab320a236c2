from __future__ import annotations

import getpass
import logging

from ..context import InstallContext
from ..lib.manifests import package_names
from ..pipeline import Criticality

logger = logging.getLogger(__name__)


class ShellSetupStep:
    step_id = "shell_setup"
    title = "Shell Setup"
    criticality = Criticality.RECOVERABLE
    skip_modes: frozenset[str] = frozenset()

    def run(self, ctx: InstallContext) -> bool:
        logger.info("Installing ZSH shell with autocompletion and syntax highlighting...")
        if not ctx.packages.install("pacman", package_names(ctx.manifest, "shell")):
            return False

        user = getpass.getuser()
        r = ctx.cmd(["chsh", "-s", "/usr/bin/zsh", user], sudo=True, check=False)
        if not r.ok:
            ctx.errors.report(f"Could not change default shell to zsh for {user}")
            return False
        return True

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from typing import Mapping, Sequence

from ..errors import StepTimeout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def _fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    sudo: bool = False,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    input_text: str | None = None,
    dry_run: bool = False,
    timeout: float | None = None,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - dry_run logs but does not execute.
    - A missing executable is reported as returncode 127 when check=False.
    - timeout kills the child and raises StepTimeout regardless of check.
    """

    argv_list = (["sudo"] if sudo else []) + list(argv)

    if dry_run:
        logger.info("[DRY RUN] Would execute: %s", _fmt_argv(argv_list))
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    logger.info("CMD %s", _fmt_argv(argv_list))
    try:
        p = subprocess.run(
            argv_list,
            input=input_text,
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=cwd,
            env=dict(os.environ, **(env or {})),
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        logger.error("Command timed out after %gs: %s", timeout, _fmt_argv(argv_list))
        raise StepTimeout(f"Command timed out: {_fmt_argv(argv_list)}")
    except FileNotFoundError:
        if check:
            raise RuntimeError(f"Command not found: {argv_list[0]}")
        logger.warning("Command not found: %s", argv_list[0])
        return CmdResult(argv=argv_list, returncode=127, stdout="", stderr=f"{argv_list[0]}: not found")

    if p.stdout:
        logger.debug("STDOUT %s", p.stdout.strip())
    if p.stderr:
        logger.debug("STDERR %s", p.stderr.strip())

    if check and p.returncode != 0:
        raise RuntimeError(f"Command failed ({p.returncode}): {_fmt_argv(argv_list)}\n{p.stderr}")

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=p.stdout, stderr=p.stderr)


def command_exists(name: str) -> bool:
    return shutil.which(name) is not None

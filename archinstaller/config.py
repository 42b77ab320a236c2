from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

INSTALL_MODES = ("standard", "minimal", "server", "custom")

# Older menus called the standard profile "default".
_MODE_ALIASES = {"default": "standard"}


def default_state_path() -> str:
    return os.environ.get("ARCHINSTALLER_STATE") or str(Path.home() / ".archinstaller.state")


def default_log_path() -> str:
    return os.environ.get("ARCHINSTALLER_LOG") or str(Path.home() / ".archinstaller.log")


def validate_install_mode(mode: str) -> str:
    m = _MODE_ALIASES.get(mode.strip().lower(), mode.strip().lower())
    if m not in INSTALL_MODES:
        raise ValueError(f"Invalid install mode: {mode!r}. Valid modes are: {', '.join(INSTALL_MODES)}")
    return m


@dataclass(frozen=True)
class InstallConfig:
    mode: str = "standard"
    verbose: bool = False
    quiet: bool = False
    dry_run: bool = False
    non_interactive: bool = False
    check_requirements: bool = True
    state_path: str = field(default_factory=default_state_path)
    log_path: str = field(default_factory=default_log_path)
    step_timeout: Optional[float] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", validate_install_mode(self.mode))
        if self.step_timeout is not None and self.step_timeout <= 0:
            raise ValueError("step_timeout must be positive")

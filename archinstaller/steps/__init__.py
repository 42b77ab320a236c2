from __future__ import annotations

import functools
from typing import List, Optional

from ..context import InstallContext
from ..pipeline import Step
from .step_01_system_preparation import SystemPreparationStep
from .step_02_shell_setup import ShellSetupStep
from .step_03_plymouth_setup import PlymouthSetupStep
from .step_04_yay_installation import YayInstallationStep
from .step_05_programs_installation import ProgramsInstallationStep
from .step_06_gaming_mode import GamingModeStep
from .step_07_bootloader_config import BootloaderConfigStep
from .step_08_fail2ban_setup import Fail2banSetupStep
from .step_09_system_services import SystemServicesStep
from .step_10_maintenance import MaintenanceStep

ALL_STEPS = (
    SystemPreparationStep,
    ShellSetupStep,
    PlymouthSetupStep,
    YayInstallationStep,
    ProgramsInstallationStep,
    GamingModeStep,
    BootloaderConfigStep,
    Fail2banSetupStep,
    SystemServicesStep,
    MaintenanceStep,
)


def build_steps(ctx: InstallContext, *, timeout: Optional[float] = None) -> List[Step]:
    steps = []
    for ordinal, cls in enumerate(ALL_STEPS, start=1):
        impl = cls()
        steps.append(
            Step(
                name=impl.step_id,
                ordinal=ordinal,
                title=impl.title,
                action=functools.partial(impl.run, ctx),
                criticality=impl.criticality,
                skippable_in_mode=frozenset(impl.skip_modes),
                timeout=timeout,
            )
        )
    return steps


__all__ = [
    "ALL_STEPS",
    "build_steps",
    "SystemPreparationStep",
    "ShellSetupStep",
    "PlymouthSetupStep",
    "YayInstallationStep",
    "ProgramsInstallationStep",
    "GamingModeStep",
    "BootloaderConfigStep",
    "Fail2banSetupStep",
    "SystemServicesStep",
    "MaintenanceStep",
]

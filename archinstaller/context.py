from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from .config import InstallConfig
from .errors import ErrorAggregator
from .lib.command import CmdResult, run_cmd
from .lib.manifests import load_programs_manifest
from .lib.pkg import PackageInstaller
from .timing import StepDeadline


@dataclass
class InstallContext:
    """Everything a step action may touch during one run.

    Built once per run and shared by every step action. The orchestrator arms
    `deadline` around each step; commands started through `cmd()` or the
    package installer inherit whatever time the step has left.
    """

    config: InstallConfig
    errors: ErrorAggregator = field(default_factory=ErrorAggregator)
    deadline: StepDeadline = field(default_factory=StepDeadline)
    packages: Optional[PackageInstaller] = None
    _manifest: Optional[Dict[str, Any]] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.packages is None:
            self.packages = PackageInstaller(errors=self.errors, dry_run=self.config.dry_run, deadline=self.deadline)

    @property
    def dry_run(self) -> bool:
        return self.config.dry_run

    @property
    def mode(self) -> str:
        return self.config.mode

    @property
    def manifest(self) -> Dict[str, Any]:
        if self._manifest is None:
            self._manifest = load_programs_manifest()
        return self._manifest

    def cmd(self, argv: Sequence[str], **kw: Any) -> CmdResult:
        kw.setdefault("dry_run", self.dry_run)
        return run_cmd(argv, timeout=self.deadline.remaining(), **kw)

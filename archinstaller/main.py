from __future__ import annotations

import argparse
import logging
import sys
from typing import NoReturn, Optional, Sequence

from .config import INSTALL_MODES, InstallConfig, default_log_path, default_state_path
from .context import InstallContext
from .errors import ErrorAggregator, PipelineAborted, PreflightError, StateWriteError
from .lib.env import check_system_requirements
from .logging_utils import configure_logging, log_banner, log_run_end, log_run_start, log_summary
from .pipeline import Orchestrator, PipelineResult, Step
from .progress import ProgressReporter
from .prompts import DecisionPort, Question, default_port
from .resume import ResumeDirective, decide
from .run_state import RunStateStore
from .steps import build_steps
from .timing import TimingRecord, format_duration

logger = logging.getLogger(__name__)

CLEANUP = Question(
    "Do you want to clean up temporary logs?",
    default=True,
    detail="This will remove the installation state file.",
)


def _console_level(config: InstallConfig) -> int:
    if config.verbose:
        return logging.DEBUG
    if config.quiet:
        return logging.WARNING
    return logging.INFO


def run(
    config: InstallConfig,
    *,
    port: Optional[DecisionPort] = None,
    steps: Optional[Sequence[Step]] = None,
    errors: Optional[ErrorAggregator] = None,
    context: Optional[InstallContext] = None,
) -> int:
    """Run one installation attempt and return the process exit code.

    steps defaults to the full pipeline bound to context; tests inject their
    own steps and, when they need package bookkeeping, their own context.
    """

    actual_log_path = configure_logging(
        log_path=config.log_path,
        level=logging.DEBUG if config.verbose else logging.INFO,
        console_level=_console_level(config),
    )
    log_run_start()

    if port is None:
        port = default_port(config.non_interactive)
    if context is None:
        context = InstallContext(config=config, errors=errors if errors is not None else ErrorAggregator())
    errors = context.errors
    timing = TimingRecord()
    store = RunStateStore(config.state_path)

    if config.dry_run:
        log_banner(
            "DRY-RUN MODE ENABLED",
            "Preview mode: No changes will be made",
            "Package installations will be simulated",
        )

    try:
        if config.check_requirements and not config.dry_run:
            problems = check_system_requirements()
            if problems:
                for p in problems:
                    errors.report(p)
                raise PreflightError("System requirements not met")

        run_state = store.load()
        directive = decide(run_state, port)
        if directive is ResumeDirective.CANCELLED:
            logger.info("Installation cancelled by user")
            log_run_end()
            return 0
        if directive is ResumeDirective.FRESH_START and not run_state.is_empty:
            if config.dry_run:
                logger.info("[DRY RUN] Would clear previous progress in %s", store.path)
            else:
                store.clear()
                logger.info("Starting fresh installation...")

        if steps is None:
            steps = build_steps(context, timeout=config.step_timeout)

        orchestrator = Orchestrator(
            steps=steps,
            store=store,
            port=port,
            errors=errors,
            timing=timing,
            progress=ProgressReporter(len(steps), timing),
            mode=config.mode,
            persist=not config.dry_run,
            default_timeout=config.step_timeout,
            deadline=context.deadline,
        )
        result = orchestrator.run(directive, run_state)
    except (PipelineAborted, PreflightError, StateWriteError) as e:
        logger.debug("Run ended early: %s", e)
        _finish(store, context, timing, actual_log_path)
        return 1
    except Exception:
        logger.exception("Installer failed")
        _finish(store, context, timing, actual_log_path)
        raise

    _log_result(result, config.mode)

    if config.dry_run:
        log_banner("Dry-Run Preview Completed", "This was a preview run. No changes were made to your system.")

    _finish(store, context, timing, actual_log_path)

    if errors.has_errors():
        logger.warning("Installation completed with warnings")
    else:
        logger.info("Installation completed successfully")
        if not config.dry_run and port.confirm(CLEANUP):
            store.clear()
            logger.info("Temporary state cleaned up")
    logger.info("Log: %s", actual_log_path)
    return 0


def _log_result(result: PipelineResult, mode: str) -> None:
    for label, names in (
        ("Steps run", result.ran),
        ("Failed steps", result.failed),
        ("Skipped (already completed)", result.skipped),
        (f"Skipped for {mode} mode", result.skipped_by_mode),
    ):
        if names:
            logger.info("%s: %s", label, ", ".join(names))


def _finish(store: RunStateStore, context: InstallContext, timing: TimingRecord, log_path: str) -> None:
    errors = context.errors
    elapsed = timing.elapsed_total()
    logger.info("Total installation time completed in %s (%ds)", format_duration(elapsed), int(elapsed))
    for e in errors:
        logger.error("Error: %s", e)
    log_summary(
        store.raw_lines(),
        errors.all(),
        log_path,
        installed=context.packages.installed,
        removed=context.packages.removed,
    )
    log_run_end()
    for h in logging.getLogger().handlers:
        h.flush()


class _ArgumentParser(argparse.ArgumentParser):
    # Invalid CLI input exits 1 like the rest of the installer's failures.
    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    p = _ArgumentParser(
        prog="archinstaller",
        description="Arch Linux post-installation setup with resumable steps.",
    )
    p.add_argument("--mode", default="standard", choices=INSTALL_MODES, help="Install profile")
    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Show all package installation details")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Minimal output")
    p.add_argument("-d", "--dry-run", action="store_true", help="Preview what would run without making changes (implies --verbose)")
    p.add_argument("-y", "--yes", action="store_true", help="Non-interactive: accept the default answer to every prompt")
    p.add_argument("--state", default=None, help="Path to the run-state file")
    p.add_argument("--log", default=None, help="Path to the installer log")
    p.add_argument("--step-timeout", type=float, default=None, help="Fail any step running longer than SECONDS")
    p.add_argument("--skip-checks", action="store_true", help="Skip system requirement checks")
    return p


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.quiet and args.dry_run:
        parser.error("--quiet cannot be combined with --dry-run, which always prints every command")

    if args.step_timeout is not None and args.step_timeout <= 0:
        print("archinstaller: error: --step-timeout must be positive", file=sys.stderr)
        return 1

    config = InstallConfig(
        mode=args.mode,
        verbose=bool(args.verbose or args.dry_run),
        quiet=bool(args.quiet),
        dry_run=bool(args.dry_run),
        non_interactive=bool(args.yes),
        check_requirements=not args.skip_checks,
        state_path=args.state or default_state_path(),
        log_path=args.log or default_log_path(),
        step_timeout=args.step_timeout,
    )
    return run(config)


if __name__ == "__main__":
    raise SystemExit(main())

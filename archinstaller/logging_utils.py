from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Iterable, Optional

DEFAULT_LOG_PATH = str(Path.home() / ".archinstaller.log")

_BANNER = "=" * 42


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    console_level: Optional[int] = None,
    also_console: bool = True,
) -> str:
    """Configure logging for one installer run.

    Everything goes to the log file at `level`; the console may be quieter or
    louder (--quiet / --verbose). If the requested log path is not writable we
    fall back to ./archinstaller.log.

    Returns the actual file path being used.
    """

    logger = logging.getLogger()

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_archinstaller_configured", False):
        return getattr(logger, "_archinstaller_log_path", log_path)

    logger.setLevel(min(level, console_level if console_level is not None else level))

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    handlers: list[logging.Handler] = []
    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler: logging.Handler = logging.FileHandler(log_path, encoding="utf-8")
        chosen_path = log_path
    except OSError:
        fallback = str(Path.cwd() / "archinstaller.log")
        file_handler = logging.FileHandler(fallback, encoding="utf-8")
        chosen_path = fallback
    file_handler.setFormatter(fmt)
    file_handler.setLevel(level)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        console.setLevel(console_level if console_level is not None else level)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_archinstaller_configured", True)
    setattr(logger, "_archinstaller_log_path", chosen_path)
    setattr(logger, "_archinstaller_handlers", handlers)

    logging.getLogger(__name__).info(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path


def reset_logging() -> None:
    """Detach and close the handlers installed by configure_logging()."""

    logger = logging.getLogger()
    for h in getattr(logger, "_archinstaller_handlers", []):
        logger.removeHandler(h)
        h.close()
    for attr in ("_archinstaller_configured", "_archinstaller_log_path", "_archinstaller_handlers"):
        if hasattr(logger, attr):
            delattr(logger, attr)


def log_banner(title: str, *lines: str) -> None:
    log = logging.getLogger("archinstaller")
    log.info(_BANNER)
    log.info(title)
    for line in lines:
        log.info(line)
    log.info(_BANNER)


def log_run_start() -> None:
    log_banner("Archinstaller Installation Log", f"Started: {time.strftime('%c')}")


def log_run_end() -> None:
    log_banner(f"Installation ended: {time.strftime('%c')}")


def log_summary(
    state_lines: Iterable[str],
    errors: Iterable[str],
    log_path: str,
    *,
    installed: Iterable[str] = (),
    removed: Iterable[str] = (),
) -> None:
    log = logging.getLogger("archinstaller")
    log_banner("Installation Summary")
    log.info("Completed steps:")
    for line in state_lines:
        log.info("  - %s", line)
    for heading, names in (("Installed:", list(installed)), ("Removed:", list(removed))):
        if names:
            log.info("%s %s", heading, " ".join(names))
    errs = list(errors)
    if errs:
        log.info("Errors encountered:")
        for e in errs:
            log.info("  - %s", e)
    log.info("Installation log saved to: %s", log_path)

"""Archinstaller: Arch Linux post-installation setup.

Core design goals:
- Ordered, resumable steps with a persisted outcome log
- Explicit fatal vs recoverable step failures
- Prompts behind a decision port (terminal, defaults, or scripted)
- Centralized logging and an end-of-run error summary
"""

__all__ = []

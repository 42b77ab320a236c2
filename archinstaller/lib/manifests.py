from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional


def _package_root() -> Path:
    # archinstaller/lib/manifests.py -> archinstaller
    return Path(__file__).resolve().parents[1]


def programs_manifest_path() -> Path:
    override = os.environ.get("ARCHINSTALLER_PROGRAMS")
    if override:
        return Path(override)
    return _package_root() / "configs/programs.yaml"


def load_yaml(path: Path) -> Dict[str, Any]:
    try:
        import yaml  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("PyYAML required to load package manifests") from e

    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Manifest must be a mapping/dict: {path}")
    return data


def load_programs_manifest(path: Optional[Path] = None) -> Dict[str, Any]:
    return load_yaml(path or programs_manifest_path())


def _names(entries: Any) -> List[str]:
    out: List[str] = []
    for e in entries or []:
        if isinstance(e, dict):
            name = e.get("name")
        else:
            name = e
        if name:
            out.append(str(name))
    return out


def package_names(manifest: Dict[str, Any], section: str, mode: Optional[str] = None) -> List[str]:
    """Package names for a manifest section.

    Sections keyed by install mode yield nothing for modes they do not
    mention; "custom" starts from the standard lists. Flat sections ignore
    the mode.
    """

    value = manifest.get(section)
    if not isinstance(value, dict):
        return _names(value)
    key = "standard" if mode in (None, "custom") else mode
    return _names(value.get(key))

from __future__ import annotations
import os
import sys
from pathlib import Path
from typing import Optional, List

__all__ = ["find_app_icon", "find_catalog_dir", "CATALOG_DIR_NAME"]

CATALOG_DIR_NAME = "quest_data"


def _iter_candidate_roots() -> List[Path]:
    """
    Candidate roots to search for resources, ordered by usefulness.
    Covers dev runs and frozen/packaged (PyInstaller) runs.
    """
    roots: List[Path] = []

    # Packaged (PyInstaller) locations
    if getattr(sys, "frozen", False):
        meipass = getattr(sys, "_MEIPASS", None)  # type: ignore[attr-defined]
        if meipass:
            roots.append(Path(meipass))
        roots.append(Path(sys.executable).parent)

    # Source tree: .../questcompanion/utils/resources.py -> package dir, then project root
    here = Path(__file__).resolve()
    roots.append(here.parents[1])
    roots.append(here.parents[2])

    # Script dir (main module) and current working directory
    main_file = getattr(sys.modules.get("__main__"), "__file__", None)
    if main_file:
        roots.append(Path(main_file).resolve().parent)
    roots.append(Path.cwd())

    # De-duplicate while preserving order
    seen = set()
    uniq: List[Path] = []
    for r in roots:
        if r not in seen:
            seen.add(r)
            uniq.append(r)
    return uniq


def _from_env(var: str) -> Optional[Path]:
    hint = os.environ.get(var)
    if not hint:
        return None
    p = Path(hint).expanduser()
    if not p.is_absolute():
        p = Path.cwd() / p
    return p


def find_app_icon() -> Optional[str]:
    """
    Return a filesystem path to the app icon (ICO/PNG), or None if not found.

    Priority:
      1) APP_ICON_HINT env var (absolute or relative to CWD) if it exists
      2) Platform-preferred extensions:
         - Windows: .ico first, then .png
         - macOS/Linux: .png first, then .ico
      3) Search locations (in each candidate root):
         - resources/
         - (root itself)
    """
    hint = _from_env("APP_ICON_HINT")
    if hint is not None and hint.exists():
        return str(hint)

    exts = (".ico", ".png") if os.name == "nt" else (".png", ".ico")
    names = [f"app{ext}" for ext in exts] + [f"icon{ext}" for ext in exts]

    for root in _iter_candidate_roots():
        for base in (root / "resources", root):
            for name in names:
                candidate = base / name
                if candidate.is_file():
                    return str(candidate)
    return None


def find_catalog_dir() -> Path:
    """
    Directory holding the quest group files.

    QUEST_COMPANION_DATA_DIR wins when set, whether or not it exists yet (a
    missing directory is simply an empty catalog). Otherwise the first
    `quest_data` directory found beside the application or in the CWD.
    """
    configured = _from_env("QUEST_COMPANION_DATA_DIR")
    if configured is not None:
        return configured
    for root in _iter_candidate_roots():
        candidate = root / CATALOG_DIR_NAME
        if candidate.is_dir():
            return candidate
    return Path.cwd() / CATALOG_DIR_NAME

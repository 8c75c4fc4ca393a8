"""Path resolution and filesystem helpers for Skillz.

Project layout:
    <project>/
    ├── skillz.json           # Project configuration
    ├── .skillz-cache.json    # Snapshot of the last successful sync
    └── .claude/skills/       # Default skill source directory
        └── {skill}/SKILL.md
"""

import os
import shutil
from pathlib import Path
from typing import Optional, Union

CONFIG_FILE = "skillz.json"
CACHE_FILE = ".skillz-cache.json"
SKILL_FILE = "SKILL.md"

PathLike = Union[str, Path]


def resolve_home(path: PathLike) -> Path:
    """Expand a leading ``~`` to the user's home directory.

    Args:
        path: Path that may start with ``~``.

    Returns:
        Path with the home directory expanded.
    """
    return Path(path).expanduser()


def resolve_in(cwd: PathLike, path: PathLike) -> Path:
    """Resolve a configured path against the project directory.

    Absolute paths and ``~`` paths are left anchored where they are; relative
    paths are joined onto ``cwd``.
    """
    expanded = resolve_home(path)
    if expanded.is_absolute():
        return expanded
    return Path(cwd) / expanded


def get_config_file(cwd: PathLike) -> Path:
    """Get the path to the project config file.

    Returns:
        Path to skillz.json.
    """
    return Path(cwd) / CONFIG_FILE


def get_cache_file(cwd: PathLike) -> Path:
    """Get the path to the sync cache file.

    Returns:
        Path to .skillz-cache.json.
    """
    return Path(cwd) / CACHE_FILE


def find_project_root(start_dir: Optional[PathLike] = None) -> Optional[Path]:
    """Walk up from a directory until one containing skillz.json is found.

    Args:
        start_dir: Directory to start from. Defaults to the current directory.

    Returns:
        The project root, or None if no config exists up to the filesystem root.
    """
    current = Path(start_dir or Path.cwd()).resolve()
    while True:
        if (current / CONFIG_FILE).is_file():
            return current
        if current.parent == current:
            return None
        current = current.parent


def ensure_directory(path: Path) -> Path:
    """Ensure a directory exists, creating it if necessary.

    Args:
        path: Path to the directory.

    Returns:
        The path (for chaining).
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def path_exists(path: Path) -> bool:
    """True if anything occupies ``path``, including a broken symlink."""
    return path.is_symlink() or path.exists()


def safe_read_text(path: Path) -> str:
    """Read a text file, returning an empty string if it does not exist."""
    try:
        return resolve_home(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return ""


def safe_write_text(path: Path, content: str) -> None:
    """Write a text file atomically.

    The content is written to a sibling ``.tmp`` file which is then renamed
    over the destination, so readers never observe a half-written file. On
    failure the ``.tmp`` file is removed and the OSError re-raised.
    """
    path = resolve_home(path)
    ensure_directory(path.parent)
    tmp = path.with_name(path.name + ".tmp")
    try:
        tmp.write_text(content, encoding="utf-8")
        os.replace(tmp, path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def remove_path(path: Path) -> None:
    """Remove a file, symlink or directory tree at ``path`` if present."""
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)

"""
Skill discovery across configured source directories.

Each source directory is expected to contain one subdirectory per skill,
each holding a SKILL.md file. Subdirectories whose name matches an ignore
glob are skipped. Skills are deduplicated by name across all source
directories: the first one found wins.
"""

import logging
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, List, Optional, Set

from ..core.config import Config
from ..core.errors import ParseError
from ..core.paths import SKILL_FILE, PathLike, resolve_in
from .models import Skill
from .parser import parse_skill, validate_skill

logger = logging.getLogger(__name__)


def is_ignored(dir_name: str, ignore: Iterable[str]) -> bool:
    """
    Check a directory name against ignore globs.

    Matching is case-sensitive and ``*`` also matches leading dots, so
    ``.*`` and ``*`` both hide dot-directories.

    Args:
        dir_name: Base name of the candidate directory
        ignore: Glob patterns (``*``, ``?``, ``[...]``)

    Returns:
        True on the first matching pattern
    """
    for pattern in ignore:
        if fnmatchcase(dir_name, pattern):
            return True
    return False


def is_skill_directory(path: Path) -> bool:
    """Check whether a directory contains a SKILL.md file."""
    return (path / SKILL_FILE).is_file()


def scan_directory(directory: Path, ignore: Iterable[str] = ()) -> List[Path]:
    """
    Find skill directories directly under a source directory.

    Args:
        directory: Source directory (already resolved)
        ignore: Glob patterns matched against subdirectory names

    Returns:
        Skill directories, sorted by name. Empty if the directory is missing.
    """
    if not directory.is_dir():
        logger.debug(f"Directory not found: {directory}")
        return []

    patterns = list(ignore)
    skill_dirs: List[Path] = []

    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if not entry.is_dir():
            continue

        if is_ignored(entry.name, patterns):
            logger.debug(f"Ignoring directory: {entry.name}")
            continue

        if is_skill_directory(entry):
            skill_dirs.append(entry)

    return skill_dirs


def scan_all_skill_directories(config: Config, cwd: Optional[PathLike] = None) -> List[Skill]:
    """
    Scan every configured source directory for skills.

    Per-skill problems (unreadable SKILL.md, bad front matter, failed
    validation, duplicate name) are logged as warnings and the skill is
    skipped; the scan itself never fails because of a single skill.

    Args:
        config: Project configuration
        cwd: Project root used to resolve relative source directories.
             Defaults to the current directory.

    Returns:
        Skills in source-directory order, then directory-name order
    """
    base = Path(cwd) if cwd is not None else Path.cwd()
    skills: List[Skill] = []
    seen: Set[str] = set()

    logger.debug(f"Scanning skill directories: {config.source_directories}")

    for source in config.source_directories:
        directory = resolve_in(base, source).resolve()

        for skill_dir in scan_directory(directory, config.ignore):
            try:
                skill = parse_skill(skill_dir)
            except ParseError as e:
                logger.warning(f"Failed to parse skill at {skill_dir}: {e}")
                continue

            validation = validate_skill(skill)
            if not validation.valid:
                logger.warning(f"Invalid skill at {skill_dir}:")
                for issue in validation.errors:
                    logger.warning(f"  - {issue.field}: {issue.message}")
                continue

            for issue in validation.warnings:
                logger.debug(f"Skill {skill.name}: {issue.message}")

            if skill.name in seen:
                logger.warning(f"Duplicate skill name: {skill.name} at {skill_dir}")
                continue

            seen.add(skill.name)
            skills.append(skill)
            logger.debug(f"Found skill: {skill.name} at {skill_dir}")

    return skills


def find_skill_by_name(skills: List[Skill], name: str) -> Optional[Skill]:
    """Find a skill by exact name."""
    for skill in skills:
        if skill.name == name:
            return skill
    return None

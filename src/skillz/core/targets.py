"""Target reconciliation.

Two kinds of targets exist:

- prompt targets are text files (AGENTS.md, CLAUDE.md, ...) that share space
  with hand-written content. Skillz owns the region that starts at the line
  equal to ``skillsSectionName`` and runs to the end of the file.
- native and symlink targets are directories that receive one flattened
  entry per skill: a full copy (native) or a directory symlink (symlink).
"""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from ..skills.models import Skill
from .config import Config, Target, resolve_target_sync_mode
from .errors import Conflict, ConflictError, DuplicateSectionError
from .paths import (
    PathLike,
    ensure_directory,
    path_exists,
    remove_path,
    resolve_in,
    safe_read_text,
    safe_write_text,
)
from .render import render_skills

logger = logging.getLogger(__name__)

DIRECTORY_MODES = ("native", "symlink")


@dataclass
class ManagedSection:
    """The Skillz-owned region of a prompt target.

    ``start_line`` is the 0-based index of the heading line; ``end_line`` is
    the line count of the file (the region always runs to end of file).
    """

    start_line: int
    end_line: int
    content: str
    metadata: Dict[str, Any] = field(default_factory=lambda: {"last_sync": "", "sources": []})


@dataclass
class TargetContent:
    """A prompt target as read from disk."""

    full_content: str
    managed_section: Optional[ManagedSection]


def find_section_occurrences(content: str, section_name: str) -> List[int]:
    """Return the 0-based line indexes whose trimmed text equals the heading."""
    heading = section_name.strip()
    return [i for i, line in enumerate(content.split("\n")) if line.strip() == heading]


def validate_no_duplicate_sections(content: str, section_name: str) -> None:
    """Ensure the section heading appears at most once.

    Raises:
        DuplicateSectionError: Listing every occurrence as a 1-based line number
    """
    occurrences = find_section_occurrences(content, section_name)
    if len(occurrences) > 1:
        raise DuplicateSectionError(section_name, [i + 1 for i in occurrences])


def extract_managed_section(content: str, section_name: str) -> Optional[ManagedSection]:
    """Locate the managed section (heading line through end of file)."""
    occurrences = find_section_occurrences(content, section_name)
    if not occurrences:
        return None

    lines = content.split("\n")
    start = occurrences[0]
    return ManagedSection(
        start_line=start,
        end_line=len(lines),
        content="\n".join(lines[start:]),
    )


def replace_managed_section(content: str, new_section: str, section_name: str) -> str:
    """Replace the managed section, or append it if the heading is absent.

    Everything from the heading to end of file is regenerated, including any
    text a user typed below the heading. Whether to move to an explicit
    begin/end marker pair is still open; doing so would not be compatible
    with files written by this scheme.

    Args:
        content: Current file content
        new_section: Rendered section, starting with the heading
        section_name: Heading that delimits the managed section

    Returns:
        New file content ending with exactly one newline
    """
    section = extract_managed_section(content, section_name)
    if section is None:
        before = content.rstrip()
    else:
        before = "\n".join(content.split("\n")[: section.start_line]).rstrip()

    separator = "\n\n" if before else ""
    return before + separator + new_section + "\n"


def read_target_file(path: Path, section_name: str) -> TargetContent:
    """Read a prompt target; a missing file reads as empty."""
    full_content = safe_read_text(path)
    managed = extract_managed_section(full_content, section_name) if full_content else None
    return TargetContent(full_content=full_content, managed_section=managed)


def write_target_file(
    target: Target,
    skills: List[Skill],
    config: Config,
    cwd: PathLike,
) -> bool:
    """Regenerate the managed section of a prompt target.

    The file is left untouched if the heading occurs more than once.

    Returns:
        True if the file content changed

    Raises:
        DuplicateSectionError: If the heading appears more than once
    """
    path = resolve_in(cwd, target.destination)
    logger.debug(f"Reading target file {path}")
    current = read_target_file(path, config.skills_section_name)

    validate_no_duplicate_sections(current.full_content, config.skills_section_name)

    new_section = render_skills(skills, target, config, cwd)
    updated = replace_managed_section(
        current.full_content, new_section, config.skills_section_name
    )

    if updated == current.full_content and path.exists():
        return False

    safe_write_text(path, updated)
    return True


def _is_live_link(dest: Path, skill: Skill) -> bool:
    """True if ``dest`` is a symlink that already points at the skill."""
    if not dest.is_symlink():
        return False
    try:
        return dest.resolve(strict=True) == skill.path.resolve()
    except OSError:
        return False


def _is_source(dest: Path, skill: Skill) -> bool:
    """True if ``dest`` is the skill's own source directory."""
    return not dest.is_symlink() and dest.exists() and dest.resolve() == skill.path.resolve()


def find_directory_conflicts(
    targets: List[Target],
    skills: List[Skill],
    config: Config,
    cwd: PathLike,
    cached_skills: Optional[Set[str]] = None,
) -> List[Conflict]:
    """Find destinations that exist but were not created by Skillz.

    A destination is owned (not a conflict) when the skill name is in the
    cache, when a symlink target already links to the skill, or when the
    destination is the skill's source directory itself. Broken symlinks are
    conflicts.
    """
    cached = cached_skills or set()
    conflicts: List[Conflict] = []

    for target in targets:
        mode = resolve_target_sync_mode(target, config)
        target_dir = resolve_in(cwd, target.destination)

        for skill in skills:
            dest = target_dir / skill.name

            if skill.name in cached or not path_exists(dest):
                continue
            if mode == "symlink" and _is_live_link(dest, skill):
                continue
            if _is_source(dest, skill):
                continue

            conflicts.append(Conflict(target=target.destination, skill=skill.name, path=str(dest)))

    return conflicts


def validate_directory_targets(
    targets: List[Target],
    skills: List[Skill],
    config: Config,
    cwd: PathLike,
    cached_skills: Optional[Set[str]] = None,
) -> None:
    """Check every directory target before any of them is written.

    Raises:
        ConflictError: Listing all conflicts across all targets
    """
    conflicts = find_directory_conflicts(targets, skills, config, cwd, cached_skills)
    if conflicts:
        raise ConflictError(conflicts)


def copy_skills_to_target(target: Target, skills: List[Skill], cwd: PathLike) -> List[Path]:
    """Copy each skill directory into the target directory (native mode).

    Existing copies are removed first.

    Returns:
        Destination paths, one per skill
    """
    target_dir = ensure_directory(resolve_in(cwd, target.destination))
    written = []

    for skill in skills:
        dest = target_dir / skill.name
        if _is_source(dest, skill):
            logger.debug(f"Skipping {skill.name}: target is the source directory")
            continue

        remove_path(dest)
        shutil.copytree(skill.path, dest, symlinks=True)
        written.append(dest)

    return written


def symlink_skills_to_target(target: Target, skills: List[Skill], cwd: PathLike) -> List[Path]:
    """Link each skill directory into the target directory (symlink mode).

    Returns:
        Link paths, one per skill
    """
    target_dir = ensure_directory(resolve_in(cwd, target.destination))
    written = []

    for skill in skills:
        dest = target_dir / skill.name
        if _is_source(dest, skill):
            logger.debug(f"Skipping {skill.name}: target is the source directory")
            continue
        if _is_live_link(dest, skill):
            written.append(dest)
            continue

        remove_path(dest)
        dest.symlink_to(skill.path.resolve(), target_is_directory=True)
        written.append(dest)

    return written

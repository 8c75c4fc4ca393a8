"""Exception types raised by Skillz.

Every error the CLI reports deliberately derives from SkillzError. Plain
OSError subclasses (permission denied, missing parent directory, ...) are
not wrapped and propagate as-is.
"""

from dataclasses import dataclass
from typing import List


class SkillzError(Exception):
    """Base class for Skillz errors."""

    pass


class ParseError(SkillzError):
    """A SKILL.md file is missing or its front matter cannot be parsed."""

    pass


class ValidationError(SkillzError):
    """A skill or configuration violates a structural rule."""

    pass


class ConfigError(ValidationError):
    """The project configuration (skillz.json) is invalid."""

    pass


class InvalidCacheError(SkillzError):
    """Attempted to persist a cache that does not match the cache schema."""

    pass


class SyncError(SkillzError):
    """A sync run was aborted before writing any target."""

    pass


@dataclass
class Conflict:
    """A destination path that already exists and is not owned by Skillz."""

    target: str
    skill: str
    path: str


class ConflictError(SkillzError):
    """One or more directory-target destinations are already occupied."""

    def __init__(self, conflicts: List[Conflict]) -> None:
        self.conflicts = conflicts
        lines = [
            "Cannot sync: destination conflicts detected",
            "",
            "The following skill directories cannot be written because paths already exist:",
            "",
        ]
        for c in conflicts:
            lines.append(f"  - {c.skill} -> {c.path} (target: {c.target})")
        lines.append("")
        lines.append("Please remove or rename conflicting files/directories and try again.")
        super().__init__("\n".join(lines))


class DuplicateSectionError(SkillzError):
    """The managed section heading appears more than once in a target file."""

    def __init__(self, section_name: str, line_numbers: List[int]) -> None:
        self.section_name = section_name
        self.line_numbers = line_numbers
        lines = ", ".join(str(n) for n in line_numbers)
        super().__init__(
            f'Section "{section_name}" appears {len(line_numbers)} times in the '
            f"target file (lines: {lines}). Please manually remove duplicate "
            "sections or choose a different skillsSectionName in skillz.json."
        )

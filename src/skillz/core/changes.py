"""Change detection between scanned skills and the sync cache.

Pure functions: no I/O.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional

from ..skills.models import Skill
from .cache import CacheFile
from .hashing import digests_equal


class ChangeType(str, Enum):
    """How a skill differs from the cached snapshot."""

    NEW = "new"
    MODIFIED = "modified"
    REMOVED = "removed"
    UNCHANGED = "unchanged"


@dataclass
class SkillChange:
    """Classification of one skill.

    Removed skills have no current Skill object; ``name`` is always set.
    """

    type: ChangeType
    name: str
    skill: Optional[Skill] = None
    old_hash: Optional[str] = None
    new_hash: Optional[str] = None


@dataclass
class ChangeSummary:
    """Counts per change type."""

    new: int = 0
    modified: int = 0
    removed: int = 0
    unchanged: int = 0
    total: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "new": self.new,
            "modified": self.modified,
            "removed": self.removed,
            "unchanged": self.unchanged,
            "total": self.total,
        }


def detect_changes(current_skills: List[Skill], cache: CacheFile) -> List[SkillChange]:
    """Classify every current skill and every cached-only name.

    Args:
        current_skills: Skills from this scan
        cache: Snapshot from the last successful sync

    Returns:
        One change per current skill, in input order, followed by one
        ``removed`` change per cached name that was not seen.
    """
    changes: List[SkillChange] = []
    remaining = dict.fromkeys(cache.skills)

    for skill in current_skills:
        entry = cache.skills.get(skill.name)

        if entry is None:
            changes.append(
                SkillChange(ChangeType.NEW, skill.name, skill, new_hash=skill.hash)
            )
        elif not digests_equal(skill.hash, entry.hash):
            changes.append(
                SkillChange(
                    ChangeType.MODIFIED, skill.name, skill,
                    old_hash=entry.hash, new_hash=skill.hash,
                )
            )
        else:
            changes.append(
                SkillChange(
                    ChangeType.UNCHANGED, skill.name, skill,
                    old_hash=entry.hash, new_hash=skill.hash,
                )
            )

        remaining.pop(skill.name, None)

    for name in remaining:
        changes.append(
            SkillChange(ChangeType.REMOVED, name, None, old_hash=cache.skills[name].hash)
        )

    return changes


def has_changes(changes: Iterable[SkillChange]) -> bool:
    """True if any change is not ``unchanged``."""
    return any(c.type != ChangeType.UNCHANGED for c in changes)


def summarize_changes(changes: List[SkillChange]) -> ChangeSummary:
    """Count changes per type."""
    summary = ChangeSummary(total=len(changes))
    for change in changes:
        current = getattr(summary, change.type.value)
        setattr(summary, change.type.value, current + 1)
    return summary


def filter_by_change_type(
    changes: Iterable[SkillChange], types: Iterable[ChangeType]
) -> List[SkillChange]:
    """Keep only changes of the given types."""
    wanted = set(types)
    return [c for c in changes if c.type in wanted]

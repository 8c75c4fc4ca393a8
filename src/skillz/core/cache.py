"""Sync cache: the snapshot of skills written by the last successful sync.

Stored as .skillz-cache.json in the project root. A cache that is missing,
unreadable or does not match the expected shape is never an error for the
caller; it only means the next sync starts fresh.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..skills.models import Skill
from .errors import InvalidCacheError
from .hashing import hash_config
from .paths import PathLike, get_cache_file, safe_write_text

logger = logging.getLogger(__name__)

CACHE_VERSION = "1.0"


@dataclass
class SkillCacheEntry:
    """Cached state of one skill."""

    hash: str
    path: str
    last_modified: str

    def to_dict(self) -> Dict[str, Any]:
        return {"hash": self.hash, "path": self.path, "lastModified": self.last_modified}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SkillCacheEntry":
        return cls(
            hash=data["hash"],
            path=data["path"],
            last_modified=data["lastModified"],
        )


@dataclass
class CacheFile:
    """Snapshot of the last successful sync.

    Attributes:
        version: Cache schema version
        last_sync: ISO timestamp of the sync
        target_file: First configured target (diagnostics only)
        config_hash: Digest of the configuration used; None for caches
            written before config hashing existed
        skills: Skill name -> cached entry
    """

    version: str
    last_sync: str
    target_file: str
    config_hash: Optional[str] = None
    skills: Dict[str, SkillCacheEntry] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "version": self.version,
            "lastSync": self.last_sync,
            "targetFile": self.target_file,
        }
        if self.config_hash is not None:
            result["configHash"] = self.config_hash
        result["skills"] = {name: e.to_dict() for name, e in self.skills.items()}
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CacheFile":
        """Create a cache from a dictionary that already passed validate_cache_data."""
        return cls(
            version=data["version"],
            last_sync=data["lastSync"],
            target_file=data["targetFile"],
            config_hash=data.get("configHash"),
            skills={
                name: SkillCacheEntry.from_dict(entry)
                for name, entry in data["skills"].items()
            },
        )


class CacheStatus(str, Enum):
    FRESH = "fresh"
    ABSENT = "absent"
    CORRUPT = "corrupt"


@dataclass
class CacheState:
    """Outcome of reading the cache file.

    FRESH carries the cache; ABSENT and CORRUPT both mean "start empty",
    CORRUPT additionally records why the file was rejected.
    """

    status: CacheStatus
    cache: Optional[CacheFile] = None
    reason: Optional[str] = None

    @classmethod
    def fresh(cls, cache: CacheFile) -> "CacheState":
        return cls(CacheStatus.FRESH, cache=cache)

    @classmethod
    def absent(cls) -> "CacheState":
        return cls(CacheStatus.ABSENT)

    @classmethod
    def corrupt(cls, reason: str) -> "CacheState":
        return cls(CacheStatus.CORRUPT, reason=reason)


def validate_cache_data(data: Any) -> List[str]:
    """Check a decoded cache against the cache schema.

    Returns:
        List of problems; empty if the data is a valid cache.
    """
    if not isinstance(data, dict):
        return ["cache must be a JSON object"]

    errors = []
    for key in ("version", "lastSync", "targetFile"):
        if not isinstance(data.get(key), str):
            errors.append(f"'{key}' must be a string")

    if "configHash" in data and not isinstance(data["configHash"], str):
        errors.append("'configHash' must be a string")

    skills = data.get("skills")
    if not isinstance(skills, dict):
        errors.append("'skills' must be an object")
        return errors

    for name, entry in skills.items():
        if not isinstance(entry, dict):
            errors.append(f"skills.{name} must be an object")
            continue
        for key in ("hash", "path", "lastModified"):
            if not isinstance(entry.get(key), str):
                errors.append(f"skills.{name}.{key} must be a string")

    return errors


def read_cache_state(cwd: PathLike) -> CacheState:
    """Read the cache file, keeping the reason a cache was rejected."""
    path = get_cache_file(cwd)
    if not path.exists():
        return CacheState.absent()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        return CacheState.corrupt(f"cannot read {path.name}: {e}")

    errors = validate_cache_data(data)
    if errors:
        return CacheState.corrupt("; ".join(errors))

    return CacheState.fresh(CacheFile.from_dict(data))


def load_cache(cwd: PathLike) -> Optional[CacheFile]:
    """Load the cache, or None if it is missing or invalid."""
    state = read_cache_state(cwd)
    if state.status == CacheStatus.CORRUPT:
        logger.debug(f"Ignoring invalid cache: {state.reason}")
    return state.cache


def save_cache(cache: CacheFile, cwd: PathLike) -> Path:
    """Validate and atomically write the cache.

    Raises:
        InvalidCacheError: If the cache does not match the schema
    """
    data = cache.to_dict()
    errors = validate_cache_data(data)
    if errors:
        raise InvalidCacheError(f"Invalid cache: {'; '.join(errors)}")

    path = get_cache_file(cwd)
    safe_write_text(path, json.dumps(data, indent=2) + "\n")
    return path


def build_snapshot(skills: List[Skill], target_file: str, config: Any) -> CacheFile:
    """Build a new cache from the skills that were just synced.

    Args:
        skills: Synced skills
        target_file: Label recorded for diagnostics (first target)
        config: Configuration used for the sync
    """
    return CacheFile(
        version=CACHE_VERSION,
        last_sync=_now_iso(),
        target_file=target_file,
        config_hash=hash_config(config),
        skills={
            skill.name: SkillCacheEntry(
                hash=skill.hash,
                path=str(skill.path),
                last_modified=skill.last_modified.isoformat(),
            )
            for skill in skills
        },
    )


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

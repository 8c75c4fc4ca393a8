"""Detection of the LLM tools a project is set up for."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .config import DEFAULT_SKILL_DIRECTORY
from .paths import PathLike


@dataclass
class Environment:
    """A supported tool and the files that identify it."""

    id: str
    name: str
    description: str
    preset: str
    markers: List[str]
    targets: List[str]
    skill_directories: List[str] = field(default_factory=lambda: [DEFAULT_SKILL_DIRECTORY])


ENVIRONMENTS: List[Environment] = [
    Environment(
        id="codex",
        name="Codex",
        description="Codex-style AGENTS.md workspace",
        preset="agentsmd",
        markers=["AGENTS.md"],
        targets=["AGENTS.md"],
    ),
    Environment(
        id="cursor",
        name="Cursor",
        description="Cursor IDE with .cursor/rules",
        preset="cursor",
        markers=[".cursorrules", ".cursor/rules"],
        targets=[".cursor/rules/skills.mdc"],
    ),
    Environment(
        id="claude",
        name="Claude Code",
        description="Claude Code with CLAUDE.md",
        preset="claude",
        markers=["CLAUDE.md", ".claude/CLAUDE.md"],
        targets=["CLAUDE.md"],
    ),
    Environment(
        id="aider",
        name="Aider",
        description="Aider conventions file",
        preset="aider",
        markers=[".aider/conventions.md"],
        targets=[".aider/conventions.md"],
    ),
]


def detect_environments(cwd: PathLike) -> List[Environment]:
    """Return every environment with at least one marker present, in table order."""
    root = Path(cwd)
    return [env for env in ENVIRONMENTS if any((root / m).exists() for m in env.markers)]


def detect_primary_environment(cwd: PathLike) -> Optional[Environment]:
    """Return the first detected environment."""
    detected = detect_environments(cwd)
    return detected[0] if detected else None


def get_environment_by_preset(preset: str) -> Optional[Environment]:
    for env in ENVIRONMENTS:
        if env.preset == preset:
            return env
    return None


def detect_targets(cwd: PathLike) -> List[str]:
    """Existing target files for all detected environments, without duplicates."""
    root = Path(cwd)
    found: List[str] = []
    for env in detect_environments(cwd):
        for target in env.targets:
            if target not in found and (root / target).exists():
                found.append(target)
    return found

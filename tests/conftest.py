"""Pytest configuration for Skillz tests.

Puts src/ at the front of sys.path so the package imports without an
editable install, and provides helpers for building project trees.
"""
import json
import sys
from pathlib import Path

import pytest


def pytest_configure(config):
    """Make src/ importable before any test module is collected."""
    src_path = str(Path(__file__).parent.parent.absolute() / "src")
    if src_path in sys.path:
        sys.path.remove(src_path)
    sys.path.insert(0, src_path)


def write_skill(
    base_dir: Path,
    dir_name: str,
    name: str = None,
    description: str = "A test skill",
    body: str = "Do the thing.",
) -> Path:
    """Create <base_dir>/<dir_name>/SKILL.md and return the skill directory."""
    skill_dir = base_dir / dir_name
    skill_dir.mkdir(parents=True, exist_ok=True)
    lines = ["---", f"name: {name or dir_name}"]
    if description is not None:
        lines.append(f"description: {description}")
    lines.extend(["---", "", body, ""])
    (skill_dir / "SKILL.md").write_text("\n".join(lines))
    return skill_dir


def write_config(root: Path, **overrides) -> Path:
    """Write a skillz.json with sensible defaults for tests."""
    data = {
        "version": "1.0",
        "targets": ["AGENTS.md"],
        "skillDirectories": [".claude/skills"],
        "additionalSkills": [],
        "ignore": [],
        "includeInstructions": False,
        "autoSync": False,
        "skillsSectionName": "## Additional Instructions",
    }
    data.update(overrides)
    path = root / "skillz.json"
    path.write_text(json.dumps(data, indent=2))
    return path


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A project root with a config and an empty .claude/skills directory."""
    (tmp_path / ".claude" / "skills").mkdir(parents=True)
    write_config(tmp_path)
    return tmp_path


@pytest.fixture
def skills_dir(project: Path) -> Path:
    return project / ".claude" / "skills"


@pytest.fixture
def make_skill():
    """Factory fixture wrapping write_skill."""
    return write_skill


@pytest.fixture
def make_config():
    """Factory fixture wrapping write_config."""
    return write_config

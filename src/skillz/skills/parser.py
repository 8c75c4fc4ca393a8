"""SKILL.md parsing, validation and scaffolding.

A skill file starts with a YAML front matter block delimited by ``---``
lines, followed by free-form markdown:

    ---
    name: python-expert
    description: Expert Python development assistance
    version: 1.0.0
    ---

    # Python Expert
    ...
"""

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

from ..core.errors import ParseError, ValidationError
from ..core.hashing import hash_skill
from ..core.paths import SKILL_FILE, ensure_directory, safe_write_text
from .models import Skill, ValidationIssue, ValidationResult

MAX_NAME_LENGTH = 64
MAX_DESCRIPTION_LENGTH = 1024

# Accepted when scanning existing skills
NAME_PATTERN = re.compile(r"^[A-Za-z0-9\-_ ]+$")
# Required when creating new skills
STRICT_NAME_PATTERN = re.compile(r"^[a-z0-9\- ]+$")

VERSION_PATTERN = re.compile(r"^\d+\.\d+\.\d+$")

_FRONT_MATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(?:(.*?)\r?\n)?---[ \t]*(?:\r?\n|\Z)", re.DOTALL
)


def split_front_matter(text: str) -> Tuple[Dict[str, Any], str]:
    """Split a skill file into its front matter mapping and body.

    Args:
        text: Full SKILL.md content

    Returns:
        Tuple of (front matter dict, body). A file without front matter
        yields an empty dict and the whole text as body.

    Raises:
        ParseError: If the front matter is not valid YAML or not a mapping
    """
    match = _FRONT_MATTER_RE.match(text)
    if not match:
        return {}, text

    try:
        data = yaml.safe_load(match.group(1) or "")
    except yaml.YAMLError as e:
        raise ParseError(f"Invalid front matter: {e}") from e

    # Handle empty front matter (yaml.safe_load returns None)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ParseError("Front matter must be a YAML mapping")

    return data, text[match.end():]


def parse_skill(skill_path: Path) -> Skill:
    """Parse a skill from its directory.

    Args:
        skill_path: Directory containing SKILL.md

    Returns:
        Parsed Skill with its hash computed

    Raises:
        ParseError: If SKILL.md is missing, its front matter is malformed, or
            name or description is not a string
    """
    skill_file = skill_path / SKILL_FILE
    try:
        text = skill_file.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ParseError(f"SKILL.md not found at {skill_file}")
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(f"Cannot read {skill_file}: {e}") from e

    try:
        metadata, body = split_front_matter(text)
    except ParseError as e:
        raise ParseError(f"{skill_file}: {e}") from e

    mtime = skill_file.stat().st_mtime

    skill = Skill(
        name=_text_field(metadata, "name", skill_file),
        description=_text_field(metadata, "description", skill_file),
        path=skill_path,
        body=body.strip(),
        metadata=metadata,
        last_modified=datetime.fromtimestamp(mtime, tz=timezone.utc),
    )
    skill.hash = hash_skill(skill)
    return skill


def validate_skill(skill: Skill, strict: bool = False) -> ValidationResult:
    """Validate a parsed skill.

    Never mutates the skill.

    Args:
        skill: Skill to check
        strict: Restrict names to lowercase letters, digits, hyphens and spaces

    Returns:
        ValidationResult with field-level errors and warnings
    """
    result = ValidationResult()

    if not skill.name:
        result.errors.append(ValidationIssue("name", "Skill name is required"))
    else:
        pattern = STRICT_NAME_PATTERN if strict else NAME_PATTERN
        if len(skill.name) > MAX_NAME_LENGTH or not pattern.fullmatch(skill.name):
            allowed = (
                "lowercase letters, numbers, hyphens and spaces"
                if strict
                else "letters, numbers, hyphens, underscores and spaces"
            )
            result.errors.append(
                ValidationIssue(
                    "name",
                    f"Skill name must contain only {allowed}, "
                    f"and be {MAX_NAME_LENGTH} characters or less",
                    skill.name,
                )
            )

    if not skill.description:
        result.errors.append(ValidationIssue("description", "Skill description is required"))
    elif len(skill.description) > MAX_DESCRIPTION_LENGTH:
        result.errors.append(
            ValidationIssue(
                "description",
                f"Skill description must be between 1 and {MAX_DESCRIPTION_LENGTH} characters",
                skill.description,
            )
        )

    if not skill.body:
        result.warnings.append(ValidationIssue("body", "Skill has no content"))

    return result


def normalize_skill_name(name: str) -> str:
    """Normalize a skill name for use as a directory name.

    Lowercases, turns underscores and whitespace into hyphens, collapses
    repeated hyphens and drops any other character.
    """
    normalized = name.lower()
    normalized = re.sub(r"[_\s]+", "-", normalized)
    normalized = re.sub(r"-+", "-", normalized)
    normalized = re.sub(r"[^a-z0-9-]", "", normalized)
    return normalized.strip("-")


def create_skill(
    name: str,
    description: str,
    base_dir: Path,
    version: str = "0.0.0",
) -> Path:
    """Scaffold a new skill directory with a SKILL.md file.

    Args:
        name: Skill name, kept verbatim in the front matter
        description: Skill description
        base_dir: Skill source directory to create the skill in
        version: Semantic version (X.Y.Z)

    Returns:
        Path to the created skill directory

    Raises:
        ValidationError: If name, description or version are invalid, or the
            skill directory already exists
    """
    draft = Skill(name=name, description=description, path=base_dir, body="")
    errors = validate_skill(draft, strict=True).errors
    if errors:
        raise ValidationError(
            "Invalid skill front matter: " + "; ".join(e.message for e in errors)
        )

    normalized = normalize_skill_name(name)
    if not normalized:
        raise ValidationError("Skill name must contain at least one alphanumeric character")

    if not VERSION_PATTERN.match(version):
        raise ValidationError("Version must be in semver format (e.g., 0.0.0, 1.2.3)")

    skill_dir = base_dir / normalized
    if skill_dir.exists():
        raise ValidationError(f"Skill '{normalized}' already exists at {skill_dir}")

    front_matter = yaml.safe_dump(
        {"name": name, "description": description, "version": version},
        sort_keys=False,
        allow_unicode=True,
    )
    ensure_directory(skill_dir)
    safe_write_text(skill_dir / SKILL_FILE, f"---\n{front_matter}---\n\n")
    return skill_dir


def _text_field(metadata: Dict[str, Any], key: str, skill_file: Path) -> str:
    """Read a string front matter field; missing reads as empty.

    Raises:
        ParseError: If the value is present but not a string
    """
    value = metadata.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ParseError(
            f"{skill_file}: '{key}' must be a string, got {type(value).__name__}"
        )
    return value.strip()

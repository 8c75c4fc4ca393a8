"""Data model for skills discovered on disk."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Union

# Front matter values as produced by YAML: scalars, lists and nested maps.
# Unknown keys are kept as-is.
MetadataValue = Union[str, int, float, bool, None, List[Any], Dict[str, Any]]


@dataclass
class Skill:
    """A named unit of instructions defined by a SKILL.md file.

    Attributes:
        name: Skill name from front matter (unique within one scan)
        description: One-paragraph summary from front matter
        path: Skill directory (the directory that contains SKILL.md)
        body: Markdown body after the front matter, trimmed
        metadata: Full front matter mapping, including unknown keys
        last_modified: Modification time of SKILL.md
        hash: 12-character content digest over name, description and body
    """

    name: str
    description: str
    path: Path
    body: str
    metadata: Dict[str, MetadataValue] = field(default_factory=dict)
    last_modified: datetime = field(default_factory=datetime.now)
    hash: str = ""

    @property
    def skill_file(self) -> Path:
        return self.path / "SKILL.md"


@dataclass
class ValidationIssue:
    """A single validation error or warning for one field."""

    field: str
    message: str
    value: Any = None


@dataclass
class ValidationResult:
    """Result of validating a skill."""

    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

"""Project configuration for Skillz.

This module manages the skillz.json file stored at the project root.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .errors import ConfigError
from .paths import PathLike, get_config_file, safe_write_text

DEFAULT_SECTION_NAME = "## Additional Instructions"
DEFAULT_SKILL_DIRECTORY = ".claude/skills"

SYNC_MODES = ("prompt", "native", "symlink")
PATH_STYLES = ("relative", "absolute")
PRESETS = ("agentsmd", "aider", "cursor", "claude")

PRESET_TARGETS = {
    None: "AGENTS.md",
    "agentsmd": "AGENTS.md",
    "aider": ".aider/conventions.md",
    "cursor": ".cursor/rules/skills.mdc",
    "claude": "CLAUDE.md",
}

PATH_STYLE_ALIASES = {
    "rel": "relative",
    "relative": "relative",
    "abs": "absolute",
    "absolute": "absolute",
}


@dataclass
class Target:
    """A sync destination.

    Attributes:
        destination: File (prompt mode) or directory (native/symlink mode),
            relative to the project root unless absolute.
        sync_mode: prompt, native or symlink. None inherits the project default.
        template: Template name or path overriding the project template.
    """

    destination: str
    sync_mode: Optional[str] = None
    template: Optional[str] = None

    @classmethod
    def from_value(cls, value: Union[str, Dict[str, Any]]) -> "Target":
        """Create a target from a config entry (string or object)."""
        if isinstance(value, str):
            return cls(destination=value)
        if not isinstance(value, dict):
            raise ConfigError(f"Invalid target entry: {value!r}")

        # "name" is the older spelling of "destination"
        destination = value.get("destination") or value.get("name")
        if not isinstance(destination, str) or not destination:
            raise ConfigError(f"Target is missing a destination: {value!r}")

        sync_mode = value.get("syncMode")
        if sync_mode is not None and sync_mode not in SYNC_MODES:
            raise ConfigError(
                f"Target '{destination}': invalid syncMode '{sync_mode}'. "
                f"Must be one of: {list(SYNC_MODES)}"
            )

        template = value.get("template")
        if template is not None and not isinstance(template, str):
            raise ConfigError(f"Target '{destination}': template must be a string")

        return cls(destination=destination, sync_mode=sync_mode, template=template)

    def to_value(self) -> Union[str, Dict[str, Any]]:
        """Convert to a config entry, using the short string form when possible."""
        if self.sync_mode is None and self.template is None:
            return self.destination
        result: Dict[str, Any] = {"destination": self.destination}
        if self.sync_mode is not None:
            result["syncMode"] = self.sync_mode
        if self.template is not None:
            result["template"] = self.template
        return result


@dataclass
class Config:
    """Project configuration.

    Stored in <project>/skillz.json
    """

    version: str = "1.0"
    preset: Optional[str] = None

    # Where skills are written
    targets: List[Target] = field(default_factory=list)

    # Where skills are read from, in precedence order
    skill_directories: List[str] = field(default_factory=list)
    additional_skills: List[str] = field(default_factory=list)

    # Glob patterns matched against skill directory names
    ignore: List[str] = field(default_factory=list)

    # Inline full skill bodies instead of name + description + link
    include_instructions: bool = False

    auto_sync: bool = False
    skills_section_name: str = DEFAULT_SECTION_NAME

    # Defaults applied to targets that do not set their own
    sync_mode: Optional[str] = None
    path_style: Optional[str] = None
    template: Optional[str] = None

    @property
    def source_directories(self) -> List[str]:
        """All directories to scan, skill_directories first."""
        return [*self.skill_directories, *self.additional_skills]

    @classmethod
    def default(cls, preset: Optional[str] = None) -> "Config":
        """Create the default configuration for a preset.

        Args:
            preset: One of PRESETS, or None for the generic AGENTS.md setup.

        Raises:
            ConfigError: If the preset is unknown.
        """
        if preset is not None and preset not in PRESETS:
            raise ConfigError(
                f"Unknown preset '{preset}'. Must be one of: {list(PRESETS)}"
            )
        return cls(
            preset=preset,
            targets=[Target(destination=PRESET_TARGETS[preset])],
            skill_directories=[DEFAULT_SKILL_DIRECTORY],
        )

    @classmethod
    def load(cls, cwd: PathLike) -> Optional["Config"]:
        """Load configuration from the project directory.

        Args:
            cwd: Project root containing skillz.json.

        Returns:
            Config instance, or None if no config file exists.

        Raises:
            ConfigError: If the file cannot be parsed or fails validation.
        """
        path = get_config_file(cwd)
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Failed to parse config file {path}: {e}") from e

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create config from dictionary.

        Args:
            data: Dictionary with config values (skillz.json keys).

        Returns:
            Config instance.

        Raises:
            ConfigError: If any field has the wrong shape.
        """
        if not isinstance(data, dict):
            raise ConfigError("Invalid configuration: expected a JSON object")

        preset = data.get("preset")
        if preset is not None and preset not in PRESETS:
            raise ConfigError(f"Invalid configuration: unknown preset '{preset}'")

        sync_mode = data.get("syncMode")
        if sync_mode is not None and sync_mode not in SYNC_MODES:
            raise ConfigError(f"Invalid configuration: unknown syncMode '{sync_mode}'")

        path_style = data.get("pathStyle")
        if path_style is not None and path_style not in PATH_STYLES:
            raise ConfigError(f"Invalid configuration: unknown pathStyle '{path_style}'")

        targets = data.get("targets") or []
        if not isinstance(targets, list):
            raise ConfigError("Invalid configuration: 'targets' must be a list")

        section_name = data.get("skillsSectionName") or DEFAULT_SECTION_NAME
        if not isinstance(section_name, str) or not section_name.strip():
            raise ConfigError("Invalid configuration: 'skillsSectionName' must be a non-empty string")

        template = data.get("template")
        if template is not None and not isinstance(template, str):
            raise ConfigError("Invalid configuration: 'template' must be a string")

        return cls(
            version=str(data.get("version", "1.0")),
            preset=preset,
            targets=[Target.from_value(t) for t in targets],
            skill_directories=_string_list(data, "skillDirectories"),
            additional_skills=_string_list(data, "additionalSkills"),
            ignore=_string_list(data, "ignore"),
            include_instructions=_bool(data, "includeInstructions"),
            auto_sync=_bool(data, "autoSync"),
            skills_section_name=section_name,
            sync_mode=sync_mode,
            path_style=path_style,
            template=template,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to its skillz.json representation.

        Optional fields that are unset are omitted.
        """
        result: Dict[str, Any] = {"version": self.version}
        if self.preset is not None:
            result["preset"] = self.preset
        result.update(
            {
                "targets": [t.to_value() for t in self.targets],
                "skillDirectories": list(self.skill_directories),
                "additionalSkills": list(self.additional_skills),
                "ignore": list(self.ignore),
                "includeInstructions": self.include_instructions,
                "autoSync": self.auto_sync,
                "skillsSectionName": self.skills_section_name,
            }
        )
        if self.sync_mode is not None:
            result["syncMode"] = self.sync_mode
        if self.path_style is not None:
            result["pathStyle"] = self.path_style
        if self.template is not None:
            result["template"] = self.template
        return result

    def save(self, cwd: PathLike) -> Path:
        """Save configuration to the project directory.

        Args:
            cwd: Project root.

        Returns:
            Path of the written skillz.json.
        """
        # Round-trip through from_dict so an invalid config is never written
        Config.from_dict(self.to_dict())

        path = get_config_file(cwd)
        safe_write_text(path, json.dumps(self.to_dict(), indent=2) + "\n")
        return path


def resolve_target_sync_mode(target: Target, config: Config) -> str:
    """Get the effective sync mode for a target."""
    return target.sync_mode or config.sync_mode or "prompt"


def normalize_path_style(value: str) -> str:
    """Normalize a path style value, accepting rel/abs shorthands.

    Raises:
        ConfigError: If the value is not a known style.
    """
    style = PATH_STYLE_ALIASES.get(value.strip().lower())
    if style is None:
        raise ConfigError(
            f'Invalid path style: "{value}". Must be one of: relative, absolute, rel, abs'
        )
    return style


def _string_list(data: Dict[str, Any], key: str) -> List[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"Invalid configuration: '{key}' must be a list of strings")
    return list(value)


def _bool(data: Dict[str, Any], key: str) -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise ConfigError(f"Invalid configuration: '{key}' must be a boolean")
    return value

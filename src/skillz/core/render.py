"""Render the managed skills section with Jinja2.

Bundled templates live in skillz/templates/. A template setting that is not
a bundled name is treated as a path to a custom Jinja2 template, absolute or
relative to the project root.
"""

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from jinja2 import Environment, FileSystemLoader, Template, TemplateError

from ..skills.models import Skill
from .config import Config, Target
from .errors import ConfigError, ValidationError
from .paths import PathLike, resolve_in

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"

BUNDLED_TEMPLATES = {
    "default": "default.md.j2",
    "readme": "readme.md.j2",
}

_environments: Dict[Path, Environment] = {}


def _environment(template_dir: Path) -> Environment:
    env = _environments.get(template_dir)
    if env is None:
        env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
        )
        _environments[template_dir] = env
    return env


def load_template(name_or_path: str, cwd: PathLike) -> Template:
    """Load a bundled template by name or a custom template by path.

    Raises:
        ConfigError: If a custom template file does not exist or does not parse
    """
    bundled = BUNDLED_TEMPLATES.get(name_or_path)
    if bundled is not None:
        return _environment(TEMPLATES_DIR).get_template(bundled)

    path = resolve_in(cwd, name_or_path).resolve()
    if not path.is_file():
        raise ConfigError(
            f"Template not found: {name_or_path}. Use one of "
            f"{sorted(BUNDLED_TEMPLATES)} or a path to a template file."
        )
    try:
        return _environment(path.parent).get_template(path.name)
    except TemplateError as e:
        raise ConfigError(f"Invalid template {name_or_path}: {e}") from e


def display_path(path: Path, cwd: PathLike, style: str) -> str:
    """Format a path for the rendered section."""
    if style == "absolute":
        return str(path.resolve())
    relative = os.path.relpath(path.resolve(), Path(cwd).resolve())
    return Path(relative).as_posix()


def build_template_data(
    skills: List[Skill], config: Config, cwd: PathLike
) -> Dict[str, Any]:
    """Build the variables passed to a template."""
    style = config.path_style or "relative"
    entries = []
    for skill in skills:
        entry: Dict[str, Any] = {
            "name": skill.name,
            "description": skill.description,
            "path": display_path(skill.skill_file, cwd, style),
        }
        if config.include_instructions:
            entry["content"] = skill.body
        entries.append(entry)

    return {
        "section_name": config.skills_section_name.strip(),
        "skills": entries,
        "sources": config.source_directories,
        "include_instructions": config.include_instructions,
        "last_sync": datetime.now(timezone.utc).isoformat(),
    }


def render_skills(skills: List[Skill], target: Target, config: Config, cwd: PathLike) -> str:
    """Render the managed section for one target.

    The returned text starts with the section heading, contains it on no
    other line, and has no trailing newline.

    Raises:
        ConfigError: If the template is invalid, fails to render, or does not
            start with the section heading
        ValidationError: If an inlined skill body repeats the section heading
    """
    name = target.template or config.template or "default"
    template = load_template(name, cwd)
    try:
        rendered = template.render(**build_template_data(skills, config, cwd)).rstrip()
    except TemplateError as e:
        raise ConfigError(f"Failed to render template {name}: {e}") from e

    check_rendered_section(rendered, skills, config, name)
    return rendered


def check_rendered_section(
    rendered: str, skills: List[Skill], config: Config, template_name: str
) -> None:
    """Ensure the heading is the first line of the section and appears only once."""
    heading = config.skills_section_name.strip()
    lines = rendered.split("\n")

    if lines[0].strip() != heading:
        raise ConfigError(
            f'Template {template_name} must start with the section heading "{heading}" '
            "(use {{ section_name }} on the first line)"
        )

    if _has_heading(lines[1:], heading):
        offenders = [
            s.name for s in skills
            if config.include_instructions and _has_heading(s.body.split("\n"), heading)
        ]
        if offenders:
            raise ValidationError(
                f'Skill(s) {", ".join(offenders)} contain the section heading "{heading}" '
                "in their instructions. Rename that heading or choose a different "
                "skillsSectionName in skillz.json."
            )
        raise ConfigError(
            f'Template {template_name} repeats the section heading "{heading}"'
        )


def _has_heading(lines: List[str], heading: str) -> bool:
    return any(line.strip() == heading for line in lines)

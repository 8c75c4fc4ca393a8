#!/usr/bin/env python3
"""Skillz CLI - Sync agent skills into LLM tool instruction files.

Usage:
    skillz init --preset agentsmd
    skillz sync
    skillz list
    skillz info
    skillz create my-skill "What the skill does"
"""

import json
from pathlib import Path
from typing import List, Optional, Tuple

import click

from . import __version__
from .core.cache import load_cache
from .core.config import PRESETS, Config, Target, resolve_target_sync_mode
from .core.environment import detect_targets
from .core.errors import SkillzError
from .core.paths import CACHE_FILE, CONFIG_FILE, find_project_root, get_config_file, resolve_in
from .core.reporting import Reporter, configure_logging
from .core.sync import SyncOptions, run_sync
from .skills.models import Skill
from .skills.parser import create_skill
from .skills.scanner import scan_all_skill_directories


def _project_root() -> Path:
    """Directory holding skillz.json, searching upwards from the current directory."""
    return find_project_root(Path.cwd()) or Path.cwd()


def _load_config(cwd: Path) -> Config:
    try:
        config = Config.load(cwd)
    except SkillzError as e:
        raise click.ClickException(str(e))
    if config is None:
        raise click.ClickException("No configuration file found. Run `skillz init` first.")
    return config


def _scan(config: Config, cwd: Path) -> List[Skill]:
    return scan_all_skill_directories(config, cwd)


@click.group()
@click.version_option(version=__version__, prog_name="skillz")
def main():
    """Skillz - Sync agent skills across LLM tools.

    Skills are directories containing a SKILL.md file. Skillz writes them
    into a managed section of files such as AGENTS.md, or copies/links them
    into skill directories of other tools.

    \b
    Quick start:
        skillz init
        skillz sync
    """
    pass


@main.command()
@click.option(
    "--preset",
    type=click.Choice(PRESETS),
    default=None,
    help="Use a preset configuration.",
)
@click.option(
    "--target",
    default=None,
    help="Target file path. Overrides the preset target.",
)
@click.option(
    "--additional-skills",
    multiple=True,
    help="Additional skill directory (repeatable).",
)
@click.option(
    "--global-skills",
    is_flag=True,
    help="Include the global ~/.claude/skills directory.",
)
@click.option(
    "--template",
    default=None,
    help="Template name (default, readme) or path to a custom template.",
)
@click.option(
    "--include-instructions",
    is_flag=True,
    help="Inline full skill instructions in targets.",
)
@click.option(
    "--no-sync",
    is_flag=True,
    help="Skip the initial sync.",
)
def init(
    preset: Optional[str],
    target: Optional[str],
    additional_skills: Tuple[str, ...],
    global_skills: bool,
    template: Optional[str],
    include_instructions: bool,
    no_sync: bool,
):
    """Initialize skillz in the current directory.

    \b
    Examples:
        skillz init
        skillz init --preset aider
        skillz init --target docs/AGENTS.md --global-skills
    """
    cwd = Path.cwd()
    config_path = get_config_file(cwd)
    if config_path.exists():
        raise click.ClickException(
            f"Configuration file already exists at {CONFIG_FILE}. Remove it first."
        )

    click.echo("Initializing skillz...")
    config = Config.default(preset)
    if preset:
        click.echo(f"  Using preset: {preset}")

    if target:
        config.targets = [Target(destination=target)]
    elif preset:
        detected = detect_targets(cwd)
        if detected:
            click.echo(f"  Detected existing target files: {', '.join(detected)}")
            config.targets = [Target(destination=t) for t in detected]

    config.additional_skills = list(additional_skills)

    if global_skills:
        global_dir = "~/.claude/skills"
        if global_dir not in config.skill_directories:
            config.skill_directories.append(global_dir)

    if template:
        config.template = template
    config.include_instructions = include_instructions

    try:
        config.save(cwd)
    except SkillzError as e:
        raise click.ClickException(str(e))

    click.echo(click.style(f"Created configuration file: {CONFIG_FILE}", fg="green"))
    click.echo(json.dumps(config.to_dict(), indent=2))

    if not config.targets:
        click.echo("No targets configured. Use `skillz create` and `skillz list` to manage skills.")
    elif no_sync:
        click.echo("Skipping initial sync (use `skillz sync` to sync skills)")
    else:
        click.echo("Running initial sync...")
        ctx = click.get_current_context()
        ctx.invoke(sync)

    click.echo(click.style("Initialization complete!", fg="green", bold=True))


@main.command()
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show what would be synced without making changes.",
)
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Sync even if no changes are detected.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Show detailed operation logs.",
)
@click.option(
    "--only",
    multiple=True,
    help="Sync only this skill (repeatable).",
)
@click.option(
    "--path-style",
    default=None,
    help="Skill path style in targets: relative, absolute, rel, abs.",
)
@click.option(
    "--template",
    default=None,
    help="Template name (default, readme) or path to a custom template.",
)
def sync(
    dry_run: bool = False,
    force: bool = False,
    verbose: bool = False,
    only: Tuple[str, ...] = (),
    path_style: Optional[str] = None,
    template: Optional[str] = None,
):
    """Synchronize skills from source directories to targets.

    \b
    Examples:
        skillz sync
        skillz sync --dry-run
        skillz sync --only python-expert --only react-patterns
        skillz sync --force --path-style absolute
    """
    configure_logging(verbose)
    reporter = Reporter(verbose=verbose)
    options = SyncOptions(
        dry_run=dry_run,
        force=force,
        only=list(only),
        path_style=path_style,
        template=template,
    )

    try:
        run_sync(_project_root(), options, reporter)
    except (SkillzError, OSError) as e:
        raise click.ClickException(str(e))


def _escape_cell(value: str) -> str:
    return value.replace("|", "\\|")


@main.command("list")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "markdown"]),
    default="table",
    help="Output format.",
)
@click.option(
    "--synced-only",
    is_flag=True,
    help="Only skills recorded in the last sync.",
)
@click.option(
    "--unsynced-only",
    is_flag=True,
    help="Only skills not recorded in the last sync.",
)
def list_cmd(output_format: str, synced_only: bool, unsynced_only: bool):
    """List discovered skills.

    \b
    Examples:
        skillz list
        skillz list --format json
        skillz list --unsynced-only
    """
    if synced_only and unsynced_only:
        raise click.ClickException("--synced-only and --unsynced-only are mutually exclusive")

    configure_logging()
    cwd = _project_root()
    config = _load_config(cwd)
    skills = _scan(config, cwd)

    if not skills:
        click.echo("No skills found.")
        return

    if synced_only or unsynced_only:
        cache = load_cache(cwd)
        synced = set(cache.skills) if cache else set()
        skills = [s for s in skills if (s.name in synced) == synced_only]

    if not skills:
        click.echo("No skills found matching the filter criteria.")
        return

    if output_format == "json":
        rows = [
            {"name": s.name, "description": s.description, "path": str(s.path)}
            for s in skills
        ]
        click.echo(json.dumps(rows, indent=2))
        return

    if output_format == "markdown":
        click.echo("| Name | Description | Path |")
        click.echo("|------|-------------|------|")
        for s in skills:
            click.echo(
                f"| {_escape_cell(s.name)} | {_escape_cell(s.description)} "
                f"| {_escape_cell(str(s.path))} |"
            )
    else:
        width = max(len("Name"), *(len(s.name) for s in skills))
        click.echo(click.style(f"{'Name'.ljust(width)}  Description", bold=True))
        for s in skills:
            description = s.description if len(s.description) <= 60 else s.description[:57] + "..."
            click.echo(f"{s.name.ljust(width)}  {description}")
            click.echo(f"{''.ljust(width)}  {click.style(str(s.path), dim=True)}")

    click.echo(f"Total: {len(skills)} skill(s)")


@main.command()
def info():
    """Show configuration, targets and skill count."""
    configure_logging()
    cwd = _project_root()
    config = _load_config(cwd)
    skills = _scan(config, cwd)

    click.echo(click.style("Skillz", bold=True))
    click.echo()
    click.echo(f"Configuration: {get_config_file(cwd)}")

    if not config.targets:
        click.echo("Targets: (none)")
    else:
        click.echo(f"Targets ({len(config.targets)}):")
        for target in config.targets:
            mode = resolve_target_sync_mode(target, config)
            click.echo(f"  - {target.destination} ({mode})")

    click.echo(f"Skill directories: {', '.join(config.source_directories) or '(none)'}")
    click.echo(f"Skills: {len(skills)}")

    cache = load_cache(cwd)
    if cache:
        click.echo(f"Last sync: {cache.last_sync}")
    else:
        click.echo(f"Last sync: never ({CACHE_FILE} not found)")


@main.command()
@click.argument("name")
@click.argument("description")
@click.option(
    "--path",
    "base_path",
    default=None,
    help="Directory to create the skill in. Defaults to the first skill directory.",
)
@click.option(
    "--skill-version",
    default="0.0.0",
    help="Initial skill version (X.Y.Z).",
)
def create(name: str, description: str, base_path: Optional[str], skill_version: str):
    """Create a new skill with a SKILL.md scaffold.

    \b
    Examples:
        skillz create python-expert "Expert Python assistance"
        skillz create "My Skill" "Does things" --path ~/.claude/skills
    """
    cwd = _project_root()

    if base_path:
        base_dir = resolve_in(cwd, base_path)
    else:
        config = _load_config(cwd)
        if not config.skill_directories:
            raise click.ClickException(
                "No skill directories configured in skillz.json. "
                "Add one to skillDirectories or use --path."
            )
        base_dir = resolve_in(cwd, config.skill_directories[0])

    try:
        skill_dir = create_skill(name, description, base_dir, version=skill_version)
    except SkillzError as e:
        raise click.ClickException(str(e))

    click.echo(click.style(f"Created skill '{skill_dir.name}'", fg="green"))
    click.echo(f"  Location: {skill_dir}")
    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Edit the SKILL.md file to add instructions")
    click.echo("  2. Run `skillz sync` to sync the skill to your targets")


if __name__ == "__main__":
    main()

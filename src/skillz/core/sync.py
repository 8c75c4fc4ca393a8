"""Sync orchestration.

One sync run moves through these steps, stopping early where noted:

    load config -> scan -> filter (--only) -> load cache
    -> decide (force / no cache / config or skill changes; else up to date)
    -> validate directory targets -> [dry run stops here]
    -> write every target in configured order -> update cache

Directory targets are validated as a batch before anything is written. A
failure while writing targets stops the loop; targets written before the
failure are not rolled back.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ..skills.models import Skill
from ..skills.scanner import scan_all_skill_directories
from .cache import (
    CacheFile,
    CacheStatus,
    build_snapshot,
    read_cache_state,
    save_cache,
)
from .changes import (
    ChangeType,
    SkillChange,
    detect_changes,
    has_changes,
    summarize_changes,
)
from .config import Config, Target, normalize_path_style, resolve_target_sync_mode
from .errors import ConflictError, SyncError
from .hashing import digests_equal, hash_config
from .paths import PathLike
from .reporting import Reporter
from .targets import (
    DIRECTORY_MODES,
    copy_skills_to_target,
    symlink_skills_to_target,
    validate_directory_targets,
    write_target_file,
)


class SyncStatus(str, Enum):
    SYNCED = "synced"
    UP_TO_DATE = "up_to_date"
    DRY_RUN = "dry_run"
    NO_SKILLS = "no_skills"


@dataclass
class SyncOptions:
    """Per-invocation options for a sync run."""

    dry_run: bool = False
    force: bool = False
    only: List[str] = field(default_factory=list)
    # Overrides for the config's pathStyle and template
    path_style: Optional[str] = None
    template: Optional[str] = None


@dataclass
class TargetResult:
    destination: str
    mode: str
    changed: bool = False


@dataclass
class SyncResult:
    """What a sync run did (or would do, for a dry run)."""

    status: SyncStatus
    skills: List[Skill] = field(default_factory=list)
    changes: List[SkillChange] = field(default_factory=list)
    config_changed: bool = False
    targets: List[TargetResult] = field(default_factory=list)
    cache_written: bool = False


def apply_overrides(config: Config, options: SyncOptions, reporter: Reporter) -> None:
    """Apply command-line overrides to the loaded config.

    Raises:
        ConfigError: If the path style override is not recognised
    """
    if options.path_style:
        config.path_style = normalize_path_style(options.path_style)
        reporter.debug(f"Using path style from CLI: {config.path_style}")
    elif config.path_style:
        reporter.debug(f"Using path style from config: {config.path_style}")
    else:
        reporter.debug("Using default path style: relative")

    if options.template:
        config.template = options.template
        reporter.debug(f"Using template from CLI: {config.template}")
    elif config.template:
        reporter.debug(f"Using template from config: {config.template}")
    else:
        reporter.debug("Using default template")


def _describe_changes(changes: List[SkillChange], config_changed: bool) -> List[str]:
    reasons = []
    if config_changed:
        reasons.append("configuration changed")
    summary = summarize_changes(changes)
    if summary.new:
        reasons.append(f"{summary.new} new skill(s)")
    if summary.modified:
        reasons.append(f"{summary.modified} modified skill(s)")
    if summary.removed:
        reasons.append(f"{summary.removed} removed skill(s)")
    return reasons


def _report_dry_run(
    config: Config, skills: List[Skill], reporter: Reporter
) -> List[TargetResult]:
    reporter.info("Dry run mode: no files will be modified")
    results = []
    verbs = {"prompt": "sync", "native": "copy", "symlink": "symlink"}

    for target in config.targets:
        mode = resolve_target_sync_mode(target, config)
        results.append(TargetResult(target.destination, mode))
        if mode == "prompt":
            reporter.info(f"Would sync {len(skills)} skill(s) to {target.destination}")
            continue
        reporter.info(f"Would {verbs[mode]} {len(skills)} skill(s) to {target.destination}/")
        for skill in skills:
            reporter.info(f"    - {skill.name}")

    return results


def _write_target(
    target: Target, mode: str, skills: List[Skill], config: Config, cwd: Path,
    reporter: Reporter,
) -> TargetResult:
    if mode == "native":
        copy_skills_to_target(target, skills, cwd)
        reporter.debug(f"Copied {len(skills)} skill(s) to {target.destination}")
        return TargetResult(target.destination, mode, changed=True)

    if mode == "symlink":
        symlink_skills_to_target(target, skills, cwd)
        reporter.debug(f"Linked {len(skills)} skill(s) into {target.destination}")
        return TargetResult(target.destination, mode, changed=True)

    changed = write_target_file(target, skills, config, cwd)
    reporter.debug(f"{'Updated' if changed else 'Unchanged'}: {target.destination}")
    return TargetResult(target.destination, mode, changed=changed)


def run_sync(
    cwd: PathLike,
    options: Optional[SyncOptions] = None,
    reporter: Optional[Reporter] = None,
    config: Optional[Config] = None,
) -> SyncResult:
    """Synchronize skills into every configured target.

    Args:
        cwd: Project root (directory containing skillz.json)
        options: Sync options; defaults to a plain sync
        reporter: Progress output; defaults to a quiet reporter
        config: Pre-loaded configuration; loaded from cwd when omitted

    Returns:
        SyncResult describing the run

    Raises:
        SyncError: No config, or ``only`` matched no skills
        ConfigError: Invalid config or overrides
        ConflictError: Directory targets have unowned destinations
        DuplicateSectionError: A prompt target has the heading more than once
        OSError: Filesystem failures while writing
    """
    root = Path(cwd)
    options = options or SyncOptions()
    reporter = reporter or Reporter(quiet=True)

    if config is None:
        config = Config.load(root)
    if config is None:
        raise SyncError("No configuration file found. Run `skillz init` first.")

    apply_overrides(config, options, reporter)

    reporter.start("Scanning skill directories...")
    skills = scan_all_skill_directories(config, root)
    reporter.succeed(f"Found {len(skills)} skill(s)")

    if not skills:
        reporter.warning(
            "No skills found. Make sure your skill directories contain SKILL.md files."
        )
        return SyncResult(status=SyncStatus.NO_SKILLS)

    if options.only:
        skills = [s for s in skills if s.name in options.only]
        reporter.info(f"Filtering to {len(skills)} skill(s): {', '.join(options.only)}")
        if not skills:
            raise SyncError("No matching skills found")

    reporter.debug(f"Loading cache from {root}")
    state = read_cache_state(root)
    if state.status == CacheStatus.CORRUPT:
        reporter.debug(f"Ignoring invalid cache: {state.reason}")
    cache: Optional[CacheFile] = state.cache

    changes: List[SkillChange] = []
    config_changed = False

    if cache is not None:
        changes = detect_changes(skills, cache)
        config_changed = cache.config_hash is None or not digests_equal(
            hash_config(config), cache.config_hash
        )

    if not options.force and cache is not None:
        if not config_changed and not has_changes(changes):
            reporter.success("All skills are up to date")
            return SyncResult(status=SyncStatus.UP_TO_DATE, skills=skills, changes=changes)

        reporter.info(f"Changes detected: {', '.join(_describe_changes(changes, config_changed))}")
        for change in changes:
            if change.type != ChangeType.UNCHANGED:
                reporter.debug(f"  {change.type.value.upper()} {change.name}")
    elif cache is None:
        reporter.info("No cache found, syncing all skills")
    else:
        reporter.info("Force mode: syncing all skills")

    directory_targets = [
        t for t in config.targets if resolve_target_sync_mode(t, config) in DIRECTORY_MODES
    ]
    if directory_targets:
        reporter.start("Validating directory targets...")
        cached_names = set(cache.skills) if cache is not None else set()
        try:
            validate_directory_targets(directory_targets, skills, config, root, cached_names)
        except ConflictError:
            reporter.fail("Validation failed")
            raise
        reporter.succeed("No conflicts detected")

    if options.dry_run:
        return SyncResult(
            status=SyncStatus.DRY_RUN,
            skills=skills,
            changes=changes,
            config_changed=config_changed,
            targets=_report_dry_run(config, skills, reporter),
        )

    results: List[TargetResult] = []
    reporter.start("Syncing skills to targets...")
    try:
        for target in config.targets:
            mode = resolve_target_sync_mode(target, config)
            results.append(_write_target(target, mode, skills, config, root, reporter))
    except Exception:
        reporter.fail("Failed to sync")
        raise
    reporter.succeed(f"Synced to {len(config.targets)} target(s)")

    # Symlink targets are always live and never recorded in the cache
    cache_written = False
    cached_targets = [
        t for t in config.targets if resolve_target_sync_mode(t, config) != "symlink"
    ]
    if cached_targets:
        snapshot = build_snapshot(skills, config.targets[0].destination, config)
        save_cache(snapshot, root)
        cache_written = True
        reporter.debug("Updated cache")
    else:
        reporter.debug("No cacheable targets configured, skipping cache update")

    reporter.success(f"Successfully synced {len(skills)} skill(s)")
    return SyncResult(
        status=SyncStatus.SYNCED,
        skills=skills,
        changes=changes,
        config_changed=config_changed,
        targets=results,
        cache_written=cache_written,
    )

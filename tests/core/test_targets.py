# tests/core/test_targets.py
"""Tests for managed-section and directory target reconciliation."""

import os
from pathlib import Path

import pytest

from skillz.core.config import Config, Target
from skillz.core.errors import ConflictError, DuplicateSectionError
from skillz.core.targets import (
    copy_skills_to_target,
    extract_managed_section,
    find_directory_conflicts,
    find_section_occurrences,
    read_target_file,
    replace_managed_section,
    symlink_skills_to_target,
    validate_directory_targets,
    validate_no_duplicate_sections,
    write_target_file,
)
from skillz.skills.parser import parse_skill

HEADING = "## Additional Instructions"


class TestSectionLookup:
    """Tests for locating the managed section."""

    def test_occurrences_are_zero_based_and_trimmed(self):
        content = "# Title\n  ## Additional Instructions  \nbody\n"
        assert find_section_occurrences(content, HEADING) == [1]

    def test_duplicates_report_one_based_lines(self):
        content = f"{HEADING}\nfirst\n{HEADING}\nsecond\n"

        with pytest.raises(DuplicateSectionError) as exc_info:
            validate_no_duplicate_sections(content, HEADING)

        assert exc_info.value.line_numbers == [1, 3]
        assert "appears 2 times" in str(exc_info.value)
        assert "lines: 1, 3" in str(exc_info.value)

    def test_extract_runs_to_end_of_file(self):
        content = f"intro\n\n{HEADING}\n- a\n- b"
        section = extract_managed_section(content, HEADING)

        assert section.start_line == 2
        assert section.end_line == 5
        assert section.content == f"{HEADING}\n- a\n- b"

    def test_extract_missing(self):
        assert extract_managed_section("no heading here", HEADING) is None


class TestReplaceManagedSection:
    """Tests for replace_managed_section()."""

    def test_appends_after_one_blank_line(self):
        result = replace_managed_section("# Project\n\nNotes.\n\n\n", f"{HEADING}\n- a", HEADING)
        assert result == f"# Project\n\nNotes.\n\n{HEADING}\n- a\n"

    def test_empty_file(self):
        assert replace_managed_section("", f"{HEADING}\n- a", HEADING) == f"{HEADING}\n- a\n"

    def test_replaces_to_end_of_file(self):
        content = f"# Project\n\n{HEADING}\n- old\n\nuser text below\n"
        result = replace_managed_section(content, f"{HEADING}\n- new", HEADING)
        assert result == f"# Project\n\n{HEADING}\n- new\n"

    def test_prefix_preserved_on_repeat(self):
        """Content before the heading survives repeated replacement."""
        prefix = "# Project\n\nHand-written notes.\n  indented line"
        once = replace_managed_section(prefix, f"{HEADING}\n- a", HEADING)
        twice = replace_managed_section(once, f"{HEADING}\n- b", HEADING)

        assert twice.startswith(prefix + "\n\n")
        assert twice.endswith(f"{HEADING}\n- b\n")

    def test_idempotent(self):
        once = replace_managed_section("# P\n", f"{HEADING}\n- a", HEADING)
        assert replace_managed_section(once, f"{HEADING}\n- a", HEADING) == once


class TestWriteTargetFile:
    """Tests for prompt-mode targets."""

    def test_creates_missing_file(self, project: Path, skills_dir: Path, make_skill):
        skill = parse_skill(make_skill(skills_dir, "alpha"))

        changed = write_target_file(Target("AGENTS.md"), [skill], Config.load(project), project)

        content = (project / "AGENTS.md").read_text()
        assert changed
        assert content.startswith(HEADING + "\n")
        assert "**alpha**: A test skill (`.claude/skills/alpha/SKILL.md`)" in content

    def test_creates_parent_directories(self, project: Path, skills_dir: Path, make_skill):
        skill = parse_skill(make_skill(skills_dir, "alpha"))
        target = Target(".cursor/rules/skills.mdc")

        write_target_file(target, [skill], Config.load(project), project)

        assert (project / ".cursor" / "rules" / "skills.mdc").is_file()

    def test_unchanged_is_not_rewritten(self, project: Path, skills_dir: Path, make_skill):
        skill = parse_skill(make_skill(skills_dir, "alpha"))
        config = Config.load(project)

        assert write_target_file(Target("AGENTS.md"), [skill], config, project)
        assert not write_target_file(Target("AGENTS.md"), [skill], config, project)

    def test_duplicate_heading_leaves_file_untouched(
        self, project: Path, skills_dir: Path, make_skill
    ):
        skill = parse_skill(make_skill(skills_dir, "alpha"))
        original = f"# P\n{HEADING}\nx\n\n{HEADING}\ny\n"
        (project / "AGENTS.md").write_text(original)

        with pytest.raises(DuplicateSectionError) as exc_info:
            write_target_file(Target("AGENTS.md"), [skill], Config.load(project), project)

        assert exc_info.value.line_numbers == [2, 5]
        assert (project / "AGENTS.md").read_text() == original

    def test_read_target_file_missing(self, tmp_path: Path):
        content = read_target_file(tmp_path / "AGENTS.md", HEADING)
        assert content.full_content == ""
        assert content.managed_section is None


class TestDirectoryConflicts:
    """Tests for batch validation of native and symlink targets."""

    def _skills(self, skills_dir: Path, make_skill, *names):
        return [parse_skill(make_skill(skills_dir, n)) for n in names]

    def test_no_conflicts_for_empty_target(self, project, skills_dir, make_skill):
        skills = self._skills(skills_dir, make_skill, "alpha")
        target = Target("out", sync_mode="native")
        assert find_directory_conflicts([target], skills, Config(), project) == []

    def test_all_conflicts_reported_together(self, project, skills_dir, make_skill):
        skills = self._skills(skills_dir, make_skill, "alpha", "beta")
        for d in ("out1", "out2"):
            (project / d / "alpha").mkdir(parents=True)
        (project / "out2" / "beta").write_text("file")
        targets = [Target("out1", sync_mode="native"), Target("out2", sync_mode="native")]

        with pytest.raises(ConflictError) as exc_info:
            validate_directory_targets(targets, skills, Config(), project)

        conflicts = exc_info.value.conflicts
        assert [(c.target, c.skill) for c in conflicts] == [
            ("out1", "alpha"),
            ("out2", "alpha"),
            ("out2", "beta"),
        ]
        assert "Cannot sync: destination conflicts detected" in str(exc_info.value)

    def test_cached_names_are_owned(self, project, skills_dir, make_skill):
        skills = self._skills(skills_dir, make_skill, "alpha")
        (project / "out" / "alpha").mkdir(parents=True)
        target = Target("out", sync_mode="native")

        assert find_directory_conflicts([target], skills, Config(), project, {"alpha"}) == []

    def test_live_symlink_is_owned(self, project, skills_dir, make_skill):
        skills = self._skills(skills_dir, make_skill, "alpha")
        (project / "out").mkdir()
        (project / "out" / "alpha").symlink_to(skills[0].path, target_is_directory=True)
        target = Target("out", sync_mode="symlink")

        assert find_directory_conflicts([target], skills, Config(), project) == []

    def test_broken_symlink_is_conflict(self, project, skills_dir, make_skill):
        skills = self._skills(skills_dir, make_skill, "alpha")
        (project / "out").mkdir()
        os.symlink(project / "missing", project / "out" / "alpha")
        target = Target("out", sync_mode="symlink")

        conflicts = find_directory_conflicts([target], skills, Config(), project)

        assert [c.skill for c in conflicts] == ["alpha"]

    def test_source_directory_is_not_conflict(self, project, skills_dir, make_skill):
        """A target that is the skill source directory itself is skipped."""
        skills = self._skills(skills_dir, make_skill, "alpha")
        target = Target(".claude/skills", sync_mode="native")

        assert find_directory_conflicts([target], skills, Config(), project) == []


class TestDirectoryWrites:
    def test_native_copies_whole_tree(self, project, skills_dir, make_skill):
        skill_dir = make_skill(skills_dir, "alpha")
        (skill_dir / "scripts").mkdir()
        (skill_dir / "scripts" / "run.sh").write_text("echo hi\n")
        skill = parse_skill(skill_dir)

        written = copy_skills_to_target(Target("out", sync_mode="native"), [skill], project)

        dest = project / "out" / "alpha"
        assert written == [dest]
        assert not dest.is_symlink()
        assert (dest / "SKILL.md").read_text() == (skill_dir / "SKILL.md").read_text()
        assert (dest / "scripts" / "run.sh").read_text() == "echo hi\n"

    def test_native_replaces_previous_copy(self, project, skills_dir, make_skill):
        skill = parse_skill(make_skill(skills_dir, "alpha"))
        stale = project / "out" / "alpha" / "stale.txt"
        stale.parent.mkdir(parents=True)
        stale.write_text("old")

        copy_skills_to_target(Target("out", sync_mode="native"), [skill], project)

        assert not stale.exists()
        assert (project / "out" / "alpha" / "SKILL.md").is_file()

    def test_symlink_points_at_source(self, project, skills_dir, make_skill):
        skill = parse_skill(make_skill(skills_dir, "alpha"))

        symlink_skills_to_target(Target("links", sync_mode="symlink"), [skill], project)

        link = project / "links" / "alpha"
        assert link.is_symlink()
        assert link.resolve() == skill.path.resolve()

    def test_symlink_is_idempotent(self, project, skills_dir, make_skill):
        skill = parse_skill(make_skill(skills_dir, "alpha"))
        target = Target("links", sync_mode="symlink")

        symlink_skills_to_target(target, [skill], project)
        symlink_skills_to_target(target, [skill], project)

        assert (project / "links" / "alpha").resolve() == skill.path.resolve()

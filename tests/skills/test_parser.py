# tests/skills/test_parser.py
"""Tests for SKILL.md parsing, validation and scaffolding."""

from pathlib import Path

import pytest
import yaml

from skillz.core.errors import ParseError, ValidationError
from skillz.core.hashing import hash_content
from skillz.skills.models import Skill
from skillz.skills.parser import (
    create_skill,
    normalize_skill_name,
    parse_skill,
    split_front_matter,
    validate_skill,
)


class TestSplitFrontMatter:
    """Tests for split_front_matter()."""

    def test_basic(self):
        data, body = split_front_matter("---\nname: a\ndescription: b\n---\n\n# Body\n")
        assert data == {"name": "a", "description": "b"}
        assert body == "\n# Body\n"

    def test_no_front_matter(self):
        data, body = split_front_matter("# Just markdown\n")
        assert data == {}
        assert body == "# Just markdown\n"

    def test_empty_front_matter(self):
        data, body = split_front_matter("---\n---\nbody")
        assert data == {}
        assert body == "body"

    def test_crlf_line_endings(self):
        data, body = split_front_matter("---\r\nname: a\r\n---\r\nbody\r\n")
        assert data == {"name": "a"}
        assert body == "body\r\n"

    def test_dashes_inside_body_are_kept(self):
        data, body = split_front_matter("---\nname: a\n---\nabove\n---\nbelow\n")
        assert data == {"name": "a"}
        assert body == "above\n---\nbelow\n"

    def test_invalid_yaml(self):
        with pytest.raises(ParseError, match="Invalid front matter"):
            split_front_matter("---\nname: [unclosed\n---\nbody")

    def test_non_mapping(self):
        with pytest.raises(ParseError, match="must be a YAML mapping"):
            split_front_matter("---\n- a\n- b\n---\nbody")


class TestParseSkill:
    """Tests for parse_skill()."""

    def test_parses_fields(self, tmp_path: Path):
        skill_dir = tmp_path / "python-expert"
        skill_dir.mkdir()
        (skill_dir / "SKILL.md").write_text(
            "---\n"
            "name: python-expert\n"
            "description: Expert Python help\n"
            "version: 1.0.0\n"
            "tags: [python, typing]\n"
            "---\n"
            "\n"
            "# Python Expert\n"
            "\n"
            "Use type hints.\n"
        )

        skill = parse_skill(skill_dir)

        assert skill.name == "python-expert"
        assert skill.description == "Expert Python help"
        assert skill.body == "# Python Expert\n\nUse type hints."
        assert skill.path == skill_dir
        assert skill.metadata["version"] == "1.0.0"
        assert skill.metadata["tags"] == ["python", "typing"]
        assert skill.last_modified.tzinfo is not None
        assert skill.hash == hash_content(
            "python-expert:Expert Python help:# Python Expert\n\nUse type hints."
        )

    def test_missing_skill_file(self, tmp_path: Path):
        with pytest.raises(ParseError, match="SKILL.md not found"):
            parse_skill(tmp_path)

    def test_bad_front_matter_names_file(self, tmp_path: Path):
        (tmp_path / "SKILL.md").write_text("---\nname: [\n---\n")
        with pytest.raises(ParseError, match="SKILL.md"):
            parse_skill(tmp_path)

    def test_non_string_name_rejected(self, tmp_path: Path):
        """Should refuse numeric or boolean names instead of coercing them."""
        (tmp_path / "SKILL.md").write_text("---\nname: 123\ndescription: b\n---\nbody\n")
        with pytest.raises(ParseError, match="'name' must be a string"):
            parse_skill(tmp_path)

    def test_non_string_description_rejected(self, tmp_path: Path):
        (tmp_path / "SKILL.md").write_text("---\nname: a\ndescription: true\n---\nbody\n")
        with pytest.raises(ParseError, match="'description' must be a string"):
            parse_skill(tmp_path)

    def test_whitespace_only_body_change_changes_hash(self, tmp_path: Path):
        (tmp_path / "SKILL.md").write_text("---\nname: a\ndescription: b\n---\none two\n")
        first = parse_skill(tmp_path).hash
        (tmp_path / "SKILL.md").write_text("---\nname: a\ndescription: b\n---\none  two\n")
        assert parse_skill(tmp_path).hash != first


class TestValidateSkill:
    """Tests for validate_skill()."""

    def _skill(self, name="alpha", description="Does alpha things", body="Body"):
        return Skill(name=name, description=description, path=Path("/s"), body=body)

    def test_valid(self):
        result = validate_skill(self._skill())
        assert result.valid
        assert result.errors == []

    def test_missing_name_and_description(self):
        result = validate_skill(self._skill(name="", description=""))
        assert not result.valid
        assert [e.field for e in result.errors] == ["name", "description"]

    def test_name_too_long(self):
        assert not validate_skill(self._skill(name="a" * 65)).valid
        assert validate_skill(self._skill(name="a" * 64)).valid

    def test_name_characters(self):
        assert validate_skill(self._skill(name="My_Skill 2")).valid
        assert not validate_skill(self._skill(name="bad/name")).valid

    def test_name_rejects_tabs_and_newlines(self):
        """Only plain spaces are allowed as name whitespace."""
        assert not validate_skill(self._skill(name="my\tskill")).valid
        assert not validate_skill(self._skill(name="my\nskill")).valid
        assert not validate_skill(self._skill(name="skill\n")).valid

    def test_strict_names(self):
        assert not validate_skill(self._skill(name="My_Skill"), strict=True).valid
        assert validate_skill(self._skill(name="my skill-2"), strict=True).valid

    def test_description_too_long(self):
        assert not validate_skill(self._skill(description="x" * 1025)).valid
        assert validate_skill(self._skill(description="x" * 1024)).valid

    def test_empty_body_is_warning(self):
        result = validate_skill(self._skill(body=""))
        assert result.valid
        assert [w.field for w in result.warnings] == ["body"]


class TestCreateSkill:
    """Tests for create_skill()."""

    def test_creates_scaffold(self, tmp_path: Path):
        skill_dir = create_skill("my skill", "Does things", tmp_path, version="1.2.3")

        assert skill_dir == tmp_path / "my-skill"
        text = (skill_dir / "SKILL.md").read_text()
        data = yaml.safe_load(text.split("---\n")[1])
        assert data == {"name": "my skill", "description": "Does things", "version": "1.2.3"}

        parsed = parse_skill(skill_dir)
        assert parsed.name == "my skill"
        assert parsed.body == ""

    def test_rejects_existing(self, tmp_path: Path):
        create_skill("alpha", "First", tmp_path)
        with pytest.raises(ValidationError, match="already exists"):
            create_skill("alpha", "First again", tmp_path)

    def test_rejects_uppercase(self, tmp_path: Path):
        with pytest.raises(ValidationError):
            create_skill("Alpha", "First", tmp_path)

    def test_rejects_bad_version(self, tmp_path: Path):
        with pytest.raises(ValidationError, match="semver"):
            create_skill("alpha", "First", tmp_path, version="1.0")

    def test_rejects_empty_description(self, tmp_path: Path):
        with pytest.raises(ValidationError):
            create_skill("alpha", "", tmp_path)


class TestNormalizeSkillName:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("My Skill", "my-skill"),
            ("snake_case_name", "snake-case-name"),
            ("a  --  b", "a-b"),
            ("-edge-", "edge"),
        ],
    )
    def test_normalize(self, name, expected):
        assert normalize_skill_name(name) == expected

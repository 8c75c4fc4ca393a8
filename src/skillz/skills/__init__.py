"""
Skill discovery and parsing.

This module provides:
- Skill: Parsed SKILL.md record (name, description, body, metadata, hash)
- parse_skill / validate_skill: Read and check a single skill directory
- scan_all_skill_directories: Discover skills across configured directories

Example:
    from skillz.core.config import Config
    from skillz.skills import scan_all_skill_directories

    config = Config.load(Path("."))
    skills = scan_all_skill_directories(config, cwd=Path("."))
"""

from .models import Skill, ValidationIssue, ValidationResult
from .parser import create_skill, parse_skill, validate_skill
from .scanner import find_skill_by_name, scan_all_skill_directories, scan_directory

__all__ = [
    "Skill",
    "ValidationIssue",
    "ValidationResult",
    "create_skill",
    "find_skill_by_name",
    "parse_skill",
    "scan_all_skill_directories",
    "scan_directory",
    "validate_skill",
]

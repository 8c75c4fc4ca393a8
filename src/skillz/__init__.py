"""Skillz - Sync agent skill definitions into LLM tool instruction files.

This package discovers skill directories (each holding a SKILL.md file with
YAML front matter), detects what changed since the last run, and writes the
skills into configured targets: a managed section of a text file such as
AGENTS.md, or a directory of copied or symlinked skill folders.

Main modules:
    - cli: Command-line interface (skillz command)
    - core: Configuration, cache, change detection, target reconciliation, sync
    - skills: Skill model, SKILL.md parser and validator, directory scanner
"""

__version__ = "0.1.0"

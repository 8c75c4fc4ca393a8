"""Core modules for Skillz.

This package contains the core functionality:
    - errors: Exception hierarchy
    - paths: Project paths and atomic filesystem helpers
    - hashing: Content fingerprints for skills and configuration
    - config: skillz.json loading, validation and presets
    - cache: Sync cache store (.skillz-cache.json)
    - changes: Change detection against the cache
    - render: Jinja2 rendering of the managed section
    - targets: Managed-section and directory target reconciliation
    - environment: Detection of the LLM tools a project uses
    - reporting: Terminal progress output
    - sync: Sync orchestration

cache, changes, render, targets and sync depend on skillz.skills and are
imported explicitly by callers.
"""

from . import config
from . import environment
from . import errors
from . import hashing
from . import paths
from . import reporting

__all__ = [
    "config",
    "environment",
    "errors",
    "hashing",
    "paths",
    "reporting",
]

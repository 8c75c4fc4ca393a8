"""Content fingerprints for skills and configuration.

A digest is the SHA-256 hex digest truncated to 12 characters.
"""

import hashlib
import json
from typing import Any, Dict, Union

DIGEST_LENGTH = 12


def hash_content(content: str) -> str:
    """Hash an arbitrary string."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()[:DIGEST_LENGTH]


def hash_skill(skill: Any) -> str:
    """Hash a skill's semantic content.

    The input is ``name:description:body`` with the body as parsed (already
    trimmed). Whitespace inside the body is not normalized, so any byte change
    to the instructions yields a new digest.

    Args:
        skill: Object with ``name``, ``description`` and ``body`` attributes.

    Returns:
        12-character hex digest.
    """
    return hash_content(f"{skill.name}:{skill.description}:{skill.body}")


def hash_config(config: Union[Dict[str, Any], Any]) -> str:
    """Hash a configuration with keys sorted at every level.

    Args:
        config: A Config (anything with ``to_dict()``) or a plain dict.

    Returns:
        12-character hex digest, independent of key insertion order.
    """
    data = config.to_dict() if hasattr(config, "to_dict") else config
    normalized = json.dumps(data, sort_keys=True, separators=(",", ":"))
    return hash_content(normalized)


def digests_equal(a: str, b: str) -> bool:
    """Compare two digests."""
    return a == b

"""
Permit Policy Engine: Versioning
===================================
Engine version and policy document compatibility.

A policy document declares the minimum engine version it was
authored against (minPEVersion). The engine accepts a document when:
- minPEVersion is a semantic version X.Y.Z
- the engine is not older than minPEVersion
- the engine is not a newer MAJOR version than minPEVersion
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from permit_policy.exceptions import PolicyVersionError


SEMVER_PATTERN = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)$")

ENGINE_VERSION = "1.4.0"


@dataclass(frozen=True, order=True)
class SemanticVersion:
    """Comparable X.Y.Z version."""

    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, value) -> "SemanticVersion":
        if not isinstance(value, str):
            raise ValueError(f"invalid semver: {value!r}")
        match = SEMVER_PATTERN.match(value.strip())
        if not match:
            raise ValueError(f"invalid semver: {value!r}")
        return cls(*(int(part) for part in match.groups()))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def check_compatibility(
    min_version, engine_version: str = ENGINE_VERSION
) -> SemanticVersion:
    """
    Verify a policy document's minPEVersion against the engine.

    Returns the parsed minimum version.
    Raises PolicyVersionError when incompatible.
    """
    try:
        current = SemanticVersion.parse(engine_version)
    except ValueError:
        raise PolicyVersionError(
            engine_version, min_version,
            "cannot determine the engine version",
        )

    if min_version is None:
        raise PolicyVersionError(
            engine_version, min_version,
            "minPEVersion is missing from the policy document",
        )

    try:
        required = SemanticVersion.parse(min_version)
    except ValueError:
        raise PolicyVersionError(
            engine_version, min_version,
            "minPEVersion is not a valid semantic version",
        )

    if current < required:
        raise PolicyVersionError(
            engine_version, min_version,
            "engine is older than the minimum version required",
        )

    if current.major > required.major:
        raise PolicyVersionError(
            engine_version, min_version,
            "policy document is at least one major version behind",
        )

    return required

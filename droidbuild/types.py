"""Shared type definitions for droidbuild.

This module contains enums and dataclasses shared across subpackages to
avoid circular imports.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class BuildType(str, Enum):
    """Variant of the application to build."""

    DEBUG = "debug"
    RELEASE = "release"


class BackendName(str, Enum):
    """Build backend selector."""

    ANT = "ant"
    GRADLE = "gradle"
    NONE = "none"


@dataclass(frozen=True)
class BuildConfiguration:
    """Validated build options.

    Attributes:
        build_type: Debug or release build.
        backend: Backend that performs the build.
    """

    build_type: BuildType = BuildType.DEBUG
    backend: BackendName = BackendName.ANT

    @property
    def skip_build(self) -> bool:
        """Whether the build step is skipped entirely."""
        return self.backend is BackendName.NONE


@dataclass(frozen=True)
class ArtifactCandidate:
    """A file found while scanning for artifacts."""

    path: Path
    modified_time: float


__all__ = [
    "ArtifactCandidate",
    "BackendName",
    "BuildConfiguration",
    "BuildType",
]

"""Artifact discovery.

This module handles:
- Scanning a build output directory for freshly produced APKs
- Ordering candidates so the most relevant artifact comes first
- Predicates for the naming conventions used by the build tools

The build tools do not report their output paths, so the backends find
their artifacts by scanning the directory they are known to write to.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from droidbuild.errors import NotFoundError
from droidbuild.types import ArtifactCandidate, BuildType

logger = logging.getLogger(__name__)

APK_EXTENSION = ".apk"

ArtifactPredicate = Callable[[str], bool]


def _sort_key(candidate: ArtifactCandidate) -> tuple[float, int]:
    # Newest first; among equal timestamps the least nested path wins.
    return (-candidate.modified_time, len(str(candidate.path)))


def scan_artifacts(directory: Path, predicate: ArtifactPredicate) -> list[Path]:
    """List files in a directory matching a predicate, most relevant first.

    Only direct entries of ``directory`` are considered. Candidates are
    ordered by modification time (newest first); ties are broken by the
    shorter path.

    Args:
        directory: Directory to scan.
        predicate: Called with each entry's filename; keeps the entry
            when it returns True.

    Returns:
        Ordered list of matching file paths.

    Raises:
        NotFoundError: If the directory does not exist.
    """
    if not directory.is_dir():
        logger.error("Artifact directory does not exist: %s", directory)
        raise NotFoundError(directory)

    candidates: list[ArtifactCandidate] = []
    for path in directory.iterdir():
        if not path.is_file() or not predicate(path.name):
            continue
        candidates.append(
            ArtifactCandidate(path=path, modified_time=path.stat().st_mtime)
        )

    candidates.sort(key=_sort_key)
    logger.debug("Found %d candidate(s) in %s", len(candidates), directory)
    return [c.path for c in candidates]


def apk_predicate(build_type: BuildType | None = None) -> ArtifactPredicate:
    """Build a predicate matching APK files, optionally of one build type.

    Args:
        build_type: When given, the filename must also contain
            ``-debug`` or ``-release``.

    Returns:
        Predicate over filenames.
    """
    marker = f"-{build_type.value}" if build_type is not None else None

    def predicate(filename: str) -> bool:
        if Path(filename).suffix != APK_EXTENSION:
            return False
        return marker is None or marker in filename

    return predicate


def match_all(filename: str) -> bool:
    """Predicate accepting every file."""
    return True


__all__ = [
    "APK_EXTENSION",
    "ArtifactPredicate",
    "apk_predicate",
    "match_all",
    "scan_artifacts",
]

"""Build service module.

This module provides the high-level build API:
- run_build(): parse options, build with the selected backend and stage
  the produced APKs in ``out/``
- run_clean(): clean with the selected backend and remove ``out/``
- get_artifact(): find the most relevant staged APK for deployment

Steps run strictly in sequence and nothing is written to ``out/`` until
the build has succeeded. Running two builds against the same project at
the same time is not supported.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Sequence
from pathlib import Path

from droidbuild.builds.artifacts import match_all, scan_artifacts
from droidbuild.builds.backends import BuildBackend, get_backend
from droidbuild.config import Settings, get_settings
from droidbuild.errors import NoArtifactError
from droidbuild.options import parse_options
from droidbuild.project import AndroidProject
from droidbuild.types import BuildConfiguration, BuildType

logger = logging.getLogger(__name__)


def _resolve(
    project_root: Path | None, settings: Settings | None
) -> tuple[AndroidProject, Settings]:
    if settings is None:
        settings = get_settings()
    root = project_root if project_root is not None else settings.project_root
    return AndroidProject(root=Path(root)), settings


def select_backend(
    config: BuildConfiguration, project: AndroidProject, settings: Settings
) -> BuildBackend:
    """Instantiate the backend named by a configuration."""
    backend = get_backend(config.backend, project, settings)
    logger.debug("Selected %s backend for %s", config.backend.value, project.root)
    return backend


def publish_artifacts(artifacts: Sequence[Path], output_dir: Path) -> list[Path]:
    """Copy artifacts into the output directory.

    The directory is created if needed; files with the same name are
    overwritten.

    Args:
        artifacts: Paths of the built artifacts.
        output_dir: Destination directory.

    Returns:
        Paths of the copies.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    published: list[Path] = []
    for artifact in artifacts:
        destination = output_dir / artifact.name
        shutil.copyfile(artifact, destination)
        logger.info("Copied %s to %s", artifact, destination)
        published.append(destination)
    return published


def run_build(
    tokens: Sequence[str] | str | None = None,
    project_root: Path | None = None,
    settings: Settings | None = None,
) -> list[Path]:
    """Build the project and stage the artifacts in ``out/``.

    Args:
        tokens: Build option tokens such as ``["--gradle", "--release"]``.
        project_root: Project directory; defaults to the configured root.
        settings: Optional settings instance.

    Returns:
        Paths of the artifacts copied into ``out/``. Empty for ``--nobuild``.

    Raises:
        ConfigError: If the options are invalid.
        PrerequisiteError: If the backend's tools are unavailable.
        BuildToolError: If the build tool fails.
        NotFoundError: If the backend's output directory does not exist.
        NoArtifactError: If the build produced no artifact.
    """
    project, settings = _resolve(project_root, settings)
    config = parse_options(tokens, settings)

    if not config.skip_build:
        logger.info(
            "Building %s (%s, %s)",
            project.root,
            config.build_type.value,
            config.backend.value,
        )

    backend = select_backend(config, project, settings)
    backend.prepare_environment()

    # Without custom_rules.xml ant needs a clean before building.
    if backend.requires_clean():
        backend.clean()

    artifacts = backend.build(config.build_type)
    if not artifacts:
        return []
    return publish_artifacts(artifacts, project.output_dir)


def run_clean(
    tokens: Sequence[str] | str | None = None,
    project_root: Path | None = None,
    settings: Settings | None = None,
) -> None:
    """Clean the project with the selected backend and remove ``out/``.

    Raises:
        ConfigError: If the options are invalid.
        PrerequisiteError: If the backend's tools are unavailable.
        BuildToolError: If the clean fails.
        OSError: If ``out/`` exists but cannot be removed.
    """
    project, settings = _resolve(project_root, settings)
    config = parse_options(tokens, settings)

    backend = select_backend(config, project, settings)
    backend.prepare_environment()
    backend.clean()

    output_dir = project.output_dir
    if output_dir.is_dir() and not output_dir.is_symlink():
        shutil.rmtree(output_dir)
    elif output_dir.exists() or output_dir.is_symlink():
        output_dir.unlink()
    else:
        return
    logger.info("Removed %s", output_dir)


def get_artifact(
    project_root: Path | None = None,
    build_type: BuildType | None = None,
    architecture: str | None = None,
    settings: Settings | None = None,
) -> Path:
    """Find the staged artifact to deploy.

    ``out/`` only ever holds the last build, so ``build_type`` does not
    narrow the search; it is logged for context.

    Args:
        project_root: Project directory; defaults to the configured root.
        build_type: Build type the caller expects.
        architecture: Keep only artifacts whose filename contains this.
        settings: Optional settings instance.

    Returns:
        Path of the most relevant artifact.

    Raises:
        NotFoundError: If ``out/`` does not exist.
        NoArtifactError: If no artifact matches.
    """
    project, settings = _resolve(project_root, settings)
    output_dir = project.output_dir

    candidates = scan_artifacts(output_dir, match_all)
    if architecture:
        candidates = [c for c in candidates if architecture in c.name]
    if not candidates:
        detail = f"architecture {architecture}" if architecture else None
        logger.error("No .apk found in %s directory", output_dir)
        raise NoArtifactError(output_dir, detail=detail)

    logger.info(
        "Using apk: %s%s",
        candidates[0],
        f" (build type {build_type.value})" if build_type else "",
    )
    return candidates[0]


__all__ = [
    "get_artifact",
    "publish_artifacts",
    "run_build",
    "run_clean",
    "select_backend",
]

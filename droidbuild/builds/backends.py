"""Build backends.

A backend knows how to prepare a project for one external build tool, run
a build or clean with it, and find the APKs the tool left behind. The set
of backends is closed:

- AntBackend: ``ant debug|release``, one APK in ``bin/`` (or
  ``ant-build/`` when the project ships custom_rules.xml)
- GradleBackend: ``gradlew assembleDebug|assembleRelease``, every matching
  APK in ``build/outputs/apk/``
- NoOpBackend: does nothing, used by ``--nobuild``

Backends keep no state between calls; prepare_environment runs on every
build and rewrites the generated files.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

from droidbuild.builds.artifacts import apk_predicate, scan_artifacts
from droidbuild.builds.runner import run_tool
from droidbuild.config import Settings
from droidbuild.errors import NoArtifactError, PrerequisiteError
from droidbuild.project import (
    AndroidProject,
    copy_gradle_wrapper,
    ensure_library_build_gradle,
    read_project_name,
    read_subproject_paths,
    update_build_gradle_dependencies,
    write_build_xml,
    write_local_properties,
    write_settings_gradle,
)
from droidbuild.requirements import (
    ANT_BUILD_TEMPLATE,
    check_android_sdk,
    check_ant,
    check_gradle,
    find_android_sdk,
)
from droidbuild.types import BackendName, BuildType

logger = logging.getLogger(__name__)

# Lint and verification tasks skipped to keep gradle builds fast.
GRADLE_LINT_STEPS = [
    "lint",
    "lintVitalRelease",
    "compileLint",
    "copyReleaseLint",
    "copyDebugLint",
]
GRADLE_MULTI_APK_LINT_STEPS = [
    "lint",
    "lintVitalX86Release",
    "lintVitalArmv7Release",
    "compileLint",
    "copyReleaseLint",
    "copyDebugLint",
]


class BuildBackend(ABC):
    """Contract shared by every build backend."""

    name: BackendName

    def __init__(self, project: AndroidProject, settings: Settings) -> None:
        self.project = project
        self.settings = settings

    @abstractmethod
    def prepare_environment(self) -> None:
        """Write generated files and verify prerequisites.

        Raises:
            PrerequisiteError: If the tool or SDK is unavailable.
        """

    @abstractmethod
    def build(self, build_type: BuildType) -> list[Path]:
        """Run the build and return the produced artifacts.

        Raises:
            BuildToolError: If the tool exits non-zero.
            NoArtifactError: If the tool succeeded but left no APK.
        """

    @abstractmethod
    def clean(self) -> None:
        """Remove the tool's build outputs."""

    def requires_clean(self) -> bool:
        """Whether a clean must run before each build."""
        return False

    def _no_artifact(self, directory: Path) -> NoArtifactError:
        logger.error("No .apk found in %s directory", directory)
        return NoArtifactError(directory)


class AntBackend(BuildBackend):
    """Builds with ant, producing a single APK."""

    name = BackendName.ANT

    def get_args(self, cmd: str) -> list[str]:
        """Compose ant arguments for a target."""
        args = [cmd, "-f", str(self.project.root / "build.xml")]
        # custom_rules.xml is required for incremental builds.
        if self.project.has_custom_rules():
            args.extend(["-Dout.dir=ant-build", "-Dgen.absolute.dir=ant-gen"])
        sdk_dir = find_android_sdk(self.settings)
        if sdk_dir is not None:
            # Specify sdk dir in case local properties are missing
            args.append(f"-Dsdk.dir={sdk_dir}")
        return args

    def output_dir(self) -> Path:
        if self.project.has_custom_rules():
            return self.project.root / "ant-build"
        return self.project.root / "bin"

    def requires_clean(self) -> bool:
        return not self.project.has_custom_rules()

    def prepare_environment(self) -> None:
        check_ant()
        sdk_dir = check_android_sdk(self.settings)
        template_path = sdk_dir / ANT_BUILD_TEMPLATE
        if not template_path.exists():
            raise PrerequisiteError(
                f"Could not find ant build template in android sdk ({template_path})"
            )
        template = template_path.read_text(encoding="utf-8")
        name = read_project_name(self.project.manifest)

        write_build_xml(self.project.root, template, name)
        for subproject in self.project.subprojects():
            write_build_xml(subproject, template, name)

    def build(self, build_type: BuildType) -> list[Path]:
        run_tool(
            ["ant", *self.get_args(build_type.value)],
            cwd=self.project.root,
            timeout=self.settings.build_timeout,
        )
        return self.get_output_files(build_type)

    def get_output_files(self, build_type: BuildType | None = None) -> list[Path]:
        """Find the freshly built APK; ant only produces one."""
        bin_dir = self.output_dir()
        candidates = scan_artifacts(bin_dir, apk_predicate(build_type))
        if not candidates:
            raise self._no_artifact(bin_dir)
        logger.info("Using apk: %s", candidates[0])
        return [candidates[0]]

    def clean(self) -> None:
        check_ant()
        run_tool(
            ["ant", *self.get_args("clean")],
            cwd=self.project.root,
            timeout=self.settings.build_timeout,
        )


class GradleBackend(BuildBackend):
    """Builds with the gradle wrapper, possibly producing several APKs."""

    name = BackendName.GRADLE

    @property
    def wrapper(self) -> Path:
        script = "gradlew.bat" if os.name == "nt" else "gradlew"
        return self.project.root / script

    def lint_steps(self) -> list[str]:
        if self.settings.multiple_apks:
            return list(GRADLE_MULTI_APK_LINT_STEPS)
        return list(GRADLE_LINT_STEPS)

    def get_args(self, cmd: str) -> list[str]:
        """Compose gradle arguments for a task."""
        args = [cmd, "-b", str(self.project.root / "build.gradle")]
        args.append("-Dorg.gradle.daemon=true")
        for step in self.lint_steps():
            args.extend(["-x", step])
        return args

    def output_dir(self) -> Path:
        return self.project.root / "build" / "outputs" / "apk"

    def prepare_environment(self) -> None:
        wrapper_dir = check_gradle(self.settings)
        sdk_dir = check_android_sdk(self.settings)
        root = self.project.root

        copy_gradle_wrapper(wrapper_dir, root)

        subprojects = read_subproject_paths(root)
        write_settings_gradle(root, subprojects)
        update_build_gradle_dependencies(root, subprojects)
        write_local_properties(root, sdk_dir)
        for relative in subprojects:
            ensure_library_build_gradle(root / relative)
            write_local_properties(root / relative, sdk_dir)

    def build(self, build_type: BuildType) -> list[Path]:
        task = "assembleDebug" if build_type is BuildType.DEBUG else "assembleRelease"
        run_tool(
            [self.wrapper, *self.get_args(task)],
            cwd=self.project.root,
            timeout=self.settings.build_timeout,
        )
        return self.get_output_files(build_type)

    def get_output_files(self, build_type: BuildType | None = None) -> list[Path]:
        """Find every APK of the requested type."""
        bin_dir = self.output_dir()
        candidates = scan_artifacts(bin_dir, apk_predicate(build_type))
        if not candidates:
            raise self._no_artifact(bin_dir)
        for candidate in candidates:
            logger.info("Using apk: %s", candidate)
        return candidates

    def clean(self) -> None:
        run_tool(
            [self.wrapper, *self.get_args("clean")],
            cwd=self.project.root,
            timeout=self.settings.build_timeout,
        )


class NoOpBackend(BuildBackend):
    """Skips the build entirely."""

    name = BackendName.NONE

    def prepare_environment(self) -> None:
        pass

    def build(self, build_type: BuildType) -> list[Path]:
        logger.info("Skipping build...")
        return []

    def clean(self) -> None:
        pass


BACKENDS: dict[BackendName, type[BuildBackend]] = {
    BackendName.ANT: AntBackend,
    BackendName.GRADLE: GradleBackend,
    BackendName.NONE: NoOpBackend,
}


def get_backend(
    name: BackendName, project: AndroidProject, settings: Settings
) -> BuildBackend:
    """Instantiate the backend for a name."""
    return BACKENDS[name](project, settings)


__all__ = [
    "BACKENDS",
    "GRADLE_LINT_STEPS",
    "GRADLE_MULTI_APK_LINT_STEPS",
    "AntBackend",
    "BuildBackend",
    "GradleBackend",
    "NoOpBackend",
    "get_backend",
]

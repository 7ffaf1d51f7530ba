"""Android project layout helpers.

This module handles:
- Reading the activity name from AndroidManifest.xml
- Enumerating library sub-projects from project.properties
- Writing the generated files the build tools expect (build.xml,
  local.properties, settings.gradle, build.gradle, the gradle wrapper)

Generated files are rewritten on every build, so everything here must be
safe to run repeatedly.
"""

from __future__ import annotations

import logging
import re
import shutil
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path

from droidbuild.errors import PrerequisiteError

logger = logging.getLogger(__name__)

ANDROID_NS = "http://schemas.android.com/apk/res/android"

MANIFEST_FILE = "AndroidManifest.xml"
PROPERTIES_FILE = "project.properties"
CUSTOM_RULES_FILE = "custom_rules.xml"
OUTPUT_DIR = "out"

GENERATED_HEADER = (
    "# This file is automatically generated.\n"
    "# Do not modify this file -- YOUR CHANGES WILL BE ERASED!\n"
)
GRADLE_GENERATED_HEADER = "// GENERATED FILE - DO NOT EDIT\n"

_LIBRARY_REFERENCE = re.compile(r"^\s*android\.library\.reference\.\d+=(.*?)\s*$")
_DEPENDENCIES_BLOCK = re.compile(
    r"(// SUB-PROJECT DEPENDENCIES START)[\s\S]*?(// SUB-PROJECT DEPENDENCIES END)"
)

LIBRARY_BUILD_GRADLE = """\
// GENERATED FILE - DO NOT EDIT
apply plugin: 'android-library'

android {
    sourceSets {
        main {
            manifest.srcFile 'AndroidManifest.xml'
            java.srcDirs = ['src']
            resources.srcDirs = ['src']
            aidl.srcDirs = ['src']
            renderscript.srcDirs = ['src']
            res.srcDirs = ['res']
            assets.srcDirs = ['assets']
        }
    }
}
"""


@dataclass(frozen=True)
class AndroidProject:
    """Paths of an Android project on disk."""

    root: Path

    @property
    def manifest(self) -> Path:
        return self.root / MANIFEST_FILE

    @property
    def output_dir(self) -> Path:
        return self.root / OUTPUT_DIR

    def has_custom_rules(self) -> bool:
        """Whether the project ships custom_rules.xml (incremental builds)."""
        return (self.root / CUSTOM_RULES_FILE).exists()

    def subprojects(self) -> list[Path]:
        """Absolute paths of the library sub-projects."""
        return [self.root / p for p in read_subproject_paths(self.root)]


def read_project_name(manifest_path: Path) -> str:
    """Read the main activity name from an Android manifest.

    Args:
        manifest_path: Path to AndroidManifest.xml.

    Returns:
        The ``android:name`` of the first activity.

    Raises:
        PrerequisiteError: If the manifest is missing, malformed or has no
            activity.
    """
    try:
        tree = ET.parse(manifest_path)
    except (OSError, ET.ParseError) as e:
        raise PrerequisiteError(f"Could not read {manifest_path}: {e}") from e

    for activity in tree.getroot().iter("activity"):
        name = activity.get(f"{{{ANDROID_NS}}}name")
        if name:
            return name

    raise PrerequisiteError(f"Could not find activity name in {manifest_path}")


def read_subproject_paths(project_root: Path) -> list[str]:
    """List library references declared in project.properties.

    Args:
        project_root: Project directory.

    Returns:
        Sub-project paths relative to the project root, in file order.
        Empty if project.properties does not exist.
    """
    properties = project_root / PROPERTIES_FILE
    if not properties.exists():
        return []

    paths: list[str] = []
    for line in properties.read_text(encoding="utf-8").splitlines():
        match = _LIBRARY_REFERENCE.match(line)
        if match and match.group(1):
            paths.append(match.group(1))
    return paths


def gradle_project_name(relative_path: str) -> str:
    """Convert a sub-project path to a gradle project path (``:a:b``)."""
    return ":" + re.sub(r"[/\\]", ":", relative_path)


def write_build_xml(project_path: Path, template: str, name: str) -> Path:
    """Write build.xml from the SDK template and seed local.properties.

    Library sub-projects have no activity of their own, so the caller
    passes the name read from the root project's manifest.

    Args:
        project_path: Project or sub-project directory.
        template: Contents of the SDK's build.template.
        name: Project name substituted for PROJECT_NAME.

    Returns:
        Path to the written build.xml.
    """
    build_xml = project_path / "build.xml"
    build_xml.write_text(template.replace("PROJECT_NAME", name), encoding="utf-8")

    local_properties = project_path / "local.properties"
    if not local_properties.exists():
        local_properties.write_text(GENERATED_HEADER, encoding="utf-8")

    logger.debug("Wrote %s", build_xml)
    return build_xml


def write_local_properties(project_path: Path, sdk_dir: Path) -> Path:
    """Write local.properties pointing at the SDK."""
    local_properties = project_path / "local.properties"
    local_properties.write_text(
        f"{GENERATED_HEADER}sdk.dir={sdk_dir.as_posix()}\n", encoding="utf-8"
    )
    return local_properties


def copy_gradle_wrapper(wrapper_dir: Path, project_root: Path) -> None:
    """Copy the gradle wrapper from the SDK template into the project."""
    for script in ("gradlew", "gradlew.bat"):
        source = wrapper_dir / script
        if source.exists():
            shutil.copy2(source, project_root / script)

    gradle_dir = wrapper_dir / "gradle"
    if gradle_dir.is_dir():
        shutil.copytree(gradle_dir, project_root / "gradle", dirs_exist_ok=True)

    gradlew = project_root / "gradlew"
    if gradlew.exists():
        gradlew.chmod(gradlew.stat().st_mode | 0o111)


def write_settings_gradle(project_root: Path, subprojects: list[str]) -> Path:
    """Write settings.gradle including the root and every sub-project."""
    lines = [GRADLE_GENERATED_HEADER, 'include ":"\n']
    lines.extend(f'include "{gradle_project_name(p)}"\n' for p in subprojects)
    settings_gradle = project_root / "settings.gradle"
    settings_gradle.write_text("".join(lines), encoding="utf-8")
    return settings_gradle


def update_build_gradle_dependencies(
    project_root: Path, subprojects: list[str]
) -> bool:
    """Rewrite the sub-project dependency block of the root build.gradle.

    Only the region between the ``SUB-PROJECT DEPENDENCIES START`` and
    ``END`` markers is replaced.

    Returns:
        True if the file was updated.
    """
    build_gradle = project_root / "build.gradle"
    if not build_gradle.exists():
        return False

    deps = "".join(
        f'    debugCompile project(path: "{gradle_project_name(p)}", '
        'configuration: "debug")\n'
        f'    releaseCompile project(path: "{gradle_project_name(p)}", '
        'configuration: "release")\n'
        for p in subprojects
    )
    content = build_gradle.read_text(encoding="utf-8")
    updated, count = _DEPENDENCIES_BLOCK.subn(
        lambda m: f"{m.group(1)}\n{deps}    {m.group(2)}", content
    )
    if count == 0:
        return False
    build_gradle.write_text(updated, encoding="utf-8")
    return True


def ensure_library_build_gradle(subproject_path: Path) -> Path:
    """Give a library sub-project a build.gradle if it has none."""
    build_gradle = subproject_path / "build.gradle"
    if not build_gradle.exists():
        build_gradle.write_text(LIBRARY_BUILD_GRADLE, encoding="utf-8")
        logger.debug("Wrote %s", build_gradle)
    return build_gradle


__all__ = [
    "CUSTOM_RULES_FILE",
    "GENERATED_HEADER",
    "MANIFEST_FILE",
    "OUTPUT_DIR",
    "PROPERTIES_FILE",
    "AndroidProject",
    "copy_gradle_wrapper",
    "ensure_library_build_gradle",
    "gradle_project_name",
    "read_project_name",
    "read_subproject_paths",
    "update_build_gradle_dependencies",
    "write_build_xml",
    "write_local_properties",
    "write_settings_gradle",
]

"""Shared fixtures: a fake Android SDK and a minimal project."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from droidbuild.config import Settings
from droidbuild.types import BackendName
from tests.helpers import BUILD_TEMPLATE, MANIFEST


@pytest.fixture
def sdk_dir(tmp_path: Path) -> Path:
    """Create a fake Android SDK with the templates the backends need."""
    sdk = tmp_path / "sdk"
    lib = sdk / "tools" / "lib"
    lib.mkdir(parents=True)
    (lib / "build.template").write_text(BUILD_TEMPLATE)

    wrapper = sdk / "tools" / "templates" / "gradle" / "wrapper"
    (wrapper / "gradle" / "wrapper").mkdir(parents=True)
    (wrapper / "gradlew").write_text("#!/bin/sh\nexit 0\n")
    (wrapper / "gradlew.bat").write_text("@echo off\n")
    (wrapper / "gradle" / "wrapper" / "gradle-wrapper.properties").write_text(
        "distributionUrl=gradle-1.12-all.zip\n"
    )
    return sdk


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Create a minimal Android project."""
    root = tmp_path / "project"
    root.mkdir()
    (root / "AndroidManifest.xml").write_text(MANIFEST)
    return root


@pytest.fixture
def settings(sdk_dir: Path, project_dir: Path) -> Settings:
    """Settings pointing at the fake SDK and project."""
    return Settings(
        project_root=project_dir,
        android_home=sdk_dir,
        backend=BackendName.ANT,
        multiple_apks=False,
    )


@pytest.fixture
def ant_on_path():
    """Pretend ant is installed (and nothing else is)."""

    def which(name: str) -> str | None:
        return "/usr/bin/ant" if name == "ant" else None

    with patch("droidbuild.requirements.shutil.which", side_effect=which):
        yield


@pytest.fixture
def fake_tools():
    """Patch subprocess.run so build tasks leave files behind.

    Maps the task argument (``debug``, ``assembleDebug``...) to the files
    the fake tool writes. Every call exits 0.
    """

    def factory(outputs: dict[str, list[Path]]):
        def fake_run(args, **kwargs):
            for path in outputs.get(args[1], []):
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_bytes(b"apk")
            return subprocess.CompletedProcess(args, 0, stdout=None)

        return patch("droidbuild.builds.runner.subprocess.run", side_effect=fake_run)

    return factory

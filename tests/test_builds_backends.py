"""Tests for builds/backends.py module.

Uses a fake SDK and mocked subprocess; no real build tool is invoked.
"""

import os
import subprocess
from unittest.mock import patch

import pytest

from droidbuild.builds.backends import (
    BACKENDS,
    GRADLE_LINT_STEPS,
    GRADLE_MULTI_APK_LINT_STEPS,
    AntBackend,
    GradleBackend,
    NoOpBackend,
    get_backend,
)
from droidbuild.errors import (
    BuildToolError,
    NoArtifactError,
    NotFoundError,
    PrerequisiteError,
)
from droidbuild.project import AndroidProject
from droidbuild.types import BackendName, BuildType
from tests.helpers import LIBRARY_MANIFEST


@pytest.fixture
def project(project_dir) -> AndroidProject:
    return AndroidProject(project_dir)


def x_args(args: list[str]) -> list[str]:
    return [args[i + 1] for i, a in enumerate(args) if a == "-x"]


class TestGetBackend:
    """Tests for get_backend function."""

    def test_closed_set(self):
        """Every backend name maps to a backend class."""
        assert set(BACKENDS) == set(BackendName)

    @pytest.mark.parametrize(
        ("name", "cls"),
        [
            (BackendName.ANT, AntBackend),
            (BackendName.GRADLE, GradleBackend),
            (BackendName.NONE, NoOpBackend),
        ],
    )
    def test_instances(self, project, settings, name, cls):
        """Should instantiate the matching class."""
        backend = get_backend(name, project, settings)
        assert isinstance(backend, cls)
        assert backend.name is name


class TestAntBackend:
    """Tests for AntBackend."""

    def test_args(self, project, settings, sdk_dir):
        """Should target build.xml and pass the SDK dir."""
        args = AntBackend(project, settings).get_args("debug")
        assert args[:3] == ["debug", "-f", str(project.root / "build.xml")]
        assert f"-Dsdk.dir={sdk_dir}" in args
        assert "-Dout.dir=ant-build" not in args

    def test_args_with_custom_rules(self, project, settings):
        """custom_rules.xml should redirect outputs."""
        (project.root / "custom_rules.xml").write_text("<project/>")
        args = AntBackend(project, settings).get_args("release")
        assert "-Dout.dir=ant-build" in args
        assert "-Dgen.absolute.dir=ant-gen" in args

    def test_output_dir(self, project, settings):
        """bin/ normally, ant-build/ with custom rules."""
        backend = AntBackend(project, settings)
        assert backend.output_dir() == project.root / "bin"
        (project.root / "custom_rules.xml").write_text("<project/>")
        assert backend.output_dir() == project.root / "ant-build"

    def test_requires_clean(self, project, settings):
        """A clean is needed unless custom_rules.xml exists."""
        backend = AntBackend(project, settings)
        assert backend.requires_clean() is True
        (project.root / "custom_rules.xml").write_text("<project/>")
        assert backend.requires_clean() is False

    def test_prepare_environment(self, project, settings, ant_on_path):
        """Should write build.xml into root and library sub-projects."""
        lib = project.root / "CordovaLib"
        lib.mkdir()
        (lib / "AndroidManifest.xml").write_text(LIBRARY_MANIFEST)
        (project.root / "project.properties").write_text(
            "android.library.reference.1=CordovaLib\n"
        )

        backend = AntBackend(project, settings)
        backend.prepare_environment()
        backend.prepare_environment()

        assert 'name="HelloWorld"' in (project.root / "build.xml").read_text()
        assert 'name="HelloWorld"' in (lib / "build.xml").read_text()
        assert (lib / "local.properties").exists()

    def test_prepare_library_without_manifest(self, project, settings, ant_on_path):
        """Sub-project manifests are never read."""
        lib = project.root / "CordovaLib"
        lib.mkdir()
        (project.root / "project.properties").write_text(
            "android.library.reference.1=CordovaLib\n"
        )

        AntBackend(project, settings).prepare_environment()

        assert 'name="HelloWorld"' in (lib / "build.xml").read_text()

    def test_prepare_without_ant(self, project, settings):
        """Missing ant fails before anything is written."""
        with patch("droidbuild.requirements.shutil.which", return_value=None):
            with pytest.raises(PrerequisiteError):
                AntBackend(project, settings).prepare_environment()
        assert not (project.root / "build.xml").exists()

    def test_prepare_without_template(self, project, settings, sdk_dir, ant_on_path):
        """An SDK without build.template is rejected."""
        (sdk_dir / "tools" / "lib" / "build.template").unlink()
        with pytest.raises(PrerequisiteError):
            AntBackend(project, settings).prepare_environment()

    def test_build_returns_single_newest(self, project, settings, fake_tools):
        """Ant returns only the top candidate."""
        bin_dir = project.root / "bin"
        bin_dir.mkdir()
        stale = bin_dir / "app-old-debug.apk"
        stale.write_bytes(b"old")
        os.utime(stale, (1_000_000, 1_000_000))
        outputs = {"debug": [bin_dir / "app-debug.apk"]}
        with fake_tools(outputs) as mock_run:
            artifacts = AntBackend(project, settings).build(BuildType.DEBUG)

        assert artifacts == [bin_dir / "app-debug.apk"]
        args, _ = mock_run.call_args
        assert args[0][:2] == ["ant", "debug"]

    def test_build_release(self, project, settings, fake_tools):
        """Release builds look for -release artifacts."""
        bin_dir = project.root / "bin"
        outputs = {"release": [bin_dir / "app-release-unsigned.apk"]}
        with fake_tools(outputs):
            artifacts = AntBackend(project, settings).build(BuildType.RELEASE)
        assert artifacts == [bin_dir / "app-release-unsigned.apk"]

    def test_build_no_artifact(self, project, settings, fake_tools):
        """An empty bin/ after a successful build is fatal."""
        (project.root / "bin").mkdir()
        with fake_tools({}):
            with pytest.raises(NoArtifactError) as exc_info:
                AntBackend(project, settings).build(BuildType.DEBUG)
        assert exc_info.value.exit_status == 2

    def test_build_missing_bin(self, project, settings, fake_tools):
        """A missing bin/ after a successful build is fatal."""
        with fake_tools({}):
            with pytest.raises(NotFoundError):
                AntBackend(project, settings).build(BuildType.DEBUG)

    def test_build_tool_failure(self, project, settings):
        """A failing ant propagates its exit status."""
        with patch("droidbuild.builds.runner.subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess(["ant"], 1)
            with pytest.raises(BuildToolError) as exc_info:
                AntBackend(project, settings).build(BuildType.DEBUG)
        assert exc_info.value.exit_code == 1

    def test_clean_checks_ant(self, project, settings):
        """clean verifies ant before running."""
        with patch("droidbuild.requirements.shutil.which", return_value=None):
            with patch("droidbuild.builds.runner.subprocess.run") as mock_run:
                with pytest.raises(PrerequisiteError):
                    AntBackend(project, settings).clean()
        mock_run.assert_not_called()

    def test_clean(self, project, settings, ant_on_path, fake_tools):
        """clean runs ant clean."""
        with fake_tools({}) as mock_run:
            AntBackend(project, settings).clean()
        args, _ = mock_run.call_args
        assert args[0][:2] == ["ant", "clean"]


class TestGradleBackend:
    """Tests for GradleBackend."""

    def test_args(self, project, settings):
        """Should target build.gradle and skip lint steps."""
        args = GradleBackend(project, settings).get_args("assembleDebug")
        assert args[:3] == ["assembleDebug", "-b", str(project.root / "build.gradle")]
        assert "-Dorg.gradle.daemon=true" in args
        assert x_args(args) == GRADLE_LINT_STEPS

    def test_args_multiple_apks(self, project, settings):
        """Multi-APK mode skips the per-architecture lint steps."""
        multi = settings.model_copy(update={"multiple_apks": True})
        args = GradleBackend(project, multi).get_args("assembleRelease")
        assert x_args(args) == GRADLE_MULTI_APK_LINT_STEPS

    def test_multiple_apks_from_environment(self, monkeypatch):
        """BUILD_MULTIPLE_APKS should turn on multi-APK mode."""
        from droidbuild.config import Settings

        monkeypatch.delenv("DROIDBUILD_MULTIPLE_APKS", raising=False)
        monkeypatch.setenv("BUILD_MULTIPLE_APKS", "1")
        assert Settings().multiple_apks is True

    def test_never_requires_clean(self, project, settings):
        """Gradle builds incrementally."""
        assert GradleBackend(project, settings).requires_clean() is False

    def test_prepare_environment(self, project, settings, sdk_dir):
        """Should copy the wrapper and write settings files."""
        (project.root / "project.properties").write_text(
            "android.library.reference.1=CordovaLib\n"
        )
        (project.root / "CordovaLib").mkdir()

        backend = GradleBackend(project, settings)
        backend.prepare_environment()
        backend.prepare_environment()

        root = project.root
        assert (root / "gradlew").exists()
        assert (root / "gradle" / "wrapper" / "gradle-wrapper.properties").exists()
        assert 'include ":CordovaLib"' in (root / "settings.gradle").read_text()
        assert f"sdk.dir={sdk_dir.as_posix()}" in (root / "local.properties").read_text()
        assert (root / "CordovaLib" / "build.gradle").exists()
        assert (root / "CordovaLib" / "local.properties").exists()

    def test_prepare_without_sdk(self, project, settings, tmp_path):
        """A missing SDK is a prerequisite error."""
        broken = settings.model_copy(update={"android_home": tmp_path / "missing"})
        with pytest.raises(PrerequisiteError):
            GradleBackend(project, broken).prepare_environment()

    def test_build_returns_all(self, project, settings, fake_tools):
        """Gradle returns every matching APK."""
        apk_dir = project.root / "build" / "outputs" / "apk"
        outputs = {
            "assembleDebug": [
                apk_dir / "app-x86-debug.apk",
                apk_dir / "app-armv7-debug.apk",
            ]
        }
        with fake_tools(outputs) as mock_run:
            artifacts = GradleBackend(project, settings).build(BuildType.DEBUG)

        assert {a.name for a in artifacts} == {"app-x86-debug.apk", "app-armv7-debug.apk"}
        args, _ = mock_run.call_args
        assert args[0][0].endswith("gradlew") or args[0][0].endswith("gradlew.bat")
        assert args[0][1] == "assembleDebug"

    def test_build_filters_build_type(self, project, settings, fake_tools):
        """Stale artifacts of the other build type are ignored."""
        apk_dir = project.root / "build" / "outputs" / "apk"
        apk_dir.mkdir(parents=True)
        (apk_dir / "app-debug.apk").write_bytes(b"old")
        outputs = {"assembleRelease": [apk_dir / "app-release-unsigned.apk"]}
        with fake_tools(outputs):
            artifacts = GradleBackend(project, settings).build(BuildType.RELEASE)
        assert artifacts == [apk_dir / "app-release-unsigned.apk"]

    def test_build_no_artifact(self, project, settings, fake_tools):
        """No matching APK after a successful build is fatal."""
        (project.root / "build" / "outputs" / "apk").mkdir(parents=True)
        with fake_tools({}):
            with pytest.raises(NoArtifactError):
                GradleBackend(project, settings).build(BuildType.DEBUG)

    def test_clean(self, project, settings, fake_tools):
        """clean runs the wrapper's clean task."""
        with fake_tools({}) as mock_run:
            GradleBackend(project, settings).clean()
        args, _ = mock_run.call_args
        assert args[0][1] == "clean"


class TestNoOpBackend:
    """Tests for NoOpBackend."""

    def test_everything_is_a_no_op(self, project, settings):
        """No subprocess, no files, no artifacts."""
        backend = NoOpBackend(project, settings)
        with patch("droidbuild.builds.runner.subprocess.run") as mock_run:
            backend.prepare_environment()
            assert backend.build(BuildType.RELEASE) == []
            backend.clean()
        mock_run.assert_not_called()
        assert backend.requires_clean() is False
        assert sorted(p.name for p in project.root.iterdir()) == ["AndroidManifest.xml"]

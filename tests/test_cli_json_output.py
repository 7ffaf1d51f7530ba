"""Tests for CLI JSON output functionality.

JSON output must have stable keys so other tools (the deploy step) can
consume it.
"""

import json
from pathlib import Path
from unittest.mock import patch

from typer.testing import CliRunner

from droidbuild.cli import app

runner = CliRunner()


class TestBuildJSONOutput:
    """Test JSON output for build."""

    def test_build_json(self, project_dir: Path) -> None:
        """build --json should list the copied artifacts."""
        artifacts = [
            project_dir / "out" / "app-x86-debug.apk",
            project_dir / "out" / "app-armv7-debug.apk",
        ]
        with patch("droidbuild.builds.service.run_build", return_value=artifacts):
            result = runner.invoke(
                app, ["build", "--gradle", "--json", "-C", str(project_dir)]
            )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data == {"artifacts": [str(a) for a in artifacts]}

    def test_nobuild_json(self, project_dir: Path) -> None:
        """build --nobuild --json should give an empty list."""
        result = runner.invoke(
            app, ["build", "--nobuild", "--json", "-C", str(project_dir)]
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"artifacts": []}


class TestArtifactJSONOutput:
    """Test JSON output for artifact."""

    def test_artifact_json(self, project_dir: Path) -> None:
        """artifact --json should give the artifact path."""
        out = project_dir / "out"
        out.mkdir()
        (out / "app-debug.apk").write_bytes(b"apk")

        result = runner.invoke(app, ["artifact", "--json", "-C", str(project_dir)])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"artifact": str(out / "app-debug.apk")}

"""Error taxonomy for droidbuild.

Every error carries a stable ``code`` string for programmatic handling.
Errors deriving from FatalBuildError mean an expected file or directory
was missing after a step that should have produced it; the CLI terminates
with ``exit_status`` when it sees one.
"""

from pathlib import Path

# Error code constants
CONFIG_ERROR = "config_error"
PREREQUISITE_ERROR = "prerequisite_error"
BUILD_TOOL_ERROR = "build_tool_error"
NOT_FOUND = "not_found"
NO_ARTIFACT = "no_artifact"


class DroidBuildError(Exception):
    """Base error for droidbuild operations."""

    def __init__(self, message: str, code: str = "droidbuild_error") -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class ConfigError(DroidBuildError):
    """Raised for unrecognized or conflicting build options."""

    def __init__(self, message: str, tokens: tuple[str, ...] = ()) -> None:
        super().__init__(message, code=CONFIG_ERROR)
        self.tokens = tokens


class PrerequisiteError(DroidBuildError):
    """Raised when a required tool or SDK is missing or misconfigured."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code=PREREQUISITE_ERROR)


class BuildToolError(DroidBuildError):
    """Raised when an external tool exits with a non-zero status."""

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        command: str | None = None,
    ) -> None:
        super().__init__(message, code=BUILD_TOOL_ERROR)
        self.exit_code = exit_code
        self.command = command


class FatalBuildError(DroidBuildError):
    """Unrecoverable condition; the program should terminate."""

    exit_status = 2


class NotFoundError(FatalBuildError):
    """Raised when a directory expected to hold artifacts does not exist."""

    def __init__(self, path: Path) -> None:
        super().__init__(
            f"Unable to find project directory {path}, could not locate .apk",
            code=NOT_FOUND,
        )
        self.path = path


class NoArtifactError(FatalBuildError):
    """Raised when no artifact is found where one was expected."""

    def __init__(self, directory: Path, detail: str | None = None) -> None:
        message = f"No .apk found in {directory} directory"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message, code=NO_ARTIFACT)
        self.directory = directory


__all__ = [
    "BUILD_TOOL_ERROR",
    "CONFIG_ERROR",
    "NOT_FOUND",
    "NO_ARTIFACT",
    "PREREQUISITE_ERROR",
    "BuildToolError",
    "ConfigError",
    "DroidBuildError",
    "FatalBuildError",
    "NoArtifactError",
    "NotFoundError",
    "PrerequisiteError",
]

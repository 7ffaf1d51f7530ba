"""Prerequisite checks for the build backends.

Each ``has_*`` function answers a yes/no question about the host; each
``check_*`` function raises PrerequisiteError with an actionable message
when the answer is no.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from droidbuild.config import Settings
from droidbuild.errors import PrerequisiteError

logger = logging.getLogger(__name__)

GRADLE_WRAPPER_TEMPLATE = Path("tools", "templates", "gradle", "wrapper")
ANT_BUILD_TEMPLATE = Path("tools", "lib", "build.template")


def has_ant() -> bool:
    """Return True if ant is on PATH."""
    return shutil.which("ant") is not None


def check_ant() -> None:
    """Ensure ant is installed.

    Raises:
        PrerequisiteError: If ant cannot be found.
    """
    if not has_ant():
        raise PrerequisiteError(
            "Could not find ant. Make sure it is installed and on your PATH."
        )
    logger.debug("Found ant at %s", shutil.which("ant"))


def find_android_sdk(settings: Settings) -> Path | None:
    """Locate the Android SDK.

    ANDROID_HOME wins; otherwise the SDK is derived from the location of
    the ``android`` tool (``<sdk>/tools/android``).

    Args:
        settings: Application settings.

    Returns:
        The SDK directory, or None if it cannot be located.
    """
    if settings.android_home is not None:
        return settings.android_home

    android = shutil.which("android")
    if android is None:
        return None
    return Path(android).resolve().parent.parent


def check_android_sdk(settings: Settings) -> Path:
    """Ensure the Android SDK can be located.

    Returns:
        The SDK directory.

    Raises:
        PrerequisiteError: If the SDK is missing.
    """
    sdk_dir = find_android_sdk(settings)
    if sdk_dir is None or not sdk_dir.is_dir():
        raise PrerequisiteError(
            "Failed to find the Android SDK. Set ANDROID_HOME or add the SDK "
            "tools directory to your PATH."
        )
    return sdk_dir


def check_gradle(settings: Settings) -> Path:
    """Ensure the SDK ships a gradle wrapper template.

    Returns:
        The wrapper template directory inside the SDK.

    Raises:
        PrerequisiteError: If the SDK or the wrapper is missing.
    """
    sdk_dir = check_android_sdk(settings)
    wrapper_dir = sdk_dir / GRADLE_WRAPPER_TEMPLATE
    if not wrapper_dir.is_dir():
        raise PrerequisiteError(
            f"Could not find gradle wrapper within android sdk ({wrapper_dir}). "
            "Might need to update your Android SDK."
        )
    return wrapper_dir


__all__ = [
    "ANT_BUILD_TEMPLATE",
    "GRADLE_WRAPPER_TEMPLATE",
    "check_android_sdk",
    "check_ant",
    "check_gradle",
    "find_android_sdk",
    "has_ant",
]

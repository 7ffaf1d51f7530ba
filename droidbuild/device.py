"""Device queries over adb.

Only one question is ever asked of a device: which CPU family it runs,
so the deploy step can pick the matching APK when the build produced one
per architecture.
"""

import logging
import re

from droidbuild.builds.runner import run_tool
from droidbuild.config import Settings, get_settings

logger = logging.getLogger(__name__)

ARCH_X86 = "x86"
ARCH_ARM = "arm"

_INTEL_MARKER = re.compile(r"intel", re.IGNORECASE)


def classify_cpuinfo(cpuinfo: str) -> str:
    """Classify /proc/cpuinfo text as ``x86`` or ``arm``."""
    return ARCH_X86 if _INTEL_MARKER.search(cpuinfo) else ARCH_ARM


def detect_architecture(
    target: str | None = None,
    settings: Settings | None = None,
) -> str:
    """Detect the CPU architecture of an attached device or emulator.

    Issues a single ``adb shell cat /proc/cpuinfo`` with no retry.

    Args:
        target: Device serial passed to ``adb -s``; the only attached
            device is used when omitted.
        settings: Optional settings instance.

    Returns:
        ``"x86"`` for Intel CPUs, ``"arm"`` otherwise.

    Raises:
        BuildToolError: If adb fails.
    """
    if settings is None:
        settings = get_settings()

    cmd = [settings.adb_path]
    if target:
        cmd.extend(["-s", target])
    cmd.extend(["shell", "cat", "/proc/cpuinfo"])

    result = run_tool(cmd, capture=True)
    arch = classify_cpuinfo(result.stdout or "")
    logger.info("Device %s architecture: %s", target or "(default)", arch)
    return arch


__all__ = ["ARCH_ARM", "ARCH_X86", "classify_cpuinfo", "detect_architecture"]

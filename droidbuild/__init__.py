"""droidbuild - build shim for Android application projects.

This package selects a build backend (ant, gradle or none), prepares the
project for it, runs the build and stages the produced APKs in the
project's ``out/`` directory for the deploy step.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]

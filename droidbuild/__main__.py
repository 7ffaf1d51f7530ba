"""Entry point for ``python -m droidbuild``."""

from droidbuild.cli import app

if __name__ == "__main__":
    app()

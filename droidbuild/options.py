"""Build option parsing.

Turns the flag tokens given to ``build``/``clean`` (``--debug``,
``--release``, ``--ant``, ``--gradle``, ``--nobuild``) into a validated
BuildConfiguration. Each axis accepts at most one token; a second token on
an axis that is already set is rejected rather than overriding it.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from droidbuild.config import Settings, get_settings
from droidbuild.errors import ConfigError
from droidbuild.types import BackendName, BuildConfiguration, BuildType

logger = logging.getLogger(__name__)

FLAG_PREFIX = "--"

BUILD_TYPE_FLAGS: dict[str, BuildType] = {
    "debug": BuildType.DEBUG,
    "release": BuildType.RELEASE,
}

BACKEND_FLAGS: dict[str, BackendName] = {
    "ant": BackendName.ANT,
    "gradle": BackendName.GRADLE,
    "nobuild": BackendName.NONE,
}

OPTION_HELP: dict[str, str] = {
    "--debug": "Default build, will build project in debug mode",
    "--release": "Will build project for release",
    "--ant": "Default build, will build project with ant",
    "--gradle": "Will build project with gradle",
    "--nobuild": "Will skip build process (can be used with run command)",
}


def _unrecognized(token: object) -> ConfigError:
    return ConfigError(f"Build option '{token}' not recognized.", tokens=(str(token),))


def parse_options(
    tokens: Sequence[str] | str | None,
    settings: Settings | None = None,
) -> BuildConfiguration:
    """Parse build option tokens into a configuration.

    Args:
        tokens: Flag tokens. A bare string is treated as a single token.
        settings: Settings supplying the default backend; loaded from the
            environment if not provided.

    Returns:
        The validated BuildConfiguration.

    Raises:
        ConfigError: If a token is unrecognized or conflicts with an
            earlier token on the same axis.
    """
    if tokens is None:
        tokens = []
    elif isinstance(tokens, str):
        tokens = [tokens]

    build_type_token: str | None = None
    backend_token: str | None = None
    build_type: BuildType | None = None
    backend: BackendName | None = None

    for token in tokens:
        if not isinstance(token, str) or not token.startswith(FLAG_PREFIX):
            raise _unrecognized(token)

        option = token[len(FLAG_PREFIX) :]
        if option in BUILD_TYPE_FLAGS:
            if build_type_token is not None:
                raise ConfigError(
                    f"Multiple build types ({build_type_token} and {token}) specified.",
                    tokens=(build_type_token, token),
                )
            build_type_token = token
            build_type = BUILD_TYPE_FLAGS[option]
        elif option in BACKEND_FLAGS:
            if backend_token is not None:
                raise ConfigError(
                    f"Multiple build methods ({backend_token} and {token}) specified.",
                    tokens=(backend_token, token),
                )
            backend_token = token
            backend = BACKEND_FLAGS[option]
        else:
            raise _unrecognized(token)

    if backend is None:
        if settings is None:
            settings = get_settings()
        backend = settings.backend

    config = BuildConfiguration(
        build_type=build_type or BuildType.DEBUG,
        backend=backend,
    )
    logger.debug(
        "Parsed build options %s -> type=%s backend=%s",
        list(tokens),
        config.build_type.value,
        config.backend.value,
    )
    return config


__all__ = [
    "BACKEND_FLAGS",
    "BUILD_TYPE_FLAGS",
    "FLAG_PREFIX",
    "OPTION_HELP",
    "parse_options",
]

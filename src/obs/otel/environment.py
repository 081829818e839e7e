"""Genkit runtime environment detection."""

from __future__ import annotations

from enum import StrEnum

from utils.env_utils import env_value

GENKIT_ENV_VAR = "GENKIT_ENV"


class GenkitEnvironment(StrEnum):
    """Runtime environments recognized by Genkit."""

    DEV = "dev"
    PROD = "prod"


def parse_environment(value: GenkitEnvironment | str | None) -> GenkitEnvironment:
    """Parse an environment flag, treating anything but ``dev`` as production.

    Returns
    -------
    GenkitEnvironment
        Parsed environment.
    """
    if isinstance(value, GenkitEnvironment):
        return value
    if isinstance(value, str) and value.strip().lower() in {"dev", "development"}:
        return GenkitEnvironment.DEV
    return GenkitEnvironment.PROD


def current_environment() -> GenkitEnvironment:
    """Return the environment reported by ``GENKIT_ENV``.

    Returns
    -------
    GenkitEnvironment
        ``DEV`` when ``GENKIT_ENV=dev``, otherwise ``PROD``.
    """
    return parse_environment(env_value(GENKIT_ENV_VAR))


def is_dev_env() -> bool:
    """Return True when running under the Genkit development environment."""
    return current_environment() is GenkitEnvironment.DEV


__all__ = [
    "GENKIT_ENV_VAR",
    "GenkitEnvironment",
    "current_environment",
    "is_dev_env",
    "parse_environment",
]

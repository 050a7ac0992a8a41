"""The deployment environment name and its configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional


class Environment(str):
    """A deployment environment name compared case-insensitively."""

    def is_one_of_ci(self, *args: str) -> bool:
        """True if this name equals any of ``args`` ignoring case and surrounding space."""
        own = self.lower().strip()
        return any(value.lower().strip() == own for value in args)

    def is_dev(self) -> bool:
        return self.is_one_of_ci("dev", "deveopment", "d")

    def is_prod(self) -> bool:
        return self.is_one_of_ci("prod", "production", "p", "prd")

    def is_test(self) -> bool:
        return self.is_one_of_ci("test", "t", "tst")


_DEFAULT_ENVIRONMENT = "development"


@dataclass(frozen=True)
class EnvironmentConfig:
    """Configuration read from the ``ENVIRONMENT`` variable."""

    environment: Environment = Environment(_DEFAULT_ENVIRONMENT)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EnvironmentConfig":
        """Read the configuration; an unset or empty value gives the default."""
        source = os.environ if environ is None else environ
        value = source.get("ENVIRONMENT", "") or _DEFAULT_ENVIRONMENT
        return cls(environment=Environment(value))


def new_environment(config: EnvironmentConfig) -> Environment:
    """Return the environment held by ``config``."""
    return config.environment
"""Configuration for the class file reader."""

import os
from dataclasses import dataclass, replace


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("true", "1", "yes")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


@dataclass(frozen=True)
class ReaderConfig:
    """Limits and policies applied while parsing a class file."""

    # 45 is JDK 1.0.2/1.1, 69 is Java 25
    min_major_version: int = 45
    max_major_version: int = 69
    allow_trailing_data: bool = False

    @classmethod
    def from_env(cls) -> "ReaderConfig":
        """
        Load configuration from environment variables.

        Recognized variables:
            JCFREADER_MIN_MAJOR_VERSION: lowest accepted major version
            JCFREADER_MAX_MAJOR_VERSION: highest accepted major version
            JCFREADER_ALLOW_TRAILING_DATA: accept bytes after the class attributes

        Returns:
            ReaderConfig object
        """
        defaults = cls()
        return cls(
            min_major_version=_env_int("JCFREADER_MIN_MAJOR_VERSION", defaults.min_major_version),
            max_major_version=_env_int("JCFREADER_MAX_MAJOR_VERSION", defaults.max_major_version),
            allow_trailing_data=_env_bool("JCFREADER_ALLOW_TRAILING_DATA", defaults.allow_trailing_data),
        )

    def with_overrides(self, **changes) -> "ReaderConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def accepts_version(self, major: int) -> bool:
        return self.min_major_version <= major <= self.max_major_version


DEFAULT_CONFIG = ReaderConfig()

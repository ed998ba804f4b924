"""
Engine configuration — behavior knobs.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import timedelta

ENV_PREFIX = "DEALERSHIP_"


# ═══════════════════════════════════════════════════════════════════════════════
# EngineConfig — Full Configuration
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """
    Engine configuration.

    Fluent builder pattern — chain methods to configure.

    Example:
        config = (
            EngineConfig()
            .with_identifier_attempts(12)
            .with_test_drive(default_seconds=120, max_seconds=600)
        )

    Note: Immutable — each method returns new EngineConfig.
    """

    identifier_attempts: int = 8
    default_test_drive: timedelta = timedelta(minutes=5)
    max_test_drive: timedelta = timedelta(minutes=30)
    used_name_suffix: str = " (Used)"

    def with_identifier_attempts(self, attempts: int) -> EngineConfig:
        """
        Bound plate/VIN generation retries per purchase.

        Example:
            .with_identifier_attempts(16)
        """
        if attempts < 1:
            raise ValueError("identifier_attempts must be at least 1")
        return replace(self, identifier_attempts=attempts)

    def with_test_drive(
        self,
        *,
        default_seconds: float | None = None,
        max_seconds: float | None = None,
    ) -> EngineConfig:
        """
        Set default and maximum test-drive durations.

        Example:
            .with_test_drive(default_seconds=300, max_seconds=1800)
        """
        default = (
            timedelta(seconds=default_seconds)
            if default_seconds is not None
            else self.default_test_drive
        )
        maximum = (
            timedelta(seconds=max_seconds)
            if max_seconds is not None
            else self.max_test_drive
        )
        if default <= timedelta(0) or maximum <= timedelta(0):
            raise ValueError("test drive durations must be positive")
        if default > maximum:
            raise ValueError("default test drive exceeds maximum")
        return replace(self, default_test_drive=default, max_test_drive=maximum)

    def with_used_name_suffix(self, suffix: str) -> EngineConfig:
        """Set the annotation appended to used-variant names."""
        return replace(self, used_name_suffix=suffix)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        prefix: str = ENV_PREFIX,
    ) -> EngineConfig:
        """
        Build config from environment variables.

        Reads {prefix}IDENTIFIER_ATTEMPTS, {prefix}DEFAULT_TEST_DRIVE_SECONDS,
        {prefix}MAX_TEST_DRIVE_SECONDS and {prefix}USED_NAME_SUFFIX.
        Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        config = cls()

        attempts = env.get(f"{prefix}IDENTIFIER_ATTEMPTS")
        if attempts is not None:
            config = config.with_identifier_attempts(_parse_int(attempts, "IDENTIFIER_ATTEMPTS"))

        default_seconds = env.get(f"{prefix}DEFAULT_TEST_DRIVE_SECONDS")
        max_seconds = env.get(f"{prefix}MAX_TEST_DRIVE_SECONDS")
        if default_seconds is not None or max_seconds is not None:
            config = config.with_test_drive(
                default_seconds=_parse_float(default_seconds, "DEFAULT_TEST_DRIVE_SECONDS"),
                max_seconds=_parse_float(max_seconds, "MAX_TEST_DRIVE_SECONDS"),
            )

        suffix = env.get(f"{prefix}USED_NAME_SUFFIX")
        if suffix is not None:
            config = config.with_used_name_suffix(suffix)

        return config


def _parse_int(raw: str, name: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _parse_float(raw: str | None, name: str) -> float | None:
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("ENV_PREFIX", "EngineConfig")

"""Loader configuration from environment variables."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: float = 120.0
DEFAULT_TARGET: str = "ResolveReferences"


@dataclass(frozen=True)
class LoaderConfig:
    """Settings for design-time builds."""

    dotnet_path: str = "dotnet"
    """dotnet executable used for design-time builds."""

    timeout: float = DEFAULT_TIMEOUT
    """Seconds a single design-time build may take."""

    design_time_target: str = DEFAULT_TARGET
    """MSBuild target run to resolve items and references."""

    extra_frameworks: tuple[str, ...] = ()
    """Frameworks accepted in addition to the built-in list."""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> LoaderConfig:
        """Read QSPROJ_* environment variables.

        Invalid values fall back to the defaults.
        """
        env = os.environ if environ is None else environ

        timeout = DEFAULT_TIMEOUT
        raw_timeout = env.get("QSPROJ_BUILD_TIMEOUT")
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
                if timeout <= 0:
                    raise ValueError(raw_timeout)
            except ValueError:
                logger.warning(
                    f"Invalid QSPROJ_BUILD_TIMEOUT={raw_timeout!r}, using {DEFAULT_TIMEOUT}s"
                )
                timeout = DEFAULT_TIMEOUT

        extra = tuple(
            name.strip()
            for name in env.get("QSPROJ_EXTRA_FRAMEWORKS", "").split(";")
            if name.strip()
        )

        return cls(
            dotnet_path=env.get("QSPROJ_DOTNET_PATH") or "dotnet",
            timeout=timeout,
            design_time_target=env.get("QSPROJ_DESIGN_TIME_TARGET") or DEFAULT_TARGET,
            extra_frameworks=extra,
        )

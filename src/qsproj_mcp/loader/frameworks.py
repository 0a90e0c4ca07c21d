"""Target framework selection and support checks."""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterable, Sequence
from typing import Final

TieBreak = Callable[[str, str], int]

# Frameworks the Q# compiler can build against
SUPPORTED_FRAMEWORKS: Final[frozenset[str]] = frozenset(
    {
        "netstandard2.0",
        "netstandard2.1",
        "netcoreapp2.0",
        "netcoreapp2.1",
        "netcoreapp2.2",
        "netcoreapp3.0",
        "netcoreapp3.1",
        "net461",
        "net462",
        "net47",
        "net471",
        "net472",
        "net48",
        "net481",
        "net5.0",
        "net6.0",
        "net7.0",
        "net8.0",
        "net9.0",
        "net10.0",
    }
)

# Global properties that keep a design-time build single-project and fast
BUILD_PROJECT_REFERENCES = "BuildProjectReferences"
ENABLE_FRAMEWORK_PATH_OVERRIDE = "EnableFrameworkPathOverride"
TARGET_FRAMEWORK = "TargetFramework"


def framework_candidates(
    target_framework: str | None, target_frameworks: str | None
) -> list[str]:
    """List the frameworks a project declares.

    TargetFrameworks (semicolon separated) wins over TargetFramework.
    Duplicates keep their first position.
    """
    if target_frameworks and target_frameworks.strip():
        candidates: list[str] = []
        for name in target_frameworks.split(";"):
            name = name.strip()
            if name and name not in candidates:
                candidates.append(name)
        if candidates:
            return candidates
    if target_framework and target_framework.strip():
        return [target_framework.strip()]
    return []


def prefer_versioned(a: str, b: str) -> int:
    """Order frameworks with a version separator before those without.

    netstandard2.0 sorts before net461; otherwise the order is unchanged.
    """
    return ("." in b) - ("." in a)


def select_framework(candidates: Sequence[str], tie_break: TieBreak) -> str | None:
    """Pick the framework used for a design-time build.

    Args:
        candidates: Declared frameworks in declaration order
        tie_break: cmp-style ordering; only consulted for several candidates

    Returns:
        The first framework after a stable sort, or None for no candidates
    """
    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]
    return sorted(candidates, key=functools.cmp_to_key(tie_break))[0]


def _strip_platform(framework: str) -> str:
    # net6.0-windows10.0.19041 -> net6.0
    return framework.split("-", 1)[0]


def is_supported_framework(framework: str | None, extra: Iterable[str] = ()) -> bool:
    """Check whether Q# can compile against a framework."""
    if not framework or not framework.strip():
        return False
    name = _strip_platform(framework.strip().lower())
    if name in SUPPORTED_FRAMEWORKS:
        return True
    return any(name == _strip_platform(e.strip().lower()) for e in extra if e.strip())


def global_properties(framework: str | None) -> dict[str, str]:
    """Global properties for a design-time build.

    Disables building referenced projects and the framework path override,
    and pins the target framework when one was selected.
    """
    properties = {
        BUILD_PROJECT_REFERENCES: "false",
        ENABLE_FRAMEWORK_PATH_OVERRIDE: "false",
    }
    if framework:
        properties[TARGET_FRAMEWORK] = framework
    return properties

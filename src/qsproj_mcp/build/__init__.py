"""Design-time build layer for project loading.

Provides:
- The DesignTimeBuildAdapter protocol consumed by the loader
- A dotnet CLI implementation using msbuild JSON queries
- Argument and path validation before any process is spawned
- MSBuild diagnostic parsing and load error types
"""

from .adapter import DesignTimeBuildAdapter, DotnetDesignTimeBuildAdapter, render_project_document
from .diagnostics import (
    BuildDiagnostic,
    DesignTimeBuildError,
    DiagnosticSeverity,
    ProjectLoadError,
    parse_msbuild_output,
)
from .policy import BuildPolicy

__all__ = [
    "BuildPolicy",
    "BuildDiagnostic",
    "DiagnosticSeverity",
    "DesignTimeBuildAdapter",
    "DesignTimeBuildError",
    "DotnetDesignTimeBuildAdapter",
    "ProjectLoadError",
    "parse_msbuild_output",
    "render_project_document",
]

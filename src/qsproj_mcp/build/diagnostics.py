"""MSBuild diagnostics and load error types.

Error taxonomy for project loads:
- ProjectLoadError: base for everything that makes a load fail
- DesignTimeBuildError: the external build could not evaluate the project
- ProjectDocumentError: the build output violated the document contract

An unsupported project is not an error; the loader reports it as None.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any


class DiagnosticSeverity(str, Enum):
    """MSBuild diagnostic severity levels."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class BuildDiagnostic:
    """Parsed MSBuild diagnostic (error/warning)."""

    severity: DiagnosticSeverity
    code: str
    message: str
    file: str | None = None
    line: int | None = None
    column: int | None = None
    project: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
        }
        if self.file:
            result["file"] = self.file
        if self.line is not None:
            result["line"] = self.line
        if self.column is not None:
            result["column"] = self.column
        if self.project:
            result["project"] = self.project
        return result


# Format: path(line,col): severity code: message [project]
MSBUILD_DIAGNOSTIC_PATTERN = re.compile(
    r"^(?P<file>[^(]+)\((?P<line>\d+),(?P<col>\d+)\):\s*"
    r"(?P<severity>error|warning|info)\s+(?P<code>\w+):\s*"
    r"(?P<message>.+?)(?:\s+\[(?P<project>[^\]]+)\])?$",
    re.IGNORECASE,
)

# Without location, optionally prefixed by the tool name:
#   MSBUILD : error MSB1009: Project file does not exist.
MSBUILD_SIMPLE_PATTERN = re.compile(
    r"^(?:[\w.]+\s*:\s*)?(?P<severity>error|warning|info)\s+(?P<code>\w+):\s*"
    r"(?P<message>.+?)(?:\s+\[(?P<project>[^\]]+)\])?$",
    re.IGNORECASE,
)


def parse_msbuild_output(output: str) -> list[BuildDiagnostic]:
    """Parse MSBuild console output into structured diagnostics.

    Lines that are not diagnostics are ignored.
    """
    diagnostics: list[BuildDiagnostic] = []

    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue

        match = MSBUILD_DIAGNOSTIC_PATTERN.match(line)
        if match:
            diagnostics.append(
                BuildDiagnostic(
                    severity=DiagnosticSeverity(match.group("severity").lower()),
                    code=match.group("code"),
                    message=match.group("message"),
                    file=match.group("file").strip(),
                    line=int(match.group("line")),
                    column=int(match.group("col")),
                    project=match.group("project"),
                )
            )
            continue

        match = MSBUILD_SIMPLE_PATTERN.match(line)
        if match:
            diagnostics.append(
                BuildDiagnostic(
                    severity=DiagnosticSeverity(match.group("severity").lower()),
                    code=match.group("code"),
                    message=match.group("message"),
                    project=match.group("project"),
                )
            )

    return diagnostics


class ProjectLoadError(Exception):
    """Base class for project load failures."""


class DesignTimeBuildError(ProjectLoadError):
    """The design-time build could not evaluate the project."""

    def __init__(
        self,
        message: str,
        diagnostics: list[BuildDiagnostic] | None = None,
        exit_code: int | None = None,
    ):
        super().__init__(message)
        self.diagnostics = diagnostics or []
        self.exit_code = exit_code

    @property
    def errors(self) -> list[BuildDiagnostic]:
        """Only the error diagnostics."""
        return [d for d in self.diagnostics if d.severity == DiagnosticSeverity.ERROR]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "error": str(self),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }
        if self.exit_code is not None:
            result["exitCode"] = self.exit_code
        return result

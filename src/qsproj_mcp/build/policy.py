"""Design-time build policy - argument and path validation.

Security measures:
- Project path canonicalization, UNC and device path denial
- Optional workspace containment
- Global property names/values checked before they reach the command line
- Command returned as an argument list, never a shell string
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Final

PROJECT_EXTENSIONS: Final[frozenset[str]] = frozenset(
    {".csproj", ".qsproj", ".fsproj", ".vbproj", ".proj"}
)

# MSBuild property names: identifier characters, dots and dashes
PROPERTY_NAME_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z_][A-Za-z0-9_.-]*$")

# Target framework monikers (net8.0, netstandard2.1, net48, net6.0-windows10.0.19041)
FRAMEWORK_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^net(?:standard|coreapp)?[0-9]+(?:\.[0-9]+)?(?:-[a-z]+[0-9.]*)?$", re.IGNORECASE
)

# Characters that would split or terminate a -p:Name=Value argument
_FORBIDDEN_VALUE_CHARS: Final[frozenset[str]] = frozenset({";", "\n", "\r", "\x00"})


@dataclass
class BuildPolicy:
    """Validation policy for design-time builds.

    Validates:
    - Project paths are existing project files (within workspace_root if set)
    - No UNC or device paths
    - Global properties are well-formed
    """

    workspace_root: str | None = None
    allow_unc_paths: bool = False
    allow_device_paths: bool = False

    def __post_init__(self) -> None:
        """Canonicalize workspace root."""
        if self.workspace_root:
            self.workspace_root = self._validate_path(self.workspace_root, "workspace_root")

    def _validate_path(self, path: str, context: str = "path") -> str:
        """Validate and canonicalize a path.

        Raises:
            ValueError: If path is empty or violates the policy
        """
        if not path:
            raise ValueError(f"Empty {context}")

        # Device paths (\\?\, \\.\) start with \\ too, so check them first
        if path.startswith(("\\\\.\\", "\\\\?\\")):
            if not self.allow_device_paths:
                raise ValueError(f"Device paths not allowed in {context}: {path}")
        elif path.startswith("\\\\") and not self.allow_unc_paths:
            raise ValueError(f"UNC paths not allowed in {context}: {path}")

        return os.path.normpath(os.path.abspath(path))

    def validate_project_path(self, project_path: str) -> str:
        """Validate a project file path.

        Returns:
            Validated absolute path

        Raises:
            ValueError: If the path is invalid, missing or outside the workspace
        """
        validated = self._validate_path(project_path, "project_path")

        extension = os.path.splitext(validated)[1].lower()
        if extension not in PROJECT_EXTENSIONS:
            raise ValueError(f"Not a project file: {project_path}")

        if not os.path.isfile(validated):
            raise ValueError(f"Project file does not exist: {project_path}")

        if self.workspace_root:
            try:
                common = os.path.commonpath([validated, self.workspace_root])
            except ValueError as e:
                raise ValueError(f"Project path outside workspace: {project_path}") from e
            if common != self.workspace_root:
                raise ValueError(f"Project path outside workspace: {project_path}")

        return validated

    def validate_global_properties(self, properties: Mapping[str, str]) -> dict[str, str]:
        """Validate global properties passed to MSBuild.

        Raises:
            ValueError: If a name or value is not allowed
        """
        validated: dict[str, str] = {}
        for name, value in properties.items():
            if not PROPERTY_NAME_PATTERN.match(name):
                raise ValueError(f"Invalid property name: {name!r}")
            value = str(value)
            if any(ch in value for ch in _FORBIDDEN_VALUE_CHARS):
                raise ValueError(f"Invalid value for property {name}: {value!r}")
            if name == "TargetFramework" and not FRAMEWORK_PATTERN.match(value):
                raise ValueError(f"Invalid framework: {value}")
            validated[name] = value
        return validated

    def get_msbuild_command(
        self,
        dotnet_path: str,
        project_path: str,
        global_properties: Mapping[str, str] | None = None,
        targets: Iterable[str] = (),
        properties: Iterable[str] = (),
        items: Iterable[str] = (),
    ) -> list[str]:
        """Build a validated `dotnet msbuild` query command line.

        Args:
            dotnet_path: dotnet executable
            project_path: Project file to evaluate
            global_properties: Passed as -p:Name=Value
            targets: Targets to run (evaluation only when empty)
            properties: Property names to query with -getProperty
            items: Item types to query with -getItem

        Returns:
            Complete command line as list
        """
        validated_project = self.validate_project_path(project_path)
        validated_props = self.validate_global_properties(global_properties or {})

        command = [dotnet_path, "msbuild", validated_project, "-nologo"]
        target_list = [t for t in targets if t]
        for target in target_list:
            if not PROPERTY_NAME_PATTERN.match(target):
                raise ValueError(f"Invalid target name: {target!r}")
        if target_list:
            command.append(f"-t:{';'.join(target_list)}")
        command.extend(f"-p:{name}={value}" for name, value in validated_props.items())
        command.extend(f"-getProperty:{name}" for name in properties)
        command.extend(f"-getItem:{name}" for name in items)
        return command

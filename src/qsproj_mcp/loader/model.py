"""Resolved compilation context of a project."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .paths import sorted_paths

TARGET_PATH = "TargetPath"
RESOLVED_TARGET_CAPABILITY = "ResolvedTargetCapability"
RESOLVED_PROCESSOR_ARCHITECTURE = "ResolvedProcessorArchitecture"


class ProjectProperties(Mapping[str, "str | None"]):
    """Read-only project properties.

    Empty values are stored as None.
    """

    def __init__(self, values: Mapping[str, str | None] | None = None):
        self._values = MappingProxyType(
            {name: (value or None) for name, value in (values or {}).items()}
        )

    def __getitem__(self, key: str) -> str | None:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ProjectProperties):
            return dict(self._values) == dict(other._values)
        if isinstance(other, Mapping):
            return dict(self._values) == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self._values.items()))

    def __repr__(self) -> str:
        return f"ProjectProperties({dict(self._values)!r})"

    @property
    def output_path(self) -> str | None:
        """Path of the compiled artifact."""
        return self._values.get(TARGET_PATH)

    @property
    def target_capability(self) -> str | None:
        """Resolved target capability name."""
        return self._values.get(RESOLVED_TARGET_CAPABILITY)

    @property
    def processor_architecture(self) -> str | None:
        """Resolved processor architecture."""
        return self._values.get(RESOLVED_PROCESSOR_ARCHITECTURE)


@dataclass(frozen=True)
class ProjectInformation:
    """Source files, references and properties of one project."""

    source_files: frozenset[str] = frozenset()
    project_references: frozenset[str] = frozenset()
    references: frozenset[str] = frozenset()
    properties: ProjectProperties = field(default_factory=ProjectProperties)
    target_framework: str | None = None

    def __post_init__(self) -> None:
        # Accept any iterable/mapping and freeze it
        object.__setattr__(self, "source_files", frozenset(self.source_files))
        object.__setattr__(self, "project_references", frozenset(self.project_references))
        object.__setattr__(self, "references", frozenset(self.references))
        if not isinstance(self.properties, ProjectProperties):
            object.__setattr__(self, "properties", ProjectProperties(self.properties))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "targetFramework": self.target_framework,
            "outputPath": self.properties.output_path,
            "targetCapability": self.properties.target_capability,
            "processorArchitecture": self.properties.processor_architecture,
            "sourceFiles": sorted_paths(self.source_files),
            "projectReferences": sorted_paths(self.project_references),
            "references": sorted_paths(self.references),
        }

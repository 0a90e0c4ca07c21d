"""Capability flags derived from a project's references."""

from __future__ import annotations

from collections.abc import Iterable

from .model import ProjectInformation

INTRINSIC_DLL = "Microsoft.Quantum.Intrinsic.dll"
# Name of the intrinsics library before 0.6
PRIMITIVES_DLL = "Microsoft.Quantum.Primitives.dll"
QSHARP_CORE_DLL = "Microsoft.Quantum.QSharp.Core.dll"
CANON_DLL = "Microsoft.Quantum.Canon.dll"
STANDARD_DLL = "Microsoft.Quantum.Standard.dll"
XUNIT_HELPER_DLL = "Microsoft.Quantum.Simulation.XUnit.dll"


def _ends_with_file(path: str, file_name: str) -> bool:
    # Match whole file names only: Foo.Canon.dll must not match Canon.dll
    normalized = path.replace("\\", "/")
    return normalized == file_name or normalized.endswith("/" + file_name)


def _any_ends_with(paths: Iterable[str], file_name: str) -> bool:
    return any(_ends_with_file(p, file_name) for p in paths)


def uses_dll(info: ProjectInformation, dll: str) -> bool:
    """Whether the project references a library with this file name."""
    return _any_ends_with(info.references, dll)


def uses_project(info: ProjectInformation, project_file_name: str) -> bool:
    """Whether the project references a project with this file name."""
    return _any_ends_with(info.project_references, project_file_name)


def uses_intrinsics(info: ProjectInformation) -> bool:
    return uses_dll(info, INTRINSIC_DLL) or uses_dll(info, PRIMITIVES_DLL)


def uses_qsharp_core(info: ProjectInformation) -> bool:
    return uses_dll(info, QSHARP_CORE_DLL)


def uses_canon(info: ProjectInformation) -> bool:
    return uses_dll(info, CANON_DLL) or uses_dll(info, STANDARD_DLL)


def uses_xunit_helper(info: ProjectInformation) -> bool:
    return uses_dll(info, XUNIT_HELPER_DLL)


def capability_flags(info: ProjectInformation) -> dict[str, bool]:
    """All library flags, keyed for JSON output."""
    return {
        "usesIntrinsics": uses_intrinsics(info),
        "usesQSharpCore": uses_qsharp_core(info),
        "usesCanon": uses_canon(info),
        "usesXunitHelper": uses_xunit_helper(info),
    }

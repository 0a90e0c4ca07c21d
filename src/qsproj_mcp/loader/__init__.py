"""Project build-context resolution.

Turns a project file into a ProjectInformation:
- Framework selection for multi-targeted projects
- Supported framework filtering
- Project document parsing
- Canonical, deduplicated source/reference paths
"""

from .capabilities import (
    capability_flags,
    uses_canon,
    uses_dll,
    uses_intrinsics,
    uses_project,
    uses_qsharp_core,
    uses_xunit_helper,
)
from .document import ParsedProject, ProjectDocumentError, parse_project_document
from .frameworks import (
    SUPPORTED_FRAMEWORKS,
    framework_candidates,
    global_properties,
    is_supported_framework,
    prefer_versioned,
    select_framework,
)
from .loader import LoadState, ProjectLoader
from .model import ProjectInformation, ProjectProperties
from .paths import PathResolver

__all__ = [
    "LoadState",
    "ParsedProject",
    "PathResolver",
    "ProjectDocumentError",
    "ProjectInformation",
    "ProjectLoader",
    "ProjectProperties",
    "SUPPORTED_FRAMEWORKS",
    "capability_flags",
    "framework_candidates",
    "global_properties",
    "is_supported_framework",
    "parse_project_document",
    "prefer_versioned",
    "select_framework",
    "uses_canon",
    "uses_dll",
    "uses_intrinsics",
    "uses_project",
    "uses_qsharp_core",
    "uses_xunit_helper",
]

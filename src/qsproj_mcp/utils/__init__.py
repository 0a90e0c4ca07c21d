"""Utility modules for qsproj-mcp."""

from .project import (
    ProjectRootConfig,
    configure_project_root,
    find_project_file,
    find_project_root,
    get_project_root,
    parse_file_uri,
    resolve_project_path,
)

__all__ = [
    "ProjectRootConfig",
    "configure_project_root",
    "find_project_file",
    "find_project_root",
    "get_project_root",
    "parse_file_uri",
    "resolve_project_path",
]

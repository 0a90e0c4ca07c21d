"""Project root and project file discovery.

The project root used for relative paths is taken from, in order:
1. MCP Roots from client (via Context.list_roots())
2. Environment variables (QSPROJ_PROJECT_ROOT, MCP_PROJECT_ROOT)
3. Explicit --project path
4. Startup CWD (searched upward for project markers with --project-from-cwd)
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import unquote, urlparse

if TYPE_CHECKING:
    from mcp.server.fastmcp import Context

logger = logging.getLogger(__name__)

PROJECT_GLOBS: tuple[str, ...] = ("*.csproj", "*.qsproj", "*.fsproj", "*.vbproj")


@dataclass
class ProjectRootConfig:
    """Configuration for project root detection."""

    startup_cwd: Path | None = None
    """CWD captured at server startup."""

    use_project_from_cwd: bool = False
    """Whether --project-from-cwd flag was provided."""

    explicit_project_path: Path | None = None
    """Explicit project path from --project flag."""

    env_var_names: tuple[str, ...] = field(
        default_factory=lambda: ("QSPROJ_PROJECT_ROOT", "MCP_PROJECT_ROOT")
    )
    """Environment variable names to check for project root."""


# Set at startup
_config: ProjectRootConfig = ProjectRootConfig()


def configure_project_root(
    *,
    use_project_from_cwd: bool = False,
    explicit_project_path: str | Path | None = None,
    startup_cwd: str | Path | None = None,
) -> None:
    """Configure project root detection. Called once at server startup."""
    global _config
    _config = ProjectRootConfig(
        use_project_from_cwd=use_project_from_cwd,
        explicit_project_path=Path(explicit_project_path) if explicit_project_path else None,
        startup_cwd=Path(startup_cwd) if startup_cwd else None,
    )
    logger.debug(
        f"Project root configured: use_cwd={use_project_from_cwd}, "
        f"explicit={explicit_project_path}, startup_cwd={startup_cwd}"
    )


def get_config() -> ProjectRootConfig:
    """Get current project root configuration."""
    return _config


def parse_file_uri(uri: str) -> Path | None:
    """Parse a file:// URI to a Path.

    Handles platform-specific path formats:
    - Unix: file:///home/user/project → /home/user/project
    - Windows: file:///C:/Users/project → C:\\Users\\project
    - Windows UNC: file://server/share → \\\\server\\share

    Returns:
        Path object if parsing succeeds, None otherwise
    """
    try:
        parsed = urlparse(str(uri))
    except ValueError as e:
        logger.warning(f"Failed to parse file URI '{uri}': {e}")
        return None

    if parsed.scheme != "file":
        logger.warning(f"Not a file URI: {uri}")
        return None

    path_str = unquote(parsed.path)

    if sys.platform == "win32":
        # file:///C:/path → parsed.path = "/C:/path"
        if path_str.startswith("/") and len(path_str) > 2 and path_str[2] == ":":
            path_str = path_str[1:]
        if parsed.netloc:
            path_str = f"\\\\{parsed.netloc}{path_str}"

    path = Path(path_str)
    if not path.is_absolute():
        logger.warning(f"Parsed path is not absolute: {path}")
        return None
    return path


def _project_files(directory: Path) -> list[Path]:
    found: list[Path] = []
    for pattern in PROJECT_GLOBS:
        found.extend(sorted(directory.glob(pattern)))
    return found


def find_project_root(start_dir: Path | None = None) -> Path:
    """Find the project root by walking up from a directory.

    Searches for project markers in this order:
    1. .sln (solution file)
    2. .csproj/.qsproj/.fsproj/.vbproj (project files)
    3. .git (git root as fallback)

    Falls back to start_dir if no marker is found.
    """
    current = (start_dir or Path.cwd()).resolve()

    def ancestors() -> Iterator[Path]:
        yield current
        yield from current.parents

    for directory in ancestors():
        if any(directory.glob("*.sln")):
            return directory

    for directory in ancestors():
        if _project_files(directory):
            return directory

    for directory in ancestors():
        if (directory / ".git").exists():
            return directory

    return current


def find_project_file(path: str | Path) -> Path:
    """Return the project file for a file or directory path.

    Raises:
        ValueError: If a directory holds no project file or several
    """
    path = Path(path)
    if not path.is_dir():
        return path

    candidates = _project_files(path)
    if not candidates:
        raise ValueError(f"No project file found in {path}")
    if len(candidates) > 1:
        names = ", ".join(c.name for c in candidates)
        raise ValueError(f"Several project files in {path}: {names}")
    return candidates[0]


async def get_project_root(ctx: Context | None = None) -> Path | None:
    """Determine the project root directory from available sources.

    Args:
        ctx: MCP Context for accessing client-provided roots.
             Can be None if called outside of tool context.

    Returns:
        Path to project root, or None if not determinable
    """
    if ctx is not None:
        try:
            roots = await ctx.list_roots()
            if roots:
                uri = str(roots[0].uri)
                path = parse_file_uri(uri)
                if path and path.is_dir():
                    logger.info(f"Using project root from MCP client: {path}")
                    return path
                logger.warning(f"MCP root path invalid or not accessible: {path}")
            else:
                logger.info("MCP client did not provide any roots")
        except Exception as e:
            # Client may not support roots
            logger.info(f"Could not get roots from client: {e}")

    return get_project_root_sync()


def get_project_root_sync() -> Path | None:
    """Project root without MCP roots (environment, --project, startup CWD)."""
    config = get_config()

    for env_var in config.env_var_names:
        env_value = os.environ.get(env_var)
        if env_value:
            path = Path(env_value)
            if path.is_dir():
                return path
            logger.warning(f"{env_var}={env_value} - path does not exist or is not a directory")

    if config.explicit_project_path:
        if config.explicit_project_path.is_dir():
            return config.explicit_project_path
        logger.warning(f"Explicit project path not valid: {config.explicit_project_path}")

    if config.use_project_from_cwd and config.startup_cwd:
        return find_project_root(config.startup_cwd)

    if config.startup_cwd:
        return config.startup_cwd

    logger.warning("Could not determine project root from any source")
    return None


def resolve_project_path(project_path: str, root: Path | None) -> Path:
    """Make a tool-supplied project path absolute and pick its project file."""
    path = Path(project_path)
    if not path.is_absolute() and root is not None:
        path = root / path
    return find_project_file(path.resolve())

"""MCP Server for Q# project loading."""

from __future__ import annotations

import json
import logging

from mcp.server.fastmcp import Context, FastMCP

from .build import DotnetDesignTimeBuildAdapter
from .config import LoaderConfig
from .loader import (
    SUPPORTED_FRAMEWORKS,
    ProjectLoader,
    capability_flags,
    prefer_versioned,
    select_framework,
)
from .utils.project import get_project_root, resolve_project_path

logger = logging.getLogger(__name__)

# Global loader (single client mode)
_loader: ProjectLoader | None = None
_config: LoaderConfig | None = None


def get_config() -> LoaderConfig:
    """Get loader configuration, reading the environment on first use."""
    global _config
    if _config is None:
        _config = LoaderConfig.from_env()
    return _config


def get_loader() -> ProjectLoader:
    """Get or create the project loader."""
    global _loader
    if _loader is None:
        config = get_config()
        adapter = DotnetDesignTimeBuildAdapter(
            dotnet_path=config.dotnet_path,
            target=config.design_time_target,
            timeout=config.timeout,
        )
        _loader = ProjectLoader(adapter, extra_frameworks=config.extra_frameworks)
    return _loader


def create_server(config: LoaderConfig | None = None) -> FastMCP:
    """Create and configure the MCP server.

    Args:
        config: Loader configuration (read from the environment if omitted)
    """
    global _config, _loader
    if config is not None:
        _config = config
        _loader = None
    mcp = FastMCP("qsproj-mcp")
    loader = get_loader()

    # ============== Project Tools ==============

    @mcp.tool()
    async def load_project(
        ctx: Context, project_path: str, timeout: float | None = None
    ) -> dict:
        """
        Load the compilation context of a Q# project.

        Runs a design-time build and returns the project's source files,
        project references, library references, output path, target
        capability and processor architecture, plus library flags
        (intrinsics, canon, QSharp.Core, xunit helper).

        Projects without a supported target framework, and projects that are
        not Q# projects, return data=None with supported=False.

        Args:
            project_path: Project file, or a directory holding exactly one
            timeout: Seconds allowed for the build (defaults to server setting)
        """
        try:
            root = await get_project_root(ctx)
            project_file = resolve_project_path(project_path, root)
            info = await loader.load(
                str(project_file), timeout=timeout or get_config().timeout
            )
            if info is None:
                return {"success": True, "supported": False, "data": None}
            data = info.to_dict()
            data["capabilities"] = capability_flags(info)
            return {"success": True, "supported": True, "data": data}
        except Exception as e:
            return {"success": False, "error": str(e)}

    @mcp.tool()
    async def get_design_time_properties(ctx: Context, project_path: str) -> dict:
        """
        Global MSBuild properties used for the project's design-time build.

        Args:
            project_path: Project file, or a directory holding exactly one
        """
        try:
            root = await get_project_root(ctx)
            project_file = resolve_project_path(project_path, root)
            properties = await loader.design_time_build_properties(str(project_file))
            return {"success": True, "data": properties}
        except Exception as e:
            return {"success": False, "error": str(e)}

    @mcp.tool()
    async def check_framework(framework: str) -> dict:
        """
        Check whether Q# can compile against a target framework.

        Args:
            framework: Target framework moniker (e.g. net6.0, netstandard2.1)
        """
        return {
            "success": True,
            "data": {"framework": framework, "supported": loader.is_supported_framework(framework)},
        }

    @mcp.tool()
    async def select_target_framework(frameworks: list[str]) -> dict:
        """
        Pick the framework a design-time build would use.

        Frameworks with a version separator (netstandard2.0) win over those
        without (net461); ties keep the given order.

        Args:
            frameworks: Declared target frameworks, in declaration order
        """
        return {"success": True, "data": select_framework(frameworks, prefer_versioned)}

    # ============== Resources ==============

    @mcp.resource("qsproj://frameworks", mime_type="application/json")
    async def frameworks_resource() -> str:
        """Target frameworks accepted for Q# projects (JSON)."""
        extra = get_config().extra_frameworks
        return json.dumps(sorted(SUPPORTED_FRAMEWORKS | set(extra)), indent=2)

    logger.info("qsproj MCP Server initialized")
    return mcp

"""Entry point for qsproj-mcp server."""

import argparse
import asyncio
import dataclasses
import logging
import os
import sys

from .config import LoaderConfig
from .server import create_server
from .utils.project import configure_project_root, find_project_root


def configure_logging() -> None:
    """Configure logging based on environment."""
    level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="qsproj MCP Server - Resolve Q# project build contexts via MCP"
    )
    parser.add_argument(
        "--project",
        type=str,
        default=None,
        help="Root path against which relative project paths are resolved.",
    )
    parser.add_argument(
        "--project-from-cwd",
        action="store_true",
        default=False,
        help="Auto-detect the root from the current working directory. "
        "Searches upward for .sln, project files, or .git markers. "
        "Cannot be used with --project.",
    )
    parser.add_argument(
        "--dotnet",
        type=str,
        default=None,
        help="dotnet executable (overrides QSPROJ_DOTNET_PATH).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Design-time build timeout in seconds (overrides QSPROJ_BUILD_TIMEOUT).",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> LoaderConfig:
    """Environment configuration with command line overrides applied."""
    config = LoaderConfig.from_env()
    overrides = {}
    if args.dotnet:
        overrides["dotnet_path"] = args.dotnet
    if args.timeout is not None and args.timeout > 0:
        overrides["timeout"] = args.timeout
    return dataclasses.replace(config, **overrides)


async def main() -> None:
    """Main entry point."""
    configure_logging()
    logger = logging.getLogger(__name__)

    args = parse_args()

    if args.project_from_cwd:
        if args.project is not None:
            logger.error("--project-from-cwd cannot be used with --project")
            sys.exit(1)
        project_root = str(find_project_root())
        logger.info(f"Auto-detected project root: {project_root}")
    else:
        project_root = args.project or os.getcwd()

    configure_project_root(
        use_project_from_cwd=args.project_from_cwd,
        explicit_project_path=args.project,
        startup_cwd=project_root,
    )

    logger.info(f"Starting qsproj MCP Server (root: {project_root})...")
    mcp = create_server(build_config(args))

    try:
        await mcp.run_stdio_async()
    except Exception:
        logger.exception("Server error")
        raise
    finally:
        logger.info("Server stopped")


def run() -> None:
    """Run the server."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()

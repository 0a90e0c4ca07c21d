"""Design-time build adapter.

The loader only sees the DesignTimeBuildAdapter protocol. The dotnet
implementation shells out to `dotnet msbuild` in JSON query mode
(-getProperty/-getItem, .NET 8 SDK or later) and renders the answer into the
project document read by `qsproj_mcp.loader.document`:

    <ProjectInfo OutputPath=".." TargetCapability=".." ProcessorArchitecture="..">
      <Sources><File Path=".."/></Sources>
      <ProjectReferences>...</ProjectReferences>
      <References>...</References>
    </ProjectInfo>

Projects that are not Q# projects get a <Project> root without attributes.
"""

from __future__ import annotations

import asyncio
import json
import logging
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from .diagnostics import DesignTimeBuildError, parse_msbuild_output
from .policy import BuildPolicy

logger = logging.getLogger(__name__)

# Output buffer limits
MAX_OUTPUT_BYTES: int = 5_000_000  # 5MB total
MAX_OUTPUT_LINE: int = 1_000_000  # JSON answers arrive as long lines

# MSBuild names queried from the project
TARGET_FRAMEWORK = "TargetFramework"
TARGET_FRAMEWORKS = "TargetFrameworks"
TARGET_PATH = "TargetPath"
RESOLVED_TARGET_CAPABILITY = "ResolvedTargetCapability"
RESOLVED_PROCESSOR_ARCHITECTURE = "ResolvedProcessorArchitecture"
QSHARP_LANG_VERSION = "QSharpLangVersion"

SOURCE_ITEM = "QSharpCompile"
PROJECT_REFERENCE_ITEM = "ProjectReference"
REFERENCE_ITEM = "ReferencePath"

DESIGN_TIME_PROPERTIES: tuple[str, ...] = (
    TARGET_PATH,
    RESOLVED_TARGET_CAPABILITY,
    RESOLVED_PROCESSOR_ARCHITECTURE,
    QSHARP_LANG_VERSION,
)

# item type -> (document group, item metadata used as the path)
DESIGN_TIME_ITEMS: dict[str, tuple[str, str]] = {
    SOURCE_ITEM: ("Sources", "Identity"),
    PROJECT_REFERENCE_ITEM: ("ProjectReferences", "Identity"),
    REFERENCE_ITEM: ("References", "FullPath"),
}


@runtime_checkable
class DesignTimeBuildAdapter(Protocol):
    """Evaluates a project with the external build engine."""

    async def target_frameworks(self, project_file: str) -> tuple[str | None, str | None]:
        """Return the evaluated (TargetFramework, TargetFrameworks) values."""
        ...

    async def invoke(self, project_file: str, global_properties: Mapping[str, str]) -> str:
        """Run a design-time build and return the raw project document.

        Raises:
            DesignTimeBuildError: If the project could not be evaluated
        """
        ...


async def run_command(command: list[str], cwd: str | None, timeout: float | None) -> tuple[int, str, str]:
    """Run command with output capture and timeout.

    The child process is killed on timeout and on cancellation.

    Returns:
        Tuple of (exit_code, stdout, stderr)

    Raises:
        asyncio.TimeoutError: If timeout exceeded
        FileNotFoundError: If the executable does not exist
    """
    # Never use shell=True
    process = await asyncio.create_subprocess_exec(
        *command,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=cwd,
    )

    async def read_stream(stream: asyncio.StreamReader | None, lines: list[str]) -> None:
        if stream is None:
            return
        total = 0
        while True:
            line = await stream.readline()
            if not line:
                break
            decoded = line.decode("utf-8", errors="replace")
            if len(decoded) > MAX_OUTPUT_LINE:
                decoded = decoded[:MAX_OUTPUT_LINE] + "...[truncated]\n"
            lines.append(decoded)
            total += len(decoded)
            # Drop old lines if buffer too large
            while total > MAX_OUTPUT_BYTES and lines:
                total -= len(lines.pop(0))

    stdout_lines: list[str] = []
    stderr_lines: list[str] = []
    try:
        await asyncio.wait_for(
            asyncio.gather(
                read_stream(process.stdout, stdout_lines),
                read_stream(process.stderr, stderr_lines),
            ),
            timeout=timeout,
        )
        await process.wait()
    except (asyncio.TimeoutError, asyncio.CancelledError):
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
        raise

    return process.returncode or 0, "".join(stdout_lines), "".join(stderr_lines)


def parse_query_output(stdout: str) -> dict[str, Any]:
    """Extract the JSON answer of an msbuild -getProperty/-getItem query.

    Raises:
        DesignTimeBuildError: If no JSON object is found
    """
    start = stdout.find("{")
    end = stdout.rfind("}")
    if start < 0 or end < start:
        raise DesignTimeBuildError("MSBuild returned no query result")
    try:
        payload = json.loads(stdout[start : end + 1])
    except json.JSONDecodeError as e:
        raise DesignTimeBuildError(f"MSBuild returned malformed query result: {e}") from e
    if not isinstance(payload, dict):
        raise DesignTimeBuildError("MSBuild query result is not an object")
    return payload


def render_project_document(payload: Mapping[str, Any]) -> str:
    """Render an msbuild query result into the raw project document."""
    properties = payload.get("Properties") or {}
    items = payload.get("Items") or {}

    if properties.get(QSHARP_LANG_VERSION):
        root = ET.Element(
            "ProjectInfo",
            {
                "OutputPath": properties.get(TARGET_PATH) or "",
                "TargetCapability": properties.get(RESOLVED_TARGET_CAPABILITY) or "",
                "ProcessorArchitecture": properties.get(RESOLVED_PROCESSOR_ARCHITECTURE) or "",
            },
        )
    else:
        root = ET.Element("Project")

    for item_type, (group_name, metadata) in DESIGN_TIME_ITEMS.items():
        group = ET.SubElement(root, group_name)
        for item in items.get(item_type) or []:
            path = item.get(metadata) or item.get("Identity") or ""
            ET.SubElement(group, "File", {"Path": path})

    return ET.tostring(root, encoding="unicode")


class DotnetDesignTimeBuildAdapter:
    """DesignTimeBuildAdapter backed by the dotnet CLI."""

    def __init__(
        self,
        dotnet_path: str = "dotnet",
        target: str = "ResolveReferences",
        policy: BuildPolicy | None = None,
        timeout: float | None = None,
    ):
        """Initialize adapter.

        Args:
            dotnet_path: dotnet executable
            target: Design-time target that resolves references
            policy: Build policy (created with defaults if not provided)
            timeout: Per-process timeout in seconds (None = unbounded)
        """
        self._dotnet_path = dotnet_path
        self._target = target
        self._policy = policy or BuildPolicy()
        self._timeout = timeout

    async def _query(
        self,
        project_file: str,
        global_properties: Mapping[str, str] | None = None,
        targets: tuple[str, ...] = (),
        properties: tuple[str, ...] = (),
        items: tuple[str, ...] = (),
    ) -> dict[str, Any]:
        try:
            command = self._policy.get_msbuild_command(
                self._dotnet_path,
                project_file,
                global_properties,
                targets=targets,
                properties=properties,
                items=items,
            )
        except ValueError as e:
            raise DesignTimeBuildError(str(e)) from e

        logger.debug(f"Running: {' '.join(command)}")
        try:
            exit_code, stdout, stderr = await run_command(
                command, cwd=None, timeout=self._timeout
            )
        except asyncio.TimeoutError as e:
            raise DesignTimeBuildError(
                f"Design-time build timeout after {self._timeout}s"
            ) from e
        except OSError as e:
            raise DesignTimeBuildError(f"Cannot run {self._dotnet_path}: {e}") from e

        if exit_code != 0:
            diagnostics = parse_msbuild_output(stdout + "\n" + stderr)
            logger.warning(
                f"Design-time build of {project_file} failed with exit code {exit_code}"
            )
            raise DesignTimeBuildError(
                f"Design-time build failed: {len(diagnostics)} diagnostics",
                diagnostics=diagnostics,
                exit_code=exit_code,
            )

        return parse_query_output(stdout)

    async def target_frameworks(self, project_file: str) -> tuple[str | None, str | None]:
        payload = await self._query(
            project_file, properties=(TARGET_FRAMEWORK, TARGET_FRAMEWORKS)
        )
        properties = payload.get("Properties") or {}
        return (
            properties.get(TARGET_FRAMEWORK) or None,
            properties.get(TARGET_FRAMEWORKS) or None,
        )

    async def invoke(self, project_file: str, global_properties: Mapping[str, str]) -> str:
        payload = await self._query(
            project_file,
            global_properties,
            targets=(self._target,),
            properties=DESIGN_TIME_PROPERTIES,
            items=tuple(DESIGN_TIME_ITEMS),
        )
        return render_project_document(payload)

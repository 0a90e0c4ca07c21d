"""Project loader - resolves the compilation context of a project file.

State machine for a single load:
REQUESTED → FRAMEWORK_SELECTED → BUILD_INVOKED → PARSED → FILTERED → RESOLVED
     └──────────────┴───────────────┴──────────┴────────→ REJECTED

Unsupported frameworks are rejected right after selection, before any build
runs. A rejected load either returns None (no supported framework, not a Q#
project) or raises ProjectLoadError (build or document failure). The loader
keeps no per-load state, so concurrent loads are independent.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Awaitable, Callable, Iterable
from enum import Enum
from typing import TypeVar

from ..build.adapter import DesignTimeBuildAdapter
from ..build.diagnostics import DesignTimeBuildError
from .document import parse_project_document
from .frameworks import (
    TieBreak,
    framework_candidates,
    global_properties,
    is_supported_framework,
    prefer_versioned,
    select_framework,
)
from .model import (
    RESOLVED_PROCESSOR_ARCHITECTURE,
    RESOLVED_TARGET_CAPABILITY,
    TARGET_PATH,
    ProjectInformation,
    ProjectProperties,
)
from .paths import PathResolver

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LoadState(str, Enum):
    """Project load states."""

    REQUESTED = "requested"
    FRAMEWORK_SELECTED = "framework_selected"
    BUILD_INVOKED = "build_invoked"
    PARSED = "parsed"
    FILTERED = "filtered"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class ProjectLoader:
    """Loads ProjectInformation through a design-time build adapter.

    Usage:
        loader = ProjectLoader(DotnetDesignTimeBuildAdapter())
        info = await loader.load("/path/to/Project.csproj")
    """

    def __init__(
        self,
        adapter: DesignTimeBuildAdapter,
        tie_break: TieBreak = prefer_versioned,
        path_resolver: PathResolver | None = None,
        extra_frameworks: Iterable[str] = (),
    ):
        """Initialize loader.

        Args:
            adapter: Runs design-time builds
            tie_break: Framework ordering for multi-targeted projects
            path_resolver: Canonicalizes source and project reference paths
            extra_frameworks: Frameworks accepted besides the built-in list
        """
        self._adapter = adapter
        self._tie_break = tie_break
        self._path_resolver = path_resolver or PathResolver()
        # Library identities keep their case so file names stay matchable
        self._reference_resolver = PathResolver(
            case_sensitive=True, follow_symlinks=self._path_resolver.follow_symlinks
        )
        self._extra_frameworks = tuple(extra_frameworks)
        self._state_listeners: list[Callable[[str, LoadState], None]] = []

    def on_state_change(self, listener: Callable[[str, LoadState], None]) -> None:
        """Register state change listener.

        Listener receives (project_file, new_state).
        """
        self._state_listeners.append(listener)

    def _set_state(self, project_file: str, old_state: LoadState, new_state: LoadState) -> LoadState:
        """Report a transition and return the new state."""
        logger.info(f"Load state ({os.path.basename(project_file)}): {old_state.value} -> {new_state.value}")
        for listener in self._state_listeners:
            try:
                listener(project_file, new_state)
            except Exception:
                logger.exception("State listener error")
        return new_state

    def is_supported_framework(self, framework: str | None) -> bool:
        """Whether Q# can compile against the framework."""
        return is_supported_framework(framework, self._extra_frameworks)

    async def select_target_framework(self, project_file: str) -> str | None:
        """Evaluate the project and pick its design-time framework."""
        target_framework, target_frameworks = await self._adapter.target_frameworks(project_file)
        candidates = framework_candidates(target_framework, target_frameworks)
        framework = select_framework(candidates, self._tie_break)
        logger.debug(f"Framework candidates for {project_file}: {candidates} -> {framework}")
        return framework

    async def design_time_build_properties(self, project_file: str) -> dict[str, str]:
        """Global properties a load of this project would use."""
        framework = await self.select_target_framework(os.path.abspath(project_file))
        return global_properties(framework)

    async def load(self, project_file: str, timeout: float | None = None) -> ProjectInformation | None:
        """Resolve the compilation context of a project.

        Args:
            project_file: Path to the project file
            timeout: Seconds allowed for the whole load, framework query and
                design-time build together (None = unbounded)

        Returns:
            ProjectInformation, or None if the project does not target a
            supported framework or is not a Q# project

        Raises:
            DesignTimeBuildError: If the build adapter failed or timed out
            ProjectDocumentError: If the build returned a malformed document
        """
        project_file = os.path.abspath(project_file)
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout

        async def bounded(awaitable: Awaitable[T]) -> T:
            if deadline is None:
                return await awaitable
            try:
                return await asyncio.wait_for(awaitable, timeout=max(0.0, deadline - loop.time()))
            except asyncio.TimeoutError as e:
                raise DesignTimeBuildError(
                    f"Design-time build of {project_file} timed out after {timeout}s"
                ) from e

        state = LoadState.REQUESTED
        try:
            framework = await bounded(self.select_target_framework(project_file))
            if framework is None:
                logger.info(f"No target framework found for {project_file}")
                self._set_state(project_file, state, LoadState.REJECTED)
                return None
            # Unsupported runtimes never reach the build engine
            if not self.is_supported_framework(framework):
                logger.info(f"Unsupported target framework {framework} for {project_file}")
                self._set_state(project_file, state, LoadState.REJECTED)
                return None
            state = self._set_state(project_file, state, LoadState.FRAMEWORK_SELECTED)

            properties = global_properties(framework)
            state = self._set_state(project_file, state, LoadState.BUILD_INVOKED)
            raw = await bounded(self._adapter.invoke(project_file, properties))

            parsed = parse_project_document(raw)
            state = self._set_state(project_file, state, LoadState.PARSED)

            if not parsed.has_properties:
                logger.info(f"{project_file} is not a Q# project")
                self._set_state(project_file, state, LoadState.REJECTED)
                return None
            state = self._set_state(project_file, state, LoadState.FILTERED)

            project_dir = os.path.dirname(project_file)
            info = ProjectInformation(
                source_files=self._path_resolver.resolve(parsed.sources, project_dir),
                project_references=self._path_resolver.resolve(parsed.project_references, project_dir),
                references=self._reference_resolver.resolve(parsed.references, project_dir),
                properties=ProjectProperties(
                    {
                        TARGET_PATH: parsed.output_path,
                        RESOLVED_TARGET_CAPABILITY: parsed.target_capability,
                        RESOLVED_PROCESSOR_ARCHITECTURE: parsed.processor_architecture,
                    }
                ),
                target_framework=framework,
            )
            self._set_state(project_file, state, LoadState.RESOLVED)
            return info

        except asyncio.CancelledError:
            self._set_state(project_file, state, LoadState.REJECTED)
            raise
        except Exception as e:
            logger.warning(f"Loading {project_file} failed: {e}")
            self._set_state(project_file, state, LoadState.REJECTED)
            raise

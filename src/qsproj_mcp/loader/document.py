"""Parser for the raw project document returned by design-time builds."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass

from ..build.diagnostics import ProjectLoadError

logger = logging.getLogger(__name__)

PROPERTIES_ELEMENT = "ProjectInfo"
SOURCES_GROUP = "Sources"
PROJECT_REFERENCES_GROUP = "ProjectReferences"
REFERENCES_GROUP = "References"
ENTRY_ELEMENT = "File"
PATH_ATTRIBUTE = "Path"


class ProjectDocumentError(ProjectLoadError):
    """The project document is malformed or incomplete."""


@dataclass(frozen=True)
class ParsedProject:
    """Typed content of a project document.

    Paths are raw, in document order, and may be relative or empty.
    """

    output_path: str | None
    target_capability: str | None
    processor_architecture: str | None
    has_properties: bool
    sources: tuple[str, ...] = ()
    project_references: tuple[str, ...] = ()
    references: tuple[str, ...] = ()


def _attribute(element: ET.Element, name: str) -> str | None:
    value = element.get(name)
    return value or None


def _read_group(root: ET.Element, group_name: str) -> tuple[str, ...]:
    # Groups are found by name, whatever their sibling order
    group = root.find(group_name)
    if group is None:
        raise ProjectDocumentError(f"Missing <{group_name}> group in project document")
    return tuple(entry.get(PATH_ATTRIBUTE, "") for entry in group.findall(ENTRY_ELEMENT))


def parse_project_document(raw: str | bytes) -> ParsedProject:
    """Parse a raw project document.

    Raises:
        ProjectDocumentError: If the document is not well-formed XML or a
            path group is missing
    """
    try:
        root = ET.fromstring(raw)
    except ET.ParseError as e:
        raise ProjectDocumentError(f"Malformed project document: {e}") from e

    has_properties = root.tag == PROPERTIES_ELEMENT
    if has_properties:
        output_path = _attribute(root, "OutputPath")
        target_capability = _attribute(root, "TargetCapability")
        processor_architecture = _attribute(root, "ProcessorArchitecture")
    else:
        logger.debug(f"Project document has no <{PROPERTIES_ELEMENT}> record (root <{root.tag}>)")
        output_path = target_capability = processor_architecture = None

    return ParsedProject(
        output_path=output_path,
        target_capability=target_capability,
        processor_architecture=processor_architecture,
        has_properties=has_properties,
        sources=_read_group(root, SOURCES_GROUP),
        project_references=_read_group(root, PROJECT_REFERENCES_GROUP),
        references=_read_group(root, REFERENCES_GROUP),
    )

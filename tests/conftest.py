"""Pytest fixtures for qsproj-mcp tests."""

import asyncio
import os
import sys
import xml.etree.ElementTree as ET

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


class FakeAdapter:
    """In-memory DesignTimeBuildAdapter.

    document may be a dict keyed by project file name.
    """

    def __init__(self, target_framework=None, target_frameworks=None, document="", error=None):
        self.target_framework = target_framework
        self.target_frameworks_value = target_frameworks
        self.document = document
        self.error = error
        self.calls = []

    async def target_frameworks(self, project_file):
        return self.target_framework, self.target_frameworks_value

    async def invoke(self, project_file, global_properties):
        self.calls.append((project_file, dict(global_properties)))
        # Let concurrent loads interleave
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        if isinstance(self.document, dict):
            return self.document[os.path.basename(project_file)]
        return self.document


def make_document(
    sources=(),
    project_references=(),
    references=(),
    output_path="",
    target_capability="",
    processor_architecture="",
    root="ProjectInfo",
):
    """Render a project document the way the dotnet adapter does."""
    attributes = {}
    if root == "ProjectInfo":
        attributes = {
            "OutputPath": output_path,
            "TargetCapability": target_capability,
            "ProcessorArchitecture": processor_architecture,
        }
    element = ET.Element(root, attributes)
    for group_name, paths in (
        ("Sources", sources),
        ("ProjectReferences", project_references),
        ("References", references),
    ):
        group = ET.SubElement(element, group_name)
        for path in paths:
            ET.SubElement(group, "File", {"Path": path})
    return ET.tostring(element, encoding="unicode")


@pytest.fixture
def fake_adapter_factory():
    """Build FakeAdapter instances."""
    return FakeAdapter


@pytest.fixture
def projects_dir(tmp_path):
    """Sibling project directories with project files and Q# sources."""
    layout = {
        "test3": ["Operation3a.qs", "Operation3b.qs", "sub1/Operation3b.qs", "sub1/sub2/Operation3a.qs"],
        "test6": ["Operation6a.qs", "sub1/Operation6a.qs"],
        "test7": ["Operation.qs"],
    }
    for project, files in layout.items():
        project_dir = tmp_path / project
        project_dir.mkdir()
        (project_dir / f"{project}.csproj").write_text("<Project Sdk=\"Microsoft.Quantum.Sdk\" />")
        for name in files:
            path = project_dir / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("namespace Test {}")
    return tmp_path


@pytest.fixture
def library_references():
    """Reference paths of a typical Q# library."""
    nuget = "/home/user/.nuget/packages"
    return [
        f"{nuget}/microsoft.quantum.standard/0.28/lib/netstandard2.1/Microsoft.Quantum.Standard.dll",
        f"{nuget}/microsoft.quantum.qsharp.core/0.28/lib/netstandard2.1/Microsoft.Quantum.QSharp.Core.dll",
        f"{nuget}/microsoft.quantum.runtime.core/0.28/lib/netstandard2.1/Microsoft.Quantum.Runtime.Core.dll",
    ]

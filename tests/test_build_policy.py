"""Tests for build policy - path and property validation."""

import os

import pytest

from qsproj_mcp.build.policy import (
    FRAMEWORK_PATTERN,
    PROPERTY_NAME_PATTERN,
    BuildPolicy,
)


class TestPatterns:
    """Tests for validation patterns."""

    def test_framework_pattern_valid(self):
        """Test valid framework monikers."""
        valid = [
            "net8.0",
            "net6.0",
            "netstandard2.0",
            "netstandard2.1",
            "netcoreapp3.1",
            "net461",
            "net48",
            "net6.0-windows",
            "net6.0-windows10.0.19041",
            "NET8.0",  # Case insensitive
        ]
        for framework in valid:
            assert FRAMEWORK_PATTERN.match(framework), f"Should match: {framework}"

    def test_framework_pattern_invalid(self):
        """Test invalid framework monikers."""
        invalid = [
            "invalid",
            "8.0",
            "../net8.0",
            "net8.0; rm -rf /",
        ]
        for framework in invalid:
            assert not FRAMEWORK_PATTERN.match(framework), f"Should not match: {framework}"

    def test_property_name_pattern(self):
        """Test MSBuild property names."""
        assert PROPERTY_NAME_PATTERN.match("BuildProjectReferences")
        assert PROPERTY_NAME_PATTERN.match("_Internal.Name-1")
        assert not PROPERTY_NAME_PATTERN.match("1Bad")
        assert not PROPERTY_NAME_PATTERN.match("Name=Value")


class TestBuildPolicyInit:
    """Tests for BuildPolicy initialization."""

    def test_init_without_workspace(self):
        """Test workspace containment is optional."""
        assert BuildPolicy().workspace_root is None

    def test_init_normalizes_path(self, tmp_path):
        """Test that workspace path is normalized."""
        policy = BuildPolicy(workspace_root=str(tmp_path) + os.sep)
        assert policy.workspace_root == str(tmp_path)


class TestPathValidation:
    """Tests for project path validation."""

    def test_validate_project_path_within_workspace(self, tmp_path):
        """Test valid project path within workspace."""
        project = tmp_path / "src" / "Project.csproj"
        project.parent.mkdir(parents=True)
        project.touch()

        policy = BuildPolicy(workspace_root=str(tmp_path))
        assert policy.validate_project_path(str(project)) == str(project)

    def test_validate_project_path_outside_workspace(self, tmp_path):
        """Test rejection of path outside workspace."""
        workspace = tmp_path / "ws"
        workspace.mkdir()
        project = tmp_path / "other" / "Project.csproj"
        project.parent.mkdir()
        project.touch()

        policy = BuildPolicy(workspace_root=str(workspace))

        with pytest.raises(ValueError, match="outside workspace"):
            policy.validate_project_path(str(project))

    def test_validate_path_traversal_normalized(self, tmp_path):
        """Test traversal segments are collapsed before checks."""
        project = tmp_path / "Project.csproj"
        project.touch()
        (tmp_path / "sub").mkdir()

        policy = BuildPolicy(workspace_root=str(tmp_path))
        result = policy.validate_project_path(str(tmp_path / "sub" / ".." / "Project.csproj"))
        assert result == str(project)

    def test_validate_not_project_file(self, tmp_path):
        """Test rejection of non-project files."""
        source = tmp_path / "Operation.qs"
        source.touch()

        with pytest.raises(ValueError, match="Not a project file"):
            BuildPolicy().validate_project_path(str(source))

    def test_validate_missing_project(self, tmp_path):
        """Test rejection of missing project files."""
        with pytest.raises(ValueError, match="does not exist"):
            BuildPolicy().validate_project_path(str(tmp_path / "Missing.csproj"))

    @pytest.mark.parametrize("extension", [".csproj", ".qsproj", ".fsproj", ".CSPROJ"])
    def test_project_extensions(self, tmp_path, extension):
        """Test accepted project file extensions."""
        project = tmp_path / f"Project{extension}"
        project.touch()
        assert BuildPolicy().validate_project_path(str(project)) == str(project)

    def test_validate_unc_path_rejected(self):
        """Test rejection of UNC paths by default."""
        with pytest.raises(ValueError, match="UNC paths not allowed"):
            BuildPolicy().validate_project_path("\\\\server\\share\\project.csproj")

    def test_validate_device_path_rejected(self):
        """Test rejection of device paths."""
        with pytest.raises(ValueError, match="Device paths not allowed"):
            BuildPolicy().validate_project_path("\\\\.\\C:\\project.csproj")

    def test_validate_empty_path(self):
        """Test rejection of empty path."""
        with pytest.raises(ValueError, match="Empty"):
            BuildPolicy().validate_project_path("")


class TestGlobalProperties:
    """Tests for global property validation."""

    def test_design_time_properties_accepted(self):
        """Test the properties used for design-time builds."""
        props = {
            "BuildProjectReferences": "false",
            "EnableFrameworkPathOverride": "false",
            "TargetFramework": "netstandard2.0",
        }
        assert BuildPolicy().validate_global_properties(props) == props

    def test_invalid_name_rejected(self):
        """Test rejection of malformed property names."""
        with pytest.raises(ValueError, match="Invalid property name"):
            BuildPolicy().validate_global_properties({"Bad Name": "x"})

    @pytest.mark.parametrize("value", ["a;b", "a\nb", "a\x00b"])
    def test_invalid_value_rejected(self, value):
        """Test rejection of values that would split arguments."""
        with pytest.raises(ValueError, match="Invalid value"):
            BuildPolicy().validate_global_properties({"Configuration": value})

    def test_invalid_framework_rejected(self):
        """Test rejection of invalid framework."""
        with pytest.raises(ValueError, match="Invalid framework"):
            BuildPolicy().validate_global_properties({"TargetFramework": "../etc/passwd"})


class TestGetMsbuildCommand:
    """Tests for building msbuild query commands."""

    def test_query_command(self, tmp_path):
        """Test command generation with targets and queries."""
        project = tmp_path / "Test.csproj"
        project.touch()

        cmd = BuildPolicy().get_msbuild_command(
            "dotnet",
            str(project),
            {"BuildProjectReferences": "false", "TargetFramework": "net6.0"},
            targets=["ResolveReferences"],
            properties=["TargetPath"],
            items=["QSharpCompile"],
        )

        assert cmd == [
            "dotnet",
            "msbuild",
            str(project),
            "-nologo",
            "-t:ResolveReferences",
            "-p:BuildProjectReferences=false",
            "-p:TargetFramework=net6.0",
            "-getProperty:TargetPath",
            "-getItem:QSharpCompile",
        ]

    def test_evaluation_only(self, tmp_path):
        """Test no target switch without targets."""
        project = tmp_path / "Test.csproj"
        project.touch()

        cmd = BuildPolicy().get_msbuild_command(
            "dotnet", str(project), properties=["TargetFramework", "TargetFrameworks"]
        )

        assert not any(arg.startswith("-t:") for arg in cmd)
        assert "-getProperty:TargetFrameworks" in cmd

    def test_invalid_target_rejected(self, tmp_path):
        """Test rejection of malformed target names."""
        project = tmp_path / "Test.csproj"
        project.touch()

        with pytest.raises(ValueError, match="Invalid target"):
            BuildPolicy().get_msbuild_command("dotnet", str(project), targets=["Build;Clean"])

    def test_invalid_project_rejected(self, tmp_path):
        """Test project validation happens first."""
        with pytest.raises(ValueError):
            BuildPolicy().get_msbuild_command("dotnet", str(tmp_path / "Missing.csproj"))

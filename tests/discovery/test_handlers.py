"""Tests for the built-in discovery handlers."""

import json
import warnings
import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from playbook.discovery.handlers import AVAILABLE_HANDLERS, DotnetProjectHandler, NpmPackageHandler, ProjectHandler


class TestRegistry:
    """The handler registry is fixed and ordered."""

    def test_registry_order(self):
        assert [h.name for h in AVAILABLE_HANDLERS] == ["npm", "dotnet"]

    def test_all_are_handlers(self):
        assert all(isinstance(h, ProjectHandler) for h in AVAILABLE_HANDLERS)

    def test_abstract_base_cannot_instantiate(self):
        with pytest.raises(TypeError):
            ProjectHandler()

    def test_glob_matching_emits_no_warnings(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            assert NpmPackageHandler().matches("package.json")
            assert DotnetProjectHandler().matches("Api.csproj")


class TestNpmPackageHandler:
    """Tests for package.json extraction."""

    @pytest.fixture
    def handler(self) -> NpmPackageHandler:
        return NpmPackageHandler()

    @pytest.mark.parametrize(("filename", "expected"), [
        ("package.json", True),
        ("package-lock.json", False),
        ("package.json.bak", False),
        ("tsconfig.json", False),
    ])
    def test_matches(self, handler, filename, expected):
        assert handler.matches(filename) is expected

    def test_runnable_scripts_in_preference_order(self, handler, tmp_path: Path):
        path = tmp_path / "web" / "package.json"
        content = json.dumps({
            "name": "shop",
            "scripts": {"build": "tsc", "dev": "vite", "start": "node ."},
        })

        records = handler.extract(path, content)

        assert records == [
            {"cwd": str(tmp_path / "web"), "command": "npm", "args": ["run", "start"], "name": "shop:start"},
            {"cwd": str(tmp_path / "web"), "command": "npm", "args": ["run", "dev"], "name": "shop:dev"},
        ]

    def test_unnamed_package_uses_directory(self, handler, tmp_path: Path):
        path = tmp_path / "api" / "package.json"

        records = handler.extract(path, json.dumps({"scripts": {"serve": "x"}}))

        assert records[0]["name"] == "api:serve"

    def test_no_scripts(self, handler, tmp_path: Path):
        assert handler.extract(tmp_path / "package.json", json.dumps({"name": "lib"})) == []

    def test_invalid_json_raises(self, handler, tmp_path: Path):
        with pytest.raises(json.JSONDecodeError):
            handler.extract(tmp_path / "package.json", "{not json")

    def test_non_object_raises(self, handler, tmp_path: Path):
        with pytest.raises(ValueError, match="not a JSON object"):
            handler.extract(tmp_path / "package.json", "[1, 2]")


class TestDotnetProjectHandler:
    """Tests for .csproj/.fsproj extraction."""

    @pytest.fixture
    def handler(self) -> DotnetProjectHandler:
        return DotnetProjectHandler()

    @pytest.mark.parametrize(("filename", "expected"), [
        ("Api.csproj", True),
        ("Tool.fsproj", True),
        ("Legacy.vbproj", False),
        ("Api.csproj.user", False),
    ])
    def test_matches(self, handler, filename, expected):
        assert handler.matches(filename) is expected

    def test_web_sdk_is_runnable(self, handler, tmp_path: Path):
        path = tmp_path / "src" / "Api" / "Api.csproj"
        content = '<Project Sdk="Microsoft.NET.Sdk.Web"><PropertyGroup/></Project>'

        records = handler.extract(path, content)

        assert records == [
            {"cwd": str(path.parent), "command": "dotnet", "args": ["run"], "name": "Api"},
        ]

    def test_exe_output_type_is_runnable(self, handler, tmp_path: Path):
        content = (
            '<Project Sdk="Microsoft.NET.Sdk">'
            "<PropertyGroup><OutputType> Exe </OutputType></PropertyGroup>"
            "</Project>"
        )

        assert len(handler.extract(tmp_path / "Tool.fsproj", content)) == 1

    def test_legacy_namespaced_project(self, handler, tmp_path: Path):
        content = (
            '<Project xmlns="http://schemas.microsoft.com/developer/msbuild/2003">'
            "<PropertyGroup><OutputType>WinExe</OutputType></PropertyGroup>"
            "</Project>"
        )

        assert handler.extract(tmp_path / "App.csproj", content)[0]["name"] == "App"

    def test_class_library_yields_nothing(self, handler, tmp_path: Path):
        content = '<Project Sdk="Microsoft.NET.Sdk"><PropertyGroup><OutputType>Library</OutputType></PropertyGroup></Project>'

        assert handler.extract(tmp_path / "Lib.csproj", content) == []

    def test_malformed_xml_raises(self, handler, tmp_path: Path):
        with pytest.raises(ET.ParseError):
            handler.extract(tmp_path / "Broken.csproj", "<Project")

"""
Tests for PackagingRequest validation.

Invalid input is reported as InputInvalid before any probe runs.
"""

import os

import pytest

from engine import Platform
from synthesis import InputInvalid, PackagingRequest, parse_platform


class TestPlatformParsing:
    """Platform names are case-insensitive; only Android and Linux are accepted."""

    @pytest.mark.parametrize("value,expected", [
        (None, Platform.ANDROID),
        ("Android", Platform.ANDROID),
        ("android", Platform.ANDROID),
        ("LINUX", Platform.LINUX),
        (" linux ", Platform.LINUX),
        (Platform.LINUX, Platform.LINUX),
    ])
    def test_supported(self, value, expected):
        assert parse_platform(value) == expected

    @pytest.mark.parametrize("value", ["windows", "Win64", "ios", ""])
    def test_unsupported(self, value):
        with pytest.raises(InputInvalid) as exc_info:
            parse_platform(value)
        assert "Unsupported platform" in exc_info.value.message
        assert "Supported platforms: Android, Linux" in exc_info.value.message


class TestPackagingRequest:
    """Request validation, in the order the operator sees errors."""

    def test_defaults_to_android(self, project_file, tmp_path):
        request = PackagingRequest.from_arguments(project_file, tmp_path / "out")
        assert request.platform == Platform.ANDROID
        assert request.project_name == "MyGame"

    def test_paths_resolved_absolute(self, project_file, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        request = PackagingRequest.from_arguments("MyGame/MyGame.uproject", "./out", "Linux")
        assert os.path.isabs(request.absolute_project_file)
        assert request.absolute_output_dir == str((tmp_path / "out").resolve())
        assert request.project_dir == str(project_file.resolve().parent)

    def test_missing_project_file(self, tmp_path):
        with pytest.raises(InputInvalid, match="not found"):
            PackagingRequest.from_arguments(tmp_path / "Nope.uproject", tmp_path / "out")

    def test_wrong_extension(self, tmp_path):
        descriptor = tmp_path / "MyGame.json"
        descriptor.write_text("{}")
        with pytest.raises(InputInvalid, match=".uproject"):
            PackagingRequest.from_arguments(descriptor, tmp_path / "out")

    def test_platform_checked_before_paths(self, tmp_path):
        """An unsupported platform is reported even when the paths are bad too."""
        with pytest.raises(InputInvalid, match="Unsupported platform 'windows'"):
            PackagingRequest.from_arguments(tmp_path / "Nope.uproject", tmp_path / "out", "windows")

    def test_output_path_is_a_file(self, project_file, tmp_path):
        blocker = tmp_path / "out.txt"
        blocker.write_text("")
        with pytest.raises(InputInvalid, match="not a directory"):
            PackagingRequest.from_arguments(project_file, blocker)

    def test_empty_output_dir(self, project_file):
        with pytest.raises(InputInvalid, match="cannot be empty"):
            PackagingRequest.from_arguments(project_file, "  ")

    def test_request_is_frozen(self, project_file, tmp_path):
        request = PackagingRequest.from_arguments(project_file, tmp_path / "out")
        with pytest.raises(Exception):
            request.platform = Platform.LINUX

    def test_unknown_fields_rejected(self, project_file, tmp_path):
        with pytest.raises(Exception):
            PackagingRequest(project_file=project_file, output_dir=tmp_path, config="Debug")


class TestPrepareOutputDir:

    def test_creates_missing_directory(self, project_file, tmp_path):
        out = tmp_path / "builds" / "android"
        request = PackagingRequest.from_arguments(project_file, out)
        assert request.prepare_output_dir() is True
        assert out.is_dir()

    def test_existing_directory(self, project_file, tmp_path):
        request = PackagingRequest.from_arguments(project_file, tmp_path)
        assert request.prepare_output_dir() is False

    def test_uncreatable_directory(self, project_file, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        request = PackagingRequest.from_arguments(project_file, blocker / "out")
        with pytest.raises(InputInvalid, match="Cannot create output directory"):
            request.prepare_output_dir()


class TestCheckOutputDir:
    """Dry runs validate the output directory without creating it."""

    def test_missing_directory_not_created(self, project_file, tmp_path):
        out = tmp_path / "builds" / "android"
        request = PackagingRequest.from_arguments(project_file, out)
        request.check_output_dir()
        assert not out.exists()
        assert not (tmp_path / "builds").exists()

    def test_file_in_the_way(self, project_file, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        request = PackagingRequest.from_arguments(project_file, blocker / "out")
        with pytest.raises(InputInvalid, match="Cannot create output directory"):
            request.check_output_dir()

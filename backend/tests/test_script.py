"""
Tests for build script rendering and persistence.

These tests verify:
1. Deterministic naming beside the project descriptor
2. Batch and shell flavors carry banner, command, exit branch and pause
3. Delete-then-write: repeated writes are identical, stale content is gone
4. Write failures surface as SynthesisIOFailure
"""

import os
import shlex
import stat
from unittest.mock import patch

import pytest

from config import DEFAULT_SETTINGS
from engine import locate_engine
from synthesis import (
    PackagingRequest,
    SynthesisIOFailure,
    build_packaging_command,
    render_build_script,
    script_path_for,
    write_build_script,
)


from hosts import make_project


@pytest.fixture
def android_request(project_file, tmp_path):
    return PackagingRequest.from_arguments(project_file, tmp_path / "out")


@pytest.fixture
def command(healthy_host, android_request):
    installation = locate_engine(healthy_host, DEFAULT_SETTINGS)
    return build_packaging_command(installation, android_request, DEFAULT_SETTINGS)


class TestScriptPath:

    def test_windows_batch_beside_project(self, android_request, project_file):
        path = script_path_for(android_request, "windows")
        assert path == str(project_file.resolve().parent / "Package_MyGame_Android.bat")

    def test_posix_shell_script(self, project_file, tmp_path):
        request = PackagingRequest.from_arguments(project_file, tmp_path / "out", "linux")
        assert script_path_for(request, "linux").endswith("Package_MyGame_Linux.sh")


class TestRenderBuildScript:
    """Batch scripts for Windows hosts, shell scripts elsewhere."""

    def test_batch_contents(self, command, android_request):
        script = render_build_script(command, android_request, "windows")
        lines = script.contents.split("\r\n")
        assert lines[0] == "@echo off"
        assert lines[1] == "echo Packaging MyGame for Android (SHIPPING BUILD)..."
        assert command.command_line("windows") in lines
        assert "if %PACKAGE_EXIT% EQU 0 (" in lines
        assert "pause" in lines
        assert lines.index(command.command_line("windows")) < lines.index("pause")

    def test_shell_contents(self, command, android_request):
        script = render_build_script(command, android_request, "linux")
        assert script.contents.startswith("#!/bin/sh\n")
        assert command.command_line("linux") + "\nstatus=$?\n" in script.contents
        assert 'exit "$status"' in script.contents
        assert "read _" in script.contents

    def test_rendering_is_pure(self, command, android_request):
        assert render_build_script(command, android_request, "windows") == \
            render_build_script(command, android_request, "windows")


class TestWriteBuildScript:
    """Existing scripts are deleted and replaced, never appended to."""

    def test_writes_file(self, command, android_request):
        script = render_build_script(command, android_request, "windows")
        assert write_build_script(script) is False
        with open(script.path, newline="") as f:
            assert f.read() == script.contents

    def test_second_write_replaces_identically(self, command, android_request):
        script = render_build_script(command, android_request, "windows")
        write_build_script(script)
        with open(script.path, "rb") as f:
            first = f.read()
        assert write_build_script(script) is True
        with open(script.path, "rb") as f:
            assert f.read() == first

    def test_stale_content_removed(self, command, android_request):
        script = render_build_script(command, android_request, "windows")
        with open(script.path, "w") as f:
            f.write("echo STALE-SENTINEL-7f3a\n" * 200)
        write_build_script(script)
        with open(script.path, newline="") as f:
            contents = f.read()
        assert "STALE-SENTINEL-7f3a" not in contents
        assert contents == script.contents

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    def test_shell_script_is_executable(self, command, android_request):
        script = render_build_script(command, android_request, "linux")
        write_build_script(script)
        assert os.stat(script.path).st_mode & stat.S_IXUSR

    def test_write_failure_raises_io_failure(self, command, android_request):
        script = render_build_script(command, android_request, "windows")
        with patch("builtins.open", side_effect=PermissionError("read-only volume")):
            with pytest.raises(SynthesisIOFailure) as exc_info:
                write_build_script(script)
        assert exc_info.value.path == script.path
        assert "read-only volume" in str(exc_info.value)


class TestScriptQuoting:
    """Paths reach the script interpreter verbatim, whatever they contain."""

    @pytest.fixture
    def hostile_request(self, tmp_path):
        project_file = make_project(tmp_path / "a$HOME`id`")
        return PackagingRequest.from_arguments(project_file, tmp_path / "100%" / "out")

    @pytest.fixture
    def hostile_command(self, healthy_host, hostile_request):
        installation = locate_engine(healthy_host, DEFAULT_SETTINGS)
        return build_packaging_command(installation, hostile_request, DEFAULT_SETTINGS)

    def test_shell_command_line_splits_back_to_argv(self, hostile_command):
        """
        GIVEN: A project directory containing $ and backticks
        WHEN: The command is rendered for sh
        THEN: Shell word splitting yields exactly the original argv
        """
        assert shlex.split(hostile_command.command_line("linux")) == hostile_command.argv()

    def test_shell_script_expected_output_is_literal(self, hostile_command, hostile_request):
        script = render_build_script(hostile_command, hostile_request, "linux")
        printf_lines = [line.strip() for line in script.contents.splitlines() if "Expected output" in line]
        assert shlex.split(printf_lines[0]) == [
            "printf", "%s\\n", f"Expected output: {hostile_command.predicted_output_path}",
        ]

    def test_batch_script_doubles_percent(self, hostile_command, hostile_request):
        script = render_build_script(hostile_command, hostile_request, "windows")
        line = hostile_command.command_line("windows")
        assert line in script.contents.split("\r\n")
        assert "100%%" in line
        assert "100%" not in line.replace("100%%", "")

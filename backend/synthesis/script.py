"""
Build script rendering and persistence.

One script per (project, platform) pair, beside the project descriptor:
    Package_<project>_<Platform>.bat   on a Windows host
    Package_<project>_<Platform>.sh    elsewhere

Contents are linear: banner, command, exit-status branch, pause. The
previous script is deleted before the new one is written, so no stale
content survives. A crash between the two steps leaves no script.
"""

import logging
import os
import shlex
from dataclasses import dataclass
from pathlib import Path

from .command import PackagingCommand
from .errors import SynthesisIOFailure
from .models import PackagingRequest

logger = logging.getLogger(__name__)

SCRIPT_MODE = 0o755

# Must be caret-escaped in echo text; parentheses only inside a block
_ECHO_OPERATORS = "^&|<>"


@dataclass(frozen=True)
class BuildScript:
    """A rendered launcher script and where it belongs."""
    path: str
    contents: str

    def to_dict(self) -> dict:
        return {"path": self.path, "contents": self.contents}


def script_path_for(request: PackagingRequest, host_os: str) -> str:
    extension = ".bat" if host_os == "windows" else ".sh"
    filename = f"Package_{request.project_name}_{request.platform.value}{extension}"
    return str(Path(request.project_dir) / filename)


def _batch_echo(text: str, in_block: bool = False) -> str:
    special = _ECHO_OPERATORS + ("()" if in_block else "")
    escaped = "".join("^" + c if c in special else c for c in text)
    return "echo " + escaped.replace("%", "%%")


def _shell_echo(text: str) -> str:
    return "printf '%s\\n' " + shlex.quote(text)


def _batch_contents(command: PackagingCommand, banner: str) -> str:
    expected = f"Expected output: {command.predicted_output_path}"
    lines = [
        "@echo off",
        _batch_echo(banner),
        "echo.",
        command.command_line("windows"),
        "set PACKAGE_EXIT=%ERRORLEVEL%",
        "echo.",
        "if %PACKAGE_EXIT% EQU 0 (",
        "    echo Packaging completed successfully!",
        "    " + _batch_echo(expected, in_block=True),
        ") else (",
        "    echo ERROR: Packaging failed with exit code %PACKAGE_EXIT%",
        "    echo Check the log files for more details.",
        ")",
        "pause",
        "exit /b %PACKAGE_EXIT%",
    ]
    return "\r\n".join(lines) + "\r\n"


def _shell_contents(command: PackagingCommand, banner: str) -> str:
    expected = f"Expected output: {command.predicted_output_path}"
    lines = [
        "#!/bin/sh",
        _shell_echo(banner),
        "echo",
        command.command_line("linux"),
        "status=$?",
        "echo",
        'if [ "$status" -eq 0 ]; then',
        '    echo "Packaging completed successfully!"',
        "    " + _shell_echo(expected),
        "else",
        '    echo "ERROR: Packaging failed with exit code $status"',
        '    echo "Check the log files for more details."',
        "fi",
        'printf "Press Enter to continue..."',
        "read _",
        'exit "$status"',
    ]
    return "\n".join(lines) + "\n"


def render_build_script(
    command: PackagingCommand,
    request: PackagingRequest,
    host_os: str,
) -> BuildScript:
    """Render the script for the host that will run it (pure)."""
    banner = f"Packaging {command.project_name} for {command.platform.value} (SHIPPING BUILD)..."
    if host_os == "windows":
        contents = _batch_contents(command, banner)
    else:
        contents = _shell_contents(command, banner)
    return BuildScript(path=script_path_for(request, host_os), contents=contents)


def write_build_script(script: BuildScript) -> bool:
    """
    Delete any previous script, then write this one.

    Returns:
        True if a previous script was replaced

    Raises:
        SynthesisIOFailure: The old script could not be removed or the
                            new one could not be written
    """
    path = Path(script.path)
    replaced = False
    try:
        if path.exists():
            path.unlink()
            replaced = True
            logger.debug("Deleted existing build script: %s", path)
        # newline="" keeps the rendered line endings as-is
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(script.contents)
        if path.suffix == ".sh":
            os.chmod(path, SCRIPT_MODE)
    except OSError as e:
        logger.warning("Could not write build script %s: %s", path, e)
        raise SynthesisIOFailure(str(path), str(e))

    logger.info("Build script written: %s", path)
    return replaced

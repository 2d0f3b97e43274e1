"""
Host Environment - the ambient state probes and the engine locator read.

Environment variables, filesystem existence checks, the Windows install
registry and external diagnostic processes are all non-deterministic
host state. Everything that inspects the machine goes through a
HostEnvironment so it can be swapped for InMemoryEnvironment in tests.

Implementations must never mutate host state.
"""

import logging
import os
import subprocess
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from .errors import ToolNotFound, ToolTimeout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessOutput:
    """
    Captured result of a diagnostic process.

    Attributes:
        returncode: Process exit status
        stdout: Decoded standard output
        stderr: Decoded standard error
    """
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def text(self) -> str:
        """Stdout if it carries anything, otherwise stderr (javac prints there)."""
        return self.stdout if self.stdout.strip() else self.stderr

    @property
    def first_line(self) -> str:
        lines = self.text.strip().splitlines()
        return lines[0].strip() if lines else ""


def host_os_name(platform: Optional[str] = None) -> str:
    """Normalize sys.platform into "windows" | "darwin" | "linux"."""
    platform = platform or sys.platform
    if platform == "win32" or platform == "cygwin":
        return "windows"
    if platform == "darwin":
        return "darwin"
    return "linux"


class HostEnvironment(ABC):
    """
    Read-only view of the machine being validated.

    Paths are plain strings in the host's own syntax. Directory listings
    are returned sorted so callers see a stable order across runs.
    """

    host_os: str = "windows"

    @property
    def is_windows(self) -> bool:
        return self.host_os == "windows"

    def executable_name(self, stem: str) -> str:
        """Append .exe on Windows hosts."""
        return f"{stem}.exe" if self.is_windows else stem

    def join(self, *parts: str) -> str:
        return os.path.join(*parts)

    def exists(self, path: str) -> bool:
        return self.is_file(path) or self.is_dir(path)

    def abspath(self, path: str) -> str:
        """Absolute form of path, relative to the working directory."""
        return os.path.abspath(path)

    @abstractmethod
    def getenv(self, name: str) -> Optional[str]:
        """Return a non-empty environment variable value or None."""

    @abstractmethod
    def is_file(self, path: str) -> bool:
        pass

    @abstractmethod
    def is_dir(self, path: str) -> bool:
        pass

    @abstractmethod
    def list_dir(self, path: str) -> List[str]:
        """Sorted entry names under path; empty when path is not a readable directory."""

    @abstractmethod
    def read_text(self, path: str) -> Optional[str]:
        """File contents, or None when the file cannot be read."""

    @abstractmethod
    def known_folder(self, name: str) -> Optional[str]:
        """
        Resolve a well-known folder.

        Names: program_files, program_files_x86, local_app_data, user_profile.
        """

    @abstractmethod
    def registry_value(self, key: str, value_name: str) -> Optional[Any]:
        """Read a value under HKEY_LOCAL_MACHINE\\key; None if absent."""

    @abstractmethod
    def registry_subkeys(self, key: str) -> List[str]:
        """Subkey names under HKEY_LOCAL_MACHINE\\key; empty if absent."""

    @abstractmethod
    def run(
        self,
        argv: Sequence[str],
        timeout: float,
        cwd: Optional[str] = None,
    ) -> ProcessOutput:
        """
        Run a diagnostic process to completion.

        Raises:
            ToolNotFound: The executable could not be started
            ToolTimeout: The process exceeded timeout and was killed
        """


# =============================================================================
# Real host
# =============================================================================

_WINDOWS_KNOWN_FOLDERS = {
    "program_files": ("ProgramFiles", r"C:\Program Files"),
    "program_files_x86": ("ProgramFiles(x86)", r"C:\Program Files (x86)"),
    "local_app_data": ("LOCALAPPDATA", None),
    "user_profile": ("USERPROFILE", None),
}


class SystemEnvironment(HostEnvironment):
    """HostEnvironment backed by the running operating system."""

    def __init__(self, platform: Optional[str] = None):
        self.host_os = host_os_name(platform)

    def getenv(self, name: str) -> Optional[str]:
        value = os.environ.get(name)
        return value if value else None

    def is_file(self, path: str) -> bool:
        return os.path.isfile(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def list_dir(self, path: str) -> List[str]:
        try:
            return sorted(os.listdir(path))
        except OSError:
            return []

    def read_text(self, path: str) -> Optional[str]:
        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                return f.read()
        except OSError:
            return None

    def known_folder(self, name: str) -> Optional[str]:
        if self.is_windows:
            env_name, default = _WINDOWS_KNOWN_FOLDERS.get(name, (None, None))
            if env_name is None:
                return None
            return self.getenv(env_name) or default
        if name == "user_profile":
            return os.path.expanduser("~")
        return None

    def registry_value(self, key: str, value_name: str) -> Optional[Any]:
        if not self.is_windows:
            return None
        import winreg

        try:
            with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, key) as handle:
                value, _ = winreg.QueryValueEx(handle, value_name)
                return value
        except OSError:
            return None

    def registry_subkeys(self, key: str) -> List[str]:
        if not self.is_windows:
            return []
        import winreg

        names = []
        try:
            with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, key) as handle:
                index = 0
                while True:
                    try:
                        names.append(winreg.EnumKey(handle, index))
                    except OSError:
                        break
                    index += 1
        except OSError:
            return []
        return sorted(names)

    def run(
        self,
        argv: Sequence[str],
        timeout: float,
        cwd: Optional[str] = None,
    ) -> ProcessOutput:
        logger.debug("Running %s (timeout %ss)", " ".join(argv), timeout)
        try:
            result = subprocess.run(
                list(argv),
                capture_output=True,
                text=True,
                errors="replace",
                timeout=timeout,
                cwd=cwd,
            )
        except subprocess.TimeoutExpired:
            raise ToolTimeout(argv[0], timeout)
        except OSError:
            # FileNotFoundError, PermissionError, bad executable format
            raise ToolNotFound(argv[0])
        return ProcessOutput(
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )

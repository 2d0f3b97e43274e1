"""
In-memory HostEnvironment.

Holds files, directories, environment variables, registry values and
scripted process outputs in plain dictionaries. The test suite builds
its Windows and Linux build hosts on top of it.
"""

import ntpath
import os
import posixpath
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple, Union

from .environment import HostEnvironment, ProcessOutput
from .errors import ToolNotFound, ToolTimeout

_Scripted = Union[ProcessOutput, Exception]


def _norm(path: str) -> str:
    return os.path.normpath(path)


def _is_absolute(path: str) -> bool:
    # Drive-letter paths count as absolute whatever the test machine runs
    return posixpath.isabs(path) or bool(ntpath.splitdrive(path)[0]) or path.startswith("\\")


class InMemoryEnvironment(HostEnvironment):
    """HostEnvironment whose entire state is supplied by the caller."""

    def __init__(
        self,
        host_os: str = "windows",
        env: Optional[Dict[str, str]] = None,
        known_folders: Optional[Dict[str, str]] = None,
        cwd: Optional[str] = None,
    ):
        self.host_os = host_os
        self.cwd = cwd or (r"C:\work" if host_os == "windows" else "/work")
        self.env: Dict[str, str] = dict(env or {})
        self.known_folders: Dict[str, str] = dict(known_folders or {})
        self.files: Dict[str, str] = {}
        self.dirs: Set[str] = set()
        self.registry: Dict[str, Dict[str, Any]] = {}
        self.processes: Dict[Tuple[str, ...], _Scripted] = {}
        self.calls: List[Tuple[str, ...]] = []

    def abspath(self, path: str) -> str:
        if _is_absolute(path):
            return _norm(path)
        return _norm(os.path.join(self.cwd, path))

    # -------------------------------------------------------------------------
    # Population helpers
    # -------------------------------------------------------------------------

    def add_dir(self, path: str) -> "InMemoryEnvironment":
        path = self.abspath(path)
        while path and path not in self.dirs:
            self.dirs.add(path)
            parent = os.path.dirname(path)
            if parent == path:
                break
            path = parent
        return self

    def add_file(self, path: str, contents: str = "") -> "InMemoryEnvironment":
        path = self.abspath(path)
        self.files[path] = contents
        parent = os.path.dirname(path)
        if parent:
            self.add_dir(parent)
        return self

    def remove(self, path: str) -> "InMemoryEnvironment":
        """Drop a file, or a directory together with everything beneath it."""
        path = self.abspath(path)
        prefix = path + os.sep
        self.files = {p: c for p, c in self.files.items() if p != path and not p.startswith(prefix)}
        self.dirs = {d for d in self.dirs if d != path and not d.startswith(prefix)}
        return self

    def set_env(self, name: str, value: str) -> "InMemoryEnvironment":
        self.env[name] = value
        return self

    def set_registry_value(self, key: str, value_name: str, value: Any) -> "InMemoryEnvironment":
        self.registry.setdefault(key, {})[value_name] = value
        return self

    def add_process(
        self,
        argv: Union[str, Sequence[str]],
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
        hang: bool = False,
    ) -> "InMemoryEnvironment":
        """
        Script the output of a process.

        argv may be a full argument vector (exact match) or a bare
        executable, which then answers any arguments.
        """
        key = (argv,) if isinstance(argv, str) else tuple(argv)
        if hang:
            self.processes[key] = ToolTimeout(key[0], 0)
        else:
            self.processes[key] = ProcessOutput(returncode, stdout, stderr)
        return self

    # -------------------------------------------------------------------------
    # HostEnvironment
    # -------------------------------------------------------------------------

    def getenv(self, name: str) -> Optional[str]:
        value = self.env.get(name)
        return value if value else None

    def is_file(self, path: str) -> bool:
        return self.abspath(path) in self.files

    def is_dir(self, path: str) -> bool:
        return self.abspath(path) in self.dirs

    def list_dir(self, path: str) -> List[str]:
        path = self.abspath(path)
        if path not in self.dirs:
            return []
        names = set()
        for entry in list(self.dirs) + list(self.files):
            if os.path.dirname(entry) == path and entry != path:
                names.add(os.path.basename(entry))
        return sorted(names)

    def read_text(self, path: str) -> Optional[str]:
        return self.files.get(self.abspath(path))

    def known_folder(self, name: str) -> Optional[str]:
        return self.known_folders.get(name)

    def registry_value(self, key: str, value_name: str) -> Optional[Any]:
        return self.registry.get(key, {}).get(value_name)

    def registry_subkeys(self, key: str) -> List[str]:
        prefix = key.rstrip("\\") + "\\"
        names = set()
        for existing in self.registry:
            if existing.startswith(prefix):
                names.add(existing[len(prefix):].split("\\", 1)[0])
        return sorted(names)

    def run(
        self,
        argv: Sequence[str],
        timeout: float,
        cwd: Optional[str] = None,
    ) -> ProcessOutput:
        key = tuple(argv)
        self.calls.append(key)
        scripted = self.processes.get(key)
        if scripted is None:
            scripted = self.processes.get((key[0],))
        if scripted is None:
            raise ToolNotFound(key[0])
        if isinstance(scripted, ToolTimeout):
            raise ToolTimeout(key[0], timeout)
        if isinstance(scripted, Exception):
            raise scripted
        return scripted

"""
Host environment access for toolchain probes and the engine locator.

Everything Packcheck reads from the machine (environment variables,
files, the install registry, diagnostic processes) goes through a
HostEnvironment so the decision logic can run against an in-memory host.
"""

from .environment import (
    HostEnvironment,
    ProcessOutput,
    SystemEnvironment,
    host_os_name,
)
from .errors import HostError, ToolNotFound, ToolTimeout
from .memory import InMemoryEnvironment

__all__ = [
    "HostEnvironment",
    "ProcessOutput",
    "SystemEnvironment",
    "InMemoryEnvironment",
    "host_os_name",
    "HostError",
    "ToolNotFound",
    "ToolTimeout",
]

"""
Host environment errors.

Raised by HostEnvironment.run() only. Probes translate these into
ProbeResult values; they never reach the operator as a traceback.
"""


class HostError(Exception):
    """Base exception for host environment failures."""

    pass


class ToolNotFound(HostError):
    """The executable could not be started (absent from disk or PATH)."""

    def __init__(self, executable: str):
        self.executable = executable
        super().__init__(f"Executable not found: {executable}")


class ToolTimeout(HostError):
    """The process did not exit before its timeout and was killed."""

    def __init__(self, executable: str, timeout: float):
        self.executable = executable
        self.timeout = timeout
        super().__init__(f"{executable} timed out after {timeout:g}s")

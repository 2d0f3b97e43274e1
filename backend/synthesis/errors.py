"""
Packaging synthesis errors.

All errors are non-fatal to the host: every failure path leaves the
filesystem exactly as found, except for the one build script the
synthesizer may have written.

Probe failures are not exceptions; they are ProbeResult values.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from engine.certification import PlatformCertificationReport
    from engine.installation import EngineInstallation


class PackcheckError(Exception):
    """Base exception for all packaging synthesis failures."""

    pass


class InputInvalid(PackcheckError):
    """
    Caller-supplied input is unusable.

    Raised before any probing:
    - Wrong argument count
    - Project descriptor missing or not a .uproject
    - Unsupported platform
    - Output directory cannot be created or written
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class LocatorMiss(PackcheckError):
    """No engine installation with an AutomationTool entry point was found."""

    def __init__(self, message: str = "Could not find Unreal Engine installation"):
        super().__init__(message)


class CertificationFailure(PackcheckError):
    """
    The engine installation lacks support for the requested platform.

    Carries the certification report so remediation can be shown.
    """

    def __init__(
        self,
        report: "PlatformCertificationReport",
        installation: Optional["EngineInstallation"] = None,
    ):
        self.report = report
        self.installation = installation
        missing = ", ".join(report.missing_components)
        super().__init__(f"{report.platform.value} support not certified (missing: {missing})")


class SynthesisIOFailure(PackcheckError):
    """
    The build script could not be deleted or written.

    Reported as a warning; the synthesized command is still shown.
    """

    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = path
        self.reason = reason
        message = f"Could not create build script {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)

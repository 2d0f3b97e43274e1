"""
Validation pipeline.

    ProbeRunner -> readiness
        -> (ready AND request) locate engine -> certify platform
        -> synthesize command -> write build script

Request validation and output-directory preparation happen before any
probe runs. A dry run (write_script=False) checks the output directory
without creating it. Synthesis is skipped entirely (no command, no file) unless
readiness and certification both pass.

Exit codes:
    0 = ready, or command synthesized (script write failures are warnings)
    1 = invalid input
    2 = not ready (a required probe failed)
    3 = synthesis blocked (no engine, or platform not certified)
    4 = internal error (set by the CLI, never produced here)
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from config import DEFAULT_SETTINGS, PackcheckSettings
from engine import (
    EngineInstallation,
    PlatformCertificationReport,
    certify_platform,
    locate_engine,
)
from host import HostEnvironment
from readiness import ReadinessReport, generate_readiness_report

from .command import PackagingCommand, build_packaging_command
from .errors import CertificationFailure, InputInvalid, LocatorMiss, SynthesisIOFailure
from .models import PackagingRequest
from .script import BuildScript, render_build_script, write_build_script

logger = logging.getLogger(__name__)


class OutcomeStatus(str, Enum):
    """Final status of one validation run."""
    READY = "ready"
    SYNTHESIZED = "synthesized"
    INPUT_INVALID = "input_invalid"
    NOT_READY = "not_ready"
    LOCATOR_MISS = "locator_miss"
    CERTIFICATION_FAILED = "certification_failed"


EXIT_CODES = {
    OutcomeStatus.READY: 0,
    OutcomeStatus.SYNTHESIZED: 0,
    OutcomeStatus.INPUT_INVALID: 1,
    OutcomeStatus.NOT_READY: 2,
    OutcomeStatus.LOCATOR_MISS: 3,
    OutcomeStatus.CERTIFICATION_FAILED: 3,
}

EXIT_INTERNAL_ERROR = 4


# =============================================================================
# Synthesis
# =============================================================================

@dataclass
class Synthesis:
    """
    Everything produced once all gates have passed.

    Attributes:
        installation: Engine the command runs against
        certification: Passing certification report
        command: Synthesized packaging command
        script: Rendered build script
        script_written: False when writing was skipped or failed
        script_replaced: True when an earlier script was deleted first
        warnings: Non-fatal problems (script I/O)
    """
    installation: EngineInstallation
    certification: PlatformCertificationReport
    command: PackagingCommand
    script: BuildScript
    script_written: bool = False
    script_replaced: bool = False
    warnings: List[str] = field(default_factory=list)


def synthesize_packaging(
    env: HostEnvironment,
    request: PackagingRequest,
    settings: PackcheckSettings = DEFAULT_SETTINGS,
    write_script: bool = True,
) -> Synthesis:
    """
    Locate, certify, then build the command and (optionally) its script.

    Callers must only invoke this once readiness has passed.

    Raises:
        LocatorMiss: No engine installation verified
        CertificationFailure: Engine lacks the requested platform
    """
    installation = locate_engine(env, settings)
    if installation is None:
        raise LocatorMiss()

    certification = certify_platform(installation, request.platform, env, settings)
    if not certification.certified:
        raise CertificationFailure(certification, installation)

    command = build_packaging_command(installation, request, settings)
    script = render_build_script(command, request, env.host_os)
    synthesis = Synthesis(installation, certification, command, script)

    if write_script:
        try:
            synthesis.script_replaced = write_build_script(script)
            synthesis.script_written = True
        except SynthesisIOFailure as e:
            synthesis.warnings.append(str(e))
    return synthesis


# =============================================================================
# Validation Outcome
# =============================================================================

@dataclass
class ValidationOutcome:
    """
    Everything one validation run produced.

    Only the fields reached before the run stopped are set.
    """
    status: OutcomeStatus
    message: str = ""
    request: Optional[PackagingRequest] = None
    readiness: Optional[ReadinessReport] = None
    installation: Optional[EngineInstallation] = None
    certification: Optional[PlatformCertificationReport] = None
    synthesis: Optional[Synthesis] = None

    @classmethod
    def input_invalid(cls, message: str) -> "ValidationOutcome":
        return cls(status=OutcomeStatus.INPUT_INVALID, message=message)

    @property
    def exit_code(self) -> int:
        return EXIT_CODES[self.status]

    @property
    def command(self) -> Optional[PackagingCommand]:
        return self.synthesis.command if self.synthesis else None

    @property
    def warnings(self) -> List[str]:
        return list(self.synthesis.warnings) if self.synthesis else []

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON output."""
        result = {
            "status": self.status.value,
            "exit_code": self.exit_code,
            "message": self.message,
            "warnings": self.warnings,
            "request": self.request.to_dict() if self.request else None,
            "readiness": self.readiness.to_dict() if self.readiness else None,
            "engine": self.installation.to_dict() if self.installation else None,
            "certification": self.certification.to_dict() if self.certification else None,
            "command": None,
            "script": None,
        }
        if self.synthesis:
            result["command"] = self.synthesis.command.to_dict()
            result["script"] = {
                "path": self.synthesis.script.path,
                "written": self.synthesis.script_written,
                "replaced": self.synthesis.script_replaced,
            }
        return result

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


def run_validation(
    env: HostEnvironment,
    settings: PackcheckSettings = DEFAULT_SETTINGS,
    request: Optional[PackagingRequest] = None,
    write_script: bool = True,
) -> ValidationOutcome:
    """
    Run the whole pipeline.

    Args:
        env: Host to probe
        settings: Loaded settings
        request: Packaging request; None runs the probes only
        write_script: False computes the script without touching disk;
            the output directory is checked but not created

    Returns:
        ValidationOutcome; gate failures are statuses, not exceptions
    """
    if request is not None:
        try:
            if write_script:
                request.prepare_output_dir()
            else:
                request.check_output_dir()
        except InputInvalid as e:
            return ValidationOutcome(OutcomeStatus.INPUT_INVALID, message=e.message, request=request)

    readiness = generate_readiness_report(env, settings)

    if request is None:
        status = OutcomeStatus.READY if readiness.overall_ready else OutcomeStatus.NOT_READY
        return ValidationOutcome(status, readiness=readiness)

    if not readiness.overall_ready:
        unmet = ", ".join(o.name for o in readiness.unmet)
        logger.info("Synthesis skipped, unmet requirements: %s", unmet)
        return ValidationOutcome(
            OutcomeStatus.NOT_READY,
            message=f"Not ready: {unmet}",
            request=request,
            readiness=readiness,
        )

    try:
        synthesis = synthesize_packaging(env, request, settings, write_script=write_script)
    except LocatorMiss as e:
        return ValidationOutcome(
            OutcomeStatus.LOCATOR_MISS,
            message=str(e),
            request=request,
            readiness=readiness,
        )
    except CertificationFailure as e:
        return ValidationOutcome(
            OutcomeStatus.CERTIFICATION_FAILED,
            message=str(e),
            request=request,
            readiness=readiness,
            installation=e.installation,
            certification=e.report,
        )

    return ValidationOutcome(
        OutcomeStatus.SYNTHESIZED,
        message=f"Packaging command synthesized for {request.platform.value}",
        request=request,
        readiness=readiness,
        installation=synthesis.installation,
        certification=synthesis.certification,
        synthesis=synthesis,
    )

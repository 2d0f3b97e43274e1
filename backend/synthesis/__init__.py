"""
Packcheck Synthesis - packaging requests, command and script synthesis,
and the end-to-end validation pipeline.
"""

from .errors import (
    PackcheckError,
    InputInvalid,
    LocatorMiss,
    CertificationFailure,
    SynthesisIOFailure,
)

from .models import PackagingRequest, parse_platform

from .command import (
    Argument,
    PackagingCommand,
    PackagingCommandBuilder,
    build_packaging_command,
    predict_output_path,
    quote_for_batch,
    quote_for_shell,
)

from .notes import output_folder_hint, packaging_notes
from .script import (
    BuildScript,
    render_build_script,
    script_path_for,
    write_build_script,
)

from .pipeline import (
    EXIT_CODES,
    EXIT_INTERNAL_ERROR,
    OutcomeStatus,
    Synthesis,
    ValidationOutcome,
    run_validation,
    synthesize_packaging,
)

__all__ = [
    # Errors
    "PackcheckError",
    "InputInvalid",
    "LocatorMiss",
    "CertificationFailure",
    "SynthesisIOFailure",
    # Request
    "PackagingRequest",
    "parse_platform",
    # Command
    "Argument",
    "PackagingCommand",
    "PackagingCommandBuilder",
    "build_packaging_command",
    "predict_output_path",
    "output_folder_hint",
    "packaging_notes",
    "quote_for_batch",
    "quote_for_shell",
    # Script
    "BuildScript",
    "render_build_script",
    "script_path_for",
    "write_build_script",
    # Pipeline
    "EXIT_CODES",
    "EXIT_INTERNAL_ERROR",
    "OutcomeStatus",
    "Synthesis",
    "ValidationOutcome",
    "run_validation",
    "synthesize_packaging",
]

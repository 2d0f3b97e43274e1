#!/usr/bin/env python3
"""
Packcheck CLI - Thin entrypoint for operator commands.

Commands:
- validate                          Run toolchain probes only
- validate PROJECT OUTPUT [PLATFORM] Probe, then synthesize the packaging
                                    command and build script
- serve                             Run the HTTP API

Design Principles:
==================
- CLI is a dispatcher only
- Request validation happens before any probe runs
- Operator text is printed; diagnostics go through logging (-v)
- No interactive prompts

Exit Codes:
===========
- 0: Ready (or command synthesized; script write failures are warnings)
- 1: Invalid input (arguments, project file, output dir, configuration)
- 2: Not ready (a required probe failed)
- 3: Synthesis blocked (no engine found, or platform not certified)
- 4: Internal error
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path as _Path
from typing import List, NoReturn, Optional

# Add backend directory to path if not already there
_backend_dir = _Path(__file__).parent.resolve()
if str(_backend_dir) not in sys.path:
    sys.path.insert(0, str(_backend_dir))

from config import DEFAULT_SETTINGS, PackcheckSettings, SettingsError, load_settings
from host import SystemEnvironment
from readiness import format_readiness_terminal, get_version
from synthesis import (
    EXIT_INTERNAL_ERROR,
    InputInvalid,
    OutcomeStatus,
    PackagingRequest,
    ValidationOutcome,
    output_folder_hint,
    packaging_notes,
    run_validation,
)

logger = logging.getLogger("packcheck")

EXIT_INPUT_INVALID = 1

USAGE_LINES = [
    "USAGE:",
    "  packcheck validate                              Check tools only",
    "  packcheck validate <uproject> <output> [platform]  Generate packaging command",
    "",
    "EXAMPLES:",
    "  packcheck validate MyGame.uproject C:\\Builds\\Android",
    "  packcheck validate MyGame.uproject C:\\Builds\\Android Android",
    "  packcheck validate MyGame.uproject C:\\Builds\\Linux Linux",
    "",
    "Supported platforms: Android (default), Linux",
]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_cli_settings(args: argparse.Namespace) -> PackcheckSettings:
    """
    Load settings, then apply --workers / --timeout.

    Raises:
        SettingsError: Configuration file or flag value is invalid
    """
    settings = load_settings()
    if args.workers is not None:
        if args.workers < 1:
            raise SettingsError(f"--workers must be positive: {args.workers}")
        settings = replace(settings, max_workers=args.workers)
    if args.timeout is not None:
        if args.timeout <= 0:
            raise SettingsError(f"--timeout must be positive: {args.timeout}")
        settings = replace(settings, probe_timeout_seconds=args.timeout)
    return settings


def _build_request(positional: List[str]) -> Optional[PackagingRequest]:
    """
    Turn positional arguments into a request.

    Raises:
        InputInvalid: Wrong argument count or invalid request
    """
    if not positional:
        return None
    if len(positional) == 1:
        raise InputInvalid("Both a .uproject file and an output directory are required")
    if len(positional) > 3:
        raise InputInvalid(f"Too many arguments: expected at most 3, got {len(positional)}")
    project_file, output_dir = positional[0], positional[1]
    platform = positional[2] if len(positional) == 3 else None
    return PackagingRequest.from_arguments(project_file, output_dir, platform)


# =============================================================================
# Terminal Output
# =============================================================================

def format_outcome_terminal(
    outcome: ValidationOutcome,
    settings: PackcheckSettings = DEFAULT_SETTINGS,
) -> str:
    """Format everything after the readiness report."""
    lines: List[str] = []

    if outcome.status == OutcomeStatus.INPUT_INVALID:
        lines.append(f"ERROR: {outcome.message}")
        lines.append("")
        lines.extend(USAGE_LINES)
        return "\n".join(lines)

    if outcome.request is None:
        lines.extend(USAGE_LINES)
        return "\n".join(lines)

    platform = outcome.request.platform.value
    lines.append(f"=== PACKAGING COMMAND GENERATION ({platform.upper()}) ===")
    lines.append("")

    if outcome.status == OutcomeStatus.NOT_READY:
        lines.append("Packaging command not generated: required tools are missing.")
        return "\n".join(lines)

    if outcome.status == OutcomeStatus.LOCATOR_MISS:
        lines.append(f"ERROR: {outcome.message}")
        return "\n".join(lines)

    if outcome.installation is not None:
        lines.append(f"Found UE4 Engine at: {outcome.installation.root_path}")

    certification = outcome.certification
    if certification is not None:
        for component in certification.found_components:
            lines.append(f"  ✔ {component}")
        for component in certification.missing_components:
            lines.append(f"  ✘ Missing: {component}")
        for component in certification.advisories:
            lines.append(f"  ⚠ Missing (advisory): {component}")

    if outcome.status == OutcomeStatus.CERTIFICATION_FAILED:
        lines.append("")
        lines.append(f"ERROR: {outcome.message}")
        if certification is not None and certification.remediation:
            lines.append("")
            lines.append(certification.remediation)
        return "\n".join(lines)

    synthesis = outcome.synthesis
    lines.append("")
    lines.append("=== GENERATED PACKAGING COMMAND ===")
    lines.append("")
    lines.append(synthesis.command.render())
    lines.append("")

    if synthesis.script_written:
        if synthesis.script_replaced:
            lines.append(f"Replaced existing build script: {synthesis.script.path}")
        else:
            lines.append(f"Build script created: {synthesis.script.path}")
    for warning in synthesis.warnings:
        lines.append(f"Warning: {warning}")

    lines.append("")
    lines.append("=== EXPECTED OUTPUT LOCATION ===")
    lines.append(synthesis.command.predicted_output_path)
    hint = output_folder_hint(synthesis.command.platform, settings)
    if hint:
        lines.append("")
        lines.append(hint)

    lines.append("")
    lines.append("=== PACKAGING NOTES ===")
    lines.extend(packaging_notes(synthesis.command.platform, synthesis.command.project_name, settings))
    return "\n".join(lines)


# =============================================================================
# Commands
# =============================================================================

def cmd_validate(args: argparse.Namespace) -> NoReturn:
    """
    Validate the toolchain and optionally synthesize a packaging command.

    Exit codes: see module docstring.
    """
    try:
        settings = _load_cli_settings(args)
        request = _build_request(args.positional)
    except (InputInvalid, SettingsError) as e:
        outcome = ValidationOutcome.input_invalid(str(e))
        if args.json:
            print(outcome.to_json())
        else:
            print(format_outcome_terminal(outcome), file=sys.stderr)
        sys.exit(EXIT_INPUT_INVALID)

    outcome = run_validation(SystemEnvironment(), settings, request=request)

    if args.json:
        print(outcome.to_json())
    else:
        if outcome.readiness is not None:
            print(format_readiness_terminal(outcome.readiness))
        print(format_outcome_terminal(outcome, settings))

    sys.exit(outcome.exit_code)


def cmd_serve(args: argparse.Namespace) -> NoReturn:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("app.main:app", host=args.host, port=args.port)
    sys.exit(0)


def main(argv: Optional[List[str]] = None) -> NoReturn:
    """
    Main CLI entrypoint.

    Parses arguments and dispatches to subcommands.
    """
    parser = argparse.ArgumentParser(
        prog="packcheck",
        description="Packcheck - Unreal Engine packaging toolchain validator",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"packcheck {get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to execute")

    # Validate command
    parser_validate = subparsers.add_parser(
        "validate",
        help="Check the toolchain and optionally generate a packaging command",
    )
    parser_validate.add_argument(
        "positional",
        nargs="*",
        metavar="ARG",
        help="[PROJECT.uproject OUTPUT_DIR [Android|Linux]]",
    )
    parser_validate.add_argument(
        "--json",
        action="store_true",
        help="Output the validation outcome as JSON",
    )
    parser_validate.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Maximum concurrent probes (default: 4)",
    )
    parser_validate.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-process probe timeout in seconds (default: 10)",
    )
    parser_validate.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser_validate.set_defaults(func=cmd_validate)

    # Serve command
    parser_serve = subparsers.add_parser(
        "serve",
        help="Run the HTTP API",
    )
    parser_serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    parser_serve.add_argument("--port", type=int, default=8085, help="Port (default: 8085)")
    parser_serve.set_defaults(func=cmd_serve, verbose=False)

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(EXIT_INTERNAL_ERROR)
    except Exception as e:
        logger.exception("Unhandled error")
        print(f"FATAL: {e}", file=sys.stderr)
        sys.exit(EXIT_INTERNAL_ERROR)


if __name__ == "__main__":
    main()

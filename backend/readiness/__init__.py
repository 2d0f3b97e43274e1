"""
Packcheck Readiness - toolchain probes and the readiness gate.

Each probe returns an explicit ok / not_found / incompatible result with
no hidden recovery. Readiness is the AND of all required probes;
informational probes are reported but never gate packaging.
"""

from .checks import (
    Probe,
    ProbeDefinition,
    ProbeResult,
    ProbeStatus,
    PROBE_DEFINITIONS,
    REQUIRED_PROBES,
    # Individual checks
    check_dotnet_framework,
    check_visual_studio,
    check_android_sdk,
    check_android_ndk,
    check_java_jdk,
    check_linux_toolchain,
    check_cmake,
    check_msbuild,
    check_git,
    check_android_studio,
    check_oculus_sdk,
    # Registry
    build_probes,
    get_probe,
)

from .runner import ProbeOutcome, ProbeRunner

from .readiness_report import (
    ReadinessReport,
    is_ready,
    generate_readiness_report,
    format_readiness_terminal,
    get_version,
)

__all__ = [
    # Probe types
    "Probe",
    "ProbeDefinition",
    "ProbeResult",
    "ProbeStatus",
    "PROBE_DEFINITIONS",
    "REQUIRED_PROBES",
    # Individual checks
    "check_dotnet_framework",
    "check_visual_studio",
    "check_android_sdk",
    "check_android_ndk",
    "check_java_jdk",
    "check_linux_toolchain",
    "check_cmake",
    "check_msbuild",
    "check_git",
    "check_android_studio",
    "check_oculus_sdk",
    "build_probes",
    "get_probe",
    # Runner
    "ProbeOutcome",
    "ProbeRunner",
    # Aggregation
    "ReadinessReport",
    "is_ready",
    "generate_readiness_report",
    "format_readiness_terminal",
    "get_version",
]

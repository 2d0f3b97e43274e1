"""
Packcheck Engine - locate an Unreal Engine installation and certify that
it can package for a target platform.
"""

from .platforms import DEFAULT_PLATFORM, Platform

from .installation import (
    EngineInstallation,
    automation_tool_paths,
    engine_candidates,
    find_automation_tool,
    locate_engine,
    registry_candidates,
)

from .certification import (
    ANDROID_COMPONENTS,
    ComponentSpec,
    PlatformCertificationReport,
    certify_android,
    certify_linux,
    certify_platform,
)

from .remediation import (
    android_fix_steps,
    android_rebuild_commands,
    android_remediation,
    linux_remediation,
    list_build_targets,
)

__all__ = [
    "DEFAULT_PLATFORM",
    "Platform",
    # Locator
    "EngineInstallation",
    "automation_tool_paths",
    "engine_candidates",
    "find_automation_tool",
    "locate_engine",
    "registry_candidates",
    # Certifier
    "ANDROID_COMPONENTS",
    "ComponentSpec",
    "PlatformCertificationReport",
    "certify_android",
    "certify_linux",
    "certify_platform",
    # Remediation
    "android_fix_steps",
    "android_rebuild_commands",
    "android_remediation",
    "linux_remediation",
    "list_build_targets",
]

"""
Platform Certification - does the located engine support the target?

Toolchain presence is necessary but not sufficient: a source-built
engine only contains a platform's modules when they were built in.

- Android: structural check of files/directories inside the engine.
  Every component is inspected in one pass; nothing stops at the
  first miss.
- Linux: re-runs the linux_toolchain probe. The same probe gates
  readiness and certifies requests.
"""

import logging
from dataclasses import dataclass, field
from typing import Tuple

from config import DEFAULT_SETTINGS, PackcheckSettings
from host import HostEnvironment
from readiness.checks import get_probe

from .installation import EngineInstallation
from .platforms import Platform
from .remediation import android_remediation, linux_remediation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComponentSpec:
    """
    One expected engine component.

    Attributes:
        label: Short name shown to the operator
        parts: Path segments beneath the engine root
        kind: "file" | "dir"
        gating: False for components that are reported but never block
    """
    label: str
    parts: Tuple[str, ...]
    kind: str = "dir"
    gating: bool = True

    def present(self, env: HostEnvironment, installation: EngineInstallation) -> bool:
        path = installation.path(env, *self.parts)
        return env.is_file(path) if self.kind == "file" else env.is_dir(path)


_UBT_ANDROID = ("Engine", "Source", "Programs", "UnrealBuildTool", "Platform", "Android")

ANDROID_COMPONENTS: Tuple[ComponentSpec, ...] = (
    ComponentSpec(
        "Android.Automation.dll",
        ("Engine", "Binaries", "DotNET", "AutomationScripts", "Android", "Android.Automation.dll"),
        kind="file",
    ),
    ComponentSpec("UnrealBuildTool Android platform source", _UBT_ANDROID),
    ComponentSpec("Android target platform module", ("Engine", "Source", "Developer", "Android")),
    ComponentSpec(
        "Android runtime support",
        ("Engine", "Source", "Runtime", "Launch", "Private", "Android"),
        gating=False,
    ),
    ComponentSpec(
        "Android toolchain source",
        _UBT_ANDROID + ("AndroidToolChain.cs",),
        kind="file",
        gating=False,
    ),
)


@dataclass(frozen=True)
class PlatformCertificationReport:
    """
    Result of certifying one platform against one installation.

    Attributes:
        platform: Target platform
        missing_components: Gating components that were not found
        found_components: Components that were found
        advisories: Non-gating components that were not found
        remediation: Operator guidance (empty when certified)
    """
    platform: Platform
    missing_components: Tuple[str, ...] = ()
    found_components: Tuple[str, ...] = ()
    advisories: Tuple[str, ...] = ()
    remediation: str = field(default="", compare=False)

    @property
    def certified(self) -> bool:
        return not self.missing_components

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON output."""
        result = {
            "platform": self.platform.value,
            "certified": self.certified,
            "missing_components": list(self.missing_components),
            "found_components": list(self.found_components),
            "advisories": list(self.advisories),
        }
        if self.remediation:
            result["remediation"] = self.remediation
        return result


# =============================================================================
# Android Certification
# =============================================================================

def certify_android(
    installation: EngineInstallation,
    env: HostEnvironment,
    settings: PackcheckSettings = DEFAULT_SETTINGS,
) -> PlatformCertificationReport:
    """Inspect every Android component and report all misses together."""
    missing, found, advisories = [], [], []
    for component in ANDROID_COMPONENTS:
        if component.present(env, installation):
            found.append(component.label)
        elif component.gating:
            missing.append(component.label)
        else:
            advisories.append(component.label)

    remediation = ""
    if missing:
        logger.info("Android support missing in %s: %s", installation.root_path, ", ".join(missing))
        remediation = android_remediation(env, installation.root_path, settings)

    return PlatformCertificationReport(
        platform=Platform.ANDROID,
        missing_components=tuple(missing),
        found_components=tuple(found),
        advisories=tuple(advisories),
        remediation=remediation,
    )


# =============================================================================
# Linux Certification
# =============================================================================

def certify_linux(
    installation: EngineInstallation,
    env: HostEnvironment,
    settings: PackcheckSettings = DEFAULT_SETTINGS,
) -> PlatformCertificationReport:
    """Certify Linux by re-running the cross-toolchain probe."""
    probe = get_probe("linux_toolchain", env, settings)
    result = probe.run()
    if result.passed:
        return PlatformCertificationReport(
            platform=Platform.LINUX,
            found_components=(f"{probe.label}: {result.detail}",),
        )

    logger.info("Linux certification failed: %s", result.detail)
    return PlatformCertificationReport(
        platform=Platform.LINUX,
        missing_components=(f"{probe.label}: {result.detail}",),
        remediation=linux_remediation(settings),
    )


_CERTIFIERS = {
    Platform.ANDROID: certify_android,
    Platform.LINUX: certify_linux,
}


def certify_platform(
    installation: EngineInstallation,
    platform: Platform,
    env: HostEnvironment,
    settings: PackcheckSettings = DEFAULT_SETTINGS,
) -> PlatformCertificationReport:
    return _CERTIFIERS[platform](installation, env, settings)

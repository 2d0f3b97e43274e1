"""
Packcheck Readiness Checks - Individual toolchain probes.

Each probe follows the same pattern:
1. Gather evidence through the HostEnvironment (env vars, files,
   registry, or a diagnostic process bounded by a timeout)
2. Return a ProbeResult:
   - status: ok | not_found | incompatible
   - detail: what was found (path, version banner, missing pieces)
   - hint: optional remediation text (not an action)
   - advisory: optional warning attached to an OK result

Probes never raise to the caller and never mutate the host.

Per-probe severity policy (see PROBE_DEFINITIONS for order):
- java_jdk: any JDK passes; non-8 JDKs carry an advisory
- android_ndk: any NDK passes; non-r21 revisions carry an advisory
- everything else: out-of-range versions are INCOMPATIBLE
"""

import functools
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from config import DEFAULT_SETTINGS, PackcheckSettings
from host import HostEnvironment, ProcessOutput, ToolNotFound, ToolTimeout

logger = logging.getLogger(__name__)


class ProbeStatus(str, Enum):
    """Probe result status."""
    OK = "ok"
    NOT_FOUND = "not_found"
    INCOMPATIBLE = "incompatible"


@dataclass(frozen=True)
class ProbeResult:
    """
    Result of a single toolchain probe.

    Attributes:
        status: ok | not_found | incompatible
        detail: Factual explanation of the result
        hint: Optional remediation hint (text only)
        advisory: Optional warning on an OK result
    """
    status: ProbeStatus
    detail: str = ""
    hint: Optional[str] = None
    advisory: Optional[str] = None

    @classmethod
    def ok(cls, detail: str, advisory: Optional[str] = None) -> "ProbeResult":
        return cls(ProbeStatus.OK, detail, advisory=advisory)

    @classmethod
    def not_found(cls, detail: str = "", hint: Optional[str] = None) -> "ProbeResult":
        return cls(ProbeStatus.NOT_FOUND, detail, hint=hint)

    @classmethod
    def incompatible(cls, detail: str, hint: Optional[str] = None) -> "ProbeResult":
        return cls(ProbeStatus.INCOMPATIBLE, detail, hint=hint)

    @property
    def passed(self) -> bool:
        return self.status == ProbeStatus.OK

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON output."""
        result = {
            "status": self.status.value,
            "detail": self.detail,
        }
        if self.hint:
            result["hint"] = self.hint
        if self.advisory:
            result["advisory"] = self.advisory
        return result


@dataclass(frozen=True)
class Probe:
    """
    One named toolchain check, bound to its host and settings.

    Attributes:
        name: Unique identifier (e.g., "android_sdk")
        label: Human-readable name for terminal output
        check: Zero-argument callable producing the result
        required: False for informational probes excluded from readiness
    """
    name: str
    label: str
    check: Callable[[], ProbeResult]
    required: bool = True

    def run(self) -> ProbeResult:
        return self.check()


# Signature of every check_* function below
ProbeCheck = Callable[[HostEnvironment, PackcheckSettings], ProbeResult]


def _run_tool(
    env: HostEnvironment,
    argv: Sequence[str],
    settings: PackcheckSettings,
) -> Tuple[Optional[ProcessOutput], Optional[ProbeResult]]:
    """
    Run a diagnostic process, mapping host failures onto probe results.

    Returns (output, None) on success or (None, result) when the tool is
    absent (NOT_FOUND) or hung (INCOMPATIBLE).
    """
    try:
        return env.run(argv, timeout=settings.probe_timeout_seconds), None
    except ToolNotFound:
        return None, ProbeResult.not_found(f"{argv[0]} not found")
    except ToolTimeout as e:
        return None, ProbeResult.incompatible(str(e), hint="The tool is installed but did not respond")


def _vswhere_path(env: HostEnvironment) -> Optional[str]:
    program_files_x86 = env.known_folder("program_files_x86")
    if not program_files_x86:
        return None
    return env.join(program_files_x86, "Microsoft Visual Studio", "Installer", "vswhere.exe")


# =============================================================================
# .NET Framework Check
# =============================================================================

def check_dotnet_framework(env: HostEnvironment, settings: PackcheckSettings) -> ProbeResult:
    """
    Check the .NET Framework developer pack release number in the registry.

    AutomationTool and UnrealBuildTool target .NET Framework 4.6.2.
    """
    label = settings.dotnet_version_label
    hint = f"Install the .NET Framework {label} Developer Pack from dotnet.microsoft.com"
    release = env.registry_value(settings.dotnet_registry_key, "Release")

    if release is None:
        return ProbeResult.not_found(
            f".NET Framework {label} Developer Pack not found",
            hint=hint,
        )
    try:
        release = int(release)
    except (TypeError, ValueError):
        return ProbeResult.incompatible(f"Unreadable .NET release value: {release!r}", hint=hint)

    if release >= settings.dotnet_min_release:
        return ProbeResult.ok(f".NET Framework {label}+ (release {release})")
    return ProbeResult.incompatible(
        f".NET Framework release {release} is older than {label} ({settings.dotnet_min_release})",
        hint=hint,
    )


# =============================================================================
# Visual Studio Check
# =============================================================================

def check_visual_studio(env: HostEnvironment, settings: PackcheckSettings) -> ProbeResult:
    """
    Check for Visual Studio in the required version range via vswhere.

    vswhere is the vendor locator; Visual Studio is never on PATH.
    """
    year = settings.visual_studio_year
    version_range = settings.visual_studio_version_range
    hint = f"Install Visual Studio {year} with the 'Game development with C++' workload"

    vswhere = _vswhere_path(env)
    if vswhere is None or not env.is_file(vswhere):
        return ProbeResult.not_found("vswhere.exe not found", hint=hint)

    output, failure = _run_tool(
        env,
        [vswhere, "-version", version_range, "-latest", "-property", "installationPath"],
        settings,
    )
    if failure:
        return failure

    install_path = output.stdout.strip()
    if install_path:
        return ProbeResult.ok(install_path)

    # Nothing in range; report what is installed instead
    output, failure = _run_tool(
        env,
        [vswhere, "-latest", "-property", "installationVersion"],
        settings,
    )
    other_version = output.stdout.strip() if output else ""
    if other_version:
        return ProbeResult.incompatible(
            f"Visual Studio {other_version} found, {year} {version_range} required",
            hint=hint,
        )
    return ProbeResult.not_found(f"Visual Studio {year} not found", hint=hint)


# =============================================================================
# Android SDK Check
# =============================================================================

def _sdk_fallback_dirs(env: HostEnvironment, settings: PackcheckSettings) -> List[str]:
    candidates = []
    local_app_data = env.known_folder("local_app_data")
    if local_app_data:
        candidates.append(env.join(local_app_data, "Android", "Sdk"))
    user_profile = env.known_folder("user_profile")
    if user_profile:
        candidates.append(env.join(user_profile, "AppData", "Local", "Android", "Sdk"))
    candidates.extend(settings.android_sdk_dirs)
    return candidates


def find_android_sdk(
    env: HostEnvironment,
    settings: PackcheckSettings = DEFAULT_SETTINGS,
) -> Tuple[Optional[str], Optional[str]]:
    """
    Locate the Android SDK root.

    Environment variables win outright, even when they point nowhere;
    well-known folders are only used when none is set and must contain
    platform-tools/adb.

    Returns:
        (sdk_path, origin) where origin is the env var name or
        "well-known location"; (None, None) when nothing is found
    """
    for var in settings.android_sdk_env_vars:
        value = env.getenv(var)
        if value:
            return value, var

    adb = env.executable_name("adb")
    for candidate in _sdk_fallback_dirs(env, settings):
        if env.is_dir(candidate) and env.is_file(env.join(candidate, "platform-tools", adb)):
            return candidate, "well-known location"
    return None, None


def check_android_sdk(env: HostEnvironment, settings: PackcheckSettings) -> ProbeResult:
    """
    Check the Android SDK and its platform API levels.

    UE 4.27 packages against API 28-30; at least one must be installed.
    """
    levels = settings.android_api_levels
    level_range = f"{min(levels)}-{max(levels)}"
    env_names = " or ".join(settings.android_sdk_env_vars)

    sdk_path, origin = find_android_sdk(env, settings)
    if sdk_path is None:
        return ProbeResult.not_found(
            "Android SDK not found",
            hint=f"Set {env_names} environment variable",
        )
    if not env.is_dir(sdk_path):
        return ProbeResult.not_found(
            f"{origin} points to a missing directory: {sdk_path}",
            hint=f"Set {env_names} environment variable",
        )

    platforms = [
        name for name in env.list_dir(env.join(sdk_path, "platforms"))
        if name.startswith("android-")
    ]
    wanted = {f"android-{level}" for level in levels}
    matching = sorted(p for p in platforms if p in wanted)
    if matching:
        return ProbeResult.ok(f"{sdk_path} ({', '.join(matching)})")

    installed = ", ".join(platforms) if platforms else "none"
    return ProbeResult.incompatible(
        f"{sdk_path} is missing required API levels (need API {level_range}; installed: {installed})",
        hint=f"Install an Android {level_range} platform with the SDK Manager",
    )


# =============================================================================
# Android NDK Check
# =============================================================================

_NDK_REVISION = re.compile(r"Pkg\.Revision\s*=\s*([\d.]+)")


def _ndk_candidates(env: HostEnvironment, settings: PackcheckSettings) -> List[str]:
    candidates: List[str] = []
    ndk_home = env.getenv(settings.android_ndk_env_var)
    if ndk_home:
        candidates.append(ndk_home)
    else:
        for var in settings.android_sdk_env_vars:
            sdk = env.getenv(var)
            if sdk:
                candidates.extend([env.join(sdk, "ndk-bundle"), env.join(sdk, "ndk")])
                break

    local_app_data = env.known_folder("local_app_data")
    if local_app_data:
        sdk = env.join(local_app_data, "Android", "Sdk")
        candidates.extend([env.join(sdk, "ndk-bundle"), env.join(sdk, "ndk")])
    for sdk in settings.android_sdk_dirs:
        candidates.extend([env.join(sdk, "ndk-bundle"), env.join(sdk, "ndk")])
    return candidates


def find_android_ndk(
    env: HostEnvironment,
    settings: PackcheckSettings = DEFAULT_SETTINGS,
) -> Optional[str]:
    """
    Locate an NDK root containing ndk-build.

    Each candidate may be an NDK itself or a folder of versioned NDKs
    (sdk/ndk/21.1.6352462); versioned folders are tried in sorted order.
    """
    ndk_build = "ndk-build.cmd" if env.is_windows else "ndk-build"
    for base in _ndk_candidates(env, settings):
        if not env.is_dir(base):
            continue
        if env.is_file(env.join(base, ndk_build)):
            return base
        for name in env.list_dir(base):
            versioned = env.join(base, name)
            if env.is_file(env.join(versioned, ndk_build)):
                return versioned
    return None


def check_android_ndk(env: HostEnvironment, settings: PackcheckSettings) -> ProbeResult:
    """
    Check for an Android NDK.

    Any NDK passes; the revision from source.properties is reported and
    anything other than the recommended major revision is an advisory.
    """
    recommended = settings.android_ndk_recommended_label
    ndk_path = find_android_ndk(env, settings)
    if ndk_path is None:
        return ProbeResult.not_found(
            f"Android NDK not found (UE {settings.engine_version} requires NDK {recommended} or compatible)",
            hint=f"Install NDK {recommended} and set {settings.android_ndk_env_var}",
        )

    properties = env.read_text(env.join(ndk_path, "source.properties")) or ""
    match = _NDK_REVISION.search(properties)
    if not match:
        return ProbeResult.ok(ndk_path)

    revision = match.group(1)
    major = revision.split(".")[0]
    detail = f"{ndk_path} (revision {revision})"
    if major != str(settings.android_ndk_recommended_major):
        return ProbeResult.ok(
            detail,
            advisory=f"UE {settings.engine_version} expects NDK {recommended}",
        )
    return ProbeResult.ok(detail)


# =============================================================================
# Java JDK Check
# =============================================================================

_JAVAC_VERSION = re.compile(r"javac\s+(\d+)(?:\.(\d+))?")


def _java_major(banner: str) -> Optional[int]:
    """javac 1.8.0_392 -> 8, javac 17.0.9 -> 17."""
    match = _JAVAC_VERSION.search(banner)
    if not match:
        return None
    major = int(match.group(1))
    if major == 1 and match.group(2):
        major = int(match.group(2))
    return major


def check_java_jdk(env: HostEnvironment, settings: PackcheckSettings) -> ProbeResult:
    """
    Check that javac is on PATH.

    Policy: a non-8 JDK is still a pass. Gradle in UE 4.27 works best
    with JDK 8, so other versions get an advisory only.
    """
    output, failure = _run_tool(env, ["javac", "-version"], settings)
    if failure:
        if failure.status == ProbeStatus.NOT_FOUND:
            return ProbeResult.not_found("javac not found on PATH", hint="Install JDK 8 and add it to PATH")
        return failure

    # javac 8 prints its banner on stderr
    text = output.text.strip()
    if "javac" not in text.lower():
        return ProbeResult.not_found("javac did not report a version", hint="Install JDK 8 and add it to PATH")

    banner = output.first_line
    major = _java_major(text)
    if major == settings.java_recommended_major:
        return ProbeResult.ok(banner)
    return ProbeResult.ok(
        banner,
        advisory=f"may be incompatible; UE {settings.engine_version} works best with JDK {settings.java_recommended_major}",
    )


# =============================================================================
# Linux Cross-Compilation Toolchain Check
# =============================================================================

def linux_toolchain_candidates(env: HostEnvironment, settings: PackcheckSettings) -> List[str]:
    """
    Candidate toolchain roots in search order.

    Fixed roots first, then Program Files, then LINUX_MULTIARCH_ROOT,
    then the fallback roots.
    """
    candidates = [env.join(root, name) for root in settings.linux_toolchain_roots for name in settings.linux_toolchain_names]
    program_files = env.known_folder("program_files")
    if program_files:
        candidates.extend(
            env.join(program_files, "UnrealToolchains", name) for name in settings.linux_toolchain_names
        )
    multiarch_root = env.getenv(settings.linux_toolchain_env_var)
    if multiarch_root:
        candidates.append(multiarch_root)
    candidates.extend(
        env.join(root, name) for root in settings.linux_toolchain_fallback_roots for name in settings.linux_toolchain_names
    )
    return candidates


def linux_toolchain_setup_steps(settings: PackcheckSettings = DEFAULT_SETTINGS) -> str:
    """Operator guidance printed when no cross toolchain is installed."""
    name = settings.linux_toolchain_names[0]
    root = settings.linux_toolchain_roots[0] if settings.linux_toolchain_roots else r"C:\UnrealToolchains"
    triple = settings.linux_target_triple
    return "\n".join([
        "LINUX CROSS-COMPILATION SETUP REQUIRED:",
        "1. Download the UE4 Linux toolchain:",
        f"   - For UE{settings.engine_version}: {name}",
        "   - From the Epic Games developer portal or build it from source",
        "2. Extract the toolchain to:",
        f"   {root}\\{name}\\",
        f"3. Alternative: set {settings.linux_toolchain_env_var} to the toolchain root directory",
        "4. Verify the installation contains:",
        "   - bin/clang++",
        f"   - {triple}/ directory",
        "   - lib/gcc/ directory",
    ])


def check_linux_toolchain(env: HostEnvironment, settings: PackcheckSettings) -> ProbeResult:
    """
    Check for the UE clang cross-compilation toolchain.

    A root is recognised by bin/clang++ or the target gcc; it is only
    complete when clang++, lib/gcc and the target triple directory all
    exist. Partial installs are INCOMPATIBLE ("incomplete"), never OK.
    """
    triple = settings.linux_target_triple
    clang = env.executable_name("clang++")
    gcc = env.executable_name(f"{triple}-gcc")

    found = None
    for root in linux_toolchain_candidates(env, settings):
        if not env.is_dir(root):
            continue
        if env.is_file(env.join(root, "bin", clang)) or env.is_file(env.join(root, "bin", gcc)):
            found = root
            break

    if found is None:
        return ProbeResult.not_found(
            "Linux cross-compilation toolchain not found",
            hint=linux_toolchain_setup_steps(settings),
        )

    components = [
        (f"bin/{clang}", env.join(found, "bin", clang)),
        ("lib/gcc", env.join(found, "lib", "gcc")),
        (f"{triple}/", env.join(found, triple)),
    ]
    missing = [label for label, path in components if not env.exists(path)]
    if missing:
        return ProbeResult.incompatible(
            f"{found} is incomplete (missing: {', '.join(missing)})",
            hint=linux_toolchain_setup_steps(settings),
        )
    return ProbeResult.ok(found)


# =============================================================================
# CMake Check
# =============================================================================

def check_cmake(env: HostEnvironment, settings: PackcheckSettings) -> ProbeResult:
    """Check that cmake is on PATH and prints its version banner."""
    output, failure = _run_tool(env, ["cmake", "--version"], settings)
    if failure:
        if failure.status == ProbeStatus.NOT_FOUND:
            return ProbeResult.not_found("cmake not found on PATH", hint="Install CMake from cmake.org")
        return failure

    first_line = output.first_line
    if "cmake version" not in output.text:
        return ProbeResult.not_found("cmake did not report a version", hint="Install CMake from cmake.org")
    if "cmake version" in first_line:
        return ProbeResult.ok(f"version {first_line.replace('cmake version', '').strip()}")
    return ProbeResult.ok("cmake found")


# =============================================================================
# MSBuild Check
# =============================================================================

_BARE_VERSION = re.compile(r"^\d+(\.\d+){1,3}$")


def _msbuild_banner(output: ProcessOutput) -> Optional[str]:
    """Return a printable version line when the output looks like MSBuild."""
    text = output.text.strip()
    lower = text.lower()
    if "msbuild version" in lower or ("microsoft" in lower and "build engine" in lower):
        return output.first_line or "MSBuild"
    lines = text.splitlines()
    if lines and _BARE_VERSION.match(lines[-1].strip()):
        return f"MSBuild {lines[-1].strip()}"
    return None


def _msbuild_from_vswhere(env: HostEnvironment, settings: PackcheckSettings) -> Optional[ProbeResult]:
    vswhere = _vswhere_path(env)
    if vswhere is None or not env.is_file(vswhere):
        return None

    output, failure = _run_tool(
        env,
        [vswhere, "-latest", "-products", "*", "-requires", "Microsoft.Component.MSBuild",
         "-property", "installationPath"],
        settings,
    )
    if failure or not output.stdout.strip():
        return None

    vs_path = output.stdout.strip()
    for version_dir in ("Current", "15.0"):
        msbuild = env.join(vs_path, "MSBuild", version_dir, "Bin", "MSBuild.exe")
        if not env.is_file(msbuild):
            continue
        output, failure = _run_tool(env, [msbuild, "-version"], settings)
        if failure:
            return None
        banner = _msbuild_banner(output)
        return ProbeResult.ok(f"{banner} ({msbuild})") if banner else None
    return None


def check_msbuild(env: HostEnvironment, settings: PackcheckSettings) -> ProbeResult:
    """
    Check for MSBuild.

    Resolved through vswhere first; falls back to a bare `msbuild`
    on PATH when the Visual Studio lookup yields nothing usable.
    """
    result = _msbuild_from_vswhere(env, settings)
    if result is not None:
        return result

    logger.debug("MSBuild not resolved through vswhere, trying PATH")
    hint = "Install the MSBuild component of Visual Studio or add msbuild to PATH"
    output, failure = _run_tool(env, ["msbuild", "-version"], settings)
    if failure:
        if failure.status == ProbeStatus.NOT_FOUND:
            return ProbeResult.not_found("MSBuild not found", hint=hint)
        return failure

    banner = _msbuild_banner(output)
    if banner:
        return ProbeResult.ok(banner)
    return ProbeResult.not_found("msbuild did not report a version", hint=hint)


# =============================================================================
# Git Check
# =============================================================================

def check_git(env: HostEnvironment, settings: PackcheckSettings) -> ProbeResult:
    """Check that git is on PATH."""
    output, failure = _run_tool(env, ["git", "--version"], settings)
    if failure:
        if failure.status == ProbeStatus.NOT_FOUND:
            return ProbeResult.not_found("git not found on PATH", hint="Install Git from git-scm.com")
        return failure

    if "git version" in output.text.lower():
        return ProbeResult.ok(output.text.strip())
    return ProbeResult.not_found("git did not report a version", hint="Install Git from git-scm.com")


# =============================================================================
# Informational Checks
# =============================================================================

def check_android_studio(env: HostEnvironment, settings: PackcheckSettings) -> ProbeResult:
    """Informational: look for an Android Studio install (SDK Manager host)."""
    relative = ("Android", "Android Studio", "bin", env.executable_name("studio64"))
    bases = [env.known_folder("program_files"), env.known_folder("local_app_data"), r"C:\Program Files"]
    for base in bases:
        if not base:
            continue
        studio = env.join(base, *relative)
        if env.is_file(studio):
            return ProbeResult.ok(env.join(base, "Android", "Android Studio"))
    return ProbeResult.not_found("Android Studio not found")


def check_oculus_sdk(env: HostEnvironment, settings: PackcheckSettings) -> ProbeResult:
    """Informational: Oculus SDK or runtime indicators."""
    candidates = list(settings.oculus_sdk_dirs)
    program_files = env.known_folder("program_files")
    program_files_x86 = env.known_folder("program_files_x86")
    for base in (program_files, program_files_x86):
        if base:
            candidates.append(env.join(base, "Oculus"))

    for path in candidates:
        if env.is_dir(path):
            return ProbeResult.ok(f"Found Oculus SDK at {path}")

    if program_files:
        runtime = env.join(program_files, "Oculus", "Support", "oculus-runtime", "OVRServer_x64.exe")
        if env.is_file(runtime):
            return ProbeResult.ok("Oculus runtime detected")

    return ProbeResult.not_found("No Oculus SDK found, but it may not be required for building")


# =============================================================================
# Probe Registry
# =============================================================================

@dataclass(frozen=True)
class ProbeDefinition:
    """A registered check before it is bound to a host."""
    name: str
    label: str
    check: ProbeCheck
    required: bool = True


# Declared order drives terminal output only; aggregation is order-free.
PROBE_DEFINITIONS: List[ProbeDefinition] = [
    ProbeDefinition("dotnet_framework", ".NET Framework Developer Pack", check_dotnet_framework),
    ProbeDefinition("visual_studio", "Visual Studio", check_visual_studio),
    ProbeDefinition("android_sdk", "Android SDK", check_android_sdk),
    ProbeDefinition("android_ndk", "Android NDK", check_android_ndk),
    ProbeDefinition("java_jdk", "Java JDK", check_java_jdk),
    ProbeDefinition("linux_toolchain", "Linux cross-compilation toolchain", check_linux_toolchain),
    ProbeDefinition("cmake", "CMake", check_cmake),
    ProbeDefinition("msbuild", "MSBuild", check_msbuild),
    ProbeDefinition("git", "Git", check_git),
    ProbeDefinition("android_studio", "Android Studio", check_android_studio, required=False),
    ProbeDefinition("oculus_sdk", "Oculus integration", check_oculus_sdk, required=False),
]

# Probes that MUST pass before a packaging command is synthesized
REQUIRED_PROBES = frozenset(d.name for d in PROBE_DEFINITIONS if d.required)


def bind_probe(
    definition: ProbeDefinition,
    env: HostEnvironment,
    settings: PackcheckSettings = DEFAULT_SETTINGS,
) -> Probe:
    return Probe(
        name=definition.name,
        label=definition.label,
        check=functools.partial(definition.check, env, settings),
        required=definition.required,
    )


def build_probes(
    env: HostEnvironment,
    settings: PackcheckSettings = DEFAULT_SETTINGS,
    definitions: Optional[Sequence[ProbeDefinition]] = None,
) -> List[Probe]:
    """Bind every registered probe to a host, preserving declared order."""
    definitions = PROBE_DEFINITIONS if definitions is None else definitions
    return [bind_probe(d, env, settings) for d in definitions]


def get_probe(
    name: str,
    env: HostEnvironment,
    settings: PackcheckSettings = DEFAULT_SETTINGS,
) -> Probe:
    """Bind a single registered probe by name (used by the certifier)."""
    for definition in PROBE_DEFINITIONS:
        if definition.name == name:
            return bind_probe(definition, env, settings)
    raise KeyError(f"Unknown probe: {name}")

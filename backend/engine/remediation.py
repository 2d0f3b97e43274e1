"""
Remediation guidance for failed platform certification.

Everything here is text for the operator. Nothing is executed except
the engine's own `Build -list` query, which is read-only and bounded by
the probe timeout.
"""

import logging
from typing import List, Optional

from config import DEFAULT_SETTINGS, PackcheckSettings
from host import HostEnvironment, ToolNotFound, ToolTimeout
from readiness.checks import find_android_ndk, find_android_sdk, linux_toolchain_setup_steps

logger = logging.getLogger(__name__)

SDK_PLACEHOLDER = "<path-to-android-sdk>"
NDK_PLACEHOLDER = "<path-to-android-ndk>"


def android_fix_steps(settings: PackcheckSettings = DEFAULT_SETTINGS) -> str:
    """Steps for rebuilding a source engine with Android support."""
    sdk_vars = " or ".join(settings.android_sdk_env_vars)
    return "\n".join([
        "TO FIX ANDROID SUPPORT IN YOUR UE4 SOURCE BUILD:",
        "1. Ensure Android SDK/NDK environment variables are set:",
        f"   - {sdk_vars}",
        f"   - {settings.android_ndk_env_var} (optional but recommended)",
        "2. From your UE4 source directory, run:",
        "   .\\Setup.bat",
        "   .\\GenerateProjectFiles.bat",
        "3. Build UE4 Editor (includes automation tools):",
        "   .\\Engine\\Build\\BatchFiles\\Build.bat UE4Editor Win64 Development",
        "4. Alternative: use Visual Studio:",
        "   - Open UE4.sln in Visual Studio",
        "   - Build Solution (Development Editor | Win64)",
    ])


def android_rebuild_commands(
    env: HostEnvironment,
    engine_root: str,
    settings: PackcheckSettings = DEFAULT_SETTINGS,
) -> str:
    """
    Copy-paste command sequence that rebuilds AutomationTool with Android
    support.

    Detected SDK/NDK locations are filled in; anything undetected is left
    as a placeholder. The flavor (batch or shell) follows the host OS.
    """
    sdk_path, _ = find_android_sdk(env, settings)
    ndk_path = find_android_ndk(env, settings)
    sdk_var = settings.android_sdk_env_vars[0] if settings.android_sdk_env_vars else "ANDROID_HOME"
    ndk_var = settings.android_ndk_env_var
    sdk_value = sdk_path or SDK_PLACEHOLDER
    ndk_value = ndk_path or NDK_PLACEHOLDER

    if env.is_windows:
        return "\n".join([
            f'cd /d "{engine_root}"',
            "",
            "REM Set Android environment variables BEFORE building:",
            f"set {sdk_var}={sdk_value}",
            f"set {ndk_var}={ndk_value}",
            "",
            "REM 1. Clean existing automation tools:",
            "if exist Engine\\Binaries\\DotNET\\AutomationTool rmdir /s /q Engine\\Binaries\\DotNET\\AutomationTool",
            "if exist Engine\\Binaries\\DotNET\\AutomationScripts rmdir /s /q Engine\\Binaries\\DotNET\\AutomationScripts",
            "",
            "REM 2. Update dependencies and generate project files:",
            "Setup.bat",
            "GenerateProjectFiles.bat",
            "",
            "REM 3. Build UE4Editor (rebuilds automation tools with Android support):",
            "Engine\\Build\\BatchFiles\\Build.bat UE4Editor Win64 Development",
            "",
            "REM 4. Verify Android.Automation.dll was created:",
            "dir Engine\\Binaries\\DotNET\\AutomationScripts\\Android\\Android.Automation.dll",
            "",
            "REM 5. Alternative: build automation tools with MSBuild:",
            "msbuild Engine\\Source\\Programs\\AutomationTool\\AutomationTool.csproj -p:Configuration=Development",
            "msbuild Engine\\Source\\Programs\\AutomationTool\\Scripts\\AutomationScripts.Automation.csproj"
            " -p:Configuration=Development",
        ])

    return "\n".join([
        f'cd "{engine_root}"',
        "",
        "# Set Android environment variables BEFORE building:",
        f'export {sdk_var}="{sdk_value}"',
        f'export {ndk_var}="{ndk_value}"',
        "",
        "# 1. Clean existing automation tools:",
        "rm -rf Engine/Binaries/DotNET/AutomationTool Engine/Binaries/DotNET/AutomationScripts",
        "",
        "# 2. Update dependencies and generate project files:",
        "./Setup.sh",
        "./GenerateProjectFiles.sh",
        "",
        "# 3. Build UE4Editor (rebuilds automation tools with Android support):",
        "Engine/Build/BatchFiles/Linux/Build.sh UE4Editor Linux Development",
        "",
        "# 4. Verify Android.Automation.dll was created:",
        "ls Engine/Binaries/DotNET/AutomationScripts/Android/Android.Automation.dll",
    ])


def build_script_path(env: HostEnvironment, engine_root: str) -> str:
    if env.is_windows:
        return env.join(engine_root, "Engine", "Build", "BatchFiles", "Build.bat")
    return env.join(engine_root, "Engine", "Build", "BatchFiles", "Linux", "Build.sh")


def list_build_targets(
    env: HostEnvironment,
    engine_root: str,
    settings: PackcheckSettings = DEFAULT_SETTINGS,
) -> Optional[str]:
    """
    Ask the engine build script for its target list.

    Returns:
        Combined stdout/stderr text, or None when the script is absent,
        hung, or printed nothing
    """
    script = build_script_path(env, engine_root)
    if not env.is_file(script):
        return None
    try:
        output = env.run([script, "-list"], timeout=settings.probe_timeout_seconds, cwd=engine_root)
    except (ToolNotFound, ToolTimeout) as e:
        logger.debug("Could not list build targets: %s", e)
        return None

    parts = [text.strip() for text in (output.stdout, output.stderr) if text and text.strip()]
    return "\n".join(parts) or None


def android_remediation(
    env: HostEnvironment,
    engine_root: str,
    settings: PackcheckSettings = DEFAULT_SETTINGS,
) -> str:
    """Full Android guidance: fix steps, rebuild commands, build targets."""
    sections: List[str] = [
        android_fix_steps(settings),
        "",
        "ANDROID SUPPORT REBUILD COMMANDS:",
        android_rebuild_commands(env, engine_root, settings),
    ]
    targets = list_build_targets(env, engine_root, settings)
    if targets:
        sections.extend(["", "AVAILABLE BUILD TARGETS:", targets])
    return "\n".join(sections)


def linux_remediation(settings: PackcheckSettings = DEFAULT_SETTINGS) -> str:
    return linux_toolchain_setup_steps(settings)

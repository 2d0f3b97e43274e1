"""
Operator notes printed after a packaging command is synthesized.

Plain text only: what the package should contain, how long packaging
takes and, for Linux, how to deploy the result.
"""

from typing import List

from config import DEFAULT_SETTINGS, PackcheckSettings
from engine import Platform


def output_folder_hint(platform: Platform, settings: PackcheckSettings = DEFAULT_SETTINGS) -> str:
    """Warning sign to look for in the archive directory, if any."""
    if platform != Platform.ANDROID:
        return ""
    folder = f"Android_{settings.android_texture_format}"
    return (
        f"If the APK lands in a plain 'Android' folder instead of '{folder}', "
        "packaging did not complete or ran with the wrong parameters."
    )


def packaging_notes(
    platform: Platform,
    project_name: str,
    settings: PackcheckSettings = DEFAULT_SETTINGS,
) -> List[str]:
    """Per-platform notes, one line each."""
    config = settings.client_config.upper()
    if platform == Platform.ANDROID:
        return [
            f"- Produces a {config} build for development and testing",
            "- The APK bundles all content, assets and prerequisites (expect ~1.5GB)",
            "- Signed with the debug keystore; no distribution signing needed",
            "- Packaging usually takes 45-90 minutes depending on project size",
            "- Expected in the output directory:",
            "  * .apk file (the Android application)",
            f"  * Install_{project_name}.bat (installs the APK on a device)",
            f"  * Uninstall_{project_name}.bat (removes it)",
            "- On failure, check the AutomationTool log files",
            "",
            "For Google Play distribution:",
            "- Create a distribution keystore in Project Settings > Android",
            "- Add -distribution to the packaging command",
        ]
    return [
        f"- Produces a {config} build for Linux deployment",
        "- Cross-compiled with the Linux toolchain; includes all content and dependencies",
        "- Packaging usually takes 30-60 minutes depending on project size",
        "- Expected in the output directory:",
        f"  * {project_name} (the Linux executable)",
        "  * .pak files (packaged content)",
        "  * .so shared libraries",
        "- On failure, check the AutomationTool log files",
        "",
        "DEPLOYMENT NOTES:",
        "- Copy the whole Linux folder to the target system",
        f"- Make the binary executable: chmod +x {project_name}",
        f"- Run it from a terminal: ./{project_name}",
        "- The target needs the usual runtime libraries (OpenGL and so on)",
    ]

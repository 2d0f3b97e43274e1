"""
Engine Installation Detection - locate a usable Unreal Engine root.

An installation is only valid when its AutomationTool entry point
exists. Candidates are searched in a fixed priority order:
1. Packaged (launcher) installs
2. Source-built trees
3. UE4_ROOT / UNREAL_ENGINE_ROOT environment variables
4. Registry entries under SOFTWARE\\EpicGames\\Unreal Engine (sorted)

The first verified candidate wins, so the result is reproducible for an
unchanged filesystem and registry.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from config import DEFAULT_SETTINGS, PackcheckSettings
from host import HostEnvironment

logger = logging.getLogger(__name__)


# =============================================================================
# Engine Installation Info
# =============================================================================

@dataclass(frozen=True)
class EngineInstallation:
    """
    A verified engine installation.

    Attributes:
        root_path: Engine root (the folder containing Engine/)
        automation_tool: Full path to the AutomationTool entry point
        origin: Which candidate group produced it
                ("install_dir" | "source_dir" | "env:<NAME>" | "registry:<subkey>")
    """
    root_path: str
    automation_tool: str
    origin: str

    def path(self, env: HostEnvironment, *parts: str) -> str:
        """Join parts beneath the engine root."""
        return env.join(self.root_path, *parts)

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON output."""
        return {
            "root_path": self.root_path,
            "automation_tool": self.automation_tool,
            "origin": self.origin,
        }


# =============================================================================
# Candidate Search
# =============================================================================

def automation_tool_paths(env: HostEnvironment, root: str) -> List[str]:
    """
    Entry points that mark root as an engine installation.

    Windows: Engine/Binaries/DotNET/AutomationTool.exe.
    POSIX hosts additionally accept the UE5-style
    Engine/Binaries/DotNET/AutomationTool/AutomationTool.
    """
    dotnet = env.join(root, "Engine", "Binaries", "DotNET")
    if env.is_windows:
        return [env.join(dotnet, "AutomationTool.exe")]
    return [
        env.join(dotnet, "AutomationTool.exe"),
        env.join(dotnet, "AutomationTool", "AutomationTool"),
    ]


def find_automation_tool(env: HostEnvironment, root: str) -> Optional[str]:
    """Return the entry point under root, or None when root is not an engine."""
    if not root or not env.is_dir(root):
        return None
    for candidate in automation_tool_paths(env, root):
        if env.is_file(candidate):
            return candidate
    return None


def engine_candidates(
    env: HostEnvironment,
    settings: PackcheckSettings = DEFAULT_SETTINGS,
) -> List[Tuple[str, str]]:
    """
    Path-based candidates in priority order.

    Returns:
        (path, origin) pairs; unset environment variables are skipped
    """
    candidates = [(path, "install_dir") for path in settings.engine_install_dirs]
    candidates.extend((path, "source_dir") for path in settings.engine_source_dirs)
    for var in settings.engine_env_vars:
        value = env.getenv(var)
        if value:
            candidates.append((value, f"env:{var}"))
    return candidates


def registry_candidates(
    env: HostEnvironment,
    settings: PackcheckSettings = DEFAULT_SETTINGS,
) -> Iterator[Tuple[str, str]]:
    """
    Installed directories recorded by the Epic Games Launcher.

    Subkeys are enumerated in sorted order; entries without a value are
    skipped.
    """
    base = settings.engine_registry_key
    for subkey in env.registry_subkeys(base):
        value = env.registry_value(f"{base}\\{subkey}", settings.engine_registry_value)
        if value:
            yield str(value), f"registry:{subkey}"


def _verify(env: HostEnvironment, path: str, origin: str) -> Optional[EngineInstallation]:
    """Installation for path if it holds AutomationTool, with absolute paths."""
    automation_tool = find_automation_tool(env, path)
    if automation_tool is None:
        return None
    return EngineInstallation(env.abspath(path), env.abspath(automation_tool), origin)


def locate_engine(
    env: HostEnvironment,
    settings: PackcheckSettings = DEFAULT_SETTINGS,
) -> Optional[EngineInstallation]:
    """
    Find the highest-priority verified engine installation.

    Relative candidates (environment variables, settings) are made
    absolute so the command works from any directory.

    Returns:
        EngineInstallation, or None when no candidate verifies
    """
    for path, origin in engine_candidates(env, settings):
        installation = _verify(env, path, origin)
        if installation:
            logger.info("Engine found at %s (%s)", installation.root_path, origin)
            return installation
        logger.debug("Engine candidate rejected: %s", path)

    logger.debug("No path candidate verified, checking registry")
    for path, origin in registry_candidates(env, settings):
        installation = _verify(env, path, origin)
        if installation:
            logger.info("Engine found at %s (%s)", installation.root_path, origin)
            return installation

    logger.info("No Unreal Engine installation found")
    return None

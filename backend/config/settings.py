"""
PackcheckSettings - every constant the probes, locator and synthesizer use.

Defaults describe an Unreal Engine 4.27 Windows build host packaging for
Android (API 28-30, NDK r21) and Linux (v19/v20 clang cross toolchains).

Resolution order in load_settings():
1. Dataclass defaults
2. JSON file named by PACKCHECK_CONFIG (keys are field names)
3. PACKCHECK_PROBE_TIMEOUT / PACKCHECK_MAX_WORKERS environment variables

Settings are immutable once loaded; use dataclasses.replace() for overrides.
"""

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PACKCHECK_CONFIG"
TIMEOUT_ENV_VAR = "PACKCHECK_PROBE_TIMEOUT"
WORKERS_ENV_VAR = "PACKCHECK_MAX_WORKERS"


class SettingsError(ValueError):
    """Configuration file or override could not be applied."""

    pass


@dataclass(frozen=True)
class PackcheckSettings:
    """
    Complete, immutable Packcheck configuration.

    Tuple fields keep their declared order; candidate lists are searched
    front to back.
    """

    engine_version: str = "4.27"

    # Execution
    probe_timeout_seconds: float = 10.0
    max_workers: int = 4

    # .NET Framework developer pack (4.6.2 = release 394802)
    dotnet_registry_key: str = r"SOFTWARE\Microsoft\NET Framework Setup\NDP\v4\Full"
    dotnet_min_release: int = 394802
    dotnet_version_label: str = "4.6.2"

    # Visual Studio 2022 = [17.0,18.0)
    visual_studio_year: str = "2022"
    visual_studio_version_range: str = "[17.0,18.0)"

    # Android
    android_sdk_env_vars: Tuple[str, ...] = ("ANDROID_HOME", "ANDROID_SDK_ROOT")
    android_sdk_dirs: Tuple[str, ...] = (r"C:\Android\Sdk",)
    android_ndk_env_var: str = "ANDROID_NDK_HOME"
    android_api_levels: Tuple[int, ...] = (28, 29, 30)
    android_ndk_recommended_major: int = 21
    android_ndk_recommended_label: str = "r21b"
    android_texture_format: str = "ASTC"

    # Java
    java_recommended_major: int = 8

    # Linux cross-compilation toolchain
    linux_toolchain_names: Tuple[str, ...] = (
        "v19_clang-11.0.1-centos7",
        "v20_clang-13.0.1-centos7",
    )
    linux_toolchain_roots: Tuple[str, ...] = (r"C:\UnrealToolchains",)
    linux_toolchain_fallback_roots: Tuple[str, ...] = (r"D:\UnrealToolchains",)
    linux_toolchain_env_var: str = "LINUX_MULTIARCH_ROOT"
    linux_target_triple: str = "x86_64-unknown-linux-gnu"

    # Oculus (informational)
    oculus_sdk_dirs: Tuple[str, ...] = (r"C:\OculusSDK",)

    # Engine locator
    engine_install_dirs: Tuple[str, ...] = (
        r"C:\Program Files\Epic Games\UE_4.27",
        r"C:\Program Files (x86)\Epic Games\UE_4.27",
    )
    engine_source_dirs: Tuple[str, ...] = (
        r"C:\UnrealEngine",
        r"C:\UE4",
        r"C:\UE_4.27",
        r"D:\UnrealEngine",
        r"D:\UE4",
        r"D:\UE_4.27",
    )
    engine_env_vars: Tuple[str, ...] = ("UE4_ROOT", "UNREAL_ENGINE_ROOT")
    engine_registry_key: str = r"SOFTWARE\EpicGames\Unreal Engine"
    engine_registry_value: str = "InstalledDirectory"

    # Command synthesis
    client_config: str = "Shipping"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], base: Optional["PackcheckSettings"] = None) -> "PackcheckSettings":
        """
        Apply a mapping of field overrides on top of base (or defaults).

        Lists become tuples. Unknown keys are rejected.
        """
        base = base or cls()
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise SettingsError(f"Unknown settings key(s): {', '.join(unknown)}")

        overrides: Dict[str, Any] = {}
        for key, value in data.items():
            current = getattr(base, key)
            if isinstance(current, tuple):
                if not isinstance(value, (list, tuple)):
                    raise SettingsError(f"Setting '{key}' must be a list")
                value = tuple(value)
            elif isinstance(current, bool) or not isinstance(value, type(current)):
                # Allow ints where floats are expected
                if not (isinstance(current, float) and isinstance(value, int)):
                    raise SettingsError(
                        f"Setting '{key}' must be {type(current).__name__}, got {type(value).__name__}"
                    )
                value = float(value)
            overrides[key] = value
        return replace(base, **overrides)


DEFAULT_SETTINGS = PackcheckSettings()


def _env_number(environ: Mapping[str, str], name: str, kind: type) -> Optional[Any]:
    raw = environ.get(name)
    if not raw:
        return None
    try:
        value = kind(raw)
    except ValueError:
        raise SettingsError(f"{name} must be a number, got '{raw}'")
    if value <= 0:
        raise SettingsError(f"{name} must be positive, got '{raw}'")
    return value


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    config_path: Optional[Path] = None,
) -> PackcheckSettings:
    """
    Load settings from defaults, an optional JSON file and env overrides.

    Args:
        environ: Environment mapping (default: os.environ)
        config_path: Explicit JSON path; falls back to PACKCHECK_CONFIG

    Raises:
        SettingsError: Unreadable file, invalid JSON or invalid values
    """
    environ = os.environ if environ is None else environ
    settings = DEFAULT_SETTINGS

    if config_path is None and environ.get(CONFIG_ENV_VAR):
        config_path = Path(environ[CONFIG_ENV_VAR])

    if config_path is not None:
        try:
            data = json.loads(Path(config_path).read_text(encoding="utf-8"))
        except OSError as e:
            raise SettingsError(f"Cannot read config file {config_path}: {e}")
        except json.JSONDecodeError as e:
            raise SettingsError(f"Invalid JSON in {config_path}: {e}")
        if not isinstance(data, dict):
            raise SettingsError(f"Config file {config_path} must contain a JSON object")
        settings = PackcheckSettings.from_dict(data, base=settings)
        logger.debug("Loaded settings overrides from %s", config_path)

    timeout = _env_number(environ, TIMEOUT_ENV_VAR, float)
    if timeout is not None:
        settings = replace(settings, probe_timeout_seconds=timeout)

    workers = _env_number(environ, WORKERS_ENV_VAR, int)
    if workers is not None:
        settings = replace(settings, max_workers=workers)

    return settings

"""
Packaging command synthesis.

The AutomationTool invocation is assembled from typed arguments by a
builder keyed on platform and only rendered to text at the boundary
(terminal output, JSON, build script). Build scripts get the argv quoted
for their own interpreter: shlex.quote for sh, double quotes and %%
for cmd.exe. Synthesis is a pure function of
(EngineInstallation, PackagingRequest, settings): the same inputs always
produce identical arguments and predicted output path.

Argument order:
    BuildCookRun -project="<abs>" -platform=P -targetplatform=P
    -clientconfig=Shipping <cook/stage/package/archive flags>
    -archivedirectory="<abs>" [platform-only flags] <trailing flags>
"""

import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from config import DEFAULT_SETTINGS, PackcheckSettings
from engine import EngineInstallation, Platform

from .models import PackagingRequest

AUTOMATION_COMMAND = "BuildCookRun"

COOK_STAGE_FLAGS: Tuple[str, ...] = (
    "-cook",
    "-compressed",
    "-iterativecooking",
    "-allmaps",
    "-build",
    "-stage",
    "-pak",
    "-package",
    "-archive",
)

# Prerequisites installer is only bundled for Android
PLATFORM_ONLY_FLAGS: Dict[Platform, Tuple[str, ...]] = {
    Platform.ANDROID: ("-prereqs",),
    Platform.LINUX: (),
}

TRAILING_FLAGS: Tuple[str, ...] = (
    "-nodebuginfo",
    "-nocompileeditor",
    "-NoSubmit",
    "-utf8output",
)

# cmd.exe operators that must not appear outside double quotes
_BATCH_SPECIAL = frozenset(" \t&|<>^()")


def quote_for_batch(token: str) -> str:
    """
    Quote one argv token for a .bat file.

    Tokens holding spaces or cmd.exe operators are wrapped in double
    quotes, with trailing backslashes doubled so the closing quote
    survives argv parsing. Percent signs are doubled so the batch
    processor keeps them literal. Windows paths cannot contain double
    quotes, so none are escaped.
    """
    if any(c in _BATCH_SPECIAL for c in token):
        stripped = token.rstrip("\\")
        trailing = len(token) - len(stripped)
        token = '"' + stripped + "\\" * (2 * trailing) + '"'
    return token.replace("%", "%%")


def quote_for_shell(token: str) -> str:
    return shlex.quote(token)


@dataclass(frozen=True)
class Argument:
    """
    One command-line token.

    Attributes:
        name: Flag or verb (e.g., "-project", "BuildCookRun")
        value: Optional value joined with "="
        quoted: Wrap the value in double quotes when rendering
    """
    name: str
    value: Optional[str] = None
    quoted: bool = False

    def render(self) -> str:
        if self.value is None:
            return self.name
        value = f'"{self.value}"' if self.quoted else self.value
        return f"{self.name}={value}"

    def raw(self) -> str:
        """Token for a direct process argv (no shell quoting)."""
        if self.value is None:
            return self.name
        return f"{self.name}={self.value}"


class PackagingCommandBuilder:
    """Builds the ordered BuildCookRun arguments for one platform."""

    def __init__(self, platform: Platform, client_config: str = DEFAULT_SETTINGS.client_config):
        self.platform = platform
        self.client_config = client_config

    def build(self, project_file: str, archive_dir: str) -> Tuple[Argument, ...]:
        platform = self.platform.value
        arguments: List[Argument] = [
            Argument(AUTOMATION_COMMAND),
            Argument("-project", project_file, quoted=True),
            Argument("-platform", platform),
            Argument("-targetplatform", platform),
            Argument("-clientconfig", self.client_config),
        ]
        arguments.extend(Argument(flag) for flag in COOK_STAGE_FLAGS)
        arguments.append(Argument("-archivedirectory", archive_dir, quoted=True))
        arguments.extend(Argument(flag) for flag in PLATFORM_ONLY_FLAGS[self.platform])
        arguments.extend(Argument(flag) for flag in TRAILING_FLAGS)
        return tuple(arguments)


@dataclass(frozen=True)
class PackagingCommand:
    """
    A synthesized AutomationTool invocation.

    Attributes:
        executable: Absolute path of AutomationTool
        parts: Typed arguments in order
        predicted_output_path: Where the package is expected to appear
                               (advisory, never verified)
        platform: Target platform
        project_name: Project descriptor stem
    """
    executable: str
    parts: Tuple[Argument, ...]
    predicted_output_path: str
    platform: Platform
    project_name: str

    @property
    def arguments(self) -> Tuple[str, ...]:
        """Rendered argument tokens, path values quoted."""
        return tuple(argument.render() for argument in self.parts)

    def render(self) -> str:
        """Display form of the command line (terminal and JSON)."""
        return " ".join([f'"{self.executable}"', *self.arguments])

    def argv(self) -> List[str]:
        return [self.executable, *(argument.raw() for argument in self.parts)]

    def command_line(self, host_os: str) -> str:
        """argv quoted for the script interpreter of host_os."""
        quote = quote_for_batch if host_os == "windows" else quote_for_shell
        return " ".join(quote(token) for token in self.argv())

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON output."""
        return {
            "executable": self.executable,
            "arguments": list(self.arguments),
            "command_line": self.render(),
            "predicted_output_path": self.predicted_output_path,
            "platform": self.platform.value,
            "project_name": self.project_name,
        }


def predict_output_path(
    request: PackagingRequest,
    settings: PackcheckSettings = DEFAULT_SETTINGS,
) -> str:
    """
    Expected package location.

    Android nests under a texture-format directory (Android_ASTC) and
    produces <project>-Android-<config>.apk; Linux produces the bare
    executable under <out>/Linux/<project>/Binaries/Linux.
    """
    out = Path(request.absolute_output_dir)
    name = request.project_name
    if request.platform == Platform.ANDROID:
        apk = f"{name}-{Platform.ANDROID.value}-{settings.client_config}.apk"
        return str(out / f"{Platform.ANDROID.value}_{settings.android_texture_format}" / apk)
    linux = Platform.LINUX.value
    return str(out / linux / name / "Binaries" / linux / name)


def build_packaging_command(
    installation: EngineInstallation,
    request: PackagingRequest,
    settings: PackcheckSettings = DEFAULT_SETTINGS,
) -> PackagingCommand:
    """Synthesize the packaging command for a certified installation."""
    builder = PackagingCommandBuilder(request.platform, settings.client_config)
    return PackagingCommand(
        executable=installation.automation_tool,
        parts=builder.build(request.absolute_project_file, request.absolute_output_dir),
        predicted_output_path=predict_output_path(request, settings),
        platform=request.platform,
        project_name=request.project_name,
    )

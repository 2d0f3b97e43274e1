"""
Packaging request models.

A PackagingRequest is the triple (project descriptor, output directory,
target platform) that parameterizes synthesis. It is validated with
Pydantic on construction: unknown fields are rejected and the project
descriptor must exist and carry the .uproject extension.
"""

import os
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from engine.platforms import DEFAULT_PLATFORM, Platform

from .errors import InputInvalid

PROJECT_EXTENSION = ".uproject"


def parse_platform(value: Union[str, Platform, None]) -> Platform:
    """Platform.parse, reporting unsupported values as InputInvalid."""
    try:
        return Platform.parse(value)
    except ValueError as e:
        raise InputInvalid(str(e))


class PackagingRequest(BaseModel):
    """
    Immutable packaging request.

    Attributes:
        project_file: Path to an existing .uproject file
        output_dir: Archive directory (created by prepare_output_dir)
        platform: Target platform, Android by default
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    project_file: Path
    output_dir: Path
    platform: Platform = DEFAULT_PLATFORM

    @field_validator("platform", mode="before")
    @classmethod
    def validate_platform(cls, v):
        return Platform.parse(v)

    @field_validator("project_file")
    @classmethod
    def validate_project_file(cls, v: Path) -> Path:
        """Project descriptor must exist and be a .uproject file."""
        if v.suffix.lower() != PROJECT_EXTENSION:
            raise ValueError(f"File must be a .uproject file: {v}")
        if not v.is_file():
            raise ValueError(f".uproject file not found: {v}")
        return v

    @field_validator("output_dir")
    @classmethod
    def validate_output_dir(cls, v: Path) -> Path:
        if v.exists() and not v.is_dir():
            raise ValueError(f"Output path is not a directory: {v}")
        return v

    @property
    def project_name(self) -> str:
        return self.project_file.stem

    @property
    def absolute_project_file(self) -> str:
        return str(self.project_file.resolve())

    @property
    def absolute_output_dir(self) -> str:
        return str(self.output_dir.resolve())

    @property
    def project_dir(self) -> str:
        """Directory holding the project descriptor (where scripts go)."""
        return str(self.project_file.resolve().parent)

    @classmethod
    def from_arguments(
        cls,
        project_file: Union[str, Path],
        output_dir: Union[str, Path],
        platform: Optional[str] = None,
    ) -> "PackagingRequest":
        """
        Build a request from CLI/API input.

        Raises:
            InputInvalid: Any field fails validation
        """
        # Unsupported platform is reported on its own, before path checks
        parsed_platform = parse_platform(platform)
        # Path("") would silently become the working directory
        if not str(output_dir).strip():
            raise InputInvalid("Output directory cannot be empty")
        try:
            return cls(
                project_file=Path(project_file),
                output_dir=Path(output_dir),
                platform=parsed_platform,
            )
        except ValidationError as e:
            raise InputInvalid(_first_error(e))

    def prepare_output_dir(self) -> bool:
        """
        Create the output directory if needed and confirm it is writable.

        Returns:
            True if the directory was created by this call

        Raises:
            InputInvalid: Directory cannot be created or written
        """
        created = False
        if not self.output_dir.exists():
            try:
                self.output_dir.mkdir(parents=True, exist_ok=True)
                created = True
            except OSError as e:
                raise InputInvalid(f"Cannot create output directory: {e}")

        if not os.access(self.output_dir, os.W_OK):
            raise InputInvalid(f"Output directory is not writable: {self.output_dir}")
        return created

    def check_output_dir(self) -> None:
        """
        Confirm the output directory could be prepared, without creating it.

        The nearest existing ancestor must be a writable directory.

        Raises:
            InputInvalid: Directory could not be created or written
        """
        existing = self.output_dir.absolute()
        while not existing.exists() and existing.parent != existing:
            existing = existing.parent
        if not existing.is_dir():
            raise InputInvalid(f"Cannot create output directory: {existing} is not a directory")
        if not os.access(existing, os.W_OK):
            raise InputInvalid(f"Output directory is not writable: {existing}")

    def to_dict(self) -> dict:
        return {
            "project_file": self.absolute_project_file,
            "output_dir": self.absolute_output_dir,
            "platform": self.platform.value,
            "project_name": self.project_name,
        }


def _first_error(error: ValidationError) -> str:
    """Readable message for the first Pydantic error."""
    details = error.errors()
    if not details:
        return str(error)
    message = details[0].get("msg", str(error))
    prefix = "Value error, "
    if message.startswith(prefix):
        message = message[len(prefix):]
    return message

"""
Supported packaging target platforms.
"""

from enum import Enum
from typing import Union


class Platform(str, Enum):
    """
    Supported packaging targets.

    Values are the identifiers AutomationTool expects.
    """

    ANDROID = "Android"
    LINUX = "Linux"

    @classmethod
    def parse(cls, value: Union[str, "Platform", None]) -> "Platform":
        """
        Case-insensitive lookup; None means the default (Android).

        Raises:
            ValueError: The platform is not supported
        """
        if value is None:
            return cls.ANDROID
        if isinstance(value, cls):
            return value
        for platform in cls:
            if platform.value.lower() == str(value).strip().lower():
                return platform
        supported = ", ".join(p.value for p in cls)
        raise ValueError(f"Unsupported platform '{value}'. Supported platforms: {supported}")


DEFAULT_PLATFORM = Platform.ANDROID

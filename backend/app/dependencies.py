"""
Request-scoped collaborators for the HTTP API.

Routes never touch the operating system directly; they receive a
HostEnvironment and settings through these dependencies so tests can
substitute an InMemoryEnvironment via app.dependency_overrides.
"""

from config import PackcheckSettings, load_settings
from host import HostEnvironment, SystemEnvironment


def get_environment() -> HostEnvironment:
    return SystemEnvironment()


def get_settings() -> PackcheckSettings:
    return load_settings()

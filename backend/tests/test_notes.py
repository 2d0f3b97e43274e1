"""
Tests for post-synthesis operator notes.
"""

from dataclasses import replace

from config import DEFAULT_SETTINGS
from engine import Platform
from synthesis import output_folder_hint, packaging_notes


class TestOutputFolderHint:
    """Android gets a hint about the texture-format archive folder."""

    def test_android_hint_names_texture_folder(self):
        assert "'Android_ASTC'" in output_folder_hint(Platform.ANDROID)

    def test_texture_format_from_settings(self):
        settings = replace(DEFAULT_SETTINGS, android_texture_format="ETC2")
        assert "'Android_ETC2'" in output_folder_hint(Platform.ANDROID, settings)

    def test_no_hint_for_linux(self):
        assert output_folder_hint(Platform.LINUX) == ""


class TestPackagingNotes:

    def test_android_lists_install_scripts(self):
        notes = packaging_notes(Platform.ANDROID, "MyGame")
        assert "  * Install_MyGame.bat (installs the APK on a device)" in notes
        assert any("-distribution" in line for line in notes)

    def test_linux_deployment_steps(self):
        """Linux notes tell the operator how to run the packaged binary."""
        notes = packaging_notes(Platform.LINUX, "MyGame")
        assert "DEPLOYMENT NOTES:" in notes
        assert "- Make the binary executable: chmod +x MyGame" in notes
        assert "- Run it from a terminal: ./MyGame" in notes

    def test_build_configuration_from_settings(self):
        settings = replace(DEFAULT_SETTINGS, client_config="Development")
        assert packaging_notes(Platform.LINUX, "MyGame", settings)[0] == "- Produces a DEVELOPMENT build for Linux deployment"

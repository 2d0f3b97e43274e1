"""
Tests for the packcheck CLI.

These tests verify:
1. Exit codes for every outcome (0/1/2/3/4)
2. Invalid input is rejected before any probe runs
3. --json emits one parseable outcome document
4. Terminal output carries the generated command and output location
"""

import json
from unittest.mock import patch

import pytest

import cli

from hosts import ENGINE_ROOT


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch):
    for name in ("PACKCHECK_CONFIG", "PACKCHECK_PROBE_TIMEOUT", "PACKCHECK_MAX_WORKERS"):
        monkeypatch.delenv(name, raising=False)


def _run(argv, env):
    with patch("cli.SystemEnvironment", return_value=env):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(argv)
    return exc_info.value.code


class TestValidateProbesOnly:
    """`packcheck validate` with no project only reports readiness."""

    def test_ready_host_exits_zero(self, healthy_host, capsys):
        assert _run(["validate"], healthy_host) == 0
        out = capsys.readouterr().out
        assert "USAGE:" in out

    def test_not_ready_host_exits_two(self, healthy_host, capsys):
        healthy_host.processes.pop(("git",))
        assert _run(["validate"], healthy_host) == 2
        assert "NOT READY" in capsys.readouterr().out

    def test_json_output(self, healthy_host, capsys):
        assert _run(["validate", "--json"], healthy_host) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["status"] == "ready"
        assert data["readiness"]["ready"] is True
        assert data["command"] is None


class TestValidateWithRequest:
    """`packcheck validate <project> <out> [platform]`."""

    def test_synthesizes_command(self, healthy_host, project_file, tmp_path, capsys):
        code = _run(["validate", str(project_file), str(tmp_path / "out")], healthy_host)
        out = capsys.readouterr().out

        assert code == 0
        assert "=== GENERATED PACKAGING COMMAND ===" in out
        assert "BuildCookRun" in out
        assert "Build script created:" in out
        assert "MyGame-Android-Shipping.apk" in out
        assert "plain 'Android' folder" in out
        assert "=== PACKAGING NOTES ===" in out
        assert (project_file.parent / "Package_MyGame_Android.bat").exists()

    def test_second_run_reports_replacement(self, healthy_host, project_file, tmp_path, capsys):
        argv = ["validate", str(project_file), str(tmp_path / "out")]
        _run(argv, healthy_host)
        capsys.readouterr()
        assert _run(argv, healthy_host) == 0
        assert "Replaced existing build script:" in capsys.readouterr().out

    def test_linux_platform(self, healthy_host, project_file, tmp_path, capsys):
        code = _run(["validate", str(project_file), str(tmp_path / "out"), "linux", "--json"], healthy_host)
        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert data["request"]["platform"] == "Linux"
        assert "-prereqs" not in data["command"]["arguments"]

    def test_linux_deployment_notes(self, healthy_host, project_file, tmp_path, capsys):
        """
        GIVEN: A ready host and a Linux request
        WHEN: The command is synthesized
        THEN: Deployment steps name the project binary; no APK hint is shown
        """
        code = _run(["validate", str(project_file), str(tmp_path / "out"), "Linux"], healthy_host)
        out = capsys.readouterr().out
        assert code == 0
        assert "DEPLOYMENT NOTES:" in out
        assert "chmod +x MyGame" in out
        assert "plain 'Android' folder" not in out

    def test_not_ready_skips_synthesis(self, healthy_host, project_file, tmp_path, capsys):
        healthy_host.processes.pop(("cmake",))
        code = _run(["validate", str(project_file), str(tmp_path / "out")], healthy_host)
        assert code == 2
        assert "Packaging command not generated" in capsys.readouterr().out
        assert not (project_file.parent / "Package_MyGame_Android.bat").exists()

    def test_locator_miss_exits_three(self, healthy_host, project_file, tmp_path, capsys):
        healthy_host.remove(ENGINE_ROOT)
        code = _run(["validate", str(project_file), str(tmp_path / "out")], healthy_host)
        assert code == 3
        assert "Could not find Unreal Engine installation" in capsys.readouterr().out

    def test_certification_failure_exits_three(self, healthy_host, project_file, tmp_path, capsys):
        healthy_host.remove(healthy_host.join(ENGINE_ROOT, "Engine", "Source", "Developer"))
        code = _run(["validate", str(project_file), str(tmp_path / "out")], healthy_host)
        out = capsys.readouterr().out
        assert code == 3
        assert "Missing: Android target platform module" in out
        assert "TO FIX ANDROID SUPPORT" in out


class TestInvalidInput:
    """Bad input exits 1 before any tool is run."""

    def test_single_argument(self, healthy_host, capsys):
        """A project without an output directory is a usage error; no probe runs."""
        assert _run(["validate", "MyGame.uproject"], healthy_host) == 1
        err = capsys.readouterr().err
        assert "output directory are required" in err
        assert "USAGE:" in err
        assert healthy_host.calls == []

    def test_too_many_arguments(self, healthy_host, project_file, tmp_path):
        argv = ["validate", str(project_file), str(tmp_path), "Android", "extra"]
        assert _run(argv, healthy_host) == 1

    def test_unsupported_platform(self, healthy_host, project_file, tmp_path, capsys):
        code = _run(["validate", str(project_file), str(tmp_path / "out"), "Windows"], healthy_host)
        assert code == 1
        assert "Unsupported platform 'Windows'" in capsys.readouterr().err
        assert healthy_host.calls == []

    def test_missing_project_json(self, healthy_host, tmp_path, capsys):
        code = _run(["validate", str(tmp_path / "Nope.uproject"), str(tmp_path), "--json"], healthy_host)
        data = json.loads(capsys.readouterr().out)
        assert code == 1
        assert data["status"] == "input_invalid"
        assert "not found" in data["message"]

    def test_non_positive_workers(self, healthy_host):
        assert _run(["validate", "--workers", "0"], healthy_host) == 1

    def test_invalid_timeout_env(self, healthy_host, monkeypatch):
        monkeypatch.setenv("PACKCHECK_PROBE_TIMEOUT", "soon")
        assert _run(["validate"], healthy_host) == 1


class TestInternalError:

    def test_unexpected_exception_exits_four(self, healthy_host, capsys):
        with patch("cli.run_validation", side_effect=RuntimeError("boom")):
            assert _run(["validate"], healthy_host) == 4
        assert "FATAL: boom" in capsys.readouterr().err


class TestVersion:

    def test_version_flag(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--version"])
        assert exc_info.value.code == 0
        assert capsys.readouterr().out.startswith("packcheck ")

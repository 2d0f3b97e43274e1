"""
Tests for the end-to-end validation pipeline.

These tests verify:
1. Probes only: READY / NOT_READY without touching the engine
2. Synthesis never runs when readiness fails (no script, no command)
3. Locator misses and certification failures block synthesis
4. Script write failures are warnings; the command is still returned
5. Exit codes follow the uniform severity model
"""

import json
import os
from unittest.mock import patch

import pytest

from config import DEFAULT_SETTINGS
from engine import ANDROID_COMPONENTS
from synthesis import (
    EXIT_CODES,
    LocatorMiss,
    OutcomeStatus,
    PackagingRequest,
    SynthesisIOFailure,
    ValidationOutcome,
    run_validation,
    script_path_for,
    synthesize_packaging,
)

from hosts import ENGINE_ROOT, toolchain_root


@pytest.fixture
def android_request(project_file, tmp_path):
    return PackagingRequest.from_arguments(project_file, tmp_path / "out")


@pytest.fixture
def linux_request(project_file, tmp_path):
    return PackagingRequest.from_arguments(project_file, tmp_path / "out", "Linux")


def _script_path(request):
    return script_path_for(request, "windows")


class TestExitCodes:
    """0 ready, 1 invalid input, 2 not ready, 3 no engine or not certified, 4 internal."""

    def test_severity_model(self):
        assert EXIT_CODES == {
            OutcomeStatus.READY: 0,
            OutcomeStatus.SYNTHESIZED: 0,
            OutcomeStatus.INPUT_INVALID: 1,
            OutcomeStatus.NOT_READY: 2,
            OutcomeStatus.LOCATOR_MISS: 3,
            OutcomeStatus.CERTIFICATION_FAILED: 3,
        }

    def test_input_invalid_outcome(self):
        outcome = ValidationOutcome.input_invalid("bad")
        assert outcome.exit_code == 1
        assert outcome.to_dict()["readiness"] is None


class TestProbesOnly:

    def test_ready(self, healthy_host):
        outcome = run_validation(healthy_host, DEFAULT_SETTINGS)
        assert outcome.status == OutcomeStatus.READY
        assert outcome.exit_code == 0
        assert outcome.command is None

    def test_not_ready(self, healthy_host):
        healthy_host.processes.pop(("cmake",))
        outcome = run_validation(healthy_host, DEFAULT_SETTINGS)
        assert outcome.status == OutcomeStatus.NOT_READY
        assert outcome.exit_code == 2


class TestSynthesisGate:
    """Synthesis runs only after readiness, engine location and certification pass."""

    def test_not_ready_short_circuits(self, healthy_host, android_request):
        """
        GIVEN: A host missing a required tool
        WHEN: A packaging request is validated
        THEN: Exit 2; no command is synthesized and no script is written
        """
        healthy_host.remove(healthy_host.join(r"C:\Program Files (x86)", "Microsoft Visual Studio"))
        outcome = run_validation(healthy_host, DEFAULT_SETTINGS, request=android_request)

        assert outcome.status == OutcomeStatus.NOT_READY
        assert outcome.command is None
        assert outcome.installation is None
        assert not os.path.exists(_script_path(android_request))
        assert "visual_studio" in outcome.message

    def test_engine_not_probed_when_not_ready(self, healthy_host, android_request):
        healthy_host.processes.pop(("git",))
        with patch("synthesis.pipeline.locate_engine") as mock_locate:
            run_validation(healthy_host, DEFAULT_SETTINGS, request=android_request)
        mock_locate.assert_not_called()

    def test_locator_miss(self, healthy_host, android_request):
        healthy_host.remove(ENGINE_ROOT)
        outcome = run_validation(healthy_host, DEFAULT_SETTINGS, request=android_request)
        assert outcome.status == OutcomeStatus.LOCATOR_MISS
        assert outcome.exit_code == 3
        assert outcome.readiness.overall_ready
        assert not os.path.exists(_script_path(android_request))

    def test_synthesize_raises_locator_miss(self, healthy_host, android_request):
        healthy_host.remove(ENGINE_ROOT)
        with pytest.raises(LocatorMiss):
            synthesize_packaging(healthy_host, android_request, DEFAULT_SETTINGS)

    def test_android_certification_failure(self, healthy_host, android_request):
        for component in ANDROID_COMPONENTS:
            healthy_host.remove(healthy_host.join(ENGINE_ROOT, *component.parts))
        outcome = run_validation(healthy_host, DEFAULT_SETTINGS, request=android_request)

        assert outcome.status == OutcomeStatus.CERTIFICATION_FAILED
        assert outcome.exit_code == 3
        assert outcome.installation.root_path == ENGINE_ROOT
        assert len(outcome.certification.missing_components) == 3
        assert outcome.certification.remediation
        assert outcome.command is None
        assert not os.path.exists(_script_path(android_request))

    def test_linux_certification_failure_after_readiness(self, healthy_host, linux_request):
        """A toolchain that disappears between readiness and certification still blocks synthesis."""
        # Readiness passes with a complete toolchain; break it only for the
        # certification re-run
        from readiness import checks

        real = checks.check_linux_toolchain
        results = iter([real, lambda env, settings: checks.ProbeResult.not_found("gone")])

        def flaky(env, settings):
            return next(results)(env, settings)

        definitions = [
            checks.ProbeDefinition(d.name, d.label, flaky, d.required) if d.name == "linux_toolchain" else d
            for d in checks.PROBE_DEFINITIONS
        ]
        with patch.object(checks, "PROBE_DEFINITIONS", definitions):
            outcome = run_validation(healthy_host, DEFAULT_SETTINGS, request=linux_request)

        assert outcome.status == OutcomeStatus.CERTIFICATION_FAILED
        assert "gone" in outcome.certification.missing_components[0]


class TestSynthesized:
    """A ready, certified host yields a command and a script."""

    def test_android_end_to_end(self, healthy_host, android_request):
        outcome = run_validation(healthy_host, DEFAULT_SETTINGS, request=android_request)

        assert outcome.status == OutcomeStatus.SYNTHESIZED
        assert outcome.exit_code == 0
        assert "-prereqs" in outcome.command.arguments
        assert outcome.synthesis.script_written
        with open(_script_path(android_request), newline="") as f:
            assert outcome.command.command_line("windows") in f.read()

    def test_output_dir_created_before_probing(self, healthy_host, android_request, tmp_path):
        """The output directory exists even when the host turns out not ready."""
        healthy_host.processes.pop(("git",))
        run_validation(healthy_host, DEFAULT_SETTINGS, request=android_request)
        assert (tmp_path / "out").is_dir()

    def test_linux_end_to_end(self, healthy_host, linux_request):
        outcome = run_validation(healthy_host, DEFAULT_SETTINGS, request=linux_request)
        assert outcome.status == OutcomeStatus.SYNTHESIZED
        assert "-prereqs" not in outcome.command.arguments
        assert outcome.synthesis.script.path.endswith("Package_MyGame_Linux.bat")

    def test_dry_run_writes_nothing(self, healthy_host, android_request, tmp_path):
        """
        GIVEN: write_script=False
        WHEN: The pipeline runs to synthesis
        THEN: No script is written and the output directory is not created
        """
        outcome = run_validation(healthy_host, DEFAULT_SETTINGS, request=android_request, write_script=False)
        assert outcome.status == OutcomeStatus.SYNTHESIZED
        assert not outcome.synthesis.script_written
        assert not os.path.exists(_script_path(android_request))
        assert not (tmp_path / "out").exists()

    def test_dry_run_still_rejects_uncreatable_output(self, healthy_host, project_file, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        request = PackagingRequest.from_arguments(project_file, blocker / "out")
        outcome = run_validation(healthy_host, DEFAULT_SETTINGS, request=request, write_script=False)
        assert outcome.status == OutcomeStatus.INPUT_INVALID
        assert healthy_host.calls == []

    def test_rerun_is_idempotent(self, healthy_host, android_request):
        run_validation(healthy_host, DEFAULT_SETTINGS, request=android_request)
        with open(_script_path(android_request), "rb") as f:
            first = f.read()
        outcome = run_validation(healthy_host, DEFAULT_SETTINGS, request=android_request)
        with open(_script_path(android_request), "rb") as f:
            assert f.read() == first
        assert outcome.synthesis.script_replaced

    def test_script_failure_is_a_warning(self, healthy_host, android_request):
        """
        GIVEN: A script write that fails
        WHEN: Synthesis runs
        THEN: The command is still returned, with a warning and exit code 0
        """
        failure = SynthesisIOFailure(_script_path(android_request), "denied")
        with patch("synthesis.pipeline.write_build_script", side_effect=failure):
            outcome = run_validation(healthy_host, DEFAULT_SETTINGS, request=android_request)

        assert outcome.status == OutcomeStatus.SYNTHESIZED
        assert outcome.exit_code == 0
        assert outcome.command is not None
        assert not outcome.synthesis.script_written
        assert any("denied" in w for w in outcome.warnings)

    def test_outcome_json(self, healthy_host, android_request):
        outcome = run_validation(healthy_host, DEFAULT_SETTINGS, request=android_request)
        data = json.loads(outcome.to_json())
        assert data["status"] == "synthesized"
        assert data["exit_code"] == 0
        assert data["request"]["platform"] == "Android"
        assert data["engine"]["root_path"] == ENGINE_ROOT
        assert data["certification"]["certified"] is True
        assert data["command"]["predicted_output_path"].endswith("MyGame-Android-Shipping.apk")
        assert data["script"]["written"] is True


class TestToolchainNotReady:
    """Linux requests need the toolchain to pass readiness first."""

    def test_missing_toolchain_blocks_linux_before_certification(self, healthy_host, linux_request):
        healthy_host.remove(toolchain_root(healthy_host))
        outcome = run_validation(healthy_host, DEFAULT_SETTINGS, request=linux_request)
        assert outcome.status == OutcomeStatus.NOT_READY
        assert outcome.certification is None

"""
Packcheck Readiness Report - aggregation and structured output.

This module reduces probe outcomes to one readiness decision and formats
the report for:
- Terminal output (CLI)
- JSON output (CLI --json and the HTTP API)
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from config import DEFAULT_SETTINGS, PackcheckSettings
from host import HostEnvironment

from .checks import build_probes
from .runner import ProbeOutcome, ProbeRunner


def is_ready(outcomes: Iterable[ProbeOutcome]) -> bool:
    """
    Determine readiness from probe outcomes.

    Ready iff every required probe returned OK. Informational probes are
    ignored. The reduction is a plain AND, so outcome order is irrelevant.
    """
    return all(o.passed for o in outcomes if o.required)


@dataclass(frozen=True)
class ReadinessReport:
    """
    Structured readiness report.

    Attributes:
        version: Packcheck version string
        outcomes: Probe outcomes in declared order
        overall_ready: True iff every required probe passed
        timestamp: Report generation time (ISO format)
    """
    version: str
    outcomes: Tuple[ProbeOutcome, ...]
    overall_ready: bool
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[ProbeOutcome], version: Optional[str] = None) -> "ReadinessReport":
        outcomes = tuple(outcomes)
        return cls(
            version=version or get_version(),
            outcomes=outcomes,
            overall_ready=is_ready(outcomes),
        )

    @property
    def unmet(self) -> List[ProbeOutcome]:
        """Required probes that did not pass."""
        return [o for o in self.outcomes if o.required and not o.passed]

    @property
    def informational(self) -> List[ProbeOutcome]:
        return [o for o in self.outcomes if not o.required]

    def result_for(self, name: str) -> Optional[ProbeOutcome]:
        for outcome in self.outcomes:
            if outcome.name == name:
                return outcome
        return None

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON output."""
        required = [o for o in self.outcomes if o.required]
        return {
            "version": self.version,
            "ready": self.overall_ready,
            "timestamp": self.timestamp,
            "summary": {
                "total_checks": len(self.outcomes),
                "required_checks": len(required),
                "passed": sum(1 for o in self.outcomes if o.passed),
                "unmet": [o.name for o in self.unmet],
            },
            "checks": [o.to_dict() for o in self.outcomes],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


def get_version() -> str:
    """
    Read Packcheck version from the VERSION file.

    Falls back to "unknown" if file not found.
    """
    version_paths = [
        Path(__file__).parent.parent.parent / "VERSION",  # repo root from backend/readiness
        Path.cwd() / "VERSION",
    ]
    for version_path in version_paths:
        if version_path.exists():
            try:
                return version_path.read_text().strip()
            except OSError:
                continue
    return "unknown"


def generate_readiness_report(
    env: HostEnvironment,
    settings: PackcheckSettings = DEFAULT_SETTINGS,
) -> ReadinessReport:
    """Run all registered probes against env and aggregate them."""
    runner = ProbeRunner(build_probes(env, settings), max_workers=settings.max_workers)
    return ReadinessReport.from_outcomes(runner.run())


def format_readiness_terminal(report: ReadinessReport) -> str:
    """
    Format readiness report for terminal output.

    Args:
        report: ReadinessReport to format

    Returns:
        Formatted string for terminal display
    """
    lines = []

    lines.append("")
    lines.append("=" * 60)
    lines.append(f"  UNREAL PACKAGING TOOLCHAIN CHECK  v{report.version}")
    lines.append("=" * 60)
    lines.append("")

    for outcome in report.outcomes:
        result = outcome.result
        if outcome.passed:
            symbol = "✔"
        elif not outcome.required:
            symbol = "ℹ"
        else:
            symbol = "✘"
        status_label = result.status.value.replace("_", " ").upper()
        info_marker = "" if outcome.required else " [INFO]"

        lines.append(f"  {symbol} {outcome.label}: {status_label} {result.detail}{info_marker}".rstrip())
        if result.advisory:
            lines.append(f"      ⚠ {result.advisory}")
        if outcome.required and not outcome.passed and result.hint:
            for hint_line in result.hint.splitlines():
                lines.append(f"      ↳ {hint_line}")

    lines.append("")
    lines.append("-" * 60)
    lines.append("")

    if report.overall_ready:
        lines.append("  ✔ READY")
        lines.append("")
        lines.append("  All required tools are installed.")
    else:
        lines.append("  ✘ NOT READY")
        lines.append("")
        lines.append(f"  {len(report.unmet)} required tool(s) missing or incompatible:")
        for outcome in report.unmet:
            lines.append(f"    • {outcome.label}: {outcome.result.detail}")

    lines.append("")
    lines.append("-" * 60)
    lines.append("")

    return "\n".join(lines)

"""
ProbeRunner - execute every registered probe exactly once.

Probes are independent, so they run on a bounded thread pool. Results
are joined before anything is reported and always come back in the
declared registration order, whatever order the probes finished in.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Sequence

from .checks import Probe, ProbeResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


@dataclass(frozen=True)
class ProbeOutcome:
    """One row of a readiness report: a probe and what it returned."""
    name: str
    label: str
    required: bool
    result: ProbeResult

    @property
    def passed(self) -> bool:
        return self.result.passed

    def to_dict(self) -> dict:
        data = {
            "id": self.name,
            "label": self.label,
            "required": self.required,
        }
        data.update(self.result.to_dict())
        return data


def _guarded_run(probe: Probe) -> ProbeResult:
    """Run one probe; a probe that raises is recorded, never propagated."""
    try:
        return probe.run()
    except Exception as e:
        logger.exception("Probe %s raised", probe.name)
        return ProbeResult.incompatible(f"Probe failed with error: {e}")


class ProbeRunner:
    """
    Runs a fixed list of probes.

    Each spawned process inside a probe is bounded by its own timeout, so
    a hung tool costs one worker for at most that long and never stalls
    the remaining probes.
    """

    def __init__(self, probes: Sequence[Probe], max_workers: int = DEFAULT_MAX_WORKERS):
        names = [p.name for p in probes]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate probe names: {', '.join(duplicates)}")
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.probes = list(probes)
        self.max_workers = max_workers

    def run(self) -> List[ProbeOutcome]:
        """
        Execute all probes and return outcomes in declared order.

        Every probe runs even when earlier ones already failed; the report
        needs evidence for each requirement.
        """
        if not self.probes:
            return []

        workers = min(self.max_workers, len(self.probes))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="probe") as executor:
            futures = [executor.submit(_guarded_run, probe) for probe in self.probes]
            results = [future.result() for future in futures]

        outcomes = []
        for probe, result in zip(self.probes, results):
            logger.info("%s: %s %s", probe.name, result.status.value, result.detail)
            outcomes.append(ProbeOutcome(
                name=probe.name,
                label=probe.label,
                required=probe.required,
                result=result,
            ))
        return outcomes

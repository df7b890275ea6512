import logging
from typing import Awaitable, Callable, List, Optional

from auditapi.core.devices import DeviceProfile
from auditapi.models.schema import AuditResult

log = logging.getLogger("page-audit")

Runner = Callable[[str, DeviceProfile], Awaitable[AuditResult]]


def select_median(results: List[AuditResult]) -> AuditResult:
    """Sort by performance descending and take index ``len // 2``.

    For an even count this is the lower-middle run, never an average.
    """
    if not results:
        raise ValueError("select_median() needs at least one result")
    ordered = sorted(results, key=lambda r: r.performance, reverse=True)
    return ordered[len(ordered) // 2]


class MedianAggregator:
    """Run ``runner`` several times in sequence and keep the median run.

    A run that fails aborts the whole aggregation with that run's error.
    """

    def __init__(self, runner: Runner, runs: int = 3):
        if runs < 1:
            raise ValueError("runs must be at least 1")
        self.runner = runner
        self.runs = runs

    async def invoke(self, url: str, device: DeviceProfile, runs: Optional[int] = None) -> AuditResult:
        runs = self.runs if runs is None else runs
        if runs < 1:
            raise ValueError("runs must be at least 1")
        results = []
        for i in range(runs):
            log.info("[%s] Run %s of %s", device.value, i + 1, runs)
            results.append(await self.runner(url, device))
        chosen = select_median(results)
        log.info("[%s] Median performance %s from %s", device.value, chosen.performance,
                 [r.performance for r in results])
        return chosen

"""Request path: cache lookup, gate, retried engine calls, cache store."""

import asyncio
import logging
from typing import Optional

from auditapi.cache import AuditCache
from auditapi.config import AuditSettings
from auditapi.core.cancellation import CancellationToken
from auditapi.core.devices import DeviceProfile
from auditapi.core.engine import AuditEngine, LighthouseEngine
from auditapi.core.gate import ConcurrencyGate
from auditapi.core.median import MedianAggregator
from auditapi.core.retry import RetryPolicy
from auditapi.models.schema import AuditResult

log = logging.getLogger("page-audit")


class Orchestrator:
    """Owns the process-wide cache and gate.

    Identical requests are not coalesced: two misses on the same key both
    run the engine, one after the other.
    """

    def __init__(self, settings: Optional[AuditSettings] = None,
                 engine: Optional[AuditEngine] = None,
                 cache: Optional[AuditCache] = None,
                 gate: Optional[ConcurrencyGate] = None,
                 sleep=asyncio.sleep):
        self.settings = settings or AuditSettings()
        self.engine = engine or LighthouseEngine()
        if cache is None:
            cache = AuditCache(ttl_ms=self.settings.cache_ttl_ms, max_entries=self.settings.cache_max_entries)
        if gate is None:
            gate = ConcurrencyGate(self.settings.gate_poll_interval_ms / 1000, sleep=sleep)
        self.cache = cache
        self.gate = gate
        self.retry = RetryPolicy(self.engine,
                                 max_attempts=self.settings.max_attempts,
                                 backoff_ms=self.settings.backoff_ms,
                                 timeout_ms=self.settings.timeout_ms,
                                 sleep=sleep)
        self.aggregator = MedianAggregator(self._gated_run, runs=self.settings.runs)

    async def audit(self, url: str, device: DeviceProfile,
                    token: Optional[CancellationToken] = None) -> AuditResult:
        """Return a cached result or run a fresh audit for ``(url, device)``.

        ``url`` must already be validated. ``token`` is accepted for callers
        that track cancellation; it does not stop a running audit.
        """
        cached = self.cache.get(url, device)
        if cached is not None:
            log.info("[%s] Cache hit for %s", device.value, url)
            return cached

        if token is not None and token.cancelled:
            log.info("[%s] Token for %s already cancelled; running anyway", device.value, url)

        log.info("Starting %s audit for %s", device.value, url)
        if self.settings.strategy == "median":
            result = await self.aggregator.invoke(url, device)
            self.cache.put(url, device, result)
        else:
            async with self.gate.hold():
                result = await self.retry.invoke(url, device)
                self.cache.put(url, device, result)
        log.info("Completed %s audit for %s", device.value, url)
        return result

    async def _gated_run(self, url: str, device: DeviceProfile) -> AuditResult:
        async with self.gate.hold():
            return await self.retry.invoke(url, device)

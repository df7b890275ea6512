"""Bounded retries around single engine invocations."""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from auditapi.core.convert import to_audit_result
from auditapi.core.devices import DeviceProfile
from auditapi.core.engine import AuditEngine
from auditapi.core.errors import AuditFailed, EngineError
from auditapi.models.schema import AuditResult

log = logging.getLogger("page-audit")


class JobState(Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class Job:
    url: str
    device: DeviceProfile
    state: JobState = JobState.PENDING
    attempts: int = 0
    last_error: Optional[BaseException] = None


class RetryPolicy:
    """Run the engine up to ``max_attempts`` times with linear backoff.

    After failed attempt ``n`` (when attempts remain) the policy waits
    ``n * backoff_ms`` before the next one. Every attempt is a fresh engine
    call; nothing carries over between attempts.
    """

    def __init__(self, engine: AuditEngine, max_attempts: int = 3, backoff_ms: int = 2000,
                 timeout_ms: int = 0, sleep=asyncio.sleep):
        self.engine = engine
        self.max_attempts = max_attempts
        self.backoff_ms = backoff_ms
        self.timeout_ms = timeout_ms
        self._sleep = sleep

    async def invoke(self, url: str, device: DeviceProfile) -> AuditResult:
        job = Job(url=url, device=device)
        tag = device.value

        while job.attempts < self.max_attempts:
            job.attempts += 1
            job.state = JobState.RUNNING
            log.info("[%s] Attempt %s of %s", tag, job.attempts, self.max_attempts)
            try:
                result = await self._attempt(url, device)
            except EngineError as e:
                job.last_error = e
            except Exception as e:
                log.exception("[%s] Unexpected engine error", tag)
                job.last_error = e
            else:
                job.state = JobState.SUCCEEDED
                return result

            job.state = JobState.FAILED
            log.error("[%s] Attempt %s failed: %s", tag, job.attempts, job.last_error)
            if job.attempts < self.max_attempts:
                delay = job.attempts * self.backoff_ms
                log.info("[%s] Waiting %sms before retry...", tag, delay)
                await self._sleep(delay / 1000)

        raise AuditFailed(tag, job.attempts, job.last_error)

    async def _attempt(self, url: str, device: DeviceProfile) -> AuditResult:
        call = self.engine.run(url, device)
        if self.timeout_ms:
            try:
                lhr = await asyncio.wait_for(call, timeout=self.timeout_ms / 1000)
            except asyncio.TimeoutError:
                raise EngineError(f"{device.value} audit timed out after {self.timeout_ms}ms")
        else:
            lhr = await call
        return to_audit_result(lhr, device.value)

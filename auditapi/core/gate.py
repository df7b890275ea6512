import asyncio
import logging
from contextlib import asynccontextmanager

from auditapi.core.errors import OrchestrationError

log = logging.getLogger("page-audit")


class ConcurrencyGate:
    """Single slot shared by every engine invocation in the process.

    Waiters poll instead of queueing, so whichever waiter checks first after
    a release wins; there is no FIFO order among them.
    """

    def __init__(self, poll_interval: float = 1.0, sleep=asyncio.sleep):
        self.poll_interval = poll_interval
        self._sleep = sleep
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    async def acquire(self) -> None:
        waited = False
        while self._held:
            if not waited:
                log.info("Another audit is running, waiting for the gate")
                waited = True
            await self._sleep(self.poll_interval)
        self._held = True

    def release(self) -> None:
        if not self._held:
            raise OrchestrationError("Concurrency gate released while not held")
        self._held = False

    @asynccontextmanager
    async def hold(self):
        await self.acquire()
        try:
            yield self
        finally:
            self.release()

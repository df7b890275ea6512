import logging

log = logging.getLogger("page-audit")


class CancellationToken:
    """Records a cancel request without interrupting anything.

    Engine calls cannot be preempted, so ``cancel()`` only flips the flag;
    work already started keeps running to completion.
    """

    def __init__(self, label: str = ""):
        self.label = label
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if not self._cancelled:
            log.info("Cancel requested for %s; in-flight audit continues", self.label or "audit")
        self._cancelled = True

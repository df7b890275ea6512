# client.py
"""Caller side of the audit API: mobile then desktop, with progress stages."""

import asyncio
import logging
import re
import sys
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import httpx

from auditapi.config import AUDIT_API_URL
from auditapi.core.cancellation import CancellationToken

log = logging.getLogger("page-audit")

STAGES = {"starting": 0, "analyzing": 50, "complete": 100}
DEVICES = ("mobile", "desktop")

_SCHEME = re.compile(r"^https?://", re.IGNORECASE)


@dataclass(frozen=True)
class AuditProgress:
    device: str
    stage: str
    progress: int


class AuditClientError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


ProgressCallback = Callable[[AuditProgress], None]


def normalize_target(url: str) -> str:
    url = url.strip()
    if not _SCHEME.match(url):
        url = f"https://{url}"
    return url


def score_rating(score: float) -> str:
    if score >= 90:
        return "good"
    if score >= 50:
        return "average"
    return "poor"


def _emit(on_progress: Optional[ProgressCallback], device: str, stage: str) -> None:
    if on_progress:
        on_progress(AuditProgress(device=device, stage=stage, progress=STAGES[stage]))


async def run_audit(client: httpx.AsyncClient, url: str, device: str,
                    on_progress: Optional[ProgressCallback] = None) -> dict:
    _emit(on_progress, device, "starting")
    response = await client.post("/api/audit", json={"url": url, "device": device})
    _emit(on_progress, device, "analyzing")

    if response.is_error:
        try:
            body = response.json()
        except ValueError:
            body = None
        message = body.get("message") if isinstance(body, dict) else None
        message = message or response.text or "Audit failed"
        raise AuditClientError(message, response.status_code)

    result = response.json()
    _emit(on_progress, device, "complete")
    return result


class AuditClient:
    """Runs full (mobile + desktop) audits against the service.

    Starting a new full audit cancels the previous token; the server keeps
    running whatever it already started.
    """

    def __init__(self, base_url: str = AUDIT_API_URL, timeout: float = 600.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport
        self.token: Optional[CancellationToken] = None

    async def run_full_audit(self, url: str,
                             on_progress: Optional[ProgressCallback] = None) -> Dict[str, dict]:
        if self.token is not None:
            self.token.cancel()
        target = normalize_target(url)
        self.token = CancellationToken(target)

        results = {}
        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout,
                                     transport=self.transport) as client:
            for device in DEVICES:
                results[device] = await run_audit(client, target, device, on_progress)
        return results


def _print_progress(p: AuditProgress) -> None:
    print(f"[{p.device}] {p.stage} {p.progress}%")


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print("usage: python -m auditapi.client <url>", file=sys.stderr)
        return 2
    try:
        results = asyncio.run(AuditClient().run_full_audit(argv[0], _print_progress))
    except (AuditClientError, httpx.HTTPError) as e:
        print(f"Audit error: {e}", file=sys.stderr)
        return 1
    for device, result in results.items():
        print(f"{device}:")
        for key in ("performance", "accessibility", "bestPractices", "seo"):
            print(f"  {key:<14} {result[key]:>3} ({score_rating(result[key])})")
        for key, value in result["metrics"].items():
            print(f"  {key:<24} {value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

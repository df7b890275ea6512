"""Lighthouse engine adapter.

One call to :meth:`LighthouseEngine.run` launches a fresh headless Chromium
through Playwright, points the Lighthouse CLI at its debugging port and
returns the raw Lighthouse result (``lhr``). The browser and the Lighthouse
process never outlive the call.
"""

import asyncio
import json
import logging
import os
import socket
import tempfile
from typing import Any, Dict, Optional, Protocol

from playwright.async_api import async_playwright

from auditapi.config import LIGHTHOUSE_BIN
from auditapi.core.devices import DeviceProfile
from auditapi.core.errors import EngineError

log = logging.getLogger("page-audit")

CHROME_FLAGS = [
    "--disable-gpu",
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-extensions",
    "--disable-software-rasterizer",
    "--disable-background-networking",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-breakpad",
    "--disable-component-extensions-with-background-pages",
    "--disable-default-apps",
    "--disable-features=TranslateUI",
    "--disable-sync",
    "--metrics-recording-only",
    "--no-first-run",
]


class AuditEngine(Protocol):
    async def run(self, url: str, device: DeviceProfile) -> Dict[str, Any]:
        ...


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def lighthouse_config(device: DeviceProfile) -> dict:
    return {"extends": "lighthouse:default", "settings": device.lighthouse_settings()}


class LighthouseEngine:
    def __init__(self, lighthouse_bin: str = LIGHTHOUSE_BIN, chrome_flags=None):
        self.lighthouse_bin = lighthouse_bin
        self.chrome_flags = list(chrome_flags if chrome_flags is not None else CHROME_FLAGS)

    async def run(self, url: str, device: DeviceProfile) -> Dict[str, Any]:
        tag = device.value
        port = free_port()
        try:
            async with async_playwright() as p:
                log.info("[%s] Starting Chrome...", tag)
                browser = await p.chromium.launch(
                    headless=True,
                    args=[*self.chrome_flags, f"--remote-debugging-port={port}"],
                )
                log.info("[%s] Chrome launched on port %s", tag, port)
                try:
                    return await self._lighthouse(url, device, port)
                finally:
                    try:
                        log.info("[%s] Cleaning up...", tag)
                        await browser.close()
                    except Exception as e:
                        log.error("[%s] Failed to cleanup Chrome: %s", tag, e)
        except EngineError:
            raise
        except Exception as e:
            raise EngineError(f"{tag} audit failed: {e}") from e

    async def _lighthouse(self, url: str, device: DeviceProfile, port: int) -> Dict[str, Any]:
        tag = device.value
        fd, config_path = tempfile.mkstemp(prefix="lighthouse-", suffix=".json")
        proc: Optional[asyncio.subprocess.Process] = None
        try:
            with os.fdopen(fd, "w") as fh:
                json.dump(lighthouse_config(device), fh)

            log.info("[%s] Starting page load...", tag)
            try:
                proc = await asyncio.create_subprocess_exec(
                    self.lighthouse_bin,
                    url,
                    f"--port={port}",
                    f"--config-path={config_path}",
                    "--output=json",
                    "--output-path=stdout",
                    "--quiet",
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except OSError as e:
                raise EngineError(f"{tag} audit failed: cannot start {self.lighthouse_bin}: {e}") from e

            stdout, stderr = await proc.communicate()
            if proc.returncode != 0:
                detail = stderr.decode(errors="replace").strip().splitlines()[-1:] or ["no output"]
                raise EngineError(f"{tag} audit failed: lighthouse exited with {proc.returncode}: {detail[0]}")

            log.info("[%s] Page loaded, analyzing...", tag)
            return parse_lighthouse_output(stdout, tag)
        finally:
            if proc is not None and proc.returncode is None:
                proc.kill()
                await proc.wait()
            try:
                os.unlink(config_path)
            except OSError as e:
                log.warning("[%s] Failed to remove %s: %s", tag, config_path, e)


def parse_lighthouse_output(stdout: bytes, tag: str) -> Dict[str, Any]:
    try:
        report = json.loads(stdout)
    except ValueError as e:
        raise EngineError(f"{tag} audit failed: unreadable lighthouse output: {e}") from e
    # the CLI prints the lhr itself; the node API wraps it as {"lhr": ...}
    if isinstance(report, dict) and isinstance(report.get("lhr"), dict):
        report = report["lhr"]
    if not isinstance(report, dict):
        raise EngineError(f"Failed to get results for {tag} audit")
    return report

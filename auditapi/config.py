# config.py
import os
from dataclasses import dataclass


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LIGHTHOUSE_BIN = os.getenv("LIGHTHOUSE_BIN", "lighthouse")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
HOST = os.getenv("HOST", "0.0.0.0")
PORT = _env_int("PORT", 5000, minimum=1)
AUDIT_API_URL = os.getenv("AUDIT_API_URL", f"http://localhost:{PORT}")

STRATEGIES = ("single", "median")


@dataclass(frozen=True)
class AuditSettings:
    cache_ttl_ms: int = 60 * 60 * 1000
    cache_max_entries: int = 0
    max_attempts: int = 3
    backoff_ms: int = 2000
    runs: int = 3
    strategy: str = "single"
    timeout_ms: int = 120_000
    gate_poll_interval_ms: int = 1000

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.runs < 1:
            raise ValueError("runs must be at least 1")
        if self.strategy not in STRATEGIES:
            raise ValueError(f"strategy must be one of {STRATEGIES}, got {self.strategy!r}")

    @classmethod
    def from_env(cls) -> "AuditSettings":
        return cls(
            cache_ttl_ms=_env_int("CACHE_TTL_MS", cls.cache_ttl_ms),
            cache_max_entries=_env_int("CACHE_MAX_ENTRIES", cls.cache_max_entries),
            max_attempts=_env_int("AUDIT_MAX_ATTEMPTS", cls.max_attempts, minimum=1),
            backoff_ms=_env_int("AUDIT_BACKOFF_MS", cls.backoff_ms),
            runs=_env_int("AUDIT_RUNS", cls.runs, minimum=1),
            strategy=os.getenv("AUDIT_STRATEGY", cls.strategy).strip().lower(),
            timeout_ms=_env_int("AUDIT_TIMEOUT_MS", cls.timeout_ms),
            gate_poll_interval_ms=_env_int("GATE_POLL_INTERVAL_MS", cls.gate_poll_interval_ms, minimum=1),
        )

"""Conversion of raw Lighthouse output into an :class:`AuditResult`.

Category scores arrive as floats in [0, 1] and timing metrics in
milliseconds. Scores are scaled to integer percentages, paint and speed
metrics become seconds, blocking time is rounded to whole milliseconds and
layout shift passes through unscaled.
"""

import logging
import math
from typing import Any, Dict, Optional

from auditapi.core.errors import EngineError
from auditapi.models.schema import AuditResult, MetricSet

log = logging.getLogger("page-audit")

CATEGORY_KEYS = {
    "performance": "performance",
    "accessibility": "accessibility",
    "best_practices": "best-practices",
    "seo": "seo",
}

# field -> (lighthouse audit id, divisor or None for rounding to int)
METRIC_KEYS = {
    "first_contentful_paint": ("first-contentful-paint", 1000),
    "largest_contentful_paint": ("largest-contentful-paint", 1000),
    "total_blocking_time": ("total-blocking-time", None),
    "cumulative_layout_shift": ("cumulative-layout-shift", 1),
    "speed_index": ("speed-index", 1000),
}


def js_round(value: float) -> int:
    """Round half up, the way the engine's JavaScript does for positive numbers."""
    return int(math.floor(value + 0.5))


def as_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or None when it is not one."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def _score(categories: Dict[str, Any], key: str) -> Optional[float]:
    category = categories.get(key)
    if not isinstance(category, dict):
        return None
    return as_number(category.get("score"))


def _percent(score: Optional[float]) -> int:
    if score is None:
        return 0
    return min(100, max(0, js_round(score * 100)))


def _metric(audits: Dict[str, Any], audit_id: str) -> Optional[float]:
    node = audits.get(audit_id)
    if not isinstance(node, dict):
        return None
    return as_number(node.get("numericValue"))


def to_metric_set(audits: Dict[str, Any], device: str) -> MetricSet:
    values = {}
    for field, (audit_id, divisor) in METRIC_KEYS.items():
        raw = _metric(audits, audit_id)
        if raw is None:
            log.warning("[%s] Invalid metric value for %s: %r", device,
                        field, (audits.get(audit_id) or {}).get("numericValue"))
            values[field] = 0
        elif divisor is None:
            values[field] = js_round(raw)
        else:
            values[field] = raw / divisor
    return MetricSet(**values)


def to_audit_result(lhr: Any, device: str) -> AuditResult:
    """Convert a Lighthouse result (``lhr``) into an AuditResult.

    Raises EngineError when the result is structurally unusable or carries
    no numeric performance score; the caller treats that as a failed attempt.
    """
    if not isinstance(lhr, dict):
        raise EngineError(f"Failed to get results for {device} audit")
    categories = lhr.get("categories")
    audits = lhr.get("audits")
    if not isinstance(categories, dict) or not isinstance(audits, dict):
        raise EngineError(f"Missing required audit data for {device}")

    performance = _score(categories, CATEGORY_KEYS["performance"])
    if performance is None:
        raise EngineError("Invalid result structure: performance score is missing")

    scores = {field: _percent(_score(categories, key)) for field, key in CATEGORY_KEYS.items()}
    return AuditResult(metrics=to_metric_set(audits, device), **scores)

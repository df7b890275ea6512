import asyncio

import pytest

from auditapi.core.errors import EngineError


def make_lhr(performance=0.9, accessibility=0.8, best_practices=0.7, seo=0.6, **metrics):
    values = {
        "first-contentful-paint": 1500,
        "largest-contentful-paint": 2500,
        "total-blocking-time": 123.7,
        "cumulative-layout-shift": 0.05,
        "speed-index": 3200,
    }
    values.update({k.replace("_", "-"): v for k, v in metrics.items()})
    return {
        "categories": {
            "performance": {"score": performance},
            "accessibility": {"score": accessibility},
            "best-practices": {"score": best_practices},
            "seo": {"score": seo},
        },
        "audits": {k: {"numericValue": v} for k, v in values.items()},
    }


class FakeEngine:
    """Plays back a script of lhr dicts / exceptions, one per call."""

    def __init__(self, *outcomes, delay=0.0):
        self.outcomes = list(outcomes)
        self.delay = delay
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def run(self, url, device):
        self.calls.append((url, device))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome
        finally:
            self.in_flight -= 1


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)
        await asyncio.sleep(0)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def failing_engine():
    return FakeEngine(EngineError("navigation timeout"))

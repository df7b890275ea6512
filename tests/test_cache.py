"""Unit tests for the in-process audit cache."""
from auditapi.cache import AuditCache
from auditapi.core.convert import to_audit_result
from auditapi.core.devices import DeviceProfile

from conftest import make_lhr

URL = "https://example.com"


def result(performance=0.9):
    return to_audit_result(make_lhr(performance=performance), "mobile")


def test_hit_within_ttl(clock):
    cache = AuditCache(ttl_ms=1000, clock=clock)
    stored = result()
    cache.put(URL, DeviceProfile.MOBILE, stored)
    clock.advance(0.999)
    assert cache.get(URL, DeviceProfile.MOBILE) is stored


def test_stale_entry_is_a_miss_but_kept(clock):
    cache = AuditCache(ttl_ms=1000, clock=clock)
    cache.put(URL, DeviceProfile.MOBILE, result())
    clock.advance(1.0)
    assert cache.get(URL, DeviceProfile.MOBILE) is None
    assert len(cache) == 1


def test_key_is_exact_url_and_device(clock):
    cache = AuditCache(clock=clock)
    cache.put(URL, DeviceProfile.MOBILE, result())
    assert cache.get(URL, DeviceProfile.DESKTOP) is None
    assert cache.get(URL + "/", DeviceProfile.MOBILE) is None
    assert cache.get("https://EXAMPLE.com", DeviceProfile.MOBILE) is None


def test_put_replaces_and_refreshes(clock):
    cache = AuditCache(ttl_ms=1000, clock=clock)
    cache.put(URL, DeviceProfile.MOBILE, result(0.5))
    clock.advance(0.9)
    newer = result(0.7)
    cache.put(URL, DeviceProfile.MOBILE, newer)
    clock.advance(0.9)
    assert cache.get(URL, DeviceProfile.MOBILE) is newer
    assert len(cache) == 1


def test_unbounded_by_default(clock):
    cache = AuditCache(clock=clock)
    for i in range(50):
        cache.put(f"{URL}/{i}", DeviceProfile.MOBILE, result())
    assert len(cache) == 50


def test_max_entries_evicts_oldest_write(clock):
    cache = AuditCache(max_entries=2, clock=clock)
    cache.put("https://a.test", DeviceProfile.MOBILE, result())
    cache.put("https://b.test", DeviceProfile.MOBILE, result())
    cache.put("https://a.test", DeviceProfile.MOBILE, result())
    cache.put("https://c.test", DeviceProfile.MOBILE, result())
    assert len(cache) == 2
    assert cache.get("https://b.test", DeviceProfile.MOBILE) is None
    assert cache.get("https://a.test", DeviceProfile.MOBILE) is not None

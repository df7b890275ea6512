from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Throttling:
    width: int
    height: int
    device_scale_factor: float
    cpu_slowdown_multiplier: float
    download_throughput_kbps: int
    upload_throughput_kbps: int
    rtt_ms: int
    request_latency_ms: int


class DeviceProfile(Enum):
    MOBILE = "mobile"
    DESKTOP = "desktop"

    @property
    def throttling(self) -> Throttling:
        return _PRESETS[self]

    @property
    def is_mobile(self) -> bool:
        return self is DeviceProfile.MOBILE

    def lighthouse_settings(self) -> dict:
        """Settings block for a Lighthouse config extending the default one."""
        t = self.throttling
        return {
            "formFactor": self.value,
            "screenEmulation": {
                "mobile": self.is_mobile,
                "width": t.width,
                "height": t.height,
                "deviceScaleFactor": t.device_scale_factor,
                "disabled": False,
            },
            "throttling": {
                "throughputKbps": t.download_throughput_kbps,
                "rttMs": t.rtt_ms,
                "cpuSlowdownMultiplier": t.cpu_slowdown_multiplier,
                "requestLatencyMs": t.request_latency_ms,
                "downloadThroughputKbps": t.download_throughput_kbps,
                "uploadThroughputKbps": t.upload_throughput_kbps,
            },
            "maxWaitForFcp": 15000,
            "maxWaitForLoad": 35000,
            "pauseAfterFcpMs": 1000,
            "pauseAfterLoadMs": 1000,
            "networkQuietThresholdMs": 1000,
            "cpuQuietThresholdMs": 1000,
            "throttlingMethod": "simulate",
            "onlyCategories": ["performance", "accessibility", "best-practices", "seo"],
        }


_PRESETS = {
    DeviceProfile.MOBILE: Throttling(
        width=360,
        height=640,
        device_scale_factor=2,
        cpu_slowdown_multiplier=4,
        download_throughput_kbps=1638,
        upload_throughput_kbps=750,
        rtt_ms=150,
        request_latency_ms=150,
    ),
    DeviceProfile.DESKTOP: Throttling(
        width=1350,
        height=940,
        device_scale_factor=1,
        cpu_slowdown_multiplier=1,
        download_throughput_kbps=10240,
        upload_throughput_kbps=2048,
        rtt_ms=40,
        request_latency_ms=0,
    ),
}

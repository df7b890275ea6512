from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AuditRequest(BaseModel):
    url: Any = None
    device: Any = "mobile"


class MetricSet(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    first_contentful_paint: float = Field(0.0, alias="firstContentfulPaint")  # seconds
    largest_contentful_paint: float = Field(0.0, alias="largestContentfulPaint")  # seconds
    total_blocking_time: int = Field(0, alias="totalBlockingTime")  # ms
    cumulative_layout_shift: float = Field(0.0, alias="cumulativeLayoutShift")
    speed_index: float = Field(0.0, alias="speedIndex")  # seconds


class AuditResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    performance: int = Field(ge=0, le=100)
    accessibility: int = Field(ge=0, le=100)
    best_practices: int = Field(ge=0, le=100, alias="bestPractices")
    seo: int = Field(ge=0, le=100)
    metrics: MetricSet

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True)


class ErrorResponse(BaseModel):
    error: str
    message: str

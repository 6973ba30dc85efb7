"""Sleep analytics schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Chronotype(str, Enum):
    """Chronotype classification based on mid-sleep time."""

    EARLY_BIRD = "early_bird"
    INTERMEDIATE = "intermediate"
    NIGHT_OWL = "night_owl"
    UNKNOWN = "unknown"


class ChronotypeResult(BaseModel):
    """Computed chronotype and supporting data."""

    chronotype: Chronotype
    mid_sleep_local_time: str = ""
    mid_sleep_minutes_after_midnight: int = 0
    window_days: int
    sleeps_used: int


class DescriptiveStats(BaseModel):
    avg: float = 0.0
    std: float = 0.0
    min: float = 0.0
    max: float = 0.0


class PerSleepMetrics(BaseModel):
    """Per-sleep statistics for a window."""

    duration: DescriptiveStats = Field(default_factory=DescriptiveStats)
    quality: DescriptiveStats = Field(default_factory=DescriptiveStats)
    bedtime: DescriptiveStats = Field(default_factory=DescriptiveStats)
    sleep_count: int = 0


class DailyOverallMetrics(BaseModel):
    """Daily total sleep (core + naps combined)."""

    days_count: int = 0
    total_daily_hours: DescriptiveStats = Field(default_factory=DescriptiveStats)
    target_hours: float
    days_meeting_target: int = 0
    daily_sufficiency_score: float = 0.0


class DerivedScores(BaseModel):
    """0-100 scores derived from the metrics."""

    consistency_score: float = 0.0
    sufficiency_score: float = 0.0
    overall_sleep_score: float = 0.0


class WindowMetrics(BaseModel):
    """All metrics for a single time window."""

    model_config = ConfigDict(populate_by_name=True)

    from_: datetime = Field(alias="from")
    to: datetime
    per_sleep: PerSleepMetrics = Field(default_factory=PerSleepMetrics)
    daily_overall: DailyOverallMetrics
    scores: DerivedScores = Field(default_factory=DerivedScores)


class MetricsWindow(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: datetime = Field(alias="from")
    to: datetime


class MetricsResponse(BaseModel):
    """Response for the metrics endpoint."""

    window: MetricsWindow
    per_sleep: PerSleepMetrics
    daily_overall: DailyOverallMetrics
    scores: DerivedScores


class LLMInsightsOutput(BaseModel):
    """Structured narrative returned by the LLM."""

    summary: str
    observations: list[str] = Field(default_factory=list)
    guidance: list[str] = Field(default_factory=list)


class InsightsContext(BaseModel):
    """Aggregates sent to the LLM."""

    chronotype: ChronotypeResult
    history: WindowMetrics
    recent: WindowMetrics
    last_night: WindowMetrics


class InsightsMetrics(BaseModel):
    history: WindowMetrics
    recent: WindowMetrics
    last_night: WindowMetrics


class InsightsResponse(BaseModel):
    """Chronotype, metrics and narrative in one payload."""

    chronotype: ChronotypeResult
    metrics: InsightsMetrics
    insights: LLMInsightsOutput

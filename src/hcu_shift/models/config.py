"""Generation and engine configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class GenerationConfig(BaseModel):
    """Per-run rules set by the administrator before each generation."""

    night_pattern: list[int] = Field(
        default_factory=lambda: [2, 3],
        description="Night headcount per week window, cycled in order",
    )
    night_pattern_start: int = Field(
        default=1, ge=0, description="Pattern slot used by the first week window"
    )
    max_night_shifts: int = Field(default=6, ge=0)
    max_days_off: int = Field(default=8, ge=0)
    max_consecutive_days: int = Field(default=5, ge=1)
    weekday_day_staff: int = Field(default=7, ge=0)
    weekend_day_staff: int = Field(default=5, ge=0)
    year_end_day_staff: int = Field(default=4, ge=0, description="Dec 30-31")
    new_year_day_staff: int = Field(default=4, ge=0, description="Jan 1-3")
    weekday_overstaff_slack: int = Field(
        default=2, ge=0, description="Extra day staff tolerated on ordinary weekdays"
    )
    carry_over_run_limit: int = Field(
        default=4,
        ge=1,
        description="Work run at the end of the previous month that forces day 1 off",
    )
    holiday_country: str = "JP"
    request_quota: int | None = Field(default=None, ge=0)

    @field_validator("night_pattern")
    @classmethod
    def _pattern_not_empty(cls, value: list[int]) -> list[int]:
        if not value:
            raise ValueError("night_pattern must contain at least one entry")
        if any(v < 0 for v in value):
            raise ValueError("night_pattern entries must be non-negative")
        return value


class EngineConfig(BaseModel):
    """Tuning of the construction, annealing, rebalancing and repair phases."""

    candidate_count: int = Field(default=30, ge=1)
    anneal_iterations: int = Field(default=800, ge=0)
    initial_temperature: float = Field(default=10.0, gt=0.0)
    cooling_rate: float = Field(default=0.995, gt=0.0, le=1.0)
    fairness_passes: int = Field(default=50, ge=0)
    fairness_gap: int = Field(
        default=2, ge=0, description="Day-shift count gap tolerated between staff"
    )
    repair_attempts: int = Field(default=20, ge=1)
    baseline_score: float = 1000.0

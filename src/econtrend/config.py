"""Configuration models, defaults and fixed alert thresholds."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


# Alert thresholds. Fixed for output compatibility, not part of ForecastConfig.
GDP_SLOWDOWN_GROWTH_PCT = 4.0
ENERGY_DEFICIT_RATIO = 1.0
WPI_INFLATION_ALERT_PCT = 6.0
IIP_NEGATIVE_STREAK_MONTHS = 3
SUPPLY_VOLATILITY_YOY_PCT = 15.0
DECLINE_WINDOW_YEARS = 5
SUPPLY_TREND_BAND_PCT = 5.0

FISCAL_MONTHS: Tuple[str, ...] = (
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
    "January",
    "February",
    "March",
)
MONTH_NOT_FOUND = 99

IIP_HEADLINE: Dict[str, str] = {"type": "General", "category": "General"}

STATUS_PRESSURE = "pressure"
STATUS_STABLE = "stable"
STATUS_SURPLUS = "surplus"


@dataclass(frozen=True)
class StatusBanding:
    """Thresholds for mapping a projected supply/consumption ratio into a status."""

    pressure_below: float = 0.95
    surplus_above: float = 1.05

    def status_for(self, ratio: Optional[float]) -> str:
        if ratio is None:
            return STATUS_STABLE
        if ratio < self.pressure_below:
            return STATUS_PRESSURE
        if ratio > self.surplus_above:
            return STATUS_SURPLUS
        return STATUS_STABLE


@dataclass(frozen=True)
class ForecastConfig:
    """Windows and horizons shared by the domain forecast builders."""

    trend_window: int = 10
    kpi_horizon: int = 1
    chart_horizon: int = 5
    iip_window: int = 60
    iip_horizon: int = 6
    max_workers: int = 7
    status_banding: StatusBanding = field(default_factory=StatusBanding)


def default_config() -> ForecastConfig:
    return ForecastConfig()

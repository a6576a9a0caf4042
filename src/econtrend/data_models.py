"""Core data structures for the normalization, forecasting and alerting stages."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from .config import DECLINE_WINDOW_YEARS, ENERGY_DEFICIT_RATIO, STATUS_STABLE


@dataclass(frozen=True)
class AnnualRow:
    year: int
    period_label: str
    value: float
    fields: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class MonthlyRow:
    year: int
    month: str
    month_order: int
    period_label: str
    value: float
    growth_rate: Optional[float] = None
    fields: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class EnergyYear:
    year: int
    fiscal_year: str
    supply: float
    consumption: float
    ratio: Optional[float]


@dataclass(frozen=True)
class EnergyAnalysis:
    by_year: Tuple[EnergyYear, ...] = ()

    @property
    def latest(self) -> Optional[EnergyYear]:
        return self.by_year[-1] if self.by_year else None

    @property
    def last_5_years(self) -> Tuple[EnergyYear, ...]:
        return self.by_year[-DECLINE_WINDOW_YEARS:]

    @property
    def has_deficit(self) -> bool:
        latest = self.latest
        return latest is not None and latest.ratio is not None and latest.ratio < ENERGY_DEFICIT_RATIO

    def as_dict(self) -> Dict[str, object]:
        return {
            "byYear": [asdict(row) for row in self.by_year],
            "latest": asdict(self.latest) if self.latest else None,
            "hasEnergyDeficit": self.has_deficit,
        }


@dataclass(frozen=True)
class GvaYear:
    year: int
    fiscal_year: str
    total_current: float
    total_constant: float


@dataclass(frozen=True)
class GrowthRow:
    year: int
    fiscal_year: str
    manual_growth_pct: Optional[float] = None
    official_growth_pct: Optional[float] = None
    level: Optional[float] = None

    @property
    def growth_pct(self) -> Optional[float]:
        if self.official_growth_pct is not None:
            return self.official_growth_pct
        return self.manual_growth_pct


@dataclass(frozen=True)
class AnnualInflation:
    year: int
    avg_inflation_pct: float


@dataclass(frozen=True)
class MonthlyInflation:
    year: int
    period_label: str
    index: float
    inflation_pct: float


@dataclass(frozen=True)
class EnergyPoint:
    x: int
    supply: float
    consumption: float


@dataclass(frozen=True)
class AccountsPoint:
    x: str
    constant_price: float


@dataclass(frozen=True)
class InflationPoint:
    x: int
    avg_inflation_pct: float


@dataclass(frozen=True)
class IipPoint:
    period_label: str
    index: float


@dataclass(frozen=True)
class IipProjection:
    t: int
    index: float
    period_label: str


class _Serializable:
    def as_dict(self) -> Dict[str, object]:
        return asdict(self)  # type: ignore[call-overload]


@dataclass(frozen=True)
class EnergyForecast(_Serializable):
    next_year: int
    projected_supply: float
    projected_consumption: float
    projected_ratio: Optional[float]
    status: str
    history: Tuple[EnergyPoint, ...]
    forecast_line: Tuple[EnergyPoint, ...]


@dataclass(frozen=True)
class NationalAccountsForecast(_Serializable):
    next_year: int
    projected_constant: float
    latest_growth: Optional[float]
    status: str
    history: Tuple[AccountsPoint, ...]
    forecast_line: Tuple[AccountsPoint, ...]
    growth_series: Tuple[GrowthRow, ...] = ()


@dataclass(frozen=True)
class WpiForecast(_Serializable):
    next_year: int
    projected_inflation: float
    latest_annual_inflation: float
    status: str
    history: Tuple[InflationPoint, ...]
    forecast_line: Tuple[InflationPoint, ...]


@dataclass(frozen=True)
class IipForecast(_Serializable):
    next_months: Tuple[IipProjection, ...]
    history: Tuple[IipPoint, ...]
    forecast_line: Tuple[IipPoint, ...]
    current_index: Optional[float]
    projected_index: Optional[float]
    projected_growth: Optional[float]
    avg_monthly_growth: Optional[float]
    status: str = STATUS_STABLE

    @classmethod
    def empty(cls) -> "IipForecast":
        return cls(
            next_months=(),
            history=(),
            forecast_line=(),
            current_index=None,
            projected_index=None,
            projected_growth=None,
            avg_monthly_growth=None,
        )


@dataclass(frozen=True)
class CommodityOutlook:
    commodity: str
    analysis: EnergyAnalysis
    forecast: Optional[EnergyForecast]
    alerts: Tuple["RiskAlert", ...] = ()

    def as_dict(self) -> Dict[str, object]:
        return {
            "commodity": self.commodity,
            "analysis": self.analysis.as_dict(),
            "forecast": self.forecast.as_dict() if self.forecast else None,
            "alerts": [alert.as_dict() for alert in self.alerts],
        }


class Severity(str, Enum):
    DANGER = "danger"
    WARNING = "warning"


@dataclass(frozen=True)
class RiskAlert:
    id: str
    severity: Severity
    title: str
    message: str

    def as_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "type": self.severity.value,
            "title": self.title,
            "message": self.message,
        }

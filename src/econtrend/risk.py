"""Threshold rules turning forecast results into structured risk alerts."""
from __future__ import annotations

from typing import Iterable, List, Optional

from .config import (
    ENERGY_DEFICIT_RATIO,
    GDP_SLOWDOWN_GROWTH_PCT,
    IIP_NEGATIVE_STREAK_MONTHS,
    SUPPLY_VOLATILITY_YOY_PCT,
    WPI_INFLATION_ALERT_PCT,
)
from .data_models import EnergyAnalysis, EnergyForecast, RiskAlert, Severity
from .utils import entity_slug


def detect_gdp_risk(latest_growth_pct: Optional[float]) -> Optional[RiskAlert]:
    if latest_growth_pct is None or latest_growth_pct >= GDP_SLOWDOWN_GROWTH_PCT:
        return None
    return RiskAlert(
        id="gdp-slowdown",
        severity=Severity.WARNING,
        title="Economic Slowdown Alert",
        message=(
            f"Latest GDP growth is {latest_growth_pct:.1f}%, "
            f"below the {GDP_SLOWDOWN_GROWTH_PCT:g}% threshold."
        ),
    )


def detect_energy_risk(latest_ratio: Optional[float]) -> Optional[RiskAlert]:
    if latest_ratio is None or latest_ratio >= ENERGY_DEFICIT_RATIO:
        return None
    return RiskAlert(
        id="energy-deficit",
        severity=Severity.DANGER,
        title="Energy Deficit Alert",
        message=f"Energy balance ratio (Supply / Consumption) is {latest_ratio:.2f}, below 1.",
    )


def detect_wpi_risk(latest_inflation_pct: Optional[float]) -> Optional[RiskAlert]:
    if latest_inflation_pct is None or latest_inflation_pct <= WPI_INFLATION_ALERT_PCT:
        return None
    return RiskAlert(
        id="wpi-inflation",
        severity=Severity.DANGER,
        title="Inflation Alert",
        message=(
            f"Wholesale Price Index growth is {latest_inflation_pct:.1f}%, "
            f"above {WPI_INFLATION_ALERT_PCT:g}%."
        ),
    )


def has_negative_streak(growth_rates: Iterable[Optional[float]], months: int = IIP_NEGATIVE_STREAK_MONTHS) -> bool:
    """True once ``months`` consecutive rates are negative; missing rates reset the streak."""
    streak = 0
    for rate in growth_rates:
        if rate is not None and rate < 0:
            streak += 1
            if streak >= months:
                return True
        else:
            streak = 0
    return False


def detect_iip_risk(growth_rates: Iterable[Optional[float]]) -> Optional[RiskAlert]:
    if not has_negative_streak(growth_rates):
        return None
    return RiskAlert(
        id="iip-stress",
        severity=Severity.WARNING,
        title="Industrial Stress Alert",
        message=f"Detected {IIP_NEGATIVE_STREAK_MONTHS} consecutive months of negative IIP growth.",
    )


def energy_commodity_warnings(
    name: str,
    analysis: Optional[EnergyAnalysis],
    forecast: Optional[EnergyForecast],
) -> List[RiskAlert]:
    """Deficit, declining-trend and volatility warnings for one energy commodity."""
    alerts: List[RiskAlert] = []
    by_year = analysis.by_year if analysis else ()
    latest = analysis.latest if analysis else None
    slug = entity_slug(name)

    ratio = latest.ratio if latest is not None else None
    if ratio is None and forecast is not None:
        ratio = forecast.projected_ratio
    if ratio is not None and ratio < ENERGY_DEFICIT_RATIO:
        alerts.append(
            RiskAlert(
                id=f"energy-{slug}-deficit",
                severity=Severity.DANGER,
                title="Supply Deficit",
                message=(
                    f"{name}: Energy balance ratio (Supply / Consumption) is {ratio:.2f}, below 1. "
                    "Supply is insufficient relative to consumption."
                ),
            )
        )

    window = analysis.last_5_years if analysis else ()
    if len(window) >= 2:
        first, last = window[0].supply, window[-1].supply
        if first > 0 and last < first:
            decline_pct = abs((last - first) / first * 100)
            alerts.append(
                RiskAlert(
                    id=f"energy-{slug}-decline",
                    severity=Severity.WARNING,
                    title="Declining Supply Trend",
                    message=(
                        f"{name}: Supply has declined by {decline_pct:.1f}% over the last "
                        f"{len(window)} years. Monitor for continued pressure."
                    ),
                )
            )

    for prev, cur in zip(by_year, by_year[1:]):
        if prev.supply <= 0:
            continue
        change_pct = abs((cur.supply - prev.supply) / prev.supply) * 100
        if change_pct >= SUPPLY_VOLATILITY_YOY_PCT:
            alerts.append(
                RiskAlert(
                    id=f"energy-{slug}-volatility",
                    severity=Severity.WARNING,
                    title="High Volatility",
                    message=(
                        f"{name}: Year-on-year supply change of {change_pct:.1f}% in {cur.fiscal_year}. "
                        "Consider reviewing reliability of supply."
                    ),
                )
            )
            break

    return alerts


def evaluate_dashboard_alerts(
    energy: Optional[EnergyAnalysis] = None,
    gdp_growth_pct: Optional[float] = None,
    wpi_inflation_pct: Optional[float] = None,
    iip_growth_rates: Iterable[Optional[float]] = (),
) -> List[RiskAlert]:
    latest = energy.latest if energy else None
    candidates = [
        detect_gdp_risk(gdp_growth_pct),
        detect_energy_risk(latest.ratio if latest is not None else None),
        detect_wpi_risk(wpi_inflation_pct),
        detect_iip_risk(iip_growth_rates),
    ]
    return [alert for alert in candidates if alert is not None]

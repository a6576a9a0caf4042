"""Domain forecast builders composing normalization, aggregation and trend fitting."""
from __future__ import annotations

import math
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from .aggregation import (
    aggregate_gva_by_year,
    average_annual_inflation,
    build_energy_analysis,
    compute_yoy_growth,
    group_by_dimension,
    latest_revision_per_year,
    merge_growth,
    monthly_inflation,
)
from .config import (
    GDP_SLOWDOWN_GROWTH_PCT,
    IIP_HEADLINE,
    STATUS_PRESSURE,
    STATUS_STABLE,
    WPI_INFLATION_ALERT_PCT,
    ForecastConfig,
    default_config,
)
from .data_models import (
    AccountsPoint,
    AnnualRow,
    CommodityOutlook,
    EnergyAnalysis,
    EnergyForecast,
    EnergyPoint,
    IipForecast,
    IipPoint,
    IipProjection,
    InflationPoint,
    MonthlyRow,
    NationalAccountsForecast,
    WpiForecast,
)
from .normalizer import (
    RawRecord,
    normalize_accounts_rows,
    normalize_annual,
    normalize_gva_rows,
    normalize_iip_rows,
    normalize_official_growth,
    normalize_wpi_rows,
    select_rows,
)
from .regression import linear_regression, project, tail_by_year
from .risk import energy_commodity_warnings
from .utils import fiscal_year_label


def forecast_energy_analysis(
    analysis: EnergyAnalysis, config: ForecastConfig | None = None
) -> Optional[EnergyForecast]:
    config = config or default_config()
    years = tail_by_year(analysis.by_year, config.trend_window)
    if not years:
        return None

    supply_model = linear_regression([(row.year, row.supply) for row in years])
    consumption_model = linear_regression([(row.year, row.consumption) for row in years])
    last = years[-1]
    next_year = last.year + config.kpi_horizon
    projected_supply = project(supply_model, next_year, last.supply)
    projected_consumption = project(consumption_model, next_year, last.consumption)
    projected_ratio = None if projected_consumption == 0 else projected_supply / projected_consumption

    history = tuple(EnergyPoint(row.year, row.supply, row.consumption) for row in years)
    future = tuple(
        EnergyPoint(
            year,
            project(supply_model, year, last.supply),
            project(consumption_model, year, last.consumption),
        )
        for year in range(last.year + 1, last.year + config.chart_horizon + 1)
    )
    return EnergyForecast(
        next_year=next_year,
        projected_supply=projected_supply,
        projected_consumption=projected_consumption,
        projected_ratio=projected_ratio,
        status=config.status_banding.status_for(projected_ratio),
        history=history,
        forecast_line=history + future,
    )


def build_energy_forecast(
    supply_records: Iterable[RawRecord],
    consumption_records: Iterable[RawRecord],
    config: ForecastConfig | None = None,
) -> Optional[EnergyForecast]:
    analysis = build_energy_analysis(normalize_annual(supply_records), normalize_annual(consumption_records))
    return forecast_energy_analysis(analysis, config)


def build_energy_forecasts_by_commodity(
    supply_records: Iterable[RawRecord],
    consumption_records: Iterable[RawRecord],
    dimension: str = "energy_commodities",
    config: ForecastConfig | None = None,
) -> List[CommodityOutlook]:
    supply_groups = group_by_dimension(normalize_annual(supply_records), dimension)
    consumption_groups = group_by_dimension(normalize_annual(consumption_records), dimension)
    outlooks: List[CommodityOutlook] = []
    for commodity in sorted(set(supply_groups) | set(consumption_groups)):
        analysis = build_energy_analysis(supply_groups.get(commodity, []), consumption_groups.get(commodity, []))
        forecast = forecast_energy_analysis(analysis, config)
        outlooks.append(
            CommodityOutlook(
                commodity=commodity,
                analysis=analysis,
                forecast=forecast,
                alerts=tuple(energy_commodity_warnings(commodity, analysis, forecast)),
            )
        )
    return outlooks


def _forecast_accounts(
    series: Sequence[AnnualRow],
    official_growth: Sequence[AnnualRow],
    config: ForecastConfig,
) -> Optional[NationalAccountsForecast]:
    tail = tail_by_year(series, config.trend_window)
    if not tail:
        return None

    model = linear_regression([(row.year, row.value) for row in tail])
    last = tail[-1]
    next_year = last.year + config.kpi_horizon
    growth = merge_growth(compute_yoy_growth(tail), official_growth)
    latest_growth = growth[-1].growth_pct if growth else None
    status = (
        STATUS_PRESSURE
        if latest_growth is not None and latest_growth < GDP_SLOWDOWN_GROWTH_PCT
        else STATUS_STABLE
    )

    history = tuple(AccountsPoint(row.period_label, row.value) for row in tail)
    future = tuple(
        AccountsPoint(fiscal_year_label(year), project(model, year, last.value))
        for year in range(last.year + 1, last.year + config.chart_horizon + 1)
    )
    return NationalAccountsForecast(
        next_year=next_year,
        projected_constant=project(model, next_year, last.value),
        latest_growth=latest_growth,
        status=status,
        history=history,
        forecast_line=history + future,
        growth_series=tuple(growth),
    )


def build_gdp_forecast(
    gdp_records: Iterable[RawRecord],
    growth_records: Iterable[RawRecord] = (),
    config: ForecastConfig | None = None,
) -> Optional[NationalAccountsForecast]:
    """Constant-price GDP trend; the latest revision of each fiscal year is used."""
    series = latest_revision_per_year(normalize_accounts_rows(gdp_records))
    return _forecast_accounts(series, normalize_official_growth(growth_records), config or default_config())


def build_gfcf_forecast(
    gfcf_records: Iterable[RawRecord], config: ForecastConfig | None = None
) -> Optional[NationalAccountsForecast]:
    series = latest_revision_per_year(normalize_accounts_rows(gfcf_records))
    return _forecast_accounts(series, (), config or default_config())


def build_gva_forecast(
    gva_records: Iterable[RawRecord],
    filters: Optional[Mapping[str, Any]] = None,
    config: ForecastConfig | None = None,
) -> Optional[NationalAccountsForecast]:
    """Total constant-price GVA trend, optionally restricted to e.g. one industry."""
    rows = normalize_gva_rows(gva_records)
    if filters:
        rows = select_rows(rows, **filters)
    series = [
        AnnualRow(
            year=total.year,
            period_label=total.fiscal_year,
            value=total.total_constant,
            fields={"current_price": total.total_current},
        )
        for total in aggregate_gva_by_year(rows)
    ]
    return _forecast_accounts(series, (), config or default_config())


def build_wpi_forecast(
    wpi_records: Iterable[RawRecord],
    filters: Optional[Mapping[str, Any]] = None,
    config: ForecastConfig | None = None,
) -> Optional[WpiForecast]:
    config = config or default_config()
    rows = normalize_wpi_rows(wpi_records)
    if filters:
        rows = select_rows(rows, **filters)
    annual = average_annual_inflation(monthly_inflation(rows))
    tail = tail_by_year(annual, config.trend_window)
    if not tail:
        return None

    model = linear_regression([(row.year, row.avg_inflation_pct) for row in tail])
    last = tail[-1]
    next_year = last.year + config.kpi_horizon
    projected = project(model, next_year, last.avg_inflation_pct)

    history = tuple(InflationPoint(row.year, row.avg_inflation_pct) for row in tail)
    future = tuple(
        InflationPoint(year, project(model, year, last.avg_inflation_pct))
        for year in range(last.year + 1, last.year + config.chart_horizon + 1)
    )
    return WpiForecast(
        next_year=next_year,
        projected_inflation=projected,
        latest_annual_inflation=last.avg_inflation_pct,
        status=STATUS_PRESSURE if projected > WPI_INFLATION_ALERT_PCT else STATUS_STABLE,
        history=history,
        forecast_line=history + future,
    )


def iip_headline_series(iip_records: Iterable[RawRecord]) -> List[MonthlyRow]:
    return select_rows(normalize_iip_rows(iip_records), **IIP_HEADLINE)


def _flat_iip_forecast(history: Tuple[IipPoint, ...], horizon: int) -> IipForecast:
    current = history[-1].index
    projections = tuple(
        IipProjection(t=len(history) + step, index=current, period_label=f"M+{step}")
        for step in range(1, horizon + 1)
    )
    return IipForecast(
        next_months=projections,
        history=history,
        forecast_line=history + tuple(IipPoint(p.period_label, p.index) for p in projections),
        current_index=current,
        projected_index=current,
        projected_growth=0.0,
        avg_monthly_growth=0.0,
    )


def build_iip_forecast(iip_records: Iterable[RawRecord], config: ForecastConfig | None = None) -> IipForecast:
    """Monthly headline index trend, indexed by position so months stay contiguous."""
    config = config or default_config()
    rows = iip_headline_series(iip_records)
    if not rows:
        return IipForecast.empty()

    tail = rows[-config.iip_window:]
    history = tuple(IipPoint(row.period_label, row.value) for row in tail)
    points = [(position, row.value) for position, row in enumerate(tail, start=1)]
    model = linear_regression(points)
    if model is None:
        return _flat_iip_forecast(history, config.iip_horizon)

    last_t = len(points)
    projections: List[IipProjection] = []
    for step in range(1, config.iip_horizon + 1):
        predicted = model.predict(last_t + step)
        if math.isfinite(predicted):
            projections.append(IipProjection(t=last_t + step, index=predicted, period_label=f"M+{step}"))

    current = history[-1].index
    projected = projections[-1].index if projections else None
    projected_growth = (
        (projected - current) / current * 100 if projected is not None and current > 0 else None
    )
    step_growth = [
        (cur.index - prev.index) / prev.index * 100
        for prev, cur in zip(projections, projections[1:])
        if prev.index > 0
    ]
    avg_monthly_growth = sum(step_growth) / len(step_growth) if step_growth else None

    return IipForecast(
        next_months=tuple(projections),
        history=history,
        forecast_line=history + tuple(IipPoint(p.period_label, p.index) for p in projections),
        current_index=current,
        projected_index=projected,
        projected_growth=projected_growth,
        avg_monthly_growth=avg_monthly_growth,
        status=STATUS_PRESSURE if projected_growth is not None and projected_growth < 0 else STATUS_STABLE,
    )

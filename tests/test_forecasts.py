import pytest

from econtrend.config import FISCAL_MONTHS, ForecastConfig
from econtrend.data_models import IipForecast
from econtrend.forecasts import (
    build_energy_forecast,
    build_energy_forecasts_by_commodity,
    build_gdp_forecast,
    build_gfcf_forecast,
    build_gva_forecast,
    build_iip_forecast,
    build_wpi_forecast,
)
from econtrend.risk import detect_gdp_risk


def fy(year):
    return f"{year}-{(year + 1) % 100:02d}"


def energy_rows(values_by_year, **fields):
    return [{"year": fy(year), "value": str(value), **fields} for year, value in values_by_year.items()]


def iip_rows(indices, start_year=2020, **overrides):
    rows = []
    for position, index in enumerate(indices):
        row = {
            "year": str(start_year + position // 12),
            "month": FISCAL_MONTHS[position % 12],
            "type": "General",
            "category": "General",
            "index": index,
            "growth_rate": "1.0",
        }
        row.update(overrides)
        rows.append(row)
    return rows


def test_energy_forecast_projects_trend_from_last_ten_years():
    supply = energy_rows({year: 100 + 10 * (year - 2010) for year in range(2010, 2022)})
    consumption = energy_rows({year: 100 + 5 * (year - 2010) for year in range(2010, 2022)})
    forecast = build_energy_forecast(supply, consumption)

    assert [point.x for point in forecast.history] == list(range(2012, 2022))
    assert forecast.next_year == 2022
    assert forecast.projected_supply == pytest.approx(220)
    assert forecast.projected_consumption == pytest.approx(160)
    assert forecast.projected_ratio == pytest.approx(220 / 160)
    assert forecast.status == "surplus"
    assert len(forecast.forecast_line) == 15
    assert forecast.forecast_line[-1].x == 2026
    assert forecast.forecast_line[-1].supply == pytest.approx(260)


def test_energy_forecast_pressure_status_and_horizon_config():
    supply = energy_rows({2018: 90, 2019: 90, 2020: 90})
    consumption = energy_rows({2018: 100, 2019: 100, 2020: 100})
    forecast = build_energy_forecast(supply, consumption, ForecastConfig(chart_horizon=2))
    assert forecast.status == "pressure"
    assert [point.x for point in forecast.forecast_line] == [2018, 2019, 2020, 2021, 2022]


def test_energy_forecast_single_year_repeats_last_value():
    forecast = build_energy_forecast(energy_rows({2021: 80}), energy_rows({2021: 80}))
    assert forecast.projected_supply == 80
    assert forecast.projected_consumption == 80
    assert forecast.status == "stable"
    assert all(point.supply == 80 for point in forecast.forecast_line)


def test_energy_forecast_empty_or_invalid_input_returns_none():
    assert build_energy_forecast([], []) is None
    assert build_energy_forecast([{"year": "n/a", "value": 1}], [{"year": "2020-21", "value": "x"}]) is None


def test_builders_are_deterministic():
    supply = energy_rows({2018: 100, 2019: 97, 2020: 120})
    consumption = energy_rows({2018: 90, 2019: 101, 2020: 99})
    assert build_energy_forecast(supply, consumption) == build_energy_forecast(supply, consumption)
    rows = iip_rows([100, 103, 101, 104])
    assert build_iip_forecast(rows) == build_iip_forecast(rows)


def test_commodity_outlooks_flag_energy_deficit():
    supply = energy_rows({2019: 100, 2020: 95, 2021: 90}, energy_commodities="Crude Oil")
    supply += energy_rows({2019: 10, 2020: 10, 2021: 10}, energy_commodities="Solar")
    consumption = energy_rows({2019: 100, 2020: 105, 2021: 112}, energy_commodities="Crude Oil")
    consumption += energy_rows({2019: 5, 2020: 5, 2021: 5}, energy_commodities="Solar")

    outlooks = build_energy_forecasts_by_commodity(supply, consumption)
    assert [outlook.commodity for outlook in outlooks] == ["Crude Oil", "Solar"]

    crude = outlooks[0]
    assert crude.analysis.latest.ratio == pytest.approx(90 / 112)
    alert_ids = [alert.id for alert in crude.alerts]
    assert alert_ids == ["energy-crude-oil-deficit", "energy-crude-oil-decline"]
    assert "0.80" in crude.alerts[0].message
    assert "10.0%" in crude.alerts[1].message
    assert outlooks[1].alerts == ()


def gdp_records():
    return [
        {"year": "2019-20", "revision": "1st RE", "constant_price": "100", "current_price": "150"},
        {"year": "2019-20", "revision": "2nd RE", "constant_price": "110", "current_price": "160"},
        {"year": "2020-21", "revision": "1st RE", "constant_price": "120", "current_price": "168"},
        {"year": "2021-22", "revision": "PE", "constant_price": "130", "current_price": "173.04"},
        {"year": "2022-23", "revision": "PE", "constant_price": "", "current_price": "180"},
    ]


def test_gdp_forecast_dedupes_revisions_and_flags_slowdown():
    forecast = build_gdp_forecast(gdp_records())
    assert [point.x for point in forecast.history] == ["2019-20", "2020-21", "2021-22"]
    assert forecast.history[0].constant_price == 110
    assert forecast.next_year == 2022
    assert forecast.projected_constant == pytest.approx(140)
    assert [point.x for point in forecast.forecast_line[3:]] == ["2022-23", "2023-24", "2024-25", "2025-26", "2026-27"]
    assert forecast.forecast_line[-1].constant_price == pytest.approx(180)
    assert forecast.growth_series[0].manual_growth_pct == pytest.approx(5.0)
    assert forecast.latest_growth == pytest.approx(3.0)
    assert forecast.status == "pressure"


def test_gdp_official_growth_wins():
    growth = [{"year": "2021-22", "current_price": "7.5"}, {"year": "2020-21", "current_price": "bad"}]
    forecast = build_gdp_forecast(gdp_records(), growth)
    assert forecast.latest_growth == 7.5
    assert forecast.growth_series[-1].manual_growth_pct == pytest.approx(3.0)
    assert forecast.status == "stable"


def test_gdp_growth_without_current_price_stays_on_constant_prices():
    records = [
        {"year": "2019-20", "constant_price": 100, "current_price": 150},
        {"year": "2020-21", "constant_price": 108, "current_price": 165},
        {"year": "2021-22", "constant_price": 116, "current_price": ""},
    ]
    forecast = build_gdp_forecast(records)
    assert forecast.growth_series[0].manual_growth_pct == pytest.approx(10.0)
    assert forecast.latest_growth == pytest.approx((116 - 108) / 108 * 100)
    assert forecast.status == "stable"
    assert detect_gdp_risk(forecast.latest_growth) is None


def test_national_accounts_builders_handle_empty_input():
    assert build_gdp_forecast([]) is None
    assert build_gfcf_forecast([{"year": "2020-21", "constant_price": None}]) is None


def test_gfcf_single_year_is_flat():
    forecast = build_gfcf_forecast([{"year": "2021-22", "constant_price": 55}])
    assert forecast.projected_constant == 55
    assert forecast.latest_growth is None
    assert forecast.status == "stable"
    assert all(point.constant_price == 55 for point in forecast.forecast_line)


def test_gva_forecast_for_one_industry():
    records = [
        {"year": "2020-21", "industry": "Mining", "current_price": 100, "constant_price": 80},
        {"year": "2021-22", "industry": "Mining", "current_price": 110, "constant_price": 90},
        {"year": "2021-22", "industry": "Trade", "current_price": 500, "constant_price": 400},
    ]
    forecast = build_gva_forecast(records, filters={"industry": "Mining"})
    assert [point.constant_price for point in forecast.history] == [80, 90]
    assert forecast.projected_constant == pytest.approx(100)
    assert forecast.latest_growth == pytest.approx(10.0)


def wpi_records():
    return [
        {"year": "2021", "month": "April", "index_value": 100, "item": "All commodities"},
        {"year": "2021", "month": "May", "index_value": 105, "item": "All commodities"},
        {"year": "2022", "month": "April", "index_value": 111.825, "item": "All commodities"},
        {"year": "2022", "month": "May", "index_value": 119.093625, "item": "All commodities"},
        {"year": "2022", "month": "May", "index_value": 1, "item": "Onion"},
    ]


def test_wpi_forecast_from_annual_average_inflation():
    forecast = build_wpi_forecast(wpi_records(), filters={"item": "All commodities"})
    assert [point.x for point in forecast.history] == [2021, 2022]
    assert forecast.latest_annual_inflation == pytest.approx(6.5)
    assert forecast.projected_inflation == pytest.approx(8.0)
    assert forecast.status == "pressure"
    assert forecast.forecast_line[-1].x == 2027


def test_wpi_single_year_is_flat_and_empty_is_none():
    records = wpi_records()[:2]
    forecast = build_wpi_forecast(records)
    assert forecast.projected_inflation == pytest.approx(5.0)
    assert forecast.status == "stable"
    assert build_wpi_forecast(records[:1]) is None


def test_iip_forecast_projects_six_months_by_position():
    forecast = build_iip_forecast(iip_rows([100, 102, 104, 106]))
    assert [p.period_label for p in forecast.next_months] == ["M+1", "M+2", "M+3", "M+4", "M+5", "M+6"]
    assert [p.t for p in forecast.next_months] == [5, 6, 7, 8, 9, 10]
    assert forecast.current_index == 106
    assert forecast.projected_index == pytest.approx(118)
    assert forecast.projected_growth == pytest.approx((118 - 106) / 106 * 100)
    steps = [(b - a) / a * 100 for a, b in zip(range(108, 118, 2), range(110, 120, 2))]
    assert forecast.avg_monthly_growth == pytest.approx(sum(steps) / len(steps))
    assert len(forecast.forecast_line) == 10
    assert forecast.history[0].period_label == "April 2020"
    assert forecast.status == "stable"


def test_iip_single_point_falls_back_to_flat_forecast():
    forecast = build_iip_forecast(iip_rows([131.5]))
    assert len(forecast.next_months) == 6
    assert all(point.index == 131.5 for point in forecast.next_months)
    assert forecast.projected_growth == 0
    assert forecast.avg_monthly_growth == 0


def test_iip_uses_headline_rows_and_sixty_month_window():
    rows = iip_rows([100 - i for i in range(70)])
    rows += iip_rows([500], category="Mining")
    forecast = build_iip_forecast(rows)
    assert len(forecast.history) == 60
    assert forecast.history[0].index == 90
    assert forecast.status == "pressure"


def test_iip_without_headline_rows_is_empty():
    assert build_iip_forecast([]) == IipForecast.empty()
    assert build_iip_forecast(iip_rows([100, 101], type="Sectoral")) == IipForecast.empty()

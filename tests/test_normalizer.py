import math

from econtrend.normalizer import (
    NormalizationReport,
    normalize_annual,
    normalize_iip_rows,
    normalize_monthly,
    normalize_official_growth,
    select_rows,
)


def test_annual_rows_drop_unparseable_period_or_value():
    records = [
        {"year": "2021-22", "value": "120.5", "energy_commodities": "Coal"},
        {"year": "bad", "value": 10},
        {"year": "2019-20", "value": ""},
        {"year": None, "value": 5},
        {"year": "2020-21", "value": 99},
        "not a record",
    ]
    rows = normalize_annual(records)
    assert len(rows) <= len(records)
    assert [row.year for row in rows] == [2020, 2021]
    assert all(math.isfinite(row.value) for row in rows)
    assert rows[1].period_label == "2021-22"
    assert rows[1].fields == {"energy_commodities": "Coal"}


def test_annual_rows_use_requested_value_field():
    records = [{"year": "2020-21", "current_price": "7.5", "constant_price": "100"}]
    rows = normalize_official_growth(records)
    assert rows[0].value == 7.5
    assert rows[0].fields["constant_price"] == "100"


def test_report_counts_dropped_rows():
    report = NormalizationReport()
    normalize_annual([{"year": "2020-21", "value": 1}, {"year": "x", "value": 2}], report=report)
    normalize_annual([{"year": "2021-22", "value": 3}], report=report)
    assert report.received == 3
    assert report.kept == 2
    assert report.dropped == 1


def test_monthly_rows_sort_by_year_then_fiscal_month():
    records = [
        {"year": "2023", "month": "January", "index_value": "150"},
        {"year": "2023", "month": "April", "index_value": "140"},
        {"year": "2022", "month": "March", "index_value": "130"},
        {"year": "2023", "month": "Smarch", "index_value": "1"},
        {"year": "2023", "month": "May", "index_value": "n/a"},
    ]
    rows = normalize_monthly(records)
    assert [(row.year, row.month_order) for row in rows] == [(2022, 11), (2023, 0), (2023, 9)]
    assert rows[0].period_label == "March 2022"
    assert rows[2].value == 150.0


def test_iip_rows_fall_back_to_index_value_and_keep_optional_growth():
    records = [
        {"year": "2023", "month": "April", "index": None, "index_value": "141.2", "growth_rate": "x", "type": "General"},
        {"year": "2023", "month": "May", "index": "143", "growth_rate": "-1.5", "type": "General"},
    ]
    rows = normalize_iip_rows(records)
    assert [row.value for row in rows] == [141.2, 143.0]
    assert rows[0].growth_rate is None
    assert rows[1].growth_rate == -1.5
    assert rows[1].fields == {"type": "General"}


def test_select_rows_matches_every_criterion():
    rows = normalize_iip_rows(
        [
            {"year": "2023", "month": "April", "index": 1, "type": "General", "category": "General"},
            {"year": "2023", "month": "April", "index": 2, "type": "General", "category": "Mining"},
            {"year": "2023", "month": "April", "index": 3, "type": "Sectoral", "category": "General"},
        ]
    )
    selected = select_rows(rows, type="General", category="General")
    assert [row.value for row in selected] == [1.0]

"""Per-period reduction of normalized rows."""
from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Sequence, Tuple, TypeVar

from .config import SUPPLY_TREND_BAND_PCT
from .data_models import (
    AnnualInflation,
    AnnualRow,
    EnergyAnalysis,
    EnergyYear,
    GrowthRow,
    GvaYear,
    MonthlyInflation,
    MonthlyRow,
)
from .utils import to_number

RowT = TypeVar("RowT", AnnualRow, MonthlyRow)


@dataclass
class PeriodTotal:
    year: int
    period_label: str
    total: float = 0.0
    count: int = 0

    def add(self, value: float) -> None:
        self.total += value
        self.count += 1

    def mean(self) -> float:
        return self.total / self.count if self.count else 0.0


def sum_by_year(rows: Iterable[AnnualRow]) -> List[PeriodTotal]:
    totals: Dict[int, PeriodTotal] = {}
    for row in rows:
        bucket = totals.get(row.year)
        if bucket is None:
            bucket = totals[row.year] = PeriodTotal(row.year, row.period_label)
        bucket.add(row.value)
    return [totals[year] for year in sorted(totals)]


def group_by_dimension(rows: Iterable[RowT], dimension: str) -> Dict[str, List[RowT]]:
    """Split rows by a carried classification field; rows without it are skipped."""
    groups: Dict[str, List[RowT]] = defaultdict(list)
    for row in rows:
        key = row.fields.get(dimension)
        if key is None or str(key).strip() == "":
            continue
        groups[str(key)].append(row)
    return dict(groups)


@dataclass
class _EnergyBucket:
    year: int
    fiscal_year: str
    supply: float = 0.0
    consumption: float = 0.0


def build_energy_analysis(
    supply_rows: Iterable[AnnualRow], consumption_rows: Iterable[AnnualRow]
) -> EnergyAnalysis:
    """Sum both feeds per fiscal year and derive the supply/consumption ratio."""
    buckets: Dict[int, _EnergyBucket] = {}

    def bucket_for(row: AnnualRow) -> _EnergyBucket:
        bucket = buckets.get(row.year)
        if bucket is None:
            bucket = buckets[row.year] = _EnergyBucket(row.year, row.period_label)
        return bucket

    for row in supply_rows:
        bucket_for(row).supply += row.value
    for row in consumption_rows:
        bucket_for(row).consumption += row.value

    by_year = tuple(
        EnergyYear(
            year=bucket.year,
            fiscal_year=bucket.fiscal_year,
            supply=bucket.supply,
            consumption=bucket.consumption,
            ratio=None if bucket.consumption == 0 else bucket.supply / bucket.consumption,
        )
        for bucket in (buckets[year] for year in sorted(buckets))
    )
    return EnergyAnalysis(by_year=by_year)


def supply_trend(analysis: EnergyAnalysis) -> str:
    window = analysis.last_5_years
    if len(window) < 2 or window[0].supply == 0:
        return "stable"
    pct = (window[-1].supply - window[0].supply) / window[0].supply * 100
    if pct < -SUPPLY_TREND_BAND_PCT:
        return "declining"
    if pct > SUPPLY_TREND_BAND_PCT:
        return "growing"
    return "stable"


def latest_revision_per_year(rows: Iterable[AnnualRow]) -> List[AnnualRow]:
    """Keep, per year, the row whose revision tag sorts last."""
    chosen: Dict[int, AnnualRow] = {}
    for row in rows:
        existing = chosen.get(row.year)
        if existing is None or str(row.fields.get("revision") or "") > str(existing.fields.get("revision") or ""):
            chosen[row.year] = row
    return [chosen[year] for year in sorted(chosen)]


def _pair_levels(prev: AnnualRow, cur: AnnualRow) -> Tuple[float, float]:
    prev_current = to_number(prev.fields.get("current_price"))
    cur_current = to_number(cur.fields.get("current_price"))
    if math.isnan(prev_current) or math.isnan(cur_current):
        return prev.value, cur.value
    return prev_current, cur_current


def compute_yoy_growth(series: Sequence[AnnualRow]) -> List[GrowthRow]:
    """Year-over-year growth of consecutive rows.

    Both rows of a pair are measured on current prices when each has one,
    otherwise both fall back to constant prices.
    """
    result: List[GrowthRow] = []
    for prev, cur in zip(series, series[1:]):
        prev_level, cur_level = _pair_levels(prev, cur)
        if prev_level == 0:
            continue
        result.append(
            GrowthRow(
                year=cur.year,
                fiscal_year=cur.period_label,
                manual_growth_pct=(cur_level - prev_level) / prev_level * 100,
                level=cur_level,
            )
        )
    return result


def merge_growth(manual: Iterable[GrowthRow], official: Iterable[AnnualRow]) -> List[GrowthRow]:
    merged: Dict[int, GrowthRow] = {row.year: row for row in manual}
    for row in official:
        existing = merged.get(row.year) or GrowthRow(year=row.year, fiscal_year=row.period_label)
        merged[row.year] = replace(existing, official_growth_pct=row.value)
    return [merged[year] for year in sorted(merged)]


def monthly_inflation(series: Sequence[MonthlyRow]) -> List[MonthlyInflation]:
    result: List[MonthlyInflation] = []
    for prev, cur in zip(series, series[1:]):
        if prev.value == 0:
            continue
        result.append(
            MonthlyInflation(
                year=cur.year,
                period_label=cur.period_label,
                index=cur.value,
                inflation_pct=(cur.value - prev.value) / prev.value * 100,
            )
        )
    return result


def average_annual_inflation(series: Iterable[MonthlyInflation]) -> List[AnnualInflation]:
    totals: Dict[int, PeriodTotal] = {}
    for row in series:
        if not math.isfinite(row.inflation_pct):
            continue
        bucket = totals.get(row.year)
        if bucket is None:
            bucket = totals[row.year] = PeriodTotal(row.year, str(row.year))
        bucket.add(row.inflation_pct)
    return [AnnualInflation(year=year, avg_inflation_pct=totals[year].mean()) for year in sorted(totals)]


def aggregate_gva_by_year(rows: Iterable[AnnualRow]) -> List[GvaYear]:
    current: Dict[int, PeriodTotal] = {}
    constant: Dict[int, float] = defaultdict(float)
    for row in rows:
        bucket = current.get(row.year)
        if bucket is None:
            bucket = current[row.year] = PeriodTotal(row.year, row.period_label)
        bucket.add(row.value)
        constant_price = to_number(row.fields.get("constant_price"))
        if not math.isnan(constant_price):
            constant[row.year] += constant_price
    return [
        GvaYear(
            year=year,
            fiscal_year=current[year].period_label,
            total_current=current[year].total,
            total_constant=constant[year],
        )
        for year in sorted(current)
    ]


def aggregate_gva_by_dimension(rows: Iterable[AnnualRow], dimension: str = "industry") -> Dict[str, List[GvaYear]]:
    return {key: aggregate_gva_by_year(group) for key, group in group_by_dimension(rows, dimension).items()}

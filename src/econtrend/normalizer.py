"""Conversion of raw statistical records into typed, period-keyed rows.

This is the single point where untyped records become typed rows. Records whose
period or value cannot be resolved are dropped without raising; government feeds
routinely carry partial rows. Callers that need to observe the drop rate can pass a
:class:`NormalizationReport`.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, TypeVar, Union

from .config import MONTH_NOT_FOUND
from .data_models import AnnualRow, MonthlyRow
from .utils import fiscal_month_order, parse_fiscal_year, to_number

logger = logging.getLogger(__name__)

RawRecord = Mapping[str, Any]
RowT = TypeVar("RowT", AnnualRow, MonthlyRow)


@dataclass
class NormalizationReport:
    received: int = 0
    kept: int = 0

    @property
    def dropped(self) -> int:
        return self.received - self.kept


def _account(kind: str, received: int, kept: int, report: Optional[NormalizationReport]) -> None:
    if report is not None:
        report.received += received
        report.kept += kept
    if kept < received:
        logger.debug("Dropped %d of %d %s records during normalization", received - kept, received, kind)


def _first_present(record: RawRecord, keys: Sequence[str]) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def normalize_annual(
    records: Iterable[RawRecord],
    value_field: str = "value",
    year_field: str = "year",
    report: Optional[NormalizationReport] = None,
) -> List[AnnualRow]:
    """Normalize fiscal-year records, sorted ascending by start year.

    Every key other than the year and value fields is carried through unchanged in
    ``AnnualRow.fields``.
    """
    rows: List[AnnualRow] = []
    received = 0
    for record in records:
        received += 1
        if not isinstance(record, Mapping):
            continue
        label = record.get(year_field)
        year = parse_fiscal_year(label)
        value = to_number(record.get(value_field))
        if math.isnan(year) or math.isnan(value):
            continue
        fields = {key: item for key, item in record.items() if key not in (year_field, value_field)}
        rows.append(AnnualRow(year=int(year), period_label=str(label).strip(), value=value, fields=fields))
    rows.sort(key=lambda row: row.year)
    _account(f"annual '{value_field}'", received, len(rows), report)
    return rows


def normalize_monthly(
    records: Iterable[RawRecord],
    value_fields: Union[str, Sequence[str]] = "index_value",
    growth_field: Optional[str] = None,
    year_field: str = "year",
    month_field: str = "month",
    report: Optional[NormalizationReport] = None,
) -> List[MonthlyRow]:
    """Normalize monthly records, sorted by year then fiscal month order.

    ``value_fields`` may list several candidate keys; the first one present (not
    ``None``) on a record supplies its value.
    """
    if isinstance(value_fields, str):
        value_fields = (value_fields,)
    consumed = {year_field, month_field, *value_fields}
    if growth_field:
        consumed.add(growth_field)

    rows: List[MonthlyRow] = []
    received = 0
    for record in records:
        received += 1
        if not isinstance(record, Mapping):
            continue
        raw_year = record.get(year_field)
        year = parse_fiscal_year(raw_year)
        month = str(record.get(month_field) or "").strip()
        order = fiscal_month_order(month)
        value = to_number(_first_present(record, value_fields))
        if math.isnan(year) or math.isnan(value) or order == MONTH_NOT_FOUND:
            continue
        growth_rate: Optional[float] = None
        if growth_field:
            growth = to_number(record.get(growth_field))
            growth_rate = None if math.isnan(growth) else growth
        rows.append(
            MonthlyRow(
                year=int(year),
                month=month,
                month_order=order,
                period_label=f"{month} {str(raw_year).strip()}",
                value=value,
                growth_rate=growth_rate,
                fields={key: item for key, item in record.items() if key not in consumed},
            )
        )
    rows.sort(key=lambda row: (row.year, row.month_order))
    _account("monthly", received, len(rows), report)
    return rows


def normalize_official_growth(
    records: Iterable[RawRecord], report: Optional[NormalizationReport] = None
) -> List[AnnualRow]:
    # The published growth feed reuses the current_price column for the growth percentage.
    return normalize_annual(records, value_field="current_price", report=report)


def normalize_accounts_rows(
    records: Iterable[RawRecord], report: Optional[NormalizationReport] = None
) -> List[AnnualRow]:
    return normalize_annual(records, value_field="constant_price", report=report)


def normalize_gva_rows(
    records: Iterable[RawRecord], report: Optional[NormalizationReport] = None
) -> List[AnnualRow]:
    return normalize_annual(records, value_field="current_price", report=report)


def normalize_wpi_rows(
    records: Iterable[RawRecord], report: Optional[NormalizationReport] = None
) -> List[MonthlyRow]:
    return normalize_monthly(records, value_fields="index_value", report=report)


def normalize_iip_rows(
    records: Iterable[RawRecord], report: Optional[NormalizationReport] = None
) -> List[MonthlyRow]:
    return normalize_monthly(
        records, value_fields=("index", "index_value"), growth_field="growth_rate", report=report
    )


def select_rows(rows: Iterable[RowT], **criteria: Any) -> List[RowT]:
    """Keep rows whose carried classification fields equal every criterion."""
    return [row for row in rows if all(row.fields.get(key) == value for key, value in criteria.items())]

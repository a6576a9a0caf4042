"""Utility helpers for coercing loosely-typed statistical records."""
from __future__ import annotations

import math
import re
from hashlib import sha256
from typing import Iterable

from .config import FISCAL_MONTHS, MONTH_NOT_FOUND


_FISCAL_YEAR_PATTERN = re.compile(r"^(\d{4})")


def to_number(value: object) -> float:
    """Return ``value`` as a finite float, or NaN when it cannot be read as one."""
    if value is None or isinstance(value, (bool, bytes, bytearray)):
        return math.nan
    if isinstance(value, str):
        value = value.strip()
        if not value or "_" in value:
            return math.nan
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return math.nan
    return number if math.isfinite(number) else math.nan


def parse_fiscal_year(label: object) -> float:
    """Leading start year of a label such as ``"2022-23"``; NaN when absent."""
    if label is None or isinstance(label, bool):
        return math.nan
    match = _FISCAL_YEAR_PATTERN.match(str(label).strip())
    return float(match.group(1)) if match else math.nan


def fiscal_month_order(name: object) -> int:
    month = str(name or "").strip()
    try:
        return FISCAL_MONTHS.index(month)
    except ValueError:
        return MONTH_NOT_FOUND


def fiscal_year_label(start_year: int) -> str:
    return f"{start_year}-{(start_year + 1) % 100:02d}"


def entity_slug(name: str) -> str:
    return re.sub(r"\s+", "-", name.strip()).lower()


def sha256_hexdigest(rows: Iterable[str]) -> str:
    digest = sha256()
    for row in rows:
        digest.update(row.encode("utf-8"))
    return digest.hexdigest()


class PipelineError(RuntimeError):
    """Raised when the dashboard load encounters a fatal error."""


class FetchError(PipelineError):
    """Raised in strict mode when one or more dataset fetches failed."""

    def __init__(self, failures: dict):
        self.failures = dict(failures)
        names = ", ".join(sorted(self.failures))
        super().__init__(f"Failed to fetch datasets: {names}")

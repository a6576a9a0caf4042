"""High level orchestration: concurrent dataset fetch, per-domain forecasts, alerts."""
from __future__ import annotations

import json
import logging
import os
import tempfile
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .aggregation import build_energy_analysis
from .config import ForecastConfig, default_config
from .data_models import (
    CommodityOutlook,
    EnergyAnalysis,
    EnergyForecast,
    IipForecast,
    NationalAccountsForecast,
    RiskAlert,
    WpiForecast,
)
from .forecasts import (
    build_energy_forecasts_by_commodity,
    build_gdp_forecast,
    build_gfcf_forecast,
    build_iip_forecast,
    build_wpi_forecast,
    forecast_energy_analysis,
    iip_headline_series,
)
from .normalizer import RawRecord, normalize_annual
from .risk import evaluate_dashboard_alerts
from .utils import FetchError, sha256_hexdigest

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Sequence[RawRecord]]

DOMAIN_DATASETS: Dict[str, Tuple[str, ...]] = {
    "energy": ("energy_supply", "energy_consumption"),
    "gdp": ("gdp", "gdp_growth"),
    "gfcf": ("gfcf",),
    "wpi": ("wpi",),
    "iip": ("iip",),
}


@dataclass
class DashboardResult:
    """Per-domain result slots; a domain whose inputs failed keeps ``None`` and an error."""

    energy: Optional[EnergyForecast] = None
    energy_analysis: Optional[EnergyAnalysis] = None
    commodities: List[CommodityOutlook] = field(default_factory=list)
    gdp: Optional[NationalAccountsForecast] = None
    gfcf: Optional[NationalAccountsForecast] = None
    wpi: Optional[WpiForecast] = None
    iip: Optional[IipForecast] = None
    alerts: List[RiskAlert] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)

    def forecasts_dict(self) -> Dict[str, object]:
        def dump(item):
            return item.as_dict() if item is not None else None

        return {
            "energy": dump(self.energy),
            "energy_analysis": dump(self.energy_analysis),
            "commodities": [outlook.as_dict() for outlook in self.commodities],
            "gdp": dump(self.gdp),
            "gfcf": dump(self.gfcf),
            "wpi": dump(self.wpi),
            "iip": dump(self.iip),
        }

    def as_dict(self) -> Dict[str, object]:
        payload = self.forecasts_dict()
        payload["alerts"] = [alert.as_dict() for alert in self.alerts]
        payload["errors"] = dict(self.errors)
        return payload


class DashboardLoader:
    """Fetch every dataset concurrently, then build each domain in sequence.

    Datasets without a configured fetcher are treated as empty record sets.
    """

    def __init__(self, fetchers: Mapping[str, Fetcher], config: ForecastConfig | None = None):
        self.fetchers = dict(fetchers)
        self.config = config or default_config()

    def fetch_all(self) -> Tuple[Dict[str, List[RawRecord]], Dict[str, Exception]]:
        records: Dict[str, List[RawRecord]] = {}
        failures: Dict[str, Exception] = {}
        if not self.fetchers:
            return records, failures
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures = {executor.submit(fetcher): name for name, fetcher in self.fetchers.items()}
            for future in as_completed(futures):
                name = futures[future]
                try:
                    records[name] = list(future.result() or [])
                except Exception as exc:
                    logger.warning("Fetch of dataset '%s' failed: %s", name, exc)
                    failures[name] = exc
        return records, failures

    def load(self, strict: bool = False) -> DashboardResult:
        """Run the combined load.

        With ``strict`` any failed fetch aborts the whole load with :class:`FetchError`;
        otherwise only the domains depending on a failed dataset are left empty.
        """
        logger.info("Loading %d datasets", len(self.fetchers))
        records, failures = self.fetch_all()
        if strict and failures:
            logger.error("Aborting load, failed datasets: %s", ", ".join(sorted(failures)))
            first = failures[sorted(failures)[0]]
            raise FetchError({name: str(exc) for name, exc in failures.items()}) from first

        result = DashboardResult()
        iip_growth_rates: List[Optional[float]] = []
        for domain, datasets in DOMAIN_DATASETS.items():
            failed = [name for name in datasets if name in failures]
            if failed:
                result.errors[domain] = "; ".join(f"{name}: {failures[name]}" for name in failed)
                continue
            inputs = [records.get(name, []) for name in datasets]
            if domain == "energy":
                result.energy_analysis = build_energy_analysis(normalize_annual(inputs[0]), normalize_annual(inputs[1]))
                result.energy = forecast_energy_analysis(result.energy_analysis, self.config)
                result.commodities = build_energy_forecasts_by_commodity(inputs[0], inputs[1], config=self.config)
            elif domain == "gdp":
                result.gdp = build_gdp_forecast(inputs[0], inputs[1], self.config)
            elif domain == "gfcf":
                result.gfcf = build_gfcf_forecast(inputs[0], self.config)
            elif domain == "wpi":
                result.wpi = build_wpi_forecast(inputs[0], config=self.config)
            elif domain == "iip":
                result.iip = build_iip_forecast(inputs[0], self.config)
                iip_growth_rates = [row.growth_rate for row in iip_headline_series(inputs[0])]

        result.alerts = evaluate_dashboard_alerts(
            energy=result.energy_analysis,
            gdp_growth_pct=result.gdp.latest_growth if result.gdp else None,
            wpi_inflation_pct=result.wpi.latest_annual_inflation if result.wpi else None,
            iip_growth_rates=iip_growth_rates,
        )
        for outlook in result.commodities:
            result.alerts.extend(outlook.alerts)
        logger.info("Load finished with %d alert(s) and %d failed domain(s)", len(result.alerts), len(result.errors))
        return result


class ResultWriter:
    def __init__(self, output_path: Path):
        self.output_path = output_path

    def digest(self, result: DashboardResult) -> str:
        return sha256_hexdigest(
            [json.dumps(result.forecasts_dict(), sort_keys=True, ensure_ascii=False, separators=(",", ":"))]
        )

    def write(self, result: DashboardResult) -> None:
        payload = result.as_dict()
        payload["digest"] = self.digest(result)
        output_dir = self.output_path.parent
        if output_dir and not output_dir.exists():
            output_dir.mkdir(parents=True, exist_ok=True)
        temp_file = tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            delete=False,
            dir=output_dir or Path("."),
        )
        try:
            with temp_file:
                json.dump(payload, temp_file, indent=2, ensure_ascii=False)
            os.replace(temp_file.name, self.output_path)
        finally:
            if os.path.exists(temp_file.name):
                os.unlink(temp_file.name)


def run_dashboard(
    fetchers: Mapping[str, Fetcher],
    output_path: Path | None = None,
    strict: bool = False,
    config: ForecastConfig | None = None,
) -> DashboardResult:
    result = DashboardLoader(fetchers, config).load(strict=strict)
    if output_path is not None:
        ResultWriter(output_path).write(result)
    return result

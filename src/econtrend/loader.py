"""File-backed record sources standing in for the statistical API fetch layer."""
from __future__ import annotations

import csv
import json
from functools import partial
from pathlib import Path
from typing import Any, Callable, Dict, List

DATASETS = (
    "energy_supply",
    "energy_consumption",
    "gdp",
    "gdp_growth",
    "gfcf",
    "wpi",
    "iip",
)

_SUFFIXES = (".json", ".csv")


def read_records(path: Path) -> List[Dict[str, Any]]:
    """Read raw records from a CSV extract or a JSON API dump.

    JSON files may hold either a bare list of objects or the API envelope
    ``{"data": [...]}``. Values are returned as found; coercion happens later.
    """
    suffix = path.suffix.lower()
    if suffix == ".csv":
        with path.open(newline="", encoding="utf-8-sig") as handle:
            return [dict(row) for row in csv.DictReader(handle)]
    if suffix == ".json":
        payload = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(payload, dict):
            payload = payload.get("data")
        if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
            raise ValueError(f"{path.name}: expected a list of records or a {{\"data\": [...]}} payload")
        return payload
    raise ValueError(f"Unsupported record file '{path.name}'")


def dataset_path(directory: Path, name: str) -> Path:
    for suffix in _SUFFIXES:
        candidate = directory / f"{name}{suffix}"
        if candidate.exists():
            return candidate
    raise FileNotFoundError(f"No {name}.json or {name}.csv in {directory}")


def _read_dataset(directory: Path, name: str) -> List[Dict[str, Any]]:
    return read_records(dataset_path(directory, name))


def file_fetchers(directory: Path) -> Dict[str, Callable[[], List[Dict[str, Any]]]]:
    """One zero-argument fetcher per dataset; a missing file fails only its own fetch."""
    return {name: partial(_read_dataset, directory, name) for name in DATASETS}

"""Command line interface for building dashboard forecasts from record files."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .config import default_config
from .loader import file_fetchers
from .pipeline import run_dashboard
from .utils import PipelineError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Forecast economic indicators and evaluate risk alerts")
    parser.add_argument("data_dir", type=Path, help="Directory holding <dataset>.json or <dataset>.csv record files")
    parser.add_argument("output", type=Path, help="Path to write the combined result JSON")
    parser.add_argument("--strict", action="store_true", help="Abort when any dataset cannot be loaded")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        result = run_dashboard(
            fetchers=file_fetchers(args.data_dir),
            output_path=args.output,
            strict=args.strict,
            config=default_config(),
        )
    except PipelineError as exc:
        logger.error("%s", exc)
        return 1
    for domain, message in sorted(result.errors.items()):
        logger.warning("Domain '%s' unavailable: %s", domain, message)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

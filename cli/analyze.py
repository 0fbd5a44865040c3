#!/usr/bin/env python3
"""
Elliott Wave analysis CLI.

Loads an OHLCV CSV, optionally merges an external analysis (JSON or free
text), and prints the resulting WaveAnalysisResult as JSON.
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from wavecore.analysis import ElliottWaveAnalyzer
from wavecore.config import DEFAULT_CONFIG
from wavecore.config_loader import load_config_from_yaml
from wavecore.data.loader import DataLoader
from wavecore.validation.merger import result_to_json


def setup_logging(log_path: Optional[Path] = None, verbose: bool = False):
    """
    Setup logging to stderr and optionally to file.

    Args:
        log_path: Path to log file (None = stderr only)
        verbose: If True, use DEBUG level, otherwise INFO
    """
    level = logging.DEBUG if verbose else logging.INFO

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    # stdout carries the JSON result
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Detect Elliott Waves in an OHLCV CSV and print the analysis as JSON",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "bars",
        type=str,
        help="CSV with a date (or epoch 'timestamp') column and open/high/low/close[/volume]",
    )
    parser.add_argument(
        "--external",
        type=str,
        default=None,
        help="File with an external analysis (JSON object, JSON list or free text)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML analysis config (default: built-in defaults)",
    )
    parser.add_argument(
        "--start-date", "-s",
        default=None,
        help="Analysis window start (inclusive)",
    )
    parser.add_argument(
        "--end-date", "-e",
        default=None,
        help="Analysis window end (inclusive)",
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Write the JSON result to this file instead of stdout",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also write logs to this file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging (DEBUG level)",
    )
    args = parser.parse_args(argv)

    setup_logging(Path(args.log_file) if args.log_file else None, args.verbose)
    logger = logging.getLogger(__name__)

    try:
        config = load_config_from_yaml(args.config) if args.config else DEFAULT_CONFIG
        bars = DataLoader(args.bars).load_bars(start_date=args.start_date, end_date=args.end_date)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    external = None
    if args.external:
        external_path = Path(args.external)
        if not external_path.exists():
            print(f"Error: External analysis file not found: {external_path}", file=sys.stderr)
            return 1
        external = external_path.read_text(encoding="utf-8")

    logger.info(f"Config: {config.name}")
    logger.info(f"Bars: {len(bars)} from {args.bars}")

    result = ElliottWaveAnalyzer(config).analyze(bars, external=external)
    for warning in result.warnings:
        logger.debug(f"{type(warning).__name__}: {warning}")

    output = result_to_json(result)
    if args.output:
        out_path = Path(args.output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(output + "\n", encoding="utf-8")
        logger.info(f"Result written to {out_path}")
    else:
        print(output)

    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Command-line front end: list sources and load one into the pipeline.

Examples::

    vibeview list --root data/vibrationjson
    vibeview load K9252607546 --threshold 2000 --export out/

``load`` streams the payload with a progress readout, then prints the dataset
summary and optionally exports the downsampled series and spectrum as CSV.
Ctrl+C cancels the ingestion cleanly.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from .config import VibeViewConfig, load_config
from .core.models import Cancelled
from .core.pipeline import VibrationPipeline
from .dataio import csv_writer
from .dataio.manifest import ManifestCatalog
from .ingest.errors import IngestError

logger = logging.getLogger(__name__)

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="VibeView vibration capture tools")
    parser.add_argument(
        "-c",
        "--config",
        type=str,
        default=None,
        help="YAML config file (default: built-in defaults)",
    )
    parser.add_argument(
        "--root",
        type=str,
        default=None,
        help="Local dataset directory holding <source>.json payloads",
    )
    parser.add_argument(
        "--url",
        type=str,
        default=None,
        help="HTTP base URL serving <source>.json payloads (overrides --root)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List sources named in manifest.json")

    load = sub.add_parser("load", help="Ingest one source and summarise it")
    load.add_argument("source", help="Source id (file name without .json)")
    load.add_argument(
        "--threshold",
        type=int,
        default=None,
        help="Number of LTTB display points (default: from config, else 15000; 10000 above 1M samples)",
    )
    load.add_argument(
        "--max-bins",
        type=int,
        default=None,
        help="Samples fed into the spectrum preview (default: from config, 4096)",
    )
    load.add_argument(
        "--sampling-rate",
        type=float,
        default=None,
        help="Sampling rate in Hz (default: from config, 25600)",
    )
    load.add_argument(
        "--export",
        type=str,
        default=None,
        help="Directory to write <source>_display.csv and <source>_spectrum.csv",
    )
    return parser


def _resolve_config(args: argparse.Namespace) -> VibeViewConfig:
    cfg = load_config(args.config)
    if args.root:
        cfg = replace(cfg, dataset_root=Path(args.root))
    if args.url:
        cfg = replace(cfg, base_url=args.url)
    if getattr(args, "sampling_rate", None):
        cfg = replace(cfg, sampling_rate_hz=float(args.sampling_rate))
    return cfg.sanitized()


def _print_progress(percent: float) -> None:
    print(f"\r[INFO] Loading… {percent:5.1f}%", end="", file=sys.stderr, flush=True)


def _cmd_list(cfg: VibeViewConfig) -> int:
    sources = ManifestCatalog(cfg.dataset_root).list_sources()
    if not sources:
        print(f"[WARN] No sources listed in {cfg.dataset_root / 'manifest.json'}", file=sys.stderr)
        return 1
    for source_id in sources:
        print(source_id)
    return 0


def _cmd_load(cfg: VibeViewConfig, args: argparse.Namespace) -> int:
    with VibrationPipeline.from_config(cfg) as pipeline:
        session = pipeline.load(args.source, on_progress=_print_progress)
        try:
            outcome = session.result()
        except KeyboardInterrupt:
            session.cancel()
            outcome = session.result()
        except (IngestError, ValueError) as exc:
            print(file=sys.stderr)
            print(f"[ERROR] {type(exc).__name__}: {exc}", file=sys.stderr)
            return 2
        print(file=sys.stderr)

        if isinstance(outcome, Cancelled):
            print(f"[INFO] Cancelled at {outcome.progress.percent:.1f}%", file=sys.stderr)
            return 130

        series = pipeline.display_series(args.threshold)
        bins = pipeline.spectrum(args.max_bins)
        summary = pipeline.summary()
        if series is None or bins is None or summary is None:
            print("[ERROR] Dataset was not published", file=sys.stderr)
            return 1

        print(f"source:             {outcome.source_id}")
        print(f"samples:            {summary.sample_count}")
        print(f"duration:           {summary.duration_s:.3f} s")
        print(f"rms:                {summary.rms:.4f}")
        print(f"peak-to-peak:       {summary.peak_to_peak:.4f}")
        if summary.dominant_frequency_hz is not None:
            print(f"dominant frequency: {summary.dominant_frequency_hz:.1f} Hz")
        print(f"quality:            {summary.quality}")
        print(f"display points:     {len(series)}")
        print(f"spectrum bins:      {len(bins)}")

        if args.export:
            out_dir = Path(args.export).expanduser()
            csv_writer.write_display_series(
                out_dir / f"{outcome.source_id}_display.csv", series, outcome.sampling_rate_hz
            )
            csv_writer.write_spectrum(out_dir / f"{outcome.source_id}_spectrum.csv", bins)
            print(f"[INFO] Exported CSV files to {out_dir}", file=sys.stderr)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=CONSOLE_FORMAT,
        datefmt=DATE_FORMAT,
    )
    try:
        cfg = _resolve_config(args)
    except ValueError as exc:
        parser.error(str(exc))

    if args.command == "list":
        return _cmd_list(cfg)
    return _cmd_load(cfg, args)


if __name__ == "__main__":
    raise SystemExit(main())

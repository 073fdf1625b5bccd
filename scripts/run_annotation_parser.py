#!/usr/bin/env python3
"""Convert a folder of annotation JSON lines into graph bulk-import CSV files."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from variantgraph import AnnotationParser, RunSettingsLoader, summarize_output  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the annotation graph CSV import")
    parser.add_argument("input_folder", help="Folder containing *.json annotation files")
    parser.add_argument("output_folder", help="Folder receiving the CSV data and header files")
    parser.add_argument("--config", help="Optional JSON run settings file")
    parser.add_argument("--workers", type=int, help="Dispatch worker threads (default: 10)")
    parser.add_argument(
        "--drain-timeout",
        type=float,
        help="Seconds to wait for queued deliveries at shutdown (default: 600)",
    )
    parser.add_argument(
        "--include-gzip",
        action="store_const",
        const=True,
        help="Also read *.json.gz files",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logger = logging.getLogger("variantgraph.annotation")

    settings = RunSettingsLoader().load(args.config).with_overrides(
        {
            "worker_count": args.workers,
            "drain_timeout_seconds": args.drain_timeout,
            "include_gzip": args.include_gzip,
        }
    )

    report = AnnotationParser(
        args.input_folder,
        args.output_folder,
        settings=settings,
        logger=logger,
    ).execute()
    logger.info("Finished")

    payload = {
        "input_files": report.input_files,
        "lines": report.lines,
        "records": report.records,
        "rows_on_disk": summarize_output(
            args.output_folder, source_name=settings.source_name
        ),
    }
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — GeoJSON Conflation Script
Matches the features of a reference GeoJSON file against a subject
GeoJSON file and writes one JSON record per matched pair.

Usage:
  python scripts/conflate_geojson.py reference.geojson subject.geojson \
      --output matches.json --threshold 0.6

Exit codes: 0 on success, 1 if an input file cannot be read, 2 if an
option value is out of range.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from pydantic import ValidationError

from geoconflate.config import Settings, get_settings
from geoconflate.core.errors import FeatureConversionError
from geoconflate.core.pipeline import run_conflation
from geoconflate.core.task_monitor import LoggingTaskMonitor
from geoconflate.modules.ingest import features_from_geojson, load_geojson
from geoconflate.utils.logger import configure_logging


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Match reference GeoJSON features to subject GeoJSON features."
    )
    parser.add_argument("reference", type=Path, help="Reference GeoJSON FeatureCollection")
    parser.add_argument("subject", type=Path, help="Subject GeoJSON FeatureCollection")
    parser.add_argument("--output", "-o", type=Path, default=None,
                        help="Write matches here instead of stdout")
    parser.add_argument("--id-property", default=None,
                        help="Property used as feature identity when a feature has no id")
    parser.add_argument("--threshold", type=float, default=None,
                        help="Confidence threshold for flagging (default from config)")
    parser.add_argument("--no-disambiguate", action="store_true",
                        help="Keep each reference feature's best match even if shared")
    parser.add_argument("--log-level", default=None,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def _load(path: Path, id_property: str | None):
    collection, errors = features_from_geojson(load_geojson(path), id_property=id_property)
    for index, error in errors.items():
        print(f"  ✗ {path.name} record {index}: {error}", file=sys.stderr)
    return collection


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging(args.log_level)

    overrides: dict = {}
    if args.no_disambiguate:
        overrides["disambiguate"] = False
    if args.threshold is not None:
        overrides["confidence_threshold"] = args.threshold
    try:
        settings = Settings(**{**get_settings().model_dump(), **overrides})
    except ValidationError as e:
        print(f"  ✗ Invalid option: {e.errors()[0]['msg']}", file=sys.stderr)
        return 2

    try:
        reference = _load(args.reference, args.id_property)
        subject = _load(args.subject, args.id_property)
    except FeatureConversionError as e:
        print(f"  ✗ {e}", file=sys.stderr)
        return 1

    pairs = run_conflation(reference, subject, settings=settings, monitor=LoggingTaskMonitor())
    payload = json.dumps([p.to_record() for p in pairs], indent=2)

    if args.output is not None:
        args.output.write_text(payload + "\n", encoding="utf-8")
        print(f"  ✓ {len(pairs)} matches written to {args.output}", file=sys.stderr)
    else:
        print(payload)

    flagged = sum(1 for p in pairs if p.flagged)
    if flagged:
        print(f"  ! {flagged} low-confidence matches flagged for review", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())

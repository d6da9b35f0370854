#!/usr/bin/env python3
"""Build every trend (metric x timeframe) for one student and print a summary.

Usage:
    python batch_trends.py STUDENT_ID [--svg-dir charts/]
"""

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path

from common.logging_utils import setup_logger
from common.supabase_client import VitalsClient
from common.trends import build_all_trends, render_svg

logger = setup_logger("batch_trends")


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render all vitals trends for a student.")
    parser.add_argument("student_id", help="Student id used in the consent table")
    parser.add_argument("--svg-dir", type=Path, default=None, help="Write one SVG per trend here")
    parser.add_argument("--width", type=float, default=None, help="Chart width in pixels")
    parser.add_argument("--height", type=float, default=None, help="Chart height in pixels")
    return parser


def main(argv=None) -> int:
    args = create_parser().parse_args(argv)

    client = VitalsClient()
    records = client.fetch_student_records(args.student_id, ascending=False)
    now = datetime.now(timezone.utc)

    print(f"Student {args.student_id}: {len(records)} records")
    print()

    views = build_all_trends(records, width=args.width, height=args.height, now=now)

    if args.svg_dir:
        args.svg_dir.mkdir(parents=True, exist_ok=True)

    charted = 0
    for view in views:
        name = f"{view.metric.name.lower()}_{view.timeframe.value}"
        if view.has_real_data:
            charted += 1
            stats = view.curve.stats
            print(f"✓ {name}: avg {stats.average} {view.unit} (min {stats.min}, max {stats.max})")
        else:
            print(f"- {name}: {view.empty_message}")

        if args.svg_dir:
            (args.svg_dir / f"{name}.svg").write_text(render_svg(view), encoding="utf-8")

    print()
    print("=" * 60)
    print("Summary:")
    print(f"  Total trends: {len(views)}")
    print(f"  With data: {charted}")
    print(f"  Empty: {len(views) - charted}")
    if args.svg_dir:
        print(f"  SVGs written to: {args.svg_dir}")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

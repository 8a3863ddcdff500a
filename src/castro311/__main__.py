"""
Load the Castro 311 layer and print a summary.

Usage:
    python -m castro311
    python -m castro311 --type "Street and Sidewalk Cleaning" --output open_cases.geojson
"""

import argparse
import json
import logging
import sys

from castro311.exceptions import LoadError
from castro311.geo import to_display_geojson
from castro311.ingestion import Castro311APIClient, WFSConfig
from castro311.session import DashboardSession

logger = logging.getLogger("castro311")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Load and summarize Castro 311 service requests")
    parser.add_argument("--page-size", type=int, default=None, help="Features per WFS request")
    parser.add_argument("--type", dest="request_type", default=None, help="Only show open cases of this request type")
    parser.add_argument("--top", type=int, default=10, help="Number of request types to list")
    parser.add_argument("--output", default=None, help="Write the visible cases as EPSG:4326 GeoJSON to this file")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    try:
        with Castro311APIClient(WFSConfig.from_env()) as client:
            session = DashboardSession.load(client, page_size=args.page_size)
            client.validate_features(session.collection["features"])
    except LoadError as e:
        logger.error(f"Failed to load 311 data: {e}")
        return 1

    if args.request_type:
        session = session.select(args.request_type)

    stats = session.stats
    print(f"Total Cases:  {stats.total}")
    print(f"Open Cases:   {stats.open}")
    print(f"Closed Cases: {stats.closed}")
    print("\nTop Open Requests")
    for entry in session.top_types[: args.top]:
        print(f"  {entry.request_type} ({entry.count})")

    visible = session.visible()
    print(f"\nShowing {visible['numberReturned']} open cases")
    if session.view.bounds:
        print(f"Bounds: {session.view.bounds.as_latlngs()}")

    if args.output:
        with open(args.output, "w") as f:
            json.dump(to_display_geojson(visible), f)
        logger.info(f"Wrote {visible['numberReturned']} features to {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())

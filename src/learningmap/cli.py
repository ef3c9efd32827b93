"""Command-line interface for rendering learning maps."""

import argparse
import logging
import os
import sys

from dotenv import load_dotenv

from src.learningmap.loader import load_map
from src.learningmap.mapworker import MapWorker
from src.learningmap.viewer import create_figure, export_html, show_figure
from src.logging_config import setup_logging

# Link target of a place, filled with the linked activity
DEFAULT_ACTIVITY_URL = "/mod/view.php?id={activity}"


def build_activity_urls(activities: list, template: str) -> dict:
    """Map each linked activity to its URL."""
    return {activity: template.format(activity=activity) for activity in activities}


def main() -> None:
    """Main entry point for learning map CLI."""
    parser = argparse.ArgumentParser(
        description="Learning Map renderer - apply a learner's progress to a map",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Print the map for a learner who visited places 0 and 2
  python -m src.learningmap.cli map.json map.svg --visited 0 2

  # Write the rendered SVG to a file
  python -m src.learningmap.cli map.json map.svg --visited 0 --export out.svg

  # Open an interactive preview in the browser
  python -m src.learningmap.cli map.json map.svg --visited 0 --preview

  # Export the preview as HTML
  python -m src.learningmap.cli map.json map.svg --preview-html map.html
        """,
    )

    parser.add_argument(
        "placestore",
        type=str,
        help="Path to the placestore JSON document",
    )
    parser.add_argument(
        "svg",
        type=str,
        help="Path to the SVG of the map",
    )
    parser.add_argument(
        "--visited",
        type=int,
        nargs="+",
        default=[],
        metavar="ID",
        help="Ids of visited places in visiting order",
    )
    parser.add_argument(
        "--export",
        type=str,
        metavar="FILE",
        help="Write the rendered SVG to FILE instead of stdout",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Open an interactive preview in the browser",
    )
    parser.add_argument(
        "--preview-html",
        type=str,
        metavar="FILE",
        help="Export the interactive preview to an HTML file",
    )
    parser.add_argument(
        "--title",
        type=str,
        default=None,
        help="Custom title for the preview",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    load_dotenv()
    setup_logging()
    if args.verbose:
        logging.getLogger("src.learningmap").setLevel(logging.DEBUG)

    logger = logging.getLogger(__name__)

    try:
        logger.info(f"Loading map from {args.placestore} and {args.svg}")
        map_data = load_map(args.placestore, args.svg)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    template = os.getenv("LEARNINGMAP_ACTIVITY_URL", DEFAULT_ACTIVITY_URL)
    placestore = map_data.placestore
    worker = MapWorker(
        map_data.svgcode,
        placestore,
        visited=args.visited,
        activity_urls=build_activity_urls(placestore.get_all_activities(), template),
    )
    classification = worker.process_map_objects()

    if args.preview or args.preview_html:
        title = args.title or f"Learning Map: {placestore.mapid or args.svg}"
        fig = create_figure(placestore, worker.svgmap, classification, title=title)
        if args.preview_html:
            logger.info(f"Exporting preview to {args.preview_html}")
            export_html(fig, args.preview_html)
        if args.preview:
            logger.info("Opening preview in browser")
            show_figure(fig)

    svgcode = worker.get_svgcode()
    if args.export:
        logger.info(f"Exporting to {args.export}")
        with open(args.export, "w", encoding="utf-8") as output:
            output.write(svgcode)
    elif not (args.preview or args.preview_html):
        print(svgcode)


if __name__ == "__main__":
    main()

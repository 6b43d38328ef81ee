"""
Route Planner - command line entry point.

Usage:
    python -m routeplanner.main --from A --to D --to Y
    python -m routeplanner.main --points points.csv --connections connections.csv --from A --to B
    python -m routeplanner.main --help
"""

import argparse
import logging
import sys
from pathlib import Path

from routeplanner import config
from routeplanner.pathfinding import (
    Graph,
    MultiStopRouter,
    RoadNetwork,
    RouteResult,
    format_distance,
    format_duration,
    sample_graph,
)

logger = logging.getLogger(__name__)


def load_graph(
    points_file: Path | None,
    connections_file: Path | None,
    proximity_km: float | None = None,
) -> Graph:
    """
    Load a network from CSV files, or the reference network if none given.

    Without a connections file, points are linked by geographic proximity.
    """
    if points_file is None:
        return sample_graph()

    network = RoadNetwork()
    network.load_points(points_file)
    if connections_file is not None and connections_file.exists():
        network.load_connections(connections_file)
    else:
        added = network.connect_by_proximity(
            max_distance_km=proximity_km or config.DEFAULT_PROXIMITY_KM
        )
        logger.info("Built %d connections from coordinates", added)
    return network.snapshot()


def format_route(graph: Graph, result: RouteResult) -> str:
    """Render a route result as printable lines."""
    if not result.found:
        return f"NO_ROUTE ({result.status.value}): {result.message}"

    lines = ["→".join(result.path)]
    for segment in result.segments:
        name = graph.points[segment.to_point].name
        lines.append(
            f"  {segment.from_point} -> {segment.to_point} ({name}): "
            f"{format_distance(segment.distance_km)}, {format_duration(segment.duration_min)}"
        )
    lines.append(
        f"Total: {format_distance(result.total_distance)}, "
        f"{format_duration(result.total_time)}"
    )
    if result.unreachable:
        lines.append(f"Unreachable: {', '.join(result.unreachable)}")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Route Planner - shortest and multi-stop routes over a point network"
    )
    parser.add_argument(
        "--from",
        dest="start",
        required=True,
        help="Starting point id",
    )
    parser.add_argument(
        "--to",
        dest="destinations",
        action="append",
        default=[],
        help="Destination point id (repeat for several destinations)",
    )
    parser.add_argument(
        "--points",
        type=Path,
        default=config.POINTS_FILE if config.POINTS_FILE.exists() else None,
        help="Path to points CSV (default: built-in reference network)",
    )
    parser.add_argument(
        "--connections",
        type=Path,
        default=config.CONNECTIONS_FILE if config.CONNECTIONS_FILE.exists() else None,
        help="Path to connections CSV (default: link points by proximity)",
    )
    parser.add_argument(
        "--proximity-km",
        type=float,
        default=None,
        help="Max straight-line distance for proximity links",
    )
    parser.add_argument(
        "--max-destinations",
        type=int,
        default=config.MAX_DESTINATIONS,
        help=f"Reject queries with more destinations (default: {config.MAX_DESTINATIONS})",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.points is not None and not args.points.exists():
        print(f"Error: Points file not found: {args.points}", file=sys.stderr)
        return 1

    graph = load_graph(args.points, args.connections, args.proximity_km)
    router = MultiStopRouter(graph, max_destinations=args.max_destinations)
    result = router.optimal_route(args.start, args.destinations)

    print(format_route(graph, result))
    return 0 if result.found else 1


if __name__ == "__main__":
    sys.exit(main())

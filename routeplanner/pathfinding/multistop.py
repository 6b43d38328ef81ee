"""Greedy multi-destination sequencing on top of the shortest-path engine."""

import logging
from collections.abc import Iterable

from routeplanner import config

from .dijkstra import PathFinder, RouteResult, RouteStatus
from .graph import Graph

logger = logging.getLogger(__name__)


class MultiStopRouter:
    """
    Order an unordered set of destinations into an open tour from a start.

    Uses the nearest-neighbour heuristic: from the current position, go to
    the closest remaining destination (by shortest-path distance), repeat.
    This is an approximation; the visiting order is not guaranteed to be
    globally optimal. Exact solvers can be substituted behind optimal_route()
    without changing callers.
    """

    def __init__(
        self,
        graph: Graph,
        max_points: int | None = config.MAX_POINTS,
        max_destinations: int | None = config.MAX_DESTINATIONS,
    ):
        """
        Initialize router with a graph snapshot.

        Args:
            graph: Graph instance
            max_points: Reject queries on graphs larger than this (None = no limit)
            max_destinations: Reject queries with more distinct destinations
                than this (None = no limit)
        """
        self.graph = graph
        self.max_points = max_points
        self.max_destinations = max_destinations
        self.pathfinder = PathFinder(graph)

    def optimal_route(self, start: str, destinations: Iterable[str]) -> RouteResult:
        """
        Build a route from start visiting every destination.

        Duplicate destination ids are visited once. A single destination is
        answered directly by the shortest-path engine, without the size
        guard, so it always matches find_shortest_path().

        Args:
            start: Starting point id
            destinations: Destination point ids, in any order

        Returns:
            RouteResult. Status is PARTIAL when some destinations could not
            be reached after the first leg (they are listed in
            ``unreachable``), NOT_FOUND when no destination is reachable
            from the start.
        """
        # Collapse duplicates, keep first occurrence order
        remaining = list(dict.fromkeys(destinations))
        if not remaining:
            return RouteResult.failure(RouteStatus.NO_DESTINATIONS, "No destinations given")

        error = self.pathfinder.check_endpoints(start, *remaining)
        if error is not None:
            return error

        if len(remaining) == 1:
            return self.pathfinder.find_path(start, remaining[0])

        # Single destinations bypass the size guard
        limit_error = check_limits(
            self.graph, len(remaining), self.max_points, self.max_destinations
        )
        if limit_error is not None:
            return limit_error

        return self._nearest_neighbor_tour(start, remaining)

    def _nearest_neighbor_tour(self, start: str, remaining: list[str]) -> RouteResult:
        """Greedy open tour; ties between equally distant destinations go to the smallest id."""
        current = start
        route = RouteResult(path=[start], total_distance=0.0, total_time=0.0)
        candidates = sorted(remaining)
        legs = 0

        while candidates:
            nearest = None
            best = None
            for destination in candidates:
                result = self.pathfinder.find_path(current, destination)
                if not result.found:
                    continue
                if best is None or result.total_distance < best.total_distance:
                    best = result
                    nearest = destination

            # Nothing left is reachable from here
            if best is None:
                break

            route.path.extend(best.path[1:])
            route.total_distance += best.total_distance
            route.total_time += best.total_time
            route.segments.extend(best.segments)

            current = nearest
            candidates.remove(nearest)
            legs += 1

        if legs == 0:
            logger.warning("No destination reachable from '%s'", start)
            return RouteResult.failure(
                RouteStatus.NOT_FOUND, f"No destination reachable from {start}"
            )

        if candidates:
            logger.warning(
                "Skipped %d unreachable destination(s) from '%s': %s",
                len(candidates), current, ", ".join(candidates),
            )
            route.status = RouteStatus.PARTIAL
            route.unreachable = candidates
            route.message = f"Unreachable destinations: {', '.join(candidates)}"

        return route


def check_limits(
    graph: Graph,
    num_destinations: int = 0,
    max_points: int | None = config.MAX_POINTS,
    max_destinations: int | None = config.MAX_DESTINATIONS,
) -> RouteResult | None:
    """
    Check a query against the size limits.

    Returns:
        A LIMIT_EXCEEDED RouteResult, or None if the query is within limits
    """
    if max_points is not None and len(graph) > max_points:
        message = f"Graph has {len(graph)} points, limit is {max_points}"
    elif max_destinations is not None and num_destinations > max_destinations:
        message = f"{num_destinations} destinations requested, limit is {max_destinations}"
    else:
        return None
    logger.warning("Route query rejected: %s", message)
    return RouteResult.failure(RouteStatus.LIMIT_EXCEEDED, message)


def find_optimal_route(graph: Graph, start: str, destinations: Iterable[str]) -> RouteResult:
    """Greedy multi-stop route over a graph snapshot."""
    return MultiStopRouter(graph).optimal_route(start, destinations)

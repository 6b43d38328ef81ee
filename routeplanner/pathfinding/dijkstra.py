"""Dijkstra pathfinding over a point-to-point network."""

import heapq
import logging
import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from .graph import AdjacencyIndex, Graph, MalformedGraphError, Neighbor, build_adjacency

logger = logging.getLogger(__name__)


class RouteStatus(str, Enum):
    """Outcome of a route query."""

    OK = "ok"
    PARTIAL = "partial"  # Some destinations were unreachable and skipped
    INVALID_ENDPOINT = "invalid_endpoint"
    MALFORMED_GRAPH = "malformed_graph"
    NO_DESTINATIONS = "no_destinations"
    NOT_FOUND = "not_found"
    LIMIT_EXCEEDED = "limit_exceeded"


@dataclass
class SegmentInfo:
    """Information about a path segment."""

    from_point: str
    to_point: str
    distance_km: float
    duration_min: float


@dataclass
class RouteResult:
    """Result of a route query."""

    path: list[str]
    total_distance: float  # Total distance in km
    total_time: float  # Total time in minutes
    status: RouteStatus = RouteStatus.OK
    segments: list[SegmentInfo] = field(default_factory=list)  # Details per leg
    unreachable: list[str] = field(default_factory=list)  # Skipped destinations
    message: str | None = None

    @property
    def found(self) -> bool:
        """True when a route (complete or partial) was produced."""
        return self.status in (RouteStatus.OK, RouteStatus.PARTIAL)

    @classmethod
    def failure(cls, status: RouteStatus, message: str | None = None) -> "RouteResult":
        """Build an empty result for a failed query."""
        return cls(path=[], total_distance=0.0, total_time=0.0, status=status, message=message)


class PathFinder:
    """
    Find shortest paths in a network using Dijkstra's algorithm.

    The search is keyed on distance only; travel time is accumulated along
    the winning path and never used to break ties. When several points share
    the minimum tentative distance, the one with the smallest id is settled
    first, and a predecessor is only replaced by a strictly shorter path.
    Results are therefore deterministic for a given graph.

    The adjacency index is derived once per PathFinder. Graph snapshots are
    immutable, so a PathFinder can be reused for any number of queries.
    """

    def __init__(self, graph: Graph):
        """
        Initialize pathfinder with a graph snapshot.

        A malformed graph does not raise here; every query on it reports
        RouteStatus.MALFORMED_GRAPH instead.

        Args:
            graph: Graph instance
        """
        self.graph = graph
        self._adjacency: AdjacencyIndex | None = None
        self._graph_error: str | None = None
        try:
            self._adjacency = build_adjacency(graph)
        except MalformedGraphError as e:
            logger.warning("Rejecting malformed graph: %s", e)
            self._graph_error = str(e)

    @property
    def graph_error(self) -> str | None:
        """Reason the graph was rejected, or None if it is well formed."""
        return self._graph_error

    def check_endpoints(self, *point_ids: str) -> RouteResult | None:
        """
        Validate the graph and the given point ids.

        Returns:
            A failure RouteResult, or None if the query can proceed
        """
        if self._graph_error is not None:
            return RouteResult.failure(RouteStatus.MALFORMED_GRAPH, self._graph_error)
        for point_id in point_ids:
            if point_id not in self.graph.points:
                logger.warning("Unknown point '%s'", point_id)
                return RouteResult.failure(
                    RouteStatus.INVALID_ENDPOINT, f"Unknown point: {point_id}"
                )
        return None

    def find_path(self, start: str, end: str) -> RouteResult:
        """
        Find the shortest path between two points.

        Args:
            start: Starting point id
            end: Ending point id

        Returns:
            RouteResult with path, distance, time and per-leg segments.
            Status is INVALID_ENDPOINT for unknown ids, NOT_FOUND when the
            points are in different components.
        """
        error = self.check_endpoints(start, end)
        if error is not None:
            return error

        # Handle same point
        if start == end:
            return RouteResult(path=[start], total_distance=0.0, total_time=0.0)

        distances, times, previous = self._search(start, end)

        if math.isinf(distances[end]):
            logger.debug("No path from '%s' to '%s'", start, end)
            return RouteResult.failure(
                RouteStatus.NOT_FOUND, f"No path from {start} to {end}"
            )

        # Walk predecessors back from the target
        path = [end]
        segments = []
        current = end
        while previous[current] is not None:
            prev_id, edge = previous[current]
            segments.append(
                SegmentInfo(
                    from_point=prev_id,
                    to_point=current,
                    distance_km=edge.distance,
                    duration_min=edge.time,
                )
            )
            path.append(prev_id)
            current = prev_id
        path.reverse()
        segments.reverse()

        return RouteResult(
            path=path,
            total_distance=distances[end],
            total_time=times[end],
            segments=segments,
        )

    def _search(
        self, start: str, end: str
    ) -> tuple[dict[str, float], dict[str, float], dict[str, tuple[str, Neighbor] | None]]:
        """Run Dijkstra from start until end is settled or the frontier is empty."""
        adjacency = self._adjacency

        distances = {point_id: math.inf for point_id in adjacency}
        times = {point_id: math.inf for point_id in adjacency}
        previous: dict[str, tuple[str, Neighbor] | None] = {
            point_id: None for point_id in adjacency
        }
        distances[start] = 0.0
        times[start] = 0.0

        # (distance, point id): equal distances pop in id order
        queue = [(0.0, start)]
        visited = set()

        while queue:
            current_distance, current = heapq.heappop(queue)
            if current in visited:
                continue
            if current == end:
                break
            visited.add(current)

            for neighbor in adjacency[current]:
                if neighbor.point_id in visited:
                    continue
                distance = current_distance + neighbor.distance
                if distance < distances[neighbor.point_id]:
                    distances[neighbor.point_id] = distance
                    times[neighbor.point_id] = times[current] + neighbor.time
                    previous[neighbor.point_id] = (current, neighbor)
                    heapq.heappush(queue, (distance, neighbor.point_id))

        return distances, times, previous

    def find_path_with_waypoints(
        self, start: str, end: str, waypoints: list[str]
    ) -> RouteResult:
        """
        Find path through specified waypoints, in the given order.

        Args:
            start: Starting point
            end: Ending point
            waypoints: List of intermediate points to pass through

        Returns:
            RouteResult with complete path, or the failure of the first leg
            that could not be routed
        """
        all_points = [start] + list(waypoints) + [end]
        full_path = [start]
        total_distance = 0.0
        total_time = 0.0
        all_segments = []

        for i in range(len(all_points) - 1):
            result = self.find_path(all_points[i], all_points[i + 1])
            if not result.found:
                return result

            # Avoid duplicating waypoints in the path
            full_path.extend(result.path[1:])
            total_distance += result.total_distance
            total_time += result.total_time
            all_segments.extend(result.segments)

        return RouteResult(
            path=full_path,
            total_distance=total_distance,
            total_time=total_time,
            segments=all_segments,
        )


def find_shortest_path(graph: Graph, start: str, end: str) -> RouteResult:
    """Shortest path between two points of a graph snapshot."""
    return PathFinder(graph).find_path(start, end)


def format_duration(minutes: float | None) -> str:
    """Format duration in minutes to human readable string."""
    if minutes is None:
        return ""
    hours = int(minutes // 60)
    # Halves round up
    mins = math.floor(minutes % 60 + 0.5)
    if mins == 60:
        hours, mins = hours + 1, 0
    mins_str = f"{mins} min{'s' if mins != 1 else ''}"
    if hours > 0:
        return f"{hours} hr{'s' if hours != 1 else ''} {mins_str}"
    return mins_str


def format_distance(km: float | None) -> str:
    """Format distance in kilometers to one decimal place, halves rounded up."""
    if km is None:
        return ""
    rounded = Decimal(km).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{rounded} km"

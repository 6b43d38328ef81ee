"""Pathfinding module for single and multi-stop routes."""

from .graph import Connection, Graph, MalformedGraphError, Point, build_adjacency
from .dijkstra import (
    PathFinder,
    RouteResult,
    RouteStatus,
    SegmentInfo,
    find_shortest_path,
    format_distance,
    format_duration,
)
from .multistop import MultiStopRouter, check_limits, find_optimal_route
from .network import RoadNetwork
from .sample import sample_graph

__all__ = [
    "Connection",
    "Graph",
    "MalformedGraphError",
    "MultiStopRouter",
    "PathFinder",
    "Point",
    "RoadNetwork",
    "RouteResult",
    "RouteStatus",
    "SegmentInfo",
    "build_adjacency",
    "check_limits",
    "find_optimal_route",
    "find_shortest_path",
    "format_distance",
    "format_duration",
    "sample_graph",
]

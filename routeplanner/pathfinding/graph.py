"""Graph snapshot and adjacency index for route search."""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import NamedTuple

import networkx as nx


class MalformedGraphError(ValueError):
    """Raised when a graph references unknown points or carries invalid costs."""


@dataclass(frozen=True)
class Point:
    """A named, located node of the network."""

    id: str
    name: str
    lat: float
    lon: float


@dataclass(frozen=True)
class Connection:
    """
    Bidirectional link between two points.

    The stored direction (source/target) has no meaning for traversal.
    """

    source: str
    target: str
    distance: float  # km
    time: float  # minutes


class Neighbor(NamedTuple):
    """One directed adjacency entry."""

    point_id: str
    distance: float
    time: float


AdjacencyIndex = dict[str, list[Neighbor]]


@dataclass(frozen=True)
class Graph:
    """
    Immutable snapshot of points and connections.

    Points are keyed by id; connections keep their insertion order, which
    fixes the relaxation order of the search.
    """

    points: Mapping[str, Point] = field(default_factory=dict)
    connections: tuple[Connection, ...] = ()

    def __post_init__(self):
        # Freeze the inputs so a snapshot cannot change under a cached index
        object.__setattr__(self, "points", MappingProxyType(dict(self.points)))
        object.__setattr__(self, "connections", tuple(self.connections))

    @classmethod
    def from_dict(cls, data: Mapping) -> "Graph":
        """
        Build a graph from its JSON-like representation.

        Points may be given as a mapping ``{id: {...}}`` or a list of
        objects with an ``id`` key. Connections use ``from``/``to`` keys.

        Raises:
            MalformedGraphError: if an entry is missing a field or a
                connection references an unknown point
        """
        raw_points = data.get("points", {})
        if isinstance(raw_points, Mapping):
            items = list(raw_points.items())
        else:
            items = [(None, item) for item in raw_points]

        points = {}
        for key, item in items:
            try:
                if key is not None:
                    item = {"id": key, **item}
                point = Point(
                    id=str(item["id"]),
                    name=str(item.get("name", item["id"])),
                    lat=float(item.get("lat", 0.0)),
                    lon=float(item.get("lon", item.get("lng", 0.0))),
                )
            except (KeyError, TypeError, ValueError) as e:
                raise MalformedGraphError(f"Invalid point entry {item!r}") from e
            if point.id in points:
                raise MalformedGraphError(f"Duplicate point id '{point.id}'")
            points[point.id] = point

        connections = []
        for item in data.get("connections", []):
            try:
                connections.append(
                    Connection(
                        source=str(item["from"]),
                        target=str(item["to"]),
                        distance=float(item["distance"]),
                        time=float(item["time"]),
                    )
                )
            except (KeyError, TypeError, ValueError) as e:
                raise MalformedGraphError(f"Invalid connection entry {item!r}") from e

        graph = cls(points=points, connections=tuple(connections))
        validate_graph(graph)
        return graph

    def to_dict(self) -> dict:
        """Return the JSON-like representation accepted by from_dict()."""
        return {
            "points": {
                p.id: {"name": p.name, "lat": p.lat, "lon": p.lon}
                for p in self.points.values()
            },
            "connections": [
                {
                    "from": c.source,
                    "to": c.target,
                    "distance": c.distance,
                    "time": c.time,
                }
                for c in self.connections
            ],
        }

    def find_connection(self, a: str, b: str) -> Connection | None:
        """Return the shortest direct connection between two points, if any."""
        candidates = [
            c for c in self.connections if {c.source, c.target} == {a, b}
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda c: c.distance)

    def to_networkx(self) -> nx.MultiGraph:
        """
        Return the graph as a networkx MultiGraph.

        Parallel connections are kept as separate edges.
        """
        g = nx.MultiGraph()
        for point in self.points.values():
            g.add_node(point.id, name=point.name, lat=point.lat, lon=point.lon)
        for conn in self.connections:
            g.add_edge(conn.source, conn.target, distance=conn.distance, time=conn.time)
        return g

    def __len__(self) -> int:
        """Return number of points."""
        return len(self.points)


def _check_cost(value: float, label: str, conn: Connection) -> None:
    if not math.isfinite(value) or value < 0:
        raise MalformedGraphError(
            f"Connection {conn.source}-{conn.target} has invalid {label} {value!r}"
        )


def validate_graph(graph: Graph) -> None:
    """
    Check that every connection references existing points with valid costs.

    Raises:
        MalformedGraphError: on the first offending connection
    """
    for conn in graph.connections:
        for endpoint in (conn.source, conn.target):
            if endpoint not in graph.points:
                raise MalformedGraphError(
                    f"Connection {conn.source}-{conn.target} references "
                    f"unknown point '{endpoint}'"
                )
        _check_cost(conn.distance, "distance", conn)
        _check_cost(conn.time, "time", conn)


def build_adjacency(graph: Graph) -> AdjacencyIndex:
    """
    Derive the adjacency index of a graph.

    Every point gets an entry (empty for isolated points). Each connection
    is inserted once per direction, in connection order; parallel
    connections are not merged.

    Args:
        graph: Graph snapshot

    Returns:
        Mapping of point id to its list of Neighbor entries

    Raises:
        MalformedGraphError: if a connection is invalid
    """
    validate_graph(graph)

    adjacency: AdjacencyIndex = {point_id: [] for point_id in graph.points}
    for conn in graph.connections:
        adjacency[conn.source].append(Neighbor(conn.target, conn.distance, conn.time))
        adjacency[conn.target].append(Neighbor(conn.source, conn.distance, conn.time))
    return adjacency


def path_cost(graph: Graph, path: Iterable[str]) -> tuple[float, float] | None:
    """
    Sum the cheapest direct connection along consecutive pairs of a path.

    Returns:
        (distance, time) or None if two consecutive points are not linked
    """
    path = list(path)
    total_distance = 0.0
    total_time = 0.0
    for a, b in zip(path, path[1:]):
        conn = graph.find_connection(a, b)
        if conn is None:
            return None
        total_distance += conn.distance
        total_time += conn.time
    return total_distance, total_time

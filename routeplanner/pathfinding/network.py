"""Mutable network builder producing Graph snapshots."""

import csv
import logging
import math
from pathlib import Path

import networkx as nx

from routeplanner.config import DEFAULT_PROXIMITY_KM, DEFAULT_SPEED_KMH
from routeplanner.geo.distance import estimate_travel_time, haversine

from .graph import Connection, Graph, MalformedGraphError, Point

logger = logging.getLogger(__name__)


class RoadNetwork:
    """
    Editable point-to-point network.

    Nodes are points (with name, lat, lon), edges are connections carrying
    distance (km) and time (minutes). Parallel connections between the same
    two points are kept. Queries never run on a RoadNetwork directly: call
    snapshot() to get an immutable Graph.
    """

    def __init__(self):
        """Initialize empty network."""
        self.graph = nx.MultiGraph()
        self._edge_seq = 0

    @classmethod
    def from_graph(cls, graph: Graph) -> "RoadNetwork":
        """Create an editable copy of a snapshot."""
        network = cls()
        for point in graph.points.values():
            network.add_point(point.id, point.name, point.lat, point.lon)
        for conn in graph.connections:
            network.add_connection(conn.source, conn.target, conn.distance, conn.time)
        return network

    def add_point(self, point_id: str, name: str | None = None, lat: float = 0.0, lon: float = 0.0) -> None:
        """Add a point, or update the attributes of an existing one."""
        self.graph.add_node(point_id, name=name or point_id, lat=float(lat), lon=float(lon))

    def add_connection(self, source: str, target: str, distance: float, time: float) -> None:
        """
        Add a bidirectional connection between two existing points.

        Raises:
            MalformedGraphError: if an endpoint is unknown or a cost is
                negative or not finite
        """
        for endpoint in (source, target):
            if endpoint not in self.graph:
                raise MalformedGraphError(
                    f"Connection {source}-{target} references unknown point '{endpoint}'"
                )
        for label, value in (("distance", distance), ("time", time)):
            if not math.isfinite(value) or value < 0:
                raise MalformedGraphError(
                    f"Connection {source}-{target} has invalid {label} {value!r}"
                )
        self.graph.add_edge(
            source,
            target,
            source=source,
            distance=float(distance),
            time=float(time),
            seq=self._edge_seq,
        )
        self._edge_seq += 1

    def remove_point(self, point_id: str) -> None:
        """Remove a point and every connection touching it."""
        if point_id in self.graph:
            self.graph.remove_node(point_id)

    def load_points(self, filepath: str | Path) -> None:
        """
        Load points as nodes from CSV.

        Expected columns: id, name, lat, lon
        """
        filepath = Path(filepath)
        loaded = 0

        with open(filepath, encoding="utf-8") as f:
            reader = csv.DictReader(f)
            for row in reader:
                try:
                    point_id = row["id"].strip()
                    if not point_id:
                        continue
                    self.add_point(
                        point_id,
                        (row.get("name") or "").strip() or point_id,
                        float(row["lat"]),
                        float(row["lon"]),
                    )
                    loaded += 1
                except (ValueError, KeyError):
                    continue

        logger.info("Loaded %d points from %s", loaded, filepath)

    def load_connections(self, filepath: str | Path) -> None:
        """
        Load connections as edges from CSV.

        Expected columns: from, to, distance, time
        If time is empty, it is estimated from distance at the default speed.
        Rows referencing unknown points or carrying invalid costs are skipped.
        """
        filepath = Path(filepath)
        connections_added = 0
        connections_skipped = 0

        with open(filepath, encoding="utf-8") as f:
            reader = csv.DictReader(f)
            for row in reader:
                try:
                    source = row["from"].strip()
                    target = row["to"].strip()
                    distance = float(row["distance"])
                    time = row.get("time")
                    if time:
                        time = float(time)
                    else:
                        time = estimate_travel_time(distance, DEFAULT_SPEED_KMH)

                    self.add_connection(source, target, distance, time)
                    connections_added += 1
                except (ValueError, KeyError):
                    # MalformedGraphError is a ValueError
                    connections_skipped += 1
                    continue

        if connections_skipped:
            logger.warning(
                "Skipped %d invalid connection rows in %s", connections_skipped, filepath
            )
        logger.info("Loaded %d connections from %s", connections_added, filepath)

    def connect_by_proximity(
        self,
        max_distance_km: float = DEFAULT_PROXIMITY_KM,
        speed_kmh: float = DEFAULT_SPEED_KMH,
    ) -> int:
        """
        Build connections based on geographic proximity.

        Connects every pair of points within max_distance_km of each other
        (straight-line haversine distance) that are not already linked.
        Travel time is estimated from the given average speed.

        Returns:
            Number of connections added
        """
        points = list(self.graph.nodes(data=True))
        added = 0

        for i, (id1, data1) in enumerate(points):
            for id2, data2 in points[i + 1 :]:
                if self.graph.has_edge(id1, id2):
                    continue
                distance = haversine(data1["lat"], data1["lon"], data2["lat"], data2["lon"])
                if distance <= max_distance_km:
                    self.add_connection(
                        id1, id2, distance, estimate_travel_time(distance, speed_kmh)
                    )
                    added += 1

        return added

    def snapshot(self) -> Graph:
        """Freeze the current state into a Graph."""
        points = {
            node: Point(id=node, name=data["name"], lat=data["lat"], lon=data["lon"])
            for node, data in self.graph.nodes(data=True)
        }
        # Keep insertion order, it decides which equal-distance path wins
        edges = sorted(self.graph.edges(data=True), key=lambda edge: edge[2]["seq"])
        connections = tuple(
            Connection(
                source=data["source"],
                target=v if data["source"] == u else u,
                distance=data["distance"],
                time=data["time"],
            )
            for u, v, data in edges
        )
        return Graph(points=points, connections=connections)

    def has_point(self, point_id: str) -> bool:
        """Check if a point exists in the network."""
        return point_id in self.graph

    def get_neighbors(self, point_id: str) -> list[str]:
        """Get neighboring points."""
        if point_id not in self.graph:
            return []
        return list(self.graph.neighbors(point_id))

    def __len__(self) -> int:
        """Return number of points."""
        return len(self.graph)

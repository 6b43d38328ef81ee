"""Find the network points closest to a coordinate using a KD-Tree."""

from dataclasses import dataclass

import numpy as np
from scipy.spatial import cKDTree

from ..pathfinding.graph import Graph, Point
from .distance import haversine


@dataclass
class NearestResult:
    """Result of nearest point search."""

    point: Point
    distance_km: float


class NearestPointFinder:
    """
    Snap coordinates to network points with an O(log n) KD-Tree lookup.

    The tree is built on coordinates in radians; returned distances are
    recomputed with the haversine formula.
    """

    def __init__(self, graph: Graph):
        """
        Initialize finder with the points of a graph snapshot.

        Args:
            graph: Graph instance
        """
        self.points: list[Point] = list(graph.points.values())
        self.tree: cKDTree | None = None

        if self.points:
            coords = np.radians([[p.lat, p.lon] for p in self.points])
            self.tree = cKDTree(coords)

    def find_nearest(self, lat: float, lon: float, k: int = 1) -> list[NearestResult]:
        """
        Find the k nearest points to a coordinate.

        Args:
            lat: Latitude of the query point (degrees)
            lon: Longitude of the query point (degrees)
            k: Number of points to return (capped at the number of points)

        Returns:
            List of NearestResult, closest first; empty if the graph has no points
        """
        if self.tree is None or k < 1:
            return []

        k = min(k, len(self.points))
        _, indices = self.tree.query(np.radians([lat, lon]), k=k)

        results = []
        for idx in np.atleast_1d(indices):
            point = self.points[int(idx)]
            distance = haversine(lat, lon, point.lat, point.lon)
            results.append(NearestResult(point=point, distance_km=distance))

        # Planar KD-Tree order can differ slightly from great-circle order
        results.sort(key=lambda r: r.distance_km)
        return results

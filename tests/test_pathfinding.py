"""Tests for pathfinding module."""

import itertools

import networkx as nx
import pytest

from routeplanner.pathfinding.dijkstra import (
    PathFinder,
    RouteStatus,
    find_shortest_path,
    format_distance,
    format_duration,
)
from routeplanner.pathfinding.graph import (
    Connection,
    Graph,
    MalformedGraphError,
    Point,
    build_adjacency,
    path_cost,
)
from routeplanner.pathfinding.sample import sample_graph


def make_graph(point_ids, connections):
    points = {pid: Point(id=pid, name=pid, lat=0.0, lon=0.0) for pid in point_ids}
    return Graph(
        points=points,
        connections=tuple(Connection(*c) for c in connections),
    )


def brute_force_distance(graph: Graph, start: str, end: str) -> float | None:
    """Cheapest simple path found by enumerating every edge path."""
    g = graph.to_networkx()
    best = None
    for edge_path in nx.all_simple_edge_paths(g, start, end):
        total = sum(g.edges[u, v, k]["distance"] for u, v, k in edge_path)
        if best is None or total < best:
            best = total
    return best


class TestGraph:
    """Tests for Graph and the adjacency index."""

    def test_adjacency_is_bidirectional(self):
        graph = make_graph(["A", "B"], [("A", "B", 2.0, 5.0)])
        adjacency = build_adjacency(graph)
        assert adjacency["A"] == [("B", 2.0, 5.0)]
        assert adjacency["B"] == [("A", 2.0, 5.0)]

    def test_isolated_point_has_entry(self):
        graph = make_graph(["A", "B", "Z"], [("A", "B", 1.0, 1.0)])
        adjacency = build_adjacency(graph)
        assert adjacency["Z"] == []

    def test_parallel_connections_kept(self):
        graph = make_graph(["A", "B"], [("A", "B", 2.0, 5.0), ("B", "A", 1.0, 20.0)])
        adjacency = build_adjacency(graph)
        assert len(adjacency["A"]) == 2
        assert len(adjacency["B"]) == 2

    def test_unknown_endpoint_rejected(self):
        graph = make_graph(["A"], [("A", "Z", 1.0, 1.0)])
        with pytest.raises(MalformedGraphError, match="unknown point 'Z'"):
            build_adjacency(graph)

    def test_negative_cost_rejected(self):
        graph = make_graph(["A", "B"], [("A", "B", -1.0, 1.0)])
        with pytest.raises(MalformedGraphError):
            build_adjacency(graph)

    def test_from_dict_rejects_unknown_point(self):
        with pytest.raises(MalformedGraphError):
            Graph.from_dict(
                {
                    "points": {"A": {"name": "A", "lat": 0, "lon": 0}},
                    "connections": [{"from": "A", "to": "B", "distance": 1, "time": 1}],
                }
            )

    @pytest.mark.parametrize("entry", [None, 3, "Car Park", ["lat", "lon"]])
    def test_from_dict_rejects_non_mapping_point(self, entry):
        with pytest.raises(MalformedGraphError):
            Graph.from_dict({"points": {"A": entry}, "connections": []})

    def test_from_dict_accepts_point_list(self):
        graph = Graph.from_dict(
            {
                "points": [
                    {"id": "A", "name": "Car Park", "lat": 1.0, "lng": 2.0},
                    {"id": "B", "lat": 1.5, "lon": 2.5},
                ],
                "connections": [{"from": "A", "to": "B", "distance": 1, "time": 2}],
            }
        )
        assert graph.points["A"].lon == 2.0
        assert graph.points["B"].name == "B"
        assert graph.connections == (Connection("A", "B", 1.0, 2.0),)

    def test_snapshot_is_read_only(self):
        graph = sample_graph()
        with pytest.raises(TypeError):
            graph.points["Q"] = Point("Q", "Q", 0.0, 0.0)

    def test_to_dict_keeps_connection_order(self):
        graph = sample_graph()
        data = graph.to_dict()
        assert len(data["points"]) == 7
        assert data["connections"][0] == {"from": "A", "to": "B", "distance": 0.5, "time": 3.0}
        assert Graph.from_dict(data) == graph

    def test_path_cost(self):
        graph = sample_graph()
        assert path_cost(graph, ["A", "E", "Y"]) == pytest.approx((1.2, 8.0))
        assert path_cost(graph, ["A", "D"]) is None


class TestPathFinder:
    """Tests for PathFinder."""

    @pytest.fixture
    def pathfinder(self):
        graph = make_graph(
            ["A", "B", "C", "D", "Z"],
            [
                ("A", "B", 100, 60),
                ("B", "C", 100, 60),
                ("A", "D", 150, 30),
                ("D", "C", 150, 30),
            ],
        )
        return PathFinder(graph)

    def test_direct_path(self, pathfinder):
        result = pathfinder.find_path("A", "B")
        assert result.found
        assert result.path == ["A", "B"]
        assert result.total_distance == 100
        assert result.total_time == 60

    def test_multi_hop_path(self, pathfinder):
        result = pathfinder.find_path("A", "C")
        assert result.found
        # Should take A -> B -> C (200) instead of A -> D -> C (300),
        # even though the latter is faster
        assert result.path == ["A", "B", "C"]
        assert result.total_distance == 200
        assert result.total_time == 120

    def test_reverse_direction(self, pathfinder):
        result = pathfinder.find_path("C", "A")
        assert result.path == ["C", "B", "A"]

    def test_same_point(self, pathfinder):
        result = pathfinder.find_path("A", "A")
        assert result.found
        assert result.path == ["A"]
        assert result.total_distance == 0
        assert result.total_time == 0
        assert result.segments == []

    def test_no_path(self, pathfinder):
        result = pathfinder.find_path("A", "Z")
        assert not result.found
        assert result.status == RouteStatus.NOT_FOUND
        assert result.path == []

    def test_unknown_point(self, pathfinder):
        result = pathfinder.find_path("A", "Unknown")
        assert not result.found
        assert result.status == RouteStatus.INVALID_ENDPOINT

    def test_unknown_start_same_as_end(self, pathfinder):
        result = pathfinder.find_path("Unknown", "Unknown")
        assert result.status == RouteStatus.INVALID_ENDPOINT

    def test_segments(self, pathfinder):
        result = pathfinder.find_path("A", "C")
        assert [(s.from_point, s.to_point) for s in result.segments] == [("A", "B"), ("B", "C")]
        assert sum(s.distance_km for s in result.segments) == result.total_distance

    def test_malformed_graph_reported(self):
        graph = make_graph(["A", "B"], [("A", "B", 1, 1), ("B", "X", 1, 1)])
        pathfinder = PathFinder(graph)
        assert pathfinder.graph_error is not None
        result = pathfinder.find_path("A", "B")
        assert not result.found
        assert result.status == RouteStatus.MALFORMED_GRAPH

    def test_parallel_connection_shortest_wins(self):
        graph = make_graph(["A", "B"], [("A", "B", 2.0, 5.0), ("B", "A", 1.0, 20.0)])
        result = find_shortest_path(graph, "A", "B")
        assert result.total_distance == 1.0
        assert result.total_time == 20.0
        assert result.segments[0].duration_min == 20.0

    @pytest.mark.parametrize(
        "connections",
        [
            [("s", "a", 1, 1), ("a", "t", 1, 100), ("s", "b", 1, 1), ("b", "t", 1, 1)],
            [("s", "b", 1, 1), ("b", "t", 1, 1), ("s", "a", 1, 1), ("a", "t", 1, 100)],
        ],
    )
    def test_equal_distance_tie_uses_point_id_order(self, connections):
        graph = make_graph(["s", "a", "b", "t"], connections)
        result = find_shortest_path(graph, "s", "t")
        # Time does not break ties; "a" is settled before "b"
        assert result.path == ["s", "a", "t"]
        assert result.total_time == 101

    def test_zero_distance_connection(self):
        graph = make_graph(["A", "B", "C"], [("A", "B", 0.0, 0.0), ("B", "C", 1.0, 2.0)])
        result = find_shortest_path(graph, "A", "C")
        assert result.path == ["A", "B", "C"]
        assert result.total_distance == 1.0

    def test_pathfinder_is_reusable(self, pathfinder):
        first = pathfinder.find_path("A", "C")
        pathfinder.find_path("C", "D")
        assert pathfinder.find_path("A", "C") == first


class TestReferenceNetwork:
    """Properties checked on the bundled reference network."""

    @pytest.fixture
    def graph(self):
        return sample_graph()

    def test_a_to_y(self, graph):
        result = find_shortest_path(graph, "A", "Y")
        assert result.path == ["A", "E", "Y"]
        assert result.total_distance == pytest.approx(1.2)
        assert result.total_time == pytest.approx(8)

    def test_a_to_d_distance(self, graph):
        result = find_shortest_path(graph, "A", "D")
        assert result.total_distance == pytest.approx(1.9)

    def test_unknown_target(self, graph):
        result = find_shortest_path(graph, "A", "Z")
        assert result.status == RouteStatus.INVALID_ENDPOINT

    def test_distance_matches_path_sum(self, graph):
        for a, b in itertools.permutations(graph.points, 2):
            result = find_shortest_path(graph, a, b)
            distance, time = path_cost(graph, result.path)
            assert result.total_distance == pytest.approx(distance)
            assert result.total_time == pytest.approx(time)

    def test_distance_is_minimal(self, graph):
        for a, b in itertools.permutations(graph.points, 2):
            result = find_shortest_path(graph, a, b)
            assert result.total_distance == pytest.approx(brute_force_distance(graph, a, b))

    def test_symmetry(self, graph):
        for a, b in itertools.combinations(graph.points, 2):
            forward = find_shortest_path(graph, a, b)
            backward = find_shortest_path(graph, b, a)
            assert forward.total_distance == pytest.approx(backward.total_distance)

    def test_same_point_everywhere(self, graph):
        for p in graph.points:
            result = find_shortest_path(graph, p, p)
            assert (result.path, result.total_distance, result.total_time) == ([p], 0, 0)


class TestPathFinderWithWaypoints:
    """Tests for PathFinder with ordered waypoints."""

    @pytest.fixture
    def pathfinder(self):
        # A -- B -- C -- D
        # |    |    |
        # E -- F -- G
        graph = make_graph(
            ["A", "B", "C", "D", "E", "F", "G"],
            [
                ("A", "B", 100, 60),
                ("B", "C", 100, 60),
                ("C", "D", 100, 60),
                ("A", "E", 100, 60),
                ("B", "F", 100, 60),
                ("C", "G", 100, 60),
                ("E", "F", 100, 60),
                ("F", "G", 100, 60),
            ],
        )
        return PathFinder(graph)

    def test_path_with_single_waypoint(self, pathfinder):
        """Test path from A to D via F."""
        result = pathfinder.find_path_with_waypoints("A", "D", ["F"])
        assert result.found
        assert result.path[0] == "A"
        assert "F" in result.path
        assert result.path[-1] == "D"
        assert result.total_distance == 500

    def test_path_with_multiple_waypoints(self, pathfinder):
        result = pathfinder.find_path_with_waypoints("A", "D", ["B", "C"])
        assert result.path == ["A", "B", "C", "D"]
        assert result.total_distance == 300
        assert result.total_time == 180
        assert len(result.segments) == 3

    def test_path_no_waypoints(self, pathfinder):
        result = pathfinder.find_path_with_waypoints("A", "D", [])
        assert result.path == pathfinder.find_path("A", "D").path

    def test_invalid_waypoint(self, pathfinder):
        result = pathfinder.find_path_with_waypoints("A", "D", ["INVALID"])
        assert not result.found
        assert result.status == RouteStatus.INVALID_ENDPOINT


class TestFormatting:
    """Tests for display helpers."""

    @pytest.mark.parametrize(
        "minutes, expected",
        [
            (1, "1 min"),
            (8, "8 mins"),
            (19, "19 mins"),
            (65, "1 hr 5 mins"),
            (120, "2 hrs 0 mins"),
            (59.7, "1 hr 0 mins"),
            (2.5, "3 mins"),
            (0.5, "1 min"),
            (89.5, "1 hr 30 mins"),
            (119.5, "2 hrs 0 mins"),
            (None, ""),
        ],
    )
    def test_format_duration(self, minutes, expected):
        assert format_duration(minutes) == expected

    def test_format_distance(self):
        assert format_distance(2.7) == "2.7 km"
        assert format_distance(1.25) == "1.3 km"
        assert format_distance(0.05) == "0.1 km"
        assert format_distance(3) == "3.0 km"
        assert format_distance(None) == ""

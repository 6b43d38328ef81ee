"""Reference network used by the CLI and web app when no data files are given."""

from .graph import Graph

SAMPLE_NETWORK = {
    "points": {
        "A": {"name": "Car Park", "lat": 40.712776, "lon": -74.005974},
        "B": {"name": "Point B", "lat": 40.714541, "lon": -74.007089},
        "C": {"name": "Point C", "lat": 40.718617, "lon": -74.013392},
        "D": {"name": "Point D", "lat": 40.715120, "lon": -74.015610},
        "E": {"name": "Point E", "lat": 40.711614, "lon": -74.012262},
        "V": {"name": "Point V", "lat": 40.709749, "lon": -74.006168},
        "Y": {"name": "Point Y", "lat": 40.713051, "lon": -74.013735},
    },
    "connections": [
        {"from": "A", "to": "B", "distance": 0.5, "time": 3},
        {"from": "A", "to": "E", "distance": 0.7, "time": 5},
        {"from": "A", "to": "V", "distance": 0.4, "time": 2},
        {"from": "B", "to": "C", "distance": 0.8, "time": 6},
        {"from": "B", "to": "Y", "distance": 1.1, "time": 8},
        {"from": "C", "to": "D", "distance": 0.6, "time": 4},
        {"from": "C", "to": "Y", "distance": 0.9, "time": 7},
        {"from": "D", "to": "E", "distance": 1.2, "time": 10},
        {"from": "E", "to": "V", "distance": 0.6, "time": 4},
        {"from": "E", "to": "Y", "distance": 0.5, "time": 3},
        {"from": "V", "to": "Y", "distance": 0.9, "time": 7},
    ],
}


def sample_graph() -> Graph:
    """Return the reference network as a Graph snapshot."""
    return Graph.from_dict(SAMPLE_NETWORK)

"""
FastAPI web interface for Route Planner.

JSON API over the pathfinding module. Requests may carry their own graph;
otherwise the network loaded at startup is used.
"""

import logging

from fastapi import FastAPI, Query
from pydantic import BaseModel, ConfigDict, Field

from routeplanner import config
from routeplanner.geo import NearestPointFinder
from routeplanner.main import load_graph
from routeplanner.pathfinding import (
    Connection,
    Graph,
    MultiStopRouter,
    PathFinder,
    Point,
    RouteResult,
    check_limits,
    format_distance,
    format_duration,
)

logger = logging.getLogger(__name__)

# Initialize FastAPI
app = FastAPI(
    title="Route Planner",
    description="Shortest and multi-stop routes over a point network",
    version="0.1.0",
)

# Global instances (loaded on startup)
network: Graph | None = None
router: MultiStopRouter | None = None
nearest_finder: NearestPointFinder | None = None


@app.on_event("startup")
async def startup_event():
    """Load the default network on startup."""
    global network, router, nearest_finder

    points_file = config.POINTS_FILE if config.POINTS_FILE.exists() else None
    network = load_graph(points_file, config.CONNECTIONS_FILE)
    router = MultiStopRouter(network)
    nearest_finder = NearestPointFinder(network)
    logger.info(
        "Loaded network with %d points and %d connections",
        len(network), len(network.connections),
    )


class PointPayload(BaseModel):
    """A point of a request graph."""

    name: str | None = None
    lat: float = 0.0
    lon: float = 0.0


class ConnectionPayload(BaseModel):
    """A connection of a request graph."""

    model_config = ConfigDict(populate_by_name=True)

    source: str = Field(alias="from")
    target: str = Field(alias="to")
    distance: float = Field(ge=0)  # km
    time: float = Field(ge=0)  # minutes


class GraphPayload(BaseModel):
    """Graph sent along with a query."""

    points: dict[str, PointPayload]
    connections: list[ConnectionPayload] = []

    def to_graph(self) -> Graph:
        # Endpoint checks are left to the pathfinder, which reports them as
        # a malformed_graph status
        return Graph(
            points={
                point_id: Point(id=point_id, name=p.name or point_id, lat=p.lat, lon=p.lon)
                for point_id, p in self.points.items()
            },
            connections=tuple(
                Connection(source=c.source, target=c.target, distance=c.distance, time=c.time)
                for c in self.connections
            ),
        )


class RouteRequest(BaseModel):
    """Multi-stop route request."""

    start: str
    destinations: list[str]
    graph: GraphPayload | None = None


class PathRequest(BaseModel):
    """Single shortest-path request."""

    start: str
    end: str
    graph: GraphPayload | None = None


class SegmentDisplay(BaseModel):
    """Display info for a route segment."""

    from_point: str
    to_point: str
    distance_km: float
    duration_min: float


class RouteResponse(BaseModel):
    """Response model for route queries."""

    found: bool
    status: str
    path: list[str] = []
    point_names: list[str] = []
    distance_km: float | None = None
    duration_min: float | None = None
    distance_text: str | None = None
    duration_text: str | None = None
    segments: list[SegmentDisplay] = []
    unreachable: list[str] = []
    error: str | None = None


class PointDisplay(BaseModel):
    """A network point."""

    id: str
    name: str
    lat: float
    lon: float


class NearestDisplay(BaseModel):
    """A point near a queried coordinate."""

    point: PointDisplay
    distance_km: float


def to_response(graph: Graph, result: RouteResult) -> RouteResponse:
    """Convert a RouteResult into the API response model."""
    if not result.found:
        return RouteResponse(found=False, status=result.status.value, error=result.message)

    return RouteResponse(
        found=True,
        status=result.status.value,
        path=result.path,
        point_names=[graph.points[point_id].name for point_id in result.path],
        distance_km=result.total_distance,
        duration_min=result.total_time,
        distance_text=format_distance(result.total_distance),
        duration_text=format_duration(result.total_time),
        segments=[
            SegmentDisplay(
                from_point=seg.from_point,
                to_point=seg.to_point,
                distance_km=seg.distance_km,
                duration_min=seg.duration_min,
            )
            for seg in result.segments
        ],
        unreachable=result.unreachable,
        error=result.message,
    )


def point_display(point: Point) -> PointDisplay:
    return PointDisplay(id=point.id, name=point.name, lat=point.lat, lon=point.lon)


@app.get("/api/points", response_model=list[PointDisplay])
async def api_points() -> list[PointDisplay]:
    """List the points of the loaded network."""
    if network is None:
        return []
    return [point_display(p) for p in network.points.values()]


@app.post("/api/route", response_model=RouteResponse)
async def api_route(query: RouteRequest) -> RouteResponse:
    """Multi-stop route from a start through every destination."""
    if query.graph is not None:
        graph = query.graph.to_graph()
        limit_error = check_limits(graph, max_points=config.MAX_POINTS)
        if limit_error is not None:
            return to_response(graph, limit_error)
        route_router = MultiStopRouter(graph)
    elif router is not None:
        graph, route_router = network, router
    else:
        return RouteResponse(found=False, status="unavailable", error="No network loaded")

    result = route_router.optimal_route(query.start, query.destinations)
    return to_response(graph, result)


@app.post("/api/path", response_model=RouteResponse)
async def api_path(query: PathRequest) -> RouteResponse:
    """Shortest path between two points."""
    if query.graph is not None:
        graph = query.graph.to_graph()
        limit_error = check_limits(graph, max_points=config.MAX_POINTS)
        if limit_error is not None:
            return to_response(graph, limit_error)
    elif network is not None:
        graph = network
    else:
        return RouteResponse(found=False, status="unavailable", error="No network loaded")

    result = PathFinder(graph).find_path(query.start, query.end)
    return to_response(graph, result)


@app.get("/api/nearest", response_model=list[NearestDisplay])
async def api_nearest(
    lat: float = Query(ge=-90, le=90),
    lon: float = Query(ge=-180, le=180),
    k: int = Query(default=config.DEFAULT_NEAREST_K, ge=1, le=20),
) -> list[NearestDisplay]:
    """Points of the loaded network closest to a coordinate."""
    if nearest_finder is None:
        return []
    return [
        NearestDisplay(point=point_display(r.point), distance_km=r.distance_km)
        for r in nearest_finder.find_nearest(lat, lon, k=k)
    ]


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "network_loaded": network is not None,
        "points": len(network) if network is not None else 0,
    }

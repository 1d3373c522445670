from typing import Dict, List, Optional, Set, Tuple

import httpx
import pytest

from roadtrip.schemas.trip import GeoPoint
from roadtrip.services.directions import SegmentRouter
from roadtrip.services.geocode import GeoResolver
from roadtrip.services.map_surface import LayerMap
from roadtrip.services.planner import RoutePlanner
from roadtrip.services.session import TripSession
from roadtrip.services.stop_list import StopList

STOCKHOLM = GeoPoint(name="Stockholm, Sweden", lat=59.3293, lng=18.0686)
BERLIN = GeoPoint(name="Berlin, Germany", lat=52.52, lng=13.405)
PARIS = GeoPoint(name="Paris, France", lat=48.8566, lng=2.3522)
MADRID = GeoPoint(name="Madrid, Spain", lat=40.4168, lng=-3.7038)


class FakeOSRM:
    """
    Stands in for the OSRM /route endpoint. Knows the test points by
    their "lng,lat" strings and records every pair it is asked for.
    """

    def __init__(
        self,
        points: List[GeoPoint],
        distances: Optional[Dict[Tuple[str, str], Tuple[float, float]]] = None,
        fail_on: Optional[Set[Tuple[str, str]]] = None,
    ) -> None:
        self.by_coord = {f"{p.lng},{p.lat}": p for p in points}
        self.distances = distances or {}
        self.fail_on = fail_on or set()
        self.calls: List[Tuple[str, str]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        coords = request.url.path.rsplit("/", 1)[-1]
        a_raw, b_raw = coords.split(";")
        a, b = self.by_coord[a_raw], self.by_coord[b_raw]
        self.calls.append((a.name, b.name))

        if (a.name, b.name) in self.fail_on:
            return httpx.Response(400, json={"code": "NoRoute", "message": "Impossible route"})

        distance, duration = self.distances.get((a.name, b.name), (1000.0, 60.0))
        return httpx.Response(
            200,
            json={
                "code": "Ok",
                "routes": [
                    {
                        "distance": distance,
                        "duration": duration,
                        "geometry": {
                            "type": "LineString",
                            "coordinates": [[a.lng, a.lat], [b.lng, b.lat]],
                        },
                    }
                ],
            },
        )

    def router(self) -> SegmentRouter:
        return SegmentRouter(
            base_url="http://osrm.test",
            profile="driving",
            timeout_s=1.0,
            transport=httpx.MockTransport(self.handler),
        )


class FakeNominatim:
    def __init__(self, results: Dict[str, list]) -> None:
        self.results = results
        self.queries: List[str] = []
        self.headers: List[httpx.Headers] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        q = request.url.params["q"]
        self.queries.append(q)
        self.headers.append(request.headers)
        return httpx.Response(200, json=self.results.get(q, []))

    def resolver(self) -> GeoResolver:
        return GeoResolver(
            url="http://nominatim.test/search",
            user_agent="RoadtripPlanner/test",
            timeout_s=1.0,
            transport=httpx.MockTransport(self.handler),
        )


class CountingMap(LayerMap):
    def __init__(self) -> None:
        super().__init__()
        self.fit_calls = 0

    def fit_bounds(self, points, padding) -> None:
        self.fit_calls += 1
        super().fit_bounds(points, padding)


@pytest.fixture
def points():
    return [STOCKHOLM, BERLIN, PARIS, MADRID]


@pytest.fixture
def osrm(points):
    return FakeOSRM(points)


@pytest.fixture
def nominatim():
    return FakeNominatim(
        {
            "Berlin": [
                {
                    "display_name": "Berlin, Brandenburg, Germany",
                    "lat": "52.5200",
                    "lon": "13.4050",
                }
            ],
        }
    )


@pytest.fixture
def make_session(osrm, nominatim):
    def _make(stops: Optional[StopList] = None, surface: Optional[LayerMap] = None) -> TripSession:
        return TripSession(
            stops if stops is not None else StopList([STOCKHOLM, PARIS]),
            resolver=nominatim.resolver(),
            planner=RoutePlanner(osrm.router()),
            surface=surface or CountingMap(),
        )

    return _make

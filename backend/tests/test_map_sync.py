import asyncio

import pytest

from roadtrip.schemas.trip import RouteResult
from roadtrip.services.directions import RoutingError
from roadtrip.services.map_surface import DEFAULT_CENTER, LayerMap
from roadtrip.services.map_sync import (
    ENDPOINT_COLOR,
    FORWARD_STYLE,
    INTERMEDIATE_COLOR,
    RETURN_STYLE,
    MapSync,
)
from roadtrip.services.planner import InsufficientStopsError, PlannerBusyError, RoutePlanner
from roadtrip.services.session import TripSession
from roadtrip.services.stop_list import StopList

from conftest import BERLIN, PARIS, STOCKHOLM, CountingMap


def test_markers_are_labelled_and_coloured():
    surface = CountingMap()
    MapSync(surface).sync_markers([STOCKHOLM, BERLIN, PARIS])

    markers = surface.layers("marker")
    assert [m["label"] for m in markers] == ["A", "B", "C"]
    assert [m["color"] for m in markers] == [ENDPOINT_COLOR, INTERMEDIATE_COLOR, ENDPOINT_COLOR]
    assert markers[1]["popup"] == "B – Berlin, Germany"
    assert surface.viewport["kind"] == "bounds"
    assert surface.viewport["bounds"] == [[PARIS.lat, PARIS.lng], [STOCKHOLM.lat, STOCKHOLM.lng]]
    assert surface.fit_calls == 1


def test_single_stop_centres_and_empty_keeps_default_view():
    surface = CountingMap()
    sync = MapSync(surface)

    sync.sync_markers([])
    assert surface.viewport["center"] == list(DEFAULT_CENTER)

    sync.sync_markers([PARIS])
    assert surface.viewport == {"kind": "view", "center": [PARIS.lat, PARIS.lng], "zoom": 8}
    assert surface.fit_calls == 0


def test_every_sync_replaces_previous_layers():
    surface = LayerMap()
    sync = MapSync(surface)

    sync.sync_markers([STOCKHOLM, BERLIN, PARIS])
    sync.sync_markers([STOCKHOLM, PARIS])

    assert len(surface.layers("marker")) == 2
    assert surface.layers("polyline") == []


def test_theme_switches_tiles():
    surface = LayerMap()
    sync = MapSync(surface)

    sync.apply_theme("dark")
    assert "dark_all" in surface.tiles["url"]
    assert surface.tiles["max_zoom"] == 19

    sync.apply_theme("light")
    assert "openstreetmap" in surface.tiles["url"]


# ---------------------------------------------------------------------
# Through the session
# ---------------------------------------------------------------------

async def test_calculate_draws_styled_lines_and_fits_once(make_session):
    surface = CountingMap()
    session = make_session(StopList([STOCKHOLM, BERLIN, PARIS]), surface=surface)
    surface.fit_calls = 0

    await session.calculate(include_return=True)

    lines = surface.layers("polyline")
    assert len(lines) == 4
    assert [l["color"] for l in lines] == [FORWARD_STYLE["color"]] * 2 + [RETURN_STYLE["color"]] * 2
    assert lines[2]["opacity"] < lines[0]["opacity"]
    assert lines[0]["path"] == [[STOCKHOLM.lat, STOCKHOLM.lng], [BERLIN.lat, BERLIN.lng]]
    assert len(surface.layers("marker")) == 3
    assert surface.fit_calls == 1
    assert session.summary_visible


async def test_stop_change_hides_summary_and_clears_lines(make_session):
    session = make_session(StopList([STOCKHOLM, BERLIN, PARIS]))
    await session.calculate()
    assert session.visible_summary() is not None

    session.move_stop(0, 2)

    assert session.visible_summary() is None
    assert session.surface.layers("polyline") == []
    assert [m["label"] for m in session.surface.layers("marker")] == ["A", "B", "C"]
    assert session.surface.layers("marker")[2]["popup"] == "C – Stockholm, Sweden"


async def test_failed_leg_keeps_partial_lines(make_session, osrm):
    osrm.fail_on = {(BERLIN.name, PARIS.name)}
    session = make_session(StopList([STOCKHOLM, BERLIN, PARIS]))

    with pytest.raises(RoutingError) as exc:
        await session.calculate()

    assert "Berlin, Germany → Paris, France" in str(exc.value)
    assert len(session.surface.layers("polyline")) == 1
    assert session.visible_summary() is None
    assert session.busy is False


async def test_too_few_stops_leaves_map_alone(make_session, osrm):
    surface = CountingMap()
    session = make_session(StopList([PARIS]), surface=surface)
    before = surface.snapshot()

    with pytest.raises(InsufficientStopsError):
        await session.calculate()

    assert surface.snapshot() == before
    assert osrm.calls == []


class GateRouter:
    """Holds every leg until the test opens the gate."""

    def __init__(self) -> None:
        self.gate = asyncio.Event()
        self.calls = 0

    async def route(self, a, b) -> RouteResult:
        self.calls += 1
        await self.gate.wait()
        return RouteResult(distance_m=10.0, duration_s=5.0, path=[(a.lat, a.lng), (b.lat, b.lng)])


async def test_second_calculation_is_rejected_while_busy(nominatim):
    router = GateRouter()
    session = TripSession(
        StopList([STOCKHOLM, BERLIN, PARIS]),
        resolver=nominatim.resolver(),
        planner=RoutePlanner(router),
    )

    first = asyncio.ensure_future(session.calculate())
    await asyncio.sleep(0)
    assert session.busy

    with pytest.raises(PlannerBusyError):
        await session.calculate()
    assert router.calls == 1

    router.gate.set()
    summary = await first
    assert session.busy is False
    assert summary.total_distance_m == 20.0


async def test_stop_removed_during_calculation_wins_over_the_route(nominatim):
    router = GateRouter()
    surface = CountingMap()
    session = TripSession(
        StopList([STOCKHOLM, BERLIN, PARIS]),
        resolver=nominatim.resolver(),
        planner=RoutePlanner(router),
        surface=surface,
    )

    pending = asyncio.ensure_future(session.calculate())
    await asyncio.sleep(0)
    session.remove_stop(1)
    router.gate.set()
    await pending

    assert len(session.stops) == 2
    markers = surface.layers("marker")
    assert [m["popup"] for m in markers] == ["A – Stockholm, Sweden", "B – Paris, France"]
    assert surface.layers("polyline") == []
    assert session.summary_visible is False
    assert session.visible_summary() is None

import numpy as np
import pytest

from mandelzoom.config import ExplorerConfig, workers_from_env
from mandelzoom.errors import PreconditionViolation
from mandelzoom.interaction import Button, Move, Press, Release, Resize
from mandelzoom.session import ExplorerSession, PillowSurface
from mandelzoom.viewport import SurfaceExtent, Viewport


@pytest.fixture
def session():
    with ExplorerSession(ExplorerConfig(surface=SurfaceExtent(12, 8), workers=1)) as session:
        yield session


def test_first_frame_renders_at_minimum_budget(session):
    frame = session.advance(0)
    assert frame is not None
    assert frame.budget == 1
    assert frame.overlay == ()
    assert np.all(frame.bitmap == 0)


def test_frames_render_only_when_budget_changes(session):
    assert session.advance(0) is not None
    assert session.advance(0) is None
    assert session.advance(50) is None
    frame = session.advance(100)
    assert frame is not None
    assert frame.budget == 2
    assert session.frames_rendered == 2


def test_dragging_renders_every_frame_with_overlay(session):
    session.advance(0)
    session.handle(Press.at(2, 6))
    session.handle(Move.at(8, 6))
    first = session.advance(0)
    second = session.advance(0)
    assert first is not None and second is not None
    assert len(second.overlay) == 4
    assert np.array_equal(first.bitmap, second.bitmap)


def test_zoom_commit_invalidates_view(session):
    session.advance(400)
    assert session.advance(400) is None
    session.handle(Press.at(2, 6))
    session.handle(Move.at(8, 6))
    session.handle(Release(Button.LEFT))
    frame = session.advance(400)
    assert frame is not None
    assert frame.result.snapshot.viewport == session.viewport
    assert session.viewport != Viewport.initial()


def test_posted_events_wait_for_next_frame(session):
    session.advance(1000)
    session.handle(Press.at(2, 6))
    session.handle(Move.at(8, 6))
    session.handle(Release(Button.LEFT))
    zoomed = session.viewport
    session.post(Release(Button.RIGHT))
    assert session.viewport == zoomed
    frame = session.advance(1000)
    assert frame.result.snapshot.viewport == Viewport.initial()
    assert frame.budget == 1


def test_resize_applies_to_next_frame(session):
    session.advance(0)
    session.post(Resize(6, 4))
    frame = session.advance(0)
    assert frame.bitmap.shape == (4, 6)


def test_release_without_press_propagates(session):
    with pytest.raises(PreconditionViolation):
        session.handle(Release(Button.LEFT))


def test_present_hands_frame_to_surface(session):
    surface = PillowSurface()
    frame = session.advance(0)
    session.present(frame, surface)
    assert surface.images == [surface.last]
    assert surface.last.size == (12, 8)


def test_pool_is_created_and_closed_for_parallel_sessions():
    config = ExplorerConfig(surface=SurfaceExtent(8, 6), workers=2)
    session = ExplorerSession(config)
    try:
        serial = ExplorerSession(ExplorerConfig(surface=SurfaceExtent(8, 6), workers=1))
        session.advance(600)
        serial.advance(600)
        frame = session.advance(700)
        expected = serial.advance(700)
        assert frame.bitmap.tobytes() == expected.bitmap.tobytes()
        assert session._executor is not None
    finally:
        session.close()
    assert session._executor is None


def test_workers_from_env():
    assert workers_from_env({}) is None
    assert workers_from_env({"MANDELZOOM_WORKERS": "3"}) == 3
    with pytest.raises(ValueError):
        workers_from_env({"MANDELZOOM_WORKERS": "0"})

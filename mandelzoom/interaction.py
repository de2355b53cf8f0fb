"""Input events and the drag-to-zoom state machine."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union

from .clock import AnimationClock
from .errors import DegenerateRangeError, PreconditionViolation
from .fixed import Real
from .viewport import DEFAULT_VIEW, SurfaceExtent, SurfacePoint, ViewDefaults, Viewport


class Button(enum.Enum):
    LEFT = "left"
    RIGHT = "right"
    MIDDLE = "middle"


class Key(enum.Enum):
    R = "r"
    SPACE = "space"


@dataclass(frozen=True)
class Press:
    button: Button
    position: SurfacePoint

    @classmethod
    def at(cls, x: Real, y: Real, button: Button = Button.LEFT) -> "Press":
        return cls(button, SurfacePoint.of(x, y))


@dataclass(frozen=True)
class Move:
    position: SurfacePoint

    @classmethod
    def at(cls, x: Real, y: Real) -> "Move":
        return cls(SurfacePoint.of(x, y))


@dataclass(frozen=True)
class Release:
    button: Button = Button.LEFT


@dataclass(frozen=True)
class KeyPress:
    key: Key


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


Event = Union[Press, Move, Release, KeyPress, Resize]


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Dragging:
    """Selection in progress; ``current`` is kept at the surface aspect ratio."""

    anchor: SurfacePoint
    current: SurfacePoint


State = Union[Idle, Dragging]

IDLE = Idle()


def constrain_to_aspect(anchor: SurfacePoint, pointer: SurfacePoint, surface: SurfaceExtent) -> SurfacePoint:
    """Corner opposite ``anchor`` with the same height/width ratio as the surface."""

    dx = pointer.x - anchor.x
    return SurfacePoint(pointer.x, anchor.y - dx * surface.aspect)


class ZoomInteraction:
    """Translates press/move/release/key events into viewport and clock updates."""

    def __init__(
        self,
        surface: SurfaceExtent,
        clock: AnimationClock,
        defaults: ViewDefaults = DEFAULT_VIEW,
        viewport: Viewport | None = None,
    ) -> None:
        self.surface = surface
        self.clock = clock
        self.defaults = defaults
        self.viewport = viewport if viewport is not None else Viewport.initial(defaults)
        self.state: State = IDLE
        self.rejected_commits = 0

    @property
    def dragging(self) -> bool:
        return isinstance(self.state, Dragging)

    def handle(self, event: Event) -> bool:
        """Apply ``event``; return True when the view must be redrawn."""

        if isinstance(event, Press):
            return self._press(event)
        if isinstance(event, Move):
            return self._move(event)
        if isinstance(event, Release):
            return self._release(event)
        if isinstance(event, KeyPress):
            return self._key(event)
        if isinstance(event, Resize):
            self.surface = SurfaceExtent(event.width, event.height)
            return True
        raise TypeError(f"unsupported event: {event!r}")

    def _press(self, event: Press) -> bool:
        if event.button is not Button.LEFT:
            return False
        self.state = Dragging(anchor=event.position, current=event.position)
        return True

    def _move(self, event: Move) -> bool:
        state = self.state
        if not isinstance(state, Dragging):
            return False
        current = constrain_to_aspect(state.anchor, event.position, self.surface)
        self.state = Dragging(anchor=state.anchor, current=current)
        return True

    def _release(self, event: Release) -> bool:
        if event.button is Button.RIGHT:
            self.state = IDLE
            self.viewport = self.viewport.reset(self.defaults)
            self.clock.reset_on_viewport_reset()
            return True
        if event.button is not Button.LEFT:
            return False

        state = self.state
        if not isinstance(state, Dragging):
            raise PreconditionViolation("left release without a matching press")
        self.state = IDLE
        try:
            self.viewport = self.viewport.commit_zoom(state.anchor, state.current, self.surface)
        except (DegenerateRangeError, OverflowError):
            self.rejected_commits += 1
        return True

    def _key(self, event: KeyPress) -> bool:
        if event.key is Key.R:
            self.clock.freeze()
            return True
        if event.key is Key.SPACE:
            self.clock.toggle_running()
        return False

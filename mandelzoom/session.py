"""Single-threaded frame loop tying the clock, interaction and renderer together."""

from __future__ import annotations

from collections import deque
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

import numpy as np
import PIL.Image

from .clock import AnimationClock
from .config import ExplorerConfig
from .interaction import Dragging, Event, ZoomInteraction
from .renderer import (
    FrameSnapshot,
    RenderResult,
    Segment,
    compose_overlay,
    default_workers,
    render_frame,
    selection_segments,
)
from .viewport import Viewport


@dataclass(frozen=True)
class Frame:
    result: RenderResult
    overlay: tuple[Segment, ...]
    elapsed_ms: int

    @property
    def bitmap(self) -> np.ndarray:
        return self.result.bitmap

    @property
    def budget(self) -> int:
        return self.result.snapshot.budget


class DisplaySurface(Protocol):
    def show(self, bitmap: np.ndarray, overlay: Sequence[Segment]) -> None:
        ...


class PillowSurface:
    """Display surface that composes each frame into a Pillow image."""

    def __init__(self, colormap=None, keep: bool = True) -> None:
        self.colormap = colormap
        self.keep = keep
        self.images: list[PIL.Image.Image] = []
        self.last: Optional[PIL.Image.Image] = None

    def show(self, bitmap: np.ndarray, overlay: Sequence[Segment]) -> None:
        self.last = compose_overlay(bitmap, overlay, colormap=self.colormap)
        if self.keep:
            self.images.append(self.last)


class ExplorerSession:
    """Owns all mutable explorer state and produces frames on demand.

    Events passed to ``handle`` apply at once; events passed to ``post`` wait
    until the next ``advance`` so a frame never observes a half-applied input.
    """

    def __init__(self, config: Optional[ExplorerConfig] = None) -> None:
        self.config = config if config is not None else ExplorerConfig()
        self.clock = AnimationClock(step_millis=self.config.step_millis)
        self.interaction = ZoomInteraction(self.config.surface, self.clock, self.config.defaults)
        self.workers = self.config.workers if self.config.workers is not None else default_workers()
        self.invalid = True
        self.frames_rendered = 0
        self._pending: deque[Event] = deque()
        self._executor: Optional[ProcessPoolExecutor] = None

    @property
    def viewport(self) -> Viewport:
        return self.interaction.viewport

    @property
    def dragging(self) -> bool:
        return self.interaction.dragging

    def handle(self, event: Event) -> None:
        if self.interaction.handle(event):
            self.invalid = True

    def post(self, event: Event) -> None:
        self._pending.append(event)

    def snapshot(self) -> FrameSnapshot:
        return FrameSnapshot(self.viewport, self.clock.budget, self.interaction.surface)

    def advance(self, elapsed_ms: int) -> Optional[Frame]:
        """Apply queued input, tick the clock and render if anything changed."""

        while self._pending:
            self.handle(self._pending.popleft())
        if self.clock.advance(elapsed_ms):
            self.invalid = True
        if not (self.invalid or self.dragging):
            return None

        result = render_frame(self.snapshot(), workers=self.workers, executor=self._pool())
        self.invalid = False
        self.frames_rendered += 1

        state = self.interaction.state
        overlay = selection_segments(state.anchor, state.current) if isinstance(state, Dragging) else ()
        return Frame(result=result, overlay=overlay, elapsed_ms=int(elapsed_ms))

    def present(self, frame: Frame, surface: DisplaySurface) -> None:
        surface.show(frame.bitmap, frame.overlay)

    def _pool(self) -> Optional[ProcessPoolExecutor]:
        if self.workers <= 1:
            return None
        if self._executor is None:
            self._executor = ProcessPoolExecutor(max_workers=self.workers)
        return self._executor

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown()
            self._executor = None

    def __enter__(self) -> "ExplorerSession":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

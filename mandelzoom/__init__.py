"""Public API for the interactive Mandelbrot zoom engine."""

from .clock import AnimationClock
from .config import ExplorerConfig
from .engine import EscapeResult, evaluate
from .errors import DegenerateRangeError, PreconditionViolation, ZeroBudgetError
from .fixed import FixedScalar
from .interaction import Button, Dragging, Idle, Key, KeyPress, Move, Press, Release, Resize, ZoomInteraction
from .renderer import FrameSnapshot, RenderResult, compose_overlay, render_frame, selection_segments
from .session import ExplorerSession, Frame, PillowSurface
from .viewport import AxisRange, PlaneCoordinate, SurfaceExtent, SurfacePoint, ViewDefaults, Viewport

__all__ = [
    "AnimationClock",
    "AxisRange",
    "Button",
    "DegenerateRangeError",
    "Dragging",
    "EscapeResult",
    "ExplorerConfig",
    "ExplorerSession",
    "FixedScalar",
    "Frame",
    "FrameSnapshot",
    "Idle",
    "Key",
    "KeyPress",
    "Move",
    "PillowSurface",
    "PlaneCoordinate",
    "PreconditionViolation",
    "Press",
    "Release",
    "RenderResult",
    "Resize",
    "SurfaceExtent",
    "SurfacePoint",
    "ViewDefaults",
    "Viewport",
    "ZeroBudgetError",
    "ZoomInteraction",
    "compose_overlay",
    "evaluate",
    "render_frame",
    "selection_segments",
]

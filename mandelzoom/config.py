"""Immutable process configuration for an explorer session."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from .clock import STEP_MILLIS
from .viewport import DEFAULT_VIEW, SurfaceExtent, ViewDefaults

DEFAULT_WIDTH = 1200
DEFAULT_HEIGHT = 800
WORKERS_ENV = "MANDELZOOM_WORKERS"


@dataclass(frozen=True)
class ExplorerConfig:
    surface: SurfaceExtent = field(default_factory=lambda: SurfaceExtent(DEFAULT_WIDTH, DEFAULT_HEIGHT))
    defaults: ViewDefaults = DEFAULT_VIEW
    step_millis: int = STEP_MILLIS
    workers: Optional[int] = None


def workers_from_env(environ=None) -> Optional[int]:
    """Worker count from ``MANDELZOOM_WORKERS``, or None when unset."""

    environ = os.environ if environ is None else environ
    value = environ.get(WORKERS_ENV)
    if value is None or not value.strip():
        return None
    workers = int(value)
    if workers < 1:
        raise ValueError(f"{WORKERS_ENV} must be a positive integer, got {value!r}")
    return workers

"""Time-driven iteration budget."""

from __future__ import annotations

from dataclasses import dataclass

STEP_MILLIS = 50
MIN_BUDGET = 1


@dataclass
class AnimationClock:
    """Maps elapsed milliseconds to an effective iteration budget.

    The budget is ``elapsed_ms // step_millis - offset``, never below one.
    ``freeze`` pins the offset to the current elapsed units so the budget
    restarts from its minimum. ``running`` is kept for the interface only;
    it does not gate anything.
    """

    step_millis: int = STEP_MILLIS
    elapsed_units: int = 0
    offset: int = 0
    running: bool = True

    def __post_init__(self) -> None:
        if self.step_millis <= 0:
            raise ValueError("step_millis must be positive")

    @property
    def budget(self) -> int:
        return max(self.elapsed_units - self.offset, MIN_BUDGET)

    def tick(self, elapsed_ms: int) -> int:
        self.elapsed_units = int(elapsed_ms) // self.step_millis
        return self.budget

    def advance(self, elapsed_ms: int) -> bool:
        """Tick and report whether the effective budget changed."""

        previous = self.budget
        return self.tick(elapsed_ms) != previous

    def freeze(self) -> None:
        self.offset = self.elapsed_units

    def reset_on_viewport_reset(self) -> None:
        self.freeze()

    def toggle_running(self) -> bool:
        self.running = not self.running
        return self.running

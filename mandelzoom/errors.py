"""Error kinds raised by the explorer engine."""


class PreconditionViolation(RuntimeError):
    """Interaction state required by an event does not exist."""


class DegenerateRangeError(ValueError):
    """An axis range would have zero width."""


class ZeroBudgetError(ValueError):
    """An iteration budget below one reached the engine."""

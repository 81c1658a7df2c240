"""Exceptions raised by the forecast engine."""


class ForecastError(Exception):
    """Base class for per-asset forecast failures."""
    pass


class InvalidSnapshotError(ForecastError):
    """Raised when a snapshot has a non-positive price or non-finite fields."""
    pass


class SimulationError(ForecastError):
    """Raised when path simulation produces a non-finite price."""
    pass

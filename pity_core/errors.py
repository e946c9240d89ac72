"""Exception types raised by the simulation engine."""

from __future__ import annotations


class InvalidConfiguration(ValueError):
    """Raised when a rate table cannot be simulated."""


class InvalidTrialCount(ValueError):
    """Raised when a simulation is requested with fewer than one trial."""


class SimulationCancelled(RuntimeError):
    """Raised when a caller stops a running simulation between trials."""

    def __init__(self, completed_trials: int, requested_trials: int) -> None:
        super().__init__(
            f"Simulation cancelled after {completed_trials} of {requested_trials} trials"
        )
        self.completed_trials = completed_trials
        self.requested_trials = requested_trials

"""Shared fixtures and deterministic random sources for the test suite."""

from __future__ import annotations

from collections.abc import Sequence

import pytest

from pity_core import RateTable, configure


class FixedRandom:
    """Random source that always returns the same uniform value."""

    def __init__(self, value: float) -> None:
        self.value = value
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.value


class ScriptedRandom:
    """Random source that replays ``values`` and then repeats the last one."""

    def __init__(self, values: Sequence[float]) -> None:
        self.values = list(values)
        self.calls = 0

    def random(self) -> float:
        index = min(self.calls, len(self.values) - 1)
        self.calls += 1
        return self.values[index]


@pytest.fixture
def default_table() -> RateTable:
    return configure()

# -*- coding: utf-8 -*-
########################
# break_periods.py
########################
# Purpose:
# - Non-playable intervals of a beatmap and totals over a break list.
#
# Design notes:
# - Break lists keep insertion order. Overlap and ordering are not validated.
# - Totals are recomputed on every call.
#
########################
# Interfaces:
# Public constants:
# - MIN_BREAK_DURATION: float (ms)
#
# Public dataclasses:
# - BreakPeriod(start_time: float, end_time: float)
#   - duration -> float
#   - has_effect -> bool
#   - contains(time: float) -> bool
#
# Public functions:
# - total_break_time(breaks: Iterable[BreakPeriod]) -> float
# - break_at(breaks: Iterable[BreakPeriod], time: float) -> Optional[BreakPeriod]
#
########################

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

MIN_BREAK_DURATION = 650.0


@dataclass(frozen=True)
class BreakPeriod:
    start_time: float
    end_time: float

    def __post_init__(self) -> None:
        if float(self.end_time) < float(self.start_time):
            raise ValueError(
                f"BreakPeriod end_time must not precede start_time: start={self.start_time!r}, end={self.end_time!r}"
            )

    @property
    def duration(self) -> float:
        return float(self.end_time) - float(self.start_time)

    @property
    def has_effect(self) -> bool:
        """Whether the break is long enough to be shown as a break during play."""
        return self.duration >= MIN_BREAK_DURATION

    def contains(self, time: float) -> bool:
        return float(self.start_time) <= float(time) < float(self.end_time)


def total_break_time(breaks: Iterable[BreakPeriod]) -> float:
    return float(sum(break_period.duration for break_period in breaks))


def break_at(breaks: Iterable[BreakPeriod], time: float) -> Optional[BreakPeriod]:
    for break_period in breaks:
        if break_period.contains(time):
            return break_period
    return None


def _run_unit_tests() -> None:
    breaks = [BreakPeriod(100.0, 200.0), BreakPeriod(500.0, 550.0)]
    assert total_break_time(breaks) == 150.0
    assert total_break_time([]) == 0.0

    assert break_at(breaks, 150.0) == breaks[0]
    assert break_at(breaks, 200.0) is None
    assert not breaks[1].has_effect

    try:
        BreakPeriod(10.0, 5.0)
    except ValueError:
        pass
    else:
        raise AssertionError("Expected ValueError for inverted break")


if __name__ == "__main__":
    _run_unit_tests()
    print("break_periods.py: ok")

# -*- coding: utf-8 -*-
########################
# control_points.py
########################
# Purpose:
# - Timestamped control points (timing, difficulty, effect, sample) and the
#   time-sorted ControlPointInfo collection that owns them.
# - Answers "which point is in effect at this instant" queries.
#
# Design notes:
# - Points are frozen values. Edits replace a point, they never mutate it.
# - One sorted list per kind. A point applies from its time onward until the
#   next point of the same kind.
# - Same kind + same time: the later add replaces the earlier point.
# - The default beat length is injected at construction, not read from a global.
# - No logging and no I/O.
#
########################
# Interfaces:
# Public constants:
# - DEFAULT_BEAT_LENGTH: float (ms per beat, 60 BPM)
#
# Public exceptions:
# - class InvalidBeatLengthError(ValueError)
#
# Public functions:
# - bpm_for_beat_length(beat_length: float) -> float
#
# Public dataclasses:
# - TimingPoint(time: float, beat_length: float, time_signature: int)
# - DifficultyPoint(time: float, speed_multiplier: float)
# - EffectPoint(time: float, kiai_mode: bool, omit_first_bar_line: bool)
# - SamplePoint(time: float, sample_bank: str, sample_volume: int)
#
# Public classes:
# - class ControlPointInfo
#   - __init__(*, default_beat_length: float = DEFAULT_BEAT_LENGTH)
#   - add(point) -> None
#   - remove(point) -> bool
#   - clear() -> None
#   - point_at(time: float) -> TimingPoint
#   - timing_point_at / difficulty_point_at / effect_point_at / sample_point_at
#   - timing_points / difficulty_points / effect_points / sample_points -> tuple
#   - all_points() -> list
#   - bpm_minimum / bpm_maximum -> float (raise InvalidBeatLengthError on unusable beat lengths)
#   - create_copy() -> ControlPointInfo
#
########################

from __future__ import annotations

import heapq
import math
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple, Type, Union

DEFAULT_BEAT_LENGTH = 1000.0


class InvalidBeatLengthError(ValueError):
    """Raised when a beat length cannot be converted to a finite, positive BPM."""

    def __init__(self, beat_length: float) -> None:
        super().__init__(f"Beat length cannot be converted to BPM: {beat_length!r}")
        self.beat_length = beat_length


def bpm_for_beat_length(beat_length: float) -> float:
    value = float(beat_length)
    if not math.isfinite(value) or value <= 0.0:
        raise InvalidBeatLengthError(value)

    bpm = 60000.0 / value
    if not math.isfinite(bpm):
        raise InvalidBeatLengthError(value)
    return bpm


@dataclass(frozen=True)
class TimingPoint:
    time: float
    beat_length: float = DEFAULT_BEAT_LENGTH
    time_signature: int = 4

    @property
    def bpm(self) -> float:
        return bpm_for_beat_length(self.beat_length)


@dataclass(frozen=True)
class DifficultyPoint:
    time: float
    speed_multiplier: float = 1.0


@dataclass(frozen=True)
class EffectPoint:
    time: float
    kiai_mode: bool = False
    omit_first_bar_line: bool = False


@dataclass(frozen=True)
class SamplePoint:
    time: float
    sample_bank: str = "normal"
    sample_volume: int = 100


ControlPoint = Union[TimingPoint, DifficultyPoint, EffectPoint, SamplePoint]

_POINT_KINDS: Tuple[Type[Any], ...] = (TimingPoint, DifficultyPoint, EffectPoint, SamplePoint)


def _point_time(point: Any) -> float:
    return float(point.time)


class ControlPointInfo:
    def __init__(self, *, default_beat_length: float = DEFAULT_BEAT_LENGTH) -> None:
        self._default_beat_length = float(default_beat_length)
        self._points: Dict[Type[Any], List[Any]] = {kind: [] for kind in _POINT_KINDS}

    @property
    def default_beat_length(self) -> float:
        return self._default_beat_length

    def default_timing_point(self) -> TimingPoint:
        return TimingPoint(time=0.0, beat_length=self._default_beat_length)

    def _list_for(self, point: Any) -> List[Any]:
        points = self._points.get(type(point))
        if points is None:
            raise TypeError(f"Unsupported control point type: {type(point).__name__}")
        return points

    def add(self, point: ControlPoint) -> None:
        points = self._list_for(point)
        point_time = _point_time(point)
        index = bisect_left(points, point_time, key=_point_time)
        if index < len(points) and _point_time(points[index]) == point_time:
            points[index] = point
        else:
            points.insert(index, point)

    def remove(self, point: ControlPoint) -> bool:
        points = self._list_for(point)
        try:
            points.remove(point)
        except ValueError:
            return False
        return True

    def clear(self) -> None:
        for points in self._points.values():
            points.clear()

    @staticmethod
    def _as_of(points: List[Any], time: float, default: Any) -> Any:
        index = bisect_right(points, float(time), key=_point_time)
        if index == 0:
            return default
        return points[index - 1]

    def timing_point_at(self, time: float) -> TimingPoint:
        return self._as_of(self._points[TimingPoint], time, self.default_timing_point())

    def point_at(self, time: float) -> TimingPoint:
        """Timing in effect at ``time``: the last timing point at or before it, else the default."""
        return self.timing_point_at(time)

    def difficulty_point_at(self, time: float) -> DifficultyPoint:
        return self._as_of(self._points[DifficultyPoint], time, DifficultyPoint(time=0.0))

    def effect_point_at(self, time: float) -> EffectPoint:
        return self._as_of(self._points[EffectPoint], time, EffectPoint(time=0.0))

    def sample_point_at(self, time: float) -> SamplePoint:
        return self._as_of(self._points[SamplePoint], time, SamplePoint(time=0.0))

    @property
    def timing_points(self) -> Tuple[TimingPoint, ...]:
        return tuple(self._points[TimingPoint])

    @property
    def difficulty_points(self) -> Tuple[DifficultyPoint, ...]:
        return tuple(self._points[DifficultyPoint])

    @property
    def effect_points(self) -> Tuple[EffectPoint, ...]:
        return tuple(self._points[EffectPoint])

    @property
    def sample_points(self) -> Tuple[SamplePoint, ...]:
        return tuple(self._points[SamplePoint])

    def all_points(self) -> List[ControlPoint]:
        # heapq.merge is stable, so equal times keep kind order (timing first).
        return list(heapq.merge(*(self._points[kind] for kind in _POINT_KINDS), key=_point_time))

    @property
    def bpm_minimum(self) -> float:
        timing_points = self._points[TimingPoint] or [self.default_timing_point()]
        return min(bpm_for_beat_length(point.beat_length) for point in timing_points)

    @property
    def bpm_maximum(self) -> float:
        timing_points = self._points[TimingPoint] or [self.default_timing_point()]
        return max(bpm_for_beat_length(point.beat_length) for point in timing_points)

    def create_copy(self) -> "ControlPointInfo":
        copy = ControlPointInfo(default_beat_length=self._default_beat_length)
        for kind, points in self._points.items():
            copy._points[kind] = list(points)
        return copy

    def __repr__(self) -> str:
        counts = ", ".join(f"{kind.__name__}={len(points)}" for kind, points in self._points.items())
        return f"ControlPointInfo({counts})"


def _run_unit_tests() -> None:
    info = ControlPointInfo()
    info.add(TimingPoint(time=2000.0, beat_length=1000.0))
    info.add(TimingPoint(time=0.0, beat_length=500.0))
    info.add(TimingPoint(time=1000.0, beat_length=250.0))
    assert [point.time for point in info.timing_points] == [0.0, 1000.0, 2000.0]

    assert info.point_at(1500.0).time == 1000.0
    assert info.point_at(-5.0) == info.default_timing_point()

    info.add(TimingPoint(time=1000.0, beat_length=300.0))
    assert len(info.timing_points) == 3
    assert info.point_at(1000.0).beat_length == 300.0

    copy = info.create_copy()
    copy.add(TimingPoint(time=3000.0, beat_length=400.0))
    assert len(info.timing_points) == 3
    assert len(copy.timing_points) == 4

    copy.add(TimingPoint(time=4000.0, beat_length=0.0))
    try:
        copy.bpm_maximum
    except InvalidBeatLengthError:
        pass
    else:
        raise AssertionError("Expected InvalidBeatLengthError for zero beat length")


if __name__ == "__main__":
    _run_unit_tests()
    print("control_points.py: ok")

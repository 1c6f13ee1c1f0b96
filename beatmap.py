# -*- coding: utf-8 -*-
########################
# beatmap.py
########################
# Purpose:
# - Beatmap aggregate: metadata, control points, breaks and hit objects for one chart.
# - Reduces a variable-tempo timeline into one representative BPM.
# - Branches a beatmap for editing via explicit shallow and deep clones.
#
# Design notes:
# - The beatmap owns its ControlPointInfo, break list and hit object list. The
#   constructor copies what it is given, so two beatmaps never share them unless
#   shallow_clone() shares the lists on purpose.
# - Hit objects and breaks are trusted as given: no sorting, no validation.
# - Read operations are pure. Mutation is single-writer and unsynchronized;
#   callers clone before handing a beatmap to another context that may edit it.
# - Never logs. Unusable tempo data is reported with InvalidBeatLengthError.
#
########################
# Key Logic (most_common_beat_length):
# - last_time = end time of the last hit object, else time of the last timing point, else 0.
# - Each timing point lasts until the next timing point (or last_time for the final one).
#   A timing point after last_time lasts 0.
# - Durations are summed per exact beat length value, in first-occurrence order.
# - The group with the strictly greatest total wins, so on a tie the earliest beat length stays.
# - No timing points: a single (default_beat_length, 0) group.
#
########################
# Interfaces:
# Public exceptions:
# - InvalidBeatLengthError (re-exported from control_points)
#
# Public dataclasses:
# - BeatmapMetadata(title, artist, author, source, tags)
# - BeatmapDifficulty(drain_rate, circle_size, overall_difficulty, approach_rate,
#                     slider_multiplier, slider_tick_rate)
# - BeatmapStatistic(name: str, count: int)
#
# Public classes:
# - class Beatmap(Generic[T])
#   - metadata, version, difficulty, control_point_info, breaks, hit_objects
#   - total_break_time -> float
#   - point_at(time: float) -> TimingPoint
#   - most_common_beat_length(*, default_beat_length: Optional[float] = None) -> float
#   - most_common_bpm(*, default_beat_length: Optional[float] = None) -> float
#   - shallow_clone() / clone() / deep_clone() -> Beatmap[T]
#   - statistics() -> list[BeatmapStatistic]
#   - display_name() -> str
#
# Public functions:
# - new_beatmap(config: Optional[config.AppConfig] = None) -> Beatmap
#
########################

from __future__ import annotations

import copy
import math
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Generic, List, Optional, Sequence, Tuple, TypeVar

import break_periods
import config as config_module
import control_points
import hit_objects

T = TypeVar("T", bound=hit_objects.HasStartTime)


InvalidBeatLengthError = control_points.InvalidBeatLengthError


@dataclass(frozen=True)
class BeatmapMetadata:
    title: str = "Unknown"
    artist: str = "Unknown"
    author: str = "Unknown Creator"
    source: str = ""
    tags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class BeatmapDifficulty:
    drain_rate: float = 5.0
    circle_size: float = 5.0
    overall_difficulty: float = 5.0
    approach_rate: float = 5.0
    slider_multiplier: float = 1.4
    slider_tick_rate: float = 1.0


@dataclass(frozen=True)
class BeatmapStatistic:
    name: str
    count: int


def _beat_length_durations(
    timing_points: Sequence[control_points.TimingPoint],
    last_time: float,
) -> Dict[float, float]:
    durations: Dict[float, float] = {}
    for index, timing_point in enumerate(timing_points):
        point_time = float(timing_point.time)
        if point_time > last_time:
            duration = 0.0
        else:
            next_time = float(timing_points[index + 1].time) if index + 1 < len(timing_points) else last_time
            duration = next_time - point_time
        beat_length = float(timing_point.beat_length)
        durations[beat_length] = durations.get(beat_length, 0.0) + duration
    return durations


class Beatmap(Generic[T]):
    def __init__(
        self,
        *,
        metadata: Optional[BeatmapMetadata] = None,
        version: str = "Normal",
        difficulty: Optional[BeatmapDifficulty] = None,
        control_point_info: Optional[control_points.ControlPointInfo] = None,
        breaks: Optional[List[break_periods.BreakPeriod]] = None,
        hit_objects: Optional[List[T]] = None,
    ) -> None:
        self.metadata = metadata if metadata is not None else BeatmapMetadata()
        self.version = str(version)
        self.difficulty = difficulty if difficulty is not None else BeatmapDifficulty()
        self.control_point_info = (
            control_point_info.create_copy()
            if control_point_info is not None
            else control_points.ControlPointInfo()
        )
        self.breaks: List[break_periods.BreakPeriod] = list(breaks) if breaks is not None else []
        self.hit_objects: List[T] = list(hit_objects) if hit_objects is not None else []

    @property
    def total_break_time(self) -> float:
        return break_periods.total_break_time(self.breaks)

    def point_at(self, time: float) -> control_points.TimingPoint:
        return self.control_point_info.point_at(time)

    def _last_time(self) -> float:
        # The last object in sequence order, not the latest-ending one.
        if self.hit_objects:
            return hit_objects.get_end_time(self.hit_objects[-1])
        timing_points = self.control_point_info.timing_points
        if timing_points:
            return float(timing_points[-1].time)
        return 0.0

    def most_common_beat_length(self, *, default_beat_length: Optional[float] = None) -> float:
        """Return the beat length that is in effect for the longest total time.

        ``default_beat_length`` overrides the control point info's default for the
        empty-timeline case.
        """
        if default_beat_length is None:
            default_beat_length = self.control_point_info.default_beat_length

        durations = _beat_length_durations(self.control_point_info.timing_points, self._last_time())
        if not durations:
            durations = {float(default_beat_length): 0.0}

        max_duration_beat_length = -math.inf
        max_duration = -math.inf
        for beat_length, duration in durations.items():
            if duration > max_duration:
                max_duration = duration
                max_duration_beat_length = beat_length

        return max_duration_beat_length

    def most_common_bpm(self, *, default_beat_length: Optional[float] = None) -> float:
        """Return the BPM of :meth:`most_common_beat_length`.

        Raises InvalidBeatLengthError when the selected beat length is zero, negative
        or not finite, instead of returning an infinite or NaN BPM.
        """
        beat_length = self.most_common_beat_length(default_beat_length=default_beat_length)
        return control_points.bpm_for_beat_length(beat_length)

    def shallow_clone(self) -> "Beatmap[T]":
        """Copy the beatmap with an independent ControlPointInfo.

        The break list and hit object list are shared with the original.
        Use deep_clone() when those need to be edited independently.
        """
        clone = copy.copy(self)
        clone.control_point_info = self.control_point_info.create_copy()
        return clone

    def clone(self) -> "Beatmap[T]":
        """Same as shallow_clone(). Subclasses that override shallow_clone() are honoured."""
        return self.shallow_clone()

    def deep_clone(self) -> "Beatmap[T]":
        clone = self.shallow_clone()
        # Elements are frozen, so copying the lists is enough.
        clone.breaks = list(self.breaks)
        clone.hit_objects = list(self.hit_objects)
        return clone

    def statistics(self) -> List[BeatmapStatistic]:
        counts: Counter = Counter()
        for hit_object in self.hit_objects:
            tag = getattr(type(hit_object), "type_tag", None) or type(hit_object).__name__
            counts[tag] += 1
        return [BeatmapStatistic(name=name, count=count) for name, count in counts.items()]

    def display_name(self) -> str:
        metadata = self.metadata
        return f"{metadata.artist} - {metadata.title} ({metadata.author}) [{self.version}]"

    def __str__(self) -> str:
        return self.display_name()

    def __repr__(self) -> str:
        return (
            f"Beatmap({self.display_name()!r}, hit_objects={len(self.hit_objects)}, "
            f"breaks={len(self.breaks)}, control_points={self.control_point_info!r})"
        )


def new_beatmap(app_config: Optional[config_module.AppConfig] = None) -> Beatmap:
    """Empty beatmap using the configured default beat length and placeholder metadata."""
    if app_config is None:
        app_config, _config_path = config_module.get_config()

    placeholders = app_config.metadata
    return Beatmap(
        metadata=BeatmapMetadata(
            title=placeholders.title,
            artist=placeholders.artist,
            author=placeholders.author,
        ),
        version=placeholders.version,
        control_point_info=control_points.ControlPointInfo(
            default_beat_length=app_config.timing.default_beat_length,
        ),
    )


def _run_unit_tests() -> None:
    beatmap: Beatmap[hit_objects.HitCircle] = Beatmap()
    beatmap.control_point_info.add(control_points.TimingPoint(time=0.0, beat_length=500.0))
    beatmap.control_point_info.add(control_points.TimingPoint(time=1000.0, beat_length=250.0))
    beatmap.hit_objects.append(hit_objects.HitCircle(start_time=2000.0))
    assert beatmap.most_common_beat_length() == 500.0
    assert beatmap.most_common_bpm() == 120.0
    assert beatmap.most_common_bpm() == beatmap.most_common_bpm()

    assert Beatmap().most_common_bpm() == 60.0

    beatmap.breaks.extend([break_periods.BreakPeriod(100.0, 200.0), break_periods.BreakPeriod(500.0, 550.0)])
    assert beatmap.total_break_time == 150.0

    clone = beatmap.clone()
    clone.control_point_info.add(control_points.TimingPoint(time=3000.0, beat_length=400.0))
    assert len(beatmap.control_point_info.timing_points) == 2
    assert clone.hit_objects is beatmap.hit_objects

    broken: Beatmap = Beatmap()
    broken.control_point_info.add(control_points.TimingPoint(time=0.0, beat_length=0.0))
    try:
        broken.most_common_bpm()
    except InvalidBeatLengthError as exc:
        assert exc.beat_length == 0.0
    else:
        raise AssertionError("Expected InvalidBeatLengthError for zero beat length")


if __name__ == "__main__":
    _run_unit_tests()
    print("beatmap.py: ok")

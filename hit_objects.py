# -*- coding: utf-8 -*-
########################
# hit_objects.py
########################
# Purpose:
# - Playable event variants of a beatmap and the start/end time capability they share.
# - Registry of stable per-variant type tags so an external serializer can rebuild
#   the right variant.
#
# Design notes:
# - Variants are plain frozen dataclasses, not a class hierarchy.
# - End time is resolved structurally: anything exposing end_time reports it,
#   everything else is instantaneous (end_time == start_time).
# - The beatmap never sorts or validates a hit object list; producers own ordering.
# - No Qt usage and no I/O.
#
########################
# Interfaces:
# Public protocols:
# - HasStartTime(start_time: float)
# - HasEndTime(start_time: float, end_time: float)
#
# Public dataclasses:
# - HitCircle(start_time: float, x: float, y: float)                 tag "circle"
# - Slider(start_time: float, span_duration: float, repeat_count: int, x: float, y: float)  tag "slider"
# - Spinner(start_time: float, end_time: float)                     tag "spinner"
# - HoldNote(start_time: float, end_time: float, column: int)       tag "hold"
#
# Public functions:
# - get_end_time(hit_object) -> float
# - is_time_ordered(hit_objects) -> bool
# - register_hit_object_type(cls) -> cls
# - hit_object_type_for_tag(tag: str) -> type
# - type_tag_of(hit_object) -> str
# - registered_type_tags() -> list[str]
#
########################

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Iterable, List, Protocol, Type, runtime_checkable


@runtime_checkable
class HasStartTime(Protocol):
    start_time: float


@runtime_checkable
class HasEndTime(Protocol):
    start_time: float

    @property
    def end_time(self) -> float: ...


_HIT_OBJECT_TYPES: Dict[str, Type[Any]] = {}


def register_hit_object_type(cls: Type[Any]) -> Type[Any]:
    tag = str(getattr(cls, "type_tag", "") or "").strip()
    if not tag:
        raise ValueError(f"{cls.__name__} must define a non-empty type_tag")
    existing = _HIT_OBJECT_TYPES.get(tag)
    if existing is not None and existing is not cls:
        raise ValueError(f"type_tag {tag!r} is already registered to {existing.__name__}")
    _HIT_OBJECT_TYPES[tag] = cls
    return cls


def hit_object_type_for_tag(tag: str) -> Type[Any]:
    try:
        return _HIT_OBJECT_TYPES[str(tag)]
    except KeyError:
        raise KeyError(f"Unknown hit object type tag: {tag!r}") from None


def type_tag_of(hit_object: Any) -> str:
    tag = getattr(type(hit_object), "type_tag", None)
    if not tag or _HIT_OBJECT_TYPES.get(tag) is not type(hit_object):
        raise KeyError(f"Hit object type is not registered: {type(hit_object).__name__}")
    return str(tag)


def registered_type_tags() -> List[str]:
    return sorted(_HIT_OBJECT_TYPES.keys())


@register_hit_object_type
@dataclass(frozen=True)
class HitCircle:
    type_tag: ClassVar[str] = "circle"

    start_time: float
    x: float = 0.0
    y: float = 0.0


@register_hit_object_type
@dataclass(frozen=True)
class Slider:
    type_tag: ClassVar[str] = "slider"

    start_time: float
    span_duration: float
    repeat_count: int = 1
    x: float = 0.0
    y: float = 0.0

    @property
    def end_time(self) -> float:
        return float(self.start_time) + float(self.span_duration) * int(self.repeat_count)


@register_hit_object_type
@dataclass(frozen=True)
class Spinner:
    type_tag: ClassVar[str] = "spinner"

    start_time: float
    end_time: float


@register_hit_object_type
@dataclass(frozen=True)
class HoldNote:
    type_tag: ClassVar[str] = "hold"

    start_time: float
    end_time: float
    column: int = 0


def get_end_time(hit_object: HasStartTime) -> float:
    if isinstance(hit_object, HasEndTime):
        return float(hit_object.end_time)
    return float(hit_object.start_time)


def is_time_ordered(hit_objects: Iterable[HasStartTime]) -> bool:
    """Producer-side check for the non-decreasing start_time convention."""
    previous_time = float("-inf")
    for hit_object in hit_objects:
        start_time = float(hit_object.start_time)
        if start_time < previous_time:
            return False
        previous_time = start_time
    return True


def _run_unit_tests() -> None:
    circle = HitCircle(start_time=100.0)
    slider = Slider(start_time=200.0, span_duration=150.0, repeat_count=2)
    spinner = Spinner(start_time=800.0, end_time=1600.0)

    assert get_end_time(circle) == 100.0
    assert get_end_time(slider) == 500.0
    assert get_end_time(spinner) == 1600.0

    assert type_tag_of(slider) == "slider"
    assert hit_object_type_for_tag("hold") is HoldNote
    assert is_time_ordered([circle, slider, spinner])
    assert not is_time_ordered([spinner, circle])


if __name__ == "__main__":
    _run_unit_tests()
    print("hit_objects.py: ok")

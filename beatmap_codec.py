# -*- coding: utf-8 -*-
########################
# beatmap_codec.py
########################
# Purpose:
# - JSON-friendly serialization of beatmaps and type-tagged hit object lists.
# - Rebuilds the right hit object variant from its "$type" discriminator.
#
# Design notes:
# - Field validation is delegated to pydantic TypeAdapters over the plain dataclasses.
# - Derived values (total break time, end times of sliders) are never written.
# - Control points are re-added through ControlPointInfo.add, so decoded timelines
#   obey the same ordering and last-write-wins rules as authored ones.
# - All failures surface as BeatmapCodecError subclasses chained to the root cause.
#
########################
# Interfaces:
# Public exceptions:
# - class BeatmapCodecError(Exception)
# - class UnknownHitObjectTypeError(BeatmapCodecError)
# - class BeatmapValidationError(BeatmapCodecError)
#
# Public functions:
# - dump_hit_objects(hit_objects: Iterable) -> list[dict]
# - load_hit_objects(payload: Sequence[dict]) -> list
# - beatmap_to_dict(beatmap: Beatmap) -> dict
# - beatmap_from_dict(payload: dict) -> Beatmap
# - beatmap_to_json(beatmap: Beatmap) -> str
# - beatmap_from_json(text: str) -> Beatmap
# - save_beatmap_json(output_path: pathlib.Path, beatmap: Beatmap) -> None
# - load_beatmap_json(input_path: pathlib.Path) -> Beatmap
#
########################
# Smoke Tests:
#   - python beatmap_codec.py
########################

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence, Type

from pydantic import TypeAdapter

import beatmap as beatmap_module
import break_periods
import control_points
import hit_objects

logger = logging.getLogger(__name__)

TYPE_KEY = "$type"

_CONTROL_POINT_SECTIONS: Dict[str, Type[Any]] = {
    "timing": control_points.TimingPoint,
    "difficulty": control_points.DifficultyPoint,
    "effect": control_points.EffectPoint,
    "sample": control_points.SamplePoint,
}


class BeatmapCodecError(Exception):
    """Base error for beatmap serialization and deserialization."""


class UnknownHitObjectTypeError(BeatmapCodecError):
    """Raised when a hit object entry carries a missing or unregistered type tag."""


class BeatmapValidationError(BeatmapCodecError):
    """Raised when a payload parses but its fields fail validation."""


@lru_cache(maxsize=None)
def _adapter_for(value_type: Type[Any]) -> TypeAdapter:
    return TypeAdapter(value_type)


def _dump_value(value: Any) -> Dict[str, Any]:
    return _adapter_for(type(value)).dump_python(value, mode="json")


def _load_value(value_type: Type[Any], payload: Any, *, context: str) -> Any:
    try:
        return _adapter_for(value_type).validate_python(payload)
    except (ValueError, TypeError) as exc:
        # pydantic ValidationError is a ValueError subclass.
        raise BeatmapValidationError(f"Invalid {context}: {exc}") from exc


def dump_hit_objects(hit_object_list: Iterable[Any]) -> List[Dict[str, Any]]:
    entries: List[Dict[str, Any]] = []
    for hit_object in hit_object_list:
        try:
            tag = hit_objects.type_tag_of(hit_object)
        except KeyError as exc:
            raise UnknownHitObjectTypeError(str(exc)) from exc
        entry: Dict[str, Any] = {TYPE_KEY: tag}
        entry.update(_dump_value(hit_object))
        entries.append(entry)
    return entries


def load_hit_objects(payload: Sequence[Any]) -> List[Any]:
    if not isinstance(payload, (list, tuple)):
        raise BeatmapValidationError(f"hit_objects must be a list, got {type(payload).__name__}")

    loaded: List[Any] = []
    for index, entry in enumerate(payload):
        if not isinstance(entry, dict):
            raise BeatmapValidationError(f"hit_objects[{index}] must be an object, got {type(entry).__name__}")

        fields = dict(entry)
        tag = fields.pop(TYPE_KEY, None)
        if not isinstance(tag, str) or not tag:
            raise UnknownHitObjectTypeError(f"hit_objects[{index}] is missing {TYPE_KEY!r}")
        try:
            hit_object_type = hit_objects.hit_object_type_for_tag(tag)
        except KeyError as exc:
            raise UnknownHitObjectTypeError(f"hit_objects[{index}]: unknown type tag {tag!r}") from exc

        loaded.append(_load_value(hit_object_type, fields, context=f"hit_objects[{index}] ({tag})"))
    return loaded


def beatmap_to_dict(beatmap: beatmap_module.Beatmap) -> Dict[str, Any]:
    control_point_info = beatmap.control_point_info
    control_point_payload: Dict[str, Any] = {"default_beat_length": control_point_info.default_beat_length}
    section_values = {
        "timing": control_point_info.timing_points,
        "difficulty": control_point_info.difficulty_points,
        "effect": control_point_info.effect_points,
        "sample": control_point_info.sample_points,
    }
    for section_name, points in section_values.items():
        control_point_payload[section_name] = [_dump_value(point) for point in points]

    return {
        "metadata": _dump_value(beatmap.metadata),
        "version": beatmap.version,
        "difficulty": _dump_value(beatmap.difficulty),
        "control_points": control_point_payload,
        "breaks": [_dump_value(break_period) for break_period in beatmap.breaks],
        "hit_objects": dump_hit_objects(beatmap.hit_objects),
    }


def _load_control_points(payload: Any) -> control_points.ControlPointInfo:
    if payload is None:
        return control_points.ControlPointInfo()
    if not isinstance(payload, dict):
        raise BeatmapValidationError("control_points must be an object")

    default_beat_length = payload.get("default_beat_length", control_points.DEFAULT_BEAT_LENGTH)
    try:
        control_point_info = control_points.ControlPointInfo(default_beat_length=float(default_beat_length))
    except (TypeError, ValueError) as exc:
        raise BeatmapValidationError(f"Invalid default_beat_length: {default_beat_length!r}") from exc

    for section_name, point_type in _CONTROL_POINT_SECTIONS.items():
        entries = payload.get(section_name) or []
        if not isinstance(entries, list):
            raise BeatmapValidationError(f"control_points.{section_name} must be a list")
        for index, entry in enumerate(entries):
            control_point_info.add(_load_value(point_type, entry, context=f"control_points.{section_name}[{index}]"))
    return control_point_info


def beatmap_from_dict(payload: Dict[str, Any]) -> beatmap_module.Beatmap:
    if not isinstance(payload, dict):
        raise BeatmapValidationError(f"Beatmap payload must be an object, got {type(payload).__name__}")

    metadata = _load_value(beatmap_module.BeatmapMetadata, payload.get("metadata") or {}, context="metadata")
    difficulty = _load_value(beatmap_module.BeatmapDifficulty, payload.get("difficulty") or {}, context="difficulty")

    break_entries = payload.get("breaks") or []
    if not isinstance(break_entries, list):
        raise BeatmapValidationError("breaks must be a list")
    breaks = [
        _load_value(break_periods.BreakPeriod, entry, context=f"breaks[{index}]")
        for index, entry in enumerate(break_entries)
    ]

    loaded = beatmap_module.Beatmap(
        metadata=metadata,
        version=str(payload.get("version") or "Normal"),
        difficulty=difficulty,
        control_point_info=_load_control_points(payload.get("control_points")),
        breaks=breaks,
        hit_objects=load_hit_objects(payload.get("hit_objects") or []),
    )
    logger.debug(
        "Decoded beatmap %s: %d hit objects, %d breaks",
        loaded.display_name(),
        len(loaded.hit_objects),
        len(loaded.breaks),
    )
    return loaded


def beatmap_to_json(beatmap: beatmap_module.Beatmap) -> str:
    return json.dumps(beatmap_to_dict(beatmap), ensure_ascii=False, indent=2)


def beatmap_from_json(text: str) -> beatmap_module.Beatmap:
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise BeatmapValidationError(f"Beatmap payload is not valid JSON: {exc}") from exc
    return beatmap_from_dict(parsed)


def save_beatmap_json(output_path: Path, beatmap: beatmap_module.Beatmap) -> None:
    output_path = Path(output_path)
    output_path.write_text(beatmap_to_json(beatmap), encoding="utf-8")
    logger.info("Saved beatmap %s to %s", beatmap.display_name(), output_path)


def load_beatmap_json(input_path: Path) -> beatmap_module.Beatmap:
    input_path = Path(input_path)
    try:
        raw_text = input_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise
    except UnicodeDecodeError as exc:
        logger.warning("Rejected beatmap file %s: not valid UTF-8", input_path)
        raise BeatmapValidationError(f"Beatmap file is not valid UTF-8: {input_path}") from exc
    except OSError as exc:
        raise OSError(f"Failed to read beatmap file: {input_path}. Error: {exc}") from exc

    try:
        return beatmap_from_json(raw_text)
    except BeatmapCodecError as exc:
        logger.warning("Rejected beatmap file %s: %s", input_path, exc)
        raise


def _assert(condition: bool, message: str) -> None:
    if not condition:
        raise AssertionError(message)


def _run_unit_tests() -> None:
    original = beatmap_module.Beatmap(
        metadata=beatmap_module.BeatmapMetadata(title="Round Trip", artist="Tester"),
        breaks=[break_periods.BreakPeriod(100.0, 900.0)],
        hit_objects=[
            hit_objects.HitCircle(start_time=0.0, x=64.0, y=64.0),
            hit_objects.Slider(start_time=1000.0, span_duration=250.0, repeat_count=2),
            hit_objects.Spinner(start_time=2000.0, end_time=3000.0),
        ],
    )
    original.control_point_info.add(control_points.TimingPoint(time=0.0, beat_length=500.0))
    original.control_point_info.add(control_points.EffectPoint(time=1000.0, kiai_mode=True))

    entries = dump_hit_objects(original.hit_objects)
    _assert([entry[TYPE_KEY] for entry in entries] == ["circle", "slider", "spinner"], "Expected type tags in order")

    restored = beatmap_from_json(beatmap_to_json(original))
    _assert(restored.hit_objects == original.hit_objects, "Hit objects should survive JSON")
    _assert(restored.control_point_info.timing_points == original.control_point_info.timing_points, "Timing points")
    _assert(restored.control_point_info.effect_point_at(1500.0).kiai_mode, "Effect points")
    _assert(restored.total_break_time == 800.0, "Breaks")

    try:
        load_hit_objects([{TYPE_KEY: "not-a-kind", "start_time": 0.0}])
    except UnknownHitObjectTypeError:
        pass
    else:
        raise AssertionError("Expected UnknownHitObjectTypeError for unknown tag")


if __name__ == "__main__":
    _run_unit_tests()
    print("beatmap_codec.py: ok")

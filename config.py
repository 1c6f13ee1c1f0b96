"""
config.py

Typed configuration loading and validation for the beatmap timeline.

Design goals
- Load at most one UTF-8 JSON config file
- Validate with pydantic (defaults included)
- Support environment variable overrides
- No other I/O beyond reading the config file (no directory creation)

Config file location
- If BEATMAP_TIMELINE_CONFIG_PATH is set, that file is used.
- Otherwise these paths are searched in order and the first one that exists is used:
  1) ./beatmap_timeline.json (current working directory)
  2) <user config dir>/BeatmapTimeline/beatmap_timeline.json
  3) <user config dir>/BeatmapTimeline/config.json
- If none exists, the built-in defaults are used.

Example config file (beatmap_timeline.json)
{
  "timing": {
    "default_beat_length": 1000.0
  },
  "metadata": {
    "title": "Unknown",
    "artist": "Unknown",
    "author": "Unknown Creator",
    "version": "Normal"
  }
}
"""

from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from platformdirs import user_config_dir
from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class TimingConfig(BaseModel):
    default_beat_length: float = Field(
        default=1000.0,
        gt=0.0,
        allow_inf_nan=False,
        description="Milliseconds per beat used when a beatmap has no timing points.",
    )


class MetadataConfig(BaseModel):
    title: str = Field(default="Unknown")
    artist: str = Field(default="Unknown")
    author: str = Field(default="Unknown Creator")
    version: str = Field(default="Normal")

    @field_validator("title", "artist", "author", "version")
    @classmethod
    def normalize_placeholder(cls, value: str) -> str:
        trimmed = (value or "").strip()
        if not trimmed:
            raise ValueError("metadata placeholders must be non-empty strings")
        return trimmed


class AppConfig(BaseModel):
    timing: TimingConfig = Field(default_factory=TimingConfig)
    metadata: MetadataConfig = Field(default_factory=MetadataConfig)


def _default_config_candidates() -> List[Path]:
    config_directory = Path(user_config_dir("BeatmapTimeline", "BeatmapTimeline"))
    return [
        Path.cwd() / "beatmap_timeline.json",
        config_directory / "beatmap_timeline.json",
        config_directory / "config.json",
    ]


def _resolve_config_path() -> Optional[Path]:
    explicit_path_text = os.environ.get("BEATMAP_TIMELINE_CONFIG_PATH", "").strip()
    if explicit_path_text:
        return Path(explicit_path_text)

    for candidate_path in _default_config_candidates():
        if candidate_path.exists():
            return candidate_path

    return None


def _read_json_file_utf8(config_path: Path) -> Dict[str, Any]:
    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise
    except OSError as exception:
        raise OSError(f"Failed to read config file: {config_path}. Error: {exception}") from exception

    try:
        parsed = json.loads(raw_text)
    except json.JSONDecodeError as exception:
        raise ValueError(f"Config file is not valid JSON: {config_path}. Error: {exception}") from exception

    if not isinstance(parsed, dict):
        raise ValueError(f"Config file root must be a JSON object: {config_path}")

    return parsed


def _apply_environment_overrides(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Environment overrides are optional. The config file is the primary source of truth.

    Override variables:
    - BEATMAP_TIMELINE_DEFAULT_BEAT_LENGTH
    - BEATMAP_TIMELINE_METADATA_TITLE
    - BEATMAP_TIMELINE_METADATA_ARTIST
    - BEATMAP_TIMELINE_METADATA_AUTHOR
    - BEATMAP_TIMELINE_METADATA_VERSION
    """
    def ensure_nested(config_root: Dict[str, Any], section_name: str) -> Dict[str, Any]:
        section = config_root.get(section_name)
        if isinstance(section, dict):
            section = dict(section)
        else:
            section = {}
        config_root[section_name] = section
        return section

    updated_config = dict(config_dict)

    timing_section = ensure_nested(updated_config, "timing")
    metadata_section = ensure_nested(updated_config, "metadata")

    def override_string(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "")
        if value_text.strip():
            target_dict[key_name] = value_text.strip()

    def override_float(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "").strip()
        if not value_text:
            return
        try:
            target_dict[key_name] = float(value_text)
        except ValueError:
            logger.warning("Ignoring %s: not a number: %r", env_name, value_text)

    override_float("BEATMAP_TIMELINE_DEFAULT_BEAT_LENGTH", timing_section, "default_beat_length")

    override_string("BEATMAP_TIMELINE_METADATA_TITLE", metadata_section, "title")
    override_string("BEATMAP_TIMELINE_METADATA_ARTIST", metadata_section, "artist")
    override_string("BEATMAP_TIMELINE_METADATA_AUTHOR", metadata_section, "author")
    override_string("BEATMAP_TIMELINE_METADATA_VERSION", metadata_section, "version")

    return updated_config


def load_config(config_path: Optional[Path] = None) -> Tuple[AppConfig, Optional[Path]]:
    resolved_path = config_path if config_path is not None else _resolve_config_path()
    if resolved_path is None:
        logger.debug("No config file found, using defaults")
        json_dict: Dict[str, Any] = {}
    else:
        logger.debug("Loading config from %s", resolved_path)
        json_dict = _read_json_file_utf8(resolved_path)
    json_dict = _apply_environment_overrides(json_dict)

    try:
        config = AppConfig.model_validate(json_dict)
    except ValidationError as exception:
        raise ValueError(f"Config validation failed for {resolved_path or '(defaults)'}:\n{exception}") from exception

    return config, resolved_path


@lru_cache(maxsize=1)
def get_config() -> Tuple[AppConfig, Optional[Path]]:
    return load_config()


def main() -> int:
    try:
        config, resolved_path = load_config()
    except Exception as exception:
        error_payload = {"ok": False, "error": str(exception)}
        print(json.dumps(error_payload, ensure_ascii=False, indent=2))
        return 2

    output_payload = {
        "ok": True,
        "config_path": str(resolved_path) if resolved_path is not None else None,
        "config": config.model_dump(),
    }
    print(json.dumps(output_payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

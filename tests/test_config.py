import json

import pytest

import config


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in (
        "BEATMAP_TIMELINE_CONFIG_PATH",
        "BEATMAP_TIMELINE_DEFAULT_BEAT_LENGTH",
        "BEATMAP_TIMELINE_METADATA_TITLE",
        "BEATMAP_TIMELINE_METADATA_ARTIST",
        "BEATMAP_TIMELINE_METADATA_AUTHOR",
        "BEATMAP_TIMELINE_METADATA_VERSION",
    ):
        monkeypatch.delenv(name, raising=False)


def test_load_from_explicit_path(tmp_path):
    config_path = tmp_path / "beatmap_timeline.json"
    config_path.write_text(json.dumps({"timing": {"default_beat_length": 400.0}}), encoding="utf-8")

    loaded, resolved_path = config.load_config(config_path)
    assert resolved_path == config_path
    assert loaded.timing.default_beat_length == 400.0
    assert loaded.metadata.author == "Unknown Creator"


def test_defaults_when_no_file_exists(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config, "_default_config_candidates", lambda: [tmp_path / "absent.json"])

    loaded, resolved_path = config.load_config()
    assert resolved_path is None
    assert loaded.timing.default_beat_length == 1000.0


def test_environment_path_wins(tmp_path, monkeypatch):
    config_path = tmp_path / "custom.json"
    config_path.write_text(json.dumps({"metadata": {"title": "From Env Path"}}), encoding="utf-8")
    monkeypatch.setenv("BEATMAP_TIMELINE_CONFIG_PATH", str(config_path))

    loaded, resolved_path = config.load_config()
    assert resolved_path == config_path
    assert loaded.metadata.title == "From Env Path"


def test_environment_overrides(tmp_path, monkeypatch):
    config_path = tmp_path / "beatmap_timeline.json"
    config_path.write_text(json.dumps({"timing": {"default_beat_length": 400.0}}), encoding="utf-8")
    monkeypatch.setenv("BEATMAP_TIMELINE_DEFAULT_BEAT_LENGTH", "250")
    monkeypatch.setenv("BEATMAP_TIMELINE_METADATA_VERSION", "  Expert  ")

    loaded, _resolved_path = config.load_config(config_path)
    assert loaded.timing.default_beat_length == 250.0
    assert loaded.metadata.version == "Expert"


def test_non_numeric_override_is_ignored(tmp_path, monkeypatch):
    config_path = tmp_path / "beatmap_timeline.json"
    config_path.write_text("{}", encoding="utf-8")
    monkeypatch.setenv("BEATMAP_TIMELINE_DEFAULT_BEAT_LENGTH", "fast")

    loaded, _resolved_path = config.load_config(config_path)
    assert loaded.timing.default_beat_length == 1000.0


def test_non_positive_default_beat_length_rejected(tmp_path):
    config_path = tmp_path / "beatmap_timeline.json"
    config_path.write_text(json.dumps({"timing": {"default_beat_length": 0}}), encoding="utf-8")

    with pytest.raises(ValueError, match="validation failed"):
        config.load_config(config_path)


@pytest.mark.parametrize("value_text", ["inf", "nan"])
def test_non_finite_default_beat_length_rejected(tmp_path, monkeypatch, value_text):
    config_path = tmp_path / "beatmap_timeline.json"
    config_path.write_text("{}", encoding="utf-8")
    monkeypatch.setenv("BEATMAP_TIMELINE_DEFAULT_BEAT_LENGTH", value_text)

    with pytest.raises(ValueError, match="validation failed"):
        config.load_config(config_path)


def test_blank_metadata_placeholder_rejected(tmp_path):
    config_path = tmp_path / "beatmap_timeline.json"
    config_path.write_text(json.dumps({"metadata": {"artist": "   "}}), encoding="utf-8")

    with pytest.raises(ValueError):
        config.load_config(config_path)


def test_invalid_json_rejected(tmp_path):
    config_path = tmp_path / "beatmap_timeline.json"
    config_path.write_text("{", encoding="utf-8")

    with pytest.raises(ValueError, match="not valid JSON"):
        config.load_config(config_path)


def test_non_object_root_rejected(tmp_path):
    config_path = tmp_path / "beatmap_timeline.json"
    config_path.write_text("[]", encoding="utf-8")

    with pytest.raises(ValueError, match="JSON object"):
        config.load_config(config_path)


def test_main_reports_resolved_config(tmp_path, monkeypatch, capsys):
    config_path = tmp_path / "beatmap_timeline.json"
    config_path.write_text("{}", encoding="utf-8")
    monkeypatch.setenv("BEATMAP_TIMELINE_CONFIG_PATH", str(config_path))

    assert config.main() == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["ok"] is True
    assert payload["config"]["timing"]["default_beat_length"] == 1000.0

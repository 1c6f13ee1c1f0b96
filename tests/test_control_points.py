import random

import pytest

from control_points import (
    DEFAULT_BEAT_LENGTH,
    ControlPointInfo,
    DifficultyPoint,
    EffectPoint,
    InvalidBeatLengthError,
    SamplePoint,
    TimingPoint,
)


class TestAdd:
    def test_random_adds_stay_sorted(self):
        rng = random.Random(1234)
        info = ControlPointInfo()
        for _ in range(200):
            info.add(TimingPoint(time=float(rng.randint(-500, 5000)), beat_length=float(rng.randint(100, 1000))))

        times = [point.time for point in info.timing_points]
        assert times == sorted(times)
        assert len(times) == len(set(times))

    def test_same_time_replaces_existing_point(self):
        info = ControlPointInfo()
        info.add(TimingPoint(time=500.0, beat_length=300.0))
        info.add(TimingPoint(time=500.0, beat_length=450.0))

        assert info.timing_points == (TimingPoint(time=500.0, beat_length=450.0),)

    def test_same_time_different_kinds_coexist(self):
        info = ControlPointInfo()
        info.add(TimingPoint(time=0.0, beat_length=400.0))
        info.add(EffectPoint(time=0.0, kiai_mode=True))
        info.add(DifficultyPoint(time=0.0, speed_multiplier=1.5))

        assert len(info.timing_points) == 1
        assert len(info.effect_points) == 1
        assert len(info.difficulty_points) == 1
        assert len(info.all_points()) == 3

    def test_unsupported_point_type_raises(self):
        with pytest.raises(TypeError):
            ControlPointInfo().add(object())


class TestPointAt:
    def test_returns_last_point_at_or_before_time(self, timing_info):
        assert timing_info.point_at(1500.0).time == 1000.0
        assert timing_info.point_at(1000.0).time == 1000.0
        assert timing_info.point_at(99999.0).time == 2000.0

    def test_before_first_point_returns_default(self, timing_info):
        default_point = timing_info.point_at(-5.0)
        assert default_point.beat_length == DEFAULT_BEAT_LENGTH
        assert default_point == timing_info.default_timing_point()

    def test_empty_returns_default(self):
        assert ControlPointInfo().point_at(123.0).beat_length == DEFAULT_BEAT_LENGTH

    def test_injected_default_beat_length(self):
        info = ControlPointInfo(default_beat_length=400.0)
        assert info.point_at(0.0).beat_length == 400.0

    def test_other_kinds_have_defaults(self):
        info = ControlPointInfo()
        info.add(EffectPoint(time=1000.0, kiai_mode=True))
        info.add(SamplePoint(time=200.0, sample_bank="soft", sample_volume=40))

        assert info.effect_point_at(500.0).kiai_mode is False
        assert info.effect_point_at(1500.0).kiai_mode is True
        assert info.sample_point_at(300.0).sample_volume == 40
        assert info.difficulty_point_at(0.0).speed_multiplier == 1.0


class TestCollection:
    def test_remove_and_clear(self, timing_info):
        assert timing_info.remove(TimingPoint(time=1000.0, beat_length=250.0)) is True
        assert timing_info.remove(TimingPoint(time=1000.0, beat_length=250.0)) is False
        assert len(timing_info.timing_points) == 2

        timing_info.clear()
        assert timing_info.all_points() == []

    def test_all_points_merged_by_time(self, timing_info):
        timing_info.add(EffectPoint(time=1500.0, kiai_mode=True))
        times = [point.time for point in timing_info.all_points()]
        assert times == [0.0, 1000.0, 1500.0, 2000.0]

    def test_bpm_range(self, timing_info):
        assert timing_info.bpm_minimum == 60.0
        assert timing_info.bpm_maximum == 240.0
        assert ControlPointInfo().bpm_minimum == 60.0

    def test_create_copy_is_independent(self, timing_info):
        copy = timing_info.create_copy()
        copy.add(TimingPoint(time=3000.0, beat_length=100.0))
        copy.remove(TimingPoint(time=0.0, beat_length=500.0))

        assert len(timing_info.timing_points) == 3
        assert timing_info.point_at(0.0).beat_length == 500.0
        assert copy.default_beat_length == timing_info.default_beat_length

    def test_timing_point_bpm(self):
        assert TimingPoint(time=0.0, beat_length=500.0).bpm == 120.0

    @pytest.mark.parametrize("beat_length", [0.0, -500.0])
    def test_timing_point_bpm_rejects_unusable_beat_length(self, beat_length):
        with pytest.raises(InvalidBeatLengthError) as excinfo:
            TimingPoint(time=0.0, beat_length=beat_length).bpm
        assert excinfo.value.beat_length == beat_length

    @pytest.mark.parametrize("beat_length", [0.0, -500.0])
    def test_bpm_range_rejects_unusable_beat_length(self, timing_info, beat_length):
        timing_info.add(TimingPoint(time=3000.0, beat_length=beat_length))

        with pytest.raises(InvalidBeatLengthError):
            timing_info.bpm_minimum
        with pytest.raises(InvalidBeatLengthError):
            timing_info.bpm_maximum

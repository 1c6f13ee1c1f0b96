import pytest

import beatmap
import control_points
import hit_objects


@pytest.fixture
def timing_info() -> control_points.ControlPointInfo:
    info = control_points.ControlPointInfo()
    info.add(control_points.TimingPoint(time=0.0, beat_length=500.0))
    info.add(control_points.TimingPoint(time=1000.0, beat_length=250.0))
    info.add(control_points.TimingPoint(time=2000.0, beat_length=1000.0))
    return info


@pytest.fixture
def tied_beatmap() -> beatmap.Beatmap:
    """Two timing points in effect for 1000 ms each, last object ending at 2000."""
    tied = beatmap.Beatmap()
    tied.control_point_info.add(control_points.TimingPoint(time=0.0, beat_length=500.0))
    tied.control_point_info.add(control_points.TimingPoint(time=1000.0, beat_length=250.0))
    tied.hit_objects.append(hit_objects.HitCircle(start_time=2000.0))
    return tied

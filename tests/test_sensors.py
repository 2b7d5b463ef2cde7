import math

import pytest

from autodrive.sensor import Sensor, SensorConfig


def _wall(y: float) -> list:
    return [(-500.0, y), (500.0, y)]


def test_rays_fan_out_around_heading() -> None:
    sensor = Sensor()
    sensor.update((0.0, 0.0), 0.0, [])

    rays = sensor.rays
    assert len(rays) == 5
    assert all(start == (0.0, 0.0) for start, _ in rays)

    # First ray leans left by half the spread, the middle one points straight up.
    reach = 150.0 * math.sin(math.pi / 4)
    assert rays[0][1] == pytest.approx((-reach, -reach))
    assert rays[2][1] == pytest.approx((0.0, -150.0))
    assert rays[4][1] == pytest.approx((reach, -reach))


def test_single_ray_points_straight_ahead() -> None:
    sensor = Sensor(SensorConfig(ray_count=1))
    sensor.update((10.0, 20.0), 0.0, [])
    assert sensor.rays[0][1] == pytest.approx((10.0, 20.0 - 150.0))


def test_rays_follow_heading() -> None:
    sensor = Sensor(SensorConfig(ray_count=1, ray_length=100.0))
    sensor.update((0.0, 0.0), math.pi / 2, [])
    assert sensor.rays[0][1] == pytest.approx((-100.0, 0.0))


def test_no_obstacles_reads_none_and_zero() -> None:
    sensor = Sensor()
    sensor.update((0.0, 0.0), 0.0, [])
    assert sensor.readings == (None,) * 5
    assert sensor.values() == [0.0] * 5


def test_wall_readings_are_normalized_distances() -> None:
    sensor = Sensor()
    sensor.update((0.0, 0.0), 0.0, [_wall(-75.0)])

    middle = sensor.readings[2]
    assert middle is not None
    assert middle.point == pytest.approx((0.0, -75.0))
    assert middle.offset == pytest.approx(0.5)

    side = sensor.readings[0]
    assert side is not None
    assert side.offset == pytest.approx(75.0 / (150.0 * math.cos(math.pi / 4)))

    values = sensor.values()
    assert values[2] == pytest.approx(0.5)
    assert values[0] == pytest.approx(values[4])
    assert values[0] < values[2]


def test_nearest_obstacle_wins() -> None:
    sensor = Sensor(SensorConfig(ray_count=1))
    sensor.update((0.0, 0.0), 0.0, [_wall(-100.0), _wall(-50.0)])
    reading = sensor.readings[0]
    assert reading is not None
    assert reading.offset == pytest.approx(50.0 / 150.0)
    assert sensor.values()[0] == pytest.approx(1.0 - 50.0 / 150.0)


def test_nearest_edge_of_polygon_wins() -> None:
    box = [(-10.0, -60.0), (10.0, -60.0), (10.0, -40.0), (-10.0, -40.0)]
    sensor = Sensor(SensorConfig(ray_count=1, ray_length=100.0))
    sensor.update((0.0, 0.0), 0.0, [box])
    reading = sensor.readings[0]
    assert reading is not None
    assert reading.point == pytest.approx((0.0, -40.0))
    assert reading.offset == pytest.approx(0.4)


def test_obstacle_beyond_range_is_not_seen() -> None:
    sensor = Sensor(SensorConfig(ray_count=1))
    sensor.update((0.0, 0.0), 0.0, [_wall(-151.0)])
    assert sensor.readings == (None,)


def test_zero_length_rays_never_touch() -> None:
    sensor = Sensor(SensorConfig(ray_count=3, ray_length=0.0))
    sensor.update((0.0, 0.0), 0.0, [[(-10.0, 0.0), (10.0, 0.0)]])
    assert sensor.readings == (None, None, None)


def test_invalid_config_is_rejected() -> None:
    with pytest.raises(ValueError):
        SensorConfig(ray_count=0)
    with pytest.raises(ValueError):
        SensorConfig(ray_length=-1.0)

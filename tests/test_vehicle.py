import numpy as np
import pytest

from autodrive.network import Layer, NeuralNetwork
from autodrive.vehicle import (
    DriverKind,
    KinematicsConfig,
    NetworkDriver,
    Vehicle,
)


def _forward_only_network(ray_count: int = 5) -> NeuralNetwork:
    # Zero weights: each output fires exactly when its bias is negative.
    weights = np.zeros((ray_count, 4))
    return NeuralNetwork([Layer([-1.0, 1.0, 1.0, 1.0], weights)])


def test_polygon_is_rotated_rectangle() -> None:
    vehicle = Vehicle((0.0, 0.0), 30.0, 50.0)
    expected = [(15.0, -25.0), (-15.0, -25.0), (-15.0, 25.0), (15.0, 25.0)]
    for corner, want in zip(vehicle.polygon, expected):
        assert corner == pytest.approx(want)


def test_polygon_follows_heading() -> None:
    vehicle = Vehicle((0.0, 0.0), 30.0, 50.0)
    vehicle.heading = np.pi / 2
    vehicle.update([])
    xs = sorted(round(x, 6) for x, _ in vehicle.polygon)
    ys = sorted(round(y, 6) for _, y in vehicle.polygon)
    assert xs == pytest.approx([-25.0, -25.0, 25.0, 25.0])
    assert ys == pytest.approx([-15.0, -15.0, 15.0, 15.0])


def test_acceleration_increases_speed_until_clamped() -> None:
    vehicle = Vehicle((0.0, 0.0), 30.0, 50.0, kinematics=KinematicsConfig(max_speed=3.0))
    vehicle.controls.forward = 1.0

    speeds = []
    for _ in range(40):
        vehicle.update([])
        speeds.append(vehicle.speed)

    assert speeds[0] == pytest.approx(0.15)
    plateau = speeds.index(max(speeds))
    assert all(later > earlier for earlier, later in zip(speeds[:plateau], speeds[1 : plateau + 1]))
    assert max(speeds) == pytest.approx(3.0 - 0.05)
    assert all(speed <= 3.0 for speed in speeds)
    assert speeds[-1] == pytest.approx(speeds[plateau])


def test_heading_zero_moves_up() -> None:
    vehicle = Vehicle((0.0, 0.0), 30.0, 50.0)
    vehicle.controls.forward = 1.0
    vehicle.update([])
    assert vehicle.x == pytest.approx(0.0)
    assert vehicle.y == pytest.approx(-0.15)


@pytest.mark.parametrize("start", [1.0, 2.37, -1.0, -0.4])
def test_friction_stops_vehicle_without_changing_sign(start: float) -> None:
    vehicle = Vehicle((0.0, 0.0), 30.0, 50.0)
    vehicle.speed = start

    previous = abs(start)
    for _ in range(200):
        vehicle.update([])
        assert abs(vehicle.speed) <= previous
        assert vehicle.speed == 0.0 or (vehicle.speed > 0) == (start > 0)
        previous = abs(vehicle.speed)

    assert vehicle.speed == 0.0


def test_reverse_speed_is_limited_to_half_max() -> None:
    vehicle = Vehicle((0.0, 0.0), 30.0, 50.0, kinematics=KinematicsConfig(max_speed=3.0))
    vehicle.controls.reverse = 1.0
    for _ in range(40):
        vehicle.update([])
        assert vehicle.speed >= -1.5
    assert vehicle.speed == pytest.approx(-1.5 + 0.05)
    assert vehicle.y > 0


def test_steering_is_mirrored_in_reverse() -> None:
    forward = Vehicle((0.0, 0.0), 30.0, 50.0)
    forward.speed = 2.0
    forward.controls.left = 1.0
    forward.update([])
    assert forward.heading == pytest.approx(0.03)

    backward = Vehicle((0.0, 0.0), 30.0, 50.0)
    backward.speed = -1.0
    backward.controls.left = 1.0
    backward.update([])
    assert backward.heading == pytest.approx(-0.03)

    right = Vehicle((0.0, 0.0), 30.0, 50.0)
    right.speed = 2.0
    right.controls.right = 1.0
    right.update([])
    assert right.heading == pytest.approx(-0.03)


def test_no_steering_while_standing_still() -> None:
    vehicle = Vehicle((0.0, 0.0), 30.0, 50.0)
    vehicle.controls.left = 1.0
    vehicle.update([])
    assert vehicle.heading == 0.0
    assert vehicle.center == (0.0, 0.0)


def test_collision_freezes_vehicle() -> None:
    wall = [(-100.0, 0.0), (100.0, 0.0)]
    vehicle = Vehicle((0.0, 0.0), 30.0, 50.0)
    vehicle.controls.forward = 1.0
    vehicle.update([wall])
    assert vehicle.collided

    center = vehicle.center
    polygon = list(vehicle.polygon)
    speed = vehicle.speed
    for _ in range(5):
        vehicle.update([])
    assert vehicle.collided
    assert vehicle.center == center
    assert vehicle.polygon == polygon
    assert vehicle.speed == speed


def test_no_collision_with_distant_obstacle() -> None:
    vehicle = Vehicle((0.0, 0.0), 30.0, 50.0)
    vehicle.update([[(-100.0, -500.0), (100.0, -500.0)]])
    assert not vehicle.collided


def test_traffic_vehicle_always_accelerates() -> None:
    vehicle = Vehicle.traffic((0.0, 0.0), 30.0, 50.0)
    assert vehicle.kind is DriverKind.TRAFFIC
    assert vehicle.sensor is None
    assert vehicle.network is None
    for _ in range(100):
        vehicle.update([])
    assert vehicle.controls.forward == 1.0
    assert vehicle.speed == pytest.approx(2.0 - 0.05)
    assert vehicle.y < 0


def test_manual_vehicle_keeps_external_controls() -> None:
    vehicle = Vehicle.manual((0.0, 0.0), 30.0, 50.0)
    assert vehicle.kind is DriverKind.MANUAL
    assert vehicle.kinematics.max_speed == 3.0
    vehicle.controls.forward = 1.0
    vehicle.update([])
    assert vehicle.controls.forward == 1.0
    assert len(vehicle.sensor.readings) == 5


def test_network_outputs_drive_the_controls() -> None:
    vehicle = Vehicle.learning((0.0, 0.0), 30.0, 50.0, network=_forward_only_network())
    assert vehicle.kind is DriverKind.NETWORK
    assert vehicle.kinematics.max_speed == 5.0

    vehicle.update([])
    assert vehicle.controls.as_outputs() == (1.0, 0.0, 0.0, 0.0)

    vehicle.update([])
    assert vehicle.speed == pytest.approx(0.15)


def test_manual_override_ignores_network_outputs() -> None:
    vehicle = Vehicle.learning((0.0, 0.0), 30.0, 50.0, network=_forward_only_network())
    assert isinstance(vehicle.driver, NetworkDriver)
    vehicle.driver.manual_override = True
    vehicle.update([])
    assert vehicle.controls.as_outputs() == (0.0, 0.0, 0.0, 0.0)
    # Inference still ran.
    assert vehicle.network.layers[-1].outputs.tolist() == [1.0, 0.0, 0.0, 0.0]


def test_learning_vehicle_builds_random_network_from_sensor() -> None:
    vehicle = Vehicle.learning((0.0, 0.0), 30.0, 50.0, rng=np.random.default_rng(3))
    assert vehicle.network is not None
    assert vehicle.network.shape == (5, 6, 4)


def test_learning_vehicle_rejects_mismatched_network() -> None:
    with pytest.raises(ValueError):
        Vehicle.learning((0.0, 0.0), 30.0, 50.0, network=NeuralNetwork.random((3, 4)))


def test_network_driver_requires_sensor() -> None:
    with pytest.raises(ValueError):
        Vehicle((0.0, 0.0), 30.0, 50.0, driver=NetworkDriver(_forward_only_network()))


def test_snapshot_exposes_drawing_state() -> None:
    vehicle = Vehicle.learning((0.0, 0.0), 30.0, 50.0, network=_forward_only_network())
    vehicle.update([])
    snapshot = vehicle.snapshot()
    assert snapshot.kind == "network"
    assert len(snapshot.polygon) == 4
    assert len(snapshot.rays) == 5
    assert snapshot.readings == (None,) * 5
    assert snapshot.network is not None
    assert snapshot.network[0].outputs == (1.0, 0.0, 0.0, 0.0)
    assert snapshot.network[0].inputs == (0.0,) * 5

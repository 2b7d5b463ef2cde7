"""Vehicle kinematics, collision state and the driver variants that steer it."""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass
from typing import ClassVar, Iterable, List, Sequence, Tuple

import numpy as np

from .control import CONTROL_CHANNELS, Controls
from .geometry import Polygon, Vec2, polygon_intersection
from .network import NeuralNetwork
from .sensor import Sensor, SensorConfig
from .state import VehicleSnapshot, network_snapshot

logger = logging.getLogger(__name__)

MANUAL_MAX_SPEED = 3.0
TRAFFIC_MAX_SPEED = 2.0
LEARNING_MAX_SPEED = 5.0
DEFAULT_HIDDEN_LAYERS: Tuple[int, ...] = (6,)


@dataclass(frozen=True)
class KinematicsConfig:
    """Per-tick motion constants; ``max_speed`` differs by vehicle class."""

    acceleration: float = 0.2
    friction: float = 0.05
    steer_rate: float = 0.03
    max_speed: float = MANUAL_MAX_SPEED


class DriverKind(enum.Enum):
    TRAFFIC = "traffic"
    MANUAL = "manual"
    NETWORK = "network"


@dataclass
class TrafficDriver:
    """Fixed rule: always hold the accelerator."""

    kind: ClassVar[DriverKind] = DriverKind.TRAFFIC

    def prepare(self, controls: Controls) -> None:
        controls.forward = 1.0

    def control(self, vehicle: "Vehicle") -> None:
        return None


@dataclass
class ManualDriver:
    """Controls are written from outside, e.g. by the keyboard handler."""

    kind: ClassVar[DriverKind] = DriverKind.MANUAL

    def prepare(self, controls: Controls) -> None:
        return None

    def control(self, vehicle: "Vehicle") -> None:
        return None


@dataclass
class NetworkDriver:
    """Feeds sensor readings through a network and applies its outputs.

    With ``manual_override`` set, inference still runs but the outputs are
    not written to the controls.
    """

    network: NeuralNetwork
    manual_override: bool = False

    kind: ClassVar[DriverKind] = DriverKind.NETWORK

    def prepare(self, controls: Controls) -> None:
        return None

    def control(self, vehicle: "Vehicle") -> None:
        if vehicle.sensor is None:
            raise RuntimeError("a network driven vehicle needs a sensor")
        outputs = self.network.feed_forward(vehicle.sensor.values())
        if not self.manual_override:
            vehicle.controls.apply_outputs(outputs)


Driver = TrafficDriver | ManualDriver | NetworkDriver


class Vehicle:
    """Rectangular vehicle moving with simple arcade kinematics.

    Heading 0 points up (towards negative ``y``); a positive heading turns
    the vehicle left. Once collided the vehicle stays frozen for good.
    """

    def __init__(
        self,
        center: Vec2,
        width: float,
        height: float,
        *,
        driver: Driver | None = None,
        kinematics: KinematicsConfig | None = None,
        sensor: Sensor | None = None,
    ) -> None:
        self.x = float(center[0])
        self.y = float(center[1])
        self.width = float(width)
        self.height = float(height)
        self.heading = 0.0
        self.speed = 0.0
        self.collided = False
        self.kinematics = kinematics or KinematicsConfig()
        self.driver: Driver = driver if driver is not None else ManualDriver()
        self.sensor = sensor
        if isinstance(self.driver, NetworkDriver) and self.sensor is None:
            raise ValueError("a network driven vehicle needs a sensor")
        self.controls = Controls()
        self.driver.prepare(self.controls)
        self.polygon: List[Vec2] = self._create_polygon()

    @classmethod
    def traffic(
        cls,
        center: Vec2,
        width: float,
        height: float,
        *,
        max_speed: float = TRAFFIC_MAX_SPEED,
    ) -> "Vehicle":
        return cls(
            center,
            width,
            height,
            driver=TrafficDriver(),
            kinematics=KinematicsConfig(max_speed=max_speed),
        )

    @classmethod
    def manual(
        cls,
        center: Vec2,
        width: float,
        height: float,
        *,
        max_speed: float = MANUAL_MAX_SPEED,
        sensor_config: SensorConfig | None = None,
    ) -> "Vehicle":
        return cls(
            center,
            width,
            height,
            driver=ManualDriver(),
            kinematics=KinematicsConfig(max_speed=max_speed),
            sensor=Sensor(sensor_config),
        )

    @classmethod
    def learning(
        cls,
        center: Vec2,
        width: float,
        height: float,
        *,
        network: NeuralNetwork | None = None,
        hidden_layers: Sequence[int] = DEFAULT_HIDDEN_LAYERS,
        max_speed: float = LEARNING_MAX_SPEED,
        sensor_config: SensorConfig | None = None,
        rng: np.random.Generator | None = None,
    ) -> "Vehicle":
        sensor = Sensor(sensor_config)
        shape = (sensor.ray_count, *hidden_layers, len(CONTROL_CHANNELS))
        if network is None:
            network = NeuralNetwork.random(shape, rng)
        elif network.shape[0] != sensor.ray_count or network.shape[-1] != len(CONTROL_CHANNELS):
            raise ValueError(
                f"network shape {network.shape} does not fit {sensor.ray_count} rays "
                f"and {len(CONTROL_CHANNELS)} controls"
            )
        return cls(
            center,
            width,
            height,
            driver=NetworkDriver(network),
            kinematics=KinematicsConfig(max_speed=max_speed),
            sensor=sensor,
        )

    @property
    def center(self) -> Vec2:
        return self.x, self.y

    @property
    def kind(self) -> DriverKind:
        return self.driver.kind

    @property
    def network(self) -> NeuralNetwork | None:
        if isinstance(self.driver, NetworkDriver):
            return self.driver.network
        return None

    def update(self, obstacles: Iterable[Polygon]) -> None:
        """Advance one tick, then sense and pick the controls for the next one."""
        obstacles = list(obstacles)
        self.advance(obstacles)
        self.perceive(obstacles)

    def advance(self, obstacles: Sequence[Polygon]) -> None:
        if self.collided:
            return
        self._move()
        self.polygon = self._create_polygon()
        self.collided = self._detect_collision(obstacles)
        if self.collided:
            logger.debug(
                "%s vehicle collided at (%.1f, %.1f)", self.kind.value, self.x, self.y
            )

    def perceive(self, obstacles: Sequence[Polygon]) -> None:
        if self.sensor is not None:
            self.sensor.update(self.center, self.heading, obstacles)
        self.driver.control(self)

    def snapshot(self) -> VehicleSnapshot:
        network = self.network
        return VehicleSnapshot(
            kind=self.kind.value,
            center=self.center,
            heading=self.heading,
            speed=self.speed,
            width=self.width,
            height=self.height,
            polygon=tuple(self.polygon),
            collided=self.collided,
            controls=self.controls.as_outputs(),
            rays=self.sensor.rays if self.sensor is not None else (),
            readings=self.sensor.readings if self.sensor is not None else (),
            network=network_snapshot(network) if network is not None else None,
        )

    def _move(self) -> None:
        config = self.kinematics
        controls = self.controls

        if controls.forward > 0:
            self.speed += config.acceleration
        if controls.reverse > 0:
            self.speed -= config.acceleration

        if self.speed > config.max_speed:
            self.speed = config.max_speed
        if self.speed < -config.max_speed / 2:
            self.speed = -config.max_speed / 2

        if self.speed > 0:
            self.speed = max(0.0, self.speed - config.friction)
        elif self.speed < 0:
            self.speed = min(0.0, self.speed + config.friction)
        if abs(self.speed) < config.friction:
            self.speed = 0.0

        if self.speed != 0:
            flip = 1 if self.speed > 0 else -1
            if controls.left > 0:
                self.heading += config.steer_rate * flip
            if controls.right > 0:
                self.heading -= config.steer_rate * flip

        self.x -= math.sin(self.heading) * self.speed
        self.y -= math.cos(self.heading) * self.speed

    def _create_polygon(self) -> List[Vec2]:
        radius = math.hypot(self.width, self.height) / 2
        alpha = math.atan2(self.width, self.height)
        angles = (
            self.heading - alpha,
            self.heading + alpha,
            math.pi + self.heading - alpha,
            math.pi + self.heading + alpha,
        )
        return [
            (self.x - math.sin(angle) * radius, self.y - math.cos(angle) * radius)
            for angle in angles
        ]

    def _detect_collision(self, obstacles: Sequence[Polygon]) -> bool:
        for obstacle in obstacles:
            if polygon_intersection(self.polygon, obstacle) is not None:
                return True
        return False


__all__ = [
    "Driver",
    "DriverKind",
    "KinematicsConfig",
    "LEARNING_MAX_SPEED",
    "MANUAL_MAX_SPEED",
    "ManualDriver",
    "NetworkDriver",
    "TRAFFIC_MAX_SPEED",
    "TrafficDriver",
    "Vehicle",
]

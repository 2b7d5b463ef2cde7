"""World setup and per-tick stepping for agents and traffic on a road."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np

from .geometry import Polygon
from .network import NeuralNetwork
from .road import Road
from .sensor import SensorConfig
from .state import SimulationSnapshot
from .vehicle import (
    DEFAULT_HIDDEN_LAYERS,
    LEARNING_MAX_SPEED,
    MANUAL_MAX_SPEED,
    TRAFFIC_MAX_SPEED,
    DriverKind,
    Vehicle,
)

logger = logging.getLogger(__name__)

# (lane index, y) of each traffic vehicle
TrafficLayout = Sequence[Tuple[int, float]]

BUSY_TRAFFIC: TrafficLayout = (
    (1, -100.0),
    (0, -300.0),
    (2, -300.0),
    (0, -500.0),
    (1, -500.0),
    (1, -700.0),
    (2, -700.0),
)


@dataclass(frozen=True)
class WorldConfig:
    """Road geometry, vehicle sizes and starting layout."""

    road_x: float = 100.0
    road_width: float = 180.0
    lane_count: int = 3
    vehicle_width: float = 30.0
    vehicle_height: float = 50.0
    agent_count: int = 1
    agent_lane: int = 1
    agent_y: float = 100.0
    agent_driver: DriverKind = DriverKind.NETWORK
    agent_max_speed: float = LEARNING_MAX_SPEED
    manual_max_speed: float = MANUAL_MAX_SPEED
    traffic_max_speed: float = TRAFFIC_MAX_SPEED
    hidden_layers: Tuple[int, ...] = DEFAULT_HIDDEN_LAYERS
    sensor: SensorConfig = field(default_factory=SensorConfig)
    traffic: TrafficLayout = ((1, -100.0),)
    traffic_sees_agents: bool = True

    def __post_init__(self) -> None:
        if self.agent_count <= 0:
            raise ValueError("agent_count must be positive")
        if self.agent_driver is DriverKind.TRAFFIC:
            raise ValueError("agents are driven by a network or manually")


class Simulation:
    """Owns the road, the agents under evaluation and the traffic around them.

    Agents treat the road borders and traffic as obstacles but ignore each
    other. Traffic vehicles treat the borders, the other traffic and, when
    ``traffic_sees_agents`` is set, every agent as obstacles.
    """

    def __init__(
        self,
        config: WorldConfig | None = None,
        *,
        networks: Sequence[NeuralNetwork] | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.config = config or WorldConfig()
        self._rng = rng if rng is not None else np.random.default_rng()
        self.road = Road(self.config.road_x, self.config.road_width, self.config.lane_count)
        self.agents: List[Vehicle] = self._create_agents(networks)
        self.traffic: List[Vehicle] = [
            Vehicle.traffic(
                (self.road.lane_center(lane), float(y)),
                self.config.vehicle_width,
                self.config.vehicle_height,
                max_speed=self.config.traffic_max_speed,
            )
            for lane, y in self.config.traffic
        ]
        self.step_index = 0

    def step(self) -> None:
        """Advance every vehicle by one tick.

        All obstacle sets are built from the polygons of the previous tick.
        Kinematics and collision run for every vehicle before any vehicle
        senses or picks its next controls.
        """
        plan = self._obstacle_plan()
        was_collided = [vehicle.collided for vehicle, _ in plan]
        for vehicle, obstacles in plan:
            vehicle.advance(obstacles)
        for vehicle, obstacles in plan:
            vehicle.perceive(obstacles)

        self.step_index += 1
        crashed = sum(
            1 for (vehicle, _), before in zip(plan, was_collided) if vehicle.collided and not before
        )
        if crashed:
            logger.debug(
                "Step %d: %d new collisions, %d/%d agents still driving",
                self.step_index,
                crashed,
                self.active_agent_count(),
                len(self.agents),
            )

    def refresh_sensors(self) -> None:
        """Sense from the current positions without moving anything."""
        for vehicle, obstacles in self._obstacle_plan():
            vehicle.perceive(obstacles)

    def _obstacle_plan(self) -> List[Tuple[Vehicle, List[Polygon]]]:
        borders = self.road.border_polygons()
        agent_polygons: List[Polygon] = [list(agent.polygon) for agent in self.agents]
        traffic_polygons: List[Polygon] = [list(vehicle.polygon) for vehicle in self.traffic]

        agent_obstacles = borders + traffic_polygons
        plan: List[Tuple[Vehicle, List[Polygon]]] = [
            (agent, agent_obstacles) for agent in self.agents
        ]
        for index, vehicle in enumerate(self.traffic):
            obstacles = borders + traffic_polygons[:index] + traffic_polygons[index + 1 :]
            if self.config.traffic_sees_agents:
                obstacles = obstacles + agent_polygons
            plan.append((vehicle, obstacles))
        return plan

    def best_agent_index(self) -> int:
        """Index of the agent that travelled furthest up the road."""
        return min(range(len(self.agents)), key=lambda index: self.agents[index].y)

    def best_agent(self) -> Vehicle:
        return self.agents[self.best_agent_index()]

    def fitness(self, vehicle: Vehicle) -> float:
        """Forward progress from the starting line; larger is better."""
        return self.config.agent_y - vehicle.y

    def active_agent_count(self) -> int:
        return sum(1 for agent in self.agents if not agent.collided)

    def all_collided(self) -> bool:
        return self.active_agent_count() == 0

    def snapshot(self) -> SimulationSnapshot:
        return SimulationSnapshot(
            step_index=self.step_index,
            agents=tuple(agent.snapshot() for agent in self.agents),
            traffic=tuple(vehicle.snapshot() for vehicle in self.traffic),
            borders=self.road.borders,
            lane_dividers=tuple(self.road.lane_divider_xs()),
            best_index=self.best_agent_index(),
        )

    def _create_agents(self, networks: Sequence[NeuralNetwork] | None) -> List[Vehicle]:
        config = self.config
        start = (self.road.lane_center(config.agent_lane), config.agent_y)

        if config.agent_driver is DriverKind.MANUAL:
            return [
                Vehicle.manual(
                    start,
                    config.vehicle_width,
                    config.vehicle_height,
                    max_speed=config.manual_max_speed,
                    sensor_config=config.sensor,
                )
            ]

        if networks is None:
            networks = [None] * config.agent_count
        elif not networks:
            raise ValueError("at least one network is required")
        return [
            Vehicle.learning(
                start,
                config.vehicle_width,
                config.vehicle_height,
                network=network,
                hidden_layers=config.hidden_layers,
                max_speed=config.agent_max_speed,
                sensor_config=config.sensor,
                rng=self._rng,
            )
            for network in networks
        ]


__all__ = ["BUSY_TRAFFIC", "Simulation", "TrafficLayout", "WorldConfig"]

"""Non-graphical helpers for running the simulation loop."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from .control import keys_to_controls
from .network import NeuralNetwork
from .simulation import Simulation, WorldConfig
from .state import SimulationSnapshot
from .vehicle import NetworkDriver


@dataclass(frozen=True)
class SimulationConfig:
    """Parameters controlling how long a run lasts."""

    max_steps: int = 2000
    stop_when_all_collided: bool = True


class SimulationSession:
    """Wraps a Simulation with step counting and generation resets."""

    def __init__(
        self,
        world: WorldConfig | None = None,
        *,
        config: SimulationConfig | None = None,
        networks: Sequence[NeuralNetwork] | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self._world = world or WorldConfig()
        self._config = config or SimulationConfig()
        self._rng = rng if rng is not None else np.random.default_rng()
        self._simulation = Simulation(self._world, networks=networks, rng=self._rng)

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def simulation(self) -> Simulation:
        return self._simulation

    @property
    def finished(self) -> bool:
        if self._simulation.step_index >= self._config.max_steps:
            return True
        return self._config.stop_when_all_collided and self._simulation.all_collided()

    def reset(self, networks: Sequence[NeuralNetwork] | None = None) -> SimulationSnapshot:
        """Start a fresh run, optionally with a new generation of brains."""
        self._simulation = Simulation(self._world, networks=networks, rng=self._rng)
        return self.snapshot()

    def step(self, keys: Iterable[str] | None = None) -> SimulationSnapshot:
        """Advance one tick; ``keys`` drive the first agent when it is steered by hand."""
        if keys is not None:
            self._apply_keys(keys)
        self._simulation.step()
        return self.snapshot()

    def run(self) -> SimulationSnapshot:
        """Step until the run is finished and return the final state."""
        while not self.finished:
            self._simulation.step()
        return self.snapshot()

    def snapshot(self) -> SimulationSnapshot:
        return self._simulation.snapshot()

    def _apply_keys(self, keys: Iterable[str]) -> None:
        agent = self._simulation.agents[0]
        if isinstance(agent.driver, NetworkDriver) and not agent.driver.manual_override:
            return
        keys_to_controls(keys, agent.controls)


__all__ = ["SimulationConfig", "SimulationSession"]

"""Gymnasium environment wrapper around a single agent on the road."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

import gymnasium as gym
import numpy as np
import pygame

from .control import CONTROL_CHANNELS
from .render import RenderConfig, Renderer
from .simulation import Simulation, WorldConfig
from .vehicle import DriverKind, Vehicle


@dataclass(frozen=True)
class EnvironmentConfig:
    """Configuration bundle for the Gymnasium environment."""

    max_episode_steps: int = 3000
    frame_skip: int = 1
    crash_penalty: float = 1.0
    world: WorldConfig = field(default_factory=WorldConfig)


class RoadCarEnv(gym.Env):
    """One hand-steered agent whose controls come from the action.

    Observations are the sensor values (1 for a touching obstacle, 0 for no
    obstacle in range). Actions are four binary flags in the
    ``CONTROL_CHANNELS`` order. The reward is the forward progress made
    during the step; crashing ends the episode.
    """

    metadata = {"render_modes": ("none", "human", "rgb_array"), "render_fps": 60}

    def __init__(
        self,
        *,
        render_mode: str | None = None,
        env_config: EnvironmentConfig | None = None,
    ) -> None:
        super().__init__()
        self.render_mode = render_mode or "none"
        if self.render_mode not in self.metadata["render_modes"]:
            raise ValueError(f"Unsupported render_mode '{self.render_mode}'")

        config = env_config or EnvironmentConfig()
        world = replace(config.world, agent_driver=DriverKind.MANUAL, agent_count=1)
        self._env_config = replace(config, world=world)

        self._simulation = self._make_simulation()
        ray_count = world.sensor.ray_count
        self.observation_space = gym.spaces.Box(
            low=0.0, high=1.0, shape=(ray_count,), dtype=np.float32
        )
        self.action_space = gym.spaces.MultiBinary(len(CONTROL_CHANNELS))

        self._renderer: Renderer | None = None
        self._screen: pygame.Surface | None = None
        self._step_count = 0
        self._episode_terminated = False

    @property
    def simulation(self) -> Simulation:
        return self._simulation

    @property
    def agent(self) -> Vehicle:
        return self._simulation.agents[0]

    def reset(self, *, seed: int | None = None, options: dict | None = None):
        super().reset(seed=seed)
        self._simulation = self._make_simulation()
        self._step_count = 0
        self._episode_terminated = False
        return self._build_observation(), self._gather_info()

    def step(self, action):
        action = np.asarray(action, dtype=np.int8)
        if not self.action_space.contains(action):
            raise gym.error.InvalidAction(f"Action {action!r} is outside {self.action_space}")
        if self._episode_terminated:
            raise gym.error.ResetNeeded(
                "Cannot call step() on a terminated episode. Call reset() first."
            )

        agent = self.agent
        agent.controls.apply_outputs(action.astype(np.float64))
        start_y = agent.y
        for _ in range(self._env_config.frame_skip):
            self._simulation.step()
            if agent.collided:
                break
        self._step_count += 1

        terminated = bool(agent.collided)
        truncated = self._step_count >= self._env_config.max_episode_steps
        reward = float(start_y - agent.y)
        if terminated:
            reward -= self._env_config.crash_penalty
        self._episode_terminated = terminated or truncated

        if self.render_mode == "human":
            self.render()

        return self._build_observation(), reward, terminated, truncated, self._gather_info()

    def render(self):
        if self.render_mode == "none":
            return None

        self._ensure_renderer()
        assert self._screen is not None
        assert self._renderer is not None
        self._renderer.draw(self._simulation.snapshot())

        if self.render_mode == "rgb_array":
            frame = pygame.surfarray.array3d(self._screen)
            return np.transpose(frame, (1, 0, 2))
        pygame.event.pump()
        return None

    def close(self) -> None:
        if self._renderer is not None and self.render_mode == "human":
            pygame.display.quit()
        if pygame.get_init():
            pygame.quit()
        self._renderer = None
        self._screen = None

    def _make_simulation(self) -> Simulation:
        simulation = Simulation(self._env_config.world, rng=self.np_random)
        simulation.refresh_sensors()
        return simulation

    def _ensure_renderer(self) -> None:
        if self._renderer is not None:
            return
        if not pygame.get_init():
            pygame.init()
        render_config = RenderConfig()
        if self.render_mode == "human":
            self._screen = pygame.display.set_mode(render_config.screen_size)
            pygame.display.set_caption("autodrive - Gymnasium")
        else:
            self._screen = pygame.Surface(render_config.screen_size)
        self._renderer = Renderer(self._screen, render_config)

    def _build_observation(self) -> np.ndarray:
        sensor = self.agent.sensor
        assert sensor is not None
        return np.asarray(sensor.values(), dtype=np.float32)

    def _gather_info(self) -> dict:
        agent = self.agent
        return {
            "speed": agent.speed,
            "heading": agent.heading,
            "position": agent.center,
            "collided": agent.collided,
            "progress": self._simulation.fitness(agent),
            "step_count": self._step_count,
        }


__all__ = ["EnvironmentConfig", "RoadCarEnv"]

"""Pygame rendering of the road scene and the best agent's network."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import pygame

from .geometry import Vec2, lerp
from .state import LayerState, SimulationSnapshot, VehicleSnapshot

Color = Tuple[int, int, int]

# One label per entry of CONTROL_CHANNELS.
OUTPUT_LABELS = ("F", "L", "R", "B")


@dataclass(frozen=True)
class RenderConfig:
    road_panel_width: int = 200
    network_panel_width: int = 400
    screen_height: int = 720
    camera_anchor: float = 0.7
    background_color: Color = (220, 220, 220)
    road_color: Color = (110, 110, 110)
    lane_color: Color = (245, 245, 245)
    lane_dash: int = 20
    network_background: Color = (20, 20, 24)
    agent_color: Color = (10, 10, 10)
    best_agent_color: Color = (30, 90, 200)
    manual_color: Color = (30, 90, 200)
    traffic_color: Color = (180, 40, 40)
    collided_color: Color = (140, 140, 140)
    draw_sensor_rays: bool = True
    sensor_ray_color: Color = (240, 200, 40)
    sensor_blocked_color: Color = (0, 0, 0)
    sensor_ray_width: int = 2
    positive_color: Color = (255, 255, 0)
    negative_color: Color = (0, 0, 255)
    node_radius: int = 18
    network_margin: int = 50
    hud_text_color: Color = (245, 245, 245)

    @property
    def screen_size(self) -> Tuple[int, int]:
        return self.road_panel_width + self.network_panel_width, self.screen_height


class Renderer:
    """Draws a simulation snapshot; the camera follows the best agent."""

    def __init__(self, screen: pygame.Surface, config: RenderConfig | None = None) -> None:
        self.screen = screen
        self.config = config or RenderConfig()
        if not pygame.font.get_init():
            pygame.font.init()
        self._font = pygame.font.SysFont("Arial", 16)
        self._label_font = pygame.font.SysFont("Arial", 18, bold=True)
        display_surface = pygame.display.get_surface() if pygame.display.get_init() else None
        self._flip_display = display_surface is not None and display_surface == screen

    def draw(self, snapshot: SimulationSnapshot) -> None:
        best = snapshot.best_agent
        focus_y = best.center[1] if best is not None else 0.0
        self.screen.fill(self.config.background_color)
        self._draw_road(snapshot, focus_y)
        for vehicle in snapshot.traffic:
            self._draw_vehicle(vehicle, self.config.traffic_color, focus_y)
        for index, agent in enumerate(snapshot.agents):
            if index != snapshot.best_index:
                self._draw_vehicle(agent, self.config.agent_color, focus_y)
        if best is not None:
            color = (
                self.config.manual_color if best.kind == "manual" else self.config.best_agent_color
            )
            self._draw_vehicle(best, color, focus_y)
            if self.config.draw_sensor_rays:
                self._draw_sensor_rays(best, focus_y)
        self._draw_network_panel(best)
        self._draw_hud(snapshot)
        if self._flip_display:
            pygame.display.flip()

    def _to_screen(self, point: Vec2, focus_y: float) -> Tuple[int, int]:
        anchor = self.config.screen_height * self.config.camera_anchor
        return int(point[0]), int(point[1] - focus_y + anchor)

    def _draw_road(self, snapshot: SimulationSnapshot, focus_y: float) -> None:
        height = self.config.screen_height
        (left, _), _ = snapshot.borders[0]
        (right, _), _ = snapshot.borders[1]
        pygame.draw.rect(
            self.screen,
            self.config.road_color,
            pygame.Rect(int(left), 0, int(right - left), height),
        )

        anchor = height * self.config.camera_anchor
        top_world = focus_y - anchor
        dash = self.config.lane_dash
        first = int(top_world // (dash * 2)) * dash * 2
        for x in snapshot.lane_dividers:
            world_y = first
            while world_y < top_world + height:
                start = self._to_screen((x, world_y), focus_y)
                end = self._to_screen((x, world_y + dash), focus_y)
                pygame.draw.line(self.screen, self.config.lane_color, start, end, 4)
                world_y += dash * 2

        for start, end in snapshot.borders:
            pygame.draw.line(
                self.screen,
                self.config.lane_color,
                (int(start[0]), 0),
                (int(end[0]), height),
                5,
            )

    def _draw_vehicle(self, vehicle: VehicleSnapshot, color: Color, focus_y: float) -> None:
        fill = self.config.collided_color if vehicle.collided else color
        points = [self._to_screen(point, focus_y) for point in vehicle.polygon]
        pygame.draw.polygon(self.screen, fill, points)

    def _draw_sensor_rays(self, vehicle: VehicleSnapshot, focus_y: float) -> None:
        width = self.config.sensor_ray_width
        for (start, end), reading in zip(vehicle.rays, vehicle.readings):
            touch = reading.point if reading is not None else end
            start_screen = self._to_screen(start, focus_y)
            touch_screen = self._to_screen(touch, focus_y)
            pygame.draw.line(
                self.screen, self.config.sensor_ray_color, start_screen, touch_screen, width
            )
            pygame.draw.line(
                self.screen,
                self.config.sensor_blocked_color,
                self._to_screen(end, focus_y),
                touch_screen,
                width,
            )

    def _draw_network_panel(self, vehicle: VehicleSnapshot | None) -> None:
        config = self.config
        panel = pygame.Rect(
            config.road_panel_width, 0, config.network_panel_width, config.screen_height
        )
        pygame.draw.rect(self.screen, config.network_background, panel)
        if vehicle is None or not vehicle.network:
            return

        margin = config.network_margin
        left = panel.left + margin
        right = panel.right - margin
        top = panel.top + margin
        height = panel.height - margin * 2
        layers = vehicle.network
        layer_height = height / len(layers)

        for index, layer in enumerate(layers):
            layer_top = top + _node_center(len(layers), index, height - layer_height, 0)
            labels = OUTPUT_LABELS if index == len(layers) - 1 else None
            self._draw_layer(layer, left, right, layer_top, layer_top + layer_height, labels)

    def _draw_layer(
        self,
        layer: LayerState,
        left: float,
        right: float,
        top: float,
        bottom: float,
        labels: Sequence[str] | None,
    ) -> None:
        radius = self.config.node_radius
        input_count = len(layer.inputs)
        output_count = len(layer.outputs)
        background = self.config.network_background

        for i in range(input_count):
            for j in range(output_count):
                start = (int(_node_center(input_count, i, left, right)), int(bottom))
                end = (int(_node_center(output_count, j, left, right)), int(top))
                color = self._value_color(layer.weights[i][j], background)
                pygame.draw.line(self.screen, color, start, end, 2)

        for i, value in enumerate(layer.inputs):
            center = (int(_node_center(input_count, i, left, right)), int(bottom))
            pygame.draw.circle(self.screen, self._value_color(value, background), center, radius)
            pygame.draw.circle(self.screen, (90, 90, 90), center, radius, 1)

        for j, value in enumerate(layer.outputs):
            center = (int(_node_center(output_count, j, left, right)), int(top))
            pygame.draw.circle(
                self.screen, self._value_color(value, background), center, int(radius * 0.8)
            )
            pygame.draw.circle(
                self.screen, self._value_color(layer.biases[j], background), center, radius, 3
            )
            if labels is not None and j < len(labels):
                text_color = (0, 0, 0) if value == 1 else (200, 200, 200)
                text = self._label_font.render(labels[j], True, text_color)
                self.screen.blit(text, text.get_rect(center=center))

    def _value_color(self, value: float, background: Color) -> Color:
        """Yellow for positive and blue for negative values, faded by magnitude."""
        if value == 0:
            return background
        base = self.config.positive_color if value > 0 else self.config.negative_color
        alpha = min(abs(value), 1.0)
        return tuple(int(lerp(b, c, alpha)) for b, c in zip(background, base))  # type: ignore[return-value]

    def _draw_hud(self, snapshot: SimulationSnapshot) -> None:
        active = sum(1 for agent in snapshot.agents if not agent.collided)
        label = f"Step {snapshot.step_index}  Driving {active}/{len(snapshot.agents)}"
        text = self._font.render(label, True, self.config.hud_text_color)
        rect = text.get_rect()
        rect.topleft = (self.config.road_panel_width + 8, 8)
        self.screen.blit(text, rect)


def _node_center(count: int, index: int, left: float, right: float) -> float:
    return lerp(left, right, 0.5 if count == 1 else index / (count - 1))


__all__ = ["RenderConfig", "Renderer"]

"""Lightweight snapshots of simulation state for drawing and inspection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from .geometry import Segment, Touch, Vec2
from .network import NeuralNetwork


@dataclass(frozen=True)
class LayerState:
    """Parameters and the last inference buffers of one layer."""

    inputs: Tuple[float, ...]
    outputs: Tuple[float, ...]
    biases: Tuple[float, ...]
    weights: Tuple[Tuple[float, ...], ...]


@dataclass(frozen=True)
class VehicleSnapshot:
    kind: str
    center: Vec2
    heading: float
    speed: float
    width: float
    height: float
    polygon: Sequence[Vec2]
    collided: bool
    controls: Tuple[float, ...]
    rays: Sequence[Segment]
    readings: Sequence[Touch | None]
    network: Tuple[LayerState, ...] | None


@dataclass(frozen=True)
class SimulationSnapshot:
    """Everything a renderer needs for one frame."""

    step_index: int
    agents: Sequence[VehicleSnapshot]
    traffic: Sequence[VehicleSnapshot]
    borders: Sequence[Segment]
    lane_dividers: Sequence[float]
    best_index: int | None

    @property
    def best_agent(self) -> VehicleSnapshot | None:
        if self.best_index is None:
            return None
        return self.agents[self.best_index]


def network_snapshot(network: NeuralNetwork) -> Tuple[LayerState, ...]:
    return tuple(
        LayerState(
            inputs=tuple(float(value) for value in layer.inputs),
            outputs=tuple(float(value) for value in layer.outputs),
            biases=tuple(float(value) for value in layer.biases),
            weights=tuple(tuple(float(value) for value in row) for row in layer.weights),
        )
        for layer in network.layers
    )


__all__ = ["LayerState", "SimulationSnapshot", "VehicleSnapshot", "network_snapshot"]

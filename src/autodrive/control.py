"""Helpers for expressing vehicle control inputs without relying on pygame."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, Set

# Order of the network output channels.
CONTROL_CHANNELS = ("forward", "left", "right", "reverse")


@dataclass
class Controls:
    """Control magnitudes in [0, 1]; any positive value counts as pressed."""

    forward: float = 0.0
    reverse: float = 0.0
    left: float = 0.0
    right: float = 0.0

    def apply_outputs(self, outputs: Sequence[float]) -> None:
        """Overwrite the controls with network outputs in ``CONTROL_CHANNELS`` order."""
        if len(outputs) != len(CONTROL_CHANNELS):
            raise ValueError(
                f"expected {len(CONTROL_CHANNELS)} control outputs, got {len(outputs)}"
            )
        for name, value in zip(CONTROL_CHANNELS, outputs):
            setattr(self, name, _clamp(float(value)))

    def as_outputs(self) -> tuple[float, ...]:
        return tuple(getattr(self, name) for name in CONTROL_CHANNELS)

    def clear(self) -> None:
        self.forward = self.reverse = self.left = self.right = 0.0


def keys_to_controls(keys: Iterable[str], controls: Controls | None = None) -> Controls:
    """Convert the key strings produced by the input handler into controls."""
    active: Set[str] = set(keys)
    controls = controls if controls is not None else Controls()
    controls.forward = 1.0 if "up" in active else 0.0
    controls.reverse = 1.0 if "down" in active else 0.0
    controls.left = 1.0 if "left" in active else 0.0
    controls.right = 1.0 if "right" in active else 0.0
    return controls


def controls_to_keys(controls: Controls) -> Set[str]:
    keys: Set[str] = set()
    if controls.forward > 0:
        keys.add("up")
    if controls.reverse > 0:
        keys.add("down")
    if controls.left > 0:
        keys.add("left")
    if controls.right > 0:
        keys.add("right")
    return keys


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


__all__ = ["CONTROL_CHANNELS", "Controls", "controls_to_keys", "keys_to_controls"]

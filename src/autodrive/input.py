"""Keyboard state for steering a vehicle by hand."""

from __future__ import annotations

from typing import Dict, FrozenSet, Mapping, Set

import pygame

from .control import Controls, keys_to_controls

# Arrow keys and WASD both steer.
DEFAULT_KEY_BINDINGS: Dict[int, str] = {
    pygame.K_UP: "up",
    pygame.K_w: "up",
    pygame.K_DOWN: "down",
    pygame.K_s: "down",
    pygame.K_LEFT: "left",
    pygame.K_a: "left",
    pygame.K_RIGHT: "right",
    pygame.K_d: "right",
}


class InputHandler:
    """Tracks which steering keys are held down.

    Losing window focus releases every key, since the matching KEYUP
    events never arrive.
    """

    def __init__(self, bindings: Mapping[int, str] | None = None) -> None:
        self._bindings = dict(DEFAULT_KEY_BINDINGS if bindings is None else bindings)
        self._held: Set[str] = set()

    @property
    def held(self) -> FrozenSet[str]:
        return frozenset(self._held)

    def handle(self, event: pygame.event.Event) -> bool:
        """Update the held keys; returns True when the event was a steering key."""
        if event.type == pygame.WINDOWFOCUSLOST:
            self._held.clear()
            return False
        if event.type not in (pygame.KEYDOWN, pygame.KEYUP):
            return False
        name = self._bindings.get(event.key)
        if name is None:
            return False
        if event.type == pygame.KEYDOWN:
            self._held.add(name)
        else:
            self._held.discard(name)
        return True

    def controls(self) -> Controls:
        return keys_to_controls(self._held)

    def release_all(self) -> None:
        self._held.clear()


__all__ = ["DEFAULT_KEY_BINDINGS", "InputHandler"]

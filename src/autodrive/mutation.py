"""Mutation operator used to derive new brains from the best one so far."""

from __future__ import annotations

import logging
from typing import Any, Dict

import numpy as np

from .network import Layer, NeuralNetwork
from .persistence import network_from_dict, network_to_dict

logger = logging.getLogger(__name__)


def validate_mutation_amount(amount: float) -> float:
    """Return ``amount`` as a float, rejecting values outside [0, 1]."""
    value = float(amount)
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"mutation amount must lie in [0, 1], got {amount!r}")
    return value


def mutate(
    seed: NeuralNetwork,
    amount: float,
    rng: np.random.Generator | None = None,
) -> NeuralNetwork:
    """Return a new network whose parameters are blended toward random values.

    Every weight and bias ``v`` becomes ``lerp(v, U(-1, 1), amount)``: an
    amount of 0 reproduces the seed exactly and 1 replaces it entirely. The
    seed network is never modified. Amounts outside [0, 1] raise
    ``ValueError`` instead of extrapolating.
    """
    amount = validate_mutation_amount(amount)
    rng = rng if rng is not None else np.random.default_rng()

    layers = []
    for layer in seed.layers:
        biases = _blend(layer.biases, rng.uniform(-1.0, 1.0, size=layer.biases.shape), amount)
        weights = _blend(layer.weights, rng.uniform(-1.0, 1.0, size=layer.weights.shape), amount)
        layers.append(Layer(biases, weights))
    return NeuralNetwork(layers)


def mutate_serialized(
    payload: Dict[str, Any],
    amount: float,
    rng: np.random.Generator | None = None,
) -> Dict[str, Any]:
    """Mutate a persisted network representation and return a new one."""
    network = network_from_dict(payload)
    mutated = mutate(network, amount, rng)
    logger.debug("Mutated network %s with amount %.3f", network.shape, amount)
    return network_to_dict(mutated)


def _blend(values: np.ndarray, targets: np.ndarray, amount: float) -> np.ndarray:
    # Exact at amount 1; the lerp form can be off by one ulp.
    if amount == 1.0:
        return targets
    return values + (targets - values) * amount


__all__ = ["mutate", "mutate_serialized", "validate_mutation_amount"]

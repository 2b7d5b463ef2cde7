"""Step-threshold feedforward network used as a vehicle brain."""

from __future__ import annotations

from typing import List, Sequence

import numpy as np


class Layer:
    """Fully connected layer whose outputs are 1 when the weighted sum beats the bias.

    ``weights[i][j]`` is the influence of input ``i`` on output ``j``. The
    ``inputs`` and ``outputs`` buffers hold the values of the last call and
    are overwritten on every inference.
    """

    def __init__(self, biases: Sequence[float], weights: Sequence[Sequence[float]]) -> None:
        self.biases = np.array(biases, dtype=np.float64)
        self.weights = np.array(weights, dtype=np.float64)
        if self.biases.ndim != 1:
            raise ValueError("biases must be a flat vector")
        if self.weights.ndim != 2:
            raise ValueError("weights must be a matrix")
        if self.weights.shape[1] != self.biases.shape[0]:
            raise ValueError(
                f"weights have {self.weights.shape[1]} columns but there are "
                f"{self.biases.shape[0]} biases"
            )
        self.inputs = np.zeros(self.input_count, dtype=np.float64)
        self.outputs = np.zeros(self.output_count, dtype=np.float64)

    @classmethod
    def random(cls, rng: np.random.Generator, input_count: int, output_count: int) -> "Layer":
        """Return a layer with weights and biases drawn uniformly from [-1, 1]."""
        if input_count <= 0 or output_count <= 0:
            raise ValueError("layer sizes must be positive")
        weights = rng.uniform(-1.0, 1.0, size=(input_count, output_count))
        biases = rng.uniform(-1.0, 1.0, size=output_count)
        return cls(biases, weights)

    @property
    def input_count(self) -> int:
        return int(self.weights.shape[0])

    @property
    def output_count(self) -> int:
        return int(self.weights.shape[1])

    def feed_forward(self, inputs: Sequence[float]) -> np.ndarray:
        values = np.asarray(inputs, dtype=np.float64)
        if values.shape != (self.input_count,):
            raise ValueError(
                f"expected {self.input_count} inputs, got {values.shape[0] if values.ndim else 0}"
            )
        self.inputs[:] = values
        sums = self.inputs @ self.weights
        self.outputs[:] = np.where(sums > self.biases, 1.0, 0.0)
        return self.outputs.copy()

    def copy(self) -> "Layer":
        return Layer(self.biases.copy(), self.weights.copy())


class NeuralNetwork:
    """Ordered chain of layers; the last layer drives the vehicle controls."""

    def __init__(self, layers: Sequence[Layer]) -> None:
        if not layers:
            raise ValueError("a network needs at least one layer")
        for previous, current in zip(layers, layers[1:]):
            if previous.output_count != current.input_count:
                raise ValueError(
                    f"layer with {previous.output_count} outputs cannot feed a layer "
                    f"with {current.input_count} inputs"
                )
        self.layers: List[Layer] = list(layers)

    @classmethod
    def random(cls, shape: Sequence[int], rng: np.random.Generator | None = None) -> "NeuralNetwork":
        """Build a freshly randomized network, e.g. ``shape=(5, 6, 4)``."""
        if len(shape) < 2:
            raise ValueError("shape needs an input size and at least one layer size")
        rng = rng if rng is not None else np.random.default_rng()
        return cls([Layer.random(rng, m, n) for m, n in zip(shape, shape[1:])])

    @property
    def shape(self) -> tuple[int, ...]:
        return (self.layers[0].input_count,) + tuple(layer.output_count for layer in self.layers)

    def feed_forward(self, inputs: Sequence[float]) -> np.ndarray:
        outputs = self.layers[0].feed_forward(inputs)
        for layer in self.layers[1:]:
            outputs = layer.feed_forward(outputs)
        return outputs

    def clone(self) -> "NeuralNetwork":
        return NeuralNetwork([layer.copy() for layer in self.layers])


__all__ = ["Layer", "NeuralNetwork"]

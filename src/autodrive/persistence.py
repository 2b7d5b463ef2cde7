"""Utilities for storing and restoring network brains as JSON files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from .network import Layer, NeuralNetwork

logger = logging.getLogger(__name__)


class NetworkFormatError(ValueError):
    """Raised when persisted network data does not describe a valid network."""


class NetworkLoadError(RuntimeError):
    """Raised when a network file cannot be read or parsed."""


def network_to_dict(network: NeuralNetwork) -> Dict[str, Any]:
    return {
        "layers": [
            {
                "input_count": layer.input_count,
                "output_count": layer.output_count,
                "biases": layer.biases.tolist(),
                "weights": layer.weights.tolist(),
            }
            for layer in network.layers
        ]
    }


def network_from_dict(raw: Dict[str, Any]) -> NeuralNetwork:
    """Rebuild a network from its persisted form.

    Counts are optional because they follow from the array lengths; when
    present they must agree with them.
    """
    if not isinstance(raw, dict):
        raise NetworkFormatError("Network data must be a mapping")
    raw_layers = raw.get("layers")
    if not isinstance(raw_layers, list) or not raw_layers:
        raise NetworkFormatError("Network data must define a non-empty list of layers")

    layers: List[Layer] = []
    for index, raw_layer in enumerate(raw_layers):
        layers.append(_parse_layer(raw_layer, index))

    try:
        return NeuralNetwork(layers)
    except ValueError as exc:
        raise NetworkFormatError(str(exc)) from exc


def save_network(path: Path, network: NeuralNetwork) -> None:
    """Write the network to ``path`` through a temporary file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    temporary = path.with_suffix(path.suffix + ".tmp")
    temporary.write_text(json.dumps(network_to_dict(network), indent=2))
    temporary.replace(path)
    logger.info("Saved network %s to %s", network.shape, path)


def load_network(path: Path) -> NeuralNetwork:
    path = Path(path)
    try:
        raw = json.loads(path.read_text())
    except OSError as exc:
        raise NetworkLoadError(f"Failed to read network file {path!s}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise NetworkLoadError(f"Invalid JSON in network file {path!s}: {exc}") from exc

    try:
        network = network_from_dict(raw)
    except NetworkFormatError as exc:
        raise NetworkLoadError(f"Malformed network data in {path!s}: {exc}") from exc
    logger.info("Loaded network %s from %s", network.shape, path)
    return network


def discard_network(path: Path) -> bool:
    """Delete a stored network; returns whether a file was removed."""
    path = Path(path)
    if not path.exists():
        return False
    path.unlink()
    logger.info("Discarded network at %s", path)
    return True


def _parse_layer(raw: Any, index: int) -> Layer:
    label = f"layer {index}"
    if not isinstance(raw, dict):
        raise NetworkFormatError(f"{label} must be a mapping")

    biases = raw.get("biases")
    weights = raw.get("weights")
    if biases is None:
        raise NetworkFormatError(f"Missing biases for {label}")
    if weights is None:
        raise NetworkFormatError(f"Missing weights for {label}")

    try:
        bias_values = [float(value) for value in biases]
        weight_rows = [[float(value) for value in row] for row in weights]
        input_count = int(raw.get("input_count", len(weight_rows)))
        output_count = int(raw.get("output_count", len(bias_values)))
    except (TypeError, ValueError) as exc:
        raise NetworkFormatError(f"Non-numeric data in {label}: {exc}") from exc

    if input_count <= 0 or output_count <= 0:
        raise NetworkFormatError(f"{label} must have positive input and output counts")
    if len(weight_rows) != input_count:
        raise NetworkFormatError(
            f"{label} declares {input_count} inputs but has {len(weight_rows)} weight rows"
        )
    if len(bias_values) != output_count:
        raise NetworkFormatError(
            f"{label} declares {output_count} outputs but has {len(bias_values)} biases"
        )
    for row_index, row in enumerate(weight_rows):
        if len(row) != output_count:
            raise NetworkFormatError(
                f"{label} weight row {row_index} has {len(row)} values; expected {output_count}"
            )

    return Layer(bias_values, weight_rows)


__all__ = [
    "NetworkFormatError",
    "NetworkLoadError",
    "discard_network",
    "load_network",
    "network_from_dict",
    "network_to_dict",
    "save_network",
]

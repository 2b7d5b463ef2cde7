"""Road driving simulation with evolved step-threshold network brains."""

from .control import CONTROL_CHANNELS, Controls, keys_to_controls
from .evolution import (
    EvolutionConfig,
    EvolutionProgress,
    GenerationResult,
    load_progress,
    next_generation,
    run_generation,
    save_progress,
)
from .geometry import (
    Touch,
    lerp,
    polygon_intersection,
    polygons_intersect,
    segment_intersection,
)
from .mutation import mutate, mutate_serialized, validate_mutation_amount
from .network import Layer, NeuralNetwork
from .persistence import (
    NetworkFormatError,
    NetworkLoadError,
    discard_network,
    load_network,
    network_from_dict,
    network_to_dict,
    save_network,
)
from .road import Road
from .runtime import SimulationConfig, SimulationSession
from .sensor import Sensor, SensorConfig
from .simulation import BUSY_TRAFFIC, Simulation, WorldConfig
from .state import LayerState, SimulationSnapshot, VehicleSnapshot
from .vehicle import (
    DriverKind,
    KinematicsConfig,
    ManualDriver,
    NetworkDriver,
    TrafficDriver,
    Vehicle,
)

__all__ = [
    "BUSY_TRAFFIC",
    "CONTROL_CHANNELS",
    "Controls",
    "DriverKind",
    "EvolutionConfig",
    "EvolutionProgress",
    "GenerationResult",
    "KinematicsConfig",
    "Layer",
    "LayerState",
    "ManualDriver",
    "NetworkDriver",
    "NetworkFormatError",
    "NetworkLoadError",
    "NeuralNetwork",
    "Road",
    "Sensor",
    "SensorConfig",
    "Simulation",
    "SimulationConfig",
    "SimulationSession",
    "SimulationSnapshot",
    "Touch",
    "TrafficDriver",
    "Vehicle",
    "VehicleSnapshot",
    "WorldConfig",
    "discard_network",
    "keys_to_controls",
    "lerp",
    "load_network",
    "load_progress",
    "mutate",
    "mutate_serialized",
    "network_from_dict",
    "network_to_dict",
    "next_generation",
    "polygon_intersection",
    "polygons_intersect",
    "run_generation",
    "save_network",
    "save_progress",
    "segment_intersection",
    "validate_mutation_amount",
]

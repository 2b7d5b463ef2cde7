"""Generation seeding, selection and training progress for evolved brains."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import numpy as np

from .mutation import mutate, validate_mutation_amount
from .network import NeuralNetwork
from .runtime import SimulationSession

logger = logging.getLogger(__name__)

DEFAULT_HISTORY = 200


@dataclass(frozen=True)
class EvolutionConfig:
    population_size: int = 100
    mutation_amount: float = 0.1
    max_steps: int = 2000
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.population_size <= 0:
            raise ValueError("population_size must be positive")
        validate_mutation_amount(self.mutation_amount)


@dataclass(frozen=True)
class GenerationResult:
    best_network: NeuralNetwork
    best_fitness: float
    steps: int
    survivors: int


def next_generation(
    best: NeuralNetwork,
    size: int,
    amount: float,
    rng: np.random.Generator | None = None,
) -> List[NeuralNetwork]:
    """Seed a population from the best brain.

    The first member is an exact copy so the best brain so far keeps
    competing; the others are mutations of it.
    """
    if size <= 0:
        raise ValueError("size must be positive")
    amount = validate_mutation_amount(amount)
    rng = rng if rng is not None else np.random.default_rng()
    population = [best.clone()]
    population.extend(mutate(best, amount, rng) for _ in range(size - 1))
    return population


def run_generation(session: SimulationSession) -> GenerationResult:
    """Run the session until it finishes and report its best agent."""
    snapshot = session.run()
    simulation = session.simulation
    best = simulation.best_agent()
    if best.network is None:
        raise RuntimeError("the best agent has no network to evolve")
    survivors = simulation.active_agent_count()
    result = GenerationResult(
        best_network=best.network.clone(),
        best_fitness=simulation.fitness(best),
        steps=snapshot.step_index,
        survivors=survivors,
    )
    logger.info(
        "Generation finished after %d steps: best fitness %.1f, %d survivors",
        result.steps,
        result.best_fitness,
        result.survivors,
    )
    return result


@dataclass
class EvolutionProgress:
    """Training statistics that survive between runs of ``train.py``.

    ``stalled_generations`` counts generations since the best fitness last
    improved; ``fitness_history`` keeps the most recent ``history_limit``
    generation bests.
    """

    generations_completed: int = 0
    total_steps: int = 0
    best_fitness: float | None = None
    stalled_generations: int = 0
    fitness_history: List[float] = field(default_factory=list)
    history_limit: int = DEFAULT_HISTORY

    def record(self, result: GenerationResult) -> bool:
        """Fold a finished generation in; returns True on a new best fitness."""
        self.generations_completed += 1
        self.total_steps += result.steps
        improved = self.best_fitness is None or result.best_fitness > self.best_fitness
        if improved:
            self.best_fitness = result.best_fitness
            self.stalled_generations = 0
        else:
            self.stalled_generations += 1
        self.fitness_history.append(result.best_fitness)
        del self.fitness_history[: -self.history_limit]
        return improved

    def to_dict(self) -> dict:
        return {
            "generations_completed": self.generations_completed,
            "total_steps": self.total_steps,
            "best_fitness": self.best_fitness,
            "stalled_generations": self.stalled_generations,
            "fitness_history": list(self.fitness_history),
            "history_limit": self.history_limit,
        }

    @classmethod
    def from_dict(cls, payload: dict | None) -> "EvolutionProgress":
        if not payload:
            return cls()
        best = payload.get("best_fitness")
        limit = int(payload.get("history_limit", DEFAULT_HISTORY))
        history = [float(value) for value in payload.get("fitness_history", [])]
        return cls(
            generations_completed=int(payload.get("generations_completed", 0)),
            total_steps=int(payload.get("total_steps", 0)),
            best_fitness=float(best) if best is not None else None,
            stalled_generations=int(payload.get("stalled_generations", 0)),
            fitness_history=history[-limit:],
            history_limit=limit,
        )


def load_progress(path: Path | None) -> EvolutionProgress:
    """Read a checkpoint; missing or unreadable files start a fresh record."""
    if path is None or not path.exists():
        return EvolutionProgress()
    try:
        data = json.loads(path.read_text())
        return EvolutionProgress.from_dict(data)
    except (OSError, json.JSONDecodeError, AttributeError, TypeError, ValueError) as exc:
        logger.warning("Ignoring unreadable progress file %s: %s", path, exc)
        return EvolutionProgress()


def save_progress(path: Path | None, progress: EvolutionProgress) -> None:
    """Write the checkpoint through a temporary file so a crash never truncates it."""
    if path is None:
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    temporary = path.with_suffix(path.suffix + ".tmp")
    temporary.write_text(json.dumps(progress.to_dict(), indent=2) + "\n")
    temporary.replace(path)


__all__ = [
    "EvolutionConfig",
    "EvolutionProgress",
    "GenerationResult",
    "load_progress",
    "next_generation",
    "run_generation",
    "save_progress",
]

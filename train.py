"""Headless evolutionary training of the network brains."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import numpy as np
from tqdm import tqdm

from autodrive import (
    BUSY_TRAFFIC,
    EvolutionConfig,
    NetworkLoadError,
    SimulationConfig,
    SimulationSession,
    WorldConfig,
    load_network,
    load_progress,
    next_generation,
    run_generation,
    save_network,
    save_progress,
)
from autodrive.logging_setup import setup_logging

logger = logging.getLogger("autodrive.train")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Evolve driving brains by mutation.")
    parser.add_argument("--generations", type=int, default=20, help="Generations to run.")
    parser.add_argument("--population", type=int, default=100, help="Agents per generation.")
    parser.add_argument(
        "--mutation", type=float, default=0.1, help="Mutation amount in [0, 1]."
    )
    parser.add_argument(
        "--max-steps", type=int, default=2000, help="Tick budget of one generation."
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed.")
    parser.add_argument(
        "--brain",
        type=Path,
        default=Path("artifacts/best_brain.json"),
        help="Where the best brain is loaded from and saved to.",
    )
    parser.add_argument(
        "--checkpoint",
        type=Path,
        default=Path("artifacts/training_progress.json"),
        help="JSON checkpoint storing aggregated training progress.",
    )
    parser.add_argument("--log-file", type=Path, default=None, help="Optional log file.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    setup_logging(log_file=args.log_file)
    config = EvolutionConfig(
        population_size=args.population,
        mutation_amount=args.mutation,
        max_steps=args.max_steps,
        seed=args.seed,
    )

    rng = np.random.default_rng(config.seed)
    world = WorldConfig(agent_count=config.population_size, traffic=BUSY_TRAFFIC)
    progress = load_progress(args.checkpoint)

    best = None
    networks = None
    if args.brain.exists():
        try:
            best = load_network(args.brain)
        except NetworkLoadError as exc:
            logger.warning("%s; starting from random brains", exc)
        else:
            networks = next_generation(best, config.population_size, config.mutation_amount, rng)

    session = SimulationSession(
        world,
        config=SimulationConfig(max_steps=config.max_steps),
        networks=networks,
        rng=rng,
    )

    pbar = tqdm(range(args.generations), desc="Generations")
    for _ in pbar:
        result = run_generation(session)
        improved = progress.record(result)
        pbar.set_postfix(
            best=f"{progress.best_fitness:.1f}",
            last=f"{result.best_fitness:.1f}",
            stalled=progress.stalled_generations,
        )
        if improved or best is None:
            best = result.best_network
            save_network(args.brain, best)
        save_progress(args.checkpoint, progress)
        networks = next_generation(best, config.population_size, config.mutation_amount, rng)
        session.reset(networks)
    pbar.close()
    logger.info(
        "Trained %d generations in total, best fitness %s",
        progress.generations_completed,
        progress.best_fitness,
    )


if __name__ == "__main__":
    main()

"""Entry point running the road simulation interactively with pygame."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import numpy as np
import pygame

from autodrive import (
    BUSY_TRAFFIC,
    DriverKind,
    NetworkLoadError,
    SimulationSession,
    WorldConfig,
    discard_network,
    load_network,
    next_generation,
    save_network,
    validate_mutation_amount,
)
from autodrive.input import InputHandler
from autodrive.logging_setup import setup_logging
from autodrive.render import RenderConfig, Renderer

logger = logging.getLogger("autodrive.main")

DEFAULT_BRAIN = "artifacts/best_brain.json"


def main() -> None:
    args = _parse_args()
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        mutation_amount = validate_mutation_amount(args.mutation)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        sys.exit(2)

    world = WorldConfig(
        agent_count=args.agents,
        agent_driver=DriverKind.MANUAL if args.manual else DriverKind.NETWORK,
        traffic=BUSY_TRAFFIC,
    )
    rng = np.random.default_rng(args.seed)
    networks = None
    if not args.manual and args.brain.exists():
        try:
            best = load_network(args.brain)
        except NetworkLoadError as exc:
            logger.warning("%s; starting from random brains", exc)
        else:
            networks = next_generation(best, args.agents, mutation_amount, rng)

    session = SimulationSession(world, networks=networks, rng=rng)

    pygame.init()
    config = RenderConfig()
    screen = pygame.display.set_mode(config.screen_size)
    pygame.display.set_caption("autodrive")
    renderer = Renderer(screen, config)
    input_handler = InputHandler()
    clock = pygame.time.Clock()

    running = True
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                running = False
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_F5:
                _save_best(session, args.brain)
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_F8:
                discard_network(args.brain)
            else:
                input_handler.handle(event)

        snapshot = session.step(input_handler.held)
        renderer.draw(snapshot)
        clock.tick(60)

    pygame.quit()
    sys.exit(0)


def _save_best(session: SimulationSession, path: Path) -> None:
    best = session.simulation.best_agent()
    if best.network is None:
        logger.info("Manual driving has no brain to save")
        return
    save_network(path, best.network)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Road driving simulation")
    parser.add_argument("--agents", type=int, default=100, help="Parallel learning agents")
    parser.add_argument(
        "--mutation",
        type=float,
        default=0.1,
        help="Mutation amount in [0, 1] applied to the saved brain",
    )
    parser.add_argument(
        "--brain",
        type=Path,
        default=Path(DEFAULT_BRAIN),
        help="Brain file to seed from; F5 saves the best agent, F8 discards it",
    )
    parser.add_argument("--manual", action="store_true", help="Drive a single car with the arrow keys")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--verbose", action="store_true", help="Log collisions")
    return parser.parse_args()


if __name__ == "__main__":
    main()

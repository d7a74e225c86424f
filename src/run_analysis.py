from __future__ import annotations

import argparse
import logging
from typing import Iterable

from ca_spatial import AnalysisApp, AnalysisConfig, SimulationConfig, available_statistics
from ca_spatial.predicate import parse_predicate


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run a cellular automaton and report its spatial statistics."
    )
    parser.add_argument("--size", type=int, default=SimulationConfig.grid_size,
                        help="Lattice rows and columns.")
    parser.add_argument("--two-dim", action="store_true",
                        help="Use a 2-D lattice (default rule becomes Life).")
    parser.add_argument("--rule", default=None,
                        help="Elementary rule number, or 'life'.")
    parser.add_argument("--seed", default=SimulationConfig.seed_pattern,
                        help="Seed pattern: single_seed, center or full.")
    parser.add_argument("--generations", type=int, default=SimulationConfig.generations)
    parser.add_argument("--state", default="occupied",
                        help="Cells to analyse: all, occupied, empty or an integer state.")
    parser.add_argument("--stat", action="append", choices=available_statistics(),
                        help="Statistic to run (repeatable).")
    parser.add_argument("--top-k", type=int, default=1)
    parser.add_argument("--figure", default=None, help="Save a summary figure here.")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(list(argv) if argv is not None else None)


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    rule = args.rule or ("life" if args.two_dim else SimulationConfig.rule)
    cfg = SimulationConfig(
        grid_size=args.size,
        one_dim=not args.two_dim,
        rule=rule,
        seed_pattern=args.seed,
        generations=args.generations,
        analysis=AnalysisConfig(predicate=parse_predicate(args.state), top_k=args.top_k),
        figure_path=args.figure,
    )
    if args.stat:
        cfg.statistics = tuple(args.stat)
    AnalysisApp(cfg).run()


if __name__ == "__main__":
    main()

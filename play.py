from __future__ import annotations

import argparse
from collections import Counter
from typing import Any, Dict, List

from config import SearchConfig, setup_logging, weight_table_names
from versus.match import EnginePlayer, RandomPlayer, play_game
from versus.types import SYMBOLS


def parse_args() -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Play engine matches for the drop or flip game")
    ap.add_argument("--game", choices=["drop", "flip"], default="drop", help="Which game to play")
    ap.add_argument("--games", type=int, default=1, help="Number of games to play")
    ap.add_argument("--opponent", choices=["engine", "random"], default="random",
                    help="Who plays second")
    ap.add_argument("--depth", type=int, default=None, help="Fixed search depth (default: per game policy)")
    ap.add_argument("--weights", choices=weight_table_names(), default=None,
                    help="Named weight table; must match --game")
    ap.add_argument("--no-alpha-beta", action="store_true", help="Disable pruning")
    ap.add_argument("--seed", type=int, default=None, help="Seed for the random opponent")
    ap.add_argument("--show", action="store_true", help="Print the final board of each game")
    args = ap.parse_args()
    if args.weights is not None and not args.weights.startswith(args.game + "."):
        ap.error(f"--weights {args.weights} is not a {args.game} table")
    return args


def main() -> None:
    setup_logging()
    args = parse_args()

    overrides: Dict[str, Any] = {"alpha_beta": not args.no_alpha_beta}
    if args.depth is not None:
        overrides["depth"] = args.depth
    if args.weights is not None:
        overrides["weights"] = args.weights
    config = SearchConfig.for_game(args.game, **overrides)

    results: List[str] = []
    for i in range(args.games):
        second = EnginePlayer(config) if args.opponent == "engine" else RandomPlayer(
            None if args.seed is None else args.seed + i)
        record = play_game(args.game, (EnginePlayer(config), second), config)
        print(f"[{i + 1}/{args.games}] {record.summary()}")
        if args.show:
            print(record.board.render())
        results.append("draw" if not record.winner else SYMBOLS[record.winner])

    tally = Counter(results)
    print(f"X: {tally['X']}  O: {tally['O']}  draws: {tally['draw']}")


if __name__ == "__main__":
    main()

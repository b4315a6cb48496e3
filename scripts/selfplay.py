#!/usr/bin/env python3
"""Let a UCI engine play against itself.

Each ply the engine's best move is recorded into the running game and the
engine is asked for its reply, so the whole game is re-sent as one
``position startpos moves ...`` line before every search.

Usage:
    # Engine and limits from a config file
    uv run python scripts/selfplay.py --config configs/pikafish.yaml

    # OmegaConf-style overrides after the options
    uv run python scripts/selfplay.py engine.path=/opt/pikafish search.depth=10 engine.threads=4

    # Longer game, show the board FEN at the end
    uv run python scripts/selfplay.py --plies 120 --show-fen engine.path=/opt/pikafish
"""

import argparse

from loguru import logger
from rich.console import Console
from rich.table import Table
from tqdm import tqdm

from ucilink.configs import load_config
from ucilink.engine import UCIEngine, UCIEngineError
from ucilink.utils import setup_logging

console = Console()


def play_game(engine: UCIEngine, plies: int, depth: int | None, movetime: int | None) -> list[str]:
    """Play up to ``plies`` moves, stopping early when the engine has no move."""
    result = engine.search(depth=depth, movetime=movetime)
    for _ in tqdm(range(plies), desc="plies", unit="ply"):
        if result is None:
            logger.info(f"No move after {len(engine.moves)} plies, game over")
            break
        result = engine.play(result.move, depth=depth, movetime=movetime)
    return list(engine.moves)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--config", "-c", default=None, help="YAML config file")
    parser.add_argument("--plies", type=int, default=60, help="Maximum number of plies")
    parser.add_argument("--show-fen", action="store_true", help="Print the final board as FEN")
    parser.add_argument("overrides", nargs="*", help="Config overrides, e.g. search.depth=8")
    args = parser.parse_args()

    cfg = load_config(args.config, args.overrides)
    setup_logging(cfg.log_level, protocol_log=cfg.protocol_log)

    try:
        with UCIEngine(
            cfg.engine.path,
            cfg.engine.args,
            timeout=cfg.engine.timeout,
            banner_timeout=cfg.engine.banner_timeout,
            stop_timeout=cfg.engine.stop_timeout,
        ) as engine:
            engine.begin_new_game(cfg.engine.threads, cfg.engine.hash_mb)
            moves = play_game(engine, args.plies, cfg.search.depth, cfg.search.movetime)
            fen = engine.fen() if args.show_fen else None
    except UCIEngineError as e:
        logger.error(f"Self-play aborted: {e}")
        raise SystemExit(1) from e

    table = Table(title=f"{engine.name} self-play ({len(moves)} plies)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("First", style="bold")
    table.add_column("Second", style="bold")
    for i in range(0, len(moves), 2):
        table.add_row(str(i // 2 + 1), moves[i], moves[i + 1] if i + 1 < len(moves) else "")
    console.print(table)
    if fen is not None:
        console.print(f"FEN: {fen}")


if __name__ == "__main__":
    main()

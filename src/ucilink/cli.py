"""Command-line interface for ucilink."""

from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from ucilink import __version__
from ucilink.configs import SessionConfig, load_config
from ucilink.engine import UCIEngine, UCIEngineError
from ucilink.utils import setup_logging

app = typer.Typer(
    name="ucilink",
    help="ucilink: talk to UCI chess engines",
    add_completion=False,
)
console = Console()


def _load(engine: str | None, config: Path | None, overrides: list[str], verbose: bool) -> SessionConfig:
    """Merge config file, --set overrides and the positional engine path."""
    dotlist = list(overrides)
    if verbose:
        dotlist.append("log_level=DEBUG")
    cfg = load_config(config, dotlist)
    if engine is not None:
        cfg.engine.path = engine
    setup_logging(cfg.log_level, protocol_log=cfg.protocol_log)
    return cfg


def _start(cfg: SessionConfig) -> UCIEngine:
    return UCIEngine(
        cfg.engine.path,
        cfg.engine.args,
        timeout=cfg.engine.timeout,
        banner_timeout=cfg.engine.banner_timeout,
        stop_timeout=cfg.engine.stop_timeout,
    )


@app.command()
def version() -> None:
    """Print version information."""
    console.print(f"[bold blue]ucilink[/bold blue] v{__version__}")


@app.command()
def info(
    engine: str | None = typer.Argument(None, help="Path to the UCI engine executable (default: engine.path)"),
    config: Path | None = typer.Option(None, "--config", "-c", help="YAML config file"),
    overrides: list[str] = typer.Option([], "--set", "-s", help="Config override, e.g. engine.timeout=5"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Show the engine's banner, identity and options."""
    cfg = _load(engine, config, overrides, verbose)
    try:
        with _start(cfg) as session:
            console.print(f"[bold]{session.name}[/bold]")
            if session.info.author:
                console.print(f"by {session.info.author}")
            if session.banner:
                console.print(f"[dim]{session.banner}[/dim]")

            table = Table(title="Options")
            table.add_column("Name", style="cyan")
            table.add_column("Type")
            table.add_column("Default", style="green")
            for option in session.info.options.values():
                table.add_row(option.name, option.type, option.default or "")
            console.print(table)
    except UCIEngineError as e:
        logger.error(str(e))
        console.print(f"[bold red]Engine error:[/bold red] {e}")
        raise typer.Exit(code=1) from e


@app.command()
def bestmove(
    engine: str | None = typer.Argument(None, help="Path to the UCI engine executable (default: engine.path)"),
    moves: list[str] = typer.Option([], "--move", "-m", help="Move played from the start position (repeatable)"),
    fen: str | None = typer.Option(None, "--fen", help="Search this FEN instead of the move list"),
    depth: int | None = typer.Option(None, "--depth", "-d", help="Search depth"),
    movetime: int | None = typer.Option(None, "--movetime", "-t", help="Search time in milliseconds"),
    threads: int | None = typer.Option(None, "--threads", help="Engine threads"),
    hash_mb: int | None = typer.Option(None, "--hash", help="Hash size in MB"),
    show_fen: bool = typer.Option(False, "--show-fen", help="Also print the engine's board as FEN"),
    config: Path | None = typer.Option(None, "--config", "-c", help="YAML config file"),
    overrides: list[str] = typer.Option([], "--set", "-s", help="Config override, e.g. search.depth=12"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Start a game, play the given moves and print the engine's best reply."""
    cfg = _load(engine, config, overrides, verbose)
    threads = threads if threads is not None else cfg.engine.threads
    hash_mb = hash_mb if hash_mb is not None else cfg.engine.hash_mb
    depth = depth if depth is not None else cfg.search.depth
    movetime = movetime if movetime is not None else cfg.search.movetime

    try:
        with _start(cfg) as session:
            session.begin_new_game(threads, hash_mb)
            for move in moves:
                session.record_move(move)
            result = session.search(fen=fen, depth=depth, movetime=movetime)
            board = session.fen() if show_fen else None
    except (UCIEngineError, ValueError) as e:
        logger.error(str(e))
        console.print(f"[bold red]Engine error:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    if result is None:
        console.print("[yellow]Engine returned no move[/yellow]")
        raise typer.Exit(code=1)

    table = Table(title=session.name)
    table.add_column("Best", style="bold green")
    table.add_column("Ponder", style="cyan")
    table.add_row(result.move, result.ponder or "-")
    console.print(table)
    if board is not None:
        console.print(f"FEN: {board}")


if __name__ == "__main__":
    app()

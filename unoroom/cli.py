"""CLI entry point."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import typer
from dotenv import load_dotenv

from unoroom.config import ServerConfig
from unoroom.logging_config import setup_logging

if TYPE_CHECKING:
    from unoroom.agent.protocol import AgentProtocol

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(help="UNO rules engine and room relay")


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="DEBUG, INFO, WARNING or ERROR"),
) -> None:
    setup_logging(level=log_level, environment="development")


def _parse_agents(agent_specs: str, seed: Optional[int]) -> dict[str, "AgentProtocol"]:
    from unoroom.agents.human_agent import HumanAgent
    from unoroom.agents.random_agent import RandomAgent

    parts = [s.strip().lower() for s in agent_specs.split(",") if s.strip()]
    if not 2 <= len(parts) <= 4:
        raise typer.BadParameter("UNO needs 2-4 agents.")

    agents: dict[str, AgentProtocol] = {}
    for i, kind in enumerate(parts):
        pid = f"player_{i}"
        if kind == "random":
            agents[pid] = RandomAgent(name=f"Bot_{i}", seed=None if seed is None else seed + i)
        elif kind == "human":
            agents[pid] = HumanAgent(name=f"Human_{i}")
        else:
            raise typer.BadParameter(f"Unknown agent type: {kind}. Use 'random' or 'human'.")
    return agents


@app.command()
def play(
    agents: str = typer.Option(
        "random,random,random,random",
        "--agents",
        "-a",
        help="Comma-separated agent types: random or human (e.g. human,random,random)",
    ),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Random seed"),
    max_turns: int = typer.Option(1000, "--max-turns", help="Stop a game after this many turns"),
    show_history: bool = typer.Option(False, "--history", help="Print the game log"),
) -> None:
    """Run a single UNO game."""
    from unoroom.orchestration.game_runner import GameRunner

    agent_map = _parse_agents(agents, seed)
    runner = GameRunner(agent_map, seed=seed, max_turns=max_turns)
    result = runner.run()
    if show_history:
        for line in result.final_state.history:
            typer.echo(f"> {line}")
    typer.echo(f"Winner: {result.winner or 'None (draw)'}")
    typer.echo(f"Turns: {result.num_turns}")


@app.command()
def soak(
    games: int = typer.Option(100, "--games", "-g", help="Number of games"),
    players: int = typer.Option(4, "--players", "-n", min=2, max=4, help="Bots per game"),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Random seed"),
    max_turns: int = typer.Option(1000, "--max-turns", help="Stop a game after this many turns"),
) -> None:
    """Play many bot games and check card conservation and turn order after every action."""
    from unoroom.orchestration.soak import run_soak

    report = run_soak(num_games=games, num_players=players, seed=seed, max_turns=max_turns)
    typer.echo(f"Games: {report.games} ({report.finished} finished)")
    typer.echo(f"Actions checked: {report.actions}")
    for line in report.violations:
        typer.echo(f"  {line}", err=True)
    if not report.ok:
        typer.echo(f"{len(report.violations)} invariant violations", err=True)
        raise typer.Exit(code=1)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default: $HOST)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port (default: $PORT or 3001)"),
) -> None:
    """Run the websocket room relay."""
    import uvicorn

    from unoroom.relay.server import create_app

    config = ServerConfig.from_env()
    setup_logging(level=config.log_level, environment=config.environment)
    uvicorn.run(
        create_app(config),
        host=host or config.host,
        port=port or config.port,
        log_config=None,
    )


if __name__ == "__main__":
    app()

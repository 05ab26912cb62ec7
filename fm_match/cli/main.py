#!/usr/bin/env python3
"""FM Match live round viewer.

Rich-based terminal view of a round of demo fixtures played minute by minute.
Usage:
    fm-match --teams 8 --seed 7
    fm-match --manager club-1 --round 12 --total-rounds 14
"""

import argparse
import logging
import random
import time
from typing import Sequence

from rich.console import Console, Group
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from fm_match.cli.squads import build_demo_league, build_round_fixtures
from fm_match.core.config import get_settings
from fm_match.core.logging import configure_logging
from fm_match.core.models import MatchEventType, MatchPhase, TeamControl
from fm_match.engine.multi_match import (
    LiveMatchState,
    all_at_half_time,
    create_multi_match_state,
    match_state_to_result,
    resume_all_from_half_time,
    simulate_all_matches_step,
)
from fm_match.engine.trace import TraceConfig, TraceRecord

logger = logging.getLogger(__name__)

console = Console()

EVENT_STYLES = {
    MatchEventType.GOAL: "bold yellow",
    MatchEventType.OWN_GOAL: "bold yellow",
    MatchEventType.PENALTY_SCORED: "bold yellow",
    MatchEventType.PENALTY_MISSED: "magenta",
    MatchEventType.RED_CARD: "bold red",
    MatchEventType.YELLOW_CARD: "yellow",
    MatchEventType.SUBSTITUTION: "cyan",
}

PHASE_LABELS = {
    MatchPhase.FIRST_HALF: "1st",
    MatchPhase.HALF_TIME: "HT",
    MatchPhase.SECOND_HALF: "2nd",
    MatchPhase.FULL_TIME: "FT",
}


def render_round(matches: Sequence[LiveMatchState], round_number: int) -> Table:
    """Scoreboard of every fixture in the round."""
    table = Table(title=f"Round {round_number}", expand=True)
    table.add_column("", width=4)
    table.add_column("Home", style="bold blue", justify="right")
    table.add_column("Score", justify="center", style="bold")
    table.add_column("Away", style="bold red")
    table.add_column("Min", justify="right")
    table.add_column("Latest")

    for match in matches:
        state = match.simulation.state
        latest = match.latest_event
        latest_text = ""
        if latest is not None and latest.event_type != MatchEventType.KICKOFF:
            style = EVENT_STYLES.get(latest.event_type, "dim")
            latest_text = f"[{style}]{latest.minute}' {escape(latest.description)}[/]"

        home_name = match.home_team.name
        away_name = match.away_team.name
        if match.home_control == TeamControl.HUMAN:
            home_name = f"* {home_name}"
        if match.away_control == TeamControl.HUMAN:
            away_name = f"{away_name} *"

        table.add_row(
            PHASE_LABELS[match.phase],
            home_name,
            state.score_string(),
            away_name,
            f"{state.minute}'",
            latest_text,
        )
    return table


def render_feed(lines: Sequence[str]) -> Panel:
    return Panel("\n".join(lines) or "[dim]Waiting for kick-off...[/]", title="Events", border_style="blue")


def play_round(
    matches: list[LiveMatchState],
    round_number: int,
    tick_seconds: float,
    feed_size: int = 10,
) -> None:
    """Drive every match to full time inside a live display."""
    feed: list[str] = []
    names = {m.fixture_id: m for m in matches}

    def view():
        return Group(render_round(matches, round_number), render_feed(feed[-feed_size:]))

    with Live(view(), console=console, refresh_per_second=20) as live:
        while True:
            step = simulate_all_matches_step(matches)
            for fixture_id, event in step.events:
                if event.event_type in EVENT_STYLES:
                    match = names[fixture_id]
                    style = EVENT_STYLES[event.event_type]
                    feed.append(
                        f"[{style}]{event.minute}'[/] "
                        f"[dim]{match.home_team.short_name}-{match.away_team.short_name}[/] "
                        f"{escape(event.description)}"
                    )
            if step.finished:
                live.update(view())
                break
            if all_at_half_time(matches):
                feed.append("[bold]Half time around the grounds[/]")
                resume_all_from_half_time(matches)
            live.update(view())
            if tick_seconds > 0:
                time.sleep(tick_seconds)


def print_results(matches: Sequence[LiveMatchState]) -> None:
    table = Table(title="Full-time results")
    table.add_column("Home", style="bold")
    table.add_column("Score", justify="center")
    table.add_column("Away", style="bold")
    table.add_column("Attendance", justify="right")
    for match in matches:
        result = match_state_to_result(match)
        table.add_row(
            match.home_team.name,
            result.score_string,
            match.away_team.name,
            f"{result.attendance:,}",
        )
    console.print(table)


def _trace_printer(record: TraceRecord) -> None:
    console.print(f"[dim]trace {record.minute}' {record.type.value} {record.team or ''} {record.outcome}[/]")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Play a round of demo fixtures live in the terminal",
    )
    parser.add_argument("--teams", type=int, default=8, help="Number of demo clubs")
    parser.add_argument("--seed", type=int, default=settings.random_seed, help="Random seed")
    parser.add_argument("--round", type=int, default=1, dest="round_number", help="Round number")
    parser.add_argument("--total-rounds", type=int, default=None, help="Rounds in the season")
    parser.add_argument("--manager", default=None, help="Club id under human control")
    parser.add_argument(
        "--tick",
        type=float,
        default=settings.live_tick_seconds,
        help="Seconds between simulated minutes",
    )
    parser.add_argument("--trace", action="store_true", help="Print trace records")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(settings, console=console)

    if args.teams < 2:
        console.print("[red]Need at least two clubs[/]")
        return 1

    seed = args.seed if args.seed is not None else random.randrange(1_000_000)
    total_rounds = args.total_rounds or (args.teams - 1) * 2
    teams = build_demo_league(seed, args.teams)
    fixtures = build_round_fixtures(teams, args.round_number)

    trace = None
    if args.trace or settings.trace_enabled:
        trace = TraceConfig.from_settings(settings, sink=_trace_printer)
        trace.enabled = True

    matches = create_multi_match_state(
        fixtures,
        {t.id: t for t in teams},
        player_team_id=args.manager,
        player_tactics=None,
        rng=random.Random(seed),
        current_round=args.round_number,
        total_rounds=total_rounds,
        trace=trace,
    )
    logger.info("Seed %d, round %d of %d", seed, args.round_number, total_rounds)

    console.print(Panel(
        f"[bold green]{settings.app_name}[/] round {args.round_number}\n"
        f"[dim]{len(matches)} fixtures, seed {seed}[/]",
        border_style="green",
    ))
    play_round(matches, args.round_number, args.tick)
    print_results(matches)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

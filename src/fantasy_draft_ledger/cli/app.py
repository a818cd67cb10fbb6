from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer

from fantasy_draft_ledger.cli._logging import configure_logging
from fantasy_draft_ledger.cli._output import (
    console,
    print_board,
    print_budget_summary,
    print_error,
    print_formations,
    print_import_report,
    print_league,
    print_league_list,
    print_lineup,
    print_lineup_list,
    print_members,
    print_participant_players,
    print_participants,
    print_reset_counts,
    print_state,
)
from fantasy_draft_ledger.cli.factory import build_ledger_context
from fantasy_draft_ledger.config import LedgerSettings, create_config, load_settings
from fantasy_draft_ledger.domain.draft_state import DraftStatus
from fantasy_draft_ledger.domain.league import GameMode
from fantasy_draft_ledger.domain.tier import ImportMode, Tier
from fantasy_draft_ledger.exceptions import LedgerException
from fantasy_draft_ledger.ingest.csv_source import CsvSource
from fantasy_draft_ledger.services.container import LedgerContainer
from fantasy_draft_ledger.services.draft_ledger import DraftFilters

app = typer.Typer(name="fdl", help="Fantasy draft ledger: track an auction draft per league member")


@dataclass(frozen=True)
class CliState:
    settings: LedgerSettings
    user_id: int | None


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    user: Annotated[int | None, typer.Option("--user", "-u", envvar="FDL_USER", help="Acting user id")] = None,
    db: Annotated[Path | None, typer.Option("--db", help="Ledger database path")] = None,
    config_file: Annotated[str, typer.Option("--config", help="YAML config file")] = "fdl.yaml",
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable DEBUG logging")] = False,
) -> None:
    """Fantasy draft ledger: track an auction draft per league member."""
    configure_logging(verbose=verbose)
    overrides: dict[str, object] = {"db": {"path": str(db)}} if db is not None else {}
    try:
        settings = load_settings(create_config(yaml_path=config_file, overrides=overrides))
    except LedgerException as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    ctx.obj = CliState(settings=settings, user_id=user)
    if ctx.invoked_subcommand is None:
        raise typer.Exit()


def _state(ctx: typer.Context) -> CliState:
    state = ctx.obj
    assert isinstance(state, CliState)
    return state


def _user(ctx: typer.Context) -> int:
    user_id = _state(ctx).user_id
    if user_id is None:
        print_error("no acting user: pass --user or set FDL_USER")
        raise typer.Exit(code=1)
    return user_id


@contextmanager
def _ledger(ctx: typer.Context) -> Iterator[LedgerContainer]:
    """Open the ledger and turn engine errors into a clean exit."""
    with build_ledger_context(_state(ctx).settings) as container:
        try:
            yield container
        except LedgerException as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e


_LeagueArg = Annotated[int, typer.Argument(help="League id")]
_PlayerArg = Annotated[int, typer.Argument(help="Catalog player id")]
_YesOpt = Annotated[bool, typer.Option("--yes", help="Skip confirmation")]


# --- league subcommand group ---

league_app = typer.Typer(name="league", help="Create, join and administer leagues")
app.add_typer(league_app, name="league")


@league_app.command("create")
def league_create(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="League name")],
    mode: Annotated[GameMode, typer.Option("--mode", help="Role system")] = GameMode.CLASSIC,
    budget: Annotated[int | None, typer.Option("--budget", help="Total budget per member")] = None,
    max_players: Annotated[int | None, typer.Option("--max-players", help="Max players per team")] = None,
    max_members: Annotated[int | None, typer.Option("--max-members", help="Max league members")] = None,
    allow_negative: Annotated[
        bool | None, typer.Option("--allow-negative/--no-allow-negative", help="Allow spending past the budget")
    ] = None,
    team_name: Annotated[str, typer.Option("--team-name", help="Your team name")] = "My Team",
) -> None:
    """Create a league; you become its master."""
    user_id = _user(ctx)
    settings = _state(ctx).settings
    with _ledger(ctx) as c:
        league = c.leagues.create_league(
            user_id,
            name,
            mode,
            budget if budget is not None else settings.total_budget,
            max_players if max_players is not None else settings.max_players_per_team,
            max_members if max_members is not None else settings.max_members,
            allow_negative_budget=allow_negative if allow_negative is not None else settings.allow_negative_budget,
            role_caps=settings.role_caps if mode is GameMode.CLASSIC else None,
            team_name=team_name,
        )
    console.print("[bold green]Created[/bold green] league")
    print_league(league)


@league_app.command("join")
def league_join(
    ctx: typer.Context,
    code: Annotated[str, typer.Argument(help="Six-character join code")],
    team_name: Annotated[str | None, typer.Option("--team-name", help="Your team name")] = None,
) -> None:
    """Join a league with its code."""
    user_id = _user(ctx)
    with _ledger(ctx) as c:
        membership = c.leagues.join_league(user_id, code, team_name)
    console.print(f"[bold green]Joined[/bold green] league {membership.league_id} as {membership.team_name}")


@league_app.command("list")
def league_list(ctx: typer.Context) -> None:
    """List the leagues you belong to."""
    user_id = _user(ctx)
    with _ledger(ctx) as c:
        leagues = c.leagues.list_leagues(user_id)
    print_league_list(leagues)


@league_app.command("show")
def league_show(ctx: typer.Context, league_id: _LeagueArg) -> None:
    """Show league settings."""
    user_id = _user(ctx)
    with _ledger(ctx) as c:
        league = c.leagues.get_league(user_id, league_id)
    print_league(league)


@league_app.command("members")
def league_members(ctx: typer.Context, league_id: _LeagueArg) -> None:
    """List league members."""
    user_id = _user(ctx)
    with _ledger(ctx) as c:
        members = c.leagues.list_members(user_id, league_id)
    print_members(members)


@league_app.command("settings")
def league_settings(
    ctx: typer.Context,
    league_id: _LeagueArg,
    name: Annotated[str | None, typer.Option("--name", help="New league name")] = None,
    budget: Annotated[int | None, typer.Option("--budget", help="Total budget per member")] = None,
    max_players: Annotated[int | None, typer.Option("--max-players", help="Max players per team")] = None,
    max_members: Annotated[int | None, typer.Option("--max-members", help="Max league members")] = None,
    allow_negative: Annotated[
        bool | None, typer.Option("--allow-negative/--no-allow-negative", help="Allow spending past the budget")
    ] = None,
    close: Annotated[bool, typer.Option("--close", help="Close the league to new members")] = False,
) -> None:
    """Change league settings (master only)."""
    user_id = _user(ctx)
    with _ledger(ctx) as c:
        league = c.leagues.update_league_settings(
            user_id,
            league_id,
            name=name,
            total_budget=budget,
            max_players_per_team=max_players,
            max_members=max_members,
            allow_negative_budget=allow_negative,
        )
        if close:
            league = c.leagues.close_league(user_id, league_id)
    print_league(league)


@league_app.command("leave")
def league_leave(ctx: typer.Context, league_id: _LeagueArg, yes: _YesOpt = False) -> None:
    """Leave a league, deleting your draft data in it."""
    user_id = _user(ctx)
    if not yes:
        typer.confirm(f"Leave league {league_id} and delete your draft data?", abort=True)
    with _ledger(ctx) as c:
        counts = c.leagues.leave_league(user_id, league_id)
    print_reset_counts(counts)


@league_app.command("remove-member")
def league_remove_member(
    ctx: typer.Context,
    league_id: _LeagueArg,
    member: Annotated[int, typer.Argument(help="User id to remove")],
    yes: _YesOpt = False,
) -> None:
    """Remove a member and their draft data (master only)."""
    user_id = _user(ctx)
    if not yes:
        typer.confirm(f"Remove user {member} from league {league_id}?", abort=True)
    with _ledger(ctx) as c:
        counts = c.leagues.remove_member(user_id, league_id, member)
    print_reset_counts(counts)


@league_app.command("reset")
def league_reset(ctx: typer.Context, league_id: _LeagueArg, yes: _YesOpt = False) -> None:
    """Delete your draft states, participants and lineups in a league."""
    user_id = _user(ctx)
    if not yes:
        typer.confirm(f"Reset all your draft data in league {league_id}?", abort=True)
    with _ledger(ctx) as c:
        counts = c.leagues.reset_member(user_id, league_id)
    print_reset_counts(counts)


@league_app.command("delete")
def league_delete(ctx: typer.Context, league_id: _LeagueArg, yes: _YesOpt = False) -> None:
    """Delete a league and everything in it (master only)."""
    user_id = _user(ctx)
    if not yes:
        typer.confirm(f"Delete league {league_id}?", abort=True)
    with _ledger(ctx) as c:
        counts = c.leagues.delete_league(user_id, league_id)
    console.print(f"[bold green]Deleted[/bold green] league {league_id}")
    print_reset_counts(counts)


# --- players subcommand group ---

players_app = typer.Typer(name="players", help="Browse the draft board and record player status")
app.add_typer(players_app, name="players")


@players_app.command("list")
def players_list(
    ctx: typer.Context,
    league_id: _LeagueArg,
    status: Annotated[DraftStatus | None, typer.Option("--status", help="Only this status")] = None,
    role: Annotated[str | None, typer.Option("--role", help="Only players with this role")] = None,
    search: Annotated[str | None, typer.Option("--search", "-s", help="Match name or team")] = None,
    include_removed: Annotated[bool, typer.Option("--include-removed", help="Show removed players")] = False,
) -> None:
    """List the league's players with your draft state."""
    user_id = _user(ctx)
    filters = DraftFilters(status=status, role=role, search_text=search, include_removed=include_removed)
    with _ledger(ctx) as c:
        entries = c.draft.list_draft_states(user_id, league_id, filters)
    print_board(entries)


@players_app.command("status")
def players_status(
    ctx: typer.Context,
    league_id: _LeagueArg,
    player_id: _PlayerArg,
    status: Annotated[DraftStatus, typer.Argument(help="New status")],
    cost: Annotated[float | None, typer.Option("--cost", help="Price paid (owned)")] = None,
    buyer: Annotated[str | None, typer.Option("--buyer", help="Who bought the player (taken_by_other)")] = None,
    buyer_cost: Annotated[float | None, typer.Option("--buyer-cost", help="What the buyer paid")] = None,
    expected_price: Annotated[float | None, typer.Option("--expected-price", help="Your price estimate")] = None,
    note: Annotated[str | None, typer.Option("--note", help="Free-text note")] = None,
    expected_version: Annotated[
        int | None, typer.Option("--expected-version", help="Reject if the row changed since this version")
    ] = None,
) -> None:
    """Move a player to a new draft status."""
    user_id = _user(ctx)
    with _ledger(ctx) as c:
        state = c.draft.transition_status(
            user_id,
            league_id,
            player_id,
            status,
            cost=cost,
            buyer=buyer,
            buyer_cost=buyer_cost,
            expected_price=expected_price,
            note=note,
            expected_version=expected_version,
        )
    print_state(state)


@players_app.command("reset")
def players_reset(ctx: typer.Context, league_id: _LeagueArg, player_id: _PlayerArg) -> None:
    """Put a player back to available and clear your edits."""
    user_id = _user(ctx)
    with _ledger(ctx) as c:
        state = c.draft.reset_to_default(user_id, league_id, player_id)
    print_state(state)


@players_app.command("tier")
def players_tier(
    ctx: typer.Context,
    league_id: _LeagueArg,
    player_id: _PlayerArg,
    tier: Annotated[Tier, typer.Argument(help="Tier label")],
) -> None:
    """Override a player's tier."""
    user_id = _user(ctx)
    with _ledger(ctx) as c:
        state = c.draft.set_tier(user_id, league_id, player_id, tier)
    print_state(state)


# --- import / budget ---


@app.command("import")
def import_cmd(
    ctx: typer.Context,
    league_id: _LeagueArg,
    csv_path: Annotated[Path, typer.Argument(help="CSV export of the player list")],
    mode: Annotated[str | None, typer.Option("--mode", help="auto, auto+prune, flat, flat+prune or 1-4")] = None,
    delimiter: Annotated[str | None, typer.Option("--delimiter", help="CSV delimiter (sniffed by default)")] = None,
) -> None:
    """Import players into a league's catalog and tier them."""
    user_id = _user(ctx)
    settings = _state(ctx).settings
    try:
        import_mode = ImportMode.parse(mode) if mode is not None else settings.import_mode
    except ValueError as e:
        print_error(f"unknown import mode '{mode}'")
        raise typer.Exit(code=1) from e
    if not csv_path.exists():
        print_error(f"file not found: {csv_path}")
        raise typer.Exit(code=1)
    rows = CsvSource(csv_path, delimiter=delimiter).fetch()
    with _ledger(ctx) as c:
        report = c.importer.import_catalog_batch(user_id, league_id, rows, import_mode)
    print_import_report(report)


@app.command("budget")
def budget_cmd(ctx: typer.Context, league_id: _LeagueArg) -> None:
    """Show your spent and remaining budget and role counts."""
    user_id = _user(ctx)
    with _ledger(ctx) as c:
        summary = c.draft.get_budget_summary(user_id, league_id)
    print_budget_summary(summary)


# --- participants subcommand group ---

participants_app = typer.Typer(name="participants", help="Track rival drafters and their purchases")
app.add_typer(participants_app, name="participants")

_ParticipantArg = Annotated[int, typer.Argument(help="Participant id")]


@participants_app.command("add")
def participants_add(
    ctx: typer.Context,
    league_id: _LeagueArg,
    name: Annotated[str, typer.Argument(help="Participant name")],
    budget: Annotated[int | None, typer.Option("--budget", help="Budget (defaults to the league's)")] = None,
) -> None:
    """Start tracking a rival drafter."""
    user_id = _user(ctx)
    with _ledger(ctx) as c:
        participant = c.participants.create_participant(user_id, league_id, name, budget)
    console.print(f"[bold green]Added[/bold green] participant {participant.name} (id {participant.id})")


@participants_app.command("list")
def participants_list(ctx: typer.Context, league_id: _LeagueArg) -> None:
    """List tracked participants with derived budget figures."""
    user_id = _user(ctx)
    with _ledger(ctx) as c:
        summaries = c.participants.list_participants(user_id, league_id)
    print_participants(summaries)


@participants_app.command("players")
def participants_players(ctx: typer.Context, league_id: _LeagueArg, participant_id: _ParticipantArg) -> None:
    """List the players assigned to a participant."""
    user_id = _user(ctx)
    with _ledger(ctx) as c:
        rows = c.participants.list_participant_players(user_id, league_id, participant_id)
    print_participant_players(rows)


@participants_app.command("assign")
def participants_assign(
    ctx: typer.Context,
    league_id: _LeagueArg,
    participant_id: _ParticipantArg,
    player_id: _PlayerArg,
    cost: Annotated[float, typer.Option("--cost", help="Price the participant paid")] = 0.0,
) -> None:
    """Record that a participant bought a player."""
    user_id = _user(ctx)
    with _ledger(ctx) as c:
        c.participants.assign_player(user_id, league_id, participant_id, player_id, cost)
    console.print(f"[bold green]Assigned[/bold green] player {player_id} to participant {participant_id}")


@participants_app.command("unassign")
def participants_unassign(
    ctx: typer.Context, league_id: _LeagueArg, participant_id: _ParticipantArg, player_id: _PlayerArg
) -> None:
    """Undo a participant purchase."""
    user_id = _user(ctx)
    with _ledger(ctx) as c:
        c.participants.unassign_player(user_id, league_id, participant_id, player_id)
    console.print(f"Unassigned player {player_id} from participant {participant_id}")


# --- lineup subcommand group ---

lineup_app = typer.Typer(name="lineup", help="Arrange owned players into formations")
app.add_typer(lineup_app, name="lineup")

_SchemaArg = Annotated[str, typer.Argument(help="Formation, e.g. 4-3-3")]


def _parse_starters(raw: list[str] | None) -> dict[str, int]:
    starters: dict[str, int] = {}
    for item in raw or []:
        position, sep, player = item.partition("=")
        if not sep or not player.strip().isdigit():
            print_error(f"invalid starter '{item}', expected position=player_id")
            raise typer.Exit(code=1)
        starters[position.strip()] = int(player)
    return starters


@lineup_app.command("formations")
def lineup_formations(ctx: typer.Context) -> None:
    """List the available formations and their positions."""
    with _ledger(ctx) as c:
        schemas = c.lineups.list_formations()
    print_formations(schemas)


@lineup_app.command("save")
def lineup_save(
    ctx: typer.Context,
    league_id: _LeagueArg,
    schema: _SchemaArg,
    starter: Annotated[list[str] | None, typer.Option("--starter", help="position=player_id (repeatable)")] = None,
    bench: Annotated[list[int] | None, typer.Option("--bench", help="Bench player id (repeatable)")] = None,
    activate: Annotated[bool, typer.Option("--activate", help="Make this the active lineup")] = False,
) -> None:
    """Save a full lineup for a formation."""
    user_id = _user(ctx)
    starters = _parse_starters(starter)
    with _ledger(ctx) as c:
        lineup = c.lineups.save_lineup(user_id, league_id, schema, starters, bench or [], activate=activate)
    print_lineup(lineup)


@lineup_app.command("show")
def lineup_show(ctx: typer.Context, league_id: _LeagueArg, schema: _SchemaArg) -> None:
    """Show a saved lineup."""
    user_id = _user(ctx)
    with _ledger(ctx) as c:
        lineup = c.lineups.get_lineup(user_id, league_id, schema)
    print_lineup(lineup)


@lineup_app.command("list")
def lineup_list(ctx: typer.Context, league_id: _LeagueArg) -> None:
    """List your saved lineups."""
    user_id = _user(ctx)
    with _ledger(ctx) as c:
        lineups = c.lineups.list_lineups(user_id, league_id)
    print_lineup_list(lineups)


@lineup_app.command("activate")
def lineup_activate(ctx: typer.Context, league_id: _LeagueArg, schema: _SchemaArg) -> None:
    """Make a saved lineup the active one."""
    user_id = _user(ctx)
    with _ledger(ctx) as c:
        lineup = c.lineups.activate_lineup(user_id, league_id, schema)
    print_lineup(lineup)


@lineup_app.command("delete")
def lineup_delete(ctx: typer.Context, league_id: _LeagueArg, schema: _SchemaArg) -> None:
    """Delete a saved lineup."""
    user_id = _user(ctx)
    with _ledger(ctx) as c:
        c.lineups.delete_lineup(user_id, league_id, schema)
    console.print(f"[bold green]Deleted[/bold green] lineup {schema}")

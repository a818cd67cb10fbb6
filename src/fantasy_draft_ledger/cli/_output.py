from rich.console import Console
from rich.table import Table

from fantasy_draft_ledger.domain.budget import BudgetSummary, ParticipantSummary
from fantasy_draft_ledger.domain.draft_state import DraftBoardEntry, DraftState
from fantasy_draft_ledger.domain.formation import FormationSchema, Lineup
from fantasy_draft_ledger.domain.league import League, Membership
from fantasy_draft_ledger.domain.participant import ParticipantAssignment
from fantasy_draft_ledger.domain.player import CatalogPlayer
from fantasy_draft_ledger.services.catalog_import import ImportReport
from fantasy_draft_ledger.services.league_reset import ResetCounts

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

_STATUS_STYLES = {
    "available": "white",
    "interesting": "yellow",
    "owned": "green",
    "removed": "dim",
    "taken_by_other": "red",
}


def print_error(message: str) -> None:
    err_console.print(f"[red bold]Error:[/red bold] {message}")


def _money(value: float | None) -> str:
    return "" if value is None else f"{value:g}"


def print_league(league: League) -> None:
    console.print(f"[bold]{league.name}[/bold] (id {league.id}, code [bold cyan]{league.code}[/bold cyan])")
    console.print(f"  Mode: {league.game_mode}  Status: {league.status}")
    negative = "yes" if league.allow_negative_budget else "no"
    console.print(f"  Budget: {league.total_budget}  Negative budget allowed: {negative}")
    console.print(f"  Max players per team: {league.max_players_per_team}  Max members: {league.max_members}")
    if league.role_caps:
        caps = ", ".join(f"{role}={cap}" for role, cap in league.role_caps.items())
        console.print(f"  Role caps: {caps}")


def print_league_list(leagues: list[League]) -> None:
    if not leagues:
        console.print("No leagues found.")
        return
    table = Table(title="Leagues")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Code")
    table.add_column("Mode")
    table.add_column("Status")
    for league in leagues:
        table.add_row(str(league.id), league.name, league.code, str(league.game_mode), str(league.status))
    console.print(table)


def print_members(members: list[Membership]) -> None:
    table = Table(title="Members")
    table.add_column("User", justify="right")
    table.add_column("Role")
    table.add_column("Team")
    table.add_column("Joined")
    for m in members:
        table.add_row(str(m.user_id), str(m.role), m.team_name, m.joined_at or "")
    console.print(table)


def print_board(entries: list[DraftBoardEntry]) -> None:
    if not entries:
        console.print("No players found.")
        return
    table = Table(title="Draft board")
    table.add_column("ID", justify="right")
    table.add_column("Name", no_wrap=True, min_width=20)
    table.add_column("Team")
    table.add_column("Roles")
    table.add_column("Value", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Tier")
    table.add_column("Status")
    table.add_column("Cost", justify="right")
    table.add_column("Rival")
    for e in entries:
        style = _STATUS_STYLES.get(str(e.state.status), "white")
        rival = e.state.buyer or e.participant_name or ""
        table.add_row(
            str(e.player.id),
            e.player.name,
            e.player.team,
            ";".join(str(r) for r in e.roles),
            f"{e.player.value:g}",
            _money(e.state.expected_price if e.state.expected_price is not None else e.player.price),
            str(e.state.tier or ""),
            f"[{style}]{e.state.status}[/{style}]",
            _money(e.state.cost),
            rival,
        )
    console.print(table)


def print_state(state: DraftState) -> None:
    console.print(f"Player {state.catalog_player_id}: [bold]{state.status}[/bold] (version {state.version})")
    if state.cost is not None:
        console.print(f"  Cost: {state.cost:g}")
    if state.buyer is not None:
        console.print(f"  Buyer: {state.buyer} {_money(state.buyer_cost)}")
    if state.tier is not None:
        console.print(f"  Tier: {state.tier}")
    if state.note:
        console.print(f"  Note: {state.note}")


def print_budget_summary(summary: BudgetSummary) -> None:
    color = "green" if summary.remaining >= 0 else "red"
    console.print(
        f"Budget: {summary.spent:g} spent of {summary.total}, [{color}]{summary.remaining:g} remaining[/{color}]"
    )
    console.print(f"Players: {summary.owned_count}/{summary.max_players} ({summary.slots_remaining} slots left)")
    table = Table(title="Roles")
    table.add_column("Role")
    table.add_column("Owned", justify="right")
    table.add_column("Cap", justify="right")
    for role, count in summary.role_distribution.items():
        cap = summary.role_caps.get(role)
        table.add_row(role, str(count), "" if cap is None else str(cap))
    console.print(table)


def print_import_report(report: ImportReport) -> None:
    console.print(
        f"[bold green]Imported[/bold green] {report.succeeded} players: "
        f"{report.created} created, {report.updated} updated, "
        f"{report.preserved} customized kept, {report.skipped} skipped"
    )
    removed = sum(1 for c in report.classifications if c.removed)
    if removed:
        console.print(f"  {removed} marked removed")
    for error in report.errors:
        label = f" ({error.player_name})" if error.player_name else ""
        err_console.print(f"  [yellow]Row {error.row_index + 1}{label}:[/yellow] {error.message}")


def print_participants(summaries: list[ParticipantSummary]) -> None:
    if not summaries:
        console.print("No participants.")
        return
    table = Table(title="Participants")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Budget", justify="right")
    table.add_column("Spent", justify="right")
    table.add_column("Remaining", justify="right")
    table.add_column("Players", justify="right")
    for s in summaries:
        table.add_row(
            str(s.participant_id),
            s.name,
            str(s.budget),
            f"{s.spent:g}",
            f"{s.remaining:g}",
            str(s.players_count),
        )
    console.print(table)


def print_participant_players(rows: list[tuple[ParticipantAssignment, CatalogPlayer]]) -> None:
    table = Table(title="Assigned players")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Team")
    table.add_column("Roles")
    table.add_column("Cost", justify="right")
    for assignment, player in rows:
        table.add_row(str(player.id), player.name, player.team, player.roles, f"{assignment.cost:g}")
    console.print(table)


def print_formations(schemas: list[FormationSchema]) -> None:
    for schema in schemas:
        positions = " ".join(f"{p.id}:{p.name}" for p in schema.positions)
        console.print(f"[bold]{schema.id}[/bold]  {positions}")


def print_lineup(lineup: Lineup) -> None:
    active = " [green](active)[/green]" if lineup.is_active else ""
    console.print(f"[bold]{lineup.schema}[/bold]{active}")
    for position_id, player_id in sorted(lineup.starters.items()):
        console.print(f"  {position_id}: {player_id}")
    if lineup.bench:
        console.print(f"  Bench: {', '.join(str(pid) for pid in lineup.bench)}")


def print_lineup_list(lineups: list[Lineup]) -> None:
    if not lineups:
        console.print("No lineups saved.")
        return
    for lineup in lineups:
        print_lineup(lineup)


def print_reset_counts(counts: ResetCounts) -> None:
    console.print(
        f"Deleted {counts.draft_states} draft states, {counts.assignments} assignments, "
        f"{counts.participants} participants, {counts.lineups} lineups"
    )
    if counts.orphans:
        console.print(f"Removed {counts.orphans} unused catalog players")

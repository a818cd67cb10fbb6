import os
from pathlib import Path

import pytest
from typer.testing import CliRunner

from fantasy_draft_ledger.cli.app import app
from fantasy_draft_ledger.db.connection import create_connection
from fantasy_draft_ledger.repos.draft_state_repo import SqliteDraftStateRepo
from fantasy_draft_ledger.repos.league_repo import SqliteLeagueRepo
from tests.helpers import seed_league, seed_member, seed_player

runner = CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("FDL"):
            monkeypatch.delenv(key)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "ledger.db"


@pytest.fixture
def seeded(db_path: Path) -> tuple[int, int, int]:
    """A classic league owned by user 1 with a goalkeeper and a striker. Returns (league, gk, striker)."""
    conn = create_connection(db_path)
    league_id = seed_league(conn)
    gk = seed_player(conn, league_id, name="Sommer", roles="P", value=15)
    striker = seed_player(conn, league_id, name="Lautaro", roles="A", value=30)
    conn.close()
    return league_id, gk, striker


def _invoke(db_path: Path, *args: str, user: int | None = 1, input: str | None = None):
    base = ["--db", str(db_path), "--config", "/nonexistent/fdl.yaml"]
    if user is not None:
        base += ["--user", str(user)]
    return runner.invoke(app, [*base, *args], input=input, env={"COLUMNS": "200"})


def _buy(db_path: Path, league_id: int, player_id: int, cost: str = "10") -> None:
    result = _invoke(db_path, "players", "status", str(league_id), str(player_id), "owned", "--cost", cost)
    assert result.exit_code == 0, result.output


class TestLeagueCommands:
    def test_create_and_list(self, db_path: Path) -> None:
        result = _invoke(db_path, "league", "create", "Lega Amici", "--budget", "300")
        assert result.exit_code == 0, result.output
        assert "Created" in result.output
        assert "Budget: 300" in result.output

        result = _invoke(db_path, "league", "list")
        assert result.exit_code == 0, result.output
        assert "Lega Amici" in result.output

    def test_list_empty(self, db_path: Path) -> None:
        result = _invoke(db_path, "league", "list")
        assert result.exit_code == 0
        assert "No leagues found." in result.output

    def test_join_with_code(self, db_path: Path) -> None:
        assert _invoke(db_path, "league", "create", "Lega Amici").exit_code == 0
        conn = create_connection(db_path)
        code = SqliteLeagueRepo(conn).list_for_user(1)[0].code
        conn.close()

        result = _invoke(db_path, "league", "join", code.lower(), "--team-name", "Rivals", user=2)

        assert result.exit_code == 0, result.output
        assert "Joined" in result.output
        assert "Rivals" in result.output

    def test_join_unknown_code(self, db_path: Path) -> None:
        result = _invoke(db_path, "league", "join", "ZZZZZZ", user=2)
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_show_as_outsider(self, db_path: Path, seeded: tuple[int, int, int]) -> None:
        league_id, _, _ = seeded
        result = _invoke(db_path, "league", "show", str(league_id), user=99)
        assert result.exit_code == 1
        assert "not a member" in result.output

    def test_missing_user(self, db_path: Path) -> None:
        result = _invoke(db_path, "league", "list", user=None)
        assert result.exit_code == 1
        assert "no acting user" in result.output

    def test_user_from_env(self, db_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FDL_USER", "1")
        result = _invoke(db_path, "league", "list", user=None)
        assert result.exit_code == 0, result.output

    def test_reset_requires_confirmation(self, db_path: Path, seeded: tuple[int, int, int]) -> None:
        league_id, _, _ = seeded
        result = _invoke(db_path, "league", "reset", str(league_id), input="n\n")
        assert result.exit_code == 1

    def test_reset_with_yes(self, db_path: Path, seeded: tuple[int, int, int]) -> None:
        league_id, _, striker = seeded
        assert _invoke(db_path, "players", "status", str(league_id), str(striker), "interesting").exit_code == 0

        result = _invoke(db_path, "league", "reset", str(league_id), "--yes")

        assert result.exit_code == 0, result.output
        assert "Deleted 1 draft states" in result.output


class TestImportCommand:
    def test_import_csv(self, db_path: Path, tmp_path: Path) -> None:
        conn = create_connection(db_path)
        league_id = seed_league(conn)
        conn.close()
        csv_file = tmp_path / "listone.csv"
        csv_file.write_text("Nome;Squadra;R;Prezzo;FVM\nLautaro;Inter;A;30;250\nSommer;Inter;P;12;80\n;Milan;A;1;1\n")

        result = _invoke(db_path, "import", str(league_id), str(csv_file), "--mode", "flat")

        assert result.exit_code == 0, result.output
        assert "Imported" in result.output
        assert "2 created" in result.output
        assert "Row 3" in result.output

        listing = _invoke(db_path, "players", "list", str(league_id))
        assert "Lautaro" in listing.output
        assert "Sommer" in listing.output

    def test_missing_file(self, db_path: Path, tmp_path: Path, seeded: tuple[int, int, int]) -> None:
        league_id, _, _ = seeded
        result = _invoke(db_path, "import", str(league_id), str(tmp_path / "nope.csv"))
        assert result.exit_code == 1
        assert "file not found" in result.output

    def test_bad_mode(self, db_path: Path, tmp_path: Path, seeded: tuple[int, int, int]) -> None:
        league_id, _, _ = seeded
        csv_file = tmp_path / "listone.csv"
        csv_file.write_text("name,team,roles\nLautaro,Inter,A\n")
        result = _invoke(db_path, "import", str(league_id), str(csv_file), "--mode", "9")
        assert result.exit_code == 1
        assert "unknown import mode" in result.output


class TestPlayerCommands:
    def test_board_shows_full_names(self, db_path: Path, seeded: tuple[int, int, int]) -> None:
        league_id, _, _ = seeded
        conn = create_connection(db_path)
        seed_player(conn, league_id, name="Pierre-Emerick Aubameyang", team="Marseille", roles="A")
        conn.close()

        result = _invoke(db_path, "players", "list", str(league_id))

        assert result.exit_code == 0, result.output
        assert "Pierre-Emerick Aubameyang" in result.output

    def test_buy_player_and_budget(self, db_path: Path, seeded: tuple[int, int, int]) -> None:
        league_id, _, striker = seeded

        result = _invoke(db_path, "players", "status", str(league_id), str(striker), "owned", "--cost", "120")
        assert result.exit_code == 0, result.output
        assert "owned" in result.output
        assert "Cost: 120" in result.output

        result = _invoke(db_path, "budget", str(league_id))
        assert result.exit_code == 0, result.output
        assert "120 spent of 500" in result.output
        assert "380 remaining" in result.output

    def test_overspend_is_rejected(self, db_path: Path, seeded: tuple[int, int, int]) -> None:
        league_id, _, striker = seeded

        result = _invoke(db_path, "players", "status", str(league_id), str(striker), "owned", "--cost", "600")

        assert result.exit_code == 1
        assert "Budget exceeded" in result.output
        conn = create_connection(db_path)
        state = SqliteDraftStateRepo(conn).get(1, league_id, striker)
        conn.close()
        assert state is None

    def test_tier_override(self, db_path: Path, seeded: tuple[int, int, int]) -> None:
        league_id, _, striker = seeded
        result = _invoke(db_path, "players", "tier", str(league_id), str(striker), "Top")
        assert result.exit_code == 0, result.output
        assert "Tier: Top" in result.output

    def test_other_member_cannot_see_board(self, db_path: Path, seeded: tuple[int, int, int]) -> None:
        league_id, _, _ = seeded
        result = _invoke(db_path, "players", "list", str(league_id), user=2)
        assert result.exit_code == 1


class TestParticipantCommands:
    def test_add_assign_list(self, db_path: Path, seeded: tuple[int, int, int]) -> None:
        league_id, _, striker = seeded

        result = _invoke(db_path, "participants", "add", str(league_id), "Marco", "--budget", "400")
        assert result.exit_code == 0, result.output
        assert "Added" in result.output

        result = _invoke(db_path, "participants", "assign", str(league_id), "1", str(striker), "--cost", "50")
        assert result.exit_code == 0, result.output

        result = _invoke(db_path, "participants", "list", str(league_id))
        assert result.exit_code == 0, result.output
        assert "Marco" in result.output
        assert "350" in result.output


class TestLineupCommands:
    def test_formations(self, db_path: Path) -> None:
        result = _invoke(db_path, "lineup", "formations")
        assert result.exit_code == 0
        assert "4-3-3" in result.output
        assert "gk:Por" in result.output

    def test_save_and_show(self, db_path: Path, seeded: tuple[int, int, int]) -> None:
        league_id, gk, striker = seeded
        for player_id in (gk, striker):
            _buy(db_path, league_id, player_id)

        result = _invoke(
            db_path,
            "lineup",
            "save",
            str(league_id),
            "4-3-3",
            "--starter",
            f"gk={gk}",
            "--bench",
            str(striker),
            "--activate",
        )
        assert result.exit_code == 0, result.output
        assert "(active)" in result.output

        result = _invoke(db_path, "lineup", "show", str(league_id), "4-3-3")
        assert result.exit_code == 0, result.output
        assert f"gk: {gk}" in result.output
        assert f"Bench: {striker}" in result.output

    def test_incompatible_starter(self, db_path: Path, seeded: tuple[int, int, int]) -> None:
        league_id, _, striker = seeded
        _buy(db_path, league_id, striker)
        result = _invoke(db_path, "lineup", "save", str(league_id), "4-3-3", "--starter", f"gk={striker}")
        assert result.exit_code == 1
        assert "cannot play" in result.output

    def test_bad_starter_syntax(self, db_path: Path, seeded: tuple[int, int, int]) -> None:
        league_id, _, _ = seeded
        result = _invoke(db_path, "lineup", "save", str(league_id), "4-3-3", "--starter", "gk")
        assert result.exit_code == 1
        assert "expected position=player_id" in result.output

    def test_show_missing(self, db_path: Path, seeded: tuple[int, int, int]) -> None:
        league_id, _, _ = seeded
        seed_conn = create_connection(db_path)
        seed_member(seed_conn, league_id, 2)
        seed_conn.close()
        result = _invoke(db_path, "lineup", "show", str(league_id), "4-3-3", user=2)
        assert result.exit_code == 1
        assert "not found" in result.output

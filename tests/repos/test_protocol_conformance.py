from fantasy_draft_ledger.repos.catalog_repo import SqliteCatalogRepo
from fantasy_draft_ledger.repos.draft_state_repo import SqliteDraftStateRepo
from fantasy_draft_ledger.repos.league_repo import SqliteLeagueRepo, SqliteMembershipRepo
from fantasy_draft_ledger.repos.protocols import CatalogRepo, DraftStateRepo, LeagueRepo, MembershipRepo
from tests.fakes.repos import FakeDraftStateRepo, FakeLeagueRepo, FakeMembershipRepo


class TestProtocolConformance:
    def test_league_repo_conforms(self) -> None:
        assert issubclass(SqliteLeagueRepo, LeagueRepo)

    def test_membership_repo_conforms(self) -> None:
        assert issubclass(SqliteMembershipRepo, MembershipRepo)

    def test_catalog_repo_conforms(self) -> None:
        assert issubclass(SqliteCatalogRepo, CatalogRepo)

    def test_draft_state_repo_conforms(self) -> None:
        assert issubclass(SqliteDraftStateRepo, DraftStateRepo)


class TestFakeConformance:
    def test_fake_league_repo_conforms(self) -> None:
        assert issubclass(FakeLeagueRepo, LeagueRepo)

    def test_fake_membership_repo_conforms(self) -> None:
        assert issubclass(FakeMembershipRepo, MembershipRepo)

    def test_fake_draft_state_repo_conforms(self) -> None:
        assert issubclass(FakeDraftStateRepo, DraftStateRepo)

from pathlib import Path

from fantasy_draft_ledger.ingest.csv_source import CsvSource


class TestCsvSource:
    def test_source_detail(self, tmp_path: Path) -> None:
        csv_file = tmp_path / "listone.csv"
        csv_file.write_text("a,b\n1,2\n")
        assert CsvSource(csv_file).source_detail == str(csv_file)

    def test_reads_csv_into_list_of_dicts(self, tmp_path: Path) -> None:
        csv_file = tmp_path / "listone.csv"
        csv_file.write_text("Nome,Squadra,R\nBarella,Inter,C\nLeao,Milan,A\n")

        rows = CsvSource(csv_file).fetch()

        assert len(rows) == 2
        assert list(rows[0].keys()) == ["Nome", "Squadra", "R"]
        assert rows[1] == {"Nome": "Leao", "Squadra": "Milan", "R": "A"}

    def test_sniffs_semicolon_delimiter(self, tmp_path: Path) -> None:
        csv_file = tmp_path / "listone.csv"
        csv_file.write_text("Nome;Squadra;RM;Prezzo\nBarella;Inter;M/C;25,5\n")

        rows = CsvSource(csv_file).fetch()

        assert rows == [{"Nome": "Barella", "Squadra": "Inter", "RM": "M/C", "Prezzo": "25,5"}]

    def test_explicit_delimiter(self, tmp_path: Path) -> None:
        csv_file = tmp_path / "listone.tsv"
        csv_file.write_text("name\tteam\nAlice\tInter\n")
        rows = CsvSource(csv_file, delimiter="\t").fetch()
        assert rows == [{"name": "Alice", "team": "Inter"}]

    def test_quoted_role_list_with_comma_delimiter(self, tmp_path: Path) -> None:
        csv_file = tmp_path / "listone.csv"
        csv_file.write_text('name,team,roles\nLeao,Milan,"W;A"\n')
        rows = CsvSource(csv_file).fetch()
        assert rows[0]["roles"] == "W;A"

    def test_strips_bom(self, tmp_path: Path) -> None:
        csv_file = tmp_path / "listone.csv"
        csv_file.write_bytes("\ufeffname,team\nAlice,Inter\n".encode())
        rows = CsvSource(csv_file).fetch()
        assert "name" in rows[0]

    def test_empty_cells_become_none(self, tmp_path: Path) -> None:
        csv_file = tmp_path / "listone.csv"
        csv_file.write_text("name,team,price\nAlice,,\n")
        rows = CsvSource(csv_file).fetch()
        assert rows == [{"name": "Alice", "team": None, "price": None}]

    def test_empty_file(self, tmp_path: Path) -> None:
        csv_file = tmp_path / "listone.csv"
        csv_file.write_text("")
        assert CsvSource(csv_file).fetch() == []

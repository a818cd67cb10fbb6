import csv
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def _strip_bom(text: str) -> str:
    return text.removeprefix("\ufeff")


class CsvSource:
    """Reads catalog rows from a CSV export.

    Spreadsheet exports often use ``;`` as the delimiter; pass ``delimiter``
    explicitly or let the reader sniff it from the header line.
    """

    def __init__(self, path: str | Path, *, delimiter: str | None = None, encoding: str = "utf-8") -> None:
        self._path = Path(path)
        self._delimiter = delimiter
        self._encoding = encoding

    @property
    def source_detail(self) -> str:
        return str(self._path)

    def fetch(self) -> list[dict[str, Any]]:
        logger.debug("Reading CSV %s", self._path)
        with open(self._path, encoding=self._encoding, newline="") as f:
            text = _strip_bom(f.read())
        lines = text.splitlines()
        delimiter = self._delimiter or self._sniff(lines[0] if lines else "")
        reader = csv.DictReader(lines, delimiter=delimiter)
        rows: list[dict[str, Any]] = [
            {k: (None if v == "" else v) for k, v in row.items()} for row in reader
        ]
        logger.debug("Read %d rows from %s", len(rows), self._path)
        return rows

    @staticmethod
    def _sniff(header: str) -> str:
        return ";" if header.count(";") > header.count(",") else ","

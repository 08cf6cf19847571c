"""Conversion of the fantacalcio.it votes spreadsheet into Team/Player records.

The sheet has no explicit section markers. After a fixed header region it is a
sequence of blocks, each made of:

    <team name>            first cell is text
    Cod. | Ruolo | ...     table head, first cell is the literal "Cod."
    <player rows>          first cell is the numeric player code

The first block whose first cell is not text (or is blank text) ends the sheet.
"""
import zipfile
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Union

from loguru import logger
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from pydantic import ValidationError

from fantavoti.models.errors import VotesError
from fantavoti.models.team import Player, Team

HEADER_ROWS = 4  # Title and notes above the first team
TABLE_HEAD_MARKER = "Cod."


def _first_cell(row: Sequence[Any]) -> Any:
    return row[0] if row else None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_player(row: Sequence[Any], index: int) -> Player:
    try:
        return Player.from_row(list(row))
    except ValidationError as e:
        raise VotesError.format(
            f"Invalid player row {index}: {list(row)!r} ({e.error_count()} invalid fields)",
            row=index,
        ) from e


def parse_rows(rows: Iterable[Optional[Sequence[Any]]], *, log=logger) -> List[Team]:
    """Groups the raw spreadsheet rows into teams of players.

    Raises a FORMAT VotesError (with ``row`` set to the offending row index) when a
    team name is not followed by the table head; nothing is returned in that case.
    """
    rows = [list(row) if row is not None else [] for row in rows]
    teams: List[Team] = []
    i = HEADER_ROWS
    while i < len(rows):
        name = _first_cell(rows[i])
        # A team block must start with a non-blank team name
        if not isinstance(name, str) or not name.strip():
            break
        i += 1

        if i >= len(rows):
            raise VotesError.format(
                f"Missing table head after team {name!r} at row {i}", row=i
            )
        if _first_cell(rows[i]) != TABLE_HEAD_MARKER:
            raise VotesError.format(
                f"Unexpected formatting for row {i}: {rows[i]!r}", row=i
            )
        i += 1

        team = Team(name=name)
        while i < len(rows) and _is_number(_first_cell(rows[i])):
            team.players.append(_parse_player(rows[i], i))
            i += 1
        log.debug(f"Finished parsing team {team.name}. Found {len(team.players)} players")
        teams.append(team)

    leftover = [row for row in rows[i:] if any(cell is not None for cell in row)]
    if leftover:
        log.warning(f"Ignoring {len(leftover)} non-empty rows after the last team (row {i})")
    return teams


def parse_xlsx_file(filename: Union[str, Path], *, log=logger) -> List[Team]:
    """Reads the active sheet of an xlsx file and parses it with parse_rows."""
    log.debug(f"Starting to parse xlsx file: {filename}")
    try:
        workbook = load_workbook(filename, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile) as e:
        raise VotesError.format(f"{filename} is not a readable xlsx file: {e}") from e
    try:
        rows = [list(row) for row in workbook.active.iter_rows(values_only=True)]
    finally:
        workbook.close()
    log.debug(f"Converting {len(rows)} rows from {filename}...")
    return parse_rows(rows, log=log)

import pytest
from openpyxl import Workbook

from conftest import HEADER, player_row, team_block
from fantavoti.models.enums import ErrorKind, PlayerRole
from fantavoti.models.errors import VotesError
from fantavoti.parsing.votes_parser import parse_rows, parse_xlsx_file


def test_example_sheet_with_an_empty_team():
    rows = HEADER + [
        ["Team A"],
        ["Cod."],
        [7, "P", "Rossi", 6.5, 0, 0, 0, 0, 0, 0, 0, 0],
        ["Team B"],
        ["Cod."],
    ]

    teams = parse_rows(rows)

    assert [team.name for team in teams] == ["Team A", "Team B"]
    assert teams[1].players == []
    [rossi] = teams[0].players
    assert rossi.id == 7
    assert rossi.role is PlayerRole.GOALKEEPER
    assert rossi.name == "Rossi"
    assert rossi.vote == 6.5
    assert rossi.goals_for == 0
    assert rossi.assists == 0


def test_players_keep_sheet_order_across_teams():
    rows = HEADER + team_block(
        "Atalanta",
        [
            player_row(101, "P", "Musso", 6),
            player_row(102, "D", "Toloi", 5.5),
            player_row(103, "A", "Zapata", 7.5, counters=(2, 0, 0, 0, 1, 0, 1, 0, 1)),
        ],
    ) + team_block("Bologna", [])

    teams = parse_rows(rows)

    assert [len(team.players) for team in teams] == [3, 0]
    assert [player.name for player in teams[0].players] == ["Musso", "Toloi", "Zapata"]
    zapata = teams[0].players[2]
    assert zapata.goals_for == 2
    assert zapata.penalties_scored == 1
    assert zapata.yellow_cards == 1
    assert zapata.assists == 1


def test_trailing_blank_rows_end_the_sheet():
    rows = HEADER + team_block("Empoli", [player_row(5)]) + [[None, None], [], [None]]
    teams = parse_rows(rows)
    assert len(teams) == 1
    assert len(teams[0].players) == 1


def test_corrupted_table_head_reports_row_index():
    rows = HEADER + team_block("Inter", [player_row(1)]) + [["Juventus"], ["Codice"], player_row(2)]

    with pytest.raises(VotesError) as excinfo:
        parse_rows(rows)

    assert excinfo.value.kind is ErrorKind.FORMAT
    assert excinfo.value.row == 8


def test_team_name_without_table_head_at_end_of_data():
    rows = HEADER + [["Lazio"]]
    with pytest.raises(VotesError) as excinfo:
        parse_rows(rows)
    assert excinfo.value.kind is ErrorKind.FORMAT
    assert excinfo.value.row == 5


def test_unknown_role_code_is_passed_through():
    rows = HEADER + team_block("Milan", [player_row(9, "ATT", "Pioli", None), player_row(10, "ALL", "Staff", None)])
    players = parse_rows(rows)[0].players
    assert players[0].role == "ATT"
    assert not isinstance(players[0].role, PlayerRole)
    assert players[1].role is PlayerRole.COACH
    assert players[0].vote is None


def test_vote_sentinel_and_blank_counters():
    rows = HEADER + team_block("Roma", [[11, "C", "Pellegrini", "6*", None, None]])
    [player] = parse_rows(rows)[0].players
    assert player.vote == "6*"
    assert player.goals_for == 0
    assert player.red_cards == 0


def test_unreadable_counter_is_a_format_error():
    rows = HEADER + team_block("Napoli", [player_row(12, counters=("two", 0, 0, 0, 0, 0, 0, 0, 0))])
    with pytest.raises(VotesError) as excinfo:
        parse_rows(rows)
    assert excinfo.value.kind is ErrorKind.FORMAT
    assert excinfo.value.row == 6


def test_parse_xlsx_file_reads_active_sheet(tmp_path):
    workbook = Workbook()
    sheet = workbook.active
    for row in HEADER + team_block("Torino", [player_row(21, "D", "Buongiorno", 6.5)]):
        sheet.append(row)
    path = tmp_path / "Voti_Fantacalcio_Stagione_2022-23_Giornata_3.xlsx"
    workbook.save(path)

    [team] = parse_xlsx_file(path)

    assert team.name == "Torino"
    assert team.players[0].name == "Buongiorno"
    assert team.players[0].role is PlayerRole.DEFENDER


def test_parse_xlsx_file_rejects_non_xlsx(tmp_path):
    path = tmp_path / "broken.xlsx"
    path.write_bytes(b"not a zip archive")
    with pytest.raises(VotesError) as excinfo:
        parse_xlsx_file(path)
    assert excinfo.value.kind is ErrorKind.FORMAT


def test_blank_text_row_ends_the_sheet():
    rows = HEADER + team_block("Genoa", [player_row(1)]) + [["", ""], ["   "]]
    teams = parse_rows(rows)
    assert [team.name for team in teams] == ["Genoa"]
    assert len(teams[0].players) == 1

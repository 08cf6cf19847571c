# fantavoti/utils/naming.py
import re
from typing import Tuple

from fantavoti.models.errors import VotesError

FILENAME_TEMPLATE = "Voti_Fantacalcio_Stagione_{season}_Giornata_{fixture}.xlsx"
FILENAME_PATTERN = re.compile(r"Voti_Fantacalcio_Stagione_(\d{4}-\d{2})_Giornata_(\d+)")


def encode_name(season: str, fixture: int) -> str:
    """Builds the canonical file name, e.g. ("2022-23", 18) ->
    "Voti_Fantacalcio_Stagione_2022-23_Giornata_18.xlsx"."""
    return FILENAME_TEMPLATE.format(season=season, fixture=int(fixture))


def decode_name(filename: str) -> Tuple[str, int]:
    """Inverse of encode_name. Accepts bare names as well as full paths."""
    match = FILENAME_PATTERN.search(str(filename))
    if not match:
        raise VotesError.format(
            f'Cannot extract season and fixture from filename "{filename}"'
        )
    return match.group(1), int(match.group(2))

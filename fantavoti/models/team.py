# fantavoti/models/team.py
from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .enums import PlayerRole

# Columns of a player row, in spreadsheet order:
# Cod. | Ruolo | Nome | Voto | Gf | Gs | Rp | Rs | Rf | Au | Amm | Esp | Ass
PLAYER_COLUMNS = (
    "id",
    "role",
    "name",
    "vote",
    "goals_for",
    "goals_against",
    "penalties_saved",
    "penalties_missed",
    "penalties_scored",
    "own_goals",
    "yellow_cards",
    "red_cards",
    "assists",
)

COUNTER_FIELDS = PLAYER_COLUMNS[4:]


class Player(BaseModel):
    """A player and his performance in a single fixture."""

    id: int = Field(..., description="Identifier assigned to the player by the source.")
    role: Union[PlayerRole, str] = Field(..., union_mode="left_to_right")
    name: str
    # Numeric vote, a textual sentinel such as "6*", or None if the player did not play
    vote: Optional[Union[float, str]] = Field(None, union_mode="left_to_right")
    goals_for: int = Field(0, serialization_alias="gf")
    goals_against: int = Field(0, serialization_alias="gs")
    penalties_saved: int = Field(0, serialization_alias="rp")
    penalties_missed: int = Field(0, serialization_alias="rs")
    penalties_scored: int = Field(0, serialization_alias="rf")
    own_goals: int = Field(0, serialization_alias="au")
    yellow_cards: int = Field(0, serialization_alias="amm")
    red_cards: int = Field(0, serialization_alias="esp")
    assists: int = Field(0, serialization_alias="ass")

    @field_validator(*COUNTER_FIELDS, mode="before")
    @classmethod
    def _blank_counter_is_zero(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return 0
        return value

    @classmethod
    def from_row(cls, row: List[Any]) -> "Player":
        """Positionally maps a spreadsheet row onto the player fields."""
        cells = list(row[: len(PLAYER_COLUMNS)])
        cells += [None] * (len(PLAYER_COLUMNS) - len(cells))
        return cls(**dict(zip(PLAYER_COLUMNS, cells)))


class Team(BaseModel):
    """A team and its players, in roster order."""

    name: str
    players: List[Player] = []

# fantavoti/utils/display.py
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from fantavoti.models.enums import PlayerRole
from fantavoti.models.team import Team


def _role_label(role) -> str:
    return role.value if isinstance(role, PlayerRole) else str(role)


def render_teams(teams: List[Team], *, title: Optional[str] = None, console: Optional[Console] = None) -> None:
    """Prints one table per team with role, name and vote of each player."""
    console = console or Console()
    if title:
        console.rule(title)
    for team in teams:
        table = Table(title=team.name, title_style="bold green", show_edge=False)
        table.add_column("Role", width=4)
        table.add_column("Name", min_width=25)
        table.add_column("Vote", justify="right")
        for player in team.players:
            vote = "-" if player.vote is None else str(player.vote)
            table.add_row(_role_label(player.role), player.name, vote)
        console.print(table)

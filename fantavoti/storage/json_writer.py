# fantavoti/storage/json_writer.py
import json
from pathlib import Path
from typing import Any, Dict, List, Union

from loguru import logger

from fantavoti.models.team import Team


def output_path_for(xlsx_file: Union[str, Path], out_dir: Union[str, Path]) -> Path:
    """out/<name of the xlsx file>.json"""
    return Path(out_dir) / (Path(xlsx_file).stem + ".json")


def teams_payload(teams: List[Team], *, short_keys: bool = False) -> List[Dict[str, Any]]:
    """JSON-ready teams. ``short_keys`` uses the spreadsheet abbreviations (gf, gs, ...)."""
    return [team.model_dump(mode="json", by_alias=short_keys) for team in teams]


def write_teams_json(
    teams: List[Team],
    path: Union[str, Path],
    *,
    short_keys: bool = False,
    log=logger,
) -> Path:
    path = Path(path)
    if not path.parent.exists():
        log.debug(f"Output folder {path.parent} is not present. Creating...")
        path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(teams_payload(teams, short_keys=short_keys), f, indent=4, ensure_ascii=False)
    log.info(f"Finished writing {path.name}")
    return path

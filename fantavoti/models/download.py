# fantavoti/models/download.py
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel


class FixtureFailure(BaseModel):
    """A fixture the remote reported as missing."""

    season: str
    fixture: int
    status: Optional[int] = None
    message: str


class DownloadReport(BaseModel):
    """Outcome of downloading a range of fixtures for one season."""

    season: str
    successes: List[Path] = []
    failures: List[FixtureFailure] = []  # Ascending fixture order
    aborted: bool = False  # True when too many fixtures were missing

    @property
    def missing_fixtures(self) -> List[int]:
        return [failure.fixture for failure in self.failures]

from typing import Any, Optional

from .enums import ErrorKind


class VotesError(Exception):
    """Single error type for every failure in the download/convert pipeline.

    The variant is identified by ``kind``; the payload fields that make sense
    for that variant are filled in, the others stay ``None``.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        url: Optional[str] = None,
        status: Optional[int] = None,
        season: Optional[str] = None,
        fixture: Optional[int] = None,
        row: Optional[int] = None,
        body: Any = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.url = url
        self.status = status
        self.season = season
        self.fixture = fixture
        self.row = row
        self.body = body

    def __repr__(self) -> str:
        return f"VotesError(kind={self.kind.value}, message={self.message!r})"

    @classmethod
    def auth(cls, message: str, *, url: Optional[str] = None, status: Optional[int] = None, body: Any = None) -> "VotesError":
        return cls(ErrorKind.AUTH, message, url=url, status=status, body=body)

    @classmethod
    def network(
        cls,
        message: str,
        *,
        url: Optional[str] = None,
        status: Optional[int] = None,
        season: Optional[str] = None,
        fixture: Optional[int] = None,
    ) -> "VotesError":
        return cls(ErrorKind.NETWORK, message, url=url, status=status, season=season, fixture=fixture)

    @classmethod
    def fetch(cls, season: str, fixture: int, status: int, message: str, *, url: Optional[str] = None) -> "VotesError":
        return cls(ErrorKind.FETCH, message, url=url, status=status, season=season, fixture=fixture)

    @classmethod
    def format(cls, message: str, *, row: Optional[int] = None) -> "VotesError":
        return cls(ErrorKind.FORMAT, message, row=row)

    @classmethod
    def config(cls, message: str, *, season: Optional[str] = None) -> "VotesError":
        return cls(ErrorKind.CONFIG, message, season=season)

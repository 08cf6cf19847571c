# fantavoti/storage/token_store.py
from pathlib import Path
from typing import Optional, Protocol, Union

from loguru import logger


class TokenStore(Protocol):
    """Key-value slot holding the authentication cookie between runs."""

    def load(self, *, log=logger) -> Optional[str]: ...

    def save(self, token: str, *, log=logger) -> None: ...

    def clear(self, *, log=logger) -> None: ...


class FileTokenStore:
    """Keeps the cookie in a plain text file, overwritten on every save."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self, *, log=logger) -> Optional[str]:
        if not self.path.exists():
            return None
        token = self.path.read_text(encoding="utf-8").strip()
        log.debug(f"Read cookie cache {self.path}")
        return token or None

    def save(self, token: str, *, log=logger) -> None:
        self.path.write_text(token, encoding="utf-8")
        log.debug(f"Saved cookie to {self.path.resolve()}")

    def clear(self, *, log=logger) -> None:
        self.path.unlink(missing_ok=True)
        log.debug(f"Removed cookie cache {self.path}")

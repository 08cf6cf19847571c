from pathlib import Path
from typing import Dict, Optional, Union

import httpx
from loguru import logger

from fantavoti.config.settings import DEFAULT_SEASON_IDS, AppSettings
from fantavoti.models.errors import VotesError
from fantavoti.utils.naming import encode_name
from .base_client import BaseClient

DEFAULT_BASE_URL = "https://www.fantacalcio.it/api/v1"
LOGIN_PATH = "/User/login"
VOTES_PATH = "/Excel/votes/{season_id}/{fixture}"

NOT_FOUND_STATUS_CODES = {404, 410}
AUTH_STATUS_CODES = {401, 403}


def cookie_header(response: httpx.Response) -> Optional[str]:
    """Turns the Set-Cookie headers of a response into a Cookie request header."""
    pairs = [raw.split(";", 1)[0].strip() for raw in response.headers.get_list("set-cookie")]
    return "; ".join(pair for pair in pairs if pair) or None


class FantacalcioClient(BaseClient):
    """Client for the fantacalcio.it login and votes spreadsheet endpoints."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        season_ids: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        super().__init__(client, **kwargs)
        self.base_url = base_url.rstrip("/")
        self.season_ids = dict(season_ids if season_ids is not None else DEFAULT_SEASON_IDS)

    @classmethod
    def from_settings(
        cls, settings: AppSettings, client: Optional[httpx.AsyncClient] = None, *, log=logger
    ) -> "FantacalcioClient":
        return cls(
            client,
            base_url=settings.base_url,
            season_ids=settings.season_ids,
            timeout=settings.http_timeout,
            max_attempts=settings.fetch_attempts,
            log=log,
        )

    def season_id(self, season: str) -> str:
        """Maps a season such as "2022-23" to the identifier used by the remote."""
        try:
            return self.season_ids[season]
        except KeyError:
            raise VotesError.config(
                f"Invalid season provided. Expected one of {' '.join(self.season_ids)} "
                f"but instead got {season}",
                season=season,
            ) from None

    async def login(self, username: str, password: str, *, log=logger) -> str:
        """Logs in and returns the authentication cookie.

        A single attempt is made: retrying bad credentials is up to the caller.
        """
        url = self.base_url + LOGIN_PATH
        log = log.bind(password=password)
        log.debug(f"Starting login sequence for user {username}")
        response = await self._make_request(
            "POST", url, json_data={"username": username, "password": password}, log=log
        )
        if not response.is_success:
            raise VotesError.network(
                f"Request to {url} failed with code {response.status_code} "
                f"and status {response.reason_phrase}",
                url=url,
                status=response.status_code,
            )
        try:
            body = response.json()
        except ValueError as e:
            raise VotesError.network(
                f"Login response from {url} is not valid JSON", url=url, status=response.status_code
            ) from e
        if not isinstance(body, dict) or not body.get("success"):
            raise VotesError.auth(
                "invalid credentials", url=url, status=response.status_code, body=body
            )
        token = cookie_header(response)
        if not token:
            raise VotesError.auth("missing token", url=url, status=response.status_code, body=body)
        log.bind(cookie=token).debug(f"Received cookie {token}")
        log.info(f"Logged in as {body.get('username') or username}")
        return token

    def _raise_for_votes_status(
        self, response: httpx.Response, url: str, season: str, fixture: int, log=logger
    ) -> None:
        status = response.status_code
        if response.is_success:
            return
        message = (
            f"Failed to download Excel worksheet for {season} #{fixture}. "
            f"Code {status}. Msg: {response.reason_phrase}"
        )
        if status in NOT_FOUND_STATUS_CODES:
            raise VotesError.fetch(season, fixture, status, message, url=url)
        if status in AUTH_STATUS_CODES:
            log.warning(f"Authentication error ({status}) at {url}. Check credentials/cookie.")
            raise VotesError.auth(
                f"Authentication failed ({status}) downloading {season} #{fixture}. "
                "The cookie might be expired",
                url=url,
                status=status,
            )
        raise VotesError.network(message, url=url, status=status, season=season, fixture=fixture)

    async def _stream_to_file(
        self, url: str, season: str, fixture: int, token: str, out_file: Path, log=logger
    ) -> None:
        try:
            log.bind(cookie=token).debug(f"Sending cookie {token}")
            async with self.client.stream("GET", url, headers={"Cookie": token}) as response:
                self._raise_for_votes_status(response, url, season, fixture, log=log)
                log.debug(f"HTTP {response.status_code} for {url}")
                try:
                    with out_file.open("wb") as fh:
                        async for chunk in response.aiter_bytes():
                            fh.write(chunk)
                except BaseException:
                    out_file.unlink(missing_ok=True)
                    raise
        except httpx.RequestError as e:
            raise VotesError.network(
                f"Request error downloading {season} #{fixture}: {e}",
                url=url,
                season=season,
                fixture=fixture,
            ) from e

    async def download_votes(
        self,
        season: str,
        fixture: int,
        token: str,
        out_file: Union[str, Path],
        *,
        log=logger,
    ) -> Path:
        """Downloads the votes spreadsheet of ``season`` #``fixture`` into ``out_file``."""
        season_id = self.season_id(season)
        url = self.base_url + VOTES_PATH.format(season_id=season_id, fixture=fixture)
        out_file = Path(out_file)
        log.info(f"Trying to download {season} #{fixture}...")
        log.debug(f"Download url:  {url}")
        log.debug(f"Download path: {out_file}")
        async for attempt in self._retrying(log):
            with attempt:
                await self._stream_to_file(url, season, fixture, token, out_file, log=log)
        log.info(f"Finished downloading {season} #{fixture}")
        return out_file

    async def download_with_cache(
        self,
        season: str,
        fixture: int,
        token: str,
        cache_dir: Union[str, Path],
        *,
        log=logger,
    ) -> Path:
        """Same as download_votes, but a file already present in ``cache_dir`` is
        returned as is without contacting the remote."""
        cache_dir = Path(cache_dir)
        file_path = cache_dir / encode_name(season, fixture)
        if file_path.exists():
            log.info(f"{season} #{fixture} already present. Using cache")
            return file_path
        cache_dir.mkdir(parents=True, exist_ok=True)
        return await self.download_votes(season, fixture, token, file_path, log=log)

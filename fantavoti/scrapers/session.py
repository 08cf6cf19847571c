from typing import Callable, Optional

from loguru import logger

from fantavoti.models.errors import VotesError
from fantavoti.storage.token_store import TokenStore
from .fantacalcio_client import FantacalcioClient


async def resolve_token(
    client: FantacalcioClient,
    store: Optional[TokenStore],
    username: Optional[str],
    password_provider: Callable[[], Optional[str]],
    *,
    log=logger,
) -> str:
    """Returns the saved cookie if there is one, otherwise logs in and saves it.

    ``password_provider`` is only called when a login is actually needed.
    """
    if store is not None:
        token = store.load(log=log)
        if token:
            log.bind(cookie=token).info(f"Using saved authentication cookie {token}")
            return token

    if not username:
        raise VotesError.auth(
            "You need to provide a username to initiate a download. Alternatively "
            "paste the cookie from the browser into the cookie cache file"
        )
    password = password_provider()
    if not password:
        raise VotesError.auth("Invalid password")

    token = await client.login(username, password, log=log)
    log.debug("User authentication completed successfully")
    if store is not None:
        store.save(token, log=log)
    return token

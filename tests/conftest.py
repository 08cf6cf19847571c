import asyncio
from typing import Callable, List

import httpx
import pytest

from fantavoti.scrapers.fantacalcio_client import FantacalcioClient

HEADER = [
    ["Voti Fantacalcio 18ª giornata di campionato"],
    ["Legenda: Gf goal fatti, Gs goal subiti"],
    ["Rp rigori parati, Rs rigori sbagliati"],
    ["Fonte: fantacalcio.it"],
]


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(recording_handler)


def votes_handler(existing=(), status_for_missing=404, payload=b"PK\x03\x04fake-xlsx"):
    """Serves the votes endpoint: fixtures in ``existing`` succeed, the rest fail."""

    def handler(request: httpx.Request) -> httpx.Response:
        fixture = int(request.url.path.rsplit("/", 1)[-1])
        if fixture in existing:
            return httpx.Response(200, content=payload)
        return httpx.Response(status_for_missing)

    return handler


@pytest.fixture
def make_client():
    def factory(handler, **kwargs):
        transport = RecordingTransport(handler)
        kwargs.setdefault("max_attempts", 1)
        kwargs.setdefault("retry_wait", 0)
        client = FantacalcioClient(httpx.AsyncClient(transport=transport), **kwargs)
        return client, transport

    return factory


def run(coro):
    return asyncio.run(coro)


def team_block(name, players):
    return [[name], ["Cod.", "Ruolo", "Nome", "Voto"]] + [list(player) for player in players]


def player_row(code, role="P", name="Rossi", vote=6.5, counters=(0,) * 9):
    return [code, role, name, vote, *counters]

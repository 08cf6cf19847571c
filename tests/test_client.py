import json
import sys

import httpx
import pytest
from loguru import logger

from conftest import run, votes_handler
from fantavoti.logging.setup import setup_logging
from fantavoti.models.enums import ErrorKind
from fantavoti.models.errors import VotesError
from fantavoti.utils.naming import encode_name


def login_handler(body, status=200, cookies=("token=abc123; Path=/; HttpOnly",)):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v1/User/login"
        assert json.loads(request.content) == {"username": "mario", "password": "secret"}
        headers = [("set-cookie", cookie) for cookie in cookies]
        return httpx.Response(status, json=body, headers=headers)

    return handler


def test_login_returns_cookie_header(make_client):
    client, _ = make_client(
        login_handler(
            {"success": True, "username": "mario"},
            cookies=("token=abc123; Path=/; HttpOnly", "lang=it; Path=/"),
        )
    )
    assert run(client.login("mario", "secret")) == "token=abc123; lang=it"


def test_login_rejected_credentials(make_client):
    client, transport = make_client(login_handler({"success": False}))
    with pytest.raises(VotesError) as excinfo:
        run(client.login("mario", "secret"))
    assert excinfo.value.kind is ErrorKind.AUTH
    assert excinfo.value.message == "invalid credentials"
    assert len(transport.requests) == 1


def test_login_without_cookie(make_client):
    client, _ = make_client(login_handler({"success": True}, cookies=()))
    with pytest.raises(VotesError) as excinfo:
        run(client.login("mario", "secret"))
    assert excinfo.value.kind is ErrorKind.AUTH
    assert excinfo.value.message == "missing token"


def test_login_server_error_is_not_retried(make_client):
    client, transport = make_client(lambda request: httpx.Response(503), max_attempts=3)
    with pytest.raises(VotesError) as excinfo:
        run(client.login("mario", "secret"))
    assert excinfo.value.kind is ErrorKind.NETWORK
    assert excinfo.value.status == 503
    assert len(transport.requests) == 1


def test_cache_miss_downloads_once_then_hits(make_client, tmp_path):
    client, transport = make_client(votes_handler(existing={18}, payload=b"spreadsheet"))

    async def fetch_twice():
        first = await client.download_with_cache("2022-23", 18, "token=abc", tmp_path / "cache")
        second = await client.download_with_cache("2022-23", 18, "token=abc", tmp_path / "cache")
        return first, second

    first, second = run(fetch_twice())

    assert first == second == tmp_path / "cache" / encode_name("2022-23", 18)
    assert first.read_bytes() == b"spreadsheet"
    assert len(transport.requests) == 1
    request = transport.requests[0]
    assert request.url.path == "/api/v1/Excel/votes/17/18"
    assert request.headers["cookie"] == "token=abc"


def test_prepopulated_cache_makes_no_request(make_client, tmp_path):
    client, transport = make_client(votes_handler())
    cached = tmp_path / encode_name("2018-19", 4)
    cached.write_bytes(b"already here")

    path = run(client.download_with_cache("2018-19", 4, "token=abc", tmp_path))

    assert path == cached
    assert transport.requests == []


def test_missing_fixture_is_a_fetch_error(make_client, tmp_path):
    client, _ = make_client(votes_handler(existing=()))
    with pytest.raises(VotesError) as excinfo:
        run(client.download_with_cache("2022-23", 30, "token=abc", tmp_path))
    error = excinfo.value
    assert error.kind is ErrorKind.FETCH
    assert (error.season, error.fixture, error.status) == ("2022-23", 30, 404)
    assert not (tmp_path / encode_name("2022-23", 30)).exists()


def test_rejected_cookie_is_an_auth_error(make_client, tmp_path):
    client, _ = make_client(votes_handler(status_for_missing=401))
    with pytest.raises(VotesError) as excinfo:
        run(client.download_with_cache("2022-23", 2, "token=stale", tmp_path))
    assert excinfo.value.kind is ErrorKind.AUTH


def test_transient_errors_are_retried(make_client, tmp_path):
    statuses = iter([503, 200])

    def handler(request):
        status = next(statuses)
        return httpx.Response(status, content=b"ok" if status == 200 else b"")

    client, transport = make_client(handler, max_attempts=2)
    path = run(client.download_votes("2020-21", 1, "token=abc", tmp_path / "out.xlsx"))

    assert path.read_bytes() == b"ok"
    assert len(transport.requests) == 2


def test_unknown_season_fails_before_any_request(make_client, tmp_path):
    client, transport = make_client(votes_handler(existing={1}))
    with pytest.raises(VotesError) as excinfo:
        run(client.download_with_cache("1999-00", 1, "token=abc", tmp_path))
    assert excinfo.value.kind is ErrorKind.CONFIG
    assert transport.requests == []


class BrokenStream(httpx.AsyncByteStream):
    """Body that dies after the first chunk."""

    async def __aiter__(self):
        yield b"half a spreadsheet"
        raise httpx.ReadError("connection reset")


def test_interrupted_download_leaves_no_file(make_client, tmp_path):
    client, _ = make_client(lambda request: httpx.Response(200, stream=BrokenStream()))
    target = tmp_path / encode_name("2022-23", 5)

    with pytest.raises(VotesError) as excinfo:
        run(client.download_with_cache("2022-23", 5, "token=abc", tmp_path))

    assert excinfo.value.kind is ErrorKind.NETWORK
    assert excinfo.value.status is None
    assert not target.exists()


def test_interrupted_download_is_retried_from_scratch(make_client, tmp_path):
    responses = iter(
        [httpx.Response(200, stream=BrokenStream()), httpx.Response(200, content=b"complete")]
    )
    client, transport = make_client(lambda request: next(responses), max_attempts=2)

    path = run(client.download_with_cache("2022-23", 5, "token=abc", tmp_path))

    assert path.read_bytes() == b"complete"
    assert len(transport.requests) == 2


def test_cookie_is_masked_in_logs(make_client, tmp_path):
    log_file = tmp_path / "run.log"
    log = setup_logging("DEBUG", log_file)
    client, _ = make_client(votes_handler(existing={1}))

    try:
        run(client.download_votes("2022-23", 1, "session=supersecretvalue", tmp_path / "v.xlsx", log=log))
    finally:
        logger.remove()
        logger.add(sys.stderr)

    text = log_file.read_text(encoding="utf-8")
    assert "Sending cookie sess****alue" in text
    assert "supersecretvalue" not in text

from pathlib import Path
from typing import Iterable, List, Union

from loguru import logger

from fantavoti.models.download import DownloadReport, FixtureFailure
from fantavoti.models.enums import ErrorKind
from fantavoti.models.errors import VotesError
from .fantacalcio_client import FantacalcioClient

FIXTURES_PER_SEASON = 38
# More missing fixtures than this points at a wrong season or a revoked cookie
MAX_NOT_FOUND = 3


def season_fixtures() -> List[int]:
    return list(range(1, FIXTURES_PER_SEASON + 1))


async def download_fixtures(
    client: FantacalcioClient,
    season: str,
    fixtures: Iterable[int],
    token: str,
    cache_dir: Union[str, Path],
    *,
    log=logger,
) -> DownloadReport:
    """Downloads ``fixtures`` one at a time, in the given order.

    Missing fixtures are collected in the report when more than one fixture is
    requested; any other error, or a missing fixture in a single-fixture run,
    propagates. The run stops once more than MAX_NOT_FOUND fixtures are missing.
    """
    fixtures = list(fixtures)
    client.season_id(season)  # Unknown seasons fail before any request
    tolerant = len(fixtures) > 1
    log.debug(f"Requesting votes for season {season}, fixtures {fixtures}")

    report = DownloadReport(season=season)
    for fixture in fixtures:
        try:
            path = await client.download_with_cache(season, fixture, token, cache_dir, log=log)
        except VotesError as e:
            if e.kind is not ErrorKind.FETCH or not tolerant:
                raise
            log.debug(f"Fixture {season} #{fixture} not found: {e}")
            report.failures.append(
                FixtureFailure(season=season, fixture=fixture, status=e.status, message=e.message)
            )
            if len(report.failures) > MAX_NOT_FOUND:
                log.error(
                    f"More than {MAX_NOT_FOUND} fixtures of {season} are missing. "
                    "Stopping downloads"
                )
                report.aborted = True
                break
            continue
        report.successes.append(path)

    report.failures.sort(key=lambda failure: failure.fixture)
    log.info(
        f"Downloads completed for {season}: {len(report.successes)} available, "
        f"{len(report.failures)} missing"
    )
    return report

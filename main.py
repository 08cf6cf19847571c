import sys
import asyncio
from pathlib import Path
from typing import List, Optional, Tuple

import typer
from loguru import logger
from rich import print
from rich.panel import Panel

from fantavoti.config.settings import AppSettings, load_settings
from fantavoti.logging.setup import setup_logging
from fantavoti.models.download import DownloadReport
from fantavoti.models.enums import ErrorKind
from fantavoti.models.errors import VotesError
from fantavoti.parsing.votes_parser import parse_xlsx_file
from fantavoti.scrapers.fantacalcio_client import FantacalcioClient
from fantavoti.scrapers.orchestrator import download_fixtures, season_fixtures
from fantavoti.scrapers.session import resolve_token
from fantavoti.storage.json_writer import output_path_for, write_teams_json
from fantavoti.storage.token_store import FileTokenStore
from fantavoti.utils.display import render_teams

app = typer.Typer(
    add_completion=False,
    help="Download fantacalcio.it votes spreadsheets and convert them to JSON.",
)


async def download(
    settings: AppSettings,
    season: str,
    fixture: Optional[int] = None,
    *,
    log=logger,
) -> DownloadReport:
    """Logs in (or reuses the saved cookie) and downloads one fixture or the whole season."""
    store = FileTokenStore(settings.cookie_file) if settings.use_cookie_cache else None

    def ask_password() -> Optional[str]:
        if settings.password:
            return settings.password
        log.debug("No password specified in command line: prompting the user...")
        return typer.prompt(
            f"Password for username {settings.username}",
            hide_input=True,
            default="",
            show_default=False,
        )

    async with FantacalcioClient.from_settings(settings, log=log) as client:
        client.season_id(season)  # Fail on unknown seasons before logging in
        had_saved_cookie = store is not None and store.load(log=log) is not None
        token = await resolve_token(client, store, settings.username, ask_password, log=log)

        if fixture:
            log.debug(f"Fixture argument provided ({fixture}). Starting download")
            fixtures = [fixture]
        else:
            log.debug(f"No fixture argument provided. Downloading all fixtures of season {season}")
            fixtures = season_fixtures()

        try:
            report = await download_fixtures(
                client, season, fixtures, token, settings.cache_dir, log=log
            )
        except VotesError as e:
            if e.kind is ErrorKind.AUTH and had_saved_cookie:
                store.clear(log=log)
                log.warning("The saved cookie was rejected and has been removed. Run again to log in")
            raise

    if report.failures:
        log.warning(f"Failed to find fixtures {' '.join(map(str, report.missing_fixtures))}")
    log.info("All downloads completed")
    return report


def convert(
    xlsx_files: List[Path],
    out_dir: Path,
    *,
    short_keys: bool = False,
    show: bool = False,
    log=logger,
) -> Tuple[List[Path], List[Path]]:
    """Converts each file independently. Returns (written json files, files that failed)."""
    log.debug(f"Output folder is {out_dir.resolve()}")
    written: List[Path] = []
    failed: List[Path] = []
    for file in xlsx_files:
        log.debug(f"Starting parse of file: {file}")
        try:
            teams = parse_xlsx_file(file, log=log)
        except VotesError as e:
            if e.kind is not ErrorKind.FORMAT:
                raise
            log.error(f"Failed to convert {file}: {e}")
            failed.append(file)
            continue
        log.debug(f"Successfully parsed {file}")
        written.append(
            write_teams_json(teams, output_path_for(file, out_dir), short_keys=short_keys, log=log)
        )
        if show:
            render_teams(teams, title=file.name)
    return written, failed


def describe(error: VotesError) -> str:
    if error.kind is ErrorKind.AUTH and error.message == "invalid credentials":
        return "Invalid username/password combination"
    if error.kind is ErrorKind.AUTH and error.message == "missing token":
        return "Failed to retrieve authentication cookie"
    return f"{error.kind.value} error: {error.message}"


def run(
    settings: AppSettings,
    xlsx_files: List[Path],
    *,
    season: Optional[str] = None,
    fixture: Optional[int] = None,
    download_only: bool = False,
    short_keys: bool = False,
    show: bool = False,
    quiet: bool = False,
    log=logger,
) -> int:
    """Performs download and/or conversion. Returns the process exit code."""
    report: Optional[DownloadReport] = None
    if xlsx_files:
        if season:
            log.warning(
                f"Specified both a season ({season}) and excel files to convert. Downloading will be skipped"
            )
        missing = [file for file in xlsx_files if not file.exists()]
        for file in missing:
            log.error(f"File {file} does not exist")
        if missing:
            return 1
        to_convert = [file.resolve() for file in xlsx_files]
    elif season:
        report = asyncio.run(download(settings, season, fixture, log=log))
        if download_only:
            log.info("--download-only has been provided. Stopping now")
            to_convert = []
        else:
            to_convert = report.successes
    else:
        log.error("You need to provide an input. For usage run with --help")
        return 1

    written, failed = convert(
        to_convert, settings.out_dir, short_keys=short_keys, show=show, log=log
    )

    if not quiet:
        lines = []
        if report is not None:
            lines.append(f"Season {report.season}: {len(report.successes)} spreadsheets available")
            if report.failures:
                lines.append(f"Missing fixtures: {' '.join(map(str, report.missing_fixtures))}")
        lines.append(f"Converted: {len(written)} file(s) into {settings.out_dir}")
        if failed:
            lines.append(f"[red]Failed: {', '.join(file.name for file in failed)}[/red]")
        print(Panel("\n".join(lines), title="fantavoti", expand=False))
    return 1 if failed else 0


@app.command()
def main(
    xlsx_files: Optional[List[Path]] = typer.Argument(
        None,
        help="xlsx files to convert to json. Leave empty and specify download options to download instead",
    ),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="Username for login"),
    password: Optional[str] = typer.Option(None, "--pass", "-p", help="Password for login"),
    season: Optional[str] = typer.Option(
        None, "--season", "-s", help="Tournament season (es. 2022-23)"
    ),
    fixture: Optional[int] = typer.Option(
        None,
        "--fixture",
        "-f",
        min=1,
        help="Fixture number [1-38] to download. If not specified downloads the entire season",
    ),
    cache_dir: Optional[Path] = typer.Option(
        None, "--cache-dir", help="Folder for downloaded xlsx files"
    ),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="JSON output folder"),
    download_only: bool = typer.Option(
        False, "--download-only", help="Download but skip JSON conversion"
    ),
    no_cookie_cache: bool = typer.Option(
        False, "--no-cookie-cache", help="Don't use the cookie cache"
    ),
    short_keys: bool = typer.Option(
        False, "--short-keys", help="Use the spreadsheet abbreviations (gf, gs, ...) as JSON keys"
    ),
    show: bool = typer.Option(False, "--print", help="Print the converted teams"),
    debug: bool = typer.Option(False, "--debug", help="Print extra debug messages"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Print only errors"),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Optional filename to output log messages"
    ),
) -> None:
    overrides = {
        "username": user,
        "password": password,
        "cache_dir": cache_dir,
        "out_dir": out,
        "log_file": log_file,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if no_cookie_cache:
        overrides["use_cookie_cache"] = False
    settings = load_settings(**overrides)

    if debug:
        level = "DEBUG"
    elif quiet:
        level = "ERROR"
    else:
        level = settings.log_level
    log = setup_logging(level, settings.log_file)

    try:
        exit_code = run(
            settings,
            xlsx_files or [],
            season=season,
            fixture=fixture,
            download_only=download_only,
            short_keys=short_keys,
            show=show,
            quiet=quiet,
            log=log,
        )
    except VotesError as e:
        log.error(describe(e))
        raise typer.Exit(1)
    raise typer.Exit(exit_code)


def cli() -> None:
    try:
        app()
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(130)


if __name__ == "__main__":
    cli()

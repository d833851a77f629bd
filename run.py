#!/usr/bin/env python3
"""
Application Entry Script.

Operator entry point for the notes server: serve, migrate, self-check,
print configuration, run tests.

Usage:
    python run.py --help
    python run.py --action server --reload --verbose
    python run.py --action migrate --revision head
    python run.py --action health
"""

import asyncio
import subprocess
import sys
from collections.abc import Callable
from pathlib import Path

import click

# modules.* imports resolve from the repository root
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from modules.backend.core.logging import get_logger, setup_logging

ALEMBIC_INI = PROJECT_ROOT / "modules" / "backend" / "migrations" / "alembic.ini"

TEST_DIRS = {"all": "tests/", "unit": "tests/unit", "integration": "tests/integration"}


def validate_project_root() -> Path:
    """Exit unless run.py sits next to the .project_root marker."""
    if not (PROJECT_ROOT / ".project_root").exists():
        click.echo(
            click.style("Error: .project_root not found. Run from project root.", fg="red"),
            err=True,
        )
        sys.exit(1)
    return PROJECT_ROOT


def run_server(logger, host: str | None, port: int | None, reload: bool, **_) -> None:
    from modules.backend.core.config import get_app_config
    from modules.cli.commands.server import uvicorn_command

    app_config = get_app_config()
    host = host or app_config.application.server.host
    port = port or app_config.application.server.port

    logger.info("Starting server", extra={"host": host, "port": port, "reload": reload})
    click.echo(f"Notes API at http://{host}:{port}{app_config.application.api_prefix}")
    click.echo("Press Ctrl+C to stop\n")

    try:
        subprocess.run(uvicorn_command(host, port, reload, app_config.logging.level), check=True)
    except KeyboardInterrupt:
        logger.info("Server stopped")
    except subprocess.CalledProcessError as e:
        logger.error("Server exited", extra={"exit_code": e.returncode})
        sys.exit(e.returncode)


def run_migrations(logger, revision: str, **_) -> None:
    if not ALEMBIC_INI.exists():
        click.echo(click.style(f"Error: {ALEMBIC_INI} not found.", fg="red"), err=True)
        sys.exit(1)

    logger.info("Running migrations", extra={"revision": revision})
    cmd = [sys.executable, "-m", "alembic", "-c", str(ALEMBIC_INI), "upgrade", revision]
    try:
        result = subprocess.run(cmd, cwd=PROJECT_ROOT)
    except FileNotFoundError:
        logger.error("alembic not found. Install with: pip install alembic")
        sys.exit(1)

    if result.returncode != 0:
        logger.error("Migration failed", extra={"exit_code": result.returncode})
        sys.exit(result.returncode)
    click.echo(click.style("Database is up to date.", fg="green"))


# Health probes return a short detail string or raise


def _probe_config() -> str:
    from modules.backend.core.config import get_app_config

    application = get_app_config().application
    return f"{application.name} {application.version} ({application.environment})"


def _probe_database() -> str:
    from sqlalchemy import text

    from modules.backend.core.config import get_database_url
    from modules.backend.core.database import dispose_engine, get_engine
    from modules.cli.commands.db import describe_database

    async def ping() -> None:
        try:
            async with get_engine().connect() as conn:
                await conn.execute(text("SELECT 1"))
        finally:
            await dispose_engine()

    asyncio.run(ping())
    return describe_database(get_database_url())


def _probe_app() -> str:
    from modules.backend.main import get_app

    fastapi_app = get_app()
    return f"{len(fastapi_app.routes)} routes"


HEALTH_PROBES: list[tuple[str, Callable[[], str]]] = [
    ("YAML configuration", _probe_config),
    ("Database connection", _probe_database),
    ("FastAPI application", _probe_app),
]


def check_health(logger, **_) -> None:
    click.echo("Health Check Results:")
    click.echo("-" * 50)

    failed = 0
    for name, probe in HEALTH_PROBES:
        try:
            detail = probe()
        except Exception as e:
            failed += 1
            logger.error("Health probe failed", extra={"probe": name, "error": str(e)})
            click.echo(f"  {click.style('FAIL', fg='red')}  {name} ({e})")
        else:
            logger.debug("Health probe passed", extra={"probe": name})
            click.echo(f"  {click.style('PASS', fg='green')}  {name} ({detail})")

    click.echo("-" * 50)
    if failed:
        click.echo(click.style(f"\n{failed} check(s) failed.", fg="yellow"))
        sys.exit(1)
    click.echo(click.style("\nAll checks passed!", fg="green"))


def _echo_section(values: dict, indent: int = 2) -> None:
    for key, value in values.items():
        if isinstance(value, dict):
            click.echo(f"{' ' * indent}{key}:")
            _echo_section(value, indent + 2)
        else:
            click.echo(f"{' ' * indent}{key}: {value}")


def show_config(logger, **_) -> None:
    from modules.backend.core.config import get_app_config

    try:
        app_config = get_app_config()
    except (FileNotFoundError, ValueError) as e:
        logger.error("Failed to load configuration", extra={"error": str(e)})
        click.echo(click.style(f"Error loading configuration: {e}", fg="red"))
        sys.exit(1)

    for title, section in (
        ("Application Settings", app_config.application),
        ("Database Settings", app_config.database),
        ("Logging Settings", app_config.logging),
    ):
        click.echo(f"{title}:")
        click.echo("-" * 40)
        _echo_section(section.model_dump())
        click.echo()


def run_tests(logger, test_type: str, **_) -> None:
    cmd = [sys.executable, "-m", "pytest", TEST_DIRS[test_type], "-v"]
    logger.info("Running tests", extra={"type": test_type})
    click.echo(f"Running: {' '.join(cmd)}\n")

    try:
        result = subprocess.run(cmd, cwd=PROJECT_ROOT)
    except FileNotFoundError:
        logger.error("pytest not found. Install with: pip install pytest")
        sys.exit(1)
    sys.exit(result.returncode)


def show_info(logger, **_) -> None:
    from modules.backend.core.config import get_app_config

    application = get_app_config().application
    click.echo("Notes Server")
    click.echo("=" * 40)
    click.echo(f"Name: {application.name}")
    click.echo(f"Version: {application.version}")
    click.echo(f"Description: {application.description}")
    click.echo()
    click.echo("Available Actions:")
    for name, (_, summary) in ACTIONS.items():
        click.echo(f"  --action {name:<8} {summary}")
    click.echo()
    click.echo("Logging Options:")
    click.echo("  --verbose, -v     Enable INFO level logging")
    click.echo("  --debug, -d       Enable DEBUG level logging")


ACTIONS: dict[str, tuple[Callable[..., None], str]] = {
    "server": (run_server, "Serve the notes API with uvicorn"),
    "migrate": (run_migrations, "Upgrade the database schema"),
    "health": (check_health, "Check config, database and app wiring"),
    "config": (show_config, "Print the validated YAML settings"),
    "test": (run_tests, "Run the test suite"),
    "info": (show_info, "Show this information"),
}


@click.command()
@click.option("--action", type=click.Choice(list(ACTIONS)), default="info", help="Action to perform.")
@click.option("--verbose", "-v", is_flag=True, help="INFO level logging.")
@click.option("--debug", "-d", is_flag=True, help="DEBUG level logging.")
@click.option("--host", default=None, help="Server host (server).")
@click.option("--port", default=None, type=int, help="Server port (server).")
@click.option("--reload", is_flag=True, help="Restart on code changes (server).")
@click.option("--revision", default="head", help="Target revision (migrate).")
@click.option(
    "--test-type",
    type=click.Choice(list(TEST_DIRS)),
    default="all",
    help="Which tests to run (test).",
)
def main(action: str, verbose: bool, debug: bool, **options) -> None:
    """
    Notes Server Entry Point.

    Examples:

        python run.py --action server --reload --verbose

        python run.py --action migrate

        python run.py --action test --test-type unit
    """
    validate_project_root()

    log_level = "DEBUG" if debug else "INFO" if verbose else "WARNING"
    setup_logging(level=log_level, format_type="console")
    logger = get_logger(__name__)
    logger.debug("Running action", extra={"action": action, "log_level": log_level})

    handler, _ = ACTIONS[action]
    handler(logger, **options)


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
Application Entry Script.

Main entry point for the notepad. All functionality is accessible
through command-line options.

Usage:
    python run.py --help
    python run.py --action server --verbose
    python run.py --action init-db
    python run.py --action health
    python run.py --action stats
    python run.py --action config
    python run.py --action test --test-type unit
"""

import asyncio
import subprocess
import sys
from pathlib import Path

import click

# Ensure project root is in path for absolute imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from modules.backend.core.config import validate_project_root
from modules.backend.core.logging import get_logger, setup_logging


@click.command()
@click.option(
    "--action",
    type=click.Choice(["server", "init-db", "health", "stats", "config", "test", "info"]),
    default="info",
    help="Action to perform.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output (INFO level logging).")
@click.option("--debug", "-d", is_flag=True, help="Enable debug output (DEBUG level logging).")
@click.option("--host", default=None, help="Server host (for server action).")
@click.option("--port", default=None, type=int, help="Server port (for server action).")
@click.option("--reload", is_flag=True, help="Enable auto-reload (for server action).")
@click.option(
    "--test-type",
    type=click.Choice(["all", "unit", "integration"]),
    default="all",
    help="Test type to run (for test action).",
)
@click.option("--coverage", is_flag=True, help="Run tests with coverage (for test action).")
def main(
    action: str,
    verbose: bool,
    debug: bool,
    host: str | None,
    port: int | None,
    reload: bool,
    test_type: str,
    coverage: bool,
) -> None:
    """
    Notepad Entry Point.

    Run the API server, create the database, query a running server,
    view configuration, or run tests.

    Examples:

        # Start development server
        python run.py --action server --reload --verbose

        # Ask a running server for note statistics
        python run.py --action stats

        # Run unit tests with coverage
        python run.py --action test --test-type unit --coverage
    """
    validate_project_root()

    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    setup_logging(level=log_level, format_type="console", enable_file_logging=False)
    logger = get_logger(__name__)

    logger.debug("Starting application", extra={"action": action, "log_level": log_level})

    if action == "server":
        run_server(logger, host, port, reload)
    elif action == "init-db":
        init_db(logger)
    elif action == "health":
        check_health(logger)
    elif action == "stats":
        show_stats(logger)
    elif action == "config":
        show_config(logger)
    elif action == "test":
        run_tests(logger, test_type, coverage)
    elif action == "info":
        show_info(logger)


def run_server(logger, host: str | None, port: int | None, reload: bool) -> None:
    """Start the FastAPI server."""
    from modules.backend.core.config import get_app_config

    server = get_app_config().application.server
    server_host = host or server.host
    server_port = port or server.port

    logger.info(
        "Starting server",
        extra={"host": server_host, "port": server_port, "reload": reload},
    )

    cmd = [
        sys.executable, "-m", "uvicorn",
        "modules.backend.main:app",
        "--host", server_host,
        "--port", str(server_port),
    ]

    if reload:
        cmd.append("--reload")

    click.echo(f"Starting server at http://{server_host}:{server_port}")
    click.echo("Press Ctrl+C to stop\n")

    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        logger.info("Server stopped")
    except subprocess.CalledProcessError as e:
        logger.error("Server failed to start", extra={"exit_code": e.returncode})
        sys.exit(e.returncode)


def init_db(logger) -> None:
    """Create the database tables and the upload directory."""
    from modules.backend.core.database import Database
    from modules.backend.core.storage import FileStorage

    async def _init() -> str:
        database = Database.from_config()
        try:
            await database.create_all()
        finally:
            await database.dispose()
        return database.url

    url = asyncio.run(_init())
    storage = FileStorage.from_config()
    storage.ensure_root()

    logger.info("Database initialized", extra={"url": url, "upload_dir": str(storage.root)})
    click.echo(click.style(f"Database ready: {url}", fg="green"))
    click.echo(click.style(f"Upload directory ready: {storage.root}", fg="green"))


def _call_server(coro_factory):
    """Run one NotepadClient call against the configured server."""
    from modules.client.api import ApiError, NotepadClient

    async def _run():
        async with NotepadClient() as client:
            return await coro_factory(client)

    try:
        return asyncio.run(_run())
    except ApiError as e:
        click.echo(click.style(f"Server error: {e}", fg="red"), err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(click.style(f"Server unreachable: {e}", fg="red"), err=True)
        sys.exit(1)


def check_health(logger) -> None:
    """Check configuration locally and the liveness of a running server."""
    from modules.backend.core.config import get_app_config, get_settings

    click.echo("Checking application health...\n")
    checks = []

    try:
        app_config = get_app_config()
        checks.append(("YAML configuration", True, f"App: {app_config.application.name}"))
    except Exception as e:
        checks.append(("YAML configuration", False, str(e)))

    try:
        get_settings()
        checks.append(("Secrets (config/.env)", True, None))
    except Exception as e:
        checks.append(("Secrets (config/.env)", False, str(e)))

    body = _call_server(lambda client: client.health())
    checks.append(("API server", bool(body.get("success")), body.get("message")))

    click.echo("Health Check Results:")
    click.echo("-" * 50)
    for name, passed, detail in checks:
        status = click.style("PASS", fg="green") if passed else click.style("FAIL", fg="red")
        detail_str = f" ({detail})" if detail else ""
        click.echo(f"  {status}  {name}{detail_str}")
    click.echo("-" * 50)

    logger.debug("Health displayed", extra={"checks": len(checks)})
    if not all(passed for _, passed, _ in checks):
        sys.exit(1)


def show_stats(logger) -> None:
    """Print note statistics from a running server."""
    stats = _call_server(lambda client: client.get_stats())

    click.echo("Note Statistics:")
    click.echo("-" * 40)
    click.echo(f"  Total notes:     {stats['totalNotes']}")
    click.echo(f"  Encrypted notes: {stats['encryptedNotes']}")
    click.echo(f"  Public notes:    {stats['publicNotes']}")
    click.echo(f"  Last updated:    {stats.get('lastUpdated') or '-'}")
    logger.debug("Stats displayed")


def show_config(logger) -> None:
    """Display loaded configuration."""
    from modules.backend.core.config import get_app_config

    try:
        app_config = get_app_config()
    except Exception as e:
        logger.error("Failed to load configuration", extra={"error": str(e)})
        click.echo(click.style(f"Error loading configuration: {e}", fg="red"))
        sys.exit(1)

    sections = {
        "Application": app_config.application,
        "Database": app_config.database,
        "Logging": app_config.logging,
        "Storage": app_config.storage,
        "Concurrency": app_config.concurrency,
        "Client": app_config.client,
    }
    for title, section in sections.items():
        click.echo(f"{title} Settings (from YAML):")
        click.echo("-" * 40)
        for key, value in section.model_dump().items():
            click.echo(f"  {key}: {value}")
        click.echo()

    logger.info("Configuration displayed successfully")


def run_tests(logger, test_type: str, coverage: bool) -> None:
    """Run the test suite."""
    logger.info("Running tests", extra={"type": test_type, "coverage": coverage})

    cmd = [sys.executable, "-m", "pytest"]

    if test_type == "unit":
        cmd.append("tests/unit")
    elif test_type == "integration":
        cmd.append("tests/integration")
    else:
        cmd.append("tests/")

    cmd.append("-v")

    if coverage:
        cmd.extend(["--cov=modules", "--cov-report=term-missing"])

    click.echo(f"Running: {' '.join(cmd)}\n")

    try:
        result = subprocess.run(cmd)
        sys.exit(result.returncode)
    except FileNotFoundError:
        logger.error("pytest not found. Install with: pip install -e '.[test]'")
        sys.exit(1)


def show_info(logger) -> None:
    """Display application information."""
    from modules.backend.core.config import get_app_config

    application = get_app_config().application
    click.echo(f"{application.name} {application.version}")
    click.echo("=" * 40)
    click.echo(application.description)
    click.echo()
    click.echo("Available Actions:")
    click.echo("  --action server   Start the API server")
    click.echo("  --action init-db  Create database tables and upload directory")
    click.echo("  --action health   Check configuration and a running server")
    click.echo("  --action stats    Show note statistics from a running server")
    click.echo("  --action config   Display configuration")
    click.echo("  --action test     Run test suite")
    click.echo("  --action info     Show this information")
    click.echo()
    click.echo("Logging Options:")
    click.echo("  --verbose, -v     Enable INFO level logging")
    click.echo("  --debug, -d       Enable DEBUG level logging")

    logger.debug("Info displayed")


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
Notes API CLI.

Primary entry point for all application operations.
Use --service to select what to run.

Usage:
    python cli.py --help
    python cli.py --service server --verbose
    python cli.py --service health --debug
    python cli.py --service config
    python cli.py --service migrate --migrate-action upgrade
"""

import asyncio
import subprocess
import sys
from pathlib import Path

import click
import structlog

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from notes_api.core.logging import get_logger, log_with_source, setup_logging

ALEMBIC_INI = PROJECT_ROOT / "notes_api" / "migrations" / "alembic.ini"


def validate_project_root() -> Path:
    """Validate that we're running from the project root."""
    if not (PROJECT_ROOT / ".project_root").exists():
        click.echo(
            click.style("Error: .project_root not found. Run from project root.", fg="red"),
            err=True,
        )
        sys.exit(1)
    return PROJECT_ROOT


@click.command()
@click.option(
    "--service", "-s",
    type=click.Choice(["server", "health", "config", "migrate", "info"]),
    default="info",
    help="Service or command to run.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output (INFO level logging).",
)
@click.option(
    "--debug", "-d",
    is_flag=True,
    help="Enable debug output (DEBUG level logging).",
)
@click.option(
    "--host",
    default=None,
    help="Server host.",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="Server port.",
)
@click.option(
    "--reload",
    is_flag=True,
    help="Enable auto-reload (server only).",
)
@click.option(
    "--migrate-action",
    type=click.Choice(["upgrade", "downgrade", "current", "history", "autogenerate"]),
    default="current",
    help="Migration action.",
)
@click.option(
    "--revision",
    default="head",
    help="Target revision for upgrade/downgrade.",
)
@click.option(
    "-m", "--message",
    default=None,
    help="Migration message (for autogenerate).",
)
def main(
    service: str,
    verbose: bool,
    debug: bool,
    host: str | None,
    port: int | None,
    reload: bool,
    migrate_action: str,
    revision: str,
    message: str | None,
) -> None:
    """
    Notes API CLI.

    Use --service to select what to run.

    \b
    Examples:
        python cli.py --service server --reload --verbose
        python cli.py --service health --debug
        python cli.py --service config
        python cli.py --service info
        python cli.py --service migrate --migrate-action current
        python cli.py --service migrate --migrate-action upgrade
        python cli.py --service migrate --migrate-action autogenerate -m "add tags"
    """
    validate_project_root()

    # CLI verbosity flags take precedence over logging.yaml
    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    setup_logging(level=log_level, format_type="console")

    # Tag every log line from this process as CLI output
    structlog.contextvars.bind_contextvars(source="cli")

    logger = get_logger(__name__)

    logger.debug("CLI invoked", extra={"service": service, "log_level": log_level})

    # Dispatch to service handlers
    if service == "server":
        run_server(logger, host, port, reload)
    elif service == "health":
        check_health(logger)
    elif service == "config":
        show_config(logger)
    elif service == "migrate":
        run_migrations(logger, migrate_action, revision, message)
    elif service == "info":
        show_info(logger)


def run_server(logger, host: str | None, port: int | None, reload: bool) -> None:
    """Start the FastAPI server under uvicorn."""
    from notes_api.core.config import get_app_config

    try:
        server_config = get_app_config().application.server
    except (FileNotFoundError, ValueError) as e:
        logger.error("Failed to load configuration.", extra={"error": str(e)})
        click.echo(
            click.style("Error: Could not load config/settings/application.yaml.", fg="red"),
            err=True,
        )
        sys.exit(1)

    # Command-line overrides win over application.yaml
    server_host = host or server_config.host
    server_port = port or server_config.port

    logger.info(
        "Starting server",
        extra={"host": server_host, "port": server_port, "reload": reload},
    )

    cmd = [
        sys.executable, "-m", "uvicorn",
        "notes_api.main:app",
        "--host", server_host,
        "--port", str(server_port),
    ]

    # Development only; watches the source tree
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


async def _ping_database(timeout: float) -> None:
    from notes_api.core.database import Database

    database = Database.from_config()
    try:
        await database.ping(timeout=timeout)
    finally:
        await database.dispose()


def check_health(logger) -> None:
    """Check application health: imports, configuration and database."""
    click.echo("Checking application health...\n")

    checks = []

    # Check 1: Core imports
    try:
        from notes_api.core.config import get_app_config
        from notes_api.main import get_app
        checks.append(("Core imports", True, None))
        logger.debug("Core imports successful")
    except ImportError as e:
        checks.append(("Core imports", False, str(e)))
        logger.error("Core imports failed", extra={"error": str(e)})
        _report_checks(checks)
        sys.exit(1)

    # Check 2: Configuration loading
    app_config = None
    try:
        app_config = get_app_config()
        app_name = app_config.application.name
        checks.append(("YAML configuration", True, f"App: {app_name}"))
        logger.debug("Configuration loaded", extra={"app_name": app_name})
    except (FileNotFoundError, ValueError) as e:
        checks.append(("YAML configuration", False, str(e)))
        logger.error("Configuration failed", extra={"error": str(e)})

    # Check 3: FastAPI app
    if app_config is not None:
        app = get_app()
        checks.append(("FastAPI application", True, f"Title: {app.title}"))
        logger.debug("FastAPI app loaded", extra={"title": app.title})

    # Check 4: Database connectivity
    if app_config is not None:
        timeout = app_config.application.timeouts.startup_check
        try:
            asyncio.run(_ping_database(timeout))
            checks.append(("Database connectivity", True, None))
            log_with_source(logger, "cli", "debug", "Database reachable")
        except TimeoutError:
            checks.append(("Database connectivity", False, f"No response within {timeout}s"))
            log_with_source(logger, "cli", "error", "Database ping timed out", timeout=timeout)
        except Exception as e:
            checks.append(("Database connectivity", False, str(e)))
            log_with_source(logger, "cli", "error", "Database ping failed", error=str(e))

    # Display results
    if not _report_checks(checks):
        sys.exit(1)


def _report_checks(checks: list[tuple[str, bool, str | None]]) -> bool:
    """Print check results. Returns True if every check passed."""
    click.echo("Health Check Results:")
    click.echo("-" * 50)

    all_passed = True
    for name, passed, detail in checks:
        status = click.style("✓ PASS", fg="green") if passed else click.style("✗ FAIL", fg="red")
        detail_str = f" ({detail})" if detail else ""
        click.echo(f"  {status}  {name}{detail_str}")
        if not passed:
            all_passed = False

    click.echo("-" * 50)

    if all_passed:
        click.echo(click.style("\nAll checks passed!", fg="green"))
    else:
        click.echo(click.style("\nSome checks failed. See details above.", fg="yellow"))
    return all_passed


def show_config(logger) -> None:
    """Display loaded configuration."""
    click.echo("Application Configuration:\n")

    from notes_api.core.config import get_app_config

    try:
        app_config = get_app_config()
    except (FileNotFoundError, ValueError) as e:
        logger.error("Failed to load configuration", extra={"error": str(e)})
        click.echo(click.style(f"Error loading configuration: {e}", fg="red"))
        sys.exit(1)

    sections = [
        ("Application Settings", app_config.application),
        ("Database Settings", app_config.database),
        ("Logging Settings", app_config.logging),
        ("Feature Flags", app_config.features),
        ("Observability Settings", app_config.observability),
    ]
    for index, (title, section) in enumerate(sections):
        if index:
            click.echo()
        click.echo(f"{title} (from YAML):")
        click.echo("-" * 40)
        _echo_mapping(section.model_dump())

    logger.info("Configuration displayed successfully")


def _echo_mapping(values: dict, indent: int = 2) -> None:
    for key, value in values.items():
        if isinstance(value, dict):
            click.echo(f"{' ' * indent}{key}:")
            _echo_mapping(value, indent + 2)
        else:
            click.echo(f"{' ' * indent}{key}: {value}")


def run_migrations(
    logger,
    migrate_action: str,
    revision: str,
    message: str | None,
) -> None:
    """Run database migrations using Alembic."""
    logger.info(
        "Running migrations",
        extra={"action": migrate_action, "revision": revision},
    )

    # Alembic config path
    if not ALEMBIC_INI.exists():
        click.echo(
            click.style("Error: notes_api/migrations/alembic.ini not found.", fg="red"),
            err=True,
        )
        sys.exit(1)

    # Build alembic command
    cmd = [sys.executable, "-m", "alembic", "-c", str(ALEMBIC_INI)]

    if migrate_action == "upgrade":
        cmd.extend(["upgrade", revision])
        click.echo(f"Upgrading database to revision: {revision}")
    elif migrate_action == "downgrade":
        cmd.extend(["downgrade", revision])
        click.echo(f"Downgrading database to revision: {revision}")
    elif migrate_action == "current":
        cmd.append("current")
        click.echo("Showing current database revision...")
    elif migrate_action == "history":
        cmd.extend(["history", "--verbose"])
        click.echo("Showing migration history...")
    elif migrate_action == "autogenerate":
        if not message:
            click.echo(
                click.style("Error: --message/-m required for autogenerate.", fg="red"),
                err=True,
            )
            sys.exit(1)
        cmd.extend(["revision", "--autogenerate", "-m", message])
        click.echo(f"Generating migration: {message}")

    click.echo()

    try:
        result = subprocess.run(cmd, cwd=PROJECT_ROOT)
    except FileNotFoundError:
        logger.error("alembic not found. Install with: pip install alembic")
        sys.exit(1)

    if result.returncode != 0:
        logger.error("Migration failed", extra={"exit_code": result.returncode})
        sys.exit(result.returncode)
    logger.info("Migration completed successfully")


def show_info(logger) -> None:
    """Display application information."""
    from notes_api.core.config import get_app_config

    click.echo("Notes API")
    click.echo("=" * 40)

    try:
        app_settings = get_app_config().application
    except (FileNotFoundError, ValueError) as e:
        logger.error(
            "Failed to load application configuration",
            extra={"error": str(e)},
        )
        click.echo(
            click.style(
                "Error: Could not load application.yaml configuration.",
                fg="red",
            ),
            err=True,
        )
        sys.exit(1)

    click.echo(f"Name: {app_settings.name}")
    click.echo(f"Version: {app_settings.version}")
    click.echo(f"Description: {app_settings.description}")
    click.echo()
    click.echo("Services (--service):")
    click.echo("  server         FastAPI server (uvicorn)")
    click.echo("  health         Check imports, configuration and database")
    click.echo("  config         Display configuration")
    click.echo("  migrate        Database migrations")
    click.echo("  info           Show this information")
    click.echo()
    click.echo("Options:")
    click.echo("  --verbose, -v  Enable INFO level logging")
    click.echo("  --debug, -d    Enable DEBUG level logging")
    click.echo()
    click.echo("Examples:")
    click.echo("  python cli.py --service server --reload --verbose")
    click.echo("  python cli.py --service health --debug")
    click.echo("  python cli.py --service migrate --migrate-action upgrade")

    logger.debug("Info displayed")


if __name__ == "__main__":
    main()

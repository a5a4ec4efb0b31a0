"""
CLI entrypoint for Version Ledger.

Lets operators inspect and edit the version ledger of a media database.

Commands:
    get: Print the version of a feature instance (-1 if unset)
    set: Record the version of a feature instance
    remove: Forget the version of a feature instance
    list: Show every recorded version
    validate: Validate a configuration file

Exit codes:
    0: Success
    1: Configuration or usage error (invalid YAML, unknown feature name)
    2: Database error (store unavailable, I/O failure)

Examples:
    version-ledger set cache-content-metadata cache1 2 --db ./media.db
    version-ledger get cache-content-metadata cache1 --db ./media.db --format json
    version-ledger list --config version_ledger.config.yaml
"""

from pathlib import Path
from typing import NoReturn

import typer
from rich.traceback import install as install_rich_traceback

from version_ledger.config.loader import (
    DEFAULT_CONFIG_FILENAME,
    build_database,
    load_config,
)
from version_ledger.config.schema import LedgerConfig
from version_ledger.exceptions import ConfigurationError, DatabaseError
from version_ledger.storage.database import SQLiteDatabase
from version_ledger.storage.version_table import (
    VERSION_UNSET,
    Feature,
    get_version,
    list_versions,
    remove_version,
    set_version,
)
from version_ledger.utils.console import (
    error,
    info,
    output_mode,
    print_versions_table,
    success,
)
from version_ledger.utils.logging import setup_logging

install_rich_traceback(show_locals=False)

# Exit codes
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_DB_ERROR = 2

app = typer.Typer(
    name="version-ledger",
    help="Inspect and edit per-feature schema versions of a media database",
    add_completion=False,
)

DB_OPTION = typer.Option(
    None,
    "--db",
    help="Path to SQLite database (overrides database.path from the config)",
)
CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    help=f"Path to YAML configuration file (default: ./{DEFAULT_CONFIG_FILENAME} if present)",
)
FORMAT_OPTION = typer.Option(
    "text",
    "--format",
    "-f",
    help="Output format: 'text' (human-friendly) or 'json' (machine-readable)",
)


def parse_feature(value: str) -> int:
    """
    Parse a feature given on the command line.

    Accepts a Feature name in any case with '-' or '_' separators
    ("cache-content-metadata", "OFFLINE") or a non-negative integer.

    Raises:
        ValueError: If the value is neither
    """
    name = value.strip().upper().replace("-", "_")
    if name in Feature.__members__:
        return int(Feature[name])
    try:
        feature = int(value)
    except ValueError:
        choices = ", ".join(f.name.lower().replace("_", "-") for f in Feature)
        raise ValueError(
            f"Unknown feature {value!r}. Use one of: {choices}, or an integer"
        ) from None
    if feature < 0:
        raise ValueError(f"Feature must be non-negative, got: {feature}")
    return feature


def _resolve_feature(value: str) -> int:
    try:
        return parse_feature(value)
    except ValueError as e:
        _fail(str(e), "invalid_feature", EXIT_CONFIG_ERROR)


def _set_format(format: str) -> None:
    try:
        output_mode.format = format
    except ValueError as e:
        error(str(e))
        raise typer.Exit(EXIT_CONFIG_ERROR) from None


def _open_database(config: Path | None, db: Path | None) -> SQLiteDatabase:
    """
    Resolve configuration and open the ledger database.

    An explicit --config must exist. Without one, ./version_ledger.config.yaml
    is used when present and built-in defaults otherwise. --db always wins.
    """
    if config is None and Path(DEFAULT_CONFIG_FILENAME).exists():
        config = Path(DEFAULT_CONFIG_FILENAME)

    try:
        ledger_config = load_config(config) if config is not None else LedgerConfig()
    except ConfigurationError as e:
        _fail(str(e), "config_error", EXIT_CONFIG_ERROR)

    setup_logging(verbose=ledger_config.logging.verbose)

    if db is not None:
        ledger_config.database.path = str(db)

    try:
        return build_database(ledger_config)
    except OSError as e:
        _fail(f"Cannot open database: {e}", "database_error", EXIT_DB_ERROR)


def _fail(message: str, error_type: str, exit_code: int) -> NoReturn:
    error(message)
    if output_mode.is_agent():
        output_mode.add_json("error_type", error_type)
        output_mode.flush_json()
    raise typer.Exit(exit_code)


@app.command("get")
def get_command(
    feature: str = typer.Argument(..., help="Feature name or integer"),
    instance_uid: str = typer.Argument(..., help="Instance identifier"),
    db: Path = DB_OPTION,
    config: Path = CONFIG_OPTION,
    format: str = FORMAT_OPTION,
):
    """
    Print the version recorded for a feature instance.

    Prints -1 when no version is recorded.
    """
    _set_format(format)
    feature_id = _resolve_feature(feature)

    with _open_database(config, db) as database:
        try:
            version = get_version(database, feature_id, instance_uid)
        except DatabaseError as e:
            _fail(str(e), "database_error", EXIT_DB_ERROR)

    if output_mode.is_agent():
        output_mode.add_json("feature", feature_id)
        output_mode.add_json("instance_uid", instance_uid)
        output_mode.add_json("version", version)
        output_mode.add_json("is_set", version != VERSION_UNSET)
        output_mode.flush_json()
    else:
        typer.echo(str(version))


@app.command("set")
def set_command(
    feature: str = typer.Argument(..., help="Feature name or integer"),
    instance_uid: str = typer.Argument(..., help="Instance identifier"),
    version: int = typer.Argument(..., help="Version to record"),
    db: Path = DB_OPTION,
    config: Path = CONFIG_OPTION,
    format: str = FORMAT_OPTION,
):
    """Record the version of a feature instance, replacing any previous one."""
    _set_format(format)
    feature_id = _resolve_feature(feature)

    with _open_database(config, db) as database:
        try:
            set_version(database, feature_id, instance_uid, version)
        except DatabaseError as e:
            _fail(str(e), "database_error", EXIT_DB_ERROR)

    success(f"Set version {version} for {feature} / {instance_uid}")
    output_mode.flush_json()


@app.command("remove")
def remove_command(
    feature: str = typer.Argument(..., help="Feature name or integer"),
    instance_uid: str = typer.Argument(..., help="Instance identifier"),
    db: Path = DB_OPTION,
    config: Path = CONFIG_OPTION,
    format: str = FORMAT_OPTION,
):
    """Remove the version of a feature instance. Succeeds if none is recorded."""
    _set_format(format)
    feature_id = _resolve_feature(feature)

    with _open_database(config, db) as database:
        try:
            remove_version(database, feature_id, instance_uid)
        except DatabaseError as e:
            _fail(str(e), "database_error", EXIT_DB_ERROR)

    success(f"Removed version for {feature} / {instance_uid}")
    output_mode.flush_json()


@app.command("list")
def list_command(
    feature: str = typer.Option(None, "--feature", help="Only show this feature"),
    db: Path = DB_OPTION,
    config: Path = CONFIG_OPTION,
    format: str = FORMAT_OPTION,
):
    """Show every recorded version."""
    _set_format(format)
    feature_id = _resolve_feature(feature) if feature is not None else None

    with _open_database(config, db) as database:
        try:
            records = list_versions(database, feature_id)
        except DatabaseError as e:
            _fail(str(e), "database_error", EXIT_DB_ERROR)

    print_versions_table(records)
    output_mode.flush_json()


@app.command()
def validate(
    config: Path = typer.Option(
        ...,
        "--config",
        "-c",
        help="Path to YAML configuration file",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    format: str = FORMAT_OPTION,
):
    """
    Validate a configuration file without opening the database.

    Exit codes:
      0: Configuration is valid
      1: Configuration is invalid
    """
    _set_format(format)

    try:
        ledger_config = load_config(config)
    except ConfigurationError as e:
        if output_mode.is_agent():
            output_mode.add_json("valid", False)
        _fail(f"Validation failed: {e}", "validation_error", EXIT_CONFIG_ERROR)

    success("Configuration is valid")
    info(f"Database: {ledger_config.database.path}")
    info(f"Timeout: {ledger_config.database.timeout_seconds}s")

    if output_mode.is_agent():
        output_mode.add_json("valid", True)
        output_mode.add_json("database_path", ledger_config.database.path)
        output_mode.flush_json()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
):
    """
    Version Ledger - per-feature schema versions for media databases.

    Use 'version-ledger COMMAND --help' for detailed command documentation.
    """
    if version:
        from rich.console import Console

        Console().print(f"[bold cyan]version-ledger[/bold cyan] version {_read_version()}")
        raise typer.Exit(EXIT_SUCCESS)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


def _read_version() -> str:
    """Read version from package metadata."""
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("version-ledger")
    except PackageNotFoundError:
        return "0.1.0"


if __name__ == "__main__":
    app()

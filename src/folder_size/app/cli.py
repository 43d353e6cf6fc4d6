"""Command-line interface for folder-size."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import click

from folder_size.app.runner import ApplicationRunner
from folder_size.core.config import ConfigurationError
from folder_size.core.orchestrator import FOLDER_NOT_FOUND
from folder_size.types import WorkspaceReport

# Configuration file discovery paths in order of precedence
# 1. Current directory
CURRENT_DIR_CONFIG_FILES = [
    'folder-size.yaml',
    'folder-size.yml',
]

# 2. User home directory
HOME_CONFIG_FILES = [
    '.folder-size.yaml',
    '.folder-size.yml',
]

VALID_LOG_LEVELS = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}

# Width of the path column in analysis output
PATH_COLUMN_WIDTH = 30


def discover_config_file() -> Path | None:
    """Discover configuration file in standard locations.

    Searches for configuration files in the following order of precedence:
    1. Current directory (folder-size.yaml, folder-size.yml)
    2. User home directory (~/.folder-size.yaml, ~/.folder-size.yml)

    Returns:
        Path to the first configuration file found, or None when defaults apply
    """
    for config_file in CURRENT_DIR_CONFIG_FILES:
        config_path = Path(config_file)
        if config_path.is_file():
            return config_path

    try:
        home_dir = Path.home()
    except (OSError, RuntimeError):
        # Path.home() can fail in some environments
        return None

    for config_file in HOME_CONFIG_FILES:
        config_path = home_dir / config_file
        if config_path.is_file():
            return config_path

    return None


def validate_config_path(
    ctx: click.Context,  # pyright: ignore[reportUnusedParameter] # required by Click callback signature
    param: click.Parameter,  # pyright: ignore[reportUnusedParameter] # required by Click callback signature
    value: Path | None,
) -> Path | None:
    """Validate configuration file path.

    Raises:
        click.BadParameter: If the path is a directory or not a YAML file
    """
    if value is None:
        return value

    if value.is_dir():
        raise click.BadParameter('Configuration path must be a file, not a directory')

    if value.suffix.lower() not in {'.yaml', '.yml'}:
        raise click.BadParameter('Invalid configuration file extension. Supported extensions: .yaml, .yml')

    return value


def validate_log_level(
    ctx: click.Context,  # pyright: ignore[reportUnusedParameter] # required by Click callback signature
    param: click.Parameter,  # pyright: ignore[reportUnusedParameter] # required by Click callback signature
    value: str | None,
) -> str | None:
    """Validate and normalize log level.

    Returns:
        Normalized log level (uppercase)

    Raises:
        click.BadParameter: If validation fails
    """
    if value is None:
        return value

    normalized_value = value.upper().strip()

    if normalized_value not in VALID_LOG_LEVELS:
        raise click.BadParameter(
            f'Invalid log level "{value}". Valid options: {", ".join(sorted(VALID_LOG_LEVELS))}'
        )

    return normalized_value


def render_report(report: WorkspaceReport) -> None:
    """Print one line per sized root, failures, then the total."""
    for result in report.results:
        if result.ok:
            click.echo(f'{result.path:<{PATH_COLUMN_WIDTH}} → {result.formatted_size}')
        elif result.error != FOLDER_NOT_FOUND:
            click.echo(f'✗ {result.path}: {result.error}', err=True)

    click.echo(f'Total: {report.formatted_total}')


try:
    __version__ = version('folder-size')
except PackageNotFoundError:
    __version__ = 'unknown'


@click.group()
@click.option(
    '--config', '-c',
    type=click.Path(path_type=Path),
    default=None,
    callback=validate_config_path,
    help='Configuration file path (.yaml or .yml). If not specified, searches the current and home directories.'
)
@click.option(
    '--log-level', '-l',
    type=str,
    default=None,
    callback=validate_log_level,
    help='Logging verbosity level (DEBUG, INFO, WARNING, ERROR, CRITICAL); overrides the configuration'
)
@click.version_option(version=__version__, prog_name='folder-size')
@click.pass_context
def cli(
    ctx: click.Context,
    config: Path | None,
    log_level: str | None,
) -> None:
    """folder-size - Report recursive folder sizes.

    Walks folders concurrently with a bounded number of filesystem calls in
    flight, skipping paths that match ignore globs.

    Examples:

        # Size the workspace's node_modules, dist, build and cache folders
        folder-size analyze

        # Size explicit folders, ignoring a subtree
        folder-size analyze ./src ./docs --ignore '**/fixtures/**'

        # Show the largest folders of a directory
        folder-size top ./node_modules --limit 10

        # Ignore the vendor and tmp top-level folders from now on
        folder-size ignore . vendor tmp
    """
    config_path = config if config is not None else discover_config_file()
    ctx.obj = ApplicationRunner(config_path=config_path, log_level=log_level)


@cli.command()
@click.argument('paths', nargs=-1, type=click.Path(path_type=Path))
@click.option(
    '--workspace', '-w',
    type=click.Path(file_okay=False, path_type=Path),
    default=Path('.'),
    show_default=True,
    help='Workspace root holding the ignore file and the target folders'
)
@click.option(
    '--ignore', '-i',
    'ignore_patterns',
    multiple=True,
    help='Additional ignore glob matched against absolute paths (repeatable)'
)
@click.option(
    '--concurrency', '-j',
    type=click.IntRange(min=1),
    default=None,
    help='Maximum number of filesystem calls in flight'
)
@click.pass_obj
def analyze(
    runner: ApplicationRunner,
    paths: tuple[Path, ...],
    workspace: Path,
    ignore_patterns: tuple[str, ...],
    concurrency: int | None,
) -> None:
    """Report the recursive size of PATHS.

    Without PATHS the workspace's configured target folders are sized.
    """
    workspace = workspace.resolve()
    roots = [path.resolve() for path in paths]

    try:
        report = runner.analyze(
            roots,
            workspace=workspace,
            extra_patterns=ignore_patterns,
            concurrency=concurrency,
        )
    except ConfigurationError as e:
        raise click.ClickException(f'Configuration error:\n{e}')

    render_report(report)


@cli.command()
@click.argument('directory', type=click.Path(file_okay=False, path_type=Path))
@click.option(
    '--workspace', '-w',
    type=click.Path(file_okay=False, path_type=Path),
    default=Path('.'),
    show_default=True,
    help='Workspace root holding the ignore file'
)
@click.option(
    '--ignore', '-i',
    'ignore_patterns',
    multiple=True,
    help='Additional ignore glob matched against absolute paths (repeatable)'
)
@click.option(
    '--limit', '-n',
    type=click.IntRange(min=1),
    default=None,
    help='Maximum number of rows (defaults to the configured top_children)'
)
@click.pass_obj
def top(
    runner: ApplicationRunner,
    directory: Path,
    workspace: Path,
    ignore_patterns: tuple[str, ...],
    limit: int | None,
) -> None:
    """Show the largest immediate children of DIRECTORY."""
    directory = directory.resolve()

    try:
        rows = runner.largest_children(
            directory,
            workspace=workspace.resolve(),
            limit=limit,
            extra_patterns=ignore_patterns,
        )
    except ConfigurationError as e:
        raise click.ClickException(f'Configuration error:\n{e}')
    except OSError as e:
        raise click.ClickException(f'Cannot list {directory}: {e}')

    if not rows:
        click.echo('No non-empty folders found')
        return

    for row in rows:
        click.echo(f'{row.formatted_size:>12}  {row.name}')


@cli.command()
@click.argument('root', type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument('names', nargs=-1)
@click.option(
    '--list', 'list_only',
    is_flag=True,
    help='List the top-level folders that can be ignored without changing anything'
)
@click.pass_obj
def ignore(
    runner: ApplicationRunner,
    root: Path,
    names: tuple[str, ...],
    list_only: bool,
) -> None:
    """Ignore exactly the top-level folders NAMES of ROOT.

    Rewrites ROOT's ignore file; other patterns in it are kept. Running the
    command without NAMES clears the top-level selection.
    """
    root = root.resolve()

    try:
        if list_only:
            for name in runner.available_top_level(root):
                click.echo(name)
            return

        written = runner.update_ignore_file(root, names)
    except ConfigurationError as e:
        raise click.ClickException(f'Configuration error:\n{e}')
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='NAMES')
    except OSError as e:
        raise click.ClickException(f'Failed to write ignore file: {e}')

    if not written:
        click.echo('No top-level folders ignored')
        return

    for pattern in written:
        click.echo(f'Ignoring {pattern}')


if __name__ == '__main__':
    cli()

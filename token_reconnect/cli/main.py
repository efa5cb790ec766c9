"""Click-based CLI for reconnecting detached styles to library tokens."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import click

from .. import __version__
from ..config import CONFIG_FILENAME, ConfigLoader, ReconnectConfig, load_config
from ..document import InMemoryDocument
from ..errors import ReconnectError
from ..library import InMemoryTokenStore
from ..models import Fix, MatchResult
from ..protocol import APPLY_FIXES, SCAN
from ..reconnect_logging import LogCategory, get_category_logger, setup_logging
from ..session import ReconnectSession, run_stdio_session
from .output import OutputConfig, OutputManager

logger = get_category_logger(LogCategory.CLI)


def common_options(f: Any) -> Any:
    """Options shared by every command."""
    f = click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")(f)
    f = click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")(f)
    f = click.option("--no-color", is_flag=True, help="Disable colored output")(f)
    f = click.option(
        "--config",
        "config_path",
        type=click.Path(exists=True, dir_okay=False),
        help="Configuration file path",
    )(f)
    return f


def document_options(f: Any) -> Any:
    """Document and token library inputs."""
    f = click.argument("document", type=click.Path(exists=True, dir_okay=False))(f)
    f = click.option(
        "--tokens",
        "-t",
        "tokens_path",
        type=click.Path(exists=True, dir_okay=False),
        required=True,
        help="Token library export (JSON)",
    )(f)
    f = click.option(
        "--selection",
        "use_selection",
        is_flag=True,
        help="Scan the document's selection instead of the whole page",
    )(f)
    return f


def _prepare(
    verbose: bool, quiet: bool, no_color: bool, config_path: str | None
) -> tuple[ReconnectConfig, OutputManager]:
    output = OutputManager(
        OutputConfig.from_flags(verbose=verbose, quiet=quiet, no_color=no_color)
    )
    try:
        config = load_config(Path.cwd(), Path(config_path) if config_path else None)
    except ReconnectError as e:
        click.echo(e.format(use_color=output.config.use_color), err=True)
        sys.exit(e.exit_code)

    setup_logging(
        level=config.logging.level,
        quiet=quiet,
        verbose=verbose,
        log_file=Path(config.logging.file) if config.logging.file else None,
        enable_file_logging=config.logging.file_logging,
        project_path=Path.cwd(),
        log_format=config.logging.format,
        rotation_count=config.logging.rotation_count,
        max_bytes=config.logging.max_bytes,
    )
    return config, output


def _load_inputs(
    document_path: str, tokens_path: str, output: OutputManager
) -> tuple[InMemoryDocument, InMemoryTokenStore]:
    try:
        document = InMemoryDocument.from_file(Path(document_path))
        store = InMemoryTokenStore.from_file(Path(tokens_path))
    except (OSError, ValueError) as e:
        # json.JSONDecodeError is a ValueError
        output.error(f"Failed to load input: {e}")
        sys.exit(1)
    return document, store


def _match_index(response: dict[str, Any]) -> dict[str, dict[str, Any]]:
    return {result["detachedStyleId"]: result for result in response["matchResults"]}


def _unambiguous_fixes(response: dict[str, Any]) -> list[Fix]:
    """Fixes for styles with exactly one non-conflicting candidate."""
    fixes = []
    for data in response["matchResults"]:
        result = MatchResult.from_dict(data)
        if len(result.matches) != 1 or result.has_conflict:
            continue
        fixes.append(Fix.from_match(result.detached_style_id, result.matches[0]))
    return fixes


def _report_scan(response: dict[str, Any], output: OutputManager) -> None:
    styles = response["detachedStyles"]
    matches = _match_index(response)

    output.header(f"Detached styles ({len(styles)})")
    for style in styles:
        output.detached_style(style, matches.get(style["id"]))

    matched = sum(1 for result in matches.values() if result["matches"])
    conflicts = sum(1 for result in matches.values() if result["hasConflict"])
    output.summary(len(styles), matched=matched, conflicts=conflicts)


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Token Reconnect - rebind detached styles to design-system tokens."""
    pass


@cli.command()
@document_options
@click.option("--node-limit", type=int, help="Maximum nodes to scan")
@click.option("--include-hidden", is_flag=True, help="Scan hidden layers too")
@click.option(
    "--include-padding", is_flag=True, help="Report detached auto-layout padding"
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@common_options
def scan(
    document: str,
    tokens_path: str,
    use_selection: bool,
    node_limit: int | None,
    include_hidden: bool,
    include_padding: bool,
    as_json: bool,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    config_path: str | None,
) -> None:
    """Scan DOCUMENT for detached styles and match them to library tokens.

    Examples:
        token-reconnect scan design.json --tokens tokens.json
        token-reconnect scan design.json -t tokens.json --selection --json
    """
    config, output = _prepare(verbose, quiet, no_color, config_path)

    if node_limit is not None:
        config.scan.node_limit = node_limit
    if include_hidden:
        config.scan.include_hidden = True
    if include_padding:
        config.scan.include_padding = True
    try:
        config.validate()
    except ReconnectError as e:
        click.echo(e.format(use_color=output.config.use_color), err=True)
        sys.exit(e.exit_code)

    doc, store = _load_inputs(document, tokens_path, output)
    session = ReconnectSession(doc, store, config)
    response = asyncio.run(
        session.handle_message({"type": SCAN, "useSelection": use_selection})
    )

    if as_json:
        click.echo(json.dumps(response, indent=2))
        sys.exit(1 if "errorMessage" in response else 0)

    if "errorMessage" in response:
        output.error(response["errorMessage"])
        sys.exit(1)

    _report_scan(response, output)


@cli.command()
@document_options
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    help="Write the fixed document here instead of overwriting DOCUMENT",
)
@click.option("--dry-run", is_flag=True, help="Show the fixes without applying them")
@common_options
def fix(
    document: str,
    tokens_path: str,
    use_selection: bool,
    output_path: str | None,
    dry_run: bool,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    config_path: str | None,
) -> None:
    """Bind every detached style that has exactly one candidate token.

    Styles with several candidates or a library conflict are skipped and
    left for an interactive session.

    Examples:
        token-reconnect fix design.json --tokens tokens.json --dry-run
        token-reconnect fix design.json -t tokens.json -o fixed.json
    """
    config, output = _prepare(verbose, quiet, no_color, config_path)
    doc, store = _load_inputs(document, tokens_path, output)
    session = ReconnectSession(doc, store, config)

    response = asyncio.run(
        session.handle_message({"type": SCAN, "useSelection": use_selection})
    )
    if "errorMessage" in response:
        output.error(response["errorMessage"])
        sys.exit(1)

    fixes = _unambiguous_fixes(response)
    skipped = len(response["detachedStyles"]) - len(fixes)
    styles = {style["id"]: style for style in response["detachedStyles"]}

    for planned in fixes:
        style = styles[planned.detached_style_id]
        output.info(
            f"{style['nodeName']} / {style['propertyName']} -> {planned.target_id}"
        )
    if skipped:
        output.skip(f"{skipped} detached styles without a single unambiguous match")

    if not fixes:
        output.warning("No unambiguous matches to apply.", force=True)
        return

    if dry_run:
        output.success(f"Would apply {len(fixes)} fixes (dry run)", force=True)
        return

    payload = [planned.to_dict() for planned in fixes]
    result = asyncio.run(session.handle_message({"type": APPLY_FIXES, "fixes": payload}))

    target_path = Path(output_path) if output_path else Path(document)
    doc.save(target_path)

    if "errorMessage" in result:
        output.error(result["errorMessage"])
        sys.exit(1)
    output.success(
        f"Applied {result['appliedCount']} fixes, saved to {target_path}", force=True
    )


@cli.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--tokens",
    "-t",
    "tokens_path",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Token library export (JSON)",
)
@click.option(
    "--save/--no-save",
    default=True,
    help="Write the document back when the session ends",
)
@common_options
def session(
    document: str,
    tokens_path: str,
    save: bool,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    config_path: str | None,
) -> None:
    """Serve the scan/apply-fixes protocol as JSON lines on stdin/stdout.

    Example:
        echo '{"type": "scan"}' | token-reconnect session design.json -t tokens.json
    """
    config, output = _prepare(verbose, quiet, no_color, config_path)
    doc, store = _load_inputs(document, tokens_path, output)

    reconnect_session = ReconnectSession(doc, store, config)
    sent = asyncio.run(run_stdio_session(reconnect_session))
    logger.info(f"Session ended after {sent} responses")

    if save:
        doc.save(Path(document))


@cli.group("config")
def config_group() -> None:
    """Configuration management commands."""
    pass


@config_group.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@common_options
def config_show(
    as_json: bool,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    config_path: str | None,
) -> None:
    """Show the effective configuration."""
    config, output = _prepare(verbose, quiet, no_color, config_path)

    if as_json:
        click.echo(json.dumps(config.to_dict(), indent=2))
        return

    output.header("Token Reconnect configuration")
    output.plain("Scan:")
    output.plain(f"  Node limit:      {config.scan.node_limit}")
    output.plain(f"  Include hidden:  {config.scan.include_hidden}")
    output.plain(f"  Include padding: {config.scan.include_padding}")
    enabled = [k for k, v in config.scan.include_styles.to_dict().items() if v]
    output.plain(f"  Style families:  {', '.join(enabled) or 'none'}")
    output.plain("Logging:")
    output.plain(f"  Level:           {config.logging.level}")
    output.plain(f"  Format:          {config.logging.format}")
    log_file = config.logging.file
    if log_file is None and config.logging.file_logging:
        log_file = "logs/token-reconnect.log"
    output.plain(f"  File:            {log_file or 'none'}")
    output.plain(
        f"  Rotation:        {config.logging.rotation_count} backups of "
        f"{config.logging.max_bytes} bytes"
    )


@config_group.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
@click.option(
    "-p",
    "--project",
    "project_path",
    type=click.Path(exists=True, file_okay=False),
    help="Project directory (default: current directory)",
)
def config_init(force: bool, project_path: str | None) -> None:
    """Write a default token-reconnect.config.json."""
    loader = ConfigLoader(Path(project_path) if project_path else Path.cwd())
    target = loader.project_path / CONFIG_FILENAME

    if target.exists() and not force:
        click.echo(f"Config already exists: {target} (use --force to overwrite)", err=True)
        sys.exit(1)

    loader.save(ReconnectConfig(), target)
    click.echo(f"Created {target}")


if __name__ == "__main__":
    cli()

"""CLI entrypoint for tunnelrules."""

import sys
from pathlib import Path

import click

from . import __version__
from .config import load_settings
from .errors import ConfigError
from .log import configure_logging
from .rules.document import Category


@click.group()
@click.version_option(__version__, prog_name="tunnelrules")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Settings file (defaults to $TUNNELRULES_HOME/tunnelrules.toml if present)",
)
@click.option("--verbose", "-V", is_flag=True, help="Log at DEBUG level")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """tunnelrules - version-aware app rules for split tunneling.

    Parse version rules, persist runtime rule documents, and check which
    installed apps the tunnel policy manages.
    """
    ctx.ensure_object(dict)
    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e))

    configure_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj["settings"] = settings


@cli.command()
@click.argument("rules", nargs=-1, required=True)
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
def parse(rules: tuple[str, ...], output_json: bool) -> None:
    """Show how rule strings parse.

    Examples:

        tunnelrules parse "*" ">=100" "[100-200]" bogus
    """
    from .commands.rules_cmd import run_parse

    sys.exit(run_parse(list(rules), output_json=output_json))


@cli.command(name="import")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--dry-run", is_flag=True, help="Validate and report without saving")
@click.pass_context
def import_rules(ctx: click.Context, source: Path, dry_run: bool) -> None:
    """Validate a JSON or YAML rule document and persist it."""
    from .commands.rules_cmd import run_import

    sys.exit(run_import(ctx.obj["settings"], source, dry_run=dry_run))


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output the raw document as JSON")
@click.pass_context
def show(ctx: click.Context, output_json: bool) -> None:
    """Show the persisted runtime rule document."""
    from .commands.rules_cmd import run_show

    sys.exit(run_show(ctx.obj["settings"], output_json=output_json))


@cli.command()
@click.argument("package")
@click.argument("version_code", type=int)
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def check(ctx: click.Context, package: str, version_code: int, output_json: bool) -> None:
    """Check a package version against built-in and persisted rules.

    Exits 0 when any rule matches, 1 otherwise.
    """
    from .commands.check_cmd import run_check

    sys.exit(run_check(ctx.obj["settings"], package, version_code, output_json=output_json))


@cli.command()
@click.option(
    "--category",
    type=click.Choice([c.value for c in Category]),
    default=Category.EXCLUDE.value,
    help="Rule category to list",
)
@click.option(
    "--inventory",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Installed-package inventory (JSON, YAML or TOML) for version-aware results",
)
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def managed(ctx: click.Context, category: str, inventory: Path | None, output_json: bool) -> None:
    """List packages managed by the rules in a category."""
    from .commands.check_cmd import run_managed

    sys.exit(run_managed(ctx.obj["settings"], Category(category), inventory=inventory, output_json=output_json))


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()

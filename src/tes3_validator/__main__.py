"""
Main entry point for tes3-validator.
Usage: python -m tes3_validator MODE PATH...
"""

import logging
import re
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from . import __version__
from .context import Context, Mode
from .data import DataError
from .diagnostics import Reporter
from .handlers import RunOptions, build_registry
from .oob import fix_out_of_bounds
from .plugins import PluginFileLoader, PluginLoadError, PluginService
from .settings import AppSettings, ConfigError
from .traversal import TraversalError, validate
from .utils.logging_config import setup_logging

MODE_CHOICES = [mode.value for mode in Mode if mode is not Mode.NONE]


def check_options(paths: Tuple[Path, ...], extended: bool, names: bool, fix_output: Optional[Path]) -> None:
    """Reject option combinations that cannot form a single run.

    Raises:
        ConfigError: If the options conflict
    """
    if fix_output is not None:
        if extended or names:
            raise ConfigError("--fix-out-of-bounds cannot be combined with --extended or --names")
        if len(paths) != 1:
            raise ConfigError("--fix-out-of-bounds takes exactly one plugin")
    elif len(paths) > 1 and not (extended or names):
        raise ConfigError("Multiple files can only be validated with --extended or --names")


def load_settings(profile: str, settings_file: Optional[Path], verbose: bool) -> AppSettings:
    """Load settings, configure logging and validate the configuration.

    Raises:
        ConfigError: If the stored configuration is invalid
    """
    settings = AppSettings(profile=profile, settings_file=settings_file)
    setup_logging(settings, "DEBUG" if verbose else None)

    logger = logging.getLogger(f"{__name__}.load_settings")
    logger.info(f"Configuration loaded from {settings.get_settings_file_path()}")

    result = settings.validate()
    for warning in result.warnings:
        logger.warning(f"  {warning}")
    if not result.is_valid:
        raise ConfigError("Configuration validation failed: " + "; ".join(result.errors))
    return settings


@click.command()
@click.version_option(__version__, prog_name="tes3-validator")
@click.argument("mode", type=click.Choice(MODE_CHOICES, case_sensitive=False))
@click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--extended", is_flag=True, help="Check the plugin against its masters")
@click.option("--names", is_flag=True, help="Report NPC names similar to earlier ones")
@click.option(
    "--disable-master-loading",
    is_flag=True,
    help="Do not look up the masters named in the plugin header",
)
@click.option("--min-inhabitants", type=click.IntRange(min=0), help="Inhabitants an interior needs")
@click.option(
    "--duplicate-threshold",
    type=click.FloatRange(min=0),
    help="Distance under which two references count as duplicates",
)
@click.option(
    "--fix-out-of-bounds",
    "fix_output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Move out-of-bounds references and write the plugin to this file",
)
@click.option("--profile", default="default", show_default=True, help="Settings profile")
@click.option(
    "--settings-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Read settings from this INI file",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
def main(
    mode: str,
    paths: Tuple[Path, ...],
    extended: bool,
    names: bool,
    disable_master_loading: bool,
    min_inhabitants: Optional[int],
    duplicate_threshold: Optional[float],
    fix_output: Optional[Path],
    profile: str,
    settings_file: Optional[Path],
    verbose: bool,
) -> None:
    """
    Validate MODE conventions in the decoded plugin PATH.

    With --extended or --names, every PATH but the last is loaded as a
    master before the plugin, which is always the last PATH.
    """
    logger = logging.getLogger(f"{__name__}.main")
    reporter = Reporter(sys.stdout)
    try:
        check_options(paths, extended, names, fix_output)
        settings = load_settings(profile, settings_file, verbose)

        if fix_output is not None:
            plugin = PluginFileLoader().read_plugin(paths[0])
            fix_out_of_bounds(plugin, fix_output, reporter)
            return

        options = RunOptions.from_settings(settings)
        options.extended = extended
        options.names = names
        if min_inhabitants is not None:
            options.min_inhabitants = min_inhabitants
        if duplicate_threshold is not None:
            options.duplicate_threshold = duplicate_threshold

        context = Context(mode=Mode.from_string(mode))
        registry = build_registry(context, options, reporter)

        if extended or names:
            service = PluginService(
                paths[-1],
                masters=paths[:-1],
                autoload_masters=settings.validation.autoload_masters and not disable_master_loading,
                masters_path=settings.validation.masters_path,
            )
            manager = service.load()
            for failed in service.failed:
                click.echo(f"Could not load master {failed}", err=True)
            plugin = manager.files[-1]
            validate(plugin, context, registry, masters=manager.files[:-1])
        else:
            plugin = PluginFileLoader().read_plugin(paths[0])
            validate(plugin, context, registry)

        logger.info(f"Validation of {plugin.name} finished with {len(reporter)} findings")

    except (ConfigError, DataError, PluginLoadError, TraversalError) as e:
        logger.debug("Fatal setup error", exc_info=True)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except re.error as e:
        click.echo(f"Error: invalid pattern: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()

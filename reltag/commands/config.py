"""
Config commands for reltag.

- reltag config show:  Effective configuration (defaults + file + RELTAG_* variables)
- reltag config init:  Write the defaults to ~/.reltag/config.json
"""

import json

import click

from ..cli_utils import add_common_options, standard_command
from ..config import get_config_path, get_default_config, load_config, save_config


@click.group("config")
def config_cmd():
    """Inspect and initialize reltag configuration."""


@config_cmd.command("show")
@click.option("--pretty", is_flag=True, help="Indent the JSON output")
@click.option("--path", "show_path", is_flag=True, help="Print only the config file location")
@add_common_options('verbose')
@standard_command
def show_config(pretty, show_path):
    """Print the effective configuration as JSON.

    \b
    Examples:
        reltag config show --pretty
        RELTAG_RETRY_RETRIES=0 reltag config show
    """
    if show_path:
        click.echo(json.dumps({"config_path": str(get_config_path())}))
        return

    click.echo(json.dumps(load_config(), indent=2 if pretty else None, ensure_ascii=False))


@config_cmd.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing configuration file")
@add_common_options('verbose')
@standard_command
def init_config(force):
    """Write the default configuration to the config file path."""
    config_path = get_config_path()
    if config_path.exists() and not force:
        click.echo(f"Configuration already exists at {config_path} (use --force to overwrite)", err=True)
        return
    written = save_config(get_default_config())
    click.echo(json.dumps({"config_path": str(written)}))

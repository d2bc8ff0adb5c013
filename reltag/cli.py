#!/usr/bin/env python3

import click

from reltag.commands.version import next_cmd, sanitize_cmd, publish_tag_cmd
from reltag.commands.annotate import annotate_cmd
from reltag.commands.config import config_cmd


@click.group()
@click.version_option(package_name="reltag")
def cli():
    """reltag - Prerelease version tags for CI builds.

    Derives the next branch-qualified prerelease tag from a repository's
    existing tags, names registry dist-tags and extracts build annotations.
    """
    pass


cli.add_command(next_cmd)
cli.add_command(sanitize_cmd)
cli.add_command(publish_tag_cmd)
cli.add_command(annotate_cmd)
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()

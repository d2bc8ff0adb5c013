"""
Annotate command for reltag.

Turns compiler errors in a build log into check-run annotations.
"""

import os
import sys

import click

from ..annotations import extract_annotations, relative_annotation_path
from ..cli_utils import add_common_options, standard_command
from ..exit_codes import DATA_ERROR
from ..output import emit


@click.command("annotate")
@click.argument("logfile", type=click.File("r"), default="-")
@click.option("--home", default=None,
              help="Checkout directory stripped from paths (default: $RELTAG_HOME)")
@click.option("--fail", is_flag=True, help="Exit with a data error when annotations are found")
@add_common_options('verbose', 'pretty')
@standard_command
def annotate_cmd(logfile, home, fail, pretty):
    """Extract annotations from a build log (stdin by default).

    \b
    Examples:
        npm run compile 2>&1 | reltag annotate
        reltag annotate build.log --pretty --home /atm/home
    """
    home = home or os.environ.get("RELTAG_HOME")
    annotations = extract_annotations(logfile.read())

    records = []
    for annotation in annotations:
        record = annotation.to_dict()
        if home:
            record["path"] = relative_annotation_path(annotation.path, home)
        records.append(record)

    emit(records, pretty=pretty)

    if fail and records:
        sys.exit(DATA_ERROR)

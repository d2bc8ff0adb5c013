"""
Version commands for reltag.

- reltag next:        Next prerelease tag for the current branch
- reltag sanitize:    Sanitize git refs for use in versions and dist-tags
- reltag publish-tag: Dist-tags to publish a build with
"""

import json
from pathlib import Path

import click

from ..cli_utils import add_common_options, standard_command
from ..config import load_config
from ..dist_tags import additional_dist_tags, publish_dist_tag, ref_to_dist_tag
from ..exit_codes import UsageError
from ..output import emit
from ..prerelease import QualifierScheme
from ..refs import sanitize_ref
from ..release import release_version_from_tag, next_release_version
from ..services.tag_service import PrereleaseOptions, PrereleaseService
from ..version_manager import get_version, set_version

SCHEME_CHOICES = [s.value for s in QualifierScheme]


def _read_tag_file(tag_file):
    return [line.strip() for line in tag_file.read().splitlines() if line.strip()]


@click.command("next")
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False))
@click.option("--branch", "-b", help="Branch being built (default: current branch)")
@click.option("--default-branch", help="Repository default branch (default: remote HEAD, then config)")
@click.option("--release", "release_version", help="Upcoming release version (default: manifest version)")
@click.option("--tags", "tags_csv", help="Comma-separated existing tags instead of reading git")
@click.option("--tag-file", type=click.File("r"), help="File with one existing tag per line ('-' for stdin)")
@click.option("--remote", help="Remote to read tags from and push to (default: config)")
@click.option("--remote-tags/--local-tags", "use_remote_tags", default=None,
              help="Read tags from the remote instead of the local repository")
@click.option("--scheme", type=click.Choice(SCHEME_CHOICES), help="Prerelease qualifier scheme")
@click.option("--create", is_flag=True, help="Create an annotated tag for the result")
@click.option("--push", is_flag=True, help="Create and push the tag, retrying on conflicts")
@click.option("--write", is_flag=True, help="Write the result into the project manifest")
@click.option("--json", "as_json", is_flag=True, help="Emit the full result as JSON")
@add_common_options('verbose')
@standard_command
def next_cmd(path, branch, default_branch, release_version, tags_csv, tag_file,
             remote, use_remote_tags, scheme, create, push, write, as_json):
    """Print the next prerelease tag for a branch.

    \b
    Examples:
        reltag next                         # current repo and branch
        reltag next --branch feature/login  # 1.2.0-branch-feature-login.0
        reltag next --push                  # create and push the tag
        git tag | reltag next --tag-file - --branch main --release 1.0.0
    """
    if tags_csv is not None and tag_file is not None:
        raise UsageError("Use either --tags or --tag-file, not both")

    tags = None
    if tags_csv is not None:
        tags = [t.strip() for t in tags_csv.split(",") if t.strip()]
    elif tag_file is not None:
        tags = _read_tag_file(tag_file)

    service = PrereleaseService(config=load_config())
    result = service.resolve(path, PrereleaseOptions(
        branch=branch,
        default_branch=default_branch,
        release_version=release_version,
        tags=tags,
        scheme=scheme,
        remote=remote,
        use_remote_tags=use_remote_tags,
        create=create,
        push=push,
    ))

    if write and not set_version(path, result.tag):
        raise UsageError(f"No supported manifest to write the version to in {Path(path).resolve()}")

    if as_json:
        click.echo(json.dumps(result.to_dict(), ensure_ascii=False))
    else:
        click.echo(result.tag)


@click.command("sanitize")
@click.argument("refs", nargs=-1, required=True)
@click.option("--dist-tag", is_flag=True, help="Print registry dist-tags (prefix-<ref>) instead")
@click.option("--prefix", default=None, help="Dist-tag prefix (default: config, 'branch')")
@add_common_options('verbose')
@standard_command
def sanitize_cmd(refs, dist_tag, prefix):
    """Sanitize git refs for semver prerelease identifiers.

    \b
    Examples:
        reltag sanitize feature/login_v2    # feature-login-v2
        reltag sanitize --dist-tag main     # branch-main
    """
    if dist_tag:
        prefix = prefix or load_config()["versioning"].get("dist_tag_prefix", "branch")
    for ref in refs:
        click.echo(ref_to_dist_tag(ref, prefix) if dist_tag else sanitize_ref(ref))


@click.command("publish-tag")
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False))
@click.option("--branch", "-b", help="Branch of a push build")
@click.option("--tag", "-t", "git_tag", help="Git tag of a tag build")
@click.option("--default-branch", help="Repository default branch (default: config)")
@click.option("--extra", multiple=True, help="Additional dist-tag to add (repeatable)")
@add_common_options('verbose', 'pretty')
@standard_command
def publish_tag_cmd(path, branch, git_tag, default_branch, extra, pretty):
    """Show the dist-tags a build is published with.

    For tag builds the publish version is resolved too: a semver tag is
    published as is, anything else as a gtag- prerelease of the manifest
    version.
    """
    if bool(branch) == bool(git_tag):
        raise UsageError("Give exactly one of --branch or --tag")

    versioning = load_config()["versioning"]
    default_branch = default_branch or versioning.get("default_branch", "main")
    default_tags = list(versioning.get("default_branch_dist_tags") or [])

    record = {
        "branch": branch,
        "tag": git_tag,
        "dist_tag": publish_dist_tag(branch, git_tag, versioning.get("dist_tag_prefix", "branch")),
        "additional": additional_dist_tags(extra, branch, default_branch, default_tags),
    }
    if git_tag:
        manifest_version = next_release_version(
            get_version(path), versioning.get("fallback_version", "0.1.0")
        )
        record["version"] = release_version_from_tag(
            git_tag, manifest_version, versioning.get("tag_dist_tag_prefix", "gtag")
        )

    emit([record], pretty=pretty)

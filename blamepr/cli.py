import logging
from pathlib import Path
from typing import Optional

import click
import jsons
from rich.console import Console

from blamepr import __version__
from blamepr.common import BlamePrError, NoContext, RequestLink, Sha
from blamepr.config import load_config
from blamepr.git import GitRepository
from blamepr.pipeline import find_request

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)


class Lookup:
    def __init__(self, path: str, gitlab_host: Optional[str], default_branch: Optional[str], remote: Optional[str]):
        self.path = path
        self.gitlab_host = gitlab_host
        self.default_branch = default_branch
        self.remote = remote

    def git(self) -> GitRepository:
        return GitRepository.discover(self.path)

    def run(self, git: GitRepository, sha: Sha) -> RequestLink:
        # read on every call, settings may change between invocations
        config = load_config(git.workdir, gitlab_host=self.gitlab_host, default_branch=self.default_branch)
        return find_request(git, sha, config, self.remote)

    def find(self, rev: Optional[str]) -> RequestLink:
        if not rev:
            raise NoContext()
        git = self.git()
        return self.run(git, git.resolve_commit(rev))


def fail(ex: BlamePrError) -> None:
    err_console.print(str(ex), style="bold red", markup=False, highlight=False, soft_wrap=True)
    raise SystemExit(1)


def open_link(link: RequestLink) -> None:
    console.print(f"Opening: {link.url}", markup=False, highlight=False, soft_wrap=True)
    click.launch(link.url)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__)
@click.option("-C", "path", default=".", type=click.Path(exists=True, file_okay=False),
              help="Run as if started in this directory.")
@click.option("--gitlab-host", help="Host of the GitLab instance (default: gitlab.com).")
@click.option("--default-branch", help="Branch to use when the remote HEAD cannot be read (default: master).")
@click.option("--remote", help="Remote whose URL identifies the repository (default: the current branch's remote).")
@click.option("-v", "--verbose", is_flag=True, help="Log every step.")
@click.pass_context
def bpr(ctx, path: str, gitlab_host: Optional[str], default_branch: Optional[str], remote: Optional[str],
        verbose: bool):
    """Find the pull/merge request that brought a commit into the default branch."""
    if verbose:
        logging.getLogger("blamepr").setLevel(logging.DEBUG)
    ctx.obj = Lookup(path, gitlab_host, default_branch, remote)


@bpr.command(name="open")
@click.argument("rev", required=False)
@click.pass_obj
def open_(lookup: Lookup, rev: Optional[str]) -> None:
    """Open the request that introduced REV in the browser."""
    try:
        link = lookup.find(rev)
    except BlamePrError as ex:
        fail(ex)
    open_link(link)


@bpr.command()
@click.argument("file", type=click.Path(dir_okay=False))
@click.argument("line", type=click.IntRange(min=1))
@click.pass_obj
def blame(lookup: Lookup, file: str, line: int) -> None:
    """Open the request that last changed LINE of FILE.

    Lines are numbered as in the committed HEAD version of FILE, not as in an edited working copy.
    """
    try:
        git = lookup.git()
        link = lookup.run(git, git.blame_line((Path(lookup.path) / file).resolve(), line))
    except BlamePrError as ex:
        fail(ex)
    open_link(link)


@bpr.command()
@click.argument("rev", required=False)
@click.option("--json", "as_json", is_flag=True, help="Print every detail of the lookup as JSON.")
@click.pass_obj
def url(lookup: Lookup, rev: Optional[str], as_json: bool) -> None:
    """Print the URL of the request that introduced REV."""
    try:
        link = lookup.find(rev)
    except BlamePrError as ex:
        fail(ex)
    if as_json:
        click.echo(jsons.dumps(link))
    else:
        click.echo(link.url)


if __name__ == '__main__':
    bpr()

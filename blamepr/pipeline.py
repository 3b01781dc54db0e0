import logging
from typing import Optional, Tuple

from blamepr.common import Host, MergeCommitNotFound, NoRemoteURL, RepoSlugUnparseable, RequestLink, \
    RequestNumberNotFound, Sha
from blamepr.config import Config
from blamepr.extract import classify_remote, extract_request_number, extract_slug
from blamepr.git import DEFAULT_REMOTE, GitRepository

logger = logging.getLogger(__name__)


def resolve_default_branch(git: GitRepository, config: Config) -> str:
    branch = git.resolve_symbolic_head(DEFAULT_REMOTE)
    if branch is None:
        logger.info(f'Could not read HEAD of {DEFAULT_REMOTE}, falling back to {config.default_branch}')
        return config.default_branch
    logger.debug(f'Default branch of {DEFAULT_REMOTE}: {branch}')
    return branch


def find_merge_commit(git: GitRepository, source: Sha, branch: str) -> Sha:
    target = git.branch_revision(branch, DEFAULT_REMOTE)
    merge_commit = git.find_earliest_merge_on_path(source, target)
    if merge_commit is None:
        raise MergeCommitNotFound(source)
    logger.debug(f'{source} was merged into {target} by {merge_commit}')
    return merge_commit


def resolve_remote(git: GitRepository, config: Config, remote: Optional[str] = None) -> Tuple[Host, str, str]:
    """
    Finds the hosting provider and repository slug of ``remote``, or of the
    current branch's remote when none is given.

    :return: the host, the slug and the remote name
    """
    if remote is None:
        remote = git.current_remote()
    url = git.get_remote_url(remote)
    if url is None:
        raise NoRemoteURL(remote)
    host = classify_remote(url, config.gitlab_host)
    slug = extract_slug(url, host.get_host())
    if not slug:
        raise RepoSlugUnparseable(url)
    logger.debug(f'Remote {remote} ({url}) is {host.name} repository {slug}')
    return host, slug, remote


def find_request(git: GitRepository, source: Sha, config: Config, remote: Optional[str] = None) -> RequestLink:
    branch = resolve_default_branch(git, config)
    merge_commit = find_merge_commit(git, source, branch)
    host, slug, remote = resolve_remote(git, config, remote)

    message = git.get_commit_message(merge_commit)
    number = extract_request_number(message, host)
    if not number:
        raise RequestNumberNotFound(merge_commit)

    url = host.get_request_url(slug, number)
    logger.info(f'{source} came in through {host.name} request {number}: {url}')
    return RequestLink(provider=host.name, host=host.get_host(), slug=slug, number=number,
                       merge_commit=merge_commit, commit=source, remote=remote, url=url)

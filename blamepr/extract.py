import re
from typing import Optional

from blamepr.common import GITHUB_HOST, GithubHost, GitlabHost, Host, UnrecognizedProvider

github_pr_regex = re.compile(r'Merge pull request #(?P<number>\d+)')

# order matters: the first pattern that matches wins
gitlab_mr_regexes = [
    re.compile(r'See merge request [^\n]*?!(?P<number>\d+)'),
    re.compile(r'^Iid: (?P<number>\d+)[ \t]*$', re.MULTILINE),
]


def extract_github_number(message: str) -> Optional[str]:
    """
    >>> extract_github_number('Merge pull request #482 from acme/fix-bug')
    '482'
    >>> extract_github_number('Merge branch "main" into fix-bug') is None
    True
    """
    matcher = github_pr_regex.search(message)
    return matcher.group('number') if matcher is not None else None


def extract_gitlab_number(message: str) -> Optional[str]:
    """
    >>> extract_gitlab_number("Merge branch 'fix' into 'main'\\n\\nSee merge request group/project!57")
    '57'
    >>> extract_gitlab_number('Merge branch fix\\n\\nIid: 103')
    '103'
    >>> extract_gitlab_number('See merge request group/project!57\\nIid: 103')
    '57'
    >>> extract_gitlab_number('Iid: 103 (see above)') is None
    True
    """
    for regex in gitlab_mr_regexes:
        matcher = regex.search(message)
        if matcher is not None:
            return matcher.group('number')
    return None


def extract_request_number(message: str, host: Optional[Host] = None) -> Optional[str]:
    """
    Extracts the pull/merge request number from a merge commit message.
    With a host only that provider's patterns are tried, otherwise GitHub's first.

    >>> extract_request_number('Merge pull request #17 from acme/fix-bug')
    '17'
    >>> extract_request_number('Merge pull request #17 from acme/fix-bug', GitlabHost()) is None
    True
    >>> extract_request_number('Merged in some work') is None
    True
    """
    if isinstance(host, GithubHost):
        return extract_github_number(message)
    if isinstance(host, GitlabHost):
        return extract_gitlab_number(message)
    return extract_github_number(message) or extract_gitlab_number(message)


def slug_regexes(host: str):
    escaped = re.escape(host)
    return [
        re.compile(f'{escaped}[:/](?P<slug>.+)\\.git$'),
        re.compile(f'{escaped}[:/](?P<slug>.+)$'),
    ]


def extract_slug(remote_url: str, host: str) -> Optional[str]:
    """
    >>> extract_slug('git@github.com:OWNER/REPO.git', 'github.com')
    'OWNER/REPO'
    >>> extract_slug('https://github.com/OWNER/REPO', 'github.com')
    'OWNER/REPO'
    >>> extract_slug('git@gitlab.example.com:GROUP/sub/PROJECT.git', 'gitlab.example.com')
    'GROUP/sub/PROJECT'
    >>> extract_slug('https://github.com', 'github.com') is None
    True
    """
    remote_url = remote_url.strip().rstrip('/')
    for regex in slug_regexes(host):
        matcher = regex.search(remote_url)
        if matcher is not None:
            return matcher.group('slug')
    return None


def classify_remote(remote_url: str, gitlab_host: str) -> Host:
    """
    >>> classify_remote('git@github.com:acme/widget.git', 'gitlab.com')
    GithubHost()
    >>> classify_remote('https://git.corp.net/acme/widget.git', 'git.corp.net')
    GitlabHost(host='git.corp.net')
    """
    if GITHUB_HOST in remote_url:
        return GithubHost()
    if gitlab_host and gitlab_host in remote_url:
        return GitlabHost(gitlab_host)
    raise UnrecognizedProvider(remote_url, gitlab_host)

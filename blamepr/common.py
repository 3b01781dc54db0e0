from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import NewType, Optional

Sha = NewType('Sha', str)

GITHUB_HOST = 'github.com'
DEFAULT_GITLAB_HOST = 'gitlab.com'


class Host(ABC):
    name: str

    @abstractmethod
    def get_host(self) -> str:
        pass

    @abstractmethod
    def get_request_url(self, slug: str, number: str) -> str:
        pass


@dataclass(frozen=True)
class GithubHost(Host):
    name = 'github'

    def __str__(self):
        return self.get_host()

    def get_host(self) -> str:
        return GITHUB_HOST

    def get_request_url(self, slug: str, number: str) -> str:
        return f'https://{GITHUB_HOST}/{slug}/pull/{number}'


@dataclass(frozen=True)
class GitlabHost(Host):
    host: str = DEFAULT_GITLAB_HOST
    name = 'gitlab'

    def __str__(self):
        return self.get_host()

    def get_host(self) -> str:
        return self.host

    def get_request_url(self, slug: str, number: str) -> str:
        return f'https://{self.host}/{slug}/merge_requests/{number}'


@dataclass(frozen=True)
class RequestLink:
    provider: str
    host: str
    slug: str
    number: str
    merge_commit: Sha
    commit: Sha
    remote: str
    url: str


class BlamePrError(Exception):
    """Base for every condition that aborts a lookup."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class NoContext(BlamePrError):
    def __init__(self, message: Optional[str] = None):
        super().__init__(message or 'No commit selected: nothing to look up')


class RevisionNotFound(BlamePrError):
    def __init__(self, rev: str):
        super().__init__(f'Could not resolve {rev!r} to a commit')
        self.rev = rev


class GitNotAvailable(BlamePrError):
    def __init__(self, git: str, cause: OSError):
        super().__init__(f'Could not run {git}: {cause.strerror or cause}')
        self.git = git


class MergeCommitNotFound(BlamePrError):
    def __init__(self, sha: str):
        super().__init__(f'Could not find merge commit for {sha}')
        self.sha = sha


class NoRemoteURL(BlamePrError):
    def __init__(self, remote: str):
        super().__init__(f'Remote {remote!r} has no URL')
        self.remote = remote


class UnrecognizedProvider(BlamePrError):
    def __init__(self, url: str, gitlab_host: str):
        super().__init__(f'Remote URL {url} is neither GitHub nor the configured GitLab ({gitlab_host})')
        self.url = url


class RepoSlugUnparseable(BlamePrError):
    def __init__(self, url: str):
        super().__init__(f'Could not parse repository from remote URL {url}')
        self.url = url


class RequestNumberNotFound(BlamePrError):
    def __init__(self, sha: str):
        super().__init__(f'Could not find a pull/merge request number in the message of {sha}')
        self.sha = sha

import logging
import re
import subprocess
from pathlib import Path
from typing import List, Optional, Union

import pygit2
from pygit2 import GitError, Repository

from blamepr.common import GitNotAvailable, NoContext, RevisionNotFound, Sha

logger = logging.getLogger(__name__)

DEFAULT_REMOTE = 'origin'

symref_regex = re.compile(r'^ref: refs/heads/(?P<branch>\S+)\s+HEAD$', re.MULTILINE)


class GitRepository:
    """
    Read-only queries against a local repository. Local lookups go through pygit2;
    remote HEAD and the ancestry-path log are delegated to the git binary.
    """

    def __init__(self, repo: Repository, git: str = 'git'):
        self.repo = repo
        self.git = git

    @classmethod
    def discover(cls, path: Union[str, Path] = '.') -> 'GitRepository':
        repo_path = pygit2.discover_repository(str(path))
        if repo_path is None:
            raise NoContext(f'Not inside a git repository: {path}')
        return cls(Repository(repo_path))

    @property
    def workdir(self) -> Path:
        return Path(self.repo.workdir if self.repo.workdir is not None else self.repo.path)

    def _run(self, args: List[str]) -> str:
        cmd = [self.git, *args]
        logger.debug(f'Running command {cmd}')
        result = subprocess.run(cmd, cwd=str(self.workdir), capture_output=True, check=True, text=True)
        return result.stdout

    def resolve_symbolic_head(self, remote: str = DEFAULT_REMOTE) -> Optional[str]:
        try:
            output = self._run(['ls-remote', '--symref', remote, 'HEAD'])
        except subprocess.CalledProcessError as ex:
            logger.debug(f'ls-remote of {remote} failed with status {ex.returncode}: {ex.stderr.strip()}')
            return None
        except OSError as ex:
            logger.debug(f'Could not run {self.git}: {ex}')
            return None
        matcher = symref_regex.search(output)
        if matcher is None:
            logger.debug(f'No symbolic HEAD advertised by {remote}')
            return None
        return matcher.group('branch')

    def find_earliest_merge_on_path(self, source: str, target: str) -> Optional[Sha]:
        try:
            output = self._run(['log', '--ancestry-path', '--merges', '--reverse', '--format=%H', f'{source}...{target}'])
        except subprocess.CalledProcessError as ex:
            logger.debug(f'git log failed with status {ex.returncode}: {ex.stderr.strip()}')
            return None
        except OSError as ex:
            raise GitNotAvailable(self.git, ex) from ex
        for line in output.splitlines():
            if line.strip():
                return Sha(line.strip())
        return None

    def get_commit_message(self, sha: str) -> str:
        return self._peel_commit(sha).message

    def get_remote_url(self, remote: str) -> Optional[str]:
        try:
            url = self.repo.remotes[remote].url
        except (KeyError, ValueError):
            return None
        return url or None

    def current_branch(self) -> Optional[str]:
        if self.repo.head_is_unborn or self.repo.head_is_detached:
            return None
        return self.repo.head.shorthand

    def _config_value(self, key: str) -> Optional[str]:
        try:
            return self.repo.config[key]
        except KeyError:
            return None

    def current_remote(self) -> str:
        branch = self.current_branch()
        keys = []
        if branch is not None:
            keys.append(f'branch.{branch}.pushRemote')
        keys.append('remote.pushDefault')
        if branch is not None:
            keys.append(f'branch.{branch}.remote')
        for key in keys:
            value = self._config_value(key)
            # '.' means the local repository
            if value and value != '.':
                return value
        return DEFAULT_REMOTE

    def branch_revision(self, name: str, remote: str = DEFAULT_REMOTE) -> str:
        if self.repo.references.get(f'refs/heads/{name}') is not None:
            return name
        if self.repo.references.get(f'refs/remotes/{remote}/{name}') is not None:
            return f'{remote}/{name}'
        return name

    def _peel_commit(self, rev: str) -> pygit2.Commit:
        try:
            return self.repo.revparse_single(rev).peel(pygit2.Commit)
        except (KeyError, ValueError, GitError) as ex:
            raise RevisionNotFound(rev) from ex

    def resolve_commit(self, rev: str) -> Sha:
        return Sha(str(self._peel_commit(rev).id))

    def blame_line(self, path: Union[str, Path], line: int) -> Sha:
        path = Path(path)
        try:
            if path.is_absolute():
                path = path.resolve().relative_to(self.workdir.resolve())
            blame = self.repo.blame(path.as_posix(), min_line=line, max_line=line)
            hunk = blame.for_line(line)
        except (KeyError, ValueError, IndexError, GitError) as ex:
            raise NoContext(f'No blame information for {path}:{line}') from ex
        return Sha(str(hunk.final_commit_id))

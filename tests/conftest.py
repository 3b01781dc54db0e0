import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

import pygit2
import pytest

requires_git = pytest.mark.skipif(shutil.which('git') is None, reason='git binary is not installed')

_clock = [1600000000]


def signature() -> pygit2.Signature:
    _clock[0] += 60
    return pygit2.Signature('Jane Doe', 'jane@example.com', _clock[0], 0)


def make_commit(repo: pygit2.Repository, message: str, parents: List[pygit2.Oid], files: Dict[str, str]) -> pygit2.Oid:
    builder = repo.TreeBuilder()
    for name, content in files.items():
        builder.insert(name, repo.create_blob(content.encode('utf-8')), pygit2.GIT_FILEMODE_BLOB)
    sig = signature()
    return repo.create_commit(None, sig, sig, message, builder.write(), parents)


@dataclass
class History:
    path: Path
    repo: pygit2.Repository
    base: str
    feature: str
    first_merge: str
    direct: str
    second_feature: str
    second_merge: str


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    monkeypatch.setenv('XDG_CONFIG_HOME', str(tmp_path_factory.mktemp('xdg')))
    monkeypatch.delenv('BLAMEPR_GITLAB_HOST', raising=False)
    monkeypatch.delenv('BLAMEPR_DEFAULT_BRANCH', raising=False)


@pytest.fixture
def origin(tmp_path) -> Path:
    """A bare repository whose HEAD points at 'trunk'."""
    path = tmp_path / 'origin.git'
    repo = pygit2.init_repository(str(path), bare=True, initial_head='trunk')
    oid = make_commit(repo, 'Initial commit\n', [], {'README': 'hello\n'})
    repo.references.create('refs/heads/trunk', oid, force=True)
    return path


@pytest.fixture
def history(tmp_path) -> History:
    """
    main: base -- first_merge -- direct -- second_merge
              \\  /                     /
              feature         second_feature
    """
    path = tmp_path / 'work'
    repo = pygit2.init_repository(str(path), initial_head='main')

    base = make_commit(repo, 'Initial commit\n', [], {'README': 'hello\n'})
    feature = make_commit(repo, 'Fix the bug\n', [base], {'README': 'hello\n', 'fix.txt': 'first\nsecond\n'})
    first_merge = make_commit(repo, 'Merge pull request #17 from acme/fix-bug\n\nFix the bug\n', [base, feature],
                              {'README': 'hello\n', 'fix.txt': 'first\nsecond\n'})
    direct = make_commit(repo, 'Tweak readme\n', [first_merge], {'README': 'hello world\n', 'fix.txt': 'first\nsecond\n'})
    second_feature = make_commit(repo, 'Add feature\n', [direct],
                                 {'README': 'hello world\n', 'fix.txt': 'first\nsecond\n', 'feature.txt': 'x\n'})
    second_merge = make_commit(repo, "Merge branch 'feature' into 'main'\n\nSee merge request acme/widget!9\n",
                               [direct, second_feature],
                               {'README': 'hello world\n', 'fix.txt': 'first\nsecond\n', 'feature.txt': 'x\n'})

    repo.references.create('refs/heads/main', second_merge, force=True)
    repo.references.create('refs/heads/feature', feature, force=True)

    return History(path, repo, str(base), str(feature), str(first_merge), str(direct), str(second_feature),
                   str(second_merge))

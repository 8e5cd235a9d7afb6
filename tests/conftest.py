import os
from datetime import datetime, timezone

import pytest

os.environ.setdefault("GIT_PYTHON_REFRESH", "quiet")

from reviewtui.core import clock  # noqa: E402
from reviewtui.core.bus import Bus  # noqa: E402
from reviewtui.core.storage import Database  # noqa: E402

from helpers import HAS_GIT, commit_file  # noqa: E402


@pytest.fixture
def fixed_clock():
    instant = datetime(2025, 8, 1, 12, 0, tzinfo=timezone.utc)
    clock.set_clock(clock.FixedClock(instant))
    yield instant
    clock.set_clock(None)


@pytest.fixture
def db(tmp_path):
    database = Database.open(str(tmp_path / "data" / "reviewtui.db"))
    yield database
    database.close()


@pytest.fixture
def bus():
    return Bus()


@pytest.fixture
def git_repo(tmp_path):
    """Repository with ``main`` and a ``feature`` branch that changes two files."""
    if not HAS_GIT:
        pytest.skip("git executable not available")
    from git import Repo

    path = tmp_path / "repo"
    path.mkdir()
    repo = Repo.init(str(path))
    with repo.config_writer() as cw:
        cw.set_value("user", "name", "Test User")
        cw.set_value("user", "email", "test@example.com")
    commit_file(repo, "README.md", "hello\n", "initial")
    repo.git.branch("-M", "main")
    repo.create_head("feature")
    repo.heads.feature.checkout()
    commit_file(repo, "README.md", "hello\nworld\n", "extend readme")
    commit_file(repo, "src/app.py", "print('hi')\n", "add app")
    repo.heads.main.checkout()
    yield repo
    repo.close()

import os
import sys

import pytest

# Ensure project root and this directory are on sys.path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
HERE = os.path.abspath(os.path.dirname(__file__))
for path in (ROOT, HERE):
    if path not in sys.path:
        sys.path.insert(0, path)

from fakes import FakeBookmarks, FakeConfirm, FakeCredentials, FakeRunner  # noqa: E402
from scpdeck.domain.identity import IdentityContext, IdentityResolver  # noqa: E402
from scpdeck.domain.session import AgentLocator, SessionExecutor  # noqa: E402


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def context():
    return IdentityContext(server_address="files.example.com", username="alice")


@pytest.fixture
def resolver(tmp_path):
    ssh_dir = tmp_path / "ssh"
    ssh_dir.mkdir()
    return IdentityResolver(keys_dir=tmp_path / "keys", ssh_dir=ssh_dir)


@pytest.fixture
def executor(runner, resolver):
    # SSH_AUTH_SOCK already set: the locator never queries the runner
    agent = AgentLocator(runner, platform="linux", environ={"SSH_AUTH_SOCK": "/tmp/agent.sock"})
    return SessionExecutor(runner, resolver, agent=agent, platform="linux")


@pytest.fixture
def credentials():
    return FakeCredentials()


@pytest.fixture
def bookmarks():
    return FakeBookmarks()


@pytest.fixture
def confirm():
    return FakeConfirm()

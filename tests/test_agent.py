import asyncio

from scpdeck.core.exceptions import SessionLaunchError
from scpdeck.domain.session import AgentLocator, SessionResult
from scpdeck.domain.session.agent import parse_environment_block
from fakes import FakeRunner


def test_existing_socket_is_kept():
    runner = FakeRunner()
    locator = AgentLocator(runner, platform="linux", environ={"SSH_AUTH_SOCK": "/run/agent", "PATH": "/bin"})

    env = asyncio.run(locator.environment())

    assert env == {"SSH_AUTH_SOCK": "/run/agent", "PATH": "/bin"}
    assert runner.calls == []


def test_launchctl_lookup_on_macos(tmp_path):
    sock = tmp_path / "agent.sock"
    sock.write_text("")
    runner = FakeRunner(lambda argv: SessionResult(exit_code=0, stdout=f"{sock}\n"))
    locator = AgentLocator(runner, platform="darwin", environ={"PATH": "/bin"})

    env = asyncio.run(locator.environment())

    assert env["SSH_AUTH_SOCK"] == str(sock)
    assert runner.calls[0]["argv"] == ["/bin/launchctl", "getenv", "SSH_AUTH_SOCK"]


def test_systemd_then_runtime_dir(tmp_path):
    runtime = tmp_path / "run"
    (runtime / "gcr").mkdir(parents=True)
    (runtime / "gcr" / "ssh").write_text("")
    runner = FakeRunner(lambda argv: SessionResult(exit_code=0, stdout="LANG=C\nSSH_AUTH_SOCK=/gone\n"))
    locator = AgentLocator(runner, platform="linux", environ={"XDG_RUNTIME_DIR": str(runtime)})

    assert asyncio.run(locator.locate()) == str(runtime / "gcr" / "ssh")
    assert runner.calls[0]["argv"] == ["systemctl", "--user", "show-environment"]


def test_lookup_is_cached_and_tolerates_failures():
    def missing(argv):
        raise SessionLaunchError("no systemctl")

    runner = FakeRunner(missing)
    locator = AgentLocator(runner, platform="linux", environ={})

    async def twice():
        return await locator.locate(), await locator.locate()

    assert asyncio.run(twice()) == (None, None)
    assert len(runner.calls) == 1


def test_parse_environment_block():
    assert parse_environment_block("A=1\nnoise\nB=x=y\n") == {"A": "1", "B": "x=y"}

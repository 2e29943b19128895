import asyncio

import pytest

from scpdeck.core.exceptions import SessionError
from scpdeck.domain.session import AgentLocator, SessionExecutor, SessionResult, wrap_remote_command
from fakes import FakeRunner


def test_run_command_builds_ssh_invocation(runner, executor, context):
    runner.handler = lambda argv: SessionResult(exit_code=0, stdout="hello\n")

    result = asyncio.run(executor.run_command(context, "echo hello"))

    assert result.stdout == "hello\n"
    argv = runner.calls[0]["argv"]
    assert argv[0] == "ssh"
    assert argv[-2] == "alice@files.example.com"
    assert argv[-1] == "sh -lc 'echo hello'"
    for option in ("BatchMode=yes", "StrictHostKeyChecking=no", "UserKnownHostsFile=/dev/null"):
        assert option in argv
    assert "-vvv" in argv
    assert "-i" not in argv
    assert "UseKeychain=yes" not in argv
    assert runner.calls[0]["env"]["SSH_AUTH_SOCK"] == "/tmp/agent.sock"
    assert runner.calls[0]["timeout"] == executor.command_timeout


def test_non_zero_exit_is_returned(runner, executor, context):
    runner.handler = lambda argv: SessionResult(exit_code=255, stderr="Permission denied (publickey).\n")

    result = asyncio.run(executor.run_command(context, "true"))

    assert result.exit_code == 255
    assert not result.ok


def test_identity_file_adds_legacy_algorithms(runner, resolver, context, tmp_path):
    key = tmp_path / "ssh" / "id_rsa"
    key.write_text("k")
    executor = SessionExecutor(runner, resolver, agent=_agent(runner), platform="darwin")

    asyncio.run(executor.run_command(context, "true"))

    argv = runner.calls[0]["argv"]
    assert argv[argv.index("-i") + 1] == str(tmp_path / "keys" / "id_rsa")
    assert "PubkeyAcceptedAlgorithms=+ssh-rsa" in argv
    assert "UseKeychain=yes" in argv


def test_wrap_remote_command_quotes_nested_quotes():
    assert wrap_remote_command("ls '/a b'") == "sh -lc 'ls '\\''/a b'\\'''"


def test_copy_from_remote_arguments(runner, executor, context):
    asyncio.run(executor.copy_from_remote(context, "/srv/logs", True, "/home/alice/Downloads"))

    argv = runner.calls[0]["argv"]
    assert argv[0] == "scp"
    assert "-p" in argv and "-r" in argv
    assert argv[-2:] == ["alice@files.example.com:/srv/logs", "/home/alice/Downloads"]


def test_copy_to_remote_adds_trailing_separator(runner, executor, context):
    asyncio.run(executor.copy_to_remote(context, "/tmp/a.txt", False, "/srv/incoming"))

    argv = runner.calls[0]["argv"]
    assert "-r" not in argv
    assert argv[-2:] == ["/tmp/a.txt", "alice@files.example.com:/srv/incoming/"]


def test_copy_failure_raises_with_diagnostics(runner, executor, context):
    runner.handler = lambda argv: SessionResult(exit_code=1, stderr="debug1: hi\nscp: /x: No such file\n")

    with pytest.raises(SessionError) as excinfo:
        asyncio.run(executor.copy_from_remote(context, "/x", False, "/tmp"))

    assert excinfo.value.exit_code == 1
    assert "No such file" in str(excinfo.value)
    assert excinfo.value.stderr.endswith("No such file\n")


def test_copy_streams_progress(runner, executor, context):
    runner.handler = lambda argv: SessionResult(exit_code=0, stderr="debug1: one\ndebug1: two\n")
    seen = []

    asyncio.run(executor.copy_from_remote(context, "/a", False, "/tmp", on_progress=seen.append))

    assert seen == ["debug1: one\n", "debug1: two\n"]


def test_progress_callback_errors_do_not_fail_the_copy(runner, executor, context):
    runner.handler = lambda argv: SessionResult(exit_code=0, stderr="debug1: one\n")

    def broken(chunk):
        raise ValueError("ui gone")

    result = asyncio.run(executor.copy_from_remote(context, "/a", False, "/tmp", on_progress=broken))

    assert result.ok


@pytest.mark.parametrize("stdout, expected", [("exists\n", True), ("missing\n", False)])
def test_remote_path_exists(runner, executor, context, stdout, expected):
    runner.handler = lambda argv: SessionResult(exit_code=0, stdout=stdout)

    assert asyncio.run(executor.remote_path_exists(context, "/srv/it's")) is expected
    assert runner.calls[0]["argv"][-1].startswith("sh -lc 'if [ -e ")


def test_remote_path_exists_reads_failure_as_missing(resolver, context):
    def refuse(argv):
        raise SessionError("connection refused")

    runner = FakeRunner(refuse)
    executor = SessionExecutor(runner, resolver, agent=_agent(runner), platform="linux")

    assert asyncio.run(executor.remote_path_exists(context, "/a")) is False


def _agent(runner):
    return AgentLocator(runner, platform="linux", environ={"SSH_AUTH_SOCK": "/tmp/agent.sock"})

import asyncio
import sys

import pytest

from scpdeck.core.exceptions import SessionLaunchError, SessionTimeoutError
from scpdeck.domain.session import AsyncProcessRunner, DiagnosticStream

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")


def test_collects_output_and_exit_code():
    result = asyncio.run(
        AsyncProcessRunner().run(["sh", "-c", "echo out; echo err >&2; exit 3"])
    )

    assert result.exit_code == 3
    assert result.stdout == "out\n"
    assert result.stderr == "err\n"
    assert result.ok is False


def test_stderr_is_streamed():
    chunks = []

    result = asyncio.run(
        AsyncProcessRunner().run(["sh", "-c", "echo one >&2; echo two >&2"], on_stderr=chunks.append)
    )

    assert result.ok
    assert "".join(chunks) == "one\ntwo\n"


def test_timeout_kills_the_child():
    with pytest.raises(SessionTimeoutError) as excinfo:
        asyncio.run(
            AsyncProcessRunner().run(["sh", "-c", "echo started >&2; exec sleep 30"], timeout=0.5)
        )

    assert excinfo.value.exit_code == -1
    assert excinfo.value.timeout == 0.5


def test_missing_program():
    with pytest.raises(SessionLaunchError):
        asyncio.run(AsyncProcessRunner().run(["/nonexistent/scp-binary"]))


def test_cancellation_kills_the_child():
    async def scenario():
        task = asyncio.ensure_future(AsyncProcessRunner().run(["sh", "-c", "exec sleep 30"]))
        await asyncio.sleep(0.2)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())


def test_diagnostic_stream_drains_then_ends():
    async def scenario():
        stream = DiagnosticStream()
        stream.feed("a")
        stream.feed("")
        stream.feed("b")
        stream.close()
        stream.feed("late")
        return [chunk async for chunk in stream]

    assert asyncio.run(scenario()) == ["a", "b"]

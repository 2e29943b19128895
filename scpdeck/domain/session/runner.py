"""
Subprocess boundary for ssh/scp

Every remote operation goes through a CommandRunner so that tests can
replace process execution.
"""
import asyncio
import codecs
from abc import ABC, abstractmethod
from typing import AsyncIterator, Callable, Dict, List, Optional, Sequence

from ...core.constants import STREAM_CHUNK_SIZE
from ...core.exceptions import SessionLaunchError, SessionTimeoutError
from ...core.logging import get_logger
from .models import SessionResult

logger = get_logger(__name__)

StreamCallback = Callable[[str], None]


class CommandRunner(ABC):
    """Launch a process and collect its result"""

    @abstractmethod
    async def run(
        self,
        argv: Sequence[str],
        env: Optional[Dict[str, str]] = None,
        on_stderr: Optional[StreamCallback] = None,
        timeout: Optional[float] = None,
    ) -> SessionResult:
        """
        Run argv to completion.

        Args:
            argv: Program and arguments
            env: Full environment for the child
            on_stderr: Called with each decoded stderr chunk as it is read
            timeout: Seconds before the child is killed (None waits forever)

        Raises:
            SessionLaunchError: If the process cannot be started
            SessionTimeoutError: If timeout expires
        """
        pass


class DiagnosticStream:
    """
    Async channel of diagnostic text chunks.

    The producer calls feed() and close(); a consumer iterates with
    ``async for``. Iteration ends once the stream is closed and drained.
    """

    def __init__(self):
        self._queue: "asyncio.Queue[Optional[str]]" = asyncio.Queue()
        self._closed = False

    def feed(self, chunk: str) -> None:
        if self._closed or not chunk:
            return
        self._queue.put_nowait(chunk)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(None)

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> AsyncIterator[str]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[str]:
        while True:
            chunk = await self._queue.get()
            if chunk is None:
                return
            yield chunk


class AsyncProcessRunner(CommandRunner):
    """CommandRunner on top of asyncio subprocesses"""

    def __init__(self, chunk_size: int = STREAM_CHUNK_SIZE):
        self.chunk_size = chunk_size

    async def run(
        self,
        argv: Sequence[str],
        env: Optional[Dict[str, str]] = None,
        on_stderr: Optional[StreamCallback] = None,
        timeout: Optional[float] = None,
    ) -> SessionResult:
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
        except OSError as e:
            raise SessionLaunchError(f"Failed to launch {argv[0]}: {e}") from e

        out_buf: List[str] = []
        err_buf: List[str] = []

        async def communicate() -> int:
            await asyncio.gather(
                self._drain(process.stdout, out_buf, None),
                self._drain(process.stderr, err_buf, on_stderr),
            )
            return await process.wait()

        try:
            exit_code = await asyncio.wait_for(communicate(), timeout)
        except asyncio.TimeoutError:
            await self._terminate(process)
            raise SessionTimeoutError(
                f"{argv[0]} timed out after {timeout} seconds",
                timeout=timeout,
                stderr="".join(err_buf),
            ) from None
        except asyncio.CancelledError:
            await self._terminate(process)
            raise

        return SessionResult(exit_code=exit_code, stdout="".join(out_buf), stderr="".join(err_buf))

    async def _drain(
        self,
        reader: Optional[asyncio.StreamReader],
        buffer: List[str],
        callback: Optional[StreamCallback],
    ) -> None:
        if reader is None:
            return
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            data = await reader.read(self.chunk_size)
            text = decoder.decode(data, final=not data)
            if text:
                buffer.append(text)
                if callback is not None:
                    callback(text)
            if not data:
                return

    @staticmethod
    async def _terminate(process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        try:
            process.kill()
        except ProcessLookupError:
            pass
        await process.wait()
        logger.debug("Killed pid %s", process.pid)

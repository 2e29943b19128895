"""
Session executor - ssh/scp invocation

All remote I/O is delegated to the OpenSSH executables. Each call resolves
the identity, prepares the environment and runs one process.
"""
import asyncio
import sys
from typing import List, Optional

from ...core.constants import (
    BASE_SSH_OPTIONS,
    DEFAULT_COMMAND_TIMEOUT,
    LEGACY_ALGORITHM_OPTIONS,
    MACOS_SSH_OPTIONS,
)
from ...core.exceptions import SessionError, SessionLaunchError
from ...core.logging import get_logger, get_ssh_logger
from ...core.utils import ensure_trailing_separator, format_ssh_target, shell_quote
from ..identity import IdentityContext, IdentityResolver
from .agent import AgentLocator
from .models import ProgressCallback, SessionResult
from .runner import CommandRunner, DiagnosticStream

logger = get_logger(__name__)
ssh_logger = get_ssh_logger()


def wrap_remote_command(command: str) -> str:
    """Run command under a POSIX login shell on the remote side"""
    return "sh -lc " + shell_quote(command)


class SessionExecutor:
    """
    Runs remote commands and copies.

    Host keys are never persisted or checked, authentication is public key
    only and never interactive. Without a resolved identity file ssh falls
    back to whatever the agent offers.
    """

    def __init__(
        self,
        runner: CommandRunner,
        resolver: IdentityResolver,
        agent: Optional[AgentLocator] = None,
        ssh_binary: str = "ssh",
        scp_binary: str = "scp",
        platform: str = sys.platform,
        command_timeout: Optional[float] = DEFAULT_COMMAND_TIMEOUT,
    ):
        self.runner = runner
        self.resolver = resolver
        self.agent = agent or AgentLocator(runner, platform=platform)
        self.ssh_binary = ssh_binary
        self.scp_binary = scp_binary
        self.platform = platform
        self.command_timeout = command_timeout

    # --------------------
    # Argument building
    # --------------------
    def build_options(self, identity_file: Optional[str]) -> List[str]:
        """Options shared by ssh and scp"""
        options = list(BASE_SSH_OPTIONS)
        if self.platform == "darwin":
            options.extend(MACOS_SSH_OPTIONS)
        if identity_file:
            options.extend(LEGACY_ALGORITHM_OPTIONS)
            options.extend(["-i", identity_file])
        return options

    def build_ssh_args(self, context: IdentityContext, command: str, identity_file: Optional[str]) -> List[str]:
        return [
            self.ssh_binary,
            *self.build_options(identity_file),
            format_ssh_target(context.username, context.server_address),
            wrap_remote_command(command),
        ]

    def build_scp_args(
        self,
        source: str,
        destination: str,
        is_directory: bool,
        identity_file: Optional[str],
    ) -> List[str]:
        args = [self.scp_binary, *self.build_options(identity_file), "-p"]
        if is_directory:
            args.append("-r")
        args.extend([source, destination])
        return args

    def remote_spec(self, context: IdentityContext, path: str) -> str:
        """user@server:path as understood by scp"""
        return f"{format_ssh_target(context.username, context.server_address)}:{path}"

    # --------------------
    # Operations
    # --------------------
    async def run_command(
        self,
        context: IdentityContext,
        command: str,
        timeout: Optional[float] = None,
    ) -> SessionResult:
        """
        Execute command on the remote host.

        A non-zero exit is returned, not raised. timeout defaults to the
        executor's command_timeout.

        Raises:
            SessionLaunchError: ssh could not be started
            SessionTimeoutError: timeout expired, the process was killed
        """
        with self.resolver.acquire(context) as identity:
            argv = self.build_ssh_args(context, command, identity.identity_file)
            env = await self.agent.environment()
            logger.debug("Running on %s: %s", context.server_address, command)
            result = await self.runner.run(argv, env=env, timeout=timeout or self.command_timeout)

        if result.stderr:
            ssh_logger.debug(result.stderr.rstrip())
        if not result.ok:
            logger.debug("Remote command exited with %s", result.exit_code)
        return result

    async def copy_from_remote(
        self,
        context: IdentityContext,
        remote_path: str,
        is_directory: bool,
        destination_dir: str,
        on_progress: Optional[ProgressCallback] = None,
        timeout: Optional[float] = None,
    ) -> SessionResult:
        """
        Copy remote_path into the local destination_dir.

        Raises:
            SessionError: scp exited non-zero (message is its diagnostic output)
        """
        return await self._copy(
            context,
            source=self.remote_spec(context, remote_path),
            destination=destination_dir,
            is_directory=is_directory,
            on_progress=on_progress,
            timeout=timeout,
        )

    async def copy_to_remote(
        self,
        context: IdentityContext,
        local_path: str,
        is_directory: bool,
        destination_remote_dir: str,
        on_progress: Optional[ProgressCallback] = None,
        timeout: Optional[float] = None,
    ) -> SessionResult:
        """
        Copy local_path into destination_remote_dir on the remote host.

        Raises:
            SessionError: scp exited non-zero (message is its diagnostic output)
        """
        # scp escapes the remote part itself; no quoting here
        return await self._copy(
            context,
            source=local_path,
            destination=self.remote_spec(context, ensure_trailing_separator(destination_remote_dir)),
            is_directory=is_directory,
            on_progress=on_progress,
            timeout=timeout,
        )

    async def remote_path_exists(self, context: IdentityContext, path: str) -> bool:
        """Probe path on the remote host; any failure reads as missing"""
        quoted = shell_quote(path)
        command = f"if [ -e {quoted} ]; then echo exists; else echo missing; fi"
        try:
            result = await self.run_command(context, command)
        except (SessionError, SessionLaunchError) as e:
            logger.debug("Existence probe for %s failed: %s", path, e)
            return False
        return "exists" in result.stdout

    async def _copy(
        self,
        context: IdentityContext,
        source: str,
        destination: str,
        is_directory: bool,
        on_progress: Optional[ProgressCallback],
        timeout: Optional[float],
    ) -> SessionResult:
        stream = DiagnosticStream()
        reporter = asyncio.create_task(self._report_progress(stream, on_progress))
        try:
            with self.resolver.acquire(context) as identity:
                argv = self.build_scp_args(source, destination, is_directory, identity.identity_file)
                env = await self.agent.environment()
                logger.debug("Copying %s -> %s", source, destination)
                result = await self.runner.run(argv, env=env, on_stderr=stream.feed, timeout=timeout)
        finally:
            stream.close()
            await reporter

        if not result.ok:
            message = result.stderr.strip() or "scp failed"
            raise SessionError(message, exit_code=result.exit_code, stderr=result.stderr)
        return result

    @staticmethod
    async def _report_progress(stream: DiagnosticStream, on_progress: Optional[ProgressCallback]) -> None:
        async for chunk in stream:
            ssh_logger.debug(chunk.rstrip())
            if on_progress is None:
                continue
            try:
                on_progress(chunk)
            except Exception:
                logger.exception("Progress callback failed")

"""
SSH agent socket discovery

Processes started from a desktop session (or a service manager) often do not
inherit SSH_AUTH_SOCK. The OS session service still knows it, so ask there
before launching ssh/scp.
"""
import os
import sys
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from ...core.constants import AGENT_LOOKUP_TIMEOUT, SSH_AUTH_SOCK
from ...core.exceptions import SessionError, SessionLaunchError
from ...core.logging import get_logger
from .runner import CommandRunner

logger = get_logger(__name__)

# Relative to $XDG_RUNTIME_DIR
_RUNTIME_DIR_SOCKETS = (
    "ssh-agent.socket",
    "openssh_agent",
    "gcr/ssh",
    "keyring/ssh",
)


def socket_exists(path: Optional[str]) -> bool:
    if not path:
        return False
    return Path(path).exists()


def parse_environment_block(text: str) -> Dict[str, str]:
    """Parse KEY=VALUE lines (systemctl --user show-environment output)"""
    env: Dict[str, str] = {}
    for line in text.splitlines():
        key, sep, value = line.partition("=")
        if sep and key:
            env[key.strip()] = value.strip()
    return env


class AgentLocator:
    """
    Find the ssh-agent socket for child processes.

    Lookups are cached for the life of the locator; a discovered path that
    does not exist on disk is ignored.
    """

    def __init__(
        self,
        runner: CommandRunner,
        platform: str = sys.platform,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.runner = runner
        self.platform = platform
        self._environ = environ
        self._looked_up = False
        self._socket: Optional[str] = None

    @property
    def environ(self) -> Mapping[str, str]:
        return self._environ if self._environ is not None else os.environ

    async def environment(self, base_env: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        """Return a child environment with SSH_AUTH_SOCK filled in when discoverable"""
        env = dict(base_env if base_env is not None else self.environ)
        if env.get(SSH_AUTH_SOCK):
            return env

        sock = await self.locate()
        if sock:
            env[SSH_AUTH_SOCK] = sock
        return env

    async def locate(self) -> Optional[str]:
        if not self._looked_up:
            self._socket = await self._discover()
            self._looked_up = True
            if self._socket:
                logger.debug("Discovered ssh-agent socket %s", self._socket)
            else:
                logger.debug("No ssh-agent socket discovered")
        return self._socket

    async def _discover(self) -> Optional[str]:
        for candidate in await self._candidates():
            if socket_exists(candidate):
                return candidate
        return None

    async def _candidates(self) -> List[str]:
        if self.platform == "darwin":
            value = await self._query(["/bin/launchctl", "getenv", SSH_AUTH_SOCK])
            return [value.strip()] if value and value.strip() else []

        candidates: List[str] = []
        output = await self._query(["systemctl", "--user", "show-environment"])
        if output:
            value = parse_environment_block(output).get(SSH_AUTH_SOCK)
            if value:
                candidates.append(value)

        runtime_dir = self.environ.get("XDG_RUNTIME_DIR")
        if runtime_dir:
            candidates.extend(os.path.join(runtime_dir, name) for name in _RUNTIME_DIR_SOCKETS)
        return candidates

    async def _query(self, argv: List[str]) -> Optional[str]:
        try:
            result = await self.runner.run(argv, env=dict(self.environ), timeout=AGENT_LOOKUP_TIMEOUT)
        except (SessionLaunchError, SessionError) as e:
            logger.debug("%s unavailable: %s", argv[0], e)
            return None
        if not result.ok:
            return None
        return result.stdout

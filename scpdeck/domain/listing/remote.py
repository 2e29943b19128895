"""
Remote directory browsing
"""
from typing import List

from ...core.exceptions import ListingError
from ...core.logging import get_logger
from ..identity import IdentityContext
from ..session import SessionExecutor
from .models import RemoteEntry
from .parser import build_listing_command, parse_listing

logger = get_logger(__name__)


class RemoteBrowser:
    """Lists remote directories through the session executor"""

    def __init__(self, executor: SessionExecutor):
        self.executor = executor

    async def list_directory(self, context: IdentityContext, path: str) -> List[RemoteEntry]:
        """
        List path on the remote host.

        Raises:
            ListingError: If the listing command exits non-zero
            SessionLaunchError: If ssh cannot be started
            SessionTimeoutError: If the listing takes too long
        """
        result = await self.executor.run_command(context, build_listing_command(path))
        if not result.ok:
            message = f"Listing {path} on {context.server_address} failed (exit {result.exit_code})"
            lines = result.stderr.strip().splitlines()
            if lines:
                message += f": {lines[-1]}"
            raise ListingError(message, stderr=result.stderr)

        entries = parse_listing(result.stdout)
        logger.debug("Listed %d entries in %s", len(entries), path)
        return entries

"""
Service wiring for CLI commands
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from ...core.constants import DEFAULT_COMMAND_TIMEOUT
from ...core.exceptions import ConfigError
from ...core.interfaces import CredentialStore
from ...domain.browser import BrowserSession
from ...domain.identity import IdentityResolver
from ...domain.listing import RemoteBrowser
from ...domain.session import AgentLocator, AsyncProcessRunner, CommandRunner, SessionExecutor
from ...domain.transfer import TransferService
from ...infrastructure.state.bookmarks import FileBookmarkStore
from ...infrastructure.state.credentials import KeyringCredentialStore
from ...infrastructure.state.settings_store import JsonSettingsStore
from ..config.loader import ConfigLoader
from .prompts import RichPromptProvider


@dataclass
class CliOptions:
    """Global options collected by the app callback"""
    config_file: Optional[Path] = None
    assume_yes: bool = False
    server: Optional[str] = None
    user: Optional[str] = None
    identity: Optional[str] = None
    timeout: Optional[float] = None

    def overrides(self) -> Dict[str, Any]:
        return {
            "server_address": self.server,
            "username": self.user,
            "identity_key_path": self.identity,
            "timeout": self.timeout,
        }


@dataclass
class Services:
    """Everything a command needs, wired together"""
    settings: JsonSettingsStore
    bookmarks: FileBookmarkStore
    resolver: IdentityResolver
    executor: SessionExecutor
    transfers: TransferService
    session: BrowserSession
    prompts: RichPromptProvider

    def require_connection(self) -> None:
        """
        Raises:
            ConfigError: If no server or username is configured
        """
        if not self.settings.server_address:
            raise ConfigError("No server configured: use --server or `scpdeck config set server_address HOST`")
        if not self.settings.username:
            raise ConfigError("No username configured: use --user or `scpdeck config set username NAME`")


def build_services(
    options: CliOptions,
    runner: Optional[CommandRunner] = None,
    credentials: Optional[CredentialStore] = None,
    settings_path: Optional[Path] = None,
) -> Services:
    """
    Build the service graph for one CLI run.

    Configuration (TOML, environment, command line) is applied on top of the
    persisted settings without being written back.

    Raises:
        ConfigError: If the configuration cannot be loaded
    """
    config = ConfigLoader().load(toml_path=options.config_file, cli_overrides=options.overrides())
    timeout = config.pop("timeout", DEFAULT_COMMAND_TIMEOUT)
    if "identity_key_path" in config:
        # an explicit key replaces the bookmarked one for this run
        config["identity_key_bookmark"] = None

    bookmarks = FileBookmarkStore()
    settings = JsonSettingsStore(
        path=settings_path,
        credentials=credentials or KeyringCredentialStore(),
        bookmarks=bookmarks,
    )
    settings.apply_overrides(config)

    runner = runner or AsyncProcessRunner()
    resolver = IdentityResolver(bookmarks=bookmarks)
    executor = SessionExecutor(
        runner,
        resolver,
        agent=AgentLocator(runner),
        command_timeout=timeout,
    )
    prompts = RichPromptProvider(assume_yes=options.assume_yes)
    transfers = TransferService(executor, confirmation=prompts, bookmarks=bookmarks)
    session = BrowserSession(settings, RemoteBrowser(executor), transfers)

    return Services(
        settings=settings,
        bookmarks=bookmarks,
        resolver=resolver,
        executor=executor,
        transfers=transfers,
        session=session,
        prompts=prompts,
    )

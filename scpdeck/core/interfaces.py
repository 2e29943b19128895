"""
Core interfaces for dependency injection
"""
from abc import ABC, abstractmethod
from typing import Optional, Tuple


class CredentialStore(ABC):
    """Secure credential storage interface"""

    @abstractmethod
    def get_password(self, service: str, account: str) -> Optional[str]:
        """Return the stored secret, or None when nothing is stored"""
        pass

    @abstractmethod
    def set_password(self, service: str, account: str, password: str) -> None:
        """Create or replace a secret"""
        pass

    @abstractmethod
    def delete_password(self, service: str, account: str) -> None:
        """Remove a secret if present"""
        pass


class BookmarkStore(ABC):
    """
    Persisted grants to filesystem locations.

    A token is opaque to callers. Access to a bookmarked location must be
    started before use and stopped afterwards.
    """

    @abstractmethod
    def save(self, path: str) -> str:
        """Create a token for path"""
        pass

    @abstractmethod
    def resolve(self, token: str) -> Optional[Tuple[str, bool]]:
        """Return (path, is_stale), or None if the token no longer resolves"""
        pass

    @abstractmethod
    def start_access(self, path: str) -> bool:
        """Begin scoped access to path"""
        pass

    @abstractmethod
    def stop_access(self, path: str) -> None:
        """End scoped access to path"""
        pass


class PromptProvider(ABC):
    """User prompt interface"""

    @abstractmethod
    def prompt(self, message: str, default: Optional[str] = None, password: bool = False) -> str:
        """Prompt user for input"""
        pass

    @abstractmethod
    def confirm(self, message: str, default: bool = False) -> bool:
        """Prompt user for confirmation"""
        pass

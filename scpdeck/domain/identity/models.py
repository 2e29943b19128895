"""
Identity domain models
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


class IdentitySource(str, Enum):
    """Where the resolved private key came from"""
    BOOKMARK = "bookmark"
    CONFIGURED = "configured"
    FALLBACK = "fallback"
    AGENT = "agent"


@dataclass(frozen=True)
class IdentityContext:
    """Connection credentials for one remote host"""
    server_address: str
    username: str
    passphrase: str = ""
    identity_key_path: Optional[str] = None
    identity_key_bookmark: Optional[str] = None

    @property
    def account_key(self) -> str:
        """Credential store account, "<username>@<server>" """
        return f"{self.username}@{self.server_address}"


@dataclass(frozen=True)
class ResolvedIdentity:
    """
    Outcome of identity resolution.

    path is the private key chosen by the priority rules; child_path is what
    gets passed to ssh/scp (the stable copy when one could be made).
    scoped_path is set when the key lives behind a bookmark grant.
    """
    path: Optional[str]
    source: IdentitySource
    child_path: Optional[str] = None
    scoped_path: Optional[str] = None

    @property
    def identity_file(self) -> Optional[str]:
        return self.child_path or self.path

    def with_child_path(self, child_path: str) -> "ResolvedIdentity":
        return replace(self, child_path=child_path)


@dataclass(frozen=True)
class KeyInfo:
    """Description of a private key file"""
    path: str
    key_type: Optional[str] = None
    fingerprint: Optional[str] = None
    encrypted: bool = False
    error: Optional[str] = None

    @property
    def readable(self) -> bool:
        return self.error is None

"""
Unified exception definitions
"""
from typing import Optional


class ScpdeckError(Exception):
    """Base exception class"""
    pass


class ConfigError(ScpdeckError):
    """Configuration error"""
    pass


class SessionError(ScpdeckError):
    """Remote shell or copy exited non-zero (authentication or connection failure)"""

    def __init__(self, message: str, exit_code: int = 1, stderr: str = ""):
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr


class SessionLaunchError(ScpdeckError):
    """ssh/scp process could not be started"""
    pass


class SessionTimeoutError(SessionError):
    """Remote command exceeded its timeout and was killed"""

    def __init__(self, message: str, timeout: float, stderr: str = ""):
        super().__init__(message, exit_code=-1, stderr=stderr)
        self.timeout = timeout


class ListingError(ScpdeckError):
    """Directory listing failed"""

    def __init__(self, message: str, stderr: Optional[str] = None):
        super().__init__(message)
        self.stderr = stderr


class LocalIOError(ScpdeckError):
    """Local filesystem scan or copy error"""
    pass


class CredentialStoreError(ScpdeckError):
    """Secure credential store read/write error"""
    pass


class KeyCopyError(ScpdeckError):
    """Identity key could not be copied to the stable location"""
    pass


class TransferError(ScpdeckError):
    """Transfer error"""
    pass


class TransferBusyError(TransferError):
    """A transfer batch is already running"""
    pass


class StatusTransitionError(TransferError):
    """Illegal transfer item state change"""
    pass


class PayloadError(ScpdeckError):
    """Malformed drag-and-drop payload"""
    pass

"""
Keyring-backed credential storage
"""
from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from ...core.exceptions import CredentialStoreError
from ...core.interfaces import CredentialStore


class KeyringCredentialStore(CredentialStore):
    """
    Secrets in the platform keyring (Keychain, Secret Service, ...).

    Backend failures are raised as CredentialStoreError; callers decide
    whether that is fatal.
    """

    def get_password(self, service: str, account: str) -> Optional[str]:
        try:
            return keyring.get_password(service, account)
        except KeyringError as e:
            raise CredentialStoreError(f"Failed to read {account} from keyring: {e}") from e

    def set_password(self, service: str, account: str, password: str) -> None:
        try:
            keyring.set_password(service, account, password)
        except KeyringError as e:
            raise CredentialStoreError(f"Failed to store {account} in keyring: {e}") from e

    def delete_password(self, service: str, account: str) -> None:
        try:
            keyring.delete_password(service, account)
        except PasswordDeleteError:
            # nothing stored
            return
        except KeyringError as e:
            raise CredentialStoreError(f"Failed to delete {account} from keyring: {e}") from e

"""
Private key inspection
"""
from pathlib import Path
from typing import Optional

import paramiko

from ...core.constants import PUBLIC_KEY_SUFFIX
from .models import KeyInfo

# Tried in order: Ed25519 first, then ECDSA, RSA
_KEY_CLASSES = (paramiko.Ed25519Key, paramiko.ECDSAKey, paramiko.RSAKey)


def _public_key_type(path: Path) -> Optional[str]:
    """Read the algorithm name from the neighbouring .pub file, if any"""
    pub_path = Path(str(path) + PUBLIC_KEY_SUFFIX)
    try:
        fields = pub_path.read_text(encoding="utf-8").split()
    except (OSError, UnicodeDecodeError):
        return None
    return fields[0] if fields else None


def _load_private_key(path: Path, password: Optional[str]) -> Optional[paramiko.PKey]:
    """
    Load path with each supported key class.

    Returns None when no class can parse it. PasswordRequiredException
    propagates so callers can tell encrypted keys apart.
    """
    for key_class in _KEY_CLASSES:
        try:
            return key_class.from_private_key_file(str(path), password=password)
        except paramiko.PasswordRequiredException:
            raise
        except (paramiko.SSHException, ValueError):
            continue
    return None


def inspect_identity(path: str, passphrase: Optional[str] = None) -> KeyInfo:
    """
    Describe a private key file.

    Never raises: problems are reported through KeyInfo.error.

    Args:
        path: Private key path
        passphrase: Optional passphrase for encrypted keys

    Returns:
        KeyInfo with type, fingerprint and encryption flag when readable
    """
    key_path = Path(path).expanduser()
    if not key_path.is_file():
        return KeyInfo(path=str(key_path), error="file not found")

    encrypted = False
    try:
        try:
            key = _load_private_key(key_path, None)
        except paramiko.PasswordRequiredException:
            encrypted = True
            if passphrase is None:
                return KeyInfo(path=str(key_path), key_type=_public_key_type(key_path), encrypted=True)
            key = _load_private_key(key_path, passphrase)
            if key is None:
                return KeyInfo(
                    path=str(key_path),
                    key_type=_public_key_type(key_path),
                    encrypted=True,
                    error="passphrase rejected",
                )
    except paramiko.PasswordRequiredException:
        return KeyInfo(path=str(key_path), encrypted=True, error="passphrase rejected")
    except OSError as e:
        return KeyInfo(path=str(key_path), error=str(e))

    if key is None:
        return KeyInfo(path=str(key_path), key_type=_public_key_type(key_path), error="unsupported key format")

    return KeyInfo(
        path=str(key_path),
        key_type=key.get_name(),
        fingerprint=key.fingerprint,
        encrypted=encrypted,
    )

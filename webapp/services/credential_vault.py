"""
Credential Vault

Symmetric encryption of users' mail app passwords, keyed by the
server-held AES_SECRET_KEY.
"""

import base64
import hashlib
import logging
from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)


def derive_key(secret):
    """
    Derive a Fernet key from an arbitrary secret string.

    Args:
        secret (str): Server secret

    Returns:
        bytes: urlsafe base64-encoded 32-byte key
    """
    digest = hashlib.sha256(secret.encode('utf-8')).digest()
    return base64.urlsafe_b64encode(digest)


class CredentialVault:
    """Encrypts and decrypts mail passwords with one process-wide secret."""

    def __init__(self, secret):
        if not secret:
            raise ValueError("Credential vault secret must not be empty")
        self._fernet = Fernet(derive_key(secret))

    def encrypt(self, plaintext):
        """
        Encrypt a mail password for storage.

        Each call uses a fresh IV, so encrypting the same value twice gives
        different tokens.

        Returns:
            str: ASCII token
        """
        return self._fernet.encrypt(plaintext.encode('utf-8')).decode('ascii')

    def decrypt(self, ciphertext):
        """
        Decrypt a stored token.

        Returns:
            str or None: The plaintext, or None if the token is empty,
            corrupted or was encrypted under a different secret
        """
        if not ciphertext or not isinstance(ciphertext, str):
            return None
        try:
            return self._fernet.decrypt(ciphertext.encode('ascii')).decode('utf-8')
        except (InvalidToken, UnicodeError, ValueError, TypeError):
            logger.debug("Credential token could not be decrypted")
            return None

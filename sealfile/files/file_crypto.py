"""
File Encryption Module

Implements per-operation key derivation with:
- PBKDF2-HMAC-SHA256 key stretching (100,000 iterations by default)
- Long-term key + rotatable pepper as the secret material
- Fresh random salt and nonce on every encryption
- AES-256-GCM authenticated encryption

Security features:
- A new key is derived for every container, so one compromised key
  exposes one file only
- No cipher state is kept between calls; a single encryptor can be
  shared by any number of threads
- Wrong secret and tampered data surface as the same error

Container format (see sealfile.formats.containers):
    [salt (16) | nonce (12) | ciphertext | tag (16)]
"""

import hmac
import secrets
from dataclasses import dataclass, field
from typing import Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..exceptions import AuthenticationError, ConfigurationError
from ..formats.containers import (
    NONCE_SIZE,
    SALT_SIZE,
    TAG_SIZE,
    decode_encrypted,
    encode_encrypted,
)


# Constants
KEY_SIZE = 32               # 256-bit keys

# PBKDF2 configuration
PBKDF2_ITERATIONS = 100_000
PBKDF2_ALGORITHM = hashes.SHA256()

SecretInput = Union[str, bytes]


def _to_bytes(value: SecretInput, name: str) -> bytes:
    if value is None:
        raise ConfigurationError(f"{name} is required")
    if isinstance(value, str):
        value = value.encode("utf-8")
    value = bytes(value)
    if not value:
        raise ConfigurationError(f"{name} is required for enhanced security")
    return value


@dataclass(frozen=True)
class SecretMaterial:
    """Long-term key and pepper. Replaced wholesale on rotation."""
    key: bytes = field(repr=False)
    pepper: bytes = field(repr=False)

    def combined(self) -> bytes:
        """Key material fed to the KDF: key || pepper."""
        return self.key + self.pepper


def generate_salt() -> bytes:
    """Generate a random 16-byte salt."""
    return secrets.token_bytes(SALT_SIZE)


def generate_nonce() -> bytes:
    """Generate a random 12-byte GCM nonce."""
    return secrets.token_bytes(NONCE_SIZE)


def derive_key(secret: SecretMaterial, salt: bytes,
               iterations: int = PBKDF2_ITERATIONS) -> bytes:
    """
    Derive an AES-256 key from secret material and salt using PBKDF2.

    Args:
        secret: Key and pepper
        salt: Random salt (16 bytes)
        iterations: Number of iterations

    Returns:
        32-byte derived key
    """
    kdf = PBKDF2HMAC(
        algorithm=PBKDF2_ALGORITHM,
        length=KEY_SIZE,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(secret.combined())


class KeyDerivingEncryptor:
    """
    AES-256-GCM encryptor keyed per call from key + pepper + salt.

    The instance holds one immutable SecretMaterial reference. Every
    encrypt/decrypt reads it once and builds a call-local AESGCM, so
    concurrent calls never observe each other's salt or cipher.

    Example:
        >>> enc = KeyDerivingEncryptor("master key", "pepper")
        >>> blob = enc.encrypt(b"payload")
        >>> enc.decrypt(blob)
        b'payload'
    """

    def __init__(self, key: SecretInput, pepper: SecretInput,
                 iterations: int = PBKDF2_ITERATIONS):
        """
        Initialize with secret material.

        Args:
            key: Long-term encryption key
            pepper: Secondary secret mixed into every derivation
            iterations: PBKDF2 iterations (default 100,000)

        Raises:
            ConfigurationError: If key or pepper is missing or empty
        """
        if not isinstance(iterations, int) or iterations < 1:
            raise ConfigurationError("iterations must be a positive integer")
        self._secret = SecretMaterial(_to_bytes(key, "key"),
                                      _to_bytes(pepper, "pepper"))
        self._iterations = iterations

    @property
    def iterations(self) -> int:
        return self._iterations

    def _cipher_for(self, secret: SecretMaterial, salt: bytes) -> AESGCM:
        return AESGCM(derive_key(secret, salt, self._iterations))

    def encrypt(self, plaintext: bytes) -> bytes:
        """
        Encrypt data under a freshly derived key.

        Returns:
            salt (16) || nonce (12) || ciphertext || tag (16)
        """
        secret = self._secret
        salt = generate_salt()
        cipher = self._cipher_for(secret, salt)
        nonce = generate_nonce()
        ciphertext = cipher.encrypt(nonce, bytes(plaintext), None)
        return encode_encrypted(salt, nonce, ciphertext)

    def decrypt(self, container: bytes) -> bytes:
        """
        Decrypt a container produced by encrypt().

        Raises:
            TruncatedContainerError: If the container is too short
            AuthenticationError: Wrong secret or tampered data
        """
        parts = decode_encrypted(container)
        cipher = self._cipher_for(self._secret, parts.salt)
        try:
            return cipher.decrypt(parts.nonce, parts.ciphertext, None)
        except InvalidTag:
            raise AuthenticationError() from None

    def verify_pepper(self, candidate: SecretInput) -> bool:
        """Check a pepper against the held one in constant time."""
        if isinstance(candidate, str):
            candidate = candidate.encode("utf-8")
        return hmac.compare_digest(self._secret.pepper, bytes(candidate))

    def rotate_pepper(self, new_pepper: SecretInput) -> None:
        """
        Replace the pepper.

        Existing containers are not touched; they stay readable only with
        the pepper they were written under.
        """
        self._secret = SecretMaterial(self._secret.key,
                                      _to_bytes(new_pepper, "pepper"))

    def uses_secret(self, key: SecretInput, pepper: SecretInput) -> bool:
        """True if key and pepper equal the held secret material."""
        if isinstance(key, str):
            key = key.encode("utf-8")
        if isinstance(pepper, str):
            pepper = pepper.encode("utf-8")
        secret = self._secret
        return (hmac.compare_digest(secret.key, bytes(key)) and
                hmac.compare_digest(secret.pepper, bytes(pepper)))


def encrypt_bytes(data: bytes, key: SecretInput, pepper: SecretInput,
                  **kwargs) -> bytes:
    """Convenience function for one-off encryption."""
    return KeyDerivingEncryptor(key, pepper, **kwargs).encrypt(data)


def decrypt_bytes(data: bytes, key: SecretInput, pepper: SecretInput,
                  **kwargs) -> bytes:
    """Convenience function for one-off decryption."""
    return KeyDerivingEncryptor(key, pepper, **kwargs).decrypt(data)


def get_container_info(data: bytes) -> dict:
    """
    Describe an encrypted container without decrypting it.

    Args:
        data: Encrypted container bytes

    Returns:
        Dict with salt, nonce and ciphertext metadata
    """
    parts = decode_encrypted(data)
    return {
        'salt': parts.salt.hex(),
        'nonce': parts.nonce.hex(),
        'ciphertext_size': len(parts.ciphertext) - TAG_SIZE,
        'encrypted_size': len(data),
    }

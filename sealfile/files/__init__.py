# File Encryption Module
"""
File codec implementations including:
- PBKDF2 key derivation (100,000 iterations) from key + pepper + salt
- AES-256-GCM authenticated encryption, stateless per call
- SecureFile save/load (encrypt then compress, decompress then decrypt)
- FileManager: secrets, pepper rotation, re-encryption, copy, batches
- LocalStorage collaborator

Security features:
- Random salt and nonce per container
- Single opaque error for wrong secret or tampered data
- No compiled-in default secrets
"""

from importlib import import_module


_EXPORTS = {
    'KeyDerivingEncryptor': 'file_crypto',
    'SecretMaterial': 'file_crypto',
    'derive_key': 'file_crypto',
    'encrypt_bytes': 'file_crypto',
    'decrypt_bytes': 'file_crypto',
    'get_container_info': 'file_crypto',
    'PBKDF2_ITERATIONS': 'file_crypto',
    'SecureFile': 'secure_file',
    'FileManager': 'file_manager',
    'FileOperation': 'file_manager',
    'CopyOptions': 'file_manager',
    'CopyOperation': 'file_manager',
    'CopyResult': 'file_manager',
    'LocalStorage': 'storage',
}


# Lazy imports to avoid RuntimeWarning when running module directly
def __getattr__(name):
    """Resolve public names from their submodule on first use."""
    if name in _EXPORTS:
        return getattr(import_module(f".{_EXPORTS[name]}", __name__), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = list(_EXPORTS)

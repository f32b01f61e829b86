"""
Exception hierarchy for SealFile.

Data-level errors also derive from ValueError so existing callers that
catch ValueError around decrypt/restore keep working.
"""

from typing import Optional


class SealFileError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(SealFileError, ValueError):
    """Invalid or missing configuration, detected at construction time."""


class AuthenticationError(SealFileError, ValueError):
    """
    Decryption failed.

    Opaque: the message never says whether the key or the data was at fault.
    """

    def __init__(self, message: str = "authentication failed"):
        super().__init__(message)


class EmptyInputError(SealFileError, ValueError):
    """Compression was asked to reduce an empty buffer."""


# ============================================================================
# Container errors
# ============================================================================

class MalformedContainerError(SealFileError, ValueError):
    """A container could not be parsed. Permanent, never retried."""


class TruncatedContainerError(MalformedContainerError):
    """Buffer shorter than the minimum container size."""

    def __init__(self, actual: int, required: int, what: str = "container"):
        self.actual = actual
        self.required = required
        super().__init__(
            f"{what} too short: got {actual} bytes, need at least {required}"
        )


class BadMagicError(MalformedContainerError):
    """Header magic bytes do not match."""

    def __init__(self, found: bytes):
        self.found = found
        super().__init__(f"invalid magic bytes: {found.hex()}")


class UnsupportedVersionError(MalformedContainerError):
    """Header format version is not supported by this build."""

    def __init__(self, version: int):
        self.version = version
        super().__init__(f"unsupported format version: {version}")


class UnknownMethodError(MalformedContainerError):
    """Method id is not a concrete compression method."""

    def __init__(self, method_id: int):
        self.method_id = method_id
        super().__init__(f"unsupported compression method: {method_id}")


class SizeMismatchError(SealFileError, ValueError):
    """Restored payload length disagrees with the header. Treated as corruption."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"decompressed size mismatch: expected {expected}, got {actual}"
        )


# ============================================================================
# Wrapped errors
# ============================================================================

class CodecError(SealFileError):
    """An underlying compression library failed."""

    def __init__(self, stage: str, method: Optional[object] = None,
                 detail: str = ""):
        self.stage = stage
        self.method = method
        name = getattr(method, "name", method)
        message = f"{stage} failed"
        if name is not None:
            message += f" ({name})"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class StorageError(SealFileError):
    """The storage collaborator could not read or write a location."""


class FileOperationError(SealFileError):
    """A single-file operation failed; the cause is chained."""

    def __init__(self, operation: str, filename: str, cause: BaseException):
        self.operation = operation
        self.filename = filename
        self.cause = cause
        super().__init__(f"failed to {operation} file {filename}: {cause}")

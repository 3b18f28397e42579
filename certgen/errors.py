"""Exception hierarchy for certificate provisioning."""

from typing import Optional


class CertgenError(Exception):
    """Base class for all provisioning errors."""


class MaterialNotFoundError(CertgenError):
    """Expected key or certificate file does not exist."""

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = str(path)
        super().__init__(message or f"File not found: {self.path}")


class MalformedMaterialError(CertgenError):
    """File exists but cannot be decoded, or does not match its pair."""

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = str(path)
        super().__init__(message or f"Malformed file: {self.path}")


class CryptoFailureError(CertgenError):
    """Key generation or signing primitive failed."""


class StorageError(CertgenError):
    """Writing key or certificate material failed."""

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = str(path)
        super().__init__(message or f"Unable to write {self.path}")


class UserCanceledError(CertgenError):
    """User declined a confirmation prompt."""


class CertificateBuildError(CertgenError):
    """Certificate builder was used in a way that cannot produce a valid certificate."""


class ConfigError(CertgenError):
    """Configuration file is missing or invalid."""


class PassphraseRequiredError(MalformedMaterialError):
    """Key file is encrypted and no passphrase was supplied."""

    def __init__(self, path: str):
        super().__init__(path, f"Key file {path} is encrypted, a passphrase is required")

"""RSA key generation and storage."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ..console import Prompter, ask_new_passphrase
from ..errors import (
    CryptoFailureError,
    MalformedMaterialError,
    MaterialNotFoundError,
    PassphraseRequiredError,
    StorageError,
    UserCanceledError,
)


logger = logging.getLogger(__name__)

KEY_SIZE = 2048
PUBLIC_EXPONENT = 65537

PathLike = Union[str, Path]


@dataclass
class KeyPair:
    """RSA key pair, optionally bound to the file it lives in."""
    private_key: rsa.RSAPrivateKey
    path: Optional[Path] = None

    @property
    def public_key(self) -> rsa.RSAPublicKey:
        """Public half of the pair."""
        return self.private_key.public_key()

    @property
    def key_size(self) -> int:
        return self.private_key.key_size

    def matches(self, public_key) -> bool:
        """Check whether ``public_key`` belongs to this pair."""
        if not isinstance(public_key, rsa.RSAPublicKey):
            return False
        return public_key.public_numbers() == self.public_key.public_numbers()

    def is_stored_at(self, path: PathLike) -> bool:
        """Check whether this pair was loaded from or saved to ``path``."""
        return self.path is not None and self.path.resolve() == Path(path).resolve()


def generate_keypair() -> KeyPair:
    """
    Generate a new 2048-bit RSA key pair.

    Returns:
        KeyPair: Fresh key pair, not yet persisted
    """
    logger.info("Generating a new RSA key")
    try:
        private_key = rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=KEY_SIZE)
    except (ValueError, UnsupportedAlgorithm) as e:
        raise CryptoFailureError(f"RSA key generation failed: {e}") from e
    return KeyPair(private_key=private_key)


def save_keypair(keypair: KeyPair, path: PathLike, passphrase: Optional[str] = None) -> Path:
    """
    Save a private key as PKCS#8 PEM.

    Args:
        keypair: Key pair to save
        path: Destination key file
        passphrase: Encrypts the key when non-empty

    Returns:
        Path of the written key file
    """
    key_path = Path(path)
    logger.info(f"Writing key file: {key_path}")

    if passphrase:
        encryption = serialization.BestAvailableEncryption(passphrase.encode('utf-8'))
    else:
        encryption = serialization.NoEncryption()

    pem_data = keypair.private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=encryption,
    )

    try:
        with open(key_path, 'wb') as f:
            f.write(pem_data)
        # Restrict private key permissions
        key_path.chmod(0o600)
    except OSError as e:
        raise StorageError(key_path, f"Unable to write key file {key_path}: {e}") from e

    keypair.path = key_path
    return key_path


def load_keypair(path: PathLike, passphrase: Optional[str] = None) -> KeyPair:
    """
    Load an RSA private key from a PEM file.

    Args:
        path: Path to private key file
        passphrase: Passphrase for an encrypted key

    Returns:
        KeyPair: Loaded key pair

    Raises:
        MaterialNotFoundError: The file does not exist
        PassphraseRequiredError: The file is encrypted and no passphrase was given
        MalformedMaterialError: The file is not a usable RSA private key
    """
    key_path = Path(path)
    logger.info(f"Reading key file: {key_path}")

    try:
        with open(key_path, 'rb') as f:
            pem_data = f.read()
    except FileNotFoundError as e:
        raise MaterialNotFoundError(key_path) from e
    except OSError as e:
        raise MalformedMaterialError(key_path, f"Error loading key file {key_path}: {e}") from e

    password = passphrase.encode('utf-8') if passphrase else None
    try:
        private_key = serialization.load_pem_private_key(pem_data, password=password)
    except TypeError as e:
        if password is None:
            raise PassphraseRequiredError(str(key_path)) from e
        raise MalformedMaterialError(key_path, f"Key file {key_path} is not encrypted: {e}") from e
    except (ValueError, UnsupportedAlgorithm) as e:
        raise MalformedMaterialError(key_path, f"Unable to decode key file {key_path}: {e}") from e

    if not isinstance(private_key, rsa.RSAPrivateKey):
        raise MalformedMaterialError(key_path, f"Key file {key_path} does not hold an RSA key")

    logger.info("Key file read OK")
    return KeyPair(private_key=private_key, path=key_path)


def load_keypair_interactive(path: PathLike, prompter: Prompter) -> KeyPair:
    """
    Load a key, asking for its passphrase once if the file is encrypted.

    A wrong passphrase is not retried.
    """
    try:
        return load_keypair(path)
    except PassphraseRequiredError:
        passphrase = prompter.ask_secret(f"Passphrase for {path}")
        if not passphrase:
            raise
        return load_keypair(path, passphrase)


def load_or_generate_keypair(path: PathLike, prompter: Prompter) -> KeyPair:
    """
    Load an existing key, or generate and persist a new one on confirmation.

    Only a missing file leads to generation; a malformed key file is
    reported and never overwritten.

    Args:
        path: Path to private key file
        prompter: Answers the generation question and the passphrase prompts

    Returns:
        KeyPair: Loaded or newly generated key pair
    """
    try:
        keypair = load_keypair_interactive(path, prompter)
        logger.info(f"Key {path} loaded OK")
        return keypair
    except MaterialNotFoundError:
        logger.info(f"Key {path} does not exist")

    if not prompter.confirm(f"Generate key {path}?"):
        raise UserCanceledError(f"Generation of key {path} canceled by user")

    keypair = generate_keypair()
    passphrase = ask_new_passphrase(prompter, str(path))
    save_keypair(keypair, path, passphrase)
    return keypair

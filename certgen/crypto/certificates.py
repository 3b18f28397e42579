"""Signed certificates bound to their private keys."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.serialization import Encoding
from cryptography.x509.oid import NameOID

from ..console import Prompter, ask_new_passphrase
from ..errors import CertificateBuildError, MalformedMaterialError, MaterialNotFoundError, StorageError
from .keys import KeyPair, load_keypair, load_keypair_interactive, save_keypair


logger = logging.getLogger(__name__)


def material_paths(name: Union[str, Path]) -> Tuple[Path, Path]:
    """Return the (certificate, key) file paths for logical name ``name``."""
    return Path(f"{name}.crt"), Path(f"{name}.key")


def load_certificate_file(path: Union[str, Path]) -> x509.Certificate:
    """
    Load a PEM certificate without its key.

    Raises:
        MaterialNotFoundError: The file does not exist
        MalformedMaterialError: The file is not a PEM certificate
    """
    crt_path = Path(path)
    logger.info(f"Reading certificate file: {crt_path}")

    try:
        with open(crt_path, 'rb') as f:
            pem_data = f.read()
    except FileNotFoundError as e:
        raise MaterialNotFoundError(crt_path) from e
    except OSError as e:
        raise MalformedMaterialError(crt_path, f"Error loading certificate file {crt_path}: {e}") from e

    try:
        return x509.load_pem_x509_certificate(pem_data)
    except ValueError as e:
        raise MalformedMaterialError(crt_path, f"Unable to decode certificate file {crt_path}: {e}") from e


def is_issued_by(certificate: x509.Certificate, issuer: x509.Certificate) -> bool:
    """Check that ``certificate`` was directly issued and signed by ``issuer``."""
    try:
        certificate.verify_directly_issued_by(issuer)
    except (ValueError, TypeError, InvalidSignature) as e:
        logger.debug(f"Issuer verification failed: {e}")
        return False
    return True


def describe_certificate(certificate: x509.Certificate) -> dict:
    """Summary of a certificate for display."""
    try:
        constraints = certificate.extensions.get_extension_for_class(x509.BasicConstraints)
        is_ca = constraints.value.ca
    except x509.ExtensionNotFound:
        is_ca = False

    try:
        san = certificate.extensions.get_extension_for_class(x509.SubjectAlternativeName)
        alt_names = san.value.get_values_for_type(x509.DNSName)
    except x509.ExtensionNotFound:
        alt_names = []

    return {
        "subject": certificate.subject.rfc4514_string(),
        "issuer": certificate.issuer.rfc4514_string(),
        "serial_number": format(certificate.serial_number, 'x'),
        "not_valid_before": certificate.not_valid_before_utc.isoformat(),
        "not_valid_after": certificate.not_valid_after_utc.isoformat(),
        "is_ca": is_ca,
        "self_signed": certificate.subject == certificate.issuer,
        "subject_alt_names": alt_names,
    }


@dataclass
class Certificate:
    """
    Signed X.509 certificate and the key pair for its public key.

    Key and certificate are always loaded and saved together under the
    same logical name: ``{name}.crt`` and ``{name}.key``.
    """
    certificate: x509.Certificate
    keypair: KeyPair

    @classmethod
    def load(cls, name: Union[str, Path], prompter: Optional[Prompter] = None) -> "Certificate":
        """
        Load a certificate and its key.

        Args:
            name: Logical name (path without extension)
            prompter: Asks for the key passphrase if the key is encrypted

        Returns:
            Certificate: Loaded pair

        Raises:
            MaterialNotFoundError: Either file is missing
            MalformedMaterialError: Either file is undecodable, or they do not belong together
        """
        crt_path, key_path = material_paths(name)
        certificate = load_certificate_file(crt_path)

        if prompter is not None:
            keypair = load_keypair_interactive(key_path, prompter)
        else:
            keypair = load_keypair(key_path)

        if not keypair.matches(certificate.public_key()):
            raise MalformedMaterialError(
                crt_path,
                f"Certificate {crt_path} does not match key {key_path}"
            )

        return cls(certificate=certificate, keypair=keypair)

    def save(self, name: Union[str, Path], prompter: Optional[Prompter] = None) -> None:
        """
        Save the certificate and its key.

        The key is written only when it is not already stored at
        ``{name}.key``; the certificate is always written.

        Args:
            name: Logical name (path without extension)
            prompter: Asks for a passphrase for a newly written key
        """
        crt_path, key_path = material_paths(name)

        if not self.keypair.is_stored_at(key_path):
            passphrase = ask_new_passphrase(prompter, str(key_path)) if prompter else None
            save_keypair(self.keypair, key_path, passphrase)

        logger.info(f"Writing certificate file: {crt_path}")
        try:
            with open(crt_path, 'wb') as f:
                f.write(self.to_pem())
        except OSError as e:
            raise StorageError(crt_path, f"Unable to write certificate file {crt_path}: {e}") from e

    def sign(self, builder) -> "Certificate":
        """
        Sign a draft builder with this certificate's key.

        The builder's issuer is set to this certificate's subject if unset,
        and must equal it otherwise.

        Args:
            builder: CertificateBuilder or SiteCertificateBuilder in draft phase

        Returns:
            Certificate: Issued certificate paired with the builder's key
        """
        if builder.issuer is None:
            builder.set_issuer_name(self.subject)
        elif builder.issuer != self.subject:
            raise CertificateBuildError("Issuer name does not match the signing certificate's subject")

        builder.sign(self.keypair.private_key)
        return builder.build()

    def verify_issued(self, other: "Certificate") -> bool:
        """Check that ``other`` was directly issued and signed by this certificate."""
        return is_issued_by(other.certificate, self.certificate)

    def to_pem(self) -> bytes:
        return self.certificate.public_bytes(Encoding.PEM)

    @property
    def subject(self) -> x509.Name:
        return self.certificate.subject

    @property
    def issuer(self) -> x509.Name:
        return self.certificate.issuer

    @property
    def common_name(self) -> Optional[str]:
        attributes = self.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
        return attributes[0].value if attributes else None

    @property
    def is_ca(self) -> bool:
        return describe_certificate(self.certificate)["is_ca"]

    @property
    def subject_alt_names(self) -> List[str]:
        """DNS Subject Alternative Names, in certificate order."""
        return describe_certificate(self.certificate)["subject_alt_names"]

    def describe(self) -> dict:
        return describe_certificate(self.certificate)

"""X.509 certificate builders.

A builder moves through phases: a general ``CertificateBuilder`` in the
draft phase accepts names, validity and extensions; ``set_server_auth``
hands its state over to a ``SiteCertificateBuilder`` and retires the
general builder; signing freezes the builder, after which only ``build``
is legal.
"""

import copy
import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Iterable, Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import ExtendedKeyUsageOID

from ..errors import CertificateBuildError, CryptoFailureError
from .certificates import Certificate
from .keys import KeyPair


logger = logging.getLogger(__name__)


class BuilderPhase(str, Enum):
    """Lifecycle phase of a certificate builder."""
    DRAFT = "draft"
    SIGNED = "signed"
    CONSUMED = "consumed"


class CertificateBuilder:
    """Unsigned certificate under construction, bound to its subject key."""

    def __init__(self, keypair: KeyPair):
        """
        Start a version 3 certificate for ``keypair``'s public key.

        Args:
            keypair: Key pair whose public key the certificate certifies
        """
        self.keypair = keypair
        self.phase = BuilderPhase.DRAFT
        self.subject: Optional[x509.Name] = None
        self.issuer: Optional[x509.Name] = None
        self.not_valid_before: Optional[datetime] = None
        self.not_valid_after: Optional[datetime] = None
        self._builder = (
            x509.CertificateBuilder()
            .public_key(keypair.public_key)
            .serial_number(x509.random_serial_number())
        )
        self._signed: Optional[x509.Certificate] = None

    @property
    def version(self) -> x509.Version:
        return x509.Version.v3

    def _require_phase(self, phase: BuilderPhase) -> None:
        if self.phase != phase:
            raise CertificateBuildError(
                f"Certificate builder is {self.phase.value}, expected {phase.value}"
            )

    def _add_extension(self, extension: x509.ExtensionType, critical: bool) -> None:
        self._require_phase(BuilderPhase.DRAFT)
        try:
            self._builder = self._builder.add_extension(extension, critical=critical)
        except ValueError as e:
            raise CertificateBuildError(f"Unable to add extension: {e}") from e

    def set_subject_name(self, name: x509.Name) -> None:
        self._require_phase(BuilderPhase.DRAFT)
        self.subject = name

    def set_issuer_name(self, name: x509.Name) -> None:
        self._require_phase(BuilderPhase.DRAFT)
        self.issuer = name

    def set_validity_period(self, days: int) -> None:
        """Valid from now until ``days`` days from now."""
        self._require_phase(BuilderPhase.DRAFT)
        if isinstance(days, bool) or not isinstance(days, int) or days <= 0:
            raise CertificateBuildError(f"Validity period must be a positive number of days, got {days!r}")

        now = datetime.now(timezone.utc)
        try:
            not_valid_after = now + timedelta(days=days)
        except OverflowError as e:
            raise CertificateBuildError(f"Validity period of {days} days is out of range") from e
        self.not_valid_before = now
        self.not_valid_after = not_valid_after

    def set_certificate_authority(self) -> None:
        """Mark the certificate as a CA (critical, no path length limit)."""
        self._add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)

    def set_server_auth(self) -> "SiteCertificateBuilder":
        """
        Add TLS server authentication extended key usage.

        The builder's state moves to the returned site builder; this builder
        can no longer be used.
        """
        self._add_extension(x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]), critical=False)
        successor = copy.copy(self)
        self.phase = BuilderPhase.CONSUMED
        return SiteCertificateBuilder(successor)

    def sign(self, private_key: rsa.RSAPrivateKey) -> None:
        """Sign with ``private_key`` using SHA-256 and freeze the builder."""
        self._require_phase(BuilderPhase.DRAFT)
        if self.subject is None:
            raise CertificateBuildError("Subject name is not set")
        if self.issuer is None:
            raise CertificateBuildError("Issuer name is not set")
        if self.not_valid_before is None or self.not_valid_after is None:
            raise CertificateBuildError("Validity period is not set")

        builder = (
            self._builder
            .subject_name(self.subject)
            .issuer_name(self.issuer)
            .not_valid_before(self.not_valid_before)
            .not_valid_after(self.not_valid_after)
        )
        try:
            self._signed = builder.sign(private_key=private_key, algorithm=hashes.SHA256())
        except (ValueError, TypeError) as e:
            raise CryptoFailureError(f"Certificate signing failed: {e}") from e

        self.phase = BuilderPhase.SIGNED
        logger.debug(f"Signed certificate {self.subject.rfc4514_string()} (serial {self._signed.serial_number:x})")

    def sign_self(self) -> Certificate:
        """Self-sign with the certificate's own key; subject and issuer must match."""
        if self.issuer != self.subject:
            raise CertificateBuildError("Self-signed certificate requires issuer name equal to subject name")
        self.sign(self.keypair.private_key)
        return self.build()

    def build(self) -> Certificate:
        """Return the signed certificate paired with its key."""
        self._require_phase(BuilderPhase.SIGNED)
        return Certificate(certificate=self._signed, keypair=self.keypair)


class SiteCertificateBuilder:
    """
    Server-authentication certificate builder.

    Delegates every general builder operation and adds Subject Alternative
    Names.
    """

    def __init__(self, builder: CertificateBuilder):
        self._inner = builder

    def __getattr__(self, name):
        return getattr(self._inner, name)

    def set_subject_alt_names(self, alt_names: Iterable[str]) -> None:
        """
        Add a Subject Alternative Name extension, one DNS entry per name.

        Raises:
            CertificateBuildError: No names were given, or a name is not a valid DNS label
        """
        names = list(alt_names)
        if not names:
            raise CertificateBuildError("At least one subject alternative name is required")

        try:
            san = x509.SubjectAlternativeName([x509.DNSName(name) for name in names])
        except (ValueError, TypeError) as e:
            raise CertificateBuildError(f"Invalid subject alternative name: {e}") from e
        self._inner._add_extension(san, critical=False)

    def build(self) -> Certificate:
        return self._inner.build()

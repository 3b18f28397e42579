"""Key and certificate operations for Certgen."""

from .keys import (
    KeyPair,
    generate_keypair,
    save_keypair,
    load_keypair,
    load_keypair_interactive,
    load_or_generate_keypair,
)
from .certificates import Certificate, describe_certificate, is_issued_by, load_certificate_file, material_paths
from .builder import BuilderPhase, CertificateBuilder, SiteCertificateBuilder
from .names import build_subject_name

__all__ = [
    "KeyPair",
    "generate_keypair",
    "save_keypair",
    "load_keypair",
    "load_keypair_interactive",
    "load_or_generate_keypair",
    "Certificate",
    "material_paths",
    "load_certificate_file",
    "is_issued_by",
    "describe_certificate",
    "BuilderPhase",
    "CertificateBuilder",
    "SiteCertificateBuilder",
    "build_subject_name",
]

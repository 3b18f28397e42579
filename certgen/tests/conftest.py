"""Shared fixtures for Certgen tests."""

import pytest

from certgen.crypto import CertificateBuilder, build_subject_name, generate_keypair
from certgen.models import CertgenConfig, NetworkConfig, SiteConfig


@pytest.fixture
def network():
    return NetworkConfig(name="Acme", email="ca@acme.test")


@pytest.fixture
def config(network):
    """Single-site configuration from the Acme scenario."""
    return CertgenConfig(
        network=network.model_copy(update={"root_ca_validity_days": 36500}),
        sites={
            "www": SiteConfig(crt_validity_days=730, alt_names=["www.acme.test", "acme.test"]),
        },
    )


@pytest.fixture
def keypair():
    return generate_keypair()


@pytest.fixture
def ca_cert(network):
    """Self-signed CA certificate for ``network``."""
    builder = CertificateBuilder(generate_keypair())
    subject = build_subject_name(network)
    builder.set_subject_name(subject)
    builder.set_issuer_name(subject)
    builder.set_certificate_authority()
    builder.set_validity_period(3650)
    return builder.sign_self()

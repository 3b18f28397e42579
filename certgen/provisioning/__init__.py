"""Root CA and site certificate provisioning."""

from .provisioner import CertificateAuthorityProvisioner, ProvisioningReport, ProvisioningState

__all__ = [
    "CertificateAuthorityProvisioner",
    "ProvisioningReport",
    "ProvisioningState",
]

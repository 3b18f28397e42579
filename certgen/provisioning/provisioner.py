"""Certificate authority provisioning workflow."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Tuple, Union

from ..console import Prompter
from ..crypto import (
    Certificate,
    CertificateBuilder,
    build_subject_name,
    load_or_generate_keypair,
)
from ..errors import CertgenError, ConfigError, MaterialNotFoundError, UserCanceledError
from ..models import CertgenConfig, SiteConfig


logger = logging.getLogger(__name__)


class ProvisioningState(str, Enum):
    """Provisioning run states."""
    PENDING = "pending"
    RESOLVING_CA = "resolving_ca"
    RESOLVING_SITE = "resolving_site"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class ProvisioningReport:
    """Outcome of a provisioning run."""
    ca_name: str
    ca_created: bool = False
    issued: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.failed


class CertificateAuthorityProvisioner:
    """
    Obtains or creates the root CA, then issues a certificate for every site.

    Responsibilities:
    - Reuse an existing root CA, or create one on confirmation
    - Issue each site a server certificate signed by the CA
    - Keep going past a failed site; a failed CA aborts the run
    """

    def __init__(
        self,
        config: CertgenConfig,
        prompter: Prompter,
        directory: Union[str, Path] = "."
    ):
        """
        Initialize provisioner.

        Args:
            config: Network identity and site settings
            prompter: Answers confirmation and passphrase prompts
            directory: Directory holding key and certificate files
        """
        self.config = config
        self.prompter = prompter
        self.directory = Path(directory)
        self.state = ProvisioningState.PENDING

    def _material_name(self, name: str) -> Path:
        return self.directory / name

    def run(self) -> ProvisioningReport:
        """
        Run the whole provisioning workflow.

        Returns:
            ProvisioningReport: Created CA flag, issued and failed sites

        Raises:
            CertgenError: The root CA could not be obtained
        """
        report = ProvisioningReport(ca_name=self.config.network.root_ca_name)

        try:
            ca_cert, report.ca_created = self.resolve_ca()
        except CertgenError:
            self.state = ProvisioningState.ABORTED
            raise

        for site_name, site in self.config.sorted_sites():
            try:
                self.provision_site(ca_cert, site_name, site)
                report.issued.append(site_name)
            except CertgenError as e:
                logger.error(f"Site {site_name} failed: {e}")
                report.failed[site_name] = str(e)

        self.state = ProvisioningState.DONE
        logger.info(
            f"Provisioning finished: {len(report.issued)} issued, {len(report.failed)} failed"
        )
        return report

    def resolve_ca(self) -> Tuple[Certificate, bool]:
        """
        Load the root CA, or create it on confirmation.

        Returns:
            Tuple of (CA certificate, whether it was created)
        """
        self.state = ProvisioningState.RESOLVING_CA
        network = self.config.network
        ca_name = self._material_name(network.root_ca_name)

        try:
            ca_cert = Certificate.load(ca_name, self.prompter)
            logger.info("Certificate Authority read OK")
            return ca_cert, False
        except MaterialNotFoundError as e:
            logger.info(f"Certificate Authority does not exist ({e.path})")

        if not self.prompter.confirm(
            f"Certificate {network.root_ca_name} does not exist. Generate a new one?"
        ):
            raise UserCanceledError("Aborted by user")

        key = load_or_generate_keypair(f"{ca_name}.key", self.prompter)
        builder = CertificateBuilder(key)
        subject = build_subject_name(network)

        builder.set_issuer_name(subject)
        builder.set_subject_name(subject)
        builder.set_certificate_authority()
        builder.set_validity_period(network.root_ca_validity_days)
        ca_cert = builder.sign_self()

        ca_cert.save(ca_name, self.prompter)
        logger.info(f"Certificate Authority {network.root_ca_name} created")
        return ca_cert, True

    def provision_site(self, ca_cert: Certificate, site_name: str, site: SiteConfig) -> Certificate:
        """
        Issue a server certificate for one site, signed by ``ca_cert``.

        Args:
            ca_cert: Root CA certificate
            site_name: Logical site name, also the Common Name and file name
            site: Site settings

        Returns:
            Certificate: Issued site certificate
        """
        self.state = ProvisioningState.RESOLVING_SITE
        if site_name == self.config.network.root_ca_name:
            raise ConfigError(f"Site {site_name} uses the root CA name")
        logger.info(f"Processing site {site_name}")
        name = self._material_name(site_name)

        site_key = load_or_generate_keypair(f"{name}.key", self.prompter)
        site_crt = CertificateBuilder(site_key).set_server_auth()

        site_crt.set_subject_name(build_subject_name(self.config.network, (site_name, site)))
        site_crt.set_issuer_name(ca_cert.subject)
        site_crt.set_validity_period(site.crt_validity_days)
        site_crt.set_subject_alt_names(site.alt_names)

        certificate = ca_cert.sign(site_crt)
        certificate.save(name, self.prompter)
        logger.info(f"Certificate for site {site_name} issued")
        return certificate

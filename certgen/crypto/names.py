"""Distinguished name construction."""

from typing import Optional, Tuple

from cryptography import x509
from cryptography.x509.oid import NameOID

from ..models import NetworkConfig, SiteConfig


def build_subject_name(
    network: NetworkConfig,
    site: Optional[Tuple[str, SiteConfig]] = None
) -> x509.Name:
    """
    Build a subject name from the network identity.

    For a site, the logical site name replaces the Common Name and the site
    display name (or the logical name when it has none) replaces the
    Organizational Unit.

    Args:
        network: Network identity
        site: Optional (logical name, site settings) pair

    Returns:
        x509.Name: CN, O, OU, emailAddress, then optional C and ST
    """
    common_name = network.name
    unit = network.name
    if site is not None:
        site_name, site_config = site
        common_name = site_name
        unit = site_config.name or site_name

    attributes = [
        x509.NameAttribute(NameOID.COMMON_NAME, common_name),
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, network.name),
        x509.NameAttribute(NameOID.ORGANIZATIONAL_UNIT_NAME, unit),
        x509.NameAttribute(NameOID.EMAIL_ADDRESS, network.email),
    ]
    if network.country:
        attributes.append(x509.NameAttribute(NameOID.COUNTRY_NAME, network.country))
    if network.province:
        attributes.append(x509.NameAttribute(NameOID.STATE_OR_PROVINCE_NAME, network.province))

    return x509.Name(attributes)

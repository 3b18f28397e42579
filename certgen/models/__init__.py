"""Configuration models for Certgen."""

from .config import NetworkConfig, SiteConfig, CertgenConfig, load_config, DEFAULT_CONFIG_FILE

__all__ = [
    "NetworkConfig",
    "SiteConfig",
    "CertgenConfig",
    "load_config",
    "DEFAULT_CONFIG_FILE",
]

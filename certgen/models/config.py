"""Configuration schema for the network identity and its sites."""

import logging
import tomllib
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from pydantic import BaseModel, Field, ValidationError, model_validator

from ..errors import ConfigError


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "certgen.toml"


class NetworkConfig(BaseModel):
    """
    Network identity.

    Supplies the organization-level naming fields shared by every
    certificate and the root CA defaults.
    """
    name: str = Field(..., min_length=1, description="Organization the certificates are issued for")
    email: str = Field(..., min_length=1, description="Contact email embedded in certificates")
    country: Optional[str] = Field(
        None,
        min_length=2,
        max_length=2,
        description="Two-letter country code"
    )
    province: Optional[str] = Field(None, description="State or province")
    root_ca_name: str = Field(
        "root_ca",
        min_length=1,
        description="Logical name of the root CA key and certificate files"
    )
    root_ca_validity_days: int = Field(36500, gt=0, description="Root CA validity in days")


class SiteConfig(BaseModel):
    """Site (leaf certificate) settings."""
    name: Optional[str] = Field(None, description="Display name, used as Organizational Unit")
    crt_validity_days: int = Field(730, gt=0, description="Certificate validity in days")
    alt_names: List[str] = Field(
        default_factory=list,
        description="DNS Subject Alternative Names"
    )


class CertgenConfig(BaseModel):
    """Top level configuration document."""
    network: NetworkConfig
    sites: Dict[str, SiteConfig] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_site_names(self) -> "CertgenConfig":
        if self.network.root_ca_name in self.sites:
            raise ValueError(f"Site name {self.network.root_ca_name!r} is reserved for the root CA")
        return self

    def sorted_sites(self) -> Iterator[Tuple[str, SiteConfig]]:
        """Iterate sites ordered by logical name."""
        for name in sorted(self.sites):
            yield name, self.sites[name]


def load_config(path: Union[str, Path] = DEFAULT_CONFIG_FILE) -> CertgenConfig:
    """
    Load configuration from a TOML file.

    Args:
        path: Configuration file path

    Returns:
        CertgenConfig: Validated configuration

    Raises:
        ConfigError: File missing, not TOML, or not matching the schema
    """
    config_path = Path(path)
    logger.info(f"Reading configuration file: {config_path}")

    try:
        with open(config_path, 'rb') as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Unable to read configuration file {config_path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    try:
        return CertgenConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_path}:\n{e}") from e

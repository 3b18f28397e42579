"""Main CLI application for Certgen."""

import logging
from pathlib import Path

import click

from ..console import AutoPrompter, TerminalPrompter
from ..crypto import describe_certificate, is_issued_by, load_certificate_file, material_paths
from ..errors import CertgenError
from ..models import DEFAULT_CONFIG_FILE, load_config
from ..provisioning import CertificateAuthorityProvisioner

logger = logging.getLogger(__name__)


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
def cli(debug):
    """Certgen CLI - Private root CA and site certificate provisioning."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


@cli.command()
@click.option('--config', 'config_path', default=DEFAULT_CONFIG_FILE, show_default=True,
              help='Configuration file')
@click.option('--directory', default='.', help='Directory for key and certificate files')
@click.option('--yes', 'assume_yes', is_flag=True,
              help='Answer yes to every question and leave new keys unencrypted')
def generate(config_path, directory, assume_yes):
    """Create or reuse the root CA and issue all site certificates."""
    try:
        config = load_config(config_path)
    except CertgenError as e:
        raise click.ClickException(str(e))

    Path(directory).mkdir(parents=True, exist_ok=True)
    prompter = AutoPrompter(assume_yes=True) if assume_yes else TerminalPrompter()
    provisioner = CertificateAuthorityProvisioner(config, prompter, directory)

    try:
        report = provisioner.run()
    except CertgenError as e:
        raise click.ClickException(str(e))

    click.echo(f"\n✓ Certificate Authority: {report.ca_name} ({'created' if report.ca_created else 'reused'})")
    for site_name in report.issued:
        click.echo(f"✓ {site_name}")
    for site_name, error in report.failed.items():
        click.echo(f"✗ {site_name}: {error}", err=True)

    if not report.success:
        raise click.ClickException(f"{len(report.failed)} site(s) failed")


@cli.command()
@click.argument('name')
@click.option('--directory', default='.', help='Directory holding certificate files')
def show(name, directory):
    """Display certificate information."""
    crt_path, _ = material_paths(Path(directory) / name)
    try:
        certificate = load_certificate_file(crt_path)
    except CertgenError as e:
        raise click.ClickException(str(e))

    details = describe_certificate(certificate)
    click.echo(f"=== Certificate {name} ===\n")
    click.echo(f"Subject:       {details['subject']}")
    click.echo(f"Issuer:        {details['issuer']}")
    click.echo(f"Serial:        {details['serial_number']}")
    click.echo(f"Valid From:    {details['not_valid_before']}")
    click.echo(f"Valid To:      {details['not_valid_after']}")
    click.echo(f"CA:            {'yes' if details['is_ca'] else 'no'}")
    click.echo(f"Self-signed:   {'yes' if details['self_signed'] else 'no'}")
    click.echo(f"\nSubject Alternative Names ({len(details['subject_alt_names'])}):")
    for alt_name in details['subject_alt_names']:
        click.echo(f"  - {alt_name}")


@cli.command()
@click.argument('name')
@click.option('--ca', 'ca_name', default='root_ca', show_default=True, help='Logical name of the CA')
@click.option('--directory', default='.', help='Directory holding certificate files')
def verify(name, ca_name, directory):
    """Verify a certificate was issued by the CA."""
    ca_path, _ = material_paths(Path(directory) / ca_name)
    crt_path, _ = material_paths(Path(directory) / name)
    try:
        ca_cert = load_certificate_file(ca_path)
        certificate = load_certificate_file(crt_path)
    except CertgenError as e:
        raise click.ClickException(str(e))

    if not is_issued_by(certificate, ca_cert):
        raise click.ClickException(f"{name} was not issued by {ca_name}")

    click.echo(f"✓ {name} was issued by {ca_name}")


def main():
    """Entry point for CLI."""
    cli()


if __name__ == '__main__':
    main()

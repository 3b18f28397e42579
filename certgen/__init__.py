"""Certgen - provision a private root CA and its site certificates."""

__version__ = "0.1.0"

"""Terraform-style provisioning for SignalFx text charts."""

__version__ = "0.1.0"

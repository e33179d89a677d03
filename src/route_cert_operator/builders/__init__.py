"""Builders for resources created by the operator."""

from .certificate import build_certificate, certificate_name, secret_name

__all__ = ["build_certificate", "certificate_name", "secret_name"]

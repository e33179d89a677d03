"""Route Certificate Operator: keeps OpenShift Routes and cert-manager Certificates in sync."""

__version__ = "0.1.0"

"""
cert_status — consolidated status reports for cert-manager Certificates.

Gathers a Certificate and its related objects (Secret, CertificateRequest,
Issuer/ClusterIssuer, Events) from the Kubernetes API, identifies the
CertificateRequest for the Certificate's current revision, and renders one
report. Failed lookups of related objects are reported, not fatal.
"""

__version__ = "0.1.0"

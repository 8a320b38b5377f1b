"""
Storage modules for PayTrust.

Includes:
- Certificate store for Wechat platform certificates, keyed by serial number
"""

from .cert_store import CertificateStore, merge_certificates

__all__ = [
    'CertificateStore',
    'merge_certificates',
]

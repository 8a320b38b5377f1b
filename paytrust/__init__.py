"""
PayTrust

The trust layer of a multi-provider payment-gateway client:
- Per-provider request signing (Alipay, Unipay, Wechat v3, legacy Wechat v2)
- Response and webhook signature verification
- AEAD_AES_256_GCM decryption of Wechat resources
- Reactive rotation of Wechat platform certificates
"""

from .config import InMemoryConfigStore, TrustSettings, load_config_store, load_settings
from .crypto.sign import Provider
from .engine import TrustEngine
from .rotation import CertificateRotator
from .storage import CertificateStore, merge_certificates
from .tenant import get_tenant

__version__ = "1.0.0"
__all__ = [
    "CertificateRotator",
    "CertificateStore",
    "InMemoryConfigStore",
    "Provider",
    "TrustEngine",
    "TrustSettings",
    "get_tenant",
    "load_config_store",
    "load_settings",
    "merge_certificates",
]

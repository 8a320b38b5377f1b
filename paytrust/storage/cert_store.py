"""
Platform Certificate Store

Keeps the serial -> PEM map for each tenant inside the host's config store
under ``<provider>.<tenant>.wechat_public_cert_path``. Reads always go back to
the config store so edits made by the host are picked up.
"""

import threading
from typing import Dict, Mapping, Optional

from paytrust.config import ConfigStore
from paytrust.tenant import WECHAT


CERTIFICATES_KEY = "wechat_public_cert_path"


def merge_certificates(existing: Mapping[str, str], fetched: Mapping[str, str]) -> Dict[str, str]:
    """
    Additive merge of two serial -> certificate maps.

    Serials only in ``existing`` are kept; fetched serials are added or
    replace the held entry for the same serial.
    """
    merged = dict(existing)
    merged.update(fetched)
    return merged


class CertificateStore:
    """
    Serial-indexed verification certificates per tenant.

    Writes are a read-merge-write guarded by a lock owned by this instance.
    Hosts sharing one config store between several ``CertificateStore``
    objects (or processes) must serialize writes themselves.
    """

    def __init__(self, config: ConfigStore, provider: str = WECHAT):
        self.config = config
        self.provider = provider
        self._lock = threading.Lock()

    def _key(self, tenant: str) -> str:
        return f"{self.provider}.{tenant}.{CERTIFICATES_KEY}"

    def all(self, tenant: str) -> Dict[str, str]:
        held = self.config.get(self._key(tenant))
        return dict(held) if isinstance(held, Mapping) else {}

    def get(self, tenant: str, serial: str) -> Optional[str]:
        """Return the certificate held for ``serial``, or ``None``."""
        return self.all(tenant).get(serial) or None

    def merge(self, tenant: str, fetched: Mapping[str, str]) -> Dict[str, str]:
        """Merge ``fetched`` into the tenant's map and write it back."""
        with self._lock:
            merged = merge_certificates(self.all(tenant), fetched)
            self.config.set(self._key(tenant), merged)
        return merged

"""
Wechat Platform Certificate Rotation

Wechat rotates the certificates it signs responses and webhooks with. When a
message names a serial we do not hold, the rotator asks the provider for its
current certificate set (through the host's request pipeline), decrypts each
certificate and merges them into the certificate store. Rotation only ever
happens in reaction to such a cache miss.
"""

import logging
import os
from typing import Any, Callable, Dict, Mapping, Optional
from pydantic import ValidationError

from paytrust.common.exceptions import INVALID_RESPONSE_SIGN, WECHAT_CONFIG_ERROR, InvalidConfigError, InvalidResponseError
from paytrust.common.protocol import CertificateListing
from paytrust.config import DEFAULT_CERTIFICATES_METHOD, ConfigStore
from paytrust.crypto.aead import decrypt_wechat_resource
from paytrust.crypto.keys import get_public_cert
from paytrust.storage.cert_store import CertificateStore
from paytrust.tenant import get_tenant, get_wechat_config

logger = logging.getLogger(__name__)

# (method, params) -> response body
CertificateFetcher = Callable[[str, Dict[str, Any]], Mapping[str, Any]]

STABLE = "stable"
REFRESHING = "refreshing"


class CertificateRotator:
    """Refreshes a tenant's platform certificates on demand."""

    def __init__(
        self,
        config: ConfigStore,
        fetcher: CertificateFetcher,
        certificates: Optional[CertificateStore] = None,
        method: str = DEFAULT_CERTIFICATES_METHOD,
    ):
        self.config = config
        self.fetcher = fetcher
        self.certificates = certificates or CertificateStore(config)
        self.method = method
        self.state = STABLE

    def fetch(self, params: Mapping[str, Any]) -> Dict[str, str]:
        """
        Call the listing method and decrypt every certificate it returns.

        Returns:
            Mapping of serial number to PEM text
        """
        response = self.fetcher(self.method, dict(params)) or {}
        try:
            listing = CertificateListing.model_validate({"data": response.get("data") or []})
        except ValidationError as e:
            raise InvalidResponseError(
                "Invalid Wechat Certificate Listing",
                INVALID_RESPONSE_SIGN,
                {"response": dict(response)},
            ) from e
        secret = get_wechat_config(self.config, params).get("mch_secret_key")

        certs = {}
        for item in listing.data:
            pem = decrypt_wechat_resource(item.encrypt_certificate, secret)['ciphertext']
            if not isinstance(pem, bytes):
                raise InvalidResponseError(
                    f"Certificate [{item.serial_no}] Did Not Decrypt To PEM",
                    INVALID_RESPONSE_SIGN,
                    {"serial_no": item.serial_no},
                )
            certs[item.serial_no] = pem.decode('utf-8')

        return certs

    def reload(self, params: Mapping[str, Any], serial: Optional[str] = None) -> str:
        """
        Fetch the current certificate set and merge it into the store.

        Args:
            params: Request parameters (selects the tenant)
            serial: Serial the caller needs

        Returns:
            PEM for ``serial``, or ``""`` when no serial was requested

        Raises:
            InvalidConfigError: If ``serial`` is not published by the provider
        """
        tenant = get_tenant(params)
        logger.info("Refreshing Wechat platform certificates for tenant '%s'", tenant)

        self.state = REFRESHING
        try:
            certs = self.fetch(params)
            self.certificates.merge(tenant, certs)
        finally:
            self.state = STABLE

        logger.info("Fetched %d Wechat platform certificate(s) for tenant '%s'", len(certs), tenant)

        if serial is not None and not certs.get(serial):
            raise InvalidConfigError(f"Get Wechat Public Cert Error -- [{serial}]", WECHAT_CONFIG_ERROR)

        return certs.get(serial, "") if serial is not None else ""

    def ensure_public_certs(self, params: Mapping[str, Any], path: Optional[str] = None) -> Dict[str, str]:
        """
        Refresh certificates and optionally export them.

        Args:
            params: Request parameters (selects the tenant)
            path: Directory to write ``<serial>.crt`` files into

        Returns:
            Every serial -> certificate entry now held for the tenant
        """
        self.reload(params)
        certs = self.certificates.all(get_tenant(params))

        if path:
            os.makedirs(path, exist_ok=True)
            for serial, cert in certs.items():
                material = get_public_cert(cert, WECHAT_CONFIG_ERROR)
                with open(os.path.join(path, f"{serial}.crt"), "wb") as f:
                    f.write(material if isinstance(material, bytes) else material.encode('utf-8'))
                logger.info("Wrote certificate %s to %s", serial, path)

        return certs

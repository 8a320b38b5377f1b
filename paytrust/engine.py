"""
Trust engine facade.

Wires one config store, one certificate store and (optionally) the host's
certificate fetcher into the per-provider signers. Every engine is built
with its collaborators explicitly; nothing is looked up globally.
"""

from typing import Any, Dict, Mapping, Optional, Union

from paytrust.common.exceptions import WECHAT_CONFIG_ERROR, InvalidConfigError
from paytrust.common.protocol import EncryptedResource, SignedMessage
from paytrust.config import ConfigStore, TrustSettings
from paytrust.crypto.aead import decrypt_wechat_resource
from paytrust.crypto.sign import Provider, Signer, get_signer
from paytrust.rotation import CertificateFetcher, CertificateRotator
from paytrust.storage.cert_store import CertificateStore
from paytrust.tenant import get_wechat_config


class TrustEngine:
    """Signs outbound payloads and verifies inbound ones for every provider."""

    def __init__(
        self,
        config: ConfigStore,
        fetcher: Optional[CertificateFetcher] = None,
        settings: Optional[TrustSettings] = None,
    ):
        self.config = config
        self.settings = settings or TrustSettings()
        self.certificates = CertificateStore(config)
        self.rotator = None
        if fetcher is not None:
            self.rotator = CertificateRotator(
                config,
                fetcher,
                certificates=self.certificates,
                method=self.settings.certificates_method,
            )
        self._signers: Dict[Provider, Signer] = {}

    def signer(self, provider: Union[Provider, str]) -> Signer:
        if provider in self._signers:
            return self._signers[provider]

        signer = get_signer(
            provider,
            self.config,
            rotator=self.rotator,
            settings=self.settings,
            certificates=self.certificates,
        )
        self._signers[signer.provider] = signer
        return signer

    def sign(self, provider: Union[Provider, str], params: Mapping[str, Any], contents) -> str:
        return self.signer(provider).sign(params, contents)

    def verify(
        self,
        provider: Union[Provider, str],
        params: Mapping[str, Any],
        contents,
        signature: str,
        serial: Optional[str] = None,
    ) -> None:
        self.signer(provider).verify(params, contents, signature, serial)

    def verify_wechat_message(self, message: Union[SignedMessage, Mapping[str, Any]], params: Mapping[str, Any]) -> None:
        if not isinstance(message, SignedMessage):
            message = SignedMessage.model_validate(dict(message))

        self.signer(Provider.WECHAT).verify_message(message, params)

    def decrypt_resource(self, resource: Union[EncryptedResource, Mapping[str, Any]], params: Mapping[str, Any]):
        """Plaintext of a Wechat encrypted resource: bytes for certificates, else a dict."""
        secret = get_wechat_config(self.config, params).get('mch_secret_key')
        return decrypt_wechat_resource(resource, secret)['ciphertext']

    def ensure_public_certs(self, params: Mapping[str, Any], path: Optional[str] = None) -> Dict[str, str]:
        """
        Refresh the tenant's Wechat platform certificates.

        Raises:
            InvalidConfigError: If the engine was built without a fetcher
        """
        if self.rotator is None:
            raise InvalidConfigError("No certificate fetcher configured", WECHAT_CONFIG_ERROR)

        return self.rotator.ensure_public_certs(params, path)
